from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - DATABASE_URL: connection string for the relational backend, e.g. 'sqlite:///./data/planner.db'
      (required when PERSISTENCE_BACKEND=sqlite)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level (default: INFO)
    - LOG_FORMAT: 'text' (default) or 'json'
    - ASSISTANT_INTERVAL_SECONDS: how often clients consider rotating the assistant message (default: 300)
    - HOST / PORT: bind address for `python -m planner` (default: 127.0.0.1:8000)
    """

    persistence_backend: str
    database_url: Optional[str]
    cors_allow_origins: List[str]
    log_level: str
    log_format: str
    assistant_interval_seconds: float
    host: str = "127.0.0.1"
    port: int = 8000


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_port(value: str, default: int) -> int:
    try:
        port = int(value)
    except ValueError:
        return default
    return port if 0 < port < 65536 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def sqlite_path_from_url(url: str) -> str:
    """
    Resolve a filesystem path from a DATABASE_URL.

    Accepts 'sqlite:///relative/or/abs.db' or 'sqlite:////abs.db'
    URLs, or a bare filesystem path.
    """
    s = url.strip()
    for prefix in ("sqlite:///", "sqlite://"):
        if s.startswith(prefix):
            s = s[len(prefix):]
            break
    else:
        if "://" in s:
            raise ValueError(f"Unsupported DATABASE_URL scheme: {url!r} (expected sqlite:///path)")
    if not s:
        raise ValueError("DATABASE_URL does not contain a database path")
    return s


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    database_url = os.getenv("DATABASE_URL") or None
    fmt = _get_env("LOG_FORMAT", "text").strip().lower()

    return Settings(
        persistence_backend=backend,
        database_url=database_url.strip() if database_url else None,
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_format=fmt if fmt in {"json", "text"} else "text",
        assistant_interval_seconds=_parse_float(_get_env("ASSISTANT_INTERVAL_SECONDS", "300"), 300.0),
        host=_get_env("HOST", "127.0.0.1").strip(),
        port=_parse_port(_get_env("PORT", "8000"), 8000),
    )
