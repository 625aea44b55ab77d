import json
import logging

import pytest
import uvicorn
from fastapi.testclient import TestClient

import planner.__main__ as planner_main
from planner.main import app, validation_message
from planner.observability import JSONFormatter, setup_logging
from planner.repositories import InMemoryTaskRepository, Storage, get_storage, memory_storage
from planner.settings import get_settings, sqlite_path_from_url


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PERSISTENCE_BACKEND", "DATABASE_URL", "CORS_ALLOW_ORIGINS", "LOG_LEVEL", "LOG_FORMAT"):
            monkeypatch.delenv(name, raising=False)
        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.database_url is None
        assert s.cors_allow_origins == ["*"]
        assert s.log_level == "INFO"
        assert s.log_format == "text"
        assert s.assistant_interval_seconds == 300.0

    def test_unknown_backend_falls_back_to_memory(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "postgres")
        assert get_settings().persistence_backend == "memory"

    def test_origins_list(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
        assert get_settings().cors_allow_origins == ["http://a.test", "http://b.test"]

    def test_bad_interval_uses_default(self, monkeypatch):
        monkeypatch.setenv("ASSISTANT_INTERVAL_SECONDS", "soon")
        assert get_settings().assistant_interval_seconds == 300.0

    def test_bind_address(self, monkeypatch):
        monkeypatch.setenv("HOST", "0.0.0.0")
        monkeypatch.setenv("PORT", "9100")
        s = get_settings()
        assert (s.host, s.port) == ("0.0.0.0", 9100)

    @pytest.mark.parametrize("port", ["http", "0", "70000"])
    def test_bad_port_uses_default(self, monkeypatch, port):
        monkeypatch.setenv("PORT", port)
        assert get_settings().port == 8000

    def test_sqlite_path_from_url(self):
        assert sqlite_path_from_url("sqlite:///./data/planner.db") == "./data/planner.db"
        assert sqlite_path_from_url("sqlite:////var/lib/planner.db") == "/var/lib/planner.db"
        assert sqlite_path_from_url("planner.db") == "planner.db"
        with pytest.raises(ValueError):
            sqlite_path_from_url("postgresql://user@host/db")


def test_runner_serves_the_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.setenv("PORT", "9100")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    planner_main.main()
    assert calls == [("planner.main:app", {"host": "127.0.0.1", "port": 9100, "log_level": "debug"})]


class _BrokenTasks(InMemoryTaskRepository):
    def list_all(self):
        raise RuntimeError("disk on fire")


class TestErrorHandling:
    def test_storage_failure_is_a_generic_500(self, caplog):
        base = memory_storage()
        broken = Storage(backend="memory", diary=base.diary, expenses=base.expenses, tasks=_BrokenTasks())
        app.dependency_overrides[get_storage] = lambda: broken
        try:
            with caplog.at_level(logging.ERROR):
                res = TestClient(app).get("/api/tasks")
        finally:
            app.dependency_overrides.clear()
        assert res.status_code == 500
        assert res.json() == {"message": "Failed to fetch tasks"}
        assert "disk on fire" not in res.text
        assert any("Failed to fetch tasks" in r.getMessage() for r in caplog.records)

    def test_validation_message(self):
        message = validation_message(
            [
                {"loc": ("body", "title"), "msg": "Field required"},
                {"loc": ("body", "tags", 0), "msg": "Input should be a valid string"},
            ]
        )
        assert message == 'Validation error: Field required at "title"; Input should be a valid string at "tags.0"'


class TestLogging:
    def test_json_formatter_includes_extras(self):
        record = logging.LogRecord("planner.test", logging.INFO, __file__, 1, "Created task", None, None)
        record.resource = "tasks"
        record.entity_id = 7
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "Created task"
        assert payload["level"] == "INFO"
        assert payload["resource"] == "tasks"
        assert payload["entity_id"] == 7

    def test_json_timestamp_is_when_the_record_was_made(self):
        record = logging.LogRecord("planner.test", logging.INFO, __file__, 1, "Toggled task", None, None)
        record.created = 1714521600.0
        payload = json.loads(JSONFormatter().format(record))
        assert payload["timestamp"] == "2024-05-01T00:00:00+00:00"

    def test_setup_logging_does_not_stack_handlers(self):
        root = logging.getLogger()
        previous_level = root.level
        setup_logging("DEBUG", "json")
        handler = setup_logging("WARNING", "text")
        try:
            assert [h for h in root.handlers if h.get_name() == "planner"] == [handler]
            assert root.level == logging.WARNING
        finally:
            root.removeHandler(handler)
            root.setLevel(previous_level)
