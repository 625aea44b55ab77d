import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .observability import setup_logging
from .repositories import Storage, get_storage
from .routers import diary as diary_router
from .routers import expenses as expenses_router
from .routers import tasks as tasks_router
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "diary", "description": "Diary entries, one per calendar day by convention."},
    {"name": "expenses", "description": "Expense tracking by day and category."},
    {"name": "tasks", "description": "To-do tasks with due dates and completion toggling."},
]

_settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and open the configured storage before serving."""
    setup_logging(_settings.log_level, _settings.log_format)
    storage = get_storage()
    logger.info("Planner API started", extra={"resource": storage.backend})
    yield
    logger.info("Planner API shutting down")


app = FastAPI(
    title="Retro Planner",
    description="Diary, budget, calendar and to-do backend with pluggable storage backends.",
    version="0.1.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=not allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _format_location(loc: List[Any]) -> str:
    # drop the 'body'/'path'/'query' prefix FastAPI adds
    parts = [str(p) for p in loc[1:]] if loc and loc[0] in {"body", "path", "query"} else [str(p) for p in loc]
    return ".".join(parts)


# PUBLIC_INTERFACE
def validation_message(errors: List[Dict[str, Any]]) -> str:
    """
    Build a single human-readable message from pydantic error details, e.g.
    'Validation error: Field required at "title"; Input should be ... at "mood"'.
    """
    parts = []
    for err in errors:
        where = _format_location(list(err.get("loc", ())))
        msg = err.get("msg", "Invalid value")
        parts.append(f'{msg} at "{where}"' if where else msg)
    return "Validation error: " + "; ".join(parts) if parts else "Validation error"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return 400 with a readable message for body, path and query validation errors.

    Response format:
        {"message": "Validation error: ..."}
    """
    message = validation_message(list(exc.errors()))
    logger.warning(message, extra={"path": request.url.path, "method": request.method})
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as {"message": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback, never leak internal details."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(storage: Storage = Depends(get_storage)):
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the active storage backend.
    """
    return {"message": "Healthy", "backend": storage.backend}


# Include routers
app.include_router(diary_router.router)
app.include_router(expenses_router.router)
app.include_router(tasks_router.router)
