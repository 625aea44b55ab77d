"""Run the planner API with uvicorn: ``python -m planner`` or ``retro-planner``."""
import uvicorn

from .settings import get_settings


# PUBLIC_INTERFACE
def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "planner.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
