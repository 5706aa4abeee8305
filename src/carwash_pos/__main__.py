"""Run the API server: ``python -m carwash_pos``."""

import uvicorn

from carwash_pos.config import configure_logging, get_settings


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "carwash_pos.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
