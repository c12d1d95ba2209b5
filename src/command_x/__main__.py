"""Entry point for running the application with uvicorn."""

import uvicorn

from command_x.config import settings
from command_x.logging_config import configure_logging


def main() -> None:
    """Run the application."""
    configure_logging()
    uvicorn.run(
        "command_x.api.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
