"""
Serve the todo procedures with uvicorn.

Usage:
    python -m dashlist
"""
import uvicorn

from .logging_utils import configure_logging
from .settings import get_settings


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run("dashlist.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
