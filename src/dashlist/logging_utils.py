import logging
from typing import Union

LOG_FORMAT = "%(asctime)s - %(filename)s - %(lineno)d - %(levelname)s - %(message)s"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


# PUBLIC_INTERFACE
def configure_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Configure root logging and align the server/HTTP library loggers to the same level."""
    log_level = _resolve_level(level)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    logger = logging.getLogger("dashlist")
    logger.setLevel(log_level)

    # uvicorn serves the app, httpx carries the client's procedure calls
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(log_level)

    return logger
