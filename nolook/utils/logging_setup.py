"""Logging configuration for the service and uvicorn."""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def _build_stream_handler(level: int) -> logging.StreamHandler:
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT, "%H:%M:%S"))
    stream_handler.setLevel(level)
    stream_handler.name = "nolook_stream"
    return stream_handler


def _replace_handlers(logger: logging.Logger, handlers: list[logging.Handler]) -> None:
    logger.handlers = []
    for handler in handlers:
        logger.addHandler(handler)
    logger.propagate = False


def configure_logging(level: str = "INFO") -> None:
    """Route application and uvicorn logs through a single stream handler."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    stream_handler = _build_stream_handler(numeric_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    _replace_handlers(root_logger, [stream_handler])

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.setLevel(numeric_level)
        _replace_handlers(uv_logger, [stream_handler])

    # httpx logs every request at INFO, including the service URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)

    root_logger.info(f"Logging initialized at level {logging.getLevelName(numeric_level)}")
