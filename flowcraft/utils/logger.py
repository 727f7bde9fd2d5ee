# flowcraft/utils/logger.py

import logging
import sys

# Third-party loggers that are chatty at INFO (one line per HTTP request).
_NOISY = ("httpx", "httpcore", "openai")


def init_logger(level: str = "INFO") -> None:
    """
    Send root, Uvicorn and FlowCraft logs to stdout with one timestamped
    format. SDK transport loggers stay at WARNING unless we run at DEBUG.
    """
    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    # Replace any existing handlers
    root.handlers = [handler]

    for uv_logger in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(uv_logger)
        logger.handlers = [handler]
        logger.propagate = False
        logger.setLevel(log_level)

    for name in _NOISY:
        logging.getLogger(name).setLevel(log_level if log_level <= logging.DEBUG else logging.WARNING)
