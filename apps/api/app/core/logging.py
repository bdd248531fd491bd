"""Application logging setup.

Configures the standard library root logger once at startup so application
and uvicorn records share one format:

    time | level | logger | message
"""

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.core.config import Settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def setup_logging(settings: "Settings") -> None:
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Keep stream handlers uvicorn may have installed; avoid duplicate output.
    for existing in root_logger.handlers[:]:
        if not isinstance(existing, logging.StreamHandler):
            root_logger.removeHandler(existing)
    if not root_logger.handlers:
        root_logger.addHandler(handler)

    for name in _UVICORN_LOGGERS:
        logging.getLogger(name).setLevel(log_level)

    app_logger = logging.getLogger("app")
    app_logger.setLevel(log_level)
    app_logger.info(
        "Logging configured: level=%s, app=%s, env=%s",
        settings.log_level,
        settings.app_name,
        settings.env,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
