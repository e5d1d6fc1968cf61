"""Logging configuration for the fleet tracker entry points."""

import logging
import logging.config
import os
from typing import Optional

from pythonjsonlogger.json import JsonFormatter


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure root logging to stderr.

    Level and format default to FLEET_LOG_LEVEL (WARNING) and
    FLEET_LOG_FORMAT ("text" or "json").
    """
    log_level = (log_level or os.environ.get("FLEET_LOG_LEVEL") or "WARNING").upper()
    log_format = (log_format or os.environ.get("FLEET_LOG_FORMAT") or "text").lower()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "text": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
                "json": {
                    "()": JsonFormatter,
                    "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                },
            },
            "handlers": {
                "default": {
                    "level": log_level,
                    "formatter": "json" if log_format == "json" else "text",
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {
                "": {"handlers": ["default"], "level": log_level},
            },
        }
    )
    logging.getLogger(__name__).debug("Logging configured at %s (%s)", log_level, log_format)
