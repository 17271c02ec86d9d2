"""
Logging setup for the backoffice service.

Everything goes to one stdout handler. The ``backoffice`` namespace follows
``settings.log_level``. Third-party loggers that are noisy during bulk
imports are held at WARNING unless DEBUG is requested.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Dict, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

# Loggers that flood the console while a large spreadsheet is upserted
NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "multipart")

_configured_level: Optional[str] = None


def _third_party_levels(log_level: str) -> Dict[str, Dict[str, str]]:
    quiet = log_level if log_level == "DEBUG" else "WARNING"
    return {name: {"level": quiet} for name in NOISY_LOGGERS}


def configure_logging(level: Optional[str] = None) -> None:
    """Install the console handler and set the application log level once per process."""
    global _configured_level

    log_level = (level or "INFO").upper()
    if _configured_level is not None:
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "console",
                },
            },
            "root": {"handlers": ["stdout"], "level": "WARNING"},
            "loggers": {
                "backoffice": {"level": log_level},
                "uvicorn": {"level": log_level},
                **_third_party_levels(log_level),
            },
        }
    )

    _configured_level = log_level
    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
