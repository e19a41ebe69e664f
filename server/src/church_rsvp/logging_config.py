"""Logging setup for the Church RSVP server.

Routine records (sign-ups, dispositions, sent emails) go to stdout; warnings
such as partial successes and store failures go to stderr.
"""

import logging
import logging.config
from typing import Optional

from church_rsvp.config import config

# Libraries whose INFO output drowns out workflow records
QUIET_LOGGERS = ("sqlalchemy.engine", "urllib3", "httpx")

FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class BelowWarning(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.WARNING


def resolve_level(level_name: Optional[str]) -> str:
    """Normalize a level name, falling back to INFO for unknown names"""
    name = (level_name or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(name), int):
        return "INFO"
    return name


def build_logging_config(level_name: Optional[str] = None) -> dict:
    level = resolve_level(level_name or config["log_level"])
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"below_warning": {"()": BelowWarning}},
        "formatters": {"plain": {"format": FORMAT}},
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "level": "DEBUG",
                "filters": ["below_warning"],
                "formatter": "plain",
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "level": "WARNING",
                "formatter": "plain",
            },
        },
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        "root": {"level": level, "handlers": ["stdout", "stderr"]},
    }


def setup_logging(level_name: Optional[str] = None):
    """Install the stdout/stderr handlers; safe to call more than once"""
    logging.config.dictConfig(build_logging_config(level_name))
