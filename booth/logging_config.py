import logging
import logging.config
import sys

from booth.config import get_settings


def setup_logging():
    settings = get_settings()
    level_name = (settings.log_level or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
                }
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": sys.stdout,
                }
            },
            "root": {"level": level, "handlers": ["stdout"]},
            "loggers": {
                # preview polling is chatty
                "uvicorn.access": {"level": "WARNING"},
            },
        }
    )
