"""
Logging configuration.

Console logging for the API process, configured once by the application
factory. Modules log through ``logging.getLogger(__name__)``.
"""

import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Install a single console handler on the root logger."""
    level = level.upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%dT%H:%M:%S"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            # SQL echo is controlled by Settings.DEBUG on the engine
            "sqlalchemy.engine": {"level": "WARNING", "propagate": True},
            "uvicorn.access": {"level": "WARNING", "propagate": True},
        },
    })
    logging.getLogger(__name__).debug("Logging configured at %s", level)
