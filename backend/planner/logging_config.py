import logging
import os
from logging.config import dictConfig

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Configure process logging from the PLANNER_LOG_LEVEL flag."""
    level = os.getenv("PLANNER_LOG_LEVEL", "INFO").upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": DEFAULT_LOG_FORMAT,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
            "loggers": {
                "planner.normalizer": {"level": os.getenv("PLANNER_NORMALIZER_LOG_LEVEL", level).upper()},
            },
        }
    )

    if os.getenv("PLANNER_DEBUG_AGENT", "0") == "1":
        logging.getLogger("openai.agents").setLevel(logging.DEBUG)
        logging.getLogger("httpx").setLevel(logging.DEBUG)
