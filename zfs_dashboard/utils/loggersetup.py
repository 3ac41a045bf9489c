import logging
import logging.config
from pathlib import Path
from typing import Any

from zfs_dashboard.app.core.settings import settings

LOGGING: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "dev": {
            "format": "%(asctime)s | %(levelname)-7s | %(fetch_id)s | %(class_method)s - %(message)s",
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(class_method)s %(fetch_id)s %(message)s",
        },
    },
    "filters": {
        "class_method": {"()": "zfs_dashboard.utils.logging_filters.ClassMethodFilter"},
        "fetch_id": {"()": "zfs_dashboard.utils.logging_filters.FetchIdFilter"},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "dev",
            "filters": ["class_method", "fetch_id"],
        },
    },
    "loggers": {
        # Per-module control Example
        # "zfs_dashboard.logs": {
        #     "level": "DEBUG",
        #     "handlers": ["console"],
        #     "propagate": False,
        # },
        # Default
        "": {"level": "INFO", "handlers": ["console"]},
    },
}


def build_logging_config() -> dict[str, Any]:
    """Return the dictConfig mapping for the current runtime settings."""
    config = {
        **LOGGING,
        "handlers": dict(LOGGING["handlers"]),
        "loggers": {name: dict(cfg) for name, cfg in LOGGING["loggers"].items()},
    }
    console_format = "json" if settings.log_format == "json" else "dev"
    config["handlers"]["console"] = {
        **config["handlers"]["console"],
        "formatter": console_format,
    }

    root = config["loggers"][""]
    root["level"] = settings.log_level.upper()
    root["handlers"] = ["console"]

    if settings.enable_file_logging:
        Path(settings.log_file_path).parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file_app"] = {
            "class": "logging.FileHandler",
            "level": "INFO",
            "filename": settings.log_file_path,
            "formatter": "json",
            "filters": ["class_method", "fetch_id"],
        }
        root["handlers"] = ["console", "file_app"]

    return config


def configure_logging():
    logging.config.dictConfig(build_logging_config())
