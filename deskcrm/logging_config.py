# deskcrm/logging_config.py
import logging
import logging.config
from pathlib import Path

from deskcrm.config import settings

LOG_FILE_NAME = "deskcrm.log"


def build_logging_config(log_dir: Path | None = None, to_file: bool | None = None) -> dict:
    log_dir = Path(log_dir or settings.LOG_DIR)
    to_file = settings.LOG_TO_FILE if to_file is None else to_file
    level = settings.LOG_LEVEL

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": level,
        },
    }
    if to_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "filename": str(log_dir / LOG_FILE_NAME),
            "maxBytes": 5 * 1024 * 1024,  # 5 MB
            "backupCount": 5,
            "encoding": "utf-8",
            "level": level,
        }
        handlers["access_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "access",
            "filename": str(log_dir / LOG_FILE_NAME),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
            "level": level,
        }

    app_handlers = ["console", "file"] if to_file else ["console"]
    access_handlers = ["access_file"] if to_file else ["console"]

    return {
        "version": 1,
        "disable_existing_loggers": False,

        "formatters": {
            "standard": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            },
            "access": {
                "format": "%(asctime)s | %(levelname)s | uvicorn.access | %(message)s",
            },
        },

        "handlers": handlers,

        "loggers": {
            # Uvicorn core logs
            "uvicorn": {"handlers": app_handlers, "level": level, "propagate": False},
            "uvicorn.error": {"handlers": app_handlers, "level": level, "propagate": False},
            "uvicorn.access": {"handlers": access_handlers, "level": level, "propagate": False},
            # Host + client logs
            "deskcrm": {"handlers": app_handlers, "level": level, "propagate": False},
        },

        "root": {
            "handlers": app_handlers,
            "level": level,
        },
    }


def setup_logging(log_dir: Path | None = None, to_file: bool | None = None) -> None:
    logging.config.dictConfig(build_logging_config(log_dir, to_file))
    logging.getLogger("deskcrm").info("Logging initialized")
