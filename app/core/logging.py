# File: app/core/logging.py
import logging.config
import os

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging():
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    }
    audit_handlers = []
    if settings.audit_log_file:
        folder = os.path.dirname(settings.audit_log_file)
        if folder:
            os.makedirs(folder, exist_ok=True)
        handlers["audit_file"] = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": settings.audit_log_file,
            "encoding": "utf-8",
        }
        audit_handlers.append("audit_file")

    logging.config.dictConfig({
        "version": 1,
        # module loggers are created at import time, before this runs
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": handlers,
        "root": {"level": settings.log_level.upper(), "handlers": ["console"]},
        "loggers": {
            "app.audit": {"level": "INFO", "handlers": audit_handlers, "propagate": True},
        },
    })
