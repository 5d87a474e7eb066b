import sys
from logging.config import dictConfig
from app.core.config import APP_ENV, LOG_LEVEL as CONFIGURED_LOG_LEVEL

LOG_LEVEL = CONFIGURED_LOG_LEVEL or ("DEBUG" if APP_ENV == "development" else "INFO")


def setup_logging():
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,

            # -----------------
            # FORMATTERS
            # -----------------
            "formatters": {
                "default": {
                    "format": (
                        "%(asctime)s | %(levelname)s | "
                        "%(name)s | %(message)s"
                    ),
                },
                "access": {
                    "format": (
                        "%(asctime)s | ACCESS | %(request_id)s | "
                        "%(client_addr)s | %(user_email)s | %(method)s | "
                        "%(path)s | %(status_code)s | "
                        "%(process_time_ms)sms"
                    ),
                },
            },

            # -----------------
            # HANDLERS
            # -----------------
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "default",
                },
                "access_console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "access",
                },
            },

            # -----------------
            # LOGGERS
            # -----------------
            "loggers": {
                # Used by request_logging_middleware
                "access": {
                    "handlers": ["access_console"],
                    "level": "INFO",
                    "propagate": False,
                },
                # Scheduler heartbeat is noisy at DEBUG
                "apscheduler": {
                    "level": "WARNING",
                },
                # replaced by the access logger above
                "uvicorn.access": {
                    "handlers": [],
                    "propagate": False,
                },
                "sqlalchemy.engine": {
                    "level": "WARNING",
                },
                # bcrypt 4 trips a harmless version check inside passlib
                "passlib": {
                    "level": "ERROR",
                },
            },

            # -----------------
            # ROOT LOGGER
            # -----------------
            "root": {
                "level": LOG_LEVEL,
                "handlers": ["console"],
            },
        }
    )
