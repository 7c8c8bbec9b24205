"""Logging configuration shared by Django (``LOGGING``) and gunicorn (``logconfig_dict``).

Both processes log to stdout/stderr; probe requests are dropped from the
access logs of the dev server and of gunicorn alike.
"""

from __future__ import annotations

from typing import Any

_ERROR_FORMAT = "[{asctime}] {levelname} {name}: {message}"


def build_logging_config(app_level: str = "INFO") -> dict[str, Any]:
    access_logger = {
        "handlers": ["access"],
        "level": "INFO",
        "propagate": False,
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_endpoint": {"()": "config.logging_filters.HealthEndpointFilter"},
        },
        "formatters": {
            "access": {"format": "%(message)s"},
            "error": {"format": _ERROR_FORMAT, "style": "{"},
        },
        "handlers": {
            "access": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "access",
                "filters": ["health_endpoint"],
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "error",
            },
        },
        "loggers": {
            "gunicorn.access": access_logger,
            "django.server": dict(access_logger),
            "gunicorn.error": {"handlers": ["stderr"], "level": "INFO", "propagate": False},
            "avatars": {"handlers": ["stderr"], "level": app_level.upper(), "propagate": False},
        },
        "root": {"handlers": ["stderr"], "level": "INFO"},
    }
