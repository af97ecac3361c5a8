"""
Logging setup for the Firebase Cloud Function.

Deployed functions have stdout captured by Cloud Logging, so the root logger
prints through CloudLoggingHandler. The emulator and local runs get a plain
stream handler instead.

Call setup_cloud_logging() once from main.py before other imports log anything.
"""

import logging
import os
import sys


class CloudLoggingHandler(logging.Handler):
    """Outputs every record to stdout via print()."""

    def emit(self, record):
        try:
            msg = self.format(record)
            print(msg, file=sys.stdout)
        except Exception:
            self.handleError(record)


class CloudLoggingFormatter(logging.Formatter):
    """Prefixes each message with its level name."""

    def format(self, record):
        message = super().format(record)
        return f"{record.levelname}: {message}"


def is_emulator() -> bool:
    return bool(
        os.getenv("FUNCTIONS_EMULATOR")
        or os.getenv("FIREBASE_AUTH_EMULATOR_HOST")
        or os.getenv("ENVIRONMENT") == "local"
    )


def setup_cloud_logging(level: int | None = None):
    """Configure the root logger for Cloud Functions or the local emulator."""
    if level is None:
        level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler: logging.Handler
    if is_emulator():
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(levelname)-8s %(name)s: %(message)s"))
    else:
        handler = CloudLoggingHandler()
        handler.setFormatter(CloudLoggingFormatter("%(name)s %(message)s"))

    handler.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    root_logger.debug(
        "Logging configured for emulator" if is_emulator() else "Logging configured for Cloud Functions"
    )
