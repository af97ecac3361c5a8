import logging
import os
from datetime import UTC, datetime

import pytz

# Per-module logger factory. Console output only; Cloud Functions ships
# stdout/stderr to Cloud Logging.

TIMEZONE = pytz.timezone(os.getenv("LOG_TIMEZONE", "America/New_York"))

Logger_Cache: dict[str, logging.Logger] = {}
Default_Level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
if not isinstance(Default_Level, int):
    Default_Level = logging.INFO


def set_level(level):
    global Default_Level
    Default_Level = level
    for logger in Logger_Cache.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


class LocalTimeFormatter(logging.Formatter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.local_tz = TIMEZONE

    def format(self, record):
        utc_dt = datetime.fromtimestamp(record.created, UTC).replace(tzinfo=pytz.utc)
        local_time = utc_dt.astimezone(self.local_tz)

        record.local_time = local_time.strftime("%I:%M:%S %p")
        record.short_name = record.name[0:24]
        if record.levelno == logging.WARNING:
            self._style._fmt = (
                "%(local_time)-10s %(short_name)-24s:%(levelname)-8s =====> %(message)s"
            )
        elif record.levelno >= logging.ERROR:
            self._style._fmt = (
                "%(local_time)-10s %(short_name)-24s =====> ERROR\n%(message)s\n---END ERROR ---"
            )
        else:
            self._style._fmt = "%(local_time)-10s %(short_name)-24s:%(levelname)-8s %(message)s"

        return super().format(record)


def get_logger(name: str, level=None) -> logging.Logger:
    """Return a logger with the specified name."""
    if name in Logger_Cache:
        return Logger_Cache[name]

    if level is None:
        level = Default_Level
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler):
            logger.removeHandler(handler)

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(LocalTimeFormatter())
    logger.addHandler(ch)

    logger.propagate = False

    Logger_Cache[name] = logger

    return logger
