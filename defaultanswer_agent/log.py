from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

ROOT_LOGGER = "defaultanswer_agent"


class ContextFormatter(logging.Formatter):
    """[ Tue Jan 06 05:32:41 AM UTC 2026 ] : INFO : fetcher : Message"""

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        timestamp = dt.strftime("%a %b %d %I:%M:%S %p UTC %Y")
        context = getattr(record, "context", None) or record.name.rsplit(".", 1)[-1]
        line = f"[ {timestamp} ] : {record.levelname} : {context} : {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logger(level: str | int = logging.INFO) -> logging.Logger:
    """Configure the package logger once; module loggers propagate to it."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # create_app() can run more than once per process (tests, reloads).
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger
