# roombot/utils/logging.py
"""Process-wide log setup for the bot.

Log lines are JSON objects by default (``BOT_LOG_JSON=false`` switches to
plain text). While a command is dispatched, its Matrix event ID is kept
in a ContextVar and added to every line as ``request_id``.
"""

import json
import logging
from contextvars import ContextVar
from typing import Any

# Event ID of the message being dispatched; empty outside a dispatch
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# matrix-nio and its HTTP stack log every sync at INFO
NOISY_LOGGERS = ("nio", "aiohttp", "peewee")


def set_request_id(request_id: str) -> None:
    """Tag subsequent log lines in this context with ``request_id``."""
    request_id_var.set(request_id)


def get_request_id() -> str:
    """Return the current event ID, or ``""`` outside a dispatch."""
    return request_id_var.get()


class StructuredFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line.

    Keys: ``timestamp``, ``level``, ``logger``, ``message``, plus
    ``request_id`` during a dispatch and ``exception`` when a traceback
    is attached.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        event_id = get_request_id()
        if event_id:
            entry["request_id"] = event_id

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry)


def configure_structured_logging(
    level: int = logging.INFO, json_output: bool = True
) -> None:
    """Install one stderr handler on the root logger.

    Handlers from an earlier call are removed first, so calling this
    twice does not duplicate output. matrix-nio and aiohttp are held at
    WARNING or above.

    Args:
        level: Root log level.
        json_output: Use StructuredFormatter when True, PLAIN_FORMAT otherwise.
    """
    formatter: logging.Formatter = (
        StructuredFormatter() if json_output else logging.Formatter(PLAIN_FORMAT)
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
