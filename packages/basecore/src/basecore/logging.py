"""
Logging setup.

Everything logs through the standard library. Modules pass structured
fields with ``extra={...}``; the console formatter appends them to the
line as ``key=value`` pairs so they survive plain-text log shipping.
"""

import logging
from datetime import datetime, timezone
from typing import Any

# LogRecord attributes that are never rendered as extra fields
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

_CONFIGURED_FLAG = "_basecore_configured"


def _render_value(value: Any) -> str:
    text = str(value)
    if not text or any(ch.isspace() for ch in text):
        return repr(text)
    return text


class KeyValueFormatter(logging.Formatter):
    """
    One line per record:

        2025-01-01T12:00:00.123Z INFO  eventactions.service.dispatcher event published action=hook
    """

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s %(levelname)-5s %(name)s %(message)s")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = [
            f"{key}={_render_value(value)}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        ]
        if extras:
            line = f"{line} {' '.join(extras)}"
        return line


def setup_logging(level: str | None = None) -> None:
    """
    Configure root logging for the process.

    Installs a single console handler. Calling it again only adjusts the level.
    """
    if level is None:
        from basecore.settings import get_settings

        level = get_settings().LOG_LEVEL

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if getattr(root, _CONFIGURED_FLAG, False):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(KeyValueFormatter())
    root.handlers = [handler]

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    setattr(root, _CONFIGURED_FLAG, True)
