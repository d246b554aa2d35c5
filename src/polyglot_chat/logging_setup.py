"""Root logger setup for the relay process.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where those records go and how they look.  It is called once by the
CLI before the server starts, using the ``[logging]`` section of the config.
"""

from __future__ import annotations

import json
import logging
import sys

from polyglot_chat.config import LoggingSettings

_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def build_formatter(fmt: str) -> logging.Formatter:
    """Return the formatter for a ``logging.format`` setting value."""
    if fmt == "json":
        return JsonFormatter()
    return logging.Formatter(_FORMATS.get(fmt, _FORMATS["detailed"]))


def configure_logging(settings: LoggingSettings) -> None:
    """Install a single stderr handler on the root logger.

    Calling this again replaces the handler instead of stacking a second
    one, so tests and repeated CLI invocations stay quiet.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_polyglot_chat", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(build_formatter(settings.format))
    handler._polyglot_chat = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    level = logging.getLevelName(settings.level.upper())
    root.setLevel(level if isinstance(level, int) else logging.INFO)
