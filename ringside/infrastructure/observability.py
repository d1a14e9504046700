"""Structured Logging - roster-aware JSON formatter and handler setup.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Roster context (entity_id, entity_kind, period_type, status, action,
      error_code) surfaced when present; enum members render as their value
    - At most one engine handler sits on the root logger; setup_logging
      replaces the previous one instead of stacking another

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - Text format appends the same roster context as key=value pairs so
      development logs carry what production JSON carries
"""

import json
import logging
from datetime import datetime, timezone
from enum import Enum

HANDLER_NAME = "ringside"
ROSTER_KEYS = ("entity_id", "entity_kind", "period_type", "status", "action", "error_code")


def _render(value) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def roster_context(record: logging.LogRecord) -> dict[str, str]:
    """Roster fields attached to a record through ``extra=``."""
    context = {}
    for key in ROSTER_KEYS:
        val = record.__dict__.get(key)
        if val is not None:
            context[key] = _render(val)
    return context


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update(roster_context(record))
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable lines with roster context appended."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = roster_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={val}" for key, val in context.items())
        head, sep, tail = line.partition("\n")
        return f"{head} [{pairs}]{sep}{tail}"


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the engine handler on the root logger and return it.

    A handler left by an earlier call is removed first, so bootstrapping
    twice in one process does not duplicate every line.
    """
    for existing in list(logging.root.handlers):
        if existing.get_name() == HANDLER_NAME:
            logging.root.removeHandler(existing)
            existing.close()
    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
