"""Stdout logging configuration aware of structured errors.

Records carrying a ``StructuredError`` or ``ValidationError`` (through
``exc_info`` or ``extra={"error": err}``) are rendered with their id, resolved
category and captured stacks instead of a bare Python traceback.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from ..chain import category_of, full_stack_trace
from ..error import StructuredError
from ..serialization import to_dict
from ..validation import ValidationError
from . import fields
from .context import bind_context, get_context


def record_error(record: logging.LogRecord) -> StructuredError | ValidationError | None:
    """Return the structured error attached to ``record``, if any."""
    candidate = getattr(record, fields.ERROR, None)
    if isinstance(candidate, (StructuredError, ValidationError)):
        return candidate
    if record.exc_info and record.exc_info[1] is not None:
        exc = record.exc_info[1]
        if isinstance(exc, (StructuredError, ValidationError)):
            return exc
    return None


_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message"}


class ContextFilter(logging.Filter):
    """Attach bound context fields to each record.

    Fields named like built-in record attributes stay in ``record.context``
    only, so a bound ``name`` or ``msg`` cannot corrupt formatting.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_context()
        record.context = context
        record.__dict__.update(
            (key, value) for key, value in context.items() if key not in _RECORD_ATTRS
        )
        return True


class JsonFormatter(logging.Formatter):
    """Emit newline-delimited JSON with stable core fields."""

    def __init__(self, *, include_stacks: bool = True) -> None:
        super().__init__()
        self.include_stacks = include_stacks

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.now(UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
        }

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            for key, value in context.items():
                payload.setdefault(key, value)

        error = record_error(record)
        if error is not None:
            payload[fields.ERROR] = to_dict(error, include_stacks=self.include_stacks)
        elif record.exc_info:
            payload[fields.EXCEPTION] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Human-readable formatter appending context and error provenance."""

    def __init__(self, *, include_stacks: bool = True) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        self.include_stacks = include_stacks

    def format(self, record: logging.LogRecord) -> str:
        error = record_error(record)
        if error is None:
            message = super().format(record)
        else:
            # Structured errors bring their own provenance; skip the traceback.
            saved = record.exc_info, record.exc_text
            record.exc_info, record.exc_text = None, None
            try:
                message = super().format(record)
            finally:
                record.exc_info, record.exc_text = saved
            message = f"{message} [{error.id} {_category(error)}] {error}"
            if self.include_stacks:
                trace = full_stack_trace(error)
                if trace:
                    message = f"{message}\n{trace}"

        context = getattr(record, "context", None)
        if not isinstance(context, dict) or not context:
            return message
        suffix = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{message} {suffix}"


def _category(error: StructuredError | ValidationError) -> str:
    if isinstance(error, ValidationError):
        return error.category
    return category_of(error)


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    include_stacks: bool = True,
    service: str | None = None,
    environment: str | None = None,
) -> None:
    """Configure root logging with a single stdout handler.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level.upper())
    handler.addFilter(ContextFilter())
    if json_output:
        handler.setFormatter(JsonFormatter(include_stacks=include_stacks))
    else:
        handler.setFormatter(PlainFormatter(include_stacks=include_stacks))

    root.addHandler(handler)

    seed_context: dict[str, str] = {}
    if service:
        seed_context[fields.SERVICE] = service
    if environment:
        seed_context[fields.ENVIRONMENT] = environment
    if seed_context:
        bind_context(**seed_context)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger from Python's standard logging hierarchy."""
    return logging.getLogger(name)
