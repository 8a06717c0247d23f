"""Logging integration for faultline errors.

Wraps Python's ``logging`` module with stdout defaults, context propagation
and formatters that render structured errors with their provenance.
"""

from .config import (
    ContextFilter,
    JsonFormatter,
    PlainFormatter,
    configure_logging,
    get_logger,
    record_error,
)
from .context import bind_context, bind_error, clear_context, get_context, log_context

__all__ = [
    "bind_context",
    "bind_error",
    "clear_context",
    "configure_logging",
    "ContextFilter",
    "get_context",
    "get_logger",
    "JsonFormatter",
    "log_context",
    "PlainFormatter",
    "record_error",
]
