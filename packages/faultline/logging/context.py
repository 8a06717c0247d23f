"""Per-context logging fields.

Fields bound here are attached to every record by ``ContextFilter``. Storage
is a ``ContextVar`` so threads and asyncio tasks each see their own fields.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Iterator, Mapping

from ..chain import category_of
from ..error import StructuredError
from . import fields

_EMPTY: Mapping[str, str] = MappingProxyType({})
_FIELDS: ContextVar[Mapping[str, str]] = ContextVar("faultline_log_fields", default=_EMPTY)


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in the current context."""
    return dict(_FIELDS.get())


def bind_context(**values: object) -> None:
    """Bind stringified ``values``; ``None`` values are skipped."""
    updated = {
        key: str(value) for key, value in values.items() if value is not None
    }
    if updated:
        _FIELDS.set(MappingProxyType({**_FIELDS.get(), **updated}))


def bind_error(error: StructuredError) -> None:
    """Bind the id and resolved category of ``error``."""
    bind_context(**{fields.ERROR_ID: error.id, fields.ERROR_CATEGORY: category_of(error)})


def clear_context(*keys: str) -> None:
    """Drop ``keys``, or every bound field when called without arguments."""
    if not keys:
        _FIELDS.set(_EMPTY)
        return
    remaining = {key: value for key, value in _FIELDS.get().items() if key not in keys}
    _FIELDS.set(MappingProxyType(remaining))


@contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Bind ``values`` for the duration of the block only."""
    token = _FIELDS.set(_FIELDS.get())
    try:
        bind_context(**values)
        yield
    finally:
        _FIELDS.reset(token)
