"""Traversal over wrapped and joined error trees.

Three node shapes are understood, checked in this order:

1. multi-cause nodes exposing an ``exceptions`` sequence (``JoinedError``,
   ``BaseExceptionGroup``);
2. ``StructuredError`` nodes, whose ``cause`` is authoritative;
3. anything else: a callable ``unwrap()`` if present, else ``__cause__``.

Nodes matching none of these simply end their branch. None of the functions
here raise; absence is reported as ``None``, ``False`` or an empty list. Walks
are iterative and remember visited nodes, so deep or cyclic chains terminate.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Sequence, TypeVar

from . import categories
from .categories import Category
from .error import StructuredError, create
from .stack import render_stack

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JoinedError(Exception):
    """Several errors reported together; built by ``join``."""

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self._exceptions = tuple(errors)
        super().__init__(self._message())

    @property
    def exceptions(self) -> tuple[BaseException, ...]:
        """Member errors in their original order."""
        return self._exceptions

    def _message(self) -> str:
        return "; ".join(str(error) for error in self._exceptions)

    def __str__(self) -> str:
        return self._message()


def join(*errors: BaseException | None) -> JoinedError | None:
    """Join non-``None`` errors; return ``None`` when nothing remains."""
    kept = [error for error in errors if error is not None]
    if not kept:
        return None
    return JoinedError(kept)


def unwrap_all(error: object) -> tuple[BaseException, ...] | None:
    """Return the members of a multi-cause node, or ``None`` for other shapes."""
    members = getattr(error, "exceptions", None)
    if isinstance(members, (tuple, list)):
        return tuple(member for member in members if member is not None)
    return None


def unwrap(error: object) -> BaseException | None:
    """Return the single wrapped error of ``error``, if it exposes one."""
    if error is None:
        return None
    if isinstance(error, StructuredError):
        return error.cause
    method = getattr(error, "unwrap", None)
    if callable(method):
        try:
            inner = method()
        except Exception:
            # A failing foreign unwrap() ends this branch.
            logger.debug("unwrap() failed on %s", type(error).__name__, exc_info=True)
            return None
        return inner if isinstance(inner, BaseException) else None
    inner = getattr(error, "__cause__", None)
    return inner if isinstance(inner, BaseException) else None


def walk(error: BaseException | None) -> Iterator[BaseException]:
    """Yield every node of the tree rooted at ``error`` depth-first.

    Each node is produced once even when reachable along several paths.
    """
    if error is None:
        return
    seen: set[int] = set()
    pending: list[BaseException] = [error]
    while pending:
        node = pending.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node

        members = unwrap_all(node)
        if members is not None:
            pending.extend(reversed(members))
            continue
        inner = unwrap(node)
        if inner is not None:
            pending.append(inner)


def filter_by_category(
    error: BaseException | None, category: Category
) -> list[StructuredError]:
    """Return every distinct structured error in the tree resolving to ``category``."""
    return [
        node
        for node in walk(error)
        if isinstance(node, StructuredError) and node.resolve() == category
    ]


def has_category(error: BaseException | None, category: Category) -> bool:
    """Return whether any structured error in the tree resolves to ``category``."""
    return any(
        isinstance(node, StructuredError) and node.resolve() == category
        for node in walk(error)
    )


def root_cause(error: BaseException | None) -> BaseException | None:
    """Follow causes down to the innermost error.

    Returns ``error`` itself when it wraps nothing and ``None`` for ``None``.
    """
    last: BaseException | None = None
    seen: set[int] = set()
    current = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        last = current
        current = unwrap(current)
    return last


def matches(error: BaseException | None, target: object) -> bool:
    """Chain-aware identity test.

    A node matches when it is ``target``, when it is a structured error with
    the same id as a structured ``target``, or when ``target`` is an exception
    class and the node is an instance of it.
    """
    if target is None:
        return False
    for node in walk(error):
        if node is target:
            return True
        if isinstance(target, type):
            if isinstance(node, target):
                return True
            continue
        if isinstance(node, StructuredError) and isinstance(target, StructuredError):
            if node.id == target.id:
                return True
    return False


def find(error: BaseException | None, kind: type[T]) -> T | None:
    """Return the first node of type ``kind`` in the tree, if any."""
    for node in walk(error):
        if isinstance(node, kind):
            return node
    return None


def find_structured(error: BaseException | None) -> StructuredError | None:
    """Return the first structured error in the tree, if any."""
    return find(error, StructuredError)


def category_of(error: BaseException | None) -> Category:
    """Resolved category of ``error`` itself, unknown for foreign errors."""
    if isinstance(error, StructuredError):
        return error.resolve()
    return categories.UNKNOWN


def is_not_found(error: BaseException | None) -> bool:
    """Whether the first structured error in the tree is marked not-found."""
    found = find_structured(error)
    return found is not None and found.is_not_found


def is_retryable(error: BaseException | None) -> bool:
    """Whether the first structured error in the tree is marked retryable."""
    found = find_structured(error)
    return found is not None and found.is_retryable


def http_status(error: BaseException | None) -> int:
    """First non-zero HTTP status found in the tree, else 0."""
    for node in walk(error):
        status = getattr(node, "http_status", 0)
        if isinstance(status, int) and status:
            return status
    return 0


def payload_of(error: BaseException | None, kind: type[T] | None = None) -> Any:
    """Return the payload of ``error`` when it is a structured error.

    With ``kind`` the payload must also be an instance of it. Returns ``None``
    otherwise.
    """
    if not isinstance(error, StructuredError) or error.payload is None:
        return None
    if kind is not None and not isinstance(error.payload, kind):
        return None
    return error.payload


def payload_or(error: BaseException | None, fallback: T, kind: type[T] | None = None) -> T:
    """Like ``payload_of`` but returns ``fallback`` instead of ``None``."""
    data = payload_of(error, kind)
    return fallback if data is None else data


def replace_payload(error: BaseException, data: Any) -> StructuredError:
    """Attach ``data`` as payload, wrapping foreign errors in ``unknown.error``."""
    found = find_structured(error)
    if found is not None:
        return found.with_payload(data)
    return create("unknown.error").with_payload(data).with_cause(error)


def replace_category(error: BaseException | None, category: Category) -> BaseException | None:
    """Re-tag the first structured error in the tree; foreign errors pass through."""
    if error is None:
        return None
    found = find_structured(error)
    if found is not None:
        return found.with_category(category)
    return error


def root_stack_trace(error: BaseException | None) -> str:
    """Render the innermost snapshot of the first structured error with stacks."""
    for node in walk(error):
        if isinstance(node, StructuredError) and node.stacks:
            return render_stack(node.stacks[-1], node.stack_cleaner)
    return ""


def full_stack_trace(error: BaseException | None) -> str:
    """Render every snapshot in the tree, innermost first within each error."""
    sections: list[str] = []
    rendered: set[int] = set()
    for node in walk(error):
        if not isinstance(node, StructuredError):
            continue
        for trace in reversed(node.stacks):
            # Wrappers share their cause's snapshots by reference.
            if id(trace) in rendered:
                continue
            rendered.add(id(trace))
            sections.append(f"--- stack (msg: {trace.message}) ---")
            sections.append(render_stack(trace, node.stack_cleaner))
    return "\n".join(sections)
