"""Category resolution for structured errors.

Resolution priority for one error instance:

1. explicit category (anything other than ``categories.UNKNOWN``);
2. the instance classifier;
3. the process-wide classifier registered with ``set_global_classifier``;
4. ``categories.UNKNOWN``.

Classifiers may resolve other errors, including ones that lead back to the
instance being resolved. Each instance records which threads are currently
resolving it; re-entry from such a thread returns the explicit category
(always the unknown sentinel at that point) instead of invoking the classifier
again. Classifiers run without any instance lock held, so cycles spread over
several threads cannot deadlock. The first result stored wins.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Condition, Lock, get_ident
from typing import TYPE_CHECKING, Callable, Iterator

from . import categories
from .categories import Category

if TYPE_CHECKING:
    from .error import StructuredError

logger = logging.getLogger(__name__)

Classifier = Callable[["StructuredError"], Category]


class ReadWriteLock:
    """Lock admitting many concurrent readers or one exclusive writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve ``set_global_classifier``. Read sections must not nest.
    """

    def __init__(self) -> None:
        self._cond = Condition(Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock exclusively for the duration of the block."""
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


_GLOBAL_LOCK = ReadWriteLock()
_global_classifier: Classifier | None = None


def set_global_classifier(classifier: Classifier | None) -> None:
    """Install the process-wide fallback classifier (``None`` clears it)."""
    global _global_classifier
    with _GLOBAL_LOCK.write():
        _global_classifier = classifier
    if classifier is None:
        logger.debug("global error classifier cleared")
    else:
        logger.debug("global error classifier set: %r", classifier)


def clear_global_classifier() -> None:
    """Remove the process-wide fallback classifier."""
    set_global_classifier(None)


def get_global_classifier() -> Classifier | None:
    """Return the current process-wide classifier, if any."""
    with _GLOBAL_LOCK.read():
        return _global_classifier


def is_known(category: Category | None) -> bool:
    """Return whether ``category`` is a usable, non-sentinel tag."""
    return bool(category) and category != categories.UNKNOWN


@dataclass(slots=True)
class Resolution:
    """Per-instance resolution cache and per-thread re-entrancy marker."""

    value: Category | None = None
    owners: set[int] = field(default_factory=set)
    lock: Lock = field(default_factory=Lock)

    def resolve(self, error: StructuredError) -> Category:
        """Return the cached category of ``error``; the first stored result wins."""
        owner = get_ident()
        with self.lock:
            if self.value is not None:
                return self.value
            reentered = owner in self.owners
            if not reentered:
                self.owners.add(owner)

        if reentered:
            fallback = error.explicit_category or categories.UNKNOWN
            logger.debug(
                "category resolution re-entered for %s; returning %s",
                error.id,
                fallback,
            )
            return fallback

        try:
            value = _infer(error)
        finally:
            with self.lock:
                self.owners.discard(owner)

        with self.lock:
            if self.value is None:
                self.value = value
            return self.value


def _infer(error: StructuredError) -> Category:
    """Consult the instance classifier, then the global one."""
    if error.classifier is not None:
        inferred = error.classifier(error)
        if is_known(inferred):
            return inferred

    global_classifier = get_global_classifier()
    if global_classifier is not None:
        inferred = global_classifier(error)
        if is_known(inferred):
            return inferred

    return categories.UNKNOWN
