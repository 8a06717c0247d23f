"""Reusable classifier building blocks.

Each constructor returns a plain function suitable for
``StructuredError.with_classifier`` or ``set_global_classifier``. Mappings are
consulted in insertion order, so put more specific patterns first.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Callable, Mapping

from . import categories
from .categories import Category
from .chain import root_cause
from .error import StructuredError
from .resolver import Classifier, is_known
from .stack import StackFrame

UNDEFINED_TYPE = "undefined"

StackMatcher = Callable[[StackFrame, str, Category], Category]


def id_pattern_classifier(patterns: Mapping[str, Category]) -> Classifier:
    """Classify by glob pattern (``*``, ``?``, ``[...]``) over the error id."""
    rules = tuple(patterns.items())

    def classify(error: StructuredError) -> Category:
        for pattern, category in rules:
            if fnmatchcase(error.id, pattern):
                return category
        return categories.UNKNOWN

    return classify


def id_contains_classifier(fragments: Mapping[str, Category]) -> Classifier:
    """Classify by substring containment in the error id."""
    rules = tuple(fragments.items())

    def classify(error: StructuredError) -> Category:
        for fragment, category in rules:
            if fragment in error.id:
                return category
        return categories.UNKNOWN

    return classify


def chain_classifiers(*classifiers: Classifier | None) -> Classifier:
    """Return the first non-unknown result of ``classifiers`` in order."""
    members = tuple(classifier for classifier in classifiers if classifier is not None)

    def classify(error: StructuredError) -> Category:
        for classifier in members:
            category = classifier(error)
            if is_known(category):
                return category
        return categories.UNKNOWN

    return classify


def stack_trace_classifier(matcher: StackMatcher) -> Classifier:
    """Classify from where the error was captured and what it wraps.

    ``matcher`` receives the top frame of the most recent snapshot, the type
    name of the root cause (``""`` without a cause, see ``cause_type_name``)
    and the explicit category. Errors without snapshots resolve to unknown and
    the matcher is not called.
    """

    def classify(error: StructuredError) -> Category:
        if not error.stacks:
            return categories.UNKNOWN
        frame = error.stacks[0].top()
        if frame is None:
            return categories.UNKNOWN
        cause_type = ""
        if error.cause is not None:
            cause_type = cause_type_name(root_cause(error.cause))
        return matcher(frame, cause_type, error.explicit_category)

    return classify


def cause_type_name(error: object) -> str:
    """Structural type name used when summarising a cause.

    Structured errors report their resolved category; other exceptions report
    ``module.QualifiedName`` of their class.
    """
    if error is None:
        return UNDEFINED_TYPE
    if isinstance(error, StructuredError):
        return error.resolve()
    kind = type(error)
    name = getattr(kind, "__qualname__", None) or getattr(kind, "__name__", None)
    if not name:
        return UNDEFINED_TYPE
    module = getattr(kind, "__module__", None)
    return f"{module}.{name}" if module else name
