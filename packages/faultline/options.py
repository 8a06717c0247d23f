"""Configurators accepted by ``create``.

Each helper returns an ``Option`` applying the matching ``with_*`` builder, so
``create("user.not_found", with_not_found(), with_http_status(404))`` equals
``create("user.not_found").with_not_found().with_http_status(404)``.
"""

from __future__ import annotations

from typing import Any

from .categories import Category
from .error import Option, StructuredError
from .resolver import Classifier
from .stack import StackTraceCleaner


def with_category(category: Category) -> Option:
    """Set an explicit category, dropping any classifier."""

    def apply(error: StructuredError) -> StructuredError:
        return error.with_category(category)

    return apply


def with_classifier(classifier: Classifier | None) -> Option:
    """Infer the category via ``classifier``, dropping any explicit category."""

    def apply(error: StructuredError) -> StructuredError:
        return error.with_classifier(classifier)

    return apply


def with_http_status(status: int) -> Option:
    def apply(error: StructuredError) -> StructuredError:
        return error.with_http_status(status)

    return apply


def with_payload(data: Any) -> Option:
    """Attach user-facing payload data (a string, an i18n mapping, ...)."""

    def apply(error: StructuredError) -> StructuredError:
        return error.with_payload(data)

    return apply


def with_message(text: str, *args: Any) -> Option:
    def apply(error: StructuredError) -> StructuredError:
        return error.with_message(text, *args)

    return apply


def with_not_found() -> Option:
    def apply(error: StructuredError) -> StructuredError:
        return error.with_not_found()

    return apply


def with_retryable() -> Option:
    def apply(error: StructuredError) -> StructuredError:
        return error.with_retryable()

    return apply


def with_stack_cleaner(cleaner: StackTraceCleaner | None) -> Option:
    def apply(error: StructuredError) -> StructuredError:
        return error.with_stack_cleaner(cleaner)

    return apply
