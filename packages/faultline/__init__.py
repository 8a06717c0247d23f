"""Structured, chainable errors with classification and provenance.

Basic usage::

    from packages.faultline import create, options

    err = create(
        "user.not_found",
        options.with_not_found(),
        options.with_http_status(404),
        options.with_payload({"en": "User not found"}),
    )

    wrapped = create("user.fetch_failed").with_cause(db_error)

Submodules ``logging`` and ``config`` are not imported here; import them
explicitly when an application wants faultline's log formatting.
"""

from . import categories, options
from .categories import Category
from .chain import (
    JoinedError,
    category_of,
    filter_by_category,
    find,
    find_structured,
    full_stack_trace,
    has_category,
    http_status,
    is_not_found,
    is_retryable,
    join,
    matches,
    payload_of,
    payload_or,
    replace_category,
    replace_payload,
    root_cause,
    root_stack_trace,
    unwrap,
    unwrap_all,
    walk,
)
from .classifiers import (
    cause_type_name,
    chain_classifiers,
    id_contains_classifier,
    id_pattern_classifier,
    stack_trace_classifier,
)
from .error import Option, StructuredError, create, new_not_found, new_retryable
from .resolver import (
    Classifier,
    clear_global_classifier,
    get_global_classifier,
    set_global_classifier,
)
from .serialization import to_dict, to_document, to_json
from .stack import (
    MAX_STACK_FRAMES,
    StackFrame,
    StackTrace,
    StackTraceCleaner,
    capture,
    format_stack,
    get_frame_limit,
    resolve_frames,
    set_frame_limit,
)
from .validation import FieldError, ValidationError, new_validation_error

__all__ = [
    "capture",
    "categories",
    "Category",
    "category_of",
    "cause_type_name",
    "chain_classifiers",
    "Classifier",
    "clear_global_classifier",
    "create",
    "FieldError",
    "filter_by_category",
    "find",
    "find_structured",
    "format_stack",
    "full_stack_trace",
    "get_frame_limit",
    "get_global_classifier",
    "has_category",
    "http_status",
    "id_contains_classifier",
    "id_pattern_classifier",
    "is_not_found",
    "is_retryable",
    "join",
    "JoinedError",
    "matches",
    "MAX_STACK_FRAMES",
    "new_not_found",
    "new_retryable",
    "new_validation_error",
    "Option",
    "options",
    "payload_of",
    "payload_or",
    "replace_category",
    "replace_payload",
    "resolve_frames",
    "root_cause",
    "root_stack_trace",
    "set_frame_limit",
    "set_global_classifier",
    "stack_trace_classifier",
    "StackFrame",
    "StackTrace",
    "StackTraceCleaner",
    "StructuredError",
    "to_dict",
    "to_document",
    "to_json",
    "unwrap",
    "unwrap_all",
    "ValidationError",
    "walk",
]
