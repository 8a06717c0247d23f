"""Document rendering for structured errors.

Produces plain dicts / JSON for logs and API responses. Payloads are opaque,
so ``to_json`` falls back to ``str`` for values JSON cannot encode.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .categories import Category
from .classifiers import cause_type_name
from .error import StructuredError
from .stack import format_stack
from .validation import ValidationError


class StackDocument(BaseModel):
    """One rendered stack snapshot."""

    msg: str
    frames: list[str] = Field(default_factory=list)


class CauseDocument(BaseModel):
    """Summary of a wrapped cause."""

    msg: str
    type: str


class ErrorDocument(BaseModel):
    """Serialized form of a ``StructuredError``."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    msg: str
    type: Category
    status: int = 0
    message_data: Any = None
    is_retryable: bool | None = None
    stacks: list[StackDocument] | None = None
    cause: CauseDocument | None = None


class FieldErrorDocument(BaseModel):
    """One field entry with its translated text."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    field: str
    code: str
    message: Any = None
    params: dict[str, Any] | None = None
    translated_message: str


class ValidationDocument(BaseModel):
    """Serialized form of a ``ValidationError``."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    type: Category
    message_data: Any = None
    message: str
    field_errors: list[FieldErrorDocument] = Field(default_factory=list)


def to_document(error: StructuredError, *, include_stacks: bool = True) -> ErrorDocument:
    """Build the serialized document for one structured error."""
    stacks: list[StackDocument] | None = None
    if include_stacks and error.stacks:
        stacks = [
            StackDocument(msg=trace.message, frames=format_stack(trace, error.stack_cleaner))
            for trace in error.stacks
        ]

    cause: CauseDocument | None = None
    if error.cause is not None:
        cause = CauseDocument(msg=str(error.cause), type=cause_type_name(error.cause))

    return ErrorDocument(
        id=error.id,
        msg=error.message,
        type=error.resolve(),
        status=error.http_status,
        message_data=error.payload,
        is_retryable=True if error.is_retryable else None,
        stacks=stacks,
        cause=cause,
    )


def validation_document(error: ValidationError) -> ValidationDocument:
    """Build the serialized document for a validation aggregator."""
    return ValidationDocument(
        id=error.id,
        type=error.category,
        message_data=error.payload,
        message=error.summary(),
        field_errors=[
            FieldErrorDocument(
                field=entry.field,
                code=entry.code,
                message=entry.message,
                params=dict(entry.params) if entry.params is not None else None,
                translated_message=error.translate(entry),
            )
            for entry in error.field_errors
        ],
    )


def to_dict(
    error: StructuredError | ValidationError, *, include_stacks: bool = True
) -> dict[str, Any]:
    """Render ``error`` as a plain dict, omitting empty optional members."""
    if isinstance(error, ValidationError):
        document = validation_document(error)
        data = document.model_dump(mode="python")
        if data["message_data"] is None:
            del data["message_data"]
        for entry in data["field_errors"]:
            if entry["params"] is None:
                del entry["params"]
        return data

    document = to_document(error, include_stacks=include_stacks)
    data = document.model_dump(mode="python")
    # Only top-level members are optional; payload contents stay untouched.
    return {key: value for key, value in data.items() if value is not None}


def to_json(
    error: StructuredError | ValidationError, *, include_stacks: bool = True
) -> str:
    """Render ``error`` as compact JSON."""
    return json.dumps(
        to_dict(error, include_stacks=include_stacks),
        default=str,
        separators=(",", ":"),
    )
