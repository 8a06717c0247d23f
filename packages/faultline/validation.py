"""Field-level validation error aggregation.

A ``ValidationError`` wraps one ``StructuredError`` (id, category, HTTP status,
payload) and collects per-field entries on top of it. Translators turn entry
payloads into display text; they are opaque callbacks, so any i18n layer can
plug in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from . import categories
from .categories import Category
from .error import StructuredError, create
from .options import with_category

SummaryTranslator = Callable[[Sequence["FieldError"], Any], str]
FieldTranslator = Callable[[str, str, Any], str]


@dataclass(frozen=True, slots=True)
class FieldError:
    """One failed check on one input field."""

    field: str
    code: str
    message: Any = None
    params: Mapping[str, Any] | None = None


def default_summary_translator(field_errors: Sequence[FieldError], payload: Any) -> str:
    """Use the base payload as summary, else count the field errors."""
    if payload is not None:
        return payload if isinstance(payload, str) else str(payload)
    return f"Validation failed with {len(field_errors)} error(s)"


def default_field_translator(field_name: str, code: str, message: Any) -> str:
    """Render the entry message as-is, falling back to its code."""
    if message is None:
        return code
    return message if isinstance(message, str) else str(message)


@dataclass(eq=False)
class ValidationError(Exception):
    """Collection of field errors sharing one base structured error."""

    base: StructuredError
    field_errors: list[FieldError] = field(default_factory=list)
    summary_translator: SummaryTranslator = default_summary_translator
    field_translator: FieldTranslator = default_field_translator

    def __post_init__(self) -> None:
        super().__init__(self.base.message)

    def __reduce__(self) -> tuple[Any, ...]:
        return (
            type(self),
            (self.base, list(self.field_errors), self.summary_translator, self.field_translator),
        )

    def __str__(self) -> str:
        if not self.field_errors:
            return self.base.message
        parts = [
            f"{entry.field}: {self.translate(entry)}" for entry in self.field_errors
        ]
        return f"{self.base.message}: {'; '.join(parts)}"

    @property
    def id(self) -> str:
        return self.base.id

    @property
    def category(self) -> Category:
        return self.base.resolve()

    @property
    def http_status(self) -> int:
        return self.base.http_status

    @property
    def payload(self) -> Any:
        return self.base.payload

    def unwrap(self) -> StructuredError:
        """Return the base error so chain helpers can see it."""
        return self.base

    def add_field_error(
        self,
        field_name: str,
        code: str,
        message: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> ValidationError:
        """Record one field failure; returns ``self`` for chaining."""
        self.field_errors.append(
            FieldError(
                field=field_name,
                code=code,
                message=message,
                params=dict(params) if params is not None else None,
            )
        )
        return self

    def with_http_status(self, status: int) -> ValidationError:
        self.base = self.base.with_http_status(status)
        return self

    def with_payload(self, data: Any) -> ValidationError:
        self.base = self.base.with_payload(data)
        return self

    def with_summary_translator(self, translator: SummaryTranslator) -> ValidationError:
        self.summary_translator = translator
        return self

    def with_field_translator(self, translator: FieldTranslator) -> ValidationError:
        self.field_translator = translator
        return self

    def translate(self, entry: FieldError) -> str:
        """Render one entry through the field translator."""
        return self.field_translator(entry.field, entry.code, entry.message)

    def summary(self) -> str:
        """Render the overall summary through the summary translator."""
        return self.summary_translator(self.field_errors, self.base.payload)


def new_validation_error(id: str) -> ValidationError:
    """Create an aggregator whose base carries ``categories.VALIDATION``."""
    return ValidationError(base=create(id, with_category(categories.VALIDATION)))
