"""Immutable structured error value.

``StructuredError`` is a regular exception: raise it, catch it, chain it. Every
``with_*`` method returns a new instance and never touches the receiver, so an
error handed to one caller cannot be altered by another holder.

Stack capture happens at most once per error history. ``with_stack``,
``with_caller_stack`` and ``with_cause`` share the same guard: whichever runs
first records a snapshot, and later calls return the receiver unchanged. In
particular ``with_cause`` after ``with_caller_stack`` does NOT attach the
cause; wrap first, or pass the cause to the first capturing call.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError, dataclass, field, fields, replace
from typing import Any, Callable

from . import categories
from .categories import Category
from .resolver import Classifier, Resolution
from .stack import StackTrace, StackTraceCleaner, capture


_EXCEPTION_ATTRS = frozenset(
    {"__cause__", "__context__", "__notes__", "__suppress_context__", "__traceback__"}
)


@dataclass(eq=False)
class StructuredError(Exception):
    """Chainable error with identity, category, HTTP mapping and provenance.

    Fields are read-only once ``__post_init__`` has run. The interpreter's
    exception slots stay writable for ``raise ... from`` and ``contextlib``.
    """

    id: str
    message: str = None  # type: ignore[assignment]
    explicit_category: Category = categories.UNKNOWN
    classifier: Classifier | None = None
    http_status: int = 0
    payload: Any = None
    cause: BaseException | None = None
    stacks: tuple[StackTrace, ...] = ()
    stack_cleaner: StackTraceCleaner | None = None
    is_not_found: bool = False
    is_retryable: bool = False
    has_captured_stack: bool = False
    _resolution: Resolution = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.message is None:
            self.message = self.id
        self._resolution = Resolution()
        if self.cause is not None:
            self.__cause__ = self.cause
        super().__init__(self.message)
        self._sealed = True

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _EXCEPTION_ATTRS or not self.__dict__.get("_sealed", False):
            super().__setattr__(name, value)
            return
        raise FrozenInstanceError(f"cannot assign to field {name!r}")

    def __delattr__(self, name: str) -> None:
        if name in _EXCEPTION_ATTRS:
            super().__delattr__(name)
            return
        raise FrozenInstanceError(f"cannot delete field {name!r}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Rebuilt from init fields; the resolution cache starts empty.
        state = {item.name: getattr(self, item.name) for item in fields(self) if item.init}
        return (_restore, (state,))

    def __str__(self) -> str:
        return self.message

    # -------- accessors --------

    @property
    def category(self) -> Category:
        """Resolved category; see ``resolve``."""
        return self.resolve()

    def resolve(self) -> Category:
        """Return the explicit category, else the cached inferred one."""
        if self.explicit_category and self.explicit_category != categories.UNKNOWN:
            return self.explicit_category
        return self._resolution.resolve(self)

    def unwrap(self) -> BaseException | None:
        """Return the wrapped cause, if any."""
        return self.cause

    def is_same(self, target: object) -> bool:
        """Return whether ``target`` denotes the same logical error.

        Two structured errors are the same when their ids match, whatever
        their categories. Any other target is looked up along the cause chain.
        """
        if target is self:
            return True
        if isinstance(target, StructuredError):
            return self.id == target.id

        from .chain import matches

        return matches(self.cause, target)

    # -------- builders --------

    def with_message(self, text: str, *args: Any) -> StructuredError:
        """Return a copy whose message is ``text % args``.

        Arguments the template cannot consume are appended as
        ``%!(EXTRA type=value, ...)`` instead of raising.
        """
        return replace(self, message=_format_message(text, args))

    def with_payload(self, data: Any) -> StructuredError:
        """Return a copy carrying ``data`` as its user-facing payload."""
        return replace(self, payload=data)

    def with_category(self, category: Category) -> StructuredError:
        """Return a copy with an explicit category; drops any classifier."""
        return replace(self, explicit_category=category, classifier=None)

    def with_classifier(self, classifier: Classifier | None) -> StructuredError:
        """Return a copy inferring its category via ``classifier``."""
        return replace(
            self, classifier=classifier, explicit_category=categories.UNKNOWN
        )

    def with_http_status(self, status: int) -> StructuredError:
        return replace(self, http_status=status)

    def with_not_found(self) -> StructuredError:
        return replace(self, is_not_found=True)

    def with_retryable(self) -> StructuredError:
        return replace(self, is_retryable=True)

    def with_stack_cleaner(self, cleaner: StackTraceCleaner | None) -> StructuredError:
        """Return a copy whose rendered stacks pass through ``cleaner``."""
        return replace(self, stack_cleaner=cleaner)

    def with_stack(self, skip: int = 0) -> StructuredError:
        """Return a copy with a stack snapshot prepended.

        ``skip=0`` makes the caller of ``with_stack`` the top frame. Returns
        ``self`` when a snapshot was already captured.
        """
        if self.has_captured_stack:
            return self
        trace = StackTrace(frames=capture(skip + 1), message=self.message)
        return replace(self, stacks=(trace, *self.stacks), has_captured_stack=True)

    def with_caller_stack(self) -> StructuredError:
        """Capture the stack at the caller of this method."""
        return self.with_stack(1)

    def with_cause(self, cause: BaseException | None) -> StructuredError:
        """Return a copy wrapping ``cause`` with a snapshot taken at the caller.

        Returns ``self`` when a snapshot was already captured. Snapshots of a
        structured cause are appended after the new one.
        """
        if self.has_captured_stack:
            return self
        trace = StackTrace(frames=capture(1), message=self.message)
        stacks = (trace, *self.stacks)
        if isinstance(cause, StructuredError) and cause.stacks:
            stacks = stacks + cause.stacks
        return replace(self, cause=cause, stacks=stacks, has_captured_stack=True)


def _restore(state: dict[str, Any]) -> StructuredError:
    return StructuredError(**state)


def _format_message(text: str, args: tuple[Any, ...]) -> str:
    if not args:
        return text
    try:
        return text % args
    except (TypeError, ValueError, KeyError):
        extra = ", ".join(f"{type(arg).__name__}={arg}" for arg in args)
        return f"{text}%!(EXTRA {extra})"


Option = Callable[[StructuredError], StructuredError]


def create(id: str, *options: Option | None) -> StructuredError:
    """Create an error with message ``id`` and apply ``options`` in order."""
    error = StructuredError(id=id)
    for option in options:
        if option is not None:
            error = option(error)
    return error


def new_not_found(id: str) -> StructuredError:
    """Shorthand for ``create(id).with_not_found()``."""
    return create(id).with_not_found()


def new_retryable(id: str) -> StructuredError:
    """Shorthand for ``create(id).with_retryable()``."""
    return create(id).with_retryable()
