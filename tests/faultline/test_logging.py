"""Unit tests for structured-error aware logging."""

from __future__ import annotations

import json
import logging
import sys

from packages.faultline import create, new_validation_error, options
from packages.faultline.logging import (
    ContextFilter,
    JsonFormatter,
    PlainFormatter,
    bind_context,
    bind_error,
    clear_context,
    configure_logging,
    get_context,
    log_context,
    record_error,
)


def _record(
    message: str = "request failed",
    *,
    exc: BaseException | None = None,
    error: object | None = None,
) -> logging.LogRecord:
    exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
    record = logging.LogRecord(
        name="tests.faultline",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=exc_info,
    )
    if error is not None:
        record.error = error
    return record


def test_record_error_prefers_extra_then_exc_info() -> None:
    """Structured errors are found in extra first, then in exc_info."""
    extra = create("from.extra")
    raised = create("from.exc_info")

    assert record_error(_record(error=extra, exc=raised)) is extra
    assert record_error(_record(exc=raised)) is raised
    assert record_error(_record(exc=ValueError("x"))) is None
    assert record_error(_record()) is None


def test_json_formatter_embeds_structured_error() -> None:
    """JSON output nests the serialized error under the error key."""
    err = create("db.down", options.with_category("app.database")).with_caller_stack()

    payload = json.loads(JsonFormatter().format(_record(exc=err)))

    assert payload["level"] == "ERROR"
    assert payload["logger"] == "tests.faultline"
    assert payload["message"] == "request failed"
    assert payload["error"]["id"] == "db.down"
    assert payload["error"]["type"] == "app.database"
    assert payload["error"]["stacks"]
    assert "exception" not in payload


def test_json_formatter_can_omit_stacks() -> None:
    """include_stacks=False drops snapshots from logged errors."""
    err = create("db.down").with_caller_stack()

    payload = json.loads(JsonFormatter(include_stacks=False).format(_record(error=err)))

    assert "stacks" not in payload["error"]


def test_json_formatter_falls_back_to_traceback_for_foreign_errors() -> None:
    """Foreign exceptions keep the standard traceback text."""
    try:
        raise ValueError("bad value")
    except ValueError as exc:
        record = _record(exc=exc)

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: bad value" in payload["exception"]
    assert "error" not in payload


def test_json_formatter_renders_validation_errors() -> None:
    """Validation aggregators are serialized with their field entries."""
    err = new_validation_error("signup.invalid").add_field_error("email", "required")

    payload = json.loads(JsonFormatter().format(_record(error=err)))

    assert payload["error"]["field_errors"][0]["field"] == "email"


def test_plain_formatter_appends_id_category_and_stacks() -> None:
    """Plain output replaces the traceback with error provenance."""
    inner = create("db.down").with_caller_stack()
    err = create("user.fetch_failed", options.with_category("app.users")).with_cause(inner)

    try:
        raise err
    except type(err):
        record = _record(exc=sys.exc_info()[1])

    output = PlainFormatter().format(record)

    assert "[user.fetch_failed app.users] user.fetch_failed" in output
    assert "--- stack (msg: db.down) ---" in output
    assert "Traceback" not in output
    assert record.exc_info is not None


def test_plain_formatter_without_stacks() -> None:
    """include_stacks=False keeps plain output on one line."""
    err = create("db.down").with_caller_stack()

    output = PlainFormatter(include_stacks=False).format(_record(error=err))

    assert "\n" not in output


def test_context_filter_injects_bound_fields() -> None:
    """Bound context fields land on the record and in JSON output."""
    record = _record()

    with log_context(request_id="r-1", user=None):
        ContextFilter().filter(record)

    payload = json.loads(JsonFormatter().format(record))

    assert record.request_id == "r-1"
    assert payload["request_id"] == "r-1"
    assert "user" not in payload


def test_log_context_restores_previous_fields() -> None:
    """Scoped fields disappear when the block exits."""
    bind_context(service="api")

    with log_context(request_id="r-1"):
        assert get_context() == {"service": "api", "request_id": "r-1"}

    assert get_context() == {"service": "api"}


def test_bind_error_and_clear_context() -> None:
    """bind_error records id and category; clear_context removes keys."""
    bind_error(create("db.down", options.with_category("app.database")))

    assert get_context() == {"error_id": "db.down", "error_category": "app.database"}

    clear_context("error_id")
    assert get_context() == {"error_category": "app.database"}

    clear_context()
    assert get_context() == {}


def test_configure_logging_installs_single_handler(restore_root_logging) -> None:
    """Repeated configuration replaces rather than duplicates the handler."""
    configure_logging(level="debug", json_output=False, service="billing")
    configure_logging(level="warning", json_output=True, service="billing")

    root = restore_root_logging
    assert len(root.handlers) == 1
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert get_context()["service"] == "billing"
