"""Unit tests for document rendering of structured errors."""

from __future__ import annotations

import json

from packages.faultline import (
    categories,
    create,
    format_stack,
    id_contains_classifier,
    new_validation_error,
    options,
    to_dict,
    to_document,
    to_json,
)


class _Opaque:
    def __str__(self) -> str:
        return "opaque-payload"


def test_minimal_error_renders_required_keys_only() -> None:
    """Optional members are omitted when empty."""
    data = to_dict(create("user.not_found"))

    assert data == {
        "id": "user.not_found",
        "msg": "user.not_found",
        "type": categories.UNKNOWN,
        "status": 0,
    }


def test_full_error_renders_every_member() -> None:
    """Payload, retryable flag, stacks and cause are all rendered."""
    cause = create(
        "db.connection_failed",
        options.with_classifier(id_contains_classifier({"db": "app.database"})),
    )
    err = create(
        "user.fetch_failed",
        options.with_category("app.users"),
        options.with_http_status(503),
        options.with_payload({"en": "Try again", "extra": None}),
    ).with_retryable().with_cause(cause)

    data = to_dict(err)

    assert data["type"] == "app.users"
    assert data["status"] == 503
    assert data["message_data"] == {"en": "Try again", "extra": None}
    assert data["is_retryable"] is True
    assert data["cause"] == {"msg": "db.connection_failed", "type": "app.database"}
    assert data["stacks"][0]["msg"] == "user.fetch_failed"
    assert data["stacks"][0]["frames"] == format_stack(err.stacks[0])


def test_foreign_cause_is_named_by_class() -> None:
    """Foreign causes are summarised by message and qualified class name."""
    try:
        json.loads("{")
    except json.JSONDecodeError as exc:
        cause = exc

    data = to_dict(create("config.parse_failed").with_cause(cause))

    assert data["cause"]["type"] == "json.decoder.JSONDecodeError"
    assert data["cause"]["msg"] == str(cause)


def test_stack_cleaner_applies_to_serialized_frames() -> None:
    """Serialized frames pass through the error's cleaner."""
    err = (
        create("x", options.with_stack_cleaner(lambda lines: lines[:1]))
        .with_caller_stack()
    )

    frames = to_dict(err)["stacks"][0]["frames"]

    assert len(frames) == 1
    assert frames == format_stack(err.stacks[0])[:1]
    assert len(format_stack(err.stacks[0])) > 1


def test_include_stacks_false_omits_stacks() -> None:
    """Stacks can be left out of the document."""
    err = create("x").with_caller_stack()

    assert "stacks" not in to_dict(err, include_stacks=False)
    assert to_document(err, include_stacks=False).stacks is None


def test_to_json_stringifies_opaque_payloads() -> None:
    """Payloads JSON cannot encode are rendered with str()."""
    err = create("x", options.with_payload(_Opaque()))

    decoded = json.loads(to_json(err))

    assert decoded["message_data"] == "opaque-payload"
    assert decoded["id"] == "x"


def test_validation_error_document_shape() -> None:
    """Validation documents list translated field errors."""
    err = (
        new_validation_error("signup.invalid")
        .add_field_error("email", "required", "Email is required")
        .add_field_error("age", "min", params={"min": 18})
    )

    data = to_dict(err)

    assert data["id"] == "signup.invalid"
    assert data["type"] == categories.VALIDATION
    assert data["message"] == "Validation failed with 2 error(s)"
    assert "message_data" not in data
    assert data["field_errors"][0] == {
        "field": "email",
        "code": "required",
        "message": "Email is required",
        "translated_message": "Email is required",
    }
    assert data["field_errors"][1]["params"] == {"min": 18}
    assert data["field_errors"][1]["translated_message"] == "min"
    assert json.loads(to_json(err))["field_errors"][1]["code"] == "min"
