"""Tests for the search exception hierarchy."""

from __future__ import annotations

from dynsearch import (
    CoercionError,
    FieldType,
    InvalidTimezoneError,
    SearchError,
    UnknownFieldError,
    UnknownRelationError,
    UnsupportedOperatorError,
    ValidationError,
)


def test_all_errors_share_a_base() -> None:
    for error in (
        ValidationError("bad"),
        UnknownFieldError("x", "Order", []),
        UnknownRelationError("x", "Order", []),
        CoercionError("x", FieldType.INTEGER),
        InvalidTimezoneError("x"),
        UnsupportedOperatorError("x", "memory"),
    ):
        assert isinstance(error, SearchError)


def test_unknown_field_suggestions() -> None:
    error = UnknownFieldError("stauts", "Order", ["id", "status", "created_at"])
    assert error.suggestions == ["status"]
    message = str(error)
    assert "Unknown field 'stauts' on 'Order'." in message
    assert "Did you mean one of these?" in message
    assert "Available fields: created_at, id, status" in message


def test_unknown_field_without_suggestions() -> None:
    error = UnknownFieldError("zzz", "Order", ["id"])
    assert error.suggestions == []
    assert "Did you mean" not in str(error)


def test_unknown_field_preview_is_truncated() -> None:
    fields = [f"field_{i:02d}" for i in range(20)]
    assert str(UnknownFieldError("x", "Order", fields)).endswith(", ...")


def test_unknown_field_to_dict() -> None:
    data = UnknownFieldError("stauts", "Order", ["status", "id"]).to_dict()
    assert data == {
        "error": "UNKNOWN_FIELD",
        "field": "stauts",
        "entity": "Order",
        "suggestions": ["status"],
        "available_fields": ["id", "status"],
    }


def test_unknown_relation() -> None:
    error = UnknownRelationError("custmer", "Order", ["customer", "items"])
    assert str(error) == (
        "Relation 'custmer' not found on 'Order'. Did you mean: customer?"
    )
    assert error.to_dict()["error"] == "UNKNOWN_RELATION"


def test_validation_error_keeps_path() -> None:
    error = ValidationError("'_or' must be a mapping of filters", path="_or")
    assert error.path == "_or"
    assert error.to_dict() == {
        "error": "VALIDATION_ERROR",
        "message": "'_or' must be a mapping of filters",
    }


def test_base_to_dict() -> None:
    error = InvalidTimezoneError("Mars/Olympus")
    assert error.to_dict() == {
        "error": "InvalidTimezoneError",
        "message": "Unknown timezone: 'Mars/Olympus'",
    }
