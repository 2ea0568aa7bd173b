"""Tests for the error hierarchy and its response envelope."""

from lessonbook.core.errors import (
    AuthenticationError,
    ConfirmationRequiredError,
    ErrorContext,
    InsufficientBalanceError,
    ResourceNotFoundError,
    StorageError,
)


def test_insufficient_balance_envelope():
    err = InsufficientBalanceError(requested=3, available=1)
    body = err.to_response()["error"]
    assert err.http_status == 400
    assert body["code"] == "INSUFFICIENT_BALANCE"
    assert body["category"] == "business_rule"
    assert "context" not in body


def test_context_fields_only_when_set():
    err = StorageError("disk full", "write", ErrorContext(slot="edu_logs", debug_info={"x": 1}))
    body = err.to_response()["error"]
    assert body["context"] == {"slot": "edu_logs"}
    assert err.http_status == 503
    assert "debug_info" not in str(body)


def test_status_codes():
    assert ResourceNotFoundError("Student", "s1").http_status == 404
    assert AuthenticationError().http_status == 401
    assert ConfirmationRequiredError("Deleting a student").http_status == 409
