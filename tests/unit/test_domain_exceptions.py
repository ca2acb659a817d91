"""Tests for domain exceptions and their error codes."""

from app.domain.exceptions import (
    AuthorizationException,
    ImmutableFieldException,
    ResourceNotFoundException,
    TaskVisibilityException,
    UpstreamServiceException,
    ValidationException,
)


def test_base_defaults_error_code_to_class_name() -> None:
    exc = TaskVisibilityException("boom")
    assert exc.error_code == "TaskVisibilityException"
    assert exc.to_dict() == {"error": "TaskVisibilityException", "message": "boom", "details": {}}


def test_validation_carries_field() -> None:
    exc = ValidationException("bad", field="student_ids")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "student_ids"}


def test_not_found_message() -> None:
    exc = ResourceNotFoundException("task", "task-1")
    assert exc.message == "task not found: task-1"
    assert exc.details["resource_id"] == "task-1"


def test_immutable_field() -> None:
    exc = ImmutableFieldException("assignment_strategy")
    assert exc.error_code == "IMMUTABLE_FIELD"
    assert "assignment_strategy" in exc.message


def test_authorization_lists_roles() -> None:
    exc = AuthorizationException(required_roles=["parent"])
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details["required_roles"] == ["parent"]


def test_upstream_records_status() -> None:
    exc = UpstreamServiceException("student-directory", status_code=502)
    assert exc.error_code == "UPSTREAM_ERROR"
    assert exc.details == {"service": "student-directory", "upstream_status": 502}
