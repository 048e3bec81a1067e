"""Tests for shared/exceptions.py."""

import pytest

from shared.exceptions import (
    XelmaError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    RateLimitExceededError,
)


class TestXelmaError:
    def test_message(self):
        """XelmaError should store message."""
        error = XelmaError("Test error")
        assert error.message == "Test error"
        assert str(error) == "Test error"

    def test_default_code(self):
        """XelmaError should default code to class name."""
        assert XelmaError("Test error").code == "XelmaError"

    def test_custom_code(self):
        assert XelmaError("Test error", code="CUSTOM_ERROR").code == "CUSTOM_ERROR"

    def test_default_details(self):
        assert XelmaError("Test error").details == {}

    def test_to_dict_omits_details(self):
        """Details are for logs only and never part of the public payload."""
        error = XelmaError("Test error", code="CODE", details={"secret": "value"})
        assert error.to_dict() == {"error": "CODE", "message": "Test error"}

    def test_is_exception(self):
        with pytest.raises(XelmaError):
            raise XelmaError("boom")


class TestStatusCodes:
    @pytest.mark.parametrize(
        "exc_class,status",
        [
            (XelmaError, 500),
            (ValidationError, 400),
            (AuthenticationError, 401),
            (AuthorizationError, 403),
            (ConflictError, 409),
        ],
    )
    def test_status_code(self, exc_class, status):
        error = exc_class("message")
        assert error.status_code == status
        assert isinstance(error, XelmaError)


class TestInternalError:
    def test_defaults(self):
        error = InternalError()
        assert error.status_code == 500
        assert error.to_dict() == {"error": "INTERNAL_ERROR", "message": "Internal server error"}

    def test_custom_message(self):
        error = InternalError("Failed to authenticate wallet", details={"operation": "x"})
        assert error.message == "Failed to authenticate wallet"
        assert error.code == "INTERNAL_ERROR"
        assert error.details == {"operation": "x"}


class TestRateLimitExceededError:
    def test_fields(self):
        error = RateLimitExceededError("Too many requests", retry_after=42)
        assert error.status_code == 429
        assert error.retry_after == 42
        assert error.to_dict() == {"error": "TOO_MANY_REQUESTS", "message": "Too many requests"}
        assert error.limit is None

    def test_limit(self):
        error = RateLimitExceededError("Too many requests", retry_after=42, limit=5)
        assert error.limit == 5
        assert error.details == {"retry_after": 42, "limit": 5}
