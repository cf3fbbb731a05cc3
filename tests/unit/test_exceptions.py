"""Unit tests for application exceptions."""

import logging

import pytest
from fastapi import HTTPException

from restaurant_ordering_service.utils.exceptions import (
    AppError,
    ConcurrentUpdateError,
    InvalidIdentifierError,
    InvalidInputError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidStatusError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    UnavailableError,
    UpstreamFailureError,
)


@pytest.mark.unit
class TestAppErrors:
    """Test suite for the application error hierarchy."""

    @pytest.mark.parametrize(
        ("error", "status_code", "kind"),
        [
            (InvalidInputError("Order must contain items"), 400, "InvalidInput"),
            (InvalidIdentifierError("Dish", "abc"), 400, "InvalidIdentifier"),
            (InvalidStatusError("shipped"), 400, "InvalidStatus"),
            (InvalidQuantityError("Burger"), 400, "InvalidQuantity"),
            (InvalidPriceError(), 400, "InvalidPrice"),
            (UnavailableError("Burger"), 400, "Unavailable"),
            (UnauthorizedError(), 401, "Unauthorized"),
            (NotFoundError("Order", "123"), 404, "NotFound"),
            (InvalidTransitionError("completed", "pending"), 409, "InvalidTransition"),
            (ConcurrentUpdateError("Order", "123"), 409, "ConcurrentUpdate"),
            (UpstreamFailureError("Failed to get dish"), 502, "UpstreamFailure"),
        ],
    )
    def test_status_code_and_kind(self, error: AppError, status_code: int, kind: str) -> None:
        """Test that every error kind maps to its HTTP status."""
        assert isinstance(error, HTTPException)
        assert error.status_code == status_code
        assert error.kind == kind
        assert error.detail == error.message

    def test_messages(self) -> None:
        """Test the messages shown to callers."""
        assert str(InvalidIdentifierError("Dish", "abc")) == "Invalid Dish ID: abc"
        assert str(NotFoundError("Order", "123")) == "Order with id 123 not found"
        assert str(NotFoundError("Order")) == "Order not found"
        assert str(UnavailableError("Burger")) == "Dish Burger is no longer available"
        assert (
            str(InvalidTransitionError("completed", "pending"))
            == "Cannot change order status from completed to pending"
        )

    def test_client_errors_logged_as_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that 4xx errors are logged at warning level."""
        with caplog.at_level(logging.WARNING):
            NotFoundError("Dish", "123")

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.error_kind == "NotFound"
        assert record.status_code == 404

    def test_upstream_errors_logged_as_error(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that 5xx errors are logged at error level with context."""
        with caplog.at_level(logging.WARNING):
            UpstreamFailureError("Failed to list orders", dynamodb_error="boom")

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.dynamodb_error == "boom"
