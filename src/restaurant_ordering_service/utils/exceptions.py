"""Application exceptions for the ordering service.

Each error kind maps to an HTTP status so FastAPI can render it directly as
``{"detail": message}``. Client faults are logged at warning level, upstream
faults at error level.
"""

import logging
from typing import Any

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    """Base application error with automatic logging."""

    kind = "AppError"

    def __init__(self, message: str, status_code: int, **log_context: Any) -> None:
        """Initialize and log the error.

        Args:
            message: Human-readable error message
            status_code: HTTP status classification for the error
            **log_context: Extra fields attached to the log record
        """
        level = logging.ERROR if status_code >= 500 else logging.WARNING
        logger.log(
            level,
            message,
            extra={"error_kind": self.kind, "status_code": status_code, **log_context},
        )
        super().__init__(status_code=status_code, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidInputError(AppError):
    """Malformed or missing request shape (400)."""

    kind = "InvalidInput"

    def __init__(self, message: str, **log_context: Any) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST, **log_context)


class InvalidIdentifierError(AppError):
    """Identifier is not a well-formed UUID (400)."""

    kind = "InvalidIdentifier"

    def __init__(self, entity: str, entity_id: Any = None, **log_context: Any) -> None:
        super().__init__(
            f"Invalid {entity} ID: {entity_id}" if entity_id is not None else f"Invalid {entity} ID",
            status.HTTP_400_BAD_REQUEST,
            entity=entity,
            **log_context,
        )


class InvalidStatusError(AppError):
    """Unknown order status (400)."""

    kind = "InvalidStatus"

    def __init__(self, status_value: Any, **log_context: Any) -> None:
        super().__init__(
            f"Invalid order status: {status_value}",
            status.HTTP_400_BAD_REQUEST,
            **log_context,
        )


class InvalidQuantityError(AppError):
    """Quantity is not a positive integer (400)."""

    kind = "InvalidQuantity"

    def __init__(self, dish_name: str, **log_context: Any) -> None:
        super().__init__(
            f"Invalid quantity for dish {dish_name}",
            status.HTTP_400_BAD_REQUEST,
            **log_context,
        )


class InvalidPriceError(AppError):
    """Price is negative or not numeric (400)."""

    kind = "InvalidPrice"

    def __init__(self, message: str = "Invalid dish price", **log_context: Any) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST, **log_context)


class InvalidTransitionError(AppError):
    """Status change not allowed by the order workflow (409)."""

    kind = "InvalidTransition"

    def __init__(self, current: str, requested: str, **log_context: Any) -> None:
        super().__init__(
            f"Cannot change order status from {current} to {requested}",
            status.HTTP_409_CONFLICT,
            **log_context,
        )


class ConcurrentUpdateError(AppError):
    """Row changed between read and conditional write (409)."""

    kind = "ConcurrentUpdate"

    def __init__(self, entity: str, entity_id: str, **log_context: Any) -> None:
        super().__init__(
            f"{entity} {entity_id} was modified concurrently, reload and retry",
            status.HTTP_409_CONFLICT,
            **log_context,
        )


class NotFoundError(AppError):
    """No matching row, including rows hidden by access policy (404)."""

    kind = "NotFound"

    def __init__(self, entity: str, entity_id: Any = None, **log_context: Any) -> None:
        if entity_id is not None:
            message = f"{entity} with id {entity_id} not found"
        else:
            message = f"{entity} not found"
        super().__init__(message, status.HTTP_404_NOT_FOUND, entity=entity, **log_context)


class UnavailableError(AppError):
    """Referenced dish exists but is inactive (400)."""

    kind = "Unavailable"

    def __init__(self, dish_name: str, **log_context: Any) -> None:
        super().__init__(
            f"Dish {dish_name} is no longer available",
            status.HTTP_400_BAD_REQUEST,
            **log_context,
        )


class UnauthorizedError(AppError):
    """No valid credentials for a protected action (401)."""

    kind = "Unauthorized"

    def __init__(self, message: str = "Missing API key", **log_context: Any) -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, **log_context)


class UpstreamFailureError(AppError):
    """Persistence or AI service returned an error (502)."""

    kind = "UpstreamFailure"

    def __init__(self, message: str, **log_context: Any) -> None:
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, **log_context)
