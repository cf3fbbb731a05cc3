"""Admin gate used by the FastAPI routes.

Public routes never call these. Admin routes depend on ``require_admin_key``;
routes that are public but unlock extra data for admins use
``is_admin_request``.
"""

from restaurant_ordering_service.auth.api_key_validator import APIKeyValidator
from restaurant_ordering_service.utils.exceptions import UnauthorizedError


def require_admin_key(x_api_key: str | None, validator: APIKeyValidator) -> str:
    """Validate the X-API-Key header of an admin request.

    Args:
        x_api_key: Raw header value, None when absent
        validator: Configured key validator

    Returns:
        str: The validated API key

    Raises:
        UnauthorizedError: 401 if the key is missing or unknown
    """
    if not x_api_key:
        raise UnauthorizedError("Missing API key")

    if not validator.validate(x_api_key):
        raise UnauthorizedError("Invalid API key")

    return x_api_key


def is_admin_request(x_api_key: str | None, validator: APIKeyValidator) -> bool:
    """Return True if an optional X-API-Key header carries a valid key."""
    return bool(x_api_key) and validator.validate(x_api_key)
