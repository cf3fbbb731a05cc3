"""Admin API key validation.

Admin callers send a shared key in the X-API-Key header. Keys come from the
comma-separated ADMIN_API_KEY setting and are compared in constant time.
"""

import hmac


def parse_api_keys(value: str | None) -> list[str]:
    """Split a comma-separated key setting, dropping blanks and surrounding spaces."""
    if not value:
        return []
    return [key.strip() for key in value.split(",") if key.strip()]


class APIKeyValidator:
    """Checks admin API keys against the configured set."""

    def __init__(self, api_keys: list[str]) -> None:
        """Initialize validator with list of valid API keys.

        Args:
            api_keys: List of valid API key strings

        Raises:
            ValueError: If no non-blank key is given
        """
        keys = [key for key in api_keys if key]
        if not keys:
            raise ValueError("At least one API key must be provided")

        self._keys = [key.encode() for key in dict.fromkeys(keys)]

    def validate(self, api_key: str) -> bool:
        """Return True if the key matches one of the configured keys."""
        if not api_key:
            return False

        candidate = api_key.encode()
        # no early exit
        matches = [hmac.compare_digest(candidate, key) for key in self._keys]
        return any(matches)
