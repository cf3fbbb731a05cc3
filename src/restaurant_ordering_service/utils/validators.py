"""Field validators shared by the order and menu services."""

import re
from decimal import Decimal, DecimalException
from typing import Any

from boto3.dynamodb.types import DYNAMODB_CONTEXT

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# largest quantity accepted on a single order line
MAX_QUANTITY = 1000


def is_valid_uuid(value: Any) -> bool:
    """Check that a value is a version 1-5 UUID string."""
    return isinstance(value, str) and UUID_PATTERN.match(value) is not None


def fits_dynamodb_number(value: Any) -> bool:
    """Check that a number is stored by DynamoDB without rounding or overflow.

    DynamoDB numbers hold at most 38 significant digits with exponents
    between -130 and +125. Floats are judged by their shortest repr.
    """
    if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
        return False
    try:
        number = DYNAMODB_CONTEXT.create_decimal(str(value))
    except DecimalException:
        return False
    return number.is_finite()


def is_valid_price(value: Any) -> bool:
    """Check that a value is a non-negative number DynamoDB can store."""
    if not fits_dynamodb_number(value):
        return False
    return value >= 0


def is_valid_quantity(value: Any) -> bool:
    """Check that a value is a positive integer no greater than MAX_QUANTITY.

    Floats with an integral value (``2.0``) are accepted, booleans are not.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer() and 0 < value <= MAX_QUANTITY
    return isinstance(value, int) and 0 < value <= MAX_QUANTITY


def is_storable_document(value: Any) -> bool:
    """Check that every number nested in a JSON-like value fits DynamoDB."""
    if isinstance(value, dict):
        return all(is_storable_document(v) for v in value.values())
    if isinstance(value, list):
        return all(is_storable_document(v) for v in value)
    if isinstance(value, int | float | Decimal) and not isinstance(value, bool):
        return fits_dynamodb_number(value)
    return True


def validate_string_length(value: Any, min_length: int, max_length: int) -> bool:
    """Check that a value is a string within the given length bounds."""
    return isinstance(value, str) and min_length <= len(value) <= max_length
