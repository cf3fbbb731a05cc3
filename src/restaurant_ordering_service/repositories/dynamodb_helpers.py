"""Small helpers shared by the DynamoDB repositories."""

import logging
from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import Table

from restaurant_ordering_service.utils.exceptions import UpstreamFailureError

logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def is_conditional_check_failure(error: ClientError) -> bool:
    """Return True if a ClientError came from a failed ConditionExpression."""
    return error.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED


def upstream_failure(action: str, error: ClientError) -> UpstreamFailureError:
    """Build the application error for a failed DynamoDB call."""
    code = error.response.get("Error", {}).get("Code", "Unknown")
    return UpstreamFailureError(f"Failed to {action}: {code}", dynamodb_error=str(error))


def scan_all(table: Table, **scan_kwargs: Any) -> list[dict[str, Any]]:
    """Scan a table following LastEvaluatedKey until every page is read.

    Args:
        table: DynamoDB table resource
        **scan_kwargs: Extra arguments passed to every scan call

    Returns:
        list: All items returned by the scan
    """
    response = table.scan(**scan_kwargs)
    items = list(response.get("Items", []))

    while "LastEvaluatedKey" in response:
        response = table.scan(ExclusiveStartKey=response["LastEvaluatedKey"], **scan_kwargs)
        items.extend(response.get("Items", []))

    return items


def query_all(table: Table, **query_kwargs: Any) -> list[dict[str, Any]]:
    """Query a table following LastEvaluatedKey until every page is read."""
    response = table.query(**query_kwargs)
    items = list(response.get("Items", []))

    while "LastEvaluatedKey" in response:
        response = table.query(ExclusiveStartKey=response["LastEvaluatedKey"], **query_kwargs)
        items.extend(response.get("Items", []))

    return items


def build_update_expression(
    fields: dict[str, Any],
) -> tuple[str, dict[str, str], dict[str, Any]]:
    """Build a SET UpdateExpression for the given attributes.

    Attribute names are always aliased so reserved words such as ``name`` and
    ``status`` can be updated.

    Args:
        fields: Attribute names mapped to their new values (must not be empty)

    Returns:
        tuple: (UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues)
    """
    assignments = []
    names: dict[str, str] = {}
    values: dict[str, Any] = {}

    for index, (key, value) in enumerate(fields.items()):
        assignments.append(f"#f{index} = :v{index}")
        names[f"#f{index}"] = key
        values[f":v{index}"] = value

    return "SET " + ", ".join(assignments), names, values
