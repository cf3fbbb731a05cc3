"""DynamoDB repository classes for orders, line items and AI action logs.

An order header and its line items are written in a single
TransactWriteItems call, so either the whole order is stored or nothing is.
"""

import logging
from datetime import datetime
from typing import Any

from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_ordering_service.models.analytics_models import AIActionLog
from restaurant_ordering_service.models.order_models import Order, OrderItem, OrderStatusEnum
from restaurant_ordering_service.repositories.dynamodb_helpers import (
    is_conditional_check_failure,
    query_all,
    scan_all,
    upstream_failure,
)

logger = logging.getLogger(__name__)

# DynamoDB accepts at most 100 actions per transaction, one is the header
MAX_ITEMS_PER_ORDER = 99


class OrderRepository:
    """Repository for order headers and their line items.

    Orders use ``id`` as partition key. Line items use (order_id, line_number)
    as composite key.
    """

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        table_name: str,
        items_table_name: str,
    ) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the orders table
            items_table_name: Name of the order items table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)
        self.items_table_name = items_table_name
        self.items_table: Table = dynamodb_resource.Table(items_table_name)
        self._serializer = TypeSerializer()

    def _serialize(self, item: dict[str, Any]) -> dict[str, Any]:
        return {key: self._serializer.serialize(value) for key, value in item.items()}

    def create_order_with_items(self, order: Order, items: list[OrderItem]) -> None:
        """Write an order header and all of its line items atomically.

        Args:
            order: Order header to insert
            items: Line items belonging to the order

        Raises:
            UpstreamFailureError: If the transaction is rejected; nothing is written
        """
        transact_items: list[dict[str, Any]] = [
            {
                "Put": {
                    "TableName": self.table_name,
                    "Item": self._serialize(order.to_dynamodb_item()),
                    "ConditionExpression": "attribute_not_exists(id)",
                }
            }
        ]
        transact_items.extend(
            {
                "Put": {
                    "TableName": self.items_table_name,
                    "Item": self._serialize(item.to_dynamodb_item()),
                }
            }
            for item in items
        )

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            raise upstream_failure("create order", e) from e

        logger.info(f"Stored order {order.id} with {len(items)} line items")

    def get_order(self, order_id: str) -> Order | None:
        """Retrieve an order header by ID.

        Returns:
            Order if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"id": order_id})
        except ClientError as e:
            raise upstream_failure("get order", e) from e

        if "Item" not in response:
            return None

        return Order.from_dynamodb_item(response["Item"])

    def list_items(self, order_id: str) -> list[OrderItem]:
        """List the line items of an order in line order."""
        try:
            items = query_all(
                self.items_table,
                KeyConditionExpression="order_id = :oid",
                ExpressionAttributeValues={":oid": order_id},
            )
        except ClientError as e:
            raise upstream_failure("list order items", e) from e

        order_items = [OrderItem.from_dynamodb_item(item) for item in items]
        order_items.sort(key=lambda i: i.line_number)
        return order_items

    def list_orders(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[Order]:
        """List order headers, optionally restricted to a creation time range.

        Args:
            start: Inclusive lower bound on created_at
            end: Inclusive upper bound on created_at

        Returns:
            list: Orders sorted newest first
        """
        try:
            items = scan_all(self.table, **_created_at_filter(start, end))
        except ClientError as e:
            raise upstream_failure("list orders", e) from e

        orders = [Order.from_dynamodb_item(item) for item in items]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders

    def list_items_between(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[OrderItem]:
        """List line items across all orders created in a time range."""
        try:
            items = scan_all(self.items_table, **_created_at_filter(start, end))
        except ClientError as e:
            raise upstream_failure("list order items", e) from e

        return [OrderItem.from_dynamodb_item(item) for item in items]

    def update_status(
        self,
        order_id: str,
        expected_status: OrderStatusEnum,
        new_status: OrderStatusEnum,
        updated_at: datetime,
    ) -> Order | None:
        """Change an order's status if it still has the expected status.

        Args:
            order_id: Order identifier
            expected_status: Status the caller read before deciding on the change
            new_status: Status to write
            updated_at: Timestamp of the change

        Returns:
            Updated Order, or None if the order is missing or its status changed
        """
        try:
            response = self.table.update_item(
                Key={"id": order_id},
                UpdateExpression="SET #status = :status, updated_at = :updated_at",
                ConditionExpression="attribute_exists(id) AND #status = :expected",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={
                    ":status": new_status.value,
                    ":expected": expected_status.value,
                    ":updated_at": updated_at.isoformat(),
                },
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if is_conditional_check_failure(e):
                return None
            raise upstream_failure("update order status", e) from e

        return Order.from_dynamodb_item(response["Attributes"])


class AIActionLogRepository:
    """Repository for the append-only AI action log."""

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def save_log(self, log: AIActionLog) -> AIActionLog:
        """Append a log record."""
        try:
            self.table.put_item(
                Item=log.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(id)",
            )
        except ClientError as e:
            raise upstream_failure("save AI action log", e) from e

        return log

    def list_logs(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[AIActionLog]:
        """List log records in a time range, newest first."""
        try:
            items = scan_all(self.table, **_created_at_filter(start, end))
        except ClientError as e:
            raise upstream_failure("list AI action logs", e) from e

        logs = [AIActionLog.from_dynamodb_item(item) for item in items]
        logs.sort(key=lambda log: log.created_at, reverse=True)
        return logs


def _created_at_filter(start: datetime | None, end: datetime | None) -> dict[str, Any]:
    # created_at is stored as a UTC ISO 8601 string, which sorts chronologically
    if start is not None and end is not None:
        return {
            "FilterExpression": "created_at BETWEEN :start AND :end",
            "ExpressionAttributeValues": {":start": start.isoformat(), ":end": end.isoformat()},
        }
    if start is not None:
        return {
            "FilterExpression": "created_at >= :start",
            "ExpressionAttributeValues": {":start": start.isoformat()},
        }
    if end is not None:
        return {
            "FilterExpression": "created_at <= :end",
            "ExpressionAttributeValues": {":end": end.isoformat()},
        }
    return {}
