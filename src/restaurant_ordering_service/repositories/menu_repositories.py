"""DynamoDB repository classes for dishes and menus.

Reads return None when a row does not exist. DynamoDB failures are converted
to UpstreamFailureError so the API reports them as server faults.
"""

import logging
from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_ordering_service.models.menu_models import Dish, Menu
from restaurant_ordering_service.repositories.dynamodb_helpers import (
    build_update_expression,
    is_conditional_check_failure,
    query_all,
    scan_all,
    upstream_failure,
)

logger = logging.getLogger(__name__)

BATCH_GET_LIMIT = 100


class DishRepository:
    """Repository for dish CRUD operations.

    Manages dish records in DynamoDB with ``id`` as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_by_id(self, dish_id: str) -> Dish | None:
        """Retrieve a dish by ID.

        Args:
            dish_id: Dish identifier

        Returns:
            Dish if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"id": dish_id})
        except ClientError as e:
            raise upstream_failure("get dish", e) from e

        if "Item" not in response:
            return None

        return Dish.from_dynamodb_item(response["Item"])

    def get_many(self, dish_ids: list[str]) -> dict[str, Dish]:
        """Retrieve several dishes in batches.

        Args:
            dish_ids: Dish identifiers, duplicates allowed

        Returns:
            dict: Found dishes keyed by id (missing ids are absent)
        """
        unique_ids = list(dict.fromkeys(dish_ids))
        dishes: dict[str, Dish] = {}

        for start in range(0, len(unique_ids), BATCH_GET_LIMIT):
            chunk = unique_ids[start : start + BATCH_GET_LIMIT]
            request: dict[str, Any] = {self.table_name: {"Keys": [{"id": i} for i in chunk]}}

            try:
                while request:
                    response = self.dynamodb.batch_get_item(RequestItems=request)
                    for item in response.get("Responses", {}).get(self.table_name, []):
                        dish = Dish.from_dynamodb_item(item)
                        dishes[dish.id] = dish
                    request = response.get("UnprocessedKeys") or {}
            except ClientError as e:
                raise upstream_failure("batch get dishes", e) from e

        return dishes

    def list_all(self, active: bool | None = None) -> list[Dish]:
        """List dishes, optionally filtered by the active flag.

        Args:
            active: Only return dishes with this flag, or all dishes if None

        Returns:
            list: Dishes sorted newest first
        """
        scan_kwargs: dict[str, Any] = {}
        if active is not None:
            scan_kwargs = {
                "FilterExpression": "active = :active",
                "ExpressionAttributeValues": {":active": active},
            }

        try:
            items = scan_all(self.table, **scan_kwargs)
        except ClientError as e:
            raise upstream_failure("list dishes", e) from e

        dishes = [Dish.from_dynamodb_item(item) for item in items]
        dishes.sort(key=lambda d: d.created_at, reverse=True)
        return dishes

    def create(self, dish: Dish) -> Dish:
        """Insert a new dish.

        Args:
            dish: Dish to insert

        Returns:
            Dish: The stored dish
        """
        try:
            self.table.put_item(
                Item=dish.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(id)",
            )
        except ClientError as e:
            raise upstream_failure("create dish", e) from e

        return dish

    def update(self, dish_id: str, fields: dict[str, Any]) -> Dish | None:
        """Apply a partial update to an existing dish.

        Args:
            dish_id: Dish identifier
            fields: Attributes to overwrite

        Returns:
            Updated Dish, or None if no dish has this id
        """
        if not fields:
            return self.get_by_id(dish_id)

        expression, names, values = build_update_expression(fields)

        try:
            response = self.table.update_item(
                Key={"id": dish_id},
                UpdateExpression=expression,
                ConditionExpression="attribute_exists(id)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if is_conditional_check_failure(e):
                return None
            raise upstream_failure("update dish", e) from e

        return Dish.from_dynamodb_item(response["Attributes"])

    def delete(self, dish_id: str) -> bool:
        """Hard delete a dish.

        Args:
            dish_id: Dish identifier

        Returns:
            bool: True if a dish was deleted, False if none existed
        """
        try:
            self.table.delete_item(
                Key={"id": dish_id},
                ConditionExpression="attribute_exists(id)",
            )
        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            raise upstream_failure("delete dish", e) from e

        return True


class MenuRepository:
    """Repository for menus and the menu/dish join table.

    Menus use ``id`` as partition key. The join table uses (menu_id, dish_id)
    as composite key with a ``dish_id-index`` GSI for reverse lookups.
    """

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        table_name: str,
        menu_dishes_table_name: str,
    ) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the menus table
            menu_dishes_table_name: Name of the menu/dish join table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)
        self.menu_dishes_table_name = menu_dishes_table_name
        self.menu_dishes_table: Table = dynamodb_resource.Table(menu_dishes_table_name)

    def get_by_id(self, menu_id: str) -> Menu | None:
        """Retrieve a menu by ID."""
        try:
            response = self.table.get_item(Key={"id": menu_id})
        except ClientError as e:
            raise upstream_failure("get menu", e) from e

        if "Item" not in response:
            return None

        return Menu.from_dynamodb_item(response["Item"])

    def list_all(self, active: bool | None = None) -> list[Menu]:
        """List menus, optionally filtered by the active flag."""
        scan_kwargs: dict[str, Any] = {}
        if active is not None:
            scan_kwargs = {
                "FilterExpression": "active = :active",
                "ExpressionAttributeValues": {":active": active},
            }

        try:
            items = scan_all(self.table, **scan_kwargs)
        except ClientError as e:
            raise upstream_failure("list menus", e) from e

        menus = [Menu.from_dynamodb_item(item) for item in items]
        menus.sort(key=lambda m: m.created_at)
        return menus

    def create(self, menu: Menu) -> Menu:
        """Insert a new menu."""
        try:
            self.table.put_item(
                Item=menu.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(id)",
            )
        except ClientError as e:
            raise upstream_failure("create menu", e) from e

        return menu

    def update(self, menu_id: str, fields: dict[str, Any]) -> Menu | None:
        """Apply a partial update to an existing menu.

        Returns:
            Updated Menu, or None if no menu has this id
        """
        if not fields:
            return self.get_by_id(menu_id)

        expression, names, values = build_update_expression(fields)

        try:
            response = self.table.update_item(
                Key={"id": menu_id},
                UpdateExpression=expression,
                ConditionExpression="attribute_exists(id)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if is_conditional_check_failure(e):
                return None
            raise upstream_failure("update menu", e) from e

        return Menu.from_dynamodb_item(response["Attributes"])

    def attach_dish(self, menu_id: str, dish_id: str) -> None:
        """Link a dish to a menu. Re-attaching an existing link is a no-op."""
        try:
            self.menu_dishes_table.put_item(Item={"menu_id": menu_id, "dish_id": dish_id})
        except ClientError as e:
            raise upstream_failure("attach dish to menu", e) from e

    def detach_dish(self, menu_id: str, dish_id: str) -> None:
        """Remove the link between a dish and a menu."""
        try:
            self.menu_dishes_table.delete_item(Key={"menu_id": menu_id, "dish_id": dish_id})
        except ClientError as e:
            raise upstream_failure("detach dish from menu", e) from e

    def list_dish_ids(self, menu_id: str) -> list[str]:
        """List the ids of all dishes linked to a menu."""
        try:
            items = query_all(
                self.menu_dishes_table,
                KeyConditionExpression="menu_id = :mid",
                ExpressionAttributeValues={":mid": menu_id},
            )
        except ClientError as e:
            raise upstream_failure("list menu dishes", e) from e

        return [item["dish_id"] for item in items]

    def detach_dish_from_all(self, dish_id: str) -> int:
        """Remove a dish from every menu it is linked to.

        Uses the ``dish_id-index`` Global Secondary Index.

        Returns:
            int: Number of links removed
        """
        try:
            items = query_all(
                self.menu_dishes_table,
                IndexName="dish_id-index",
                KeyConditionExpression="dish_id = :did",
                ExpressionAttributeValues={":did": dish_id},
            )
            with self.menu_dishes_table.batch_writer() as batch:
                for item in items:
                    batch.delete_item(Key={"menu_id": item["menu_id"], "dish_id": dish_id})
        except ClientError as e:
            raise upstream_failure("detach dish from menus", e) from e

        return len(items)
