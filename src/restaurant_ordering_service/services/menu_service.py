"""Menu service for dish and menu administration.

Deletion semantics are fixed per entity: dishes are hard deleted (and
unlinked from every menu), menus are soft deleted by clearing ``active``.
Hiding a dish without deleting it is done with ``set_dish_active``.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from restaurant_ordering_service.models.menu_models import (
    Dish,
    DishCreate,
    DishPage,
    DishUpdate,
    Menu,
    MenuCreate,
    MenuUpdate,
)
from restaurant_ordering_service.repositories.menu_repositories import (
    DishRepository,
    MenuRepository,
)
from restaurant_ordering_service.utils.exceptions import (
    InvalidIdentifierError,
    InvalidInputError,
    InvalidPriceError,
    NotFoundError,
)
from restaurant_ordering_service.utils.validators import (
    is_valid_price,
    is_valid_uuid,
    validate_string_length,
)

logger = logging.getLogger(__name__)

DISH_NAME_LENGTH = (2, 100)
DISH_CATEGORY_LENGTH = (2, 50)
DISH_DESCRIPTION_LENGTH = (10, 500)
MENU_NAME_LENGTH = (2, 50)
MAX_PAGE_SIZE = 100
# explicit nulls here are rejected by validation or clear the attribute; others are ignored
EXPLICIT_NULL_FIELDS = frozenset({"name", "price", "category", "description", "pairing", "image_url"})


class MenuService:
    """Service for dish and menu CRUD with field validation."""

    def __init__(self, dish_repository: DishRepository, menu_repository: MenuRepository) -> None:
        """Initialize the MenuService.

        Args:
            dish_repository: Repository for dishes
            menu_repository: Repository for menus and menu/dish links
        """
        self.dish_repository = dish_repository
        self.menu_repository = menu_repository

    # Dishes

    async def list_dishes(self, admin: bool = False) -> list[Dish]:
        """List dishes. Public callers only see active dishes."""
        return self.dish_repository.list_all(active=None if admin else True)

    async def list_dishes_paginated(
        self,
        page: int,
        page_size: int,
        search: str | None = None,
        admin: bool = False,
        active: bool | None = None,
    ) -> DishPage:
        """List one page of dishes, newest first.

        Args:
            page: 1-based page number
            page_size: Number of dishes per page
            search: Case-insensitive substring matched against name or category
            admin: Whether inactive dishes may be listed
            active: Explicit active filter; overrides the public default

        Returns:
            DishPage with the requested slice and the total number of matches
        """
        if page < 1:
            raise InvalidInputError("Page must be 1 or greater")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise InvalidInputError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")

        if active is None and not admin:
            active = True

        dishes = self.dish_repository.list_all(active=active)

        if search:
            needle = search.lower()
            dishes = [
                d for d in dishes if needle in d.name.lower() or needle in d.category.lower()
            ]

        offset = (page - 1) * page_size
        return DishPage(
            items=dishes[offset : offset + page_size],
            total=len(dishes),
            page=page,
            page_size=page_size,
        )

    async def search_dishes(self, query: str | None) -> list[Dish]:
        """Find active dishes whose name contains the query, ignoring case."""
        if not query:
            return []

        needle = query.lower()
        return [d for d in self.dish_repository.list_all(active=True) if needle in d.name.lower()]

    async def get_dish(self, dish_id: str) -> Dish:
        """Get a dish by id.

        Raises:
            InvalidIdentifierError: If the id is not a UUID
            NotFoundError: If no dish matches
        """
        if not is_valid_uuid(dish_id):
            raise InvalidIdentifierError("Dish", dish_id)

        dish = self.dish_repository.get_by_id(dish_id)
        if dish is None:
            raise NotFoundError("Dish", dish_id)
        return dish

    async def create_dish(self, data: DishCreate) -> Dish:
        """Validate and store a new dish."""
        self._validate_dish_fields(data.model_dump(), partial=False)

        dish = Dish(
            id=str(uuid.uuid4()),
            created_at=datetime.now(UTC),
            **data.model_dump(),
        )
        self.dish_repository.create(dish)
        logger.info(f"Created dish {dish.id} ({dish.name})")
        return dish

    async def update_dish(self, dish_id: str, data: DishUpdate) -> Dish:
        """Apply a partial update to a dish. Only provided fields are validated."""
        if not is_valid_uuid(dish_id):
            raise InvalidIdentifierError("Dish", dish_id)

        fields = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in EXPLICIT_NULL_FIELDS
        }
        self._validate_dish_fields(fields, partial=True)

        dish = self.dish_repository.update(dish_id, fields)
        if dish is None:
            raise NotFoundError("Dish", dish_id)
        return dish

    async def set_dish_active(self, dish_id: str, active: bool) -> Dish:
        """Show or hide a dish without deleting it."""
        if not is_valid_uuid(dish_id):
            raise InvalidIdentifierError("Dish", dish_id)

        dish = self.dish_repository.update(dish_id, {"active": active})
        if dish is None:
            raise NotFoundError("Dish", dish_id)
        return dish

    async def delete_dish(self, dish_id: str) -> None:
        """Permanently delete a dish and unlink it from all menus.

        Past order items keep their dish id and frozen unit price.
        """
        if not is_valid_uuid(dish_id):
            raise InvalidIdentifierError("Dish", dish_id)

        if not self.dish_repository.delete(dish_id):
            raise NotFoundError("Dish", dish_id)

        unlinked = self.menu_repository.detach_dish_from_all(dish_id)
        logger.info(f"Deleted dish {dish_id}, removed from {unlinked} menus")

    # Menus

    async def list_active_menus(self) -> list[Menu]:
        """List menus visible to customers."""
        return self.menu_repository.list_all(active=True)

    async def list_all_menus(self) -> list[Menu]:
        """List every menu, including inactive ones."""
        return self.menu_repository.list_all()

    async def get_menu(self, menu_id: str) -> Menu:
        """Get a menu by id."""
        if not is_valid_uuid(menu_id):
            raise InvalidIdentifierError("Menu", menu_id)

        menu = self.menu_repository.get_by_id(menu_id)
        if menu is None:
            raise NotFoundError("Menu", menu_id)
        return menu

    async def create_menu(self, data: MenuCreate) -> Menu:
        """Validate and store a new menu."""
        if not validate_string_length(data.name, *MENU_NAME_LENGTH):
            raise InvalidInputError("Menu name must be between 2 and 50 characters")

        menu = Menu(
            id=str(uuid.uuid4()),
            name=data.name,
            description=data.description,
            active=data.active,
            created_at=datetime.now(UTC),
        )
        self.menu_repository.create(menu)
        logger.info(f"Created menu {menu.id} ({menu.name})")
        return menu

    async def update_menu(self, menu_id: str, data: MenuUpdate) -> Menu:
        """Apply a partial update to a menu."""
        if not is_valid_uuid(menu_id):
            raise InvalidIdentifierError("Menu", menu_id)

        fields = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in ("name", "description")
        }
        if "name" in fields and not validate_string_length(fields["name"], *MENU_NAME_LENGTH):
            raise InvalidInputError("Menu name must be between 2 and 50 characters")

        menu = self.menu_repository.update(menu_id, fields)
        if menu is None:
            raise NotFoundError("Menu", menu_id)
        return menu

    async def delete_menu(self, menu_id: str) -> Menu:
        """Soft delete a menu by marking it inactive."""
        return await self.update_menu(menu_id, MenuUpdate(active=False))

    async def attach_dish_to_menu(self, menu_id: str, dish_id: str) -> None:
        """Link a dish to a menu. Linking twice is a no-op."""
        self._require_ids(menu_id, dish_id)
        await self.get_menu(menu_id)
        await self.get_dish(dish_id)
        self.menu_repository.attach_dish(menu_id, dish_id)

    async def detach_dish_from_menu(self, menu_id: str, dish_id: str) -> None:
        """Remove a dish from a menu."""
        self._require_ids(menu_id, dish_id)
        self.menu_repository.detach_dish(menu_id, dish_id)

    async def list_menu_dishes(self, menu_id: str) -> list[Dish]:
        """List the active dishes linked to a menu."""
        if not is_valid_uuid(menu_id):
            raise InvalidIdentifierError("Menu", menu_id)

        dish_ids = self.menu_repository.list_dish_ids(menu_id)
        if not dish_ids:
            return []

        dishes = self.dish_repository.get_many(dish_ids)
        return [dishes[i] for i in dish_ids if i in dishes and dishes[i].active]

    def _require_ids(self, menu_id: str, dish_id: str) -> None:
        if not is_valid_uuid(menu_id) or not is_valid_uuid(dish_id):
            raise InvalidInputError("Invalid ID provided")

    def _validate_dish_fields(self, fields: dict[str, Any], partial: bool) -> None:
        if not partial or "name" in fields:
            if not validate_string_length(fields.get("name"), *DISH_NAME_LENGTH):
                raise InvalidInputError("Dish name must be between 2 and 100 characters")

        if not partial or "price" in fields:
            if not is_valid_price(fields.get("price")):
                raise InvalidPriceError()

        if not partial or "category" in fields:
            if not validate_string_length(fields.get("category"), *DISH_CATEGORY_LENGTH):
                raise InvalidInputError("Category must be between 2 and 50 characters")

        description = fields.get("description")
        if description and not validate_string_length(description, *DISH_DESCRIPTION_LENGTH):
            raise InvalidInputError("Description must be between 10 and 500 characters")
