"""Dish and menu data models.

These models represent the catalog tables (dishes, menus and the menu/dish
join table) and the admin request payloads that create or change them.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Dish(BaseModel):
    """Sellable menu item."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier (UUID) for the dish")
    name: str = Field(..., description="Dish name")
    price: Decimal = Field(..., description="Current dish price", ge=0)
    category: str = Field(..., description="Dish category")
    active: bool = Field(default=True, description="Whether the dish can be listed and ordered")
    description: str | None = Field(None, description="Dish description")
    tags: list[str] = Field(default_factory=list, description="Short labels such as 'Spicy'")
    pairing: str | None = Field(None, description="Suggested beverage or side")
    ingredient_suggestions: list[str] = Field(
        default_factory=list, description="Suggested creative additions"
    )
    image_url: str | None = Field(None, description="URL to dish image")
    is_ai_generated: bool = Field(default=False, description="Whether AI drafted the description")
    created_at: datetime = Field(..., description="Creation timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "category": self.category,
            "active": self.active,
            "tags": self.tags,
            "ingredient_suggestions": self.ingredient_suggestions,
            "is_ai_generated": self.is_ai_generated,
            "created_at": self.created_at.isoformat(),
        }

        for key in ("description", "pairing", "image_url"):
            value = getattr(self, key)
            if value is not None:
                item[key] = value

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Dish":
        """Create Dish from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Dish: Parsed model instance
        """
        return cls(
            id=item["id"],
            name=item["name"],
            price=Decimal(str(item["price"])),
            category=item["category"],
            active=item.get("active", True),
            description=item.get("description"),
            tags=list(item.get("tags", [])),
            pairing=item.get("pairing"),
            ingredient_suggestions=list(item.get("ingredient_suggestions", [])),
            image_url=item.get("image_url"),
            is_ai_generated=item.get("is_ai_generated", False),
            created_at=datetime.fromisoformat(item["created_at"]),
        )


class Menu(BaseModel):
    """Named, orderable grouping of dishes."""

    id: str = Field(..., description="Unique identifier (UUID) for the menu")
    name: str = Field(..., description="Menu name")
    description: str | None = Field(None, description="Menu description")
    active: bool = Field(default=True, description="Whether the menu is visible")
    created_at: datetime = Field(..., description="Creation timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format."""
        item: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "active": self.active,
            "created_at": self.created_at.isoformat(),
        }

        if self.description is not None:
            item["description"] = self.description

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Menu":
        """Create Menu from DynamoDB item."""
        return cls(
            id=item["id"],
            name=item["name"],
            description=item.get("description"),
            active=item.get("active", True),
            created_at=datetime.fromisoformat(item["created_at"]),
        )


class DishCreate(BaseModel):
    """Admin payload for creating a dish.

    Fields are loosely typed here; length and price rules are enforced by the
    menu service so that violations surface as application errors.
    """

    name: str | None = None
    price: Decimal | None = None
    category: str | None = None
    description: str | None = None
    active: bool = True
    tags: list[str] = Field(default_factory=list)
    pairing: str | None = None
    ingredient_suggestions: list[str] = Field(default_factory=list)
    image_url: str | None = None
    is_ai_generated: bool = False


class DishUpdate(BaseModel):
    """Admin payload for a partial dish update. Only set fields are applied."""

    name: str | None = None
    price: Decimal | None = None
    category: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    pairing: str | None = None
    ingredient_suggestions: list[str] | None = None
    image_url: str | None = None
    is_ai_generated: bool | None = None


class DishActiveUpdate(BaseModel):
    """Payload toggling dish visibility."""

    active: bool


class MenuCreate(BaseModel):
    """Admin payload for creating a menu."""

    name: str | None = None
    description: str | None = None
    active: bool = True


class MenuUpdate(BaseModel):
    """Admin payload for a partial menu update."""

    name: str | None = None
    description: str | None = None
    active: bool | None = None


class DishPage(BaseModel):
    """One page of a dish listing with the total count of matches."""

    items: list[Dish]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
