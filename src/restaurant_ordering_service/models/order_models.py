"""Order, line item and cart models.

Orders are stored as a header row plus one row per line item. Line items
carry the unit price captured when the order was placed, so later dish price
changes never alter past orders.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class OrderStatusEnum(str, Enum):
    """Enumeration of order status values."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELED = "canceled"


# completed and canceled are terminal
ALLOWED_TRANSITIONS: dict[OrderStatusEnum, frozenset[OrderStatusEnum]] = {
    OrderStatusEnum.PENDING: frozenset({OrderStatusEnum.CONFIRMED, OrderStatusEnum.CANCELED}),
    OrderStatusEnum.CONFIRMED: frozenset({OrderStatusEnum.COMPLETED, OrderStatusEnum.CANCELED}),
    OrderStatusEnum.COMPLETED: frozenset(),
    OrderStatusEnum.CANCELED: frozenset(),
}


def can_transition(current: OrderStatusEnum, requested: OrderStatusEnum) -> bool:
    """Return True if an order may move from ``current`` to ``requested``.

    Re-applying the current status is always allowed.
    """
    return current == requested or requested in ALLOWED_TRANSITIONS[current]


class Order(BaseModel):
    """Order header row."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier (UUID) for the order")
    total_price: Decimal = Field(..., description="Server-computed order total", ge=0)
    status: OrderStatusEnum = Field(..., description="Current workflow status")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last status change timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "total_price": self.total_price,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Order":
        """Create Order from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Order: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": item["id"],
            "total_price": Decimal(str(item["total_price"])),
            "status": OrderStatusEnum(item["status"]),
            "created_at": datetime.fromisoformat(item["created_at"]),
        }

        if "updated_at" in item:
            data["updated_at"] = datetime.fromisoformat(item["updated_at"])

        return cls(**data)


class OrderItem(BaseModel):
    """Line item row. Never mutated after creation."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    order_id: str = Field(..., description="Parent order identifier")
    line_number: int = Field(..., description="Position of the line within the order", ge=1)
    dish_id: str = Field(..., description="Referenced dish identifier")
    quantity: int = Field(..., description="Ordered quantity", gt=0)
    unit_price: Decimal = Field(..., description="Dish price captured at order time", ge=0)
    created_at: datetime = Field(..., description="Creation timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format."""
        return {
            "order_id": self.order_id,
            "line_number": self.line_number,
            "dish_id": self.dish_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "OrderItem":
        """Create OrderItem from DynamoDB item."""
        return cls(
            order_id=item["order_id"],
            line_number=int(item["line_number"]),
            dish_id=item["dish_id"],
            quantity=int(item["quantity"]),
            unit_price=Decimal(str(item["unit_price"])),
            created_at=datetime.fromisoformat(item["created_at"]),
        )


class OrderItemDetail(OrderItem):
    """Line item joined with the referenced dish name for display."""

    dish_name: str | None = Field(None, description="Dish name, None if the dish was deleted")
    dish_category: str | None = Field(None, description="Dish category, None if deleted")


class OrderDetail(Order):
    """Order header with its expanded line items."""

    items: list[OrderItemDetail] = Field(default_factory=list)


class CartItem(BaseModel):
    """One caller-submitted cart entry.

    ``quantity`` is left untyped so that non-integer values reach the pricing
    step and are rejected there as invalid quantities.
    """

    dish_id: str | None = Field(
        None, validation_alias=AliasChoices("dish_id", "dishId", "id")
    )
    quantity: Any = None


class PlaceOrderRequest(BaseModel):
    """Order placement payload.

    ``total`` is the client's display total. It is accepted for compatibility
    and never used for pricing.
    """

    items: list[CartItem] | None = None
    total: Decimal | None = None


class StatusUpdateRequest(BaseModel):
    """Order status change payload. Validated against the enum by the service."""

    status: str


class VettedLineItem(BaseModel):
    """Cart entry checked against the current dish row."""

    dish_id: str
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)

    @property
    def line_total(self) -> Decimal:
        """Unit price multiplied by quantity."""
        return self.unit_price * self.quantity


class PricedCart(BaseModel):
    """Authoritative total and vetted line items for a cart."""

    order_total: Decimal
    line_items: list[VettedLineItem]
