"""AI action log and report models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from restaurant_ordering_service.models.order_models import OrderDetail


class AIActionEnum(str, Enum):
    """What an admin did with an AI-drafted dish suggestion."""

    GENERATED = "generated"
    APPLIED = "applied"
    DISCARDED = "discarded"


def metadata_to_dynamodb(value: Any) -> Any:
    """Replace floats with Decimals, which is what boto3 serializes as numbers."""
    if isinstance(value, dict):
        return {k: metadata_to_dynamodb(v) for k, v in value.items()}
    if isinstance(value, list):
        return [metadata_to_dynamodb(v) for v in value]
    if isinstance(value, float):
        return Decimal(repr(value))
    return value


def metadata_from_dynamodb(value: Any) -> Any:
    """Turn stored Decimals back into ints or floats."""
    if isinstance(value, dict):
        return {k: metadata_from_dynamodb(v) for k, v in value.items()}
    if isinstance(value, list):
        return [metadata_from_dynamodb(v) for v in value]
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


class AIActionLog(BaseModel):
    """Append-only audit record of an AI suggestion event."""

    id: str = Field(..., description="Unique log identifier")
    action: AIActionEnum = Field(..., description="Recorded action")
    dish_id: str | None = Field(None, description="Dish the suggestion was for")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Free-form context")
    created_at: datetime = Field(..., description="Creation timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format."""
        item: dict[str, Any] = {
            "id": self.id,
            "action": self.action.value,
            "metadata": metadata_to_dynamodb(self.metadata),
            "created_at": self.created_at.isoformat(),
        }

        if self.dish_id is not None:
            item["dish_id"] = self.dish_id

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "AIActionLog":
        """Create AIActionLog from DynamoDB item."""
        return cls(
            id=item["id"],
            action=AIActionEnum(item["action"]),
            dish_id=item.get("dish_id"),
            metadata=metadata_from_dynamodb(dict(item.get("metadata", {}))),
            created_at=datetime.fromisoformat(item["created_at"]),
        )


class AIActionRequest(BaseModel):
    """Payload for recording an AI action."""

    action: AIActionEnum
    dish_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class NameValue(BaseModel):
    """Label/count pair used by distribution charts."""

    name: str
    value: int


class DailyTrend(BaseModel):
    """Order count and revenue for one calendar day (UTC)."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    date: str
    count: int
    revenue: Decimal


class CategoryPerformance(BaseModel):
    """Revenue and units sold for one dish category."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    category: str
    revenue: Decimal
    orders: int


class OrderSummary(BaseModel):
    """Headline order figures for a period."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    total_orders: int
    total_revenue: Decimal
    avg_ticket: Decimal


class OrderReport(BaseModel):
    """Order report for a date range."""

    summary: OrderSummary
    trends: list[DailyTrend]
    status_distribution: list[NameValue]
    category_performance: list[CategoryPerformance]


class DishSummary(BaseModel):
    """Catalog size figures."""

    total_dishes: int
    active_dishes: int
    archived_dishes: int


class DishReport(BaseModel):
    """Catalog report."""

    summary: DishSummary
    category_distribution: list[NameValue]


class AIPerformanceSummary(BaseModel):
    """Counts per AI action and the share of generated suggestions applied."""

    generated: int = 0
    applied: int = 0
    discarded: int = 0
    approval_rate: str = "0.0%"


class AIPerformanceReport(BaseModel):
    """AI suggestion performance for a date range."""

    summary: AIPerformanceSummary
    logs: list[AIActionLog]


class DashboardSummary(BaseModel):
    """All-time order figures for the admin dashboard."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    total_orders: int
    total_revenue: Decimal
    status_distribution: dict[str, int]


class DashboardStats(BaseModel):
    """Admin dashboard payload."""

    summary: DashboardSummary
    recent_orders: list[OrderDetail]
