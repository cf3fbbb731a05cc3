"""Shared pytest fixtures and configuration for all tests."""

import os

# Entry point modules skip building the real app when imported under test
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import UTC, datetime  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from restaurant_ordering_service.models.menu_models import Dish, Menu  # noqa: E402
from restaurant_ordering_service.models.order_models import (  # noqa: E402
    Order,
    OrderItem,
    OrderStatusEnum,
)

BURGER_ID = "3f1c2a4e-8b7d-4c6a-9e5f-1a2b3c4d5e6f"
SALAD_ID = "7a8b9c0d-1e2f-4a3b-8c4d-5e6f7a8b9c0d"
ORDER_ID = "0e1d2c3b-4a59-4687-b7c6-d5e4f3a2b1c0"
MENU_ID = "9d8c7b6a-5f4e-4d3c-a2b1-c0d9e8f7a6b5"


@pytest.fixture
def burger() -> Dish:
    """Fixture providing an active dish priced 12.50."""
    return Dish(
        id=BURGER_ID,
        name="Cheeseburger",
        price=Decimal("12.50"),
        category="Burgers",
        description="Classic beef cheeseburger",
        created_at=datetime(2024, 1, 10, 12, 0, tzinfo=UTC),
    )


@pytest.fixture
def salad() -> Dish:
    """Fixture providing an active dish priced 7.00."""
    return Dish(
        id=SALAD_ID,
        name="Caesar Salad",
        price=Decimal("7.00"),
        category="Salads",
        created_at=datetime(2024, 1, 11, 12, 0, tzinfo=UTC),
    )


@pytest.fixture
def menu() -> Menu:
    """Fixture providing an active menu."""
    return Menu(
        id=MENU_ID,
        name="Lunch",
        description="Weekday lunch",
        created_at=datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
    )


@pytest.fixture
def pending_order() -> Order:
    """Fixture providing a pending order totalling 32.00."""
    return Order(
        id=ORDER_ID,
        total_price=Decimal("32.00"),
        status=OrderStatusEnum.PENDING,
        created_at=datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
    )


@pytest.fixture
def order_items() -> list[OrderItem]:
    """Fixture providing the line items of the pending order."""
    created = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
    return [
        OrderItem(
            order_id=ORDER_ID,
            line_number=1,
            dish_id=BURGER_ID,
            quantity=2,
            unit_price=Decimal("12.50"),
            created_at=created,
        ),
        OrderItem(
            order_id=ORDER_ID,
            line_number=2,
            dish_id=SALAD_ID,
            quantity=1,
            unit_price=Decimal("7.00"),
            created_at=created,
        ),
    ]
