"""Unit tests for FastAPI endpoints."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from restaurant_ordering_service.handlers.api_handler import build_menu_context, create_app
from restaurant_ordering_service.models.ai_models import DishSuggestions
from restaurant_ordering_service.models.analytics_models import (
    AIActionEnum,
    AIActionLog,
    AIPerformanceReport,
    AIPerformanceSummary,
    DashboardStats,
    DashboardSummary,
    OrderReport,
    OrderSummary,
)
from restaurant_ordering_service.models.menu_models import Dish, DishPage, Menu
from restaurant_ordering_service.models.order_models import (
    Order,
    OrderDetail,
    OrderItem,
    OrderItemDetail,
    OrderStatusEnum,
)
from restaurant_ordering_service.services.ai_service import AIService
from restaurant_ordering_service.services.analytics_service import AnalyticsService
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService
from restaurant_ordering_service.utils.exceptions import (
    InvalidQuantityError,
    InvalidTransitionError,
    NotFoundError,
    UnavailableError,
    UpstreamFailureError,
)

ADMIN_HEADERS = {"X-API-Key": "test-api-key"}


def _detail(order: Order, items: list[OrderItem]) -> OrderDetail:
    return OrderDetail(
        **order.model_dump(),
        items=[OrderItemDetail(**item.model_dump(), dish_name="Cheeseburger") for item in items],
    )


@pytest.fixture
def client() -> TestClient:
    """Create a test client with mocked services."""
    app = create_app(
        order_service=MagicMock(spec=OrderService),
        menu_service=MagicMock(spec=MenuService),
        analytics_service=MagicMock(spec=AnalyticsService),
        ai_service=MagicMock(spec=AIService),
        api_keys=["test-api-key"],
    )
    return TestClient(app)


@pytest.mark.unit
class TestHealthEndpoint:
    """Test suite for health check endpoint."""

    def test_health_check(self, client: TestClient) -> None:
        """Test health check endpoint returns 200."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


@pytest.mark.unit
class TestPublicMenuEndpoints:
    """Test suite for public dish and menu endpoints."""

    def test_get_public_menu(self, client: TestClient, burger: Dish) -> None:
        """Test listing active dishes without a key."""
        client.app.state.menu_service.list_dishes = AsyncMock(return_value=[burger])

        response = client.get("/menu")

        assert response.status_code == 200
        assert response.json()[0]["name"] == "Cheeseburger"
        client.app.state.menu_service.list_dishes.assert_called_once_with(admin=False)

    def test_list_dishes_paginated(self, client: TestClient, burger: Dish) -> None:
        """Test the paginated listing."""
        client.app.state.menu_service.list_dishes_paginated = AsyncMock(
            return_value=DishPage(items=[burger], total=20, page=2, page_size=8)
        )

        response = client.get("/dishes?page=2&page_size=8&search=burg")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 20
        assert data["page"] == 2
        client.app.state.menu_service.list_dishes_paginated.assert_called_once_with(
            page=2, page_size=8, search="burg", admin=False, active=None
        )

    def test_admin_listing_requires_key(self, client: TestClient) -> None:
        """Test that admin listings without a valid key are unauthorized."""
        response = client.get("/dishes?admin=true")

        assert response.status_code == 401

    def test_admin_listing_with_key(self, client: TestClient, burger: Dish) -> None:
        """Test that admin listings include inactive dishes."""
        client.app.state.menu_service.list_dishes = AsyncMock(return_value=[burger])

        response = client.get("/dishes?admin=true", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        client.app.state.menu_service.list_dishes.assert_called_once_with(admin=True)

    def test_inactive_listing_requires_admin(self, client: TestClient) -> None:
        """Test that public callers cannot list inactive dishes."""
        response = client.get("/dishes?page=1&page_size=8&active=false")

        assert response.status_code == 401

    def test_search_dishes(self, client: TestClient, burger: Dish) -> None:
        """Test searching dishes by name."""
        client.app.state.menu_service.search_dishes = AsyncMock(return_value=[burger])

        response = client.get("/dishes/search?q=cheese")

        assert response.status_code == 200
        client.app.state.menu_service.search_dishes.assert_called_once_with("cheese")

    def test_get_dish_not_found(self, client: TestClient, burger: Dish) -> None:
        """Test that a missing dish is a 404."""
        client.app.state.menu_service.get_dish = AsyncMock(
            side_effect=NotFoundError("Dish", burger.id)
        )

        response = client.get(f"/dishes/{burger.id}")

        assert response.status_code == 404
        assert response.json() == {"detail": f"Dish with id {burger.id} not found"}

    def test_list_menus_and_menu_dishes(self, client: TestClient, menu: Menu, burger: Dish) -> None:
        """Test public menu listings."""
        client.app.state.menu_service.list_active_menus = AsyncMock(return_value=[menu])
        client.app.state.menu_service.list_menu_dishes = AsyncMock(return_value=[burger])

        menus = client.get("/menus")
        dishes = client.get(f"/menus/{menu.id}/dishes")

        assert menus.json()[0]["name"] == "Lunch"
        assert dishes.json()[0]["id"] == burger.id


@pytest.mark.unit
class TestOrderEndpoints:
    """Test suite for order endpoints."""

    def test_place_order(
        self, client: TestClient, pending_order: Order, order_items: list[OrderItem], burger: Dish
    ) -> None:
        """Test placing an order without a key."""
        client.app.state.order_service.place_order = AsyncMock(
            return_value=_detail(pending_order, order_items)
        )

        response = client.post(
            "/orders",
            json={"items": [{"id": burger.id, "quantity": 2}], "total": 0.01},
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["total_price"]) == Decimal("32.00")
        assert data["status"] == "pending"
        call = client.app.state.order_service.place_order.call_args
        assert call.kwargs["items"][0].dish_id == burger.id
        assert call.kwargs["client_total"] == Decimal("0.01")

    @pytest.mark.parametrize(
        "error",
        [InvalidQuantityError("Cheeseburger"), UnavailableError("Cheeseburger")],
    )
    def test_place_order_rejected(self, client: TestClient, error: Exception) -> None:
        """Test that pricing errors are 400s."""
        client.app.state.order_service.place_order = AsyncMock(side_effect=error)

        response = client.post("/orders", json={"items": []})

        assert response.status_code == 400
        assert "Cheeseburger" in response.json()["detail"]

    def test_get_order(
        self, client: TestClient, pending_order: Order, order_items: list[OrderItem]
    ) -> None:
        """Test reading an order."""
        client.app.state.order_service.get_order_details = AsyncMock(
            return_value=_detail(pending_order, order_items)
        )

        response = client.get(f"/orders/{pending_order.id}")

        assert response.status_code == 200
        assert len(response.json()["items"]) == 2

    def test_list_orders_requires_key(self, client: TestClient) -> None:
        """Test that listing orders is admin only."""
        response = client.get("/admin/orders")

        assert response.status_code == 401
        assert response.json() == {"detail": "Missing API key"}

    def test_list_orders_invalid_key(self, client: TestClient) -> None:
        """Test that a wrong key is rejected."""
        response = client.get("/admin/orders", headers={"X-API-Key": "wrong"})

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid API key"}

    def test_update_order_status(self, client: TestClient, pending_order: Order) -> None:
        """Test moving an order through the workflow."""
        confirmed = pending_order.model_copy(
            update={"status": OrderStatusEnum.CONFIRMED, "updated_at": datetime.now(UTC)}
        )
        client.app.state.order_service.update_order_status = AsyncMock(return_value=confirmed)

        response = client.patch(
            f"/admin/orders/{pending_order.id}/status",
            json={"status": "confirmed"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        client.app.state.order_service.update_order_status.assert_called_once_with(
            pending_order.id, "confirmed"
        )

    def test_update_order_status_conflict(self, client: TestClient, pending_order: Order) -> None:
        """Test that a disallowed transition is a 409."""
        client.app.state.order_service.update_order_status = AsyncMock(
            side_effect=InvalidTransitionError("completed", "pending")
        )

        response = client.patch(
            f"/admin/orders/{pending_order.id}/status",
            json={"status": "pending"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 409


@pytest.mark.unit
class TestAdminCatalogEndpoints:
    """Test suite for admin dish and menu endpoints."""

    def test_create_dish(self, client: TestClient, burger: Dish) -> None:
        """Test creating a dish."""
        client.app.state.menu_service.create_dish = AsyncMock(return_value=burger)

        response = client.post(
            "/admin/dishes",
            json={"name": "Cheeseburger", "price": 12.5, "category": "Burgers"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 201
        data = client.app.state.menu_service.create_dish.call_args.args[0]
        assert data.price == Decimal("12.5")

    def test_create_dish_requires_key(self, client: TestClient) -> None:
        """Test that dish creation is admin only."""
        response = client.post("/admin/dishes", json={"name": "Soup"})

        assert response.status_code == 401

    def test_update_and_toggle_dish(self, client: TestClient, burger: Dish) -> None:
        """Test partial update and visibility toggle."""
        client.app.state.menu_service.update_dish = AsyncMock(return_value=burger)
        client.app.state.menu_service.set_dish_active = AsyncMock(return_value=burger)

        update = client.patch(
            f"/admin/dishes/{burger.id}", json={"name": "Deluxe"}, headers=ADMIN_HEADERS
        )
        toggle = client.patch(
            f"/admin/dishes/{burger.id}/active", json={"active": False}, headers=ADMIN_HEADERS
        )

        assert update.status_code == 200
        assert toggle.status_code == 200
        client.app.state.menu_service.set_dish_active.assert_called_once_with(burger.id, False)

    def test_delete_dish(self, client: TestClient, burger: Dish) -> None:
        """Test deleting a dish."""
        client.app.state.menu_service.delete_dish = AsyncMock(return_value=None)

        response = client.delete(f"/admin/dishes/{burger.id}", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json() == {"message": "Dish deleted"}

    def test_menu_administration(self, client: TestClient, menu: Menu, burger: Dish) -> None:
        """Test menu creation, soft delete and dish links."""
        service = client.app.state.menu_service
        service.create_menu = AsyncMock(return_value=menu)
        service.delete_menu = AsyncMock(return_value=menu.model_copy(update={"active": False}))
        service.attach_dish_to_menu = AsyncMock(return_value=None)
        service.detach_dish_from_menu = AsyncMock(return_value=None)

        created = client.post("/admin/menus", json={"name": "Lunch"}, headers=ADMIN_HEADERS)
        deleted = client.delete(f"/admin/menus/{menu.id}", headers=ADMIN_HEADERS)
        attached = client.put(f"/admin/menus/{menu.id}/dishes/{burger.id}", headers=ADMIN_HEADERS)
        detached = client.delete(
            f"/admin/menus/{menu.id}/dishes/{burger.id}", headers=ADMIN_HEADERS
        )

        assert created.status_code == 201
        assert deleted.json()["active"] is False
        assert attached.status_code == 200
        assert detached.status_code == 200
        service.attach_dish_to_menu.assert_called_once_with(menu.id, burger.id)


@pytest.mark.unit
class TestAnalyticsEndpoints:
    """Test suite for admin analytics endpoints."""

    def test_dashboard(self, client: TestClient) -> None:
        """Test the dashboard summary."""
        client.app.state.analytics_service.get_dashboard_stats = AsyncMock(
            return_value=DashboardStats(
                summary=DashboardSummary(
                    total_orders=0,
                    total_revenue=Decimal("0"),
                    status_distribution={"pending": 0},
                ),
                recent_orders=[],
            )
        )

        response = client.get("/admin/dashboard", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()["summary"]["total_orders"] == 0

    def test_order_reports_with_range(self, client: TestClient) -> None:
        """Test that the requested period reaches the service."""
        client.app.state.analytics_service.get_order_reports = AsyncMock(
            return_value=OrderReport(
                summary=OrderSummary(
                    total_orders=0, total_revenue=Decimal("0"), avg_ticket=Decimal("0")
                ),
                trends=[],
                status_distribution=[],
                category_performance=[],
            )
        )

        response = client.get(
            "/admin/analytics/orders?start=2024-01-01T00:00:00Z&end=2024-01-31T00:00:00Z",
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        start, end = client.app.state.analytics_service.get_order_reports.call_args.args
        assert start == datetime(2024, 1, 1, tzinfo=UTC)
        assert end == datetime(2024, 1, 31, tzinfo=UTC)

    def test_ai_performance_default_range(self, client: TestClient) -> None:
        """Test that a missing range defaults to the last 30 days."""
        client.app.state.analytics_service.get_ai_performance = AsyncMock(
            return_value=AIPerformanceReport(summary=AIPerformanceSummary(), logs=[])
        )

        response = client.get("/admin/analytics/ai", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        start, end = client.app.state.analytics_service.get_ai_performance.call_args.args
        assert (end - start).days == 30

    def test_log_ai_action(self, client: TestClient, burger: Dish) -> None:
        """Test recording an AI action."""
        log = AIActionLog(
            id="l1", action=AIActionEnum.APPLIED, dish_id=burger.id, created_at=datetime.now(UTC)
        )
        client.app.state.analytics_service.log_ai_action = AsyncMock(return_value=log)

        response = client.post(
            "/admin/analytics/ai-actions",
            json={"action": "applied", "dish_id": burger.id},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 201
        assert response.json()["action"] == "applied"

    def test_log_ai_action_unknown_action(self, client: TestClient) -> None:
        """Test that an unknown action fails request validation."""
        response = client.post(
            "/admin/analytics/ai-actions", json={"action": "ignored"}, headers=ADMIN_HEADERS
        )

        assert response.status_code == 422


@pytest.mark.unit
class TestAIEndpoints:
    """Test suite for AI endpoints."""

    def test_chat_builds_context_from_menu(self, client: TestClient, burger: Dish) -> None:
        """Test that chat uses the active dishes when no context is sent."""
        client.app.state.menu_service.list_dishes = AsyncMock(return_value=[burger])
        client.app.state.ai_service.chat = AsyncMock(return_value="Try the Cheeseburger!")

        response = client.post("/ai/chat", json={"message": "Something filling?"})

        assert response.status_code == 200
        assert response.json() == {"reply": "Try the Cheeseburger!"}
        message, context = client.app.state.ai_service.chat.call_args.args
        assert message == "Something filling?"
        assert "Cheeseburger (Burgers, 12.50)" in context

    def test_chat_requires_message(self, client: TestClient) -> None:
        """Test that an empty message is invalid input."""
        response = client.post("/ai/chat", json={"message": ""})

        assert response.status_code == 400

    def test_chat_upstream_failure(self, client: TestClient) -> None:
        """Test that AI failures are reported as 502."""
        client.app.state.ai_service.chat = AsyncMock(
            side_effect=UpstreamFailureError("AI request failed with status 503")
        )

        response = client.post("/ai/chat", json={"message": "Hi", "context": "- Soup"})

        assert response.status_code == 502

    def test_dish_suggestions(self, client: TestClient) -> None:
        """Test drafting dish content."""
        client.app.state.ai_service.generate_dish_suggestions = AsyncMock(
            return_value=DishSuggestions(description="Juicy and smoky", tags=["Grill"])
        )

        response = client.post(
            "/admin/ai/suggestions",
            json={"name": "Smash Burger", "ingredients": ["beef"]},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["tags"] == ["Grill"]
        client.app.state.ai_service.generate_dish_suggestions.assert_called_once_with(
            "Smash Burger", ["beef"], None
        )

    def test_dish_suggestions_require_name(self, client: TestClient) -> None:
        """Test that suggestions need a dish name."""
        response = client.post("/admin/ai/suggestions", json={}, headers=ADMIN_HEADERS)

        assert response.status_code == 400


@pytest.mark.unit
class TestBuildMenuContext:
    """Tests for build_menu_context."""

    def test_formats_dishes(self, burger: Dish, salad: Dish) -> None:
        """Test one line per dish with the description when present."""
        context = build_menu_context([burger, salad])

        assert context.splitlines() == [
            "- Cheeseburger (Burgers, 12.50): Classic beef cheeseburger",
            "- Caesar Salad (Salads, 7.00)",
        ]
