"""FastAPI application for the public ordering API and the admin API."""

import logging
from datetime import UTC, datetime, timedelta

from fastapi import Depends, FastAPI, Header
from pydantic import BaseModel

from restaurant_ordering_service.auth.api_dependencies import (
    is_admin_request,
    require_admin_key,
)
from restaurant_ordering_service.auth.api_key_validator import APIKeyValidator
from restaurant_ordering_service.models.ai_models import (
    ChatRequest,
    ChatResponse,
    DishSuggestionRequest,
    DishSuggestions,
    StrategicReport,
)
from restaurant_ordering_service.models.analytics_models import (
    AIActionLog,
    AIActionRequest,
    AIPerformanceReport,
    DashboardStats,
    DishReport,
    OrderReport,
)
from restaurant_ordering_service.models.menu_models import (
    Dish,
    DishActiveUpdate,
    DishCreate,
    DishPage,
    DishUpdate,
    Menu,
    MenuCreate,
    MenuUpdate,
)
from restaurant_ordering_service.models.order_models import (
    Order,
    OrderDetail,
    PlaceOrderRequest,
    StatusUpdateRequest,
)
from restaurant_ordering_service.services.ai_service import AIService
from restaurant_ordering_service.services.analytics_service import AnalyticsService
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService
from restaurant_ordering_service.utils.exceptions import InvalidInputError, UnauthorizedError

logger = logging.getLogger(__name__)

DEFAULT_REPORT_DAYS = 30


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class MessageResponse(BaseModel):
    """Confirmation message for operations without a resource body."""

    message: str


def build_menu_context(dishes: list[Dish]) -> str:
    """Render active dishes as plain text for the chef assistant prompt."""
    lines = []
    for dish in dishes:
        line = f"- {dish.name} ({dish.category}, {dish.price})"
        if dish.description:
            line += f": {dish.description}"
        lines.append(line)
    return "\n".join(lines)


def create_app(
    order_service: OrderService,
    menu_service: MenuService,
    analytics_service: AnalyticsService,
    ai_service: AIService,
    api_keys: list[str],
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        order_service: Service for placing and managing orders
        menu_service: Service for dish and menu administration
        analytics_service: Service for admin reports
        ai_service: Generative AI client
        api_keys: List of valid API keys for admin authentication

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Restaurant Ordering Service API",
        description="Public ordering API and admin API for menus, orders and analytics",
        version="1.0.0",
    )

    # Store services in app state for access in route handlers
    app.state.order_service = order_service
    app.state.menu_service = menu_service
    app.state.analytics_service = analytics_service
    app.state.ai_service = ai_service
    app.state.api_key_validator = APIKeyValidator(api_keys=api_keys)

    def validate_api_key(x_api_key: str | None = Header(None)) -> str:
        """Dependency to validate API key."""
        return require_admin_key(x_api_key, app.state.api_key_validator)

    def report_range(
        start: datetime | None, end: datetime | None
    ) -> tuple[datetime, datetime]:
        end = end or datetime.now(UTC)
        start = start or end - timedelta(days=DEFAULT_REPORT_DAYS)
        return start, end

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    # Public menu

    @app.get("/menu", response_model=list[Dish], tags=["Public Menu"])
    async def get_public_menu() -> list[Dish]:
        """List every active dish."""
        dishes: list[Dish] = await app.state.menu_service.list_dishes(admin=False)
        return dishes

    @app.get("/dishes", response_model=DishPage | list[Dish], tags=["Public Menu"])
    async def list_dishes(
        page: int | None = None,
        page_size: int | None = None,
        search: str | None = None,
        admin: bool = False,
        active: bool | None = None,
        x_api_key: str | None = Header(None),
    ) -> DishPage | list[Dish]:
        """List dishes, paginated when both page and page_size are given.

        Inactive dishes are only listed for admin callers.
        """
        if admin and not is_admin_request(x_api_key, app.state.api_key_validator):
            raise UnauthorizedError("Admin listing requires a valid API key")
        if active is False and not admin:
            raise UnauthorizedError("Listing inactive dishes requires admin access")

        if page is not None and page_size is not None:
            result: DishPage = await app.state.menu_service.list_dishes_paginated(
                page=page, page_size=page_size, search=search, admin=admin, active=active
            )
            return result

        dishes: list[Dish] = await app.state.menu_service.list_dishes(admin=admin)
        return dishes

    @app.get("/dishes/search", response_model=list[Dish], tags=["Public Menu"])
    async def search_dishes(q: str = "") -> list[Dish]:
        """Case-insensitive search of active dishes by name."""
        dishes: list[Dish] = await app.state.menu_service.search_dishes(q)
        return dishes

    @app.get("/dishes/{dish_id}", response_model=Dish, tags=["Public Menu"])
    async def get_dish(dish_id: str) -> Dish:
        """Get a single dish."""
        dish: Dish = await app.state.menu_service.get_dish(dish_id)
        return dish

    @app.get("/menus", response_model=list[Menu], tags=["Public Menu"])
    async def list_active_menus() -> list[Menu]:
        """List active menus."""
        menus: list[Menu] = await app.state.menu_service.list_active_menus()
        return menus

    @app.get("/menus/{menu_id}/dishes", response_model=list[Dish], tags=["Public Menu"])
    async def list_menu_dishes(menu_id: str) -> list[Dish]:
        """List the active dishes of a menu."""
        dishes: list[Dish] = await app.state.menu_service.list_menu_dishes(menu_id)
        return dishes

    # Orders

    @app.post("/orders", response_model=OrderDetail, status_code=201, tags=["Orders"])
    async def place_order(request: PlaceOrderRequest) -> OrderDetail:
        """Place an order. Prices are computed from current dish rows."""
        order: OrderDetail = await app.state.order_service.place_order(
            items=request.items, client_total=request.total
        )
        return order

    @app.get("/orders/{order_id}", response_model=OrderDetail, tags=["Orders"])
    async def get_order(order_id: str) -> OrderDetail:
        """Get an order with its line items."""
        order: OrderDetail = await app.state.order_service.get_order_details(order_id)
        return order

    # AI chat

    @app.post("/ai/chat", response_model=ChatResponse, tags=["AI"])
    async def chat(request: ChatRequest) -> ChatResponse:
        """Ask the chef assistant about the menu."""
        if not request.message:
            raise InvalidInputError("Message is required")

        context = request.context
        if context is None:
            context = build_menu_context(await app.state.menu_service.list_dishes(admin=False))

        reply: str = await app.state.ai_service.chat(request.message, context)
        return ChatResponse(reply=reply)

    # Admin: dishes

    @app.post("/admin/dishes", response_model=Dish, status_code=201, tags=["Admin Dishes"])
    async def create_dish(data: DishCreate, _api_key: str = Depends(validate_api_key)) -> Dish:
        """Create a dish."""
        dish: Dish = await app.state.menu_service.create_dish(data)
        return dish

    @app.patch("/admin/dishes/{dish_id}", response_model=Dish, tags=["Admin Dishes"])
    async def update_dish(
        dish_id: str, data: DishUpdate, _api_key: str = Depends(validate_api_key)
    ) -> Dish:
        """Partially update a dish."""
        dish: Dish = await app.state.menu_service.update_dish(dish_id, data)
        return dish

    @app.patch("/admin/dishes/{dish_id}/active", response_model=Dish, tags=["Admin Dishes"])
    async def set_dish_active(
        dish_id: str, data: DishActiveUpdate, _api_key: str = Depends(validate_api_key)
    ) -> Dish:
        """Show or hide a dish."""
        dish: Dish = await app.state.menu_service.set_dish_active(dish_id, data.active)
        return dish

    @app.delete("/admin/dishes/{dish_id}", response_model=MessageResponse, tags=["Admin Dishes"])
    async def delete_dish(
        dish_id: str, _api_key: str = Depends(validate_api_key)
    ) -> MessageResponse:
        """Permanently delete a dish."""
        await app.state.menu_service.delete_dish(dish_id)
        return MessageResponse(message="Dish deleted")

    # Admin: menus

    @app.get("/admin/menus", response_model=list[Menu], tags=["Admin Menus"])
    async def list_all_menus(_api_key: str = Depends(validate_api_key)) -> list[Menu]:
        """List all menus, including inactive ones."""
        menus: list[Menu] = await app.state.menu_service.list_all_menus()
        return menus

    @app.post("/admin/menus", response_model=Menu, status_code=201, tags=["Admin Menus"])
    async def create_menu(data: MenuCreate, _api_key: str = Depends(validate_api_key)) -> Menu:
        """Create a menu."""
        menu: Menu = await app.state.menu_service.create_menu(data)
        return menu

    @app.patch("/admin/menus/{menu_id}", response_model=Menu, tags=["Admin Menus"])
    async def update_menu(
        menu_id: str, data: MenuUpdate, _api_key: str = Depends(validate_api_key)
    ) -> Menu:
        """Partially update a menu."""
        menu: Menu = await app.state.menu_service.update_menu(menu_id, data)
        return menu

    @app.delete("/admin/menus/{menu_id}", response_model=Menu, tags=["Admin Menus"])
    async def delete_menu(menu_id: str, _api_key: str = Depends(validate_api_key)) -> Menu:
        """Deactivate a menu."""
        menu: Menu = await app.state.menu_service.delete_menu(menu_id)
        return menu

    @app.put(
        "/admin/menus/{menu_id}/dishes/{dish_id}",
        response_model=MessageResponse,
        tags=["Admin Menus"],
    )
    async def attach_dish(
        menu_id: str, dish_id: str, _api_key: str = Depends(validate_api_key)
    ) -> MessageResponse:
        """Add a dish to a menu."""
        await app.state.menu_service.attach_dish_to_menu(menu_id, dish_id)
        return MessageResponse(message="Dish attached to menu")

    @app.delete(
        "/admin/menus/{menu_id}/dishes/{dish_id}",
        response_model=MessageResponse,
        tags=["Admin Menus"],
    )
    async def detach_dish(
        menu_id: str, dish_id: str, _api_key: str = Depends(validate_api_key)
    ) -> MessageResponse:
        """Remove a dish from a menu."""
        await app.state.menu_service.detach_dish_from_menu(menu_id, dish_id)
        return MessageResponse(message="Dish detached from menu")

    # Admin: orders

    @app.get("/admin/orders", response_model=list[OrderDetail], tags=["Admin Orders"])
    async def list_orders(_api_key: str = Depends(validate_api_key)) -> list[OrderDetail]:
        """List all orders, newest first."""
        orders: list[OrderDetail] = await app.state.order_service.list_orders()
        return orders

    @app.patch("/admin/orders/{order_id}/status", response_model=Order, tags=["Admin Orders"])
    async def update_order_status(
        order_id: str,
        request: StatusUpdateRequest,
        _api_key: str = Depends(validate_api_key),
    ) -> Order:
        """Move an order through its workflow."""
        order: Order = await app.state.order_service.update_order_status(order_id, request.status)
        return order

    # Admin: analytics

    @app.get("/admin/dashboard", response_model=DashboardStats, tags=["Analytics"])
    async def get_dashboard(_api_key: str = Depends(validate_api_key)) -> DashboardStats:
        """Dashboard totals and recent orders."""
        stats: DashboardStats = await app.state.analytics_service.get_dashboard_stats()
        return stats

    @app.get("/admin/analytics/orders", response_model=OrderReport, tags=["Analytics"])
    async def get_order_reports(
        start: datetime | None = None,
        end: datetime | None = None,
        _api_key: str = Depends(validate_api_key),
    ) -> OrderReport:
        """Order report for a period (default: last 30 days)."""
        report: OrderReport = await app.state.analytics_service.get_order_reports(
            *report_range(start, end)
        )
        return report

    @app.get("/admin/analytics/dishes", response_model=DishReport, tags=["Analytics"])
    async def get_dish_reports(_api_key: str = Depends(validate_api_key)) -> DishReport:
        """Catalog report."""
        report: DishReport = await app.state.analytics_service.get_dish_reports()
        return report

    @app.get("/admin/analytics/ai", response_model=AIPerformanceReport, tags=["Analytics"])
    async def get_ai_performance(
        start: datetime | None = None,
        end: datetime | None = None,
        _api_key: str = Depends(validate_api_key),
    ) -> AIPerformanceReport:
        """AI suggestion usage for a period (default: last 30 days)."""
        report: AIPerformanceReport = await app.state.analytics_service.get_ai_performance(
            *report_range(start, end)
        )
        return report

    @app.post(
        "/admin/analytics/ai-actions",
        response_model=AIActionLog,
        status_code=201,
        tags=["Analytics"],
    )
    async def log_ai_action(
        request: AIActionRequest, _api_key: str = Depends(validate_api_key)
    ) -> AIActionLog:
        """Record what was done with an AI suggestion."""
        log: AIActionLog = await app.state.analytics_service.log_ai_action(
            action=request.action, dish_id=request.dish_id, metadata=request.metadata
        )
        return log

    @app.get("/admin/analytics/insights", response_model=StrategicReport, tags=["Analytics"])
    async def get_strategic_insights(
        _api_key: str = Depends(validate_api_key),
    ) -> StrategicReport:
        """AI-drafted business insights for the last 30 days."""
        report: StrategicReport = await app.state.analytics_service.get_strategic_insights()
        return report

    # Admin: AI suggestions

    @app.post("/admin/ai/suggestions", response_model=DishSuggestions, tags=["AI"])
    async def get_dish_suggestions(
        request: DishSuggestionRequest, _api_key: str = Depends(validate_api_key)
    ) -> DishSuggestions:
        """Draft dish content with the AI assistant."""
        if not request.name:
            raise InvalidInputError("Dish name is required for suggestions")

        suggestions: DishSuggestions = await app.state.ai_service.generate_dish_suggestions(
            request.name, request.ingredients, request.image_base64
        )
        return suggestions

    return app
