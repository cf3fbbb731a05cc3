"""Main application entry point for the restaurant ordering service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os

from fastapi import FastAPI

from restaurant_ordering_service.config import (
    create_ai_service,
    create_dynamodb_resource,
    get_api_keys,
    otel_enabled,
    table_name,
)
from restaurant_ordering_service.handlers.api_handler import create_app
from restaurant_ordering_service.observability import configure_logging, setup_observability
from restaurant_ordering_service.repositories.menu_repositories import (
    DishRepository,
    MenuRepository,
)
from restaurant_ordering_service.repositories.order_repositories import (
    AIActionLogRepository,
    OrderRepository,
)
from restaurant_ordering_service.services.analytics_service import AnalyticsService
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the DynamoDB resource and repositories
    3. Creates services
    4. Creates the FastAPI app
    5. Sets up observability when ENABLE_OTEL is true

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing restaurant ordering service...")

    dynamodb_resource = create_dynamodb_resource()

    dish_repository = DishRepository(
        dynamodb_resource=dynamodb_resource, table_name=table_name("dishes")
    )
    menu_repository = MenuRepository(
        dynamodb_resource=dynamodb_resource,
        table_name=table_name("menus"),
        menu_dishes_table_name=table_name("menu_dishes"),
    )
    order_repository = OrderRepository(
        dynamodb_resource=dynamodb_resource,
        table_name=table_name("orders"),
        items_table_name=table_name("order_items"),
    )
    ai_log_repository = AIActionLogRepository(
        dynamodb_resource=dynamodb_resource, table_name=table_name("ai_logs")
    )

    logger.info(
        f"Repositories configured - dishes: {table_name('dishes')}, "
        f"orders: {table_name('orders')}"
    )

    ai_service = create_ai_service()
    order_service = OrderService(order_repository=order_repository, dish_repository=dish_repository)
    menu_service = MenuService(dish_repository=dish_repository, menu_repository=menu_repository)
    analytics_service = AnalyticsService(
        order_service=order_service,
        order_repository=order_repository,
        dish_repository=dish_repository,
        ai_log_repository=ai_log_repository,
        ai_service=ai_service,
    )

    logger.info("Services initialized")

    app = create_app(
        order_service=order_service,
        menu_service=menu_service,
        analytics_service=analytics_service,
        ai_service=ai_service,
        api_keys=get_api_keys(),
    )

    if otel_enabled():
        setup_observability(app)

    logger.info("Restaurant ordering service initialized successfully")

    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    # Create a placeholder app for test imports
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
