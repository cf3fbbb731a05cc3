"""Analytics service: order, dish and AI usage reports for the admin dashboard.

Reports are aggregated in memory from the rows of the requested period.
"""

import logging
import uuid
from collections import Counter
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from restaurant_ordering_service.models.analytics_models import (
    AIActionEnum,
    AIActionLog,
    AIPerformanceReport,
    AIPerformanceSummary,
    CategoryPerformance,
    DailyTrend,
    DashboardStats,
    DashboardSummary,
    DishReport,
    DishSummary,
    NameValue,
    OrderReport,
    OrderSummary,
)
from restaurant_ordering_service.models.ai_models import StrategicReport
from restaurant_ordering_service.models.order_models import OrderStatusEnum
from restaurant_ordering_service.observability import traced
from restaurant_ordering_service.repositories.menu_repositories import DishRepository
from restaurant_ordering_service.repositories.order_repositories import (
    AIActionLogRepository,
    OrderRepository,
)
from restaurant_ordering_service.services.ai_service import AIService
from restaurant_ordering_service.services.order_service import OrderService
from restaurant_ordering_service.utils.exceptions import InvalidIdentifierError, InvalidInputError
from restaurant_ordering_service.utils.validators import is_storable_document, is_valid_uuid

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
RECENT_ORDER_COUNT = 5
AI_LOG_LIMIT = 50
INSIGHTS_WINDOW_DAYS = 30
UNCATEGORIZED = "Uncategorized"


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class AnalyticsService:
    """Service building reports from orders, dishes and the AI action log."""

    def __init__(
        self,
        order_service: OrderService,
        order_repository: OrderRepository,
        dish_repository: DishRepository,
        ai_log_repository: AIActionLogRepository,
        ai_service: AIService,
    ) -> None:
        """Initialize the AnalyticsService.

        Args:
            order_service: Used to expand recent orders with dish names
            order_repository: Source of orders and line items
            dish_repository: Source of dish categories
            ai_log_repository: Append-only AI action log
            ai_service: Generative AI client for strategic insights
        """
        self.order_service = order_service
        self.order_repository = order_repository
        self.dish_repository = dish_repository
        self.ai_log_repository = ai_log_repository
        self.ai_service = ai_service

    def _resolve_range(self, start: datetime, end: datetime) -> tuple[datetime, datetime]:
        start, end = as_utc(start), as_utc(end)
        if start > end:
            raise InvalidInputError("Report start must not be after report end")
        return start, end

    async def get_order_reports(self, start: datetime, end: datetime) -> OrderReport:
        """Summarize orders created between two instants.

        Args:
            start: Inclusive period start
            end: Inclusive period end

        Returns:
            OrderReport with totals, daily trends, status and category breakdowns
        """
        start, end = self._resolve_range(start, end)
        orders = self.order_repository.list_orders(start, end)
        items = self.order_repository.list_items_between(start, end)

        trends: dict[str, DailyTrend] = {}
        for order in orders:
            day = as_utc(order.created_at).date().isoformat()
            trend = trends.setdefault(day, DailyTrend(date=day, count=0, revenue=Decimal("0")))
            trend.count += 1
            trend.revenue += order.total_price

        status_counts = Counter(order.status for order in orders)

        dishes = self.dish_repository.get_many([item.dish_id for item in items]) if items else {}
        categories: dict[str, CategoryPerformance] = {}
        for item in items:
            dish = dishes.get(item.dish_id)
            name = dish.category if dish else UNCATEGORIZED
            perf = categories.setdefault(
                name, CategoryPerformance(category=name, revenue=Decimal("0"), orders=0)
            )
            perf.revenue += item.unit_price * item.quantity
            perf.orders += item.quantity

        total_revenue = sum((order.total_price for order in orders), Decimal("0"))
        total_orders = len(orders)
        avg_ticket = (
            (total_revenue / total_orders).quantize(CENT, rounding=ROUND_HALF_UP)
            if total_orders
            else Decimal("0")
        )

        return OrderReport(
            summary=OrderSummary(
                total_orders=total_orders,
                total_revenue=total_revenue,
                avg_ticket=avg_ticket,
            ),
            trends=[trends[day] for day in sorted(trends)],
            status_distribution=[
                NameValue(name=status.value, value=status_counts[status])
                for status in OrderStatusEnum
                if status_counts[status]
            ],
            category_performance=sorted(
                categories.values(), key=lambda c: c.revenue, reverse=True
            ),
        )

    async def get_dish_reports(self) -> DishReport:
        """Summarize the catalog: active/archived counts and dishes per category."""
        dishes = self.dish_repository.list_all()
        active = sum(1 for dish in dishes if dish.active)
        per_category = Counter(dish.category for dish in dishes)

        return DishReport(
            summary=DishSummary(
                total_dishes=len(dishes),
                active_dishes=active,
                archived_dishes=len(dishes) - active,
            ),
            category_distribution=[
                NameValue(name=name, value=count) for name, count in sorted(per_category.items())
            ],
        )

    async def get_ai_performance(self, start: datetime, end: datetime) -> AIPerformanceReport:
        """Count AI actions in a period and compute the approval rate.

        The approval rate is applied / generated, shown as a percentage with one decimal.
        """
        start, end = self._resolve_range(start, end)
        logs = self.ai_log_repository.list_logs(start, end)
        counts = Counter(log.action for log in logs)

        generated = counts[AIActionEnum.GENERATED]
        applied = counts[AIActionEnum.APPLIED]
        approval_rate = (applied / generated) * 100 if generated else 0.0

        return AIPerformanceReport(
            summary=AIPerformanceSummary(
                generated=generated,
                applied=applied,
                discarded=counts[AIActionEnum.DISCARDED],
                approval_rate=f"{approval_rate:.1f}%",
            ),
            logs=logs[:AI_LOG_LIMIT],
        )

    async def log_ai_action(
        self,
        action: AIActionEnum,
        dish_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AIActionLog:
        """Append an AI action to the audit log."""
        if dish_id is not None and not is_valid_uuid(dish_id):
            raise InvalidIdentifierError("Dish", dish_id)
        if not is_storable_document(metadata or {}):
            raise InvalidInputError("Metadata contains numbers that cannot be stored")

        log = AIActionLog(
            id=str(uuid.uuid4()),
            action=action,
            dish_id=dish_id,
            metadata=metadata or {},
            created_at=datetime.now(UTC),
        )
        return self.ai_log_repository.save_log(log)

    async def get_dashboard_stats(self) -> DashboardStats:
        """All-time order totals, status counts and the most recent orders."""
        orders = self.order_repository.list_orders()

        distribution = {status.value: 0 for status in OrderStatusEnum}
        for order in orders:
            distribution[order.status.value] += 1

        recent = [
            self.order_service.expand_order(order, self.order_repository.list_items(order.id))
            for order in orders[:RECENT_ORDER_COUNT]
        ]

        return DashboardStats(
            summary=DashboardSummary(
                total_orders=len(orders),
                total_revenue=sum((order.total_price for order in orders), Decimal("0")),
                status_distribution=distribution,
            ),
            recent_orders=recent,
        )

    @traced("strategic_insights")
    async def get_strategic_insights(self) -> StrategicReport:
        """Build a 30-day report context and ask the AI for insights."""
        end = datetime.now(UTC)
        start = end - timedelta(days=INSIGHTS_WINDOW_DAYS)

        order_report = await self.get_order_reports(start, end)
        dish_report = await self.get_dish_reports()
        ai_report = await self.get_ai_performance(start, end)

        context = {
            "revenue": order_report.summary.model_dump(mode="json"),
            "categories": [c.model_dump(mode="json") for c in order_report.category_performance],
            "dishes": dish_report.summary.model_dump(mode="json"),
            "ai": ai_report.summary.model_dump(mode="json"),
        }

        insights = await self.ai_service.analyze_strategic_data(context)
        return StrategicReport(reports=context, insights=insights)
