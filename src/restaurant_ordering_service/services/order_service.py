"""Order service: cart pricing, order placement and the status workflow."""

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal, localcontext

from restaurant_ordering_service.models.order_models import (
    CartItem,
    Order,
    OrderDetail,
    OrderItem,
    OrderItemDetail,
    OrderStatusEnum,
    PricedCart,
    VettedLineItem,
    can_transition,
)
from restaurant_ordering_service.observability import traced
from restaurant_ordering_service.observability.metrics import (
    record_order_placed,
    record_order_rejected,
    record_status_transition,
)
from restaurant_ordering_service.repositories.menu_repositories import DishRepository
from restaurant_ordering_service.repositories.order_repositories import (
    MAX_ITEMS_PER_ORDER,
    OrderRepository,
)
from restaurant_ordering_service.utils.exceptions import (
    AppError,
    ConcurrentUpdateError,
    InvalidIdentifierError,
    InvalidInputError,
    InvalidQuantityError,
    InvalidStatusError,
    InvalidTransitionError,
    NotFoundError,
    UnavailableError,
)
from restaurant_ordering_service.utils.validators import (
    fits_dynamodb_number,
    is_valid_quantity,
    is_valid_uuid,
)

logger = logging.getLogger(__name__)


class OrderService:
    """Service for placing orders and moving them through their workflow.

    Prices always come from the dish rows at placement time. Client-supplied
    totals are never used.
    """

    def __init__(self, order_repository: OrderRepository, dish_repository: DishRepository) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository for orders and line items
            dish_repository: Repository used to look up current dish prices
        """
        self.order_repository = order_repository
        self.dish_repository = dish_repository

    @traced("price_cart")
    async def price_cart(self, items: list[CartItem] | None) -> PricedCart:
        """Validate a cart against current dish rows and compute its total.

        Read only: nothing is written.

        Args:
            items: Cart entries in submission order

        Returns:
            PricedCart with the authoritative total and vetted line items

        Raises:
            InvalidInputError: If the cart is empty, absent or too long,
                or its total cannot be stored
            InvalidIdentifierError: If a dish id is not a UUID
            NotFoundError: If a dish does not exist
            UnavailableError: If a dish is inactive
            InvalidQuantityError: If a quantity is not a positive integer
                up to MAX_QUANTITY
        """
        if not items:
            raise InvalidInputError("Order must contain items")
        if len(items) > MAX_ITEMS_PER_ORDER:
            raise InvalidInputError(f"Order cannot contain more than {MAX_ITEMS_PER_ORDER} items")

        for item in items:
            if not is_valid_uuid(item.dish_id):
                raise InvalidIdentifierError("Dish", item.dish_id)

        dishes = self.dish_repository.get_many([item.dish_id for item in items])

        order_total = Decimal("0")
        line_items: list[VettedLineItem] = []

        for item in items:
            dish = dishes.get(item.dish_id)

            if dish is None:
                raise NotFoundError("Dish", item.dish_id)
            if not dish.active:
                raise UnavailableError(dish.name, dish_id=dish.id)
            if not is_valid_quantity(item.quantity):
                raise InvalidQuantityError(dish.name, dish_id=dish.id)

            line_item = VettedLineItem(
                dish_id=dish.id,
                quantity=int(item.quantity),
                unit_price=dish.price,
            )
            with localcontext() as ctx:
                # exact sums; totals DynamoDB cannot hold are rejected below
                ctx.prec = 100
                order_total += line_item.line_total
            line_items.append(line_item)

        if not fits_dynamodb_number(order_total):
            raise InvalidInputError("Order total is too large")

        return PricedCart(order_total=order_total, line_items=line_items)

    @traced("place_order")
    async def place_order(
        self, items: list[CartItem] | None, client_total: Decimal | None = None
    ) -> OrderDetail:
        """Price a cart and store it as a pending order.

        Args:
            items: Cart entries
            client_total: Total shown to the customer; logged if it differs, never stored

        Returns:
            OrderDetail with line items expanded
        """
        try:
            priced = await self.price_cart(items)
        except AppError as e:
            record_order_rejected(e.kind)
            raise

        if client_total is not None and client_total != priced.order_total:
            logger.debug(
                f"Client total {client_total} differs from computed total {priced.order_total}"
            )

        now = datetime.now(UTC)
        order = Order(
            id=str(uuid.uuid4()),
            total_price=priced.order_total,
            status=OrderStatusEnum.PENDING,
            created_at=now,
        )
        order_items = [
            OrderItem(
                order_id=order.id,
                line_number=index,
                dish_id=line.dish_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                created_at=now,
            )
            for index, line in enumerate(priced.line_items, start=1)
        ]

        self.order_repository.create_order_with_items(order, order_items)
        record_order_placed(len(order_items), float(order.total_price))
        logger.info(f"Placed order {order.id} totalling {order.total_price}")

        return self.expand_order(order, order_items)

    async def get_order_details(self, order_id: str) -> OrderDetail:
        """Get an order with its line items.

        Raises:
            InvalidIdentifierError: If the id is not a UUID
            NotFoundError: If no order matches
        """
        if not is_valid_uuid(order_id):
            raise InvalidIdentifierError("Order", order_id)

        order = self.order_repository.get_order(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)

        return self.expand_order(order, self.order_repository.list_items(order_id))

    async def list_orders(self) -> list[OrderDetail]:
        """List all orders newest first, with line items expanded."""
        orders = self.order_repository.list_orders()
        return [self.expand_order(order, self.order_repository.list_items(order.id)) for order in orders]

    @traced("update_order_status")
    async def update_order_status(self, order_id: str, status: str) -> Order:
        """Move an order to a new status.

        Allowed changes: pending -> confirmed | canceled and
        confirmed -> completed | canceled. Requesting the current status
        succeeds without writing.

        Args:
            order_id: Order identifier
            status: Requested status value

        Returns:
            The order after the change

        Raises:
            InvalidIdentifierError: If the id is not a UUID
            InvalidStatusError: If the status is not a known value
            NotFoundError: If no order matches
            InvalidTransitionError: If the workflow does not allow the change
            ConcurrentUpdateError: If the status changed after it was read
        """
        if not is_valid_uuid(order_id):
            raise InvalidIdentifierError("Order", order_id)

        try:
            requested = OrderStatusEnum(status)
        except ValueError:
            raise InvalidStatusError(status) from None

        order = self.order_repository.get_order(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)

        if order.status == requested:
            return order

        if not can_transition(order.status, requested):
            raise InvalidTransitionError(order.status.value, requested.value, order_id=order_id)

        updated = self.order_repository.update_status(
            order_id,
            expected_status=order.status,
            new_status=requested,
            updated_at=datetime.now(UTC),
        )

        if updated is None:
            if self.order_repository.get_order(order_id) is None:
                raise NotFoundError("Order", order_id)
            raise ConcurrentUpdateError("Order", order_id)

        record_status_transition(order.status.value, requested.value)
        logger.info(f"Order {order_id} moved from {order.status.value} to {requested.value}")
        return updated

    def expand_order(self, order: Order, items: list[OrderItem]) -> OrderDetail:
        """Join line items with their dish names for display."""
        dishes = self.dish_repository.get_many([item.dish_id for item in items]) if items else {}

        details = []
        for item in items:
            dish = dishes.get(item.dish_id)
            details.append(
                OrderItemDetail(
                    **item.model_dump(),
                    dish_name=dish.name if dish else None,
                    dish_category=dish.category if dish else None,
                )
            )

        return OrderDetail(**order.model_dump(), items=details)
