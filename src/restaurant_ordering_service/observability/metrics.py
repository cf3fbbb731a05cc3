"""Custom metrics for the restaurant ordering service."""

from opentelemetry import metrics

meter = metrics.get_meter("ordering-svc")

orders_placed_counter = meter.create_counter(
    name="orders_placed_total",
    description="Total number of orders placed",
    unit="1",
)

order_rejected_counter = meter.create_counter(
    name="orders_rejected_total",
    description="Total number of carts rejected during validation by error kind",
    unit="1",
)

order_value_histogram = meter.create_histogram(
    name="order_value",
    description="Server-computed order totals",
    unit="1",
)

order_status_transition_counter = meter.create_counter(
    name="order_status_transitions_total",
    description="Order status changes by source and target status",
    unit="1",
)

ai_request_duration_histogram = meter.create_histogram(
    name="ai_request_duration_seconds",
    description="Duration of generative AI API calls by operation",
    unit="s",
)

ai_request_failure_counter = meter.create_counter(
    name="ai_request_failure_total",
    description="Total number of failed generative AI API calls by operation",
    unit="1",
)


def record_order_placed(item_count: int, order_total: float) -> None:
    """Record a successfully stored order.

    Args:
        item_count: Number of line items in the order
        order_total: Server-computed order total
    """
    orders_placed_counter.add(1, {"line_items": item_count})
    order_value_histogram.record(order_total)


def record_order_rejected(error_kind: str) -> None:
    """Record a cart rejected before any write.

    Args:
        error_kind: Application error kind (e.g. "Unavailable")
    """
    order_rejected_counter.add(1, {"error_kind": error_kind})


def record_status_transition(from_status: str, to_status: str) -> None:
    """Record an applied order status change."""
    order_status_transition_counter.add(1, {"from_status": from_status, "to_status": to_status})


def record_ai_request(operation: str, duration_seconds: float, success: bool) -> None:
    """Record a generative AI API call.

    Args:
        operation: The AI operation (e.g. "dish_suggestions", "chat")
        duration_seconds: Duration in seconds
        success: Whether a usable response was returned
    """
    ai_request_duration_histogram.record(duration_seconds, {"operation": operation})
    if not success:
        ai_request_failure_counter.add(1, {"operation": operation})
