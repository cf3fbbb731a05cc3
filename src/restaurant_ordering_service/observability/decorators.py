"""Span decorator for service operations."""

import asyncio
import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry import trace

F = TypeVar("F", bound=Callable[..., Any])


@contextmanager
def _operation_span(tracer: trace.Tracer, name: str, func_name: str) -> Iterator[trace.Span]:
    with tracer.start_as_current_span(name, record_exception=False) as span:
        span.set_attribute("code.function", func_name)
        try:
            yield span
        except Exception as e:
            span.set_attribute("success", False)
            span.set_attribute("error.type", getattr(e, "kind", type(e).__name__))
            # AppError subclasses are HTTPExceptions
            status_code = getattr(e, "status_code", None)
            if status_code is not None:
                span.set_attribute("error.status_code", status_code)
            span.record_exception(e)
            raise
        span.set_attribute("success", True)


def traced(span_name: str | None = None, tracer_name: str = "ordering-svc") -> Callable[[F], F]:
    """Run the decorated function inside a span.

    Failures mark the span with ``success=False`` and the error kind before
    the exception propagates.

    Example:
        @traced("place_order")
        async def place_order(self, items): ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(tracer_name)

        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _operation_span(tracer, name, func.__name__):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with _operation_span(tracer, name, func.__name__):
                return func(*args, **kwargs)

        return sync_wrapper  # type: ignore[return-value]

    return decorator
