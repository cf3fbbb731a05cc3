"""Structured logging and OpenTelemetry setup for the ordering service."""

import logging
import os
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.botocore import BotocoreInstrumentor
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger import jsonlogger

logger = logging.getLogger(__name__)

SERVICE_NAME = "ordering-svc"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_clients_instrumented = False


def _collector_url(signal: str) -> str:
    base = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318").rstrip("/")
    return f"{base}/v1/{signal}"


def build_resource() -> Resource:
    """Describe this process for exported telemetry."""
    return Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME),
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
        }
    )


def _install_providers(resource: Resource, export: bool) -> None:
    tracer_provider = TracerProvider(resource=resource)
    metric_readers = []

    if export:
        span_exporter = OTLPSpanExporter(endpoint=_collector_url("traces"))
        tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
        interval = int(os.getenv("OTEL_METRIC_EXPORT_INTERVAL", "60000"))
        metric_readers.append(
            PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=_collector_url("metrics")),
                export_interval_millis=interval,
            )
        )
        logger.info(f"Exporting spans to {_collector_url('traces')}")

    trace.set_tracer_provider(tracer_provider)
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=metric_readers))


def _instrument_clients() -> None:
    global _clients_instrumented

    # uvicorn reload and warm Lambda containers may call setup twice
    if _clients_instrumented:
        return
    HTTPXClientInstrumentor().instrument()
    BotocoreInstrumentor().instrument()
    _clients_instrumented = True


def setup_observability(app: Any = None, enable_exporters: bool = True) -> None:
    """Install tracer and meter providers and instrument outbound clients.

    Outbound calls are the generative AI API (httpx) and DynamoDB (botocore).
    Exporters are never enabled when ENVIRONMENT is ``test``.

    Args:
        app: FastAPI application whose routes should produce server spans
        enable_exporters: Ship telemetry to the OTLP collector
    """
    export = enable_exporters and os.getenv("ENVIRONMENT", "development") != "test"

    _install_providers(build_resource(), export)
    _instrument_clients()

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)

    logger.info("Observability configured", extra={"exporters_enabled": export})


def configure_logging(log_level: str = "INFO") -> None:
    """Emit every log record as a single-line JSON object.

    LOG_LEVEL in the environment takes precedence over ``log_level``.
    Extra fields passed through ``extra=`` (error kinds, entity ids) appear as
    top-level keys.
    """
    level_name = os.getenv("LOG_LEVEL", log_level).upper()

    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            LOG_FORMAT,
            timestamp=True,
            static_fields={"service": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME)},
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level_name, logging.INFO))

    logger.info(f"JSON logging enabled at {level_name}")
