"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from .config import settings

# Prometheus metrics
REGISTRY = CollectorRegistry()

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path', 'status_code'],
    registry=REGISTRY
)

# Business metrics
EXECUTIONS_STARTED = Counter(
    'tour_executions_started_total',
    'Tour executions started',
    ['outcome'],  # created | resumed
    registry=REGISTRY
)

ACTIVE_EXECUTIONS = Gauge(
    'tour_executions_active',
    'Executions currently active, sampled at scrape time',
    registry=REGISTRY
)

EXECUTIONS_TERMINATED = Counter(
    'tour_executions_terminated_total',
    'Tour executions that reached a terminal status',
    ['status'],
    registry=REGISTRY
)

PROXIMITY_CHECKS = Counter(
    'proximity_checks_total',
    'Proximity checks by outcome',
    ['advanced'],
    registry=REGISTRY
)

KEYPOINTS_COMPLETED = Counter(
    'keypoints_completed_total',
    'Keypoints completed through proximity checks',
    registry=REGISTRY
)

CHECKOUTS = Counter(
    'cart_checkouts_total',
    'Cart checkouts processed',
    registry=REGISTRY
)

PURCHASE_TOKENS = Counter(
    'purchase_tokens_total',
    'Purchase token mint attempts by result',
    ['result'],  # issued | failed
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            # request_id is bound by RequestIDMiddleware
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_tracing(app_name: str = settings.service_name):
    """Setup OpenTelemetry tracing."""
    resource = Resource.create({
        "service.name": app_name,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })

    provider = TracerProvider(resource=resource)
    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))
    trace.set_tracer_provider(provider)

    return trace.get_tracer(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument the SQLAlchemy engine with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_execution_started(resumed: bool):
        EXECUTIONS_STARTED.labels(outcome="resumed" if resumed else "created").inc()

    @staticmethod
    def record_execution_terminated(status: str):
        EXECUTIONS_TERMINATED.labels(status=status).inc()

    @staticmethod
    def set_active_executions(count: int):
        ACTIVE_EXECUTIONS.set(count)

    @staticmethod
    def record_proximity_check(advanced: bool):
        PROXIMITY_CHECKS.labels(advanced=str(advanced).lower()).inc()
        if advanced:
            KEYPOINTS_COMPLETED.inc()

    @staticmethod
    def record_checkout(issued: int, failed: int):
        CHECKOUTS.inc()
        PURCHASE_TOKENS.labels(result="issued").inc(issued)
        PURCHASE_TOKENS.labels(result="failed").inc(failed)

    @staticmethod
    def observe_request(method: str, path: str, status_code: int, duration_seconds: float):
        REQUEST_DURATION.labels(method=method, path=path, status_code=str(status_code)).observe(duration_seconds)


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


def get_logger(name: str):
    """Get a structured logger instance."""
    return structlog.get_logger(name)
