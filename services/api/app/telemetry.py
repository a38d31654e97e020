"""
Observability setup:
  - OpenTelemetry distributed tracing → Jaeger (via OTLP gRPC)
  - Prometheus metrics: feed latency / page size, saved-relation toggles,
    profile resolution outcomes, store errors

Both are initialised once at startup and injected into FastAPI via middleware.
"""
import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import Counter, Histogram

from app.config import settings

logger = logging.getLogger(__name__)

# ─────────────────────────── Prometheus Metrics ───────────────────────────
FEED_LATENCY = Histogram(
    "feed_latency_seconds",
    "Latency of a feed page query (posts + author/career joins + counters)",
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)

FEED_PAGE_ITEMS = Histogram(
    "feed_page_items",
    "Number of posts returned per feed page",
    buckets=[0, 1, 5, 10, 20, 50, 100],
)

SAVED_TOGGLES_TOTAL = Counter(
    "saved_toggles_total",
    "Save / unsave calls on bookmark relations",
    ["resource", "action", "changed"],  # resource: post|career, action: save|unsave
)

PROFILE_RESOLUTIONS_TOTAL = Counter(
    "profile_resolutions_total",
    "Profile resolver outcomes",
    ["outcome"],  # ok | USER_NOT_FOUND | CAREER_NOT_FOUND
)

STORE_ERRORS_TOTAL = Counter(
    "store_errors_total",
    "Database failures surfaced as STORE_UNAVAILABLE",
    ["operation"],
)

POSTS_CREATED_TOTAL = Counter(
    "posts_created_total",
    "Total number of posts created",
    ["post_type"],
)


# ─────────────────────────── OpenTelemetry Setup ──────────────────────────
def setup_tracing(engine=None) -> None:
    """Configure the global OTel TracerProvider with OTLP/Jaeger export."""
    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "deployment.environment": settings.environment,
        }
    )

    provider = TracerProvider(resource=resource)

    if settings.otel_enabled:
        try:
            otlp_exporter = OTLPSpanExporter(
                endpoint=settings.otel_exporter_otlp_endpoint,
                insecure=True,
            )
            provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
            logger.info(
                "OTel tracing configured → %s", settings.otel_exporter_otlp_endpoint
            )
        except Exception as exc:
            logger.warning("Could not connect to OTLP exporter: %s — traces disabled", exc)
    else:
        logger.info("OTel export disabled (OTEL_ENABLED=false)")

    trace.set_tracer_provider(provider)

    # Query spans for every statement issued through the shared engine
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


def instrument_app(app) -> None:  # noqa: ANN001
    """Call after app is created to add FastAPI request spans."""
    FastAPIInstrumentor.instrument_app(app)
