"""
K12 Tutor - Telemetry Module
OpenTelemetry tracing for services and the LLM client
"""
import logging
from contextlib import contextmanager
from typing import Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from app.core.config import settings

logger = logging.getLogger(__name__)

TRACER_NAME = "k12_tutor"

_provider_installed = False


def init_telemetry() -> None:
    """
    Install an OTLP-exporting tracer provider.
    Call this once at application startup. Without it, spans are no-ops.
    """
    global _provider_installed

    if _provider_installed or not settings.OTEL_ENABLED:
        return

    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

    resource = Resource.create({
        "service.name": settings.OTEL_SERVICE_NAME,
        "service.version": settings.APP_VERSION,
        "deployment.environment": settings.ENVIRONMENT,
    })
    provider = TracerProvider(resource=resource)

    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        provider.add_span_processor(BatchSpanProcessor(
            OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
        ))
    except Exception as e:
        logger.warning("OTLP exporter unavailable, falling back to console: %s", e)
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _provider_installed = True
    logger.info(
        "Telemetry initialized for %s -> %s",
        settings.OTEL_SERVICE_NAME,
        settings.OTEL_EXPORTER_OTLP_ENDPOINT,
    )


def get_tracer() -> trace.Tracer:
    """Get the application tracer (proxied, so it follows a later init)."""
    return trace.get_tracer(TRACER_NAME, settings.APP_VERSION)


@contextmanager
def service_span(name: str, attributes: Optional[dict] = None):
    """
    Context manager for a service operation span.

    Usage:
        with service_span("study_plan.generate", {"subject": "math"}) as span:
            span.set_attribute("plan.items", 5)
    """
    with get_tracer().start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            span.set_attribute(key, str(value) if value is not None else "")
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
