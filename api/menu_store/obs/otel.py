from __future__ import annotations
import os
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased, ALWAYS_ON
from menu_store import __version__
from menu_store.config import OTEL_EXPORTER_OTLP_ENDPOINT, OTEL_SERVICE_NAME
from menu_store.obs.logging_setup import get_logger

logger = get_logger(__name__)

def setup_tracing(endpoint: str | None = OTEL_EXPORTER_OTLP_ENDPOINT) -> TracerProvider:
    """Install a global TracerProvider exporting to OTLP, or the console without an endpoint."""

    resource = Resource.create({
        "service.name": OTEL_SERVICE_NAME,
        "service.version": __version__,
        "deployment.environment": os.getenv("ENVIRONMENT", "development")
    })

    sample_rate = float(os.getenv("OTEL_SAMPLE_RATE", "1.0"))
    sampler = ALWAYS_ON if sample_rate >= 1.0 else TraceIdRatioBased(sample_rate)

    tracer_provider = TracerProvider(resource=resource, sampler=sampler)

    if endpoint:
        exporter = OTLPSpanExporter(endpoint=f"{endpoint.rstrip('/')}/v1/traces", timeout=10)
        logger.info("OTLP exporter configured", endpoint=endpoint)
    else:
        exporter = ConsoleSpanExporter()
        logger.warning("No OTLP endpoint configured, using console exporter")

    tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(tracer_provider)

    logger.info("OpenTelemetry configured", service=OTEL_SERVICE_NAME)
    return tracer_provider

def get_tracer(name: str = "menu-store") -> trace.Tracer:
    return trace.get_tracer(name)
