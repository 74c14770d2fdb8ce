"""
Observability - tracing, metrics and logging.

Provides:
- OpenTelemetry tracing setup
- In-process metrics registry
- Structured JSON logging with trace correlation
- Tracing and timing decorators
"""

from .otel import setup_tracing, get_tracer
from .metrics import metrics_registry, inc_counter, record_duration, set_gauge
from .logging_setup import setup_logging, get_logger
from .decorators import traced, timed

__all__ = [
    "setup_tracing",
    "get_tracer",
    "metrics_registry",
    "inc_counter",
    "record_duration",
    "set_gauge",
    "setup_logging",
    "get_logger",
    "traced",
    "timed"
]
