from __future__ import annotations
import time
import functools
import inspect
from typing import Callable, Dict, Optional
from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode
from menu_store.obs.metrics import record_duration
from menu_store.obs.logging_setup import get_logger

logger = get_logger(__name__)

def _start(span: Span, func: Callable, include_args: bool, args: tuple, kwargs: dict) -> None:
    span.set_attribute("function.name", func.__name__)
    span.set_attribute("function.module", func.__module__)
    if include_args:
        span.set_attribute("function.args", repr(args)[:500])
        span.set_attribute("function.kwargs", repr(kwargs)[:500])

def _fail(span: Span, func: Callable, exc: Exception) -> None:
    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, str(exc)))
    logger.error(
        f"Function {func.__name__} failed",
        error=str(exc),
        error_type=type(exc).__name__,
        function=func.__name__
    )

def traced(operation_name: Optional[str] = None, include_args: bool = False):
    """Run the wrapped function inside an OpenTelemetry span and time it."""

    def decorator(func: Callable) -> Callable:
        tracer = trace.get_tracer(__name__)
        span_name = operation_name or f"{func.__module__}.{func.__name__}"
        labels = {"operation": span_name}

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name) as span:
                _start(span, func, include_args, args, kwargs)
                start_time = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except Exception as e:
                    _fail(span, func, e)
                    raise
                finally:
                    record_duration(
                        "operation_duration_ms",
                        (time.perf_counter() - start_time) * 1000,
                        labels
                    )

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name) as span:
                _start(span, func, include_args, args, kwargs)
                start_time = time.perf_counter()
                try:
                    result = func(*args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except Exception as e:
                    _fail(span, func, e)
                    raise
                finally:
                    record_duration(
                        "operation_duration_ms",
                        (time.perf_counter() - start_time) * 1000,
                        labels
                    )

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper

    return decorator

def timed(metric_name: Optional[str] = None, labels: Optional[Dict[str, str]] = None):
    """Record execution time of the wrapped function as a histogram."""

    def decorator(func: Callable) -> Callable:
        name = metric_name or f"{func.__name__}_duration_ms"

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                record_duration(name, (time.perf_counter() - start_time) * 1000, labels)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                record_duration(name, (time.perf_counter() - start_time) * 1000, labels)

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper

    return decorator
