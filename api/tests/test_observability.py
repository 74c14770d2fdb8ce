from __future__ import annotations
import json
import logging
import pytest
from menu_store.obs.decorators import timed, traced
from menu_store.obs.logging_setup import StructuredFormatter, get_logger, setup_logging
from menu_store.obs.metrics import MetricsRegistry, metrics_registry

def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("menu_store.test", logging.INFO, __file__, 10, message, None, None)
    record.__dict__.update(extra)
    return record

def test_structured_formatter_emits_json_with_extra_fields():
    output = json.loads(StructuredFormatter().format(_record("Saved menu", menu_id="m1")))

    assert output["message"] == "Saved menu"
    assert output["level"] == "INFO"
    assert output["logger"] == "menu_store.test"
    assert output["extra"] == {"menu_id": "m1"}
    assert "trace_id" not in output

def test_context_logger_passes_keywords_as_extra(caplog):
    logger = get_logger("menu_store.test")

    with caplog.at_level(logging.INFO, logger="menu_store.test"):
        logger.info("Fetched menu", menu_id="m1")

    (record,) = caplog.records
    assert record.getMessage() == "Fetched menu"
    assert record.menu_id == "m1"

def test_context_logger_exception_keeps_traceback(caplog):
    logger = get_logger("menu_store.test")

    with caplog.at_level(logging.ERROR, logger="menu_store.test"):
        try:
            raise ValueError("boom")
        except ValueError:
            logger.exception("Index write failed", index_path="menus/index.json")

    (record,) = caplog.records
    assert record.exc_info[0] is ValueError
    assert record.index_path == "menus/index.json"

def test_setup_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(logging.DEBUG, structured=True)
        setup_logging(logging.WARNING, structured=False)

        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, StructuredFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

def test_metrics_registry_counters_and_histograms():
    registry = MetricsRegistry()
    registry.increment_counter("menu_lookup_misses", {"reason": "empty_index"})
    registry.increment_counter("menu_lookup_misses", {"reason": "empty_index"})
    for value in (10.0, 20.0, 30.0):
        registry.record_histogram("operation_duration_ms", value)

    assert registry.counter_value("menu_lookup_misses", {"reason": "empty_index"}) == 2
    assert registry.counter_value("menu_lookup_misses", {"reason": "missing_url"}) == 0
    assert registry.counter_value("never_seen") == 0
    summary = registry.get_metrics()["histograms"]["operation_duration_ms"]
    assert summary["count"] == 3
    assert summary["mean"] == 20.0
    assert summary["max"] == 30.0

@pytest.mark.asyncio
async def test_traced_records_duration_and_reraises():
    @traced("failing_operation")
    async def failing():
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        await failing()

    histograms = metrics_registry.get_metrics()["histograms"]
    assert histograms["operation_duration_ms"]["count"] == 1

def test_traced_and_timed_wrap_sync_functions():
    @traced()
    @timed("double_duration_ms")
    def double(value):
        return value * 2

    assert double(21) == 42
    assert double.__name__ == "double"
    assert metrics_registry.get_metrics()["histograms"]["double_duration_ms"]["count"] == 1

def test_setup_tracing_without_endpoint_uses_console_exporter():
    from opentelemetry.sdk.trace import TracerProvider
    from menu_store import config
    from menu_store.obs.otel import setup_tracing

    provider = setup_tracing(endpoint=None)
    try:
        assert isinstance(provider, TracerProvider)
        assert provider.resource.attributes["service.name"] == config.OTEL_SERVICE_NAME
    finally:
        provider.shutdown()
