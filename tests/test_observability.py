"""
Tests for metrics collection, structured logging, request IDs and config validation.
"""

import importlib
import re

import pytest
from loguru import logger

from dominant_colours.config import Config
from dominant_colours.services.observability import (
    MetricsCollector,
    PerformanceMetrics,
    get_metrics_collector,
    log_memory_usage,
    performance_monitor,
)
from dominant_colours.utils.ids import generate_request_id
from dominant_colours.utils.logging import get_logger


def _metrics(name: str, duration_ms: float, error: str = None) -> PerformanceMetrics:
    return PerformanceMetrics(
        operation_name=name,
        duration_ms=duration_ms,
        memory_usage_mb=100.0,
        pixel_count=10,
        cluster_count=2,
        timestamp=0.0,
        error=error,
    )


class TestMetricsCollector:
    """Test in-process metrics aggregation"""

    def test_operation_stats(self):
        collector = MetricsCollector()
        for duration in (10.0, 20.0, 30.0):
            collector.record_performance(_metrics("clustering", duration))
        collector.record_performance(_metrics("clustering", 40.0, error="boom"))

        stats = collector.get_operation_stats("clustering")

        assert stats["total_calls"] == 4
        assert stats["error_count"] == 1
        assert stats["error_rate"] == 0.25
        assert stats["duration_stats"]["mean_ms"] == 25.0
        assert stats["duration_stats"]["max_ms"] == 40.0

    def test_unknown_operation(self):
        assert MetricsCollector().get_operation_stats("missing") == {}

    def test_history_is_bounded(self):
        collector = MetricsCollector(max_history=2)
        for i in range(5):
            collector.record_performance(_metrics(f"op{i}", 1.0))

        recent = collector.get_recent_metrics(limit=10)

        assert [m["operation_name"] for m in recent] == ["op3", "op4"]

    def test_performance_monitor_records_failures(self):
        with pytest.raises(RuntimeError):
            with performance_monitor("failing_stage"):
                raise RuntimeError("stage failed")

        stats = get_metrics_collector().get_operation_stats("failing_stage")
        assert stats["error_count"] == 1

    def test_log_memory_usage(self):
        usage = log_memory_usage("test_stage")

        assert usage["stage"] == "test_stage"
        assert usage["memory_mb"] > 0


class TestStructuredLogging:
    """Test loguru configuration"""

    def test_extra_is_bound(self):
        records = []
        log = get_logger("DEBUG")
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:
            log.info("Extraction started", extra={"request_id": "abc"})
        finally:
            logger.remove(sink_id)

        assert records[-1]["message"] == "Extraction started"
        assert records[-1]["extra"]["request_id"] == "abc"

    def test_messages_with_braces_are_not_formatted(self):
        records = []
        log = get_logger()
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:
            log.warning("Rejected {weird} input", extra={"request_id": "x"})
        finally:
            logger.remove(sink_id)

        assert records[-1]["message"] == "Rejected {weird} input"

    def test_record_points_at_the_caller(self):
        records = []
        log = get_logger()
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:
            log.error("Stage failed")
        finally:
            logger.remove(sink_id)

        assert records[-1]["function"] == "test_record_points_at_the_caller"
        assert records[-1]["level"].name == "ERROR"

    def test_api_startup_is_logged(self):
        import dominant_colours.main as main_module

        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="INFO")
        try:
            importlib.reload(main_module)
        finally:
            logger.remove(sink_id)

        startup = [r for r in records if r["message"] == "Dominant Colours API ready"]
        assert startup and startup[0]["extra"]["max_k"] == Config.MAX_K


class TestRequestIds:
    """Test request ID generation"""

    def test_format(self):
        request_id = generate_request_id("cli")

        assert re.fullmatch(r"cli-\d{14}-[0-9a-f]{8}", request_id)

    def test_unique(self):
        assert generate_request_id() != generate_request_id()


class TestConfig:
    """Test configuration validators"""

    def test_validate_k(self):
        assert Config.validate_k(1)
        assert Config.validate_k(Config.MAX_K)
        assert not Config.validate_k(0)
        assert not Config.validate_k(Config.MAX_K + 1)

    def test_validate_names(self):
        assert Config.validate_degenerate_policy("raise")
        assert Config.validate_degenerate_policy("reduce")
        assert not Config.validate_degenerate_policy("ignore")
        assert Config.validate_sample_method("stride")
        assert not Config.validate_sample_method("median")

    def test_validate_tolerance(self):
        assert Config.validate_tolerance(0.0)
        assert not Config.validate_tolerance(-1e-3)
