"""
Observability Validation Test

This test validates the observability stack:
1. Metrics collection works (tool/safety/rpc-error/timing metrics)
2. Structured logging with correlation IDs works
3. Correlation context nests and unwinds around tool dispatch

Pass criteria: a tool call or gate validation can be followed through the
logs by request id, tool name and artifact name.
"""

import io
import json
import logging

import pytest


def test_observability_imports():
    """Verify all observability modules import correctly."""
    from core.observability import (
        MetricsCollector, get_metrics,
        record_tool_started, record_tool_completed, record_tool_failed,
        record_processing_time,
        get_logger, configure_logging, CorrelationContext, with_correlation,
    )
    assert MetricsCollector is not None
    assert get_metrics is not None
    assert CorrelationContext is not None
    assert with_correlation is not None


class TestMetricsCollector:
    """Test the metrics collection system."""

    def test_singleton_instance(self):
        """MetricsCollector returns same instance."""
        from core.observability.metrics import MetricsCollector
        m1 = MetricsCollector.instance()
        m2 = MetricsCollector.instance()
        assert m1 is m2

    def test_reset_drops_singleton(self):
        """reset() gives a fresh collector."""
        from core.observability.metrics import MetricsCollector
        m1 = MetricsCollector.instance()
        m1.record_tool_started("getSource")

        MetricsCollector.reset()

        assert MetricsCollector.instance() is not m1
        assert MetricsCollector.instance().get_summary()["tools"]["started"] == 0

    def test_tool_metrics_tracking(self):
        """Track tool started/completed/failed counts."""
        from core.observability.metrics import MetricsCollector
        mc = MetricsCollector.instance()

        mc.record_tool_started("getSource")
        mc.record_tool_started("writeSource")
        mc.record_tool_completed("getSource", duration_ms=12)
        mc.record_tool_failed("writeSource")

        summary = mc.get_summary()
        assert summary["tools"]["started"] == 2
        assert summary["tools"]["completed"] == 1
        assert summary["tools"]["failed"] == 1
        assert summary["tools"]["by_name"]["writeSource"] == {"started": 1, "completed": 0, "failed": 1}
        assert "tool.getSource" in summary["timings"]["by_stage"]

    def test_validation_metrics_tracking(self):
        """Track validations by overall status and gate outcome."""
        from core.observability.metrics import MetricsCollector
        mc = MetricsCollector.instance()

        mc.record_validation("rejected", [
            {"name": "atc-check", "status": "failed"},
            {"name": "transport-required", "status": "passed"},
        ], duration_ms=3)
        mc.record_validation("approved", [{"name": "atc-check", "status": "passed"}])

        safety = mc.get_summary()["safety"]
        assert safety["validations"] == 2
        assert safety["by_status"] == {"rejected": 1, "approved": 1}
        assert safety["by_gate"]["atc-check"] == {"failed": 1, "passed": 1}

    def test_rpc_error_tracking(self):
        """RPC error codes are counted as strings in the summary."""
        from core.observability.metrics import MetricsCollector
        mc = MetricsCollector.instance()

        mc.record_rpc_error(-32700)
        mc.record_rpc_error(-32700)

        assert mc.get_summary()["rpc_errors"] == {"-32700": 2}

    def test_timing_percentile_calculation(self):
        """Calculate p95 timing correctly."""
        from core.observability.metrics import MetricsCollector
        mc = MetricsCollector.instance()

        for i in range(1, 101):
            mc.record_processing_time("safety.validate", i)

        stats = mc.get_timing_stats("safety.validate")

        assert 49 <= stats["average_ms"] <= 52
        assert 93 <= stats["p95_ms"] <= 97
        assert stats["sample_count"] == 100


class TestCorrelatedLogging:
    """Test structured logging with correlation IDs."""

    def test_correlation_context_creation(self):
        """Create correlation context with all fields."""
        from core.observability.logging import CorrelationContext

        ctx = CorrelationContext(
            request_id="7",
            tool_name="writeSource",
            artifact_name="Z_REPORT",
            source_system="SAP",
            entity_type="Item",
            approval_id="APR-000001",
        )

        assert ctx.request_id == "7"
        assert ctx.tool_name == "writeSource"
        assert ctx.to_dict()["approval_id"] == "APR-000001"

    def test_context_nesting(self):
        """Nested contexts merge and unwind."""
        from core.observability.logging import get_correlation_context, with_correlation

        assert get_correlation_context().tool_name is None

        with with_correlation(request_id=1, tool_name="writeSource"):
            with with_correlation(artifact_name="Z_REPORT", tool_name=None):
                inner = get_correlation_context()
                assert inner.request_id == "1"
                assert inner.tool_name == "writeSource"
                assert inner.artifact_name == "Z_REPORT"
            assert get_correlation_context().artifact_name is None

        assert get_correlation_context().request_id is None

    def test_structured_formatter_json_output(self):
        """StructuredFormatter outputs valid JSON."""
        from core.observability.logging import StructuredFormatter, with_correlation

        formatter = StructuredFormatter()

        with with_correlation(tool_name="getSource"):
            record = logging.LogRecord(
                name="test",
                level=logging.INFO,
                pathname="test.py",
                lineno=10,
                msg="Test message",
                args=(),
                exc_info=None,
            )
            record.extra_fields = {"rows": 3}

            data = json.loads(formatter.format(record))

            assert data["message"] == "Test message"
            assert data["tool_name"] == "getSource"
            assert data["rows"] == 3

    def test_human_readable_formatter(self):
        """HumanReadableFormatter shows the correlation segment."""
        from core.observability.logging import HumanReadableFormatter, with_correlation

        formatter = HumanReadableFormatter()

        with with_correlation(request_id="9", source_system="SAP", entity_type="Item"):
            record = logging.LogRecord("test", logging.INFO, "test.py", 1, "Mapped", (), None)
            output = formatter.format(record)

        assert "[req:9/SAP:Item]: Mapped" in output

    def test_correlated_logger_extra_fields(self):
        """CorrelatedLogger attaches extra fields to the record."""
        from core.observability.logging import CorrelatedLogger, StructuredFormatter

        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(StructuredFormatter())
        base = logging.getLogger("test.observability.extra")
        base.propagate = False
        base.setLevel(logging.INFO)
        base.addHandler(handler)

        try:
            CorrelatedLogger(base).info("Gate registered", extra_fields={"priority": 10})
        finally:
            base.removeHandler(handler)

        data = json.loads(stream.getvalue())
        assert data["message"] == "Gate registered"
        assert data["priority"] == 10


class TestConfiguration:
    """Test settings loading and validation."""

    def test_defaults(self):
        """Defaults are mock mode with moderate strictness."""
        from core.config import load_settings

        settings = load_settings({
            "ERP_MODE": "", "SAFETY_STRICTNESS": "", "LOG_LEVEL": "", "API_PORT": "", "API_KEY": "",
        })

        assert settings.mode == "mock"
        assert settings.strictness == "moderate"
        assert settings.log_level == "INFO"
        assert settings.api_port == 8000
        assert settings.api_key is None
        assert settings.is_live is False

    def test_overrides_are_normalized(self):
        """Mode and strictness are lowercased, log level uppercased."""
        from core.config import load_settings

        settings = load_settings({"ERP_MODE": "LIVE", "SAFETY_STRICTNESS": "Strict", "LOG_LEVEL": "debug"})

        assert settings.mode == "live"
        assert settings.strictness == "strict"
        assert settings.log_level == "DEBUG"

    def test_invalid_port_falls_back(self):
        """Non-numeric ports fall back to the default."""
        from core.config import load_settings

        assert load_settings({"API_PORT": "http"}).api_port == 8000

    def test_live_mode_requires_sap_credentials(self):
        """Live mode needs a base URL, user and password."""
        from core.config import Settings, validate_settings

        valid, errors = validate_settings(Settings(mode="live"))

        assert valid is False
        assert "SAP_BASE_URL is required for live mode" in errors
        assert len(errors) == 3

    def test_invalid_values_reported(self):
        """Unknown modes and strictness levels are reported."""
        from core.config import Settings, validate_settings

        valid, errors = validate_settings(Settings(mode="hybrid", strictness="lax", api_port=0))

        assert valid is False
        assert errors == [
            "Invalid ERP_MODE: hybrid",
            "Invalid SAFETY_STRICTNESS: lax",
            "Invalid API_PORT: 0",
        ]

    def test_settings_cached_until_reset(self, monkeypatch):
        """get_settings caches until reset_settings is called."""
        from core.config import get_settings, reset_settings

        monkeypatch.setenv("SAFETY_STRICTNESS", "strict")
        reset_settings()
        try:
            first = get_settings()
            monkeypatch.setenv("SAFETY_STRICTNESS", "permissive")
            assert get_settings() is first
            reset_settings()
            assert get_settings().strictness == "permissive"
        finally:
            monkeypatch.delenv("SAFETY_STRICTNESS")
            reset_settings()


def test_observability_summary():
    """A tool call through the server shows up in the metrics summary."""
    import asyncio

    from core.observability.metrics import get_metrics
    from tool_server.server import ToolServer

    server = ToolServer()
    asyncio.run(server.handle_message({
        "jsonrpc": "2.0", "id": 1, "method": "tools/call",
        "params": {"name": "getTableStructure", "arguments": {"tableName": "MARA"}},
    }))

    summary = get_metrics().get_summary()
    assert summary["tools"]["by_name"]["getTableStructure"]["completed"] == 1
    assert "tool.getTableStructure" in summary["timings"]["by_stage"]
