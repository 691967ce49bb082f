"""
Observability Module

Provides:
- Structured logging with correlation IDs
- Metrics collection (tool calls, safety validations, processing times)
"""

from core.observability.metrics import (
    MetricsCollector,
    get_metrics,
    record_tool_started,
    record_tool_completed,
    record_tool_failed,
    record_processing_time,
)

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    with_correlation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "get_metrics",
    "record_tool_started",
    "record_tool_completed",
    "record_tool_failed",
    "record_processing_time",
    # Logging
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "with_correlation",
]
