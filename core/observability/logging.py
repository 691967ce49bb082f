"""
Structured Logging with Correlation IDs

Every record carries whatever correlation ids are active for the current
task:
- request_id: JSON-RPC or HTTP request
- tool_name: tool being dispatched
- artifact_name: artifact in the safety pipeline
- source_system / entity_type: canonical mapping in progress
- approval_id: approval record being transitioned

Records go to stderr. In stdio mode stdout carries JSON-RPC frames only.

Usage:
    from core.observability.logging import get_logger, with_correlation

    logger = get_logger(__name__)

    with with_correlation(request_id=7, tool_name="getSource"):
        logger.info("Dispatching tool", extra_fields={"args": 2})
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, TextIO

PACKAGE_LOGGERS = ("core", "connectors", "tool_server", "api")
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


# =============================================================================
# Correlation Context
# =============================================================================

@dataclass(frozen=True)
class CorrelationContext:
    """Correlation ids active for the current task."""
    request_id: Optional[str] = None
    tool_name: Optional[str] = None
    artifact_name: Optional[str] = None
    source_system: Optional[str] = None
    entity_type: Optional[str] = None
    approval_id: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Set ids only."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def merge(self, **ids: Any) -> "CorrelationContext":
        """Copy with the given ids overlaid. None leaves a field as it is."""
        updates = {k: str(v) for k, v in ids.items() if v is not None}
        return replace(self, **updates)

    def segment(self) -> str:
        """Compact form for human-readable lines, e.g. ``req:7/getSource/Z_REPORT``."""
        parts = []
        if self.request_id:
            parts.append(f"req:{self.request_id}")
        if self.tool_name:
            parts.append(self.tool_name)
        if self.artifact_name:
            parts.append(self.artifact_name)
        if self.source_system:
            parts.append(f"{self.source_system}:{self.entity_type or '-'}")
        return "/".join(parts) or "-"


_context: ContextVar[CorrelationContext] = ContextVar("erp_correlation", default=CorrelationContext())


def get_correlation_context() -> CorrelationContext:
    return _context.get()


@contextmanager
def with_correlation(**ids: Any) -> Iterator[CorrelationContext]:
    """Overlay correlation ids for the duration of the block.

    Blocks nest; leaving a block restores the outer ids.
    """
    ctx = _context.get().merge(**ids)
    token = _context.set(ctx)
    try:
        yield ctx
    finally:
        _context.reset(token)


# =============================================================================
# Formatters
# =============================================================================

def _extra(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "extra_fields", None) or {}


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line:

    {"timestamp": "2026-03-15T12:00:00.000000+00:00", "level": "INFO",
     "logger": "tool_server.server", "message": "Tool call: getSource",
     "request_id": "7", "tool_name": "getSource"}
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(get_correlation_context().to_dict())
        payload.update(_extra(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    2026-03-15 12:00:00 [INFO ] core.safety.gates [req:7/Z_REPORT]: Artifact approved
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line = (
            f"{stamp} [{record.levelname:5}] {record.name} "
            f"[{get_correlation_context().segment()}]: {record.getMessage()}"
        )
        extra = _extra(record)
        if extra:
            line = f"{line} {json.dumps(extra, default=str)}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


# =============================================================================
# Logger with Correlation Support
# =============================================================================

class CorrelatedLogger:
    """
    Thin wrapper over a stdlib logger.

    Each call accepts ``extra_fields=`` (merged into the record) and
    ``exc_info=``; correlation ids are added by the formatters.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def log(self, level: int, msg: str, *args, extra_fields: Optional[Dict[str, Any]] = None,
            exc_info: Any = None) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if exc_info is True:
            exc_info = sys.exc_info()
        record = self._logger.makeRecord(self._logger.name, level, "(unknown file)", 0, msg, args, exc_info)
        record.extra_fields = dict(extra_fields or {})
        self._logger.handle(record)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        kwargs["exc_info"] = True
        self.log(logging.ERROR, msg, *args, **kwargs)


# =============================================================================
# Configuration
# =============================================================================

_loggers: Dict[str, CorrelatedLogger] = {}
_handler: Optional[logging.Handler] = None


def configure_logging(
    level: int = logging.INFO,
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Install one stderr handler on the root logger. Later calls are no-ops.

    Args:
        level: level for the root and package loggers
        json_format: JSON lines instead of human-readable lines
        stream: output stream, stderr by default
    """
    global _handler
    if _handler is not None:
        return

    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setLevel(level)
    _handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(_handler)

    for name in PACKAGE_LOGGERS:
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_from_settings(settings) -> None:
    """Configure from a core.config.Settings (``log_level``, ``log_format``)."""
    level = logging.getLevelName(settings.log_level)
    configure_logging(
        level=level if isinstance(level, int) else logging.INFO,
        json_format=settings.log_format == "json",
    )


def get_logger(name: str) -> CorrelatedLogger:
    """Correlated logger for ``name`` (usually ``__name__``)."""
    logger = _loggers.get(name)
    if logger is None:
        configure_logging()
        logger = _loggers[name] = CorrelatedLogger(logging.getLogger(name))
    return logger
