"""Audit entry recording and querying.

Provides an append-only audit trail for safety-pipeline decisions. Entries
live in memory for the process lifetime; backends are pluggable so a
deployment can add its own sink next to the in-memory one.
"""

import secrets
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.models.refs import AuditEntry
from core.observability.logging import get_logger

logger = get_logger(__name__)


def new_audit_id(prefix: str = "AUDIT") -> str:
    """Audit identifier: <prefix>-<unix millis>-<6 lowercase hex>."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def _as_datetime(value: Any) -> Optional[datetime]:
    """Accept a datetime or ISO string for time filters. Naive values are UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _matches(
    entry: AuditEntry,
    artifact_name: Optional[str],
    artifact_type: Optional[str],
    approved: Optional[bool],
    since: Optional[datetime],
    until: Optional[datetime],
) -> bool:
    if artifact_name and entry.artifact_name != artifact_name:
        return False
    if artifact_type and entry.artifact_type != artifact_type:
        return False
    if approved is not None and entry.overall_approved is not approved:
        return False
    if since and entry.timestamp < since:
        return False
    if until and entry.timestamp > until:
        return False
    return True


class AuditBackend(ABC):
    """Abstract base class for audit persistence backends."""

    @abstractmethod
    def log(self, entry: AuditEntry) -> None:
        """Persist an audit entry."""
        pass

    @abstractmethod
    def query(
        self,
        artifact_name: Optional[str] = None,
        artifact_type: Optional[str] = None,
        approved: Optional[bool] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[AuditEntry]:
        """Query audit entries with filters, oldest first."""
        pass


class InMemoryAuditBackend(AuditBackend):
    """Process-lifetime, append-only audit store."""

    def __init__(self):
        self._entries: List[AuditEntry] = []

    def log(self, entry: AuditEntry) -> None:
        self._entries.append(entry)

    def query(
        self,
        artifact_name: Optional[str] = None,
        artifact_type: Optional[str] = None,
        approved: Optional[bool] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[AuditEntry]:
        # Snapshot: appends during the scan are not observed
        return [
            entry for entry in list(self._entries)
            if _matches(entry, artifact_name, artifact_type, approved, since, until)
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Clear all entries (for testing)."""
        self._entries.clear()


class AuditLogger:
    """Audit logger fanning entries out to every backend.

    Recording never raises: a failing backend is logged and skipped.

    Usage:
        audit = AuditLogger()
        audit.add_backend(InMemoryAuditBackend())
        audit.log(AuditEntry(id=new_audit_id(), artifact_name="Z_REPORT"))
        audit.query({"artifact_name": "Z_REPORT"})
    """

    def __init__(self, backends: Optional[List[AuditBackend]] = None):
        self._backends: List[AuditBackend] = list(backends or [])

    def add_backend(self, backend: AuditBackend) -> None:
        """Add an audit backend."""
        self._backends.append(backend)

    def log(self, entry: AuditEntry) -> None:
        """Log entry to all backends."""
        for backend in self._backends:
            try:
                backend.log(entry)
            except Exception as e:
                logger.error(
                    f"Audit logging failed for backend {type(backend).__name__}: {e}",
                    extra_fields={"audit_id": entry.id},
                )

    def query(self, filters: Optional[Dict[str, Any]] = None) -> List[AuditEntry]:
        """Query the first backend.

        Supported filters: artifact_name, artifact_type, approved, since, until.
        ``since``/``until`` accept datetimes or ISO strings.
        """
        if not self._backends:
            return []
        filters = filters or {}
        return self._backends[0].query(
            artifact_name=filters.get("artifact_name"),
            artifact_type=filters.get("artifact_type"),
            approved=filters.get("approved"),
            since=_as_datetime(filters.get("since")),
            until=_as_datetime(filters.get("until")),
        )
