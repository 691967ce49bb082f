"""Core audit module - append-only audit trail for safety decisions."""

from core.audit.events import (
    AuditBackend,
    AuditLogger,
    InMemoryAuditBackend,
    new_audit_id,
)

__all__ = [
    "AuditBackend",
    "AuditLogger",
    "InMemoryAuditBackend",
    "new_audit_id",
]
