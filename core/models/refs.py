"""Safety pipeline models: artifacts, gate results, audit entries and approvals.

Field names are snake_case in Python and camelCase on the wire
(``artifact_name`` <-> ``artifactName``). Use ``to_dict()`` for the wire form.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Base for models serialized with camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Enums
# =============================================================================

class ArtifactType(str, Enum):
    """Kinds of artifact the safety pipeline accepts."""
    PROGRAM = "program"
    CLASS = "class"
    FUNCTION_MODULE = "function_module"
    CONFIGURATION = "configuration"
    INTERFACE = "interface"
    INCLUDE = "include"


class GateStatus(str, Enum):
    """Outcome of a single gate."""
    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"
    PENDING_REVIEW = "pending_review"


class OverallStatus(str, Enum):
    """Combined outcome of a validation run."""
    APPROVED = "approved"
    APPROVED_WITH_WARNINGS = "approved_with_warnings"
    PENDING_REVIEW = "pending_review"
    REJECTED = "rejected"


class Strictness(str, Enum):
    """Pipeline policy dial."""
    STRICT = "strict"
    MODERATE = "moderate"
    PERMISSIVE = "permissive"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# =============================================================================
# Artifact and Gate Results
# =============================================================================

class Artifact(WireModel):
    """A candidate code or configuration unit submitted to the pipeline."""
    name: str = Field(..., description="Artifact name, e.g. Z_REPORT")
    type: Optional[ArtifactType] = Field(None, description="program, class, function_module, configuration, interface or include")
    source: Optional[str] = Field(None, description="Source text, for code artifacts")
    transport: Optional[str] = Field(None, description="Transport request, e.g. DEVK900123")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value: Any) -> Any:
        return {} if value is None else value


class GateResult(WireModel):
    """Result emitted by one gate for one artifact."""
    name: str
    status: GateStatus
    message: str = ""
    details: Dict[str, Any] = Field(default_factory=dict)
    required: bool = True

    @property
    def blocks(self) -> bool:
        """True when this result prevents approval."""
        return self.required and self.status in (GateStatus.FAILED.value, GateStatus.PENDING_REVIEW.value)


class GateSummary(WireModel):
    """Compact gate result kept in audit entries and approval requests."""
    name: str
    status: GateStatus
    message: str = ""

    @classmethod
    def from_result(cls, result: GateResult) -> "GateSummary":
        return cls(name=result.name, status=result.status, message=result.message)


class ValidationReport(WireModel):
    """Outcome of validating one artifact through every applicable gate."""
    approved: bool
    overall_status: OverallStatus
    gates: List[GateResult] = Field(default_factory=list)


# =============================================================================
# Audit and Approval Records
# =============================================================================

class AuditEntry(WireModel):
    """An append-only audit record.

    Validation runs fill ``gate_results``, ``overall_approved`` and
    ``strictness``. Entries written by a gate itself (live-mode audit) set
    ``gate`` and carry their payload in ``details``.
    """
    id: str
    timestamp: datetime = Field(default_factory=utc_now)
    artifact_name: Optional[str] = None
    artifact_type: Optional[str] = None
    transport: Optional[str] = None
    gate_results: List[GateSummary] = Field(default_factory=list)
    overall_approved: Optional[bool] = None
    strictness: Optional[Strictness] = None
    gate: Optional[str] = None
    mode: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class ApprovalRequest(WireModel):
    """Human approval record. Transitions pending -> approved | rejected only."""
    approval_id: str
    artifact_name: str
    artifact_type: Optional[str] = None
    transport: Optional[str] = None
    gate_results: List[GateSummary] = Field(default_factory=list)
    status: ApprovalStatus = ApprovalStatus.PENDING.value
    requested_at: datetime = Field(default_factory=utc_now)
    approver: Optional[str] = None
    approved_at: Optional[datetime] = None
    comments: Optional[str] = None
    reason: Optional[str] = None
