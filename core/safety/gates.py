"""Safety-gate engine.

Enforces the pipeline for AI-generated ABAP artifacts:
    generate -> automated quality checks -> human review gate -> transport import

Gates are registered by name with a priority (lower runs first) and run
sequentially for every artifact they apply to. Each emits one of
passed | failed | warning | pending_review; strictness decides how much of
that blocks approval. Every validation appends to the audit trail.

Usage:
    gates = SafetyGates(strictness="moderate")
    report = await gates.validate_artifact({
        "name": "Z_REPORT", "type": "program",
        "source": "REPORT z_report.", "transport": "DEVK900001",
    })
    report.approved, report.overall_status
"""

import inspect
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from core.audit.events import AuditLogger, InMemoryAuditBackend, new_audit_id
from core.errors import SafetyGateError
from core.models.refs import (
    ApprovalRequest,
    Artifact,
    ArtifactType,
    AuditEntry,
    GateResult,
    GateStatus,
    GateSummary,
    OverallStatus,
    Strictness,
    ValidationReport,
)
from core.observability.logging import get_logger, with_correlation
from core.observability.metrics import get_metrics
from core.safety import checks
from core.safety.approvals import ApprovalStore
from core.safety.transport import check_transport_required, enforce_transport, validate_transport_chain

logger = get_logger(__name__)

STRICTNESS_LEVELS = tuple(s.value for s in Strictness)
ARTIFACT_TYPES = tuple(t.value for t in ArtifactType)

CheckFn = Callable[[Artifact], Union[Mapping[str, Any], Awaitable[Mapping[str, Any]]]]
ArtifactInput = Union[Artifact, Mapping[str, Any]]


@dataclass
class Gate:
    """A registered gate."""
    name: str
    check_fn: CheckFn
    priority: int = 50
    required: bool = True
    applicable_to: Optional[FrozenSet[str]] = None
    enabled: bool = True

    def applies_to(self, artifact_type: Optional[str]) -> bool:
        return self.applicable_to is None or artifact_type in self.applicable_to

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "priority": self.priority,
            "required": self.required,
            "enabled": self.enabled,
            "applicableTo": sorted(self.applicable_to) if self.applicable_to is not None else None,
        }


def overall_status(results: Iterable[GateResult]) -> OverallStatus:
    """Combine gate results.

    pending_review when a required gate blocks and some gate is pending;
    rejected when a required gate blocks otherwise; approved_with_warnings
    when anything warned or a non-required gate failed; approved otherwise.
    """
    results = list(results)
    blocked = any(r.blocks for r in results)
    pending = any(r.status == GateStatus.PENDING_REVIEW.value for r in results)

    if blocked:
        return OverallStatus.PENDING_REVIEW if pending else OverallStatus.REJECTED
    if any(r.status in (GateStatus.FAILED.value, GateStatus.WARNING.value) for r in results):
        return OverallStatus.APPROVED_WITH_WARNINGS
    return OverallStatus.APPROVED


class SafetyGates:
    """Gate registry, ordered evaluation, audit trail and approval store."""

    def __init__(
        self,
        mode: str = "mock",
        strictness: str = Strictness.MODERATE.value,
        audit: Optional[AuditLogger] = None,
        approvals: Optional[ApprovalStore] = None,
    ):
        self.mode = mode
        if strictness not in STRICTNESS_LEVELS:
            logger.warning(f"Invalid strictness '{strictness}', falling back to moderate")
            strictness = Strictness.MODERATE.value
        self.strictness = strictness

        self._gates: Dict[str, Gate] = {}
        self._audit = audit or AuditLogger([InMemoryAuditBackend()])
        self._approvals = approvals or ApprovalStore()

        self._register_builtin_gates()

    # =========================================================================
    # Gate Registration
    # =========================================================================

    def register_gate(
        self,
        name: str,
        check_fn: CheckFn,
        priority: int = 50,
        required: bool = True,
        applicable_to: Optional[Iterable[str]] = None,
    ) -> None:
        """Register a gate. Re-registering a name overwrites it with a warning.

        ``check_fn(artifact)`` returns ``{status, message, details}`` and may
        be a coroutine function.
        """
        if not isinstance(name, str) or not name:
            raise SafetyGateError("Gate name must be a non-empty string")
        if not callable(check_fn):
            raise SafetyGateError("Gate checkFn must be a function")

        if name in self._gates:
            logger.warning(f"Gate '{name}' already registered, overwriting")

        self._gates[name] = Gate(
            name=name,
            check_fn=check_fn,
            priority=priority,
            required=required,
            applicable_to=frozenset(applicable_to) if applicable_to is not None else None,
        )
        logger.debug(f"Gate registered: {name}", extra_fields={"priority": priority, "required": required})

    def _register_builtin_gates(self) -> None:
        self.register_gate("live-mode-audit", self._live_mode_audit, priority=5, required=False)
        self.register_gate("syntax-check", checks.check_syntax, priority=10, applicable_to=checks.CODE_TYPES)
        self.register_gate(
            "atc-check",
            lambda a: checks.check_atc(a, self.strictness),
            priority=20,
            applicable_to=checks.ATC_TYPES,
        )
        self.register_gate(
            "naming-convention",
            lambda a: checks.check_naming_convention(a, self.strictness),
            priority=30,
        )
        self.register_gate(
            "transport-required",
            lambda a: check_transport_required(a, self.strictness),
            priority=40,
        )
        self.register_gate(
            "unit-test-coverage",
            lambda a: checks.check_unit_test_coverage(a, self.strictness),
            priority=50,
            required=False,
            applicable_to=checks.UNIT_TEST_TYPES,
        )
        self.register_gate(
            "human-approval",
            lambda a: checks.check_human_approval(a, self.strictness, self.is_approved(a.name)),
            priority=90,
        )

    def _live_mode_audit(self, artifact: Artifact) -> Dict[str, Any]:
        """Always passes; records the evaluation with a hash of the source."""
        details: Dict[str, Any] = {
            "gate": "live-mode-audit",
            "artifact": {
                "name": artifact.name,
                "type": artifact.type,
                "transport": artifact.transport or None,
            },
            "mode": self.mode,
        }
        if artifact.source:
            details["artifact"]["sourceLength"] = len(artifact.source)
            details["artifact"]["sourceHash"] = checks.source_hash(artifact.source)

        self._audit.log(AuditEntry(
            id=new_audit_id("AUDIT-LIVE"),
            artifact_name=artifact.name,
            artifact_type=artifact.type,
            transport=artifact.transport or None,
            gate="live-mode-audit",
            mode=self.mode,
            details=details,
        ))
        logger.info("Live mode audit", extra_fields=details)

        return {
            "status": GateStatus.PASSED.value,
            "message": f"Audit recorded for {artifact.name}",
            "details": details,
        }

    def enable_gate(self, name: str) -> None:
        self._get_gate(name).enabled = True

    def disable_gate(self, name: str) -> None:
        self._get_gate(name).enabled = False

    def _get_gate(self, name: str) -> Gate:
        gate = self._gates.get(name)
        if gate is None:
            raise SafetyGateError(f"Unknown gate: {name}")
        return gate

    def get_gate_status(self) -> List[Dict[str, Any]]:
        """List registered gates with their configuration."""
        return [gate.to_dict() for gate in self._gates.values()]

    def set_strictness(self, level: str) -> None:
        if level not in STRICTNESS_LEVELS:
            raise SafetyGateError(
                f"Invalid strictness level: {level}. Must be one of: {', '.join(STRICTNESS_LEVELS)}"
            )
        self.strictness = level
        logger.info(f"Strictness changed to: {level}")

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def _coerce_artifact(artifact: ArtifactInput) -> Artifact:
        if isinstance(artifact, Artifact):
            if not artifact.name:
                raise SafetyGateError("Artifact must have a name")
            return artifact
        if not isinstance(artifact, Mapping):
            raise SafetyGateError("Artifact must be a non-null object")
        if not artifact.get("name"):
            raise SafetyGateError("Artifact must have a name")
        artifact_type = artifact.get("type")
        if artifact_type is not None and artifact_type not in ARTIFACT_TYPES:
            raise SafetyGateError(
                f"Invalid artifact type: {artifact_type}. Must be one of: {', '.join(ARTIFACT_TYPES)}"
            )
        try:
            return Artifact.model_validate(dict(artifact))
        except ValidationError as e:
            raise SafetyGateError(f"Invalid artifact: {e}") from e

    def _ordered_gates(self, artifact_type: Optional[str]) -> List[Gate]:
        # sorted() is stable, so ties keep registration order
        gates = [g for g in self._gates.values() if g.enabled and g.applies_to(artifact_type)]
        return sorted(gates, key=lambda g: g.priority)

    async def _run_gate(self, gate: Gate, artifact: Artifact) -> GateResult:
        try:
            outcome = gate.check_fn(artifact)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            return GateResult(
                name=gate.name,
                status=outcome["status"],
                message=outcome.get("message", ""),
                details=dict(outcome.get("details") or {}),
                required=gate.required,
            )
        except Exception as e:
            logger.warning(f"Gate {gate.name} raised: {e}")
            return GateResult(
                name=gate.name,
                status=GateStatus.FAILED.value,
                message=f"Gate error: {e}",
                details={"error": str(e)},
                required=True,
            )

    async def validate_artifact(self, artifact: ArtifactInput) -> ValidationReport:
        """Run every enabled, applicable gate in priority order.

        Raises:
            SafetyGateError: if the artifact is not a mapping or has no name
        """
        artifact = self._coerce_artifact(artifact)
        start = time.perf_counter()

        with with_correlation(artifact_name=artifact.name):
            results = []
            for gate in self._ordered_gates(artifact.type):
                results.append(await self._run_gate(gate, artifact))

            status = overall_status(results)
            report = ValidationReport(
                approved=not any(r.blocks for r in results),
                overall_status=status,
                gates=results,
            )
            self._record_audit(artifact, report)

            duration_ms = (time.perf_counter() - start) * 1000
            get_metrics().record_validation(
                report.overall_status,
                [{"name": r.name, "status": r.status} for r in results],
                duration_ms,
            )
            logger.info(
                f"Artifact {artifact.name} validated: {report.overall_status}",
                extra_fields={"approved": report.approved, "gates": len(results)},
            )

        return report

    async def validate_batch(self, artifacts: List[ArtifactInput]) -> Dict[str, Any]:
        """Validate several artifacts in order and summarize."""
        if not isinstance(artifacts, (list, tuple)):
            raise SafetyGateError("Artifacts must be an array")

        results = []
        for item in artifacts:
            artifact = self._coerce_artifact(item)
            report = await self.validate_artifact(artifact)
            entry = {"artifact": {"name": artifact.name, "type": artifact.type}}
            entry.update(report.to_dict())
            results.append(entry)

        summary = {
            "total": len(results),
            "approved": sum(1 for r in results if r["approved"]),
            "rejected": sum(1 for r in results if not r["approved"] and r["overallStatus"] == "rejected"),
            "pending": sum(1 for r in results if r["overallStatus"] == "pending_review"),
        }
        return {"results": results, "summary": summary}

    # =========================================================================
    # Audit Trail
    # =========================================================================

    def _record_audit(self, artifact: Artifact, report: ValidationReport) -> AuditEntry:
        entry = AuditEntry(
            id=new_audit_id(),
            artifact_name=artifact.name,
            artifact_type=artifact.type,
            transport=artifact.transport or None,
            gate_results=[GateSummary.from_result(r) for r in report.gates],
            overall_approved=report.approved,
            strictness=self.strictness,
        )
        self._audit.log(entry)
        logger.debug("Audit trail created", extra_fields={"audit_id": entry.id})
        return entry

    def get_audit_log(self, filters: Optional[Dict[str, Any]] = None) -> List[AuditEntry]:
        """Query the audit trail.

        Filters: artifact_name, artifact_type, approved, since, until.
        """
        return self._audit.query(filters)

    # =========================================================================
    # Approval Workflow
    # =========================================================================

    @property
    def approvals(self) -> ApprovalStore:
        return self._approvals

    def request_approval(self, artifact: ArtifactInput, gate_results: Iterable[GateResult] = ()) -> ApprovalRequest:
        return self._approvals.request(self._coerce_artifact(artifact), gate_results)

    def approve_artifact(self, approval_id: str, approver: str, comments: Optional[str] = None) -> ApprovalRequest:
        return self._approvals.approve(approval_id, approver, comments)

    def reject_artifact(self, approval_id: str, approver: str, reason: str) -> ApprovalRequest:
        return self._approvals.reject(approval_id, approver, reason)

    def get_pending_approvals(self) -> List[ApprovalRequest]:
        return self._approvals.pending()

    def is_approved(self, artifact_name: str) -> bool:
        return self._approvals.is_approved(artifact_name)

    # =========================================================================
    # Transport Enforcement
    # =========================================================================

    def enforce_transport(self, artifact: ArtifactInput) -> Dict[str, Any]:
        return enforce_transport(self._coerce_artifact(artifact))

    def validate_transport_chain(self, transport_number: Optional[str]) -> Dict[str, Any]:
        return validate_transport_chain(transport_number)
