"""Safety bridge between write-capable tools and the gate engine.

Tools never talk to SafetyGates directly: they describe the operation and
the artifact it would change, and the bridge answers allowed or not.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.models.refs import ApprovalRequest, Artifact, GateResult
from core.observability.logging import get_logger, with_correlation
from core.safety.gates import ArtifactInput, SafetyGates

logger = get_logger(__name__)


@dataclass
class SafetyDecision:
    """Bridge answer for one proposed write."""
    allowed: bool
    reason: str
    gate_results: List[GateResult] = field(default_factory=list)
    overall_status: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reason": self.reason,
            "gateResults": [r.to_dict() for r in self.gate_results],
            "overallStatus": self.overall_status,
        }


class SafetyBridge:
    """Gate-checks write operations requested by tools."""

    def __init__(self, gates: Optional[SafetyGates] = None, mode: str = "mock"):
        self.gates = gates or SafetyGates(mode=mode)

    @property
    def strictness(self) -> str:
        return self.gates.strictness

    async def check(
        self,
        tool_name: str,
        operation: str,
        artifact: ArtifactInput,
        dry_run: bool = False,
    ) -> SafetyDecision:
        """Decide whether a write may proceed. Dry runs are always allowed."""
        with with_correlation(tool_name=tool_name):
            if dry_run:
                logger.debug(f"Dry run for {operation}, gates skipped")
                return SafetyDecision(allowed=True, reason="Dry run: no changes will be made")

            report = await self.gates.validate_artifact(artifact)
            if report.approved:
                reason = f"Passed safety gates ({report.overall_status})"
            else:
                blocking = [r.name for r in report.gates if r.blocks]
                reason = f"Blocked by safety gates: {', '.join(blocking)}"

            logger.info(
                f"Safety check for {operation}: {'allowed' if report.approved else 'blocked'}",
                extra_fields={"overall_status": report.overall_status},
            )
            return SafetyDecision(
                allowed=report.approved,
                reason=reason,
                gate_results=list(report.gates),
                overall_status=report.overall_status,
            )

    def request_approval(self, artifact: ArtifactInput, gate_results: Optional[List[GateResult]] = None) -> ApprovalRequest:
        return self.gates.request_approval(artifact, gate_results or [])

    def get_audit_trail(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self.gates.get_audit_log(filters)]


_SOURCE_SUFFIXES = (("source", "main"), ("source",))


def artifact_from_object_uri(object_uri: str, source: Optional[str], transport: Optional[str] = None) -> Artifact:
    """Derive a gate artifact from an ADT object URI.

    ``/sap/bc/adt/programs/programs/z_report`` and
    ``/sap/bc/adt/programs/programs/z_report/source/main#start=1`` both give
    program ``Z_REPORT``.
    """
    path = (object_uri or "").split("#", 1)[0].split("?", 1)[0]
    parts = [p for p in path.split("/") if p]
    for suffix in _SOURCE_SUFFIXES:
        if len(parts) > len(suffix) and tuple(p.lower() for p in parts[-len(suffix):]) == suffix:
            parts = parts[:-len(suffix)]
            break
    name = parts[-1].upper() if parts else "UNKNOWN"
    path = "/".join(parts)

    artifact_type = "program"
    if "oo/classes" in path:
        artifact_type = "class"
    elif "oo/interfaces" in path:
        artifact_type = "interface"
    elif "functions/groups" in path:
        artifact_type = "function_module"
    elif "programs/includes" in path:
        artifact_type = "include"

    return Artifact(name=name, type=artifact_type, source=source, transport=transport)
