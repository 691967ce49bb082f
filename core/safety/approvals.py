"""In-memory approval workflow store.

Approval records move pending -> approved or pending -> rejected, and never
leave a terminal state. Callers always receive copies.
"""

from typing import Dict, Iterable, List, Optional

from core.errors import ApprovalError
from core.models.refs import (
    ApprovalRequest,
    ApprovalStatus,
    Artifact,
    GateResult,
    GateSummary,
    utc_now,
)
from core.observability.logging import get_logger, with_correlation

logger = get_logger(__name__)


class ApprovalStore:
    """Approval requests keyed by ``APR-<6 digits>``."""

    def __init__(self):
        self._approvals: Dict[str, ApprovalRequest] = {}
        self._counter = 0

    def _next_id(self) -> str:
        self._counter += 1
        return f"APR-{self._counter:06d}"

    def _pending(self, approval_id: str) -> ApprovalRequest:
        request = self._approvals.get(approval_id)
        if request is None:
            raise ApprovalError(
                f"Approval request not found: {approval_id}",
                approval_id=approval_id,
                not_found=True,
            )
        if request.status != ApprovalStatus.PENDING.value:
            raise ApprovalError(
                f"Approval {approval_id} is already {request.status}",
                approval_id=approval_id,
            )
        return request

    def request(self, artifact: Artifact, gate_results: Iterable[GateResult] = ()) -> ApprovalRequest:
        """Create a pending approval request for an artifact."""
        approval_id = self._next_id()
        request = ApprovalRequest(
            approval_id=approval_id,
            artifact_name=artifact.name,
            artifact_type=artifact.type,
            transport=artifact.transport or None,
            gate_results=[GateSummary.from_result(r) for r in gate_results],
            status=ApprovalStatus.PENDING,
        )
        self._approvals[approval_id] = request

        with with_correlation(approval_id=approval_id, artifact_name=artifact.name):
            logger.info(f"Approval requested: {approval_id}")
        return request.model_copy(deep=True)

    def approve(self, approval_id: str, approver: str, comments: Optional[str] = None) -> ApprovalRequest:
        """Approve a pending request.

        Raises:
            ApprovalError: missing or non-pending request, or empty approver
        """
        request = self._pending(approval_id)
        if not isinstance(approver, str) or not approver:
            raise ApprovalError("Approver must be a non-empty string", approval_id=approval_id)

        request.status = ApprovalStatus.APPROVED.value
        request.approver = approver
        request.approved_at = utc_now()
        request.comments = comments or None

        with with_correlation(approval_id=approval_id, artifact_name=request.artifact_name):
            logger.info(f"Artifact approved: {approval_id}", extra_fields={"approver": approver})
        return request.model_copy(deep=True)

    def reject(self, approval_id: str, approver: str, reason: str) -> ApprovalRequest:
        """Reject a pending request.

        Raises:
            ApprovalError: missing or non-pending request, empty approver or reason
        """
        request = self._pending(approval_id)
        if not isinstance(approver, str) or not approver:
            raise ApprovalError("Approver must be a non-empty string", approval_id=approval_id)
        if not isinstance(reason, str) or not reason:
            raise ApprovalError("Rejection reason must be a non-empty string", approval_id=approval_id)

        request.status = ApprovalStatus.REJECTED.value
        request.approver = approver
        request.approved_at = utc_now()
        request.reason = reason

        with with_correlation(approval_id=approval_id, artifact_name=request.artifact_name):
            logger.info(
                f"Artifact rejected: {approval_id}",
                extra_fields={"approver": approver, "reason": reason},
            )
        return request.model_copy(deep=True)

    def get(self, approval_id: str) -> Optional[ApprovalRequest]:
        request = self._approvals.get(approval_id)
        return request.model_copy(deep=True) if request else None

    def pending(self) -> List[ApprovalRequest]:
        return [
            r.model_copy(deep=True)
            for r in list(self._approvals.values())
            if r.status == ApprovalStatus.PENDING.value
        ]

    def is_approved(self, artifact_name: str) -> bool:
        """True iff an approved record exists for the artifact name."""
        return any(
            r.artifact_name == artifact_name and r.status == ApprovalStatus.APPROVED.value
            for r in self._approvals.values()
        )
