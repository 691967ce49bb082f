"""Safety gate endpoints: validation, audit trail and approvals."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from api.deps import get_gates
from core.errors import ApprovalError, SafetyGateError
from core.models.refs import Artifact
from core.safety.gates import SafetyGates


router = APIRouter()


class ApproveRequest(BaseModel):
    """Approve a pending request."""
    approver: str
    comments: Optional[str] = None


class RejectRequest(BaseModel):
    """Reject a pending request."""
    approver: str
    reason: str


def _approval_http_error(e: ApprovalError) -> HTTPException:
    return HTTPException(status_code=404 if e.not_found else 409, detail=str(e))


# =============================================================================
# Validation
# =============================================================================

@router.post("/validate")
async def validate_artifact(
    artifact: Artifact,
    gates: SafetyGates = Depends(get_gates),
) -> Dict[str, Any]:
    """Run the gates against an artifact and record the audit entry."""
    try:
        report = await gates.validate_artifact(artifact)
    except SafetyGateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return report.to_dict()


@router.get("/gates")
async def list_gates(gates: SafetyGates = Depends(get_gates)) -> Dict[str, Any]:
    """List registered gates in evaluation order."""
    return {"strictness": gates.strictness, "gates": gates.get_gate_status()}


# =============================================================================
# Audit Trail
# =============================================================================

@router.get("/audit")
async def get_audit_log(
    artifact_name: Optional[str] = Query(None),
    artifact_type: Optional[str] = Query(None),
    approved: Optional[bool] = Query(None),
    since: Optional[datetime] = Query(None),
    until: Optional[datetime] = Query(None),
    gates: SafetyGates = Depends(get_gates),
) -> Dict[str, Any]:
    """Query the audit trail."""
    filters = {
        "artifact_name": artifact_name,
        "artifact_type": artifact_type,
        "approved": approved,
        "since": since,
        "until": until,
    }
    entries = gates.get_audit_log({k: v for k, v in filters.items() if v is not None})
    return {"entries": [e.to_dict() for e in entries], "total": len(entries)}


# =============================================================================
# Approvals
# =============================================================================

@router.get("/approvals")
async def list_pending_approvals(gates: SafetyGates = Depends(get_gates)) -> List[Dict[str, Any]]:
    """List approval requests still awaiting a decision."""
    return [a.to_dict() for a in gates.get_pending_approvals()]


@router.post("/approvals", status_code=201)
async def request_approval(
    artifact: Artifact,
    gates: SafetyGates = Depends(get_gates),
) -> Dict[str, Any]:
    """Open an approval request for an artifact."""
    try:
        approval = gates.request_approval(artifact)
    except SafetyGateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return approval.to_dict()


@router.post("/approvals/{approval_id}/approve")
async def approve(
    approval_id: str,
    request: ApproveRequest,
    gates: SafetyGates = Depends(get_gates),
) -> Dict[str, Any]:
    try:
        approval = gates.approve_artifact(approval_id, request.approver, request.comments)
    except ApprovalError as e:
        raise _approval_http_error(e)
    return approval.to_dict()


@router.post("/approvals/{approval_id}/reject")
async def reject(
    approval_id: str,
    request: RejectRequest,
    gates: SafetyGates = Depends(get_gates),
) -> Dict[str, Any]:
    try:
        approval = gates.reject_artifact(approval_id, request.approver, request.reason)
    except ApprovalError as e:
        raise _approval_http_error(e)
    return approval.to_dict()
