"""Core safety module - gate engine, approvals and transport checks."""

from core.safety.approvals import ApprovalStore
from core.safety.bridge import SafetyBridge, SafetyDecision, artifact_from_object_uri
from core.safety.checks import source_hash
from core.safety.gates import STRICTNESS_LEVELS, Gate, SafetyGates, overall_status
from core.safety.transport import (
    TRANSPORT_PATTERN,
    enforce_transport,
    is_valid_transport,
    validate_transport_chain,
)

__all__ = [
    # Engine
    "Gate",
    "SafetyGates",
    "STRICTNESS_LEVELS",
    "overall_status",
    "source_hash",

    # Approvals
    "ApprovalStore",

    # Bridge
    "SafetyBridge",
    "SafetyDecision",
    "artifact_from_object_uri",

    # Transport
    "TRANSPORT_PATTERN",
    "enforce_transport",
    "is_valid_transport",
    "validate_transport_chain",
]
