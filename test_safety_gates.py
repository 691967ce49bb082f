"""
Tests for the safety-gate engine, approvals and transport helpers.
"""

import asyncio

import pytest


PROGRAM_GATES = [
    "live-mode-audit",
    "syntax-check",
    "atc-check",
    "naming-convention",
    "transport-required",
    "unit-test-coverage",
    "human-approval",
]


def _validate(gates, artifact):
    return asyncio.run(gates.validate_artifact(artifact))


def _gate(report, name):
    return next(g for g in report.gates if g.name == name)


class TestValidateArtifact:
    """Tests for SafetyGates.validate_artifact."""

    def test_clean_program_approved_with_warnings(self, gates, clean_artifact):
        """A clean program on a transport passes with unit-test and review warnings."""
        report = _validate(gates, clean_artifact)

        assert report.approved is True
        assert report.overall_status == "approved_with_warnings"
        assert _gate(report, "syntax-check").status == "passed"
        assert _gate(report, "syntax-check").message == "Syntax check passed"
        assert _gate(report, "unit-test-coverage").status == "warning"
        assert _gate(report, "human-approval").message == "Human review recommended but not required"

    def test_missing_transport_rejected(self, gates, clean_artifact):
        """No transport fails the required transport gate."""
        del clean_artifact["transport"]

        report = _validate(gates, clean_artifact)

        assert report.approved is False
        assert report.overall_status == "rejected"
        transport = _gate(report, "transport-required")
        assert transport.status == "failed"
        assert transport.message == "No transport request assigned"

    def test_select_star_rejected(self, gates, clean_artifact):
        """SELECT * is a critical ATC finding."""
        clean_artifact["source"] = "REPORT z_report.\nSELECT * FROM mara INTO TABLE lt_mara."

        report = _validate(gates, clean_artifact)

        assert report.approved is False
        assert report.overall_status == "rejected"
        atc = _gate(report, "atc-check")
        assert atc.status == "failed"
        assert atc.message == "ATC check failed: 1 critical finding(s)"
        assert atc.details["findings"][0]["rule"] == "FUNC_SELECT_STAR"

    def test_gates_run_in_priority_order(self, gates, clean_artifact):
        """Results follow gate priority."""
        report = _validate(gates, clean_artifact)

        assert [g.name for g in report.gates] == PROGRAM_GATES

    def test_only_applicable_gates_run(self, gates):
        """Configuration artifacts skip the code gates."""
        report = _validate(gates, {"name": "ZCONFIG", "type": "configuration", "transport": "DEVK900001"})

        assert [g.name for g in report.gates] == [
            "live-mode-audit",
            "naming-convention",
            "transport-required",
            "human-approval",
        ]

    def test_unbalanced_blocks_fail_syntax(self, gates, clean_artifact):
        """An IF without ENDIF fails the syntax gate."""
        clean_artifact["source"] = "REPORT z_report.\nIF lv_x = 1.\nWRITE 'x'."

        report = _validate(gates, clean_artifact)

        syntax = _gate(report, "syntax-check")
        assert syntax.status == "failed"
        assert "Unmatched IF/ENDIF: 1 IF vs 0 ENDIF" in syntax.details["errors"]
        assert report.overall_status == "rejected"

    def test_naming_violation_fails(self, gates, clean_artifact):
        """Programs must start with Z or Y."""
        clean_artifact["name"] = "REPORT_X"

        report = _validate(gates, clean_artifact)

        assert _gate(report, "naming-convention").status == "failed"
        assert report.approved is False

    def test_invalid_transport_format_fails(self, gates, clean_artifact):
        """Transports must look like XXXK######."""
        clean_artifact["transport"] = "DEV123"

        report = _validate(gates, clean_artifact)

        transport = _gate(report, "transport-required")
        assert transport.status == "failed"
        assert "Invalid transport number format" in transport.message

    def test_artifact_without_name_raises(self, gates):
        """Artifacts must carry a name."""
        from core.errors import SafetyGateError

        with pytest.raises(SafetyGateError):
            _validate(gates, {"type": "program"})

    def test_non_mapping_artifact_raises(self, gates):
        """Artifacts must be objects."""
        from core.errors import SafetyGateError

        with pytest.raises(SafetyGateError):
            _validate(gates, None)

    @pytest.mark.parametrize("artifact_type", ["PROGRAM", "prog", "table"])
    def test_unknown_artifact_type_raises(self, gates, clean_artifact, artifact_type):
        """Types outside the known set are refused instead of skipping code gates."""
        from core.errors import SafetyGateError

        artifact = dict(
            clean_artifact,
            type=artifact_type,
            source="REPORT z_report.\nSELECT * FROM mara INTO TABLE lt_mara.\nCALL TRANSACTION 'SE38'.",
        )

        with pytest.raises(SafetyGateError) as exc_info:
            _validate(gates, artifact)

        assert f"Invalid artifact type: {artifact_type}" in str(exc_info.value)
        assert "function_module" in str(exc_info.value)
        assert gates.get_audit_log() == []

    def test_every_known_type_accepted(self, gates):
        """Each declared artifact type validates and is kept as a plain string."""
        from core.models.refs import ArtifactType

        for artifact_type in ArtifactType:
            report = _validate(gates, {"name": "Z_THING", "type": artifact_type.value, "transport": "DEVK900001"})
            assert report.gates[0].details["artifact"]["type"] == artifact_type.value

    def test_null_metadata_treated_as_empty(self, gates, clean_artifact):
        """metadata: null is the same as no metadata."""
        report = _validate(gates, dict(clean_artifact, metadata=None))

        assert report.approved is True
        assert report.overall_status == "approved_with_warnings"

    def test_artifact_model_with_empty_name_raises(self, gates):
        """Artifact instances are held to the same name rule as mappings."""
        from core.errors import SafetyGateError
        from core.models.refs import Artifact

        with pytest.raises(SafetyGateError):
            _validate(gates, Artifact(name="", type="program"))

    def test_report_serializes_camel_case(self, gates, clean_artifact):
        """Reports use camelCase keys on the wire."""
        data = _validate(gates, clean_artifact).to_dict()

        assert data["overallStatus"] == "approved_with_warnings"
        assert data["gates"][0]["name"] == "live-mode-audit"

    def test_validation_recorded_in_metrics(self, gates, clean_artifact):
        """Each validation increments the safety counters."""
        from core.observability.metrics import get_metrics

        _validate(gates, clean_artifact)

        safety = get_metrics().get_summary()["safety"]
        assert safety["validations"] == 1
        assert safety["by_status"] == {"approved_with_warnings": 1}
        assert safety["by_gate"]["atc-check"] == {"passed": 1}


class TestStrictness:
    """Tests for strictness levels."""

    def test_strict_requires_human_approval(self, strict_gates, clean_artifact):
        """Under strict, an unapproved artifact is pending review."""
        report = _validate(strict_gates, clean_artifact)

        assert report.approved is False
        assert report.overall_status == "pending_review"
        assert _gate(report, "human-approval").status == "pending_review"

    def test_strict_passes_after_approval(self, strict_gates, clean_artifact):
        """An approved record satisfies the human-approval gate."""
        approval = strict_gates.request_approval(clean_artifact)
        strict_gates.approve_artifact(approval.approval_id, "alice")

        report = _validate(strict_gates, clean_artifact)

        assert _gate(report, "human-approval").status == "passed"
        # unit-test gate fails under strict but is not required
        assert _gate(report, "unit-test-coverage").status == "failed"
        assert report.approved is True
        assert report.overall_status == "approved_with_warnings"

    def test_permissive_fully_approved(self, clean_artifact):
        """Permissive strictness with tests present approves cleanly."""
        from core.safety.gates import SafetyGates

        gates = SafetyGates(strictness="permissive")
        clean_artifact["source"] = (
            "REPORT z_report.\n"
            "CLASS ltc_main DEFINITION FOR TESTING.\n"
            "ENDCLASS."
        )

        report = _validate(gates, clean_artifact)

        assert report.overall_status == "approved"
        assert _gate(report, "human-approval").details["autoApproved"] is True

    def test_permissive_configuration_without_transport_warns(self):
        """Configuration artifacts may skip the transport under permissive."""
        from core.safety.gates import SafetyGates

        gates = SafetyGates(strictness="permissive")
        report = _validate(gates, {"name": "ZCONFIG", "type": "configuration"})

        assert _gate(report, "transport-required").status == "warning"
        assert report.approved is True

    def test_invalid_strictness_falls_back(self):
        """Unknown strictness at construction falls back to moderate."""
        from core.safety.gates import SafetyGates

        assert SafetyGates(strictness="paranoid").strictness == "moderate"

    def test_set_strictness_rejects_unknown(self, gates):
        """set_strictness validates its input."""
        from core.errors import SafetyGateError

        with pytest.raises(SafetyGateError):
            gates.set_strictness("paranoid")

        gates.set_strictness("strict")
        assert gates.strictness == "strict"


class TestGateRegistration:
    """Tests for custom gates."""

    def test_custom_gate_slots_in_by_priority(self, gates, clean_artifact):
        """A custom gate runs at its priority position."""
        gates.register_gate(
            "security-scan",
            lambda a: {"status": "passed", "message": "ok"},
            priority=15,
        )

        report = _validate(gates, clean_artifact)
        names = [g.name for g in report.gates]

        assert names.index("security-scan") == names.index("syntax-check") + 1

    def test_async_gate(self, gates, clean_artifact):
        """Coroutine check functions are awaited."""
        async def remote_check(artifact):
            return {"status": "warning", "message": f"checked {artifact.name}"}

        gates.register_gate("remote", remote_check, priority=60, required=False)

        report = _validate(gates, clean_artifact)

        assert _gate(report, "remote").message == "checked Z_REPORT"

    def test_raising_gate_becomes_required_failure(self, gates, clean_artifact):
        """A gate that raises fails and blocks even when registered optional."""
        def broken(artifact):
            raise RuntimeError("scanner offline")

        gates.register_gate("broken", broken, priority=60, required=False)

        report = _validate(gates, clean_artifact)
        result = _gate(report, "broken")

        assert result.status == "failed"
        assert result.required is True
        assert result.message == "Gate error: scanner offline"
        assert report.overall_status == "rejected"

    def test_invalid_registration(self, gates):
        """Names must be non-empty and check functions callable."""
        from core.errors import SafetyGateError

        with pytest.raises(SafetyGateError):
            gates.register_gate("", lambda a: {})
        with pytest.raises(SafetyGateError):
            gates.register_gate("x", "not callable")

    def test_disable_and_enable_gate(self, strict_gates, clean_artifact):
        """Disabled gates are skipped until re-enabled."""
        strict_gates.disable_gate("human-approval")
        report = _validate(strict_gates, clean_artifact)
        assert "human-approval" not in [g.name for g in report.gates]

        strict_gates.enable_gate("human-approval")
        report = _validate(strict_gates, clean_artifact)
        assert report.overall_status == "pending_review"

    def test_disable_unknown_gate_raises(self, gates):
        """Unknown gate names are rejected."""
        from core.errors import SafetyGateError

        with pytest.raises(SafetyGateError):
            gates.disable_gate("nope")

    def test_gate_status_lists_builtins(self, gates):
        """get_gate_status reports every registered gate."""
        status = {g["name"]: g for g in gates.get_gate_status()}

        assert status["syntax-check"]["priority"] == 10
        assert status["unit-test-coverage"]["required"] is False
        assert status["naming-convention"]["applicableTo"] is None


class TestOverallStatus:
    """Tests for overall_status."""

    def test_combinations(self):
        """Blocking, pending and warning results combine as documented."""
        from core.models.refs import GateResult
        from core.safety.gates import overall_status

        passed = GateResult(name="a", status="passed")
        warning = GateResult(name="b", status="warning")
        failed_optional = GateResult(name="c", status="failed", required=False)
        failed = GateResult(name="d", status="failed")
        pending = GateResult(name="e", status="pending_review")

        assert overall_status([passed]) == "approved"
        assert overall_status([passed, warning]) == "approved_with_warnings"
        assert overall_status([passed, failed_optional]) == "approved_with_warnings"
        assert overall_status([failed]) == "rejected"
        assert overall_status([failed, pending]) == "pending_review"


class TestBatch:
    """Tests for validate_batch."""

    def test_batch_summary(self, gates, clean_artifact):
        """Batch results are summarized."""
        rejected = dict(clean_artifact, name="Z_OTHER", transport=None)

        result = asyncio.run(gates.validate_batch([clean_artifact, rejected]))

        assert result["summary"] == {"total": 2, "approved": 1, "rejected": 1, "pending": 0}
        assert result["results"][0]["artifact"] == {"name": "Z_REPORT", "type": "program"}

    def test_batch_requires_list(self, gates):
        """Non-list input is rejected."""
        from core.errors import SafetyGateError

        with pytest.raises(SafetyGateError):
            asyncio.run(gates.validate_batch("Z_REPORT"))


class TestAuditTrail:
    """Tests for the audit trail."""

    def test_validation_writes_live_and_validation_entries(self, gates, clean_artifact):
        """Each validation records a live-mode entry and a validation entry."""
        _validate(gates, clean_artifact)

        entries = gates.get_audit_log({"artifact_name": "Z_REPORT"})

        assert len(entries) == 2
        assert entries[0].id.startswith("AUDIT-LIVE-")
        assert entries[0].gate == "live-mode-audit"
        assert entries[0].details["artifact"]["sourceLength"] == len("REPORT z_report.")
        assert entries[1].overall_approved is True
        assert entries[1].strictness == "moderate"
        assert len(entries[1].gate_results) == len(PROGRAM_GATES)

    def test_filter_by_approval(self, gates, clean_artifact):
        """The approved filter matches only validation entries with that outcome."""
        _validate(gates, clean_artifact)
        _validate(gates, dict(clean_artifact, name="Z_BAD", transport=None))

        approved = gates.get_audit_log({"approved": True})
        rejected = gates.get_audit_log({"approved": False})

        assert [e.artifact_name for e in approved] == ["Z_REPORT"]
        assert [e.artifact_name for e in rejected] == ["Z_BAD"]

    def test_filter_by_time(self, gates, clean_artifact):
        """since/until accept ISO strings."""
        _validate(gates, clean_artifact)

        assert gates.get_audit_log({"since": "2000-01-01T00:00:00Z"})
        assert gates.get_audit_log({"until": "2000-01-01T00:00:00Z"}) == []

    def test_failing_backend_does_not_break_logging(self):
        """A backend that raises is skipped."""
        from unittest.mock import MagicMock

        from core.audit.events import AuditLogger, InMemoryAuditBackend, new_audit_id
        from core.models.refs import AuditEntry

        broken = MagicMock()
        broken.log.side_effect = IOError("disk full")
        memory = InMemoryAuditBackend()
        audit = AuditLogger([broken, memory])

        audit.log(AuditEntry(id=new_audit_id(), artifact_name="Z_REPORT"))

        assert len(memory) == 1

    def test_audit_id_format(self):
        """Audit ids are prefix, millis and six hex digits."""
        import re

        from core.audit.events import new_audit_id

        assert re.match(r"^AUDIT-\d+-[0-9a-f]{6}$", new_audit_id())


class TestApprovals:
    """Tests for the approval workflow."""

    def test_request_and_approve(self, gates, clean_artifact):
        """Requests start pending and move to approved."""
        approval = gates.request_approval(clean_artifact)

        assert approval.approval_id == "APR-000001"
        assert approval.status == "pending"
        assert [a.approval_id for a in gates.get_pending_approvals()] == ["APR-000001"]

        approved = gates.approve_artifact("APR-000001", "alice", "looks good")

        assert approved.status == "approved"
        assert approved.approver == "alice"
        assert approved.comments == "looks good"
        assert gates.get_pending_approvals() == []
        assert gates.is_approved("Z_REPORT") is True

    def test_reject(self, gates, clean_artifact):
        """Rejections record approver and reason."""
        approval = gates.request_approval(clean_artifact)

        rejected = gates.reject_artifact(approval.approval_id, "bob", "needs tests")

        assert rejected.status == "rejected"
        assert rejected.reason == "needs tests"
        assert gates.is_approved("Z_REPORT") is False

    def test_terminal_states_are_final(self, gates, clean_artifact):
        """A decided request cannot change again."""
        from core.errors import ApprovalError

        approval = gates.request_approval(clean_artifact)
        gates.approve_artifact(approval.approval_id, "alice")

        with pytest.raises(ApprovalError) as exc_info:
            gates.reject_artifact(approval.approval_id, "bob", "changed my mind")

        assert exc_info.value.not_found is False

    def test_unknown_approval(self, gates):
        """Unknown ids raise a not-found ApprovalError."""
        from core.errors import ApprovalError

        with pytest.raises(ApprovalError) as exc_info:
            gates.approve_artifact("APR-999999", "alice")

        assert exc_info.value.not_found is True

    def test_reject_requires_reason(self, gates, clean_artifact):
        """Empty rejection reasons are refused and the request stays pending."""
        from core.errors import ApprovalError

        approval = gates.request_approval(clean_artifact)

        with pytest.raises(ApprovalError):
            gates.reject_artifact(approval.approval_id, "bob", "")

        assert len(gates.get_pending_approvals()) == 1

    def test_callers_receive_copies(self, gates, clean_artifact):
        """Mutating a returned request does not change the store."""
        approval = gates.request_approval(clean_artifact)
        approval.status = "approved"

        assert gates.is_approved("Z_REPORT") is False


class TestTransport:
    """Tests for transport helpers."""

    def test_is_valid_transport(self):
        """Three letters, K, six digits."""
        from core.safety.transport import is_valid_transport

        assert is_valid_transport("DEVK900123") is True
        assert is_valid_transport("devk900123") is False
        assert is_valid_transport("DEVK90012") is False
        assert is_valid_transport(None) is False

    def test_enforce_transport(self, gates):
        """enforce_transport reports validity with a message."""
        assert gates.enforce_transport({"name": "Z_X", "transport": "DEVK900123"})["valid"] is True

        missing = gates.enforce_transport({"name": "Z_X"})
        assert missing == {
            "valid": False,
            "transport": None,
            "message": "Artifact is not assigned to a transport request",
        }

    def test_transport_chain(self, gates):
        """A trailing D in the system id becomes Q and P downstream."""
        chain = gates.validate_transport_chain("ECDK900001")

        assert chain["valid"] is True
        assert [s["system"] for s in chain["stages"]] == ["ECD", "ECQ", "ECP"]
        assert [s["status"] for s in chain["stages"]] == ["completed", "pending", "pending"]
        assert chain["currentStage"] == "DEV"

    def test_transport_chain_invalid(self, gates):
        """Invalid transports yield no stages."""
        chain = gates.validate_transport_chain("bogus")

        assert chain["valid"] is False
        assert chain["stages"] == []


class TestSourceHash:
    """Tests for the source hash."""

    def test_known_values(self):
        """Hash matches h * 31 + c over 32 bits."""
        from core.safety.checks import source_hash

        assert source_hash("") == "0"
        assert source_hash("a") == "61"
        assert source_hash("ab") == format(97 * 31 + 98, "x")
