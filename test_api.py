"""
Tests for the HTTP API.
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(monkeypatch):
    """Client over a fresh app with default settings and a fresh gate engine."""
    from api.deps import reset_gates
    from api.server import create_app
    from core.config import reset_settings

    for name in ("API_KEY", "ERP_MODE", "SAFETY_STRICTNESS"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    reset_gates()
    yield TestClient(create_app())
    reset_settings()
    reset_gates()


CLEAN_ARTIFACT = {
    "name": "Z_REPORT",
    "type": "program",
    "source": "REPORT z_report.",
    "transport": "DEVK900001",
}


class TestHealthEndpoints:
    """Tests for health, readiness and liveness."""

    def test_health(self, client):
        """Health reports mode, strictness and every adapter."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["mode"] == "mock"
        assert data["strictness"] == "moderate"
        assert data["adapters"]["SAP"]["healthy"] is True
        assert "INFOR_LN" in data["adapters"]

    def test_ready_and_live(self, client):
        """Probes answer with fixed payloads."""
        assert client.get("/ready").json() == {"status": "ready"}
        assert client.get("/live").json() == {"status": "alive"}

    def test_metrics(self, client):
        """Metrics expose the summary sections."""
        data = client.get("/metrics").json()

        assert set(data) == {"tools", "safety", "rpc_errors", "timings"}


class TestSafetyEndpoints:
    """Tests for /safety routes."""

    def test_validate(self, client):
        """A clean artifact validates with warnings."""
        response = client.post("/safety/validate", json=CLEAN_ARTIFACT)

        assert response.status_code == 200
        data = response.json()
        assert data["approved"] is True
        assert data["overallStatus"] == "approved_with_warnings"

    def test_validate_without_transport(self, client):
        """Missing transports are rejected."""
        artifact = dict(CLEAN_ARTIFACT, transport=None)

        data = client.post("/safety/validate", json=artifact).json()

        assert data["overallStatus"] == "rejected"

    def test_validate_empty_name(self, client):
        """Empty artifact names are a bad request."""
        response = client.post("/safety/validate", json={"name": ""})

        assert response.status_code == 400

    def test_validate_unknown_type(self, client):
        """Artifact types outside the known set are refused before any gate runs."""
        artifact = dict(CLEAN_ARTIFACT, type="PROGRAM")

        response = client.post("/safety/validate", json=artifact)

        assert response.status_code == 422
        assert client.get("/safety/audit").json()["total"] == 0

    def test_validate_null_metadata(self, client):
        """metadata: null is accepted."""
        response = client.post("/safety/validate", json=dict(CLEAN_ARTIFACT, metadata=None))

        assert response.status_code == 200
        assert response.json()["approved"] is True

    def test_gates_listing(self, client):
        """Gates are listed with the current strictness."""
        data = client.get("/safety/gates").json()

        assert data["strictness"] == "moderate"
        assert len(data["gates"]) == 7

    def test_audit_trail(self, client):
        """Validations show up in the audit trail and filter by approval."""
        client.post("/safety/validate", json=CLEAN_ARTIFACT)

        everything = client.get("/safety/audit").json()
        approved = client.get("/safety/audit", params={"approved": "true"}).json()

        assert everything["total"] == 2
        assert approved["total"] == 1
        assert approved["entries"][0]["artifactName"] == "Z_REPORT"

    def test_approval_lifecycle(self, client):
        """Approvals are created, listed, approved and then final."""
        created = client.post("/safety/approvals", json=CLEAN_ARTIFACT)
        assert created.status_code == 201
        approval_id = created.json()["approvalId"]

        pending = client.get("/safety/approvals").json()
        assert [a["approvalId"] for a in pending] == [approval_id]

        approved = client.post(f"/safety/approvals/{approval_id}/approve", json={"approver": "alice"})
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"

        again = client.post(
            f"/safety/approvals/{approval_id}/reject",
            json={"approver": "bob", "reason": "too late"},
        )
        assert again.status_code == 409

    def test_unknown_approval(self, client):
        """Unknown approval ids return 404."""
        response = client.post("/safety/approvals/APR-999999/approve", json={"approver": "alice"})

        assert response.status_code == 404


class TestCanonicalEndpoints:
    """Tests for /canonical routes."""

    def test_list_entities(self, client):
        """All entity schemas are listed."""
        data = client.get("/canonical/entities").json()

        assert len(data) == 14
        assert data[0]["entityType"] == "Item"

    def test_from_source(self, client):
        """A SAP record maps and validates."""
        response = client.post("/canonical/Item/from-source", json={
            "source_system": "SAP",
            "record": {"MATNR": "MAT-001", "MAKTX": "Steel bolt M8", "MEINS": "EA", "BRGEW": "0.450"},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["entity"]["_entityType"] == "Item"
        assert data["entity"]["grossWeight"] == 0.45
        assert data["validation"] == {"valid": True, "errors": []}

    def test_from_source_unknown_entity(self, client):
        """Unknown entity types return 404."""
        response = client.post("/canonical/Spaceship/from-source", json={"source_system": "SAP", "record": {}})

        assert response.status_code == 404

    def test_from_source_unsupported_system(self, client):
        """Unsupported source systems return 400."""
        response = client.post("/canonical/Item/from-source", json={"source_system": "ORACLE", "record": {}})

        assert response.status_code == 400


class TestApiKey:
    """Tests for the optional API key check."""

    def test_key_required_when_configured(self, client, monkeypatch):
        """With API_KEY set, protected routes need the header."""
        from core.config import reset_settings

        monkeypatch.setenv("API_KEY", "secret")
        reset_settings()

        assert client.get("/safety/gates").status_code == 401
        assert client.get("/safety/gates", headers={"X-API-Key": "secret"}).status_code == 200
        # health stays open
        assert client.get("/health").status_code == 200
