"""Shared pytest fixtures."""

import pytest


@pytest.fixture(autouse=True)
def fresh_metrics():
    """Give every test an empty metrics singleton."""
    from core.observability.metrics import MetricsCollector
    MetricsCollector.reset()
    yield
    MetricsCollector.reset()


@pytest.fixture
def gates():
    """Moderate-strictness gate engine with its own audit log and approval store."""
    from core.safety.gates import SafetyGates
    return SafetyGates(mode="mock", strictness="moderate")


@pytest.fixture
def strict_gates():
    from core.safety.gates import SafetyGates
    return SafetyGates(mode="mock", strictness="strict")


@pytest.fixture
def server(gates):
    """Mock-mode tool server sharing the ``gates`` fixture."""
    from tool_server.server import ToolServer
    return ToolServer(mode="mock", gates=gates)


@pytest.fixture
def clean_artifact():
    return {
        "name": "Z_REPORT",
        "type": "program",
        "source": "REPORT z_report.",
        "transport": "DEVK900001",
    }
