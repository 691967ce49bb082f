"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.deps import get_gates
from connectors import AdapterConfig, build_adapter, list_available_adapters
from core import __version__
from core.config import get_settings
from core.models.canonical import utc_timestamp
from core.safety.gates import SafetyGates


router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str
    mode: str
    strictness: str
    adapters: Dict[str, Dict[str, Any]]


@router.get("/health", response_model=HealthResponse)
async def health_check(gates: SafetyGates = Depends(get_gates)) -> HealthResponse:
    """Health check endpoint. Runs every registered adapter's health check."""
    settings = get_settings()
    adapters = {}
    for adapter_type in list_available_adapters():
        adapter = build_adapter(adapter_type, AdapterConfig(mode=settings.mode))
        adapters[adapter_type] = await adapter.health_check()

    healthy = all(a["healthy"] for a in adapters.values())
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        timestamp=utc_timestamp(),
        version=__version__,
        mode=settings.mode,
        strictness=gates.strictness,
        adapters=adapters,
    )


@router.get("/ready")
async def readiness_check() -> Dict[str, str]:
    """Readiness probe for Kubernetes."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness probe for Kubernetes."""
    return {"status": "alive"}
