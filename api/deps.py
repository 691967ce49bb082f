"""Shared dependencies for the HTTP routes."""

from typing import Optional

from fastapi import Header, HTTPException

from core.config import get_settings
from core.safety.gates import SafetyGates


# Process-wide gate engine shared by every route (lazy init)
_gates: Optional[SafetyGates] = None


def get_gates() -> SafetyGates:
    """Get or create the gate engine, configured from settings."""
    global _gates
    if _gates is None:
        settings = get_settings()
        _gates = SafetyGates(mode=settings.mode, strictness=settings.strictness)
    return _gates


def reset_gates() -> None:
    global _gates
    _gates = None


async def require_api_key(x_api_key: Optional[str] = Header(None)) -> None:
    """Placeholder key check. No-op unless API_KEY is configured."""
    expected = get_settings().api_key
    if expected and x_api_key != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
