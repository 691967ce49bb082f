"""API Routes Package."""

from api.routes import canonical, health, metrics, safety

__all__ = [
    "canonical",
    "health",
    "metrics",
    "safety",
]
