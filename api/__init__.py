"""API Package.

FastAPI server for the ERP bridge.
"""

from api.server import create_app, app

__all__ = [
    "create_app",
    "app",
]
