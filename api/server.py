"""FastAPI server for the ERP bridge.

HTTP surface next to the stdio tool server: health, metrics, safety gates
(validation, audit, approvals) and canonical mapping.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.deps import require_api_key
from api.routes import canonical, health, metrics, safety
from core import __version__
from core.config import get_settings
from core.observability.logging import configure_from_settings, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    configure_from_settings(settings)
    logger.info(f"ERP bridge API starting up ({settings.mode} mode, {settings.strictness} strictness)")

    yield

    logger.info("ERP bridge API shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="ERP Bridge API",
        description="Canonical ERP mapping and safety-gated change control for SAP and Infor sources",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    protected = [Depends(require_api_key)]
    app.include_router(health.router, tags=["Health"])
    app.include_router(metrics.router, tags=["Metrics"])
    app.include_router(safety.router, prefix="/safety", tags=["Safety"], dependencies=protected)
    app.include_router(canonical.router, prefix="/canonical", tags=["Canonical"], dependencies=protected)

    return app


# Default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("api.server:app", host=settings.api_host, port=settings.api_port)
