"""FastAPI application setup for robostate.

Provides the robot state query endpoints, a MessagePack RPC endpoint and
producer ingest routes.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.core import (
    MeshStore,
    RobotStateService,
    Settings,
    StateStore,
    configure_logging,
    get_settings,
)

from .routes import state, telemetry

logger = structlog.get_logger()

# Global instances (initialized in lifespan)
state_store: StateStore | None = None
state_service: RobotStateService | None = None


def get_state_store() -> StateStore:
    """Get the state store instance."""
    if state_store is None:
        raise RuntimeError("State store not initialized")
    return state_store


def get_state_service() -> RobotStateService:
    """Get the state service instance."""
    if state_service is None:
        raise RuntimeError("State service not initialized")
    return state_service


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        global state_store, state_service

        configure_logging(settings)

        state_store = StateStore(
            fault_retention=timedelta(seconds=settings.fault_retention_s),
        )
        mesh_store = MeshStore(settings.resolved_mesh_dir)
        state_service = RobotStateService(state_store, mesh_store)

        logger.info(
            "application_started",
            server_id=settings.server_id,
            api_port=settings.api_port,
            mesh_dir=str(mesh_store.directory),
        )

        yield

        state_service = None
        state_store = None

        logger.info("application_stopped")

    app = FastAPI(
        title="Robostate API",
        description="Robot state snapshot service",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(state.router, tags=["state"])
    app.include_router(telemetry.router, prefix="/telemetry", tags=["telemetry"])

    # Health check
    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        store = get_state_store()
        snapshot = store.snapshot() if store.has_snapshot else None

        return {
            "status": "healthy",
            "server_id": settings.server_id,
            "snapshot": {
                "published": snapshot is not None,
                "sequence": snapshot.sequence if snapshot else None,
                "published_at": snapshot.published_at.isoformat() if snapshot else None,
            },
            "faults": {
                "active": store.faults.active_count,
                "historical": store.faults.historical_count,
            },
        }

    @app.get("/")
    async def root() -> dict[str, str]:
        """API identification."""
        return {"name": "Robostate API", "version": app.version, "docs": "/docs"}

    return app


# For running with uvicorn directly
app = create_app()
