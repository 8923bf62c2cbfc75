"""JoeCoin – Monitoring Backend Application.

FastAPI application that serves the read-only status, vault and event
views of a :class:`StabilizationSystem`.

Run with:
    uvicorn joecoin.monitoring.app:create_app --factory --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from joecoin.core.logging import get_logger
from joecoin.monitoring.api import events_router, router as status_router, vault_router
from joecoin.system import StabilizationSystem, build_system


logger = get_logger(__name__)


# ============================================================================
# Application Setup
# ============================================================================


def create_app(system: Optional[StabilizationSystem] = None) -> FastAPI:
    """Build the monitoring app around ``system``.

    When ``system`` is omitted a fresh one is assembled from the global
    configuration.
    """

    if system is None:
        system = build_system()

    app = FastAPI(
        title="JoeCoin Monitoring Backend",
        description="Read-only views of the JoeCoin stability core",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.system = system

    # ========================================================================
    # Router Registration
    # ========================================================================

    app.include_router(status_router)
    app.include_router(vault_router)
    app.include_router(events_router)

    # ========================================================================
    # Health Check
    # ========================================================================

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic service info."""
        return {
            "service": "JoeCoin Monitoring Backend",
            "version": "0.1.0",
            "status": "operational",
            "docs": "/api/docs",
        }

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint; reports ``paused`` while the core is paused."""
        return {"status": "paused" if app.state.system.status.paused else "healthy"}

    logger.info("Monitoring app created for stable asset %s", system.token.asset_id)
    return app
