"""MedGluco MCP Server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastmcp import FastMCP

from medgluco.core.config.settings import get_settings
from medgluco.core.predictor.client import RemotePredictorClient
from medgluco.domains.diabetes.domain_logic.local_fallback import LocalFallbackScorer
from medgluco.domains.diabetes.orchestrator import PredictionOrchestrator, RemotePredictor
from medgluco.domains.diabetes.tools.risk_assessment_tools import (
    register_diabetes_risk_tools,
)

logger = logging.getLogger(__name__)


def create_app(
    *,
    remote_predictor_override: RemotePredictor | None = None,
    fallback_scorer_override: LocalFallbackScorer | None = None,
    fallback_delay_override: float | None = None,
) -> FastMCP:
    """Create and configure the MedGluco MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Creates the remote predictor client (unless overridden), closed on shutdown
    3. Builds the prediction orchestrator with the local fallback scorer
    4. Registers all tools
    """
    settings = get_settings()

    # --- Remote predictor client ---
    remote: RemotePredictor | None
    owned_client: RemotePredictorClient | None = None
    if remote_predictor_override is not None:
        remote = remote_predictor_override
    elif settings.remote_predictor_url:
        http_client = httpx.AsyncClient(timeout=settings.remote_timeout_seconds)
        remote = owned_client = RemotePredictorClient(http_client, settings.remote_predictor_url)
        logger.info("Remote predictor configured for %s", settings.remote_predictor_url)
    else:
        remote = None
        logger.warning("REMOTE_PREDICTOR_URL is empty; every assessment uses the local fallback")

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[dict]:
        try:
            yield {}
        finally:
            if owned_client is not None:
                await owned_client.aclose()
                logger.info("Remote predictor client closed")

    # --- Server instance ---
    server = FastMCP(
        "MedGluco Diabetes Risk",
        instructions=(
            "Diabetes risk screening server. Estimates diabetes risk, a likely "
            "subtype and the contributing risk factors from six health metrics."
        ),
        lifespan=lifespan,
    )

    # --- Orchestrator ---
    orchestrator = PredictionOrchestrator(
        remote,
        fallback_scorer=fallback_scorer_override,
        timeout_seconds=settings.remote_timeout_seconds,
        fallback_delay_seconds=(
            settings.fallback_delay_seconds
            if fallback_delay_override is None
            else fallback_delay_override
        ),
    )

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "MedGluco Diabetes Risk",
            "version": "0.1.0",
            "remote_predictor_url": settings.remote_predictor_url,
            "remote_enabled": remote is not None,
        }

    register_diabetes_risk_tools(server, orchestrator)
    logger.info("Diabetes risk assessment tools registered")

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
