"""MedGluco entry points.

``python -m medgluco.core.server.main`` starts the MCP assessment server;
``medgluco-predictor`` starts the remote waterfall predictor.
"""

from __future__ import annotations

import logging
from ipaddress import ip_address

from medgluco.core.config.settings import Settings, get_settings


def _is_loopback_host(host: str) -> bool:
    if host in {"localhost"}:
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def _check_bind(settings: Settings, host: str) -> None:
    if not settings.medgluco_allow_insecure_bind and not _is_loopback_host(host):
        raise RuntimeError(
            "Refusing to bind to a non-loopback host without an auth layer. "
            "Set MEDGLUCO_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=getattr(logging, settings.medgluco_log_level.upper(), logging.INFO))


def run() -> None:
    """Start the MCP assessment server with Streamable HTTP transport."""
    from medgluco.core.server.app import create_app

    settings = get_settings()
    _configure_logging(settings)
    _check_bind(settings, settings.medgluco_host)

    logger = logging.getLogger(__name__)
    logger.info(
        "Starting MedGluco assessment server on %s:%d",
        settings.medgluco_host,
        settings.medgluco_port,
    )

    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.medgluco_host,
        port=settings.medgluco_port,
    )


def run_predictor() -> None:
    """Start the remote waterfall predictor HTTP service."""
    import uvicorn

    from medgluco.core.server.predictor_app import create_predictor_app

    settings = get_settings()
    _configure_logging(settings)
    _check_bind(settings, settings.predictor_host)

    logger = logging.getLogger(__name__)
    logger.info(
        "Starting diabetes prediction service on %s:%d",
        settings.predictor_host,
        settings.predictor_port,
    )

    uvicorn.run(
        create_predictor_app(cors_allow_origin=settings.cors_allow_origin),
        host=settings.predictor_host,
        port=settings.predictor_port,
        log_level=settings.medgluco_log_level.lower(),
    )


if __name__ == "__main__":
    run()
