"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """MedGluco server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # MCP server (assessment tools)
    # Default to loopback; opt into `0.0.0.0` explicitly when you intend remote access.
    medgluco_host: str = "127.0.0.1"
    medgluco_port: int = 8001
    medgluco_log_level: str = "info"
    # Both servers refuse a non-loopback bind unless this is set (no auth layer).
    medgluco_allow_insecure_bind: bool = False

    # Remote waterfall predictor (HTTP service)
    predictor_host: str = "127.0.0.1"
    predictor_port: int = 8003
    cors_allow_origin: str = "*"

    # Orchestrator
    remote_predictor_url: str = "http://127.0.0.1:8003/diabetes-prediction"
    remote_timeout_seconds: float = 8.0
    fallback_delay_seconds: float = 1.0


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
