"""
Configuration for the Resource Proxy.

Uses pydantic-settings for environment variable loading. Every field can be
overridden with a ``PROXY_`` prefixed variable, e.g. ``PROXY_PEER_PORT=2403``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

API_VERSION = 0.1


class Settings(BaseSettings):
    """Proxy configuration loaded from environment."""

    # Local schema mirror
    resources_directory: str = Field(
        default="resources", description="Directory holding one folder per collection"
    )

    # Proxy settings
    host: str = Field(default="0.0.0.0", description="Proxy bind host")
    port: int = Field(default=3000, description="Proxy bind port")

    # Peer document store
    peer_host: str = Field(default="localhost", description="Peer document store host")
    peer_port: int = Field(default=2403, description="Peer document store port")
    peer_timeout: float = Field(default=10.0, gt=0, description="Peer request timeout seconds")
    peer_ssh_key: str = Field(default="", description="Key sent as dpd-ssh-key on resource calls")

    # CORS settings
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # Error envelope
    error_domain: str = Field(
        default="Resource Proxy Server", description="Domain reported in error bodies"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="text", description="'text' or 'json'")

    model_config = {"env_prefix": "PROXY_"}

    @property
    def peer_base_url(self) -> str:
        """Base URL of the peer document store."""
        return f"http://{self.peer_host}:{self.peer_port}"
