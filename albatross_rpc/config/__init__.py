"""
Albatross RPC Client Configuration

Loads albatross.toml; environment variables override TOML values.
"""

from .loader import (
    AuthConfig,
    ClientConfig,
    HTTPConfig,
    NodeSectionConfig,
    WebSocketConfig,
    load_config,
)

__all__ = [
    "ClientConfig",
    "NodeSectionConfig",
    "AuthConfig",
    "HTTPConfig",
    "WebSocketConfig",
    "load_config",
]
