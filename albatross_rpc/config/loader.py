"""
Albatross RPC TOML Configuration Loader

Loads albatross.toml with environment variable overrides.

Environment variable mapping:
    [node] url            → ALBATROSS_RPC_NODE_URL
    [node] log_level      → ALBATROSS_RPC_LOG_LEVEL
    [auth] username       → ALBATROSS_RPC_NODE_USERNAME
    [auth] password       → ALBATROSS_RPC_NODE_PASSWORD
    [auth] secret         → ALBATROSS_RPC_NODE_SECRET
    [http] timeout        → ALBATROSS_RPC_TIMEOUT

Variables set in the process environment win over ``.env``, which wins over
the TOML file. Credentials should come from the environment, not TOML.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    try:
        import tomli  # type: ignore[no-redef]
    except ImportError:
        tomli = None  # type: ignore[assignment]

from .. import constants
from ..constants import (
    CONFIG_ENV_NAME,
    DEFAULT_CONFIG_PATH,
    DEFAULT_OPEN_TIMEOUT,
    DEFAULT_PING_INTERVAL,
    DEFAULT_SUBSCRIBE_TIMEOUT,
    DEFAULT_TIMEOUT,
    PASSWORD_ENV_NAME,
    SECRET_ENV_NAME,
    URL_ENV_NAME,
    USERNAME_ENV_NAME,
    WS_PATH,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger
from ..types import Auth

logger = get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
REDACTED = "***"


def _env(name: str) -> Optional[str]:
    """Process environment first, then the values loaded from ``.env``."""
    value = os.environ.get(name)
    if value:
        return value
    value = getattr(constants, name, None)
    return str(value) if value else None


def _optional_float(value: Any, default: Optional[float], name: str = "timeout") -> Optional[float]:
    # TOML has no null; 0 or a negative number disables the timeout
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
    return value if value > 0 else None


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class NodeSectionConfig:
    """[node] section."""
    url: str = ""
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeSectionConfig":
        return cls(
            url=data.get("url", ""),
            log_level=data.get("log_level", "INFO"),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := _env(URL_ENV_NAME):
            self.url = v
        if v := os.environ.get("ALBATROSS_RPC_LOG_LEVEL"):
            self.log_level = v


@dataclass
class AuthConfig:
    """[auth] section."""
    username: str = ""
    password: str = ""
    secret: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthConfig":
        return cls(
            username=data.get("username", ""),
            password=data.get("password", ""),
            secret=data.get("secret", ""),
        )

    def apply_env(self) -> None:
        if v := _env(USERNAME_ENV_NAME):
            self.username = v
        if v := _env(PASSWORD_ENV_NAME):
            self.password = v
        if v := _env(SECRET_ENV_NAME):
            self.secret = v

    def to_auth(self) -> Optional[Auth]:
        """
        Build the credentials object, or None when nothing is configured.

        Raises:
            ConfigurationError: on incomplete or mixed credentials
        """
        if not (self.username or self.password or self.secret):
            return None
        return Auth(
            username=self.username or None,
            password=self.password or None,
            secret=self.secret or None,
        )


@dataclass
class HTTPConfig:
    """[http] section."""
    timeout: Optional[float] = DEFAULT_TIMEOUT
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HTTPConfig":
        return cls(
            timeout=_optional_float(data.get("timeout"), DEFAULT_TIMEOUT, "http.timeout"),
            headers={str(k): str(v) for k, v in data.get("headers", {}).items()},
        )

    def apply_env(self) -> None:
        if v := os.environ.get("ALBATROSS_RPC_TIMEOUT"):
            self.timeout = _optional_float(v, DEFAULT_TIMEOUT, "ALBATROSS_RPC_TIMEOUT")


@dataclass
class WebSocketConfig:
    """[websocket] section."""
    path: str = WS_PATH
    subscribe_timeout: Optional[float] = DEFAULT_SUBSCRIBE_TIMEOUT
    open_timeout: Optional[float] = DEFAULT_OPEN_TIMEOUT
    ping_interval: Optional[float] = DEFAULT_PING_INTERVAL
    close_when_idle: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WebSocketConfig":
        return cls(
            path=data.get("path", WS_PATH),
            subscribe_timeout=_optional_float(
                data.get("subscribe_timeout"), DEFAULT_SUBSCRIBE_TIMEOUT, "websocket.subscribe_timeout",
            ),
            open_timeout=_optional_float(data.get("open_timeout"), DEFAULT_OPEN_TIMEOUT, "websocket.open_timeout"),
            ping_interval=_optional_float(data.get("ping_interval"), DEFAULT_PING_INTERVAL, "websocket.ping_interval"),
            close_when_idle=bool(data.get("close_when_idle", False)),
        )


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


@dataclass
class ClientConfig:
    """
    Unified client configuration.

    Loads every section of albatross.toml and applies environment variable
    overrides.
    """
    node: NodeSectionConfig = field(default_factory=NodeSectionConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    http: HTTPConfig = field(default_factory=HTTPConfig)
    websocket: WebSocketConfig = field(default_factory=WebSocketConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientConfig":
        """Create ClientConfig from a parsed TOML dict."""
        return cls(
            node=NodeSectionConfig.from_dict(data.get("node", {})),
            auth=AuthConfig.from_dict(data.get("auth", {})),
            http=HTTPConfig.from_dict(data.get("http", {})),
            websocket=WebSocketConfig.from_dict(data.get("websocket", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "ClientConfig":
        """
        Load configuration from a TOML file.

        A missing file is not an error: defaults plus environment overrides
        are used.

        Args:
            config_path: Path to albatross.toml

        Returns:
            ClientConfig instance
        """
        if tomli is None:
            raise ImportError(
                "tomli is required for TOML config loading. "
                "Install it: pip install tomli"
            )

        path = Path(config_path)
        if not path.exists():
            logger.debug("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigurationError(f"Invalid TOML in {config_path}: {exc}") from exc

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.node.apply_env()
        self.auth.apply_env()
        self.http.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Returns:
            True if all valid

        Raises:
            ConfigurationError: on invalid config
        """
        if not self.node.url:
            raise ConfigurationError(
                f"No node URL configured; set [node] url or {URL_ENV_NAME}"
            )
        parts = urlsplit(self.node.url)
        if parts.scheme not in ("http", "https", "ws", "wss") or not parts.netloc:
            raise ConfigurationError(f"Invalid node URL: {self.node.url!r}")
        if self.node.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.node.log_level}")
        if not self.websocket.path.startswith("/"):
            raise ConfigurationError("websocket.path must start with '/'")
        self.auth.to_auth()
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics); credentials are redacted."""
        return {
            "node": {
                "url": self.node.url,
                "log_level": self.node.log_level,
            },
            "auth": {
                "username": self.auth.username,
                "password": REDACTED if self.auth.password else "",
                "secret": REDACTED if self.auth.secret else "",
            },
            "http": {
                "timeout": self.http.timeout,
                "headers": {
                    k: (REDACTED if k.lower() == "authorization" else v)
                    for k, v in self.http.headers.items()
                },
            },
            "websocket": {
                "path": self.websocket.path,
                "subscribe_timeout": self.websocket.subscribe_timeout,
                "open_timeout": self.websocket.open_timeout,
                "ping_interval": self.websocket.ping_interval,
                "close_when_idle": self.websocket.close_when_idle,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> ClientConfig:
    """
    Load client configuration.

    Resolution order:
        1. Explicit *path* argument
        2. ALBATROSS_RPC_CONFIG env var
        3. ./albatross.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_NAME, DEFAULT_CONFIG_PATH)

    return ClientConfig.from_file(path)
