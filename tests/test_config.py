"""
Tests for albatross.toml loading, environment overrides and validation.
"""

import pytest

from albatross_rpc.config import ClientConfig, load_config
from albatross_rpc.exceptions import ConfigurationError
from albatross_rpc.types import Auth

SAMPLE_TOML = """
[node]
url = "https://node.example.com:8648"
log_level = "DEBUG"

[auth]
username = "alice"
password = "toml-password"

[http]
timeout = 2.5
headers = { "X-Client" = "tests" }

[websocket]
path = "/stream"
subscribe_timeout = 0
close_when_idle = true
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "albatross.toml"
    path.write_text(SAMPLE_TOML)
    return path


# =============================================================================
# LOADING
# =============================================================================

class TestLoading:

    def test_defaults(self):
        cfg = ClientConfig()

        assert cfg.node.url == ""
        assert cfg.http.timeout == 10.0
        assert cfg.websocket.path == "/ws"
        assert cfg.websocket.subscribe_timeout == 30.0
        assert cfg.websocket.close_when_idle is False

    def test_from_file(self, config_file):
        cfg = ClientConfig.from_file(str(config_file))

        assert cfg.node.url == "https://node.example.com:8648"
        assert cfg.node.log_level == "DEBUG"
        assert cfg.auth.username == "alice"
        assert cfg.http.timeout == 2.5
        assert cfg.http.headers == {"X-Client": "tests"}
        assert cfg.websocket.path == "/stream"
        assert cfg.websocket.subscribe_timeout is None
        assert cfg.websocket.close_when_idle is True

    def test_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ALBATROSS_RPC_NODE_URL", "http://127.0.0.1:8648")
        cfg = ClientConfig.from_file(str(tmp_path / "missing.toml"))

        assert cfg.node.url == "http://127.0.0.1:8648"
        assert cfg.http.timeout == 10.0

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[node\nurl = ")

        with pytest.raises(ConfigurationError):
            ClientConfig.from_file(str(path))

    def test_load_config_from_env_path(self, config_file, monkeypatch):
        monkeypatch.setenv("ALBATROSS_RPC_CONFIG", str(config_file))
        cfg = load_config()

        assert cfg.node.url == "https://node.example.com:8648"

    def test_load_config_explicit_path(self, config_file):
        assert load_config(str(config_file)).auth.username == "alice"


# =============================================================================
# ENVIRONMENT OVERRIDES
# =============================================================================

class TestEnvOverrides:

    def test_env_wins_over_toml(self, config_file, monkeypatch):
        monkeypatch.setenv("ALBATROSS_RPC_NODE_URL", "http://override:8648")
        monkeypatch.setenv("ALBATROSS_RPC_NODE_PASSWORD", "env-password")
        monkeypatch.setenv("ALBATROSS_RPC_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("ALBATROSS_RPC_TIMEOUT", "0")

        cfg = ClientConfig.from_file(str(config_file))

        assert cfg.node.url == "http://override:8648"
        assert cfg.auth.password == "env-password"
        assert cfg.node.log_level == "WARNING"
        assert cfg.http.timeout is None

    def test_secret_from_env(self, monkeypatch):
        monkeypatch.setenv("ALBATROSS_RPC_NODE_SECRET", "s3cret")
        cfg = ClientConfig()
        cfg.apply_env()

        assert cfg.auth.to_auth() == Auth(secret="s3cret")

    def test_malformed_timeout_env(self, monkeypatch):
        monkeypatch.setenv("ALBATROSS_RPC_TIMEOUT", "soon")
        cfg = ClientConfig()

        with pytest.raises(ConfigurationError, match="ALBATROSS_RPC_TIMEOUT"):
            cfg.apply_env()

    @pytest.mark.parametrize("section, name", [
        ('[http]\ntimeout = "fast"\n', "http.timeout"),
        ("[websocket]\nping_interval = true\n", "websocket.ping_interval"),
        ("[websocket]\nopen_timeout = [1]\n", "websocket.open_timeout"),
    ])
    def test_malformed_timeout_toml(self, tmp_path, section, name):
        path = tmp_path / "albatross.toml"
        path.write_text(section)

        with pytest.raises(ConfigurationError, match=name):
            ClientConfig.from_file(str(path))


# =============================================================================
# VALIDATION
# =============================================================================

class TestValidation:

    def _config(self, **node):
        cfg = ClientConfig()
        cfg.node.url = node.get("url", "http://127.0.0.1:8648")
        cfg.node.log_level = node.get("log_level", "INFO")
        return cfg

    def test_valid(self):
        assert self._config().validate() is True

    @pytest.mark.parametrize("url", ["", "127.0.0.1:8648", "ftp://node", "http://"])
    def test_invalid_url(self, url):
        with pytest.raises(ConfigurationError):
            self._config(url=url).validate()

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError):
            self._config(log_level="LOUD").validate()

    def test_invalid_ws_path(self):
        cfg = self._config()
        cfg.websocket.path = "ws"

        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_mixed_credentials(self):
        cfg = self._config()
        cfg.auth.username = "alice"
        cfg.auth.password = "pw"
        cfg.auth.secret = "token"

        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_incomplete_credentials(self):
        cfg = self._config()
        cfg.auth.username = "alice"

        with pytest.raises(ConfigurationError):
            cfg.validate()


# =============================================================================
# SERIALISATION
# =============================================================================

class TestToDict:

    def test_credentials_redacted(self, config_file):
        cfg = ClientConfig.from_file(str(config_file))
        cfg.http.headers["Authorization"] = "Bearer abc"

        data = cfg.to_dict()

        assert data["auth"]["username"] == "alice"
        assert data["auth"]["password"] == "***"
        assert data["auth"]["secret"] == ""
        assert data["http"]["headers"]["Authorization"] == "***"
        assert data["http"]["headers"]["X-Client"] == "tests"
        assert "toml-password" not in repr(data)
