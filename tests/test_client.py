"""
Tests for the Client facade and the credential headers it builds.
"""

import json

import httpx
import pytest

import albatross_rpc
from albatross_rpc import Auth, Client
from albatross_rpc.config import ClientConfig
from albatross_rpc.exceptions import ClientNotInitializedError, ConfigurationError
from albatross_rpc.modules import BlockchainModule, ConsensusModule, PolicyModule
from albatross_rpc.rpc.websocket import StreamOptions

from conftest import NODE_URL, FakeConnection, eventually, results_handler


def mock_client(results, calls=None):
    return httpx.AsyncClient(transport=httpx.MockTransport(results_handler(results, calls)))


# =============================================================================
# AUTH
# =============================================================================

class TestAuth:

    def test_basic(self):
        assert Auth(username="alice", password="pw").headers() == {"Authorization": "Basic YWxpY2U6cHc="}

    def test_bearer(self):
        assert Auth(secret="token").headers() == {"Authorization": "Bearer token"}

    def test_empty(self):
        assert Auth().headers() == {}

    def test_mixed(self):
        with pytest.raises(ConfigurationError):
            Auth(username="alice", password="pw", secret="token")

    def test_incomplete(self):
        with pytest.raises(ConfigurationError):
            Auth(password="pw")


# =============================================================================
# CONSTRUCTION
# =============================================================================

class TestConstruction:

    def test_requires_url(self):
        with pytest.raises(ClientNotInitializedError):
            Client("")

    def test_groups_attached(self):
        client = Client(NODE_URL)

        assert isinstance(client.blockchain, BlockchainModule)
        assert isinstance(client.consensus, ConsensusModule)
        assert isinstance(client.policy, PolicyModule)
        assert client.consensus.streams is client.blockchain_streams
        assert client.mempool.http is client.http
        assert client.ws.url == "ws://node.test:8648/ws"

    def test_auth_headers_on_both_channels(self):
        client = Client(NODE_URL, Auth(secret="token"))

        assert client.http.headers["Authorization"] == "Bearer token"
        assert client.ws.headers["Authorization"] == "Bearer token"

    def test_config_applied(self):
        config = ClientConfig()
        config.http.timeout = None
        config.http.headers = {"X-Client": "tests"}
        config.websocket.path = "/stream"
        config.websocket.close_when_idle = True
        client = Client(NODE_URL, config=config)

        assert client.http.default_timeout is None
        assert client.http.headers["X-Client"] == "tests"
        assert client.ws.url == "ws://node.test:8648/stream"
        assert client.ws.close_when_idle is True

    def test_from_config_validates(self):
        config = ClientConfig()
        config.node.url = "not-a-url"

        with pytest.raises(ConfigurationError):
            Client.from_config(config)

    def test_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ALBATROSS_RPC_NODE_URL", "https://node.example.com")
        monkeypatch.setenv("ALBATROSS_RPC_NODE_SECRET", "token")
        client = Client.from_env(str(tmp_path / "albatross.toml"))

        assert client.url == "https://node.example.com"
        assert client.ws.url == "wss://node.example.com/ws"
        assert client.http.headers["Authorization"] == "Bearer token"

    def test_repr(self):
        assert repr(Client(NODE_URL)) == f"Client(url={NODE_URL!r})"

    def test_lazy_package_attributes(self):
        assert albatross_rpc.Client is Client
        assert albatross_rpc.StreamOptions is StreamOptions
        with pytest.raises(AttributeError):
            albatross_rpc.NoSuchThing


# =============================================================================
# CALLS AND STREAMS
# =============================================================================

@pytest.mark.asyncio
class TestClientUsage:

    async def test_call_through_group(self):
        calls = []
        client = Client(NODE_URL, Auth(username="alice", password="pw"),
                        http_client=mock_client({"getBlockNumber": 77}, calls))

        async with client:
            result = await client.blockchain.get_block_number()

        assert result.data == 77
        assert result.context.headers["Authorization"].startswith("Basic ")

    async def test_raw_call(self):
        calls = []
        client = Client(NODE_URL, http_client=mock_client({"getPolicyConstants": {"blocksPerBatch": 60}}, calls))

        result = await client.call("getPolicyConstants")

        assert result.data == {"blocksPerBatch": 60}
        assert calls[0]["method"] == "getPolicyConstants"
        await client.aclose()

    async def test_raw_subscribe_and_close(self):
        conn = FakeConnection(auto_ack=True)
        seen = {}

        async def connector(url, **kwargs):
            seen.update(kwargs)
            return conn

        received = []
        async with Client(NODE_URL, Auth(secret="token"), connector=connector) as client:
            subscription = await client.subscribe("subscribeForHeadBlockHash", [], callback=received.append)
            conn.push(subscription.get_subscription_id(), "0xabc", method="subscribeForHeadBlockHash")
            await eventually(lambda: received)

        assert received[0].data == "0xabc"
        assert seen["headers"]["Authorization"] == "Bearer token"
        assert json.loads(conn.sent[0])["method"] == "subscribeForHeadBlockHash"
        assert not client.ws.is_connected
        assert conn.closed
