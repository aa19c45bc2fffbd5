"""
Albatross RPC Client

Facade owning one call channel and one subscription channel, with the
method groups attached as attributes:

    >>> async with Client("http://127.0.0.1:8648") as client:
    ...     result = await client.blockchain.get_block_number()
    ...     print(result.data)
"""

from typing import Any, Callable, Optional, Sequence

import httpx

from .config import ClientConfig, load_config
from .constants import WS_PATH
from .exceptions import ClientNotInitializedError
from .logger import get_logger
from .modules import (
    BlockchainModule,
    BlockchainStreams,
    ConsensusModule,
    MempoolModule,
    NetworkModule,
    PolicyModule,
    ValidatorModule,
    WalletModule,
    ZkpComponentModule,
)
from .rpc.http import HttpClient
from .rpc.messages import CallOptions, CallResult
from .rpc.websocket import Connector, StreamCallback, StreamOptions, Subscription, WebSocketClient
from .types import Auth

logger = get_logger(__name__)


class Client:
    """
    Albatross node client.

    Args:
        url: Node JSON-RPC endpoint, e.g. ``http://127.0.0.1:8648``
        auth: Optional credentials; both channels send the same headers
        http_client: Optional ``httpx.AsyncClient`` (not closed by the client)
        connector: Optional WebSocket connector (tests inject fakes here)
        config: Optional ClientConfig supplying timeouts and WebSocket settings
    """

    def __init__(
        self,
        url: str,
        auth: Optional[Auth] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        connector: Optional[Connector] = None,
        config: Optional[ClientConfig] = None,
    ):
        if not url:
            raise ClientNotInitializedError("Client requires a node URL")

        config = config or ClientConfig()
        self.url = url
        self.config = config

        headers = dict(config.http.headers)
        if auth is not None:
            headers.update(auth.headers())

        self.http = HttpClient(
            url,
            headers=headers,
            client=http_client,
            default_timeout=config.http.timeout,
        )
        self.ws = WebSocketClient(
            url,
            headers=headers,
            connector=connector,
            path=config.websocket.path or WS_PATH,
            open_timeout=config.websocket.open_timeout,
            ping_interval=config.websocket.ping_interval,
            close_when_idle=config.websocket.close_when_idle,
        )

        self.blockchain = BlockchainModule(self.http)
        self.blockchain_streams = BlockchainStreams(self.ws)
        self.consensus = ConsensusModule(self.http, self.blockchain, self.blockchain_streams)
        self.mempool = MempoolModule(self.http)
        self.network = NetworkModule(self.http)
        self.policy = PolicyModule(self.http)
        self.validator = ValidatorModule(self.http)
        self.wallet = WalletModule(self.http)
        self.zkp_component = ZkpComponentModule(self.http)

    def __repr__(self) -> str:
        return f"Client(url={self.http.url!r})"

    # -- Factories ----------------------------------------------------------

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "Client":
        """
        Build a client from a validated ClientConfig.

        Raises:
            ConfigurationError: on invalid configuration
        """
        config.validate()
        return cls(config.node.url, config.auth.to_auth(), config=config, **kwargs)

    @classmethod
    def from_env(cls, path: Optional[str] = None, **kwargs: Any) -> "Client":
        """Build a client from albatross.toml and the ``ALBATROSS_RPC_*`` variables."""
        return cls.from_config(load_config(path), **kwargs)

    # -- Raw access ---------------------------------------------------------

    async def call(
        self,
        method: str,
        params: Optional[Sequence[Any]] = None,
        with_metadata: bool = False,
        options: Optional[CallOptions] = None,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> CallResult:
        """Call any node method; see `HttpClient.call`."""
        return await self.http.call(method, params, with_metadata=with_metadata, options=options, parse=parse)

    async def subscribe(
        self,
        method: str,
        params: Optional[Sequence[Any]] = None,
        options: Optional[StreamOptions] = None,
        callback: Optional[StreamCallback] = None,
    ) -> Subscription:
        """Subscribe to any node stream; see `WebSocketClient.subscribe`."""
        if options is None:
            options = StreamOptions(timeout=self.config.websocket.subscribe_timeout)
        return await self.ws.subscribe(method, params, options, callback)

    # -- Lifecycle ----------------------------------------------------------

    async def aclose(self) -> None:
        """Close every subscription, the WebSocket and the HTTP client."""
        await self.ws.close_all()
        await self.http.aclose()
        logger.debug("Client closed: %s", self.http.url)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
