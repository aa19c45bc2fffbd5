"""
Albatross RPC Transport

Provides the two correlation channels to an Albatross node:
- HTTP JSON-RPC call channel
- WebSocket subscription channel (shared connection, routed pushes)
"""

from .http import HttpClient
from .messages import (
    BlockchainState,
    CallOptions,
    CallResult,
    RPCError,
    RPCErrorCode,
    RPCRequest,
    SendTxOptions,
    StreamMessage,
    SubscriptionError,
    SubscriptionState,
    TraceContext,
)
from .websocket import StreamOptions, Subscription, WebSocketClient

__all__ = [
    "HttpClient",
    "WebSocketClient",
    "Subscription",
    "StreamOptions",
    "BlockchainState",
    "CallOptions",
    "CallResult",
    "RPCError",
    "RPCErrorCode",
    "RPCRequest",
    "SendTxOptions",
    "StreamMessage",
    "SubscriptionError",
    "SubscriptionState",
    "TraceContext",
]
