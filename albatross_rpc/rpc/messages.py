"""
Albatross JSON-RPC 2.0 Messages

Envelope and result types shared by the call and subscription channels:
- Request envelope and error codes
- Trace context attached to every result
- CallResult (success / failure) and StreamMessage (push delivery)
"""

import json
import time
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, TypeVar
from urllib.parse import urlsplit, urlunsplit

from ..constants import JSONRPC_VERSION

T = TypeVar("T")


class RPCErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes plus the codes the client synthesizes."""

    # Standard errors
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Client-side errors
    UNEXPECTED_FORMAT = -1
    UNAUTHORIZED = 401
    TIMEOUT = 408
    SERVICE_UNAVAILABLE = 503
    NO_RESULT_IN_EVENT = 1000
    CONNECTION_CLOSED = 1006
    CONFIRMATION_TIMEOUT = -32300


@dataclass
class RPCError(Exception):
    """JSON-RPC error."""

    code: int
    message: str
    data: Optional[Any] = None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "RPCError":
        if not isinstance(data, dict):
            return cls(RPCErrorCode.UNEXPECTED_FORMAT, f"Unexpected error format: {data!r}")
        code = data.get("code", RPCErrorCode.UNEXPECTED_FORMAT)
        message = data.get("message")
        if message is None:
            message = json.dumps(data)
        return cls(code, str(message), data.get("data"))


class SubscriptionError(RPCError):
    """Raised when a subscription cannot be established."""


@dataclass
class RPCRequest:
    """JSON-RPC request envelope."""

    method: str
    params: List[Any]
    id: int
    jsonrpc: str = JSONRPC_VERSION

    @classmethod
    def build(cls, method: str, params: Optional[Sequence[Any]], request_id: int) -> "RPCRequest":
        return cls(method=method, params=list(params or []), id=request_id)

    def to_dict(self) -> dict:
        return {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": list(self.params),
            "id": self.id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def strip_query(url: str) -> str:
    """Drop query string and fragment; credentials may live there."""
    parts = urlsplit(str(url))
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


@dataclass(frozen=True)
class TraceContext:
    """Audit record of one request: headers sent, body, timestamp and URL."""

    headers: Mapping[str, str]
    body: Mapping[str, Any]
    timestamp: int
    url: str

    @classmethod
    def capture(cls, request: RPCRequest, url: str, headers: Optional[Mapping[str, str]] = None) -> "TraceContext":
        return cls(
            headers=MappingProxyType(dict(headers or {})),
            body=MappingProxyType(request.to_dict()),
            timestamp=int(time.time() * 1000),
            url=strip_query(url),
        )

    @property
    def request_id(self) -> int:
        return self.body["id"]

    @property
    def method(self) -> str:
        return self.body["method"]


@dataclass(frozen=True)
class BlockchainState:
    """Chain-state metadata the node embeds when asked for it."""

    block_number: int
    block_hash: str

    @classmethod
    def from_dict(cls, data: Any) -> Optional["BlockchainState"]:
        if not isinstance(data, dict):
            return None
        return cls(
            block_number=data.get("blockNumber", data.get("block_number")),
            block_hash=data.get("blockHash", data.get("block_hash")),
        )


_UNSET: Any = object()


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """
    Outcome of one call: either data (plus optional metadata) or an error.

    Use `CallResult.success` / `CallResult.failure`; the two variants are
    mutually exclusive.
    """

    context: TraceContext
    data: Optional[T] = None
    metadata: Optional[BlockchainState] = None
    error: Optional[RPCError] = None

    def __post_init__(self):
        if self.error is not None and (self.data is not None or self.metadata is not None):
            raise ValueError("CallResult cannot carry both data and error")

    @classmethod
    def success(cls, context: TraceContext, data: T, metadata: Optional[BlockchainState] = None) -> "CallResult[T]":
        return cls(context=context, data=data, metadata=metadata)

    @classmethod
    def failure(cls, context: TraceContext, code: int, message: str, data: Any = None) -> "CallResult[T]":
        return cls(context=context, error=RPCError(code, message, data))

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return `data`, raising the carried `RPCError` on failure."""
        if self.error is not None:
            raise self.error
        return self.data


@dataclass(frozen=True)
class StreamMessage(Generic[T]):
    """One delivery to a subscription callback."""

    data: Optional[T] = None
    metadata: Optional[BlockchainState] = None
    error: Optional[RPCError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, code: int, message: str, data: Any = None) -> "StreamMessage":
        return cls(error=RPCError(code, message, data))

    @classmethod
    def from_push(cls, params: Dict[str, Any], with_metadata: bool = False) -> "StreamMessage":
        """Decode the ``params`` object of a push notification."""
        if params.get("error") is not None:
            return cls(error=RPCError.from_dict(params["error"]))
        if "result" not in params:
            return cls.failure(RPCErrorCode.NO_RESULT_IN_EVENT, "No result in event")

        payload = params["result"]
        if isinstance(payload, dict) and "error" in payload and "data" not in payload:
            return cls(error=RPCError.from_dict(payload["error"]))
        if isinstance(payload, dict) and "data" in payload:
            metadata = BlockchainState.from_dict(payload.get("metadata")) if with_metadata else None
            return cls(data=payload["data"], metadata=metadata)
        return cls(data=payload)


class SubscriptionState(str, Enum):
    PENDING = "pending"
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class CallOptions:
    """Per-call options. ``timeout=None`` disables the timeout."""

    timeout: Optional[float] = _UNSET

    def resolve_timeout(self, default: Optional[float]) -> Optional[float]:
        return default if self.timeout is _UNSET else self.timeout


@dataclass
class SendTxOptions(CallOptions):
    """Call options for ``send_sync_*``: adds the confirmation window."""

    wait_for_confirmation_timeout: Optional[float] = None
