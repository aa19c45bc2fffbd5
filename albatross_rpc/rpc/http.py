"""
Albatross JSON-RPC HTTP Client

Request/response channel to the node's JSON-RPC endpoint. Every call gets
an id from the client's own counter and resolves to a `CallResult`; network
failures, bad statuses, malformed bodies and timeouts all become failure
results instead of exceptions.
"""

import asyncio
import itertools
import json
import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import httpx

from ..constants import DEFAULT_TIMEOUT
from ..logger import get_logger
from .messages import (
    BlockchainState,
    CallOptions,
    CallResult,
    RPCError,
    RPCErrorCode,
    RPCRequest,
    TraceContext,
)

logger = get_logger(__name__)


class HttpClient:
    """
    JSON-RPC 2.0 call channel over HTTP POST.

    Safe for concurrent use from many coroutines: ids come from a locked
    counter and each call awaits only its own response.
    """

    def __init__(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        default_timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self.url = str(url)
        self.headers: Dict[str, str] = {"Content-Type": "application/json", **dict(headers or {})}
        self.default_timeout = default_timeout
        self._client = client
        self._owns_client = client is None
        self._ids = itertools.count()
        self._id_lock = threading.Lock()

    # -----------------------------------------------------------------
    #  Id allocation
    # -----------------------------------------------------------------

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Timeouts are enforced per call in call()
            self._client = httpx.AsyncClient(timeout=None)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    # -----------------------------------------------------------------
    #  Calls
    # -----------------------------------------------------------------

    def reject(self, method: str, params: Optional[Sequence[Any]], error: Exception,
               code: int = RPCErrorCode.INVALID_PARAMS) -> CallResult:
        """Failure result for a request that is never sent."""
        request = RPCRequest.build(method, params if isinstance(params, (list, tuple)) else [], self._next_id())
        context = TraceContext.capture(request, self.url, self.headers)
        logger.debug(f"RPC {method} rejected before sending: {error}")
        return CallResult.failure(context, code, str(error))

    async def call(
        self,
        method: str,
        params: Optional[Sequence[Any]] = None,
        with_metadata: bool = False,
        options: Optional[CallOptions] = None,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> CallResult:
        """
        Send one JSON-RPC request and wait for its response.

        Args:
            method: RPC method name
            params: Positional parameters (``None`` entries become JSON null)
            with_metadata: Keep the chain-state metadata the node returns
            options: Per-call options; ``CallOptions(timeout=None)`` disables the timeout
            parse: Optional converter applied to the returned data

        Returns:
            CallResult with either data/metadata or error
        """
        request = RPCRequest.build(method, params, self._next_id())
        context = TraceContext.capture(request, self.url, self.headers)

        if not isinstance(method, str) or not method:
            return CallResult.failure(context, RPCErrorCode.INVALID_REQUEST, "Method name must be a non-empty string")

        try:
            content = request.to_json()
        except (TypeError, ValueError) as exc:
            logger.debug(f"RPC {method} params not serializable: {exc}")
            return CallResult.failure(context, RPCErrorCode.INVALID_PARAMS, f"Params are not JSON serializable: {exc}")

        timeout = (options or CallOptions()).resolve_timeout(self.default_timeout)
        start_time = time.time()
        try:
            response = await asyncio.wait_for(
                self._get_client().post(self.url, content=content, headers=self.headers),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            elapsed = time.time() - start_time
            logger.warning(f"RPC {method} → {context.url} TIMEOUT ({elapsed:.3f}s)")
            return CallResult.failure(
                context, RPCErrorCode.TIMEOUT, f"Request timed out after {timeout}s",
            )
        except httpx.RequestError as exc:
            elapsed = time.time() - start_time
            logger.warning(f"RPC {method} → {context.url} NETWORK_ERROR ({elapsed:.3f}s): {exc}")
            return CallResult.failure(
                context, RPCErrorCode.SERVICE_UNAVAILABLE, f"Service Unavailable: {exc}",
            )

        elapsed = time.time() - start_time
        logger.debug(f"RPC {method} → {context.url} [{response.status_code}] ({elapsed:.3f}s)")

        if not response.is_success:
            if response.status_code == 401:
                message = "Server requires authorization."
            else:
                message = f"Response status code not OK: {response.status_code} {response.reason_phrase}"
            return CallResult.failure(context, response.status_code, message)

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return CallResult.failure(context, RPCErrorCode.UNEXPECTED_FORMAT, "Invalid JSON response")

        return self._unwrap(body, request, context, with_metadata, parse)

    @staticmethod
    def _unwrap(
        body: Any,
        request: RPCRequest,
        context: TraceContext,
        with_metadata: bool,
        parse: Optional[Callable[[Any], Any]],
    ) -> CallResult:
        """Convert a decoded JSON-RPC response body into a CallResult."""
        if not isinstance(body, dict):
            return CallResult.failure(
                context, RPCErrorCode.UNEXPECTED_FORMAT, f"Unexpected format of data {json.dumps(body)}",
            )

        if body.get("id") is not None and body.get("id") != request.id:
            return CallResult.failure(
                context, RPCErrorCode.UNEXPECTED_FORMAT,
                f"Response id {body.get('id')!r} does not match request id {request.id}",
            )

        if body.get("error") is not None:
            err = RPCError.from_dict(body["error"])
            return CallResult.failure(context, err.code, err.message, err.data)

        if "result" not in body:
            return CallResult.failure(
                context, RPCErrorCode.UNEXPECTED_FORMAT, f"Unexpected format of data {json.dumps(body)}",
            )

        result = body["result"]
        metadata = None
        if isinstance(result, dict) and "data" in result:
            data = result["data"]
            if with_metadata:
                metadata = BlockchainState.from_dict(result.get("metadata"))
        else:
            data = result

        if parse is not None and data is not None:
            try:
                data = parse(data)
            except Exception as exc:
                return CallResult.failure(
                    context, RPCErrorCode.UNEXPECTED_FORMAT, f"Could not parse {request.method} result: {exc}",
                )

        return CallResult.success(context, data, metadata)
