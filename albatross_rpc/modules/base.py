"""
Albatross RPC Module Base

Shared plumbing for the typed method groups: parameter validation ahead of
any request, and the `rpc_method` marker used to enumerate a group's calls.
"""

import re
from typing import Any, Callable, Dict, Optional, Sequence, Union

from ..exceptions import InvalidParamsError
from ..rpc.http import HttpClient
from ..rpc.messages import CallOptions, CallResult
from ..rpc.websocket import WebSocketClient

RPCMethod = Callable[..., Any]

_ADDRESS_RE = re.compile(r"^NQ\d{2}(\s?[0-9A-Z]{4}){8}$")


def rpc_method(func: RPCMethod) -> RPCMethod:
    """Mark a coroutine as a node call exposed by its module."""
    func.__rpc_method__ = True
    return func


def require(value: Any, name: str) -> Any:
    """Raise InvalidParamsError when a required parameter is missing."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidParamsError(f"'{name}' is required")
    return value


def validate_address(address: Any, name: str = "address") -> str:
    """User-friendly Nimiq address, e.g. ``NQ07 0000 ...``."""
    require(address, name)
    if not isinstance(address, str) or not _ADDRESS_RE.match(address.strip().upper()):
        raise InvalidParamsError(f"'{name}' is not a valid address: {address!r}")
    return address


def validity_start_height(relative: Optional[int] = None, absolute: Optional[int] = None) -> str:
    """
    Encode the validity start height: ``"+N"`` relative to the head block or
    ``"N"`` absolute. Exactly one of the two must be given.
    """
    if (relative is None) == (absolute is None):
        raise InvalidParamsError("Exactly one of 'relative_validity' or 'absolute_validity' is required")
    value = relative if relative is not None else absolute
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidParamsError(f"Validity start height must be a non-negative integer, got {value!r}")
    return f"+{value}" if relative is not None else str(value)


class RPCModule:
    """
    Base class for method groups.

    Subclasses wrap node methods; each returns the `CallResult` produced by
    the call channel.
    """

    # Group name as exposed on the facade
    namespace: str = ""

    def __init__(self, http: HttpClient, ws: Optional[WebSocketClient] = None):
        self.http = http
        self.ws = ws

    def get_methods(self) -> Dict[str, RPCMethod]:
        """
        Get all public calls in this module.

        Returns:
            Dict mapping method names to bound coroutines
        """
        methods = {}
        for name in dir(self):
            if name.startswith("_"):
                continue
            attr = getattr(self, name)
            if callable(attr) and hasattr(attr, "__rpc_method__"):
                methods[name] = attr
        return methods

    async def _call(
        self,
        method: str,
        params: Union[Sequence[Any], Any, None] = None,
        with_metadata: bool = False,
        options: Optional[CallOptions] = None,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> CallResult:
        """Validate parameter objects, then dispatch through the call channel."""
        if hasattr(params, "to_params"):
            try:
                params = params.to_params()
            except InvalidParamsError as exc:
                return self.http.reject(method, None, exc)
        return await self.http.call(method, params, with_metadata=with_metadata, options=options, parse=parse)
