"""
Shared fixtures for the albatross_rpc tests.

Provides:
- FakeConnection: in-memory WebSocket connection recording sent frames
- make_ws: WebSocketClient wired to a FakeConnection
- mock HTTP transports built on httpx.MockTransport
"""

import asyncio
import json
import os
from typing import Any, Callable, Dict, List

import httpx
import pytest

from albatross_rpc.rpc.http import HttpClient
from albatross_rpc.rpc.websocket import WebSocketClient

NODE_URL = "http://node.test:8648"
ADDRESS_A = "NQ07 0000 0000 0000 0000 0000 0000 0000 0000"
ADDRESS_B = "NQ15 MLJN 23YB 8FBM 61TN 7LYG 2212 LVBG 4V19"

_CLOSE = object()


class FakeConnection:
    """
    In-memory stand-in for a websockets client connection.

    Tests push frames with `inject()` and end the stream with `drop()`.
    With ``auto_ack`` every subscribe request is acknowledged with the next
    subscription id from ``first_sub_id``.
    """

    def __init__(self, auto_ack: bool = False, first_sub_id: int = 100):
        self.sent: List[str] = []
        self.closed = False
        self.auto_ack = auto_ack
        self._next_sub_id = first_sub_id
        self._incoming: asyncio.Queue = asyncio.Queue()

    async def send(self, text: str) -> None:
        if self.closed:
            raise OSError("connection closed")
        self.sent.append(text)
        if self.auto_ack:
            request = json.loads(text)
            self.inject({"jsonrpc": "2.0", "id": request["id"], "result": self._next_sub_id})
            self._next_sub_id += 1

    def inject(self, frame: Any) -> None:
        self._incoming.put_nowait(frame if isinstance(frame, str) else json.dumps(frame))

    def push(self, subscription: Any, result: Any = None, error: Any = None, method: str = "subscribeForHeadBlock"):
        params: Dict[str, Any] = {"subscription": subscription}
        if error is not None:
            params["error"] = error
        else:
            params["result"] = result
        self.inject({"jsonrpc": "2.0", "method": method, "params": params})

    def drop(self) -> None:
        self.closed = True
        self._incoming.put_nowait(_CLOSE)

    async def close(self) -> None:
        self.drop()

    def requests(self) -> List[Dict[str, Any]]:
        return [json.loads(s) for s in self.sent]

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        item = await self._incoming.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        return item


async def eventually(predicate: Callable[[], Any], timeout: float = 1.0) -> None:
    """Yield to the loop until `predicate()` is truthy."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


def rpc_response(request: httpx.Request, result: Any = None, error: Any = None, **extra) -> httpx.Response:
    """JSON-RPC response echoing the request id."""
    body = json.loads(request.content)
    payload: Dict[str, Any] = {"jsonrpc": "2.0", "id": body["id"]}
    if error is not None:
        payload["error"] = error
    else:
        payload["result"] = result
    payload.update(extra)
    return httpx.Response(200, json=payload)


def results_handler(results: Dict[str, Any], calls: List[Dict[str, Any]] = None):
    """
    MockTransport handler answering each method from `results`.

    Values that are callables receive the decoded request body.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if calls is not None:
            calls.append(body)
        if body["method"] not in results:
            return rpc_response(request, error={"code": -32601, "message": f"Method not found: {body['method']}"})
        value = results[body["method"]]
        if callable(value):
            value = value(body)
        return rpc_response(request, result=value)

    return handler


def make_http(handler, url: str = NODE_URL, **kwargs) -> HttpClient:
    return HttpClient(url, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), **kwargs)


def make_ws(conn: FakeConnection, **kwargs):
    """WebSocketClient whose connector hands out `conn`; returns (client, connector)."""

    async def connector(url, **kw):
        connector.calls.append((url, kw))
        return conn

    connector.calls = []
    return WebSocketClient(NODE_URL, connector=connector, **kwargs), connector


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep ALBATROSS_RPC_* variables from the outer environment out of the tests."""
    for name in list(os.environ):
        if name.startswith("ALBATROSS_RPC_"):
            monkeypatch.delenv(name, raising=False)
