"""
Tests for the WebSocket subscription channel.

Uses FakeConnection from conftest in place of a live node socket.
"""

import asyncio
import json

import pytest

from albatross_rpc.exceptions import TransportNotReadyError
from albatross_rpc.rpc.messages import RPCErrorCode, SubscriptionError, SubscriptionState
from albatross_rpc.rpc.websocket import StreamOptions, WebSocketClient, to_ws_url

from conftest import NODE_URL, FakeConnection, eventually, make_ws


async def ack_last(conn, result=None, error=None):
    """Answer the most recent subscribe frame."""
    await eventually(lambda: conn.sent)
    request = json.loads(conn.sent[-1])
    frame = {"jsonrpc": "2.0", "id": request["id"]}
    if error is not None:
        frame["error"] = error
    else:
        frame["result"] = result
    conn.inject(frame)


# =============================================================================
# SUBSCRIBE / ACK
# =============================================================================

@pytest.mark.asyncio
class TestSubscribe:

    async def test_ack_then_push(self):
        conn = FakeConnection(auto_ack=True, first_sub_id=42)
        ws, _ = make_ws(conn)
        received = []

        sub = await ws.subscribe("subscribeForHeadBlockHash", [], callback=received.append)

        assert sub.get_subscription_id() == 42
        assert sub.is_open
        request = conn.requests()[0]
        assert request["method"] == "subscribeForHeadBlockHash"
        assert request["params"] == []
        assert request["jsonrpc"] == "2.0"

        conn.push(42, "0xabc", method="subscribeForHeadBlockHash")
        await eventually(lambda: received)

        assert len(received) == 1
        assert received[0].data == "0xabc"
        assert received[0].error is None
        await ws.close_all()

    async def test_enveloped_ack_and_push(self):
        conn = FakeConnection()
        ws, _ = make_ws(conn)
        received = []

        task = asyncio.create_task(
            ws.subscribe("subscribeForBlocks", [{"retrieve": "HASH"}], StreamOptions(once=False), received.append)
        )
        await ack_last(conn, result={"subscriptionId": 42})
        sub = await task

        conn.push(42, {"data": "0xabc"}, method="subscribeForBlocks")
        await eventually(lambda: received)

        assert received[0].data == "0xabc"
        assert sub.get_subscription_id() == 42
        await ws.close_all()

    async def test_connection_shared(self):
        conn = FakeConnection(auto_ack=True)
        ws, connector = make_ws(conn, headers={"Authorization": "Bearer t"})

        first = await ws.subscribe("subscribeForHeadBlockHash")
        second = await ws.subscribe("subscribeForHeadBlock", [True])

        assert len(connector.calls) == 1
        url, kwargs = connector.calls[0]
        assert url == "ws://node.test:8648/ws"
        assert kwargs["headers"] == {"Authorization": "Bearer t"}
        assert first.get_subscription_id() != second.get_subscription_id()
        assert len(ws.active_subscriptions()) == 2
        await ws.close_all()

    @pytest.mark.parametrize("result, expected", [
        (9, 9),
        ("0x1f", "0x1f"),
        ({"subscriptionId": 5}, 5),
        ({"data": "abc"}, "abc"),
    ])
    async def test_ack_forms(self, result, expected):
        conn = FakeConnection()
        ws, _ = make_ws(conn)

        task = asyncio.create_task(ws.subscribe("subscribeForHeadBlock", [False]))
        await ack_last(conn, result=result)
        sub = await task

        assert sub.get_subscription_id() == expected
        await ws.close_all()

    async def test_unusable_ack(self):
        conn = FakeConnection()
        ws, _ = make_ws(conn)

        task = asyncio.create_task(ws.subscribe("subscribeForHeadBlock", [False]))
        await ack_last(conn, result=True)

        with pytest.raises(SubscriptionError) as exc_info:
            await task
        assert exc_info.value.code == RPCErrorCode.UNEXPECTED_FORMAT
        assert ws.active_subscriptions() == []
        await ws.close_all()

    async def test_error_ack(self):
        conn = FakeConnection()
        ws, _ = make_ws(conn)

        task = asyncio.create_task(ws.subscribe("subscribeForNothing"))
        await ack_last(conn, error={"code": -32601, "message": "Method not found"})

        with pytest.raises(SubscriptionError) as exc_info:
            await task
        assert exc_info.value.code == RPCErrorCode.METHOD_NOT_FOUND
        assert exc_info.value.message == "Method not found"
        assert ws.pending_subscriptions() == []
        await ws.close_all()

    async def test_ack_timeout(self):
        conn = FakeConnection()
        ws, _ = make_ws(conn)
        received = []

        with pytest.raises(SubscriptionError) as exc_info:
            await ws.subscribe("subscribeForHeadBlock", [True], StreamOptions(timeout=0.05), received.append)

        assert exc_info.value.code == RPCErrorCode.TIMEOUT
        assert ws.pending_subscriptions() == []

        # A late ack registers nothing
        request = conn.requests()[0]
        conn.inject({"jsonrpc": "2.0", "id": request["id"], "result": 100})
        conn.push(100, {"n": 1})
        await eventually(lambda: ws.total_pushes_received == 1)

        assert received == []
        assert ws.active_subscriptions() == []
        await ws.close_all()

    async def test_connect_failure(self):
        async def connector(url, **kwargs):
            raise OSError("connection refused")

        ws = WebSocketClient(NODE_URL, connector=connector)

        with pytest.raises(SubscriptionError) as exc_info:
            await ws.subscribe("subscribeForHeadBlock", [True])
        assert exc_info.value.code == RPCErrorCode.SERVICE_UNAVAILABLE
        assert not ws.is_connected

    async def test_drop_while_pending(self):
        conn = FakeConnection()
        ws, _ = make_ws(conn)

        task = asyncio.create_task(ws.subscribe("subscribeForHeadBlock", [True]))
        await eventually(lambda: conn.sent)
        conn.drop()

        with pytest.raises(SubscriptionError) as exc_info:
            await task
        assert exc_info.value.code == RPCErrorCode.CONNECTION_CLOSED

    async def test_send_before_connect(self):
        ws, _ = make_ws(FakeConnection())

        with pytest.raises(TransportNotReadyError):
            await ws.send("{}")

    async def test_unserializable_params(self):
        conn = FakeConnection(auto_ack=True)
        ws, connector = make_ws(conn)

        with pytest.raises(SubscriptionError) as exc_info:
            await ws.subscribe("subscribeForLogsByAddressesAndTypes", [b"\x00"])

        assert exc_info.value.code == RPCErrorCode.INVALID_PARAMS
        assert connector.calls == []
        assert ws.pending_subscriptions() == []


# =============================================================================
# DELIVERY
# =============================================================================

@pytest.mark.asyncio
class TestDelivery:

    async def test_unknown_subscription_dropped(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)

        conn.push(7, {"n": 1})
        await eventually(lambda: ws.total_pushes_received == 1)

        assert received == []
        assert ws.total_pushes_dropped == 1
        await ws.close_all()

    async def test_once(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        sub = await ws.subscribe("subscribeForHeadBlock", [True], StreamOptions(once=True), received.append)

        conn.push(100, {"n": 1})
        conn.push(100, {"n": 2})
        await eventually(lambda: ws.total_pushes_received == 2)

        assert [m.data for m in received] == [{"n": 1}]
        assert sub.state is SubscriptionState.CLOSED
        assert ws.active_subscriptions() == []
        await ws.close_all()

    async def test_filter(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        options = StreamOptions(filter=lambda block: block["n"] % 2 == 0)
        await ws.subscribe("subscribeForHeadBlock", [True], options, received.append)

        for n in range(1, 5):
            conn.push(100, {"n": n})
        await eventually(lambda: ws.total_pushes_received == 4)

        assert [m.data["n"] for m in received] == [2, 4]
        await ws.close_all()

    async def test_filter_with_once(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        options = StreamOptions(once=True, filter=lambda block: block["n"] % 2 == 0)
        sub = await ws.subscribe("subscribeForHeadBlock", [True], options, received.append)

        for n in (1, 2, 4):
            conn.push(100, {"n": n})
        await eventually(lambda: ws.total_pushes_received == 3)

        assert [m.data["n"] for m in received] == [2]
        assert not sub.is_open
        await ws.close_all()

    async def test_raising_filter_rejects(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        options = StreamOptions(filter=lambda block: block["missing"])
        sub = await ws.subscribe("subscribeForHeadBlock", [True], options, received.append)

        conn.push(100, {"n": 1})
        await eventually(lambda: ws.total_pushes_received == 1)

        assert received == []
        assert sub.is_open
        await ws.close_all()

    async def test_error_push_consumes_once(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        sub = await ws.subscribe("subscribeForHeadBlock", [True], StreamOptions(once=True), received.append)

        conn.push(100, error={"code": -32000, "message": "node error"})
        conn.push(100, {"n": 1})
        await eventually(lambda: ws.total_pushes_received == 2)

        assert len(received) == 1
        assert received[0].error.code == -32000
        assert received[0].data is None
        assert sub.state is SubscriptionState.CLOSED
        await ws.close_all()

    async def test_push_without_result(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)

        conn.inject({"jsonrpc": "2.0", "method": "subscribeForHeadBlock", "params": {"subscription": 100}})
        await eventually(lambda: received)

        assert received[0].error.code == RPCErrorCode.NO_RESULT_IN_EVENT
        await ws.close_all()

    async def test_metadata(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        plain, detailed = [], []
        await ws.subscribe("subscribeForValidatorElectionByAddress", ["NQ"], callback=plain.append)
        await ws.subscribe("subscribeForValidatorElectionByAddress", ["NQ"],
                           StreamOptions(with_metadata=True), detailed.append)

        payload = {"data": {"address": "NQ"}, "metadata": {"blockNumber": 7, "blockHash": "0x7"}}
        conn.push(100, payload)
        conn.push(101, payload)
        await eventually(lambda: plain and detailed)

        assert plain[0].data == {"address": "NQ"}
        assert plain[0].metadata is None
        assert detailed[0].metadata.block_number == 7
        await ws.close_all()

    async def test_next_replaces_callback(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        first, second = [], []
        sub = await ws.subscribe("subscribeForHeadBlock", [True], callback=first.append)

        assert sub.next(second.append) is sub
        conn.push(100, {"n": 1})
        await eventually(lambda: second)

        assert first == []
        assert second[0].data == {"n": 1}
        await ws.close_all()

    async def test_callback_set_after_subscribe(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        sub = await ws.subscribe("subscribeForHeadBlock", [True])

        conn.push(100, {"n": 1})
        await eventually(lambda: ws.total_pushes_received == 1)
        sub.next(received.append)
        conn.push(100, {"n": 2})
        await eventually(lambda: received)

        assert [m.data["n"] for m in received] == [2]
        await ws.close_all()

    async def test_async_callback(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []

        async def callback(message):
            await asyncio.sleep(0)
            received.append(message)

        await ws.subscribe("subscribeForHeadBlock", [True], callback=callback)
        conn.push(100, {"n": 1})
        await eventually(lambda: received)

        assert received[0].data == {"n": 1}
        await ws.close_all()

    async def test_failing_callback_keeps_reader(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []

        def callback(message):
            if message.data["n"] == 1:
                raise RuntimeError("boom")
            received.append(message)

        await ws.subscribe("subscribeForHeadBlock", [True], callback=callback)
        conn.push(100, {"n": 1})
        conn.push(100, {"n": 2})
        await eventually(lambda: received)

        assert received[0].data == {"n": 2}
        assert ws.is_connected
        await ws.close_all()

    async def test_malformed_frame_ignored(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)

        conn.inject("not json")
        conn.inject("[1, 2]")
        conn.push(100, {"n": 1})
        await eventually(lambda: received)

        assert received[0].data == {"n": 1}
        await ws.close_all()

    async def test_unusable_ids_dropped(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        sub = await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)

        conn.push({"weird": 1}, {"n": 0})
        conn.push([100], {"n": 0})
        conn.inject({"jsonrpc": "2.0", "id": {"x": 1}, "result": 7})
        conn.push(100, {"n": 1})
        await eventually(lambda: received)

        assert [m.data for m in received] == [{"n": 1}]
        assert sub.is_open
        assert ws.is_connected
        assert ws.total_pushes_dropped == 2
        await ws.close_all()

    async def test_reader_failure_closes_connection(self):

        class BrokenConnection(FakeConnection):
            async def __anext__(self):
                item = await super().__anext__()
                if item == "boom":
                    raise RuntimeError("reader bug")
                return item

        conn = BrokenConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)

        conn.inject("boom")
        await eventually(lambda: received)
        await eventually(lambda: conn.closed)

        assert received[0].error.code == RPCErrorCode.CONNECTION_CLOSED
        assert not ws.is_connected


# =============================================================================
# CLOSING
# =============================================================================

@pytest.mark.asyncio
class TestClosing:

    async def test_close_stops_deliveries(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        sub = await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)

        sub.close()
        sub.close()
        conn.push(100, {"n": 1})
        await eventually(lambda: ws.total_pushes_received == 1)

        assert received == []
        assert sub.state is SubscriptionState.CLOSED
        assert ws.is_connected
        await ws.close_all()

    async def test_transport_drop_terminal_delivery(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        first, second = [], []
        sub_a = await ws.subscribe("subscribeForHeadBlock", [True], callback=first.append)
        sub_b = await ws.subscribe("subscribeForHeadBlockHash", callback=second.append)

        conn.drop()
        await eventually(lambda: first and second)
        await asyncio.sleep(0.01)

        assert len(first) == 1 and len(second) == 1
        assert first[0].error.code == RPCErrorCode.CONNECTION_CLOSED
        assert second[0].error.code == RPCErrorCode.CONNECTION_CLOSED
        assert ws.active_subscriptions() == []
        assert not ws.is_connected
        assert not sub_a.is_connection_open()
        assert sub_b.state is SubscriptionState.CLOSED

    async def test_close_all_has_no_terminal_delivery(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        sub = await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)

        await ws.close_all()

        assert received == []
        assert not ws.is_connected
        assert conn.closed
        assert sub.state is SubscriptionState.CLOSED

    async def test_disconnect_gives_terminal_delivery(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)

        await ws.disconnect()

        assert len(received) == 1
        assert received[0].error.code == RPCErrorCode.CONNECTION_CLOSED

    async def test_close_when_idle(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn, close_when_idle=True)
        sub = await ws.subscribe("subscribeForHeadBlock", [True])

        sub.close()
        await eventually(lambda: conn.closed)

        assert not ws.is_connected

    async def test_subscribe_right_after_idle_close(self):
        first_conn, second_conn = FakeConnection(auto_ack=True), FakeConnection(auto_ack=True)
        conns = [first_conn, second_conn]

        async def connector(url, **kwargs):
            return conns.pop(0)

        ws = WebSocketClient(NODE_URL, connector=connector, close_when_idle=True)
        first = await ws.subscribe("subscribeForHeadBlock", [True])
        received = []

        first.close()
        second = await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)
        await eventually(lambda: first_conn.closed)
        second_conn.push(100, {"n": 1})
        await eventually(lambda: received)

        assert second.is_open
        assert received[0].data == {"n": 1}
        assert ws.total_connections_opened == 2
        await ws.close_all()

    async def test_reconnects_after_drop(self):
        first_conn, second_conn = FakeConnection(auto_ack=True), FakeConnection(auto_ack=True)
        conns = [first_conn, second_conn]

        async def connector(url, **kwargs):
            return conns.pop(0)

        ws = WebSocketClient(NODE_URL, connector=connector)
        await ws.subscribe("subscribeForHeadBlock", [True])
        first_conn.drop()
        await eventually(lambda: not ws.is_connected)

        second = await ws.subscribe("subscribeForHeadBlock", [True])

        assert second.is_open
        assert ws.total_connections_opened == 2
        await ws.close_all()


# =============================================================================
# DIAGNOSTICS / HELPERS
# =============================================================================

@pytest.mark.asyncio
class TestDiagnostics:

    async def test_get_stats(self):
        conn = FakeConnection(auto_ack=True)
        ws, _ = make_ws(conn)
        received = []
        await ws.subscribe("subscribeForHeadBlock", [True], callback=received.append)
        conn.push(100, {"n": 1})
        conn.push(5, {"n": 2})
        await eventually(lambda: ws.total_pushes_received == 2)

        stats = ws.get_stats()

        assert stats["url"] == "ws://node.test:8648/ws"
        assert stats["connected"] is True
        assert stats["active_subscriptions"] == 1
        assert stats["pending_subscriptions"] == 0
        assert stats["total_subscriptions_created"] == 1
        assert stats["total_pushes_delivered"] == 1
        assert stats["total_pushes_dropped"] == 1
        await ws.close_all()


class TestWsUrl:

    @pytest.mark.parametrize("url, expected", [
        ("http://127.0.0.1:8648", "ws://127.0.0.1:8648/ws"),
        ("https://node.example.com", "wss://node.example.com/ws"),
        ("http://node.test:8648/rpc?token=abc", "ws://node.test:8648/ws?token=abc"),
        ("ws://node.test/ws", "ws://node.test/ws"),
    ])
    def test_to_ws_url(self, url, expected):
        assert to_ws_url(url) == expected

    def test_custom_path(self):
        assert to_ws_url("http://node.test", "/stream") == "ws://node.test/stream"
