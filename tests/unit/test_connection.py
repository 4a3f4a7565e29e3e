"""Unit tests for CDPConnection with an in-memory WebSocket.

Covers the handshake, id correlation amid unrelated traffic, timeouts,
closure while commands are pending, and event waiters.
"""

import asyncio
import json
import math
import pytest

from browser_cli.connection import CDPConnection
from browser_cli.exceptions import (
    ConnectionFailedError,
    ConnectionClosedError,
    CDPTimeoutError,
    CommandFailedError,
    EvalError,
)

WS_URL = "ws://127.0.0.1:9222/devtools/page/ABC"


@pytest.mark.unit
@pytest.mark.asyncio
class TestCDPConnectionLifecycle:
    """Test connection lifecycle (connect, close, context manager)."""

    async def test_initialization(self):
        conn = CDPConnection(WS_URL, timeout=15.0, connect_timeout=2.0, max_size=1_000_000)
        assert conn.ws_url == WS_URL
        assert conn.timeout == 15.0
        assert conn.connect_timeout == 2.0
        assert conn.max_size == 1_000_000
        assert not conn.is_connected

    async def test_invalid_url_raises_error(self):
        with pytest.raises(ValueError, match="Invalid WebSocket URL"):
            CDPConnection("http://127.0.0.1:9222/json")

    async def test_connect_success(self, mock_connect):
        conn = CDPConnection(WS_URL, connect_timeout=3.0)
        await conn.connect()

        assert conn.is_connected
        mock_connect.assert_called_once_with(
            WS_URL, max_size=16_777_216, open_timeout=3.0, proxy=None
        )
        await conn.close()

    async def test_connect_failure(self, mock_connect):
        async def refuse(*args, **kwargs):
            raise OSError("Connection refused")

        mock_connect.side_effect = refuse

        conn = CDPConnection(WS_URL)
        with pytest.raises(ConnectionFailedError, match="Failed to connect"):
            await conn.connect()
        assert not conn.is_connected

    async def test_connect_timeout(self, mock_connect):
        async def too_slow(*args, **kwargs):
            raise asyncio.TimeoutError()

        mock_connect.side_effect = too_slow

        conn = CDPConnection(WS_URL, connect_timeout=0.5)
        with pytest.raises(ConnectionFailedError, match="Timed out connecting"):
            await conn.connect()

    async def test_close(self, mock_connect, fake_ws):
        conn = CDPConnection(WS_URL)
        await conn.connect()
        await conn.close()

        assert not conn.is_connected
        assert fake_ws.close_calls == 1

    async def test_close_is_idempotent(self, mock_connect, fake_ws):
        conn = CDPConnection(WS_URL)
        await conn.connect()
        await conn.close()
        await conn.close()

        assert fake_ws.close_calls == 1

    async def test_context_manager(self, mock_connect, fake_ws):
        async with CDPConnection(WS_URL) as conn:
            assert conn.is_connected

        assert not conn.is_connected
        assert fake_ws.close_calls == 1


@pytest.mark.unit
@pytest.mark.asyncio
class TestCommandCorrelation:
    """Responses reach exactly the caller whose id they carry."""

    async def test_send_without_connection(self):
        conn = CDPConnection(WS_URL)
        with pytest.raises(ConnectionClosedError, match="connection not active"):
            await conn.send("Page.reload")

    async def test_send_wire_format(self, mock_connect, fake_ws):
        fake_ws.reply_with({"frameId": "F1"})

        async with CDPConnection(WS_URL) as conn:
            result = await conn.send("Page.navigate", {"url": "https://example.com"})
            await conn.send("Page.reload")

        assert result == {"frameId": "F1"}
        assert fake_ws.sent[0] == {
            "id": 1,
            "method": "Page.navigate",
            "params": {"url": "https://example.com"},
        }
        assert fake_ws.sent[1] == {"id": 2, "method": "Page.reload", "params": {}}

    async def test_ids_never_reused(self, mock_connect, fake_ws):
        fake_ws.reply_with()

        async with CDPConnection(WS_URL) as conn:
            for _ in range(5):
                await conn.send("Runtime.enable")

        ids = [command["id"] for command in fake_ws.sent]
        assert ids == [1, 2, 3, 4, 5]

    async def test_out_of_order_responses(self, mock_connect, fake_ws):
        """N outstanding commands answered in reverse order."""
        async with CDPConnection(WS_URL) as conn:
            tasks = [
                asyncio.create_task(conn.send("Test.echo", {"n": n})) for n in range(6)
            ]
            await fake_ws.wait_sent(6)
            assert conn.pending_count == 6

            for command in reversed(fake_ws.sent):
                fake_ws.push({"id": command["id"], "result": {"echo": command["params"]["n"]}})

            results = await asyncio.gather(*tasks)

        assert [r["echo"] for r in results] == list(range(6))
        assert conn.pending_count == 0

    async def test_events_and_unknown_ids_are_skipped(self, mock_connect, fake_ws):
        def responder(command):
            return [
                {"method": "Page.frameNavigated", "params": {"frame": {}}},
                {"id": 999, "result": {"stray": True}},
                "not json at all",
                {"id": command["id"], "result": {"ok": True}},
            ]

        fake_ws.responder = responder

        async with CDPConnection(WS_URL) as conn:
            result = await conn.send("Runtime.enable")
            assert conn.is_connected

        assert result == {"ok": True}

    async def test_error_response(self, mock_connect, fake_ws):
        fake_ws.responder = lambda command: [
            {
                "id": command["id"],
                "error": {"code": -32601, "message": "'Page.goBack' wasn't found"},
            }
        ]

        async with CDPConnection(WS_URL) as conn:
            with pytest.raises(CommandFailedError) as exc_info:
                await conn.send("Page.goBack")
            # protocol errors leave the connection usable
            assert conn.is_connected

        assert exc_info.value.error_code == -32601
        assert exc_info.value.method == "Page.goBack"
        assert "wasn't found" in str(exc_info.value)


@pytest.mark.unit
@pytest.mark.asyncio
class TestTimeouts:
    """Per-command deadlines."""

    async def test_timeout_then_reuse(self, mock_connect, fake_ws):
        async with CDPConnection(WS_URL, timeout=0.05) as conn:
            with pytest.raises(CDPTimeoutError, match="timed out after 0.05s"):
                await conn.send("Runtime.evaluate", {"expression": "while(1){}"})
            assert conn.pending_count == 0

            # late reply for the timed-out id must be ignored
            fake_ws.push({"id": 1, "result": {"late": True}})
            fake_ws.reply_with({"fresh": True})

            result = await conn.send("Runtime.enable")

        assert result == {"fresh": True}
        assert fake_ws.sent[1]["id"] == 2

    async def test_per_call_timeout_override(self, mock_connect, fake_ws):
        async with CDPConnection(WS_URL, timeout=30.0) as conn:
            with pytest.raises(CDPTimeoutError) as exc_info:
                await conn.send("Page.reload", timeout=0.01)

        assert exc_info.value.timeout == 0.01
        assert exc_info.value.command_method == "Page.reload"


@pytest.mark.unit
@pytest.mark.asyncio
class TestClosure:
    """A dead connection fails pending and future commands."""

    async def test_close_while_pending(self, mock_connect, fake_ws):
        conn = CDPConnection(WS_URL)
        await conn.connect()

        task = asyncio.create_task(conn.send("Page.captureScreenshot"))
        await fake_ws.wait_sent(1)
        await conn.close()

        with pytest.raises(ConnectionClosedError, match="Page.captureScreenshot"):
            await task
        assert conn.pending_count == 0

    async def test_send_after_close(self, mock_connect, fake_ws):
        conn = CDPConnection(WS_URL)
        await conn.connect()
        await conn.close()

        with pytest.raises(ConnectionClosedError, match="connection not active"):
            await conn.send("Page.reload")

    async def test_remote_hang_up_fails_pending(self, mock_connect, fake_ws):
        async with CDPConnection(WS_URL) as conn:
            tasks = [asyncio.create_task(conn.send("Page.reload")) for _ in range(3)]
            await fake_ws.wait_sent(3)
            fake_ws.hang_up()

            results = await asyncio.gather(*tasks, return_exceptions=True)
            assert all(isinstance(r, ConnectionClosedError) for r in results)
            assert not conn.is_connected

            with pytest.raises(ConnectionClosedError):
                await conn.send("Page.reload")

    async def test_abnormal_closure_fails_pending(self, mock_connect, fake_ws):
        async with CDPConnection(WS_URL) as conn:
            task = asyncio.create_task(conn.send("Page.reload"))
            await fake_ws.wait_sent(1)
            fake_ws.crash()

            with pytest.raises(ConnectionClosedError, match="Connection closed"):
                await task

    async def test_response_and_closure_resolve_once(self, mock_connect, fake_ws):
        async with CDPConnection(WS_URL) as conn:
            task = asyncio.create_task(conn.send("Page.reload"))
            await fake_ws.wait_sent(1)
            fake_ws.push({"id": 1, "result": {"first": True}})
            fake_ws.push({"id": 1, "result": {"second": True}})
            fake_ws.hang_up()

            assert await task == {"first": True}


@pytest.mark.unit
@pytest.mark.asyncio
class TestEvents:
    """Event frames reach registered waiters and are otherwise discarded."""

    async def test_expect_event(self, mock_connect, fake_ws):
        fake_ws.responder = lambda command: [
            {"id": command["id"], "result": {"frameId": "F"}},
            {"method": "Page.loadEventFired", "params": {"timestamp": 12.5}},
        ]

        async with CDPConnection(WS_URL) as conn:
            waiter = conn.expect_event("Page.loadEventFired")
            await conn.send("Page.navigate", {"url": "https://example.com"})
            params = await conn.wait_event(waiter, timeout=1.0)

        assert params == {"timestamp": 12.5}

    async def test_wait_event_timeout(self, mock_connect, fake_ws):
        async with CDPConnection(WS_URL) as conn:
            waiter = conn.expect_event("Page.loadEventFired")
            with pytest.raises(CDPTimeoutError, match="Page.loadEventFired"):
                await conn.wait_event(waiter, timeout=0.02)

    async def test_close_fails_event_waiter(self, mock_connect, fake_ws):
        conn = CDPConnection(WS_URL)
        await conn.connect()
        waiter = conn.expect_event("Page.loadEventFired")
        task = asyncio.create_task(conn.wait_event(waiter, timeout=5.0))
        await asyncio.sleep(0)
        await conn.close()

        with pytest.raises(ConnectionClosedError):
            await task

    async def test_discard_event(self, mock_connect, fake_ws):
        async with CDPConnection(WS_URL) as conn:
            waiter = conn.expect_event("Page.loadEventFired")
            conn.discard_event(waiter)

            assert waiter.future.cancelled()
            assert "Page.loadEventFired" not in conn._event_waiters


@pytest.mark.unit
@pytest.mark.asyncio
class TestEvaluate:
    """Runtime.evaluate convenience wrapper."""

    async def test_evaluate_params_and_value(self, mock_connect, fake_ws):
        fake_ws.reply_with({"result": {"type": "number", "value": 2, "description": "2"}})

        async with CDPConnection(WS_URL) as conn:
            value = await conn.evaluate("1 + 1")

        assert value == 2
        assert fake_ws.sent[0]["params"] == {
            "expression": "1 + 1",
            "returnByValue": True,
            "awaitPromise": True,
        }

    async def test_evaluate_passes_large_script_verbatim(self, mock_connect, fake_ws):
        script = "(() => {\n" + "  const x = 'quote\"s';\n" * 500 + "  return {found: false};\n})()"
        fake_ws.reply_with({"result": {"type": "object", "value": {"found": False}}})

        async with CDPConnection(WS_URL) as conn:
            value = await conn.evaluate(script)

        assert value == {"found": False}
        assert fake_ws.sent[0]["params"]["expression"] == script

    async def test_evaluate_nan(self, mock_connect, fake_ws):
        fake_ws.reply_with({"result": {"type": "number", "unserializableValue": "NaN"}})

        async with CDPConnection(WS_URL) as conn:
            assert math.isnan(await conn.evaluate("0/0"))

    async def test_evaluate_exception(self, mock_connect, fake_ws):
        fake_ws.reply_with(
            {
                "result": {"type": "object", "subtype": "error"},
                "exceptionDetails": {
                    "text": "Uncaught",
                    "lineNumber": 0,
                    "columnNumber": 6,
                    "exception": {
                        "type": "object",
                        "subtype": "error",
                        "description": "ReferenceError: nope is not defined\n    at <anonymous>:1:1",
                    },
                },
            }
        )

        async with CDPConnection(WS_URL) as conn:
            with pytest.raises(EvalError) as exc_info:
                await conn.evaluate("nope")

        assert exc_info.value.description == "ReferenceError: nope is not defined"
