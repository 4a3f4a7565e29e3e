"""Shared fixtures: an in-memory WebSocket standing in for Chrome."""

import asyncio
import json
from typing import Callable, List, Optional
from unittest.mock import patch

import pytest
from websockets.exceptions import ConnectionClosed

_END = object()


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without a browser")
    config.addinivalue_line("markers", "integration: tests needing a live Chrome or subprocess")


class FakeWebSocket:
    """Records outgoing frames and replays scripted inbound ones.

    `responder` is called with every decoded outgoing command and returns
    the frames (dicts or raw strings) to deliver back, in order.
    """

    def __init__(self):
        self.sent: List[dict] = []
        self.close_calls = 0
        self.responder: Optional[Callable[[dict], list]] = None
        self._incoming: asyncio.Queue = asyncio.Queue()

    async def send(self, message: str) -> None:
        command = json.loads(message)
        self.sent.append(command)
        if self.responder:
            for frame in self.responder(command):
                self.push(frame)

    def reply_with(self, result=None) -> None:
        """Answer every command with the same result."""
        self.responder = lambda command: [{"id": command["id"], "result": result or {}}]

    async def wait_sent(self, count: int) -> None:
        await wait_until(lambda: len(self.sent) >= count)

    def push(self, frame) -> None:
        self._incoming.put_nowait(frame if isinstance(frame, str) else json.dumps(frame))

    def hang_up(self) -> None:
        """Remote side closed cleanly: iteration ends."""
        self._incoming.put_nowait(_END)

    def crash(self) -> None:
        """Remote side vanished: iteration raises ConnectionClosed."""
        self._incoming.put_nowait(ConnectionClosed(None, None))

    async def close(self) -> None:
        self.close_calls += 1
        self._incoming.put_nowait(_END)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._incoming.get()
        if item is _END:
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        return item


async def wait_until(predicate, timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.001)


@pytest.fixture
def fake_ws():
    return FakeWebSocket()


@pytest.fixture
def mock_connect(fake_ws):
    """Patch websockets.connect to hand out fake_ws."""

    async def async_connect(*args, **kwargs):
        return fake_ws

    with patch("browser_cli.connection.websockets.connect") as mocked:
        mocked.side_effect = async_connect
        yield mocked
