"""CDP WebSocket connection management.

Provides CDPConnection, which owns one WebSocket session: it assigns command
ids, sends requests, and routes every inbound frame either to the command
waiting on that id or to a registered event waiter.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

try:
    import websockets
    from websockets.exceptions import ConnectionClosed
except ImportError:
    raise ImportError(
        "websockets library not found. Install with: pip3 install websockets"
    )

from .exceptions import (
    ConnectionFailedError,
    ConnectionClosedError,
    CommandFailedError,
    CDPTimeoutError,
)
from .frames import Event, FrameError, Response, parse_frame
from .locator import decode_evaluation
from .logging_setup import log_with_context

logger = logging.getLogger(__name__)


@dataclass
class PendingCommand:
    """A sent command awaiting its response."""

    id: int
    method: str
    future: "asyncio.Future[Dict[str, Any]]"


@dataclass
class EventWaiter:
    """Interest in the next occurrence of a named event."""

    method: str
    future: "asyncio.Future[Dict[str, Any]]"


class CDPConnection:
    """Manages a WebSocket session with a Chrome DevTools Protocol target.

    Handles:
    - Connection lifecycle (connect, close, async context manager)
    - Command execution with per-command timeouts
    - Demultiplexing responses by id amid unrelated event traffic
    - Failing every pending command when the socket goes away

    Usage:
        async with CDPConnection(ws_url) as conn:
            result = await conn.send("Page.navigate", {"url": "https://example.com"})
            title = await conn.evaluate("document.title")

    Attributes:
        ws_url: WebSocket debugger URL
        timeout: Default command timeout in seconds
        connect_timeout: Handshake deadline in seconds
        max_size: Maximum WebSocket message size in bytes
    """

    def __init__(
        self,
        ws_url: str,
        *,
        timeout: float = 30.0,
        connect_timeout: float = 5.0,
        max_size: int = 16_777_216,
    ):
        if not ws_url.startswith(("ws://", "wss://")):
            raise ValueError(f"Invalid WebSocket URL: {ws_url}")

        self.ws_url = ws_url
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.max_size = max_size

        self._ws: Optional[Any] = None
        # only touched from the event loop thread, no lock needed
        self._next_command_id: int = 1
        self._pending_commands: Dict[int, PendingCommand] = {}
        self._event_waiters: Dict[str, List[EventWaiter]] = {}
        self._receive_task: Optional[asyncio.Task] = None
        self._closed_reason: Optional[str] = None
        self._socket_closed: bool = False

    @property
    def is_connected(self) -> bool:
        """True between a successful connect() and the first closure."""
        return self._ws is not None and self._closed_reason is None

    @property
    def pending_count(self) -> int:
        return len(self._pending_commands)

    async def connect(self) -> None:
        """Perform the WebSocket handshake and start the receive loop.

        Raises:
            ConnectionFailedError: If the handshake fails or exceeds connect_timeout
        """
        if self._ws is not None:
            raise ConnectionFailedError(
                "Connection already used; create a new CDPConnection",
                details={"url": self.ws_url},
            )

        logger.info(f"Connecting to {self.ws_url}")
        try:
            self._ws = await websockets.connect(
                self.ws_url,
                max_size=self.max_size,
                open_timeout=self.connect_timeout,
                proxy=None,
            )
        except asyncio.TimeoutError as e:
            raise ConnectionFailedError(
                f"Timed out connecting to {self.ws_url} after {self.connect_timeout}s",
                details={"url": self.ws_url},
            ) from e
        except Exception as e:
            raise ConnectionFailedError(
                f"Failed to connect to {self.ws_url}: {e}",
                details={"url": self.ws_url, "error": str(e)},
            ) from e

        self._receive_task = asyncio.create_task(self._receive_loop())
        logger.info("CDP connection established")

    async def close(self) -> None:
        """Close the socket and fail everything still waiting on it.

        Safe to call more than once.
        """
        if self._ws is None or self._socket_closed:
            return
        self._socket_closed = True

        logger.info("Closing CDP connection")
        self._mark_closed("Connection closed by client")

        if self._receive_task and not self._receive_task.done():
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass

        try:
            await self._ws.close()
        except Exception as e:
            logger.warning(f"Error closing WebSocket: {e}")

    async def __aenter__(self) -> "CDPConnection":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def send(
        self,
        method: str,
        params: Optional[dict] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Send a CDP command and wait for the response carrying its id.

        Args:
            method: CDP method name (e.g., "Page.navigate")
            params: Method parameters (default: empty dict)
            timeout: Deadline in seconds (default: self.timeout)

        Returns:
            The "result" object of the response

        Raises:
            ConnectionClosedError: Connection not active, or closed while waiting
            CDPTimeoutError: No response before the deadline
            CommandFailedError: Chrome returned an error object
        """
        if not self.is_connected:
            raise ConnectionClosedError(
                f"Cannot send {method}: connection not active",
                details={"reason": self._closed_reason or "not connected"},
            )

        cmd_id = self._next_command_id
        self._next_command_id += 1

        pending = PendingCommand(
            id=cmd_id, method=method, future=asyncio.get_running_loop().create_future()
        )
        self._pending_commands[cmd_id] = pending

        message = json.dumps({"id": cmd_id, "method": method, "params": params or {}})
        cmd_timeout = self.timeout if timeout is None else timeout

        try:
            try:
                await self._ws.send(message)
            except ConnectionClosed as e:
                raise ConnectionClosedError(
                    f"Connection closed while sending {method}: {e}"
                ) from e
            log_with_context(
                logger, logging.DEBUG, f"Sent command {cmd_id}: {method}",
                id=cmd_id, method=method,
            )
            return await asyncio.wait_for(pending.future, timeout=cmd_timeout)
        except asyncio.TimeoutError:
            raise CDPTimeoutError(
                "Command timed out",
                command_method=method,
                timeout=cmd_timeout,
                details={"id": cmd_id},
            ) from None
        finally:
            self._pending_commands.pop(cmd_id, None)

    async def evaluate(
        self,
        expression: str,
        *,
        await_promise: bool = True,
        timeout: Optional[float] = None,
    ) -> Any:
        """Runtime.evaluate with returnByValue, decoded to a Python value.

        Raises:
            EvalError: The expression threw in the page
        """
        result = await self.send(
            "Runtime.evaluate",
            {
                "expression": expression,
                "returnByValue": True,
                "awaitPromise": await_promise,
            },
            timeout=timeout,
        )
        return decode_evaluation(result)

    def expect_event(self, method: str) -> EventWaiter:
        """Register interest in the next `method` event.

        Call before sending the command that triggers the event, then pass
        the waiter to wait_event().
        """
        waiter = EventWaiter(method=method, future=asyncio.get_running_loop().create_future())
        if not self.is_connected:
            waiter.future.set_exception(
                ConnectionClosedError(f"Cannot wait for {method}: connection not active")
            )
            return waiter
        self._event_waiters.setdefault(method, []).append(waiter)
        return waiter

    async def wait_event(
        self, waiter: EventWaiter, *, timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """Wait for a registered event and return its params.

        Raises:
            CDPTimeoutError: Event did not arrive in time
            ConnectionClosedError: Connection closed first
        """
        wait_timeout = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(waiter.future, timeout=wait_timeout)
        except asyncio.TimeoutError:
            raise CDPTimeoutError(
                f"Timed out waiting for event {waiter.method}",
                command_method=waiter.method,
                timeout=wait_timeout,
            ) from None
        finally:
            self.discard_event(waiter)

    def discard_event(self, waiter: EventWaiter) -> None:
        """Drop a waiter that will not be awaited, e.g. after its trigger failed."""
        waiters = self._event_waiters.get(waiter.method, [])
        if waiter in waiters:
            waiters.remove(waiter)
        if not waiters:
            self._event_waiters.pop(waiter.method, None)
        if not waiter.future.done():
            waiter.future.cancel()

    async def _receive_loop(self) -> None:
        """Classify every inbound frame until the socket closes."""
        reason = "Connection closed by remote end"
        try:
            async for message in self._ws:
                self._dispatch(message)
        except ConnectionClosed as e:
            reason = f"Connection closed: {e}"
            logger.warning(f"WebSocket connection closed: {e}")
        except Exception as e:
            reason = f"Receive loop error: {e}"
            logger.error(f"Receive loop error: {e}", exc_info=True)
        finally:
            self._mark_closed(reason)

    def _dispatch(self, message: Any) -> None:
        try:
            frame = parse_frame(message)
        except FrameError as e:
            logger.error(str(e))
            return

        if isinstance(frame, Response):
            self._resolve_response(frame)
        elif isinstance(frame, Event):
            self._deliver_event(frame)

    def _resolve_response(self, response: Response) -> None:
        pending = self._pending_commands.get(response.id)
        if pending is None or pending.future.done():
            # late reply after a timeout, or an id we never issued
            logger.debug(f"Dropping response for unknown id {response.id!r}")
            return

        if response.is_error:
            error = response.error
            pending.future.set_exception(
                CommandFailedError(
                    error.get("message", "Unknown CDP error"),
                    method=pending.method,
                    error_code=error.get("code"),
                    details={"data": error["data"]} if "data" in error else None,
                )
            )
        else:
            pending.future.set_result(response.result)

    def _deliver_event(self, event: Event) -> None:
        waiters = self._event_waiters.pop(event.method, [])
        if not waiters:
            logger.debug(f"Discarding event {event.method}")
            return
        for waiter in waiters:
            if not waiter.future.done():
                waiter.future.set_result(event.params)

    def _mark_closed(self, reason: str) -> None:
        """Record the first closure reason and fail every waiter.

        Later calls are no-ops for the reason but still sweep waiters.
        """
        if self._closed_reason is None:
            self._closed_reason = reason

        for pending in list(self._pending_commands.values()):
            if not pending.future.done():
                pending.future.set_exception(
                    ConnectionClosedError(
                        f"{self._closed_reason} (while waiting for {pending.method})",
                        details={"id": pending.id},
                    )
                )

        for waiters in self._event_waiters.values():
            for waiter in waiters:
                if not waiter.future.done():
                    waiter.future.set_exception(
                        ConnectionClosedError(
                            f"{self._closed_reason} (while waiting for {waiter.method})"
                        )
                    )
        self._event_waiters.clear()
