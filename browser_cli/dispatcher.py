"""Maps CLI verbs onto CDP call sequences.

One CommandDispatcher serves one CLI invocation:
discover -> connect (lazily) -> run the verb -> close.
A verb stops at the first failing call; nothing is retried.
"""

import asyncio
import base64
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .accessibility import render_snapshot
from .config import Configuration
from .connection import CDPConnection
from .discovery import Target, TargetDiscovery, pick_page
from .exceptions import (
    CDPTargetNotFoundError,
    CDPTimeoutError,
    CommandFailedError,
)
from .keys import char_events, key_events
from .locator import (
    BODY_TEXT,
    LOCATION,
    PAGE_SIZE,
    READY_STATE,
    TITLE,
    ElementLocator,
)

logger = logging.getLogger(__name__)

SCREENSHOT_PARAMS = {"format": "jpeg", "quality": 15}

LOAD_STATES = {
    "load": ("complete",),
    "domcontentloaded": ("interactive", "complete"),
}


def normalize_url(url: str) -> str:
    """Add https:// to bare hosts like "example.com"."""
    if "://" in url or url.startswith(("about:", "data:", "javascript:")):
        return url
    return f"https://{url}"


class CommandDispatcher:
    """Runs one verb against the selected page.

    Usage:
        async with CommandDispatcher(config) as dispatcher:
            await dispatcher.fill("#q", "hello")
            value = await dispatcher.get_value("#q")

    Attributes:
        config: Resolved configuration (port, timeouts, poll interval)
        tab: Page index to drive (default: first page)
    """

    def __init__(
        self,
        config: Configuration,
        *,
        tab: Optional[int] = None,
        discovery: Optional[TargetDiscovery] = None,
    ):
        self.config = config
        self.tab = tab
        self.discovery = discovery or TargetDiscovery(
            chrome_host=config.chrome_host,
            chrome_port=config.chrome_port,
            timeout=config.connect_timeout,
        )
        self.target: Optional[Target] = None
        self._conn: Optional[CDPConnection] = None

    async def __aenter__(self) -> "CommandDispatcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def connection(self) -> CDPConnection:
        """Discover the page and connect on first use."""
        if self._conn is None:
            self.target = await asyncio.to_thread(self.discovery.select_page, self.tab)
            logger.debug(f"Selected {self.target!r}")
            conn = CDPConnection(
                self.target.webSocketDebuggerUrl,
                timeout=self.config.timeout,
                connect_timeout=self.config.connect_timeout,
                max_size=self.config.max_size,
            )
            await conn.connect()
            self._conn = conn
        return self._conn

    async def send(self, method: str, params: Optional[dict] = None) -> Dict[str, Any]:
        conn = await self.connection()
        return await conn.send(method, params)

    async def evaluate(self, expression: str, *, timeout: Optional[float] = None) -> Any:
        conn = await self.connection()
        return await conn.evaluate(expression, timeout=timeout)

    # Navigation

    async def navigate(self, url: str, *, wait_load: bool = False) -> Dict[str, Any]:
        """Page.navigate; returns once Chrome accepts it unless wait_load is set."""
        url = normalize_url(url)
        conn = await self.connection()

        waiter = None
        if wait_load:
            await conn.send("Page.enable")
            waiter = conn.expect_event("Page.loadEventFired")

        try:
            result = await conn.send("Page.navigate", {"url": url})
            if result.get("errorText"):
                raise CommandFailedError(
                    result["errorText"], method="Page.navigate", details={"url": url}
                )
        except Exception:
            if waiter is not None:
                conn.discard_event(waiter)
            raise

        outcome = {"url": url, "frameId": result.get("frameId")}
        if waiter is not None:
            await conn.wait_event(waiter)
            outcome["title"] = await conn.evaluate(TITLE)
            outcome["url"] = await conn.evaluate(LOCATION)
        return outcome

    async def _history_step(self, delta: int) -> Dict[str, Any]:
        history = await self.send("Page.getNavigationHistory")
        entries = history.get("entries", [])
        position = history.get("currentIndex", 0) + delta
        if not 0 <= position < len(entries):
            direction = "back" if delta < 0 else "forward"
            raise CDPTargetNotFoundError(f"No history entry to go {direction} to")
        entry = entries[position]
        await self.send("Page.navigateToHistoryEntry", {"entryId": entry["id"]})
        return {"url": entry.get("url", ""), "title": entry.get("title", "")}

    async def back(self) -> Dict[str, Any]:
        return await self._history_step(-1)

    async def forward(self) -> Dict[str, Any]:
        return await self._history_step(1)

    async def reload(self) -> None:
        await self.send("Page.reload")

    async def close_page(self) -> None:
        await self.send("Page.close")

    # Interaction

    async def click(self, selector: str) -> None:
        locator = ElementLocator(selector)
        locator.unwrap(await self.evaluate(locator.click()))

    async def fill(self, selector: str, text: str) -> None:
        """Overwrite the element's value."""
        locator = ElementLocator(selector)
        locator.unwrap(await self.evaluate(locator.fill(text)))

    async def type_text(self, selector: str, text: str) -> None:
        """Append text by dispatching one key event pair per character."""
        locator = ElementLocator(selector)
        locator.unwrap(await self.evaluate(locator.focus_end()))
        conn = await self.connection()
        for char in text:
            for params in char_events(char):
                await conn.send("Input.dispatchKeyEvent", params)

    async def press(self, key: str) -> None:
        conn = await self.connection()
        for params in key_events(key):
            await conn.send("Input.dispatchKeyEvent", params)

    # Extraction

    async def get_title(self) -> str:
        return await self.evaluate(TITLE)

    async def get_url(self) -> str:
        return await self.evaluate(LOCATION)

    async def get_text(self, selector: Optional[str] = None) -> str:
        if selector is None:
            return await self.evaluate(BODY_TEXT)
        locator = ElementLocator(selector)
        return locator.unwrap(await self.evaluate(locator.text()))

    async def get_html(self, selector: str) -> str:
        locator = ElementLocator(selector)
        return locator.unwrap(await self.evaluate(locator.html()))

    async def get_value(self, selector: str) -> Any:
        locator = ElementLocator(selector)
        return locator.unwrap(await self.evaluate(locator.value()))

    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        locator = ElementLocator(selector)
        return locator.unwrap(await self.evaluate(locator.attribute(name)))

    async def get_count(self, selector: str) -> int:
        return int(await self.evaluate(ElementLocator(selector).count()) or 0)

    # Screenshot

    async def screenshot(self, path: str, *, full: bool = False) -> Path:
        """Capture a JPEG (quality 15) and write it to `path`."""
        params: Dict[str, Any] = dict(SCREENSHOT_PARAMS)
        if full:
            size = await self.evaluate(PAGE_SIZE)
            params["captureBeyondViewport"] = True
            params["clip"] = {
                "x": 0,
                "y": 0,
                "width": size["width"],
                "height": size["height"],
                "scale": 1,
            }

        result = await self.send("Page.captureScreenshot", params)
        data = result.get("data")
        if not data:
            raise CommandFailedError(
                "No screenshot data", method="Page.captureScreenshot"
            )

        output_path = Path(path).expanduser()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(base64.b64decode(data))
        return output_path

    # Snapshot

    async def snapshot(
        self,
        *,
        interactive: bool = False,
        compact: bool = False,
        depth: Optional[int] = None,
    ) -> str:
        """Outline of the page's accessibility tree."""
        result = await self.send("Accessibility.getFullAXTree")
        nodes = result.get("nodes")
        if nodes is None:
            raise CommandFailedError(
                "No accessibility nodes returned", method="Accessibility.getFullAXTree"
            )
        return render_snapshot(
            nodes, interactive=interactive, compact=compact, max_depth=depth
        )

    # Tabs

    async def tabs_list(self) -> List[Target]:
        # discovery is blocking HTTP; keep it off the event loop
        return await asyncio.to_thread(self.discovery.list_pages)

    async def tabs_new(self, url: Optional[str] = None) -> str:
        url = normalize_url(url) if url else "about:blank"
        result = await self.send("Target.createTarget", {"url": url})
        return result.get("targetId", "")

    async def tabs_close(self, index: Optional[int] = None) -> Target:
        target = pick_page(await self.tabs_list(), index or 0, self.config.chrome_port)
        await self.send("Target.closeTarget", {"targetId": target.id})
        return target

    async def tabs_switch(self, index: int) -> Target:
        target = pick_page(await self.tabs_list(), index, self.config.chrome_port)
        await self.send("Target.activateTarget", {"targetId": target.id})
        return target

    # Waiting

    async def wait_ms(self, ms: int) -> None:
        await asyncio.sleep(ms / 1000)

    async def _poll(self, expression: str, accept, description: str) -> Any:
        """Evaluate `expression` every poll_interval until accept(value) holds."""
        timeout = self.config.timeout
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                value = await self.evaluate(expression, timeout=remaining)
            except CDPTimeoutError:
                break
            if accept(value):
                return value
            await asyncio.sleep(min(self.config.poll_interval, max(remaining, 0)))

        raise CDPTimeoutError(
            f"Timed out after {timeout}s waiting for {description}",
            timeout=timeout,
        )

    async def wait_for_selector(self, selector: str) -> None:
        await self._poll(
            ElementLocator(selector).exists(), lambda found: found is True, selector
        )

    async def wait_for_url(self, pattern: str) -> str:
        return await self._poll(
            LOCATION, lambda href: isinstance(href, str) and pattern in href,
            f"URL containing {pattern!r}",
        )

    async def wait_for_load(self, state: str = "load") -> str:
        accepted = LOAD_STATES.get(state.lower())
        if accepted is None:
            raise ValueError(
                f"Unknown load state {state!r}; expected one of {sorted(LOAD_STATES)}"
            )
        return await self._poll(
            READY_STATE, lambda ready: ready in accepted, f"load state {state!r}"
        )
