"""
Target discovery through Chrome's HTTP debugging endpoint.

Targets are fetched fresh on every call; nothing is cached between
invocations.
"""

import json
import logging
import socket
import urllib.request
import urllib.error
from typing import List, Optional, Dict, Any

from .exceptions import CDPError, ConnectionFailedError, CDPTargetNotFoundError

logger = logging.getLogger(__name__)

RECOVERY_HINT = (
    "Start Chrome with --remote-debugging-port={port} "
    "(e.g. google-chrome --remote-debugging-port={port})"
)

# the debugging endpoint is local; never route it through an HTTP proxy
_opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))


class Target:
    """
    A debuggable browser context (tab, worker, iframe...).

    Attributes:
        id: Unique target ID
        type: Target type ("page", "iframe", "worker", "service_worker", "browser")
        title: Page title
        url: Target URL
        webSocketDebuggerUrl: CDP WebSocket URL, absent while another client
            is attached in exclusive mode
    """

    def __init__(self, target_data: Dict[str, Any]):
        self.id = target_data["id"]
        self.type = target_data.get("type", "")
        self.title = target_data.get("title", "")
        self.url = target_data.get("url", "")
        self.webSocketDebuggerUrl = target_data.get("webSocketDebuggerUrl")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "url": self.url,
            "webSocketDebuggerUrl": self.webSocketDebuggerUrl,
        }

    def __repr__(self):
        return f"Target(id={self.id!r}, type={self.type!r}, url={self.url!r})"


class TargetDiscovery:
    """
    Enumerates live targets and picks the page to drive.

    Usage:
        discovery = TargetDiscovery(chrome_port=9222)
        pages = discovery.list_pages()
        target = discovery.select_page()      # first page
        target = discovery.select_page(2)     # explicit index

    Attributes:
        chrome_host: Host of the debugging endpoint (default: 127.0.0.1)
        chrome_port: Chrome debugging port (default: 9222)
        timeout: HTTP deadline in seconds; an unreachable port fails within it
    """

    def __init__(
        self,
        chrome_host: str = "127.0.0.1",
        chrome_port: int = 9222,
        timeout: float = 5.0,
    ):
        if not 1 <= chrome_port <= 65535:
            raise ValueError(f"chrome_port must be 1-65535, got {chrome_port}")

        self.chrome_host = chrome_host
        self.chrome_port = chrome_port
        self.timeout = timeout

    @property
    def endpoint_url(self) -> str:
        return f"http://{self.chrome_host}:{self.chrome_port}/json"

    def list_targets(self, target_type: Optional[str] = None) -> List[Target]:
        """
        Fetch targets from the /json endpoint.

        Args:
            target_type: Keep only targets of this type

        Raises:
            ConnectionFailedError: Endpoint unreachable or too slow
            CDPError: Endpoint returned something other than a JSON array
        """
        try:
            with _opener.open(self.endpoint_url, timeout=self.timeout) as response:
                targets_data = json.loads(response.read())
        except (urllib.error.URLError, socket.timeout, ConnectionError) as e:
            raise ConnectionFailedError(
                f"Cannot reach Chrome at {self.endpoint_url}: {getattr(e, 'reason', e)}",
                details={
                    "recovery": RECOVERY_HINT.format(port=self.chrome_port),
                },
            ) from e
        except json.JSONDecodeError as e:
            raise CDPError(
                f"Invalid JSON response from Chrome endpoint: {e}",
                details={"endpoint": self.endpoint_url},
            ) from e

        if not isinstance(targets_data, list):
            raise CDPError(
                "Unexpected response from Chrome endpoint",
                details={"endpoint": self.endpoint_url},
            )

        targets = [Target(data) for data in targets_data]
        logger.debug(f"Discovered {len(targets)} targets at {self.endpoint_url}")

        if target_type:
            targets = [t for t in targets if t.type == target_type]
        return targets

    def list_pages(self) -> List[Target]:
        """Page targets that can be attached to."""
        return [
            t for t in self.list_targets(target_type="page") if t.webSocketDebuggerUrl
        ]

    def select_page(self, index: Optional[int] = None) -> Target:
        """
        First page target, or the one at `index`.

        Raises:
            CDPTargetNotFoundError: No pages, or index out of range
        """
        pages = self.list_pages()
        return pick_page(pages, index, self.chrome_port)


def pick_page(pages: List[Target], index: Optional[int], chrome_port: int) -> Target:
    """Index into an already-fetched page list."""
    if not pages:
        raise CDPTargetNotFoundError(
            "No page targets found",
            details={
                "chrome_port": chrome_port,
                "recovery": "Open a tab in Chrome first",
            },
        )
    if index is None:
        return pages[0]
    if not 0 <= index < len(pages):
        raise CDPTargetNotFoundError(
            f"Tab index {index} out of range (0-{len(pages) - 1})",
            index=index,
            details={"recovery": "Run 'browser-cli tabs list' to see open tabs"},
        )
    return pages[index]
