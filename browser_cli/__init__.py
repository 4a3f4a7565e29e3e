"""Command-line browser automation over the Chrome DevTools Protocol.

This package provides:
- TargetDiscovery: HTTP target discovery against Chrome's debugging endpoint
- CDPConnection: WebSocket session with id-correlated commands and events
- ElementLocator: DOM expressions evaluated in the page
- CommandDispatcher: CLI verbs mapped onto CDP call sequences
"""

__version__ = "0.1.0"
