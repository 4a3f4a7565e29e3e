"""Exception hierarchy for browser-cli operations.

All exceptions inherit from CDPError so the CLI can report any failure
with a single handler.
"""

from typing import Optional


class CDPError(Exception):
    """Base exception for all CDP-related errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(
                f"{k}={v}" for k, v in self.details.items() if k != "recovery"
            )
            if details_str:
                return f"{self.message} ({details_str})"
        return self.message


class CDPConnectionError(CDPError):
    """Discovery endpoint or WebSocket failures."""

    pass


class ConnectionFailedError(CDPConnectionError):
    """Initial connection failed.

    Raised when the discovery endpoint is unreachable or the WebSocket
    handshake fails or times out. Common causes: wrong port, Chrome not
    started with --remote-debugging-port.
    """

    pass


class ConnectionClosedError(CDPConnectionError):
    """Connection closed while a command was pending, or before it was sent."""

    pass


class CDPCommandError(CDPError):
    """Protocol-level error response for a command."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        error_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.method = method
        self.error_code = error_code

    def __str__(self):
        if self.method and self.error_code is not None:
            return f"{self.method} failed: {self.message} (code {self.error_code})"
        if self.method:
            return f"{self.method} failed: {self.message}"
        return super().__str__()


class CommandFailedError(CDPCommandError):
    """Chrome returned an error object, or the result reported a failure.

    Example: unknown method, invalid params, navigation errorText.
    """

    pass


class CDPTimeoutError(CDPError):
    """No response (or awaited condition) before the deadline."""

    def __init__(
        self,
        message: str,
        command_method: Optional[str] = None,
        timeout: Optional[float] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.command_method = command_method
        self.timeout = timeout

    def __str__(self):
        if self.command_method and self.timeout:
            return f"Command '{self.command_method}' timed out after {self.timeout}s"
        return self.message


class EvalError(CDPError):
    """JavaScript evaluation threw an exception in the page."""

    def __init__(self, description: str, details: Optional[dict] = None):
        super().__init__(f"Evaluation failed: {description}", details)
        self.description = description


class ElementNotFoundError(CDPError):
    """No element matches the selector."""

    def __init__(self, selector: str, details: Optional[dict] = None):
        super().__init__(f"Element not found: {selector}", details)
        self.selector = selector


class CDPTargetNotFoundError(CDPError):
    """Target discovery failures.

    Raised when no page target exists or a tab index is out of range.
    """

    def __init__(
        self,
        message: str,
        target_id: Optional[str] = None,
        index: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.target_id = target_id
        self.index = index

    def __str__(self):
        if self.target_id:
            return f"Target not found: {self.target_id}"
        if self.index is not None:
            return f"Tab index out of range: {self.index}"
        return self.message
