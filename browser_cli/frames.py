"""Inbound CDP frame model.

Every text message from the WebSocket is either a command response
(carries an "id") or an event notification (carries a "method" and no id).
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass
class Response:
    """Reply to a command we sent. Exactly one of result/error is meaningful."""

    id: int
    result: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, Any]] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass
class Event:
    """Server-pushed notification, e.g. Page.loadEventFired."""

    method: str
    params: Dict[str, Any] = field(default_factory=dict)


Frame = Union[Response, Event]


class FrameError(ValueError):
    """Message is not valid JSON or has neither an id nor a method."""


def parse_frame(message: Union[str, bytes]) -> Frame:
    """Classify one raw WebSocket message.

    Raises:
        FrameError: malformed JSON, non-object payload, or unknown shape
    """
    try:
        data = json.loads(message)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FrameError(f"Malformed CDP message: {e}") from e

    if not isinstance(data, dict):
        raise FrameError(f"Expected JSON object, got {type(data).__name__}")

    if "id" in data:
        error = data.get("error")
        if error is not None and not isinstance(error, dict):
            error = {"message": str(error)}
        return Response(
            id=data["id"],
            result=data.get("result") or {},
            error=error,
        )

    if "method" in data:
        return Event(method=data["method"], params=data.get("params") or {})

    raise FrameError(f"Frame has neither id nor method: {sorted(data)}")
