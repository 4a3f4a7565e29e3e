"""DOM expressions evaluated in the page, and decoding of their results.

Every expression is an immediately-invoked function whose arguments are
JSON literals, so selectors and text never splice into the source.
Element lookups return {found, value} so "no such element" stays
distinguishable from a property that is legitimately null.
"""

import json
import math
from typing import Any, Dict, Optional

from .exceptions import ElementNotFoundError, EvalError


def js_call(function_source: str, *args: Any) -> str:
    """Render `(function_source)(arg1, arg2, ...)` with JSON-encoded args."""
    encoded = ", ".join(json.dumps(arg) for arg in args)
    return f"({function_source})({encoded})"


_LOOKUP = """(selector, read) => {
    const el = document.querySelector(selector);
    if (!el) return { found: false };
    return { found: true, value: read(el) };
}"""


def _lookup(selector: str, reader: str, *extra: Any) -> str:
    # reader is trusted source text; user data only travels through extra args
    extra_params = "".join(f", a{i}" for i in range(len(extra)))
    body = (
        f"(selector{extra_params}) => ({_LOOKUP})"
        f"(selector, (el) => ({reader}))"
    )
    return js_call(body, selector, *extra)


class ElementLocator:
    """Builds expressions acting on the first element matching a CSS selector."""

    def __init__(self, selector: str):
        if not selector:
            raise ValueError("selector must be a non-empty string")
        self.selector = selector

    def __repr__(self):
        return f"ElementLocator({self.selector!r})"

    def click(self) -> str:
        return _lookup(self.selector, "el.click(), true")

    def fill(self, text: str) -> str:
        """Replace the value and fire input/change like a user edit would."""
        return _lookup(
            self.selector,
            "(el.focus(), el.value = a0,"
            " el.dispatchEvent(new Event('input', { bubbles: true })),"
            " el.dispatchEvent(new Event('change', { bubbles: true })), true)",
            text,
        )

    def focus_end(self) -> str:
        """Focus the element and put the caret after existing content."""
        return _lookup(
            self.selector,
            "(el.focus(), (() => {"
            " try { const n = (el.value || '').length; el.setSelectionRange(n, n); }"
            " catch (e) {} })(), true)",
        )

    def text(self) -> str:
        return _lookup(self.selector, "el.innerText")

    def html(self) -> str:
        return _lookup(self.selector, "el.innerHTML")

    def value(self) -> str:
        return _lookup(self.selector, "el.value")

    def attribute(self, name: str) -> str:
        return _lookup(self.selector, "el.getAttribute(a0)", name)

    def count(self) -> str:
        return js_call(
            "(selector) => document.querySelectorAll(selector).length", self.selector
        )

    def exists(self) -> str:
        return js_call(
            "(selector) => document.querySelector(selector) !== null", self.selector
        )

    def unwrap(self, lookup: Any) -> Any:
        """Return the looked-up value or raise ElementNotFoundError."""
        if not isinstance(lookup, dict) or not lookup.get("found"):
            raise ElementNotFoundError(self.selector)
        return lookup.get("value")


BODY_TEXT = "document.body ? document.body.innerText : ''"
TITLE = "document.title"
LOCATION = "window.location.href"
READY_STATE = "document.readyState"
PAGE_SIZE = (
    "(() => { const d = document.documentElement;"
    " return { width: Math.max(d.scrollWidth, d.clientWidth),"
    " height: Math.max(d.scrollHeight, d.clientHeight) }; })()"
)

_UNSERIALIZABLE = {
    "NaN": math.nan,
    "Infinity": math.inf,
    "-Infinity": -math.inf,
    "-0": -0.0,
}


def decode_remote_object(remote: Optional[Dict[str, Any]]) -> Any:
    """Convert a CDP RemoteObject into a Python value.

    Primitives and returnByValue objects come back as-is; undefined and null
    become None; NaN, infinities, -0 and bigints are converted; anything
    else falls back to its description string.
    """
    if not remote:
        return None
    if remote.get("type") == "undefined" or remote.get("subtype") == "null":
        return None
    if "value" in remote:
        return remote["value"]
    unserializable = remote.get("unserializableValue")
    if unserializable is not None:
        if unserializable in _UNSERIALIZABLE:
            return _UNSERIALIZABLE[unserializable]
        if unserializable.endswith("n"):
            return int(unserializable[:-1])
        return unserializable
    return remote.get("description")


def exception_description(details: Dict[str, Any]) -> str:
    """Best human-readable message from Runtime.ExceptionDetails."""
    exception = details.get("exception") or {}
    description = exception.get("description")
    if description:
        return description.splitlines()[0]
    if "value" in exception:
        return str(exception["value"])
    return details.get("text") or "Uncaught exception"


def decode_evaluation(result: Dict[str, Any]) -> Any:
    """Decode a Runtime.evaluate result.

    Raises:
        EvalError: The expression threw (or the awaited promise rejected)
    """
    details = result.get("exceptionDetails")
    if details:
        raise EvalError(
            exception_description(details),
            details={
                "line": details.get("lineNumber"),
                "column": details.get("columnNumber"),
            },
        )
    return decode_remote_object(result.get("result"))
