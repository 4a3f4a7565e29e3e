"""
Shared plumbing for subcommand handlers: running a verb against a
CommandDispatcher, rendering its result, and reporting errors.
"""

import argparse
import asyncio
import json
import math
import sys
from typing import Any, Awaitable, Callable, Optional, Tuple

from ..dispatcher import CommandDispatcher
from ..exceptions import CDPError

# A verb returns (json_payload, text); text None prints nothing in text mode
VerbResult = Tuple[Any, Optional[str]]
Verb = Callable[[CommandDispatcher], Awaitable[VerbResult]]


def json_safe(value: Any) -> Any:
    """Replace NaN and infinities, which JSON cannot represent, with strings."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value).replace("inf", "Infinity").replace("nan", "NaN")
    if isinstance(value, dict):
        return {key: json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    return value


def emit(args: argparse.Namespace, payload: Any, text: Optional[str]) -> None:
    """Print a verb's result to stdout as JSON or text."""
    if getattr(args, "json", False):
        print(json.dumps(json_safe(payload), ensure_ascii=False, allow_nan=False))
    elif text is not None:
        print(text)


def report_error(args: argparse.Namespace, error: Exception) -> None:
    """Print an error to stderr, as JSON when --json is set."""
    details = getattr(error, "details", None) or {}
    if getattr(args, "json", False):
        print(
            json.dumps(
                {
                    "error": {
                        "type": type(error).__name__,
                        "message": str(error),
                        "details": details,
                    }
                },
                default=str,
            ),
            file=sys.stderr,
        )
        return

    print(f"Error: {error}", file=sys.stderr)
    if details.get("recovery"):
        print(f"Recovery hint: {details['recovery']}", file=sys.stderr)


def is_debug(args: argparse.Namespace) -> bool:
    return hasattr(args, "config") and args.config.log_level.upper() == "DEBUG"


async def run_verb_async(args: argparse.Namespace, verb: Verb) -> int:
    async with CommandDispatcher(args.config, tab=getattr(args, "tab", None)) as dispatcher:
        payload, text = await verb(dispatcher)
    emit(args, payload, text)
    return 0


def run_verb(args: argparse.Namespace, verb: Verb) -> int:
    """
    Run one verb to completion and map the outcome to an exit code.

    Returns:
        0 on success, 1 on any CDPError
    """
    try:
        return asyncio.run(run_verb_async(args, verb))
    except CDPError as e:
        if is_debug(args):
            raise
        report_error(args, e)
        return 1


def display(value: Any) -> str:
    """Text rendering of a decoded evaluation result."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False)
