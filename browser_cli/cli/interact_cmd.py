"""
Interaction verbs: click, type, fill, press.
"""

import argparse

from ..dispatcher import CommandDispatcher
from .common import run_verb


def click_handler(args: argparse.Namespace) -> int:
    async def verb(dispatcher: CommandDispatcher):
        await dispatcher.click(args.selector)
        return {"clicked": args.selector}, "✓ Clicked"

    return run_verb(args, verb)


def type_handler(args: argparse.Namespace) -> int:
    """Append text with real key events."""

    async def verb(dispatcher: CommandDispatcher):
        await dispatcher.type_text(args.selector, args.text)
        return {"typed": args.text, "selector": args.selector}, "✓ Typed"

    return run_verb(args, verb)


def fill_handler(args: argparse.Namespace) -> int:
    """Replace the element's value."""

    async def verb(dispatcher: CommandDispatcher):
        await dispatcher.fill(args.selector, args.text)
        return {"filled": args.text, "selector": args.selector}, "✓ Filled"

    return run_verb(args, verb)


def press_handler(args: argparse.Namespace) -> int:
    async def verb(dispatcher: CommandDispatcher):
        await dispatcher.press(args.key)
        return {"pressed": args.key}, f"✓ Pressed {args.key}"

    return run_verb(args, verb)


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """Register interaction verbs."""
    click_parser = subparsers.add_parser(
        "click", parents=[parent], help="Click an element"
    )
    click_parser.add_argument("selector", help="CSS selector")
    click_parser.set_defaults(func=click_handler)

    type_parser = subparsers.add_parser(
        "type",
        parents=[parent],
        help="Type text into an element (appends)",
        description="Focus the element and send one key event per character",
    )
    type_parser.add_argument("selector", help="CSS selector")
    type_parser.add_argument("text", help="Text to append")
    type_parser.set_defaults(func=type_handler)

    fill_parser = subparsers.add_parser(
        "fill",
        parents=[parent],
        help="Clear and fill an element",
        description="Set the element's value and dispatch input/change events",
    )
    fill_parser.add_argument("selector", help="CSS selector")
    fill_parser.add_argument("text", help="New value")
    fill_parser.set_defaults(func=fill_handler)

    press_parser = subparsers.add_parser(
        "press",
        aliases=["key"],
        parents=[parent],
        help="Press a key",
        epilog="Named keys: Enter, Tab, Escape, Backspace, Delete, Arrow*, Home, End, PageUp, PageDown, Space",
    )
    press_parser.add_argument("key", help="Key name or single character")
    press_parser.set_defaults(func=press_handler)
