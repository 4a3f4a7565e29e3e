"""
Navigation verbs: open, back, forward, reload, close.
"""

import argparse

from ..dispatcher import CommandDispatcher
from .common import run_verb


def open_handler(args: argparse.Namespace) -> int:
    """Handle 'open <url>'."""

    async def verb(dispatcher: CommandDispatcher):
        outcome = await dispatcher.navigate(args.url, wait_load=args.wait_load)
        text = f"✓ {outcome.get('title', '')}".rstrip() + f"\n  {outcome['url']}"
        return outcome, text

    return run_verb(args, verb)


def history_handler(args: argparse.Namespace) -> int:
    """Handle 'back' and 'forward'."""

    async def verb(dispatcher: CommandDispatcher):
        if args.subcommand == "back":
            entry = await dispatcher.back()
        else:
            entry = await dispatcher.forward()
        return entry, f"✓ {args.subcommand.capitalize()}\n  {entry['url']}"

    return run_verb(args, verb)


def reload_handler(args: argparse.Namespace) -> int:
    """Handle 'reload'."""

    async def verb(dispatcher: CommandDispatcher):
        await dispatcher.reload()
        return {"reloaded": True}, "✓ Reloaded"

    return run_verb(args, verb)


def close_handler(args: argparse.Namespace) -> int:
    """Handle 'close' (closes the current tab)."""

    async def verb(dispatcher: CommandDispatcher):
        await dispatcher.close_page()
        return {"closed": True}, "✓ Closed"

    return run_verb(args, verb)


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """
    Register navigation verbs.

    Args:
        subparsers: Subparsers from main parser
        parent: Parent parser with global options
    """
    open_parser = subparsers.add_parser(
        "open",
        aliases=["goto", "navigate"],
        parents=[parent],
        help="Navigate to a URL",
        description="Navigate the current tab via Page.navigate",
        epilog="""
Examples:
  # Scheme defaults to https://
  browser-cli open example.com

  # Block until the load event fires
  browser-cli open https://example.com --wait-load
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    open_parser.add_argument("url", help="URL to open")
    open_parser.add_argument(
        "--wait-load",
        action="store_true",
        help="Wait for Page.loadEventFired before returning",
    )
    open_parser.set_defaults(func=open_handler, subcommand="open")

    for name, help_text in (
        ("back", "Go back in history"),
        ("forward", "Go forward in history"),
    ):
        history_parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        history_parser.set_defaults(func=history_handler)

    reload_parser = subparsers.add_parser(
        "reload", parents=[parent], help="Reload current page"
    )
    reload_parser.set_defaults(func=reload_handler)

    close_parser = subparsers.add_parser(
        "close",
        aliases=["quit", "exit"],
        parents=[parent],
        help="Close the current tab",
    )
    close_parser.set_defaults(func=close_handler, subcommand="close")
