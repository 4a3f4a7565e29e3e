"""
Tabs subcommand: list, new, close, switch.
"""

import argparse

from ..dispatcher import CommandDispatcher
from .common import run_verb


def tabs_handler(args: argparse.Namespace) -> int:
    """Handle 'tabs <action>'."""

    async def verb(dispatcher: CommandDispatcher):
        action = args.action
        if action == "list":
            pages = await dispatcher.tabs_list()
            payload = [
                {"index": i, "id": t.id, "title": t.title, "url": t.url}
                for i, t in enumerate(pages)
            ]
            text = "\n".join(f"{i}: {t.title} - {t.url}" for i, t in enumerate(pages))
            return payload, text
        if action == "new":
            target_id = await dispatcher.tabs_new(args.url)
            return {"targetId": target_id}, "✓ New tab created"
        if action == "close":
            target = await dispatcher.tabs_close(args.index)
            return {"closed": target.id}, "✓ Tab closed"
        if action == "switch":
            target = await dispatcher.tabs_switch(args.index)
            return (
                {"index": args.index, "id": target.id, "title": target.title},
                f"✓ Switched to tab {args.index}: {target.title}",
            )
        raise ValueError(f"Unknown tabs action: {action}")

    return run_verb(args, verb)


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """Register 'tabs' with nested actions."""
    tabs_parser = subparsers.add_parser(
        "tabs",
        help="Manage tabs",
        description="List, open, close and activate page targets",
        epilog="""
Examples:
  browser-cli tabs list
  browser-cli tabs new example.com
  browser-cli tabs switch 1
  browser-cli tabs close 2
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    actions = tabs_parser.add_subparsers(dest="action", required=True)

    actions.add_parser("list", parents=[parent], help="List open tabs")

    new_parser = actions.add_parser("new", parents=[parent], help="Open a new tab")
    new_parser.add_argument("url", nargs="?", help="URL (default: about:blank)")

    close_parser = actions.add_parser("close", parents=[parent], help="Close a tab")
    close_parser.add_argument("index", type=int, nargs="?", help="Tab index (default: 0)")

    switch_parser = actions.add_parser(
        "switch", parents=[parent], help="Activate a tab by index"
    )
    switch_parser.add_argument("index", type=int, help="Tab index")

    tabs_parser.set_defaults(func=tabs_handler)
