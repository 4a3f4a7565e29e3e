"""
Snapshot subcommand: accessibility tree outline of the current page.
"""

import argparse

from ..dispatcher import CommandDispatcher
from .common import run_verb


def non_negative_int(value: str) -> int:
    depth = int(value)
    if depth < 0:
        raise argparse.ArgumentTypeError(f"depth must be >= 0, got {depth}")
    return depth


def snapshot_handler(args: argparse.Namespace) -> int:
    async def verb(dispatcher: CommandDispatcher):
        outline = await dispatcher.snapshot(
            interactive=args.interactive, compact=args.compact, depth=args.depth
        )
        return {"snapshot": outline}, outline

    return run_verb(args, verb)


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    snapshot_parser = subparsers.add_parser(
        "snapshot",
        parents=[parent],
        help="Print the page's accessibility tree",
        description="Outline of Accessibility.getFullAXTree as '- role \"name\"' lines",
        epilog="""
Examples:
  browser-cli snapshot
  browser-cli snapshot -i          # buttons, links, inputs only
  browser-cli snapshot -c -d 3
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    snapshot_parser.add_argument(
        "-i", "--interactive", action="store_true", help="Only include interactive elements"
    )
    snapshot_parser.add_argument(
        "-c", "--compact", action="store_true", help="Skip unnamed structural nodes"
    )
    snapshot_parser.add_argument(
        "-d", "--depth", type=non_negative_int, help="Maximum tree depth"
    )
    snapshot_parser.set_defaults(func=snapshot_handler)
