"""
Screenshot subcommand.

Captures a low-quality JPEG (quality 15) so images stay small.
"""

import argparse

from ..dispatcher import CommandDispatcher
from .common import run_verb


def screenshot_handler(args: argparse.Namespace) -> int:
    path = args.path or args.config.screenshot_path

    async def verb(dispatcher: CommandDispatcher):
        output_path = await dispatcher.screenshot(path, full=args.full)
        return (
            {"path": str(output_path), "bytes": output_path.stat().st_size},
            f"✓ Screenshot saved to {output_path}",
        )

    return run_verb(args, verb)


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    screenshot_parser = subparsers.add_parser(
        "screenshot",
        parents=[parent],
        help="Take a screenshot (JPEG, quality 15)",
        epilog="""
Examples:
  browser-cli screenshot
  browser-cli screenshot /tmp/page.jpg --full
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    screenshot_parser.add_argument(
        "path", nargs="?", help="Output path (default: /tmp/browser-cli/screenshot.jpg)"
    )
    screenshot_parser.add_argument(
        "-f", "--full", action="store_true", help="Capture the full scrollable page"
    )
    screenshot_parser.set_defaults(func=screenshot_handler)
