"""
Wait subcommand: sleep, or poll until a selector, URL or load state shows up.
"""

import argparse

from ..dispatcher import CommandDispatcher
from .common import run_verb


def wait_handler(args: argparse.Namespace) -> int:
    """
    Handle 'wait'.

    An all-digit target is milliseconds; any other target is a CSS selector.
    --url and --load are checked after the target, in that order.
    """

    async def verb(dispatcher: CommandDispatcher):
        payload = {}
        lines = []
        target = args.target

        if target is not None and target.isdigit():
            await dispatcher.wait_ms(int(target))
            payload["waited_ms"] = int(target)
            lines.append(f"✓ Waited {target}ms")
        elif target is not None:
            await dispatcher.wait_for_selector(target)
            payload["selector"] = target
            lines.append("✓ Element found")

        if args.url:
            payload["url"] = await dispatcher.wait_for_url(args.url)
            lines.append(f"✓ URL matched: {payload['url']}")

        if args.load:
            payload["readyState"] = await dispatcher.wait_for_load(args.load)
            lines.append(f"✓ Load state reached: {args.load}")

        return payload, "\n".join(lines)

    if args.target is None and not args.url and not args.load:
        args.wait_parser.error("nothing to wait for: give <ms|selector>, --url or --load")
    return run_verb(args, verb)


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    wait_parser = subparsers.add_parser(
        "wait",
        parents=[parent],
        help="Wait for element, time, or condition",
        epilog="""
Examples:
  browser-cli wait 500
  browser-cli wait "#results" --timeout 10
  browser-cli wait --url /dashboard
  browser-cli wait --load domcontentloaded
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    wait_parser.add_argument("target", nargs="?", help="Milliseconds or CSS selector")
    wait_parser.add_argument("-u", "--url", help="Wait until the URL contains this text")
    wait_parser.add_argument(
        "-l",
        "--load",
        nargs="?",
        const="load",
        choices=["load", "domcontentloaded"],
        help="Wait for a document load state (default: load)",
    )
    wait_parser.set_defaults(func=wait_handler, wait_parser=wait_parser)
