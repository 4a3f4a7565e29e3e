"""
Eval subcommand for executing JavaScript in the current page.

The expression is sent verbatim as Runtime.evaluate's expression, so large
injected scripts travel unchanged; only the returned value is decoded.
"""

import argparse
import sys
from pathlib import Path

from ..dispatcher import CommandDispatcher
from .common import display, run_verb


def eval_handler(args: argparse.Namespace) -> int:
    """
    Handle 'eval <expression>' and 'eval --file script.js'.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if args.file:
        expression = sys.stdin.read() if args.file == "-" else Path(args.file).read_text(encoding="utf-8")
    else:
        expression = args.expression

    async def verb(dispatcher: CommandDispatcher):
        value = await dispatcher.evaluate(expression)
        return value, display(value)

    return run_verb(args, verb)


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    eval_parser = subparsers.add_parser(
        "eval",
        parents=[parent],
        help="Evaluate JavaScript in the page",
        description="Evaluate an expression via Runtime.evaluate (promises are awaited)",
        epilog="""
Examples:
  browser-cli eval "document.title"
  browser-cli eval "[...document.links].map(a => a.href)" --json
  browser-cli eval --file walker.js
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = eval_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("expression", nargs="?", help="JavaScript expression")
    source.add_argument(
        "--file", help="Read the expression from a file ('-' for stdin)"
    )
    eval_parser.set_defaults(func=eval_handler)
