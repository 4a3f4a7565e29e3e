"""
Get subcommand for reading page and element properties.

Implements 'get title|url|text|html|value|attr|count'.
"""

import argparse

from ..dispatcher import CommandDispatcher
from .common import display, run_verb


async def _read(dispatcher: CommandDispatcher, args: argparse.Namespace):
    what = args.what
    if what == "title":
        return await dispatcher.get_title()
    if what == "url":
        return await dispatcher.get_url()
    if what == "text":
        return await dispatcher.get_text(args.selector)
    if what == "html":
        return await dispatcher.get_html(args.selector)
    if what == "value":
        return await dispatcher.get_value(args.selector)
    if what == "attr":
        return await dispatcher.get_attribute(args.selector, args.name)
    if what == "count":
        return await dispatcher.get_count(args.selector)
    raise ValueError(f"Unknown property: {what}")


def get_handler(args: argparse.Namespace) -> int:
    """
    Handle 'get <what>'.

    JSON output is {"<what>": value}; text output is the bare value.
    """

    async def verb(dispatcher: CommandDispatcher):
        value = await _read(dispatcher, args)
        return {args.what: value}, display(value)

    return run_verb(args, verb)


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """Register 'get' with one nested parser per property."""
    get_parser = subparsers.add_parser(
        "get",
        help="Get page information",
        description="Read page or element properties",
        epilog="""
Examples:
  browser-cli get title
  browser-cli get text            # whole page body
  browser-cli get text "#main"
  browser-cli get attr a.logo href
  browser-cli get count "li.item" --json
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    what = get_parser.add_subparsers(dest="what", required=True)

    what.add_parser("title", parents=[parent], help="Page title")
    what.add_parser("url", parents=[parent], help="Current URL")

    text_parser = what.add_parser("text", parents=[parent], help="Element text")
    text_parser.add_argument(
        "selector", nargs="?", help="CSS selector (default: page body)"
    )

    for name, help_text in (
        ("html", "Element inner HTML"),
        ("value", "Input value"),
        ("count", "Number of matching elements"),
    ):
        sub = what.add_parser(name, parents=[parent], help=help_text)
        sub.add_argument("selector", help="CSS selector")

    attr_parser = what.add_parser("attr", parents=[parent], help="Element attribute")
    attr_parser.add_argument("selector", help="CSS selector")
    attr_parser.add_argument("name", help="Attribute name")

    get_parser.set_defaults(func=get_handler)
