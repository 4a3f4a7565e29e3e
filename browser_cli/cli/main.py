"""
Main CLI entry point for browser-cli.

Usage:
    browser-cli <verb> [arguments] [options]
    python -m browser_cli.cli.main <verb> [arguments] [options]

Verbs:
    open/back/forward/reload/close  - Navigation
    click/type/fill/press           - Interaction
    get                             - Read title, url, text, html, value, attr, count
    tabs                            - List, open, close and switch tabs
    screenshot                      - Save a JPEG of the page
    snapshot                        - Print the accessibility tree
    wait                            - Wait for time, selector, URL or load state
    eval                            - Evaluate JavaScript
"""

import argparse
import sys
from typing import List, Optional

from browser_cli.config import Configuration, DEFAULT_CONFIG_FILE
from browser_cli.logging_setup import setup_logging
from browser_cli.cli.common import report_error


def create_parent_parser() -> argparse.ArgumentParser:
    """
    Global options shared by every leaf subcommand.

    Defaults are None so unset flags fall through to environment, config
    file and built-in defaults.
    """
    parent = argparse.ArgumentParser(add_help=False)

    parent.add_argument(
        "--host",
        dest="chrome_host",
        help="Chrome debugging host (default: 127.0.0.1)",
    )
    parent.add_argument(
        "--port",
        dest="chrome_port",
        type=int,
        help="Chrome remote debugging port (default: 9222)",
    )
    parent.add_argument(
        "--tab",
        type=int,
        help="Index of the page to drive, as shown by 'tabs list' (default: 0)",
    )
    parent.add_argument(
        "--timeout",
        type=float,
        help="Per-command timeout in seconds (default: 30.0)",
    )
    parent.add_argument(
        "--json",
        action="store_true",
        help="Print results and errors as JSON",
    )

    parent.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: warning)",
    )
    parent.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log record format on stderr (default: text)",
    )

    verbosity_group = parent.add_mutually_exclusive_group()
    verbosity_group.add_argument(
        "--quiet",
        action="store_true",
        help="Only log errors",
    )
    verbosity_group.add_argument(
        "--verbose",
        action="store_true",
        help="Log every CDP command sent",
    )

    return parent


def create_main_parser(parent: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Main parser with every verb registered."""
    parser = argparse.ArgumentParser(
        prog="browser-cli",
        description="Browser automation CLI using the Chrome DevTools Protocol",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Chrome must be running with remote debugging enabled:
  google-chrome --remote-debugging-port=9222

Examples:
  browser-cli open example.com
  browser-cli fill "#search" "hello" && browser-cli press Enter
  browser-cli get text h1 --json
  browser-cli tabs list
  browser-cli screenshot /tmp/page.jpg --full
  browser-cli snapshot --interactive
  browser-cli wait "#results"

For more information on a verb, run: browser-cli <verb> --help
        """,
    )

    subparsers = parser.add_subparsers(
        dest="subcommand",
        title="verbs",
        description="Available browser actions",
        required=True,
    )

    from . import (
        navigate_cmd,
        interact_cmd,
        get_cmd,
        tabs_cmd,
        screenshot_cmd,
        snapshot_cmd,
        wait_cmd,
        eval_cmd,
    )

    navigate_cmd.register_subcommand(subparsers, parent)
    interact_cmd.register_subcommand(subparsers, parent)
    get_cmd.register_subcommand(subparsers, parent)
    tabs_cmd.register_subcommand(subparsers, parent)
    screenshot_cmd.register_subcommand(subparsers, parent)
    snapshot_cmd.register_subcommand(subparsers, parent)
    wait_cmd.register_subcommand(subparsers, parent)
    eval_cmd.register_subcommand(subparsers, parent)

    return parser


def build_config(args: argparse.Namespace) -> Configuration:
    """Precedence: CLI flags > env vars > config file > defaults."""
    config = Configuration()
    config.load_from_file(DEFAULT_CONFIG_FILE)
    config.load_from_env()
    config.merge(
        chrome_host=getattr(args, "chrome_host", None),
        chrome_port=getattr(args, "chrome_port", None),
        timeout=getattr(args, "timeout", None),
        log_level=getattr(args, "log_level", None),
        log_format=getattr(args, "log_format", None),
    )

    if getattr(args, "quiet", False):
        config.log_level = "ERROR"
    elif getattr(args, "verbose", False):
        config.log_level = "DEBUG"
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point.

    Returns:
        Exit code (0 success, 1 error, 2 usage error, 130 interrupted)
    """
    parent = create_parent_parser()
    parser = create_main_parser(parent)
    args = parser.parse_args(argv)

    # logging first so config-file warnings are visible
    setup_logging(
        level=getattr(args, "log_level", None),
        format_type=getattr(args, "log_format", None) or "text",
        quiet=getattr(args, "quiet", False),
        verbose=getattr(args, "verbose", False),
    )
    config = build_config(args)
    setup_logging(
        format_type=config.log_format,
        level=config.log_level,
        quiet=getattr(args, "quiet", False),
        verbose=getattr(args, "verbose", False),
    )

    if config.chrome_port is not None and not 1 <= config.chrome_port <= 65535:
        parser.error(f"--port must be 1-65535, got {config.chrome_port}")

    args.config = config

    if hasattr(args, "func"):
        try:
            return args.func(args)
        except KeyboardInterrupt:
            print("\nInterrupted by user", file=sys.stderr)
            return 130
        except Exception as e:
            if config.log_level.upper() == "DEBUG":
                raise
            report_error(args, e)
            return 1
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
