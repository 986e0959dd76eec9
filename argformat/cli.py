"""argformat CLI - format a message from the command line.

Example:
    # Automatic placeholders
    argformat "{p} + {p} = {p}" 1 2 3

    # Named arguments and custom delimiters
    argformat --delimiters "<<" ">>" --named who=world "hello <<who>>"

    # Parse arguments as YAML values (numbers, lists, mappings)
    argformat --yaml-args "{p0 + p1}" 2 3
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import Any

import yaml

from argformat.config import load_formatter_config
from argformat.core.arguments import Named
from argformat.core.errors import ConfigError, FormatError
from argformat.formatter import Formatter
from argformat.observability.logging import configure_logging

logger = logging.getLogger(__name__)


def _parse_named(pairs: Sequence[str] | None) -> Named:
    """Parse key=value pairs into named arguments.

    Raises:
        ValueError: If a pair has no '='
    """
    named = Named()
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"Invalid named argument {pair!r}, expected KEY=VALUE"
            raise ValueError(msg)
        named[key] = value
    return named


def _parse_arguments(raw: Sequence[str], as_yaml: bool) -> list[Any]:
    if not as_yaml:
        return list(raw)

    arguments = []
    for value in raw:
        try:
            arguments.append(yaml.safe_load(value))
        except yaml.YAMLError:
            logger.debug("Argument %r is not valid YAML, using it as text", value)
            arguments.append(value)
    return arguments


def build_formatter(args: argparse.Namespace) -> Formatter:
    """Create the formatter described by config file and command-line overrides.

    Raises:
        ConfigError: If the configuration file cannot be loaded
    """
    if args.config:
        formatter = Formatter.from_config(load_formatter_config(args.config))
    else:
        formatter = Formatter()

    if args.placeholder is not None:
        formatter.set_placeholder(args.placeholder)
    if args.delimiters is not None:
        formatter.set_delimiters(*args.delimiters)

    return formatter


def run(args: argparse.Namespace) -> int:
    """Format the message and write it to stdout.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        formatter = build_formatter(args)
        arguments = _parse_arguments(args.arguments, args.yaml_args)
        if args.named:
            arguments.append(_parse_named(args.named))

        formatter.format_writer(sys.stdout, args.message, *arguments)
        if not args.no_newline:
            sys.stdout.write("\n")
        return 0

    except FormatError as e:
        print(f"[{e.code}] {e}", file=sys.stderr)
        print(f"Hint: {e.hint}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"[{e.code}] {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="argformat",
        description="Format a message with automatic, positional and named placeholders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  argformat "{p} + {p} = {p}" 1 2 3
  argformat --named name=Ann "Hi {name}"
  argformat --delimiters "<<" ">>" "<<p0>>-<<p0>>" x
        """,
    )

    parser.add_argument("message", help="Message template")
    parser.add_argument("arguments", nargs="*", help="Positional arguments")

    parser.add_argument("--config", "-c", help="Path to formatter YAML configuration")
    parser.add_argument("--placeholder", help="Placeholder prefix (default: p)")
    parser.add_argument(
        "--delimiters",
        nargs=2,
        metavar=("LEFT", "RIGHT"),
        help="Expression delimiters (default: { })",
    )
    parser.add_argument(
        "--named",
        action="append",
        metavar="KEY=VALUE",
        help="Named argument (can be used multiple times)",
    )
    parser.add_argument(
        "--yaml-args",
        action="store_true",
        help="Parse positional arguments as YAML values",
    )
    parser.add_argument(
        "--no-newline",
        "-n",
        action="store_true",
        help="Do not print a trailing newline",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument("--log-json", action="store_true", help="Log as JSON lines")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level, json_output=args.log_json)

    return run(args)


if __name__ == "__main__":
    sys.exit(main())
