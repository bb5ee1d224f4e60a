"""Main CLI entry point for propresolve."""

import argparse
import sys
from typing import Optional

from propresolve.loader import FORMATS
from propresolve.variables import MissingKeyPolicy

from .commands import resolve_file


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the propresolve CLI."""
    parser = argparse.ArgumentParser(
        prog='propresolve',
        description='Resolve ${key} placeholders in a key-value configuration file'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Resolve command
    resolve_parser = subparsers.add_parser('resolve', help='Print resolved values')
    resolve_parser.add_argument(
        'file',
        type=str,
        help='Path to a .properties or YAML file'
    )
    resolve_parser.add_argument(
        'keys',
        nargs='*',
        metavar='KEY',
        help='Keys to resolve (default: all keys)'
    )
    resolve_parser.add_argument(
        '--format',
        choices=list(FORMATS),
        default='auto',
        help='Source format (default: from file suffix)'
    )
    resolve_parser.add_argument(
        '--default',
        type=str,
        help='Value printed for requested keys that are absent'
    )
    resolve_parser.add_argument(
        '--on-missing',
        choices=[policy.value for policy in MissingKeyPolicy],
        default=MissingKeyPolicy.EMPTY.value,
        help='How placeholders naming an absent key are handled'
    )
    resolve_parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    resolve_parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    resolve_parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='warn',
        help='Set log level'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args, extras = parser.parse_known_args(args)

    # KEYs given after an option are left over by the positional pass
    unknown = [extra for extra in extras if extra.startswith('-')]
    if unknown or (extras and parsed_args.command != 'resolve'):
        parser.error(f"unrecognized arguments: {' '.join(extras)}")
    if extras:
        parsed_args.keys = parsed_args.keys + extras

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'resolve':
        return resolve_file(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
