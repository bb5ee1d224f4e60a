"""Resolve command implementation."""

import logging
from argparse import Namespace
from pathlib import Path

from propresolve.exceptions import ResolutionError, SourceLoadError
from propresolve.loader import load_source
from propresolve.variables import Resolver


logger = logging.getLogger(__name__)

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'error': logging.ERROR,
}


def resolve_file(args: Namespace) -> int:
    """
    Load a key-value file and print resolved values to stdout.

    Exit codes: 0 success, 1 missing file or absent key without --default,
    2 circular/undefined reference or unparseable source.
    """
    # Set up logging
    log_level = LOG_LEVELS[args.log_level]
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    source_path = Path(args.file)
    if not source_path.is_file():
        logger.error(f"File not found: {source_path}")
        return 1

    try:
        source = load_source(source_path, args.format)
    except SourceLoadError as e:
        for error in e.errors:
            logger.error(f"Load error: {error}")
        return e.exit_code

    resolver = Resolver(source, on_missing=args.on_missing)

    try:
        if not args.keys:
            for key, value in resolver.resolve_all().items():
                print(f"{key}={value}")
            return 0

        exit_code = 0
        for key in args.keys:
            value = resolver.get(key)
            if value is None:
                if args.default is None:
                    logger.error(f"Key not found: {key}")
                    exit_code = 1
                    continue
                value = args.default
            print(value)
        return exit_code
    except ResolutionError as e:
        logger.error(f"Configuration error: {e}")
        return e.exit_code
