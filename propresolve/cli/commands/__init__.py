"""CLI command handlers."""

from .resolve import resolve_file

__all__ = ['resolve_file']
