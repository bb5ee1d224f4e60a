"""Placeholder resolution for flat key-value configuration."""

from .exceptions import (
    CircularReferenceError,
    ResolutionError,
    SourceLoadError,
    UndefinedReferenceError,
)
from .variables import MissingKeyPolicy, Resolver

__version__ = '0.1.0'

__all__ = [
    'CircularReferenceError',
    'MissingKeyPolicy',
    'ResolutionError',
    'Resolver',
    'SourceLoadError',
    'UndefinedReferenceError',
]
