"""Handling of placeholders whose key is not defined."""

from enum import Enum


class MissingKeyPolicy(str, Enum):
    """What a ``${key}`` token turns into when ``key`` is absent."""
    EMPTY = "empty"  # contributes ""
    KEEP = "keep"    # token is left verbatim
    ERROR = "error"  # UndefinedReferenceError
