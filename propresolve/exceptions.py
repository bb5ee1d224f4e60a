"""Resolver exceptions."""

from typing import List, Optional


class ResolutionError(ValueError):
    """Base class for errors raised while resolving placeholders."""

    exit_code = 2


class CircularReferenceError(ResolutionError):
    """Raised when a key's resolution requires a key already being resolved.

    ``path`` holds the full chain of keys, ending with the repeated key,
    so callers can report e.g. ``a -> b -> c -> a`` instead of just ``a``.
    """

    def __init__(self, key: str, path: Optional[List[str]] = None):
        self.key = key
        self.path = list(path) if path else [key]
        super().__init__(
            f"Circular reference detected when resolving '{key}': "
            f"{' -> '.join(self.path)}"
        )


class UndefinedReferenceError(ResolutionError):
    """Raised for a placeholder whose key is absent, when missing keys are errors."""

    def __init__(self, key: str, path: Optional[List[str]] = None):
        self.key = key
        self.path = list(path) if path else []
        if self.path:
            message = f"Undefined key '{key}' referenced from {' -> '.join(self.path)}"
        else:
            message = f"Undefined key '{key}'"
        super().__init__(message)


class SourceLoadError(Exception):
    """Raised when a key-value source cannot be parsed.

    Collects every problem found in the source so they can be reported
    together.
    """

    def __init__(self, errors: List[str], source: str = ""):
        self.errors = errors
        self.source = source
        self.exit_code = 2

        messages = []
        for error in errors:
            if source:
                messages.append(f"{source}: {error}")
            else:
                messages.append(error)

        super().__init__("\n".join(messages))
