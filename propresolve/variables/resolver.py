"""
Placeholder resolution over a flat key-value store.

Given entries such as::

    FOO = foo
    BAR = bar
    BAZ = ${FOO} is ${BAR}

``Resolver(entries).get("BAZ")`` returns ``"foo is bar"``. Referenced keys
may themselves contain placeholders; they are expanded recursively and
circular references are reported instead of recursing forever.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from propresolve.exceptions import CircularReferenceError, UndefinedReferenceError
from propresolve.variables.policy import MissingKeyPolicy


logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    """One key being expanded: its raw value, scan state and output so far."""
    key: str
    raw: str
    matches: Iterator[re.Match]
    pieces: List[str] = field(default_factory=list)
    position: int = 0
    pending: Optional[re.Match] = None  # token waiting on the frame above


class Resolver:
    """
    Resolves ``${key}`` placeholders against a raw key-value store.

    The raw store is copied in at construction (or filled through
    ``set_raw``/``update``) and is only read while resolving, so lookups
    never change it and repeated lookups return the same result.
    """

    # ${ followed by anything but '}' (possibly nothing), then '}'
    VAR_PATTERN = re.compile(r'\$\{([^}]*)\}')

    def __init__(
        self,
        source: Optional[Any] = None,
        on_missing: Union[MissingKeyPolicy, str] = MissingKeyPolicy.EMPTY
    ):
        """
        Initialize the resolver.

        Args:
            source: A mapping of str to str, or an object exposing
                ``all_keys()`` and ``raw_get(key)``. Copied once.
            on_missing: How placeholders naming an absent key are handled

        Raises:
            ValueError: If on_missing is not a known policy
        """
        self.on_missing = MissingKeyPolicy(on_missing)
        self._raw: Dict[str, str] = {}
        if source is not None:
            self.update(source)

    def get(self, key: str) -> Optional[str]:
        """
        Return the fully resolved value of ``key``.

        Args:
            key: Key to look up

        Returns:
            Resolved value, or None if the key is absent

        Raises:
            CircularReferenceError: If resolution revisits a key in progress
            UndefinedReferenceError: If a referenced key is absent and the
                policy is ``MissingKeyPolicy.ERROR``
        """
        return self._resolve(key, [])

    def get_or_default(self, key: str, fallback: str) -> str:
        """Return the resolved value of ``key``, or ``fallback`` if it is absent."""
        value = self.get(key)
        return fallback if value is None else value

    def resolve_all(self) -> Dict[str, str]:
        """
        Resolve every key in the store.

        Returns:
            New dict of key -> resolved value; the raw store is left untouched
        """
        resolved = {}
        for key in sorted(self._raw):
            resolved[key] = self._resolve(key, [])
        logger.debug(f"Resolved {len(resolved)} keys")
        return resolved

    def _resolve(self, key: str, path: List[str]) -> Optional[str]:
        """
        Resolve ``key`` with ``path`` holding the keys currently in progress.

        Nested placeholders are expanded with an explicit stack of frames,
        one per key on ``path``, so chain length is bounded by the number
        of keys rather than by the interpreter's recursion limit.
        """
        if key in path:
            self._circular(key, path)

        raw = self._raw.get(key)
        if raw is None:
            return None

        path.append(key)
        stack = [_Frame(key, raw, self.VAR_PATTERN.finditer(raw))]
        while True:
            frame = stack[-1]
            match = next(frame.matches, None)

            if match is None:
                # Frame done; hand its value to the parent
                if frame.pieces:
                    frame.pieces.append(frame.raw[frame.position:])
                    value = ''.join(frame.pieces)
                else:
                    value = frame.raw
                stack.pop()
                path.pop()
                if not stack:
                    return value
                parent = stack[-1]
                parent.pieces.append(value)
                parent.position = parent.pending.end()
                continue

            frame.pieces.append(frame.raw[frame.position:match.start()])
            inner_key = match.group(1)
            logger.debug(f"Resolving '{inner_key}' referenced from {' -> '.join(path)}")
            if inner_key in path:
                self._circular(inner_key, path)

            inner_raw = self._raw.get(inner_key)
            if inner_raw is None:
                frame.pieces.append(self._missing(match, path))
                frame.position = match.end()
                continue

            frame.pending = match
            path.append(inner_key)
            stack.append(_Frame(inner_key, inner_raw, self.VAR_PATTERN.finditer(inner_raw)))

    def _circular(self, key: str, path: List[str]) -> None:
        chain = path + [key]
        logger.warning(f"Circular reference: {' -> '.join(chain)}")
        raise CircularReferenceError(key, chain)

    def _missing(self, match, path: List[str]) -> str:
        """Return the replacement text for a token whose key is absent."""
        inner_key = match.group(1)
        if self.on_missing is MissingKeyPolicy.KEEP:
            return match.group(0)
        if self.on_missing is MissingKeyPolicy.ERROR:
            logger.warning(f"Undefined key '{inner_key}' referenced from {' -> '.join(path)}")
            raise UndefinedReferenceError(inner_key, path)
        return ''

    def references(self, key: str) -> List[str]:
        """
        List the keys directly referenced by the raw value of ``key``.

        Args:
            key: Key whose raw value is scanned

        Returns:
            Inner keys in order of appearance (empty if the key is absent)
        """
        raw = self._raw.get(key)
        if raw is None:
            return []
        return [match.group(1) for match in self.VAR_PATTERN.finditer(raw)]

    def raw(self, key: str) -> Optional[str]:
        """Return the unresolved value of ``key``."""
        return self._raw.get(key)

    def set_raw(self, key: str, value: str) -> None:
        """Store a raw value. Not safe to call while lookups are running."""
        self._check_entry(key, value)
        self._raw[key] = value

    def update(self, source: Any) -> None:
        """
        Copy every entry of ``source`` into the raw store.

        Entries are all checked before any is copied, so a rejected source
        leaves the store unchanged.

        Args:
            source: A mapping of str to str, or an object exposing
                ``all_keys()`` and ``raw_get(key)``

        Raises:
            TypeError: If a key or value is not a string
        """
        if hasattr(source, 'all_keys') and hasattr(source, 'raw_get'):
            entries = []
            for key in source.all_keys():
                value = source.raw_get(key)
                if value is not None:
                    entries.append((key, value))
        else:
            mapping: Mapping[str, str] = source
            entries = list(mapping.items())

        for key, value in entries:
            self._check_entry(key, value)
        self._raw.update(entries)
        logger.debug(f"Raw store holds {len(self._raw)} keys")

    @staticmethod
    def _check_entry(key: Any, value: Any) -> None:
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError(
                f"Keys and values must be strings, got {type(key).__name__}={type(value).__name__}"
            )

    def keys(self) -> Iterable[str]:
        """Keys of the raw store."""
        return self._raw.keys()

    def __contains__(self, key: object) -> bool:
        return key in self._raw

    def __len__(self) -> int:
        return len(self._raw)

    def __repr__(self) -> str:
        return f"Resolver({len(self._raw)} keys, on_missing={self.on_missing.value!r})"
