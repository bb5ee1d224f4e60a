"""Key-value sources that feed a Resolver's raw store."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import yaml

from propresolve.exceptions import SourceLoadError


logger = logging.getLogger(__name__)


class PreservingLoader(yaml.SafeLoader):
    """Custom YAML loader that keeps scalars like 'on'/'off' as strings instead of booleans."""
    pass


# Drop the implicit bool resolvers for 'on'/'off' so those values stay literal text
PreservingLoader.yaml_implicit_resolvers = dict(PreservingLoader.yaml_implicit_resolvers)
for _initial in ('o', 'O'):
    if _initial in PreservingLoader.yaml_implicit_resolvers:
        PreservingLoader.yaml_implicit_resolvers[_initial] = [
            (tag, regexp) for tag, regexp in PreservingLoader.yaml_implicit_resolvers[_initial]
            if tag != 'tag:yaml.org,2002:bool'
        ]


def _to_text(value: Any) -> str:
    """Render a scalar the way a placeholder would print it."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class MappingSource:
    """Exposes an in-memory mapping through ``all_keys``/``raw_get``."""

    def __init__(self, entries: Mapping[str, str]):
        self._entries = dict(entries)

    def all_keys(self) -> Iterable[str]:
        return list(self._entries.keys())

    def raw_get(self, key: str) -> Optional[str]:
        return self._entries.get(key)


class PropertiesSource(MappingSource):
    """
    Parses ``.properties`` style text.

    Supported syntax:
    - ``key=value`` and ``key: value`` (first separator wins)
    - ``#`` and ``!`` comment lines, blank lines
    - a trailing backslash continues the value on the next line
    - a line with no separator defines the key with an empty value
    """

    SEPARATORS = ('=', ':')

    def __init__(self, text: str, name: str = ""):
        self.name = name
        super().__init__(self._parse(text))

    def _parse(self, text: str) -> Dict[str, str]:
        entries: Dict[str, str] = {}
        errors: List[str] = []

        for lineno, line in self._logical_lines(text):
            stripped = line.strip()
            if not stripped or stripped[0] in ('#', '!'):
                continue

            cuts = [stripped.find(sep) for sep in self.SEPARATORS if sep in stripped]
            if cuts:
                cut = min(cuts)
                key = stripped[:cut].strip()
                value = stripped[cut + 1:].lstrip()
            else:
                key, value = stripped, ''

            if not key:
                errors.append(f"line {lineno}: missing key")
                continue
            if key in entries:
                logger.debug(f"Key '{key}' redefined at line {lineno}")
            entries[key] = value

        if errors:
            raise SourceLoadError(errors, self.name)
        return entries

    @staticmethod
    def _logical_lines(text: str):
        """Yield (first line number, joined line) with backslash continuations folded in."""
        pending = None
        start = 0
        for lineno, line in enumerate(text.splitlines(), start=1):
            if pending is None:
                if line.lstrip()[:1] in ('#', '!'):
                    # comments never continue
                    yield lineno, line
                    continue
                start = lineno
                pending = line
            else:
                pending += line.lstrip()
            trailing = len(pending) - len(pending.rstrip('\\'))
            if trailing % 2 == 1:
                pending = pending[:-1]
                continue
            yield start, pending
            pending = None
        if pending is not None:
            yield start, pending


class YamlSource(MappingSource):
    """Parses a YAML document holding one flat mapping of scalars."""

    def __init__(self, text: str, name: str = ""):
        self.name = name
        super().__init__(self._parse(text))

    def _parse(self, text: str) -> Dict[str, str]:
        try:
            document = yaml.load(text, Loader=PreservingLoader)
        except yaml.YAMLError as e:
            raise SourceLoadError([f"Failed to parse YAML: {e}"], self.name)

        if document is None:
            return {}
        if not isinstance(document, dict):
            raise SourceLoadError(
                [f"Document must be a mapping, got {type(document).__name__}"],
                self.name
            )

        entries: Dict[str, str] = {}
        errors: List[str] = []
        for key, value in document.items():
            if isinstance(value, (dict, list)):
                errors.append(f"Value of '{key}' must be a scalar, got {type(value).__name__}")
                continue
            text_key = _to_text(key)
            if text_key in entries:
                errors.append(f"Key '{text_key}' is defined more than once")
                continue
            entries[text_key] = _to_text(value)

        if errors:
            raise SourceLoadError(errors, self.name)
        return entries


FORMATS = ('auto', 'yaml', 'properties')


def detect_format(path: Union[str, Path]) -> str:
    """Pick a source format from the file suffix; anything but YAML is properties."""
    if Path(path).suffix.lower() in ('.yaml', '.yml'):
        return 'yaml'
    return 'properties'


def load_source(path: Union[str, Path], fmt: str = 'auto') -> MappingSource:
    """
    Read a file into a key-value source.

    Args:
        path: File to read
        fmt: One of 'auto', 'yaml', 'properties'

    Returns:
        Source ready to hand to a Resolver

    Raises:
        FileNotFoundError: If the file does not exist
        SourceLoadError: If the contents cannot be parsed
        ValueError: If fmt is unknown
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format '{fmt}'. Supported: {FORMATS}")

    path = Path(path)
    if fmt == 'auto':
        fmt = detect_format(path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise SourceLoadError([f"Not valid UTF-8 text: {e}"], str(path))

    logger.info(f"Loading {fmt} source: {path}")
    if fmt == 'yaml':
        return YamlSource(text, name=str(path))
    return PropertiesSource(text, name=str(path))
