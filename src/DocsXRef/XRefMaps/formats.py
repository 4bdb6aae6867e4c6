"""Extension-driven deserialization dispatch for xref maps.

:data:`_EXTENSION_FORMATS` is the single table mapping a lower-cased file
extension to a :class:`MapFormat`; both the local and the remote code paths
consult it. Extensions missing from the table (including no extension at all)
fall back to YAML, matching what documentation producers have historically
published. The remote path additionally refuses the archive row, since a
``.zip`` container has to be opened from disk.
"""

from __future__ import annotations

import io
import json
import logging
from enum import Enum
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Callable, Dict, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from .errors import DeserializationError
from .models import XRefMap

if TYPE_CHECKING:  # pragma: no cover - import cycle guard for type checkers only
    from .archive import XRefArchive

logger = logging.getLogger(__name__)

_YAML_LOADER = getattr(yaml, "CSafeLoader", yaml.SafeLoader)


class MapFormat(str, Enum):
    """Deserialization strategies available for xref map sources."""

    ARCHIVE = "archive"
    JSON = "json"
    YAML = "yaml"


_EXTENSION_FORMATS: Dict[str, MapFormat] = {
    ".zip": MapFormat.ARCHIVE,
    ".json": MapFormat.JSON,
    ".yml": MapFormat.YAML,
}
_DEFAULT_FORMAT = MapFormat.YAML
_LOCAL_ONLY_FORMATS = frozenset({MapFormat.ARCHIVE})


def format_for_extension(extension: str, *, remote: bool = False) -> MapFormat:
    """Return the strategy for ``extension``; unknown extensions mean YAML.

    Examples:
        >>> format_for_extension(".JSON")
        <MapFormat.JSON: 'json'>
        >>> format_for_extension(".zip", remote=True)
        <MapFormat.YAML: 'yaml'>
    """

    fmt = _EXTENSION_FORMATS.get(extension.lower(), _DEFAULT_FORMAT)
    if remote and fmt in _LOCAL_ONLY_FORMATS:
        return _DEFAULT_FORMAT
    return fmt


def _parse_json(stream: IO[str]) -> Any:
    return json.load(stream)


def _parse_yaml(stream: IO[str]) -> Any:
    return yaml.load(stream, Loader=_YAML_LOADER)  # noqa: S506 - safe loader


_TEXT_PARSERS: Dict[MapFormat, Callable[[IO[str]], Any]] = {
    MapFormat.JSON: _parse_json,
    MapFormat.YAML: _parse_yaml,
}


def parse_map(fmt: MapFormat, stream: IO[str], *, source: str) -> Optional[XRefMap]:
    """Deserialize one map document from ``stream``.

    Args:
        fmt: Text format to apply; :attr:`MapFormat.ARCHIVE` is rejected.
        stream: Readable text stream positioned at the start of the document.
        source: Path or URL used in error messages.

    Returns:
        The parsed :class:`XRefMap`, or ``None`` when the document is empty.

    Raises:
        DeserializationError: If the content is malformed or is not a mapping.
    """

    parser = _TEXT_PARSERS.get(fmt)
    if parser is None:
        raise ValueError(f"{fmt.value} is not a text format")
    try:
        payload = parser(stream)
    except (yaml.YAMLError, ValueError) as exc:
        raise DeserializationError(
            f"Failed to parse {fmt.value} xref map from {source}: {exc}", source=source
        ) from exc
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise DeserializationError(
            f"Expected a mapping at the root of xref map {source}, got {type(payload).__name__}",
            source=source,
        )
    try:
        return XRefMap.model_validate(payload)
    except PydanticValidationError as exc:
        raise DeserializationError(f"Invalid xref map structure in {source}: {exc}", source=source) from exc


def parse_map_bytes(fmt: MapFormat, data: bytes, *, source: str) -> Optional[XRefMap]:
    """Decode ``data`` as UTF-8 (BOM tolerated) and hand it to :func:`parse_map`."""

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DeserializationError(f"xref map {source} is not valid UTF-8: {exc}", source=source) from exc
    return parse_map(fmt, io.StringIO(text), source=source)


def _open_archive(path: Path) -> "XRefArchive":
    from .archive import XRefArchive  # Local import to avoid circular dependency

    return XRefArchive.open(path)


def _read_text_map(fmt: MapFormat) -> Callable[[Path], Optional[XRefMap]]:
    def reader(path: Path) -> Optional[XRefMap]:
        with path.open("r", encoding="utf-8-sig") as handle:
            return parse_map(fmt, handle, source=str(path))

    return reader


_LOCAL_READERS: Dict[MapFormat, Callable[[Path], Union[XRefMap, "XRefArchive", None]]] = {
    MapFormat.ARCHIVE: _open_archive,
    MapFormat.JSON: _read_text_map(MapFormat.JSON),
    MapFormat.YAML: _read_text_map(MapFormat.YAML),
}


def read_local_file(path: Union[str, Path]) -> Union[XRefMap, "XRefArchive", None]:
    """Load the xref container stored at ``path`` using its extension's strategy."""

    path = Path(path)
    fmt = format_for_extension(path.suffix)
    logger.debug("xrefmap-read-local", extra={"path": str(path), "format": fmt.value})
    return _LOCAL_READERS[fmt](path)


__all__ = [
    "MapFormat",
    "format_for_extension",
    "parse_map",
    "parse_map_bytes",
    "read_local_file",
]
