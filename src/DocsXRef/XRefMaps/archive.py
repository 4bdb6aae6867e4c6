"""Read-only access to xref map archives.

An archive is a ``.zip`` bundling several map documents, typically one per
namespace plus a top-level ``xrefmap.yml``. Entries are decoded on first use
and kept for the lifetime of the :class:`XRefArchive`.
"""

from __future__ import annotations

import logging
import threading
import zipfile
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Union

from .errors import DeserializationError
from .formats import format_for_extension, parse_map_bytes
from .models import XRefMap, XRefSpec

logger = logging.getLogger(__name__)

MAJOR_ENTRY = "xrefmap.yml"
_MAP_SUFFIXES = (".yml", ".yaml", ".json")


class XRefArchive:
    """Cross-reference container backed by a zip file opened in read mode.

    Attributes:
        path: Location of the archive on disk.
        entries: Map document names inside the archive, major entry first.
    """

    mode = "r"

    def __init__(self, path: Path, handle: zipfile.ZipFile) -> None:
        self.path = path
        self._zip = handle
        self._lock = threading.Lock()
        self._maps: Dict[str, Optional[XRefMap]] = {}
        names = [
            info.filename
            for info in handle.infolist()
            if not info.is_dir() and info.filename.lower().endswith(_MAP_SUFFIXES)
        ]
        names.sort(key=lambda name: (name != MAJOR_ENTRY, name))
        self.entries: List[str] = names

    @classmethod
    def open(cls, path: Union[str, Path]) -> "XRefArchive":
        """Open ``path`` read-only.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            DeserializationError: If ``path`` is not a readable zip archive.
        """

        path = Path(path)
        try:
            handle = zipfile.ZipFile(path, "r")
        except zipfile.BadZipFile as exc:
            raise DeserializationError(f"Invalid xref archive {path}: {exc}", source=str(path)) from exc
        logger.debug("xref-archive-opened", extra={"path": str(path), "entries": len(handle.namelist())})
        return cls(path, handle)

    def get_map(self, name: str) -> Optional[XRefMap]:
        """Return the decoded map stored under ``name``."""

        if name not in self.entries:
            raise KeyError(name)
        with self._lock:
            if name not in self._maps:
                source = f"{self.path}!{name}"
                try:
                    data = self._zip.read(name)
                except zipfile.BadZipFile as exc:
                    raise DeserializationError(f"Corrupt entry {source}: {exc}", source=source) from exc
                fmt = format_for_extension(PurePosixPath(name).suffix)
                self._maps[name] = parse_map_bytes(fmt, data, source=source)
            return self._maps[name]

    def resolve(self, uid: str) -> Optional[XRefSpec]:
        """Return the first entry for ``uid`` across the archive's maps."""

        for name in self.entries:
            xref_map = self.get_map(name)
            if xref_map is None:
                continue
            spec = xref_map.resolve(uid)
            if spec is not None:
                return spec
        return None

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "XRefArchive":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"XRefArchive(path={str(self.path)!r}, entries={len(self.entries)})"


__all__ = ["XRefArchive", "MAJOR_ENTRY"]
