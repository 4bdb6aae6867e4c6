"""Ordered local-directory search for relative xref map references."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple, Union

from .errors import XRefMapNotFoundError
from .formats import read_local_file
from .uris import ReferenceUri

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def build_search_paths(
    base_folder: Optional[PathLike] = None,
    fallback_folders: Optional[Iterable[PathLike]] = None,
) -> Tuple[Path, ...]:
    """Return the primary folder (anchored at the cwd) followed by the fallbacks.

    Examples:
        >>> paths = build_search_paths("docs", ["/shared"])
        >>> paths == (Path.cwd() / "docs", Path("/shared"))
        True
    """

    cwd = Path.cwd()
    primary = cwd if base_folder is None else cwd / Path(base_folder)
    folders = [primary]
    folders.extend(Path(folder) for folder in fallback_folders or ())
    return tuple(folders)


class LocalResolver:
    """Resolve relative references against an ordered tuple of directories.

    The first directory holding the referenced file wins; later directories
    are never consulted once a match is found.
    """

    def __init__(self, search_paths: Sequence[Path]) -> None:
        if not search_paths:
            raise ValueError("LocalResolver requires at least one search path")
        self.search_paths: Tuple[Path, ...] = tuple(search_paths)

    def find(self, uri: ReferenceUri) -> Path:
        """Return the first existing candidate path for ``uri``."""

        for folder in self.search_paths:
            candidate = folder / uri.original
            if candidate.is_file():
                logger.debug(
                    "xrefmap-local-match",
                    extra={"reference": uri.original, "folder": str(folder)},
                )
                return candidate
        raise XRefMapNotFoundError(uri.original, [str(folder) for folder in self.search_paths])

    def resolve_relative(self, uri: ReferenceUri):
        """Load the first match for ``uri``; raises :class:`XRefMapNotFoundError`."""

        return read_local_file(self.find(uri))


__all__ = ["LocalResolver", "build_search_paths"]
