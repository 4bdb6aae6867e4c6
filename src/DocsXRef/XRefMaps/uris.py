"""Reference locator parsing for xref map acquisition."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Union
from urllib.parse import urlsplit, urlunsplit
from urllib.request import url2pathname

_WINDOWS_DRIVE = re.compile(r"^[A-Za-z]:[\\/]")
_UNC_PREFIX = ("\\\\", "//")

UriLike = Union[str, PurePath, "ReferenceUri"]


@dataclass(frozen=True)
class ReferenceUri:
    """Immutable locator that is either absolute (has a scheme) or relative.

    Attributes:
        original: The locator exactly as supplied by the caller.
        scheme: Lower-cased scheme for absolute locators, ``""`` otherwise.

    Rooted filesystem paths (``/srv/maps/x.yml`` or ``C:\\maps\\x.yml``) are
    treated as absolute ``file`` references.

    Examples:
        >>> ReferenceUri.parse("https://example.org/xrefmap.yml").scheme
        'https'
        >>> ReferenceUri.parse("api/xrefmap.yml").is_absolute
        False
    """

    original: str
    scheme: str = ""

    @classmethod
    def parse(cls, value: UriLike) -> "ReferenceUri":
        if isinstance(value, ReferenceUri):
            return value
        if isinstance(value, PurePath):
            value = str(value)
        if not isinstance(value, str):
            raise TypeError(f"reference must be a string or path, got {type(value).__name__}")
        text = value.strip()
        if not text:
            raise ValueError("reference must not be empty")
        if _WINDOWS_DRIVE.match(text) or text.startswith(_UNC_PREFIX) or text.startswith("/"):
            return cls(original=text, scheme="file")
        scheme = urlsplit(text).scheme
        return cls(original=text, scheme=scheme.lower())

    @property
    def is_absolute(self) -> bool:
        return bool(self.scheme)

    @property
    def local_path(self) -> Path:
        """Filesystem path for ``file`` references."""
        if self.scheme != "file":
            raise ValueError(f"{self.original} is not a file reference")
        if not self.original.lower().startswith("file:"):
            return Path(self.original)
        parts = urlsplit(self.original)
        netloc = parts.netloc
        if netloc and netloc.lower() != "localhost":
            return Path(url2pathname(f"//{netloc}{parts.path}"))
        return Path(url2pathname(parts.path))

    @property
    def path(self) -> str:
        """Path component of the locator, without query or fragment."""
        return urlsplit(self.original).path

    def left_part_path(self) -> str:
        """Return ``scheme://authority/path`` with query and fragment removed."""
        parts = urlsplit(self.original)
        return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", ""))

    def __str__(self) -> str:
        return self.original


__all__ = ["ReferenceUri", "UriLike"]
