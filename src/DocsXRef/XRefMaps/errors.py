"""Exception hierarchy shared across cross-reference map acquisition.

Acquiring an xref map spans local search, scheme dispatch, HTTP retrieval,
archive access, and YAML/JSON deserialization. This module groups the failure
modes into a small hierarchy so build-pipeline callers can react to broad
categories (a missing map vs. a broken download) while still reading the
structured attributes each subclass carries.
"""

from __future__ import annotations

from typing import Optional, Sequence

__all__ = [
    "XRefMapError",
    "ConfigurationError",
    "XRefMapNotFoundError",
    "UnsupportedSchemeError",
    "InvalidXRefMapError",
    "TransportError",
    "DeserializationError",
    "AcquisitionCancelled",
]


class XRefMapError(RuntimeError):
    """Base exception for xref map acquisition failures."""


class ConfigurationError(XRefMapError):
    """Raised when downloader settings or config files are invalid."""


class XRefMapNotFoundError(XRefMapError):
    """Raised when a relative reference is absent from every search directory."""

    def __init__(self, reference: str, search_paths: Sequence[str]) -> None:
        self.reference = reference
        self.search_paths = tuple(str(path) for path in search_paths)
        super().__init__(
            f"Cannot find xref map file {reference} in path: {','.join(self.search_paths)}"
        )


class UnsupportedSchemeError(XRefMapError):
    """Raised when an absolute reference uses a scheme other than file/http/https."""

    def __init__(self, scheme: str, supported: Sequence[str]) -> None:
        self.scheme = scheme
        self.supported = tuple(supported)
        super().__init__(f"Unsupported scheme {scheme}, expected: {', '.join(self.supported)}.")


class InvalidXRefMapError(XRefMapError):
    """Raised when a source deserializes cleanly but yields no document."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"Invalid xref map from {source}.")


class TransportError(XRefMapError):
    """Raised when an HTTP(S) fetch fails at the network or protocol level."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DeserializationError(XRefMapError):
    """Raised when JSON, YAML, or archive content cannot be decoded."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


class AcquisitionCancelled(XRefMapError):
    """Raised when a cancellation token is observed mid-acquisition."""
