# === NAVMAP v1 ===
# {
#   "module": "DocsXRef.XRefMaps",
#   "purpose": "Package initialization for DocsXRef.XRefMaps",
#   "sections": [
#     {
#       "id": "getattr",
#       "name": "__getattr__",
#       "anchor": "function-getattr",
#       "kind": "function"
#     },
#     {
#       "id": "dir",
#       "name": "__dir__",
#       "anchor": "function-dir",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Public API for cross-reference map acquisition.

This facade exposes the downloader used by documentation builds to load
external xref maps from local fallback folders or HTTP(S) endpoints, the
container types it returns, and the exception hierarchy callers handle.
Attributes are imported lazily so importing the package does not pull in
httpx until a downloader is actually needed.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any, Dict, Tuple

_EXPORTS: Dict[str, Tuple[str, str]] = {
    "XRefMapDownloader": (".downloader", "XRefMapDownloader"),
    "XRefContainer": (".downloader", "XRefContainer"),
    "SUPPORTED_SCHEMES": (".downloader", "SUPPORTED_SCHEMES"),
    "XRefMap": (".models", "XRefMap"),
    "XRefSpec": (".models", "XRefSpec"),
    "XRefArchive": (".archive", "XRefArchive"),
    "ReferenceUri": (".uris", "ReferenceUri"),
    "MapFormat": (".formats", "MapFormat"),
    "CancellationToken": (".cancellation", "CancellationToken"),
    "DownloaderSettings": (".settings", "DownloaderSettings"),
    "load_settings": (".settings", "load_settings"),
    "setup_logging": (".logging_config", "setup_logging"),
    "XRefMapError": (".errors", "XRefMapError"),
    "XRefMapNotFoundError": (".errors", "XRefMapNotFoundError"),
    "UnsupportedSchemeError": (".errors", "UnsupportedSchemeError"),
    "InvalidXRefMapError": (".errors", "InvalidXRefMapError"),
    "TransportError": (".errors", "TransportError"),
    "DeserializationError": (".errors", "DeserializationError"),
    "AcquisitionCancelled": (".errors", "AcquisitionCancelled"),
    "ConfigurationError": (".errors", "ConfigurationError"),
}

__all__ = sorted(_EXPORTS)
__version__ = "0.1.0"

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .archive import XRefArchive
    from .cancellation import CancellationToken
    from .downloader import SUPPORTED_SCHEMES, XRefContainer, XRefMapDownloader
    from .errors import (
        AcquisitionCancelled,
        ConfigurationError,
        DeserializationError,
        InvalidXRefMapError,
        TransportError,
        UnsupportedSchemeError,
        XRefMapError,
        XRefMapNotFoundError,
    )
    from .formats import MapFormat
    from .logging_config import setup_logging
    from .models import XRefMap, XRefSpec
    from .settings import DownloaderSettings, load_settings
    from .uris import ReferenceUri


def __getattr__(name: str) -> Any:
    """Lazily import exports on first attribute access."""

    target = _EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
    module_name, attribute = target
    value = getattr(import_module(module_name, __name__), attribute)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    """Expose lazily-populated attributes in ``dir()`` results."""

    return sorted(set(globals()) | set(__all__))
