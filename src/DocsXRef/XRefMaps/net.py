# === NAVMAP v1 ===
# {
#   "module": "DocsXRef.XRefMaps.net",
#   "purpose": "Build HTTPX clients for remote xref map downloads",
#   "sections": [
#     {"id": "helpers", "name": "Client construction helpers", "anchor": "HELP", "kind": "helpers"},
#     {"id": "api", "name": "Public API", "anchor": "API", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""HTTPX client construction for remote xref map downloads.

Each downloader gets its own :class:`httpx.Client` built from
:class:`~DocsXRef.XRefMaps.settings.DownloaderSettings`: certifi trust roots,
optional CRL checking, a single generous timeout, and redirect following.
Tests swap in a client backed by :class:`httpx.MockTransport` through
:func:`configure_http_client`.
"""

from __future__ import annotations

import logging
import ssl
import threading
from typing import Optional, Tuple

import certifi
import httpx

from .settings import DownloaderSettings

LOGGER = logging.getLogger("DocsXRef.XRefMaps.net")

_CLIENT_LOCK = threading.RLock()
_OVERRIDE_CLIENT: Optional[httpx.Client] = None

# --- Client construction helpers ----------------------------------------------


def build_ssl_context(settings: DownloaderSettings) -> ssl.SSLContext:
    """Return a verifying SSL context honouring the revocation settings."""

    context = ssl.create_default_context(cafile=certifi.where())
    if not settings.check_certificate_revocation:
        LOGGER.debug("certificate revocation checks disabled")
        return context
    if settings.crl_file is None:
        LOGGER.warning(
            "certificate revocation checking requested but no crl_file configured; "
            "verifying certificate chains only"
        )
        return context
    context.load_verify_locations(cafile=str(settings.crl_file))
    context.verify_flags |= ssl.VERIFY_CRL_CHECK_LEAF
    return context


def _timeout_for(settings: DownloaderSettings) -> httpx.Timeout:
    return httpx.Timeout(settings.timeout_sec)


def build_http_client(settings: DownloaderSettings) -> httpx.Client:
    """Create a new client for ``settings``; the caller owns and closes it."""

    client = httpx.Client(
        timeout=_timeout_for(settings),
        verify=build_ssl_context(settings),
        follow_redirects=settings.follow_redirects,
        headers={"User-Agent": settings.user_agent},
        trust_env=True,
    )
    LOGGER.debug(
        "httpx client created",
        extra={
            "timeout_sec": settings.timeout_sec,
            "check_certificate_revocation": settings.check_certificate_revocation,
            "follow_redirects": settings.follow_redirects,
        },
    )
    return client


# --- Public API ----------------------------------------------------------------


def configure_http_client(client: Optional[httpx.Client] = None) -> None:
    """Install ``client`` for every subsequent downloader (``None`` clears it)."""

    global _OVERRIDE_CLIENT
    with _CLIENT_LOCK:
        _OVERRIDE_CLIENT = client


def reset_http_client() -> None:
    """Drop any client installed via :func:`configure_http_client` (test helper)."""

    configure_http_client(None)


def get_http_client(settings: DownloaderSettings) -> Tuple[httpx.Client, bool]:
    """Return ``(client, owned)``; ``owned`` clients must be closed by the caller."""

    with _CLIENT_LOCK:
        if _OVERRIDE_CLIENT is not None:
            return _OVERRIDE_CLIENT, False
    return build_http_client(settings), True


__all__ = [
    "build_ssl_context",
    "build_http_client",
    "configure_http_client",
    "reset_http_client",
    "get_http_client",
]
