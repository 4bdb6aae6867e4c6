"""Fetch xref maps over HTTP(S)."""

from __future__ import annotations

import io
import logging
import time
from pathlib import PurePosixPath
from typing import Optional

import httpx

from .cancellation import CancellationToken, check_cancelled
from .errors import TransportError
from .formats import format_for_extension, parse_map_bytes
from .models import XRefMap
from .uris import ReferenceUri

logger = logging.getLogger(__name__)


def resolve_base_url(xref_map: XRefMap, uri: ReferenceUri) -> str:
    """Return the map's own base URL, or the directory it was fetched from.

    Examples:
        >>> resolve_base_url(XRefMap(), ReferenceUri.parse("https://example.org/docs/map.yml?v=2"))
        'https://example.org/docs/'
        >>> resolve_base_url(XRefMap(base_url="/custom/"), ReferenceUri.parse("https://example.org/docs/map.yml"))
        '/custom/'
    """

    if xref_map.base_url:
        return xref_map.base_url
    left_part = uri.left_part_path()
    return left_part[: left_part.rfind("/") + 1]


class RemoteFetcher:
    """Download and deserialize a single remote map document.

    Args:
        client: Shared HTTPX client; the fetcher never closes it.
        read_buffer_size: Largest slice of the response body written between
            cancellation and deadline checks.
        timeout_sec: Bound on the whole request, body included. The client's
            own timeout applies to each individual read.
    """

    def __init__(
        self,
        client: httpx.Client,
        *,
        read_buffer_size: int = 81920,
        timeout_sec: Optional[float] = None,
    ) -> None:
        self._client = client
        self._read_buffer_size = read_buffer_size
        self._timeout_sec = timeout_sec

    def _check_deadline(self, deadline: Optional[float], uri: ReferenceUri) -> None:
        if deadline is not None and time.monotonic() > deadline:
            raise TransportError(
                f"Timed out after {self._timeout_sec}s downloading xref map {uri.original}",
                url=uri.original,
            )

    def _download(self, uri: ReferenceUri, cancel_token: Optional[CancellationToken]) -> bytes:
        buffer = io.BytesIO()
        deadline = None if self._timeout_sec is None else time.monotonic() + self._timeout_sec
        try:
            with self._client.stream("GET", uri.original) as response:
                response.raise_for_status()
                for piece in response.iter_bytes():
                    view = memoryview(piece)
                    for offset in range(0, len(view), self._read_buffer_size):
                        check_cancelled(cancel_token, f"download of {uri.original}")
                        self._check_deadline(deadline, uri)
                        buffer.write(view[offset : offset + self._read_buffer_size])
                self._check_deadline(deadline, uri)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise TransportError(
                f"HTTP {status} while downloading xref map {uri.original}",
                url=uri.original,
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Failed to download xref map {uri.original}: {exc}", url=uri.original
            ) from exc
        return buffer.getvalue()

    def fetch(self, uri: ReferenceUri, cancel_token: Optional[CancellationToken] = None) -> Optional[XRefMap]:
        """Fetch ``uri`` and return its map with ``base_url`` resolved.

        Returns ``None`` when the payload is an empty document.

        Raises:
            TransportError: On DNS, connection, timeout or non-2xx failures.
            DeserializationError: When the payload is not a valid map.
            AcquisitionCancelled: When ``cancel_token`` fires mid-download.
        """

        logger.info("Reading from web: %s", uri.original)
        check_cancelled(cancel_token, f"download of {uri.original}")
        payload = self._download(uri, cancel_token)
        fmt = format_for_extension(PurePosixPath(uri.path).suffix, remote=True)
        logger.debug(
            "xrefmap-remote-downloaded",
            extra={"url": uri.original, "bytes": len(payload), "format": fmt.value},
        )
        xref_map = parse_map_bytes(fmt, payload, source=uri.original)
        if xref_map is None:
            return None
        xref_map.base_url = resolve_base_url(xref_map, uri)
        return xref_map


__all__ = ["RemoteFetcher", "resolve_base_url"]
