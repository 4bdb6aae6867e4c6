# === NAVMAP v1 ===
# {
#   "module": "DocsXRef.XRefMaps.downloader",
#   "purpose": "Entry point resolving reference URIs into cross-reference containers",
#   "sections": [
#     {"id": "constants", "name": "Constants", "anchor": "CONST", "kind": "constants"},
#     {"id": "downloader", "name": "XRefMapDownloader", "anchor": "class-xrefmapdownloader", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Resolve xref map references into loaded cross-reference containers.

:class:`XRefMapDownloader` is the single entry point used by the build
pipeline. Relative references are searched for in the primary folder and
then each fallback folder; absolute references are dispatched by scheme to a
direct file read or an HTTP(S) download. Every acquisition holds a slot of
the downloader's :class:`~DocsXRef.concurrency.AcquisitionGate`, so however
many threads call :meth:`XRefMapDownloader.acquire`, at most
``max_parallelism`` reads or downloads run at once.

Example:
    >>> with XRefMapDownloader("docs", ["/opt/shared-xrefmaps"]) as downloader:  # doctest: +SKIP
    ...     xref_map = downloader.acquire("dotnet/xrefmap.yml")
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent import futures
from typing import Callable, Dict, Iterable, List, Optional, Union

import httpx

from DocsXRef.concurrency import AcquisitionGate, create_executor

from . import net
from .archive import XRefArchive
from .cancellation import CancellationToken, check_cancelled
from .errors import InvalidXRefMapError, UnsupportedSchemeError
from .formats import read_local_file
from .local import LocalResolver, build_search_paths
from .logging_config import generate_correlation_id
from .models import XRefMap
from .remote import RemoteFetcher
from .settings import DownloaderSettings, apply_env_overrides, build_settings
from .uris import ReferenceUri, UriLike

logger = logging.getLogger(__name__)

XRefContainer = Union[XRefMap, XRefArchive]

# --- Constants -----------------------------------------------------------------

SUPPORTED_SCHEMES = ("http", "https", "file")

_Handler = Callable[[ReferenceUri, Optional[CancellationToken]], Optional[XRefContainer]]


class XRefMapDownloader:
    """Thread-safe xref map acquisition with bounded concurrency.

    Args:
        base_folder: Primary search folder for relative references, resolved
            against the current working directory. Defaults to the cwd.
        fallback_folders: Folders searched, in order, when the primary folder
            lacks the file.
        max_parallelism: Gate capacity; defaults to ``settings.max_parallelism``.
        settings: Network and search configuration. Built from defaults when
            omitted; ``DOCSXREF_*`` environment variables override it either way.
        client: HTTPX client for remote maps. The downloader closes only
            clients it created itself.

    Attributes:
        search_paths: Immutable, ordered search folders.
        gate: The concurrency gate shared by all callers of this instance.
    """

    def __init__(
        self,
        base_folder: Optional[Union[str, "os.PathLike[str]"]] = None,
        fallback_folders: Optional[Iterable[Union[str, "os.PathLike[str]"]]] = None,
        max_parallelism: Optional[int] = None,
        *,
        settings: Optional[DownloaderSettings] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = apply_env_overrides(settings) if settings is not None else build_settings()
        if base_folder is None:
            base_folder = self.settings.base_folder
        if fallback_folders is None:
            fallback_folders = self.settings.fallback_folders
        self.search_paths = build_search_paths(base_folder, fallback_folders)
        if max_parallelism is None:
            max_parallelism = self.settings.max_parallelism
        self.gate = AcquisitionGate(max_parallelism)
        self._local = LocalResolver(self.search_paths)
        self._client = client
        self._owns_client = False
        self._remote: Optional[RemoteFetcher] = None
        self._remote_lock = threading.Lock()
        self._handlers: Dict[str, _Handler] = {
            "file": self._acquire_file,
            "http": self._acquire_remote,
            "https": self._acquire_remote,
        }

    @property
    def max_parallelism(self) -> int:
        return self.gate.capacity

    def acquire(self, uri: UriLike, cancel_token: Optional[CancellationToken] = None) -> XRefContainer:
        """Load the cross-reference container that ``uri`` points at.

        Args:
            uri: Absolute (``file``/``http``/``https``) or relative reference.
            cancel_token: Optional token checked while waiting for a gate slot
                and between network reads.

        Returns:
            A fully deserialized :class:`XRefMap` or :class:`XRefArchive`.

        Raises:
            ValueError: If ``uri`` is ``None`` or empty.
            XRefMapNotFoundError: Relative reference absent from every folder.
            UnsupportedSchemeError: Absolute reference with another scheme.
            InvalidXRefMapError: The source parsed to an empty document.
            TransportError: Remote download failed.
            DeserializationError: Content is not a valid map or archive.
            AcquisitionCancelled: ``cancel_token`` was cancelled.
        """

        if uri is None:
            raise ValueError("uri must not be None")
        reference = ReferenceUri.parse(uri)
        correlation_id = generate_correlation_id()
        with self.gate.slot(cancel_token):
            check_cancelled(cancel_token, f"acquisition of {reference.original}")
            if reference.is_absolute:
                result = self._acquire_by_scheme(reference, cancel_token, correlation_id)
            else:
                logger.debug(
                    "xrefmap-acquire",
                    extra={
                        "correlation_id": correlation_id,
                        "reference": reference.original,
                        "route": "local-fallback",
                    },
                )
                result = self._local.resolve_relative(reference)
            if result is None:
                raise InvalidXRefMapError(reference.original)
            return result

    def _acquire_by_scheme(
        self,
        reference: ReferenceUri,
        cancel_token: Optional[CancellationToken],
        correlation_id: str,
    ) -> Optional[XRefContainer]:
        handler = self._handlers.get(reference.scheme)
        if handler is None:
            raise UnsupportedSchemeError(reference.scheme, SUPPORTED_SCHEMES)
        logger.debug(
            "xrefmap-acquire",
            extra={
                "correlation_id": correlation_id,
                "reference": reference.original,
                "route": "file" if reference.scheme == "file" else "remote",
            },
        )
        return handler(reference, cancel_token)

    def _acquire_file(
        self, reference: ReferenceUri, cancel_token: Optional[CancellationToken]
    ) -> Optional[XRefContainer]:
        return read_local_file(reference.local_path)

    def _acquire_remote(
        self, reference: ReferenceUri, cancel_token: Optional[CancellationToken]
    ) -> Optional[XRefContainer]:
        return self._remote_fetcher().fetch(reference, cancel_token)

    def _remote_fetcher(self) -> RemoteFetcher:
        with self._remote_lock:
            if self._remote is None:
                if self._client is None:
                    self._client, self._owns_client = net.get_http_client(self.settings)
                self._remote = RemoteFetcher(
                    self._client,
                    read_buffer_size=self.settings.read_buffer_size,
                    timeout_sec=self.settings.timeout_sec,
                )
            return self._remote

    def acquire_all(
        self,
        uris: Iterable[UriLike],
        *,
        workers: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[XRefContainer]:
        """Acquire every reference in ``uris`` concurrently, preserving order.

        All submitted acquisitions run to completion before the first failure
        (in input order) is raised; archives opened by successful siblings
        are closed in that case.
        """

        references = list(uris)
        if not references:
            return []
        executor, needs_shutdown = create_executor(workers or min(len(references), self.max_parallelism))
        if executor is None:
            pending = [self._acquire_inline(uri, cancel_token) for uri in references]
        else:
            try:
                pending = [executor.submit(self.acquire, uri, cancel_token) for uri in references]
                futures.wait(pending)
            finally:
                if needs_shutdown:
                    executor.shutdown(wait=True)
        failures = [future for future in pending if future.exception() is not None]
        if failures:
            for future in pending:
                if future.exception() is None and isinstance(future.result(), XRefArchive):
                    future.result().close()
            raise failures[0].exception()  # type: ignore[misc]
        return [future.result() for future in pending]

    def _acquire_inline(
        self, uri: UriLike, cancel_token: Optional[CancellationToken]
    ) -> "futures.Future[XRefContainer]":
        future: "futures.Future[XRefContainer]" = futures.Future()
        try:
            future.set_result(self.acquire(uri, cancel_token))
        except Exception as exc:
            future.set_exception(exc)
        return future

    def close(self) -> None:
        """Close the HTTP client if this downloader created it."""

        with self._remote_lock:
            if self._client is not None and self._owns_client:
                self._client.close()
                self._client = None
                self._owns_client = False
            self._remote = None

    def __enter__(self) -> "XRefMapDownloader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["XRefMapDownloader", "XRefContainer", "SUPPORTED_SCHEMES"]
