"""Cooperative cancellation for xref map acquisitions.

Acquisitions run on worker threads and may sit in a gate queue or inside a
long HTTP read. :class:`CancellationToken` lets the caller ask them to stop;
the downloader checks the token at its suspension points rather than
interrupting threads, so gate permits and HTTP responses are always released
on the way out.
"""

from __future__ import annotations

import threading
from typing import Optional

from .errors import AcquisitionCancelled


class CancellationToken:
    """Thread-safe cancellation flag.

    Examples:
        >>> token = CancellationToken()
        >>> token.is_cancelled()
        False
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Signal that cancellation has been requested."""
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, what: str = "acquisition") -> None:
        """Raise :class:`AcquisitionCancelled` when cancellation was requested."""
        if self._event.is_set():
            raise AcquisitionCancelled(f"{what} cancelled")


def check_cancelled(token: Optional[CancellationToken], what: str = "acquisition") -> None:
    """Raise if ``token`` is set; a ``None`` token never cancels."""

    if token is not None:
        token.raise_if_cancelled(what)


__all__ = ["CancellationToken", "check_cancelled"]
