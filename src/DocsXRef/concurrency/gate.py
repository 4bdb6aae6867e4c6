"""Counting gate that bounds in-flight acquisition work."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol

logger = logging.getLogger(__name__)

# Seconds between cancellation checks while blocked on a full gate.
_CANCEL_POLL_INTERVAL = 0.05


class _Cancellable(Protocol):
    def is_cancelled(self) -> bool: ...

    def raise_if_cancelled(self, what: str = ...) -> None: ...


class AcquisitionGate:
    """Bounded semaphore with scoped acquisition and in-flight bookkeeping.

    At most ``capacity`` callers hold a slot at once; further callers block
    until one is released. Slots are only handed out through :meth:`slot`, a
    context manager, so an exception raised inside the guarded block always
    returns its permit.

    Examples:
        >>> gate = AcquisitionGate(2)
        >>> with gate.slot():
        ...     gate.in_flight
        1
        >>> gate.in_flight
        0
    """

    def __init__(self, capacity: int) -> None:
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError(f"gate capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._semaphore = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of slots held simultaneously since construction."""
        with self._lock:
            return self._peak

    def _wait(self, cancel_token: Optional[_Cancellable]) -> None:
        if cancel_token is None:
            self._semaphore.acquire()
            return
        while not self._semaphore.acquire(timeout=_CANCEL_POLL_INTERVAL):
            cancel_token.raise_if_cancelled("gate wait")
        if cancel_token.is_cancelled():
            self._semaphore.release()
            cancel_token.raise_if_cancelled("gate wait")

    @contextmanager
    def slot(self, cancel_token: Optional[_Cancellable] = None) -> Iterator[None]:
        """Hold one gate slot for the duration of the ``with`` block."""

        self._wait(cancel_token)
        with self._lock:
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)
            current = self._in_flight
        logger.debug("gate-slot-acquired", extra={"in_flight": current, "capacity": self.capacity})
        try:
            yield
        finally:
            with self._lock:
                self._in_flight -= 1
            self._semaphore.release()


__all__ = ["AcquisitionGate"]
