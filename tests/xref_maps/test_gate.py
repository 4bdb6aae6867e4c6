"""Tests for the bounded acquisition gate."""

from __future__ import annotations

import threading
import time

import pytest

from DocsXRef.concurrency import AcquisitionGate, create_executor
from DocsXRef.XRefMaps.cancellation import CancellationToken
from DocsXRef.XRefMaps.errors import AcquisitionCancelled


def test_gate_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        AcquisitionGate(0)


def test_slot_released_when_block_raises() -> None:
    gate = AcquisitionGate(1)
    with pytest.raises(RuntimeError):
        with gate.slot():
            raise RuntimeError("boom")
    assert gate.in_flight == 0
    # A leaked permit would make this block forever.
    with gate.slot():
        assert gate.in_flight == 1


def test_gate_never_exceeds_capacity_under_contention() -> None:
    gate = AcquisitionGate(3)
    active = 0
    observed_max = 0
    lock = threading.Lock()

    def work(index: int) -> int:
        nonlocal active, observed_max
        with gate.slot():
            with lock:
                active += 1
                observed_max = max(observed_max, active)
            time.sleep(0.02)
            with lock:
                active -= 1
            if index % 4 == 0:
                raise ValueError(index)
        return index

    executor, needs_shutdown = create_executor(10)
    assert executor is not None and needs_shutdown
    with executor:
        results = [executor.submit(work, i) for i in range(10)]
        outcomes = [future.exception() for future in results]

    assert observed_max <= 3
    assert gate.peak_in_flight <= 3
    assert gate.in_flight == 0
    assert sum(isinstance(exc, ValueError) for exc in outcomes) == 3


def test_waiting_caller_gives_up_when_cancelled() -> None:
    gate = AcquisitionGate(1)
    token = CancellationToken()
    holder_ready = threading.Event()
    release_holder = threading.Event()

    def holder() -> None:
        with gate.slot():
            holder_ready.set()
            release_holder.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    holder_ready.wait(5)
    threading.Timer(0.1, token.cancel).start()
    try:
        with pytest.raises(AcquisitionCancelled):
            with gate.slot(token):
                pytest.fail("cancelled waiter must not enter the gate")
    finally:
        release_holder.set()
        thread.join(5)
    assert gate.in_flight == 0


def test_create_executor_runs_inline_for_single_worker() -> None:
    assert create_executor(1) == (None, False)
