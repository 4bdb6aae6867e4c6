"""Executor factory used for fan-out xref map acquisition."""

from __future__ import annotations

from concurrent import futures
from typing import Optional, Tuple

Executor = futures.Executor


def create_executor(workers: int) -> Tuple[Optional[Executor], bool]:
    """
    Return a thread pool for IO-bound acquisition work.

    Args:
        workers: Desired concurrency level.

    Returns:
        Tuple of (executor, needs_shutdown). ``(None, False)`` means the
        caller should run the work inline. Caller is responsible for shutting
        down the returned executor when ``needs_shutdown`` is ``True``.
    """
    if workers <= 1:
        return None, False
    return futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="xrefmap-fetch"), True
