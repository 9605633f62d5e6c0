"""
Serialization point for store mutations.

Every load -> mutate -> persist sequence runs while holding the guard, so
two concurrent operations can never interleave their reads and writes and
silently drop one update.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

LOG = logging.getLogger("storage.guard")

# Waits longer than this are worth a log line.
SLOW_WAIT_SECONDS = 0.25


class ConcurrencyGuard:
    """A single exclusive, re-entrant lock shared by all users of one store."""

    def __init__(self, name: str = "graph-store") -> None:
        self._name = name
        self._lock = threading.RLock()

    @contextmanager
    def critical_section(self, operation: str) -> Iterator[None]:
        start = time.perf_counter()
        with self._lock:
            waited = time.perf_counter() - start
            if waited > SLOW_WAIT_SECONDS:
                LOG.debug("%s waited %.3fs for %s lock", operation, waited, self._name)
            yield
