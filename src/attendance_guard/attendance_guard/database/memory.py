from __future__ import annotations

import itertools
import threading
from typing import Callable, Dict, List

from ..common.locks import KeyedLocks


class InMemoryDatabase:
    """Process-local store used by the testing settings and the test-suite.

    Records are immutable dataclasses; a write swaps one reference, so readers
    always see either the old or the new record, never a mix. Writers that
    must check-then-act serialize on the narrowest key (identity id or request
    id) through ``KeyedLocks``.
    """

    def __init__(self) -> None:
        self.identities: Dict[int, object] = {}
        self.bindings: Dict[int, object] = {}
        self.requests: Dict[int, object] = {}
        self.pending_by_identity: Dict[int, int] = {}
        self.punches: List[object] = []
        self.settings: Dict[str, tuple] = {}

        self.identity_locks = KeyedLocks()
        self.request_locks = KeyedLocks()
        self.settings_lock = threading.Lock()
        self.punches_lock = threading.Lock()

        self._request_ids = itertools.count(1)
        self._punch_ids = itertools.count(1)
        self._ids_lock = threading.Lock()

    def next_request_id(self) -> int:
        with self._ids_lock:
            return next(self._request_ids)

    def next_punch_id(self) -> int:
        with self._ids_lock:
            return next(self._punch_ids)


class Journal:
    """Buffered writes, applied in record order on ``commit`` or dropped on ``discard``.

    Memory repositories given a journal record their mutations here instead of
    applying them, so a failed unit of work leaves the store untouched. Commit
    is not a snapshot swap: readers take no lock, and between two ops a reader
    may see the first write without the second. Writers of the same request
    stay serialized by the request lock the unit of work holds.
    """

    def __init__(self) -> None:
        self._ops: List[Callable[[], None]] = []
        self._closed = False

    def record(self, op: Callable[[], None]) -> None:
        if self._closed:
            raise RuntimeError("journal already closed")
        self._ops.append(op)

    def commit(self) -> None:
        self._closed = True
        for op in self._ops:
            op()
        self._ops.clear()

    def discard(self) -> None:
        self._closed = True
        self._ops.clear()
