from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import ContextManager, Iterator, Protocol

from ..database.connection import DatabaseConnection
from ..database.memory import InMemoryDatabase, Journal
from ..database.mysql_base import db_cursor
from ..devices.memory_device_binding_repository import InMemoryDeviceBindingRepository
from ..devices.mysql_device_binding_repository import MySQLDeviceBindingRepository
from ..devices.repository import DeviceBindingRepository
from .memory_change_request_repository import InMemoryChangeRequestRepository
from .mysql_change_request_repository import MySQLChangeRequestRepository
from .repository import ChangeRequestRepository


@dataclass(frozen=True)
class ReviewScope:
    """Repositories that share one transaction."""

    requests: ChangeRequestRepository
    bindings: DeviceBindingRepository


class ReviewUnitOfWork(Protocol):
    def atomic(self, *, request_id: int) -> ContextManager[ReviewScope]:
        """Serialize on ``request_id`` and commit every write in the scope together.

        Leaving the block normally commits; an exception discards all writes.
        """

        raise NotImplementedError


class MySQLReviewUnitOfWork(ReviewUnitOfWork):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def atomic(self, *, request_id: int) -> Iterator[ReviewScope]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock: a concurrent reviewer of the same request waits here, then sees the new status.
            cur.execute(
                "SELECT request_id FROM device_change_requests WHERE request_id=%s FOR UPDATE",
                (int(request_id),),
            )
            cur.fetchall()
            yield ReviewScope(
                requests=MySQLChangeRequestRepository(cursor=cur),
                bindings=MySQLDeviceBindingRepository(cursor=cur),
            )


class InMemoryReviewUnitOfWork(ReviewUnitOfWork):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    @contextmanager
    def atomic(self, *, request_id: int) -> Iterator[ReviewScope]:
        with self._db.request_locks.hold(int(request_id)):
            journal = Journal()
            try:
                yield ReviewScope(
                    requests=InMemoryChangeRequestRepository(self._db, journal=journal),
                    bindings=InMemoryDeviceBindingRepository(self._db, journal=journal),
                )
            except BaseException:
                journal.discard()
                raise
            journal.commit()
