from __future__ import annotations

from contextlib import nullcontext
from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional, Sequence

from ..core.enums import RequestStatus
from ..database.memory import InMemoryDatabase, Journal
from .model import ChangeRequest, DeviceMeta
from .repository import ChangeRequestRepository


class InMemoryChangeRequestRepository(ChangeRequestRepository):
    """Thread-safe ledger storage.

    Lock order is request lock, then identity lock. With a journal the
    repository runs inside a unit of work that already holds the request lock,
    and its writes are buffered until the unit commits.
    """

    def __init__(self, db: InMemoryDatabase, *, journal: Optional[Journal] = None):
        self._db = db
        self._journal = journal
        self._pending: Dict[int, int] = db.pending_by_identity

    def _request_lock(self, request_id: int):
        if self._journal is not None:
            return nullcontext()
        return self._db.request_locks.hold(int(request_id))

    def _apply(self, op) -> None:
        if self._journal is not None:
            self._journal.record(op)
        else:
            op()

    def _release_pending_slot(self, req: ChangeRequest) -> None:
        with self._db.identity_locks.hold(req.identity_id):
            if self._pending.get(req.identity_id) == req.request_id:
                del self._pending[req.identity_id]

    def insert_pending(
        self,
        *,
        identity_id: int,
        requested_device_id: str,
        meta: DeviceMeta,
        requested_at: datetime,
    ) -> Optional[ChangeRequest]:
        identity_id = int(identity_id)
        with self._db.identity_locks.hold(identity_id):
            if identity_id in self._pending:
                return None
            req = ChangeRequest(
                request_id=self._db.next_request_id(),
                identity_id=identity_id,
                requested_device_id=requested_device_id,
                requested_device_meta=meta,
                status=RequestStatus.PENDING,
                requested_at=requested_at,
            )
            self._db.requests[req.request_id] = req
            self._pending[identity_id] = req.request_id
            return req

    def get(self, request_id: int) -> Optional[ChangeRequest]:
        return self._db.requests.get(int(request_id))

    def list_for_identity(self, identity_id: int, *, limit: int = 200) -> Sequence[ChangeRequest]:
        items = [r for r in list(self._db.requests.values()) if r.identity_id == int(identity_id)]
        items.sort(key=lambda r: (r.requested_at, r.request_id), reverse=True)
        return items[: int(limit)]

    def list_pending(self, *, limit: int = 500) -> Sequence[ChangeRequest]:
        items = [r for r in list(self._db.requests.values()) if r.status == RequestStatus.PENDING]
        items.sort(key=lambda r: (r.requested_at, r.request_id))
        return items[: int(limit)]

    def mark_reviewed(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        admin_note: Optional[str] = None,
    ) -> bool:
        with self._request_lock(request_id):
            current = self._db.requests.get(int(request_id))
            if current is None or current.status != RequestStatus.PENDING:
                return False
            updated = replace(
                current,
                status=status,
                reviewed_by=int(reviewed_by),
                reviewed_at=reviewed_at,
                admin_note=admin_note if admin_note is not None else current.admin_note,
            )

            def write() -> None:
                self._db.requests[updated.request_id] = updated
                self._release_pending_slot(updated)

            self._apply(write)
            return True

    def set_admin_note(self, request_id: int, admin_note: Optional[str]) -> bool:
        with self._request_lock(request_id):
            current = self._db.requests.get(int(request_id))
            if current is None:
                return False
            updated = replace(current, admin_note=admin_note)

            def write() -> None:
                self._db.requests[updated.request_id] = updated

            self._apply(write)
            return True

    def delete(self, request_id: int) -> bool:
        with self._request_lock(request_id):
            current = self._db.requests.get(int(request_id))
            if current is None:
                return False

            def write() -> None:
                self._db.requests.pop(current.request_id, None)
                self._release_pending_slot(current)

            self._apply(write)
            return True
