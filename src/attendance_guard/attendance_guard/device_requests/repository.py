from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import ChangeRequest, DeviceMeta


class ChangeRequestRepository(Protocol):
    def insert_pending(
        self,
        *,
        identity_id: int,
        requested_device_id: str,
        meta: DeviceMeta,
        requested_at: datetime,
    ) -> Optional[ChangeRequest]:
        """Insert a PENDING request.

        Returns None, inserting nothing, when the identity already has a pending
        request. The check and the insert must be atomic per identity.
        """

        raise NotImplementedError

    def get(self, request_id: int) -> Optional[ChangeRequest]:
        raise NotImplementedError

    def list_for_identity(self, identity_id: int, *, limit: int = 200) -> Sequence[ChangeRequest]:
        """Newest first."""

        raise NotImplementedError

    def list_pending(self, *, limit: int = 500) -> Sequence[ChangeRequest]:
        """Oldest first (review queue order)."""

        raise NotImplementedError

    def mark_reviewed(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        admin_note: Optional[str] = None,
    ) -> bool:
        """Move a PENDING request to ``status``. False if it is missing or no longer pending.

        A None ``admin_note`` keeps whatever note is already stored.
        """

        raise NotImplementedError

    def set_admin_note(self, request_id: int, admin_note: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, request_id: int) -> bool:
        raise NotImplementedError
