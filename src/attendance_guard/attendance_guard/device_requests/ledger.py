from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.validators import optional_text, require_max_length, require_non_empty
from ..core.constants import MAX_DEVICE_ID_LENGTH, MAX_LABEL_LENGTH
from ..core.enums import ErrorKind, RequestStatus, Role
from ..core.results import Err, Ok, Result
from .model import ChangeRequest, DeviceMeta
from .repository import ChangeRequestRepository

logger = logging.getLogger(__name__)

_NOTE_MAX = 500
_USER_AGENT_MAX = 512


class ChangeRequestLedger:
    """Lifecycle of device change requests.

    Enforces one PENDING request per identity (at insert time, atomically in the
    store) and a single transition out of PENDING (conditional write).
    """

    def __init__(self, requests: ChangeRequestRepository, *, clock: Callable[[], datetime] = now_utc):
        self._requests = requests
        self._clock = clock

    def create(self, *, identity_id: int, requested_device_id: str, meta: Optional[DeviceMeta] = None) -> Result[ChangeRequest]:
        device_id = require_non_empty(requested_device_id, "Device id")
        require_max_length(device_id, "Device id", MAX_DEVICE_ID_LENGTH)
        meta = meta or DeviceMeta()
        meta = DeviceMeta(
            label=optional_text(meta.label, MAX_LABEL_LENGTH),
            user_agent=optional_text(meta.user_agent, _USER_AGENT_MAX),
            note=optional_text(meta.note, _NOTE_MAX),
        )

        created = self._requests.insert_pending(
            identity_id=int(identity_id),
            requested_device_id=device_id,
            meta=meta,
            requested_at=self._clock(),
        )
        if created is None:
            return Err(
                ErrorKind.DUPLICATE_PENDING,
                "You already have a pending device change request. Wait for review or cancel it.",
            )
        logger.info("Device change request %s filed by identity %s", created.request_id, identity_id)
        return Ok(created)

    def get(self, request_id: int) -> Optional[ChangeRequest]:
        return self._requests.get(int(request_id))

    def list_by_identity(self, identity_id: int, *, limit: int = 200) -> Sequence[ChangeRequest]:
        return self._requests.list_for_identity(int(identity_id), limit=limit)

    def list_pending(self, *, limit: int = 500) -> Sequence[ChangeRequest]:
        return self._requests.list_pending(limit=limit)

    def transition(
        self,
        *,
        request_id: int,
        to: RequestStatus,
        reviewer_id: int,
        note: Optional[str] = None,
    ) -> Result[ChangeRequest]:
        if to not in (RequestStatus.APPROVED, RequestStatus.REJECTED):
            raise ValueError(f"Cannot transition a request to {to!r}")

        current = self._requests.get(int(request_id))
        if current is None:
            return Err(ErrorKind.NOT_FOUND, "Request not found")
        if not current.is_pending:
            return Err(ErrorKind.ALREADY_REVIEWED, "Request already reviewed")

        note = optional_text(note, _NOTE_MAX)
        reviewed_at = self._clock()
        if not self._requests.mark_reviewed(
            request_id=int(request_id),
            status=to,
            reviewed_by=int(reviewer_id),
            reviewed_at=reviewed_at,
            admin_note=note,
        ):
            # Lost the race between the read above and the conditional write.
            if self._requests.get(int(request_id)) is None:
                return Err(ErrorKind.NOT_FOUND, "Request not found")
            return Err(ErrorKind.ALREADY_REVIEWED, "Request already reviewed")

        return Ok(
            replace(
                current,
                status=to,
                reviewed_by=int(reviewer_id),
                reviewed_at=reviewed_at,
                admin_note=note if note is not None else current.admin_note,
            )
        )

    def annotate(self, *, request_id: int, note: Optional[str]) -> Result[ChangeRequest]:
        """Set the admin note. The only change allowed once a request is reviewed."""
        note = optional_text(note, _NOTE_MAX)
        if not self._requests.set_admin_note(int(request_id), note):
            return Err(ErrorKind.NOT_FOUND, "Request not found")
        updated = self._requests.get(int(request_id))
        if updated is None:
            return Err(ErrorKind.NOT_FOUND, "Request not found")
        return Ok(updated)

    def delete(self, *, request_id: int, requester_id: int, requester_role: Role) -> Result[None]:
        current = self._requests.get(int(request_id))
        if current is None:
            return Err(ErrorKind.NOT_FOUND, "Request not found")
        if requester_role != Role.ADMIN and current.identity_id != int(requester_id):
            return Err(ErrorKind.FORBIDDEN, "You can only delete your own requests")
        if not self._requests.delete(int(request_id)):
            return Err(ErrorKind.NOT_FOUND, "Request not found")
        logger.info("Device change request %s deleted by identity %s", request_id, requester_id)
        return Ok(None)
