from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class DeviceMeta:
    """What the employee told us about the device they want bound."""

    label: Optional[str] = None
    user_agent: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class ChangeRequest:
    """Employee request to bind a new device.

    Enters as PENDING; reaches APPROVED or REJECTED exactly once. After review
    only ``admin_note`` may change.
    """

    request_id: int
    identity_id: int
    requested_device_id: str
    requested_device_meta: DeviceMeta
    status: RequestStatus
    requested_at: datetime
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    admin_note: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING
