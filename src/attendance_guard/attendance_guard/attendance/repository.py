from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import PunchType
from .model import Punch


class PunchRepository(Protocol):
    """Append-only attendance log."""

    def append(
        self,
        *,
        identity_id: int,
        punch_type: PunchType,
        device_id: Optional[str],
        network_address: Optional[str],
        punched_at: datetime,
    ) -> Punch:
        raise NotImplementedError
