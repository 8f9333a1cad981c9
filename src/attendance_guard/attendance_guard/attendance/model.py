from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PunchType


@dataclass(frozen=True)
class Punch:
    """One accepted attendance in/out event, tagged for audit."""

    punch_id: int
    identity_id: int
    punch_type: PunchType
    device_id: Optional[str]
    network_address: Optional[str]
    punched_at: datetime
