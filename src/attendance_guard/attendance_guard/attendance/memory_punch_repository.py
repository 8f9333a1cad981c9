from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import PunchType
from ..database.memory import InMemoryDatabase
from .model import Punch
from .repository import PunchRepository


class InMemoryPunchRepository(PunchRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def append(
        self,
        *,
        identity_id: int,
        punch_type: PunchType,
        device_id: Optional[str],
        network_address: Optional[str],
        punched_at: datetime,
    ) -> Punch:
        punch = Punch(
            punch_id=self._db.next_punch_id(),
            identity_id=int(identity_id),
            punch_type=punch_type,
            device_id=device_id,
            network_address=network_address,
            punched_at=punched_at,
        )
        with self._db.punches_lock:
            self._db.punches.append(punch)
        return punch

    def all(self) -> Sequence[Punch]:
        with self._db.punches_lock:
            return list(self._db.punches)
