from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_db
from ..core.enums import PunchType
from ..database.mysql_base import MySQLRepository
from .model import Punch
from .repository import PunchRepository


class MySQLPunchRepository(MySQLRepository, PunchRepository):
    def append(
        self,
        *,
        identity_id: int,
        punch_type: PunchType,
        device_id: Optional[str],
        network_address: Optional[str],
        punched_at: datetime,
    ) -> Punch:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO punches(identity_id, punch_type, device_id, network_address, punched_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(identity_id), punch_type.value, device_id, network_address, to_db(punched_at)),
            )
            return Punch(
                punch_id=int(cur.lastrowid),
                identity_id=int(identity_id),
                punch_type=punch_type,
                device_id=device_id,
                network_address=network_address,
                punched_at=punched_at,
            )
