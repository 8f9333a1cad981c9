from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import as_utc, to_db
from ..database.mysql_base import MySQLRepository, fetchone
from .model import DeviceBinding
from .repository import DeviceBindingRepository


class MySQLDeviceBindingRepository(MySQLRepository, DeviceBindingRepository):
    def get(self, identity_id: int) -> Optional[DeviceBinding]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT device_id, label, bound_at
                FROM device_bindings
                WHERE identity_id=%s
                """,
                (int(identity_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return DeviceBinding(
                device_id=row["device_id"],
                label=row.get("label") or "",
                bound_at=as_utc(row["bound_at"]),
            )

    def put(self, identity_id: int, binding: DeviceBinding) -> None:
        # Single-row upsert: readers see the old row or the new one.
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO device_bindings(identity_id, device_id, label, bound_at)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    device_id=VALUES(device_id),
                    label=VALUES(label),
                    bound_at=VALUES(bound_at)
                """,
                (int(identity_id), binding.device_id, binding.label, to_db(binding.bound_at)),
            )
