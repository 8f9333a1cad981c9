from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import as_utc, to_db
from ..core.enums import RequestStatus
from ..database.mysql_base import MySQLRepository, fetchall, fetchone, is_duplicate_key
from .model import ChangeRequest, DeviceMeta
from .repository import ChangeRequestRepository

_COLUMNS = """
    request_id, identity_id, requested_device_id,
    device_label, user_agent, request_note,
    status, requested_at, reviewed_by, reviewed_at, admin_note
"""


def _to_request(r: Dict[str, Any]) -> ChangeRequest:
    return ChangeRequest(
        request_id=int(r["request_id"]),
        identity_id=int(r["identity_id"]),
        requested_device_id=r["requested_device_id"],
        requested_device_meta=DeviceMeta(
            label=r.get("device_label"),
            user_agent=r.get("user_agent"),
            note=r.get("request_note"),
        ),
        status=RequestStatus(r["status"]),
        requested_at=as_utc(r["requested_at"]),
        reviewed_by=(int(r["reviewed_by"]) if r.get("reviewed_by") is not None else None),
        reviewed_at=(as_utc(r["reviewed_at"]) if r.get("reviewed_at") else None),
        admin_note=r.get("admin_note"),
    )


class MySQLChangeRequestRepository(MySQLRepository, ChangeRequestRepository):
    def insert_pending(
        self,
        *,
        identity_id: int,
        requested_device_id: str,
        meta: DeviceMeta,
        requested_at: datetime,
    ) -> Optional[ChangeRequest]:
        with self._cursor() as cur:
            try:
                # uq_one_pending_per_identity rejects a second PENDING row for the identity.
                cur.execute(
                    """
                    INSERT INTO device_change_requests(
                        identity_id, requested_device_id, device_label, user_agent, request_note,
                        status, requested_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(identity_id),
                        requested_device_id,
                        meta.label,
                        meta.user_agent,
                        meta.note,
                        RequestStatus.PENDING.value,
                        to_db(requested_at),
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc):
                    return None
                raise
            request_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM device_change_requests WHERE request_id=%s", (request_id,))
            return _to_request(fetchone(cur))

    def get(self, request_id: int) -> Optional[ChangeRequest]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM device_change_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_for_identity(self, identity_id: int, *, limit: int = 200) -> Sequence[ChangeRequest]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM device_change_requests
                WHERE identity_id=%s
                ORDER BY requested_at DESC, request_id DESC
                LIMIT %s
                """,
                (int(identity_id), int(limit)),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_pending(self, *, limit: int = 500) -> Sequence[ChangeRequest]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM device_change_requests
                WHERE status=%s
                ORDER BY requested_at ASC, request_id ASC
                LIMIT %s
                """,
                (RequestStatus.PENDING.value, int(limit)),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def mark_reviewed(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        admin_note: Optional[str] = None,
    ) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE device_change_requests
                SET status=%s, reviewed_by=%s, reviewed_at=%s, admin_note=COALESCE(%s, admin_note)
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    to_db(reviewed_at),
                    admin_note,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def set_admin_note(self, request_id: int, admin_note: Optional[str]) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE device_change_requests SET admin_note=%s WHERE request_id=%s",
                (admin_note, int(request_id)),
            )
            # rowcount is 0 when the note is unchanged, so check existence separately.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS present FROM device_change_requests WHERE request_id=%s", (int(request_id),))
            return fetchone(cur) is not None

    def delete(self, request_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM device_change_requests WHERE request_id=%s", (int(request_id),))
            return cur.rowcount > 0
