from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.mysql_base import MySQLRepository, dump_json_list, fetchone, load_json_list
from .model import Identity
from .repository import IdentityRepository


class MySQLIdentityRepository(MySQLRepository, IdentityRepository):
    def get_by_id(self, identity_id: int) -> Optional[Identity]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT identity_id, full_name, role, allowed_networks
                FROM identities
                WHERE identity_id=%s
                """,
                (int(identity_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Identity(
                identity_id=int(row["identity_id"]),
                role=Role(row["role"]),
                allowed_networks=load_json_list(row.get("allowed_networks")),
                full_name=row.get("full_name") or "",
            )

    def set_allowed_networks(self, identity_id: int, networks: Sequence[str]) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "SELECT identity_id FROM identities WHERE identity_id=%s FOR UPDATE",
                (int(identity_id),),
            )
            if not fetchone(cur):
                return False
            cur.execute(
                "UPDATE identities SET allowed_networks=%s WHERE identity_id=%s",
                (dump_json_list(networks), int(identity_id)),
            )
            return True
