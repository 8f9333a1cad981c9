from __future__ import annotations

from typing import Sequence

from ..core.constants import COMPANY_ALLOWLIST_SETTING_KEY
from ..database.mysql_base import MySQLRepository, dump_json_list, fetchone, load_json_list
from .repository import SettingsRepository


class MySQLSettingsRepository(MySQLRepository, SettingsRepository):
    def get_company_networks(self) -> tuple[str, ...]:
        with self._cursor() as cur:
            cur.execute(
                "SELECT setting_value FROM app_settings WHERE setting_key=%s",
                (COMPANY_ALLOWLIST_SETTING_KEY,),
            )
            row = fetchone(cur)
            if not row:
                return ()
            return load_json_list(row.get("setting_value"))

    def set_company_networks(self, networks: Sequence[str]) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO app_settings(setting_key, setting_value)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE setting_value=VALUES(setting_value)
                """,
                (COMPANY_ALLOWLIST_SETTING_KEY, dump_json_list(networks)),
            )
