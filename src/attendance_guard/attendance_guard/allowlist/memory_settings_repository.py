from __future__ import annotations

from typing import Sequence

from ..core.constants import COMPANY_ALLOWLIST_SETTING_KEY
from ..database.memory import InMemoryDatabase
from .repository import SettingsRepository


class InMemorySettingsRepository(SettingsRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def get_company_networks(self) -> tuple[str, ...]:
        return self._db.settings.get(COMPANY_ALLOWLIST_SETTING_KEY, ())

    def set_company_networks(self, networks: Sequence[str]) -> None:
        with self._db.settings_lock:
            self._db.settings[COMPANY_ALLOWLIST_SETTING_KEY] = tuple(networks)
