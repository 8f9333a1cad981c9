from __future__ import annotations

from typing import Optional

from ..database.memory import InMemoryDatabase, Journal
from .model import DeviceBinding
from .repository import DeviceBindingRepository


class InMemoryDeviceBindingRepository(DeviceBindingRepository):
    def __init__(self, db: InMemoryDatabase, *, journal: Optional[Journal] = None):
        self._db = db
        self._journal = journal

    def get(self, identity_id: int) -> Optional[DeviceBinding]:
        return self._db.bindings.get(int(identity_id))

    def put(self, identity_id: int, binding: DeviceBinding) -> None:
        key = int(identity_id)

        def write() -> None:
            self._db.bindings[key] = binding

        if self._journal is not None:
            self._journal.record(write)
        else:
            write()
