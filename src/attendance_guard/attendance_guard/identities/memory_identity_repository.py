from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..database.memory import InMemoryDatabase
from .model import Identity
from .repository import IdentityRepository


class InMemoryIdentityRepository(IdentityRepository):
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def add(self, identity: Identity) -> Identity:
        """Register an account. Accounts are normally created by the host application."""
        self._db.identities[int(identity.identity_id)] = identity
        return identity

    def get_by_id(self, identity_id: int) -> Optional[Identity]:
        return self._db.identities.get(int(identity_id))

    def set_allowed_networks(self, identity_id: int, networks: Sequence[str]) -> bool:
        with self._db.identity_locks.hold(int(identity_id)):
            current = self._db.identities.get(int(identity_id))
            if current is None:
                return False
            self._db.identities[int(identity_id)] = replace(current, allowed_networks=tuple(networks))
            return True
