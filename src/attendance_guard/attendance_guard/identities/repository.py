from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Identity


class IdentityRepository(Protocol):
    def get_by_id(self, identity_id: int) -> Optional[Identity]:
        raise NotImplementedError

    def set_allowed_networks(self, identity_id: int, networks: Sequence[str]) -> bool:
        """Replace the per-identity override. Returns False if the identity does not exist."""

        raise NotImplementedError
