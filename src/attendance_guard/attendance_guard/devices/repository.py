from __future__ import annotations

from typing import Optional, Protocol

from .model import DeviceBinding


class DeviceBindingRepository(Protocol):
    def get(self, identity_id: int) -> Optional[DeviceBinding]:
        raise NotImplementedError

    def put(self, identity_id: int, binding: DeviceBinding) -> None:
        """Replace the identity's binding in a single write."""

        raise NotImplementedError
