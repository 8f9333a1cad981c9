from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..common.validators import optional_text, require_max_length, require_non_empty
from ..core.constants import MAX_DEVICE_ID_LENGTH, MAX_LABEL_LENGTH
from .model import DeviceBinding
from .repository import DeviceBindingRepository


class DeviceBindingService:
    """Current trusted device per identity.

    ``rebind`` is the only mutator. It is called by the review workflow (inside
    its unit of work) and by the admin immediate-bind path, never by a punch.
    """

    def __init__(self, bindings: DeviceBindingRepository, *, clock: Callable[[], datetime] = now_utc):
        self._bindings = bindings
        self._clock = clock

    def current_device(self, identity_id: int) -> Optional[DeviceBinding]:
        return self._bindings.get(int(identity_id))

    def rebind(self, *, identity_id: int, device_id: str, label: Optional[str], default_label: str = "") -> DeviceBinding:
        device_id = require_max_length(require_non_empty(device_id, "Device id"), "Device id", MAX_DEVICE_ID_LENGTH)
        binding = DeviceBinding(
            device_id=device_id,
            label=optional_text(label, MAX_LABEL_LENGTH) or default_label,
            bound_at=self._clock(),
        )
        self._bindings.put(int(identity_id), binding)
        return binding
