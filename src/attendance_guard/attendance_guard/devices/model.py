from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DeviceBinding:
    """The single device currently trusted for an identity.

    Having a binding authorizes nothing by itself: the device id presented on
    a punch must equal ``device_id``.
    """

    device_id: str
    label: str
    bound_at: datetime
