from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Union

from ..common.datetime_utils import now_utc
from ..core.enums import PunchType
from ..core.exceptions import ValidationError
from ..core.results import Deny, Ok
from ..identities.model import Identity
from .gate import AttendanceGate
from .model import Punch
from .repository import PunchRepository


class PunchService:
    """Use case: record a punch, but only after the gate allows it."""

    def __init__(self, gate: AttendanceGate, punches: PunchRepository, *, clock: Callable[[], datetime] = now_utc):
        self._gate = gate
        self._punches = punches
        self._clock = clock

    @staticmethod
    def parse_type(value: Optional[str]) -> PunchType:
        if value is not None and not isinstance(value, str):
            raise ValidationError("type must be a string")
        # Anything other than "out" counts as a check-in.
        return PunchType.OUT if (value or "").strip().lower() == PunchType.OUT.value else PunchType.IN

    def mark(
        self,
        identity: Identity,
        *,
        punch_type: PunchType,
        device_id: Optional[str],
        client_address: Optional[str],
    ) -> Union[Ok[Punch], Deny]:
        decision = self._gate.authorize(identity, device_id, client_address)
        if isinstance(decision, Deny):
            return decision

        punch = self._punches.append(
            identity_id=identity.identity_id,
            punch_type=punch_type,
            device_id=(device_id or "").strip() or None,
            network_address=client_address,
            punched_at=self._clock(),
        )
        return Ok(punch)
