from __future__ import annotations

import logging
from typing import Optional

from ..allowlist.resolver import AllowlistResolver
from ..core.enums import DenyReason
from ..core.results import Allow, Decision, Deny
from ..devices.service import DeviceBindingService
from ..identities.model import Identity

logger = logging.getLogger(__name__)


class AttendanceGate:
    """Decides whether a punch may be recorded.

    Order of checks for non-admins: network first, then device registration,
    then device equality. Admins are let through without either check; this is
    the same trust carve-out as the admin immediate bind.

    The binding is read from the store on every call (never cached), so a
    just-committed approval is honoured by the very next punch. Store failures
    propagate to the caller; nothing here turns an error into Allow.
    """

    def __init__(self, resolver: AllowlistResolver, bindings: DeviceBindingService):
        self._resolver = resolver
        self._bindings = bindings

    def authorize(self, identity: Identity, presented_device_id: Optional[str], client_address: Optional[str]) -> Decision:
        if identity.is_admin:
            return Allow()

        if not self._resolver.is_allowed(identity, client_address):
            return self._deny(identity, DenyReason.NETWORK_NOT_ALLOWED, client_address)

        bound = self._bindings.current_device(identity.identity_id)
        if bound is None:
            return self._deny(identity, DenyReason.NO_DEVICE_REGISTERED, client_address)

        if (presented_device_id or "").strip() != bound.device_id:
            return self._deny(identity, DenyReason.DEVICE_MISMATCH, client_address)

        return Allow()

    @staticmethod
    def _deny(identity: Identity, reason: DenyReason, client_address: Optional[str]) -> Deny:
        logger.info("Punch denied for identity %s from %s: %s", identity.identity_id, client_address, reason.value)
        return Deny(reason)
