from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence, Union

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_ADMIN_DEVICE_LABEL, DEFAULT_APPROVED_DEVICE_LABEL
from ..core.enums import ErrorKind, RequestStatus, Role
from ..core.exceptions import AuthorizationError
from ..core.results import Err, Ok, Result
from ..devices.model import DeviceBinding
from ..devices.service import DeviceBindingService
from ..identities.model import Identity
from ..identities.repository import IdentityRepository
from .ledger import ChangeRequestLedger
from .model import ChangeRequest, DeviceMeta
from .unit_of_work import ReviewUnitOfWork

logger = logging.getLogger(__name__)


class ReviewWorkflow:
    """Use case: employees ask for a device change, admins decide.

    Approval moves the ledger entry to APPROVED and rebinds the device inside
    one unit of work, so the two writes land together or not at all. Admins
    skip the queue entirely (immediate bind).
    """

    def __init__(
        self,
        uow: ReviewUnitOfWork,
        ledger: ChangeRequestLedger,
        bindings: DeviceBindingService,
        identities: IdentityRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._uow = uow
        self._ledger = ledger
        self._bindings = bindings
        self._identities = identities
        self._clock = clock

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin role required")

    def request_change(
        self,
        *,
        identity: Identity,
        device_id: str,
        meta: Optional[DeviceMeta] = None,
    ) -> Result[Union[ChangeRequest, DeviceBinding]]:
        """Employees get a PENDING request; admins get their device bound right away."""
        if identity.is_admin:
            label = meta.label if meta else None
            return Ok(self._bind_now(identity.identity_id, device_id, label, bound_by=identity.identity_id))
        return self._ledger.create(identity_id=identity.identity_id, requested_device_id=device_id, meta=meta)

    def list_pending(self, *, current_role: Role) -> Sequence[ChangeRequest]:
        self._require_admin(current_role)
        return self._ledger.list_pending()

    def list_for_identity(self, *, current_role: Role, identity_id: int) -> Sequence[ChangeRequest]:
        self._require_admin(current_role)
        return self._ledger.list_by_identity(int(identity_id))

    def approve(
        self,
        *,
        current_role: Role,
        request_id: int,
        reviewer_id: int,
        note: Optional[str] = None,
    ) -> Result[ChangeRequest]:
        self._require_admin(current_role)

        with self._uow.atomic(request_id=int(request_id)) as tx:
            ledger = ChangeRequestLedger(tx.requests, clock=self._clock)
            result = ledger.transition(
                request_id=int(request_id),
                to=RequestStatus.APPROVED,
                reviewer_id=int(reviewer_id),
                note=note,
            )
            if isinstance(result, Err):
                return result

            request = result.value
            DeviceBindingService(tx.bindings, clock=self._clock).rebind(
                identity_id=request.identity_id,
                device_id=request.requested_device_id,
                label=request.requested_device_meta.label,
                default_label=DEFAULT_APPROVED_DEVICE_LABEL,
            )

        logger.info(
            "Device change request %s approved by %s; identity %s rebound",
            request_id,
            reviewer_id,
            request.identity_id,
        )
        return result

    def reject(
        self,
        *,
        current_role: Role,
        request_id: int,
        reviewer_id: int,
        note: Optional[str] = None,
    ) -> Result[ChangeRequest]:
        self._require_admin(current_role)
        result = self._ledger.transition(
            request_id=int(request_id),
            to=RequestStatus.REJECTED,
            reviewer_id=int(reviewer_id),
            note=note,
        )
        if isinstance(result, Ok):
            logger.info("Device change request %s rejected by %s", request_id, reviewer_id)
        return result

    def annotate(self, *, current_role: Role, request_id: int, note: Optional[str]) -> Result[ChangeRequest]:
        self._require_admin(current_role)
        return self._ledger.annotate(request_id=int(request_id), note=note)

    def admin_immediate_bind(
        self,
        *,
        current_role: Role,
        admin_id: int,
        identity_id: int,
        device_id: str,
        label: Optional[str] = None,
    ) -> Result[DeviceBinding]:
        """Bind a device without going through the review queue."""
        self._require_admin(current_role)
        if self._identities.get_by_id(int(identity_id)) is None:
            return Err(ErrorKind.NOT_FOUND, "User not found")
        return Ok(self._bind_now(int(identity_id), device_id, label, bound_by=int(admin_id)))

    def _bind_now(self, identity_id: int, device_id: str, label: Optional[str], *, bound_by: int) -> DeviceBinding:
        binding = self._bindings.rebind(
            identity_id=identity_id,
            device_id=device_id,
            label=label,
            default_label=DEFAULT_ADMIN_DEVICE_LABEL,
        )
        # No second approval exists for this path; the log line is the audit trail.
        logger.warning(
            "Immediate device bind: identity %s bound to device %r by admin %s",
            identity_id,
            binding.device_id,
            bound_by,
        )
        return binding
