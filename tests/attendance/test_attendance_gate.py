import pytest

from src.attendance_guard.attendance_guard.allowlist.provider import CompanyAllowlistProvider
from src.attendance_guard.attendance_guard.allowlist.resolver import AllowlistResolver
from src.attendance_guard.attendance_guard.attendance.gate import AttendanceGate
from src.attendance_guard.attendance_guard.core.enums import DenyReason, Role
from src.attendance_guard.attendance_guard.core.exceptions import StorageError
from src.attendance_guard.attendance_guard.core.results import Allow, Deny, Err, Ok
from src.attendance_guard.attendance_guard.device_requests.model import DeviceMeta
from src.attendance_guard.attendance_guard.devices.service import DeviceBindingService
from src.attendance_guard.attendance_guard.identities.model import Identity

OFFICE = "192.168.1.20"
HOME = "203.0.113.9"


def _authorize(container, identity_id, device_id, address):
    identity = container.identities_repo.get_by_id(identity_id)
    return container.attendance_gate.authorize(identity, device_id, address)


def test_no_device_registered(container, employee):
    decision = _authorize(container, employee.identity_id, "phone-1", OFFICE)

    assert decision == Deny(DenyReason.NO_DEVICE_REGISTERED)
    assert decision.allowed is False


def test_approved_device_allowed_other_device_mismatch(container, employee):
    req = container.review_workflow.request_change(identity=employee, device_id="phone-1", meta=DeviceMeta()).value
    container.review_workflow.approve(current_role=Role.ADMIN, request_id=req.request_id, reviewer_id=1)

    assert _authorize(container, employee.identity_id, "phone-1", OFFICE) == Allow()
    assert _authorize(container, employee.identity_id, "phone-2", OFFICE) == Deny(DenyReason.DEVICE_MISMATCH)


@pytest.mark.parametrize("presented", [None, "", "   "])
def test_missing_device_id_is_a_mismatch(container, employee, presented):
    container.device_binding_service.rebind(identity_id=employee.identity_id, device_id="phone-1", label=None)

    assert _authorize(container, employee.identity_id, presented, OFFICE) == Deny(DenyReason.DEVICE_MISMATCH)


def test_off_network_denied_before_device_checks(container, employee):
    container.device_binding_service.rebind(identity_id=employee.identity_id, device_id="phone-1", label=None)

    assert _authorize(container, employee.identity_id, "phone-1", HOME) == Deny(DenyReason.NETWORK_NOT_ALLOWED)
    # Network is checked first even when no device is bound.
    assert _authorize(container, 3, None, OFFICE) == Deny(DenyReason.NETWORK_NOT_ALLOWED)


def test_admin_bypasses_network_and_device(container, admin):
    assert _authorize(container, admin.identity_id, None, HOME) == Allow()
    assert _authorize(container, admin.identity_id, "anything", None) == Allow()


def test_override_network_grants_access(container):
    container.device_binding_service.rebind(identity_id=3, device_id="vpn-laptop", label=None)

    assert _authorize(container, 3, "vpn-laptop", "10.8.0.44") == Allow()


def test_duplicate_pending_then_freed_by_reject(container, employee):
    workflow = container.review_workflow
    first = workflow.request_change(identity=employee, device_id="phone-1").value

    duplicate = workflow.request_change(identity=employee, device_id="phone-2")
    assert isinstance(duplicate, Err)

    workflow.reject(current_role=Role.ADMIN, request_id=first.request_id, reviewer_id=1)
    assert isinstance(workflow.request_change(identity=employee, device_id="phone-2"), Ok)


def test_empty_allowlists_fail_closed(container, employee):
    container.company_allowlist.replace(())
    container.device_binding_service.rebind(identity_id=employee.identity_id, device_id="phone-1", label=None)

    for address in (OFFICE, "127.0.0.1", "::1", HOME):
        assert _authorize(container, employee.identity_id, "phone-1", address) == Deny(DenyReason.NETWORK_NOT_ALLOWED)


def test_binding_change_seen_by_next_authorize(container, employee):
    container.device_binding_service.rebind(identity_id=employee.identity_id, device_id="phone-1", label=None)
    assert _authorize(container, employee.identity_id, "phone-1", OFFICE) == Allow()

    container.review_workflow.admin_immediate_bind(
        current_role=Role.ADMIN, admin_id=1, identity_id=employee.identity_id, device_id="phone-2"
    )

    assert _authorize(container, employee.identity_id, "phone-1", OFFICE) == Deny(DenyReason.DEVICE_MISMATCH)
    assert _authorize(container, employee.identity_id, "phone-2", OFFICE) == Allow()


class BrokenBindings:
    def get(self, identity_id):
        raise StorageError("bindings unavailable")

    def put(self, identity_id, binding):
        raise StorageError("bindings unavailable")


class BrokenSettings:
    def get_company_networks(self):
        raise StorageError("settings unavailable")

    def set_company_networks(self, networks):
        raise StorageError("settings unavailable")


class StaticSettings:
    def get_company_networks(self):
        return ("0.0.0.0/0",)

    def set_company_networks(self, networks):
        pass


def test_storage_failures_propagate_instead_of_allowing():
    identity = Identity(identity_id=9, role=Role.EMPLOYEE)

    gate = AttendanceGate(
        AllowlistResolver(CompanyAllowlistProvider(BrokenSettings(), refresh_seconds=0)),
        DeviceBindingService(BrokenBindings()),
    )
    with pytest.raises(StorageError):
        gate.authorize(identity, "phone-1", OFFICE)

    gate = AttendanceGate(
        AllowlistResolver(CompanyAllowlistProvider(StaticSettings(), refresh_seconds=0)),
        DeviceBindingService(BrokenBindings()),
    )
    with pytest.raises(StorageError):
        gate.authorize(identity, "phone-1", OFFICE)
