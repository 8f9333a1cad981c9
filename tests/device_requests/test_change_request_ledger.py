import pytest

from src.attendance_guard.attendance_guard.core.enums import ErrorKind, RequestStatus, Role
from src.attendance_guard.attendance_guard.core.exceptions import ValidationError
from src.attendance_guard.attendance_guard.core.results import Err, Ok
from src.attendance_guard.attendance_guard.device_requests.model import DeviceMeta


def test_create_files_pending_request(container, employee):
    result = container.ledger.create(
        identity_id=employee.identity_id,
        requested_device_id=" phone-new ",
        meta=DeviceMeta(label="  Pixel  ", user_agent="UA/1.0", note="lost old phone"),
    )

    assert isinstance(result, Ok)
    req = result.value
    assert req.status == RequestStatus.PENDING
    assert req.requested_device_id == "phone-new"
    assert req.requested_device_meta.label == "Pixel"
    assert req.reviewed_by is None and req.reviewed_at is None


def test_second_pending_request_is_refused(container, employee):
    container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-1")

    result = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-2")

    assert isinstance(result, Err)
    assert result.kind == ErrorKind.DUPLICATE_PENDING
    assert len(container.ledger.list_by_identity(employee.identity_id)) == 1


def test_pending_slot_is_per_identity(container):
    assert isinstance(container.ledger.create(identity_id=2, requested_device_id="a"), Ok)
    assert isinstance(container.ledger.create(identity_id=3, requested_device_id="b"), Ok)


def test_blank_device_id_is_a_validation_error(container, employee):
    with pytest.raises(ValidationError):
        container.ledger.create(identity_id=employee.identity_id, requested_device_id="  ")


def test_transition_happens_once(container, employee):
    req = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-1").value

    first = container.ledger.transition(request_id=req.request_id, to=RequestStatus.REJECTED, reviewer_id=1, note="no")
    second = container.ledger.transition(request_id=req.request_id, to=RequestStatus.APPROVED, reviewer_id=1)

    assert isinstance(first, Ok)
    assert first.value.status == RequestStatus.REJECTED
    assert first.value.admin_note == "no"
    assert first.value.reviewed_by == 1
    assert isinstance(second, Err)
    assert second.kind == ErrorKind.ALREADY_REVIEWED
    assert container.ledger.get(req.request_id).status == RequestStatus.REJECTED


def test_transition_unknown_request(container):
    result = container.ledger.transition(request_id=999, to=RequestStatus.APPROVED, reviewer_id=1)

    assert result.kind == ErrorKind.NOT_FOUND


def test_transition_back_to_pending_is_a_programming_error(container, employee):
    req = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-1").value

    with pytest.raises(ValueError):
        container.ledger.transition(request_id=req.request_id, to=RequestStatus.PENDING, reviewer_id=1)


def test_reviewed_request_frees_the_pending_slot(container, employee):
    req = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-1").value
    container.ledger.transition(request_id=req.request_id, to=RequestStatus.REJECTED, reviewer_id=1)

    again = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-2")

    assert isinstance(again, Ok)


def test_annotate_after_review_keeps_status(container, employee):
    req = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-1").value
    container.ledger.transition(request_id=req.request_id, to=RequestStatus.APPROVED, reviewer_id=1)

    result = container.ledger.annotate(request_id=req.request_id, note="verified in person")

    assert result.value.admin_note == "verified in person"
    assert result.value.status == RequestStatus.APPROVED
    assert container.ledger.annotate(request_id=999, note="x").kind == ErrorKind.NOT_FOUND


def test_list_orders(container):
    first = container.ledger.create(identity_id=2, requested_device_id="a").value
    container.ledger.transition(request_id=first.request_id, to=RequestStatus.REJECTED, reviewer_id=1)
    second = container.ledger.create(identity_id=2, requested_device_id="b").value
    third = container.ledger.create(identity_id=3, requested_device_id="c").value

    mine = container.ledger.list_by_identity(2)
    pending = container.ledger.list_pending()

    assert [r.request_id for r in mine] == [second.request_id, first.request_id]
    assert [r.request_id for r in pending] == [second.request_id, third.request_id]


def test_owner_may_delete_own_request(container, employee):
    req = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-1").value

    result = container.ledger.delete(
        request_id=req.request_id, requester_id=employee.identity_id, requester_role=Role.EMPLOYEE
    )

    assert result == Ok(None)
    assert container.ledger.get(req.request_id) is None
    assert isinstance(container.ledger.create(identity_id=employee.identity_id, requested_device_id="p2"), Ok)


def test_other_employee_cannot_delete(container):
    req = container.ledger.create(identity_id=2, requested_device_id="phone-1").value

    result = container.ledger.delete(request_id=req.request_id, requester_id=3, requester_role=Role.EMPLOYEE)

    assert result.kind == ErrorKind.FORBIDDEN
    assert container.ledger.get(req.request_id) is not None


def test_admin_may_delete_any_request(container):
    req = container.ledger.create(identity_id=2, requested_device_id="phone-1").value

    assert container.ledger.delete(request_id=req.request_id, requester_id=1, requester_role=Role.ADMIN) == Ok(None)
    assert container.ledger.delete(request_id=req.request_id, requester_id=1, requester_role=Role.ADMIN).kind == (
        ErrorKind.NOT_FOUND
    )
