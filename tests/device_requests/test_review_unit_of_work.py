from contextlib import contextmanager

import pytest

from src.attendance_guard.attendance_guard.core.enums import RequestStatus, Role
from src.attendance_guard.attendance_guard.core.exceptions import StorageError
from src.attendance_guard.attendance_guard.core.results import Ok
from src.attendance_guard.attendance_guard.device_requests.review import ReviewWorkflow
from src.attendance_guard.attendance_guard.device_requests.unit_of_work import InMemoryReviewUnitOfWork, ReviewScope
from src.attendance_guard.attendance_guard.devices.model import DeviceBinding


def test_writes_land_together_on_commit(container, employee, clock):
    req = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-1").value
    uow = InMemoryReviewUnitOfWork(container.memory_db)

    with uow.atomic(request_id=req.request_id) as tx:
        assert tx.requests.mark_reviewed(
            request_id=req.request_id, status=RequestStatus.APPROVED, reviewed_by=1, reviewed_at=clock()
        )
        tx.bindings.put(employee.identity_id, DeviceBinding(device_id="phone-1", label="", bound_at=clock()))
        # Buffered until the block exits.
        assert container.ledger.get(req.request_id).is_pending
        assert container.device_binding_service.current_device(employee.identity_id) is None

    assert container.ledger.get(req.request_id).status == RequestStatus.APPROVED
    assert container.device_binding_service.current_device(employee.identity_id).device_id == "phone-1"


def test_failure_discards_every_write(container, employee, clock):
    req = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-1").value
    uow = InMemoryReviewUnitOfWork(container.memory_db)

    with pytest.raises(StorageError):
        with uow.atomic(request_id=req.request_id) as tx:
            tx.requests.mark_reviewed(
                request_id=req.request_id, status=RequestStatus.APPROVED, reviewed_by=1, reviewed_at=clock()
            )
            raise StorageError("binding store went away")

    assert container.ledger.get(req.request_id).is_pending
    assert container.device_binding_service.current_device(employee.identity_id) is None


class ExplodingBindings:
    def get(self, identity_id):
        return None

    def put(self, identity_id, binding):
        raise StorageError("write failed")


class FailingRebindUnitOfWork(InMemoryReviewUnitOfWork):
    @contextmanager
    def atomic(self, *, request_id):
        with super().atomic(request_id=request_id) as scope:
            yield ReviewScope(requests=scope.requests, bindings=ExplodingBindings())


def test_approve_is_all_or_nothing(container, employee):
    req = container.ledger.create(identity_id=employee.identity_id, requested_device_id="phone-1").value
    workflow = ReviewWorkflow(
        FailingRebindUnitOfWork(container.memory_db),
        container.ledger,
        container.device_binding_service,
        container.identities_repo,
    )

    with pytest.raises(StorageError):
        workflow.approve(current_role=Role.ADMIN, request_id=req.request_id, reviewer_id=1)

    # Neither the status change nor the binding survived.
    assert container.ledger.get(req.request_id).is_pending
    assert container.device_binding_service.current_device(employee.identity_id) is None
    retry = container.review_workflow.approve(current_role=Role.ADMIN, request_id=req.request_id, reviewer_id=1)
    assert isinstance(retry, Ok)


def test_request_lock_released_after_unit(container):
    db = container.memory_db
    uow = InMemoryReviewUnitOfWork(db)

    with uow.atomic(request_id=77):
        assert len(db.request_locks) == 1

    assert len(db.request_locks) == 0
