from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .allowlist.memory_settings_repository import InMemorySettingsRepository
from .allowlist.mysql_settings_repository import MySQLSettingsRepository
from .allowlist.provider import CompanyAllowlistProvider
from .allowlist.repository import SettingsRepository
from .allowlist.resolver import AllowlistResolver
from .allowlist.service import AllowlistService
from .attendance.gate import AttendanceGate
from .attendance.memory_punch_repository import InMemoryPunchRepository
from .attendance.mysql_punch_repository import MySQLPunchRepository
from .attendance.repository import PunchRepository
from .attendance.service import PunchService
from .common.datetime_utils import now_utc
from .core.constants import DEFAULT_ALLOWLIST_REFRESH_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .database.memory import InMemoryDatabase
from .device_requests.ledger import ChangeRequestLedger
from .device_requests.memory_change_request_repository import InMemoryChangeRequestRepository
from .device_requests.mysql_change_request_repository import MySQLChangeRequestRepository
from .device_requests.repository import ChangeRequestRepository
from .device_requests.review import ReviewWorkflow
from .device_requests.unit_of_work import InMemoryReviewUnitOfWork, MySQLReviewUnitOfWork, ReviewUnitOfWork
from .devices.memory_device_binding_repository import InMemoryDeviceBindingRepository
from .devices.mysql_device_binding_repository import MySQLDeviceBindingRepository
from .devices.repository import DeviceBindingRepository
from .devices.service import DeviceBindingService
from .identities.memory_identity_repository import InMemoryIdentityRepository
from .identities.mysql_identity_repository import MySQLIdentityRepository
from .identities.repository import IdentityRepository

BACKEND_MYSQL = "mysql"
BACKEND_MEMORY = "memory"


@dataclass(frozen=True)
class Container:
    backend: str
    conn: Optional[DatabaseConnection]
    memory_db: Optional[InMemoryDatabase]

    identities_repo: IdentityRepository
    settings_repo: SettingsRepository
    bindings_repo: DeviceBindingRepository
    requests_repo: ChangeRequestRepository
    punches_repo: PunchRepository
    review_uow: ReviewUnitOfWork

    company_allowlist: CompanyAllowlistProvider
    allowlist_resolver: AllowlistResolver
    allowlist_service: AllowlistService
    device_binding_service: DeviceBindingService
    ledger: ChangeRequestLedger
    review_workflow: ReviewWorkflow
    attendance_gate: AttendanceGate
    punch_service: PunchService


def build_container(
    *,
    db_config: Optional[dict] = None,
    backend: str = BACKEND_MYSQL,
    allowlist_refresh_seconds: float = DEFAULT_ALLOWLIST_REFRESH_SECONDS,
    memory_db: Optional[InMemoryDatabase] = None,
    clock: Callable[[], datetime] = now_utc,
) -> Container:
    backend = (backend or BACKEND_MYSQL).lower()
    conn: Optional[DatabaseConnection] = None

    if backend == BACKEND_MYSQL:
        if db_config is None:
            raise ValueError("db_config is required for the mysql backend")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        identities_repo = MySQLIdentityRepository(conn)
        settings_repo = MySQLSettingsRepository(conn)
        bindings_repo = MySQLDeviceBindingRepository(conn)
        requests_repo = MySQLChangeRequestRepository(conn)
        punches_repo = MySQLPunchRepository(conn)
        review_uow = MySQLReviewUnitOfWork(conn)
    elif backend == BACKEND_MEMORY:
        memory_db = memory_db or InMemoryDatabase()
        identities_repo = InMemoryIdentityRepository(memory_db)
        settings_repo = InMemorySettingsRepository(memory_db)
        bindings_repo = InMemoryDeviceBindingRepository(memory_db)
        requests_repo = InMemoryChangeRequestRepository(memory_db)
        punches_repo = InMemoryPunchRepository(memory_db)
        review_uow = InMemoryReviewUnitOfWork(memory_db)
    else:
        raise ValueError(f"Unknown store backend: {backend!r}")

    company_allowlist = CompanyAllowlistProvider(settings_repo, refresh_seconds=allowlist_refresh_seconds)
    allowlist_resolver = AllowlistResolver(company_allowlist)
    allowlist_service = AllowlistService(company_allowlist, identities_repo)
    device_binding_service = DeviceBindingService(bindings_repo, clock=clock)
    ledger = ChangeRequestLedger(requests_repo, clock=clock)
    review_workflow = ReviewWorkflow(review_uow, ledger, device_binding_service, identities_repo, clock=clock)
    attendance_gate = AttendanceGate(allowlist_resolver, device_binding_service)
    punch_service = PunchService(attendance_gate, punches_repo, clock=clock)

    return Container(
        backend=backend,
        conn=conn,
        memory_db=memory_db if backend == BACKEND_MEMORY else None,
        identities_repo=identities_repo,
        settings_repo=settings_repo,
        bindings_repo=bindings_repo,
        requests_repo=requests_repo,
        punches_repo=punches_repo,
        review_uow=review_uow,
        company_allowlist=company_allowlist,
        allowlist_resolver=allowlist_resolver,
        allowlist_service=allowlist_service,
        device_binding_service=device_binding_service,
        ledger=ledger,
        review_workflow=review_workflow,
        attendance_gate=attendance_gate,
        punch_service=punch_service,
    )
