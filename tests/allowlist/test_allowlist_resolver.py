from src.attendance_guard.attendance_guard.allowlist.provider import CompanyAllowlistProvider
from src.attendance_guard.attendance_guard.allowlist.resolver import AllowlistResolver
from src.attendance_guard.attendance_guard.core.enums import Role
from src.attendance_guard.attendance_guard.identities.model import Identity


class FakeSettingsRepo:
    def __init__(self, networks=()):
        self.networks = tuple(networks)

    def get_company_networks(self):
        return self.networks

    def set_company_networks(self, networks):
        self.networks = tuple(networks)


def _resolver(company=()):
    return AllowlistResolver(CompanyAllowlistProvider(FakeSettingsRepo(company), refresh_seconds=0))


def test_resolve_uses_company_list_without_override():
    resolver = _resolver(["192.168.1.0/24"])
    identity = Identity(identity_id=5, role=Role.EMPLOYEE)

    assert resolver.resolve(identity) == ("192.168.1.0/24",)


def test_non_empty_override_replaces_company_list():
    resolver = _resolver(["192.168.1.0/24"])
    identity = Identity(identity_id=5, role=Role.EMPLOYEE, allowed_networks=("10.8.0.0/24",))

    assert resolver.resolve(identity) == ("10.8.0.0/24",)
    assert resolver.is_allowed(identity, "10.8.0.9") is True
    # Not merged: the company network no longer applies to this identity.
    assert resolver.is_allowed(identity, "192.168.1.5") is False


def test_both_lists_empty_resolves_to_nothing():
    resolver = _resolver([])
    identity = Identity(identity_id=5, role=Role.EMPLOYEE)

    assert resolver.resolve(identity) == ()
    assert resolver.is_allowed(identity, "127.0.0.1") is False
