from __future__ import annotations

from typing import Optional

from ..identities.model import Identity
from .provider import CompanyAllowlistProvider
from .rules import address_matches


class AllowlistResolver:
    """Effective network rules for an identity.

    A non-empty per-identity list replaces the company list outright (it is
    not merged). With both empty the result is empty, which matches nothing:
    network-gated operations fail closed.
    """

    def __init__(self, company: CompanyAllowlistProvider):
        self._company = company

    def resolve(self, identity: Identity) -> tuple[str, ...]:
        if identity.allowed_networks:
            return tuple(identity.allowed_networks)
        return self._company.current()

    def is_allowed(self, identity: Identity, address: Optional[str]) -> bool:
        source = "identity %s" % identity.identity_id if identity.allowed_networks else "company allowlist"
        return address_matches(address, self.resolve(identity), source=source)
