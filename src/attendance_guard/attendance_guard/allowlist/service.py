from __future__ import annotations

import logging
from typing import Iterable

from ..common.validators import normalize_network_list
from ..core.enums import ErrorKind, Role
from ..core.exceptions import AuthorizationError
from ..core.results import Err, Ok, Result
from ..identities.repository import IdentityRepository
from .provider import CompanyAllowlistProvider
from .rules import validate_rules

logger = logging.getLogger(__name__)


class AllowlistService:
    """Use case: admins maintain the company allowlist and per-employee overrides."""

    def __init__(self, company: CompanyAllowlistProvider, identities: IdentityRepository):
        self._company = company
        self._identities = identities

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin role required")

    def get_company_allowlist(self, *, current_role: Role) -> tuple[str, ...]:
        self._require_admin(current_role)
        return self._company.refresh()

    def set_company_allowlist(self, *, current_role: Role, networks: Iterable[str]) -> tuple[str, ...]:
        self._require_admin(current_role)
        rules = normalize_network_list(networks)
        validate_rules(rules)
        stored = self._company.replace(rules)
        logger.info("Company allowlist updated (%d rules)", len(stored))
        return stored

    def set_user_allowlist(
        self,
        *,
        current_role: Role,
        identity_id: int,
        networks: Iterable[str],
    ) -> Result[tuple[str, ...]]:
        """Replace one employee's override; an empty list falls back to the company list."""
        self._require_admin(current_role)
        rules = normalize_network_list(networks)
        validate_rules(rules)
        if not self._identities.set_allowed_networks(int(identity_id), rules):
            return Err(ErrorKind.NOT_FOUND, "User not found")
        logger.info("Allowlist override for identity %s updated (%d rules)", identity_id, len(rules))
        return Ok(rules)
