from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import Role


@dataclass(frozen=True)
class Identity:
    """The slice of an employee/admin account this core works with.

    Accounts are owned by the surrounding application; only
    ``allowed_networks`` (and the separately stored device binding) are
    written from here.
    """

    identity_id: int
    role: Role
    allowed_networks: tuple[str, ...] = field(default_factory=tuple)
    full_name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
