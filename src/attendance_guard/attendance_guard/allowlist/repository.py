from __future__ import annotations

from typing import Protocol, Sequence


class SettingsRepository(Protocol):
    """Company-wide settings. Only the allowlist lives here for now."""

    def get_company_networks(self) -> tuple[str, ...]:
        raise NotImplementedError

    def set_company_networks(self, networks: Sequence[str]) -> None:
        raise NotImplementedError
