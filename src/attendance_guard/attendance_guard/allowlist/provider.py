from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Sequence

from .repository import SettingsRepository

logger = logging.getLogger(__name__)

class CompanyAllowlistProvider:
    """Injected accessor for the company-wide allowlist.

    Readers get an immutable tuple snapshot without taking a lock. The
    snapshot is reloaded from the store when it is older than
    ``refresh_seconds`` or when ``refresh()`` is called; ``replace()``
    persists a new list under a short exclusive lock and swaps the snapshot
    so the writing process sees its own write immediately.

    ``refresh_seconds=0`` disables caching (every read hits the store).
    """

    def __init__(
        self,
        settings: SettingsRepository,
        *,
        refresh_seconds: float = 30,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._settings = settings
        self._refresh_seconds = float(refresh_seconds)
        self._monotonic = monotonic
        self._write_lock = threading.Lock()
        self._snapshot: Optional[tuple[str, ...]] = None
        self._loaded_at = 0.0
        # Bumped by every replace(); a refresh that overlapped one discards its read.
        self._generation = 0

    def current(self) -> tuple[str, ...]:
        snapshot = self._snapshot
        if snapshot is None or self._is_stale():
            return self.refresh()
        return snapshot

    def refresh(self) -> tuple[str, ...]:
        """Reload from the store. Store failures propagate; the old snapshot is kept."""
        generation = self._generation
        networks = tuple(self._settings.get_company_networks())
        with self._write_lock:
            if generation != self._generation:
                return self._snapshot
            self._snapshot = networks
            self._loaded_at = self._monotonic()
        logger.debug("Company allowlist refreshed (%d rules)", len(networks))
        return networks

    def replace(self, networks: Sequence[str]) -> tuple[str, ...]:
        new = tuple(networks)
        with self._write_lock:
            self._settings.set_company_networks(new)
            self._generation += 1
            self._snapshot = new
            self._loaded_at = self._monotonic()
        return new

    def _is_stale(self) -> bool:
        if self._refresh_seconds <= 0:
            return True
        return self._monotonic() - self._loaded_at >= self._refresh_seconds
