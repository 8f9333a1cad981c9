import threading

import pytest

from src.attendance_guard.attendance_guard.allowlist.provider import CompanyAllowlistProvider
from src.attendance_guard.attendance_guard.core.exceptions import StorageError


class CountingSettingsRepo:
    def __init__(self, networks=()):
        self.networks = tuple(networks)
        self.reads = 0
        self.fail = False

    def get_company_networks(self):
        self.reads += 1
        if self.fail:
            raise StorageError("settings store down")
        return self.networks

    def set_company_networks(self, networks):
        self.networks = tuple(networks)


class FakeMonotonic:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_snapshot_is_reused_within_refresh_window():
    repo = CountingSettingsRepo(["10.0.0.0/8"])
    ticks = FakeMonotonic()
    provider = CompanyAllowlistProvider(repo, refresh_seconds=30, monotonic=ticks)

    assert provider.current() == ("10.0.0.0/8",)
    repo.networks = ("172.16.0.0/12",)
    ticks.now += 10
    assert provider.current() == ("10.0.0.0/8",)
    assert repo.reads == 1

    ticks.now += 30
    assert provider.current() == ("172.16.0.0/12",)
    assert repo.reads == 2


def test_refresh_reads_through_immediately():
    repo = CountingSettingsRepo(["10.0.0.0/8"])
    provider = CompanyAllowlistProvider(repo, refresh_seconds=3600, monotonic=FakeMonotonic())
    provider.current()

    repo.networks = ("192.168.0.0/16",)

    assert provider.refresh() == ("192.168.0.0/16",)
    assert provider.current() == ("192.168.0.0/16",)


def test_replace_persists_and_is_visible_to_next_read():
    repo = CountingSettingsRepo()
    provider = CompanyAllowlistProvider(repo, refresh_seconds=3600, monotonic=FakeMonotonic())

    provider.replace(["10.1.0.0/16", "10.2.0.0/16"])

    assert repo.networks == ("10.1.0.0/16", "10.2.0.0/16")
    assert provider.current() == ("10.1.0.0/16", "10.2.0.0/16")
    assert repo.reads == 0


def test_zero_refresh_window_always_reads_store():
    repo = CountingSettingsRepo(["10.0.0.0/8"])
    provider = CompanyAllowlistProvider(repo, refresh_seconds=0)

    provider.current()
    provider.current()

    assert repo.reads == 2


def test_store_failure_propagates():
    repo = CountingSettingsRepo(["10.0.0.0/8"])
    repo.fail = True
    provider = CompanyAllowlistProvider(repo, refresh_seconds=0)

    with pytest.raises(StorageError):
        provider.current()


class BlockingSettingsRepo(CountingSettingsRepo):
    """Holds a read open until released, so a write can land in the middle of it."""

    def __init__(self, networks=()):
        super().__init__(networks)
        self.reading = threading.Event()
        self.release = threading.Event()

    def get_company_networks(self):
        networks = self.networks
        self.reading.set()
        assert self.release.wait(5)
        return networks


def test_refresh_overlapping_replace_keeps_newer_list():
    repo = BlockingSettingsRepo(["10.0.0.0/24"])
    provider = CompanyAllowlistProvider(repo, refresh_seconds=3600, monotonic=FakeMonotonic())
    refreshed = []

    worker = threading.Thread(target=lambda: refreshed.append(provider.refresh()))
    worker.start()
    assert repo.reading.wait(5)
    provider.replace(("192.168.1.0/24",))
    repo.release.set()
    worker.join(5)

    assert refreshed == [("192.168.1.0/24",)]
    assert provider.current() == ("192.168.1.0/24",)
