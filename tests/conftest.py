"""Shared fixtures for dashtop tests."""

import pytest

from dashtop.errors import ProviderUnavailable
from dashtop.models import RawDisk, RawInterface, RawProcess


class FakeProvider:
    """Scripted metrics provider that records how often each reading is taken."""

    def __init__(self) -> None:
        self.cpu = 12.5
        self.used = 4 * 1024**3
        self.total = 16 * 1024**3
        self.disks = [
            RawDisk("/dev/sda1", available_bytes=25, total_bytes=100),
            RawDisk("/dev/nvme0n1p2", available_bytes=90, total_bytes=100),
        ]
        self.interfaces = [RawInterface("lo", 10), RawInterface("eth0", 100)]
        self.processes = [
            RawProcess(1, "init", 0.5, 1024**2),
            RawProcess(42, "python", 35.0, 512 * 1024**2),
            RawProcess(7, "sshd", 0.5, 4 * 1024**2),
        ]
        self.failing: set[str] = set()
        self.calls: dict[str, int] = {}

    def _read(self, stream: str):
        self.calls[stream] = self.calls.get(stream, 0) + 1
        if stream in self.failing:
            raise ProviderUnavailable(stream, "scripted failure")

    def global_cpu_percent(self) -> float:
        self._read("cpu")
        return self.cpu

    def used_memory(self) -> int:
        self._read("memory")
        return self.used

    def total_memory(self) -> int:
        self._read("total_memory")
        return self.total

    def list_disks(self) -> list[RawDisk]:
        self._read("disks")
        return list(self.disks)

    def list_interfaces(self) -> list[RawInterface]:
        self._read("network")
        return list(self.interfaces)

    def list_processes(self) -> list[RawProcess]:
        self._read("processes")
        return list(self.processes)


@pytest.fixture
def provider() -> FakeProvider:
    """A fresh scripted provider."""
    return FakeProvider()
