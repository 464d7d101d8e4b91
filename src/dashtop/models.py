"""Data models for dashtop."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Sample:
    """A single observation of a metric stream."""

    sequence: int  # Frame counter at capture time
    value: float


@dataclass(slots=True, frozen=True)
class DiskEntry:
    """Used-capacity gauge for one disk."""

    name: str
    used_percent: int  # 0 - 100


@dataclass(slots=True, frozen=True)
class ProcessRow:
    """One row of the process ranking table."""

    pid: int
    command: str
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_percent: float


@dataclass(slots=True, frozen=True)
class RawDisk:
    """Disk reading as reported by a metrics provider."""

    name: str
    available_bytes: int
    total_bytes: int


@dataclass(slots=True, frozen=True)
class RawInterface:
    """Network interface reading as reported by a metrics provider."""

    name: str
    cumulative_packets: int  # Received + transmitted since boot


@dataclass(slots=True, frozen=True)
class RawProcess:
    """Process reading as reported by a metrics provider."""

    pid: int
    name: str
    cpu_percent: float
    memory_bytes: int


@dataclass(slots=True, frozen=True)
class DashboardView:
    """
    Immutable snapshot of the dashboard state for one frame.

    Every collection is a tuple of frozen records, so a render surface
    holding a view can never reach back into the engine.
    """

    frame: int
    running: bool
    cpu: tuple[Sample, ...]
    memory: tuple[Sample, ...]
    memory_total: int
    networks: tuple[tuple[str, tuple[float, ...]], ...]
    disks: tuple[DiskEntry, ...]
    processes: tuple[ProcessRow, ...]
    selected: int | None

    @property
    def cpu_percent(self) -> float:
        """Most recent CPU reading, 0.0 before the first sample."""
        return self.cpu[-1].value if self.cpu else 0.0

    @property
    def memory_percent(self) -> float:
        """Most recent memory reading as a percentage of total memory."""
        if not self.memory or self.memory_total <= 0:
            return 0.0
        return self.memory[-1].value / self.memory_total * 100.0
