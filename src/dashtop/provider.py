"""Host metrics providers for dashtop."""

import logging
from typing import Protocol

import psutil

from dashtop.errors import ProviderUnavailable
from dashtop.models import RawDisk, RawInterface, RawProcess

logger = logging.getLogger(__name__)


class MetricsProvider(Protocol):
    """Source of raw point-in-time host readings.

    Every method may raise ProviderUnavailable when the reading cannot be
    taken this time around.
    """

    def global_cpu_percent(self) -> float: ...

    def used_memory(self) -> int: ...

    def total_memory(self) -> int: ...

    def list_disks(self) -> list[RawDisk]: ...

    def list_interfaces(self) -> list[RawInterface]: ...

    def list_processes(self) -> list[RawProcess]: ...


class PsutilProvider:
    """
    Metrics provider that reads the local host through psutil.

    Entries that vanish or deny access while being read (a process exiting
    mid-enumeration, an unreadable mount point) are skipped individually;
    a failure of the whole call is reported as ProviderUnavailable.
    """

    def __init__(self, all_partitions: bool = False) -> None:
        """
        Initialize the PsutilProvider.

        Args:
            all_partitions: Include pseudo and duplicate filesystems in list_disks().
        """
        self._all_partitions = all_partitions
        # Prime the CPU counters (first call returns 0.0)
        psutil.cpu_percent(interval=None)

    def global_cpu_percent(self) -> float:
        """Get system-wide CPU usage since the previous call."""
        try:
            return float(psutil.cpu_percent(interval=None))
        except (psutil.Error, OSError) as e:
            raise ProviderUnavailable("cpu", str(e)) from e

    def used_memory(self) -> int:
        """Get used physical memory in bytes."""
        try:
            return int(psutil.virtual_memory().used)
        except (psutil.Error, OSError) as e:
            raise ProviderUnavailable("memory", str(e)) from e

    def total_memory(self) -> int:
        """Get total physical memory in bytes."""
        try:
            return int(psutil.virtual_memory().total)
        except (psutil.Error, OSError) as e:
            raise ProviderUnavailable("memory", str(e)) from e

    def list_disks(self) -> list[RawDisk]:
        """Get capacity readings for each mounted partition."""
        try:
            partitions = psutil.disk_partitions(all=self._all_partitions)
        except (psutil.Error, OSError) as e:
            raise ProviderUnavailable("disks", str(e)) from e

        disks: list[RawDisk] = []
        for part in partitions:
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError as e:
                # Unmounted media, permission denied on the mount point, etc.
                logger.debug("Skipping partition %s: %s", part.mountpoint, e)
                continue
            disks.append(
                RawDisk(
                    name=part.device or part.mountpoint,
                    available_bytes=int(usage.free),
                    total_bytes=int(usage.total),
                )
            )
        return disks

    def list_interfaces(self) -> list[RawInterface]:
        """Get cumulative packet counts (received + sent) per interface."""
        try:
            counters = psutil.net_io_counters(pernic=True)
        except (psutil.Error, OSError) as e:
            raise ProviderUnavailable("network", str(e)) from e
        return [
            RawInterface(name=name, cumulative_packets=nic.packets_recv + nic.packets_sent)
            for name, nic in counters.items()
        ]

    def list_processes(self) -> list[RawProcess]:
        """
        Get a reading for every running process.

        Uses psutil.process_iter() with a fixed attribute list so each process
        is read in a single pass. Processes that die mid-poll, deny access or
        are zombies are skipped.
        """
        processes: list[RawProcess] = []
        attrs = ["pid", "name", "cpu_percent", "memory_info"]

        try:
            for proc in psutil.process_iter(attrs=attrs):
                try:
                    info = proc.info
                    mem_info = info.get("memory_info")
                    processes.append(
                        RawProcess(
                            pid=info.get("pid", 0),
                            name=info.get("name") or "",
                            cpu_percent=info.get("cpu_percent") or 0.0,
                            memory_bytes=mem_info.rss if mem_info else 0,
                        )
                    )
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    continue
        except (psutil.Error, OSError) as e:
            raise ProviderUnavailable("processes", str(e)) from e

        return processes
