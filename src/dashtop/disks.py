"""Disk capacity gauges for dashtop."""

from collections.abc import Iterable

from dashtop.models import DiskEntry, RawDisk


def disk_label(device: str) -> str:
    """Get the final path segment of a device path, e.g. ``/dev/sda1`` -> ``sda1``."""
    label = device.rsplit("/", 1)[-1]
    return label or device


def used_percent(available: int, total: int) -> int:
    """Get the used share of a disk as a whole percentage in [0, 100].

    Halves round up (62.5 -> 63), not to the nearest even integer.
    """
    if total <= 0:
        return 0
    # floor(used / total * 100 + 0.5) in integers
    percent = ((total - available) * 200 + total) // (2 * total)
    return max(0, min(100, int(percent)))


class DiskGauge:
    """Snapshot of used capacity per disk, replaced wholesale on refresh."""

    def __init__(self) -> None:
        self._entries: tuple[DiskEntry, ...] = ()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[DiskEntry, ...]:
        """Get the current disk entries in provider order."""
        return self._entries

    def refresh(self, raw_disks: Iterable[RawDisk]) -> None:
        """Replace the snapshot with freshly computed entries."""
        self._entries = tuple(
            DiskEntry(
                name=disk_label(disk.name),
                used_percent=used_percent(disk.available_bytes, disk.total_bytes),
            )
            for disk in raw_disks
        )
