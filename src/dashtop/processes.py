"""Process ranking and row selection for dashtop."""

import math
from collections.abc import Iterable

from dashtop.models import ProcessRow, RawProcess


def _finite(value: float) -> float:
    """Sanitize a provider number: NaN, infinities and negatives become 0.0."""
    value = float(value)
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


class ProcessTable:
    """
    Processes ranked by CPU usage, with a clamped selection cursor.

    Rows are rebuilt from scratch on every refresh; only the cursor position
    survives between refreshes.
    """

    def __init__(self) -> None:
        """Initialize an empty ProcessTable with no selection."""
        self._rows: tuple[ProcessRow, ...] = ()
        self._selected: int | None = None

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def selected(self) -> int | None:
        """Get the cursor index into sorted_view(), or None when empty."""
        return self._selected

    def refresh(self, raw_processes: Iterable[RawProcess], total_memory: int) -> None:
        """
        Rebuild the rows from a provider process list.

        Args:
            raw_processes: Processes in provider order.
            total_memory: Total system memory in bytes, used for memory_percent.
        """
        rows = [self._to_row(proc, total_memory) for proc in raw_processes]
        self._rows = tuple(self._sort_processes(rows))
        self._clamp_selection()

    def sorted_view(self) -> tuple[ProcessRow, ...]:
        """Get rows ordered by CPU usage, highest first."""
        return self._rows

    def selected_row(self) -> ProcessRow | None:
        """Get the highlighted row, if any."""
        if self._selected is None:
            return None
        return self._rows[self._selected]

    def move_selection(self, delta: int) -> int | None:
        """
        Move the cursor by ``delta`` rows, stopping at either end.

        Returns:
            The new cursor index, or None if the table is empty.
        """
        if not self._rows:
            self._selected = None
            return None
        current = self._selected if self._selected is not None else 0
        self._selected = max(0, min(len(self._rows) - 1, current + delta))
        return self._selected

    def _clamp_selection(self) -> None:
        if not self._rows:
            self._selected = None
        elif self._selected is None:
            self._selected = 0
        else:
            self._selected = min(self._selected, len(self._rows) - 1)

    @staticmethod
    def _to_row(proc: RawProcess, total_memory: int) -> ProcessRow:
        memory_bytes = _finite(proc.memory_bytes)
        memory_percent = memory_bytes / total_memory * 100.0 if total_memory > 0 else 0.0
        return ProcessRow(
            pid=proc.pid,
            command=proc.name or "",
            cpu_percent=_finite(proc.cpu_percent),
            memory_percent=memory_percent,
        )

    @staticmethod
    def _sort_processes(rows: list[ProcessRow]) -> list[ProcessRow]:
        """Sort rows by CPU descending; sorted() keeps ties in provider order."""
        return sorted(rows, key=lambda row: row.cpu_percent, reverse=True)
