"""Append-only metric histories for dashtop."""

from collections import deque

from dashtop.errors import OutOfOrderSample
from dashtop.models import Sample


class TimeSeries:
    """
    Ordered, append-only sequence of samples.

    Sequences must strictly increase. When ``maxlen`` is set the buffer
    behaves like a ring: appending to a full buffer evicts the oldest sample.
    """

    def __init__(self, maxlen: int | None = None) -> None:
        """
        Initialize an empty TimeSeries.

        Args:
            maxlen: Maximum number of retained samples. None keeps everything.
        """
        if maxlen is not None and maxlen < 1:
            raise ValueError(f"maxlen must be positive, got {maxlen}")
        self._samples: deque[Sample] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int | None:
        """Get the retention cap, or None when unbounded."""
        return self._samples.maxlen

    def __len__(self) -> int:
        return len(self._samples)

    def append(self, sequence: int, value: float) -> None:
        """
        Append one sample.

        Raises:
            OutOfOrderSample: If ``sequence`` is not greater than the last one.
        """
        if self._samples and sequence <= self._samples[-1].sequence:
            raise OutOfOrderSample(sequence, self._samples[-1].sequence)
        self._samples.append(Sample(sequence, float(value)))

    def as_slice(self) -> tuple[Sample, ...]:
        """Get all retained samples, oldest first."""
        return tuple(self._samples)

    def values(self) -> tuple[float, ...]:
        """Get the retained values without their sequence numbers."""
        return tuple(sample.value for sample in self._samples)

    def latest(self) -> Sample | None:
        """Get the most recent sample, if any."""
        return self._samples[-1] if self._samples else None


class InterfaceHistory:
    """Per-interface packet histories keyed by interface name."""

    def __init__(self, maxlen: int | None = None) -> None:
        self._maxlen = maxlen
        self._series: dict[str, TimeSeries] = {}

    def __len__(self) -> int:
        return len(self._series)

    def __contains__(self, name: object) -> bool:
        return name in self._series

    def record(self, interface_name: str, sequence: int, cumulative_packets: float) -> None:
        """
        Record one reading for an interface.

        The raw cumulative counter is charted as-is. An interface seen for the
        first time gets a fresh series; interfaces are never dropped.
        """
        series = self._series.get(interface_name)
        if series is None:
            series = TimeSeries(self._maxlen)
            self._series[interface_name] = series
        series.append(sequence, cumulative_packets)

    def series(self, interface_name: str) -> TimeSeries:
        """Get the series for one interface."""
        return self._series[interface_name]

    def snapshot_sorted(self) -> list[tuple[str, tuple[float, ...]]]:
        """Get ``(name, values)`` pairs ordered by interface name."""
        return [(name, self._series[name].values()) for name in sorted(self._series)]
