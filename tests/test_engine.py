"""Tests for the SamplingEngine."""

import logging

import pytest

from dashtop.config import DashboardConfig
from dashtop.engine import SamplingEngine
from dashtop.errors import OutOfOrderSample
from dashtop.models import RawInterface, RawProcess


class TestCadence:
    """Tests for what each tick samples."""

    def test_every_tick_samples_cpu_memory_network(self, provider):
        engine = SamplingEngine(provider)
        engine.start()
        for frame in range(1, 8):
            engine.tick(frame)

        assert len(engine.cpu) == 7
        assert len(engine.memory) == 7
        assert engine.networks.series("eth0").values() == (100.0,) * 7
        assert engine.last_frame == 7

    def test_series_aligned_to_frame_counter(self, provider):
        engine = SamplingEngine(provider)
        for frame in (0, 3, 4):
            engine.tick(frame)
        assert [s.sequence for s in engine.cpu.as_slice()] == [0, 3, 4]
        assert [s.sequence for s in engine.memory.as_slice()] == [0, 3, 4]

    def test_process_refresh_every_thirtieth_frame(self, provider):
        """Test tick(30) refreshes the process list and tick(31) does not."""
        engine = SamplingEngine(provider)
        engine.tick(29)
        assert provider.calls.get("processes", 0) == 0

        engine.tick(30)
        assert provider.calls["processes"] == 1
        assert [row.pid for row in engine.processes.sorted_view()] == [42, 1, 7]

        engine.tick(31)
        assert provider.calls["processes"] == 1

    def test_first_frame_refreshes_processes(self, provider):
        engine = SamplingEngine(provider)
        engine.start()
        engine.tick(0)
        assert len(engine.processes) == 3
        assert engine.processes.selected == 0

    def test_custom_process_period(self, provider):
        engine = SamplingEngine(provider, DashboardConfig(process_refresh_frames=5))
        for frame in range(1, 11):
            engine.tick(frame)
        assert provider.calls["processes"] == 2

    def test_disks_refreshed_at_start_only_by_default(self, provider):
        engine = SamplingEngine(provider)
        engine.start()
        assert [d.used_percent for d in engine.disks.entries] == [75, 10]

        for frame in range(100):
            engine.tick(frame)
        assert provider.calls["disks"] == 1

    def test_periodic_disk_refresh(self, provider):
        engine = SamplingEngine(provider, DashboardConfig(disk_refresh_frames=10))
        engine.start()
        for frame in range(1, 21):
            engine.tick(frame)
        assert provider.calls["disks"] == 3

    def test_memory_percent_uses_start_total(self, provider):
        provider.processes = [RawProcess(1, "half", 0.0, provider.total // 2)]
        engine = SamplingEngine(provider)
        engine.start()
        engine.tick(0)
        assert engine.processes.sorted_view()[0].memory_percent == pytest.approx(50.0)

    def test_memory_total_read_on_process_cadence(self, provider):
        engine = SamplingEngine(provider)
        engine.start()
        for frame in range(1, 30):
            engine.tick(frame)
        assert provider.calls["memory"] == 29
        assert provider.calls["total_memory"] == 1

        provider.total = 32 * 1024**3
        engine.tick(30)
        assert provider.calls["total_memory"] == 2
        assert engine.memory_total == 32 * 1024**3

    def test_network_scenario(self, provider):
        provider.interfaces = [RawInterface("eth0", 100), RawInterface("wlan0", 50)]
        engine = SamplingEngine(provider)
        engine.tick(1)
        provider.interfaces = [RawInterface("wlan0", 50), RawInterface("eth0", 180)]
        engine.tick(2)

        assert engine.networks.snapshot_sorted() == [
            ("eth0", (100.0, 180.0)),
            ("wlan0", (50.0, 50.0)),
        ]

    def test_history_limit(self, provider):
        engine = SamplingEngine(provider, DashboardConfig(history_limit=4))
        for frame in range(10):
            engine.tick(frame)
        assert [s.sequence for s in engine.cpu.as_slice()] == [6, 7, 8, 9]
        assert len(engine.networks.series("lo")) == 4


class TestOrdering:
    """Tests for the frame ordering contract."""

    @pytest.mark.parametrize("frame", [5, 4])
    def test_non_increasing_frame_rejected(self, provider, frame):
        engine = SamplingEngine(provider)
        engine.tick(5)
        cpu_calls = provider.calls["cpu"]

        with pytest.raises(OutOfOrderSample):
            engine.tick(frame)

        assert len(engine.cpu) == 1
        assert provider.calls["cpu"] == cpu_calls
        assert engine.last_frame == 5

    def test_duplicate_interface_dropped(self, provider, caplog):
        provider.interfaces = [RawInterface("eth0", 1), RawInterface("eth0", 2)]
        engine = SamplingEngine(provider)
        with caplog.at_level(logging.ERROR, logger="dashtop.engine"):
            engine.tick(0)
        assert engine.networks.series("eth0").values() == (1.0,)
        assert "duplicate" in caplog.text


class TestProviderFailures:
    """A failing stream keeps its previous state for that tick."""

    def test_cpu_failure_skips_only_cpu(self, provider, caplog):
        engine = SamplingEngine(provider)
        engine.tick(0)
        provider.failing.add("cpu")
        with caplog.at_level(logging.WARNING, logger="dashtop.engine"):
            engine.tick(1)

        assert [s.sequence for s in engine.cpu.as_slice()] == [0]
        assert len(engine.memory) == 2
        assert "Skipping CPU sample" in caplog.text

        provider.failing.clear()
        engine.tick(2)
        assert [s.sequence for s in engine.cpu.as_slice()] == [0, 2]

    def test_memory_failure(self, provider):
        engine = SamplingEngine(provider)
        provider.failing.add("memory")
        engine.tick(0)
        assert len(engine.memory) == 0
        assert len(engine.cpu) == 1

    def test_network_failure(self, provider):
        engine = SamplingEngine(provider)
        engine.tick(0)
        provider.failing.add("network")
        engine.tick(1)
        assert engine.networks.series("eth0").values() == (100.0,)

    def test_process_failure_keeps_previous_rows(self, provider):
        engine = SamplingEngine(provider)
        engine.tick(0)
        before = engine.processes.sorted_view()

        provider.failing.add("processes")
        engine.tick(30)
        assert engine.processes.sorted_view() == before

    def test_disk_failure_keeps_previous_snapshot(self, provider):
        engine = SamplingEngine(provider, DashboardConfig(disk_refresh_frames=1))
        engine.start()
        before = engine.disks.entries
        provider.failing.add("disks")
        engine.tick(1)
        assert engine.disks.entries == before

    def test_disk_failure_at_start(self, provider):
        provider.failing.add("disks")
        engine = SamplingEngine(provider)
        engine.start()
        assert engine.disks.entries == ()

    def test_total_memory_failure_keeps_previous_total(self, provider):
        engine = SamplingEngine(provider)
        engine.start()
        provider.failing.add("total_memory")
        engine.tick(0)
        assert engine.memory_total == provider.total
