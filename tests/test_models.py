"""Tests for dashtop data models."""

import dataclasses

import pytest

from dashtop.models import DashboardView, DiskEntry, ProcessRow, Sample


def _view(**overrides) -> DashboardView:
    fields = dict(
        frame=3,
        running=True,
        cpu=(Sample(2, 10.0), Sample(3, 40.0)),
        memory=(Sample(3, 4.0 * 1024**3),),
        memory_total=16 * 1024**3,
        networks=(("eth0", (1.0, 2.0)),),
        disks=(DiskEntry("sda1", 75),),
        processes=(ProcessRow(1, "init", 0.5, 0.1),),
        selected=0,
    )
    fields.update(overrides)
    return DashboardView(**fields)


def test_process_row_creation():
    """Test ProcessRow dataclass creation."""
    row = ProcessRow(pid=123, command="test_process", cpu_percent=50.0, memory_percent=25.0)

    assert row.pid == 123
    assert row.command == "test_process"
    assert row.cpu_percent == 50.0
    assert row.memory_percent == 25.0


def test_process_row_is_frozen():
    """Test that ProcessRow is immutable (frozen)."""
    row = ProcessRow(pid=1, command="init", cpu_percent=0.1, memory_percent=0.5)

    with pytest.raises(dataclasses.FrozenInstanceError):
        row.pid = 999


def test_models_use_slots():
    """Test that records use __slots__ for memory efficiency."""
    assert not hasattr(Sample(0, 1.0), "__dict__")
    assert not hasattr(DiskEntry("sda", 10), "__dict__")
    assert not hasattr(_view(), "__dict__")


def test_view_is_frozen():
    """The render surface cannot rebind view fields."""
    view = _view()
    with pytest.raises(dataclasses.FrozenInstanceError):
        view.selected = 5


def test_view_latest_readings():
    view = _view()
    assert view.cpu_percent == 40.0
    assert view.memory_percent == pytest.approx(25.0)


def test_view_readings_before_first_sample():
    view = _view(cpu=(), memory=(), memory_total=0)
    assert view.cpu_percent == 0.0
    assert view.memory_percent == 0.0
