"""Configuration loading for dashtop.

Loads settings from TOML config files with sensible defaults.
Search order: explicit --config path → ~/.config/dashtop/config.toml → defaults only.
"""

from __future__ import annotations

import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "frame_rate": 60,
    "process_refresh_frames": 30,
    "disk_refresh_frames": 0,
    "history_limit": 3600,
    "threaded_processes": False,
    "log_level": "WARNING",
    "bands": {"warning": 50.0, "critical": 80.0},
}

LOG_LEVELS = tuple(sorted(logging.getLevelNamesMapping()))

_DEFAULT_PATH = Path.home() / ".config" / "dashtop" / "config.toml"


@dataclass(slots=True, frozen=True)
class DashboardConfig:
    """Validated dashboard settings."""

    frame_rate: int = 60
    process_refresh_frames: int = 30
    disk_refresh_frames: int = 0  # 0 = refresh disks at startup only
    history_limit: int = 3600  # 0 = unbounded
    threaded_processes: bool = False
    log_level: str = "WARNING"
    band_warning: float = 50.0
    band_critical: float = 80.0

    def __post_init__(self) -> None:
        if self.frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive, got {self.frame_rate}")
        if self.process_refresh_frames <= 0:
            raise ValueError(
                f"process_refresh_frames must be positive, got {self.process_refresh_frames}"
            )
        if self.disk_refresh_frames < 0:
            raise ValueError(
                f"disk_refresh_frames must not be negative, got {self.disk_refresh_frames}"
            )
        if self.history_limit < 0:
            raise ValueError(f"history_limit must not be negative, got {self.history_limit}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )
        if self.band_warning > self.band_critical:
            raise ValueError("bands.warning must not exceed bands.critical")

    @property
    def poll_timeout(self) -> float:
        """Input poll timeout in seconds (one frame)."""
        return 1.0 / self.frame_rate

    @property
    def history_maxlen(self) -> int | None:
        """History cap suitable for TimeSeries(maxlen=...)."""
        return self.history_limit or None

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> DashboardConfig:
        """
        Build a DashboardConfig from a (possibly partial) config dict.

        Raises:
            ValueError: If a value has the wrong type or is out of range.
        """
        merged = _overlay(DEFAULT_CONFIG, config)
        bands = _typed(merged, "bands", dict)
        return cls(
            frame_rate=_typed(merged, "frame_rate", int),
            process_refresh_frames=_typed(merged, "process_refresh_frames", int),
            disk_refresh_frames=_typed(merged, "disk_refresh_frames", int),
            history_limit=_typed(merged, "history_limit", int),
            threaded_processes=_typed(merged, "threaded_processes", bool),
            log_level=_typed(merged, "log_level", str).upper(),
            band_warning=float(_typed(bands, "warning", (int, float), "bands.")),
            band_critical=float(_typed(bands, "critical", (int, float), "bands.")),
        )


def _typed(
    table: dict[str, Any], key: str, kind: type | tuple[type, ...], prefix: str = ""
) -> Any:
    """Get ``table[key]``, raising ValueError unless it is a ``kind``."""
    value = table[key]
    # TOML booleans are ints to isinstance(); only bool fields take them
    if (isinstance(value, bool) and kind is not bool) or not isinstance(value, kind):
        raise ValueError(f"{prefix}{key} has the wrong type: {value!r}")
    return value


def _overlay(defaults: dict[str, Any], user: dict[str, Any]) -> dict[str, Any]:
    """Lay user settings over a copy of the defaults; tables merge key by key."""
    merged = {
        key: dict(value) if isinstance(value, dict) else value for key, value in defaults.items()
    }
    for key, value in user.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def _read_default_file() -> dict[str, Any]:
    """Read the per-user config file, treating a broken one as absent."""
    if not _DEFAULT_PATH.is_file():
        return {}
    try:
        return _read_toml(_DEFAULT_PATH)
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring invalid TOML in %s: %s", _DEFAULT_PATH, e)
        return {}


def load_config(path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration with user settings laid over DEFAULT_CONFIG.

    Args:
        path: Config file named with --config. When None, the per-user file
            is read if present.

    Raises:
        SystemExit: If an explicit path can't be read or parsed.
    """
    if path is None:
        return _overlay(DEFAULT_CONFIG, _read_default_file())
    try:
        user_config = _read_toml(path)
    except OSError as e:
        sys.exit(f"dashtop: cannot read config file {path}: {e.strerror}")
    except tomllib.TOMLDecodeError as e:
        sys.exit(f"dashtop: invalid TOML in {path}: {e}")
    return _overlay(DEFAULT_CONFIG, user_config)


def dump_default_config() -> str:
    """Return the default configuration as a TOML string."""
    lines = [
        "# dashtop configuration",
        "# Place this file at ~/.config/dashtop/config.toml",
        "",
        f"frame_rate = {DEFAULT_CONFIG['frame_rate']}",
        f"process_refresh_frames = {DEFAULT_CONFIG['process_refresh_frames']}",
        "# 0 = refresh disks at startup only",
        f"disk_refresh_frames = {DEFAULT_CONFIG['disk_refresh_frames']}",
        "# Samples kept per stream; 0 = unbounded",
        f"history_limit = {DEFAULT_CONFIG['history_limit']}",
        f"threaded_processes = {str(DEFAULT_CONFIG['threaded_processes']).lower()}",
        f'log_level = "{DEFAULT_CONFIG["log_level"]}"',
        "",
        "[bands]",
        f"warning = {DEFAULT_CONFIG['bands']['warning']}",
        f"critical = {DEFAULT_CONFIG['bands']['critical']}",
    ]
    return "\n".join(lines) + "\n"
