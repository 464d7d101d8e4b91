"""Command-line entry point for dashtop.

Usage:
    dashtop
    dashtop --config path/to/config.toml
    dashtop --frames 120          # headless: sample 120 frames, print a summary
    dashtop --dump-config > ~/.config/dashtop/config.toml
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from textual.logging import TextualHandler

from dashtop.app import DashtopApp, band, sparkline
from dashtop.config import LOG_LEVELS, DashboardConfig, dump_default_config, load_config
from dashtop.controller import build_controller
from dashtop.loop import FrameBudget, run_loop
from dashtop.models import DashboardView

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str, log_file: Path | None = None, headless: bool = False) -> None:
    """
    Route log records somewhere that won't scribble over the dashboard.

    Args:
        level: Root log level name, e.g. "INFO".
        log_file: Write records to this file when given.
        headless: Log to stderr instead of the textual devtools console.
    """
    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    elif headless:
        handler = logging.StreamHandler()
    else:
        handler = TextualHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)


def render_summary(view: DashboardView, config: DashboardConfig) -> Group:
    """Build a rich renderable summarising one dashboard view."""
    cpu = view.cpu_percent
    mem = view.memory_percent
    cpu_color = band(cpu, config.band_warning, config.band_critical)
    mem_color = band(mem, config.band_warning, config.band_critical)
    headline = Panel(
        f"CPU [{cpu_color}]{cpu:.2f}%[/{cpu_color}]   "
        f"Memory [{mem_color}]{mem:.2f}%[/{mem_color}]   "
        f"frames {view.frame + 1}",
        title="dashtop",
    )

    disks = Table(title="Disks")
    disks.add_column("Name")
    disks.add_column("Used%", justify="right")
    for disk in view.disks:
        color = band(disk.used_percent, config.band_warning, config.band_critical)
        disks.add_row(disk.name, f"[{color}]{disk.used_percent}[/{color}]")

    networks = Table(title="Network")
    networks.add_column("Interface")
    networks.add_column("Packets", justify="right")
    networks.add_column("Activity")
    for name, values in view.networks:
        latest = f"{values[-1]:.0f}" if values else "-"
        networks.add_row(name, latest, sparkline(values, 30))

    processes = Table(title="Processes")
    processes.add_column("Pid", justify="right")
    processes.add_column("Cmd")
    processes.add_column("CPU%", justify="right")
    processes.add_column("Mem%", justify="right")
    for row in view.processes[:10]:
        processes.add_row(
            str(row.pid), row.command, f"{row.cpu_percent:.2f}", f"{row.memory_percent:.2f}"
        )

    return Group(headline, disks, networks, processes)


def run_headless(config: DashboardConfig, frames: int, console: Console | None = None) -> int:
    """
    Sample ``frames`` frames without a UI and print a summary of the last one.

    Returns:
        The number of frames rendered.
    """
    controller = build_controller(config=config)
    views: list[DashboardView] = []

    def keep_latest(view: DashboardView) -> None:
        views[:] = [view]

    rendered = run_loop(controller, FrameBudget(frames), keep_latest, config.poll_timeout)
    logger.info("Headless run finished after %d frames", rendered)
    if views:
        (console or Console()).print(render_summary(views[-1], config))
    return rendered


def main() -> None:
    """Entry point for dashtop application."""
    parser = argparse.ArgumentParser(
        description="Live terminal dashboard for CPU, memory, disks, network and processes.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Path to TOML config file",
    )
    parser.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the default configuration as TOML and exit",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=None,
        metavar="N",
        help="Run headless for N frames and print a summary",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        metavar="LEVEL",
        help=f"Override the configured log level ({', '.join(LOG_LEVELS)})",
    )
    parser.add_argument("--log-file", type=Path, default=None, metavar="PATH", help="Log to a file")
    args = parser.parse_args()

    if args.dump_config:
        print(dump_default_config(), end="")
        return

    try:
        config = DashboardConfig.from_dict(load_config(args.config))
    except ValueError as e:
        parser.error(f"invalid configuration: {e}")

    headless = args.frames is not None
    configure_logging(args.log_level or config.log_level, args.log_file, headless=headless)

    if headless:
        if args.frames < 0:
            parser.error("--frames must not be negative")
        run_headless(config, args.frames)
        return

    app = DashtopApp(config=config)
    app.run()


if __name__ == "__main__":
    main()
