"""dashtop - Main Textual application."""

import logging
from collections.abc import Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Static

from dashtop.config import DashboardConfig
from dashtop.controller import Action, DashboardController, build_controller
from dashtop.models import DashboardView, ProcessRow
from dashtop.provider import MetricsProvider

logger = logging.getLogger(__name__)

SPARK = " ▁▂▃▄▅▆▇█"
# Points handed to chart widgets; older history stays in the engine
CHART_POINTS = 240


def format_bytes(size: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{int(size):5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def band(percent: float, warning: float = 50.0, critical: float = 80.0) -> str:
    """Get the display color for a percentage: green, yellow or red."""
    if percent > critical:
        return "red"
    if percent > warning:
        return "yellow"
    return "green"


def sparkline(values: Sequence[float], width: int) -> str:
    """
    Render the most recent ``width`` values as block characters.

    Bars are scaled against the largest value shown, so a flat series of
    non-zero readings draws as full blocks.
    """
    if width < 1 or not values:
        return ""
    window = list(values)[-width:]
    peak = max(window)
    if peak <= 0:
        return SPARK[0] * len(window)
    top = len(SPARK) - 1
    return "".join(SPARK[max(0, min(top, round(v / peak * top)))] for v in window)


def bar_chart(values: Sequence[float], width: int, height: int, ceiling: float) -> list[str]:
    """
    Render the most recent ``width`` values as a ``height``-row bar chart.

    The y-axis runs from 0 to ``ceiling`` whatever the data, so a steady
    10% load stays a low strip.
    """
    if width < 1 or height < 1:
        return []
    window = list(values)[-width:]
    top = len(SPARK) - 1
    # Bar heights in eighths of a row
    heights = [
        round(max(0.0, min(1.0, v / ceiling)) * height * top) if ceiling > 0 else 0
        for v in window
    ]
    return [
        "".join(SPARK[max(0, min(top, h - row * top))] for h in heights)
        for row in range(height - 1, -1, -1)
    ]


def gauge(percent: float, width: int = 20) -> str:
    """Render a ``███░░░`` bar for a percentage."""
    filled = max(0, min(width, int(percent / 100 * width)))
    return "█" * filled + "░" * (width - filled)


class ChartPanel(Container):
    """Bordered panel with a headline reading above a fixed-scale bar chart."""

    DEFAULT_CSS = """
    ChartPanel {
        border: round $primary-darken-2;
        border-title-color: $accent;
    }

    ChartPanel .reading {
        height: 1;
    }

    ChartPanel .chart {
        height: 1fr;
    }
    """

    def __init__(self, title: str, *args, **kwargs) -> None:
        """Initialize ChartPanel."""
        super().__init__(*args, **kwargs)
        self.border_title = title

    def compose(self) -> ComposeResult:
        """Compose the reading line and chart."""
        yield Static("Loading...", classes="reading")
        yield Static("", classes="chart")

    def update_chart(self, reading: str, values: Sequence[float], ceiling: float) -> None:
        """Update the headline and redraw the chart on a fixed 0..ceiling scale."""
        try:
            self.query_one(".reading", Static).update(reading)
            chart = self.query_one(".chart", Static)
            rows = bar_chart(values[-CHART_POINTS:], chart.size.width, chart.size.height, ceiling)
            chart.update("\n".join(rows))
        except NoMatches:
            pass  # Widget not mounted yet


class DiskPanel(Static):
    """Used-capacity bars, one line per disk."""

    DEFAULT_CSS = """
    DiskPanel {
        border: round $primary-darken-2;
        border-title-color: $accent;
        width: 30%;
        height: 1fr;
    }
    """

    def on_mount(self) -> None:
        self.border_title = "Disks"

    def update_disks(self, view: DashboardView, config: DashboardConfig) -> None:
        """Redraw the disk bars."""
        if not view.disks:
            self.update("[dim]No disks[/dim]")
            return
        width = max(len(disk.name) for disk in view.disks)
        lines = []
        for disk in view.disks:
            color = band(disk.used_percent, config.band_warning, config.band_critical)
            bar = gauge(disk.used_percent)
            lines.append(
                f"{disk.name:<{width}} [{color}]{bar}[/{color}] {disk.used_percent:3d}%"
            )
        self.update("\n".join(lines))


class NetworkPanel(Static):
    """Packet activity sparkline per interface, ordered by name."""

    DEFAULT_CSS = """
    NetworkPanel {
        border: round $primary-darken-2;
        border-title-color: $accent;
        width: 1fr;
        height: 1fr;
    }
    """

    def on_mount(self) -> None:
        self.border_title = "Network"

    def update_networks(self, view: DashboardView) -> None:
        """Redraw the interface sparklines."""
        if not view.networks:
            self.update("[dim]No interfaces[/dim]")
            return
        name_width = max(len(name) for name, _ in view.networks)
        chart_width = max(1, self.size.width - name_width - 3)
        lines = [
            f"[b]{name:<{name_width}}[/b] [green]{sparkline(values, chart_width)}[/green]"
            for name, values in view.networks
        ]
        self.update("\n".join(lines))


class ProcessGrid(DataTable, can_focus=False):
    """Process table whose cursor is driven by the controller, not by focus."""


class ProcessPanel(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessPanel {
        border: round $primary-darken-2;
        border-title-color: $accent;
        width: 1fr;
        height: 1fr;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessPanel."""
        super().__init__(*args, **kwargs)
        self._shown_rows: tuple[ProcessRow, ...] = ()
        self._shown_selected: int | None = None

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield ProcessGrid(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        self.border_title = "Processes"
        table = self.query_one("#process-table", ProcessGrid)
        table.cursor_type = "row"

        table.add_column("Pid", key="pid", width=8)
        table.add_column("Cmd", key="command")
        table.add_column("CPU%", key="cpu", width=8)
        table.add_column("Mem%", key="mem", width=8)

    def update_processes(self, rows: tuple[ProcessRow, ...], selected: int | None) -> None:
        """
        Show the ranked rows and highlight the selected one.

        The table is rebuilt only when the controller hands over a new row
        set; otherwise only the cursor moves.
        """
        table = self.query_one("#process-table", ProcessGrid)

        if rows is not self._shown_rows:
            table.clear()
            table.add_rows(
                (
                    str(row.pid),
                    row.command[:50],
                    f"{row.cpu_percent:.2f}",
                    f"{row.memory_percent:.2f}",
                )
                for row in rows
            )
            self._shown_rows = rows
            self._shown_selected = None

        if selected is not None and selected != self._shown_selected:
            table.move_cursor(row=selected)
        self._shown_selected = selected


class DashtopApp(App):
    """Main dashtop application."""

    TITLE = "dashtop"
    SUB_TITLE = "Terminal System Dashboard"

    CSS = """
    Screen {
        layout: vertical;
    }

    #title {
        dock: top;
        height: 1;
        content-align: center middle;
        text-style: bold;
        background: $boost;
        color: $accent;
    }

    #cpu-panel {
        height: 25%;
    }

    .row {
        height: 1fr;
    }

    #memory-panel {
        width: 1fr;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("down", "select_next", "Next"),
        ("up", "select_previous", "Previous"),
        Binding("j", "select_next", "Next", show=False),
        Binding("k", "select_previous", "Previous", show=False),
    ]

    def __init__(
        self,
        provider: MetricsProvider | None = None,
        config: DashboardConfig | None = None,
    ) -> None:
        """
        Initialize the DashtopApp.

        Args:
            provider: Metrics provider. Defaults to a PsutilProvider.
            config: Dashboard settings. Defaults apply when None.
        """
        super().__init__()
        self.dashboard_config = config or DashboardConfig()
        self.controller: DashboardController = build_controller(provider, self.dashboard_config)
        self.last_view: DashboardView | None = None

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Static(self.TITLE, id="title")
        yield ChartPanel("CPU", id="cpu-panel")
        with Horizontal(classes="row"):
            yield DiskPanel(id="disk-panel")
            yield ChartPanel("Memory", id="memory-panel")
        with Horizontal(classes="row"):
            yield NetworkPanel(id="network-panel")
            yield ProcessPanel(id="process-panel")
        yield Footer()

    def on_mount(self) -> None:
        """Take the startup snapshot and start the frame timer."""
        self.controller.start()
        self.set_interval(self.dashboard_config.poll_timeout, self.advance_frame)

    def on_unmount(self) -> None:
        """Make sure background work stops however the app exits."""
        if self.controller.running:
            self.controller.apply_input(Action.QUIT)

    def advance_frame(self) -> None:
        """Tick the engine and redraw every panel."""
        if not self.controller.running:
            return
        view = self.controller.step()
        if view is not None:
            self.last_view = view
            self._update_ui(view)

    def _update_ui(self, view: DashboardView) -> None:
        """Update the UI with the new dashboard view."""
        config = self.dashboard_config
        try:
            cpu = view.cpu_percent
            color = band(cpu, config.band_warning, config.band_critical)
            self.query_one("#cpu-panel", ChartPanel).update_chart(
                f"[{color}]{cpu:.2f}%[/{color}]",
                [sample.value for sample in view.cpu],
                100.0,
            )

            mem = view.memory_percent
            color = band(mem, config.band_warning, config.band_critical)
            used = view.memory[-1].value if view.memory else 0
            self.query_one("#memory-panel", ChartPanel).update_chart(
                f"[{color}]{mem:.2f}%[/{color}] "
                f"{format_bytes(used)}/{format_bytes(view.memory_total)}",
                [sample.value for sample in view.memory],
                view.memory_total,
            )

            self.query_one("#disk-panel", DiskPanel).update_disks(view, config)
            self.query_one("#network-panel", NetworkPanel).update_networks(view)
            self.query_one("#process-panel", ProcessPanel).update_processes(
                view.processes, view.selected
            )
        except NoMatches:
            logger.debug("Panels not mounted yet; skipping frame %d", view.frame)

    def action_select_next(self) -> None:
        """Move the process selection down one row."""
        self.controller.apply_input(Action.SELECT_NEXT)

    def action_select_previous(self) -> None:
        """Move the process selection up one row."""
        self.controller.apply_input(Action.SELECT_PREVIOUS)

    async def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self.controller.apply_input(Action.QUIT)
        self.exit()
