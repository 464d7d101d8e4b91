"""Dashboard controller for dashtop."""

import logging
from collections.abc import Iterable
from enum import Enum

from dashtop.config import DashboardConfig
from dashtop.engine import SamplingEngine
from dashtop.models import DashboardView
from dashtop.provider import MetricsProvider, PsutilProvider
from dashtop.worker import ProcessWorker

logger = logging.getLogger(__name__)


class Action(Enum):
    """Decoded user actions."""

    QUIT = "quit"
    SELECT_NEXT = "select_next"
    SELECT_PREVIOUS = "select_previous"


class DashboardController:
    """
    Single owner of the dashboard state.

    Input is applied through apply_input(), sampling advances through
    advance(), and the render surface only ever sees current_view().
    """

    def __init__(self, engine: SamplingEngine) -> None:
        """
        Initialize the DashboardController.

        Args:
            engine: Sampling engine holding the metric histories.
        """
        self._engine = engine
        self._running = True
        self._started = False
        self._frame = -1  # No frame rendered yet; the first frame is 0

    @property
    def running(self) -> bool:
        """Check if the dashboard is still running."""
        return self._running

    @property
    def frame(self) -> int:
        """Get the counter of the last advanced frame (-1 before the first)."""
        return self._frame

    def start(self) -> None:
        """Run the engine's startup refresh. Safe to call more than once."""
        if self._started:
            return
        self._started = True
        self._engine.start()

    def apply_input(self, action: Action) -> None:
        """Apply one user action."""
        if not self._running:
            return
        if action is Action.QUIT:
            logger.info("Quit requested at frame %d", self._frame)
            self._running = False
            self._engine.stop()
        elif action is Action.SELECT_NEXT:
            self._engine.processes.move_selection(1)
        elif action is Action.SELECT_PREVIOUS:
            self._engine.processes.move_selection(-1)

    def advance(self) -> None:
        """
        Move to the next frame and tick the engine.

        Raises:
            RuntimeError: If the dashboard has already quit.
        """
        if not self._running:
            raise RuntimeError("dashboard has quit; no further frames")
        self._frame += 1
        self._engine.tick(self._frame)

    def step(self, actions: Iterable[Action] = ()) -> DashboardView | None:
        """
        Run one frame: apply ``actions``, tick, and build the view.

        Returns:
            The view for this frame, or None if one of the actions quit.
        """
        for action in actions:
            self.apply_input(action)
        if not self._running:
            return None
        self.advance()
        return self.current_view()

    def current_view(self) -> DashboardView:
        """Build an immutable snapshot of the current state."""
        engine = self._engine
        return DashboardView(
            frame=self._frame,
            running=self._running,
            cpu=engine.cpu.as_slice(),
            memory=engine.memory.as_slice(),
            memory_total=engine.memory_total,
            networks=tuple(engine.networks.snapshot_sorted()),
            disks=engine.disks.entries,
            processes=engine.processes.sorted_view(),
            selected=engine.processes.selected,
        )


def build_controller(
    provider: MetricsProvider | None = None,
    config: DashboardConfig | None = None,
) -> DashboardController:
    """
    Wire a provider, engine and controller together.

    Args:
        provider: Metrics provider. Defaults to a PsutilProvider.
        config: Dashboard settings. Defaults apply when None.
    """
    config = config or DashboardConfig()
    if provider is None:
        provider = PsutilProvider()
    worker = ProcessWorker(provider) if config.threaded_processes else None
    engine = SamplingEngine(provider, config, process_worker=worker)
    return DashboardController(engine)
