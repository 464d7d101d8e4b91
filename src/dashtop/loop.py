"""Frame loop for driving a dashboard without a UI toolkit."""

import time
from collections.abc import Callable, Iterable
from typing import Protocol

from dashtop.controller import Action, DashboardController
from dashtop.models import DashboardView


class InputSource(Protocol):
    """Source of decoded user actions."""

    def poll(self, timeout: float) -> Iterable[Action]:
        """Wait at most ``timeout`` seconds and return the pending actions."""
        ...


class FrameBudget:
    """Input source that issues Quit once a fixed number of frames has run."""

    def __init__(self, frames: int, sleep: Callable[[float], None] = time.sleep) -> None:
        """
        Initialize the FrameBudget.

        Args:
            frames: Number of frames to allow before quitting.
            sleep: Function used to wait out the poll timeout.
        """
        self._remaining = frames
        self._sleep = sleep

    def poll(self, timeout: float) -> list[Action]:
        if self._remaining <= 0:
            return [Action.QUIT]
        self._remaining -= 1
        if timeout > 0:
            self._sleep(timeout)
        return []


def run_loop(
    controller: DashboardController,
    input_source: InputSource,
    render: Callable[[DashboardView], None],
    timeout: float = 1 / 60,
) -> int:
    """
    Drive the controller until it stops running.

    Each frame polls input with a bounded wait, applies the actions, ticks
    the engine and hands the view to ``render``. Nothing is ticked or
    rendered after a Quit.

    Returns:
        The number of frames rendered.
    """
    controller.start()
    frames = 0
    while controller.running:
        view = controller.step(input_source.poll(timeout))
        if view is None:
            break
        render(view)
        frames += 1
    return frames
