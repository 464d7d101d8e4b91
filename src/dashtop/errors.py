"""Exceptions raised by dashtop."""


class DashtopError(Exception):
    """Base class for dashtop errors."""


class OutOfOrderSample(DashtopError):
    """A sample was offered with a sequence not after the last stored one."""

    def __init__(self, sequence: int, last: int) -> None:
        super().__init__(f"sample sequence {sequence} is not after {last}")
        self.sequence = sequence
        self.last = last


class ProviderUnavailable(DashtopError):
    """The metrics provider could not produce a reading for a stream."""

    def __init__(self, stream: str, reason: str = "") -> None:
        message = f"{stream} unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.stream = stream
