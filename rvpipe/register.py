"""Pipeline and PC registers: clocked storage that drives slices of its contents."""

from __future__ import annotations

from .bits import InvalidSignalError, Signal, Tap
from .gates import _as_tap


class Register:
    """A clocked register of ``size`` bits with flush and stall controls.

    Each connected output receives a slice ``[start, end]`` (inclusive) of the
    stored data when the register steps. A flush (without a stall) drives
    zeros instead; a stall leaves all outputs untouched.
    """

    def __init__(self, size: int):
        self.size = size
        self.data = Signal(size)
        self.flush_bit = Signal(1)
        self.stall_bit = Signal(1)
        self._outputs: list[tuple[int, int, Tap]] = []

    def reset(self) -> None:
        """Clear the stored data and both control bits."""
        self.data.write("0" * self.size)
        self.flush_bit.write("0")
        self.stall_bit.write("0")

    def connect_output(self, start: int, end: int, port) -> None:
        """Drive bits ``start`` through ``end`` (inclusive) onto ``port``."""
        if start < 0 or end < start or end >= self.size:
            raise InvalidSignalError(
                f"invalid register slice [{start}, {end}] for a {self.size}-bit register"
            )
        entry = (start, end, _as_tap(port))
        if entry not in self._outputs:
            self._outputs.append(entry)

    def step(self) -> None:
        """Propagate the stored data (or zeros on a flush) to every output."""
        if self.stall_bit != "0":
            return
        if self.flush_bit == "1":
            for start, end, port in self._outputs:
                port.write("0" * (end - start + 1))
            return
        contents = self.data.read()
        for start, end, port in self._outputs:
            port.write(contents[start:end + 1])