"""Combinational building blocks: multiplexers, gates, adders and shifters."""

from __future__ import annotations

from .bits import (
    InvalidSignalError,
    Signal,
    Tap,
    bits_to_signed,
    signed_to_bits,
    unsigned_to_bits,
)


def _as_tap(port) -> Tap:
    if isinstance(port, Tap):
        return port
    if isinstance(port, Signal):
        return port.tap(0)
    raise TypeError(f"not a port: {port!r}")


class _Driver:
    """Holds a set of output ports and drives a value onto all of them."""

    def __init__(self):
        self._outputs: list[Tap] = []

    def connect_output(self, port) -> None:
        """Attach a Signal or Tap that receives this component's output."""
        tap = _as_tap(port)
        if tap not in self._outputs:
            self._outputs.append(tap)

    def _drive(self, bits: str) -> None:
        for port in self._outputs:
            port.write(bits)


class Mux2(_Driver):
    """Two-input multiplexer; a switch of '0' selects input1."""

    def __init__(self, width: int):
        super().__init__()
        self.width = width
        self.input1 = Signal(width)
        self.input2 = Signal(width)
        self.input_switch = Signal(1)

    def reset(self) -> None:
        self.input1.write("0" * self.width)
        self.input2.write("0" * self.width)
        self.input_switch.write("0")

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def step(self) -> None:
        chosen = self.input1 if self.input_switch == "0" else self.input2
        self._drive(chosen.read()[: self.width])


class Mux4(_Driver):
    """Four-input multiplexer selected by a two-bit switch."""

    def __init__(self, width: int):
        super().__init__()
        self.width = width
        self.input1 = Signal(width)
        self.input2 = Signal(width)
        self.input3 = Signal(width)
        self.input4 = Signal(width)
        self.input_switch = Signal(2)

    def reset(self) -> None:
        for signal in (self.input1, self.input2, self.input3, self.input4):
            signal.write("0" * self.width)
        self.input_switch.write("00")

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def step(self) -> None:
        inputs = {
            "00": self.input1,
            "01": self.input2,
            "10": self.input3,
            "11": self.input4,
        }
        switch = self.input_switch.read()
        try:
            chosen = inputs[switch]
        except KeyError:
            raise InvalidSignalError(f"invalid mux switch value {switch!r}") from None
        self._drive(chosen.read()[: self.width])


class AndGate(_Driver):
    """One-bit AND gate."""

    def __init__(self):
        super().__init__()
        self.input1 = Signal(1)
        self.input2 = Signal(1)

    def reset(self) -> None:
        self.input1.write("0")
        self.input2.write("0")

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def step(self) -> None:
        high = self.input1 == "1" and self.input2 == "1"
        self._drive("1" if high else "0")


class OrGate(_Driver):
    """One-bit OR gate."""

    def __init__(self):
        super().__init__()
        self.input1 = Signal(1)
        self.input2 = Signal(1)

    def reset(self) -> None:
        self.input1.write("0")
        self.input2.write("0")

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def step(self) -> None:
        high = self.input1 == "1" or self.input2 == "1"
        self._drive("1" if high else "0")


class Adder(_Driver):
    """Two's complement adder whose result keeps the low ``width`` bits."""

    def __init__(self, width: int):
        super().__init__()
        self.width = width
        self.input1 = Signal(width)
        self.input2 = Signal(width)

    def reset(self) -> None:
        self.input1.write("0" * self.width)
        self.input2.write("0" * self.width)

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def step(self) -> None:
        total = bits_to_signed(self.input1) + bits_to_signed(self.input2)
        result = signed_to_bits(total)[32 - self.width:]
        self._drive(result)


class PCAdder(Adder):
    """A 32-bit adder whose second input holds the constant 4."""

    def __init__(self):
        super().__init__(32)
        self.input2.write(unsigned_to_bits(4))

    def reset(self) -> None:
        super().reset()
        self.input2.write(unsigned_to_bits(4))


class LeftShift(_Driver):
    """Shifts its input left by one position, filling with '0'."""

    def __init__(self, width: int):
        super().__init__()
        self.width = width
        self.input = Signal(width)

    def reset(self) -> None:
        self.input.write("0" * self.width)

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def step(self) -> None:
        self._drive(self.input.read()[1:] + "0")