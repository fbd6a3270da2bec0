"""Bit-string helpers and the wires that carry values between components."""

from __future__ import annotations

WORD = 32
_MASK = (1 << WORD) - 1
_SIGN = 1 << (WORD - 1)


class InvalidSignalError(ValueError):
    """Raised when a signal holds or receives a value a component cannot use."""


def unsigned_to_bits(value: int) -> str:
    """Render an integer as a 32-character binary string, wrapping modulo 2**32."""
    return format(value & _MASK, "032b")


def signed_to_bits(value: int) -> str:
    """Render a signed integer as its 32-bit two's complement binary string."""
    return format(value & _MASK, "032b")


def bits_to_unsigned(bits) -> int:
    """Read up to the first 32 characters of a bit string as an unsigned integer."""
    text = str(bits)[:WORD]
    if text.strip("01"):
        raise InvalidSignalError(f"not a bit string: {text!r}")
    return int(text, 2) if text else 0


def bits_to_signed(bits) -> int:
    """Read a bit string as a 32-bit two's complement integer."""
    value = bits_to_unsigned(bits)
    return value - (1 << WORD) if value & _SIGN else value


class Signal:
    """A fixed-width, mutable run of signal characters (usually '0' and '1')."""

    __slots__ = ("_cells",)

    def __init__(self, width: int, fill: str = "0"):
        if width < 0:
            raise InvalidSignalError(f"negative signal width: {width}")
        if len(fill) != 1:
            raise InvalidSignalError(f"fill must be one character, got {fill!r}")
        self._cells = [fill] * width

    def read(self) -> str:
        """Return the current contents as a string."""
        return "".join(self._cells)

    def write(self, bits) -> None:
        """Overwrite the signal from its first position with the given characters."""
        self._place(0, bits)

    def tap(self, offset: int) -> Tap:
        """Return a port that writes into this signal starting at ``offset``."""
        return Tap(self, offset)

    def _place(self, offset: int, bits) -> None:
        text = str(bits)
        end = offset + len(text)
        if offset < 0 or end > len(self._cells):
            raise InvalidSignalError(
                f"cannot write {len(text)} bits at offset {offset} "
                f"of a {len(self._cells)}-bit signal"
            )
        self._cells[offset:end] = text

    def __str__(self) -> str:
        return self.read()

    def __repr__(self) -> str:
        return f"Signal({self.read()!r})"

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other) -> bool:
        if isinstance(other, Signal):
            return self._cells == other._cells
        if isinstance(other, str):
            return self.read() == other
        return NotImplemented

    __hash__ = None


class Tap:
    """An output port writing into a signal at a fixed offset."""

    __slots__ = ("signal", "offset")

    def __init__(self, signal: Signal, offset: int):
        if not 0 <= offset < len(signal):
            raise InvalidSignalError(
                f"offset {offset} outside a {len(signal)}-bit signal"
            )
        self.signal = signal
        self.offset = offset

    def write(self, bits) -> None:
        """Write characters into the signal starting at this tap's offset."""
        self.signal._place(self.offset, bits)

    def __eq__(self, other) -> bool:
        if isinstance(other, Tap):
            return self.signal is other.signal and self.offset == other.offset
        return NotImplemented

    def __hash__(self) -> int:
        return hash((id(self.signal), self.offset))

    def __repr__(self) -> str:
        return f"Tap({self.signal!r}, {self.offset})"