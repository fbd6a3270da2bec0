"""The 32-bit ALU and the unit that turns ALUOp/func fields into ALU control codes."""

from __future__ import annotations

from collections.abc import Callable

from .bits import (
    WORD,
    InvalidSignalError,
    Signal,
    bits_to_unsigned,
    unsigned_to_bits,
)
from .gates import _Driver

_MASK = (1 << WORD) - 1
_SIGN = 1 << (WORD - 1)
_UNDEFINED_CONTROL = "x" * 5


def _signed(value: int) -> int:
    return value - (1 << WORD) if value & _SIGN else value


def _shift(amount: int) -> int:
    # Shift amounts use only their low five bits.
    return amount & (WORD - 1)


def _truncating_quotient(dividend: int, divisor: int) -> int:
    quotient = abs(dividend) // abs(divisor)
    return -quotient if (dividend < 0) != (divisor < 0) else quotient


def _div(a: int, b: int) -> int:
    if b == 0:
        return _MASK
    return _truncating_quotient(_signed(a), _signed(b))


def _divu(a: int, b: int) -> int:
    return _MASK if b == 0 else a // b


def _rem(a: int, b: int) -> int:
    if b == 0:
        return a
    dividend, divisor = _signed(a), _signed(b)
    return dividend - divisor * _truncating_quotient(dividend, divisor)


def _remu(a: int, b: int) -> int:
    return a if b == 0 else a % b


_OPERATIONS: dict[int, Callable[[int, int], int]] = {
    0: lambda a, b: a & b,
    1: lambda a, b: a | b,
    2: lambda a, b: a + b,
    3: lambda a, b: a ^ b,
    4: lambda a, b: int(_signed(a) < _signed(b)),
    5: lambda a, b: int(a < b),
    6: lambda a, b: a - b,
    8: lambda a, b: a * b,
    # mulh yields the upper word of the product of the raw operands;
    # mulhu yields its lower word.
    9: lambda a, b: (a * b) >> WORD,
    11: lambda a, b: a * b,
    13: lambda a, b: a << _shift(b),
    14: lambda a, b: a >> _shift(b),
    15: lambda a, b: _signed(a) >> _shift(b),
    24: _div,
    25: _divu,
    26: _rem,
    27: _remu,
}


class Alu:
    """A 32-bit ALU driven by a five-bit control code."""

    def __init__(self):
        self.input1 = Signal(WORD)
        self.input2 = Signal(WORD)
        self.alu_control = Signal(5)
        self._result = _Driver()

    def reset(self) -> None:
        """Clear both operands and the control code."""
        self.input1.write("0" * WORD)
        self.input2.write("0" * WORD)
        self.alu_control.write("00000")

    def connect_result(self, port) -> None:
        """Attach a port that receives the 32-bit result."""
        self._result.connect_output(port)

    def step(self) -> None:
        """Compute the selected operation and drive the result."""
        control = self.alu_control.read()
        if control == _UNDEFINED_CONTROL:
            self._result._drive("1" * WORD)
            return
        first = bits_to_unsigned(self.input1)
        second = bits_to_unsigned(self.input2)
        code = bits_to_unsigned(control)
        try:
            operation = _OPERATIONS[code]
        except KeyError:
            raise InvalidSignalError(f"invalid ALU control value {control!r}") from None
        self._result._drive(unsigned_to_bits(operation(first, second)))


_R_TYPE_CODES = {
    (0, 0x00): 2,   # add
    (0, 0x01): 8,   # mul
    (0, 0x20): 6,   # sub
    (1, 0x00): 13,  # sll
    (1, 0x01): 9,   # mulh
    (2, 0x00): 4,   # slt
    (3, 0x01): 11,  # mulhu
    (4, 0x00): 3,   # xor
    (4, 0x01): 24,  # div
    (5, 0x00): 14,  # srl
    (5, 0x01): 25,  # divu
    (5, 0x20): 15,  # sra
    (6, 0x00): 1,   # or
    (6, 0x01): 26,  # rem
    (7, 0x00): 0,   # and
    (7, 0x01): 27,  # remu
}

_I_TYPE_CODES = {
    0x0: 2,   # addi
    0x1: 13,  # slli
    0x2: 4,   # slti
    0x3: 5,   # sltiu
    0x4: 3,   # xori
    0x6: 1,   # ori
    0x7: 0,   # andi
}

# For shift-right immediates the upper immediate bits arrive on func7.
_I_SHIFT_RIGHT_CODES = {0x00: 14, 0x20: 15}


class AluControlUnit:
    """Maps ALUOp, func3 and func7 onto the five-bit ALU control code."""

    def __init__(self):
        self.alu_op = Signal(2)
        self.func3 = Signal(3)
        self.func7 = Signal(7)
        self._output = None

    def reset(self) -> None:
        """Clear all inputs."""
        self.func3.write("000")
        self.func7.write("0000000")
        self.alu_op.write("00")

    def connect_output(self, port) -> None:
        """Attach the port that receives the control code (replacing any previous one)."""
        self._output = _Driver()
        self._output.connect_output(port)

    def _code(self) -> int | None:
        func3 = bits_to_unsigned(self.func3)
        func7 = bits_to_unsigned(self.func7)
        alu_op = self.alu_op.read()
        if alu_op == "10":
            try:
                return _R_TYPE_CODES[(func3, func7)]
            except KeyError:
                raise InvalidSignalError(f"invalid func7 value {func7:#x}") from None
        if alu_op == "11":
            if func3 == 0x5:
                try:
                    return _I_SHIFT_RIGHT_CODES[func7]
                except KeyError:
                    raise InvalidSignalError(f"invalid func7 value {func7:#x}") from None
            try:
                return _I_TYPE_CODES[func3]
            except KeyError:
                raise InvalidSignalError(f"invalid func3 value {func3}") from None
        if alu_op == "00":
            return 2
        if alu_op == "xx":
            return None
        raise InvalidSignalError(f"invalid ALUOp value {alu_op!r}")

    def step(self) -> None:
        """Decode the inputs and drive the control code."""
        if self._output is None:
            raise InvalidSignalError("ALU control output is not connected")
        code = self._code()
        if code is None:
            self._output._drive(_UNDEFINED_CONTROL)
        else:
            self._output._drive(unsigned_to_bits(code)[-5:])