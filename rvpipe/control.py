"""Instruction decoding: main control unit, immediate generator, branch comparator."""

from __future__ import annotations

from dataclasses import dataclass, fields

from .bits import (
    WORD,
    InvalidSignalError,
    Signal,
    bits_to_signed,
    bits_to_unsigned,
)
from .gates import _as_tap, _Driver


@dataclass(frozen=True)
class _Controls:
    if_flush: str
    alu_src1: str
    alu_src2: str
    mem_to_reg: str
    reg_write: str
    mem_read: str
    mem_write: str
    branch: str
    jalr: str
    jump: str
    alu_op: str

    @classmethod
    def parse(cls, text: str) -> _Controls:
        return cls(*text.split())


# Columns: if_flush alu_src1 alu_src2 mem_to_reg reg_write mem_read
#          mem_write branch jalr jump alu_op
_CONTROL_TABLE = {
    0b0110011: _Controls.parse("0 00 00 0 1 0 0 0 0 0 10"),  # R-type
    0b0010011: _Controls.parse("0 00 01 0 1 0 0 0 0 0 11"),  # I-type
    0b0000011: _Controls.parse("0 00 01 1 1 1 0 0 0 0 00"),  # load
    0b0100011: _Controls.parse("0 00 01 0 0 0 1 0 0 0 00"),  # store
    0b1100111: _Controls.parse("1 01 10 0 1 0 0 0 1 1 00"),  # jalr
    0b1100011: _Controls.parse("0 00 00 0 0 0 0 1 0 1 xx"),  # branch, predicted not taken
    0b0110111: _Controls.parse("0 10 01 0 1 0 0 0 0 0 00"),  # lui
    0b0010111: _Controls.parse("0 01 01 0 1 0 0 0 0 0 00"),  # auipc
    0b1101111: _Controls.parse("1 01 10 0 1 0 0 0 0 1 00"),  # jal
    0b0000000: _Controls.parse("0 00 00 0 0 0 0 0 0 0 00"),  # no-op
}


class ControlUnit:
    """Decodes the opcode into the pipeline's control signals."""

    def __init__(self):
        self.opcode = Signal(7)
        self.pc = Signal(WORD)
        self._ports: dict[str, object] = {}
        self._is_branch = _Driver()

    def reset(self) -> None:
        """Clear the opcode and PC inputs."""
        self.opcode.write("0000000")
        self.pc.write("0" * WORD)

    def connect_if_flush(self, port) -> None:
        self._ports["if_flush"] = _as_tap(port)

    def connect_write_back(self, reg_write, mem_to_reg) -> None:
        self._ports["reg_write"] = _as_tap(reg_write)
        self._ports["mem_to_reg"] = _as_tap(mem_to_reg)

    def connect_memory(self, mem_read, mem_write) -> None:
        self._ports["mem_read"] = _as_tap(mem_read)
        self._ports["mem_write"] = _as_tap(mem_write)

    def connect_alu(self, alu_src1, alu_src2, alu_op) -> None:
        self._ports["alu_src1"] = _as_tap(alu_src1)
        self._ports["alu_src2"] = _as_tap(alu_src2)
        self._ports["alu_op"] = _as_tap(alu_op)

    def connect_is_branch(self, port) -> None:
        """Attach one more port that receives the branch flag."""
        self._is_branch.connect_output(port)

    def connect_jalr(self, port) -> None:
        self._ports["jalr"] = _as_tap(port)

    def connect_jump(self, port) -> None:
        self._ports["jump"] = _as_tap(port)

    def step(self) -> None:
        """Drive every control signal for the current opcode."""
        opcode = bits_to_unsigned(self.opcode)
        try:
            controls = _CONTROL_TABLE[opcode]
        except KeyError:
            raise InvalidSignalError(
                f"invalid opcode value {self.opcode.read()!r}"
            ) from None
        names = [f.name for f in fields(_Controls) if f.name != "branch"]
        missing = [name for name in names if name not in self._ports]
        if missing:
            raise InvalidSignalError(
                f"control outputs not connected: {', '.join(missing)}"
            )
        for name in names:
            self._ports[name].write(getattr(controls, name))
        self._is_branch._drive(controls.branch)


_R_OPCODES = {"0110011", "0111011"}
_I_OPCODES = {"0000011", "0010011", "0011011", "1100111", "1110011"}
_S_OPCODE = "0100011"
_SB_OPCODE = "1100011"
_U_OPCODES = {"0010111", "0110111"}
_UJ_OPCODE = "1101111"


def _immediate(ins: str) -> str:
    # Index 0 of the string is bit 31 of the instruction.
    opcode = ins[25:32]
    sign = ins[0]
    if opcode in _I_OPCODES:
        return sign * 21 + ins[1:12]
    if opcode == _S_OPCODE:
        return sign * 21 + ins[1:7] + ins[20:25]
    if opcode == _SB_OPCODE:
        return sign * 20 + ins[24] + ins[1:7] + ins[20:24] + "0"
    if opcode in _U_OPCODES:
        return ins[0:20] + "0" * 12
    if opcode == _UJ_OPCODE:
        return sign * 12 + ins[12:20] + ins[11] + ins[1:11] + "0"
    return "0" * WORD


class ImmediateGen(_Driver):
    """Extracts and sign-extends the immediate of the instruction."""

    def __init__(self):
        super().__init__()
        self.instruction = Signal(WORD)

    def reset(self) -> None:
        """Clear the instruction input."""
        self.instruction.write("0" * WORD)

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def step(self) -> None:
        """Drive the 32-bit immediate; formats without one yield zero."""
        self._drive(_immediate(self.instruction.read()))


_COMPARISONS = {
    0: lambda a, b: a == b,                                        # beq
    1: lambda a, b: a != b,                                        # bne
    4: lambda a, b: bits_to_signed(a) < bits_to_signed(b),        # blt
    5: lambda a, b: bits_to_signed(a) >= bits_to_signed(b),       # bge
    6: lambda a, b: bits_to_unsigned(a) < bits_to_unsigned(b),    # bltu
    7: lambda a, b: bits_to_unsigned(a) >= bits_to_unsigned(b),   # bgeu
}


class BranchComparator:
    """Evaluates a branch condition; outputs '1' whenever no branch is decoded."""

    def __init__(self):
        self.value1 = Signal(WORD)
        self.value2 = Signal(WORD)
        self.func3 = Signal(3)
        self.branch = Signal(1)
        self._output = None

    def reset(self) -> None:
        """Clear all inputs."""
        self.value1.write("0" * WORD)
        self.value2.write("0" * WORD)
        self.branch.write("0")
        self.func3.write("000")

    def connect_output(self, port) -> None:
        """Attach the port that receives the comparison result."""
        self._output = _as_tap(port)

    def step(self) -> None:
        """Drive '1' if the branch is taken (or no branch is decoded), else '0'."""
        if self._output is None:
            raise InvalidSignalError("branch comparator output is not connected")
        self._output.write("1")
        if self.branch == "0":
            return
        func3 = bits_to_unsigned(self.func3)
        try:
            compare = _COMPARISONS[func3]
        except KeyError:
            raise InvalidSignalError(f"invalid func3 value {func3}") from None
        taken = compare(self.value1.read(), self.value2.read())
        self._output.write("1" if taken else "0")