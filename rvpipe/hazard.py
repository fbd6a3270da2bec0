"""Hazard detection units that stall the front of the pipeline."""

from __future__ import annotations

from .bits import Signal, bits_to_unsigned
from .gates import _Driver

_ZERO_REGISTER = "00000"
_BRANCH_OPCODES = {0b1100011, 0b1100111}


def _conflicts(enable: Signal, rd: Signal, rs1: Signal, rs2: Signal) -> bool:
    """True when ``rd`` is being produced and is read as ``rs1`` or ``rs2``."""
    target = rd.read()
    return (
        enable == "1"
        and target != _ZERO_REGISTER
        and target in (rs1.read(), rs2.read())
    )


class HazardDetectionUnitNoFwd(_Driver):
    """Stalls whenever an instruction in EX or MEM writes a register read in ID."""

    def __init__(self):
        super().__init__()
        self.id_ex_reg_write = Signal(1)
        self.ex_mem_reg_write = Signal(1)
        self.id_ex_register_rd = Signal(5)
        self.if_id_register_rs1 = Signal(5)
        self.if_id_register_rs2 = Signal(5)
        self.ex_mem_register_rd = Signal(5)

    def reset(self) -> None:
        """Clear all inputs."""
        self.id_ex_reg_write.write("0")
        self.ex_mem_reg_write.write("0")
        for signal in (
            self.id_ex_register_rd,
            self.if_id_register_rs1,
            self.if_id_register_rs2,
            self.ex_mem_register_rd,
        ):
            signal.write(_ZERO_REGISTER)

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def step(self) -> None:
        """Drive '1' on every output when a stall is needed, otherwise '0'."""
        rs1, rs2 = self.if_id_register_rs1, self.if_id_register_rs2
        stall = _conflicts(
            self.id_ex_reg_write, self.id_ex_register_rd, rs1, rs2
        ) or _conflicts(self.ex_mem_reg_write, self.ex_mem_register_rd, rs1, rs2)
        self._drive("1" if stall else "0")


class HazardDetectionUnit(_Driver):
    """Stall logic for the forwarding pipeline.

    Stalls on a load-use hazard, and on a branch or jalr in ID that depends on
    a load two instructions ahead or on any register write one instruction ahead.
    """

    def __init__(self):
        super().__init__()
        self.id_ex_mem_read = Signal(1)
        self.ex_mem_mem_read = Signal(1)
        self.id_ex_reg_write = Signal(1)
        self.id_ex_register_rd = Signal(5)
        self.if_id_register_rs1 = Signal(5)
        self.if_id_register_rs2 = Signal(5)
        self.ex_mem_register_rd = Signal(5)
        self.opcode = Signal(7)

    def reset(self) -> None:
        """Clear all inputs."""
        self.id_ex_mem_read.write("0")
        self.ex_mem_mem_read.write("0")
        self.id_ex_reg_write.write("0")
        for signal in (
            self.id_ex_register_rd,
            self.if_id_register_rs1,
            self.if_id_register_rs2,
            self.ex_mem_register_rd,
        ):
            signal.write(_ZERO_REGISTER)
        self.opcode.write("0000000")

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def step(self) -> None:
        """Drive '1' on every output when a stall is needed, otherwise '0'."""
        is_branch = bits_to_unsigned(self.opcode) in _BRANCH_OPCODES
        rs1, rs2 = self.if_id_register_rs1, self.if_id_register_rs2
        load_use = _conflicts(self.id_ex_mem_read, self.id_ex_register_rd, rs1, rs2)
        branch_after_load = is_branch and _conflicts(
            self.ex_mem_mem_read, self.ex_mem_register_rd, rs1, rs2
        )
        branch_after_write = is_branch and _conflicts(
            self.id_ex_reg_write, self.id_ex_register_rd, rs1, rs2
        )
        stall = load_use or branch_after_load or branch_after_write
        self._drive("1" if stall else "0")