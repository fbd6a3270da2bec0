"""Forwarding units that route results from later stages back to earlier ones."""

from __future__ import annotations

from .bits import InvalidSignalError, Signal
from .gates import _as_tap

_ZERO_REGISTER = "00000"


def _produces(reg_write: Signal, rd: Signal, source: Signal) -> bool:
    """True when ``rd`` is written, is not x0, and is the register ``source`` names."""
    target = rd.read()
    return reg_write == "1" and target != _ZERO_REGISTER and source.read() == target


class AluForwardingUnit:
    """Selects the ALU operand sources for the two forwarding multiplexers.

    A select of "00" takes the register file value, "01" the write-back value
    and "10" the ALU result held in EX/MEM. EX/MEM takes priority over MEM/WB.
    """

    def __init__(self):
        self.reg1_addr = Signal(5)
        self.reg2_addr = Signal(5)
        self.ex_mem_register_rd_addr = Signal(5)
        self.mem_wb_register_rd_addr = Signal(5)
        self.ex_mem_reg_write = Signal(1)
        self.mem_wb_reg_write = Signal(1)
        self.branch = Signal(1)
        self._ctrl_mux3 = None
        self._ctrl_mux4 = None

    def reset(self) -> None:
        """Clear all inputs."""
        for signal in (
            self.reg1_addr,
            self.reg2_addr,
            self.ex_mem_register_rd_addr,
            self.mem_wb_register_rd_addr,
        ):
            signal.write(_ZERO_REGISTER)
        self.ex_mem_reg_write.write("0")
        self.mem_wb_reg_write.write("0")
        self.branch.write("0")

    def connect_ctrl_mux3(self, port) -> None:
        """Attach the select input of the first operand's forwarding multiplexer."""
        self._ctrl_mux3 = _as_tap(port)

    def connect_ctrl_mux4(self, port) -> None:
        """Attach the select input of the second operand's forwarding multiplexer."""
        self._ctrl_mux4 = _as_tap(port)

    def _select(self, source: Signal) -> str:
        if _produces(self.ex_mem_reg_write, self.ex_mem_register_rd_addr, source):
            return "10"
        if _produces(self.mem_wb_reg_write, self.mem_wb_register_rd_addr, source):
            return "01"
        return "00"

    def step(self) -> None:
        """Drive both multiplexer selects; a branch in EX disables forwarding."""
        if self._ctrl_mux3 is None or self._ctrl_mux4 is None:
            raise InvalidSignalError("ALU forwarding outputs are not connected")
        self._ctrl_mux3.write("00")
        self._ctrl_mux4.write("00")
        if self.branch == "1":
            return
        self._ctrl_mux3.write(self._select(self.reg1_addr))
        self._ctrl_mux4.write(self._select(self.reg2_addr))


class BranchForwardingUnit:
    """Forwards the EX/MEM ALU result to the branch comparator inputs.

    A select of "1" is driven when the instruction in MEM writes (without
    loading) the register a branch in ID compares.
    """

    def __init__(self):
        self.if_id_register_rs1 = Signal(5)
        self.if_id_register_rs2 = Signal(5)
        self.ex_mem_register_rd_addr = Signal(5)
        self.mem_wb_register_rd_addr = Signal(5)
        self.ex_mem_reg_write = Signal(1)
        self.ex_mem_mem_read = Signal(1)
        self.branch = Signal(1)
        self._mux1 = None
        self._mux2 = None

    def reset(self) -> None:
        """Clear the register addresses, the write flag and the branch flag."""
        self.if_id_register_rs1.write(_ZERO_REGISTER)
        self.if_id_register_rs2.write(_ZERO_REGISTER)
        self.ex_mem_register_rd_addr.write(_ZERO_REGISTER)
        self.ex_mem_reg_write.write("0")
        self.branch.write("0")

    def connect_branch_cmp_mux1(self, port) -> None:
        """Attach the select input of the first comparator operand multiplexer."""
        self._mux1 = _as_tap(port)

    def connect_branch_cmp_mux2(self, port) -> None:
        """Attach the select input of the second comparator operand multiplexer."""
        self._mux2 = _as_tap(port)

    def _select(self, source: Signal) -> str:
        forward = (
            self.ex_mem_reg_write == "1"
            and self.ex_mem_mem_read == "0"
            and self.ex_mem_register_rd_addr.read() == source.read()
        )
        return "1" if forward else "0"

    def step(self) -> None:
        """Drive both comparator multiplexer selects."""
        if self._mux1 is None or self._mux2 is None:
            raise InvalidSignalError("branch forwarding outputs are not connected")
        self._mux1.write(self._select(self.if_id_register_rs1))
        self._mux2.write(self._select(self.if_id_register_rs2))