"""Register file, instruction memory and byte-addressed data memory."""

from __future__ import annotations

from .bits import (
    WORD,
    InvalidSignalError,
    Signal,
    bits_to_unsigned,
    unsigned_to_bits,
)
from .gates import _Driver

_MASK = (1 << WORD) - 1
_EMPTY_BYTE = "0" * 8


class RegisterFile:
    """Thirty-two 32-bit registers with two read ports and one write port.

    Register x0 is hardwired to zero; x2 (the stack pointer) starts all ones.
    """

    def __init__(self):
        self.registers = [Signal(WORD) for _ in range(32)]
        self.read_reg1 = Signal(5)
        self.read_reg2 = Signal(5)
        self.write_reg = Signal(5)
        self.write_data = Signal(WORD)
        self.write_enable = Signal(1)
        self._data1 = _Driver()
        self._data2 = _Driver()
        self._init_registers()

    def _init_registers(self) -> None:
        for number, register in enumerate(self.registers):
            register.write(("1" if number == 2 else "0") * WORD)

    def reset(self) -> None:
        """Restore every input and register to its power-on value."""
        self.read_reg1.write("00000")
        self.read_reg2.write("00000")
        self.write_reg.write("00000")
        self.write_data.write("0" * WORD)
        self.write_enable.write("0")
        self._init_registers()

    def connect_data1_output(self, port) -> None:
        """Attach a port that receives the register named by ``read_reg1``."""
        self._data1.connect_output(port)

    def connect_data2_output(self, port) -> None:
        """Attach a port that receives the register named by ``read_reg2``."""
        self._data2.connect_output(port)

    def step_read(self) -> None:
        """Drive both read ports."""
        first = self.registers[bits_to_unsigned(self.read_reg1)].read()
        second = self.registers[bits_to_unsigned(self.read_reg2)].read()
        self._data1._drive(first)
        self._data2._drive(second)

    def step_write(self) -> None:
        """Store ``write_data`` when writes are enabled; x0 ignores writes."""
        if self.write_enable == "0":
            return
        address = bits_to_unsigned(self.write_reg)
        if address == 0:
            return
        self.registers[address].write(self.write_data.read())


class InstructionMemory(_Driver):
    """Word-addressed instruction store read at the address held in ``pc``."""

    def __init__(self):
        super().__init__()
        self.instructions: list[int] = []
        self.pc = Signal(WORD)

    def reset(self) -> None:
        """Forget all instructions and clear the PC."""
        self.instructions.clear()
        self.pc.write("0" * WORD)

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def add_instruction(self, instruction: int) -> None:
        """Append a 32-bit instruction word."""
        self.instructions.append(instruction & _MASK)

    def step(self) -> None:
        """Drive the instruction at ``pc``, or zeros past the end of the program."""
        address = bits_to_unsigned(self.pc)
        if address % 4:
            raise InvalidSignalError(f"misaligned instruction address {address}")
        index = address // 4
        if index >= len(self.instructions):
            self._drive("0" * WORD)
        else:
            self._drive(unsigned_to_bits(self.instructions[index]))


class DataMemory(_Driver):
    """Sparse little-endian byte memory supporting byte, halfword and word access."""

    def __init__(self):
        super().__init__()
        self.address = Signal(WORD)
        self.write_data = Signal(WORD)
        self.func3 = Signal(3)
        self.mem_write = Signal(1)
        self.mem_read = Signal(1)
        self.memory: dict[int, str] = {}

    def reset(self) -> None:
        """Clear the inputs and erase every stored byte."""
        self.address.write("0" * WORD)
        self.write_data.write("0" * WORD)
        self.func3.write("000")
        self.mem_write.write("0")
        self.mem_read.write("0")
        self.memory.clear()

    def connect_output(self, port) -> None:
        super().connect_output(port)

    def byte_at(self, address: int) -> str:
        """Return the eight bits stored at ``address``; unwritten bytes read as zero."""
        return self.memory.get(address & _MASK, _EMPTY_BYTE)

    def _bytes(self, base: int, count: int) -> list[str]:
        return [self.byte_at(base + offset) for offset in range(count)]

    def step_write(self) -> None:
        """Perform a store (sb, sh or sw) when ``mem_write`` is set."""
        if self.mem_write == "0":
            return
        if self.mem_read != "0":
            raise InvalidSignalError("memory read and write requested together")
        func3 = bits_to_unsigned(self.func3)
        sizes = {0: 1, 1: 2, 2: 4}
        if func3 not in sizes:
            return
        base = bits_to_unsigned(self.address)
        data = self.write_data.read()
        for offset in range(sizes[func3]):
            low = WORD - 8 * (offset + 1)
            self.memory[(base + offset) & _MASK] = data[low:low + 8]

    def step_read(self) -> None:
        """Perform a load (lb, lh, lw, lbu or lhu) when ``mem_read`` is set."""
        if self.mem_read == "0":
            return
        if self.mem_write != "0":
            raise InvalidSignalError("memory read and write requested together")
        func3 = bits_to_unsigned(self.func3)
        base = bits_to_unsigned(self.address)
        if func3 == 0:
            (byte,) = self._bytes(base, 1)
            result = byte[0] * 24 + byte
        elif func3 == 1:
            low, high = self._bytes(base, 2)
            result = high[0] * 16 + high + low
        elif func3 == 2:
            result = "".join(reversed(self._bytes(base, 4)))
        elif func3 == 4:
            (byte,) = self._bytes(base, 1)
            result = "0" * 24 + byte
        elif func3 == 5:
            low, high = self._bytes(base, 2)
            result = "0" * 16 + high + low
        else:
            result = "0" * WORD
        self._drive(result)