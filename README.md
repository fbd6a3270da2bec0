# rvpipe

`rvpipe` models a classic five-stage (IF, ID, EX, MEM, WB) pipelined RV32
processor at the level of its datapath. Multiplexers, pipeline registers,
the ALU, the control units, the hazard detection units, the forwarding
units and the memories are separate parts. Each part has input signals and
output ports. A clock cycle steps the parts in a fixed order.

## Installation

```
pip install .
```

No third-party libraries are needed at run time. To run the test suite:

```
pip install ".[test]"
pytest
```

## The pipeline without forwarding

`rvpipe.nonforwarding.NonForwardingPipeline` is a complete datapath. It
stalls whenever an instruction in EX or MEM writes a register that the
instruction in ID reads. Branches are resolved in ID and predicted not
taken. Jumps flush the fetched instruction.

```python
from rvpipe.nonforwarding import NonForwardingPipeline

pipeline = NonForwardingPipeline()
pipeline.load_instructions([0x00500093, 0x00A00113, 0x002081B3])
pipeline.make_connections()
for _ in range(12):
    pipeline.do_cycle()

print(pipeline.register_file.registers[3].read())   # x3 as a bit string
print(pipeline.data_memory.byte_at(0xFFFFFFFE))      # one byte of data memory
```

Call `load_instructions` and `make_connections` once, then `do_cycle` once
per clock cycle. At power-on register x2 holds all ones and every other
register holds zero. Writes to x0 are ignored. Past the end of the program
the instruction memory supplies zero words, which decode as no-ops.

## Components

- `rvpipe.bits`
  - Conversions between integers and 32-bit strings: `unsigned_to_bits`,
    `signed_to_bits`, `bits_to_unsigned` and `bits_to_signed`.
  - `Signal`, a fixed-width mutable bit string.
  - `Tap`, a port that writes into a `Signal` at an offset.
  - `InvalidSignalError`, which is raised for bad values, widths and
    unconnected outputs.
- `rvpipe.gates`: `Mux2`, `Mux4`, `AndGate`, `OrGate`, `Adder`, `PCAdder`
  and `LeftShift`.
- `rvpipe.register`: `Register`, a clocked pipeline register with flush and
  stall bits. It drives inclusive slices of its data to its outputs.
- `rvpipe.memory`
  - `RegisterFile`.
  - `InstructionMemory`.
  - `DataMemory`, a sparse little-endian byte memory. It handles
    `sb`/`sh`/`sw` and `lb`/`lh`/`lw`/`lbu`/`lhu`.
- `rvpipe.alu`
  - `Alu`, which covers add, sub, the logic operations, shifts, set-less-than
    and multiply/divide/remainder.
  - `AluControlUnit`.
- `rvpipe.control`
  - `ControlUnit`, which decodes the opcode.
  - `ImmediateGen`.
  - `BranchComparator`, which handles `beq`, `bne`, `blt`, `bge`, `bltu`
    and `bgeu`.
- `rvpipe.hazard`
  - `HazardDetectionUnitNoFwd`.
  - `HazardDetectionUnit`, for a forwarding datapath. It stalls on
    load-use hazards and on a branch or `jalr` that depends on a pending
    result.
- `rvpipe.bypass`
  - `AluForwardingUnit`, which selects register, write-back or EX/MEM
    operands for the ALU.
  - `BranchForwardingUnit`, which forwards the EX/MEM result to the branch
    comparator.

Every part has the same shape. Set its input signals, connect its outputs
with `connect_output` (or the part's named `connect_*` methods) to a
`Signal` or a `Tap`, and call `step`. The register file and the data memory
use `step_read` and `step_write` instead.

## What the package does not do

- There is no assembled datapath with forwarding. The forwarding units and
  `HazardDetectionUnit` are provided as parts, but no ready-made pipeline
  wires them together.
- There is no command-line program. It does not read program files.
- It does not write per-cycle debug listings or pipeline diagrams.

To run a program, build the list of instruction words yourself and drive
`NonForwardingPipeline` as shown above.