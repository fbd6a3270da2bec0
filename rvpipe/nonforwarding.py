"""Five-stage RV32 pipeline without operand forwarding (stalls on every hazard)."""

from __future__ import annotations

from collections.abc import Iterable

from .alu import Alu, AluControlUnit
from .control import BranchComparator, ControlUnit, ImmediateGen
from .gates import Adder, AndGate, LeftShift, Mux2, Mux4, OrGate, PCAdder
from .hazard import HazardDetectionUnitNoFwd
from .memory import DataMemory, InstructionMemory, RegisterFile
from .register import Register


class NonForwardingPipeline:
    """The datapath of a classic five-stage pipeline with stall-only hazard handling.

    Call :meth:`load_instructions` and :meth:`make_connections` once, then
    :meth:`do_cycle` once per clock cycle.
    """

    def __init__(self):
        # IF
        self.pc_reg = Register(32)
        self.instr_mem = InstructionMemory()
        self.pc_add4 = PCAdder()
        self.pc_src_mux = Mux2(32)
        self.pc_src_and = AndGate()
        self.if_id_flush_or = OrGate()
        self.if_id_reg = Register(64)

        # ID
        self.register_file = RegisterFile()
        self.hazard_unit = HazardDetectionUnitNoFwd()
        self.control_unit = ControlUnit()
        self.imm_gen = ImmediateGen()
        self.branch_cmp = BranchComparator()
        self.branch_cmp_inp1_mux = Mux2(32)
        self.branch_cmp_inp2_mux = Mux2(32)
        self.jump_branch_mux = Mux2(32)
        self.branch_calc_adder = Adder(32)
        self.jalr_calc_adder = Adder(32)
        self.branch_imm_left_shift = LeftShift(32)
        self.id_flush_mux = Mux2(10)
        self.id_ex_reg = Register(163)

        # EX
        self.alu = Alu()
        self.alu_control_unit = AluControlUnit()
        self.alu_src1_mux = Mux4(32)
        self.alu_src2_mux = Mux4(32)
        self.ex_flush_wb_mux = Mux2(2)
        self.ex_flush_mem_mux = Mux2(2)
        self.ex_mem_reg = Register(76)

        # MEM
        self.data_memory = DataMemory()
        self.mem_wb_reg = Register(71)

        # WB
        self.write_data_mux = Mux2(32)

    def make_connections(self) -> None:
        """Wire every component's outputs to the inputs they feed."""
        # IF stage
        self.pc_reg.connect_output(0, 31, self.instr_mem.pc)
        self.pc_reg.connect_output(0, 31, self.if_id_reg.data.tap(0))
        self.pc_reg.connect_output(0, 31, self.pc_add4.input1)
        self.instr_mem.connect_output(self.if_id_reg.data.tap(32))
        self.pc_add4.connect_output(self.pc_src_mux.input1)
        self.pc_src_and.connect_output(self.pc_src_mux.input_switch)
        self.pc_src_mux.connect_output(self.pc_reg.data)
        self.if_id_flush_or.connect_output(self.if_id_reg.flush_bit)

        # ID stage
        if_id = self.if_id_reg
        id_ex_data = self.id_ex_reg.data
        if_id.connect_output(0, 31, id_ex_data.tap(10))
        if_id.connect_output(0, 31, self.branch_calc_adder.input1)
        if_id.connect_output(44, 48, self.hazard_unit.if_id_register_rs1)
        if_id.connect_output(39, 43, self.hazard_unit.if_id_register_rs2)
        if_id.connect_output(57, 63, self.control_unit.opcode)
        if_id.connect_output(49, 51, self.branch_cmp.func3)
        if_id.connect_output(44, 48, self.register_file.read_reg1)
        if_id.connect_output(39, 43, self.register_file.read_reg2)
        if_id.connect_output(32, 63, self.imm_gen.instruction)
        if_id.connect_output(32, 38, id_ex_data.tap(138))  # func7
        if_id.connect_output(49, 51, id_ex_data.tap(145))  # func3
        if_id.connect_output(44, 48, id_ex_data.tap(148))  # rs1
        if_id.connect_output(39, 43, id_ex_data.tap(153))  # rs2
        if_id.connect_output(52, 56, id_ex_data.tap(158))  # rd

        self.hazard_unit.connect_output(self.id_flush_mux.input_switch)
        self.hazard_unit.connect_output(self.if_id_reg.stall_bit)
        self.hazard_unit.connect_output(self.pc_reg.stall_bit)

        flush_inputs = self.id_flush_mux.input1
        self.control_unit.connect_if_flush(self.if_id_flush_or.input1)
        self.control_unit.connect_write_back(flush_inputs.tap(0), flush_inputs.tap(1))
        self.control_unit.connect_memory(flush_inputs.tap(2), flush_inputs.tap(3))
        self.control_unit.connect_alu(
            flush_inputs.tap(6), flush_inputs.tap(8), flush_inputs.tap(4)
        )
        self.control_unit.connect_is_branch(self.branch_cmp.branch)
        self.control_unit.connect_jalr(self.jump_branch_mux.input_switch)
        self.control_unit.connect_jump(self.pc_src_and.input2)

        self.id_flush_mux.input2.write("0" * self.id_flush_mux.width)
        self.id_flush_mux.connect_output(id_ex_data.tap(0))

        self.branch_calc_adder.connect_output(self.jump_branch_mux.input1)
        self.jalr_calc_adder.connect_output(self.jump_branch_mux.input2)
        self.jump_branch_mux.connect_output(self.pc_src_mux.input2)

        self.branch_cmp.connect_output(self.pc_src_and.input1)
        self.pc_src_and.connect_output(self.if_id_flush_or.input2)

        self.register_file.connect_data1_output(self.jalr_calc_adder.input1)
        self.register_file.connect_data1_output(id_ex_data.tap(42))
        self.register_file.connect_data1_output(self.branch_cmp.value1)
        self.register_file.connect_data2_output(id_ex_data.tap(74))
        self.register_file.connect_data2_output(self.branch_cmp.value2)

        # The generated immediate is already shifted for branches and jumps.
        self.imm_gen.connect_output(self.branch_calc_adder.input2)
        self.imm_gen.connect_output(self.jalr_calc_adder.input2)
        self.imm_gen.connect_output(id_ex_data.tap(106))

        # EX stage
        id_ex = self.id_ex_reg
        ex_mem_data = self.ex_mem_reg.data
        id_ex.connect_output(0, 3, ex_mem_data.tap(0))
        id_ex.connect_output(0, 0, self.hazard_unit.id_ex_reg_write)
        id_ex.connect_output(4, 5, self.alu_control_unit.alu_op)
        id_ex.connect_output(6, 7, self.alu_src1_mux.input_switch)
        id_ex.connect_output(8, 9, self.alu_src2_mux.input_switch)
        id_ex.connect_output(10, 41, self.alu_src1_mux.input2)
        id_ex.connect_output(42, 73, self.alu_src1_mux.input1)
        id_ex.connect_output(74, 105, self.alu_src2_mux.input1)
        id_ex.connect_output(74, 105, ex_mem_data.tap(36))
        id_ex.connect_output(106, 137, self.alu_src2_mux.input2)
        id_ex.connect_output(138, 144, self.alu_control_unit.func7)
        id_ex.connect_output(145, 147, self.alu_control_unit.func3)
        id_ex.connect_output(145, 147, ex_mem_data.tap(73))
        id_ex.connect_output(158, 162, self.hazard_unit.id_ex_register_rd)
        id_ex.connect_output(158, 162, ex_mem_data.tap(68))

        self.alu_src1_mux.connect_output(self.alu.input1)
        self.alu_src1_mux.input3.write("0" * self.alu_src1_mux.width)
        self.alu_src2_mux.connect_output(self.alu.input2)
        self.alu_src2_mux.input3.write("0" * (self.alu_src2_mux.width - 3) + "100")

        self.alu_control_unit.connect_output(self.alu.alu_control)
        self.alu.connect_result(ex_mem_data.tap(4))

        # MEM stage
        ex_mem = self.ex_mem_reg
        mem_wb_data = self.mem_wb_reg.data
        ex_mem.connect_output(0, 1, mem_wb_data.tap(0))
        ex_mem.connect_output(0, 0, self.hazard_unit.ex_mem_reg_write)
        ex_mem.connect_output(2, 2, self.data_memory.mem_read)
        ex_mem.connect_output(3, 3, self.data_memory.mem_write)
        ex_mem.connect_output(4, 35, self.data_memory.address)
        ex_mem.connect_output(4, 35, mem_wb_data.tap(34))
        ex_mem.connect_output(36, 67, self.data_memory.write_data)
        ex_mem.connect_output(68, 72, mem_wb_data.tap(66))
        ex_mem.connect_output(68, 72, self.hazard_unit.ex_mem_register_rd)
        ex_mem.connect_output(73, 75, self.data_memory.func3)

        self.data_memory.connect_output(mem_wb_data.tap(2))

        # WB stage
        mem_wb = self.mem_wb_reg
        mem_wb.connect_output(0, 0, self.register_file.write_enable)
        mem_wb.connect_output(1, 1, self.write_data_mux.input_switch)
        mem_wb.connect_output(2, 33, self.write_data_mux.input2)
        mem_wb.connect_output(34, 65, self.write_data_mux.input1)
        mem_wb.connect_output(66, 70, self.register_file.write_reg)

        self.write_data_mux.connect_output(self.register_file.write_data)

    def do_cycle(self) -> None:
        """Advance the pipeline by one clock cycle."""
        self.mem_wb_reg.step()
        self.ex_mem_reg.step()
        self.id_ex_reg.step()
        self.if_id_reg.step()
        self.pc_reg.step()

        self.write_data_mux.step()
        self.register_file.step_write()

        self.pc_add4.step()
        self.instr_mem.step()

        self.imm_gen.step()
        self.control_unit.step()
        self.hazard_unit.step()
        self.id_flush_mux.step()
        self.register_file.step_read()
        self.branch_calc_adder.step()
        self.jalr_calc_adder.step()
        self.jump_branch_mux.step()
        self.branch_cmp_inp1_mux.step()
        self.branch_cmp_inp2_mux.step()
        self.branch_cmp.step()

        self.pc_src_and.step()
        self.pc_src_mux.step()
        self.if_id_flush_or.step()

        self.alu_src1_mux.step()
        self.alu_src2_mux.step()
        self.alu_control_unit.step()
        self.alu.step()

        self.data_memory.step_write()
        self.data_memory.step_read()

    def load_instructions(self, instructions: Iterable[int]) -> None:
        """Append instruction words to the instruction memory."""
        for instruction in instructions:
            self.instr_mem.add_instruction(instruction)