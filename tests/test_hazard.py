import pytest

from rvpipe.bits import Signal
from rvpipe.hazard import HazardDetectionUnit, HazardDetectionUnitNoFwd

BRANCH = "1100011"
JALR = "1100111"
R_TYPE = "0110011"


def _wired(unit):
    out = Signal(1)
    unit.connect_output(out)
    return out


def test_nofwd_idle_does_not_stall():
    unit = HazardDetectionUnitNoFwd()
    out = _wired(unit)
    out.write("1")
    unit.step()
    assert out == "0"


def test_nofwd_stalls_on_id_ex_write():
    unit = HazardDetectionUnitNoFwd()
    out = _wired(unit)
    unit.id_ex_reg_write.write("1")
    unit.id_ex_register_rd.write("00011")
    unit.if_id_register_rs2.write("00011")
    unit.step()
    assert out == "1"


def test_nofwd_stalls_on_ex_mem_write():
    unit = HazardDetectionUnitNoFwd()
    out = _wired(unit)
    unit.ex_mem_reg_write.write("1")
    unit.ex_mem_register_rd.write("00101")
    unit.if_id_register_rs1.write("00101")
    unit.step()
    assert out == "1"


def test_nofwd_ignores_x0_and_disabled_writes():
    unit = HazardDetectionUnitNoFwd()
    out = _wired(unit)
    unit.id_ex_reg_write.write("1")
    unit.id_ex_register_rd.write("00000")
    unit.step()
    assert out == "0"
    unit.id_ex_reg_write.write("0")
    unit.id_ex_register_rd.write("00001")
    unit.if_id_register_rs1.write("00001")
    unit.step()
    assert out == "0"


def test_nofwd_drives_every_output_and_clears():
    unit = HazardDetectionUnitNoFwd()
    first, second = _wired(unit), _wired(unit)
    unit.id_ex_reg_write.write("1")
    unit.id_ex_register_rd.write("00001")
    unit.if_id_register_rs1.write("00001")
    unit.step()
    assert (first.read(), second.read()) == ("1", "1")
    unit.reset()
    unit.step()
    assert (first.read(), second.read()) == ("0", "0")


def test_load_use_stalls_any_instruction():
    unit = HazardDetectionUnit()
    out = _wired(unit)
    unit.opcode.write(R_TYPE)
    unit.id_ex_mem_read.write("1")
    unit.id_ex_register_rd.write("00100")
    unit.if_id_register_rs1.write("00100")
    unit.step()
    assert out == "1"


def test_plain_write_does_not_stall_non_branch():
    unit = HazardDetectionUnit()
    out = _wired(unit)
    unit.opcode.write(R_TYPE)
    unit.id_ex_reg_write.write("1")
    unit.id_ex_register_rd.write("00100")
    unit.if_id_register_rs1.write("00100")
    unit.step()
    assert out == "0"


@pytest.mark.parametrize("opcode", [BRANCH, JALR])
def test_branch_after_write_stalls(opcode):
    unit = HazardDetectionUnit()
    out = _wired(unit)
    unit.opcode.write(opcode)
    unit.id_ex_reg_write.write("1")
    unit.id_ex_register_rd.write("00100")
    unit.if_id_register_rs2.write("00100")
    unit.step()
    assert out == "1"


def test_branch_after_load_two_ahead_stalls():
    unit = HazardDetectionUnit()
    out = _wired(unit)
    unit.opcode.write(BRANCH)
    unit.ex_mem_mem_read.write("1")
    unit.ex_mem_register_rd.write("00110")
    unit.if_id_register_rs1.write("00110")
    unit.step()
    assert out == "1"
    unit.opcode.write(R_TYPE)
    unit.step()
    assert out == "0"


def test_reset_restores_defaults():
    unit = HazardDetectionUnit()
    unit.opcode.write(BRANCH)
    unit.id_ex_mem_read.write("1")
    unit.ex_mem_register_rd.write("11111")
    unit.reset()
    assert unit.opcode == "0000000"
    assert unit.id_ex_mem_read == "0"
    assert unit.ex_mem_register_rd == "00000"