import pytest

from rvpipe.alu import Alu, AluControlUnit
from rvpipe.bits import (
    InvalidSignalError,
    Signal,
    bits_to_signed,
    bits_to_unsigned,
    signed_to_bits,
    unsigned_to_bits,
)

ZERO = "0" * 32
ONE = "0" * 31 + "1"
ALL_ONES = "1" * 32


def run(code, a, b):
    alu = Alu()
    out = Signal(32)
    alu.connect_result(out)
    alu.input1.write(signed_to_bits(a))
    alu.input2.write(signed_to_bits(b))
    alu.alu_control.write(unsigned_to_bits(code)[-5:])
    alu.step()
    return out.read()


SAMPLES = [0, 1, 0x12345678, 0xFFFFFFFF, 0x80000000, 0x7FFFFFFF]


@pytest.mark.parametrize("x", SAMPLES)
def test_and_with_itself_is_identity(x):
    assert run(0, x, x) == unsigned_to_bits(x)


@pytest.mark.parametrize("x", SAMPLES)
def test_or_with_zero_is_identity(x):
    assert run(1, x, 0) == unsigned_to_bits(x)


@pytest.mark.parametrize("x", SAMPLES)
def test_xor_with_itself_is_zero(x):
    assert run(3, x, x) == ZERO


@pytest.mark.parametrize("a,b", [(5, 7), (0xFFFFFFF0, 0x20), (0x80000000, 0x80000000)])
def test_add_then_sub_round_trip(a, b):
    total = run(2, a, b)
    assert run(6, bits_to_unsigned(total), b) == unsigned_to_bits(a)


def test_add_wraps_around():
    assert run(2, 0xFFFFFFFF, 1) == ZERO


def test_slt_is_signed_and_sltu_is_unsigned():
    assert run(4, 0xFFFFFFFF, 0) == ONE
    assert run(5, 0xFFFFFFFF, 0) == ZERO
    assert run(5, 0, 0xFFFFFFFF) == ONE


@pytest.mark.parametrize("x", SAMPLES)
def test_mul_by_one_is_identity(x):
    assert run(8, x, 1) == unsigned_to_bits(x)


@pytest.mark.parametrize("x", SAMPLES)
def test_mulhu_keeps_low_word_and_mulh_high_word(x):
    assert run(11, x, 1) == unsigned_to_bits(x)
    assert run(9, x, 1) == ZERO


def test_mulh_high_word():
    assert run(9, 0x80000000, 2) == ONE


@pytest.mark.parametrize("x", [0x0000FFFF, 0x00ABCDEF, 1])
def test_shift_left_then_right_round_trip(x):
    shifted = run(13, x, 8)
    assert run(14, bits_to_unsigned(shifted), 8) == unsigned_to_bits(x)


@pytest.mark.parametrize("x", SAMPLES)
def test_shift_by_zero_is_identity(x):
    assert run(13, x, 0) == unsigned_to_bits(x)
    assert run(14, x, 0) == unsigned_to_bits(x)
    assert run(15, x, 0) == unsigned_to_bits(x)


def test_sra_extends_sign_and_srl_does_not():
    assert run(15, 0x80000000, 31) == ALL_ONES
    assert run(14, 0x80000000, 31) == ONE


@pytest.mark.parametrize("code", [24, 25])
def test_division_by_zero_gives_all_ones(code):
    assert run(code, 1234, 0) == ALL_ONES


@pytest.mark.parametrize("code", [26, 27])
def test_remainder_by_zero_gives_dividend(code):
    assert run(code, 0xDEADBEEF, 0) == unsigned_to_bits(0xDEADBEEF)


@pytest.mark.parametrize("a,b", [(20, 3), (-20, 3), (20, -3), (-20, -3), (7, 7), (2, 9)])
def test_signed_division_identity(a, b):
    quotient = bits_to_signed(run(24, a, b))
    remainder = bits_to_signed(run(26, a, b))
    assert quotient * b + remainder == a
    assert abs(remainder) < abs(b)
    assert remainder == 0 or (remainder < 0) == (a < 0)


@pytest.mark.parametrize("a,b", [(20, 3), (0xFFFFFFFF, 7), (5, 0x80000000)])
def test_unsigned_division_identity(a, b):
    quotient = bits_to_unsigned(run(25, a, b))
    remainder = bits_to_unsigned(run(27, a, b))
    assert quotient * b + remainder == a
    assert remainder < b


def test_undefined_control_drives_all_ones():
    alu = Alu()
    out = Signal(32)
    alu.connect_result(out)
    alu.alu_control.write("xxxxx")
    alu.step()
    assert out.read() == ALL_ONES


@pytest.mark.parametrize("code", [7, 10, 12, 16, 23, 28, 31])
def test_unknown_control_codes_raise(code):
    with pytest.raises(InvalidSignalError):
        run(code, 1, 2)


def test_reset_clears_inputs():
    alu = Alu()
    alu.input1.write(ALL_ONES)
    alu.input2.write(ALL_ONES)
    alu.alu_control.write("11011")
    alu.reset()
    assert alu.input1.read() == ZERO
    assert alu.input2.read() == ZERO
    assert alu.alu_control.read() == "00000"


def control(alu_op, func3, func7):
    unit = AluControlUnit()
    out = Signal(5)
    unit.connect_output(out)
    unit.alu_op.write(alu_op)
    unit.func3.write(unsigned_to_bits(func3)[-3:])
    unit.func7.write(unsigned_to_bits(func7)[-7:])
    unit.step()
    return out.read()


@pytest.mark.parametrize(
    "func3,func7,code",
    [
        (0, 0x00, 2), (0, 0x01, 8), (0, 0x20, 6),
        (1, 0x00, 13), (1, 0x01, 9),
        (2, 0x00, 4),
        (3, 0x01, 11),
        (4, 0x00, 3), (4, 0x01, 24),
        (5, 0x00, 14), (5, 0x01, 25), (5, 0x20, 15),
        (6, 0x00, 1), (6, 0x01, 26),
        (7, 0x00, 0), (7, 0x01, 27),
    ],
)
def test_r_type_codes(func3, func7, code):
    assert control("10", func3, func7) == unsigned_to_bits(code)[-5:]


@pytest.mark.parametrize("func3,func7", [(0, 0x02), (2, 0x01), (3, 0x00), (7, 0x20)])
def test_r_type_invalid_func7_raises(func3, func7):
    with pytest.raises(InvalidSignalError):
        control("10", func3, func7)


@pytest.mark.parametrize(
    "func3,func7,code",
    [
        (0, 0x00, 2), (4, 0x00, 3), (6, 0x00, 1), (7, 0x00, 0),
        (1, 0x00, 13), (5, 0x00, 14), (5, 0x20, 15), (2, 0x00, 4), (3, 0x00, 5),
        (0, 0x7F, 2),
    ],
)
def test_i_type_codes(func3, func7, code):
    assert control("11", func3, func7) == unsigned_to_bits(code)[-5:]


def test_i_type_shift_right_with_bad_func7_raises():
    with pytest.raises(InvalidSignalError):
        control("11", 5, 0x01)


@pytest.mark.parametrize("func3", range(8))
def test_memory_and_upper_ops_add(func3):
    assert control("00", func3, 0x7F) == unsigned_to_bits(2)[-5:]


def test_undefined_alu_op_gives_undefined_code():
    assert control("xx", 0, 0) == "xxxxx"


def test_invalid_alu_op_raises():
    with pytest.raises(InvalidSignalError):
        control("01", 0, 0)


def test_unconnected_control_output_raises():
    unit = AluControlUnit()
    with pytest.raises(InvalidSignalError):
        unit.step()


def test_control_feeds_alu_through_a_tap():
    unit = AluControlUnit()
    alu = Alu()
    unit.connect_output(alu.alu_control)
    unit.alu_op.write("10")
    unit.func3.write("000")
    unit.func7.write(unsigned_to_bits(0x20)[-7:])
    unit.step()
    out = Signal(32)
    alu.connect_result(out)
    alu.input1.write(unsigned_to_bits(9))
    alu.input2.write(unsigned_to_bits(9))
    alu.step()
    assert out.read() == ZERO


def test_control_reset_clears_inputs():
    unit = AluControlUnit()
    unit.alu_op.write("11")
    unit.func3.write("111")
    unit.func7.write("1111111")
    unit.reset()
    assert (unit.alu_op.read(), unit.func3.read(), unit.func7.read()) == (
        "00",
        "000",
        "0000000",
    )