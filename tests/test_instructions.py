"""Tests for the instruction stream decoder."""

import struct

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjcf.classfile import OPERAND_FORMATS, ArrayTypeCode, Opcode, OperandFormat
from pyjcf.errors import UnexpectedEnd, UnknownOpcode
from pyjcf.instructions import (
    BranchInstruction,
    ConstantInstruction,
    IincInstruction,
    InvokeDynamicInstruction,
    InvokeInterfaceInstruction,
    LocalVariableInstruction,
    LookupSwitchInstruction,
    MultiANewArrayInstruction,
    NewArrayInstruction,
    PushInstruction,
    SimpleInstruction,
    TableSwitchInstruction,
    WideInstruction,
    decode_instructions,
    iter_instructions,
)


def s4(value: int) -> bytes:
    return struct.pack(">i", value)


class TestBasicInstructions:
    def test_single_return(self):
        insns = decode_instructions(bytes([0xB1]))
        assert len(insns) == 1
        insn = insns[0]
        assert isinstance(insn, SimpleInstruction)
        assert insn.opcode == Opcode.RETURN
        assert insn.offset == 0
        assert insn.length == 1
        assert insn.mnemonic == "return"

    def test_empty_code(self):
        assert decode_instructions(b"") == ()

    def test_offsets_and_lengths(self):
        # iconst_0; istore_1; iinc 1 1; iload_1; ireturn
        code = bytes([0x03, 0x3C, 0x84, 0x01, 0x01, 0x1B, 0xAC])
        insns = decode_instructions(code)
        assert [i.offset for i in insns] == [0, 1, 2, 5, 6]
        assert sum(i.length for i in insns) == len(code)

    def test_local_variable(self):
        (insn,) = decode_instructions(bytes([0x15, 0x05]))  # iload 5
        assert isinstance(insn, LocalVariableInstruction)
        assert insn.index == 5

    def test_bipush_is_signed(self):
        (insn,) = decode_instructions(bytes([0x10, 0xFF]))
        assert isinstance(insn, PushInstruction)
        assert insn.value == -1

    def test_sipush(self):
        (insn,) = decode_instructions(bytes([0x11, 0x80, 0x00]))
        assert insn.value == -32768
        assert insn.length == 3

    def test_ldc_and_ldc_w(self):
        ldc, ldc_w = decode_instructions(bytes([0x12, 0x07, 0x13, 0x01, 0x02]))
        assert isinstance(ldc, ConstantInstruction) and ldc.index == 7
        assert isinstance(ldc_w, ConstantInstruction) and ldc_w.index == 0x102

    def test_iinc(self):
        (insn,) = decode_instructions(bytes([0x84, 0x02, 0xFE]))
        assert isinstance(insn, IincInstruction)
        assert (insn.index, insn.delta) == (2, -2)

    def test_newarray(self):
        (insn,) = decode_instructions(bytes([0xBC, 0x0A]))
        assert isinstance(insn, NewArrayInstruction)
        assert insn.array_type == ArrayTypeCode.T_INT
        assert insn.operand_text() == "int"

    def test_multianewarray(self):
        (insn,) = decode_instructions(bytes([0xC5, 0x00, 0x03, 0x02]))
        assert isinstance(insn, MultiANewArrayInstruction)
        assert (insn.index, insn.dimensions, insn.length) == (3, 2, 4)

    def test_invokeinterface(self):
        (insn,) = decode_instructions(bytes([0xB9, 0x00, 0x09, 0x02, 0x00]))
        assert isinstance(insn, InvokeInterfaceInstruction)
        assert (insn.index, insn.count, insn.length) == (9, 2, 5)

    def test_invokedynamic(self):
        (insn,) = decode_instructions(bytes([0xBA, 0x00, 0x04, 0x00, 0x00]))
        assert isinstance(insn, InvokeDynamicInstruction)
        assert insn.index == 4
        assert insn.length == 5


class TestBranches:
    def test_forward_branch_target(self):
        # nop; goto +4; nop; nop; return
        insns = decode_instructions(bytes([0x00, 0xA7, 0x00, 0x04, 0x00, 0x00, 0xB1]))
        goto = insns[1]
        assert isinstance(goto, BranchInstruction)
        assert goto.branch == 4
        assert goto.target == 5

    def test_backward_branch(self):
        # nop; nop; ifeq -2
        insns = decode_instructions(bytes([0x00, 0x00, 0x99, 0xFF, 0xFE]))
        assert insns[2].branch == -2
        assert insns[2].target == 0

    def test_goto_w(self):
        (insn,) = decode_instructions(bytes([0xC8]) + s4(-70000))
        assert insn.length == 5
        assert insn.branch == -70000


class TestSwitches:
    def test_tableswitch_padding_at_zero(self):
        code = bytes([0xAA, 0, 0, 0]) + s4(20) + s4(1) + s4(2) + s4(10) + s4(15)
        (insn,) = decode_instructions(code)
        assert isinstance(insn, TableSwitchInstruction)
        assert insn.length == len(code)
        assert (insn.low, insn.high) == (1, 2)
        assert insn.offsets == (10, 15)
        assert insn.targets == {1: 10, 2: 15}
        assert insn.default_target == 20

    def test_tableswitch_padding_depends_on_offset(self):
        # iload_0 at 0, then tableswitch at 1 needs two padding bytes
        code = bytes([0x1A, 0xAA, 0, 0]) + s4(8) + s4(0) + s4(0) + s4(4)
        insns = decode_instructions(code)
        switch = insns[1]
        assert switch.offset == 1
        assert switch.length == len(code) - 1
        assert switch.targets == {0: 5}

    def test_tableswitch_no_padding(self):
        code = bytes([0x00, 0x00, 0x00, 0xAA]) + s4(4) + s4(5) + s4(5) + s4(6)
        insns = decode_instructions(code)
        assert insns[3].length == 17
        assert insns[3].targets == {5: 9}

    def test_lookupswitch(self):
        code = bytes([0xAB, 0, 0, 0]) + s4(30) + s4(2) + s4(-1) + s4(10) + s4(100) + s4(20)
        (insn,) = decode_instructions(code)
        assert isinstance(insn, LookupSwitchInstruction)
        assert insn.pairs == ((-1, 10), (100, 20))
        assert insn.targets == {-1: 10, 100: 20}
        assert insn.default_target == 30
        assert insn.length == len(code)

    def test_switch_offset_relative_to_code_start(self):
        # Padding is computed from the code array, not the class file.
        code = bytes([0xAB, 0, 0, 0]) + s4(8) + s4(0)
        (insn,) = decode_instructions(code, base_offset=1001)
        assert insn.length == 12

    def test_truncated_switch(self):
        with pytest.raises(UnexpectedEnd):
            decode_instructions(bytes([0xAA, 0, 0, 0]) + s4(0) + s4(0) + s4(3))


class TestWide:
    def test_wide_iload(self):
        (insn,) = decode_instructions(bytes([0xC4, 0x15, 0x01, 0x00]))
        assert isinstance(insn, WideInstruction)
        assert insn.modified_opcode == Opcode.ILOAD
        assert insn.index == 256
        assert insn.delta is None
        assert insn.length == 4

    def test_wide_iinc(self):
        (insn,) = decode_instructions(bytes([0xC4, 0x84, 0x00, 0x05, 0xFF, 0x00]))
        assert insn.modified_opcode == Opcode.IINC
        assert (insn.index, insn.delta, insn.length) == (5, -256, 6)

    def test_wide_rejects_other_opcodes(self):
        with pytest.raises(UnknownOpcode) as exc_info:
            decode_instructions(bytes([0xC4, 0xB1]))
        assert exc_info.value.pc == 1


class TestErrors:
    @pytest.mark.parametrize("opcode", [0xCA, 0xCB, 0xFE, 0xFF])
    def test_unknown_opcode(self, opcode):
        with pytest.raises(UnknownOpcode) as exc_info:
            decode_instructions(bytes([0x00, opcode]), base_offset=50)
        assert exc_info.value.opcode == opcode
        assert exc_info.value.pc == 1
        assert exc_info.value.offset == 51

    def test_truncated_operand(self):
        with pytest.raises(UnexpectedEnd):
            decode_instructions(bytes([0xB7, 0x00]))

    def test_truncated_operand_reports_absolute_offset(self):
        with pytest.raises(UnexpectedEnd) as exc_info:
            decode_instructions(bytes([0x00, 0x10]), base_offset=20)
        assert exc_info.value.offset == 22


class TestIteration:
    def test_iter_is_lazy(self):
        # Decoding stops before reaching the bad opcode.
        it = iter_instructions(bytes([0x00, 0xFF]))
        assert next(it).opcode == Opcode.NOP
        with pytest.raises(UnknownOpcode):
            next(it)

    def test_iter_restarts(self):
        code = bytes([0x04, 0x05, 0x60, 0xAC])
        assert list(iter_instructions(code)) == list(iter_instructions(code))

    def test_every_opcode_has_operand_format(self):
        assert set(OPERAND_FORMATS) == set(Opcode)
        assert OPERAND_FORMATS[Opcode.WIDE] == OperandFormat.WIDE
