"""
Bytecode instruction records and the instruction stream decoder.

Offsets are relative to the start of the code array. Branch operands are
kept as the raw signed displacement; ``target`` adds the instruction's own
offset.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .classfile import ArrayTypeCode, OPERAND_FORMATS, Opcode, OperandFormat, WIDENABLE_OPCODES
from .errors import UnknownOpcode
from .nodes import Node
from .reader import ByteReader


@dataclass(frozen=True)
class Instruction(Node):
    """Base class for decoded instructions."""
    opcode: Opcode
    offset: int
    length: int

    @property
    def mnemonic(self) -> str:
        return self.opcode.name.lower()

    def operand_text(self, pool=None) -> str:
        return ""


@dataclass(frozen=True)
class SimpleInstruction(Instruction):
    """Instruction without operands."""


@dataclass(frozen=True)
class LocalVariableInstruction(Instruction):
    """Load, store or ret with a u1 local variable index."""
    index: int

    def operand_text(self, pool=None) -> str:
        return str(self.index)


@dataclass(frozen=True)
class PushInstruction(Instruction):
    """bipush / sipush."""
    value: int

    def operand_text(self, pool=None) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ConstantInstruction(Instruction):
    """Instruction whose operand is a constant pool index."""
    index: int

    def operand_text(self, pool=None) -> str:
        if pool is None:
            return f"#{self.index}"
        return f"#{self.index} // {pool.describe(self.index)}"


@dataclass(frozen=True)
class BranchInstruction(Instruction):
    branch: int

    @property
    def target(self) -> int:
        return self.offset + self.branch

    def operand_text(self, pool=None) -> str:
        return str(self.target)


@dataclass(frozen=True)
class IincInstruction(Instruction):
    index: int
    delta: int

    def operand_text(self, pool=None) -> str:
        return f"{self.index}, {self.delta}"


@dataclass(frozen=True)
class NewArrayInstruction(Instruction):
    atype: int

    @property
    def array_type(self) -> Optional[ArrayTypeCode]:
        try:
            return ArrayTypeCode(self.atype)
        except ValueError:
            return None

    def operand_text(self, pool=None) -> str:
        array_type = self.array_type
        return array_type.name[2:].lower() if array_type else str(self.atype)


@dataclass(frozen=True)
class MultiANewArrayInstruction(ConstantInstruction):
    dimensions: int

    def operand_text(self, pool=None) -> str:
        return f"{super().operand_text(pool)}, {self.dimensions}"


@dataclass(frozen=True)
class InvokeInterfaceInstruction(ConstantInstruction):
    count: int

    def operand_text(self, pool=None) -> str:
        return f"{super().operand_text(pool)}, {self.count}"


@dataclass(frozen=True)
class InvokeDynamicInstruction(ConstantInstruction):
    """invokedynamic; the two trailing zero bytes are not kept."""


@dataclass(frozen=True)
class TableSwitchInstruction(Instruction):
    default: int
    low: int
    high: int
    offsets: tuple[int, ...]

    @property
    def targets(self) -> dict[int, int]:
        return {self.low + i: self.offset + rel for i, rel in enumerate(self.offsets)}

    @property
    def default_target(self) -> int:
        return self.offset + self.default

    def operand_text(self, pool=None) -> str:
        cases = ", ".join(f"{key}: {target}" for key, target in self.targets.items())
        return f"{{ {cases}, default: {self.default_target} }}"


@dataclass(frozen=True)
class LookupSwitchInstruction(Instruction):
    default: int
    pairs: tuple[tuple[int, int], ...]  # (match, relative offset)

    @property
    def targets(self) -> dict[int, int]:
        return {match: self.offset + rel for match, rel in self.pairs}

    @property
    def default_target(self) -> int:
        return self.offset + self.default

    def operand_text(self, pool=None) -> str:
        cases = ", ".join(f"{key}: {target}" for key, target in self.targets.items())
        return f"{{ {cases}, default: {self.default_target} }}"


@dataclass(frozen=True)
class WideInstruction(Instruction):
    """wide prefix applied to a load, store, ret or iinc."""
    modified_opcode: Opcode
    index: int
    delta: Optional[int] = None  # iinc only

    def operand_text(self, pool=None) -> str:
        text = f"{self.modified_opcode.name.lower()} {self.index}"
        if self.delta is not None:
            text += f", {self.delta}"
        return text


def _read_opcode(reader: ByteReader, pc: int) -> Opcode:
    value = reader.read_u1()
    try:
        return Opcode(value)
    except ValueError:
        raise UnknownOpcode(value, pc, reader.base + pc) from None


def _read_simple(reader: ByteReader, opcode: Opcode, pc: int) -> Instruction:
    return SimpleInstruction(opcode, pc, 1)


def _read_local(reader, opcode, pc):
    return LocalVariableInstruction(opcode, pc, 2, reader.read_u1())


def _read_byte(reader, opcode, pc):
    return PushInstruction(opcode, pc, 2, reader.read_s1())


def _read_short(reader, opcode, pc):
    return PushInstruction(opcode, pc, 3, reader.read_s2())


def _read_constant_u1(reader, opcode, pc):
    return ConstantInstruction(opcode, pc, 2, reader.read_u1())


def _read_constant(reader, opcode, pc):
    return ConstantInstruction(opcode, pc, 3, reader.read_u2())


def _read_branch(reader, opcode, pc):
    return BranchInstruction(opcode, pc, 3, reader.read_s2())


def _read_branch_wide(reader, opcode, pc):
    return BranchInstruction(opcode, pc, 5, reader.read_s4())


def _read_iinc(reader, opcode, pc):
    index = reader.read_u1()
    return IincInstruction(opcode, pc, 3, index, reader.read_s1())


def _read_newarray(reader, opcode, pc):
    return NewArrayInstruction(opcode, pc, 2, reader.read_u1())


def _read_multianewarray(reader, opcode, pc):
    index = reader.read_u2()
    return MultiANewArrayInstruction(opcode, pc, 4, index, reader.read_u1())


def _read_invokeinterface(reader, opcode, pc):
    index = reader.read_u2()
    count = reader.read_u1()
    reader.skip(1)
    return InvokeInterfaceInstruction(opcode, pc, 5, index, count)


def _read_invokedynamic(reader, opcode, pc):
    index = reader.read_u2()
    reader.skip(2)
    return InvokeDynamicInstruction(opcode, pc, 5, index)


def _skip_switch_padding(reader: ByteReader, pc: int):
    # Operands start at the next multiple of 4 from the start of the code.
    reader.skip((3 - pc) % 4)


def _read_tableswitch(reader, opcode, pc):
    _skip_switch_padding(reader, pc)
    default = reader.read_s4()
    low = reader.read_s4()
    high = reader.read_s4()
    offsets = tuple(reader.read_s4() for _ in range(high - low + 1))
    return TableSwitchInstruction(opcode, pc, reader.pos - pc, default, low, high, offsets)


def _read_lookupswitch(reader, opcode, pc):
    _skip_switch_padding(reader, pc)
    default = reader.read_s4()
    npairs = reader.read_s4()
    pairs = []
    for _ in range(npairs):
        match = reader.read_s4()
        pairs.append((match, reader.read_s4()))
    return LookupSwitchInstruction(opcode, pc, reader.pos - pc, default, tuple(pairs))


def _read_wide(reader, opcode, pc):
    modified_pc = reader.pos
    modified = _read_opcode(reader, modified_pc)
    if modified not in WIDENABLE_OPCODES:
        raise UnknownOpcode(int(modified), modified_pc, reader.base + modified_pc)
    index = reader.read_u2()
    if modified == Opcode.IINC:
        return WideInstruction(opcode, pc, 6, modified, index, reader.read_s2())
    return WideInstruction(opcode, pc, 4, modified, index)


_OPERAND_READERS: dict[OperandFormat, Callable[[ByteReader, Opcode, int], Instruction]] = {
    OperandFormat.NONE: _read_simple,
    OperandFormat.LOCAL: _read_local,
    OperandFormat.BYTE: _read_byte,
    OperandFormat.SHORT: _read_short,
    OperandFormat.CONSTANT_U1: _read_constant_u1,
    OperandFormat.CONSTANT: _read_constant,
    OperandFormat.BRANCH: _read_branch,
    OperandFormat.BRANCH_WIDE: _read_branch_wide,
    OperandFormat.IINC: _read_iinc,
    OperandFormat.NEWARRAY: _read_newarray,
    OperandFormat.MULTIANEWARRAY: _read_multianewarray,
    OperandFormat.INVOKEINTERFACE: _read_invokeinterface,
    OperandFormat.INVOKEDYNAMIC: _read_invokedynamic,
    OperandFormat.TABLESWITCH: _read_tableswitch,
    OperandFormat.LOOKUPSWITCH: _read_lookupswitch,
    OperandFormat.WIDE: _read_wide,
}


def read_instruction(reader: ByteReader) -> Instruction:
    """Decode one instruction at the reader's position."""
    pc = reader.pos
    opcode = _read_opcode(reader, pc)
    return _OPERAND_READERS[OPERAND_FORMATS[opcode]](reader, opcode, pc)


def iter_instructions(code: bytes, base_offset: int = 0) -> Iterator[Instruction]:
    """Lazily decode ``code``; each call starts again from the beginning.

    ``base_offset`` is the position of ``code`` in the class file and only
    affects reported error offsets.
    """
    reader = ByteReader(code, base_offset)
    while not reader.at_end():
        yield read_instruction(reader)


def decode_instructions(code: bytes, base_offset: int = 0) -> tuple[Instruction, ...]:
    return tuple(iter_instructions(code, base_offset))
