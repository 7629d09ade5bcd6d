"""
Constant pool entries and the constant pool decoder.

Entries store raw indices; nothing is resolved while decoding. The
ConstantPool wrapper resolves indices on demand.
"""

import logging
import struct
from dataclasses import dataclass
from typing import ClassVar, Iterator, Optional

from .classfile import ConstantPoolTag, MethodHandleKind
from .errors import ConstantKindMismatch, IndexOutOfRange, UnknownConstantTag
from .mutf8 import decode_modified_utf8
from .nodes import Node
from .reader import ByteReader

logger = logging.getLogger(__name__)


class ConstantEntry(Node):
    """Base class for constant pool entries."""
    tag: ClassVar[Optional[ConstantPoolTag]] = None


@dataclass(frozen=True)
class Placeholder(ConstantEntry):
    """Slot 0, and the unusable slot following a Long or Double."""


@dataclass(frozen=True)
class Utf8(ConstantEntry):
    tag = ConstantPoolTag.UTF8
    value: str


@dataclass(frozen=True)
class IntegerConstant(ConstantEntry):
    tag = ConstantPoolTag.INTEGER
    bytes: int

    @property
    def value(self) -> int:
        return struct.unpack(">i", struct.pack(">I", self.bytes))[0]


@dataclass(frozen=True)
class FloatConstant(ConstantEntry):
    tag = ConstantPoolTag.FLOAT
    bytes: int

    @property
    def value(self) -> float:
        return struct.unpack(">f", struct.pack(">I", self.bytes))[0]


@dataclass(frozen=True)
class LongConstant(ConstantEntry):
    tag = ConstantPoolTag.LONG
    high_bytes: int
    low_bytes: int

    @property
    def value(self) -> int:
        return struct.unpack(">q", struct.pack(">II", self.high_bytes, self.low_bytes))[0]


@dataclass(frozen=True)
class DoubleConstant(ConstantEntry):
    tag = ConstantPoolTag.DOUBLE
    high_bytes: int
    low_bytes: int

    @property
    def value(self) -> float:
        return struct.unpack(">d", struct.pack(">II", self.high_bytes, self.low_bytes))[0]


@dataclass(frozen=True)
class ClassRef(ConstantEntry):
    tag = ConstantPoolTag.CLASS
    name_index: int


@dataclass(frozen=True)
class StringRef(ConstantEntry):
    tag = ConstantPoolTag.STRING
    string_index: int


@dataclass(frozen=True)
class FieldRef(ConstantEntry):
    tag = ConstantPoolTag.FIELDREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class MethodRef(ConstantEntry):
    tag = ConstantPoolTag.METHODREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class InterfaceMethodRef(ConstantEntry):
    tag = ConstantPoolTag.INTERFACE_METHODREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class NameAndType(ConstantEntry):
    tag = ConstantPoolTag.NAME_AND_TYPE
    name_index: int
    descriptor_index: int


@dataclass(frozen=True)
class MethodHandle(ConstantEntry):
    tag = ConstantPoolTag.METHOD_HANDLE
    reference_kind: int  # 1..9
    reference_index: int

    @property
    def kind(self) -> Optional[MethodHandleKind]:
        try:
            return MethodHandleKind(self.reference_kind)
        except ValueError:
            return None


@dataclass(frozen=True)
class MethodType(ConstantEntry):
    tag = ConstantPoolTag.METHOD_TYPE
    descriptor_index: int


@dataclass(frozen=True)
class InvokeDynamic(ConstantEntry):
    tag = ConstantPoolTag.INVOKE_DYNAMIC
    bootstrap_method_attr_index: int
    name_and_type_index: int


PLACEHOLDER = Placeholder()

MemberRefEntry = (FieldRef, MethodRef, InterfaceMethodRef)


@dataclass(frozen=True)
class ConstantPool(Node):
    """The decoded constant pool, 1-indexed (slot 0 is a placeholder)."""
    entries: tuple[ConstantEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ConstantEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> ConstantEntry:
        if not 0 <= index < len(self.entries):
            raise IndexOutOfRange(index, len(self.entries))
        return self.entries[index]

    def _expect(self, index: int, *kinds: type) -> ConstantEntry:
        entry = self[index]
        if not isinstance(entry, kinds):
            expected = "/".join(k.__name__ for k in kinds)
            raise ConstantKindMismatch(index, expected, type(entry).__name__)
        return entry

    def utf8(self, index: int) -> str:
        """Get UTF8 string from constant pool."""
        return self._expect(index, Utf8).value

    def class_name(self, index: int) -> str:
        """Get class name from constant pool."""
        return self.utf8(self._expect(index, ClassRef).name_index)

    def string(self, index: int) -> str:
        return self.utf8(self._expect(index, StringRef).string_index)

    def name_and_type(self, index: int) -> tuple[str, str]:
        entry = self._expect(index, NameAndType)
        return self.utf8(entry.name_index), self.utf8(entry.descriptor_index)

    def member_ref(self, index: int) -> tuple[str, str, str]:
        """Resolve a field/method/interface method ref to (owner, name, descriptor)."""
        entry = self._expect(index, *MemberRefEntry)
        name, descriptor = self.name_and_type(entry.name_and_type_index)
        return self.class_name(entry.class_index), name, descriptor

    def describe(self, index: int) -> str:
        """Render an entry for listings, e.g. 'Method java/lang/Object.<init>:()V'."""
        entry = self[index]
        if isinstance(entry, Utf8):
            return entry.value
        if isinstance(entry, ClassRef):
            return f"class {self.class_name(index)}"
        if isinstance(entry, StringRef):
            return f"String {self.string(index)!r}"
        if isinstance(entry, (IntegerConstant, FloatConstant, LongConstant, DoubleConstant)):
            return f"{type(entry).__name__.removesuffix('Constant').lower()} {entry.value!r}"
        if isinstance(entry, MemberRefEntry):
            owner, name, descriptor = self.member_ref(index)
            kind = "Field" if isinstance(entry, FieldRef) else "Method"
            return f"{kind} {owner}.{name}:{descriptor}"
        if isinstance(entry, NameAndType):
            name, descriptor = self.name_and_type(index)
            return f"NameAndType {name}:{descriptor}"
        if isinstance(entry, MethodHandle):
            kind = entry.kind.name if entry.kind else str(entry.reference_kind)
            return f"MethodHandle {kind} #{entry.reference_index}"
        if isinstance(entry, MethodType):
            return f"MethodType {self.utf8(entry.descriptor_index)}"
        if isinstance(entry, InvokeDynamic):
            name, descriptor = self.name_and_type(entry.name_and_type_index)
            return f"InvokeDynamic #{entry.bootstrap_method_attr_index}:{name}:{descriptor}"
        return "<unusable>"


def read_constant_pool(reader: ByteReader) -> ConstantPool:
    """Read the constant pool count and entries."""
    count = reader.read_u2()
    entries: list[ConstantEntry] = [PLACEHOLDER]  # 1-indexed
    i = 1
    while i < count:
        start = reader.offset
        tag = reader.read_u1()

        if tag == ConstantPoolTag.UTF8:
            length = reader.read_u2()
            text_offset = reader.offset
            entry = Utf8(decode_modified_utf8(reader.read_bytes(length), text_offset))

        elif tag == ConstantPoolTag.INTEGER:
            entry = IntegerConstant(reader.read_u4())

        elif tag == ConstantPoolTag.FLOAT:
            entry = FloatConstant(reader.read_u4())

        elif tag == ConstantPoolTag.LONG:
            entry = LongConstant(reader.read_u4(), reader.read_u4())

        elif tag == ConstantPoolTag.DOUBLE:
            entry = DoubleConstant(reader.read_u4(), reader.read_u4())

        elif tag == ConstantPoolTag.CLASS:
            entry = ClassRef(reader.read_u2())

        elif tag == ConstantPoolTag.STRING:
            entry = StringRef(reader.read_u2())

        elif tag == ConstantPoolTag.FIELDREF:
            entry = FieldRef(reader.read_u2(), reader.read_u2())

        elif tag == ConstantPoolTag.METHODREF:
            entry = MethodRef(reader.read_u2(), reader.read_u2())

        elif tag == ConstantPoolTag.INTERFACE_METHODREF:
            entry = InterfaceMethodRef(reader.read_u2(), reader.read_u2())

        elif tag == ConstantPoolTag.NAME_AND_TYPE:
            entry = NameAndType(reader.read_u2(), reader.read_u2())

        elif tag == ConstantPoolTag.METHOD_HANDLE:
            entry = MethodHandle(reader.read_u1(), reader.read_u2())

        elif tag == ConstantPoolTag.METHOD_TYPE:
            entry = MethodType(reader.read_u2())

        elif tag == ConstantPoolTag.INVOKE_DYNAMIC:
            entry = InvokeDynamic(reader.read_u2(), reader.read_u2())

        else:
            raise UnknownConstantTag(tag, i, start)

        entries.append(entry)
        if tag in (ConstantPoolTag.LONG, ConstantPoolTag.DOUBLE):
            # Long and Double take two slots; the table never grows past count.
            if i + 1 < count:
                entries.append(PLACEHOLDER)
            i += 2
        else:
            i += 1

    logger.debug("constant pool: %d slot(s)", len(entries))
    return ConstantPool(tuple(entries))
