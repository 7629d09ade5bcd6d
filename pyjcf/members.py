"""
Field and method records.

Both share one layout: access flags, name index, descriptor index and an
attribute list. Only the flag vocabulary differs.
"""

from dataclasses import dataclass
from enum import IntFlag
from typing import Optional

from .attributes import (
    Attribute,
    CodeAttribute,
    ConstantValueAttribute,
    ExceptionsAttribute,
    find_attribute,
    read_attributes,
)
from .classfile import FieldAccessFlags, MethodAccessFlags
from .constants import ConstantPool
from .descriptors import FieldType, MethodDescriptor, parse_field_descriptor, parse_method_descriptor
from .nodes import Node
from .reader import ByteReader


@dataclass(frozen=True)
class MemberRecord(Node):
    access_flags: IntFlag
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...]

    def name(self, pool: ConstantPool) -> str:
        return pool.utf8(self.name_index)

    def descriptor(self, pool: ConstantPool) -> str:
        return pool.utf8(self.descriptor_index)


@dataclass(frozen=True)
class FieldRecord(MemberRecord):
    """Field in a class file."""
    access_flags: FieldAccessFlags

    def field_type(self, pool: ConstantPool) -> FieldType:
        return parse_field_descriptor(self.descriptor(pool))

    @property
    def constant_value(self) -> Optional[ConstantValueAttribute]:
        return find_attribute(self.attributes, ConstantValueAttribute)


@dataclass(frozen=True)
class MethodRecord(MemberRecord):
    """Method in a class file."""
    access_flags: MethodAccessFlags

    def method_descriptor(self, pool: ConstantPool) -> MethodDescriptor:
        return parse_method_descriptor(self.descriptor(pool))

    @property
    def code(self) -> Optional[CodeAttribute]:
        return find_attribute(self.attributes, CodeAttribute)

    def exceptions(self, pool: ConstantPool) -> tuple[str, ...]:
        """Names of the declared checked exceptions."""
        attr = find_attribute(self.attributes, ExceptionsAttribute)
        if attr is None:
            return ()
        return tuple(pool.class_name(idx) for idx in attr.exception_index_table)


def _read_member(reader: ByteReader, pool: ConstantPool, flags: type[IntFlag],
                 record: type[MemberRecord], check_lengths: bool) -> MemberRecord:
    # Unknown flag bits are kept as-is.
    access = flags(reader.read_u2())
    name_idx = reader.read_u2()
    desc_idx = reader.read_u2()
    attrs = read_attributes(reader, pool, check_lengths)
    return record(access, name_idx, desc_idx, attrs)


def read_field(reader: ByteReader, pool: ConstantPool, check_lengths: bool = True) -> FieldRecord:
    """Read a field."""
    return _read_member(reader, pool, FieldAccessFlags, FieldRecord, check_lengths)


def read_method(reader: ByteReader, pool: ConstantPool, check_lengths: bool = True) -> MethodRecord:
    """Read a method."""
    return _read_member(reader, pool, MethodAccessFlags, MethodRecord, check_lengths)
