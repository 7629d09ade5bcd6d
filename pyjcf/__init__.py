"""pyjcf - a structural decoder for Java class files."""

from .attributes import (
    Attribute,
    CodeAttribute,
    ExceptionTableEntry,
    LineNumberEntry,
    LineNumberTableAttribute,
    OpaqueAttribute,
    SourceFileAttribute,
    find_attribute,
)
from .classfile import (
    ClassAccessFlags,
    ConstantPoolTag,
    FieldAccessFlags,
    MethodAccessFlags,
    Opcode,
)
from .classreader import ClassFile, ClassReader, DecodeResult, DecoderOptions, decode_class, read_class_file
from .constants import ConstantPool
from .errors import (
    AttributeLengthMismatch,
    AttributeNameNotUtf8,
    BadMagic,
    DecodeError,
    IndexOutOfRange,
    InvalidText,
    NestingTooDeep,
    TrailingData,
    UnexpectedEnd,
    UnknownConstantTag,
    UnknownOpcode,
)
from .instructions import Instruction, decode_instructions, iter_instructions
from .members import FieldRecord, MethodRecord
from .mutf8 import decode_modified_utf8

__version__ = "0.1.0"
__all__ = [
    "Attribute",
    "AttributeLengthMismatch",
    "AttributeNameNotUtf8",
    "BadMagic",
    "ClassAccessFlags",
    "ClassFile",
    "ClassReader",
    "CodeAttribute",
    "ConstantPool",
    "ConstantPoolTag",
    "DecodeError",
    "DecodeResult",
    "DecoderOptions",
    "ExceptionTableEntry",
    "FieldAccessFlags",
    "FieldRecord",
    "IndexOutOfRange",
    "Instruction",
    "InvalidText",
    "LineNumberEntry",
    "LineNumberTableAttribute",
    "MethodAccessFlags",
    "MethodRecord",
    "NestingTooDeep",
    "OpaqueAttribute",
    "Opcode",
    "SourceFileAttribute",
    "TrailingData",
    "UnexpectedEnd",
    "UnknownConstantTag",
    "UnknownOpcode",
    "decode_class",
    "decode_instructions",
    "decode_modified_utf8",
    "find_attribute",
    "iter_instructions",
    "read_class_file",
]
