"""
Attribute records and the attribute decoder.

An attribute body can only be interpreted once its name index has been
resolved through the constant pool, so the decoder takes the fully decoded
pool as a read-only input. Unrecognised names decode as opaque bytes.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .classfile import NestedClassAccessFlags, ParameterAccessFlags
from .constants import ConstantPool, Utf8
from .errors import (
    AttributeLengthMismatch,
    AttributeNameNotUtf8,
    IndexOutOfRange,
    UnknownElementTag,
)
from .instructions import Instruction, decode_instructions
from .nodes import Node
from .reader import ByteReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attribute(Node):
    """Base class for attributes."""
    name_index: int

    def name(self, pool: ConstantPool) -> str:
        return pool.utf8(self.name_index)


@dataclass(frozen=True)
class OpaqueAttribute(Attribute):
    """Attribute with an unrecognised name; the body is kept verbatim."""
    info: bytes


@dataclass(frozen=True)
class ExceptionTableEntry(Node):
    """An entry in the exception table."""
    start_pc: int
    end_pc: int  # exclusive
    handler_pc: int
    catch_type: int  # 0 for finally (catches all), otherwise constant pool index of class


@dataclass(frozen=True)
class CodeAttribute(Attribute):
    """Code attribute for a method."""
    max_stack: int
    max_locals: int
    code_length: int
    code: tuple[Instruction, ...]
    exception_table: tuple[ExceptionTableEntry, ...]
    attributes: tuple[Attribute, ...]

    def instruction_at(self, offset: int) -> Optional[Instruction]:
        """Return the instruction starting at ``offset``, if any."""
        for instruction in self.code:
            if instruction.offset == offset:
                return instruction
            if instruction.offset > offset:
                break
        return None

    def line_numbers(self) -> tuple["LineNumberEntry", ...]:
        """All line number entries from nested LineNumberTable attributes."""
        entries = []
        for attr in self.attributes:
            if isinstance(attr, LineNumberTableAttribute):
                entries.extend(attr.line_number_table)
        return tuple(entries)


@dataclass(frozen=True)
class LineNumberEntry(Node):
    start_pc: int
    line_number: int


@dataclass(frozen=True)
class LineNumberTableAttribute(Attribute):
    line_number_table: tuple[LineNumberEntry, ...]


@dataclass(frozen=True)
class SourceFileAttribute(Attribute):
    sourcefile_index: int


@dataclass(frozen=True)
class ConstantValueAttribute(Attribute):
    constantvalue_index: int


@dataclass(frozen=True)
class SignatureAttribute(Attribute):
    signature_index: int


@dataclass(frozen=True)
class ExceptionsAttribute(Attribute):
    exception_index_table: tuple[int, ...]


@dataclass(frozen=True)
class InnerClassEntry(Node):
    """Represents an entry in the InnerClasses attribute."""
    inner_class_info_index: int
    outer_class_info_index: int  # 0 for anonymous/local
    inner_name_index: int  # 0 for anonymous
    inner_class_access_flags: NestedClassAccessFlags


@dataclass(frozen=True)
class InnerClassesAttribute(Attribute):
    classes: tuple[InnerClassEntry, ...]


@dataclass(frozen=True)
class BootstrapMethod(Node):
    bootstrap_method_ref: int
    bootstrap_arguments: tuple[int, ...]


@dataclass(frozen=True)
class BootstrapMethodsAttribute(Attribute):
    bootstrap_methods: tuple[BootstrapMethod, ...]


@dataclass(frozen=True)
class LocalVariableEntry(Node):
    start_pc: int
    length: int
    name_index: int
    descriptor_index: int
    index: int


@dataclass(frozen=True)
class LocalVariableTableAttribute(Attribute):
    local_variable_table: tuple[LocalVariableEntry, ...]


@dataclass(frozen=True)
class MethodParameter(Node):
    name_index: int  # 0 for a formal parameter without a name
    access_flags: ParameterAccessFlags


@dataclass(frozen=True)
class MethodParametersAttribute(Attribute):
    parameters: tuple[MethodParameter, ...]


class ElementValue(Node):
    """Base class for annotation element values."""


@dataclass(frozen=True)
class ConstElementValue(ElementValue):
    tag: str  # one of BCDFIJSZs
    const_value_index: int


@dataclass(frozen=True)
class EnumElementValue(ElementValue):
    type_name_index: int
    const_name_index: int


@dataclass(frozen=True)
class ClassElementValue(ElementValue):
    class_info_index: int


@dataclass(frozen=True)
class AnnotationElementValue(ElementValue):
    annotation: "Annotation"


@dataclass(frozen=True)
class ArrayElementValue(ElementValue):
    values: tuple[ElementValue, ...]


@dataclass(frozen=True)
class ElementValuePair(Node):
    element_name_index: int
    value: ElementValue


@dataclass(frozen=True)
class Annotation(Node):
    """A parsed annotation."""
    type_index: int
    element_value_pairs: tuple[ElementValuePair, ...]


@dataclass(frozen=True)
class AnnotationsAttribute(Attribute):
    """RuntimeVisibleAnnotations or RuntimeInvisibleAnnotations."""
    annotations: tuple[Annotation, ...]


@dataclass(frozen=True)
class ParameterAnnotationsAttribute(Attribute):
    """RuntimeVisibleParameterAnnotations or RuntimeInvisibleParameterAnnotations."""
    parameter_annotations: tuple[tuple[Annotation, ...], ...]


@dataclass(frozen=True)
class AnnotationDefaultAttribute(Attribute):
    default_value: ElementValue


A = TypeVar("A", bound=Attribute)


def find_attribute(attributes: tuple[Attribute, ...], kind: type[A]) -> Optional[A]:
    """First attribute of the given record type, or None."""
    for attr in attributes:
        if isinstance(attr, kind):
            return attr
    return None


def _read_element_value(reader: ByteReader) -> ElementValue:
    """Read an annotation element value."""
    offset = reader.offset
    tag = reader.read_u1()
    ch = chr(tag)

    if ch in "BCDFIJSZs":
        return ConstElementValue(ch, reader.read_u2())

    elif ch == "e":
        type_idx = reader.read_u2()
        return EnumElementValue(type_idx, reader.read_u2())

    elif ch == "c":
        return ClassElementValue(reader.read_u2())

    elif ch == "@":
        return AnnotationElementValue(_read_annotation(reader))

    elif ch == "[":
        num_values = reader.read_u2()
        return ArrayElementValue(tuple(_read_element_value(reader) for _ in range(num_values)))

    raise UnknownElementTag(tag, offset)


def _read_annotation(reader: ByteReader) -> Annotation:
    """Read a single annotation."""
    type_idx = reader.read_u2()
    num_pairs = reader.read_u2()
    pairs = []
    for _ in range(num_pairs):
        name_idx = reader.read_u2()
        pairs.append(ElementValuePair(name_idx, _read_element_value(reader)))
    return Annotation(type_idx, tuple(pairs))


def _read_annotations(reader: ByteReader) -> tuple[Annotation, ...]:
    num_annotations = reader.read_u2()
    return tuple(_read_annotation(reader) for _ in range(num_annotations))


def _read_code(reader: ByteReader, pool: ConstantPool, name_index: int,
               check_lengths: bool) -> CodeAttribute:
    max_stack = reader.read_u2()
    max_locals = reader.read_u2()
    code_length = reader.read_u4()
    code_offset = reader.offset
    code = decode_instructions(reader.read_bytes(code_length), code_offset)
    exception_table_length = reader.read_u2()
    exception_table = tuple(
        ExceptionTableEntry(reader.read_u2(), reader.read_u2(), reader.read_u2(), reader.read_u2())
        for _ in range(exception_table_length)
    )
    # Nested attributes go through the same entry point, so a Code
    # attribute may itself contain further Code attributes.
    attributes = read_attributes(reader, pool, check_lengths)
    return CodeAttribute(name_index, max_stack, max_locals, code_length, code,
                         exception_table, attributes)


def _read_line_number_table(reader, pool, name_index, check_lengths):
    length = reader.read_u2()
    return LineNumberTableAttribute(
        name_index,
        tuple(LineNumberEntry(reader.read_u2(), reader.read_u2()) for _ in range(length)),
    )


def _read_source_file(reader, pool, name_index, check_lengths):
    return SourceFileAttribute(name_index, reader.read_u2())


def _read_constant_value(reader, pool, name_index, check_lengths):
    return ConstantValueAttribute(name_index, reader.read_u2())


def _read_signature(reader, pool, name_index, check_lengths):
    return SignatureAttribute(name_index, reader.read_u2())


def _read_exceptions(reader, pool, name_index, check_lengths):
    return ExceptionsAttribute(name_index, reader.read_u2_list())


def _read_inner_classes(reader, pool, name_index, check_lengths):
    num_classes = reader.read_u2()
    inner = []
    for _ in range(num_classes):
        inner_class_idx = reader.read_u2()
        outer_class_idx = reader.read_u2()
        inner_name_idx = reader.read_u2()
        inner_access = NestedClassAccessFlags(reader.read_u2())
        inner.append(InnerClassEntry(inner_class_idx, outer_class_idx, inner_name_idx, inner_access))
    return InnerClassesAttribute(name_index, tuple(inner))


def _read_bootstrap_methods(reader, pool, name_index, check_lengths):
    num_methods = reader.read_u2()
    methods = []
    for _ in range(num_methods):
        method_ref = reader.read_u2()
        methods.append(BootstrapMethod(method_ref, reader.read_u2_list()))
    return BootstrapMethodsAttribute(name_index, tuple(methods))


def _read_local_variable_table(reader, pool, name_index, check_lengths):
    length = reader.read_u2()
    return LocalVariableTableAttribute(
        name_index,
        tuple(LocalVariableEntry(reader.read_u2(), reader.read_u2(), reader.read_u2(),
                                 reader.read_u2(), reader.read_u2())
              for _ in range(length)),
    )


def _read_method_parameters(reader, pool, name_index, check_lengths):
    count = reader.read_u1()  # parameters_count is a u1
    params = []
    for _ in range(count):
        name_idx = reader.read_u2()
        params.append(MethodParameter(name_idx, ParameterAccessFlags(reader.read_u2())))
    return MethodParametersAttribute(name_index, tuple(params))


def _read_annotations_attribute(reader, pool, name_index, check_lengths):
    return AnnotationsAttribute(name_index, _read_annotations(reader))


def _read_parameter_annotations(reader, pool, name_index, check_lengths):
    num_parameters = reader.read_u1()
    return ParameterAnnotationsAttribute(
        name_index, tuple(_read_annotations(reader) for _ in range(num_parameters)))


def _read_annotation_default(reader, pool, name_index, check_lengths):
    return AnnotationDefaultAttribute(name_index, _read_element_value(reader))


_ATTRIBUTE_READERS: dict[str, Callable[[ByteReader, ConstantPool, int, bool], Attribute]] = {
    "Code": _read_code,
    "LineNumberTable": _read_line_number_table,
    "SourceFile": _read_source_file,
    "ConstantValue": _read_constant_value,
    "Signature": _read_signature,
    "Exceptions": _read_exceptions,
    "InnerClasses": _read_inner_classes,
    "BootstrapMethods": _read_bootstrap_methods,
    "LocalVariableTable": _read_local_variable_table,
    "MethodParameters": _read_method_parameters,
    "RuntimeVisibleAnnotations": _read_annotations_attribute,
    "RuntimeInvisibleAnnotations": _read_annotations_attribute,
    "RuntimeVisibleParameterAnnotations": _read_parameter_annotations,
    "RuntimeInvisibleParameterAnnotations": _read_parameter_annotations,
    "AnnotationDefault": _read_annotation_default,
}


def _attribute_name(pool: ConstantPool, index: int, offset: int) -> str:
    if not 0 <= index < len(pool):
        raise IndexOutOfRange(index, len(pool), offset)
    entry = pool[index]
    if not isinstance(entry, Utf8):
        raise AttributeNameNotUtf8(index, type(entry).__name__, offset)
    return entry.value


def read_attribute(reader: ByteReader, pool: ConstantPool,
                   check_lengths: bool = True) -> Attribute:
    """Read one attribute.

    Known shapes are decoded from the stream and then checked against the
    declared length. With ``check_lengths`` off, a mismatch is logged and
    the cursor moves to the declared end instead.
    """
    start = reader.offset
    name_index = reader.read_u2()
    length = reader.read_u4()
    name = _attribute_name(pool, name_index, start)

    read_body = _ATTRIBUTE_READERS.get(name)
    if read_body is None:
        return OpaqueAttribute(name_index, reader.read_bytes(length))

    body_start = reader.pos
    attribute = read_body(reader, pool, name_index, check_lengths)
    consumed = reader.pos - body_start
    if consumed != length:
        if check_lengths:
            raise AttributeLengthMismatch(name, length, consumed, start)
        logger.warning("attribute %r at offset %d declares %d byte(s) but its body is %d; "
                       "skipping to the declared end", name, start, length, consumed)
        reader.seek(body_start + length)
    return attribute


def read_attributes(reader: ByteReader, pool: ConstantPool,
                    check_lengths: bool = True) -> tuple[Attribute, ...]:
    """Read a u2 count followed by that many attributes."""
    count = reader.read_u2()
    return tuple(read_attribute(reader, pool, check_lengths) for _ in range(count))
