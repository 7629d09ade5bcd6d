"""
Java class file reader.

Decodes a complete class file held in memory into an immutable ClassFile
record. Decoding is a pure function of the input bytes and options; each
ClassReader owns its own cursor, so separate buffers can be decoded
concurrently.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Optional

from .attributes import Attribute, SourceFileAttribute, find_attribute, read_attributes
from .classfile import MAGIC, ClassAccessFlags
from .constants import ConstantPool, read_constant_pool
from .errors import BadMagic, NestingTooDeep, TrailingData
from .members import FieldRecord, MethodRecord, read_field, read_method
from .nodes import Node
from .reader import ByteReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecoderOptions:
    """Knobs for how strictly the decoder treats questionable input."""
    # Treat bytes after the last class attribute as an error.
    strict: bool = False
    # Fail when a known attribute's body does not fill its declared length;
    # otherwise warn and continue at the declared end.
    check_attribute_lengths: bool = True


@dataclass(frozen=True)
class ClassFile(Node):
    """Parsed class file."""
    magic: int
    minor_version: int
    major_version: int
    constant_pool: ConstantPool
    access_flags: ClassAccessFlags
    this_class: int
    super_class: int  # 0 for java/lang/Object
    interfaces: tuple[int, ...]
    fields: tuple[FieldRecord, ...]
    methods: tuple[MethodRecord, ...]
    attributes: tuple[Attribute, ...]

    @property
    def version(self) -> tuple[int, int]:
        return self.major_version, self.minor_version

    def this_class_name(self) -> str:
        return self.constant_pool.class_name(self.this_class)

    def super_class_name(self) -> Optional[str]:
        if self.super_class == 0:
            return None
        return self.constant_pool.class_name(self.super_class)

    def interface_names(self) -> tuple[str, ...]:
        return tuple(self.constant_pool.class_name(idx) for idx in self.interfaces)

    def source_file(self) -> Optional[str]:
        attr = find_attribute(self.attributes, SourceFileAttribute)
        if attr is None:
            return None
        return self.constant_pool.utf8(attr.sourcefile_index)

    def find_method(self, name: str, descriptor: Optional[str] = None) -> Optional[MethodRecord]:
        """First method with the given name (and descriptor, if given)."""
        pool = self.constant_pool
        for method in self.methods:
            if method.name(pool) != name:
                continue
            if descriptor is None or method.descriptor(pool) == descriptor:
                return method
        return None


class DecodeResult(NamedTuple):
    class_file: ClassFile
    trailing: int  # unconsumed bytes after the last attribute


class ClassReader:
    """Reads Java class files."""

    def __init__(self, data: bytes, options: Optional[DecoderOptions] = None):
        self.reader = ByteReader(data)
        self.options = options or DecoderOptions()

    def read(self) -> DecodeResult:
        """Read the class file and return it with the trailing byte count."""
        r = self.reader
        check = self.options.check_attribute_lengths

        # Magic number
        magic = r.read_u4()
        if magic != MAGIC:
            raise BadMagic(magic, 0)

        # Version
        minor = r.read_u2()
        major = r.read_u2()

        # Constant pool; everything after this may resolve names through it
        pool = read_constant_pool(r)

        # Access flags
        access_flags = ClassAccessFlags(r.read_u2())

        # This/super class
        this_class_idx = r.read_u2()
        super_class_idx = r.read_u2()

        # Interfaces
        interfaces = r.read_u2_list()

        # Nested Code attributes and annotation values recurse.
        try:
            # Fields
            fields_count = r.read_u2()
            fields = tuple(read_field(r, pool, check) for _ in range(fields_count))

            # Methods
            methods_count = r.read_u2()
            methods = tuple(read_method(r, pool, check) for _ in range(methods_count))

            # Class attributes
            attrs = read_attributes(r, pool, check)
        except RecursionError:
            raise NestingTooDeep(r.offset) from None

        logger.debug("decoded class file %d.%d: %d field(s), %d method(s), %d attribute(s)",
                     major, minor, len(fields), len(methods), len(attrs))

        trailing = r.remaining()
        if trailing:
            if self.options.strict:
                raise TrailingData(trailing, r.offset)
            logger.warning("%d trailing byte(s) after class file at offset %d", trailing, r.offset)

        class_file = ClassFile(
            magic=magic,
            minor_version=minor,
            major_version=major,
            constant_pool=pool,
            access_flags=access_flags,
            this_class=this_class_idx,
            super_class=super_class_idx,
            interfaces=interfaces,
            fields=fields,
            methods=methods,
            attributes=attrs,
        )
        return DecodeResult(class_file, trailing)


def decode_class(data: bytes, options: Optional[DecoderOptions] = None) -> ClassFile:
    """Decode a class file held in memory."""
    return ClassReader(data, options).read().class_file


def read_class_file(path: str | Path, options: Optional[DecoderOptions] = None) -> ClassFile:
    """Read a single class file."""
    data = Path(path).read_bytes()
    return decode_class(data, options)
