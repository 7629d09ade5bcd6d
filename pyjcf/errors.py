"""
Exceptions raised while decoding class files.

Every failure reachable from input bytes is a DecodeError subclass; the
class name is the error kind reported to callers.
"""

from typing import Optional


class DecodeError(Exception):
    """Error during decoding."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.offset = offset

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message} (at offset {self.offset})"


class UnexpectedEnd(DecodeError):
    """Buffer exhausted mid-read."""

    def __init__(self, wanted: int, available: int, offset: int):
        super().__init__(
            f"Unexpected end of input: wanted {wanted} byte(s), {available} left", offset)
        self.wanted = wanted
        self.available = available


class BadMagic(DecodeError):
    def __init__(self, magic: int, offset: int = 0):
        super().__init__(f"Invalid class file magic: {magic:#010x}", offset)
        self.magic = magic


class UnknownConstantTag(DecodeError):
    def __init__(self, tag: int, index: int, offset: int):
        super().__init__(f"Unknown constant pool tag {tag} at index {index}", offset)
        self.tag = tag
        self.index = index


class UnknownOpcode(DecodeError):
    def __init__(self, opcode: int, pc: int, offset: int):
        super().__init__(f"Unknown opcode {opcode:#04x} at pc {pc}", offset)
        self.opcode = opcode
        self.pc = pc


class IndexOutOfRange(DecodeError):
    """A constant pool index points outside the table."""

    def __init__(self, index: int, size: int, offset: Optional[int] = None):
        super().__init__(f"Constant pool index {index} out of range (pool size {size})", offset)
        self.index = index
        self.size = size


class AttributeNameNotUtf8(DecodeError):
    def __init__(self, index: int, found: str, offset: int):
        super().__init__(f"Attribute name index {index} refers to {found}, expected Utf8", offset)
        self.index = index
        self.found = found


class InvalidText(DecodeError):
    """Malformed modified UTF-8."""

    def __init__(self, reason: str, position: int, offset: Optional[int] = None):
        super().__init__(f"Invalid modified UTF-8 at byte {position}: {reason}", offset)
        self.reason = reason
        self.position = position


class AttributeLengthMismatch(DecodeError):
    def __init__(self, name: str, declared: int, consumed: int, offset: int):
        super().__init__(
            f"Attribute {name!r} declares {declared} byte(s) but its body is {consumed}", offset)
        self.name = name
        self.declared = declared
        self.consumed = consumed


class TrailingData(DecodeError):
    def __init__(self, length: int, offset: int):
        super().__init__(f"{length} trailing byte(s) after class file", offset)
        self.length = length


class NestingTooDeep(DecodeError):
    """Nested attributes or annotation values exceed the interpreter's recursion limit."""

    def __init__(self, offset: int):
        super().__init__("Attributes or annotation values nested too deeply", offset)


class ConstantKindMismatch(DecodeError):
    """A resolved constant pool entry is not of the expected kind."""

    def __init__(self, index: int, expected: str, found: str):
        super().__init__(f"Expected {expected} at constant pool index {index}, got {found}")
        self.index = index
        self.expected = expected
        self.found = found


class UnknownElementTag(DecodeError):
    def __init__(self, tag: int, offset: int):
        super().__init__(f"Unknown annotation element value tag: {chr(tag)!r}", offset)
        self.tag = tag


class InvalidDescriptor(DecodeError):
    def __init__(self, descriptor: str, reason: str):
        super().__init__(f"Invalid descriptor {descriptor!r}: {reason}")
        self.descriptor = descriptor
