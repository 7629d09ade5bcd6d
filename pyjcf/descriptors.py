"""
Field and method descriptor parser using Lark.

Descriptors are read from Utf8 constants on demand; the decoder itself
never parses them.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Union

from lark import Lark, LarkError, Transformer

from .errors import InvalidDescriptor


GRAMMAR_FILE = Path(__file__).parent / "descriptor.lark"

_BASE_TYPE_NAMES = {
    "B": "byte", "C": "char", "D": "double", "F": "float",
    "I": "int", "J": "long", "S": "short", "Z": "boolean",
}


@dataclass(frozen=True)
class BaseType:
    """Primitive type (B, C, D, F, I, J, S, Z)."""
    descriptor: str

    @property
    def name(self) -> str:
        return _BASE_TYPE_NAMES[self.descriptor]

    @property
    def size(self) -> int:
        """Number of local variable / operand stack slots."""
        return 2 if self.descriptor in "DJ" else 1

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ObjectType:
    """Class type (L<internal name>;)."""
    class_name: str  # e.g., "java/lang/String"

    @property
    def descriptor(self) -> str:
        return f"L{self.class_name};"

    size = 1

    def __str__(self) -> str:
        return self.class_name.replace("/", ".")


@dataclass(frozen=True)
class ArrayType:
    """Array type ([<component>)."""
    component: "FieldType"

    @property
    def descriptor(self) -> str:
        return "[" + self.component.descriptor

    @property
    def dimensions(self) -> int:
        inner = self.component
        return inner.dimensions + 1 if isinstance(inner, ArrayType) else 1

    size = 1

    def __str__(self) -> str:
        return f"{self.component}[]"


@dataclass(frozen=True)
class VoidType:
    descriptor = "V"
    size = 0

    def __str__(self) -> str:
        return "void"


FieldType = Union[BaseType, ObjectType, ArrayType]


@dataclass(frozen=True)
class MethodDescriptor:
    parameter_types: tuple[FieldType, ...]
    return_type: Union[FieldType, VoidType]

    @property
    def descriptor(self) -> str:
        params = "".join(p.descriptor for p in self.parameter_types)
        return f"({params}){self.return_type.descriptor}"

    @property
    def argument_slots(self) -> int:
        """Slots taken by the parameters, not counting ``this``."""
        return sum(p.size for p in self.parameter_types)

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameter_types)
        return f"{self.return_type} ({params})"


class DescriptorTransformer(Transformer):
    """Transforms Lark parse tree to descriptor values."""

    def field_descriptor(self, items):
        return items[0]

    def method_descriptor(self, items):
        *params, return_type = items
        return MethodDescriptor(tuple(params), return_type)

    def base_type(self, items):
        return BaseType(str(items[0]))

    def object_type(self, items):
        return ObjectType(str(items[0]))

    def array_type(self, items):
        return ArrayType(items[0])

    def void_type(self, items):
        return VoidType()


class DescriptorParser:
    """Parses field and method descriptors."""

    def __init__(self):
        with open(GRAMMAR_FILE, "r") as f:
            grammar = f.read()

        self._parser = Lark(
            grammar,
            parser="earley",
            start=["field_descriptor", "method_descriptor"],
            maybe_placeholders=False,
        )
        self._transformer = DescriptorTransformer()

    def _parse(self, text: str, start: str):
        try:
            tree = self._parser.parse(text, start=start)
        except LarkError as e:
            raise InvalidDescriptor(text, type(e).__name__) from e
        return self._transformer.transform(tree)

    def parse_field(self, text: str) -> FieldType:
        return self._parse(text, "field_descriptor")

    def parse_method(self, text: str) -> MethodDescriptor:
        return self._parse(text, "method_descriptor")


@lru_cache(maxsize=None)
def _default_parser() -> DescriptorParser:
    return DescriptorParser()


def parse_field_descriptor(text: str) -> FieldType:
    """Parse a field descriptor such as ``[Ljava/lang/String;``."""
    return _default_parser().parse_field(text)


def parse_method_descriptor(text: str) -> MethodDescriptor:
    """Parse a method descriptor such as ``(IJ)V``."""
    return _default_parser().parse_method(text)
