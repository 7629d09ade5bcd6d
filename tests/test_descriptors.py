"""Tests for the descriptor grammar."""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjcf.descriptors import (
    ArrayType,
    BaseType,
    DescriptorParser,
    MethodDescriptor,
    ObjectType,
    VoidType,
    parse_field_descriptor,
    parse_method_descriptor,
)
from pyjcf.errors import DecodeError, InvalidDescriptor


@pytest.fixture
def parser():
    return DescriptorParser()


class TestFieldDescriptors:
    @pytest.mark.parametrize("text,name", [
        ("B", "byte"), ("C", "char"), ("D", "double"), ("F", "float"),
        ("I", "int"), ("J", "long"), ("S", "short"), ("Z", "boolean"),
    ])
    def test_base_types(self, parser, text, name):
        result = parser.parse_field(text)
        assert result == BaseType(text)
        assert result.name == name

    def test_object_type(self, parser):
        result = parser.parse_field("Ljava/lang/String;")
        assert result == ObjectType("java/lang/String")
        assert str(result) == "java.lang.String"

    def test_array_of_objects(self, parser):
        result = parser.parse_field("[[Ljava/lang/Object;")
        assert isinstance(result, ArrayType)
        assert result.dimensions == 2
        assert result.component == ArrayType(ObjectType("java/lang/Object"))
        assert result.descriptor == "[[Ljava/lang/Object;"
        assert str(result) == "java.lang.Object[][]"

    def test_wide_types_take_two_slots(self):
        assert parse_field_descriptor("J").size == 2
        assert parse_field_descriptor("D").size == 2
        assert parse_field_descriptor("[J").size == 1

    @pytest.mark.parametrize("text", ["", "V", "L;", "Ljava/lang/String", "[", "II", "Q", "La.b;"])
    def test_invalid(self, parser, text):
        with pytest.raises(InvalidDescriptor):
            parser.parse_field(text)


class TestMethodDescriptors:
    def test_no_arguments_void(self, parser):
        result = parser.parse_method("()V")
        assert result == MethodDescriptor((), VoidType())
        assert str(result.return_type) == "void"

    def test_mixed_arguments(self, parser):
        result = parser.parse_method("(IJ[Ljava/lang/String;D)Ljava/lang/Object;")
        assert result.parameter_types == (
            BaseType("I"),
            BaseType("J"),
            ArrayType(ObjectType("java/lang/String")),
            BaseType("D"),
        )
        assert result.return_type == ObjectType("java/lang/Object")
        assert result.argument_slots == 6
        assert result.descriptor == "(IJ[Ljava/lang/String;D)Ljava/lang/Object;"

    def test_module_level_helper(self):
        result = parse_method_descriptor("([Ljava/lang/String;)V")
        assert len(result.parameter_types) == 1
        assert str(result) == "void (java.lang.String[])"

    @pytest.mark.parametrize("text", ["", "V", "(V)V", "()", "(I", "I)V", "()VV"])
    def test_invalid(self, parser, text):
        with pytest.raises(InvalidDescriptor) as exc_info:
            parser.parse_method(text)
        assert isinstance(exc_info.value, DecodeError)
        assert exc_info.value.descriptor == text
