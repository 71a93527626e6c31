"""Tests for descriptor and generic signature parsing."""

import pytest

from jcfreader import DescriptorError
from jcfreader.descriptors import (
    ArrayType, BaseType, ClassType, SimpleClassType, TypeArgument, TypeVariable,
    parse_class_signature, parse_field_descriptor, parse_field_signature,
    parse_method_descriptor, parse_method_signature,
)

STRING = ClassType("java/lang", SimpleClassType("String"))


class TestFieldDescriptors:
    @pytest.mark.parametrize("descriptor,name", [
        ("B", "byte"),
        ("C", "char"),
        ("D", "double"),
        ("F", "float"),
        ("I", "int"),
        ("J", "long"),
        ("S", "short"),
        ("Z", "boolean"),
    ])
    def test_base_types(self, descriptor, name):
        parsed = parse_field_descriptor(descriptor)
        assert parsed == BaseType(descriptor)
        assert parsed.java_name() == name

    def test_object_type(self):
        parsed = parse_field_descriptor("Ljava/lang/String;")
        assert parsed == STRING
        assert parsed.full_name == "java/lang/String"
        assert parsed.java_name() == "java.lang.String"
        assert parsed.java_name(qualified=False) == "String"

    def test_default_package(self):
        parsed = parse_field_descriptor("LMain;")
        assert parsed.package == ""
        assert parsed.java_name() == "Main"

    def test_arrays_fold_dimensions(self):
        parsed = parse_field_descriptor("[[Ljava/lang/String;")
        assert parsed == ArrayType(STRING, 2)
        assert parsed.java_name() == "java.lang.String[][]"
        assert parsed.java_name(qualified=False) == "String[][]"
        assert parsed.erasure() == "[[Ljava/lang/String;"

    def test_nested_class_name(self):
        parsed = parse_field_descriptor("Ljava/util/Map$Entry;")
        assert parsed.java_name(qualified=False) == "Map$Entry"

    @pytest.mark.parametrize("descriptor", ["", "V", "Q", "Ljava/lang/String", "[", "II", "L;"])
    def test_malformed(self, descriptor):
        with pytest.raises(DescriptorError):
            parse_field_descriptor(descriptor)


class TestMethodDescriptors:
    def test_no_parameters(self):
        parsed = parse_method_descriptor("()V")
        assert parsed.parameter_types == ()
        assert parsed.return_type == BaseType("V")
        assert parsed.return_type.java_name() == "void"

    def test_mixed_parameters(self):
        parsed = parse_method_descriptor("(IJ[Ljava/lang/Object;Ljava/lang/String;D)[I")
        assert [p.java_name(False) for p in parsed.parameter_types] == [
            "int", "long", "Object[]", "String", "double",
        ]
        assert parsed.return_type == ArrayType(BaseType("I"))

    def test_erasure_round_trip(self):
        descriptor = "(Ljava/util/List;[[JZ)Ljava/lang/Object;"
        assert parse_method_descriptor(descriptor).erasure() == descriptor

    @pytest.mark.parametrize("descriptor", ["", "()", "(I", "I)V", "(V)V", "()VV"])
    def test_malformed(self, descriptor):
        with pytest.raises(DescriptorError):
            parse_method_descriptor(descriptor)


class TestSignatures:
    def test_parameterized_field(self):
        parsed = parse_field_signature("Ljava/util/Map<Ljava/lang/String;[I>;")
        assert parsed.full_name == "java/util/Map"
        assert parsed.java_name() == "java.util.Map<java.lang.String, int[]>"
        assert parsed.java_name(qualified=False) == "Map<String, int[]>"
        assert parsed.erasure() == "Ljava/util/Map;"

    def test_wildcards(self):
        assert parse_field_signature("Ljava/util/List<*>;").java_name() == "java.util.List<?>"
        extends = parse_field_signature("Ljava/util/List<+Ljava/lang/Number;>;")
        assert extends.java_name(False) == "List<? extends Number>"
        assert extends.type_arguments == (
            TypeArgument("+", ClassType("java/lang", SimpleClassType("Number"))),
        )
        assert parse_field_signature("Ljava/util/List<-TT;>;").java_name() == "java.util.List<? super T>"

    def test_inner_class(self):
        parsed = parse_field_signature("Ljava/util/Map<TK;TV;>.Entry<TK;TV;>;")
        assert parsed.full_name == "java/util/Map$Entry"
        assert parsed.java_name(qualified=False) == "Map<K, V>.Entry<K, V>"
        assert parsed.type_arguments == (TypeArgument(None, TypeVariable("K")),
                                         TypeArgument(None, TypeVariable("V")))

    def test_type_variable_field(self):
        parsed = parse_field_signature("[TT;")
        assert parsed == ArrayType(TypeVariable("T"))
        assert parsed.erasure() == "[Ljava/lang/Object;"

    def test_class_signature(self):
        parsed = parse_class_signature(
            "<K:Ljava/lang/Object;V:Ljava/lang/Object;>"
            "Ljava/util/AbstractMap<TK;TV;>;Ljava/util/Map<TK;TV;>;Ljava/io/Serializable;")
        assert [p.name for p in parsed.type_parameters] == ["K", "V"]
        assert parsed.type_parameters[0].java_name() == "K"
        assert parsed.superclass.full_name == "java/util/AbstractMap"
        assert [i.java_name() for i in parsed.interfaces] == [
            "java.util.Map<K, V>", "java.io.Serializable",
        ]

    def test_single_letter_type_parameters(self):
        # Names that look like base types or the class/type variable markers
        parsed = parse_class_signature(
            "<T:Ljava/lang/Object;L:Ljava/lang/Object;I:TT;>Ljava/lang/Object;")
        assert [p.name for p in parsed.type_parameters] == ["T", "L", "I"]
        assert parsed.type_parameters[2].class_bound == TypeVariable("T")

    def test_interface_bounds(self):
        parsed = parse_class_signature(
            "<T::Ljava/lang/Comparable<-TT;>;U:Ljava/lang/Number;:Ljava/io/Serializable;>"
            "Ljava/lang/Object;")
        t, u = parsed.type_parameters
        assert t.class_bound is None
        assert t.java_name(qualified=False) == "T extends Comparable<? super T>"
        assert u.java_name(qualified=False) == "U extends Number & Serializable"

    def test_method_signature(self):
        parsed = parse_method_signature(
            "<E:Ljava/lang/Exception;>(Ljava/util/List<+TE;>;I)V^TE;^Ljava/io/IOException;")
        assert [p.name for p in parsed.type_parameters] == ["E"]
        assert [p.java_name(False) for p in parsed.parameter_types] == ["List<? extends E>", "int"]
        assert parsed.return_type == BaseType("V")
        assert parsed.throws == (
            TypeVariable("E"),
            ClassType("java/io", SimpleClassType("IOException")),
        )
        assert parsed.erasure() == "(Ljava/util/List;I)V"

    def test_method_signature_without_type_parameters(self):
        parsed = parse_method_signature("(Ljava/util/Map<TK;TV;>;TK;)TV;")
        assert parsed.type_parameters == ()
        assert parsed.return_type == TypeVariable("V")
        assert parsed.erasure() == "(Ljava/util/Map;Ljava/lang/Object;)Ljava/lang/Object;"

    @pytest.mark.parametrize("signature", ["", "<>Ljava/lang/Object;", "<T>Ljava/lang/Object;",
                                           "Ljava/util/List<>;"])
    def test_malformed_class_signature(self, signature):
        with pytest.raises(DescriptorError):
            parse_class_signature(signature)

    def test_descriptor_error_is_format_error(self):
        from jcfreader import ClassFormatError
        with pytest.raises(ClassFormatError):
            parse_method_signature("(TT)V")
