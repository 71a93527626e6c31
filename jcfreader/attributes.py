"""
Attributes attached to a class, a member or a code body.

Recognized attribute kinds are decoded by the ``read`` classmethod of their
class, looked up by name in one of the decoder tables at the bottom of this
module. Everything else becomes an ``UnsupportedAttribute`` that only
remembers its name and length.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Optional

from .bytestream import ByteReader
from .constpool import ConstantPoolTag
from .descriptors import (
    parse_class_signature, parse_field_descriptor, parse_field_signature, parse_method_signature,
)
from .errors import AttributeLengthMismatch, ClassFormatError, TruncatedAttribute

if TYPE_CHECKING:
    from .classfile import ClassFile

logger = logging.getLogger(__name__)

# (class_file, stream, name, length) -> AttributeInfo
AttributeDecoder = Callable[["ClassFile", ByteReader, str, int], "AttributeInfo"]
# (stream, name, length) -> AttributeInfo or None
AttributeDispatch = Callable[[ByteReader, str, int], Optional["AttributeInfo"]]

# Marker attribute with no payload (4.7.15)
DEPRECATED = "Deprecated"


class AttributeInfo:
    """Base class for all attributes."""

    def __init__(self, class_file: "ClassFile", name: str, length: int):
        self.class_file = class_file
        self.name = name
        self.length = length

    @property
    def constant_pool(self):
        return self.class_file.constant_pool

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} ({self.length} bytes)>"

    @staticmethod
    def read_unsupported_attribute(class_file: "ClassFile", stream: ByteReader,
                                   name: str, length: int) -> "UnsupportedAttribute":
        """Skip an attribute's payload without interpreting it."""
        if length > stream.remaining:
            raise TruncatedAttribute(
                f"Attribute {name} declares {length} bytes, only {stream.remaining} left", stream.pos)
        stream.skip(length)
        logger.debug(f"Skipped unsupported attribute {name} ({length} bytes)")
        return UnsupportedAttribute(class_file, name, length)


class UnsupportedAttribute(AttributeInfo):
    """An attribute that was skipped rather than decoded."""
    pass


def check_deprecated(stream: ByteReader, length: int):
    """A Deprecated attribute carries no payload; it only marks its owner."""
    if length != 0:
        raise AttributeLengthMismatch(
            f"Deprecated attribute must be empty, declares {length} bytes", stream.pos)


def decode_attribute(decoder: AttributeDecoder, class_file: "ClassFile", stream: ByteReader,
                     name: str, length: int) -> AttributeInfo:
    """Run a decoder and check it consumed exactly ``length`` bytes."""
    if length > stream.remaining:
        raise TruncatedAttribute(
            f"Attribute {name} declares {length} bytes, only {stream.remaining} left", stream.pos)
    start = stream.pos
    attr = decoder(class_file, stream, name, length)
    consumed = stream.pos - start
    if consumed != length:
        raise AttributeLengthMismatch(
            f"Attribute {name} declares {length} bytes but {consumed} were decoded", start)
    return attr


def read_attributes(class_file: "ClassFile", stream: ByteReader,
                    dispatch: AttributeDispatch) -> tuple[AttributeInfo, ...]:
    """Read a count-prefixed attribute list, keeping every non-None result."""
    count = stream.read_u2("attributes_count")
    attributes = []
    for _ in range(count):
        name = class_file.constant_pool.get_utf8(stream.read_u2("attribute_name_index"))
        length = stream.read_u4("attribute_length")
        attr = dispatch(stream, name, length)
        if attr is not None:
            attributes.append(attr)
    return tuple(attributes)


def dispatch_table(class_file: "ClassFile", table: dict[str, AttributeDecoder]) -> AttributeDispatch:
    """Dispatch through ``table``, skipping names it does not know."""
    def dispatch(stream: ByteReader, name: str, length: int) -> AttributeInfo:
        decoder = table.get(name)
        if decoder is None:
            return AttributeInfo.read_unsupported_attribute(class_file, stream, name, length)
        return decode_attribute(decoder, class_file, stream, name, length)
    return dispatch


# ==================== SIMPLE ATTRIBUTES ====================

class ConstantValueAttribute(AttributeInfo):
    """The compile-time value of a constant field (4.7.2)."""

    def __init__(self, class_file, name, length, constant_value_index: int):
        super().__init__(class_file, name, length)
        self.constant_value_index = constant_value_index

    @property
    def value(self):
        return self.constant_pool.get_constant_value(self.constant_value_index)

    @classmethod
    def read(cls, class_file, stream, name, length):
        index = stream.read_u2("constantvalue_index")
        class_file.constant_pool.get_constant_value(index)
        return cls(class_file, name, length, index)


class SignatureAttribute(AttributeInfo):
    """Generic signature of a class, field or method (4.7.9)."""

    def __init__(self, class_file, name, length, signature_index: int):
        super().__init__(class_file, name, length)
        self.signature_index = signature_index

    @property
    def signature(self) -> str:
        return self.constant_pool.get_utf8(self.signature_index)

    @classmethod
    def read(cls, class_file, stream, name, length):
        index = stream.read_u2("signature_index")
        class_file.constant_pool.get_utf8(index)
        return cls(class_file, name, length, index)

    @classmethod
    def checked_by(cls, parse: Callable[[str], Any]) -> AttributeDecoder:
        """A decoder that also parses the signature text with ``parse``."""
        def read(class_file, stream, name, length):
            attr = cls.read(class_file, stream, name, length)
            parse(attr.signature)
            return attr
        return read


class SourceFileAttribute(AttributeInfo):
    """Name of the source file a class was compiled from (4.7.10)."""

    def __init__(self, class_file, name, length, source_file_index: int):
        super().__init__(class_file, name, length)
        self.source_file_index = source_file_index

    @property
    def source_file(self) -> str:
        return self.constant_pool.get_utf8(self.source_file_index)

    @classmethod
    def read(cls, class_file, stream, name, length):
        index = stream.read_u2("sourcefile_index")
        class_file.constant_pool.get_utf8(index)
        return cls(class_file, name, length, index)


class ExceptionsAttribute(AttributeInfo):
    """Checked exceptions a method may throw (4.7.5)."""

    def __init__(self, class_file, name, length, exception_indices: tuple[int, ...]):
        super().__init__(class_file, name, length)
        self.exception_indices = exception_indices

    @property
    def exception_names(self) -> tuple[str, ...]:
        return tuple(self.constant_pool.get_class_name(i) for i in self.exception_indices)

    @classmethod
    def read(cls, class_file, stream, name, length):
        count = stream.read_u2("number_of_exceptions")
        indices = tuple(stream.read_u2("exception_index") for _ in range(count))
        for index in indices:
            class_file.constant_pool.get_class_name(index)
        return cls(class_file, name, length, indices)


@dataclass(frozen=True)
class InnerClassEntry:
    """Represents an entry in the InnerClasses attribute."""
    inner_class: str  # Internal name like "Outer$Inner"
    outer_class: Optional[str]  # Internal name like "Outer", None for anonymous/local
    inner_name: Optional[str]  # Simple name like "Inner", None for anonymous
    access_flags: int  # Access flags for the inner class


class InnerClassesAttribute(AttributeInfo):
    """Nested classes that are members of, or referenced by, a class (4.7.6)."""

    def __init__(self, class_file, name, length, classes: tuple[InnerClassEntry, ...]):
        super().__init__(class_file, name, length)
        self.classes = classes

    @classmethod
    def read(cls, class_file, stream, name, length):
        pool = class_file.constant_pool
        count = stream.read_u2("number_of_classes")
        classes = []
        for _ in range(count):
            inner_class_idx = stream.read_u2()
            outer_class_idx = stream.read_u2()
            inner_name_idx = stream.read_u2()
            inner_access = stream.read_u2()
            classes.append(InnerClassEntry(
                inner_class=pool.get_class_name(inner_class_idx),
                outer_class=pool.get_class_name(outer_class_idx) if outer_class_idx else None,
                inner_name=pool.get_utf8(inner_name_idx) if inner_name_idx else None,
                access_flags=inner_access,
            ))
        return cls(class_file, name, length, tuple(classes))


@dataclass(frozen=True)
class MethodParameter:
    name: Optional[str]
    access_flags: int


class MethodParametersAttribute(AttributeInfo):
    """Formal parameter names and flags recorded with ``-parameters`` (4.7.24)."""

    def __init__(self, class_file, name, length, parameters: tuple[MethodParameter, ...]):
        super().__init__(class_file, name, length)
        self.parameters = parameters

    @classmethod
    def read(cls, class_file, stream, name, length):
        count = stream.read_u1("parameters_count")
        params = []
        for _ in range(count):
            name_idx = stream.read_u2()
            flags = stream.read_u2()
            param_name = class_file.constant_pool.get_utf8(name_idx) if name_idx else None
            params.append(MethodParameter(param_name, flags))
        return cls(class_file, name, length, tuple(params))


# ==================== CODE ====================

@dataclass(frozen=True)
class ExceptionTableEntry:
    """An entry in the exception table."""
    start_pc: int
    end_pc: int
    handler_pc: int
    catch_type: Optional[str]  # None for finally (catches all), otherwise the class name


class CodeAttribute(AttributeInfo):
    """A method body: bytecode, exception table and nested attributes (4.7.3).

    The bytecode is kept as raw bytes and never interpreted.
    """

    def __init__(self, class_file, name, length, max_stack: int, max_locals: int,
                 code: bytes, exception_table: tuple[ExceptionTableEntry, ...],
                 attributes: tuple[AttributeInfo, ...]):
        super().__init__(class_file, name, length)
        self.max_stack = max_stack
        self.max_locals = max_locals
        self.code = code
        self.exception_table = exception_table
        self.attributes = attributes

    @property
    def line_numbers(self) -> tuple[tuple[int, int], ...]:
        """(start_pc, line_number) pairs from every LineNumberTable."""
        pairs = []
        for attr in self.attributes:
            if isinstance(attr, LineNumberTableAttribute):
                pairs.extend(attr.entries)
        return tuple(pairs)

    @classmethod
    def read(cls, class_file, stream, name, length):
        pool = class_file.constant_pool
        max_stack = stream.read_u2("max_stack")
        max_locals = stream.read_u2("max_locals")
        code_length = stream.read_u4("code_length")
        code = stream.read_bytes(code_length, "code")
        table_length = stream.read_u2("exception_table_length")
        table = []
        for _ in range(table_length):
            start_pc = stream.read_u2()
            end_pc = stream.read_u2()
            handler_pc = stream.read_u2()
            catch_idx = stream.read_u2()
            table.append(ExceptionTableEntry(
                start_pc, end_pc, handler_pc,
                pool.get_class_name(catch_idx) if catch_idx else None,
            ))
        attributes = read_attributes(class_file, stream, dispatch_table(class_file, CODE_ATTRIBUTES))
        return cls(class_file, name, length, max_stack, max_locals, code,
                   tuple(table), attributes)


class LineNumberTableAttribute(AttributeInfo):
    """Maps bytecode offsets to source lines (4.7.12)."""

    def __init__(self, class_file, name, length, entries: tuple[tuple[int, int], ...]):
        super().__init__(class_file, name, length)
        self.entries = entries

    @classmethod
    def read(cls, class_file, stream, name, length):
        count = stream.read_u2("line_number_table_length")
        entries = tuple((stream.read_u2(), stream.read_u2()) for _ in range(count))
        return cls(class_file, name, length, entries)


# ==================== ANNOTATIONS ====================

@dataclass(frozen=True)
class AnnotationValue:
    """An annotation element value."""
    tag: str
    value: Any


@dataclass(frozen=True)
class Annotation:
    """A parsed annotation."""
    type_descriptor: str  # e.g., "Ljava/lang/Deprecated;"
    elements: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))  # name -> AnnotationValue

    @property
    def type_name(self) -> str:
        return parse_field_descriptor(self.type_descriptor).java_name()


_CONSTANT_VALUE_TAGS = {
    "B": ConstantPoolTag.INTEGER,
    "C": ConstantPoolTag.INTEGER,
    "I": ConstantPoolTag.INTEGER,
    "S": ConstantPoolTag.INTEGER,
    "Z": ConstantPoolTag.INTEGER,
    "D": ConstantPoolTag.DOUBLE,
    "F": ConstantPoolTag.FLOAT,
    "J": ConstantPoolTag.LONG,
}


def _read_annotation(pool, stream: ByteReader) -> Annotation:
    """Read a single annotation."""
    type_name = pool.get_utf8(stream.read_u2("type_index"))
    num_pairs = stream.read_u2("num_element_value_pairs")
    elements = {}
    for _ in range(num_pairs):
        name = pool.get_utf8(stream.read_u2("element_name_index"))
        elements[name] = _read_element_value(pool, stream)
    return Annotation(type_descriptor=type_name, elements=MappingProxyType(elements))


def _read_element_value(pool, stream: ByteReader) -> AnnotationValue:
    """Read an annotation element value."""
    offset = stream.pos
    tag = chr(stream.read_u1("element_value tag"))

    if tag in _CONSTANT_VALUE_TAGS:
        entry = pool.get(stream.read_u2("const_value_index"), _CONSTANT_VALUE_TAGS[tag])
        return AnnotationValue(tag, entry.value)

    elif tag == "s":
        return AnnotationValue(tag, pool.get_utf8(stream.read_u2("const_value_index")))

    elif tag == "e":
        # Enum constant
        type_idx = stream.read_u2("type_name_index")
        const_idx = stream.read_u2("const_name_index")
        return AnnotationValue(tag, (pool.get_utf8(type_idx), pool.get_utf8(const_idx)))

    elif tag == "c":
        # Class, as a return descriptor
        return AnnotationValue(tag, pool.get_utf8(stream.read_u2("class_info_index")))

    elif tag == "@":
        # Nested annotation
        return AnnotationValue(tag, _read_annotation(pool, stream))

    elif tag == "[":
        num_values = stream.read_u2("num_values")
        values = tuple(_read_element_value(pool, stream) for _ in range(num_values))
        return AnnotationValue(tag, values)

    raise ClassFormatError(f"Unknown annotation element value tag {tag!r}", offset)


class AnnotationsAttribute(AttributeInfo):
    """RuntimeVisibleAnnotations or RuntimeInvisibleAnnotations (4.7.16, 4.7.17)."""

    def __init__(self, class_file, name, length, annotations: tuple[Annotation, ...]):
        super().__init__(class_file, name, length)
        self.annotations = annotations

    @property
    def visible(self) -> bool:
        return self.name == "RuntimeVisibleAnnotations"

    @classmethod
    def read(cls, class_file, stream, name, length):
        num_ann = stream.read_u2("num_annotations")
        annotations = tuple(_read_annotation(class_file.constant_pool, stream) for _ in range(num_ann))
        return cls(class_file, name, length, annotations)


# ==================== DECODER TABLES ====================

_ANNOTATION_ATTRIBUTES: dict[str, AttributeDecoder] = {
    "RuntimeVisibleAnnotations": AnnotationsAttribute.read,
    "RuntimeInvisibleAnnotations": AnnotationsAttribute.read,
}

CLASS_ATTRIBUTES: dict[str, AttributeDecoder] = {
    "SourceFile": SourceFileAttribute.read,
    "Signature": SignatureAttribute.checked_by(parse_class_signature),
    "InnerClasses": InnerClassesAttribute.read,
    **_ANNOTATION_ATTRIBUTES,
}

FIELD_ATTRIBUTES: dict[str, AttributeDecoder] = {
    "ConstantValue": ConstantValueAttribute.read,
    "Signature": SignatureAttribute.checked_by(parse_field_signature),
    **_ANNOTATION_ATTRIBUTES,
}

METHOD_ATTRIBUTES: dict[str, AttributeDecoder] = {
    "Code": CodeAttribute.read,
    "Exceptions": ExceptionsAttribute.read,
    "Signature": SignatureAttribute.checked_by(parse_method_signature),
    "MethodParameters": MethodParametersAttribute.read,
    **_ANNOTATION_ATTRIBUTES,
}

CODE_ATTRIBUTES: dict[str, AttributeDecoder] = {
    "LineNumberTable": LineNumberTableAttribute.read,
}
