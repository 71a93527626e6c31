"""
Fields and methods declared by a class file.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, TypeVar, Union

from .access import (
    ACC_ABSTRACT, ACC_FINAL, ACC_NATIVE, ACC_PRIVATE, ACC_PROTECTED, ACC_PUBLIC,
    ACC_STATIC, ACC_SYNCHRONIZED, ACC_SYNTHETIC, ACC_VARARGS,
    AccessFlags, field_modifiers, is_set, method_modifiers,
)
from .attributes import (
    DEPRECATED, FIELD_ATTRIBUTES, METHOD_ATTRIBUTES,
    AttributeInfo, CodeAttribute, ConstantValueAttribute, ExceptionsAttribute,
    MethodParametersAttribute, SignatureAttribute, check_deprecated, decode_attribute,
    read_attributes,
)
from .bytestream import ByteReader
from .descriptors import (
    MethodSignature, TypeSignature,
    parse_field_descriptor, parse_field_signature,
    parse_method_descriptor, parse_method_signature,
)

if TYPE_CHECKING:
    from .classfile import ClassFile

A = TypeVar("A", bound=AttributeInfo)


class MemberInfo(ABC):
    """Base class for information about members (fields and methods)."""

    # Attribute marking a member as deprecated
    DEPRECATED = DEPRECATED

    def __init__(self, class_file: "ClassFile", access_flags: int,
                 name_index: int, descriptor_index: int):
        self._class_file = class_file
        self._access_flags = access_flags
        self._name_index = name_index
        self._descriptor_index = descriptor_index
        self._deprecated = False
        self._attributes: tuple[AttributeInfo, ...] = ()
        # Resolve once so bad indices fail while parsing, not on first query
        class_file.constant_pool.get_utf8(name_index)
        class_file.constant_pool.get_utf8(descriptor_index)

    @property
    def class_file(self) -> "ClassFile":
        """The class file declaring this member."""
        return self._class_file

    @property
    def access_flags(self) -> int:
        """The raw access flags bit field."""
        return self._access_flags

    @property
    def flags(self) -> AccessFlags:
        return AccessFlags(self._access_flags)

    @property
    def name(self) -> str:
        return self._class_file.constant_pool.get_utf8(self._name_index)

    @property
    def descriptor(self) -> str:
        return self._class_file.constant_pool.get_utf8(self._descriptor_index)

    @property
    def attributes(self) -> tuple[AttributeInfo, ...]:
        return self._attributes

    @property
    def is_deprecated(self) -> bool:
        return self._deprecated

    @property
    def is_final(self) -> bool:
        return is_set(self._access_flags, ACC_FINAL)

    @property
    def is_static(self) -> bool:
        return is_set(self._access_flags, ACC_STATIC)

    @property
    def is_public(self) -> bool:
        return is_set(self._access_flags, ACC_PUBLIC)

    @property
    def is_protected(self) -> bool:
        return is_set(self._access_flags, ACC_PROTECTED)

    @property
    def is_private(self) -> bool:
        return is_set(self._access_flags, ACC_PRIVATE)

    @property
    def is_synthetic(self) -> bool:
        return is_set(self._access_flags, ACC_SYNTHETIC)

    @property
    @abstractmethod
    def modifiers(self) -> list[str]:
        """Java modifier keywords, in source order."""
        pass

    @property
    def signature(self) -> Optional[str]:
        """The raw generic signature, if the member has one."""
        attr = self._find(SignatureAttribute)
        return attr.signature if attr else None

    def find_attribute(self, name: str) -> Optional[AttributeInfo]:
        for attr in self._attributes:
            if attr.name == name:
                return attr
        return None

    def _find(self, kind: type[A]) -> Optional[A]:
        for attr in self._attributes:
            if isinstance(attr, kind):
                return attr
        return None

    def _read_attributes(self, stream: ByteReader):
        self._attributes = read_attributes(self._class_file, stream, self.read_attribute)

    def read_attribute(self, stream: ByteReader, attr_name: str,
                       attr_length: int) -> Optional[AttributeInfo]:
        """
        Reads attributes common to all members. If the attribute is not
        common to members, the attribute returned is an "unsupported" one.

        Returns None for the Deprecated marker, which only sets a flag.
        """
        if attr_name == self.DEPRECATED:
            check_deprecated(stream, attr_length)
            self._deprecated = True
            return None
        return AttributeInfo.read_unsupported_attribute(self._class_file, stream, attr_name, attr_length)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} {self.descriptor}>"


class FieldInfo(MemberInfo):
    """A field declared by a class."""

    @classmethod
    def read(cls, class_file: "ClassFile", stream: ByteReader) -> "FieldInfo":
        """Read a field_info structure, attributes included."""
        access = stream.read_u2("field access_flags")
        name_idx = stream.read_u2("field name_index")
        desc_idx = stream.read_u2("field descriptor_index")
        info = cls(class_file, access, name_idx, desc_idx)
        parse_field_descriptor(info.descriptor)
        info._read_attributes(stream)
        return info

    def read_attribute(self, stream, attr_name, attr_length):
        decoder = FIELD_ATTRIBUTES.get(attr_name)
        if decoder is None:
            return super().read_attribute(stream, attr_name, attr_length)
        return decode_attribute(decoder, self._class_file, stream, attr_name, attr_length)

    @property
    def is_transient(self) -> bool:
        return is_set(self._access_flags, AccessFlags.TRANSIENT)

    @property
    def is_volatile(self) -> bool:
        return is_set(self._access_flags, AccessFlags.VOLATILE)

    @property
    def is_enum_constant(self) -> bool:
        return is_set(self._access_flags, AccessFlags.ENUM)

    @property
    def modifiers(self) -> list[str]:
        return field_modifiers(self._access_flags)

    @property
    def type(self) -> TypeSignature:
        """The field's type, generic when a Signature attribute is present."""
        if self.signature is not None:
            return parse_field_signature(self.signature)
        return parse_field_descriptor(self.descriptor)

    def type_name(self, qualified: bool = False) -> str:
        return self.type.java_name(qualified)

    @property
    def constant_value(self) -> Optional[Union[int, float, str]]:
        attr = self._find(ConstantValueAttribute)
        return attr.value if attr else None


class MethodInfo(MemberInfo):
    """A method, constructor or static initializer declared by a class."""

    CONSTRUCTOR = "<init>"
    STATIC_INITIALIZER = "<clinit>"

    @classmethod
    def read(cls, class_file: "ClassFile", stream: ByteReader) -> "MethodInfo":
        """Read a method_info structure, attributes included."""
        access = stream.read_u2("method access_flags")
        name_idx = stream.read_u2("method name_index")
        desc_idx = stream.read_u2("method descriptor_index")
        info = cls(class_file, access, name_idx, desc_idx)
        parse_method_descriptor(info.descriptor)
        info._read_attributes(stream)
        return info

    def read_attribute(self, stream, attr_name, attr_length):
        decoder = METHOD_ATTRIBUTES.get(attr_name)
        if decoder is None:
            return super().read_attribute(stream, attr_name, attr_length)
        return decode_attribute(decoder, self._class_file, stream, attr_name, attr_length)

    @property
    def is_abstract(self) -> bool:
        return is_set(self._access_flags, ACC_ABSTRACT)

    @property
    def is_native(self) -> bool:
        return is_set(self._access_flags, ACC_NATIVE)

    @property
    def is_synchronized(self) -> bool:
        return is_set(self._access_flags, ACC_SYNCHRONIZED)

    @property
    def is_varargs(self) -> bool:
        return is_set(self._access_flags, ACC_VARARGS)

    @property
    def is_bridge(self) -> bool:
        return is_set(self._access_flags, AccessFlags.BRIDGE)

    @property
    def is_constructor(self) -> bool:
        return self.name == self.CONSTRUCTOR

    @property
    def is_static_initializer(self) -> bool:
        return self.name == self.STATIC_INITIALIZER

    @property
    def modifiers(self) -> list[str]:
        return method_modifiers(self._access_flags)

    @property
    def code(self) -> Optional[CodeAttribute]:
        return self._find(CodeAttribute)

    @property
    def exceptions(self) -> tuple[str, ...]:
        """Internal names of the declared checked exceptions."""
        attr = self._find(ExceptionsAttribute)
        return attr.exception_names if attr else ()

    @property
    def method_type(self) -> MethodSignature:
        """Parameter and return types, generic when a Signature attribute is present.

        A generic signature may omit synthetic parameters (e.g. the outer
        instance of an inner class constructor), so it is only used when it
        declares as many parameters as the descriptor.
        """
        erased = parse_method_descriptor(self.descriptor)
        if self.signature is not None:
            generic = parse_method_signature(self.signature)
            if len(generic.parameter_types) == len(erased.parameter_types):
                return generic
        return erased

    @property
    def parameter_types(self) -> tuple[TypeSignature, ...]:
        return self.method_type.parameter_types

    @property
    def return_type(self) -> TypeSignature:
        return self.method_type.return_type

    @property
    def parameter_names(self) -> tuple[Optional[str], ...]:
        """Names from the MethodParameters attribute, or None for each unknown name."""
        attr = self._find(MethodParametersAttribute)
        count = len(self.parameter_types)
        if attr is None or len(attr.parameters) != count:
            return (None,) * count
        return tuple(p.name for p in attr.parameters)

    def name_and_parameters(self, qualified: bool = False) -> str:
        """Render as ``name(Type name, ...)``, the way a completion list shows it.

        Constructors use the simple name of their class.
        """
        name = self.name
        if self.is_constructor:
            name = self._class_file.simple_name
        params = []
        types = self.parameter_types
        for i, (ptype, pname) in enumerate(zip(types, self.parameter_names)):
            rendered = ptype.java_name(qualified)
            if self.is_varargs and i == len(types) - 1 and rendered.endswith("[]"):
                rendered = rendered[:-2] + "..."
            params.append(f"{rendered} {pname}" if pname else rendered)
        return f"{name}({', '.join(params)})"
