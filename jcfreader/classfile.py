"""
Java class file reader.

Parses the binary class-file container into a read-only model of its
constant pool, linkage, fields, methods and attributes. Supports class files
from JDK 1.0.2 (45.0) up to the major version allowed by ``ReaderConfig``.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .access import (
    ACC_ABSTRACT, ACC_ANNOTATION, ACC_ENUM, ACC_FINAL, ACC_INTERFACE, ACC_MODULE,
    ACC_PUBLIC, ACC_SYNTHETIC, AccessFlags, class_modifiers, is_set,
)
from .attributes import (
    CLASS_ATTRIBUTES,
    DEPRECATED, AnnotationsAttribute, AttributeInfo, InnerClassEntry, InnerClassesAttribute,
    SignatureAttribute, SourceFileAttribute, check_deprecated, decode_attribute, read_attributes,
)
from .bytestream import ByteReader
from .config import DEFAULT_CONFIG, ReaderConfig
from .constpool import ConstantPool, ConstantPoolTag
from .descriptors import ClassSignature, parse_class_signature
from .errors import MalformedHeader, TrailingData
from .members import FieldInfo, MethodInfo

logger = logging.getLogger(__name__)

MAGIC = 0xCAFEBABE
ROOT_CLASS = "java/lang/Object"


class ClassFile:
    """A parsed Java class file.

    Constructing one reads the whole input; on any error the constructor
    raises and nothing is returned. The resulting object graph is never
    modified afterwards.
    """

    DEPRECATED = DEPRECATED

    def __init__(self, stream: ByteReader, config: Optional[ReaderConfig] = None):
        self._config = config or DEFAULT_CONFIG
        self._deprecated = False
        self._anomalies: list[str] = []

        self._read_header(stream)
        self._constant_pool = ConstantPool.read(stream)

        pool = self._constant_pool
        self._access_flags = stream.read_u2("access_flags")
        self._this_class_index = stream.read_u2("this_class")
        self._super_class_index = stream.read_u2("super_class")
        pool.get(self._this_class_index, ConstantPoolTag.CLASS)
        if self._super_class_index:
            pool.get(self._super_class_index, ConstantPoolTag.CLASS)
        else:
            self._check_missing_super_class()

        # Interfaces
        interfaces_count = stream.read_u2("interfaces_count")
        self._interface_indices = tuple(stream.read_u2("interface index") for _ in range(interfaces_count))
        for index in self._interface_indices:
            pool.get(index, ConstantPoolTag.CLASS)

        # Fields
        fields_count = stream.read_u2("fields_count")
        self._fields = tuple(FieldInfo.read(self, stream) for _ in range(fields_count))

        # Methods
        methods_count = stream.read_u2("methods_count")
        self._methods = tuple(MethodInfo.read(self, stream) for _ in range(methods_count))

        # Class attributes
        self._attributes = read_attributes(self, stream, self.read_attribute)

        if not stream.at_end():
            if not self._config.allow_trailing_data:
                raise TrailingData(f"{stream.remaining} byte(s) after the class attributes", stream.pos)
            logger.debug(f"Ignoring {stream.remaining} trailing byte(s) in {self.name}")

        logger.debug(
            f"Read class {self.name}: {len(self._fields)} field(s), {len(self._methods)} method(s)")

    # ==================== CONSTRUCTION ====================

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview],
                   config: Optional[ReaderConfig] = None) -> "ClassFile":
        return cls(ByteReader(data), config)

    @classmethod
    def from_stream(cls, stream: BinaryIO, config: Optional[ReaderConfig] = None) -> "ClassFile":
        """Read a binary file object to its end and parse it."""
        return cls(ByteReader.from_stream(stream), config)

    @classmethod
    def from_path(cls, path: Union[str, Path], config: Optional[ReaderConfig] = None) -> "ClassFile":
        return cls.from_bytes(Path(path).read_bytes(), config)

    def _read_header(self, stream: ByteReader):
        magic = stream.read_u4("magic")
        if magic != MAGIC:
            raise MalformedHeader(f"Invalid class file magic: {hex(magic)}", 0)
        minor = stream.read_u2("minor_version")
        major = stream.read_u2("major_version")
        if not self._config.accepts_version(major):
            raise MalformedHeader(
                f"Unsupported class file version {major}.{minor} "
                f"(accepted majors: {self._config.min_major_version}..{self._config.max_major_version})", 6)

    def _check_missing_super_class(self):
        """Only java/lang/Object and module-info may lack a super class."""
        name = self.name
        if name == ROOT_CLASS or is_set(self._access_flags, ACC_MODULE):
            return
        message = f"Class {name} has no super class"
        self._anomalies.append(message)
        logger.warning(message)

    def read_attribute(self, stream: ByteReader, attr_name: str,
                       attr_length: int) -> Optional[AttributeInfo]:
        """Read one class-level attribute; the Deprecated marker only sets a flag."""
        if attr_name == self.DEPRECATED:
            check_deprecated(stream, attr_length)
            self._deprecated = True
            return None
        decoder = CLASS_ATTRIBUTES.get(attr_name)
        if decoder is None:
            return AttributeInfo.read_unsupported_attribute(self, stream, attr_name, attr_length)
        return decode_attribute(decoder, self, stream, attr_name, attr_length)

    # ==================== RAW STRUCTURE ====================

    @property
    def config(self) -> ReaderConfig:
        return self._config

    @property
    def constant_pool(self) -> ConstantPool:
        return self._constant_pool

    @property
    def access_flags(self) -> int:
        return self._access_flags

    @property
    def flags(self) -> AccessFlags:
        return AccessFlags(self._access_flags)

    @property
    def this_class_index(self) -> int:
        return self._this_class_index

    @property
    def super_class_index(self) -> int:
        """Constant pool index of the super class, 0 when there is none."""
        return self._super_class_index

    @property
    def interface_indices(self) -> tuple[int, ...]:
        return self._interface_indices

    @property
    def fields(self) -> tuple[FieldInfo, ...]:
        return self._fields

    @property
    def methods(self) -> tuple[MethodInfo, ...]:
        return self._methods

    @property
    def attributes(self) -> tuple[AttributeInfo, ...]:
        return self._attributes

    @property
    def anomalies(self) -> tuple[str, ...]:
        """Irregularities that were recorded rather than rejected."""
        return tuple(self._anomalies)

    @property
    def is_deprecated(self) -> bool:
        return self._deprecated

    # ==================== NAMES ====================

    @property
    def name(self) -> str:
        """Internal name of this class, e.g. ``java/util/Map$Entry``."""
        return self._constant_pool.get_class_name(self._this_class_index)

    @property
    def java_name(self) -> str:
        """Binary name with dots, e.g. ``java.util.Map$Entry``."""
        return self.name.replace("/", ".")

    @property
    def package_name(self) -> str:
        """Dotted package name, empty for the default package."""
        return self.name.rpartition("/")[0].replace("/", ".")

    @property
    def simple_name(self) -> str:
        """Name without package; nested classes use their InnerClasses name."""
        name = self.name
        for entry in self.inner_classes:
            if entry.inner_class == name and entry.inner_name:
                return entry.inner_name
        return name.rpartition("/")[2]

    @property
    def super_class_name(self) -> Optional[str]:
        if not self._super_class_index:
            return None
        return self._constant_pool.get_class_name(self._super_class_index)

    @property
    def interface_names(self) -> tuple[str, ...]:
        return tuple(self._constant_pool.get_class_name(i) for i in self._interface_indices)

    # ==================== CLASS ATTRIBUTES ====================

    def _find(self, kind):
        for attr in self._attributes:
            if isinstance(attr, kind):
                return attr
        return None

    def find_attribute(self, name: str) -> Optional[AttributeInfo]:
        for attr in self._attributes:
            if attr.name == name:
                return attr
        return None

    @property
    def source_file(self) -> Optional[str]:
        attr = self._find(SourceFileAttribute)
        return attr.source_file if attr else None

    @property
    def signature(self) -> Optional[str]:
        attr = self._find(SignatureAttribute)
        return attr.signature if attr else None

    @property
    def generic_signature(self) -> Optional[ClassSignature]:
        signature = self.signature
        return parse_class_signature(signature) if signature is not None else None

    @property
    def inner_classes(self) -> tuple[InnerClassEntry, ...]:
        attr = self._find(InnerClassesAttribute)
        return attr.classes if attr else ()

    @property
    def annotations(self) -> tuple:
        annotations = []
        for attr in self._attributes:
            if isinstance(attr, AnnotationsAttribute):
                annotations.extend(attr.annotations)
        return tuple(annotations)

    # ==================== FLAGS ====================

    @property
    def is_public(self) -> bool:
        return is_set(self._access_flags, ACC_PUBLIC)

    @property
    def is_final(self) -> bool:
        return is_set(self._access_flags, ACC_FINAL)

    @property
    def is_interface(self) -> bool:
        return is_set(self._access_flags, ACC_INTERFACE)

    @property
    def is_abstract(self) -> bool:
        return is_set(self._access_flags, ACC_ABSTRACT)

    @property
    def is_annotation(self) -> bool:
        return is_set(self._access_flags, ACC_ANNOTATION)

    @property
    def is_enum(self) -> bool:
        return is_set(self._access_flags, ACC_ENUM)

    @property
    def is_synthetic(self) -> bool:
        return is_set(self._access_flags, ACC_SYNTHETIC)

    @property
    def is_module(self) -> bool:
        return is_set(self._access_flags, ACC_MODULE)

    @property
    def modifiers(self) -> list[str]:
        return class_modifiers(self._access_flags)

    # ==================== MEMBER LOOKUP ====================

    def get_field(self, name: str) -> Optional[FieldInfo]:
        for field_info in self._fields:
            if field_info.name == name:
                return field_info
        return None

    def get_methods(self, name: str) -> tuple[MethodInfo, ...]:
        """All overloads with the given name."""
        return tuple(m for m in self._methods if m.name == name)

    def find_method(self, name: str, descriptor: str) -> Optional[MethodInfo]:
        for method in self._methods:
            if method.name == name and method.descriptor == descriptor:
                return method
        return None

    @property
    def constructors(self) -> tuple[MethodInfo, ...]:
        return self.get_methods(MethodInfo.CONSTRUCTOR)

    def __repr__(self) -> str:
        return f"<ClassFile {self.name}>"


def read_class_file(path: Union[str, Path], config: Optional[ReaderConfig] = None) -> ClassFile:
    """Read a single class file."""
    return ClassFile.from_path(path, config)
