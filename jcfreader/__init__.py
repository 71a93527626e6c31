"""jcfreader - a read-only reader for Java class files."""

import logging

from .access import AccessFlags
from .attributes import AttributeInfo, UnsupportedAttribute
from .classfile import ClassFile, read_class_file
from .classpath import ClassPath
from .config import ReaderConfig
from .errors import (
    AttributeLengthMismatch,
    ClassFormatError,
    DescriptorError,
    MalformedConstantPool,
    MalformedHeader,
    TrailingData,
    TruncatedAttribute,
    UnexpectedEndOfInput,
)
from .members import FieldInfo, MemberInfo, MethodInfo

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "AccessFlags",
    "AttributeInfo",
    "AttributeLengthMismatch",
    "ClassFile",
    "ClassFormatError",
    "ClassPath",
    "DescriptorError",
    "FieldInfo",
    "MalformedConstantPool",
    "MalformedHeader",
    "MemberInfo",
    "MethodInfo",
    "ReaderConfig",
    "TrailingData",
    "TruncatedAttribute",
    "UnexpectedEndOfInput",
    "UnsupportedAttribute",
    "read_class_file",
]
