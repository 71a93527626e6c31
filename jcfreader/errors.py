"""
Errors raised while reading a class file.
"""

from typing import Optional


class ClassFormatError(Exception):
    """The input is not a well-formed class file."""

    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (at byte {offset})"
        super().__init__(message)


class MalformedHeader(ClassFormatError):
    """Bad magic number or unsupported version."""
    pass


class MalformedConstantPool(ClassFormatError):
    """Unknown tag, or an index that does not resolve to a usable entry."""
    pass


class TruncatedAttribute(ClassFormatError):
    """An attribute declares more bytes than the input has left."""
    pass


class UnexpectedEndOfInput(ClassFormatError):
    """The input ended in the middle of a structure."""
    pass


class AttributeLengthMismatch(ClassFormatError):
    """A decoded attribute did not consume exactly its declared length."""
    pass


class TrailingData(ClassFormatError):
    """Bytes remain after the last class attribute."""
    pass


class DescriptorError(ClassFormatError):
    """A descriptor or generic signature string is malformed."""
    pass
