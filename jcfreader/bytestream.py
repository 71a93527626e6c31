"""
Big-endian primitive reads over the bytes of one class file.
"""

import struct
from typing import BinaryIO, Union

from .errors import UnexpectedEndOfInput


class ByteReader:
    """Sequential reader over a finite byte buffer."""

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self.data = bytes(data)
        self.pos = 0

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "ByteReader":
        """Read a binary file object to its end."""
        return cls(stream.read())

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def _require(self, size: int, what: str):
        if size > self.remaining:
            raise UnexpectedEndOfInput(
                f"Need {size} byte(s) for {what}, only {self.remaining} left", self.pos)

    def _unpack(self, fmt: str, size: int, what: str):
        self._require(size, what)
        val = struct.unpack_from(fmt, self.data, self.pos)[0]
        self.pos += size
        return val

    def read_u1(self, what: str = "u1") -> int:
        self._require(1, what)
        val = self.data[self.pos]
        self.pos += 1
        return val

    def read_u2(self, what: str = "u2") -> int:
        return self._unpack(">H", 2, what)

    def read_u4(self, what: str = "u4") -> int:
        return self._unpack(">I", 4, what)

    def read_i4(self, what: str = "int") -> int:
        return self._unpack(">i", 4, what)

    def read_i8(self, what: str = "long") -> int:
        return self._unpack(">q", 8, what)

    def read_f4(self, what: str = "float") -> float:
        return self._unpack(">f", 4, what)

    def read_f8(self, what: str = "double") -> float:
        return self._unpack(">d", 8, what)

    def read_bytes(self, length: int, what: str = "bytes") -> bytes:
        self._require(length, what)
        val = self.data[self.pos:self.pos + length]
        self.pos += length
        return val

    def skip(self, length: int, what: str = "bytes"):
        self._require(length, what)
        self.pos += length
