"""
The constant pool: the indexed table of literals and symbolic references
that the rest of a class file points into.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterator, Optional, Union

from .bytestream import ByteReader
from .errors import MalformedConstantPool

logger = logging.getLogger(__name__)


class ConstantPoolTag(IntEnum):
    UTF8 = 1
    INTEGER = 3
    FLOAT = 4
    LONG = 5
    DOUBLE = 6
    CLASS = 7
    STRING = 8
    FIELDREF = 9
    METHODREF = 10
    INTERFACE_METHODREF = 11
    NAME_AND_TYPE = 12
    METHOD_HANDLE = 15
    METHOD_TYPE = 16
    DYNAMIC = 17
    INVOKE_DYNAMIC = 18
    MODULE = 19
    PACKAGE = 20


# Entries that refer to a single Utf8 entry
_UTF8_WRAPPERS = (
    ConstantPoolTag.CLASS,
    ConstantPoolTag.STRING,
    ConstantPoolTag.METHOD_TYPE,
    ConstantPoolTag.MODULE,
    ConstantPoolTag.PACKAGE,
)

_MEMBER_REFS = (
    ConstantPoolTag.FIELDREF,
    ConstantPoolTag.METHODREF,
    ConstantPoolTag.INTERFACE_METHODREF,
)

# Tags a ConstantValue attribute may point at
LOADABLE_CONSTANTS = (
    ConstantPoolTag.INTEGER,
    ConstantPoolTag.FLOAT,
    ConstantPoolTag.LONG,
    ConstantPoolTag.DOUBLE,
    ConstantPoolTag.STRING,
)


@dataclass(frozen=True)
class ConstantPoolEntry:
    """A constant pool entry.

    ``value`` is the literal for numeric and Utf8 entries, a single pool index
    for Class/String/MethodType/Module/Package, and a tuple of indices (or a
    reference kind plus index for MethodHandle) for the rest.
    """
    tag: int
    value: Any


def decode_modified_utf8(raw: bytes) -> str:
    """Decode the modified UTF-8 used by class files.

    NUL is stored as ``C0 80`` and supplementary characters as a pair of
    three-byte encoded surrogates. Unpaired surrogates are legal and are kept
    as lone code points.
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass
    text = raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", errors="surrogatepass")
    return text.encode("utf-16", errors="surrogatepass").decode("utf-16", errors="surrogatepass")


class ConstantPool:
    """A parsed, immutable constant pool. Indices are 1-based."""

    def __init__(self, entries: list[Optional[ConstantPoolEntry]]):
        # entries[0] and the slot after each Long/Double are None
        self._entries = tuple(entries)

    def __len__(self) -> int:
        """The constant_pool_count, i.e. one more than the highest index."""
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[int, ConstantPoolEntry]]:
        for index, entry in enumerate(self._entries):
            if entry is not None:
                yield index, entry

    def __getitem__(self, index: int) -> ConstantPoolEntry:
        if not 0 < index < len(self._entries):
            raise MalformedConstantPool(
                f"Constant pool index {index} out of range 1..{len(self._entries) - 1}")
        entry = self._entries[index]
        if entry is None:
            raise MalformedConstantPool(
                f"Constant pool index {index} is the unusable second slot of a long/double")
        return entry

    @classmethod
    def read(cls, stream: ByteReader) -> "ConstantPool":
        """Read a count-prefixed constant pool."""
        count = stream.read_u2("constant_pool_count")
        if count == 0:
            raise MalformedConstantPool("constant_pool_count must be at least 1", stream.pos - 2)
        entries: list[Optional[ConstantPoolEntry]] = [None]
        i = 1
        while i < count:
            offset = stream.pos
            tag = stream.read_u1("constant pool tag")

            if tag == ConstantPoolTag.UTF8:
                length = stream.read_u2("utf8 length")
                raw = stream.read_bytes(length, "utf8 bytes")
                try:
                    value = decode_modified_utf8(raw)
                except UnicodeDecodeError as e:
                    raise MalformedConstantPool(
                        f"Invalid modified UTF-8 at index {i}: {e}", offset) from e

            elif tag == ConstantPoolTag.INTEGER:
                value = stream.read_i4()

            elif tag == ConstantPoolTag.FLOAT:
                value = stream.read_f4()

            elif tag in (ConstantPoolTag.LONG, ConstantPoolTag.DOUBLE):
                if i + 1 >= count:
                    raise MalformedConstantPool(
                        f"8-byte constant at index {i} overflows constant_pool_count {count}", offset)
                if tag == ConstantPoolTag.LONG:
                    value = stream.read_i8()
                else:
                    value = stream.read_f8()
                entries.append(ConstantPoolEntry(ConstantPoolTag(tag), value))
                entries.append(None)  # Long and Double take 2 slots
                i += 2
                continue

            elif tag in _UTF8_WRAPPERS:
                value = stream.read_u2()

            elif tag in _MEMBER_REFS or tag in (ConstantPoolTag.NAME_AND_TYPE,
                                                ConstantPoolTag.DYNAMIC,
                                                ConstantPoolTag.INVOKE_DYNAMIC):
                first = stream.read_u2()
                second = stream.read_u2()
                value = (first, second)

            elif tag == ConstantPoolTag.METHOD_HANDLE:
                kind = stream.read_u1("reference kind")
                ref_idx = stream.read_u2()
                value = (kind, ref_idx)

            else:
                raise MalformedConstantPool(f"Unknown constant pool tag {tag} at index {i}", offset)

            entries.append(ConstantPoolEntry(ConstantPoolTag(tag), value))
            i += 1

        pool = cls(entries)
        pool._validate()
        logger.debug(f"Read constant pool with {count - 1} slot(s)")
        return pool

    def _expect(self, owner: int, index: int, *tags: int):
        entry = self[index]
        if entry.tag not in tags:
            names = "/".join(ConstantPoolTag(t).name for t in tags)
            raise MalformedConstantPool(
                f"Entry {owner} refers to index {index} ({entry.tag.name}), expected {names}")

    def _validate(self):
        """Check that every reference between entries resolves to the right kind."""
        for index, entry in self:
            tag = entry.tag
            if tag in _UTF8_WRAPPERS:
                self._expect(index, entry.value, ConstantPoolTag.UTF8)
            elif tag == ConstantPoolTag.NAME_AND_TYPE:
                self._expect(index, entry.value[0], ConstantPoolTag.UTF8)
                self._expect(index, entry.value[1], ConstantPoolTag.UTF8)
            elif tag in _MEMBER_REFS:
                self._expect(index, entry.value[0], ConstantPoolTag.CLASS)
                self._expect(index, entry.value[1], ConstantPoolTag.NAME_AND_TYPE)
            elif tag in (ConstantPoolTag.DYNAMIC, ConstantPoolTag.INVOKE_DYNAMIC):
                # value[0] indexes the BootstrapMethods attribute, not the pool
                self._expect(index, entry.value[1], ConstantPoolTag.NAME_AND_TYPE)
            elif tag == ConstantPoolTag.METHOD_HANDLE:
                kind, ref_idx = entry.value
                if not 1 <= kind <= 9:
                    raise MalformedConstantPool(f"Entry {index} has invalid reference kind {kind}")
                self._expect(index, ref_idx, *_MEMBER_REFS)

    def get(self, index: int, *tags: int) -> ConstantPoolEntry:
        """Get an entry, checking that it has one of the given tags."""
        entry = self[index]
        if tags and entry.tag not in tags:
            names = "/".join(ConstantPoolTag(t).name for t in tags)
            raise MalformedConstantPool(f"Expected {names} at index {index}, got {entry.tag.name}")
        return entry

    def get_utf8(self, index: int) -> str:
        """Get UTF8 string from constant pool."""
        return self.get(index, ConstantPoolTag.UTF8).value

    def get_class_name(self, index: int) -> str:
        """Get the internal name (e.g. ``java/lang/String``) of a Class entry."""
        return self.get_utf8(self.get(index, ConstantPoolTag.CLASS).value)

    def get_name_and_type(self, index: int) -> tuple[str, str]:
        name_idx, desc_idx = self.get(index, ConstantPoolTag.NAME_AND_TYPE).value
        return self.get_utf8(name_idx), self.get_utf8(desc_idx)

    def get_constant_value(self, index: int) -> Union[int, float, str]:
        """Get the literal of a loadable constant; String entries resolve to text."""
        entry = self.get(index, *LOADABLE_CONSTANTS)
        if entry.tag == ConstantPoolTag.STRING:
            return self.get_utf8(entry.value)
        return entry.value
