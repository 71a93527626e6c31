"""Tests for constant pool parsing."""

import pytest

from classbuilder import ConstantPoolBuilder, u2
from jcfreader import ClassFile, MalformedConstantPool, UnexpectedEndOfInput
from jcfreader.bytestream import ByteReader
from jcfreader.constpool import ConstantPool, ConstantPoolTag, decode_modified_utf8


def read_pool(cp: ConstantPoolBuilder) -> ConstantPool:
    out = bytearray()
    cp.write(out)
    stream = ByteReader(out)
    pool = ConstantPool.read(stream)
    assert stream.at_end()
    return pool


class TestModifiedUtf8:
    def test_ascii(self):
        assert decode_modified_utf8(b"java/lang/Object") == "java/lang/Object"

    def test_two_byte_nul(self):
        assert decode_modified_utf8(b"a\xc0\x80b") == "a\x00b"

    def test_supplementary_character(self):
        # U+1F600 as two encoded surrogates
        assert decode_modified_utf8(b"\xed\xa0\xbd\xed\xb8\x80") == "\U0001F600"

    @pytest.mark.parametrize("raw,expected", [
        (b"\xed\xa0\x80", "\ud800"),
        (b"\xed\xb0\x80", "\udc00"),
        (b"a\xed\xa0\x80b", "a\ud800b"),
    ])
    def test_unpaired_surrogate(self, raw, expected):
        assert decode_modified_utf8(raw) == expected

    def test_unpaired_surrogate_in_class_file(self, builder):
        idx = builder.cp.add_raw_utf8(b"\xed\xa0\x80")
        cf = ClassFile.from_bytes(builder.to_bytes())
        assert cf.constant_pool.get_utf8(idx) == "\ud800"

    def test_bmp_character(self):
        assert decode_modified_utf8("café".encode("utf-8")) == "café"

    def test_invalid_in_pool(self):
        cp = ConstantPoolBuilder()
        cp.add_raw_utf8(b"\xff\xfe")
        with pytest.raises(MalformedConstantPool):
            read_pool(cp)


class TestConstantPool:
    def test_entries_and_iteration(self):
        cp = ConstantPoolBuilder()
        name = cp.add_utf8("Hello")
        cls = cp.add_class("com/example/Hello")
        pool = read_pool(cp)
        assert len(pool) == 4
        assert pool.get_utf8(name) == "Hello"
        assert pool.get_class_name(cls) == "com/example/Hello"
        assert [index for index, _ in pool] == [1, 2, 3]

    def test_long_and_double_take_two_slots(self):
        cp = ConstantPoolBuilder()
        big = cp.add_long(-(1 << 50))
        pi = cp.add_double(3.5)
        after = cp.add_utf8("after")
        pool = read_pool(cp)
        assert (big, pi, after) == (1, 3, 5)
        assert len(pool) == 6
        assert pool.get_constant_value(big) == -(1 << 50)
        assert pool.get_constant_value(pi) == 3.5
        assert pool.get_utf8(after) == "after"
        assert [index for index, _ in pool] == [1, 3, 5]

    def test_second_slot_is_unusable(self):
        cp = ConstantPoolBuilder()
        big = cp.add_long(7)
        cp.add_utf8("x")
        pool = read_pool(cp)
        with pytest.raises(MalformedConstantPool):
            pool[big + 1]

    @pytest.mark.parametrize("index", [0, 2, 100])
    def test_index_out_of_range(self, index):
        cp = ConstantPoolBuilder()
        cp.add_utf8("only")
        pool = read_pool(cp)
        with pytest.raises(MalformedConstantPool):
            pool[index]

    def test_wrong_tag(self):
        cp = ConstantPoolBuilder()
        number = cp.add_integer(5)
        pool = read_pool(cp)
        assert pool.get(number, ConstantPoolTag.INTEGER).value == 5
        with pytest.raises(MalformedConstantPool):
            pool.get_utf8(number)

    def test_member_refs(self):
        cp = ConstantPoolBuilder()
        ref = cp.add_methodref("java/lang/Object", "<init>", "()V")
        handle = cp.add_method_handle(7, ref)
        pool = read_pool(cp)
        class_idx, nat_idx = pool[ref].value
        assert pool.get_class_name(class_idx) == "java/lang/Object"
        assert pool.get_name_and_type(nat_idx) == ("<init>", "()V")
        assert pool[handle].value == (7, ref)

    def test_integer_and_float(self):
        cp = ConstantPoolBuilder()
        neg = cp.add_integer(-2)
        half = cp.add_float(0.5)
        pool = read_pool(cp)
        assert pool.get_constant_value(neg) == -2
        assert pool.get_constant_value(half) == 0.5


class TestMalformedPools:
    def test_zero_count(self):
        with pytest.raises(MalformedConstantPool):
            ConstantPool.read(ByteReader(u2(0)))

    def test_unknown_tag(self):
        cp = ConstantPoolBuilder()
        cp.add_utf8("ok")
        cp.add_raw(2, 1)
        with pytest.raises(MalformedConstantPool) as exc_info:
            read_pool(cp)
        assert exc_info.value.offset == 2 + 3 + len(b"ok")

    def test_long_overflows_count(self):
        # count 2 leaves room for one slot only
        data = u2(2) + bytes([ConstantPoolTag.LONG]) + b"\x00" * 8
        with pytest.raises(MalformedConstantPool):
            ConstantPool.read(ByteReader(data))

    def test_dangling_class_reference(self):
        cp = ConstantPoolBuilder()
        cp.add_raw(ConstantPoolTag.CLASS, 99)
        with pytest.raises(MalformedConstantPool):
            read_pool(cp)

    def test_class_must_point_at_utf8(self):
        cp = ConstantPoolBuilder()
        number = cp.add_integer(1)
        cp.add_raw(ConstantPoolTag.CLASS, number)
        with pytest.raises(MalformedConstantPool):
            read_pool(cp)

    def test_bad_reference_kind(self):
        cp = ConstantPoolBuilder()
        ref = cp.add_methodref("java/lang/Object", "hashCode", "()I")
        cp.add_method_handle(10, ref)
        with pytest.raises(MalformedConstantPool):
            read_pool(cp)

    def test_truncated_pool(self):
        cp = ConstantPoolBuilder()
        cp.add_utf8("truncated")
        out = bytearray()
        cp.write(out)
        with pytest.raises(UnexpectedEndOfInput):
            ConstantPool.read(ByteReader(out[:-3]))

    def test_this_class_must_be_class_entry(self, builder):
        data = bytearray(builder.to_bytes())
        utf8_idx = builder.cp.add_utf8(builder.name)
        # this_class follows magic, versions, the pool and access_flags
        out = bytearray()
        builder.cp.write(out)
        offset = 8 + len(out) + 2
        data[offset:offset + 2] = u2(utf8_idx)
        with pytest.raises(MalformedConstantPool):
            ClassFile.from_bytes(bytes(data))
