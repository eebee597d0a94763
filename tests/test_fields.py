import struct
from enum import Enum

import pytest

from munge.exceptions import (
    BadNameException,
    InvalidDiscriminantException,
    PackException,
    SizeMismatchException,
    StreamException,
    StringTooLongException,
)
from munge.fields import (
    ArrayField,
    BytesField,
    CountedArrayField,
    CStringField,
    SizedBytesField,
    StructField,
)
from munge.header import parse_header
from munge.streams import Stream


class Dummy(Enum):
    FIRST = 1
    SECOND = 2


def test_struct_field():
    stream = Stream(b'\x01\x02\x03\x04\xff\xff\x00\x00\x80\x3f')

    assert StructField('I').unpack(stream) == 0x04030201
    assert StructField('h').unpack(stream) == -1
    assert StructField('H').unpack(stream) == 0
    assert StructField('f').unpack(Stream(struct.pack('<f', 1.0))) == 1.0


def test_struct_field_pack():
    assert StructField('I').pack(0x04030201) == b'\x01\x02\x03\x04'
    assert StructField('b').pack(-2) == b'\xfe'

    with pytest.raises(PackException):
        StructField('B').pack(256)


def test_struct_field_short():
    with pytest.raises(StreamException):
        StructField('I').unpack(Stream(b'\x01\x02'))


def test_struct_field_enum():
    field = StructField('I', enum=Dummy, default=Dummy.FIRST)

    assert field.value_from_default() == Dummy.FIRST
    assert field.unpack(Stream(b'\x02\x00\x00\x00')) == Dummy.SECOND
    assert field.pack(Dummy.SECOND) == b'\x02\x00\x00\x00'


def test_struct_field_enum_default_from_int():
    assert StructField('I', enum=Dummy, default=2).value_from_default() == Dummy.SECOND


def test_struct_field_enum_invalid():
    field = StructField('I', enum=Dummy)

    with pytest.raises(InvalidDiscriminantException):
        field.unpack(Stream(b'\x03\x00\x00\x00'))

    with pytest.raises(PackException):
        field.pack(3)


def test_cstring():
    stream = Stream(b'test\x00rest')

    assert CStringField().unpack(stream) == b'test'
    assert stream.tell() == 5
    assert stream.read_all() == b'rest'


def test_cstring_encoding():
    assert CStringField(encoding='utf-8').unpack(Stream(b'caf\xc3\xa9\x00')) == 'café'
    assert CStringField(encoding='utf-8').pack('café') == b'caf\xc3\xa9\x00'


def test_cstring_empty():
    assert CStringField(encoding='utf-8').unpack(Stream(b'\x00')) == ''


def test_cstring_longest():
    data = b'a' * 8191 + b'\x00'

    assert len(CStringField().unpack(Stream(data))) == 8191


def test_cstring_too_long():
    with pytest.raises(StringTooLongException):
        CStringField().unpack(Stream(b'a' * 8192))


def test_cstring_not_terminated():
    with pytest.raises(StreamException) as exc_info:
        CStringField().unpack(Stream(b'test'))

    assert not isinstance(exc_info.value, StringTooLongException)


def test_cstring_bad_encoding():
    with pytest.raises(BadNameException):
        CStringField(encoding='utf-8').unpack(Stream(b'\xff\xfe\x00'))


def test_cstring_pack_invalid():
    with pytest.raises(PackException):
        CStringField().pack(b'te\x00st')

    with pytest.raises(PackException):
        CStringField().pack(b'a' * 8193)


def test_bytes_field():
    stream = Stream(b'\x01\x02\x03\x04')

    assert BytesField(2).unpack(stream) == b'\x01\x02'
    assert BytesField().unpack(stream) == b'\x03\x04'
    assert BytesField(3).value_from_default() == b'\x00\x00\x00'


def test_bytes_field_pack_wrong_length():
    with pytest.raises(PackException):
        BytesField(4).pack(b'\x00')


def test_array_field():
    field = ArrayField(StructField('H'), 3)

    assert field.unpack(Stream(b'\x01\x00\x02\x00\x03\x00')) == [1, 2, 3]
    assert field.pack([1, 2, 3]) == b'\x01\x00\x02\x00\x03\x00'
    assert field.value_from_default() == [0, 0, 0]

    with pytest.raises(PackException):
        field.pack([1])


def test_field_from_node():
    stream = Stream(b'INFO\x01\x00\x00\x00\x07')
    header = parse_header(stream)

    assert StructField('B').from_node(header, stream) == 7
    assert StructField('B').to_payload(7) == b'\x07'


def test_field_default_is_copied():
    field = BytesField()
    field.default = bytearray(b'abc')

    value = field.value_from_default()
    value[0] = 0

    assert field.default == bytearray(b'abc')


def test_struct_field_exact():
    stream = Stream(b'NAME\x05\x00\x00\x00\x01\x02\x03\x04\x05')
    header = parse_header(stream)

    assert StructField('I').from_node(header, stream) == 0x04030201

    with pytest.raises(SizeMismatchException):
        StructField('I', exact=True).from_node(header, stream)


def test_counted_array_field():
    field = CountedArrayField(StructField('H'), 'B', limit=3)

    assert field.unpack(Stream(b'\x02\x01\x00\x02\x00')) == [1, 2]
    assert field.pack([1, 2]) == b'\x02\x01\x00\x02\x00'
    assert field.pack([]) == b'\x00'
    assert field.value_from_default() == []

    with pytest.raises(PackException):
        field.pack([1, 2, 3, 4])


def test_counted_array_field_short():
    with pytest.raises(StreamException):
        CountedArrayField(StructField('H')).unpack(Stream(b'\x02\x01\x00'))


def test_sized_bytes_field():
    field = SizedBytesField('I')

    assert field.unpack(Stream(b'\x03\x00\x00\x00abcd')) == b'abc'
    assert field.pack(b'abc') == b'\x03\x00\x00\x00abc'

    with pytest.raises(StreamException):
        field.unpack(Stream(b'\x05\x00\x00\x00abc'))
