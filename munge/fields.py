"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable from the payload of a leaf node. All the data is little endian.
"""
import copy
import logging
import struct

from .enum import Compliant
from .meta import FieldBase
from .header import read_payload
from .streams import Stream
from .exceptions import (
    BadNameException,
    InvalidDiscriminantException,
    PackException,
    SizeMismatchException,
    StreamException,
    StringTooLongException,
)


CSTRING_LIMIT = 8192


class Field(FieldBase):
    """Base class to subclass from.

    A field doesn't hold any value, it only knows how to read and write it:
    the values live in the records."""

    def __init__(self, default=None):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.default = default

    def __repr__(self):
        return '<%s()>' % self.__class__.__name__

    def value_from_default(self):
        return copy.copy(self.default)

    def unpack(self, stream: Stream):
        raise NotImplementedError(f'method {self.__class__.__name__}.unpack() not implemented')

    def pack(self, value) -> bytes:
        raise NotImplementedError(f'method {self.__class__.__name__}.pack() not implemented')

    def from_node(self, header, stream, compliant=Compliant.NONE):
        '''The payload of the node is the packed representation of the field.'''
        payload = Stream(read_payload(stream, header))
        self.logger.debug('unpacking %r from %r', self, header)
        return self.unpack(payload)

    def to_payload(self, value, source=None) -> bytes:
        return self.pack(value)


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a representation of the integer value of the field itself.
    An integer without a corresponding member is an error, never clamped.
    """

    def __init__(self, format, default=0, enum=None, exact=False):
        self.format = format
        self.enum = enum
        self.exact = exact
        super().__init__(default=default)

    def __repr__(self):
        if not self.enum:
            return '<%s(%s)>' % (self.__class__.__name__, self.format)

        return f'<{self.__class__.__name__}({self.format}, {self.enum.__name__})>'

    def value_from_default(self):
        if not self.enum or isinstance(self.default, self.enum):
            return super().value_from_default()

        return self.enum(self.default)

    def get_format(self):
        return '<%s' % self.format

    def from_node(self, header, stream, compliant=Compliant.NONE):
        if self.exact and header.payload_size != self.size:
            raise SizeMismatchException(
                f'payload of {header.name} is {header.payload_size} bytes instead of {self.size}')

        return super().from_node(header, stream, compliant)

    @property
    def size(self):
        return struct.calcsize(self.get_format())

    def _unpack_enum(self, value: int):
        try:
            return self.enum(value)
        except ValueError as e:
            raise InvalidDiscriminantException(
                f'enum {self.enum.__name__} doesn\'t have element with value 0x{value:x} in it') from e

    def unpack(self, stream):
        raw = stream.read_exact(self.size)
        value = struct.unpack(self.get_format(), raw)[0]

        if self.enum:
            value = self._unpack_enum(value)

        return value

    def pack(self, value) -> bytes:
        if self.enum:
            try:
                value = self.enum(value).value
            except ValueError as e:
                raise PackException(f'{value!r} is not a member of {self.enum.__name__}') from e

        try:
            return struct.pack(self.get_format(), value)
        except struct.error as e:
            raise PackException(f'cannot pack {value!r} as \'{self.format}\': {e}') from e


class CStringField(Field):
    """Null terminated string of at most "limit" bytes (terminator excluded).

    Without an encoding the value is kept as bytes."""

    def __init__(self, encoding=None, limit=CSTRING_LIMIT, default=None):
        self.encoding = encoding
        self.limit = limit
        if default is None:
            default = '' if encoding else b''
        super().__init__(default=default)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.encoding or 'bytes')

    def unpack(self, stream):
        offset = stream.tell()
        data = stream.read(self.limit + 1)
        end = data.find(b'\x00')

        if end < 0:
            if len(data) >= self.limit:
                raise StringTooLongException(
                    f'no terminator in the first {self.limit} bytes of the string at offset {offset}')
            raise StreamException(f'string at offset {offset} is not terminated')

        stream.seek(offset + end + 1)
        raw = data[:end]

        if not self.encoding:
            return raw

        try:
            return raw.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise BadNameException(f'{raw!r} is not valid {self.encoding}') from e

    def pack(self, value) -> bytes:
        if isinstance(value, str):
            value = value.encode(self.encoding or 'utf-8')

        if b'\x00' in value:
            raise PackException(f'{value!r} contains a terminator')
        if len(value) > self.limit:
            raise PackException(f'string of {len(value)} bytes is longer than {self.limit}')

        return bytes(value) + b'\x00'


class BytesField(Field):
    """Represent a contiguous chunk of bytes; without "n" it takes whatever remains."""

    def __init__(self, n=None, default=None):
        self.length = n
        if default is None:
            default = b'\x00' * n if n else b''
        super().__init__(default=default)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.length if self.length is not None else '*')

    def unpack(self, stream):
        if self.length is None:
            return stream.read_all()

        return stream.read_exact(self.length)

    def pack(self, value) -> bytes:
        if self.length is not None and len(value) != self.length:
            raise PackException(f'{self.__class__.__name__} can only accept binary strings of length {self.length}')

        return bytes(value)


class ArrayField(Field):
    '''Un/Pack a fixed number of elements of the same field.'''

    def __init__(self, field, n):
        self.field = field
        self.n = n
        super().__init__(default=None)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.field!r}, {self.n})>'

    def value_from_default(self):
        return [self.field.value_from_default() for _ in range(self.n)]

    def unpack(self, stream):
        return [self.field.unpack(stream) for _ in range(self.n)]

    def pack(self, value) -> bytes:
        if len(value) != self.n:
            raise PackException(f'expected {self.n} elements, got {len(value)}')

        return b''.join(self.field.pack(_) for _ in value)


class CountedArrayField(Field):
    '''Elements of the same field preceded by their count.'''

    def __init__(self, field, count_format='B', limit=None):
        self.field = field
        self.count = StructField(count_format)
        self.limit = limit
        super().__init__(default=None)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.field!r}, {self.count.format})>'

    def value_from_default(self):
        return []

    def unpack(self, stream):
        count = self.count.unpack(stream)
        return [self.field.unpack(stream) for _ in range(count)]

    def pack(self, value) -> bytes:
        if self.limit is not None and len(value) > self.limit:
            raise PackException(f'{len(value)} elements are more than {self.limit}')

        return self.count.pack(len(value)) + b''.join(self.field.pack(_) for _ in value)


class SizedBytesField(Field):
    '''Bytes preceded by their length.'''

    def __init__(self, size_format='I', default=b''):
        self.length = StructField(size_format)
        super().__init__(default=default)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.length.format})>'

    def unpack(self, stream):
        return stream.read_exact(self.length.unpack(stream))

    def pack(self, value) -> bytes:
        return self.length.pack(len(value)) + bytes(value)
