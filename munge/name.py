'''
# Node names

A node is identified by its 4-byte tag. Most tags are short ASCII strings
(`NAME`, `FMT_`) but some nodes, like the data packs, are addressed by the
hash of an arbitrary string instead: in that case the tag is the little endian
encoding of the 32-bit hash.

The hash is the FNV-1a used by the game engine, that ORs every byte with 0x20
before mixing it. The intent is case-folding but it also changes bytes that
are not letters (an underscore becomes 0x7f), and existing data depends on it.
'''
import string
import struct


OFFSET_BASIS = 2166136261
FNV_PRIME    = 16777619

_PRINTABLE = frozenset((string.ascii_letters + string.digits + '_').encode())


def fnv1a_hash(data) -> int:
    '''32-bit FNV-1a with the engine's OR 0x20 on every byte.'''
    if isinstance(data, str):
        data = data.encode()

    result = OFFSET_BASIS
    for byte in data:
        result ^= byte | 0x20
        result = (result * FNV_PRIME) & 0xffffffff

    return result


def fnv1a_matches(value: int, name) -> bool:
    return fnv1a_hash(name) == value


def tag_from_int(value: int) -> bytes:
    return struct.pack('<I', value)


def tag_to_int(tag: bytes) -> int:
    return struct.unpack('<I', tag)[0]


def tag_to_str(tag: bytes) -> str:
    '''Human readable form of a tag: the literal when printable, the hash otherwise.'''
    if len(tag) == 4 and all(_ in _PRINTABLE for _ in tag):
        return tag.decode('ascii')

    return '0x%08x' % tag_to_int(tag)


class NodeName(object):
    '''Identity of a node, resolved to tag bytes when matched against a header.'''

    @property
    def tag(self) -> bytes:
        raise NotImplementedError()

    def matches(self, tag: bytes) -> bool:
        return tag == self.tag

    def is_prefix_of(self, tag: bytes) -> bool:
        return self.matches(tag)

    def __eq__(self, other):
        return isinstance(other, NodeName) and self.tag == other.tag

    def __hash__(self):
        return hash(self.tag)


class Literal(NodeName):
    '''A literal tag like `NAME`. Prefixes (shorter than 4 bytes) can only be matched, never written.'''

    def __init__(self, tag):
        if isinstance(tag, str):
            tag = tag.encode('ascii')

        if not 0 < len(tag) <= 4:
            raise ValueError(f'a tag must be between 1 and 4 bytes, {tag!r} is not')

        self._tag = bytes(tag)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self._tag.decode('latin1'))

    def __str__(self):
        return self._tag.decode('latin1')

    @property
    def tag(self) -> bytes:
        if len(self._tag) != 4:
            raise ValueError(f'{self._tag!r} is a prefix, not a complete tag')

        return self._tag

    def matches(self, tag: bytes) -> bool:
        return tag == self._tag

    def is_prefix_of(self, tag: bytes) -> bool:
        return tag.startswith(self._tag)

    def __eq__(self, other):
        return isinstance(other, Literal) and self._tag == other._tag

    def __hash__(self):
        return hash(self._tag)


class Hashed(NodeName):
    '''A node addressed by the FNV-1a hash of its name.'''

    def __init__(self, value: int):
        if not 0 <= value <= 0xffffffff:
            raise ValueError(f'0x{value:x} is not a 32-bit hash')
        self.value = value

    @classmethod
    def from_string(cls, name):
        return cls(fnv1a_hash(name))

    def __repr__(self):
        return '<%s(0x%08x)>' % (self.__class__.__name__, self.value)

    def __str__(self):
        return '0x%08x' % self.value

    @property
    def tag(self) -> bytes:
        return tag_from_int(self.value)


def as_name(value) -> NodeName:
    if isinstance(value, NodeName):
        return value
    if isinstance(value, (str, bytes)):
        return Literal(value)
    if isinstance(value, int):
        return Hashed(value)

    raise ValueError('\'%s\' cannot be used as a node name' % value.__class__.__name__)
