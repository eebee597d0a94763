'''
Every node is laid out as

    tag:4 bytes | size:u32 little endian | payload: size bytes

and the payload of a container node is a back-to-back sequence of complete
child nodes whose headers and payloads add up exactly to the size.
'''
import logging
import struct
from collections import namedtuple
from typing import Iterator, List, Tuple

from .exceptions import PackException, SizeMismatchException, StreamException, UnpackException
from .name import tag_to_int, tag_to_str
from .streams import Stream, as_stream


logger = logging.getLogger(__name__)

HEADER_SIZE = 8
MAX_PAYLOAD_SIZE = 0xffffffff

_HEADER = struct.Struct('<4sI')


class NodeHeader(namedtuple('NodeHeader', ['tag', 'payload_size', 'payload_offset'])):
    '''Plain data: it doesn't keep any reference to the stream it was read from.'''
    __slots__ = ()

    def __repr__(self):
        return '<%s(%s, size=%d, offset=0x%x)>' % (
            self.__class__.__name__, self.name, self.payload_size, self.payload_offset)

    @property
    def header_offset(self) -> int:
        return self.payload_offset - HEADER_SIZE

    @property
    def end(self) -> int:
        return self.payload_offset + self.payload_size

    @property
    def hash(self) -> int:
        '''The tag reinterpreted as a little endian u32.'''
        return tag_to_int(self.tag)

    @property
    def name(self) -> str:
        return tag_to_str(self.tag)


def parse_header(stream: Stream) -> NodeHeader:
    '''Read tag and size at the actual position; the payload starts right after.'''
    raw = stream.read_exact(HEADER_SIZE)
    tag, payload_size = _HEADER.unpack(raw)

    return NodeHeader(tag, payload_size, stream.tell())


def write_header(stream, tag: bytes, payload_size: int) -> int:
    stream.write(pack_header(tag, payload_size))

    return HEADER_SIZE


def pack_header(tag: bytes, payload_size: int) -> bytes:
    if len(tag) != 4:
        raise PackException(f'tag {tag!r} must be exactly 4 bytes')
    if not 0 <= payload_size <= MAX_PAYLOAD_SIZE:
        raise PackException(f'payload of {payload_size} bytes doesn\'t fit a node')

    return _HEADER.pack(tag, payload_size)


def pack_node(tag: bytes, payload: bytes) -> bytes:
    '''Header with the final size followed by the payload.'''
    return pack_header(tag, len(payload)) + payload


def check_bounds(stream: Stream, header: NodeHeader) -> None:
    length = stream.length
    if header.end > length:
        raise StreamException(
            f'payload of {header.name} ends at {header.end} but the stream is {length} bytes long')


def read_payload(stream: Stream, header: NodeHeader) -> bytes:
    stream.seek(header.payload_offset)

    return stream.read_exact(header.payload_size)


def read_children(stream: Stream, header: NodeHeader) -> Iterator[NodeHeader]:
    '''Enumerate the headers of the children of the given node.

    The stream is sought before each child so that the caller is free to
    read from it between two iterations. Only headers are read, never payloads.'''
    consumed = 0
    while consumed < header.payload_size:
        remaining = header.payload_size - consumed
        if remaining < HEADER_SIZE:
            raise SizeMismatchException(
                f'{remaining} trailing bytes in {header.name} are not a node header')

        stream.seek(header.payload_offset + consumed)
        child = parse_header(stream)
        consumed += HEADER_SIZE + child.payload_size

        if consumed > header.payload_size:
            raise SizeMismatchException(
                f'child {child.name} of {header.name} overruns its parent by {consumed - header.payload_size} bytes')

        logger.debug('found child %s at 0x%x', child.name, child.header_offset)

        yield child


class NodeTree(object):
    '''A header plus, lazily, its ordered children.'''

    def __init__(self, header: NodeHeader):
        self.header = header

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.header)

    @classmethod
    def from_stream(cls, source) -> 'NodeTree':
        stream = as_stream(source)
        header = parse_header(stream)
        check_bounds(stream, header)

        return cls(header)

    def children(self, stream) -> List['NodeTree']:
        return [NodeTree(_) for _ in read_children(stream, self.header)]

    def is_container(self, stream) -> bool:
        '''The format doesn't say which nodes are containers: we guess that
        a payload is made of children if it enumerates cleanly as such.'''
        if self.header.payload_size < HEADER_SIZE:
            return False

        try:
            for _ in read_children(stream, self.header):
                pass
        except UnpackException:
            return False

        return True

    def walk(self, stream, depth=0) -> Iterator[Tuple[int, NodeHeader]]:
        yield depth, self.header

        if not self.is_container(stream):
            return

        for child in self.children(stream):
            yield from child.walk(stream, depth=depth + 1)
