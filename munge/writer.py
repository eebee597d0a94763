'''
Writing is done buffering the payload of every node in memory: once a node is
complete its header is known and the whole thing is handed over to its parent.
In this way the output doesn't need to be seekable.
'''
import io
import logging
from contextlib import contextmanager

from .core import Lazy, Record
from .fields import BytesField, CStringField
from .header import pack_node, MAX_PAYLOAD_SIZE
from .lazy import LazyData
from .name import as_name
from .exceptions import PackException


logger = logging.getLogger(__name__)


def infer_kind(value):
    '''Find out how to encode a value when not told explicitly.'''
    if isinstance(value, Record):
        return value.__class__
    if isinstance(value, LazyData):
        return Lazy(value.kind)
    if isinstance(value, (bytes, bytearray)):
        return BytesField()
    if isinstance(value, str):
        return CStringField(encoding='utf-8')

    raise PackException('don\'t know how to pack a value of type \'%s\'' % value.__class__.__name__)


class NodeWriter(object):
    '''Builder-style writer of a single node.

    "source" is the stream the lazy data to write must be read from, if any.'''

    def __init__(self, tag, source=None):
        self.tag = as_name(tag).tag
        self.source = source
        self._payload = io.BytesIO()

    def __repr__(self):
        return '<%s(%r, size=%d)>' % (self.__class__.__name__, self.tag, self.size)

    @property
    def size(self) -> int:
        '''Size of the payload written so far.'''
        return self._payload.tell()

    def write_raw(self, data: bytes) -> 'NodeWriter':
        if self.size + len(data) > MAX_PAYLOAD_SIZE:
            raise PackException(f'node {self.tag!r} is too large')

        self._payload.write(data)

        return self

    def write_node(self, tag, value, kind=None) -> 'NodeWriter':
        '''Append a child node encoding the value.'''
        kind = kind if kind is not None else infer_kind(value)
        logger.debug('writing child %r of %r with %r' % (tag, self.tag, kind))

        return self.write_raw(pack_node(as_name(tag).tag, kind.to_payload(value, self.source)))

    @contextmanager
    def build_node(self, tag):
        '''Nested writer whose node is appended on exit.'''
        child = NodeWriter(tag, source=self.source)
        yield child
        self.write_raw(child.getvalue())

    def getvalue(self) -> bytes:
        return pack_node(self.tag, self._payload.getvalue())

    def finish(self, stream) -> int:
        '''Write the complete node to the stream and return how many bytes it takes.'''
        data = self.getvalue()
        stream.write(data)

        return len(data)


def write_node(stream, tag, value, kind=None, source=None) -> int:
    kind = kind if kind is not None else infer_kind(value)
    data = pack_node(as_name(tag).tag, kind.to_payload(value, source))
    stream.write(data)

    return len(data)
