from .enum import Compliant
from .streams import as_stream


_UNSET = object()


class LazyData(object):
    '''Data that is not meant to be immediately decoded from its node.

    After unpacking only the header of the node is kept, and every call to read()
    decodes the payload again from the stream passed in: there is no cache
    so the instance can be shared freely between threads, each of them with its
    own stream.

    Authoring code builds it from the data to write instead (see of()).
    '''

    def __init__(self, kind, header=None, data=_UNSET):
        if (header is None) == (data is _UNSET):
            raise ValueError('LazyData needs either a header or some data')

        self.kind = kind
        self.header = header
        self._data = data

    @classmethod
    def of(cls, kind, data):
        return cls(kind, data=data)

    def __repr__(self):
        if self.header is not None:
            return '<%s(%r)>' % (self.__class__.__name__, self.header)

        return '<%s(data=%r)>' % (self.__class__.__name__, self._data)

    def __eq__(self, other):
        if not isinstance(other, LazyData):
            return NotImplemented

        if self.header is not None:
            return self.header == other.header

        return other.header is None and self._data == other._data

    def __hash__(self):
        return hash(self.header) if self.header is not None else id(self)

    @property
    def is_loaded(self):
        '''True when it carries data instead of a reference into a stream.'''
        return self.header is None

    def read(self, source=None, compliant=Compliant.NONE):
        if self.header is None:
            return self._data

        if source is None:
            raise ValueError(f'reading {self!r} needs a stream')

        return self.kind.from_node(self.header, as_stream(source), compliant)
