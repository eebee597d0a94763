import io
import logging
import os

from .exceptions import StreamException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/path/file object to
    uniform its properties: mainly we need seek() and read() methods
    that fail loudly with a StreamException.

    The stream is owned (and closed) only when it was opened by us from a path,
    a file object passed in stays the caller's business.'''
    def __init__(self, obj):
        self._owned = False
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_file)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __del__(self):
        self.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.obj)

    def close(self):
        if self.__dict__.get('_owned'):
            self.obj.close()
            self._owned = False

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        try:
            self.obj = open(self.obj, 'rb')
        except OSError as e:
            raise StreamException(f'cannot open \'{self.obj}\': {e}') from e
        self._owned = True

    def init_PosixPath(self):
        self.obj = os.fspath(self.obj)
        self.init_str()

    init_WindowsPath = init_PosixPath

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    init_bytearray = init_bytes
    init_memoryview = init_bytes

    def init_file(self):
        if not (hasattr(self.obj, 'read') and hasattr(self.obj, 'seek')):
            raise ValueError('\'%s\' is not a seekable stream' % self.obj.__class__.__name__)

    def seek(self, offset, whence=io.SEEK_SET):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        try:
            return self.obj.seek(offset, whence)
        except (OSError, ValueError) as e:
            raise StreamException(f'seek to {offset} failed: {e}') from e

    def tell(self):
        return self.obj.tell()

    def read(self, size=-1):
        return self.obj.read(size)

    def read_exact(self, size):
        '''Read exactly "size" bytes or complain.'''
        offset = self.obj.tell()
        data = self.obj.read(size)
        if len(data) != size:
            raise StreamException(f'short read at offset {offset}: wanted {size} bytes, got {len(data)}')

        return data

    def read_all(self):
        '''Returns all the data from the actual position to the end.'''
        return self.obj.read()

    @property
    def length(self):
        old_position = self.obj.tell()
        length = self.seek(0, io.SEEK_END)
        self.obj.seek(old_position)

        return length

    def write(self, data):
        return self.obj.write(data)


def as_stream(obj):
    '''Wrap in a Stream whatever is not already one.'''
    return obj if isinstance(obj, Stream) else Stream(obj)
