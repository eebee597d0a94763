"""
Core module for the abstraction of the node format

"""
import logging
from typing import Dict, List, Tuple

from .enum import Compliant
from .meta import FieldBase, MetaRecord
from .lazy import LazyData
from .name import as_name, fnv1a_hash, fnv1a_matches, tag_from_int, tag_to_str
from .streams import Stream, as_stream
from .header import (
    NodeHeader,
    check_bounds,
    pack_node,
    parse_header,
    read_children,
    read_payload,
)
from .exceptions import (
    DuplicateChildException,
    InvalidPackException,
    MagicException,
    MissingChildException,
    PackException,
    UnknownChildException,
    UnpackException,
)


logger = logging.getLogger(__name__)


class Record(metaclass=MetaRecord):
    """
    Main class that defines a format: the fields declared in the body of
    a subclass build its schema, and each instance holds the plain values.
    """

    def __init__(self, **kwargs):
        for field_name, field in self.get_fields():
            value = kwargs.pop(field_name) if field_name in kwargs else field.value_from_default()
            setattr(self, field_name, value)

        if kwargs:
            raise TypeError('%s has no field named %s' % (self.__class__.__name__, ', '.join(kwargs)))

    @classmethod
    def get_fields(cls) -> List[Tuple[str, FieldBase]]:
        '''It returns a list of couples (name, field) in declaration order.'''
        return cls._meta.get_fields()

    @classmethod
    def value_from_default(cls):
        return cls()

    def as_dict(self) -> Dict[str, object]:
        return {_: getattr(self, _) for _ in self._meta.fields}

    def resolved(self, source=None):
        '''A copy with every lazy value read back from "source", so that a record
        decoded from a stream compares equal to the one it was written from.'''
        return self.__class__(**{_: _resolve(value, source) for _, value in self.as_dict().items()})

    def __eq__(self, other):
        if other.__class__ is not self.__class__:
            return NotImplemented

        return self.as_dict() == other.as_dict()

    def __repr__(self):
        msg = []
        for field_name, value in self.as_dict().items():
            msg.append('%s=%s' % (field_name, repr(value)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, value in self.as_dict().items():
            msg += '%s: %s\n' % (field_name, repr(value))
        return msg


def _resolve(value, source):
    if isinstance(value, LazyData):
        return LazyData.of(value.kind, _resolve(value.read(source), source))
    if isinstance(value, Record):
        return value.resolved(source)
    if isinstance(value, list):
        return [_resolve(_, source) for _ in value]

    return value


def _unpack_field(field_name, unpack, *args):
    '''Call "unpack" prepending the field name to the chain of any error raised.'''
    try:
        return unpack(*args)
    except UnpackException as e:
        e.chain.insert(0, field_name)
        raise


class PackedStruct(Record):
    '''Fields packed back to back in the payload of a single leaf node.'''

    @classmethod
    def unpack(cls, stream: Stream):
        values = {}
        for field_name, field in cls.get_fields():
            logger.debug('unpacking %s.%s at 0x%x' % (cls.__name__, field_name, stream.tell()))
            values[field_name] = _unpack_field(field_name, field.unpack, stream)

        return cls(**values)

    def pack(self) -> bytes:
        raw = b''
        for field_name, field in self.get_fields():
            field_raw = field.pack(getattr(self, field_name))
            logger.debug("field '{}' raw={}".format(field_name, field_raw))
            raw += field_raw

        return raw

    @property
    def size(self):
        return len(self.pack())

    @classmethod
    def from_node(cls, header: NodeHeader, stream: Stream, compliant=Compliant.NONE):
        return cls.unpack(Stream(read_payload(stream, header)))

    @classmethod
    def to_payload(cls, value, source=None) -> bytes:
        return value.pack()


class Lazy(object):
    '''Wraps a kind so that its nodes are decoded only on demand, see LazyData.'''

    def __init__(self, kind):
        self.kind = kind

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.kind)

    def value_from_default(self):
        return LazyData.of(self.kind, self.kind.value_from_default())

    def from_node(self, header, stream, compliant=Compliant.NONE):
        return LazyData(self.kind, header=header)

    def to_payload(self, value, source=None) -> bytes:
        if not value.is_loaded and source is None:
            raise PackException(f'{value!r} can be written only reading it from its source')

        return self.kind.to_payload(value.read(source), source)


class NodeField(FieldBase):
    '''Binds a field to the single child with the given tag.'''

    def __init__(self, tag, kind):
        self.node_name = as_name(tag)
        self.kind = kind

    def __repr__(self):
        return '<%s(%s, %r)>' % (self.__class__.__name__, self.node_name, self.kind)

    def value_from_default(self):
        return self.kind.value_from_default()

    def matches(self, header: NodeHeader) -> bool:
        return self.node_name.matches(header.tag)

    def unpack_children(self, children: List[NodeHeader], stream, compliant=Compliant.NONE):
        matching = [_ for _ in children if self.matches(_)]

        if not matching:
            raise MissingChildException(f'no child with tag {self.node_name}')

        if len(matching) > 1 and compliant & Compliant.STRICT:
            raise DuplicateChildException(f'{len(matching)} children with tag {self.node_name}')

        return self.kind.from_node(matching[0], stream, compliant)

    def get_write_tag(self) -> bytes:
        try:
            return self.node_name.tag
        except ValueError as e:
            raise PackException(f'prefix binding {self.node_name} needs an explicit tag to be written') from e

    def pack_children(self, value, source=None) -> bytes:
        return pack_node(self.get_write_tag(), self.kind.to_payload(value, source))


class NodesField(NodeField):
    '''Binds a field to all the children whose tag starts with the prefix, in order.'''

    def value_from_default(self):
        return []

    def matches(self, header: NodeHeader) -> bool:
        return self.node_name.is_prefix_of(header.tag)

    def unpack_children(self, children, stream, compliant=Compliant.NONE):
        values = []
        for index, child in enumerate(self.matches_of(children)):
            values.append(_unpack_field(str(index), self.kind.from_node, child, stream, compliant))

        return values

    def matches_of(self, children):
        return [_ for _ in children if self.matches(_)]

    def pack_children(self, value, source=None) -> bytes:
        if not value:
            return b''

        tag = self.get_write_tag()
        return b''.join(pack_node(tag, self.kind.to_payload(_, source)) for _ in value)


class ChoicesField(FieldBase):
    '''Binds a field to all the children whose tag is one of the keys of "kinds",
    keeping their order even when the tags are interleaved.

    The elements are written back with the tag of the first kind they are an
    instance of, so the kinds must be record classes.'''

    def __init__(self, kinds):
        self.kinds = [(as_name(tag), kind) for tag, kind in kinds.items()]

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(str(name) for name, _ in self.kinds))

    def value_from_default(self):
        return []

    def kind_of(self, header: NodeHeader):
        for name, kind in self.kinds:
            if name.matches(header.tag):
                return kind

        return None

    def matches(self, header: NodeHeader) -> bool:
        return self.kind_of(header) is not None

    def unpack_children(self, children, stream, compliant=Compliant.NONE):
        values = []
        for index, child in enumerate(_ for _ in children if self.matches(_)):
            values.append(_unpack_field(str(index), self.kind_of(child).from_node, child, stream, compliant))

        return values

    def pack_children(self, value, source=None) -> bytes:
        raw = b''
        for element in value:
            for name, kind in self.kinds:
                if isinstance(element, kind):
                    raw += pack_node(name.tag, kind.to_payload(element, source))
                    break
            else:
                raise PackException(f'{element!r} is not one of the kinds of {self!r}')

        return raw


class Node(Record):
    '''A record whose fields are the children of a container node.

    The class attribute "tag" is the tag expected when the record is the root
    of a file, "compliant" the checks always enabled for it and its children.'''

    tag = None
    compliant = Compliant.NONE

    @classmethod
    def from_node(cls, header: NodeHeader, stream: Stream, compliant=Compliant.NONE):
        compliant = compliant | cls.compliant
        children = list(read_children(stream, header))
        logger.debug('unpacking %s from %r with %d children' % (cls.__name__, header, len(children)))

        values = {}
        for field_name, field in cls.get_fields():
            values[field_name] = _unpack_field(field_name, field.unpack_children, children, stream, compliant)

        if compliant & Compliant.STRICT:
            for child in children:
                if not any(field.matches(child) for _, field in cls.get_fields()):
                    raise UnknownChildException(f'{child.name} is not a known child of {cls.__name__}')

        return cls(**values)

    @classmethod
    def from_stream(cls, source, compliant=Compliant.NONE):
        '''Parse a root node from a path, some bytes or a seekable file object.'''
        stream = as_stream(source)
        header = parse_header(stream)

        if cls.tag is not None and header.tag != as_name(cls.tag).tag:
            raise MagicException(f'expected root {cls.tag} instead of {header.name}')

        check_bounds(stream, header)

        return cls.from_node(header, stream, compliant)

    @classmethod
    def to_payload(cls, value, source=None) -> bytes:
        raw = b''
        for field_name, field in value.get_fields():
            logger.debug('packing %s.%s' % (cls.__name__, field_name))
            raw += field.pack_children(getattr(value, field_name), source)

        return raw

    def pack(self, tag=None, source=None) -> bytes:
        '''The whole node, header included.'''
        tag = tag if tag is not None else self.tag
        if tag is None:
            raise PackException(f'{self.__class__.__name__} doesn\'t have a default tag')

        return pack_node(as_name(tag).tag, self.to_payload(self, source))


class Pack(Record):
    '''Node containing exactly one child whose tag is the FNV-1a hash
    of the name of the pack, instead of a literal.

    Subclasses indicate the kind of the child with contents_kind().'''

    contents_kind = None

    def __init__(self, name_hash=0, contents=None):
        super().__init__()
        self.name_hash = name_hash
        self.contents = contents if contents is not None else self.get_contents_kind().value_from_default()

    @classmethod
    def get_contents_kind(cls):
        return cls.contents_kind

    @classmethod
    def from_name(cls, name, contents=None):
        return cls(name_hash=fnv1a_hash(name), contents=contents)

    def as_dict(self):
        return {'name_hash': self.name_hash, 'contents': self.contents}

    def __repr__(self):
        return '<%s(name_hash=0x%08x,contents=%r)>' % (self.__class__.__name__, self.name_hash, self.contents)

    def matches(self, name) -> bool:
        return fnv1a_matches(self.name_hash, name)

    @classmethod
    def from_node(cls, header: NodeHeader, stream: Stream, compliant=Compliant.NONE):
        children = list(read_children(stream, header))
        if len(children) != 1:
            raise InvalidPackException(
                f'{header.name} must contain exactly one child, it has {len(children)}')

        child = children[0]
        logger.debug('pack %s found' % tag_to_str(child.tag))
        contents = _unpack_field('contents', cls.get_contents_kind().from_node, child, stream, compliant)

        return cls(name_hash=child.hash, contents=contents)

    @classmethod
    def to_payload(cls, value, source=None) -> bytes:
        return pack_node(tag_from_int(value.name_hash), cls.get_contents_kind().to_payload(value.contents, source))
