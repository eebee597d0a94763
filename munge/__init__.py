"""
# Munge node format.

The files of the game are trees of nodes (also known as chunks): each node is
a 4-byte tag, a little endian u32 size and a payload of that size. The payload
is either raw data or a sequence of child nodes, and nothing in the file tells
the two apart: it's the schema of the record being decoded that decides.

Two basic main operations are defined for a record and its sub components:

 1. unpack (from_node()): read the binary data and build a high-level
    representation of that. Only the headers of the children are read in
    advance, the payloads are decoded by the fields that need them, and
    the Lazy ones are not decoded at all until read() is called.

 2. pack (to_payload()): encode the high-level representation into binary
    data. Each node is buffered in memory and emitted with its final size,
    so the output doesn't need to be seekable.

A record is described declaring its fields

    class LevelScript(Node):
        name = NodeField('NAME', fields.CStringField(encoding='utf-8'))
        info = NodeField('INFO', fields.StructField('B'))
        data = NodeField('BODY', Lazy(fields.BytesField()))

and any failure aborts the decoding of the whole record, with the chain
of the fields crossed available in the exception.
"""
from .core import ChoicesField, Node, NodeField, NodesField, Lazy, Pack, PackedStruct, Record
from .enum import Compliant
from .header import NodeHeader, NodeTree, parse_header, read_children, read_payload, write_header
from .lazy import LazyData
from .name import Hashed, Literal, fnv1a_hash
from .streams import Stream
from .writer import NodeWriter, write_node
