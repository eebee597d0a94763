import io
import struct

import pytest

from munge.exceptions import PackException, SizeMismatchException, StreamException
from munge.header import (
    HEADER_SIZE,
    NodeHeader,
    NodeTree,
    check_bounds,
    pack_node,
    parse_header,
    read_children,
    read_payload,
    write_header,
)
from munge.streams import Stream


def node(tag, payload=b''):
    return tag + struct.pack('<I', len(payload)) + payload


def test_parse_header():
    stream = Stream(node(b'NAME', b'test\x00'))

    header = parse_header(stream)

    assert header.tag == b'NAME'
    assert header.payload_size == 5
    assert header.payload_offset == 8
    assert header.header_offset == 0
    assert header.end == 13
    assert header.name == 'NAME'


def test_parse_header_at_position():
    stream = Stream(b'\xaa' * 3 + node(b'INFO', b'\x01'))
    stream.seek(3)

    header = parse_header(stream)

    assert header == NodeHeader(b'INFO', 1, 11)


def test_parse_header_short_read():
    with pytest.raises(StreamException):
        parse_header(Stream(b'NAME\x05\x00'))


def test_parse_header_doesnt_check_bounds():
    '''Bounds are checked explicitly, the header alone is always readable.'''
    stream = Stream(b'NAME\xff\x00\x00\x00')

    header = parse_header(stream)

    assert header.payload_size == 0xff

    with pytest.raises(StreamException):
        check_bounds(stream, header)


def test_header_hash():
    header = parse_header(Stream(node(struct.pack('<I', 0xD8616526))))

    assert header.hash == 0xD8616526
    assert header.name == '0xd8616526'


def test_write_header():
    output = io.BytesIO()

    assert write_header(output, b'BODY', 3) == HEADER_SIZE
    assert output.getvalue() == b'BODY\x03\x00\x00\x00'


def test_pack_header_invalid():
    with pytest.raises(PackException):
        pack_node(b'BOD', b'')

    with pytest.raises(PackException):
        write_header(io.BytesIO(), b'BODY', -1)


def test_read_payload():
    data = node(b'scr_', node(b'BODY', b'\x01\x02\x03'))
    stream = Stream(data)
    root = parse_header(stream)

    child, = read_children(stream, root)

    assert read_payload(stream, child) == b'\x01\x02\x03'


def test_read_children():
    payload = node(b'NAME', b'test\x00') + node(b'INFO', b'\x01') + node(b'BODY', b'\x01\x02\x03')
    stream = Stream(node(b'scr_', payload))
    root = parse_header(stream)

    children = list(read_children(stream, root))

    assert [_.tag for _ in children] == [b'NAME', b'INFO', b'BODY']
    assert [_.payload_offset for _ in children] == [16, 29, 38]
    assert sum(HEADER_SIZE + _.payload_size for _ in children) == root.payload_size


def test_read_children_empty():
    stream = Stream(node(b'ucfb'))

    assert list(read_children(stream, parse_header(stream))) == []


def test_read_children_is_reentrant():
    '''Reading a payload between two children doesn't move the enumeration.'''
    payload = node(b'NAME', b'test\x00') + node(b'BODY', b'\x01\x02\x03')
    stream = Stream(node(b'scr_', payload))

    payloads = [read_payload(stream, _) for _ in read_children(stream, parse_header(stream))]

    assert payloads == [b'test\x00', b'\x01\x02\x03']


def test_read_children_overrun():
    payload = node(b'NAME', b'test\x00')
    # the child claims more than its parent contains
    data = b'scr_' + struct.pack('<I', len(payload)) + b'NAME' + struct.pack('<I', 100) + b'test\x00'
    stream = Stream(data + b'\x00' * 100)

    with pytest.raises(SizeMismatchException):
        list(read_children(stream, parse_header(stream)))


def test_read_children_trailing_bytes():
    payload = node(b'NAME', b'test\x00') + b'\x00\x00\x00'
    stream = Stream(node(b'scr_', payload))
    root = parse_header(stream)
    children = read_children(stream, root)

    assert next(children).tag == b'NAME'

    with pytest.raises(SizeMismatchException):
        next(children)


def test_read_children_truncated_stream():
    data = node(b'scr_', node(b'NAME', b'test\x00'))[:-9]
    stream = Stream(data)

    with pytest.raises(StreamException):
        list(read_children(stream, parse_header(stream)))


def test_node_tree_walk():
    script = node(b'scr_', node(b'NAME', b'test\x00') + node(b'INFO', b'\x01'))
    data = node(b'ucfb', script)
    stream = Stream(data)

    tree = NodeTree.from_stream(stream)

    assert [(depth, header.tag) for depth, header in tree.walk(stream)] == [
        (0, b'ucfb'),
        (1, b'scr_'),
        (2, b'NAME'),
        (2, b'INFO'),
    ]


def test_node_tree_leaf():
    stream = Stream(node(b'BODY', b'\x01\x02\x03\x04\x05\x06\x07\x08\x09'))

    tree = NodeTree.from_stream(stream)

    assert not tree.is_container(stream)
    assert [header.tag for _, header in tree.walk(stream)] == [b'BODY']


def test_node_tree_out_of_bounds():
    with pytest.raises(StreamException):
        NodeTree.from_stream(b'ucfb\x10\x00\x00\x00')
