import struct
import threading

import pytest

from munge.core import Lazy
from munge.exceptions import PackException
from munge.fields import BytesField, StructField
from munge.header import parse_header
from munge.lazy import LazyData
from munge.level.script import LevelScript
from munge.streams import Stream


def node(tag, payload=b''):
    return tag + struct.pack('<I', len(payload)) + payload


SCRIPT = node(b'scr_', node(b'NAME', b'test\x00') + node(b'INFO', b'\x01') + node(b'BODY', b'\x01\x02\x03'))


def test_read_is_repeatable():
    script = LevelScript.from_stream(SCRIPT)
    stream = Stream(SCRIPT)

    assert script.data.read(stream) == b'\x01\x02\x03'
    assert script.data.read(stream) == b'\x01\x02\x03'
    assert not script.data.is_loaded


def test_read_doesnt_depend_on_position():
    script = LevelScript.from_stream(SCRIPT)
    stream = Stream(SCRIPT)
    stream.seek(len(SCRIPT))

    assert script.data.read(stream) == b'\x01\x02\x03'


def test_read_needs_a_stream():
    script = LevelScript.from_stream(SCRIPT)

    with pytest.raises(ValueError):
        script.data.read()


def test_read_from_bytes():
    script = LevelScript.from_stream(SCRIPT)

    assert script.data.read(SCRIPT) == b'\x01\x02\x03'


def test_read_from_threads():
    '''Each thread uses its own stream on the same instance.'''
    script = LevelScript.from_stream(SCRIPT)
    results = []

    def reader():
        results.append(script.data.read(Stream(SCRIPT)))

    threads = [threading.Thread(target=reader) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == [b'\x01\x02\x03'] * 8


def test_of():
    data = LazyData.of(StructField('I'), 42)

    assert data.is_loaded
    assert data.read() == 42
    assert data == LazyData.of(StructField('I'), 42)
    assert Lazy(StructField('I')).to_payload(data) == b'\x2a\x00\x00\x00'


def test_needs_header_or_data():
    with pytest.raises(ValueError):
        LazyData(BytesField())

    header = parse_header(Stream(node(b'BODY')))
    with pytest.raises(ValueError):
        LazyData(BytesField(), header=header, data=b'')


def test_equality_by_header():
    first = LevelScript.from_stream(SCRIPT)
    second = LevelScript.from_stream(SCRIPT)

    assert first.data == second.data
    assert first == second
    assert first.data != LazyData.of(BytesField(), b'\x01\x02\x03')


def test_to_payload_needs_source():
    script = LevelScript.from_stream(SCRIPT)
    kind = Lazy(BytesField())

    with pytest.raises(PackException):
        kind.to_payload(script.data)

    assert kind.to_payload(script.data, Stream(SCRIPT)) == b'\x01\x02\x03'


def test_default():
    data = Lazy(BytesField()).value_from_default()

    assert data.is_loaded
    assert data.read() == b''
