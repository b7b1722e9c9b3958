import pytest

from netstruct.exceptions import StructuralError
from netstruct.streams import Stream


def test_bytes_stream_read_all():
    stream = Stream(b'\x01\x02\x03\x04\x05')

    assert stream.read(1) == b'\x01'
    assert stream.read(1) == b'\x02'
    assert stream.remaining() == 3
    assert stream.read_all() == b'\x03\x04\x05'
    assert stream.tell() == 5
    assert stream.remaining() == 0


def test_stream_short_read():
    stream = Stream(b'\x01\x02')

    with pytest.raises(StructuralError):
        stream.read(3)


def test_stream_wrong_type():
    with pytest.raises(ValueError):
        Stream('kebab')


def test_stream_rewind():
    stream = Stream(bytearray(b'abcdef'))
    stream.read(2)

    with stream.rewind():
        assert stream.read(2) == b'cd'

    assert stream.tell() == 2
    assert stream.peek(3) == b'cde'
    assert stream.tell() == 2


def test_substream():
    stream = Stream(memoryview(b'abcdef'))

    sub = stream.substream(4)

    assert sub.read_all() == b'abcd'
    assert stream.tell() == 4

    with pytest.raises(StructuralError):
        stream.substream(3)
