import io
import struct

import pytest

from metastruct.enum import Endianess
from metastruct.exceptions import (
    BoundsException,
    InvalidArgumentException,
    SizeLimitException,
    StreamReadException,
    TruncatedInputException,
)
from metastruct.rational import Rational
from metastruct.streams import (
    BufferState,
    ByteArrayReader,
    SequentialReader,
    StreamReader,
    create_reader,
)


DATA = bytes(range(16))


class TrickleStream(object):
    '''Returns at most 3 bytes per read(), like a slow socket.'''

    def __init__(self, data):
        self._stream = io.BytesIO(data)

    def read(self, count):
        return self._stream.read(min(count, 3))


class BrokenStream(object):

    def __init__(self, data):
        self._data = data
        self._done = False

    def read(self, count):
        if self._done:
            raise OSError('device not ready')
        self._done = True
        return self._data


def test_buffer_reads_within_bounds():
    reader = ByteArrayReader(DATA)

    assert reader.length == 16
    for index in range(len(DATA)):
        assert reader.get_uint8(index) == index
    assert reader.get_bytes(4, 4) == b'\x04\x05\x06\x07'
    assert reader.get_bytes(16, 0) == b''


def test_buffer_reads_beyond_the_end():
    reader = ByteArrayReader(b'\x00\x01\x02\x03')

    with pytest.raises(BoundsException) as excinfo:
        reader.get_bytes(3, 2)

    assert excinfo.value.index == 3
    assert excinfo.value.count == 2
    assert excinfo.value.length == 4
    assert str(excinfo.value) == 'Attempt to read from beyond end of underlying data source ' \
                                 '(requested index: 3, requested count: 2, max index: 3)'

    with pytest.raises(BoundsException):
        reader.get_uint8(4)

    with pytest.raises(BoundsException):
        reader.get_uint32(1)


def test_buffer_negative_index_and_count():
    reader = ByteArrayReader(DATA)

    with pytest.raises(BoundsException):
        reader.get_uint8(-1)

    with pytest.raises(BoundsException):
        reader.get_bytes(0, -1)

    assert not reader.is_valid_index(-1, 1)
    assert not reader.is_valid_index(0, -1)
    assert reader.is_valid_index(15, 1)
    assert not reader.is_valid_index(15, 2)


def test_buffer_invalid_construction():
    with pytest.raises(InvalidArgumentException):
        ByteArrayReader(None)

    with pytest.raises(InvalidArgumentException):
        ByteArrayReader('not bytes')

    with pytest.raises(InvalidArgumentException):
        ByteArrayReader(DATA, base_offset=-1)


def test_buffer_base_offset():
    reader = ByteArrayReader(b'\x00\x01\x02\x03', base_offset=2)

    assert reader.length == 2
    assert reader.get_uint8(0) == 2
    assert reader.to_unshifted_offset(1) == 3

    with pytest.raises(BoundsException):
        reader.get_uint8(2)


def test_byte_order():
    reader = ByteArrayReader(DATA)

    assert reader.byte_order is Endianess.BIG_ENDIAN
    assert reader.is_motorola_byte_order
    assert reader.get_uint16(0) == 0x0001
    assert reader.get_int24(0) == 0x000102
    assert reader.get_int32(0) == 0x00010203
    assert reader.get_uint64(0) == 0x0001020304050607

    reader.byte_order = Endianess.INTEL

    assert not reader.is_motorola_byte_order
    assert reader.get_uint16(0) == 0x0100
    assert reader.get_int24(0) == 0x020100
    assert reader.get_int32(0) == 0x03020100
    assert reader.get_int64(0) == 0x0706050403020100
    # single bytes are not affected
    assert reader.get_uint8(1) == 1

    reader.is_motorola_byte_order = True

    assert reader.byte_order is Endianess.MOTOROLA

    with pytest.raises(InvalidArgumentException):
        reader.byte_order = 'big'


def test_signed_values():
    reader = ByteArrayReader(b'\xff\xfe\xff\xff\xff\xfe')

    assert reader.get_int8(0) == -1
    assert reader.get_uint8(0) == 0xff
    assert reader.get_int16(0) == -2
    assert reader.get_uint16(0) == 0xfffe
    assert reader.get_int32(2) == -2
    assert reader.get_uint32(2) == 0xfffffffe


def test_floating_point_values():
    reader = ByteArrayReader(struct.pack('>fd', 1.5, -0.25) + b'\x00\x01\x80\x00')

    assert reader.get_float32(0) == 1.5
    assert reader.get_double64(4) == -0.25
    assert reader.get_s15_fixed16(12) == 1.5


def test_rationals():
    reader = ByteArrayReader(struct.pack('>II', 1, 200) + struct.pack('>ii', -1, 3))

    assert reader.get_rational(0).equals_exact(Rational(1, 200))
    assert reader.get_signed_rational(8).equals_exact(Rational(-1, 3))


def test_bits():
    reader = ByteArrayReader(b'\x01\x80')

    assert reader.get_bit(0)
    assert not reader.get_bit(1)
    assert not reader.get_bit(8)
    assert reader.get_bit(15)

    with pytest.raises(BoundsException):
        reader.get_bit(16)

    with pytest.raises(BoundsException):
        reader.get_bit(-1)


def test_strings():
    reader = ByteArrayReader(b'abc\x00def\xff')

    assert reader.get_string(0, 3) == 'abc'
    assert reader.get_null_terminated_string(0, 10) == 'abc'
    assert reader.get_null_terminated_string(0, 2) == 'ab'
    assert reader.get_null_terminated_bytes(4, 3) == b'def'
    assert reader.get_string(4, 4, 'latin-1') == 'def\xff'
    # invalid sequences are replaced, unknown encodings use latin-1
    assert reader.get_string(4, 4) == 'def\ufffd'
    assert reader.get_string(4, 4, 'no-such-encoding') == 'def\xff'

    with pytest.raises(BoundsException):
        reader.get_null_terminated_bytes(4, 10)


def test_stream_none():
    with pytest.raises(InvalidArgumentException):
        StreamReader(None)

    with pytest.raises(InvalidArgumentException):
        StreamReader(io.BytesIO(DATA), chunk_length=0)


@pytest.mark.parametrize('chunk_length', [1, 2, 5, 16, 2048])
def test_stream_matches_buffer(chunk_length):
    buffer = ByteArrayReader(DATA)
    stream = StreamReader(TrickleStream(DATA), chunk_length=chunk_length)

    assert stream.state is BufferState.EMPTY

    # out of order on purpose
    for index in (10, 0, 15, 3):
        assert stream.get_uint8(index) == buffer.get_uint8(index)
        assert stream.get_bytes(0, index) == buffer.get_bytes(0, index)

    assert stream.get_int32(4) == buffer.get_int32(4)
    assert stream.get_rational(8) == buffer.get_rational(8)
    assert stream.length == 16
    assert stream.state is BufferState.FULLY_BUFFERED


def test_stream_is_lazy():
    stream = StreamReader(io.BytesIO(b'\x00' * 10000), chunk_length=100)

    stream.get_uint8(150)

    assert stream.buffered_length == 200
    assert stream.state is BufferState.PARTIALLY_BUFFERED


def test_stream_truncated():
    stream = StreamReader(io.BytesIO(DATA))

    assert not stream.is_valid_index(15, 2)
    assert stream.state is BufferState.FULLY_BUFFERED

    with pytest.raises(TruncatedInputException) as excinfo:
        stream.get_bytes(15, 2)

    assert not isinstance(excinfo.value, BoundsException)
    assert excinfo.value.length == 16
    assert stream.state is BufferState.EXHAUSTED

    # terminal state: even valid offsets are refused now
    with pytest.raises(TruncatedInputException):
        stream.get_uint8(0)


def test_stream_negative_index():
    stream = StreamReader(io.BytesIO(DATA))

    with pytest.raises(BoundsException):
        stream.get_uint8(-1)

    assert stream.get_uint8(1) == 1


def test_stream_size_limits():
    stream = StreamReader(io.BytesIO(DATA), max_request_length=4)

    with pytest.raises(SizeLimitException) as excinfo:
        stream.get_bytes(0, 5)

    assert excinfo.value.requested == 5
    assert excinfo.value.limit == 4
    # nothing has been pulled from the stream
    assert stream.buffered_length == 0
    assert stream.get_bytes(0, 4) == DATA[:4]

    stream = StreamReader(io.BytesIO(DATA), max_buffer_length=8)

    assert stream.get_bytes(4, 4) == DATA[4:8]

    with pytest.raises(SizeLimitException):
        stream.get_bytes(6, 4)


def test_stream_errored():
    stream = StreamReader(BrokenStream(DATA[:4]), chunk_length=4)

    assert stream.get_uint32(0) == 0x00010203

    with pytest.raises(StreamReadException) as excinfo:
        stream.get_uint8(4)

    assert isinstance(excinfo.value.__cause__, OSError)
    assert stream.state is BufferState.ERRORED

    with pytest.raises(StreamReadException):
        stream.get_uint8(0)


def test_stream_growth_is_limited(make_lazy_stream):
    stream = StreamReader(make_lazy_stream(zeros=300 * 1024 * 1024))

    assert not stream.is_valid_index(200 * 1024 * 1024, 1)

    with pytest.raises(SizeLimitException):
        stream.get_bytes(200 * 1024 * 1024, 1)

    # nothing has been pulled and the reader is still usable
    assert stream.buffered_length == 0
    assert stream.get_uint8(1024) == 0


def test_stream_growth_per_request():
    stream = StreamReader(io.BytesIO(b'x' * 100), chunk_length=4, max_request_length=10)

    assert stream.get_uint8(5) == 0x78
    assert stream.buffered_length == 8

    with pytest.raises(SizeLimitException):
        stream.get_uint8(30)

    assert stream.get_uint8(15) == 0x78
    assert stream.buffered_length == 16


def test_stream_length_at_the_buffer_limit():
    assert StreamReader(io.BytesIO(b'x' * 4096), max_buffer_length=4096).length == 4096

    stream = StreamReader(io.BytesIO(b'x' * 4097), max_buffer_length=4096)

    with pytest.raises(SizeLimitException):
        stream.length

    # the byte read to check for the end is not lost
    with pytest.raises(SizeLimitException):
        stream.length

    assert stream.get_bytes(4090, 6) == b'x' * 6


def test_stream_closed():
    source = io.BytesIO(DATA)
    source.close()

    stream = StreamReader(source)

    with pytest.raises(StreamReadException) as excinfo:
        stream.get_uint8(0)

    assert isinstance(excinfo.value.__cause__, ValueError)
    assert stream.state is BufferState.ERRORED


def test_stream_skip_discards_large_regions(make_lazy_stream):
    stream = StreamReader(make_lazy_stream(b'head', 100, b'tail'), chunk_length=8, max_request_length=16)
    sequential = SequentialReader(stream)

    assert sequential.get_bytes(4) == b'head'

    sequential.skip(100)

    assert sequential.get_bytes(4) == b'tail'
    assert sequential.is_at_end()
    assert stream.buffered_length == 108

    # what has been skipped is gone
    with pytest.raises(BoundsException):
        stream.get_uint8(0)


def test_stream_skip_small_regions_are_kept():
    stream = StreamReader(io.BytesIO(DATA), chunk_length=4)
    sequential = SequentialReader(stream)

    sequential.skip(10)

    assert sequential.get_byte() == 10
    assert stream.get_uint8(0) == 0


def test_stream_skip_beyond_the_end(make_lazy_stream):
    stream = StreamReader(make_lazy_stream(zeros=50), chunk_length=8, max_request_length=16)

    with pytest.raises(TruncatedInputException):
        SequentialReader(stream).skip(100)

    assert stream.state is BufferState.EXHAUSTED


def test_sequential_reader():
    sequential = SequentialReader(ByteArrayReader(DATA))

    assert sequential.get_byte() == 0
    assert sequential.get_uint16() == 0x0102
    assert sequential.get_bytes(3) == b'\x03\x04\x05'
    assert sequential.position == 6

    sequential.save()
    assert sequential.get_uint32() == 0x06070809
    sequential.restore()
    assert sequential.position == 6

    sequential.skip(9)
    assert not sequential.is_at_end()
    assert not sequential.try_skip(2)
    assert sequential.position == 15
    assert sequential.get_int8() == 15
    assert sequential.is_at_end()

    with pytest.raises(BoundsException):
        sequential.get_byte()

    with pytest.raises(InvalidArgumentException):
        SequentialReader(None)


def test_create_reader(tmp_path):
    path = tmp_path / 'data.bin'
    path.write_bytes(DATA)

    assert isinstance(create_reader(DATA), ByteArrayReader)
    assert isinstance(create_reader(bytearray(DATA)), ByteArrayReader)
    assert create_reader(path).get_bytes(0, 16) == DATA
    assert create_reader(str(path)).length == 16
    assert isinstance(create_reader(io.BytesIO(DATA)), StreamReader)

    reader = ByteArrayReader(DATA)
    assert create_reader(reader) is reader

    with pytest.raises(InvalidArgumentException):
        create_reader(None)

    with pytest.raises(InvalidArgumentException):
        create_reader(42)
