'''
Byte sources: a uniform, bounds-checked way of reading typed values out of
binary data, whatever the data comes from.

Two random access implementations exist

 1. ByteArrayReader: the data is all there, the length is known
 2. StreamReader: the data comes from a forward-only stream and it's
    pulled (and cached) only when somebody asks for it

and a SequentialReader that moves a cursor over either of them.

The byte order only affects the decoding of multi-byte values; by default
it's big endian (Motorola) like TIFF and JPEG do.
'''
import io
import logging
import struct
from enum import Enum, auto
from pathlib import Path

from bitstring import Bits

from .enum import Endianess
from .exceptions import (
    BoundsException,
    InvalidArgumentException,
    SizeLimitException,
    StreamReadException,
    TruncatedInputException,
)
from .rational import Rational


logger = logging.getLogger(__name__)


DEFAULT_CHUNK_LENGTH = 2 * 1024
DEFAULT_MAX_REQUEST_LENGTH = 64 * 1024 * 1024


class RandomAccessReader(object):
    '''Base class implementing the decoding of the common data types on top
    of get_bytes(): subclasses only need to know how to validate an index and
    how to return raw bytes.'''

    def __init__(self, byte_order=Endianess.BIG_ENDIAN):
        self.byte_order = byte_order

    def _get_byte_order(self):
        return self._byte_order

    def _set_byte_order(self, value):
        if not isinstance(value, Endianess):
            raise InvalidArgumentException(f'\'{value!r}\' is not a valid byte order')
        self._byte_order = value

    byte_order = property(_get_byte_order, _set_byte_order)

    @property
    def is_motorola_byte_order(self) -> bool:
        return self._byte_order is Endianess.BIG_ENDIAN

    @is_motorola_byte_order.setter
    def is_motorola_byte_order(self, value: bool):
        self._byte_order = Endianess.BIG_ENDIAN if value else Endianess.LITTLE_ENDIAN

    @property
    def length(self) -> int:
        raise NotImplementedError(f"property {self.__class__.__name__}.length not implemented")

    def to_unshifted_offset(self, index: int) -> int:
        return index

    def is_valid_index(self, index: int, count: int) -> bool:
        raise NotImplementedError(f"method {self.__class__.__name__}.is_valid_index() not implemented")

    def validate_index(self, index: int, count: int) -> None:
        raise NotImplementedError(f"method {self.__class__.__name__}.validate_index() not implemented")

    def validate_skip(self, index: int, count: int) -> None:
        '''Like validate_index() but for data that nobody is going to read.'''
        self.validate_index(index, count)

    def get_bytes(self, index: int, count: int) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}.get_bytes() not implemented")

    def _get_format(self, fmt: str) -> str:
        return '%s%s' % (self._byte_order.struct_prefix, fmt)

    def _unpack(self, fmt: str, index: int):
        fmt = self._get_format(fmt)
        raw = self.get_bytes(index, struct.calcsize(fmt))

        return struct.unpack(fmt, raw)[0]

    def get_uint8(self, index: int) -> int:
        return self.get_bytes(index, 1)[0]

    get_byte = get_uint8

    def get_int8(self, index: int) -> int:
        return struct.unpack('b', self.get_bytes(index, 1))[0]

    def get_bit(self, index: int) -> bool:
        '''The bit at position "index" counting from the least significant bit
        of the first byte.'''
        if index < 0:
            raise BoundsException(index, 1, 0)
        byte_index, bit_index = divmod(index, 8)
        bits = Bits(self.get_bytes(byte_index, 1))

        # Bits indexes from the most significant bit
        return bits[7 - bit_index]

    def get_uint16(self, index: int) -> int:
        return self._unpack('H', index)

    def get_int16(self, index: int) -> int:
        return self._unpack('h', index)

    def get_int24(self, index: int) -> int:
        '''Unsigned 24 bits integer, struct has no format for it.'''
        return int.from_bytes(self.get_bytes(index, 3), self._byte_order.value)

    def get_uint32(self, index: int) -> int:
        return self._unpack('I', index)

    def get_int32(self, index: int) -> int:
        return self._unpack('i', index)

    def get_uint64(self, index: int) -> int:
        return self._unpack('Q', index)

    def get_int64(self, index: int) -> int:
        return self._unpack('q', index)

    def get_float32(self, index: int) -> float:
        return self._unpack('f', index)

    def get_double64(self, index: int) -> float:
        return self._unpack('d', index)

    def get_s15_fixed16(self, index: int) -> float:
        '''Fixed point value with a signed 16 bits integer part and 16 bits of fraction.'''
        raw = self._unpack('i', index)
        return raw / 65536.0

    def get_rational(self, index: int) -> Rational:
        raw = self.get_bytes(index, 8)
        numerator, denominator = struct.unpack(self._get_format('II'), raw)
        return Rational(numerator, denominator)

    def get_signed_rational(self, index: int) -> Rational:
        raw = self.get_bytes(index, 8)
        numerator, denominator = struct.unpack(self._get_format('ii'), raw)
        return Rational(numerator, denominator)

    def get_string(self, index: int, count: int, encoding='utf-8') -> str:
        return decode(self.get_bytes(index, count), encoding)

    def get_null_terminated_bytes(self, index: int, max_length: int) -> bytes:
        '''Returns the bytes starting at index up to (excluded) the first NUL byte
        or up to max_length bytes if no NUL is found before.'''
        if max_length < 0:
            raise BoundsException(index, max_length, 0)

        data = bytearray()
        while len(data) < max_length:
            b = self.get_uint8(index + len(data))
            if b == 0:
                break
            data.append(b)

        return bytes(data)

    def get_null_terminated_string(self, index: int, max_length: int, encoding='utf-8') -> str:
        return decode(self.get_null_terminated_bytes(index, max_length), encoding)


class ByteArrayReader(RandomAccessReader):
    '''Reader over data already in memory.

    "base_offset" allows to see a sub-region of the buffer as starting at zero.'''

    def __init__(self, buffer, base_offset=0, byte_order=Endianess.BIG_ENDIAN):
        if buffer is None:
            raise InvalidArgumentException('the buffer must not be None')
        if not isinstance(buffer, (bytes, bytearray, memoryview)):
            raise InvalidArgumentException(f'\'{buffer.__class__.__name__}\' is not a bytes-like object')
        if base_offset < 0:
            raise InvalidArgumentException('base_offset must be zero or greater')

        super().__init__(byte_order=byte_order)
        # take a copy so that nobody can change the bytes under our feet
        self._buffer = bytes(buffer)
        self._base_offset = base_offset

    def __repr__(self):
        return f'<{self.__class__.__name__}(length={self.length}, base_offset={self._base_offset})>'

    @property
    def length(self) -> int:
        return max(len(self._buffer) - self._base_offset, 0)

    def to_unshifted_offset(self, index: int) -> int:
        return index + self._base_offset

    def is_valid_index(self, index: int, count: int) -> bool:
        return count >= 0 and index >= 0 and index + count <= self.length

    def validate_index(self, index: int, count: int) -> None:
        if not self.is_valid_index(index, count):
            raise BoundsException(self.to_unshifted_offset(index), count, len(self._buffer))

    def get_bytes(self, index: int, count: int) -> bytes:
        self.validate_index(index, count)
        start = index + self._base_offset

        return self._buffer[start:start + count]


class BufferState(Enum):
    '''Life cycle of the cache of a StreamReader'''
    EMPTY              = auto()
    PARTIALLY_BUFFERED = auto()
    FULLY_BUFFERED     = auto()  # the stream ended and every request has been satisfied
    EXHAUSTED          = auto()  # the stream ended before a request could be satisfied
    ERRORED            = auto()  # the stream raised while reading


class StreamReader(RandomAccessReader):
    '''Random access over a forward-only stream.

    The bytes read from the stream are appended to an arena that is never
    modified, so that any offset already seen can be read again.

    Since the length fields and the offsets in a file are untrusted, a single
    request can't ask for more than "max_request_length" bytes nor make the
    arena grow by more than that; if "max_buffer_length" is indicated, the
    arena can't grow past it.

    Skipping a region too large to be buffered reads it and throws it away:
    the arena restarts after the skipped region and what was before it
    can't be read anymore.

    After a failure (EXHAUSTED or ERRORED) the reader is not usable anymore.
    '''

    def __init__(self, stream, chunk_length=DEFAULT_CHUNK_LENGTH, max_request_length=DEFAULT_MAX_REQUEST_LENGTH,
                 max_buffer_length=None, byte_order=Endianess.BIG_ENDIAN):
        if stream is None:
            raise InvalidArgumentException('the stream must not be None')
        if not hasattr(stream, 'read'):
            raise InvalidArgumentException(f'\'{stream.__class__.__name__}\' has no read() method')
        if chunk_length <= 0:
            raise InvalidArgumentException('chunk_length must be greater than zero')

        super().__init__(byte_order=byte_order)
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self._stream = stream
        self._chunk_length = chunk_length
        self._max_request_length = max_request_length
        self._max_buffer_length = max_buffer_length
        self._arena = bytearray()
        self._arena_offset = 0  # absolute offset of the first byte of the arena
        self._lookahead = b''
        self._state = BufferState.EMPTY
        self._failure = None

    def __repr__(self):
        return f'<{self.__class__.__name__}(buffered={self.buffered_length}, state={self._state.name})>'

    @property
    def state(self) -> BufferState:
        return self._state

    @property
    def buffered_length(self) -> int:
        '''Number of bytes pulled from the stream so far.'''
        return self._arena_offset + len(self._arena)

    @property
    def length(self) -> int:
        '''Reads the whole stream in order to know its length.'''
        self._check_usable()
        while self._state not in (BufferState.FULLY_BUFFERED, BufferState.EXHAUSTED):
            if self._max_buffer_length is not None and len(self._arena) >= self._max_buffer_length:
                # the arena is full: it's a problem only if the stream has more to give
                if not self._lookahead:
                    self._lookahead = self._read(1)
                if not self._lookahead:
                    self._state = BufferState.FULLY_BUFFERED
                    break
                raise SizeLimitException(len(self._arena) + 1, self._max_buffer_length)
            self._fill(self.buffered_length + self._chunk_length)

        return self.buffered_length

    def _check_usable(self):
        if self._failure is not None:
            raise self._failure

    def _fail(self, state, exception):
        self._state = state
        self._failure = exception
        raise exception

    def _read(self, length: int) -> bytes:
        '''At most length bytes from the stream, an empty result means the stream ended.'''
        if self._lookahead:
            chunk, self._lookahead = self._lookahead[:length], self._lookahead[length:]
            return chunk

        try:
            chunk = self._stream.read(length)
        except (OSError, ValueError) as e:
            self.logger.error(f'failed reading from stream: {e}')
            exc = StreamReadException(f'failed reading from stream: {e}')
            exc.__cause__ = e
            self._fail(BufferState.ERRORED, exc)

        return chunk or b''

    def _fill(self, end: int) -> None:
        '''Pull data from the stream until the arena covers up to end or the stream ends.'''
        while self.buffered_length < end and self._state is not BufferState.FULLY_BUFFERED:
            length = self._chunk_length
            if self._max_buffer_length is not None:
                length = min(length, self._max_buffer_length - len(self._arena))
                if length <= 0:
                    break

            chunk = self._read(length)

            if not chunk:
                self.logger.debug(f'stream ended after {self.buffered_length} bytes')
                self._state = BufferState.FULLY_BUFFERED
                break

            self._arena.extend(chunk)
            self._state = BufferState.PARTIALLY_BUFFERED

    def _exceeds_limits(self, end: int) -> bool:
        if end - self.buffered_length > self._max_request_length:
            return True

        return self._max_buffer_length is not None and end - self._arena_offset > self._max_buffer_length

    def is_valid_index(self, index: int, count: int) -> bool:
        if index < self._arena_offset or count < 0 or self._failure is not None:
            return False

        end = index + count
        if count > self._max_request_length or self._exceeds_limits(end):
            return False

        self._fill(end)

        return end <= self.buffered_length

    def validate_index(self, index: int, count: int) -> None:
        self._check_usable()

        if index < 0 or count < 0:
            raise BoundsException(index, count, self.buffered_length)

        if index < self._arena_offset:
            raise BoundsException(index, count, self.buffered_length,
                                  message=f'Offset {index} has been skipped and discarded (the data restarts at {self._arena_offset})')

        if count > self._max_request_length:
            raise SizeLimitException(count, self._max_request_length)

        end = index + count
        if end - self.buffered_length > self._max_request_length:
            raise SizeLimitException(end - self.buffered_length, self._max_request_length)
        if self._max_buffer_length is not None and end - self._arena_offset > self._max_buffer_length:
            raise SizeLimitException(end - self._arena_offset, self._max_buffer_length)

        self._fill(end)

        if end > self.buffered_length:
            self._fail(BufferState.EXHAUSTED, TruncatedInputException(index, count, self.buffered_length))

    def validate_skip(self, index: int, count: int) -> None:
        self._check_usable()

        if index < 0 or count < 0:
            raise BoundsException(index, count, self.buffered_length)

        end = index + count
        if index < self._arena_offset or not self._exceeds_limits(end):
            self.validate_index(index, count)
            return

        self.logger.debug(f'discarding {end - self.buffered_length} bytes up to offset {end}')

        self._arena_offset = self.buffered_length
        self._arena = bytearray()

        while self._arena_offset < end:
            chunk = self._read(min(self._chunk_length, end - self._arena_offset))
            if not chunk:
                self._fail(BufferState.EXHAUSTED, TruncatedInputException(index, count, self._arena_offset))
            self._arena_offset += len(chunk)

        self._state = BufferState.PARTIALLY_BUFFERED

    def get_bytes(self, index: int, count: int) -> bytes:
        self.validate_index(index, count)
        start = index - self._arena_offset

        return bytes(self._arena[start:start + count])


class SequentialReader(object):
    '''A cursor moving forward over a RandomAccessReader.

    The byte order is the one of the underlying reader.'''

    def __init__(self, reader: RandomAccessReader, position=0):
        if reader is None:
            raise InvalidArgumentException('the reader must not be None')
        self.reader = reader
        self.position = position
        self.history = []

    def __repr__(self):
        return f'<{self.__class__.__name__}(position={self.position}, reader={self.reader!r})>'

    def _advance(self, method, count):
        value = method(self.position)
        self.position += count
        return value

    def get_byte(self) -> int:
        return self._advance(self.reader.get_uint8, 1)

    def get_int8(self) -> int:
        return self._advance(self.reader.get_int8, 1)

    def get_uint16(self) -> int:
        return self._advance(self.reader.get_uint16, 2)

    def get_int16(self) -> int:
        return self._advance(self.reader.get_int16, 2)

    def get_uint32(self) -> int:
        return self._advance(self.reader.get_uint32, 4)

    def get_int32(self) -> int:
        return self._advance(self.reader.get_int32, 4)

    def get_int64(self) -> int:
        return self._advance(self.reader.get_int64, 8)

    def get_bytes(self, count: int) -> bytes:
        value = self.reader.get_bytes(self.position, count)
        self.position += count
        return value

    def get_string(self, count: int, encoding='utf-8') -> str:
        return decode(self.get_bytes(count), encoding)

    def skip(self, count: int) -> None:
        '''Move forward checking the skipped bytes exist.'''
        self.reader.validate_skip(self.position, count)
        self.position += count

    def try_skip(self, count: int) -> bool:
        '''Like skip() but returns False instead of raising when there is not enough data.'''
        if count < 0 or not self.reader.is_valid_index(self.position, count):
            return False
        self.position += count
        return True

    def is_at_end(self) -> bool:
        return not self.reader.is_valid_index(self.position, 1)

    def save(self):
        self.history.append(self.position)

    def restore(self):
        self.position = self.history.pop()


def decode(raw: bytes, encoding='utf-8') -> str:
    '''Decoding never fails: unknown encodings fall back to latin-1 and
    invalid sequences are replaced.'''
    try:
        return raw.decode(encoding, errors='replace')
    except LookupError:
        logger.warning(f'unknown encoding \'{encoding}\', falling back to latin-1')
        return raw.decode('latin-1')


def create_reader(obj, **kwargs) -> RandomAccessReader:
    '''Here we normalize the object passed by the caller in order to be accessed
    as a RandomAccessReader: raw bytes stay in memory, a path is opened and a
    stream-like object is wrapped lazily.'''
    if obj is None:
        raise InvalidArgumentException('nothing to read from')

    if isinstance(obj, RandomAccessReader):
        return obj

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return ByteArrayReader(obj, **kwargs)

    if isinstance(obj, (str, Path)):
        logger.debug('opening path \'%s\'' % obj)
        with open(obj, 'rb') as f:
            return ByteArrayReader(f.read(), **kwargs)

    if isinstance(obj, io.IOBase) or hasattr(obj, 'read'):
        return StreamReader(obj, **kwargs)

    raise InvalidArgumentException('\'%s\' is the wrong kind of source to use' % obj.__class__.__name__)
