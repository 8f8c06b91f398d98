import io
import struct

import pytest
from PIL import Image


DOS_EPS_HEADER_LENGTH = 30


def build_tiff(size=(8, 4), mode='L', length=None) -> bytes:
    '''Uncompressed TIFF generated with Pillow, padded with zeros up to "length".'''
    buffer = io.BytesIO()
    Image.new(mode, size, color=0x80).save(buffer, format='TIFF')
    data = buffer.getvalue()

    if length is not None:
        assert len(data) <= length
        data += b'\x00' * (length - len(data))

    return data


def build_dos_eps(tiff: bytes, postscript: bytes) -> bytes:
    '''The DOS binary header is followed by the TIFF preview and then by the PostScript.'''
    tiff_offset = DOS_EPS_HEADER_LENGTH
    postscript_offset = tiff_offset + len(tiff)

    header = struct.pack('>I', 0xc5d0d3c6) + struct.pack(
        '<6I',
        postscript_offset, len(postscript),
        0, 0,  # no WMF preview
        tiff_offset, len(tiff),
    ) + b'\xff\xff'

    assert len(header) == DOS_EPS_HEADER_LENGTH

    return header + tiff + postscript


@pytest.fixture
def eps_8x4_gray():
    '''8x4 grayscale image with a TIFF preview of 4334 bytes'''
    postscript = (
        b'%!PS-Adobe-3.0 EPSF-3.0\r\n'
        b'%%Creator: Adobe Photoshop Version 7.0\r\n'
        b'%%Title: 8x4.eps\r\n'
        b'%%BoundingBox: 0 0 8 4\r\n'
        b'%ImageData: 8 4 8 1 0 1 2 "beginimage"\r\n'
        b'%%EndComments\r\n'
        b'gsave\r\n'
    )
    return build_dos_eps(build_tiff((8, 4), 'L', 4334), postscript)


@pytest.fixture
def eps_275x207_rgb():
    '''275x207 RGB image with a TIFF preview of 41802 bytes that is not a valid TIFF'''
    postscript = (
        b'%!PS-Adobe-3.0 EPSF-3.0\n'
        b'%%Creator: Adobe Photoshop Version 7.0\n'
        b'%%Title: 275x207.eps\n'
        b'%%BoundingBox: 0 0 275 207\n'
        b'%ImageData: 275 207 8 3 1 275 2 "beginimage"\n'
        b'%%EndComments\n'
        b'gsave\n'
    )
    return build_dos_eps(b'\x00' * 41802, postscript)


@pytest.fixture
def make_tiff():
    return build_tiff


@pytest.fixture
def make_dos_eps():
    return build_dos_eps


class LazyStream(object):
    '''A stream made of "head", "zeros" zero bytes and "tail", where the zeros
    are produced on demand.'''

    def __init__(self, head=b'', zeros=0, tail=b''):
        self.head = head
        self.zeros = zeros
        self.tail = tail
        self.position = 0

    @property
    def length(self):
        return len(self.head) + self.zeros + len(self.tail)

    def read(self, count):
        start, end = self.position, min(self.position + count, self.length)
        head_end = len(self.head)
        zeros_end = head_end + self.zeros

        data = bytearray()
        if start < head_end:
            data += self.head[start:min(end, head_end)]
        if end > head_end and start < zeros_end:
            data += bytes(min(end, zeros_end) - max(start, head_end))
        if end > zeros_end:
            data += self.tail[max(start, zeros_end) - zeros_end:end - zeros_end]

        self.position = end

        return bytes(data)


@pytest.fixture
def make_lazy_stream():
    return LazyStream
