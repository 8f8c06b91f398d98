import io
import struct

import pytest

from metastruct.audio.wav import WavDirectory, WavReader, format_duration
from metastruct.audio.wav.enum import WavTag
from metastruct.exceptions import RiffProcessingException
from metastruct.metadata import Metadata
from metastruct.streams import StreamReader


def chunk(four_cc, payload, pad=True):
    data = four_cc + struct.pack('<I', len(payload)) + payload
    if pad and len(payload) % 2 == 1:
        data += b'\x00'

    return data


def riff(identifier, *chunks):
    body = identifier + b''.join(chunks)
    return b'RIFF' + struct.pack('<I', len(body)) + body


def fmt_chunk(format_tag=1, channels=2, samples_per_sec=44100, bytes_per_sec=10, block_alignment=4, bits=16):
    return chunk(b'fmt ', struct.pack('<HHIIHH',
                                      format_tag, channels, samples_per_sec, bytes_per_sec, block_alignment, bits))


def info_chunk():
    return chunk(b'LIST', b'INFO' + chunk(b'INAM', b'Title\x00') + chunk(b'IART', b'Band\x00'))


@pytest.fixture
def wav():
    # 3661 seconds at 10 bytes per second
    return riff(b'WAVE', fmt_chunk(), chunk(b'data', b'\x00' * 36610), info_chunk())


def extract(source):
    metadata = Metadata()
    WavReader().extract(source, metadata)

    return metadata


def test_wav(wav):
    assert len(info_chunk()) == 8 + 32

    metadata = extract(wav)

    assert metadata.directory_count == 1

    directory = metadata.get_first_directory_of_type(WavDirectory)

    assert not directory.has_errors()
    assert directory.get_string(WavTag.FORMAT) == 'Microsoft PCM'
    assert directory.get_int(WavTag.CHANNELS) == 2
    assert directory.get_description(WavTag.SAMPLES_PER_SEC) == '44100 Hz'
    assert directory.get_description(WavTag.BYTES_PER_SEC) == '10 bytes/sec'
    assert directory.get_int(WavTag.BLOCK_ALIGNMENT) == 4
    assert directory.get_description(WavTag.BITS_PER_SAMPLE) == '16 bits'
    assert directory.get_string(WavTag.DURATION) == '01:01:01'
    assert directory.get_string(WavTag.TITLE) == 'Title'
    assert directory.get_string(WavTag.ARTIST) == 'Band'
    assert directory.get_tag_name(WavTag.DURATION) == 'Duration'


def test_wav_from_stream(wav):
    directory = extract(io.BytesIO(wav)).get_first_directory_of_type(WavDirectory)

    assert directory.get_string(WavTag.DURATION) == '01:01:01'
    assert directory.get_string(WavTag.ARTIST) == 'Band'


def test_not_pcm():
    directory = extract(riff(b'WAVE', fmt_chunk(format_tag=3))).get_first_directory_of_type(WavDirectory)

    assert directory.get_string(WavTag.FORMAT) == 'Microsoft IEEE float'
    assert not directory.contains_tag(WavTag.BITS_PER_SAMPLE)


def test_not_riff():
    with pytest.raises(RiffProcessingException) as excinfo:
        extract(b'RIFX' + b'\x00' * 8)

    assert excinfo.value.chain == ['riff']


def test_not_wave():
    metadata = extract(riff(b'AVI ', fmt_chunk()))

    assert metadata.get_first_directory_of_type(WavDirectory).is_empty


def test_missing_format():
    directory = extract(riff(b'WAVE', chunk(b'data', b'\x00' * 4))).get_first_directory_of_type(WavDirectory)

    assert directory.errors == ('Error calculating duration: bytes per second not found',)
    assert not directory.contains_tag(WavTag.DURATION)


def test_truncated_format():
    directory = extract(riff(b'WAVE', chunk(b'fmt ', b'\x01\x00'))).get_first_directory_of_type(WavDirectory)

    assert directory.error_count == 1
    assert not directory.contains_tag(WavTag.FORMAT)


def test_odd_chunk_without_padding():
    # the last chunk is odd and the padding byte is missing
    data = riff(b'WAVE', fmt_chunk(), chunk(b'LIST', b'INFO' + chunk(b'ICMT', b'odd', pad=False), pad=False))
    directory = extract(data).get_first_directory_of_type(WavDirectory)

    assert directory.get_string(WavTag.COMMENTS) == 'odd'


def test_large_data_chunk_from_stream(make_lazy_stream):
    data_length = 80 * 1024 * 1024
    info = info_chunk()
    fmt = fmt_chunk(bytes_per_sec=1024 * 1024)
    head = b'RIFF' + struct.pack('<I', 4 + len(fmt) + 8 + data_length + len(info)) + b'WAVE' + \
        fmt + b'data' + struct.pack('<I', data_length)

    stream = make_lazy_stream(head, data_length, info)
    reader = StreamReader(stream)

    directory = extract(reader).get_first_directory_of_type(WavDirectory)

    assert not directory.has_errors()
    assert directory.get_string(WavTag.DURATION) == '00:01:20'
    assert directory.get_string(WavTag.ARTIST) == 'Band'
    assert reader.buffered_length == stream.length


def test_info_chunks_only_inside_the_list():
    data = riff(b'WAVE',
                fmt_chunk(),
                chunk(b'LIST', b'INFO' + chunk(b'INAM', b'Title\x00')),
                chunk(b'IART', b'Solo\x00'))
    directory = extract(data).get_first_directory_of_type(WavDirectory)

    assert directory.get_string(WavTag.TITLE) == 'Title'
    assert not directory.contains_tag(WavTag.ARTIST)


@pytest.mark.parametrize('seconds,expected', [
    (0, '00:00:00'),
    (59.6, '00:01:00'),
    (3661, '01:01:01'),
    (86400, '24:00:00'),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
