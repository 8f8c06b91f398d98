'''
# Waveform Audio File Format

A RIFF file with identifier "WAVE": the "fmt " chunk describes the encoding,
the "data" chunk contains the samples and an optional "LIST" chunk of type
"INFO" contains textual information (artist, title, etc...).

The duration is not stored anywhere, it's the length of the "data" chunk
divided by the average number of bytes per second.
'''
import logging
from types import MappingProxyType

from metastruct.common.riff import RiffHandler, RiffReader
from metastruct.descriptor import suffix
from metastruct.directory import Directory
from metastruct.enum import Endianess
from metastruct.exceptions import BoundsException, MetadataException
from metastruct.streams import ByteArrayReader, SequentialReader, create_reader, decode

from .enum import (
    AUDIO_ENCODINGS,
    CHUNK_DATA,
    CHUNK_FORMAT,
    INFO_TAGS,
    LIST_INFO,
    WAVE_IDENTIFIER,
    WavFormat,
    WavTag,
)


logger = logging.getLogger(__name__)


class WavDirectory(Directory):
    name = 'WAV'
    tag_names = MappingProxyType({
        WavTag.FORMAT:          'Format',
        WavTag.CHANNELS:        'Channels',
        WavTag.SAMPLES_PER_SEC: 'Samples Per Second',
        WavTag.BYTES_PER_SEC:   'Bytes Per Second',
        WavTag.BLOCK_ALIGNMENT: 'Block Alignment',
        WavTag.BITS_PER_SAMPLE: 'Bits Per Sample',
        WavTag.ARTIST:          'Artist',
        WavTag.TITLE:           'Title',
        WavTag.PRODUCT:         'Product',
        WavTag.TRACK_NUMBER:    'Track Number',
        WavTag.DATE_CREATED:    'Date Created',
        WavTag.GENRE:           'Genre',
        WavTag.COMMENTS:        'Comments',
        WavTag.COPYRIGHT:       'Copyright',
        WavTag.SOFTWARE:        'Software',
        WavTag.DURATION:        'Duration',
    })
    descriptions = MappingProxyType({
        WavTag.SAMPLES_PER_SEC: suffix(' Hz'),
        WavTag.BYTES_PER_SEC:   suffix(' bytes/sec'),
        WavTag.BITS_PER_SAMPLE: suffix(' bits'),
    })


def format_duration(seconds: float) -> str:
    hours, rest = divmod(int(round(seconds)), 3600)
    minutes, seconds = divmod(rest, 60)

    return '%02d:%02d:%02d' % (hours, minutes, seconds)


class WavRiffHandler(RiffHandler):
    '''Populates a WavDirectory, added to the metadata at construction.'''

    def __init__(self, metadata):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.directory = WavDirectory()
        self._current_list = ''
        metadata.add_directory(self.directory)

    def should_accept_riff_identifier(self, identifier: str) -> bool:
        return identifier == WAVE_IDENTIFIER

    def should_accept_chunk(self, four_cc: str) -> bool:
        return four_cc == CHUNK_FORMAT or (self._current_list == LIST_INFO and four_cc in INFO_TAGS)

    def should_accept_list(self, four_cc: str) -> bool:
        self._current_list = four_cc if four_cc == LIST_INFO else ''
        return four_cc == LIST_INFO

    def process_chunk(self, four_cc: str, payload: bytes) -> None:
        if four_cc == CHUNK_FORMAT:
            try:
                self._process_format(payload)
            except BoundsException as e:
                self.directory.add_error(f'Truncated \'{four_cc}\' chunk: {e}')
            return

        tag = INFO_TAGS.get(four_cc)
        if tag is not None:
            self.directory.set_value(tag, decode(payload.rstrip(b'\x00')))

    def _process_format(self, payload: bytes) -> None:
        reader = ByteArrayReader(payload, byte_order=Endianess.INTEL)

        format_tag = reader.get_uint16(0)
        channels = reader.get_uint16(2)
        samples_per_sec = reader.get_uint32(4)
        bytes_per_sec = reader.get_uint32(8)
        block_alignment = reader.get_uint16(12)

        # only for PCM the bits per sample are meaningful
        if format_tag == WavFormat.PCM:
            self.directory.set_value(WavTag.BITS_PER_SAMPLE, reader.get_uint16(14))

        self.directory.set_value(WavTag.FORMAT, AUDIO_ENCODINGS.get(format_tag, 'Unknown'))
        self.directory.set_value(WavTag.CHANNELS, channels)
        self.directory.set_value(WavTag.SAMPLES_PER_SEC, samples_per_sec)
        self.directory.set_value(WavTag.BYTES_PER_SEC, bytes_per_sec)
        self.directory.set_value(WavTag.BLOCK_ALIGNMENT, block_alignment)

    def list_ended(self, four_cc: str) -> None:
        self._current_list = ''

    def chunk_skipped(self, four_cc: str, length: int) -> None:
        if four_cc != CHUNK_DATA:
            return

        bytes_per_sec = None
        try:
            bytes_per_sec = self.directory.get_float(WavTag.BYTES_PER_SEC)
        except MetadataException as e:
            self.logger.debug(f'bytes per second not usable: {e}')

        if not bytes_per_sec:
            self.directory.add_error('Error calculating duration: bytes per second not found')
            return

        self.directory.set_value(WavTag.DURATION, format_duration(length / bytes_per_sec))


class WavReader(object):

    def extract(self, source, metadata) -> None:
        reader = create_reader(source)
        RiffReader().process_riff(SequentialReader(reader), WavRiffHandler(metadata))
