'''
# Tagged Image File Format

The file starts with an 8 bytes header

 - the byte order marker: "II" (Intel, little endian) or "MM" (Motorola, big endian)
 - the magic number 42
 - the offset of the first Image File Directory (IFD)

An IFD is a count of entries followed by the entries themselves (12 bytes
each: tag, format, count and the value or the offset of the value if it
doesn't fit in 4 bytes) and by the offset of the next IFD (zero if none).

The Exif data is a TIFF structure too: IFD0 describes the main image, the
tag 0x8769 points to the Exif SubIFD and the IFD following IFD0 describes
the thumbnail.

The specification is at <https://www.itu.int/itudoc/itu-t/com16/tiff-fx/docs/tiff6.pdf>.
'''
import logging
from types import MappingProxyType

from metastruct.descriptor import (
    bit_flags,
    indexed,
    mapped,
    orientation,
    suffix,
    version_bytes,
)
from metastruct.directory import Directory
from metastruct.enum import Endianess
from metastruct.exceptions import TiffProcessingException
from metastruct.streams import create_reader

from .enum import (
    ExifTag,
    INTEL_MARKER,
    MOTOROLA_MARKER,
    TIFF_MAGIC,
    TiffDataFormat,
)


logger = logging.getLogger(__name__)


IFD_ENTRY_LENGTH = 12


def _resolution_description(directory, tag):
    value = directory.get_rational(tag)
    if value is None:
        return None

    unit = {2: 'inch', 3: 'cm'}.get(directory.get_int(ExifTag.RESOLUTION_UNIT))
    text = value.to_simple_string(True)

    return text if unit is None else f'{text} dots per {unit}'


def _exposure_time_description(directory, tag):
    value = directory.get_rational(tag)
    return None if value is None else f'{value.to_simple_string(True)} sec'


def _f_number_description(directory, tag):
    value = directory.get_rational(tag)
    return None if value is None else 'f/%.1f' % value.to_float()


def _focal_length_description(directory, tag):
    value = directory.get_rational(tag)
    return None if value is None else '%.1f mm' % value.to_float()


EXIF_TAG_NAMES = MappingProxyType({
    ExifTag.IMAGE_WIDTH:                'Image Width',
    ExifTag.IMAGE_HEIGHT:               'Image Height',
    ExifTag.BITS_PER_SAMPLE:            'Bits Per Sample',
    ExifTag.COMPRESSION:                'Compression',
    ExifTag.PHOTOMETRIC_INTERPRETATION: 'Photometric Interpretation',
    ExifTag.IMAGE_DESCRIPTION:          'Image Description',
    ExifTag.MAKE:                       'Make',
    ExifTag.MODEL:                      'Model',
    ExifTag.STRIP_OFFSETS:              'Strip Offsets',
    ExifTag.ORIENTATION:                'Orientation',
    ExifTag.SAMPLES_PER_PIXEL:          'Samples Per Pixel',
    ExifTag.ROWS_PER_STRIP:             'Rows Per Strip',
    ExifTag.STRIP_BYTE_COUNTS:          'Strip Byte Counts',
    ExifTag.X_RESOLUTION:               'X Resolution',
    ExifTag.Y_RESOLUTION:               'Y Resolution',
    ExifTag.PLANAR_CONFIGURATION:       'Planar Configuration',
    ExifTag.RESOLUTION_UNIT:            'Resolution Unit',
    ExifTag.SOFTWARE:                   'Software',
    ExifTag.DATETIME:                   'Date/Time',
    ExifTag.ARTIST:                     'Artist',
    ExifTag.PREDICTOR:                  'Predictor',
    ExifTag.THUMBNAIL_OFFSET:           'Thumbnail Offset',
    ExifTag.THUMBNAIL_LENGTH:           'Thumbnail Length',
    ExifTag.YCBCR_POSITIONING:          'YCbCr Positioning',
    ExifTag.COPYRIGHT:                  'Copyright',
    ExifTag.EXPOSURE_TIME:              'Exposure Time',
    ExifTag.F_NUMBER:                   'F-Number',
    ExifTag.EXIF_SUB_IFD_OFFSET:        'Exif SubIFD Pointer',
    ExifTag.ISO_EQUIVALENT:             'ISO Speed Ratings',
    ExifTag.EXIF_VERSION:               'Exif Version',
    ExifTag.DATETIME_ORIGINAL:          'Date/Time Original',
    ExifTag.FLASH:                      'Flash',
    ExifTag.FOCAL_LENGTH:               'Focal Length',
    ExifTag.COLOR_SPACE:                'Color Space',
    ExifTag.EXIF_IMAGE_WIDTH:           'Exif Image Width',
    ExifTag.EXIF_IMAGE_HEIGHT:          'Exif Image Height',
})


_COMMON_DESCRIPTIONS = {
    ExifTag.IMAGE_WIDTH:     suffix(' pixels'),
    ExifTag.IMAGE_HEIGHT:    suffix(' pixels'),
    ExifTag.BITS_PER_SAMPLE: suffix(' bits/component/pixel'),
    ExifTag.COMPRESSION: mapped({
        1:     'Uncompressed',
        2:     'CCITT 1D',
        5:     'LZW',
        6:     'JPEG (old-style)',
        7:     'JPEG',
        8:     'Adobe Deflate',
        32773: 'PackBits',
    }),
    ExifTag.PHOTOMETRIC_INTERPRETATION: mapped({
        0: 'WhiteIsZero',
        1: 'BlackIsZero',
        2: 'RGB',
        3: 'RGB Palette',
        4: 'Transparency Mask',
        5: 'CMYK',
        6: 'YCbCr',
        8: 'CIELab',
    }),
    ExifTag.ORIENTATION:       orientation(),
    ExifTag.SAMPLES_PER_PIXEL: suffix(' samples/pixel'),
    ExifTag.ROWS_PER_STRIP:    suffix(' rows/strip'),
    ExifTag.STRIP_BYTE_COUNTS: suffix(' bytes'),
    ExifTag.X_RESOLUTION:      _resolution_description,
    ExifTag.Y_RESOLUTION:      _resolution_description,
    ExifTag.PLANAR_CONFIGURATION: indexed(
        1,
        'Chunky (contiguous for each subsampling pixel)',
        'Separate (Y-plane/Cb-plane/Cr-plane format)',
    ),
    ExifTag.RESOLUTION_UNIT:   indexed(1, '(No unit)', 'Inch', 'cm'),
    ExifTag.YCBCR_POSITIONING: indexed(1, 'Center of pixel array', 'Datum point'),
}


class ExifIFD0Directory(Directory):
    name = 'Exif IFD0'
    tag_names = EXIF_TAG_NAMES
    descriptions = MappingProxyType(dict(_COMMON_DESCRIPTIONS))


class ExifSubIFDDirectory(Directory):
    name = 'Exif SubIFD'
    tag_names = EXIF_TAG_NAMES
    descriptions = MappingProxyType({
        **_COMMON_DESCRIPTIONS,
        ExifTag.EXPOSURE_TIME:     _exposure_time_description,
        ExifTag.F_NUMBER:          _f_number_description,
        ExifTag.EXIF_VERSION:      version_bytes(2),
        ExifTag.FLASH:             bit_flags(('Flash did not fire', 'Flash fired'), None, None, None, None, None, 'Red-eye reduction'),
        ExifTag.FOCAL_LENGTH:      _focal_length_description,
        ExifTag.COLOR_SPACE:       mapped({1: 'sRGB', 0xffff: 'Undefined'}),
        ExifTag.EXIF_IMAGE_WIDTH:  suffix(' pixels'),
        ExifTag.EXIF_IMAGE_HEIGHT: suffix(' pixels'),
    })


class ExifThumbnailDirectory(Directory):
    name = 'Exif Thumbnail'
    tag_names = EXIF_TAG_NAMES
    descriptions = MappingProxyType({
        **_COMMON_DESCRIPTIONS,
        ExifTag.THUMBNAIL_OFFSET: suffix(' bytes'),
        ExifTag.THUMBNAIL_LENGTH: suffix(' bytes'),
    })


_GETTERS = MappingProxyType({
    TiffDataFormat.SBYTE:     'get_int8',
    TiffDataFormat.SHORT:     'get_uint16',
    TiffDataFormat.SSHORT:    'get_int16',
    TiffDataFormat.LONG:      'get_uint32',
    TiffDataFormat.SLONG:     'get_int32',
    TiffDataFormat.RATIONAL:  'get_rational',
    TiffDataFormat.SRATIONAL: 'get_signed_rational',
    TiffDataFormat.FLOAT:     'get_float32',
    TiffDataFormat.DOUBLE:    'get_double64',
})


class TiffReader(object):
    '''Walks the IFDs of a TIFF structure adding a directory for each of them.

    "tiff_header_offset" is where the header is, all the offsets inside
    the structure are relative to it.'''

    def __init__(self, tiff_header_offset=0):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.tiff_header_offset = tiff_header_offset

    def extract(self, source, metadata) -> None:
        reader = create_reader(source)
        header_offset = self.tiff_header_offset

        marker = reader.get_bytes(header_offset, 2)
        if marker == INTEL_MARKER:
            reader.byte_order = Endianess.INTEL
        elif marker == MOTOROLA_MARKER:
            reader.byte_order = Endianess.MOTOROLA
        else:
            raise TiffProcessingException(
                'Unclear distinction between Motorola/Intel byte ordering: 0x%s' % marker.hex(), chain=['tiff'])

        magic = reader.get_uint16(header_offset + 2)
        if magic != TIFF_MAGIC:
            raise TiffProcessingException('Unexpected TIFF marker: 0x%X' % magic, chain=['tiff'])

        ifd0 = ExifIFD0Directory()
        metadata.add_directory(ifd0)

        first_ifd_offset = reader.get_uint32(header_offset + 4)
        if not reader.is_valid_index(header_offset + first_ifd_offset, 2):
            ifd0.add_error('First IFD offset is beyond the end of the TIFF data segment -- trying default offset')
            first_ifd_offset = 8

        self.logger.debug(f'byte order {reader.byte_order.name}, first IFD at 0x{first_ifd_offset:x}')

        self._process_ifd(reader, metadata, ifd0, ifd0, first_ifd_offset, set())

    def _process_ifd(self, reader, metadata, directory, ifd0, ifd_offset, processed) -> None:
        header_offset = self.tiff_header_offset
        offset = header_offset + ifd_offset

        # the same IFD referenced twice would make us loop forever
        if offset in processed:
            directory.add_error(f'IFD at offset 0x{ifd_offset:x} already processed, ignoring it')
            return
        processed.add(offset)

        if not reader.is_valid_index(offset, 2):
            directory.add_error('Ignored IFD marked to start outside data segment')
            return

        entries_count = reader.get_uint16(offset)
        if not reader.is_valid_index(offset + 2, entries_count * IFD_ENTRY_LENGTH):
            directory.add_error('Illegally sized IFD')
            return

        self.logger.debug(f'{directory.name}: {entries_count} entries at 0x{ifd_offset:x}')

        for index in range(entries_count):
            entry_offset = offset + 2 + index * IFD_ENTRY_LENGTH
            self._process_entry(reader, metadata, directory, entry_offset, ifd0, processed)

        next_offset_index = offset + 2 + entries_count * IFD_ENTRY_LENGTH
        if not reader.is_valid_index(next_offset_index, 4):
            return

        next_ifd_offset = reader.get_uint32(next_offset_index)
        # only the main chain has followers (the thumbnail and the pages after it)
        if next_ifd_offset == 0 or not isinstance(directory, (ExifIFD0Directory, ExifThumbnailDirectory)):
            return

        if not reader.is_valid_index(header_offset + next_ifd_offset, 2):
            directory.add_error('Next IFD offset is beyond the end of the data, ignoring it')
            return

        thumbnail = ExifThumbnailDirectory(parent=ifd0)
        metadata.add_directory(thumbnail)

        self._process_ifd(reader, metadata, thumbnail, ifd0, next_ifd_offset, processed)

    def _process_entry(self, reader, metadata, directory, entry_offset, ifd0, processed) -> None:
        tag = reader.get_uint16(entry_offset)
        format_code = reader.get_uint16(entry_offset + 2)
        count = reader.get_uint32(entry_offset + 4)

        try:
            data_format = TiffDataFormat(format_code)
        except ValueError:
            directory.add_error(f'Invalid TIFF tag format code {format_code} for tag 0x{tag:04X}')
            return

        byte_count = count * data_format.component_size
        if byte_count > 4:
            value_offset = self.tiff_header_offset + reader.get_uint32(entry_offset + 8)
        else:
            value_offset = entry_offset + 8

        if not reader.is_valid_index(value_offset, byte_count):
            directory.add_error(f'Illegal TIFF tag pointer offset for tag 0x{tag:04X}')
            return

        if tag == ExifTag.EXIF_SUB_IFD_OFFSET and data_format in (TiffDataFormat.LONG, TiffDataFormat.UNDEFINED) and byte_count >= 4:
            sub_ifd = ExifSubIFDDirectory(parent=ifd0)
            metadata.add_directory(sub_ifd)
            self._process_ifd(reader, metadata, sub_ifd, ifd0, reader.get_uint32(value_offset), processed)
            return

        if count == 0:
            self.logger.debug(f'tag 0x{tag:04X} has no components, skipping')
            return

        directory.set_value(tag, self._read_value(reader, data_format, count, value_offset))

    def _read_value(self, reader, data_format, count, offset):
        if data_format is TiffDataFormat.UNDEFINED:
            return reader.get_bytes(offset, count)

        if data_format is TiffDataFormat.BYTE:
            return reader.get_uint8(offset) if count == 1 else reader.get_bytes(offset, count)

        if data_format is TiffDataFormat.ASCII:
            return reader.get_null_terminated_string(offset, count)

        getter = getattr(reader, _GETTERS[data_format])
        size = data_format.component_size
        values = [getter(offset + index * size) for index in range(count)]

        return values[0] if count == 1 else values
