'''
# Encapsulated PostScript

An EPS file is a PostScript program whose header is made of DSC comments
(Document Structuring Conventions) like

    %!PS-Adobe-3.0 EPSF-3.0
    %%Creator: someone
    %%BoundingBox: 0 0 275 207
    %ImageData: 275 207 8 3 1 275 2 "beginimage"

 - lines end with CR or LF (or both)
 - ":" separates the keyword from the value
 - if a keyword appears more than once, the first one wins
 - "%%+" continues the value of the previous line

Optionally the PostScript is wrapped in a DOS binary header (magic 0xC5D0D3C6,
little endian) that points to the PostScript section and to a preview
image, in WMF or TIFF format.

The specification is at <https://www-cdf.fnal.gov/offline/PostScript/5001.PDF>.
'''
import logging
from types import MappingProxyType

from metastruct.descriptor import indexed, suffix
from metastruct.directory import Directory
from metastruct.enum import Endianess
from metastruct.exceptions import BoundsException, ProcessingException
from metastruct.images.tiff import TiffReader
from metastruct.streams import (
    ByteArrayReader,
    SequentialReader,
    create_reader,
    decode,
)

from .enum import (
    CONTINUATION_PREFIX,
    DOS_EPS_MAGIC,
    KEYWORD_TAGS,
    POSTSCRIPT_MAGIC,
    EpsColorType,
    EpsTag,
)


logger = logging.getLogger(__name__)


class EpsDirectory(Directory):
    name = 'EPS'
    tag_names = MappingProxyType({
        EpsTag.DSC_VERSION:           'DSC Version',
        EpsTag.AUTHOR:                'Author',
        EpsTag.BOUNDING_BOX:          'Bounding Box',
        EpsTag.COPYRIGHT:             'Copyright',
        EpsTag.CREATION_DATE:         'Creation Date',
        EpsTag.CREATOR:               'Creator',
        EpsTag.FOR:                   'For',
        EpsTag.IMAGE_DATA:            'Image Data',
        EpsTag.KEYWORDS:              'Keywords',
        EpsTag.MODIFY_DATE:           'Modify Date',
        EpsTag.PAGES:                 'Pages',
        EpsTag.ROUTING:               'Routing',
        EpsTag.SUBJECT:               'Subject',
        EpsTag.TITLE:                 'Title',
        EpsTag.VERSION:               'Version',
        EpsTag.DOCUMENT_DATA:         'Document Data',
        EpsTag.EMULATION:             'Emulation',
        EpsTag.EXTENSIONS:            'Extensions',
        EpsTag.LANGUAGE_LEVEL:        'Language Level',
        EpsTag.ORIENTATION:           'Orientation',
        EpsTag.PAGE_ORDER:            'Page Order',
        EpsTag.OPERATOR_INTERVENTION: 'Operator Intervention',
        EpsTag.OPERATOR_MESSAGE:      'Operator Message',
        EpsTag.PROOF_MODE:            'Proof Mode',
        EpsTag.REQUIREMENTS:          'Requirements',
        EpsTag.VM_LOCATION:           'VM Location',
        EpsTag.VM_USAGE:              'VM Usage',
        EpsTag.IMAGE_WIDTH:           'Image Width',
        EpsTag.IMAGE_HEIGHT:          'Image Height',
        EpsTag.COLOR_TYPE:            'Color Type',
        EpsTag.RAM_SIZE:              'Ram Size',
        EpsTag.TIFF_PREVIEW_SIZE:     'TIFF Preview Size',
        EpsTag.TIFF_PREVIEW_OFFSET:   'TIFF Preview Offset',
        EpsTag.WMF_PREVIEW_SIZE:      'WMF Preview Size',
        EpsTag.WMF_PREVIEW_OFFSET:    'WMF Preview Offset',
        EpsTag.CONTINUE_LINE:         'Line Continuation',
    })
    descriptions = MappingProxyType({
        EpsTag.IMAGE_WIDTH:         suffix(' pixels'),
        EpsTag.IMAGE_HEIGHT:        suffix(' pixels'),
        EpsTag.TIFF_PREVIEW_SIZE:   suffix(' bytes'),
        EpsTag.TIFF_PREVIEW_OFFSET: suffix(' bytes'),
        EpsTag.COLOR_TYPE:          indexed(1, 'Grayscale', 'Lab', 'RGB', 'CMYK'),
    })


class EpsReader(object):
    '''Reads the DSC comments of an EPS file; when a TIFF preview is present
    its metadata is extracted too.'''

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")

    def extract(self, source, metadata) -> None:
        reader = create_reader(source)
        directory = EpsDirectory()
        metadata.add_directory(directory)

        magic = reader.get_uint32(0)

        if magic == DOS_EPS_MAGIC:
            self._extract_dos_header(reader, directory, metadata)
        elif magic == POSTSCRIPT_MAGIC:
            self._extract_postscript(directory, SequentialReader(reader))
        else:
            directory.add_error('File type not supported.')

    def _extract_dos_header(self, reader, directory, metadata) -> None:
        reader.byte_order = Endianess.INTEL

        postscript_offset = reader.get_int32(4)
        postscript_length = reader.get_int32(8)
        wmf_offset        = reader.get_int32(12)
        wmf_size          = reader.get_int32(16)
        tiff_offset       = reader.get_int32(20)
        tiff_size         = reader.get_int32(24)
        # the checksum at 28 is not used

        self.logger.debug(f'PostScript {postscript_length} bytes at {postscript_offset}, '
                          f'WMF {wmf_size} bytes at {wmf_offset}, TIFF {tiff_size} bytes at {tiff_offset}')

        if tiff_size != 0:
            directory.set_value(EpsTag.TIFF_PREVIEW_SIZE, tiff_size)
            directory.set_value(EpsTag.TIFF_PREVIEW_OFFSET, tiff_offset)

            preview = reader.get_bytes(tiff_offset, tiff_size)
            try:
                TiffReader().extract(preview, metadata)
            except (ProcessingException, BoundsException) as e:
                e.chain = ['eps'] + e.chain
                directory.add_error(f'Unable to process TIFF data: {e}')
        elif wmf_size != 0:
            directory.set_value(EpsTag.WMF_PREVIEW_SIZE, wmf_size)
            directory.set_value(EpsTag.WMF_PREVIEW_OFFSET, wmf_offset)

        postscript = ByteArrayReader(reader.get_bytes(postscript_offset, postscript_length))
        self._extract_postscript(directory, SequentialReader(postscript))

    def _read_line(self, reader: SequentialReader) -> str:
        '''Returns the next line without the terminator. For CR LF terminated
        lines the LF is read as an empty line, that is harmless.'''
        line = bytearray()
        while not reader.is_at_end():
            c = reader.get_byte()
            if c in (0x0d, 0x0a):
                break
            line.append(c)

        return decode(bytes(line), 'latin-1')

    def _extract_postscript(self, directory, reader: SequentialReader) -> None:
        previous_tag = 0

        while not reader.is_at_end():
            line = self._read_line(reader)

            # the header ends with the first line that is not a comment
            if line and not line.startswith('%'):
                break

            colon_index = line.find(':')
            if line.startswith(CONTINUATION_PREFIX):
                name, value = CONTINUATION_PREFIX, line[len(CONTINUATION_PREFIX):].lstrip(':').strip()
            elif colon_index != -1:
                name = line[:colon_index].strip()
                value = line[colon_index + 1:].strip()
            else:
                continue

            previous_tag = self._add_to_directory(directory, name, value, previous_tag)

    def _add_to_directory(self, directory, name: str, value: str, previous_tag: int) -> int:
        '''Returns the tag a following "%%+" line would continue.'''
        tag = KEYWORD_TAGS.get(name)
        if tag is None:
            return previous_tag

        if tag is EpsTag.CONTINUE_LINE:
            if previous_tag and directory.contains_tag(previous_tag):
                directory.set_value(previous_tag, f'{directory.get_string(previous_tag)} {value}')
            return previous_tag

        if directory.contains_tag(tag):
            self.logger.debug(f'ignoring repeated keyword {name}')
            return 0

        if tag is EpsTag.IMAGE_DATA:
            self._extract_image_data(directory, value)
        else:
            directory.set_value(tag, value)

        return tag

    def _extract_image_data(self, directory, value: str) -> None:
        '''%ImageData: <width> <height> <depth> <color type> ...'''
        directory.set_value(EpsTag.IMAGE_DATA, value)

        parts = value.split()
        try:
            width = int(parts[0])
            height = int(parts[1])
            color_type = int(parts[3])
        except (IndexError, ValueError):
            directory.add_error(f'Unable to parse %ImageData value \'{value}\'')
            return

        if not directory.contains_tag(EpsTag.IMAGE_WIDTH):
            directory.set_value(EpsTag.IMAGE_WIDTH, width)
        if not directory.contains_tag(EpsTag.IMAGE_HEIGHT):
            directory.set_value(EpsTag.IMAGE_HEIGHT, height)
        if not directory.contains_tag(EpsTag.COLOR_TYPE):
            directory.set_value(EpsTag.COLOR_TYPE, color_type)

        if not directory.contains_tag(EpsTag.RAM_SIZE):
            try:
                bytes_per_pixel = EpsColorType(color_type).bytes_per_pixel
            except ValueError:
                return
            directory.set_value(EpsTag.RAM_SIZE, bytes_per_pixel * width * height)
