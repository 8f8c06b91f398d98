'''
# Resource Interchange File Format

Container used by WAV, AVI and WebP, always little endian

  .--------------------------------.
  | "RIFF" | size | identifier     |
  |   chunk: fourcc | size | data  |
  |   "LIST" | size | list name    |
  |      chunk ...                 |
  |   chunk ...                    |
  '--------------------------------'

the size of a chunk doesn't count the padding byte added when it's odd.

What to do with the chunks is decided by a RiffHandler.
'''
import logging

from ..enum import Endianess
from ..exceptions import RiffProcessingException
from ..streams import SequentialReader


logger = logging.getLogger(__name__)


CHUNK_HEADER_LENGTH = 8


class RiffHandler(object):
    '''Interface of the objects deciding which chunks are interesting.'''

    def should_accept_riff_identifier(self, identifier: str) -> bool:
        raise NotImplementedError(f"method {self.__class__.__name__}.should_accept_riff_identifier() not implemented")

    def should_accept_chunk(self, four_cc: str) -> bool:
        raise NotImplementedError(f"method {self.__class__.__name__}.should_accept_chunk() not implemented")

    def should_accept_list(self, four_cc: str) -> bool:
        raise NotImplementedError(f"method {self.__class__.__name__}.should_accept_list() not implemented")

    def process_chunk(self, four_cc: str, payload: bytes) -> None:
        raise NotImplementedError(f"method {self.__class__.__name__}.process_chunk() not implemented")

    def chunk_skipped(self, four_cc: str, length: int) -> None:
        '''Called for the chunks not accepted, the payload is never read.'''
        pass

    def list_ended(self, four_cc: str) -> None:
        '''Called after the last chunk of an accepted list.'''
        pass


class RiffReader(object):

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")

    def process_riff(self, reader: SequentialReader, handler: RiffHandler) -> None:
        reader.reader.byte_order = Endianess.INTEL

        four_cc = reader.get_string(4, 'latin-1')
        if four_cc != 'RIFF':
            raise RiffProcessingException(f'Invalid RIFF header: {four_cc}', chain=['riff'])

        # the size counts the identifier too
        size = reader.get_int32()
        identifier = reader.get_string(4, 'latin-1')

        if not handler.should_accept_riff_identifier(identifier):
            self.logger.debug(f'identifier \'{identifier}\' not accepted')
            return

        self._process_chunks(reader, reader.position + size - 4, handler)

    def _process_chunks(self, reader: SequentialReader, end: int, handler: RiffHandler) -> None:
        while reader.position + CHUNK_HEADER_LENGTH <= end and not reader.is_at_end():
            four_cc = reader.get_string(4, 'latin-1')
            size = reader.get_int32()

            if size < 0:
                raise RiffProcessingException(f'Invalid size {size} for chunk \'{four_cc}\'', chain=['riff'])

            self.logger.debug(f'chunk \'{four_cc}\' of {size} bytes at 0x{reader.position - CHUNK_HEADER_LENGTH:x}')

            if four_cc in ('LIST', 'RIFF'):
                list_name = reader.get_string(4, 'latin-1')
                if handler.should_accept_list(list_name):
                    self._process_chunks(reader, reader.position + size - 4, handler)
                    handler.list_ended(list_name)
                else:
                    reader.skip(size - 4)
                continue

            if handler.should_accept_chunk(four_cc):
                handler.process_chunk(four_cc, reader.get_bytes(size))
            else:
                reader.skip(size)
                handler.chunk_skipped(four_cc, size)

            # chunks are word aligned, the last padding byte can be missing
            if size % 2 == 1:
                reader.try_skip(1)
