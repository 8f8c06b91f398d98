#!/usr/bin/env python3
'''
Shows the TIFF preview embedded in a DOS EPS file

    $ epspreview.py image.eps [output.png]
'''
import io
import logging
import sys
import os
from PIL import Image

from metastruct.images.eps import EpsDirectory, EpsReader
from metastruct.images.eps.enum import EpsTag
from metastruct.metadata import Metadata
from metastruct.streams import create_reader


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logger.setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)


def usage(progname):
    print(f'usage: {progname} <eps file path> [<output path>]')
    sys.exit(1)


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    filepath = sys.argv[1]

    with open(filepath, 'rb') as f:
        data = f.read()

    metadata = Metadata()
    EpsReader().extract(data, metadata)

    eps = metadata.get_first_directory_of_type(EpsDirectory)

    for error in eps.errors:
        logger.warning(error)

    offset = eps.get_int(EpsTag.TIFF_PREVIEW_OFFSET)
    size = eps.get_int(EpsTag.TIFF_PREVIEW_SIZE)

    if size is None:
        logger.error(f'{filepath}: no TIFF preview')
        sys.exit(1)

    logger.info(f'preview of {size} bytes at offset {offset}')

    preview = create_reader(data).get_bytes(offset, size)
    img = Image.open(io.BytesIO(preview))

    logger.info(f'{img.format} {img.mode} {img.size[0]}x{img.size[1]}')

    if len(sys.argv) > 2:
        img.save(sys.argv[2])
    else:
        img.show()
