#!/usr/bin/env python3
'''
Prints the metadata found in an EPS, TIFF or WAV file

    $ dumpmeta.py image.eps
    [EPS] Creator - Adobe Photoshop Version 7.0
    ...
'''
import sys
import os
import logging

from metastruct.audio.wav import WavReader
from metastruct.exceptions import MetastructException
from metastruct.images.eps import EpsReader
from metastruct.images.eps.enum import DOS_EPS_MAGIC
from metastruct.images.tiff import TiffReader
from metastruct.metadata import Metadata


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logger.setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)


def usage(progname):
    print(f'usage: {progname} <file path>')
    sys.exit(1)


def guess_reader(magic):
    if magic[:4] == DOS_EPS_MAGIC.to_bytes(4, 'big') or magic[:4] == b'%!PS':
        return EpsReader()
    if magic[:4] in (b'II*\x00', b'MM\x00*'):
        return TiffReader()
    if magic[:4] == b'RIFF' and magic[8:12] == b'WAVE':
        return WavReader()

    return None


def dump(metadata):
    for directory in metadata:
        print(directory)
        for tag in directory.tags:
            print(f'  {tag}')
        for error in directory.errors:
            print(f'  ERROR: {error}')


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    filepath = sys.argv[1]

    with open(filepath, 'rb') as f:
        reader = guess_reader(f.read(12))
        if reader is None:
            logger.error(f'{filepath}: unknown format')
            sys.exit(1)

        f.seek(0)

        metadata = Metadata()
        try:
            reader.extract(f, metadata)
        except MetastructException as e:
            logger.error(f'{filepath}: {" > ".join(e.chain)}: {e}')
            sys.exit(1)

    dump(metadata)
