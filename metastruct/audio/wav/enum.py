from enum import IntEnum
from types import MappingProxyType


WAVE_IDENTIFIER = 'WAVE'
CHUNK_FORMAT    = 'fmt '
CHUNK_DATA      = 'data'
LIST_INFO       = 'INFO'


class WavTag(IntEnum):
    FORMAT          = 1
    CHANNELS        = 2
    SAMPLES_PER_SEC = 3
    BYTES_PER_SEC   = 4
    BLOCK_ALIGNMENT = 5
    BITS_PER_SAMPLE = 6
    ARTIST          = 7
    TITLE           = 8
    PRODUCT         = 9
    TRACK_NUMBER    = 10
    DATE_CREATED    = 11
    GENRE           = 12
    COMMENTS        = 13
    COPYRIGHT       = 14
    SOFTWARE        = 15
    DURATION        = 16


class WavFormat(IntEnum):
    '''The wFormatTag field of the "fmt " chunk (not exhaustive).'''
    PCM        = 0x0001
    ADPCM      = 0x0002
    IEEE_FLOAT = 0x0003
    ALAW       = 0x0006
    MULAW      = 0x0007
    IMA_ADPCM  = 0x0011
    GSM610     = 0x0031
    MPEG       = 0x0050
    MPEGLAYER3 = 0x0055
    EXTENSIBLE = 0xfffe


AUDIO_ENCODINGS = MappingProxyType({
    WavFormat.PCM:        'Microsoft PCM',
    WavFormat.ADPCM:      'Microsoft ADPCM',
    WavFormat.IEEE_FLOAT: 'Microsoft IEEE float',
    WavFormat.ALAW:       'ITU G.711 a-law',
    WavFormat.MULAW:      'ITU G.711 u-law',
    WavFormat.IMA_ADPCM:  'IMA ADPCM',
    WavFormat.GSM610:     'Microsoft GSM 6.10',
    WavFormat.MPEG:       'MPEG',
    WavFormat.MPEGLAYER3: 'MPEG Layer 3',
    WavFormat.EXTENSIBLE: 'Extensible',
})


# sub-chunks of the LIST/INFO chunk
INFO_TAGS = MappingProxyType({
    'IART': WavTag.ARTIST,
    'INAM': WavTag.TITLE,
    'IPRD': WavTag.PRODUCT,
    'ITRK': WavTag.TRACK_NUMBER,
    'ICRD': WavTag.DATE_CREATED,
    'IGNR': WavTag.GENRE,
    'ICMT': WavTag.COMMENTS,
    'ICOP': WavTag.COPYRIGHT,
    'ISFT': WavTag.SOFTWARE,
})
