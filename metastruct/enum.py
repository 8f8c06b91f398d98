from enum import Enum


class Endianess(Enum):
    '''Convention used to decode multi-byte values.

    The TIFF world calls them "Motorola" (MM) and "Intel" (II).'''
    BIG_ENDIAN    = 'big'
    LITTLE_ENDIAN = 'little'

    MOTOROLA = 'big'
    INTEL    = 'little'

    @property
    def struct_prefix(self):
        return '>' if self is Endianess.BIG_ENDIAN else '<'
