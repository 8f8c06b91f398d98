'''
Constant values of the TIFF 6.0 specification and of the Exif extension
that lives inside it.
'''
from enum import IntEnum


class TiffDataFormat(IntEnum):
    '''Format codes of the IFD entries, the size is the one of a single component.'''
    BYTE      = 1
    ASCII     = 2
    SHORT     = 3
    LONG      = 4
    RATIONAL  = 5
    SBYTE     = 6
    UNDEFINED = 7
    SSHORT    = 8
    SLONG     = 9
    SRATIONAL = 10
    FLOAT     = 11
    DOUBLE    = 12

    @property
    def component_size(self) -> int:
        return _COMPONENT_SIZES[self]


_COMPONENT_SIZES = {
    TiffDataFormat.BYTE:      1,
    TiffDataFormat.ASCII:     1,
    TiffDataFormat.SHORT:     2,
    TiffDataFormat.LONG:      4,
    TiffDataFormat.RATIONAL:  8,
    TiffDataFormat.SBYTE:     1,
    TiffDataFormat.UNDEFINED: 1,
    TiffDataFormat.SSHORT:    2,
    TiffDataFormat.SLONG:     4,
    TiffDataFormat.SRATIONAL: 8,
    TiffDataFormat.FLOAT:     4,
    TiffDataFormat.DOUBLE:    8,
}


INTEL_MARKER    = b'II'
MOTOROLA_MARKER = b'MM'
TIFF_MAGIC = 0x002a


class ExifTag(IntEnum):
    IMAGE_WIDTH                = 0x0100
    IMAGE_HEIGHT               = 0x0101
    BITS_PER_SAMPLE            = 0x0102
    COMPRESSION                = 0x0103
    PHOTOMETRIC_INTERPRETATION = 0x0106
    IMAGE_DESCRIPTION          = 0x010e
    MAKE                       = 0x010f
    MODEL                      = 0x0110
    STRIP_OFFSETS              = 0x0111
    ORIENTATION                = 0x0112
    SAMPLES_PER_PIXEL          = 0x0115
    ROWS_PER_STRIP             = 0x0116
    STRIP_BYTE_COUNTS          = 0x0117
    X_RESOLUTION               = 0x011a
    Y_RESOLUTION               = 0x011b
    PLANAR_CONFIGURATION       = 0x011c
    RESOLUTION_UNIT            = 0x0128
    SOFTWARE                   = 0x0131
    DATETIME                   = 0x0132
    ARTIST                     = 0x013b
    PREDICTOR                  = 0x013d
    THUMBNAIL_OFFSET           = 0x0201
    THUMBNAIL_LENGTH           = 0x0202
    YCBCR_POSITIONING          = 0x0213
    COPYRIGHT                  = 0x8298
    EXPOSURE_TIME              = 0x829a
    F_NUMBER                   = 0x829d
    EXIF_SUB_IFD_OFFSET        = 0x8769
    ISO_EQUIVALENT             = 0x8827
    EXIF_VERSION               = 0x9000
    DATETIME_ORIGINAL          = 0x9003
    FLASH                      = 0x9209
    FOCAL_LENGTH               = 0x920a
    COLOR_SPACE                = 0xa001
    EXIF_IMAGE_WIDTH           = 0xa002
    EXIF_IMAGE_HEIGHT          = 0xa003
