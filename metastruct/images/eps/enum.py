'''
Constant values for the Encapsulated PostScript files: the tags are
ours, the keywords are the DSC comments that carry their values.
'''
from enum import IntEnum
from types import MappingProxyType


DOS_EPS_MAGIC    = 0xc5d0d3c6
POSTSCRIPT_MAGIC = 0x25215053  # "%!PS"

CONTINUATION_PREFIX = '%%+'


class EpsTag(IntEnum):
    DSC_VERSION           = 1
    AUTHOR                = 2
    BOUNDING_BOX          = 3
    COPYRIGHT             = 4
    CREATION_DATE         = 5
    CREATOR               = 6
    FOR                   = 7
    IMAGE_DATA            = 8
    KEYWORDS              = 9
    MODIFY_DATE           = 10
    PAGES                 = 11
    ROUTING               = 12
    SUBJECT               = 13
    TITLE                 = 14
    VERSION               = 15
    DOCUMENT_DATA         = 16
    EMULATION             = 17
    EXTENSIONS            = 18
    LANGUAGE_LEVEL        = 19
    ORIENTATION           = 20
    PAGE_ORDER            = 21
    OPERATOR_INTERVENTION = 22
    OPERATOR_MESSAGE      = 23
    PROOF_MODE            = 24
    REQUIREMENTS          = 25
    VM_LOCATION           = 26
    VM_USAGE              = 27
    IMAGE_WIDTH           = 28
    IMAGE_HEIGHT          = 29
    COLOR_TYPE            = 30
    RAM_SIZE              = 31
    TIFF_PREVIEW_SIZE     = 32
    TIFF_PREVIEW_OFFSET   = 33
    WMF_PREVIEW_SIZE      = 34
    WMF_PREVIEW_OFFSET    = 35
    CONTINUE_LINE         = 36


class EpsColorType(IntEnum):
    '''Fourth field of the %ImageData comment.'''
    GRAYSCALE = 1
    LAB       = 2
    RGB       = 3
    CMYK      = 4

    @property
    def bytes_per_pixel(self) -> int:
        return 1 if self is EpsColorType.GRAYSCALE else 3


KEYWORD_TAGS = MappingProxyType({
    '%!PS-Adobe-':             EpsTag.DSC_VERSION,
    '%%Author':                EpsTag.AUTHOR,
    '%%BoundingBox':           EpsTag.BOUNDING_BOX,
    '%%Copyright':             EpsTag.COPYRIGHT,
    '%%CreationDate':          EpsTag.CREATION_DATE,
    '%%Creator':               EpsTag.CREATOR,
    '%%For':                   EpsTag.FOR,
    '%ImageData':              EpsTag.IMAGE_DATA,
    '%%Keywords':              EpsTag.KEYWORDS,
    '%%ModDate':               EpsTag.MODIFY_DATE,
    '%%Pages':                 EpsTag.PAGES,
    '%%Routing':               EpsTag.ROUTING,
    '%%Subject':               EpsTag.SUBJECT,
    '%%Title':                 EpsTag.TITLE,
    '%%Version':               EpsTag.VERSION,
    '%%DocumentData':          EpsTag.DOCUMENT_DATA,
    '%%Emulation':             EpsTag.EMULATION,
    '%%Extensions':            EpsTag.EXTENSIONS,
    '%%LanguageLevel':         EpsTag.LANGUAGE_LEVEL,
    '%%Orientation':           EpsTag.ORIENTATION,
    '%%PageOrder':             EpsTag.PAGE_ORDER,
    '%%OperatorIntervention':  EpsTag.OPERATOR_INTERVENTION,
    '%%OperatorMessage':       EpsTag.OPERATOR_MESSAGE,
    '%%ProofMode':             EpsTag.PROOF_MODE,
    '%%Requirements':          EpsTag.REQUIREMENTS,
    '%%VMlocation':            EpsTag.VM_LOCATION,
    '%%VMusage':               EpsTag.VM_USAGE,
    CONTINUATION_PREFIX:       EpsTag.CONTINUE_LINE,
})
