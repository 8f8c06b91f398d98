'''
A Directory is the in-memory representation of a logical section of a file
(think of an Image File Directory of a TIFF): a mapping between integer tags
and the raw values decoded from the data, together with the list of the
errors found while populating it.

The values are stored "raw", i.e. as they come out of the reader

 - int
 - float
 - Rational
 - bytes
 - str
 - tuple of the above

and converted only on request via the get_*() methods; the human readable
representation is responsibility of the TagDescriptor bound to the directory.

Setting a tag twice keeps the last value (the tag keeps its original position).
'''
import logging
import math
from types import MappingProxyType
from typing import List, Optional

from .descriptor import TagDescriptor
from .exceptions import (
    InvalidArgumentException,
    TypeMismatchException,
)
from .rational import Rational


logger = logging.getLogger(__name__)


_RAW_TYPES = (int, float, str, bytes, Rational)


def format_float(value: float) -> str:
    '''At most three decimal digits, without trailing zeros.'''
    text = ('%.3f' % value).rstrip('0').rstrip('.')
    return '0' if text == '-0' else text


def _element_to_string(value) -> str:
    if isinstance(value, float):
        return format_float(value)

    return str(value)


class Tag(object):
    '''A (tag, directory) couple, handy to iterate over a directory.'''

    def __init__(self, tag_type: int, directory: 'Directory'):
        self.tag_type = tag_type
        self._directory = directory

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.tag_type_hex})>'

    def __str__(self):
        description = self.description
        if description is None:
            description = f'{self._directory.get_string(self.tag_type)} (unable to formulate description)'

        return f'[{self._directory.name}] {self.tag_name} - {description}'

    @property
    def tag_type_hex(self) -> str:
        return '0x%04x' % self.tag_type

    @property
    def tag_name(self) -> str:
        return self._directory.get_tag_name(self.tag_type)

    def has_tag_name(self) -> bool:
        return self._directory.has_tag_name(self.tag_type)

    @property
    def description(self) -> Optional[str]:
        return self._directory.get_description(self.tag_type)

    @property
    def directory_name(self) -> str:
        return self._directory.name


class Directory(object):
    '''Base class for the directories: the subclasses only need to indicate
    the name, the names of the tags and the table of formatters used by the
    descriptor.'''

    name = 'Unknown'
    tag_names = MappingProxyType({})
    descriptions = MappingProxyType({})

    def __init__(self, parent: Optional['Directory'] = None):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self._tags = {}
        self._errors: List[str] = []
        self._parent = parent
        self._descriptor = None

    def __repr__(self):
        return f'<{self.__class__.__name__}({self._tags!r})>'

    def __str__(self):
        count = len(self._tags)
        return '%s Directory (%d %s)' % (self.name, count, 'tag' if count == 1 else 'tags')

    @property
    def parent(self) -> Optional['Directory']:
        return self._parent

    @property
    def descriptor(self) -> TagDescriptor:
        if self._descriptor is None:
            self._descriptor = TagDescriptor(self, self.descriptions)

        return self._descriptor

    # TAG SETTERS

    def set_value(self, tag: int, value) -> None:
        if value is None:
            raise InvalidArgumentException(f'cannot set None as value for tag 0x{tag:04x}')

        if isinstance(value, (bytearray, memoryview)):
            value = bytes(value)
        elif isinstance(value, list):
            value = tuple(value)

        if not isinstance(value, _RAW_TYPES + (tuple,)):
            raise InvalidArgumentException(
                f'value of type \'{value.__class__.__name__}\' cannot be stored for tag 0x{tag:04x}')

        if tag in self._tags:
            self.logger.debug(f'overwriting tag 0x{tag:04x} of {self.name}')

        self._tags[tag] = value

    # ERRORS

    def add_error(self, message: str) -> None:
        self.logger.warning(f'[{self.name}] {message}')
        self._errors.append(message)

    def has_errors(self) -> bool:
        return len(self._errors) > 0

    @property
    def errors(self):
        return tuple(self._errors)

    @property
    def error_count(self) -> int:
        return len(self._errors)

    # TAG GETTERS

    def contains_tag(self, tag: int) -> bool:
        return tag in self._tags

    @property
    def is_empty(self) -> bool:
        return len(self._tags) == 0 and len(self._errors) == 0

    @property
    def tag_count(self) -> int:
        return len(self._tags)

    @property
    def tags(self) -> List[Tag]:
        return [Tag(_, self) for _ in self._tags]

    def get_raw(self, tag: int):
        return self._tags.get(tag)

    def get_string(self, tag: int) -> Optional[str]:
        '''Generic conversion to string, it doesn't know anything about the meaning of the tag.'''
        value = self._tags.get(tag)
        if value is None:
            return None

        if isinstance(value, Rational):
            return value.to_simple_string(True)
        if isinstance(value, float):
            return format_float(value)
        if isinstance(value, bytes):
            return ' '.join(str(_) for _ in value)
        if isinstance(value, tuple):
            return ' '.join(_element_to_string(_) for _ in value)

        return str(value)

    def _to_int(self, tag: int, value) -> int:
        if isinstance(value, int):
            return int(value)
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise TypeMismatchException(f'tag 0x{tag:04x} has value {value} that is not an integer')
            return int(value)
        if isinstance(value, Rational):
            return value.to_int()
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise TypeMismatchException(f'tag 0x{tag:04x} has value \'{value}\' that is not numeric')
        if isinstance(value, (bytes, tuple)):
            if len(value) == 0:
                raise TypeMismatchException(f'tag 0x{tag:04x} is an empty array')
            return self._to_int(tag, value[0])

        raise TypeMismatchException(
            f'tag 0x{tag:04x} cannot be converted to int, it is of type \'{value.__class__.__name__}\'')

    def _get_ranged_int(self, tag: int, bits: int) -> Optional[int]:
        value = self._tags.get(tag)
        if value is None:
            return None

        integer = self._to_int(tag, value)
        if not -(1 << (bits - 1)) <= integer < (1 << bits):
            raise TypeMismatchException(f'tag 0x{tag:04x} has value {integer} that doesn\'t fit in {bits} bits')

        return integer

    def get_int(self, tag: int) -> Optional[int]:
        return self._get_ranged_int(tag, 32)

    def get_long(self, tag: int) -> Optional[int]:
        return self._get_ranged_int(tag, 64)

    def _to_float(self, tag: int, value) -> float:
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, Rational):
            return value.to_float()
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                raise TypeMismatchException(f'tag 0x{tag:04x} has value \'{value}\' that is not numeric')
        if isinstance(value, (bytes, tuple)):
            if len(value) == 0:
                raise TypeMismatchException(f'tag 0x{tag:04x} is an empty array')
            return self._to_float(tag, value[0])

        raise TypeMismatchException(
            f'tag 0x{tag:04x} cannot be converted to float, it is of type \'{value.__class__.__name__}\'')

    def get_float(self, tag: int) -> Optional[float]:
        value = self._tags.get(tag)
        if value is None:
            return None

        return self._to_float(tag, value)

    def get_rational(self, tag: int) -> Optional[Rational]:
        value = self._tags.get(tag)
        if value is None:
            return None
        if isinstance(value, Rational):
            return value
        if isinstance(value, int):
            return Rational(value, 1)

        raise TypeMismatchException(
            f'tag 0x{tag:04x} cannot be converted to rational, it is of type \'{value.__class__.__name__}\'')

    def get_rational_array(self, tag: int) -> Optional[List[Rational]]:
        value = self._tags.get(tag)
        if value is None:
            return None
        if isinstance(value, Rational):
            return [value]
        if isinstance(value, tuple) and all(isinstance(_, Rational) for _ in value):
            return list(value)

        raise TypeMismatchException(f'tag 0x{tag:04x} is not an array of rationals')

    def get_bytes(self, tag: int) -> Optional[bytes]:
        value = self._tags.get(tag)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value
        if isinstance(value, str):
            return value.encode('utf-8')
        if isinstance(value, int):
            return bytes([value & 0xff])
        if isinstance(value, tuple):
            return bytes(self._to_int(tag, _) & 0xff for _ in value)

        raise TypeMismatchException(
            f'tag 0x{tag:04x} cannot be converted to bytes, it is of type \'{value.__class__.__name__}\'')

    def get_int_array(self, tag: int) -> Optional[List[int]]:
        value = self._tags.get(tag)
        if value is None:
            return None
        if isinstance(value, bytes):
            return list(value)
        if isinstance(value, str):
            return [ord(_) for _ in value]
        if isinstance(value, tuple):
            return [self._to_int(tag, _) for _ in value]

        return [self._to_int(tag, value)]

    def get_string_array(self, tag: int) -> Optional[List[str]]:
        value = self._tags.get(tag)
        if value is None:
            return None
        if isinstance(value, str):
            return [value]
        if isinstance(value, bytes):
            return [str(_) for _ in value]
        if isinstance(value, tuple):
            return [_element_to_string(_) for _ in value]

        return [self.get_string(tag)]

    # NAMES AND DESCRIPTIONS

    def get_tag_name(self, tag: int) -> str:
        name = self.tag_names.get(tag)
        if name is None:
            return 'Unknown tag (0x%04x)' % tag

        return name

    def has_tag_name(self, tag: int) -> bool:
        return tag in self.tag_names

    def get_description(self, tag: int) -> Optional[str]:
        return self.descriptor.get_description(tag)
