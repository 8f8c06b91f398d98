'''
The descriptor translates the raw value of a tag into something a human can
read: each format declares a table "tag -> formatter", where a formatter is
any callable taking (directory, tag) and returning a string (or None).

Tags without an entry in the table use generic_description().

The factories in this module build the formatters needed more often, so
that a table reads like

    descriptions = MappingProxyType({
        Tags.WIDTH: suffix(' pixels'),
        Tags.COLOR: indexed(1, 'Grayscale', 'RGB'),
    })

A description is never an exception: whatever goes wrong while formatting
is logged and the description becomes None.
'''
import logging
from types import MappingProxyType
from typing import Callable, Optional

from bitstring import Bits

from .exceptions import MetastructException


logger = logging.getLogger(__name__)


GENERIC_ARRAY_THRESHOLD = 16


def generic_description(directory, tag: int) -> Optional[str]:
    value = directory.get_raw(tag)
    if value is None:
        return None

    if isinstance(value, (bytes, tuple, list)) and len(value) > GENERIC_ARRAY_THRESHOLD:
        return '[%d values]' % len(value)

    return directory.get_string(tag)


class TagDescriptor(object):

    def __init__(self, directory, formatters=None):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.directory = directory
        self.formatters = MappingProxyType(dict(formatters or {}))

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.directory!r})>'

    def get_description(self, tag: int) -> Optional[str]:
        if self.directory.get_raw(tag) is None:
            return None

        formatter = self.formatters.get(tag, generic_description)

        try:
            return formatter(self.directory, tag)
        except (MetastructException, ValueError, TypeError, LookupError) as e:
            self.logger.debug(f'unable to describe tag 0x{tag:04x}: {e!r}')
            return None


Formatter = Callable[[object, int], Optional[str]]


def suffix(text: str) -> Formatter:
    '''Appends a unit of measure to the generic string.'''
    def _format(directory, tag):
        value = directory.get_string(tag)
        return None if value is None else f'{value}{text}'

    return _format


def indexed(base_index: int, *labels) -> Formatter:
    '''Labels for consecutive values starting at base_index; None in the labels
    marks a hole.'''
    def _format(directory, tag):
        value = directory.get_long(tag)
        if value is None:
            return None

        index = value - base_index
        if 0 <= index < len(labels) and labels[index] is not None:
            return labels[index]

        return f'Unknown ({value})'

    return _format


def mapped(mapping) -> Formatter:
    mapping = MappingProxyType(dict(mapping))

    def _format(directory, tag):
        value = directory.get_long(tag)
        if value is None:
            return None

        return mapping.get(value, f'Unknown ({value})')

    return _format


def byte_length() -> Formatter:
    def _format(directory, tag):
        value = directory.get_bytes(tag)
        if value is None:
            return None

        count = len(value)
        return '(%d byte%s)' % (count, '' if count == 1 else 's')

    return _format


def simple_rational() -> Formatter:
    def _format(directory, tag):
        value = directory.get_rational(tag)
        return None if value is None else value.to_simple_string(True)

    return _format


def decimal_rational(places: int) -> Formatter:
    def _format(directory, tag):
        value = directory.get_rational(tag)
        return None if value is None else '%.*f' % (places, value.to_float())

    return _format


def formatted_int(fmt: str) -> Formatter:
    '''The fmt is used with the % operator (e.g. "%d mm" or "0x%08x").'''
    def _format(directory, tag):
        value = directory.get_long(tag)
        return None if value is None else fmt % value

    return _format


def bit_flags(*labels) -> Formatter:
    '''Each label corresponds to a bit, from the least significant one:

     - None: the bit is ignored
     - a string: appears only if the bit is set
     - a (clear, set) couple: one of the two appears always
    '''
    def _format(directory, tag):
        value = directory.get_long(tag)
        if value is None or value < 0:
            return None

        length = max(len(labels), value.bit_length(), 1)
        bits = Bits(value.to_bytes((length + 7) // 8, 'big'))[::-1]

        parts = []
        for index, label in enumerate(labels):
            if label is None:
                continue

            is_set = bits[index]
            if isinstance(label, tuple):
                parts.append(label[1] if is_set else label[0])
            elif is_set:
                parts.append(label)

        return ', '.join(parts)

    return _format


def convert_bytes_to_version_string(components, major_digits: int) -> Optional[str]:
    '''Versions are stored as ASCII digits (b"0220") or as raw digits ([0, 2, 2, 0]).'''
    if components is None:
        return None

    version = ''
    for index in range(min(4, len(components))):
        if index == major_digits:
            version += '.'

        component = components[index]
        if component < ord('0'):
            component += ord('0')

        character = chr(component)
        if index == 0 and character == '0':
            continue

        version += character

    return version


def version_bytes(major_digits: int) -> Formatter:
    def _format(directory, tag):
        return convert_bytes_to_version_string(directory.get_int_array(tag), major_digits)

    return _format


def seven_bit_string() -> Formatter:
    '''ASCII text up to the first NUL or to the first byte with the high bit set.'''
    def _format(directory, tag):
        value = directory.get_bytes(tag)
        if value is None:
            return None

        length = 0
        while length < len(value) and 0 < value[length] < 0x80:
            length += 1

        return value[:length].decode('ascii').strip()

    return _format


def orientation() -> Formatter:
    return indexed(
        1,
        'Top, left side (Horizontal / normal)',
        'Top, right side (Mirror horizontal)',
        'Bottom, right side (Rotate 180)',
        'Bottom, left side (Mirror vertical)',
        'Left side, top (Mirror horizontal and rotate 270 CW)',
        'Right side, top (Rotate 90 CW)',
        'Right side, bottom (Mirror horizontal and rotate 90 CW)',
        'Left side, bottom (Rotate 270 CW)',
    )
