'''
Rational numbers as stored by TIFF-like formats: two integers that we keep
as they are, without losing precision, since the representation itself
can be meaningful (1/200 of second is not 0.005 for a photographer).
'''
from math import gcd

from .exceptions import DivisionByZeroException


class Rational(object):
    '''Immutable numerator/denominator couple.

    A numerator of zero is treated as zero even if the denominator is zero too,
    any other value with a zero denominator can't be converted to a number.'''

    __slots__ = ('_numerator', '_denominator')

    def __init__(self, numerator: int, denominator: int):
        self._numerator = int(numerator)
        self._denominator = int(denominator)

    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    def __repr__(self):
        return f'<{self.__class__.__name__}({self._numerator}/{self._denominator})>'

    def __str__(self):
        return f'{self._numerator}/{self._denominator}'

    def __eq__(self, other):
        '''Numerical equality: 1/2 == 10/20. Use equals_exact() for the representation.'''
        if not isinstance(other, Rational):
            return NotImplemented

        if self._denominator == 0 or other._denominator == 0:
            return self.simplified().equals_exact(other.simplified())

        return self._numerator * other._denominator == other._numerator * self._denominator

    def __hash__(self):
        simplified = self.simplified()
        return hash((simplified.numerator, simplified.denominator))

    def equals_exact(self, other: 'Rational') -> bool:
        return self._numerator == other._numerator and self._denominator == other._denominator

    @property
    def is_zero(self) -> bool:
        return self._numerator == 0 or self._denominator == 0

    @property
    def is_integer(self) -> bool:
        return self._denominator == 1 \
            or (self._denominator != 0 and self._numerator % self._denominator == 0) \
            or (self._denominator == 0 and self._numerator == 0)

    @property
    def reciprocal(self) -> 'Rational':
        return Rational(self._denominator, self._numerator)

    def to_float(self) -> float:
        if self._numerator == 0:
            return 0.0

        if self._denominator == 0:
            raise DivisionByZeroException(f'rational {self} has a zero denominator')

        return self._numerator / self._denominator

    def to_int(self) -> int:
        '''Integer division truncating toward zero (like a C cast).'''
        if self._denominator == 0:
            raise DivisionByZeroException(f'rational {self} has a zero denominator')

        quotient = abs(self._numerator) // abs(self._denominator)

        return quotient if (self._numerator < 0) == (self._denominator < 0) else -quotient

    def simplified(self) -> 'Rational':
        divisor = gcd(self._numerator, self._denominator)
        if divisor == 0:
            return Rational(self._numerator, self._denominator)

        return Rational(self._numerator // divisor, self._denominator // divisor)

    def to_simple_string(self, allow_decimal=True) -> str:
        '''Returns the simplest representation of the value possible.'''
        if self._denominator == 0 and self._numerator != 0:
            return str(self)

        if self.is_integer:
            return str(self.to_int()) if self._denominator != 0 else '0'

        if self._numerator != 1 and self._numerator != 0 and self._denominator % self._numerator == 0:
            # common factor between denominator and numerator
            return Rational(1, self._denominator // self._numerator).to_simple_string(allow_decimal)

        simplified = self.simplified()
        if allow_decimal:
            decimal = repr(simplified.to_float())
            if len(decimal) < 5:
                return decimal

        return str(simplified)
