#
# Exact rational arithmetic over arbitrary-precision integers
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

import copy
import re
import threading
from fractions import Fraction
from math import copysign, gcd, inf

import attr

__all__ = ('Rational', 'Context', 'DefaultContext', 'get_context', 'set_context',
           'local_context', 'from_parts', 'one', 'zero', 'default_precision',
           'add', 'subtract', 'multiply', 'divide',
           'ExactError', 'DivisionByZero', 'InvalidSqrt', 'NonConvergence',
           'OP_FROM_PARTS', 'OP_FROM_STRING',
           'OP_DIVIDE', 'OP_INVERSE', 'OP_SQRT')


# Operation names
OP_FROM_PARTS = 'from_parts'
OP_FROM_STRING = 'from_string'
OP_DIVIDE = 'divide'
OP_INVERSE = 'inverse'
OP_SQRT = 'sqrt'


#
# Exceptions
#

class ExactError(ArithmeticError):
    '''All arithmetic exceptions raised by this module subclass from this.

    The first argument is always op_tuple, a tuple of the operation name and the
    operands causing the exception.  Derived classes may take further arguments.
    '''

    description = 'arithmetic error'

    @property
    def op_tuple(self):
        return self.args[0]

    def __str__(self):
        operation, *operands = self.op_tuple
        return f'{self.description} in {operation}({", ".join(map(str, operands))})'


class DivisionByZero(ExactError, ZeroDivisionError):
    '''Raised when a denominator would be zero: on construction, on division by a zero
    value, and on inverting a zero.'''

    description = 'division by zero'


class InvalidSqrt(ExactError, ValueError):
    '''Raised if the sqrt operand is less than zero.'''

    description = 'square root of a negative number'


class NonConvergence(ExactError):
    '''Raised by sqrt when the context's iteration limit is reached before the requested
    precision.  The last guess is available as best_guess.'''

    description = 'no convergence'

    @property
    def best_guess(self):
        return self.args[1]


#
# The value type
#

def _check_magnitude(instance, attribute, value):
    if not isinstance(value, int):
        raise TypeError(f'{attribute.name} must be an integer')
    if value < 0:
        raise ValueError(f'{attribute.name} must be non-negative: {value:,d}')


def _check_denominator(instance, attribute, value):
    _check_magnitude(instance, attribute, value)
    if value == 0:
        raise DivisionByZero((OP_FROM_PARTS, instance.numerator, value))


@attr.s(slots=True, frozen=True, eq=False, repr=False)
class Rational:
    '''An exact rational number sign * numerator / denominator.

    numerator and denominator are non-negative integers; the sign lives separately in
    sign, which is True for negative numbers.  A rational is never reduced
    implicitly; arithmetic lets the parts grow and simplify() reduces them when asked.
    Zero is any rational with a zero numerator, and may carry either sign.
    '''

    numerator = attr.ib(validator=_check_magnitude)
    denominator = attr.ib(default=1, validator=_check_denominator)
    sign = attr.ib(default=False, converter=bool)

    @classmethod
    def from_int(cls, value):
        if not isinstance(value, int):
            raise TypeError('from_int requires an integer')
        return cls(abs(value), 1, value < 0)

    @classmethod
    def from_fraction(cls, value):
        if not isinstance(value, Fraction):
            raise TypeError('from_fraction requires a Fraction instance')
        return cls(abs(value.numerator), value.denominator, value < 0)

    @classmethod
    def from_string(cls, string):
        '''Parse the canonical [-]numerator/denominator form.  The denominator may be
        omitted, in which case it is 1.'''
        if not isinstance(string, str):
            raise TypeError('from_string requires a string')
        match = RATIONAL_REGEX.match(string.strip())
        if match is None:
            raise SyntaxError(f'invalid rational number: {string}')
        sign, numerator, denominator = match.groups()
        denominator = 1 if denominator is None else int(denominator)
        if denominator == 0:
            raise DivisionByZero((OP_FROM_STRING, string))
        return cls(int(numerator), denominator, sign == '-')

    @classmethod
    def from_value(cls, value):
        if isinstance(value, Rational):
            return value
        converter = _converters.get(type(value))
        if converter is None:
            raise TypeError(f'from_value cannot convert values of type {type(value)}')
        return converter(value)

    def is_zero(self):
        return self.numerator == 0

    def is_negative(self):
        '''Return True if the sign is set.  This is True for a negative zero.'''
        return self.sign

    def copy_abs(self):
        return attr.evolve(self, sign=False)

    def copy_negate(self):
        return attr.evolve(self, sign=not self.sign)

    def inverse(self):
        '''Return the rational with numerator and denominator swapped.  The sign is kept as
        it is.'''
        if self.numerator == 0:
            raise DivisionByZero((OP_INVERSE, self))
        return Rational(self.denominator, self.numerator, self.sign)

    def simplify(self):
        '''Return this value in lowest terms with the same sign.  Numerators of 0 and 1 are
        returned as they are.'''
        if self.numerator in (0, 1):
            return self
        divisor = gcd(self.numerator, self.denominator)
        if divisor == 1:
            return self
        return Rational(self.numerator // divisor, self.denominator // divisor, self.sign)

    def as_integer_ratio(self):
        '''Return a pair (n, d) of integers in lowest terms with d positive and n carrying
        the sign, as Fraction.as_integer_ratio() does.'''
        if self.numerator == 0:
            return 0, 1
        reduced = self.simplify()
        return (-reduced.numerator if self.sign else reduced.numerator), reduced.denominator

    def to_float(self):
        '''Return the nearest float.  Lossy; not used by any calculation here.'''
        try:
            return float(Fraction(*self.as_integer_ratio()))
        except OverflowError:
            return copysign(inf, -1.0 if self.sign else 1.0)

    def to_string(self):
        sign = '-' if self.sign else ''
        return f'{sign}{self.numerator}/{self.denominator}'

    def compare_lt(self, rhs):
        '''Return True if self < rhs.  Zeroes compare equal whatever their sign.'''
        lhs, rhs = self.simplify(), rhs.simplify()
        if lhs.sign == rhs.sign and lhs.denominator == rhs.denominator:
            if lhs.sign:
                return lhs.numerator > rhs.numerator
            return lhs.numerator < rhs.numerator
        difference = subtract(lhs, rhs)
        return difference.sign and not difference.is_zero()

    def compare_eq(self, rhs):
        '''Return True if self and rhs have the same magnitude.

        The sign is not compared, so -5/1 equals 5/1.  All zeroes are equal.
        '''
        if self.is_zero() and rhs.is_zero():
            return True
        lhs, rhs = self.simplify(), rhs.simplify()
        return lhs.numerator == rhs.numerator and lhs.denominator == rhs.denominator

    def __repr__(self):
        return f'Rational({self.to_string()!r})'

    def __str__(self):
        return self.to_string()

    def __abs__(self):
        return self.copy_abs()

    def __neg__(self):
        return self.copy_negate()

    def __pos__(self):
        return self

    def __bool__(self):
        return not self.is_zero()

    def __float__(self):
        return self.to_float()

    # Equality ignores the sign but int and Fraction hashes do not, so no hash agrees
    # with ==
    __hash__ = None

    def __eq__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.compare_eq(other)

    def __ne__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return not self.compare_eq(other)

    def __lt__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return self.compare_lt(other)

    def __le__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return not other.compare_lt(self)

    def __gt__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return other.compare_lt(self)

    def __ge__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return not self.compare_lt(other)

    def __add__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return add(self, other)

    def __sub__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return subtract(self, other)

    def __mul__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return multiply(self, other)

    def __truediv__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return divide(self, other)

    def __radd__(self, other):
        return self.__add__(other)

    def __rsub__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return subtract(other, self)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __rtruediv__(self, other):
        other = convert_for_arith(other)
        if other is None:
            return NotImplemented
        return divide(other, self)


_converters = {
    int: Rational.from_int,
    bool: Rational.from_int,
    Fraction: Rational.from_fraction,
    str: Rational.from_string,
}


def convert_for_arith(value):
    '''Return value as a Rational if it is an exact number type, otherwise None.'''
    if isinstance(value, Rational):
        return value
    if isinstance(value, (int, Fraction)):
        return Rational.from_value(value)
    return None


#
# Constants and constructors
#

def from_parts(numerator, denominator, sign=False):
    '''Return numerator / denominator, negative if sign is True, without reducing it.'''
    return Rational(numerator, denominator, sign)


def one():
    return Rational(1, 1)


def zero():
    return Rational(0, 1)


def default_precision():
    '''The precision used for square roots when none is given: 1/10^100.'''
    return Rational(1, 10 ** 100)


#
# Arithmetic
#

def add(lhs, rhs):
    '''Return lhs + rhs over the denominator lhs.denominator * rhs.denominator.'''
    denominator = lhs.denominator * rhs.denominator
    lhs_cross = lhs.numerator * rhs.denominator
    rhs_cross = rhs.numerator * lhs.denominator

    if lhs.sign == rhs.sign:
        return Rational(lhs_cross + rhs_cross, denominator, lhs.sign)

    # Opposite signs: the larger magnitude decides the sign.  An exact cancellation is
    # a positive zero.
    if lhs_cross > rhs_cross:
        return Rational(lhs_cross - rhs_cross, denominator, lhs.sign)
    if rhs_cross > lhs_cross:
        return Rational(rhs_cross - lhs_cross, denominator, rhs.sign)
    return Rational(0, denominator)


def subtract(lhs, rhs):
    return add(lhs, rhs.copy_negate())


def multiply(lhs, rhs):
    '''Return lhs * rhs.  The result is negative exactly when the operand signs differ.'''
    return Rational(lhs.numerator * rhs.numerator, lhs.denominator * rhs.denominator,
                    lhs.sign != rhs.sign)


def divide(lhs, rhs):
    if rhs.numerator == 0 or rhs.denominator == 0:
        raise DivisionByZero((OP_DIVIDE, lhs, rhs))
    return multiply(lhs, rhs.inverse())


#
# Contexts
#

class Context:
    '''The execution context for operations that need settings, currently the square
    root.  Carries the convergence precision, an optional iteration limit, and whether
    to simplify each new guess.'''

    __slots__ = ('_precision', '_max_iterations', 'simplify_guess')

    def __init__(self, *, precision=None, max_iterations=None, simplify_guess=False):
        '''precision is a positive Rational; None means default_precision().  If
        max_iterations is not None, sqrt raises NonConvergence after that many
        refinements.  simplify_guess reduces each guess to lowest terms, which changes
        nothing but the size of its parts.
        '''
        self.precision = default_precision() if precision is None else precision
        self.max_iterations = max_iterations
        self.simplify_guess = bool(simplify_guess)

    @property
    def precision(self):
        return self._precision

    @precision.setter
    def precision(self, precision):
        if not isinstance(precision, Rational):
            raise TypeError('precision must be a Rational instance')
        if precision.is_zero() or precision.sign:
            raise ValueError(f'precision must be positive: {precision}')
        self._precision = precision

    @property
    def max_iterations(self):
        return self._max_iterations

    @max_iterations.setter
    def max_iterations(self, max_iterations):
        if max_iterations is not None:
            if not isinstance(max_iterations, int):
                raise TypeError('max_iterations must be an integer or None')
            if max_iterations < 1:
                raise ValueError(f'max_iterations must be positive: {max_iterations}')
        self._max_iterations = max_iterations

    def copy(self):
        '''Return a (deep) copy of the context.'''
        return copy.deepcopy(self)

    def __repr__(self):
        return (f'<Context precision={self.precision} max_iterations={self.max_iterations} '
                f'simplify_guess={self.simplify_guess}>')


DefaultContext = Context()
tls = threading.local()


def get_context():
    try:
        return tls.context
    except AttributeError:
        tls.context = DefaultContext.copy()
        return tls.context


def set_context(context):
    '''Sets the current thread's context to context (not a copy of it).'''
    if not isinstance(context, Context):
        raise TypeError('context must be a Context instance')
    tls.context = context


class LocalContext:
    '''A context manager that will set the current context for the active thread to a copy of
    context on entry to the with-statement and restore the previous context on exit.  If
    no context is specified a copy of the current context is taken instead.
    '''

    def __init__(self, context=None):
        self.saved_context = None
        self.context_to_set = context

    def __enter__(self):
        self.saved_context = get_context()
        context = (self.context_to_set or self.saved_context).copy()
        set_context(context)
        return context

    def __exit__(self, etype, value, traceback):
        set_context(self.saved_context)


local_context = LocalContext


RATIONAL_REGEX = re.compile(
    # sign[opt] numerator
    '([-+]?)([0-9]+)'
    # / denominator   [opt]
    '(?:/([0-9]+))?$',
    re.ASCII
)
