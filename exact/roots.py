#
# Square roots in exact rational arithmetic
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

import logging

from .exact import (
    Rational, NonConvergence, InvalidSqrt, OP_SQRT, get_context, one, zero,
    add, subtract, multiply, divide,
)

__all__ = ('sqrt', 'sqrt_precision')

logger = logging.getLogger(__name__)

_one_half = Rational(1, 2)


def sqrt(value, context=None):
    '''Return an approximation to the square root of value within the precision of the
    context.  The default precision is default_precision().

    This is orders of magnitude slower than math.sqrt but can be made as precise as
    wished with sqrt_precision().
    '''
    context = context or get_context()
    return sqrt_precision(value, context.precision, context)


def sqrt_precision(value, precision, context=None):
    '''Return an approximation to the square root of value by Newton-Raphson iteration
    in exact arithmetic.

    Iteration stops at the first guess g with |value/g - g| < precision.  Nothing is
    reduced between iterations unless the context asks for it, so the parts of the
    guess roughly double in length each time; depending on precision this can take a
    very long time.  There is no limit on the number of iterations unless the
    context's max_iterations is set, in which case NonConvergence is raised when it is
    reached.
    '''
    context = context or get_context()
    op_tuple = (OP_SQRT, value, precision)

    if value.is_zero():
        return zero()
    if value.sign:
        raise InvalidSqrt(op_tuple)
    if precision.is_zero() or precision.sign:
        raise ValueError(f'precision must be positive: {precision}')

    guess = one()
    iterations = 0
    while True:
        quotient = divide(value, guess)
        if abs(subtract(quotient, guess)).compare_lt(precision):
            break
        if context.max_iterations is not None and iterations >= context.max_iterations:
            logger.warning('sqrt(%s) did not converge in %d iterations', value, iterations)
            raise NonConvergence(op_tuple, guess)

        # guess <- (guess + value / guess) / 2
        guess = multiply(add(guess, quotient), _one_half)
        if context.simplify_guess:
            guess = guess.simplify()
        iterations += 1
        logger.debug('sqrt iteration %d: guess has %d/%d bits', iterations,
                     guess.numerator.bit_length(), guess.denominator.bit_length())

    logger.debug('sqrt converged after %d iterations', iterations)
    return guess
