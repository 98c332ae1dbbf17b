"""Bit-level codec for IEEE 754 binary16.

Every property of a half precision value is a pure function of its 16-bit
pattern. This module maps patterns to and from their fields
(sign, biased exponent, trailing significand), classifies them,
and converts them exactly to and from Python floats.
Nothing here rounds: inexact requests raise.
"""

import math
from enum import IntEnum, unique

from .utils import bitmask, ConversionError


BIT_WIDTH = 16
EXPONENT_BIT_COUNT = 5
SIGNIFICAND_BIT_COUNT = 10

SIGN_SHIFT = EXPONENT_BIT_COUNT + SIGNIFICAND_BIT_COUNT
SIGN_MASK = 1 << SIGN_SHIFT
SIGNIFICAND_MASK = bitmask(SIGNIFICAND_BIT_COUNT)
INFINITY_EXPONENT = bitmask(EXPONENT_BIT_COUNT)
EXPONENT_BIAS = INFINITY_EXPONENT >> 1
EXPONENT_MASK = INFINITY_EXPONENT << SIGNIFICAND_BIT_COUNT
QUIET_NAN_MASK = 1 << (SIGNIFICAND_BIT_COUNT - 1)

# some interesting patterns
POSITIVE_ZERO = 0x0000
NEGATIVE_ZERO = SIGN_MASK
POSITIVE_INFINITY = EXPONENT_MASK
NEGATIVE_INFINITY = SIGN_MASK | EXPONENT_MASK
CANONICAL_NAN = EXPONENT_MASK | QUIET_NAN_MASK
GREATEST_FINITE = POSITIVE_INFINITY - 1
LEAST_NORMAL = 1 << SIGNIFICAND_BIT_COUNT
LEAST_SUBNORMAL = 0x0001

EMAX = EXPONENT_BIAS
EMIN = 1 - EXPONENT_BIAS


@unique
class FloatClass(IntEnum):
    ZERO = 0
    SUBNORMAL = 1
    NORMAL = 2
    INFINITE = 3
    QUIET_NAN = 4
    SIGNALING_NAN = 5


def decompose(bits):
    """Split a pattern into (sign, exponent_bits, significand_bits)."""
    bits &= bitmask(BIT_WIDTH)
    return (
        bits >> SIGN_SHIFT,
        (bits >> SIGNIFICAND_BIT_COUNT) & INFINITY_EXPONENT,
        bits & SIGNIFICAND_MASK,
    )

def compose(sign, exponent_bits, significand_bits):
    """Inverse of decompose. Fields wider than their slots are truncated."""
    return (
        ((sign & 1) << SIGN_SHIFT)
        | ((exponent_bits & INFINITY_EXPONENT) << SIGNIFICAND_BIT_COUNT)
        | (significand_bits & SIGNIFICAND_MASK)
    )


# classification

def is_zero(bits):
    _, E, C = decompose(bits)
    return E == 0 and C == 0

def is_subnormal(bits):
    _, E, C = decompose(bits)
    return E == 0 and C != 0

def is_normal(bits):
    _, E, _ = decompose(bits)
    return 0 < E < INFINITY_EXPONENT

def is_finite(bits):
    _, E, _ = decompose(bits)
    return E < INFINITY_EXPONENT

def is_infinite(bits):
    _, E, C = decompose(bits)
    return E == INFINITY_EXPONENT and C == 0

def is_nan(bits):
    _, E, C = decompose(bits)
    return E == INFINITY_EXPONENT and C != 0

def is_signaling_nan(bits):
    return is_nan(bits) and (bits & QUIET_NAN_MASK) == 0

def is_quiet_nan(bits):
    return is_nan(bits) and (bits & QUIET_NAN_MASK) != 0

def is_negative(bits):
    return decompose(bits)[0] == 1

def is_canonical(bits, flush_subnormals=False):
    """Subnormal encodings are non-canonical zeros when subnormals are flushed."""
    if flush_subnormals and is_subnormal(bits):
        return False
    return True

def classify(bits):
    _, E, C = decompose(bits)
    if E == 0:
        if C == 0:
            return FloatClass.ZERO
        else:
            return FloatClass.SUBNORMAL
    elif E < INFINITY_EXPONENT:
        return FloatClass.NORMAL
    elif C == 0:
        return FloatClass.INFINITE
    elif C & QUIET_NAN_MASK:
        return FloatClass.QUIET_NAN
    else:
        return FloatClass.SIGNALING_NAN


# exact conversions

def bits_to_digital(bits):
    """Exact value of a finite pattern as (negative, c, exp),
    where the magnitude is c * 2**exp.
    """
    S, E, C = decompose(bits)
    if E == INFINITY_EXPONENT:
        raise ValueError('pattern 0x{:04x} is not finite'.format(bits))

    if E == 0:
        # subnormal
        c = C
        exp = EMIN - SIGNIFICAND_BIT_COUNT
    else:
        # normal
        c = C | (1 << SIGNIFICAND_BIT_COUNT)
        exp = E - EXPONENT_BIAS - SIGNIFICAND_BIT_COUNT

    return S == 1, c, exp

def bits_to_float(bits):
    """Exact Python float for a pattern. NaN payloads are not preserved."""
    S, E, C = decompose(bits)
    if E == INFINITY_EXPONENT:
        if C != 0:
            return math.nan
        return -math.inf if S else math.inf

    negative, c, exp = bits_to_digital(bits)
    f = math.ldexp(c, exp)
    if negative:
        return -f
    else:
        return f

def float_to_bits(f):
    """Encode a Python float that is exactly representable in binary16.
    Any NaN becomes the canonical quiet NaN.
    """
    if math.isnan(f):
        return CANONICAL_NAN

    S = 1 if math.copysign(1.0, f) < 0 else 0
    if math.isinf(f):
        return compose(S, INFINITY_EXPONENT, 0)

    mag = abs(f)
    if mag == 0.0:
        return compose(S, 0, 0)

    # mag = m * 2**e, 0.5 <= m < 1, so the IEEE exponent is e - 1
    m, e = math.frexp(mag)
    e -= 1

    if e > EMAX:
        raise ConversionError('exponent out of range: {}'.format(e))
    elif e >= EMIN:
        scaled = math.ldexp(m, SIGNIFICAND_BIT_COUNT + 1)
        E = e + EXPONENT_BIAS
    else:
        scaled = math.ldexp(mag, SIGNIFICAND_BIT_COUNT - EMIN)
        E = 0

    if scaled != math.floor(scaled):
        raise ConversionError('too much precision: {} cannot be represented exactly'.format(repr(f)))

    return compose(S, E, int(scaled))


def show_bitpattern(bits):
    S, E, C = decompose(bits)
    if E == 0 or E == INFINITY_EXPONENT:
        hidden = 0
    else:
        hidden = 1

    return ('float{:d}({:d},{:d}): {:01b} {:0'+str(EXPONENT_BIT_COUNT)+'b} ({:01b}) {:0'+str(SIGNIFICAND_BIT_COUNT)+'b}').format(
        BIT_WIDTH, EXPONENT_BIT_COUNT, SIGNIFICAND_BIT_COUNT + 1, S, E, hidden, C,
    )
