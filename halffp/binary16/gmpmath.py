"""Correctly rounded binary16 arithmetic, with GMP as a backend.

Every function here takes and returns raw 16-bit patterns (ints).
Operands are converted exactly to MPFR, the operation is evaluated
once in a context with binary16's precision and exponent range
(subnormalization on, round to nearest even), and the result is
converted exactly back to a pattern. Each call enters its own gmpy2
context, and gmpy2 contexts are thread-local, so the kernel never shares
rounding state with its callers.
"""

import gmpy2 as gmp
import numpy as np

from . import codec
from .ops import OP, arity


def binary16_context():
    return gmp.context(
        precision=codec.SIGNIFICAND_BIT_COUNT + 1,
        # MPFR normalizes to [0.5, 1), one above the IEEE exponents
        emin=codec.EMIN - codec.SIGNIFICAND_BIT_COUNT + 1,
        emax=codec.EMAX + 1,
        subnormalize=True,
        round=gmp.RoundToNearest,
        # overflow saturates and invalid operations make NaN
        trap_underflow=False,
        trap_overflow=False,
        trap_inexact=False,
        trap_invalid=False,
        trap_erange=False,
        trap_divzero=False,
    )


def bits_to_mpfr(bits):
    """Exact MPFR value of a pattern. Every binary16 value is exact in binary64."""
    with binary16_context():
        return gmp.mpfr(codec.bits_to_float(bits))

def mpfr_to_bits(x):
    """Encode an MPFR that was computed in the binary16 context."""
    if gmp.is_nan(x):
        return codec.CANONICAL_NAN
    return codec.float_to_bits(float(x))


gmp_ops = [
    gmp.add,
    gmp.sub,
    gmp.mul,
    gmp.div,
    lambda x: -x,
    gmp.sqrt,
    gmp.fma,
    lambda x: abs(x),
    gmp.fmod,
    gmp.remainder,
]


def compute(opcode, *args):
    """Compute op(*args) on patterns, rounded once to binary16.
    NaN operands produce the canonical quiet NaN without reaching MPFR.
    """
    if len(args) != arity[opcode]:
        raise ValueError('{} expects {} operands, got {}'.format(OP(opcode).name, arity[opcode], len(args)))
    op = gmp_ops[opcode]
    for bits in args:
        if codec.is_nan(bits):
            return codec.CANONICAL_NAN
    inputs = [bits_to_mpfr(bits) for bits in args]
    with binary16_context():
        result = op(*inputs)
        return mpfr_to_bits(result)


# arithmetic

def add(a, b):
    return compute(OP.add, a, b)

def sub(a, b):
    return compute(OP.sub, a, b)

def mul(a, b):
    return compute(OP.mul, a, b)

def div(a, b):
    return compute(OP.div, a, b)

def fma(a, b, c):
    """a * b + c with a single rounding."""
    return compute(OP.fma, a, b, c)

def sqrt(a):
    return compute(OP.sqrt, a)

def fmod(a, b):
    return compute(OP.fmod, a, b)

def remainder(a, b):
    return compute(OP.remainder, a, b)

# negation and absolute value only touch the sign bit, even for NaN

def neg(a):
    return (a ^ codec.SIGN_MASK) & 0xffff

def fabs(a):
    return a & ~codec.SIGN_MASK & 0xffff


# comparisons, unordered if either side is NaN

def equal(a, b):
    if codec.is_nan(a) or codec.is_nan(b):
        return False
    x, y = bits_to_mpfr(a), bits_to_mpfr(b)
    return x == y

def less_than(a, b):
    if codec.is_nan(a) or codec.is_nan(b):
        return False
    x, y = bits_to_mpfr(a), bits_to_mpfr(b)
    return x < y

def less_or_equal(a, b):
    if codec.is_nan(a) or codec.is_nan(b):
        return False
    x, y = bits_to_mpfr(a), bits_to_mpfr(b)
    return x <= y


# conversions

def from_float64(x):
    """Round a binary64 value to the nearest pattern, ties to even."""
    with binary16_context():
        return mpfr_to_bits(gmp.mpfr(float(x)))

def from_float32(x):
    # binary32 -> binary64 is exact, so this rounds only once
    return from_float64(float(np.float32(x)))

def from_machine_int(n):
    with binary16_context():
        return mpfr_to_bits(gmp.mpfr(int(n)))

def to_float64(a):
    return codec.bits_to_float(a)

def to_float32(a):
    return np.float32(codec.bits_to_float(a))


# constants

def zero():
    return codec.POSITIVE_ZERO

def nan():
    return codec.CANONICAL_NAN

def pi():
    with binary16_context():
        return mpfr_to_bits(gmp.const_pi())

def unit_last_place_of_one():
    return codec.compose(0, codec.EXPONENT_BIAS - codec.SIGNIFICAND_BIT_COUNT, 0)
