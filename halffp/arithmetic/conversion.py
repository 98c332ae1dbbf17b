"""Conversions from wider sources to binary16 patterns.

Floating-point sources are a closed set of kinds (binary16, binary32,
binary64 and extended precision), looked up by Python type or by
precision name. Integers that fit a machine word are rounded directly
by the kernel; wider integers go through binary64 first.
"""

import logging
import math
import operator
from enum import IntEnum, unique

import numpy as np

from ..binary16 import codec
from ..binary16 import gmpmath
from . import evalctx


logger = logging.getLogger(__name__)

MACHINE_WORD_BITS = 64


@unique
class SourceKind(IntEnum):
    BINARY16 = 16
    BINARY32 = 32
    BINARY64 = 64
    BINARY80 = 80

# Half registers itself here as another binary16 source
float_kinds = {
    np.float16: SourceKind.BINARY16,
    np.float32: SourceKind.BINARY32,
    np.float64: SourceKind.BINARY64,
    float: SourceKind.BINARY64,
}
if np.dtype(np.longdouble) != np.dtype(np.float64):
    float_kinds[np.longdouble] = SourceKind.BINARY80

_itemsize_kinds = {
    2: SourceKind.BINARY16,
    4: SourceKind.BINARY32,
    8: SourceKind.BINARY64,
}

precision_kinds = {}
precision_kinds.update((k, SourceKind.BINARY16) for k in evalctx.binary16_synonyms)
precision_kinds.update((k, SourceKind.BINARY32) for k in evalctx.binary32_synonyms)
precision_kinds.update((k, SourceKind.BINARY64) for k in evalctx.binary64_synonyms)
precision_kinds.update((k, SourceKind.BINARY80) for k in evalctx.binary80_synonyms)

# storage dtypes used to look at a source's raw bits
_np_types = {
    SourceKind.BINARY16: (np.float16, np.uint16, 1 << 9),
    SourceKind.BINARY32: (np.float32, np.uint32, 1 << 22),
    SourceKind.BINARY64: (np.float64, np.uint64, 1 << 51),
}


def source_kind(x):
    """Kind of a floating-point source, or None if x is not one."""
    kind = float_kinds.get(type(x))
    if kind is None:
        if isinstance(x, float):
            kind = SourceKind.BINARY64
        elif isinstance(x, np.floating):
            kind = _itemsize_kinds.get(np.dtype(type(x)).itemsize, SourceKind.BINARY80)
    return kind

def precision_kind(prec):
    try:
        return precision_kinds[str(prec).lower()]
    except KeyError:
        raise ValueError('unsupported precision {}'.format(repr(prec)))

def is_integer_source(x):
    return isinstance(x, (int, np.integer)) and not isinstance(x, (bool, np.bool_))


def source_bits(x, kind):
    """Raw storage bits of a binary16/32/64 source."""
    ftype, utype, _ = _np_types[kind]
    return int(np.array(x, dtype=ftype).view(utype)[()])

def source_is_nan(x):
    return math.isnan(float(x))

def source_is_inf(x):
    return math.isinf(float(x))

def source_is_negative(x):
    return math.copysign(1.0, float(x)) < 0

def source_is_signaling(x, kind):
    if not source_is_nan(x):
        return False
    if kind == SourceKind.BINARY80:
        kind = SourceKind.BINARY64
    _, _, quiet_bit = _np_types[kind]
    return source_bits(x, kind) & quiet_bit == 0


def float_to_bits(x, kind):
    """Round a floating-point source to binary16, ties to even.
    Infinities keep their sign; every NaN becomes the canonical quiet NaN.
    """
    if source_is_inf(x):
        return codec.NEGATIVE_INFINITY if source_is_negative(x) else codec.POSITIVE_INFINITY
    elif source_is_nan(x):
        return codec.CANONICAL_NAN

    if kind == SourceKind.BINARY16:
        return source_bits(x, kind)
    elif kind == SourceKind.BINARY32:
        return gmpmath.from_float32(x)
    elif kind == SourceKind.BINARY64:
        return gmpmath.from_float64(x)
    elif kind == SourceKind.BINARY80:
        narrowed = float(x)
        if narrowed != x:
            logger.debug('extended source %r narrowed to binary64 %r before rounding', x, narrowed)
        return gmpmath.from_float64(narrowed)
    else:
        raise ValueError('unsupported source kind {}'.format(repr(kind)))

def bits_to_source(bits, kind):
    """Convert a pattern back to a source kind, for exactness checks."""
    if kind == SourceKind.BINARY16:
        return np.array(bits, dtype=np.uint16).view(np.float16)[()]
    elif kind == SourceKind.BINARY32:
        return gmpmath.to_float32(bits)
    elif kind == SourceKind.BINARY64:
        return gmpmath.to_float64(bits)
    elif kind == SourceKind.BINARY80:
        return np.longdouble(gmpmath.to_float64(bits))
    else:
        raise ValueError('unsupported source kind {}'.format(repr(kind)))


def int_to_bits(n):
    """Round an integer to binary16, ties to even."""
    n = operator.index(n)
    if n.bit_length() <= MACHINE_WORD_BITS:
        return gmpmath.from_machine_int(n)

    logger.debug('integer of %d bits widened to binary64 before rounding', n.bit_length())
    try:
        f = float(n)
    except OverflowError:
        f = math.inf if n > 0 else -math.inf
    return float_to_bits(f, SourceKind.BINARY64)
