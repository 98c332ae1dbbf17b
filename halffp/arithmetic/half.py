"""IEEE 754 binary16 numbers.

A Half is nothing but its 16-bit pattern. Fields, classification and the
derived quantities (exponent, significand, ulp, next_up, binade,
significand_width) are computed from the bits with the codec; arithmetic,
comparison and rounding conversions go through the gmpy2 kernel.
"""

import math
import operator
import sys
from enum import Enum, IntEnum, unique

import numpy as np

from ..binary16 import codec
from ..binary16 import gmpmath
from ..binary16.utils import floorlog2, ctz, clz, PreconditionError
from . import conversion
from .conversion import SourceKind
from .evalctx import HalfCtx, DEFAULT_CTX


@unique
class Sign(IntEnum):
    PLUS = 0
    MINUS = 1

@unique
class RoundingRule(Enum):
    TO_NEAREST_OR_AWAY_FROM_ZERO = 0
    TO_NEAREST_OR_EVEN = 1
    UP = 2
    DOWN = 3
    TOWARD_ZERO = 4
    AWAY_FROM_ZERO = 5


_SCALE_2_10 = codec.compose(0, codec.EXPONENT_BIAS + codec.SIGNIFICAND_BIT_COUNT, 0)
_BINADE_MASK = codec.SIGN_MASK | codec.EXPONENT_MASK


class Half(object):
    """A half precision floating-point value.

    Half(x) rounds x to the nearest binary16 value, ties to even. x may be
    another Half, a Python or numpy float, an integer, or a string accepted
    by float(). Half(bits=p) reinterprets a 16-bit pattern verbatim.

    >>> Half(21.5).exponent, Half(21.5).significand
    (4, Half(bits=0x3d60, value=1.34375))
    """

    __slots__ = ('_bits',)

    def __init__(self, x=None, bits=None):
        if bits is not None:
            if x is not None:
                raise ValueError('cannot specify both x={} and bits={}'.format(repr(x), repr(bits)))
            self._bits = self._check_bits(bits)
        elif x is None:
            self._bits = gmpmath.zero()
        elif isinstance(x, Half):
            self._bits = x._bits
        elif isinstance(x, (bool, np.bool_)):
            raise TypeError('cannot convert {} to Half'.format(repr(x)))
        elif conversion.is_integer_source(x):
            self._bits = conversion.int_to_bits(x)
        elif isinstance(x, str):
            self._bits = self.from_string(x)._bits
        else:
            kind = conversion.source_kind(x)
            if kind is None:
                raise TypeError('cannot convert {} of type {} to Half'.format(repr(x), type(x).__name__))
            self._bits = conversion.float_to_bits(x, kind)

    @staticmethod
    def _check_bits(bits):
        bits = operator.index(bits)
        if not 0 <= bits <= 0xffff:
            raise ValueError('bit pattern out of range: {}'.format(repr(bits)))
        return bits

    @classmethod
    def _wrap(cls, bits):
        self = cls.__new__(cls)
        self._bits = bits
        return self

    @staticmethod
    def _select_context(ctx):
        if ctx is None:
            return DEFAULT_CTX
        elif isinstance(ctx, HalfCtx):
            return ctx
        else:
            raise TypeError('expected a HalfCtx, got {}'.format(repr(ctx)))

    # construction

    @classmethod
    def from_bits(cls, bits):
        """Reinterpret a 16-bit unsigned pattern. No normalization is done."""
        return cls._wrap(cls._check_bits(bits))

    @classmethod
    def from_bytes(cls, data, byteorder='little'):
        if len(data) != 2:
            raise ValueError('expected 2 bytes, got {}'.format(len(data)))
        return cls._wrap(int.from_bytes(data, byteorder))

    @classmethod
    def from_sign_exponent_significand(cls, sign, exponent_bits, significand_bits):
        """Build a value from raw fields. Fields are masked to their widths,
        so out of range exponent or significand bits are silently dropped.
        """
        return cls._wrap(codec.compose(int(Sign(sign)), exponent_bits, significand_bits))

    @classmethod
    def from_nan_payload(cls, payload, signaling=False):
        """A NaN with the given payload, which must stay clear of the quiet bit.
        A signaling NaN with zero payload would encode infinity, so it uses
        the next lower bit instead.
        """
        if not 0 <= payload < codec.QUIET_NAN_MASK:
            raise PreconditionError('NaN payload is not encodable: {}'.format(repr(payload)))
        if signaling:
            significand = payload or (codec.QUIET_NAN_MASK >> 1)
        else:
            significand = payload | codec.QUIET_NAN_MASK
        return cls.from_sign_exponent_significand(Sign.PLUS, codec.INFINITY_EXPONENT, significand)

    @classmethod
    def from_float(cls, x, precision=None):
        """Round a floating-point value to the nearest binary16, ties to even.

        Infinities keep their sign and any NaN becomes the canonical quiet NaN,
        except that a Half source is copied bit for bit. The source kind comes
        from the type of x unless precision names one ('binary32', 'double',
        ...), in which case x is first converted to that format.
        """
        if isinstance(x, Half):
            return cls._wrap(x._bits)
        if precision is not None:
            kind = conversion.precision_kind(precision)
            if kind == SourceKind.BINARY16:
                x = np.float16(x)
            elif kind == SourceKind.BINARY32:
                x = np.float32(x)
            elif kind == SourceKind.BINARY80:
                x = np.longdouble(x)
            else:
                x = float(x)
        else:
            kind = conversion.source_kind(x)
            if kind is None:
                raise TypeError('not a floating-point source: {}'.format(repr(x)))
        return cls._wrap(conversion.float_to_bits(x, kind))

    @classmethod
    def from_int(cls, n):
        """Round an integer to the nearest binary16, ties to even."""
        if not conversion.is_integer_source(n):
            raise TypeError('not an integer source: {}'.format(repr(n)))
        return cls._wrap(conversion.int_to_bits(n))

    @classmethod
    def from_string(cls, s):
        """Parse a decimal or special ('inf', 'nan') string, then round."""
        return cls._wrap(conversion.float_to_bits(float(s), SourceKind.BINARY64))

    @classmethod
    def exactly(cls, value):
        """Convert value only if nothing is lost, otherwise return None.

        Infinities must keep their sign and NaNs their signaling-ness.
        Finite values must convert back to the source type unchanged;
        -0.0 and 0.0 compare equal, so a zero's sign is not checked.
        An integer never converts exactly to infinity or NaN.
        """
        if isinstance(value, Half):
            return cls._wrap(value._bits)

        if conversion.is_integer_source(value):
            result = cls.from_int(value)
            if result.is_infinite() or result.is_nan() or int(result) != value:
                return None
            return result

        kind = conversion.source_kind(value)
        if kind is None:
            raise TypeError('cannot convert {} of type {} to Half'.format(repr(value), type(value).__name__))
        result = cls.from_float(value)

        if result.is_infinite() or conversion.source_is_inf(value):
            if not result.is_infinite() or not conversion.source_is_inf(value):
                return None
            if result.negative != conversion.source_is_negative(value):
                return None
        elif result.is_nan() or conversion.source_is_nan(value):
            if not result.is_nan() or not conversion.source_is_nan(value):
                return None
            if result.is_signaling_nan() != conversion.source_is_signaling(value, kind):
                return None
        elif conversion.bits_to_source(result._bits, kind) != value:
            return None

        return result

    @classmethod
    def from_sign_exponent_value(cls, sign, exponent, significand):
        """Compute (-1)**sign * significand * 2**exponent.

        Zero, infinite and NaN significands pass through with the sign
        applied. Exponents beyond the finite range are applied in at most
        three scaling steps, so results deep in the subnormal range can be
        rounded twice.
        """
        result = Half(significand)
        if Sign(sign) == Sign.MINUS:
            result = -result
        if result.is_finite() and not result.is_zero():
            clamped = exponent
            least_normal_exponent = codec.EMIN
            greatest_finite_exponent = codec.EMAX
            if clamped < least_normal_exponent:
                clamped = max(clamped, 3 * least_normal_exponent)
                while clamped < least_normal_exponent:
                    result = result * LEAST_NORMAL_MAGNITUDE
                    clamped -= least_normal_exponent
            elif clamped > greatest_finite_exponent:
                step = cls.from_sign_exponent_significand(Sign.PLUS, codec.INFINITY_EXPONENT - 1, 0)
                clamped = min(clamped, 3 * greatest_finite_exponent)
                while clamped > greatest_finite_exponent:
                    result = result * step
                    clamped -= greatest_finite_exponent
            scale = cls.from_sign_exponent_significand(Sign.PLUS, codec.EXPONENT_BIAS + clamped, 0)
            result = result * scale
        return result

    @classmethod
    def least_nonzero_magnitude(cls, ctx=None):
        ctx = cls._select_context(ctx)
        if ctx.flush_subnormals:
            return LEAST_NORMAL_MAGNITUDE
        return LEAST_NONZERO_MAGNITUDE

    # fields

    @property
    def bits(self):
        """The 16-bit interchange encoding."""
        return self._bits

    @property
    def sign(self):
        return Sign(self._bits >> codec.SIGN_SHIFT)

    @property
    def negative(self):
        return codec.is_negative(self._bits)

    @property
    def exponent_bits(self):
        """Biased exponent field."""
        return codec.decompose(self._bits)[1]

    @property
    def significand_bits(self):
        """Trailing significand field, without the implicit bit."""
        return codec.decompose(self._bits)[2]

    def to_bytes(self, byteorder='little'):
        return self._bits.to_bytes(2, byteorder)

    def to_numpy(self):
        return np.array(self._bits, dtype=np.uint16).view(np.float16)[()]

    # classification

    def is_zero(self):
        return codec.is_zero(self._bits)

    def is_subnormal(self):
        return codec.is_subnormal(self._bits)

    def is_normal(self):
        return codec.is_normal(self._bits)

    def is_finite(self):
        return codec.is_finite(self._bits)

    def is_infinite(self):
        return codec.is_infinite(self._bits)

    def is_nan(self):
        return codec.is_nan(self._bits)

    def is_signaling_nan(self):
        return codec.is_signaling_nan(self._bits)

    def is_canonical(self, ctx=None):
        ctx = self._select_context(ctx)
        return codec.is_canonical(self._bits, flush_subnormals=ctx.flush_subnormals)

    def classify(self):
        return codec.classify(self._bits)

    def is_identical_to(self, other):
        """Same encoding, a stricter test than ==."""
        return isinstance(other, Half) and self._bits == other._bits

    # derived quantities

    @property
    def exponent(self):
        """Unbiased exponent of the value, as if it were normalized.
        sys.maxsize for infinities and NaN, -sys.maxsize - 1 for zeros.
        """
        _, E, C = codec.decompose(self._bits)
        if E == codec.INFINITY_EXPONENT:
            return sys.maxsize
        if E == 0 and C == 0:
            return -sys.maxsize - 1
        provisional = E - codec.EXPONENT_BIAS
        if E > 0:
            return provisional
        shift = codec.SIGNIFICAND_BIT_COUNT - floorlog2(C)
        return provisional + 1 - shift

    @property
    def significand(self):
        """The significand in [1, 2) for finite nonzero values, positive.
        NaN is returned unchanged; zeros and infinities keep their magnitude class.
        """
        _, E, C = codec.decompose(self._bits)
        if E == codec.INFINITY_EXPONENT and C != 0:
            return self
        if 0 < E < codec.INFINITY_EXPONENT:
            return Half.from_sign_exponent_significand(Sign.PLUS, codec.EXPONENT_BIAS, C)
        if E == 0 and C != 0:
            shift = codec.SIGNIFICAND_BIT_COUNT - floorlog2(C)
            return Half.from_sign_exponent_significand(Sign.PLUS, codec.EXPONENT_BIAS, C << shift)
        return Half.from_sign_exponent_significand(Sign.PLUS, E, 0)

    @property
    def ulp(self):
        """Unit in the last place: the positive gap to the next value of
        larger magnitude in the same binade. NaN for non-finite values.
        """
        if not self.is_finite():
            return NAN
        if self.is_normal():
            unit = self._bits & codec.EXPONENT_MASK
            return Half._wrap(gmpmath.mul(unit, gmpmath.unit_last_place_of_one()))
        return Half._wrap(gmpmath.mul(codec.LEAST_NORMAL, gmpmath.unit_last_place_of_one()))

    @property
    def significand_width(self):
        """Number of fractional significand bits needed to represent the value.
        -1 for zeros, infinities and NaN.
        """
        _, E, C = codec.decompose(self._bits)
        if 0 < E < codec.INFINITY_EXPONENT:
            if C == 0:
                return 0
            return codec.SIGNIFICAND_BIT_COUNT - ctz(C, codec.BIT_WIDTH)
        if E == 0 and C != 0:
            return codec.BIT_WIDTH - (ctz(C, codec.BIT_WIDTH) + clz(C, codec.BIT_WIDTH) + 1)
        return -1

    def next_up(self, ctx=None):
        """The least value that compares greater than this one.
        Positive infinity and NaN are returned as they are (NaN quieted).
        """
        ctx = self._select_context(ctx)
        # canonicalizes -0 to +0 and quiets NaN
        nxt = gmpmath.add(self._bits, gmpmath.zero())
        if ctx.flush_subnormals:
            if codec.is_zero(nxt) or codec.is_subnormal(nxt):
                return LEAST_NORMAL_MAGNITUDE
            if nxt == codec.SIGN_MASK | codec.LEAST_NORMAL:
                return NEGATIVE_ZERO
        if gmpmath.less_than(nxt, codec.POSITIVE_INFINITY):
            if codec.is_negative(nxt):
                return Half._wrap(nxt - 1)
            else:
                return Half._wrap(nxt + 1)
        return Half._wrap(nxt)

    def next_down(self, ctx=None):
        """The greatest value that compares less than this one."""
        return -((-self).next_up(ctx=ctx))

    def binade(self, ctx=None):
        """Same sign and exponent as this value, with a significand of 1.
        NaN for infinities and NaN.
        """
        ctx = self._select_context(ctx)
        if not self.is_finite():
            return NAN
        if self.is_subnormal() and not ctx.flush_subnormals:
            scaled = gmpmath.mul(self._bits, _SCALE_2_10)
            return Half._wrap(gmpmath.mul(scaled & _BINADE_MASK, gmpmath.unit_last_place_of_one()))
        return Half._wrap(self._bits & _BINADE_MASK)

    @property
    def magnitude(self):
        return Half._wrap(gmpmath.fabs(self._bits))

    # comparison

    def is_equal(self, other):
        other = Half(other)
        return gmpmath.equal(self._bits, other._bits)

    def is_less(self, other):
        other = Half(other)
        return gmpmath.less_than(self._bits, other._bits)

    def is_less_or_equal(self, other):
        other = Half(other)
        return gmpmath.less_or_equal(self._bits, other._bits)

    def __eq__(self, other):
        if not isinstance(other, Half):
            return NotImplemented
        return gmpmath.equal(self._bits, other._bits)

    def __lt__(self, other):
        if not isinstance(other, Half):
            return NotImplemented
        return gmpmath.less_than(self._bits, other._bits)

    def __le__(self, other):
        if not isinstance(other, Half):
            return NotImplemented
        return gmpmath.less_or_equal(self._bits, other._bits)

    def __gt__(self, other):
        if not isinstance(other, Half):
            return NotImplemented
        return gmpmath.less_than(other._bits, self._bits)

    def __ge__(self, other):
        if not isinstance(other, Half):
            return NotImplemented
        return gmpmath.less_or_equal(other._bits, self._bits)

    def __hash__(self):
        # +0 and -0 are equal, so they must hash the same
        if self.is_zero():
            return hash(codec.POSITIVE_ZERO)
        return hash(self._bits)

    def __bool__(self):
        return not self.is_zero()

    # arithmetic

    @staticmethod
    def _coerce(other):
        if isinstance(other, Half):
            return other
        elif isinstance(other, (bool, np.bool_)):
            return None
        elif isinstance(other, (int, float, np.integer, np.floating)):
            return Half(other)
        else:
            return None

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return Half._wrap(gmpmath.add(self._bits, other._bits))

    def __radd__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return Half._wrap(gmpmath.add(other._bits, self._bits))

    def __sub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return Half._wrap(gmpmath.sub(self._bits, other._bits))

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return Half._wrap(gmpmath.sub(other._bits, self._bits))

    def __mul__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return Half._wrap(gmpmath.mul(self._bits, other._bits))

    def __rmul__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return Half._wrap(gmpmath.mul(other._bits, self._bits))

    def __truediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return Half._wrap(gmpmath.div(self._bits, other._bits))

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return Half._wrap(gmpmath.div(other._bits, self._bits))

    def __neg__(self):
        return Half._wrap(gmpmath.neg(self._bits))

    def __pos__(self):
        return self

    def __abs__(self):
        return self.magnitude

    def negate(self):
        """Flip the sign. Halves are immutable, so this returns a new value."""
        return -self

    def add_product(self, lhs, rhs):
        """self + lhs * rhs, rounded once."""
        lhs, rhs = Half(lhs), Half(rhs)
        return Half._wrap(gmpmath.fma(lhs._bits, rhs._bits, self._bits))

    def sqrt(self):
        return Half._wrap(gmpmath.sqrt(self._bits))

    def remainder(self, other):
        """IEEE remainder: self - n * other, n the nearest integer to self / other."""
        other = Half(other)
        return Half._wrap(gmpmath.remainder(self._bits, other._bits))

    def truncating_remainder(self, other):
        """Remainder of division truncated toward zero, with the sign of self."""
        other = Half(other)
        return Half._wrap(gmpmath.fmod(self._bits, other._bits))

    def rounded(self, rule=RoundingRule.TO_NEAREST_OR_AWAY_FROM_ZERO):
        """Round to an integral value with the given rule. Zeros keep their sign."""
        f = gmpmath.to_float64(self._bits)
        if not math.isfinite(f):
            return Half.from_float(f)
        if rule == RoundingRule.TO_NEAREST_OR_AWAY_FROM_ZERO:
            r = math.floor(abs(f) + 0.5)
        elif rule == RoundingRule.TO_NEAREST_OR_EVEN:
            r = round(abs(f))
        elif rule == RoundingRule.UP:
            r = math.ceil(f)
        elif rule == RoundingRule.DOWN:
            r = math.floor(f)
        elif rule == RoundingRule.TOWARD_ZERO:
            r = math.trunc(f)
        elif rule == RoundingRule.AWAY_FROM_ZERO:
            r = math.ceil(abs(f))
        else:
            raise ValueError('unsupported rounding rule {}'.format(repr(rule)))
        return Half.from_float(math.copysign(float(abs(r)), f))

    def distance(self, other):
        return Half(other) - self

    def advanced(self, amount):
        return self + Half(amount)

    # conversion and formatting

    def __float__(self):
        return gmpmath.to_float64(self._bits)

    def __int__(self):
        return int(gmpmath.to_float64(self._bits))

    def __trunc__(self):
        return math.trunc(gmpmath.to_float64(self._bits))

    def __floor__(self):
        return math.floor(gmpmath.to_float64(self._bits))

    def __ceil__(self):
        return math.ceil(gmpmath.to_float64(self._bits))

    def __round__(self, ndigits=None):
        if ndigits is None:
            return round(gmpmath.to_float64(self._bits))
        return Half(round(gmpmath.to_float64(self._bits), ndigits))

    def __str__(self):
        if self.is_nan():
            return 'nan'
        # every binary16 value is exact in binary32, so this does not round
        return str(gmpmath.to_float32(self._bits))

    def __repr__(self):
        if self.is_signaling_nan():
            value = 'snan'
        else:
            value = str(self)
        return '{}(bits=0x{:04x}, value={})'.format(type(self).__name__, self._bits, value)

    def __format__(self, format_spec):
        return format(gmpmath.to_float64(self._bits), format_spec)

    def show_bitpattern(self):
        return codec.show_bitpattern(self._bits)


conversion.float_kinds[Half] = SourceKind.BINARY16


ZERO = Half._wrap(codec.POSITIVE_ZERO)
NEGATIVE_ZERO = Half._wrap(codec.NEGATIVE_ZERO)
ONE = Half._wrap(codec.compose(0, codec.EXPONENT_BIAS, 0))
INFINITY = Half._wrap(codec.POSITIVE_INFINITY)
NAN = Half._wrap(gmpmath.nan())
SIGNALING_NAN = Half.from_nan_payload(0, signaling=True)
GREATEST_FINITE_MAGNITUDE = Half._wrap(codec.GREATEST_FINITE)
LEAST_NORMAL_MAGNITUDE = Half._wrap(codec.LEAST_NORMAL)
LEAST_NONZERO_MAGNITUDE = Half._wrap(codec.LEAST_SUBNORMAL)
PI = Half._wrap(gmpmath.pi())
ULP_OF_ONE = Half._wrap(gmpmath.unit_last_place_of_one())

Half.ZERO = ZERO
Half.ONE = ONE
Half.INFINITY = INFINITY
Half.NAN = NAN
Half.SIGNALING_NAN = SIGNALING_NAN
Half.GREATEST_FINITE_MAGNITUDE = GREATEST_FINITE_MAGNITUDE
Half.LEAST_NORMAL_MAGNITUDE = LEAST_NORMAL_MAGNITUDE
Half.LEAST_NONZERO_MAGNITUDE = LEAST_NONZERO_MAGNITUDE
Half.PI = PI
Half.ULP_OF_ONE = ULP_OF_ONE
