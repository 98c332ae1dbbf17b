import math
import random

import pytest

from halffp import Half, RoundingRule
from halffp.binary16 import codec


def random_patterns(rng, n, allow_nan=False):
    out = []
    while len(out) < n:
        bits = rng.randrange(1 << 16)
        if allow_nan or not codec.is_nan(bits):
            out.append(bits)
    return out


# comparison

def test_zeros_are_equal():
    pz, nz = Half.from_bits(0x0000), Half.from_bits(0x8000)
    assert pz == nz
    assert not pz < nz and not nz < pz
    assert pz <= nz and nz >= pz
    assert hash(pz) == hash(nz)
    assert not pz.is_identical_to(nz)


@pytest.mark.parametrize('bits', [0x7e00, 0x7c01, 0xffff])
def test_nan_is_unordered(bits):
    x = Half.from_bits(bits)
    for other in (x, Half.ZERO, Half.INFINITY, Half.NAN, -Half.INFINITY):
        assert not x == other
        assert x != other
        assert not x < other
        assert not x <= other
        assert not x > other
        assert not x >= other
        assert not other < x
    assert x.is_identical_to(Half.from_bits(bits))


def test_comparisons_agree_with_float():
    rng = random.Random(1)
    xs = random_patterns(rng, 3000, allow_nan=True)
    ys = random_patterns(rng, 3000, allow_nan=True)
    for a, b in zip(xs, ys):
        x, y = Half.from_bits(a), Half.from_bits(b)
        fx, fy = float(x), float(y)
        assert (x == y) == (fx == fy)
        assert (x < y) == (fx < fy)
        assert (x <= y) == (fx <= fy)
        assert (x > y) == (fx > fy)
        assert (x >= y) == (fx >= fy)
        assert x.is_equal(y) == (fx == fy)
        assert x.is_less(y) == (fx < fy)
        assert x.is_less_or_equal(y) == (fx <= fy)


def test_named_comparisons_convert_their_argument():
    assert Half(1.0).is_equal(1.0)
    assert Half(1.0).is_equal(1)
    assert Half(1.0).is_less(2.5)
    assert Half(1.0).is_less_or_equal(1)
    assert not Half(1.0).is_less(0.5)
    # 2049 rounds to 2048
    assert Half(2048).is_equal(2049)
    assert not Half.NAN.is_equal(float('nan'))
    with pytest.raises(TypeError):
        Half(1.0).is_equal([1.0])
    with pytest.raises(TypeError):
        Half(1.0).is_less(True)


def test_comparison_with_other_types():
    assert not Half(1.0) == 1.0
    assert Half(1.0) != 1
    with pytest.raises(TypeError):
        Half(1.0) < 2.0
    with pytest.raises(TypeError):
        Half(1.0) >= 0


def test_hash_is_consistent_with_equality():
    assert len({Half(1.0), Half(1), Half('1.0'), Half(-0.0), Half(0.0)}) == 2
    assert hash(Half(2.5)) == hash(Half.from_bits(0x4100))


def test_truthiness():
    assert not Half(0.0)
    assert not Half(-0.0)
    assert Half.LEAST_NONZERO_MAGNITUDE
    assert Half.NAN


# arithmetic

def test_operators():
    assert (Half(1.5) + Half(1.0)).bits == 0x4100
    assert (Half(1.5) + 1).bits == 0x4100
    assert (1 + Half(1.5)).bits == 0x4100
    assert (Half(3) - 1.0).bits == 0x4000
    assert (1.0 - Half(3)).bits == 0xc000
    assert (2 * Half(3)).bits == 0x4600
    assert (Half(3) * 2).bits == 0x4600
    assert (Half(1) / 3).bits == 0x3555
    assert (1 / Half(4)).bits == 0x3400
    assert (Half(1) / 0).bits == 0x7c00
    assert (Half.INFINITY - Half.INFINITY).is_nan()


def test_operators_round_inexact_operands():
    # 2049 rounds to 2048 before the addition
    assert (Half(1) + 2049).bits == (Half(1) + 2048).bits


@pytest.mark.parametrize('other', [True, '1', None, [1]])
def test_operators_reject_unsupported(other):
    with pytest.raises(TypeError):
        Half(1) + other
    with pytest.raises(TypeError):
        other * Half(1)


def test_sign_operations():
    assert (-Half(0.0)).bits == 0x8000
    assert (-Half.NAN).bits == 0xfe00
    assert abs(Half(-2.0)).bits == 0x4000
    assert abs(Half.from_bits(0xfe05)).bits == 0x7e05
    x = Half(3.0)
    assert +x is x
    assert x.negate().bits == 0xc200
    assert x.bits == 0x4200


def test_add_product():
    a = Half.from_bits(0x3c01)
    c = Half.from_bits(0xbc02)
    assert c.add_product(a, a).bits == 0x0010
    assert (a * a + c).bits == 0x0000
    assert Half(1).add_product(2, 3).bits == Half(7).bits


def test_sqrt():
    assert Half(4).sqrt().bits == 0x4000
    assert Half(2).sqrt().bits == Half(math.sqrt(2)).bits
    assert Half(-1).sqrt().is_nan()
    assert Half(-0.0).sqrt().bits == 0x8000


def test_remainders():
    x = Half(8.625)
    assert x.remainder(0.75).bits == Half(-0.375).bits
    assert x.truncating_remainder(0.75).bits == Half(0.375).bits
    assert Half(-8.625).truncating_remainder(Half(0.75)).bits == Half(-0.375).bits
    assert x.remainder(0).is_nan()
    assert Half.INFINITY.truncating_remainder(1).is_nan()


@pytest.mark.parametrize('value, rule, expected', [
    (6.5, RoundingRule.TO_NEAREST_OR_AWAY_FROM_ZERO, 7.0),
    (6.5, RoundingRule.TO_NEAREST_OR_EVEN, 6.0),
    (6.5, RoundingRule.UP, 7.0),
    (6.5, RoundingRule.DOWN, 6.0),
    (6.5, RoundingRule.TOWARD_ZERO, 6.0),
    (6.5, RoundingRule.AWAY_FROM_ZERO, 7.0),
    (-6.5, RoundingRule.TO_NEAREST_OR_AWAY_FROM_ZERO, -7.0),
    (-6.5, RoundingRule.TO_NEAREST_OR_EVEN, -6.0),
    (-6.5, RoundingRule.UP, -6.0),
    (-6.5, RoundingRule.DOWN, -7.0),
    (-6.5, RoundingRule.TOWARD_ZERO, -6.0),
    (-6.5, RoundingRule.AWAY_FROM_ZERO, -7.0),
    (7.5, RoundingRule.TO_NEAREST_OR_EVEN, 8.0),
    (2.25, RoundingRule.AWAY_FROM_ZERO, 3.0),
    (65504.0, RoundingRule.UP, 65504.0),
    (math.inf, RoundingRule.DOWN, math.inf),
])
def test_rounded(value, rule, expected):
    assert float(Half(value).rounded(rule)) == expected


def test_rounded_keeps_sign_of_zero():
    assert Half(-0.5).rounded(RoundingRule.UP).bits == 0x8000
    assert Half(-0.25).rounded().bits == 0x8000
    assert Half(0.5).rounded(RoundingRule.TO_NEAREST_OR_EVEN).bits == 0x0000
    assert Half(0.5).rounded().bits == 0x3c00


def test_rounded_nan():
    assert Half.NAN.rounded(RoundingRule.DOWN).is_nan()
    with pytest.raises(ValueError):
        Half(1.5).rounded('up')


def test_distance_and_advanced():
    assert Half(1).distance(3).bits == Half(2).bits
    assert Half(3).distance(Half(1)).bits == Half(-2).bits
    assert Half(1).advanced(0.5).bits == Half(1.5).bits
    assert Half.GREATEST_FINITE_MAGNITUDE.advanced(Half.GREATEST_FINITE_MAGNITUDE).is_infinite()


# conversion to Python numbers

def test_python_number_conversions():
    x = Half(-1.5)
    assert float(x) == -1.5
    assert int(x) == -1
    assert math.trunc(x) == -1
    assert math.floor(x) == -2
    assert math.ceil(x) == -1
    assert round(Half(2.5)) == 2
    assert round(Half(3.5)) == 4
    assert round(Half.PI, 2).bits == Half(3.14).bits


def test_int_of_non_finite():
    with pytest.raises(ValueError):
        int(Half.NAN)
    with pytest.raises(OverflowError):
        int(Half.INFINITY)
