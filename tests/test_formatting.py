import pytest

from halffp import Half
from halffp.binary16 import codec


@pytest.mark.parametrize('bits, text', [
    (0x7e00, 'nan'),
    (0x7c01, 'nan'),
    (0xfe00, 'nan'),
    (0x7c00, 'inf'),
    (0xfc00, '-inf'),
    (0x3c00, '1.0'),
    (0x4248, '3.140625'),
    (0x7bff, '65504.0'),
    (0x8000, '-0.0'),
    (0x0000, '0.0'),
    (0x4d60, '21.5'),
    (0x3555, '0.33325195'),
])
def test_str(bits, text):
    assert str(Half.from_bits(bits)) == text


def test_str_round_trips():
    for bits in range(1 << 16):
        if codec.is_nan(bits):
            continue
        assert Half.from_string(str(Half.from_bits(bits))).bits == bits


@pytest.mark.parametrize('bits, text', [
    (0x3c00, 'Half(bits=0x3c00, value=1.0)'),
    (0x8000, 'Half(bits=0x8000, value=-0.0)'),
    (0x7e00, 'Half(bits=0x7e00, value=nan)'),
    (0x7d00, 'Half(bits=0x7d00, value=snan)'),
    (0xfc00, 'Half(bits=0xfc00, value=-inf)'),
])
def test_repr(bits, text):
    assert repr(Half.from_bits(bits)) == text


def test_format():
    assert format(Half(1.5), '.3f') == '1.500'
    assert '{:g}'.format(Half.PI) == '3.14062'
    assert '{:e}'.format(Half.LEAST_NONZERO_MAGNITUDE) == '5.960464e-08'
    assert '{}'.format(Half(2)) == '2.0'


def test_show_bitpattern():
    assert Half(-2.0).show_bitpattern() == 'float16(5,11): 1 10000 (1) 0000000000'
    assert Half.NAN.show_bitpattern() == 'float16(5,11): 0 11111 (0) 1000000000'
