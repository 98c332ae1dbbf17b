"""General utilities, such as exception classes and bit counting."""

# halffp-specific exceptions

class HalfError(Exception):
    """Base halffp error."""

class PreconditionError(HalfError):
    """A caller broke the contract of an operation, such as asking for a NaN
    whose payload overlaps the quiet bit. Never caught by the library.
    """

class ConversionError(HalfError, ValueError):
    """A value cannot be encoded exactly where exactness is required."""


# Useful things

def bitmask(n: int) -> int:
    """Produces a bitmask of n 1s if n is positive, or n 0s if n is negative.

    >>> bin(bitmask(5))
    '0b11111'
    >>> bitmask(0)
    0
    """
    if n >= 0:
        return (1 << n) - 1
    else:
        return -1 << -n

def maskbits(x: int, n:int) -> int:
    """Mask x & bitmask(n)"""
    if n >= 0:
        return x & ((1 << n) - 1)
    else:
        return x & (-1 << -n)

def floorlog2(x: int) -> int:
    """Position of the leading set bit of x, 0 if x is 0.

    >>> floorlog2(1)
    0
    >>> floorlog2(0x3ff)
    9
    """
    return max(x.bit_length() - 1, 0)

def ctz(x: int, width: int) -> int:
    """Count trailing zeros in the low width bits of x.
    An all-zero field has width trailing zeros.

    >>> ctz(0b101000, 16)
    3
    >>> ctz(0, 16)
    16
    """
    x = maskbits(x, width)
    if x == 0:
        return width
    return (x & -x).bit_length() - 1

def clz(x: int, width: int) -> int:
    """Count leading zeros in the low width bits of x.

    >>> clz(1, 16)
    15
    >>> clz(0, 16)
    16
    """
    return width - maskbits(x, width).bit_length()
