"""Operation codes for the binary16 arithmetic kernel."""

from enum import IntEnum, unique

class RM(IntEnum):
    ROUND_NEAREST_EVEN = 0
    RNE = 0

@unique
class OP(IntEnum):
    add = 0
    sub = 1
    mul = 2
    div = 3
    neg = 4
    sqrt = 5
    fma = 6
    fabs = 7
    fmod = 8
    remainder = 9

# number of operands each opcode consumes
arity = {
    OP.add: 2,
    OP.sub: 2,
    OP.mul: 2,
    OP.div: 2,
    OP.neg: 1,
    OP.sqrt: 1,
    OP.fma: 3,
    OP.fabs: 1,
    OP.fmod: 2,
    OP.remainder: 2,
}
