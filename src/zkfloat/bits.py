"""
Bit Decomposition and Range Checks

Num2Bits(b):        x -> b bits (LSB first), asserts x < 2^b
Bits2Num:           bits -> sum of bits[i]·2^i, no range assumption
CheckBitLength(b):  like Num2Bits but returns a 0/1 flag instead of failing

The field has no notion of magnitude, so "x fits in b bits" is only
meaningful while 2^b is below the modulus: otherwise a large x could alias
a small sum of bits. Widths are capped at max_bits (253 for BN254).
"""

from typing import List, Sequence

from .circuit import ConstraintSystem, LinearCombination, Operand
from .comparators import is_equal


def _check_width(cs: ConstraintSystem, b: int) -> None:
    if not 0 < b <= cs.max_bits:
        raise ValueError(f"Bit width must be in [1, {cs.max_bits}], got {b}")


def _propose_bits(x: LinearCombination, b: int):
    return lambda get: [(get(x) >> i) & 1 for i in range(b)]


def bits2num(cs: ConstraintSystem, bits: Sequence[Operand]) -> LinearCombination:
    """Weighted sum of bits, LSB first. Purely linear."""
    total = cs.constant(0)
    for i, bit in enumerate(bits):
        total = total + cs.lift(bit) * (1 << i)
    return total


def num2bits(cs: ConstraintSystem, x: Operand, b: int) -> List[LinearCombination]:
    """
    Decompose x into b boolean wires, LSB first.

    Constraints:
        bits[i]·(bits[i] - 1) = 0    for every i
        sum bits[i]·2^i = x

    Unsatisfiable when x >= 2^b.
    """
    _check_width(cs, b)
    x = cs.lift(x)
    with cs.scope('num2bits'):
        bits = cs.hints('bits', b, _propose_bits(x, b))
        for bit in bits:
            cs.assert_bool(bit)
        cs.assert_equal(bits2num(cs, bits), x, 'recompose')
    return bits


def check_bit_length(cs: ConstraintSystem, x: Operand, b: int) -> LinearCombination:
    """
    1 if x < 2^b, else 0.

    Bits are still asserted boolean, but the recomposition is compared with
    IsEqual rather than asserted, so the flag can feed a selector. A
    dishonest prover can force the flag to 0 by proposing wrong bits, never
    to 1 for an out-of-range x.
    """
    _check_width(cs, b)
    x = cs.lift(x)
    with cs.scope('check_bit_length'):
        bits = cs.hints('bits', b, _propose_bits(x, b))
        for bit in bits:
            cs.assert_bool(bit)
        return is_equal(cs, bits2num(cs, bits), x)
