"""
Most Significant Non-Zero Bit and Normalization

MSNZB(b) turns x into a one-hot vector marking its top set bit. Normalize
then reads both the bit index and the matching power of two off that
vector as inner products, so no second variable shifter is needed.
"""

from typing import List, Tuple

from .bits import num2bits
from .circuit import ConstraintSystem, LinearCombination, Operand
from .comparators import is_zero


def msnzb(cs: ConstraintSystem, x: Operand, b: int, skip_checks: Operand = 0) -> List[LinearCombination]:
    """
    One-hot vector of x's most significant set bit (x < 2^b).

    x != 0 is asserted unless skip_checks = 1; for x = 0 with checks
    skipped the vector is all zeros.

    mask[b-1] = 1
    mask[i]   = mask[i+1]·(1 - bits[i+1])
    one_hot[i] = mask[i]·bits[i]
    """
    x, skip_checks = cs.lift(x), cs.lift(skip_checks)
    with cs.scope('msnzb'):
        cs.enforce(is_zero(cs, x), 1 - skip_checks, 0, 'nonzero')
        bits = num2bits(cs, x, b)

        one_hot: List[LinearCombination] = [cs.constant(0)] * b
        mask = cs.one
        for i in reversed(range(b)):
            if i < b - 1:
                mask = cs.mul(mask, 1 - bits[i + 1], 'mask')
            one_hot[i] = cs.mul(mask, bits[i], 'one_hot')
    return one_hot


def normalize(
    cs: ConstraintSystem,
    e: Operand,
    m: Operand,
    p: int,
    P: int,
    skip_checks: Operand = 0,
) -> Tuple[LinearCombination, LinearCombination]:
    """
    Rescale a nonzero mantissa m < 2^(P+1) at scale p to a normalized
    mantissa at scale P.

    With ell the index of m's top bit:
        e_out = e + ell - p
        m_out = m · 2^(P - ell)    in [2^P, 2^(P+1))
    """
    if P <= p:
        raise ValueError(f"Target precision P={P} must exceed p={p}")
    e, m = cs.lift(e), cs.lift(m)
    with cs.scope('normalize'):
        one_hot = msnzb(cs, m, P + 1, skip_checks)
        ell = cs.constant(0)
        scale = cs.constant(0)
        for i, bit in enumerate(one_hot):
            ell = ell + bit * i
            scale = scale + bit * (1 << (P - i))
        m_out = cs.mul(m, scale, 'm_out')
    return e + ell - p, m_out
