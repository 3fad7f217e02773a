"""
Rounding

Round-to-nearest, ties up, from scale P back to scale p with exponent
carry when rounding up would spill into an extra bit.
"""

from typing import Tuple

from .circuit import ConstraintSystem, LinearCombination, Operand
from .comparators import less_than
from .logic import if_then_else
from .shifts import right_shift


def round_and_check(
    cs: ConstraintSystem,
    e: Operand,
    m: Operand,
    p: int,
    P: int,
) -> Tuple[LinearCombination, LinearCombination]:
    """
    Round a normalized mantissa m in [2^P, 2^(P+1)) to p fractional bits.

    Overflow iff m >= 2^(P+1) - 2^(P-p-1), the point where adding half an
    output ulp reaches 2^(P+1).
        no overflow:  (e, (m + 2^(P-p-1)) >> (P-p))
        overflow:     (e + 1, 2^p)
    """
    if P <= p:
        raise ValueError(f"Source precision P={P} must exceed p={p}")
    round_amount = P - p
    half = 1 << (round_amount - 1)
    e, m = cs.lift(e), cs.lift(m)

    with cs.scope('round_and_check'):
        no_overflow = less_than(cs, m, (1 << (P + 1)) - half, P + 1)
        # m + half < 2^(P+2) for any m < 2^(P+1)
        m_rounded = right_shift(cs, m + half, P + 2, round_amount)

        e_out = if_then_else(cs, no_overflow, e, e + 1)
        m_out = if_then_else(cs, no_overflow, m_rounded, 1 << p)
    return e_out, m_out
