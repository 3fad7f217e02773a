"""
Comparators

IsZero, IsEqual and LessThan. LessThan reads integer order off a bit
decomposition, so both inputs must already be known to fit in n bits.
"""

from .circuit import ConstraintSystem, LinearCombination, Operand
from .field import FieldElement


def is_zero(cs: ConstraintSystem, x: Operand) -> LinearCombination:
    """
    1 if x = 0, else 0.

    inv is a hint (1/x, or 0 when x = 0). The two constraints
        out = 1 - x·inv
        x·out = 0
    force out = 0 whenever x != 0, and out = 1 when x = 0 whatever inv is.
    """
    x = cs.lift(x)
    with cs.scope('is_zero'):
        def propose_inverse(get):
            value = FieldElement(get(x), cs.modulus)
            return 0 if value.is_zero() else value.inverse().to_int()

        inv = cs.hint('inv', propose_inverse)
        out = 1 - cs.mul(x, inv, 'x_inv')
        cs.enforce(x, out, 0, 'x_out')
    return out


def is_equal(cs: ConstraintSystem, a: Operand, b: Operand) -> LinearCombination:
    """1 if a = b, else 0."""
    return is_zero(cs, cs.lift(b) - cs.lift(a))


def less_than(cs: ConstraintSystem, a: Operand, b: Operand, n: int) -> LinearCombination:
    """
    1 if a < b as integers, else 0. Both inputs must be below 2^n.

    a + 2^n - b lies in [0, 2^(n+1)); its top bit is set exactly when no
    borrow happened, i.e. when a >= b.
    """
    if not 0 < n <= cs.max_compare_bits:
        raise ValueError(f"LessThan width must be in [1, {cs.max_compare_bits}], got {n}")

    # bits imports is_equal from this module
    from .bits import num2bits

    with cs.scope('less_than'):
        bits = num2bits(cs, cs.lift(a) + (1 << n) - cs.lift(b), n + 1)
    return 1 - bits[n]
