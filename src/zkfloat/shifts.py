"""
Shifters

RightShift(b, shift): shift is a compile-time constant. Decompose, drop the
low bits, recompose. Fully determined by the decomposition.

LeftShift(shift_bound): shift is a wire. The shifted value is proposed as a
hint and then bound by

    y = x · 2^shift

where 2^shift is rebuilt in-circuit by square-and-multiply over the bits of
shift:

    2^shift = prod_j (1 + s_j·(2^(2^j) - 1))

so y is the unique field element consistent with x and shift.
"""

from .bits import bits2num, num2bits
from .circuit import ConstraintSystem, LinearCombination, Operand
from .comparators import less_than


def right_shift(cs: ConstraintSystem, x: Operand, b: int, shift: int) -> LinearCombination:
    """x >> shift for x < 2^b. Unsatisfiable when x >= 2^b."""
    if not 0 <= shift < b:
        raise ValueError(f"Shift must be in [0, {b}), got {shift}")
    with cs.scope('right_shift'):
        bits = num2bits(cs, x, b)
    return bits2num(cs, bits[shift:])


def left_shift(
    cs: ConstraintSystem,
    x: Operand,
    shift: Operand,
    shift_bound: int,
    skip_checks: Operand = 0,
) -> LinearCombination:
    """
    x << shift with shift < shift_bound.

    The exact bound is asserted unless skip_checks = 1. Independently of
    skip_checks, shift is decomposed into bit_length(shift_bound - 1) bits,
    so it can never exceed the next power of two.

    The binding constraint is exact in the field; callers keep x·2^shift
    below the modulus, otherwise y is the reduced product.
    """
    if shift_bound < 1:
        raise ValueError(f"Shift bound must be positive, got {shift_bound}")
    n = max(1, (shift_bound - 1).bit_length())
    x, shift, skip_checks = cs.lift(x), cs.lift(shift), cs.lift(skip_checks)

    with cs.scope('left_shift'):
        shift_bits = num2bits(cs, shift, n)

        in_bound = less_than(cs, shift, shift_bound, max(n, shift_bound.bit_length()))
        cs.enforce(1 - skip_checks, 1 - in_bound, 0, 'bound')

        power = cs.one
        for j, bit in enumerate(shift_bits):
            power = cs.mul(power, bit * ((1 << (1 << j)) - 1) + 1, 'power')

        def propose_shifted(get):
            amount = get(shift)
            if amount >= 1 << n:
                return 0
            return get(x) << amount

        y = cs.hint('y', propose_shifted)
        cs.enforce(x, power, y, 'bind')
    return y
