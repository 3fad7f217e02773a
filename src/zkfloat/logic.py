"""
Boolean and Selection Gadgets

The circuit has no branches. Every conditional is a linear selection
between values that have already been computed, weighted by a selector
that is known to be 0 or 1.

None of these gadgets asserts booleanity of its selector or operands;
callers pass wires that are boolean by construction (comparator outputs,
decomposed bits).
"""

from typing import Tuple

from .circuit import ConstraintSystem, LinearCombination, Operand


def and_(cs: ConstraintSystem, a: Operand, b: Operand) -> LinearCombination:
    """a AND b = a·b"""
    return cs.mul(a, b, 'and')


def or_(cs: ConstraintSystem, a: Operand, b: Operand) -> LinearCombination:
    """a OR b = a + b - a·b"""
    a, b = cs.lift(a), cs.lift(b)
    return a + b - cs.mul(a, b, 'or')


def if_then_else(cs: ConstraintSystem, cond: Operand, left: Operand, right: Operand) -> LinearCombination:
    """cond·(left - right) + right: left when cond = 1, right when cond = 0."""
    left, right = cs.lift(left), cs.lift(right)
    return cs.mul(cond, left - right, 'if_then_else') + right


def switcher(
    cs: ConstraintSystem,
    sel: Operand,
    left: Operand,
    right: Operand,
) -> Tuple[LinearCombination, LinearCombination]:
    """
    Conditional swap.

    Returns (right, left) when sel = 1, else (left, right). Both outputs
    share the single product aux = sel·(right - left).
    """
    left, right = cs.lift(left), cs.lift(right)
    aux = cs.mul(sel, right - left, 'switcher')
    return aux + left, right - aux
