"""
Reference Model

Plain-integer implementation of the float adder, step for step the same
algorithm the circuit encodes. Used as a test oracle.
"""

from typing import Tuple

from .floats import FloatValue


def normalize(e: int, m: int, p: int, P: int) -> Tuple[int, int]:
    """Move m's top bit to position P, adjusting the exponent."""
    ell = m.bit_length() - 1
    return e + ell - p, m << (P - ell)


def round_half_up(e: int, m: int, p: int, P: int) -> Tuple[int, int]:
    """Drop P - p bits of a normalized m, rounding ties up."""
    amount = P - p
    half = 1 << (amount - 1)
    if m >= (1 << (P + 1)) - half:
        return e + 1, 1 << p
    return e, (m + half) >> amount


def reference_add(a: FloatValue, b: FloatValue) -> FloatValue:
    """Sum of two well-formed floats of the same format."""
    if a.params != b.params:
        raise ValueError("Operands use different float formats")
    for operand in (a, b):
        if not operand.is_well_formed():
            raise ValueError(f"Malformed operand {operand!r}")

    params = a.params
    p, P = params.p, params.P

    def key(v: FloatValue) -> int:
        return (v.exponent << (p + 1)) + v.mantissa

    alpha, beta = (b, a) if key(a) < key(b) else (a, b)
    diff = alpha.exponent - beta.exponent
    if diff > p + 1 or alpha.exponent == 0:
        return alpha

    aligned = (alpha.mantissa << diff) + beta.mantissa
    e, m = normalize(beta.exponent, aligned, p, P)
    e, m = round_half_up(e, m, p, P)
    return FloatValue(e, m, params)
