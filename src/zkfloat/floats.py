"""
Float Encoding

A float is a pair (e, m):
- e: k-bit unsigned exponent
- m: (p+1)-bit unsigned mantissa at scale p

Well-formed iff
    e = 0   =>  m = 0
    e != 0  =>  e < 2^k and 2^p <= m < 2^(p+1)

The represented value is m · 2^(e - bias - p) with bias = 2^(k-1) - 1.
There is no sign, no subnormal range and no infinity/NaN encoding.
"""

from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
import math

from .bits import check_bit_length
from .circuit import ConstraintSystem, Operand
from .comparators import is_zero
from .logic import and_, if_then_else
from .params import FloatParams


@dataclass(frozen=True)
class FloatValue:
    """
    Concrete (exponent, mantissa) pair in a given format.

    Construction does not validate; use is_well_formed() or let the
    circuit reject the value.
    """

    exponent: int
    mantissa: int
    params: FloatParams

    @classmethod
    def zero(cls, params: FloatParams) -> FloatValue:
        return cls(0, 0, params)

    @classmethod
    def from_float(cls, x: float, params: FloatParams) -> FloatValue:
        """
        Nearest representable value to x, ties rounded up.

        Raises ValueError for negative or non-finite x and for magnitudes
        outside the normal exponent range.
        """
        if not math.isfinite(x):
            raise ValueError(f"Cannot encode non-finite value {x}")
        if x < 0:
            raise ValueError(f"Format has no sign, cannot encode {x}")
        if x == 0:
            return cls.zero(params)

        # x = frac · 2^ex with frac in [0.5, 1)
        frac, ex = math.frexp(x)
        scaled = Fraction(frac) * (1 << (params.p + 1))
        mantissa = math.floor(scaled + Fraction(1, 2))
        if mantissa > params.max_mantissa:
            mantissa = params.min_mantissa
            ex += 1

        exponent = ex - 1 + params.bias
        if not 1 <= exponent <= params.max_exponent:
            raise ValueError(
                f"{x} needs exponent {exponent}, outside [1, {params.max_exponent}]"
            )
        return cls(exponent, mantissa, params)

    # =========================================================================
    # Predicates
    # =========================================================================

    def is_zero(self) -> bool:
        return self.exponent == 0 and self.mantissa == 0

    def is_well_formed(self) -> bool:
        if self.exponent == 0:
            return self.mantissa == 0
        return (
            1 <= self.exponent <= self.params.max_exponent
            and self.params.min_mantissa <= self.mantissa <= self.params.max_mantissa
        )

    # =========================================================================
    # Values
    # =========================================================================

    def to_fraction(self) -> Fraction:
        """Exact represented value."""
        return self.mantissa * Fraction(2) ** (self.exponent - self.params.bias - self.params.p)

    def ulp(self) -> Fraction:
        """Weight of the mantissa's last bit at this exponent (0 for zero)."""
        if self.is_zero():
            return Fraction(0)
        return Fraction(2) ** (self.exponent - self.params.bias - self.params.p)

    def __float__(self) -> float:
        return float(self.to_fraction())

    def __repr__(self) -> str:
        return f"FloatValue(e={self.exponent}, m={self.mantissa}, k={self.params.k}, p={self.params.p})"


def check_well_formedness(cs: ConstraintSystem, e: Operand, m: Operand, k: int, p: int) -> None:
    """
    Assert that (e, m) is a well-formed float.

    (m - 2^p) < 2^p says m's top bit is bit p and the rest fits below it.
    When e = 0 the range checks are ignored and only m = 0 is required.
    """
    e, m = cs.lift(e), cs.lift(m)
    with cs.scope('check_well_formedness'):
        is_e_zero = is_zero(cs, e)
        is_m_zero = is_zero(cs, m)
        e_fits = check_bit_length(cs, e, k)
        m_fits = check_bit_length(cs, m - (1 << p), p)

        well_formed = if_then_else(cs, is_e_zero, is_m_zero, and_(cs, e_fits, m_fits))
        cs.assert_equal(well_formed, 1, 'well_formed')
