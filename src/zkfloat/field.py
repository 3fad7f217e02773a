"""
Prime Field Arithmetic

Field: F_r where r is the scalar field order of the BN254 (alt_bn128) curve,
the field used by Groth16/PLONK pipelines on Ethereum.

    r = 21888242871839275222246405745257275088548364400416034343698204186575808495617

r is a 254-bit prime. Integers below 2^253 embed into F_r without aliasing,
which is where every bit-width cap in this package comes from:
- a bit decomposition of width b is unique only while 2^b <= r
- a comparison a + 2^n - b needs one spare bit on top of that
"""

from __future__ import annotations
from typing import Union


# BN254 scalar field order
BN254_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617


def max_bits(modulus: int = BN254_PRIME) -> int:
    """Widest bit decomposition that is unique modulo `modulus`."""
    return modulus.bit_length() - 1


def max_compare_bits(modulus: int = BN254_PRIME) -> int:
    """Widest LessThan: a + 2^n - b is decomposed into n + 1 bits."""
    return modulus.bit_length() - 2


class FieldElement:
    """
    Element of a prime field F_r.

    Values are reduced on construction and never change afterwards.
    Arithmetic accepts plain ints on either side.
    """

    __slots__ = ('value', 'modulus')

    def __init__(self, value: int, modulus: int = BN254_PRIME):
        self.modulus = modulus
        self.value = value % modulus

    def _coerce(self, other: Union[FieldElement, int]) -> int:
        if isinstance(other, FieldElement):
            if other.modulus != self.modulus:
                raise ValueError("Cannot mix elements of different fields")
            return other.value
        if isinstance(other, int):
            return other
        return NotImplemented

    # =========================================================================
    # Arithmetic Operations
    # =========================================================================

    def __add__(self, other: Union[FieldElement, int]) -> FieldElement:
        """Addition in F_r."""
        value = self._coerce(other)
        if value is NotImplemented:
            return NotImplemented
        return FieldElement(self.value + value, self.modulus)

    __radd__ = __add__

    def __sub__(self, other: Union[FieldElement, int]) -> FieldElement:
        """Subtraction in F_r."""
        value = self._coerce(other)
        if value is NotImplemented:
            return NotImplemented
        return FieldElement(self.value - value, self.modulus)

    def __rsub__(self, other: int) -> FieldElement:
        value = self._coerce(other)
        if value is NotImplemented:
            return NotImplemented
        return FieldElement(value - self.value, self.modulus)

    def __mul__(self, other: Union[FieldElement, int]) -> FieldElement:
        """Multiplication in F_r."""
        value = self._coerce(other)
        if value is NotImplemented:
            return NotImplemented
        return FieldElement(self.value * value, self.modulus)

    __rmul__ = __mul__

    def __neg__(self) -> FieldElement:
        """Negation in F_r."""
        return FieldElement(-self.value, self.modulus)

    def __truediv__(self, other: Union[FieldElement, int]) -> FieldElement:
        """Division in F_r (multiplication by inverse)."""
        value = self._coerce(other)
        if value is NotImplemented:
            return NotImplemented
        return self * FieldElement(value, self.modulus).inverse()

    def __pow__(self, exp: int) -> FieldElement:
        """Exponentiation using square-and-multiply."""
        if exp < 0:
            return self.inverse() ** (-exp)
        return FieldElement(pow(self.value, exp, self.modulus), self.modulus)

    def inverse(self) -> FieldElement:
        """
        Multiplicative inverse using Fermat's little theorem.

        a^-1 = a^(r-2) mod r
        """
        if self.value == 0:
            raise ZeroDivisionError("Cannot invert zero")
        return FieldElement(pow(self.value, self.modulus - 2, self.modulus), self.modulus)

    # =========================================================================
    # Comparison Operations
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FieldElement):
            return self.modulus == other.modulus and self.value == other.value
        if isinstance(other, int):
            return self.value == (other % self.modulus)
        return False

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash((self.value, self.modulus))

    def __repr__(self) -> str:
        return f"FieldElement({self.value})"

    def __str__(self) -> str:
        return str(self.value)

    def __int__(self) -> int:
        return self.value

    # =========================================================================
    # Conversions
    # =========================================================================

    def to_int(self) -> int:
        """Canonical representative in [0, r)."""
        return self.value

    # =========================================================================
    # Predicates
    # =========================================================================

    def is_zero(self) -> bool:
        return self.value == 0

    # =========================================================================
    # Class Methods
    # =========================================================================

    @classmethod
    def one(cls, modulus: int = BN254_PRIME) -> FieldElement:
        """Multiplicative identity."""
        return cls(1, modulus)
