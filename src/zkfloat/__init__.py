"""
zkfloat: Floating-Point Addition as Arithmetic-Circuit Gadgets

Emulates IEEE-754-style addition of (exponent, mantissa) floats inside a
rank-1 constraint system over a ~254-bit prime field. Every wire value is
either a fixed formula or a hint pinned down by constraints, so a witness
that satisfies the circuit is a proof that the sum was computed correctly.

Usage:
    from zkfloat import FloatAdder, FloatValue, BINARY16

    adder = FloatAdder(BINARY16)
    a = FloatValue.from_float(1.5, BINARY16)
    b = FloatValue.from_float(2.25, BINARY16)
    assert float(adder.add(a, b)) == 3.75

    r1cs = adder.r1cs()          # hand off to a proving backend
"""

# Field
from .field import FieldElement, BN254_PRIME, max_bits, max_compare_bits

# Parameters
from .params import (
    FloatParams,
    TOY,
    BINARY16,
    BFLOAT16,
    BINARY32,
    BINARY64,
    PRESETS,
)

# Domain separation
from .tags import CircuitTag, tag_bytes

# Constraint system
from .circuit import (
    ConstraintSystem,
    Constraint,
    LinearCombination,
    Witness,
    R1CS,
    UnsatisfiableError,
)

# Gadgets
from .logic import and_, or_, if_then_else, switcher
from .bits import num2bits, bits2num, check_bit_length
from .comparators import is_zero, is_equal, less_than
from .shifts import right_shift, left_shift
from .msnzb import msnzb, normalize
from .rounding import round_and_check
from .floats import FloatValue, check_well_formedness
from .adder import float_add, FloatAdder

# Reference model
from .reference import reference_add

__all__ = [
    # Field
    'FieldElement',
    'BN254_PRIME',
    'max_bits',
    'max_compare_bits',

    # Parameters
    'FloatParams',
    'TOY',
    'BINARY16',
    'BFLOAT16',
    'BINARY32',
    'BINARY64',
    'PRESETS',

    # Tags
    'CircuitTag',
    'tag_bytes',

    # Constraint system
    'ConstraintSystem',
    'Constraint',
    'LinearCombination',
    'Witness',
    'R1CS',
    'UnsatisfiableError',

    # Gadgets
    'and_',
    'or_',
    'if_then_else',
    'switcher',
    'num2bits',
    'bits2num',
    'check_bit_length',
    'is_zero',
    'is_equal',
    'less_than',
    'right_shift',
    'left_shift',
    'msnzb',
    'normalize',
    'round_and_check',
    'check_well_formedness',
    'float_add',

    # Floats
    'FloatValue',
    'FloatAdder',
    'reference_add',
]

# Version
__version__ = '0.1.0'
