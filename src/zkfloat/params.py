"""
Float Format Parameters

FloatParams fixes the shape of every gadget in the float adder:
    k: exponent bit-width
    p: mantissa scale (a normalized mantissa lies in [2^p, 2^(p+1)))

Parameters are compile-time configuration. Changing them means building a
new constraint system, never re-running an existing one.
"""

from dataclasses import dataclass
import hashlib

from .field import BN254_PRIME, max_bits, max_compare_bits
from .tags import CircuitTag, tag_bytes


@dataclass(frozen=True)
class FloatParams:
    """
    Immutable configuration of a float format and its field.

    All derived widths are checked against the field margin on construction,
    so an instance that exists can always be compiled.
    """

    k: int
    """Exponent bit-width."""

    p: int
    """Mantissa precision (scale of the normalized mantissa)."""

    modulus: int = BN254_PRIME
    """Prime field the circuit is instantiated over."""

    def __post_init__(self):
        """Validate widths against the field."""
        if self.k < 1:
            raise ValueError(f"Exponent width must be positive, got k={self.k}")
        if self.p < 1:
            raise ValueError(f"Mantissa precision must be positive, got p={self.p}")

        compare_cap = max_compare_bits(self.modulus)
        if self.k + self.p + 1 > compare_cap:
            raise ValueError(
                f"Magnitude key needs {self.k + self.p + 1} bits, field allows {compare_cap}"
            )
        if self.P + 1 > compare_cap:
            raise ValueError(
                f"Rounding comparison needs {self.P + 1} bits, field allows {compare_cap}"
            )
        if self.P + 2 > max_bits(self.modulus):
            raise ValueError(
                f"Rounding shift needs {self.P + 2} bits, field allows {max_bits(self.modulus)}"
            )

    # ==========================================================================
    # Derived Widths
    # ==========================================================================

    @property
    def P(self) -> int:
        """Working precision of the adder: an aligned sum has at most 2p+2 bits."""
        return 2 * self.p + 1

    @property
    def round_amount(self) -> int:
        """Bits dropped when rounding from scale P back to scale p."""
        return self.P - self.p

    @property
    def bias(self) -> int:
        """IEEE-754 style exponent bias, used only to read values off."""
        return (1 << (self.k - 1)) - 1

    @property
    def max_exponent(self) -> int:
        return (1 << self.k) - 1

    @property
    def min_mantissa(self) -> int:
        return 1 << self.p

    @property
    def max_mantissa(self) -> int:
        return (1 << (self.p + 1)) - 1

    # ==========================================================================
    # Serialization
    # ==========================================================================

    def serialize(self) -> bytes:
        """
        Canonical serialization for binding a circuit to its parameters.

        Format:
            TAG(2) || k(2) || p(2) || modulus_len(2) || modulus
        """
        modulus_bytes = self.modulus.to_bytes((self.modulus.bit_length() + 7) // 8, 'big')
        return b''.join([
            tag_bytes(CircuitTag.PARAMS),
            self.k.to_bytes(2, 'big'),
            self.p.to_bytes(2, 'big'),
            len(modulus_bytes).to_bytes(2, 'big'),
            modulus_bytes,
        ])

    @classmethod
    def deserialize(cls, data: bytes) -> 'FloatParams':
        """Deserialize from bytes."""
        if len(data) < 8:
            raise ValueError(f"Data too short: need at least 8 bytes, got {len(data)}")

        if data[:2] != tag_bytes(CircuitTag.PARAMS):
            raise ValueError(f"Not a FloatParams encoding: tag {data[:2].hex()}")

        offset = 2
        k = int.from_bytes(data[offset:offset+2], 'big')
        offset += 2
        p = int.from_bytes(data[offset:offset+2], 'big')
        offset += 2
        modulus_len = int.from_bytes(data[offset:offset+2], 'big')
        offset += 2
        if len(data) != offset + modulus_len:
            raise ValueError(
                f"Expected {offset + modulus_len} bytes for a {modulus_len}-byte modulus, got {len(data)}"
            )
        modulus = int.from_bytes(data[offset:offset+modulus_len], 'big')

        return cls(k=k, p=p, modulus=modulus)

    def hash(self) -> bytes:
        """Hash of parameters for binding."""
        return hashlib.shake_256(self.serialize()).digest(32)


# =============================================================================
# Preset Configurations
# =============================================================================

# Toy: small enough to enumerate exhaustively in tests
TOY = FloatParams(k=3, p=2)

# IEEE-754 half precision
BINARY16 = FloatParams(k=5, p=10)

# Brain float
BFLOAT16 = FloatParams(k=8, p=7)

# IEEE-754 single precision
BINARY32 = FloatParams(k=8, p=23)

# IEEE-754 double precision
BINARY64 = FloatParams(k=11, p=52)

PRESETS = {
    'toy': TOY,
    'binary16': BINARY16,
    'bfloat16': BFLOAT16,
    'binary32': BINARY32,
    'binary64': BINARY64,
}
