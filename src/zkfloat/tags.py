"""
Domain Tags for Circuit Digests

All tags are domain-separated so that a parameter encoding can never be
confused with a constraint encoding.
These tags are PINNED - changing them changes every circuit digest.
"""

from enum import IntEnum


class CircuitTag(IntEnum):
    """Domain separation tags for circuit commitments."""

    PARAMS = 0x60       # FloatParams serialization
    CIRCUIT = 0x61      # Whole constraint system
    WIRE = 0x62         # Wire table (names, public flags)
    CONSTRAINT = 0x63   # Single rank-1 constraint
    ADDER = 0x64        # Compiled FloatAdder (params + circuit)


def tag_bytes(tag: CircuitTag) -> bytes:
    """Convert tag to canonical bytes (2 bytes, big-endian)."""
    return tag.to_bytes(2, 'big')
