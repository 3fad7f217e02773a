"""
Tests for round-to-nearest (ties up) with overflow carry.
"""

import pytest

from zkfloat.circuit import ConstraintSystem
from zkfloat.reference import round_half_up
from zkfloat.rounding import round_and_check


P_SMALL, P_WIDE = 2, 5


@pytest.fixture
def rounder():
    cs = ConstraintSystem()
    e_out, m_out = round_and_check(cs, cs.input('e'), cs.input('m'), P_SMALL, P_WIDE)

    def run(e, m):
        witness = cs.solve({'e': e, 'm': m})
        return witness.value(e_out), witness.value(m_out)

    return run


class TestRoundAndCheck:

    def test_exact(self, rounder):
        # 0b101000 has nothing below the kept bits
        assert rounder(3, 0b101000) == (3, 0b101)

    def test_round_down(self, rounder):
        # 43 / 8 = 5.375
        assert rounder(3, 43) == (3, 5)

    def test_round_up(self, rounder):
        # 45 / 8 = 5.625
        assert rounder(3, 45) == (3, 6)

    def test_tie_rounds_up(self, rounder):
        # 52 / 8 = 6.5
        assert rounder(3, 52) == (3, 7)

    def test_overflow_carries_into_exponent(self, rounder):
        # 60 / 8 = 7.5 rounds to 8 = 2^(p+1), renormalized to (e + 1, 2^p)
        assert rounder(3, 60) == (4, 4)
        assert rounder(3, 63) == (4, 4)

    def test_just_below_overflow(self, rounder):
        assert rounder(3, 59) == (3, 7)

    def test_matches_reference_on_every_normalized_input(self, rounder):
        for m in range(1 << P_WIDE, 1 << (P_WIDE + 1)):
            assert rounder(9, m) == round_half_up(9, m, P_SMALL, P_WIDE)

    def test_requires_wider_source(self):
        cs = ConstraintSystem()
        with pytest.raises(ValueError):
            round_and_check(cs, cs.input('e'), cs.input('m'), 4, 3)
