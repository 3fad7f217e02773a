"""
Soundness Tests

A dishonest prover controls every hint. These tests substitute chosen
values for named wires (the rest of the witness is still generated
honestly from them) and check that the constraints notice.
"""

from hypothesis import given, strategies as st, settings

from zkfloat.adder import FloatAdder
from zkfloat.bits import check_bit_length, num2bits
from zkfloat.comparators import is_zero
from zkfloat.field import BN254_PRIME
from zkfloat.floats import FloatValue
from zkfloat.params import TOY


def _violations(cs, inputs, overrides):
    witness = cs.generate_witness(inputs, overrides=overrides)
    return [c.name for c in cs.unsatisfied(witness)]


# =============================================================================
# BIT DECOMPOSITION
# =============================================================================

class TestNum2BitsHints:

    def test_wrong_bit_breaks_recomposition(self, cs):
        num2bits(cs, cs.input('x'), 3)
        assert _violations(cs, {'x': 5}, {'num2bits/bits[0]': 0}) == ['num2bits/recompose']

    def test_non_boolean_bits_caught(self, cs):
        # -1 + 2 + 4 = 5 recomposes, but -1 is not a bit
        num2bits(cs, cs.input('x'), 3)
        overrides = {'num2bits/bits[0]': -1, 'num2bits/bits[1]': 1}
        assert _violations(cs, {'x': 5}, overrides) == ['num2bits/bool']

    def test_check_bit_length_cannot_claim_fit(self, cs):
        flag = check_bit_length(cs, cs.input('x'), 3)
        # inv = 0 would make the equality flag read 1
        overrides = {'check_bit_length/is_zero/inv': 0}
        witness = cs.generate_witness({'x': 8}, overrides=overrides)
        assert witness.value(flag) == 1
        assert not cs.is_satisfied(witness)


# =============================================================================
# ZERO TEST
# =============================================================================

class TestIsZeroHints:

    def test_inverse_is_free_at_zero(self, cs):
        out = is_zero(cs, cs.input('x'))
        witness = cs.generate_witness({'x': 0}, overrides={'is_zero/inv': 12345})
        assert cs.is_satisfied(witness)
        assert witness.value(out) == 1

    def test_wrong_inverse_caught(self, cs):
        is_zero(cs, cs.input('x'))
        assert _violations(cs, {'x': 3}, {'is_zero/inv': 5}) == ['is_zero/x_out']

    def test_wrong_product_caught(self, cs):
        is_zero(cs, cs.input('x'))
        assert 'is_zero/x_inv' in _violations(cs, {'x': 3}, {'is_zero/x_inv': 0})


# =============================================================================
# FLOAT ADDER
# =============================================================================

ADDER = FloatAdder(TOY)
TOY_VALUES = [FloatValue.zero(TOY)] + [
    FloatValue(e, m, TOY)
    for e in range(1, TOY.max_exponent + 1)
    for m in range(TOY.min_mantissa, TOY.max_mantissa + 1)
]


class TestAdderHints:

    def test_forged_shift_output(self):
        a, b = FloatValue(3, 5, TOY), FloatValue(2, 6, TOY)
        witness = ADDER.witness(a, b, overrides={'float_add/left_shift/y': 999})
        assert 'float_add/left_shift/bind' in [c.name for c in ADDER.cs.unsatisfied(witness)]

    def test_forged_output(self):
        a, b = FloatValue(3, 5, TOY), FloatValue(2, 6, TOY)
        witness = ADDER.witness(a, b, overrides={'e_out': 6})
        assert [c.name for c in ADDER.cs.unsatisfied(witness)] == ['e_out']

    def test_forged_ordering(self):
        # flip the top bit of the key comparison
        top = f'float_add/less_than/num2bits/bits[{TOY.k + TOY.p + 1}]'
        a, b = FloatValue(3, 5, TOY), FloatValue(2, 6, TOY)
        honest = ADDER.witness(a, b)
        flipped = 1 - honest.by_name(top).to_int()
        assert not ADDER.cs.is_satisfied(ADDER.witness(a, b, overrides={top: flipped}))

    @given(
        a=st.sampled_from(TOY_VALUES),
        b=st.sampled_from(TOY_VALUES),
        wire=st.integers(min_value=1, max_value=ADDER.num_wires - 1),
        value=st.integers(min_value=0, max_value=BN254_PRIME - 1),
    )
    @settings(max_examples=200, deadline=None)
    def test_any_single_substitution_keeps_outputs(self, a, b, wire, value):
        """A satisfying witness always carries the honest sum."""
        name = ADDER.cs.wire_names[wire]
        if name in ADDER.cs.input_names:
            return
        witness = ADDER.witness(a, b, overrides={name: value})
        if ADDER.cs.is_satisfied(witness):
            assert ADDER.result(witness) == ADDER.add(a, b)
