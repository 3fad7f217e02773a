"""
Tests for the constraint system: linear combinations, witness generation,
hint overrides and the exported R1CS.
"""

import json

import pytest

from zkfloat.circuit import (
    ONE,
    ConstraintSystem,
    LinearCombination,
    R1CS,
    UnsatisfiableError,
)
from zkfloat.field import BN254_PRIME


class TestLinearCombination:
    """Linear arithmetic over wires."""

    def test_constant_folding(self):
        lc = LinearCombination.constant(3) + 4
        assert lc.is_constant()
        assert lc.constant_value() == 7

    def test_zero_terms_dropped(self, cs):
        x = cs.input('x')
        assert (x - x).terms == {}

    def test_scaling_and_negation(self, cs):
        x = cs.input('x')
        lc = 3 * x - 1
        assert lc.terms[1] == 3
        assert lc.terms[ONE] == BN254_PRIME - 1

    def test_product_of_combinations_needs_constraint(self, cs):
        x = cs.input('x')
        y = cs.input('y')
        with pytest.raises(TypeError):
            x * y

    def test_rsub(self, cs):
        x = cs.input('x')
        witness = cs.generate_witness({'x': 3})
        assert witness[10 - x] == 7


class TestConstraintSystem:
    """Wire allocation, constraints and witness generation."""

    def test_mul_emits_one_constraint(self, cs):
        x, y = cs.input('x'), cs.input('y')
        z = cs.mul(x, y)
        assert cs.num_constraints == 1
        witness = cs.solve({'x': 6, 'y': 7})
        assert witness.value(z) == 42

    def test_mul_by_constant_is_free(self, cs):
        x = cs.input('x')
        cs.mul(x, 5)
        cs.mul(cs.constant(2), x)
        assert cs.num_constraints == 0

    def test_constant_contradiction_raises_at_compile_time(self, cs):
        with pytest.raises(UnsatisfiableError):
            cs.assert_equal(cs.constant(1), 2)

    def test_constant_tautology_is_dropped(self, cs):
        cs.assert_equal(cs.constant(4), 4)
        assert cs.num_constraints == 0

    def test_scoped_names_are_unique(self, cs):
        with cs.scope('gadget'):
            cs.hint('h', lambda get: 1)
            cs.hint('h', lambda get: 2)
        with cs.scope('gadget'):
            cs.hint('h', lambda get: 3)
        assert cs.wire_names[1:] == ['gadget/h', 'gadget/h#1', 'gadget#1/h']

    def test_repeated_hint_groups_get_distinct_names(self, cs):
        x = cs.input('x')
        first = cs.hints('bits', 1, lambda get: [get(x) + 1])
        second = cs.hints('bits', 2, lambda get: [get(x) + 2, 0])
        assert cs.wire_names[2:] == ['bits[0]', 'bits#1[0]', 'bits#1[1]']

        witness = cs.generate_witness({'x': 4}, overrides={'bits[0]': 99})
        assert witness.value(first[0]) == 99
        assert witness.value(second[0]) == 6
        assert witness.by_name('bits#1[0]') == 6

    def test_hint_group_avoids_single_hint_name(self, cs):
        cs.hint('h', lambda get: 1)
        cs.hints('h', 1, lambda get: [2])
        cs.hint('h', lambda get: 3)
        assert cs.wire_names[1:] == ['h', 'h#1[0]', 'h#1']

    def test_missing_input(self, cs):
        cs.input('x')
        with pytest.raises(ValueError, match="Missing input"):
            cs.generate_witness({})

    def test_unknown_input(self, cs):
        cs.input('x')
        with pytest.raises(ValueError, match="Unknown inputs"):
            cs.generate_witness({'x': 1, 'y': 2})

    def test_unknown_override(self, cs):
        cs.input('x')
        with pytest.raises(ValueError, match="Unknown wires"):
            cs.generate_witness({'x': 1}, overrides={'nope': 0})

    def test_duplicate_input(self, cs):
        cs.input('x')
        with pytest.raises(ValueError):
            cs.input('x')

    def test_hint_count_mismatch(self, cs):
        cs.hints('h', 3, lambda get: [0, 1])
        with pytest.raises(ValueError, match="proposed 2 values"):
            cs.generate_witness({})

    def test_override_replaces_proposal(self, cs):
        x = cs.input('x')
        h = cs.hint('h', lambda get: get(x) + 1)
        cs.assert_equal(h, x + 1, 'bind')

        honest = cs.generate_witness({'x': 4})
        assert cs.is_satisfied(honest)

        forged = cs.generate_witness({'x': 4}, overrides={'h': 9})
        assert forged.value(h) == 9
        assert [c.name for c in cs.unsatisfied(forged)] == ['bind']

    def test_solve_reports_violations(self, cs):
        x = cs.input('x')
        cs.assert_bool(x, 'x_bool')
        with pytest.raises(UnsatisfiableError) as excinfo:
            cs.solve({'x': 2})
        assert excinfo.value.violations == ['x_bool']

    def test_output_is_public(self, cs):
        x = cs.input('x')
        out = cs.output('out', x * 2)
        assert next(iter(out.terms)) in cs.public
        witness = cs.solve({'x': 21})
        assert witness.by_name('out') == 42

    def test_by_name_unknown(self, cs):
        witness = cs.solve({})
        with pytest.raises(KeyError):
            witness.by_name('missing')


class TestR1CS:
    """Exported matrix form."""

    def _circuit(self):
        cs = ConstraintSystem()
        x, y = cs.input('x'), cs.input('y', public=True)
        z = cs.mul(x, y)
        cs.output('z', z + 1)
        return cs

    def test_honest_witness_satisfies_matrices(self):
        cs = self._circuit()
        r1cs = cs.to_r1cs()
        witness = cs.solve({'x': 3, 'y': 5})
        assert r1cs.num_constraints == cs.num_constraints
        assert r1cs.is_satisfied(witness.to_ints())

    def test_tampered_witness_rejected(self):
        cs = self._circuit()
        r1cs = cs.to_r1cs()
        values = cs.solve({'x': 3, 'y': 5}).to_ints()
        values[-1] += 1
        assert not r1cs.is_satisfied(values)

    def test_constant_wire_must_be_one(self):
        cs = self._circuit()
        values = cs.solve({'x': 3, 'y': 5}).to_ints()
        values[ONE] = 2
        assert not cs.to_r1cs().is_satisfied(values)

    def test_json_round_trip(self):
        cs = self._circuit()
        r1cs = cs.to_r1cs()
        restored = R1CS.from_json(r1cs.to_json())
        assert restored == r1cs
        assert json.loads(r1cs.to_json())['public'] == cs.public

    def test_wrong_length_rejected(self):
        r1cs = self._circuit().to_r1cs()
        with pytest.raises(ValueError):
            r1cs.is_satisfied([1])


class TestDigest:
    """Circuit commitments."""

    def test_deterministic(self):
        def build():
            cs = ConstraintSystem()
            cs.mul(cs.input('a'), cs.input('b'))
            return cs.digest()

        assert build() == build()
        assert len(build()) == 32

    def test_sensitive_to_shape(self):
        cs1 = ConstraintSystem()
        cs1.mul(cs1.input('a'), cs1.input('b'))
        cs2 = ConstraintSystem()
        cs2.mul(cs2.input('a'), cs2.input('b', public=True))
        assert cs1.digest() != cs2.digest()
