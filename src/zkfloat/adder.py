"""
Float Adder

float_add wires every gadget together:

1. Assert both operands are well-formed.
2. Order them by the key e·2^(p+1) + m. Because a nonzero mantissa always
   has its top bit at p, the exponent dominates the key and the mantissa
   breaks ties.
3. Bypass when diff = e_larger - e_smaller >= p + 2 (the smaller operand
   is below half an ulp of the larger) or when e_larger = 0 (both zero).
4. Otherwise align: m_larger << diff + m_smaller at the smaller exponent,
   then normalize to scale P = 2p + 1 and round back to scale p.
5. Select bypass or computed result.

FloatAdder compiles the gadget once for a FloatParams and evaluates it on
concrete operands.
"""

from typing import Dict, Mapping, Optional, Sequence, Tuple
import hashlib
import logging

from .circuit import ConstraintSystem, LinearCombination, Operand, R1CS, Witness
from .comparators import is_zero, less_than
from .floats import FloatValue, check_well_formedness
from .logic import if_then_else, or_, switcher
from .msnzb import normalize
from .params import FloatParams
from .rounding import round_and_check
from .shifts import left_shift
from .tags import CircuitTag, tag_bytes


logger = logging.getLogger(__name__)


def float_add(
    cs: ConstraintSystem,
    e: Sequence[Operand],
    m: Sequence[Operand],
    params: FloatParams,
) -> Tuple[LinearCombination, LinearCombination]:
    """
    Emit the adder for operands (e[0], m[0]) and (e[1], m[1]).

    The output exponent is not range-checked: a sum that carries past the
    top binade comes out with e_out = 2^k, which is not a well-formed
    float of this format. Callers that need a bounded result must check
    e_out themselves.
    """
    if len(e) != 2 or len(m) != 2:
        raise ValueError("float_add takes exactly two operands")
    k, p, P = params.k, params.p, params.P
    e = [cs.lift(x) for x in e]
    m = [cs.lift(x) for x in m]

    with cs.scope('float_add'):
        for i in range(2):
            check_well_formedness(cs, e[i], m[i], k, p)

        keys = [e[i] * (1 << (p + 1)) + m[i] for i in range(2)]
        left_smaller = less_than(cs, keys[0], keys[1], k + p + 1)
        alpha_e, beta_e = switcher(cs, left_smaller, e[0], e[1])
        alpha_m, beta_m = switcher(cs, left_smaller, m[0], m[1])

        diff = alpha_e - beta_e
        negligible = less_than(cs, p + 1, diff, max(k, (p + 1).bit_length()))
        bypass = or_(cs, negligible, is_zero(cs, alpha_e))

        shift = if_then_else(cs, bypass, 0, diff)
        aligned = left_shift(cs, alpha_m, shift, p + 2) + beta_m

        e_norm, m_norm = normalize(cs, beta_e, aligned, p, P, skip_checks=bypass)
        e_round, m_round = round_and_check(cs, e_norm, m_norm, p, P)

        e_out = if_then_else(cs, bypass, alpha_e, e_round)
        m_out = if_then_else(cs, bypass, alpha_m, m_round)
    return e_out, m_out


class FloatAdder:
    """
    Compiled float adder for one FloatParams.

    Inputs e[0], e[1], m[0], m[1] are private unless public_inputs is set.
    Outputs e_out, m_out are always public.
    """

    def __init__(self, params: FloatParams, public_inputs: bool = False):
        self.params = params
        self.cs = ConstraintSystem(params.modulus)

        e = [self.cs.input(f'e[{i}]', public=public_inputs) for i in range(2)]
        m = [self.cs.input(f'm[{i}]', public=public_inputs) for i in range(2)]
        e_out, m_out = float_add(self.cs, e, m, params)
        self.e_out = self.cs.output('e_out', e_out)
        self.m_out = self.cs.output('m_out', m_out)

        logger.debug(
            "compiled float adder k=%d p=%d: %d wires, %d constraints",
            params.k, params.p, self.cs.num_wires, self.cs.num_constraints,
        )

    def _inputs(self, a: FloatValue, b: FloatValue) -> Dict[str, int]:
        for operand in (a, b):
            if operand.params != self.params:
                raise ValueError(f"Operand {operand!r} does not match adder format")
        return {
            'e[0]': a.exponent,
            'm[0]': a.mantissa,
            'e[1]': b.exponent,
            'm[1]': b.mantissa,
        }

    def witness(
        self,
        a: FloatValue,
        b: FloatValue,
        overrides: Optional[Mapping[str, int]] = None,
    ) -> Witness:
        """Run witness generation without checking constraints."""
        return self.cs.generate_witness(self._inputs(a, b), overrides)

    def accepts(self, a: FloatValue, b: FloatValue) -> bool:
        """Whether the honest witness for (a, b) satisfies the circuit."""
        return self.cs.is_satisfied(self.witness(a, b))

    def add(self, a: FloatValue, b: FloatValue) -> FloatValue:
        """
        a + b through the circuit.

        Raises UnsatisfiableError if either operand is malformed.
        """
        return self.result(self.cs.solve(self._inputs(a, b)))

    def result(self, witness: Witness) -> FloatValue:
        """Output pair read off an arbitrary witness."""
        return FloatValue(witness.value(self.e_out), witness.value(self.m_out), self.params)

    @property
    def num_wires(self) -> int:
        return self.cs.num_wires

    @property
    def num_constraints(self) -> int:
        return self.cs.num_constraints

    def r1cs(self) -> R1CS:
        return self.cs.to_r1cs()

    def digest(self) -> bytes:
        """Binds the parameter hash to the constraint system digest."""
        h = hashlib.shake_256()
        h.update(tag_bytes(CircuitTag.ADDER))
        h.update(self.params.hash())
        h.update(self.cs.digest())
        return h.digest(32)
