"""
Rank-1 Constraint System

A circuit is a list of wires and a list of constraints over them.

Wires:
- wire 0 is the constant 1
- every other wire is produced, in creation order, by exactly one of
    * an input read (public or private)
    * a formula over earlier wires (e.g. a product)
    * a hint: an arbitrary pure function of earlier wire values

Constraints are rank-1 relations a·b = c where a, b, c are linear
combinations of wires. A hint carries no guarantee on its own; only the
constraints that mention it decide which values are acceptable.

Evaluation happens in two phases:
1. Compile: gadgets append wires and constraints. Shape depends only on
   compile-time parameters.
2. Witness: `generate_witness` walks the wires once, in order, computing
   each from values already known. `unsatisfied` then reports every
   constraint the assignment violates.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Union
import hashlib
import json
import logging

from .field import BN254_PRIME, FieldElement, max_bits, max_compare_bits
from .tags import CircuitTag, tag_bytes


logger = logging.getLogger(__name__)

# Index of the constant-one wire
ONE = 0

Operand = Union['LinearCombination', FieldElement, int]
Getter = Callable[['LinearCombination'], int]


class UnsatisfiableError(Exception):
    """No valid witness exists for the supplied inputs."""

    def __init__(self, violations: Sequence[str]):
        self.violations = list(violations)
        shown = ', '.join(self.violations[:5])
        if len(self.violations) > 5:
            shown += f", ... ({len(self.violations) - 5} more)"
        super().__init__(f"{len(self.violations)} constraint(s) unsatisfied: {shown}")


# =============================================================================
# Linear Combinations
# =============================================================================

class LinearCombination:
    """
    Sparse sum of wires with field coefficients.

    x = w0 + 5·w2 + 7·w3 is stored as {0: 1, 2: 5, 3: 7}. Zero coefficients
    are dropped, constants live on the ONE wire.
    """

    __slots__ = ('terms', 'modulus')

    def __init__(self, terms: Mapping[int, int], modulus: int = BN254_PRIME):
        self.modulus = modulus
        self.terms: Dict[int, int] = {}
        for wire, coeff in terms.items():
            coeff %= modulus
            if coeff:
                self.terms[wire] = coeff

    @classmethod
    def constant(cls, value: int, modulus: int = BN254_PRIME) -> LinearCombination:
        return cls({ONE: value}, modulus)

    def _lift(self, other: Operand) -> LinearCombination:
        if isinstance(other, LinearCombination):
            if other.modulus != self.modulus:
                raise ValueError("Cannot mix linear combinations over different fields")
            return other
        if isinstance(other, FieldElement):
            return LinearCombination.constant(other.value, self.modulus)
        if isinstance(other, int):
            return LinearCombination.constant(other, self.modulus)
        return NotImplemented

    # =========================================================================
    # Arithmetic (linear only)
    # =========================================================================

    def __add__(self, other: Operand) -> LinearCombination:
        other = self._lift(other)
        if other is NotImplemented:
            return NotImplemented
        terms = dict(self.terms)
        for wire, coeff in other.terms.items():
            terms[wire] = terms.get(wire, 0) + coeff
        return LinearCombination(terms, self.modulus)

    __radd__ = __add__

    def __neg__(self) -> LinearCombination:
        return LinearCombination({wire: -coeff for wire, coeff in self.terms.items()}, self.modulus)

    def __sub__(self, other: Operand) -> LinearCombination:
        other = self._lift(other)
        if other is NotImplemented:
            return NotImplemented
        return self + (-other)

    def __rsub__(self, other: Operand) -> LinearCombination:
        other = self._lift(other)
        if other is NotImplemented:
            return NotImplemented
        return other + (-self)

    def __mul__(self, other: Union[FieldElement, int]) -> LinearCombination:
        if isinstance(other, LinearCombination):
            raise TypeError(
                "Product of two linear combinations needs a constraint; use ConstraintSystem.mul"
            )
        if isinstance(other, FieldElement):
            other = other.value
        if not isinstance(other, int):
            return NotImplemented
        return LinearCombination(
            {wire: coeff * other for wire, coeff in self.terms.items()}, self.modulus
        )

    __rmul__ = __mul__

    # =========================================================================
    # Queries
    # =========================================================================

    def is_constant(self) -> bool:
        return self.terms.keys() <= {ONE}

    def constant_value(self) -> int:
        """Coefficient on the ONE wire."""
        return self.terms.get(ONE, 0)

    def evaluate(self, values: Sequence[FieldElement]) -> FieldElement:
        """Value of the combination under a (partial) assignment."""
        total = 0
        for wire, coeff in self.terms.items():
            total += coeff * values[wire].value
        return FieldElement(total, self.modulus)

    def serialize(self) -> bytes:
        """
        Canonical serialization.

        Format:
            count(4) || (wire(4) || coeff(32))*   sorted by wire
        """
        width = (self.modulus.bit_length() + 7) // 8
        parts = [len(self.terms).to_bytes(4, 'big')]
        for wire in sorted(self.terms):
            parts.append(wire.to_bytes(4, 'big'))
            parts.append(self.terms[wire].to_bytes(width, 'big'))
        return b''.join(parts)

    def __repr__(self) -> str:
        if not self.terms:
            return "LinearCombination(0)"
        body = ' + '.join(
            str(coeff) if wire == ONE else f"{coeff}*w{wire}"
            for wire, coeff in sorted(self.terms.items())
        )
        return f"LinearCombination({body})"


# =============================================================================
# Constraints and Witnesses
# =============================================================================

@dataclass
class Constraint:
    """
    Rank-1 constraint a·b = c.

    The constraint is satisfied when evaluate() returns zero.
    """
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination
    name: str

    def evaluate(self, values: Sequence[FieldElement]) -> FieldElement:
        return self.a.evaluate(values) * self.b.evaluate(values) - self.c.evaluate(values)

    def is_satisfied(self, values: Sequence[FieldElement]) -> bool:
        return self.evaluate(values).is_zero()

    def serialize(self) -> bytes:
        return b''.join([
            tag_bytes(CircuitTag.CONSTRAINT),
            self.a.serialize(),
            self.b.serialize(),
            self.c.serialize(),
        ])


@dataclass
class Witness:
    """Full assignment of field elements to the wires of one circuit."""
    values: List[FieldElement]
    names: List[str]

    def __getitem__(self, lc: LinearCombination) -> FieldElement:
        return lc.evaluate(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def value(self, lc: LinearCombination) -> int:
        """Canonical integer value of a linear combination."""
        return lc.evaluate(self.values).to_int()

    def by_name(self, name: str) -> FieldElement:
        try:
            return self.values[self.names.index(name)]
        except ValueError:
            raise KeyError(f"No wire named {name!r}") from None

    def to_ints(self) -> List[int]:
        return [v.to_int() for v in self.values]


@dataclass
class _WireGroup:
    """Consecutive wires produced by one generator."""
    start: int
    count: int
    compute: Optional[Callable[[Getter], Union[int, Sequence[int]]]] = None
    input_name: Optional[str] = None


# =============================================================================
# Exported Artifact
# =============================================================================

@dataclass
class R1CS:
    """
    Compiled relation set in matrix form.

    Row i of (a, b, c) is the sparse constraint <a_i, w>·<b_i, w> = <c_i, w>
    over the witness vector w, with w[0] = 1.
    """
    modulus: int
    num_wires: int
    public: List[int]
    a: List[Dict[int, int]]
    b: List[Dict[int, int]]
    c: List[Dict[int, int]]
    names: List[str] = field(default_factory=list)

    @property
    def num_constraints(self) -> int:
        return len(self.a)

    def is_satisfied(self, values: Sequence[int]) -> bool:
        if len(values) != self.num_wires:
            raise ValueError(f"Expected {self.num_wires} values, got {len(values)}")
        if values[ONE] % self.modulus != 1:
            return False

        def dot(row: Dict[int, int]) -> int:
            return sum(coeff * values[wire] for wire, coeff in row.items()) % self.modulus

        return all(
            dot(a) * dot(b) % self.modulus == dot(c)
            for a, b, c in zip(self.a, self.b, self.c)
        )

    def to_json(self) -> str:
        def rows(matrix: List[Dict[int, int]]) -> List[List[List[str]]]:
            return [[[str(w), str(c)] for w, c in sorted(row.items())] for row in matrix]

        return json.dumps({
            'modulus': str(self.modulus),
            'num_wires': self.num_wires,
            'public': self.public,
            'A': rows(self.a),
            'B': rows(self.b),
            'C': rows(self.c),
            'names': self.names,
        })

    @classmethod
    def from_json(cls, text: str) -> 'R1CS':
        data = json.loads(text)

        def rows(matrix: List[List[List[str]]]) -> List[Dict[int, int]]:
            return [{int(w): int(c) for w, c in row} for row in matrix]

        return cls(
            modulus=int(data['modulus']),
            num_wires=data['num_wires'],
            public=list(data['public']),
            a=rows(data['A']),
            b=rows(data['B']),
            c=rows(data['C']),
            names=list(data.get('names', [])),
        )


# =============================================================================
# Constraint System
# =============================================================================

class ConstraintSystem:
    """
    Builder for a rank-1 constraint system plus its witness generator.

    Gadgets take a ConstraintSystem as their first argument, allocate wires
    through it and return linear combinations.
    """

    def __init__(self, modulus: int = BN254_PRIME):
        self.modulus = modulus
        self.wire_names: List[str] = ['one']
        self.public: List[int] = [ONE]
        self.constraints: List[Constraint] = []
        self._groups: List[_WireGroup] = []
        self._wire_index: Dict[str, int] = {'one': ONE}
        self._inputs: Dict[str, int] = {}
        self._hint_bases: Set[str] = set()
        self._scope: List[str] = []
        self._used_scopes: Dict[str, int] = {}
        self._constraint_names: Dict[str, int] = {}

    # =========================================================================
    # Naming
    # =========================================================================

    @contextmanager
    def scope(self, name: str) -> Iterator[None]:
        """Prefix every wire and constraint created inside with `name/`."""
        path = self._qualify(name)
        seen = self._used_scopes.get(path, 0)
        self._used_scopes[path] = seen + 1
        self._scope.append(name if seen == 0 else f"{name}#{seen}")
        try:
            yield
        finally:
            self._scope.pop()

    def _qualify(self, name: str) -> str:
        return '/'.join(self._scope + [name])

    def _unique(self, name: str, registry: Mapping[str, int]) -> str:
        qualified = self._qualify(name)
        if qualified not in registry:
            return qualified
        n = 1
        while f"{qualified}#{n}" in registry:
            n += 1
        return f"{qualified}#{n}"

    # =========================================================================
    # Wires
    # =========================================================================

    @property
    def one(self) -> LinearCombination:
        return LinearCombination({ONE: 1}, self.modulus)

    def constant(self, value: int) -> LinearCombination:
        return LinearCombination.constant(value, self.modulus)

    def lift(self, value: Operand) -> LinearCombination:
        """Turn an int or field element into a constant combination."""
        lifted = self.one._lift(value)
        if lifted is NotImplemented:
            raise TypeError(f"Cannot use {type(value).__name__} as a circuit value")
        return lifted

    def _allocate(self, names: List[str], group: _WireGroup) -> List[LinearCombination]:
        wires = []
        for name in names:
            index = len(self.wire_names)
            self.wire_names.append(name)
            self._wire_index[name] = index
            wires.append(LinearCombination({index: 1}, self.modulus))
        self._groups.append(group)
        return wires

    def input(self, name: str, public: bool = False) -> LinearCombination:
        """Wire whose value is read from the inputs mapping at witness time."""
        qualified = self._qualify(name)
        if qualified in self._wire_index:
            raise ValueError(f"Duplicate input {qualified!r}")
        start = len(self.wire_names)
        [wire] = self._allocate([qualified], _WireGroup(start, 1, input_name=qualified))
        self._inputs[qualified] = start
        if public:
            self.public.append(start)
        return wire

    def hint(self, name: str, propose: Callable[[Getter], int]) -> LinearCombination:
        """
        Wire assigned by an out-of-circuit function of earlier wires.

        `propose(get)` receives `get(lc) -> int`. The caller must bind the
        returned wire with constraints; nothing here restricts its value.
        """
        qualified = self._unique(name, self._wire_index)
        start = len(self.wire_names)
        [wire] = self._allocate([qualified], _WireGroup(start, 1, compute=propose))
        return wire

    def hints(self, name: str, count: int, propose: Callable[[Getter], Sequence[int]]) -> List[LinearCombination]:
        """
        `count` wires assigned together by one proposal, named name[0..count).

        A repeated name in the same scope becomes name#1, name#2, ...
        """
        qualified = self._qualify(name)
        base, n = qualified, 0
        while base in self._wire_index or base in self._hint_bases:
            n += 1
            base = f"{qualified}#{n}"
        self._hint_bases.add(base)
        start = len(self.wire_names)
        names = [f"{base}[{i}]" for i in range(count)]
        return self._allocate(names, _WireGroup(start, count, compute=propose))

    def output(self, name: str, value: Operand) -> LinearCombination:
        """Public wire equal to `value`."""
        value = self.lift(value)
        wire = self.hint(name, lambda get: get(value))
        self.public.append(next(iter(wire.terms)))
        self.assert_equal(wire, value, name)
        return wire

    # =========================================================================
    # Constraints
    # =========================================================================

    def enforce(self, a: Operand, b: Operand, c: Operand, name: str = 'constraint') -> None:
        """
        Add the constraint a·b = c.

        When a or b is constant the relation is linear and is stored as
        (lin)·1 = 0. Relations that are constant on both sides are decided
        here: true ones are dropped, false ones raise.
        """
        a, b, c = self.lift(a), self.lift(b), self.lift(c)
        qualified = self._unique(name, self._constraint_names)

        if a.is_constant() or b.is_constant():
            if a.is_constant():
                linear = b * a.constant_value() - c
            else:
                linear = a * b.constant_value() - c
            if linear.is_constant():
                if linear.constant_value() != 0:
                    raise UnsatisfiableError([qualified])
                return
            a, b, c = linear, self.one, self.constant(0)

        self._constraint_names[qualified] = len(self.constraints)
        self.constraints.append(Constraint(a, b, c, qualified))

    def assert_equal(self, x: Operand, y: Operand, name: str = 'equal') -> None:
        self.enforce(self.lift(x) - self.lift(y), self.one, self.constant(0), name)

    def assert_bool(self, x: Operand, name: str = 'bool') -> None:
        """x·(x - 1) = 0"""
        x = self.lift(x)
        self.enforce(x, x - 1, self.constant(0), name)

    def mul(self, a: Operand, b: Operand, name: str = 'mul') -> LinearCombination:
        """Product of two combinations; costs one wire and one constraint."""
        a, b = self.lift(a), self.lift(b)
        if a.is_constant():
            return b * a.constant_value()
        if b.is_constant():
            return a * b.constant_value()
        out = self.hint(name, lambda get: get(a) * get(b))
        self.enforce(a, b, out, name)
        return out

    # =========================================================================
    # Field Margins
    # =========================================================================

    @property
    def max_bits(self) -> int:
        return max_bits(self.modulus)

    @property
    def max_compare_bits(self) -> int:
        return max_compare_bits(self.modulus)

    @property
    def num_wires(self) -> int:
        return len(self.wire_names)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    @property
    def input_names(self) -> List[str]:
        return list(self._inputs)

    # =========================================================================
    # Witness Generation
    # =========================================================================

    def generate_witness(
        self,
        inputs: Mapping[str, Union[int, FieldElement]],
        overrides: Optional[Mapping[str, int]] = None,
    ) -> Witness:
        """
        Compute every wire in creation order.

        `overrides` replaces the proposal of the named wires, so a test can
        play a dishonest prover. No constraint is checked here.
        """
        overrides = dict(overrides or {})
        unknown = set(overrides) - self._wire_index.keys()
        if unknown:
            raise ValueError(f"Unknown wires in overrides: {sorted(unknown)}")
        unexpected = set(inputs) - self._inputs.keys()
        if unexpected:
            raise ValueError(f"Unknown inputs: {sorted(unexpected)}")

        values: List[FieldElement] = [FieldElement.one(self.modulus)]

        def get(lc: LinearCombination) -> int:
            return lc.evaluate(values).to_int()

        for group in self._groups:
            if group.input_name is not None:
                if group.input_name not in inputs:
                    raise ValueError(f"Missing input {group.input_name!r}")
                produced = [inputs[group.input_name]]
            else:
                produced = group.compute(get)
                if group.count == 1 and not isinstance(produced, (list, tuple)):
                    produced = [produced]
                else:
                    produced = list(produced)
                if len(produced) != group.count:
                    raise ValueError(
                        f"Hint {self.wire_names[group.start]!r} proposed "
                        f"{len(produced)} values, expected {group.count}"
                    )

            for offset, raw in enumerate(produced):
                name = self.wire_names[group.start + offset]
                if name in overrides:
                    raw = overrides[name]
                values.append(FieldElement(int(raw), self.modulus))

        return Witness(values=values, names=list(self.wire_names))

    def unsatisfied(self, witness: Witness) -> List[Constraint]:
        """Constraints violated by `witness`."""
        return [c for c in self.constraints if not c.is_satisfied(witness.values)]

    def is_satisfied(self, witness: Witness) -> bool:
        return all(c.is_satisfied(witness.values) for c in self.constraints)

    def solve(
        self,
        inputs: Mapping[str, Union[int, FieldElement]],
        overrides: Optional[Mapping[str, int]] = None,
    ) -> Witness:
        """Generate a witness and require it to satisfy every constraint."""
        witness = self.generate_witness(inputs, overrides)
        violated = self.unsatisfied(witness)
        if violated:
            for constraint in violated:
                logger.debug("unsatisfied constraint %s", constraint.name)
            raise UnsatisfiableError([c.name for c in violated])
        return witness

    # =========================================================================
    # Export
    # =========================================================================

    def to_r1cs(self) -> R1CS:
        return R1CS(
            modulus=self.modulus,
            num_wires=self.num_wires,
            public=list(self.public),
            a=[dict(c.a.terms) for c in self.constraints],
            b=[dict(c.b.terms) for c in self.constraints],
            c=[dict(c.c.terms) for c in self.constraints],
            names=[c.name for c in self.constraints],
        )

    def digest(self) -> bytes:
        """Commitment to the circuit shape (wires, public set, constraints)."""
        h = hashlib.shake_256()
        h.update(tag_bytes(CircuitTag.CIRCUIT))
        h.update(self.modulus.to_bytes((self.modulus.bit_length() + 7) // 8, 'big'))

        h.update(tag_bytes(CircuitTag.WIRE))
        h.update(self.num_wires.to_bytes(4, 'big'))
        public = set(self.public)
        for index, name in enumerate(self.wire_names):
            encoded = name.encode('utf-8')
            h.update(len(encoded).to_bytes(2, 'big'))
            h.update(encoded)
            h.update(bytes([index in public]))

        h.update(len(self.constraints).to_bytes(4, 'big'))
        for constraint in self.constraints:
            h.update(constraint.serialize())
        return h.digest(32)

    def __repr__(self) -> str:
        return (
            f"ConstraintSystem(wires={self.num_wires}, "
            f"constraints={self.num_constraints}, public={len(self.public)})"
        )
