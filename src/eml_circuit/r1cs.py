"""Rank-1 constraint system over the BN254 scalar field.

Every constraint has the form A * B = C where A, B, C are sparse linear
combinations {wire: coeff}. Wire 0 is the constant one. Wires are laid out
the way circom/snarkjs expect: one, public inputs, private inputs, internals.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Sequence

from eml_core.protocol import FIELD_PRIME

ONE_WIRE = 0


class LinearCombination:
    __slots__ = ("terms",)

    def __init__(self, terms: Mapping[int, int] | None = None, prime: int = FIELD_PRIME):
        self.terms: dict[int, int] = {}
        if terms:
            for w, c in terms.items():
                c %= prime
                if c:
                    self.terms[w] = c

    @classmethod
    def wire(cls, w: int) -> "LinearCombination":
        return cls({w: 1})

    @classmethod
    def constant(cls, c: int) -> "LinearCombination":
        return cls({ONE_WIRE: c})

    @classmethod
    def sum(cls, items: Iterable["LinearCombination"]) -> "LinearCombination":
        acc: dict[int, int] = {}
        for lc in items:
            for w, c in lc.terms.items():
                acc[w] = acc.get(w, 0) + c
        return cls(acc)

    @staticmethod
    def _coerce(other) -> "LinearCombination":
        if isinstance(other, LinearCombination):
            return other
        if isinstance(other, int):
            return LinearCombination.constant(other)
        return NotImplemented

    def __add__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        acc = dict(self.terms)
        for w, c in other.terms.items():
            acc[w] = acc.get(w, 0) + c
        return LinearCombination(acc)

    __radd__ = __add__

    def __neg__(self):
        return LinearCombination({w: -c for w, c in self.terms.items()})

    def __sub__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        return self + (-other)

    def __rsub__(self, other):
        return (-self) + other

    def __mul__(self, k):
        if not isinstance(k, int):
            return NotImplemented
        return LinearCombination({w: c * k for w, c in self.terms.items()})

    __rmul__ = __mul__

    def evaluate(self, values: Sequence[int], prime: int = FIELD_PRIME) -> int:
        return sum(c * values[w] for w, c in self.terms.items()) % prime

    def __repr__(self) -> str:
        return "LC(" + " + ".join(f"{c}*w{w}" for w, c in sorted(self.terms.items())) + ")"


ZERO = LinearCombination()
ONE = LinearCombination.constant(1)


@dataclass(frozen=True)
class Constraint:
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination
    gadget: str
    label: str

    def holds(self, values: Sequence[int], prime: int = FIELD_PRIME) -> bool:
        return (self.a.evaluate(values, prime) * self.b.evaluate(values, prime)
                - self.c.evaluate(values, prime)) % prime == 0


Hint = Callable[[Sequence[int]], int]


class ConstraintSystem:
    """Constraint container plus the witness hints that fill internal wires."""

    def __init__(self, prime: int = FIELD_PRIME):
        self.prime = prime
        self.wire_names: list[str] = ["one"]
        self.n_public = 0
        self.n_private = 0
        self.constraints: list[Constraint] = []
        self.inputs: dict[str, list[int]] = {}
        self._scalar_inputs: set[str] = set()
        self._hints: list[tuple[int, Hint]] = []

    @property
    def n_wires(self) -> int:
        return len(self.wire_names)

    @property
    def n_constraints(self) -> int:
        return len(self.constraints)

    def _alloc(self, name: str) -> int:
        self.wire_names.append(name)
        return len(self.wire_names) - 1

    def _input(self, name: str, size: int | None, public: bool):
        if name in self.inputs:
            raise ValueError(f"Signal {name!r} already declared")
        if self._hints:
            raise ValueError(f"Input {name!r} declared after internal signals")
        if public and self.n_private:
            raise ValueError(f"Public input {name!r} declared after private inputs")
        count = 1 if size is None else size
        wires = [self._alloc(name if size is None else f"{name}[{i}]") for i in range(count)]
        self.inputs[name] = wires
        if size is None:
            self._scalar_inputs.add(name)
        if public:
            self.n_public += count
        else:
            self.n_private += count
        lcs = [LinearCombination.wire(w) for w in wires]
        return lcs[0] if size is None else lcs

    def public_input(self, name: str, size: int | None = None):
        return self._input(name, size, public=True)

    def private_input(self, name: str, size: int | None = None):
        return self._input(name, size, public=False)

    def intermediate(self, name: str, hint: Hint) -> LinearCombination:
        w = self._alloc(name)
        self._hints.append((w, hint))
        return LinearCombination.wire(w)

    def enforce(self, a, b, c, gadget: str, label: str) -> None:
        self.constraints.append(Constraint(
            LinearCombination._coerce(a),
            LinearCombination._coerce(b),
            LinearCombination._coerce(c),
            gadget,
            label,
        ))

    def enforce_equal(self, x, y, gadget: str, label: str) -> None:
        self.enforce(x, ONE, y, gadget, label)

    def solve(self, assignment: Mapping[str, object]) -> list[int]:
        """Assign inputs by name and run hints; returns the full wire vector."""
        values = [0] * self.n_wires
        values[ONE_WIRE] = 1
        for name, wires in self.inputs.items():
            if name not in assignment:
                raise ValueError(f"FATAL: Missing input signal {name!r}")
            raw = assignment[name]
            if name in self._scalar_inputs:
                raw = [raw]
            raw = list(raw)
            if len(raw) != len(wires):
                raise ValueError(
                    f"FATAL: Signal {name!r} expects {len(wires)} values, got {len(raw)}"
                )
            for w, v in zip(wires, raw):
                values[w] = int(v) % self.prime
        for w, hint in self._hints:
            values[w] = hint(values) % self.prime
        return values

    def first_failure(self, values: Sequence[int]) -> tuple[int, Constraint] | None:
        for i, con in enumerate(self.constraints):
            if not con.holds(values, self.prime):
                return i, con
        return None

    def is_satisfied(self, values: Sequence[int]) -> bool:
        return self.first_failure(values) is None

    def stats(self) -> dict[str, int]:
        return dict(Counter(con.gadget for con in self.constraints))
