"""EML receiver circuit: one buffer, one commitment, three literal occurrences."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from eml_core.protocol import (
    BUFFER_SIGNAL,
    BYTE_BITS,
    COMMITMENT_SIGNAL,
    DEFAULT_LITERALS,
    MAX_EML_LEN,
    literal_signal,
    num_chunks,
    selector_signal,
)

from .gadgets import byte_range, literal_occurrence, rolling_commitment_gadget
from .r1cs import ConstraintSystem, LinearCombination

# Constraints per Poseidon(2) call: 81 S-boxes * 3 + output
POSEIDON_CONSTRAINTS = (8 * 3 + 57) * 3 + 1


@dataclass
class ReceiverCircuit:
    cs: ConstraintSystem
    max_len: int
    literals: tuple[tuple[str, bytes], ...]
    pin_literals: bool

    def solve(self, payload: Mapping[str, object]) -> list[int]:
        return self.cs.solve(payload)

    def public_signals(self, values: Sequence[int]) -> list[int]:
        return [values[w] for w in range(1, 1 + self.cs.n_public)]

    def check(self, payload: Mapping[str, object]) -> dict:
        values = self.solve(payload)
        failure = self.cs.first_failure(values)
        if failure is None:
            return {
                "status": "SATISFIED",
                "constraints": self.cs.n_constraints,
                "public": [str(x) for x in self.public_signals(values)],
            }
        index, con = failure
        return {
            "status": "UNSATISFIED",
            "constraints": self.cs.n_constraints,
            "failing": {"index": index, "gadget": con.gadget, "label": con.label},
        }

    def manifest_params(self) -> dict:
        return {
            "max_len": self.max_len,
            "literals": {name: lit.decode("latin-1") for name, lit in self.literals},
            "pin_literals": self.pin_literals,
            "n_public": self.cs.n_public,
            "n_private": self.cs.n_private,
            "n_wires": self.cs.n_wires,
            "n_constraints": self.cs.n_constraints,
        }


def expected_constraint_count(
    max_len: int = MAX_EML_LEN,
    literal_lengths: Sequence[int] = tuple(len(lit) for _, lit in DEFAULT_LITERALS),
    pin_literals: bool = True,
) -> int:
    """Fixed, data-independent size of the receiver circuit."""
    total = max_len * (BYTE_BITS + 1)
    total += num_chunks(max_len) * (1 + POSEIDON_CONSTRAINTS)
    total += 1
    for size in literal_lengths:
        window = max_len - size + 1
        total += window * (size + 1) + (max_len - window) + 1
        if pin_literals:
            total += size
    return total


def build_receiver_circuit(
    max_len: int = MAX_EML_LEN,
    literals: Sequence[tuple[str, bytes]] = DEFAULT_LITERALS,
    pin_literals: bool = True,
) -> ReceiverCircuit:
    """Compose the receiver statement.

    Public:  eml_commitment
    Private: eml[max_len], <name>_bytes[L], sel_<name>[max_len] per literal
    """
    literals = tuple((name, bytes(lit)) for name, lit in literals)
    for name, lit in literals:
        if not lit or len(lit) > max_len:
            raise ValueError(f"FATAL: Literal {name!r} of length {len(lit)} does not fit max_len={max_len}")

    cs = ConstraintSystem()
    public_commitment = cs.public_input(COMMITMENT_SIGNAL)
    buffer = cs.private_input(BUFFER_SIGNAL, max_len)
    signals: dict[str, list[LinearCombination]] = {
        COMMITMENT_SIGNAL: [public_commitment],
        BUFFER_SIGNAL: buffer,
    }
    for name, lit in literals:
        signals[literal_signal(name)] = cs.private_input(literal_signal(name), len(lit))
    for name, _ in literals:
        signals[selector_signal(name)] = cs.private_input(selector_signal(name), max_len)

    for i, b in enumerate(buffer):
        byte_range(cs, b, f"{BUFFER_SIGNAL}[{i}]")

    commitment = rolling_commitment_gadget(cs, buffer)
    cs.enforce_equal(commitment, public_commitment, "commitment", COMMITMENT_SIGNAL)

    for name, lit in literals:
        lit_signals = signals[literal_signal(name)]
        if pin_literals:
            for i, (sig, byte) in enumerate(zip(lit_signals, lit)):
                cs.enforce_equal(sig, byte, "literal_pin", f"{literal_signal(name)}[{i}]")
        literal_occurrence(cs, buffer, lit_signals, signals[selector_signal(name)], name)

    return ReceiverCircuit(
        cs=cs,
        max_len=max_len,
        literals=literals,
        pin_literals=pin_literals,
    )
