"""Witness builder: raw .eml bytes -> receiver circuit input payload."""
from __future__ import annotations

from typing import Sequence

from eml_core.commitment import pad_buffer, rolling_commitment
from eml_core.protocol import (
    BUFFER_SIGNAL,
    COMMITMENT_SIGNAL,
    DEFAULT_LITERALS,
    MAX_EML_LEN,
    literal_signal,
    selector_signal,
)


class LiteralNotFoundError(ValueError):
    """A required literal does not occur in the committed part of the document."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(
            "Required literals not found in .eml (need " + ", ".join(self.missing) + ")"
        )


def one_hot(length: int, pos: int) -> list[int]:
    arr = [0] * length
    if 0 <= pos < length:
        arr[pos] = 1
    return arr


def find_literal(buffer: bytes, literal: bytes) -> int:
    """First offset of literal inside the valid window [0, len(buffer) - len(literal)], or -1.

    Later occurrences are ignored; any one of them would satisfy the circuit.
    """
    if not literal or len(literal) > len(buffer):
        return -1
    return buffer.find(literal)


def locate_literals(
    buffer: bytes,
    literals: Sequence[tuple[str, bytes]] = DEFAULT_LITERALS,
) -> dict[str, int]:
    positions = {name: find_literal(buffer, lit) for name, lit in literals}
    missing = [lit.decode("latin-1") for name, lit in literals if positions[name] < 0]
    if missing:
        raise LiteralNotFoundError(missing)
    return positions


def build_input(
    raw: bytes,
    literals: Sequence[tuple[str, bytes]] = DEFAULT_LITERALS,
    max_len: int = MAX_EML_LEN,
) -> dict:
    """Build the circuit input payload; all field values decimal strings.

    Raises LiteralNotFoundError before any commitment work when a literal
    is absent from the first max_len bytes.
    """
    buffer = pad_buffer(raw, max_len)
    positions = locate_literals(buffer, literals)

    payload: dict = {
        COMMITMENT_SIGNAL: str(rolling_commitment(buffer)),
        BUFFER_SIGNAL: [str(b) for b in buffer],
    }
    for name, lit in literals:
        payload[literal_signal(name)] = [str(b) for b in lit]
    for name, _ in literals:
        payload[selector_signal(name)] = [str(x) for x in one_hot(max_len, positions[name])]
    return payload
