"""Poseidon compression over the BN254 scalar field.

Parameters are derived with the Grain LFSR procedure from the Poseidon
reference (field=prime, S-box=x^alpha), which reproduces the round constants
and MDS matrix circomlib ships for Poseidon(2).
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator

from .protocol import (
    FIELD_PRIME,
    POSEIDON_ALPHA,
    POSEIDON_FULL_ROUNDS,
    POSEIDON_PARTIAL_ROUNDS,
    POSEIDON_T,
)

_GRAIN_TAPS = (62, 51, 38, 23, 13, 0)


@dataclass(frozen=True)
class PoseidonParams:
    prime: int
    t: int
    full_rounds: int
    partial_rounds: int
    alpha: int
    round_constants: tuple[int, ...]
    mds: tuple[tuple[int, ...], ...]

    @property
    def rounds(self) -> int:
        return self.full_rounds + self.partial_rounds

    def is_full_round(self, r: int) -> bool:
        half = self.full_rounds // 2
        return r < half or r >= half + self.partial_rounds


def _bits(value: int, width: int) -> list[int]:
    return [(value >> i) & 1 for i in range(width - 1, -1, -1)]


def _grain_bits(field: int, sbox: int, n: int, t: int, r_f: int, r_p: int) -> Iterator[int]:
    """Self-shrinking Grain LFSR bit stream seeded by the parameter set."""
    state = (
        _bits(field, 2)
        + _bits(sbox, 4)
        + _bits(n, 12)
        + _bits(t, 12)
        + _bits(r_f, 10)
        + _bits(r_p, 10)
        + [1] * 30
    )

    def clock() -> int:
        bit = 0
        for tap in _GRAIN_TAPS:
            bit ^= state[tap]
        state.pop(0)
        state.append(bit)
        return bit

    for _ in range(160):
        clock()

    while True:
        # Pairs (b1, b2): emit b2 only when b1 == 1.
        b1 = clock()
        while b1 == 0:
            clock()
            b1 = clock()
        yield clock()


def _take_int(stream: Iterator[int], n: int) -> int:
    acc = 0
    for _ in range(n):
        acc = (acc << 1) | next(stream)
    return acc


@lru_cache(maxsize=None)
def get_params(
    t: int = POSEIDON_T,
    full_rounds: int = POSEIDON_FULL_ROUNDS,
    partial_rounds: int = POSEIDON_PARTIAL_ROUNDS,
    prime: int = FIELD_PRIME,
) -> PoseidonParams:
    n = prime.bit_length()
    stream = _grain_bits(1, 0, n, t, full_rounds, partial_rounds)

    constants = []
    for _ in range((full_rounds + partial_rounds) * t):
        c = _take_int(stream, n)
        while c >= prime:
            c = _take_int(stream, n)
        constants.append(c)

    # Cauchy matrix M[i][j] = 1 / (x_i + y_j) over distinct samples.
    while True:
        samples = [_take_int(stream, n) % prime for _ in range(2 * t)]
        while len(set(samples)) != len(samples):
            samples = [_take_int(stream, n) % prime for _ in range(2 * t)]
        xs, ys = samples[:t], samples[t:]
        if any((x + y) % prime == 0 for x in xs for y in ys):
            continue
        mds = tuple(tuple(pow(x + y, -1, prime) for y in ys) for x in xs)
        break

    return PoseidonParams(
        prime=prime,
        t=t,
        full_rounds=full_rounds,
        partial_rounds=partial_rounds,
        alpha=POSEIDON_ALPHA,
        round_constants=tuple(constants),
        mds=mds,
    )


def permute(state: list[int], params: PoseidonParams | None = None) -> list[int]:
    params = params or get_params()
    p = params.prime
    t = params.t
    if len(state) != t:
        raise ValueError(f"Poseidon state width {len(state)} != {t}")

    s = [x % p for x in state]
    for r in range(params.rounds):
        rc = params.round_constants[r * t:(r + 1) * t]
        s = [(x + c) % p for x, c in zip(s, rc)]
        if params.is_full_round(r):
            s = [pow(x, params.alpha, p) for x in s]
        else:
            s[0] = pow(s[0], params.alpha, p)
        s = [sum(m * x for m, x in zip(row, s)) % p for row in params.mds]
    return s


def poseidon(inputs: list[int] | tuple[int, ...]) -> int:
    """circomlib-compatible Poseidon: state [0, *inputs], output state[0]."""
    if len(inputs) + 1 != POSEIDON_T:
        raise ValueError(f"Poseidon is configured for {POSEIDON_T - 1} inputs, got {len(inputs)}")
    return permute([0, *inputs], get_params())[0]


def compress(left: int, right: int) -> int:
    """Arity-2 compression used by the rolling commitment."""
    return poseidon((left, right))
