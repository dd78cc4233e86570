"""Circuit gadgets: byte range, 31-byte packing, Poseidon, literal occurrence."""
from __future__ import annotations

from typing import Sequence

from eml_core.poseidon import PoseidonParams, get_params
from eml_core.protocol import BYTE_BITS, CHUNK_LEN

from .r1cs import ONE, ZERO, ConstraintSystem, LinearCombination


def num2bits(cs: ConstraintSystem, value: LinearCombination, n_bits: int, label: str) -> list[LinearCombination]:
    """Binary decomposition; unsatisfiable unless value is in [0, 2^n_bits)."""
    bits = []
    for k in range(n_bits):
        bit = cs.intermediate(
            f"{label}.bits[{k}]",
            lambda v, x=value, k=k: (x.evaluate(v, cs.prime) >> k) & 1,
        )
        cs.enforce(bit, bit - 1, ZERO, "num2bits", f"{label}.bits[{k}]")
        bits.append(bit)
    recomposed = LinearCombination.sum(bit * (1 << k) for k, bit in enumerate(bits))
    cs.enforce_equal(recomposed, value, "num2bits", f"{label}.sum")
    return bits


def byte_range(cs: ConstraintSystem, value: LinearCombination, label: str) -> list[LinearCombination]:
    return num2bits(cs, value, BYTE_BITS, label)


def pack_bytes(cs: ConstraintSystem, byte_lcs: Sequence[LinearCombination], label: str) -> LinearCombination:
    """out = sum b[i] * 256^i over one chunk; missing tail bytes count as zero."""
    if len(byte_lcs) > CHUNK_LEN:
        raise ValueError(f"Chunk of {len(byte_lcs)} signals exceeds {CHUNK_LEN}")
    packed = LinearCombination.sum(b * (1 << (8 * i)) for i, b in enumerate(byte_lcs))
    out = cs.intermediate(f"{label}.out", lambda v, x=packed: x.evaluate(v, cs.prime))
    cs.enforce_equal(packed, out, "pack31", f"{label}.out")
    return out


def _sbox(cs: ConstraintSystem, x: LinearCombination, label: str) -> LinearCombination:
    p = cs.prime
    x2 = cs.intermediate(f"{label}.x2", lambda v: pow(x.evaluate(v, p), 2, p))
    cs.enforce(x, x, x2, "poseidon", f"{label}.x2")
    x4 = cs.intermediate(f"{label}.x4", lambda v: pow(x2.evaluate(v, p), 2, p))
    cs.enforce(x2, x2, x4, "poseidon", f"{label}.x4")
    x5 = cs.intermediate(f"{label}.x5", lambda v: x4.evaluate(v, p) * x.evaluate(v, p) % p)
    cs.enforce(x4, x, x5, "poseidon", f"{label}.x5")
    return x5


def poseidon_gadget(
    cs: ConstraintSystem,
    inputs: Sequence[LinearCombination],
    label: str,
    params: PoseidonParams | None = None,
) -> LinearCombination:
    params = params or get_params()
    t = params.t
    if len(inputs) != t - 1:
        raise ValueError(f"Poseidon gadget expects {t - 1} inputs, got {len(inputs)}")

    state = [ZERO, *inputs]
    for r in range(params.rounds):
        rc = params.round_constants[r * t:(r + 1) * t]
        state = [s + c for s, c in zip(state, rc)]
        if params.is_full_round(r):
            state = [_sbox(cs, s, f"{label}.r{r}.s{i}") for i, s in enumerate(state)]
        else:
            state[0] = _sbox(cs, state[0], f"{label}.r{r}.s0")
        state = [
            LinearCombination.sum(s * m for m, s in zip(row, state))
            for row in params.mds
        ]

    out = cs.intermediate(f"{label}.out", lambda v, x=state[0]: x.evaluate(v, cs.prime))
    cs.enforce_equal(state[0], out, "poseidon", f"{label}.out")
    return out


def rolling_commitment_gadget(
    cs: ConstraintSystem,
    byte_lcs: Sequence[LinearCombination],
    label: str = "commit",
) -> LinearCombination:
    """Statically unrolled chain h_k = Poseidon(h_{k-1}, pack31(chunk_k))."""
    h = ZERO
    for k, off in enumerate(range(0, len(byte_lcs), CHUNK_LEN)):
        packed = pack_bytes(cs, byte_lcs[off:off + CHUNK_LEN], f"{label}.pack[{k}]")
        h = poseidon_gadget(cs, [h, packed], f"{label}.hash[{k}]")
    return h


def literal_occurrence(
    cs: ConstraintSystem,
    buffer: Sequence[LinearCombination],
    literal: Sequence[LinearCombination],
    selector: Sequence[LinearCombination],
    label: str,
) -> None:
    """Prove buffer[t:t+L] == literal for the one position t selected by a one-hot vector.

    Each window position votes through its selector bit:
      sel[t] * (sel[t] - 1) = 0                 for t in the window
      sel[t] = 0                                outside the window
      sum sel[t] = 1                            over the window
      sel[t] * (buffer[t+i] - literal[i]) = 0   for t in the window, i < L
    """
    n = len(buffer)
    size = len(literal)
    if len(selector) != n:
        raise ValueError(f"Selector length {len(selector)} != buffer length {n}")
    if size == 0 or size > n:
        raise ValueError(f"Literal length {size} does not fit a buffer of {n}")

    window = n - size + 1
    for t in range(window):
        s = selector[t]
        cs.enforce(s, s - 1, ZERO, "literal_boolean", f"{label}.sel[{t}]")
        for i in range(size):
            cs.enforce(s, buffer[t + i] - literal[i], ZERO, "literal_match", f"{label}.match[{t}][{i}]")
    for t in range(window, n):
        cs.enforce(selector[t], ONE, ZERO, "literal_window", f"{label}.sel[{t}]")
    cs.enforce(LinearCombination.sum(selector[:window]), ONE, ONE, "literal_onehot", f"{label}.onehot")
