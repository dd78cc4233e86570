"""Off-circuit buffer preparation and rolling commitment."""
from __future__ import annotations

from .poseidon import compress
from .protocol import CHUNK_LEN, MAX_EML_LEN


def pad_buffer(raw: bytes, max_len: int = MAX_EML_LEN) -> bytes:
    """Truncate to max_len and zero-fill the tail.

    Truncation is silent: bytes past max_len never enter the commitment or
    the literal search.
    """
    return bytes(raw[:max_len]).ljust(max_len, b"\x00")


def pack31_le(chunk: bytes) -> int:
    """Little-endian base-256 packing of up to 31 bytes (short chunks zero-padded)."""
    if len(chunk) > CHUNK_LEN:
        raise ValueError(f"Chunk of {len(chunk)} bytes exceeds {CHUNK_LEN}")
    return int.from_bytes(chunk, "little")


def iter_chunks(buffer: bytes):
    for off in range(0, len(buffer), CHUNK_LEN):
        yield buffer[off:off + CHUNK_LEN]


def rolling_commitment(buffer: bytes) -> int:
    """h0 = 0, h_k = Compress(h_{k-1}, pack31(chunk_k)); returns h_n."""
    h = 0
    for chunk in iter_chunks(buffer):
        h = compress(h, pack31_le(chunk))
    return h
