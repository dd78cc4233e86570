import random
import warnings

import pytest

from eml_core.commitment import iter_chunks, pack31_le, pad_buffer, rolling_commitment
from eml_core.poseidon import compress
from eml_core.protocol import CHUNK_LEN, MAX_EML_LEN, num_chunks


def test_pack31_is_little_endian():
    assert pack31_le(b"\x01") == 1
    assert pack31_le(b"\x00\x01") == 256
    assert pack31_le(b"\xff" * 31) == 256 ** 31 - 1
    # Short final chunk behaves as if zero-padded on the right.
    assert pack31_le(b"ab") == pack31_le(b"ab" + b"\x00" * 29)
    with pytest.raises(ValueError):
        pack31_le(b"\x00" * 32)


def test_chunk_geometry():
    assert num_chunks(MAX_EML_LEN) == 265
    chunks = list(iter_chunks(bytes(MAX_EML_LEN)))
    assert len(chunks) == 265
    assert len(chunks[-1]) == MAX_EML_LEN - 264 * CHUNK_LEN


def test_fold_order():
    buf = bytes(range(62))
    h1 = compress(0, pack31_le(buf[:31]))
    assert rolling_commitment(buf) == compress(h1, pack31_le(buf[31:]))


def test_pad_buffer_truncates_and_zero_fills():
    assert pad_buffer(b"abc", 8) == b"abc\x00\x00\x00\x00\x00"
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert pad_buffer(b"abcdefghij", 8) == b"abcdefgh"


def test_commitment_deterministic():
    rng = random.Random(1)
    buf = bytes(rng.randrange(256) for _ in range(MAX_EML_LEN))
    assert rolling_commitment(buf) == rolling_commitment(bytes(buf))


def test_single_byte_flip_changes_commitment():
    rng = random.Random(7)
    buf = bytearray(rng.randrange(256) for _ in range(MAX_EML_LEN))
    base = rolling_commitment(bytes(buf))
    for pos in [0, 30, 31, 4096, MAX_EML_LEN - 1] + rng.sample(range(MAX_EML_LEN), 3):
        flipped = bytearray(buf)
        flipped[pos] ^= 1 << rng.randrange(8)
        assert rolling_commitment(bytes(flipped)) != base, pos


def test_bytes_past_max_never_matter():
    doc = b"From: a@gmail.com\r\nTo: b\r\n" + b"z" * MAX_EML_LEN
    a = rolling_commitment(pad_buffer(doc))
    b = rolling_commitment(pad_buffer(doc + b"anything at all"))
    assert a == b
