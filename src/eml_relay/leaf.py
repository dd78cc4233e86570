"""Aggregation leaf derivation for the single public commitment."""
from __future__ import annotations

import hashlib
from typing import Sequence

from web3 import Web3


def to_be_bytes32(value) -> bytes:
    n = int(str(value), 10)
    if n < 0 or n.bit_length() > 256:
        raise ValueError("public input > 256 bits")
    return n.to_bytes(32, "big")


def public_inputs_hash(public: Sequence) -> bytes:
    """keccak256 over the concatenated 32-byte big-endian public inputs."""
    return bytes(Web3.keccak(b"".join(to_be_bytes32(x) for x in public)))


def statement_leaf(vk_hash: str, public: Sequence, proof_type: str = "groth16", version: bytes = b"") -> bytes:
    """keccak(provingId || vkHash || versionHash || keccak(reverse(publicInputsHash)))."""
    proving_id = Web3.keccak(text=proof_type)
    version_hash = hashlib.sha256(version).digest()
    inner = Web3.keccak(public_inputs_hash(public)[::-1])
    return bytes(Web3.solidity_keccak(
        ["bytes32", "bytes32", "bytes32", "bytes32"],
        [proving_id, Web3.to_bytes(hexstr=vk_hash), version_hash, inner],
    ))
