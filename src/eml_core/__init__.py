"""EML Core - Shared protocol constants, Poseidon and commitment."""
from .commitment import pack31_le, pad_buffer, rolling_commitment
from .poseidon import compress, poseidon

__all__ = ["pack31_le", "pad_buffer", "rolling_commitment", "compress", "poseidon"]
