"""EML receiver protocol constants.

Single source of truth for buffer geometry, field and hash parameters.
Keep this file stable. Witness builder and circuit must remain synchronized.
"""

# BN254 scalar field (circom / snarkjs bn128)
FIELD_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617
FIELD_BYTES = 32

# Buffer geometry
MAX_EML_LEN = 8192
CHUNK_LEN = 31  # 31 * 8 = 248 bits < 254, packing never wraps the field
BYTE_BITS = 8

# Poseidon(2): width t = 3, x^5 S-box
POSEIDON_T = 3
POSEIDON_ALPHA = 5
POSEIDON_FULL_ROUNDS = 8
POSEIDON_PARTIAL_ROUNDS = 57

# Literals required by the receiver statement: (signal name, bytes)
DEFAULT_LITERALS = (
    ("from", b"From:"),
    ("to", b"To:"),
    ("atg", b"@gmail.com"),
)

# Signal names
COMMITMENT_SIGNAL = "eml_commitment"
BUFFER_SIGNAL = "eml"
N_PUBLIC = 1


def num_chunks(max_len: int = MAX_EML_LEN) -> int:
    return -(-max_len // CHUNK_LEN)


def literal_signal(name: str) -> str:
    return f"{name}_bytes"


def selector_signal(name: str) -> str:
    return f"sel_{name}"

# iden3 binary containers consumed by snarkjs
# File header: [Magic(4) | Ver(4) | NSections(4)], section header: [Type(4) | Size(8)]
R1CS_MAGIC = b"r1cs"
R1CS_VERSION = 1
WTNS_MAGIC = b"wtns"
WTNS_VERSION = 2
FILE_HEADER_FMT = "<4sII"
SECTION_HEADER_FMT = "<IQ"

R1CS_SECTION_HEADER = 1
R1CS_SECTION_CONSTRAINTS = 2
R1CS_SECTION_WIRE2LABEL = 3
WTNS_SECTION_HEADER = 1
WTNS_SECTION_DATA = 2
