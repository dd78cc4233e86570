import pytest

from eml_core.commitment import rolling_commitment
from eml_core.protocol import DEFAULT_LITERALS
from eml_circuit.receiver import build_receiver_circuit
from eml_witness.builder import one_hot

SMALL_MAX = 128

# From: at 12, To: at 40, @gmail.com at 77
SCENARIO_OFFSETS = {"from": 12, "to": 40, "atg": 77}


def scenario_message(length: int = 96) -> bytes:
    b = bytearray(b"x" * length)
    b[12:17] = b"From:"
    b[40:43] = b"To:"
    b[77:87] = b"@gmail.com"
    return bytes(b)


def payload_for(buffer: bytes, positions: dict, literals=DEFAULT_LITERALS) -> dict:
    payload = {
        "eml_commitment": str(rolling_commitment(buffer)),
        "eml": [str(x) for x in buffer],
    }
    for name, lit in literals:
        payload[f"{name}_bytes"] = [str(x) for x in lit]
    for name, _ in literals:
        payload[f"sel_{name}"] = [str(x) for x in one_hot(len(buffer), positions[name])]
    return payload


@pytest.fixture(scope="session")
def small_circuit():
    return build_receiver_circuit(SMALL_MAX)


@pytest.fixture(scope="session")
def unpinned_circuit():
    return build_receiver_circuit(SMALL_MAX, pin_literals=False)
