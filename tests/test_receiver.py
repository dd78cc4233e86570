import pytest

from eml_core.commitment import rolling_commitment
from eml_core.protocol import DEFAULT_LITERALS
from eml_circuit.receiver import build_receiver_circuit, expected_constraint_count
from eml_witness.builder import build_input

from conftest import SCENARIO_OFFSETS, SMALL_MAX, payload_for, scenario_message


def _scenario_buffer() -> bytes:
    return scenario_message().ljust(SMALL_MAX, b"\x00")


def test_layout_has_single_public_signal(small_circuit):
    cs = small_circuit.cs
    assert cs.n_public == 1
    assert cs.wire_names[1] == "eml_commitment"
    assert cs.n_private == SMALL_MAX + sum(len(lit) for _, lit in DEFAULT_LITERALS) + 3 * SMALL_MAX


def test_constraint_count_is_data_independent(small_circuit, unpinned_circuit):
    lengths = [len(lit) for _, lit in DEFAULT_LITERALS]
    assert small_circuit.cs.n_constraints == expected_constraint_count(SMALL_MAX, lengths, True)
    assert unpinned_circuit.cs.n_constraints == expected_constraint_count(SMALL_MAX, lengths, False)


def test_end_to_end_scenario_is_satisfiable(small_circuit):
    buf = _scenario_buffer()
    payload = build_input(scenario_message(), max_len=SMALL_MAX)
    assert payload == payload_for(buf, SCENARIO_OFFSETS)

    result = small_circuit.check(payload)
    assert result["status"] == "SATISFIED"
    assert result["public"] == [str(rolling_commitment(buf))]


def test_flipped_marker_byte_with_old_selector_fails(small_circuit):
    buf = bytearray(_scenario_buffer())
    buf[80] ^= 0x01
    # Stale commitment: the commitment check rejects first.
    stale = payload_for(bytes(_scenario_buffer()), SCENARIO_OFFSETS)
    stale["eml"] = [str(x) for x in buf]
    assert small_circuit.check(stale)["failing"]["gadget"] == "commitment"

    # Fresh commitment: the occurrence check still rejects the old selector.
    fresh = payload_for(bytes(buf), SCENARIO_OFFSETS)
    result = small_circuit.check(fresh)
    assert result["status"] == "UNSATISFIED"
    assert result["failing"]["gadget"] == "literal_match"
    assert result["failing"]["label"].startswith("atg.match[77]")


def test_commitment_mismatch_fails(small_circuit):
    payload = payload_for(_scenario_buffer(), SCENARIO_OFFSETS)
    payload["eml_commitment"] = str(int(payload["eml_commitment"]) + 1)
    assert small_circuit.check(payload)["failing"]["gadget"] == "commitment"


def test_out_of_range_byte_fails(small_circuit):
    payload = payload_for(_scenario_buffer(), SCENARIO_OFFSETS)
    payload["eml"][100] = "300"
    failing = small_circuit.check(payload)["failing"]
    assert failing["gadget"] == "num2bits"
    assert failing["label"].startswith("eml[100]")


def test_selector_at_wrong_offset_fails(small_circuit):
    positions = dict(SCENARIO_OFFSETS, to=41)
    result = small_circuit.check(payload_for(_scenario_buffer(), positions))
    assert result["failing"]["label"].startswith("to.match[41]")


def test_substituted_literal_rejected_only_when_pinned(small_circuit, unpinned_circuit):
    # Same lengths, different bytes: "From:" -> "xxxxx" located at offset 0.
    buf = _scenario_buffer()
    literals = [("from", b"xxxxx"), ("to", b"To:"), ("atg", b"@gmail.com")]
    positions = dict(SCENARIO_OFFSETS, **{"from": 0})
    payload = payload_for(buf, positions, literals)

    assert unpinned_circuit.check(payload)["status"] == "SATISFIED"
    failing = small_circuit.check(payload)["failing"]
    assert failing["gadget"] == "literal_pin"


def test_malformed_payload_is_fatal(small_circuit):
    payload = payload_for(_scenario_buffer(), SCENARIO_OFFSETS)
    del payload["sel_to"]
    with pytest.raises(ValueError, match="sel_to"):
        small_circuit.solve(payload)
    payload = payload_for(_scenario_buffer(), SCENARIO_OFFSETS)
    payload["eml"] = payload["eml"][:-1]
    with pytest.raises(ValueError, match="expects"):
        small_circuit.solve(payload)


def test_literal_longer_than_buffer_is_rejected():
    with pytest.raises(ValueError):
        build_receiver_circuit(8, [("atg", b"@gmail.com")])
