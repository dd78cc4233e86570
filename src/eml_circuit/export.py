from __future__ import annotations

import struct
from pathlib import Path
from typing import BinaryIO, Sequence

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from eml_core.protocol import (
    FIELD_BYTES,
    FILE_HEADER_FMT,
    R1CS_MAGIC,
    R1CS_SECTION_CONSTRAINTS,
    R1CS_SECTION_HEADER,
    R1CS_SECTION_WIRE2LABEL,
    R1CS_VERSION,
    SECTION_HEADER_FMT,
    WTNS_MAGIC,
    WTNS_SECTION_DATA,
    WTNS_SECTION_HEADER,
    WTNS_VERSION,
)

from .r1cs import ConstraintSystem, LinearCombination


def _fe(x: int) -> bytes:
    return int(x).to_bytes(FIELD_BYTES, "little")


def _write_section(f: BinaryIO, kind: int, payload: bytes) -> None:
    f.write(struct.pack(SECTION_HEADER_FMT, kind, len(payload)))
    f.write(payload)


def _lc_bytes(lc: LinearCombination) -> bytes:
    parts = [struct.pack("<I", len(lc.terms))]
    for w, c in sorted(lc.terms.items()):
        parts.append(struct.pack("<I", w))
        parts.append(_fe(c))
    return b"".join(parts)


def write_r1cs(cs: ConstraintSystem, path: Path) -> None:
    """iden3 .r1cs v1: header, constraints and wire->label sections."""
    header = b"".join([
        struct.pack("<I", FIELD_BYTES),
        _fe(cs.prime),
        struct.pack("<IIII", cs.n_wires, 0, cs.n_public, cs.n_private),
        struct.pack("<Q", cs.n_wires),
        struct.pack("<I", cs.n_constraints),
    ])
    constraints = b"".join(
        _lc_bytes(con.a) + _lc_bytes(con.b) + _lc_bytes(con.c) for con in cs.constraints
    )
    wire2label = struct.pack(f"<{cs.n_wires}Q", *range(cs.n_wires))

    with open(path, "wb") as f:
        f.write(struct.pack(FILE_HEADER_FMT, R1CS_MAGIC, R1CS_VERSION, 3))
        _write_section(f, R1CS_SECTION_HEADER, header)
        _write_section(f, R1CS_SECTION_CONSTRAINTS, constraints)
        _write_section(f, R1CS_SECTION_WIRE2LABEL, wire2label)


def write_wtns(values: Sequence[int], prime: int, path: Path) -> None:
    """iden3 .wtns v2: header section then the full wire vector."""
    header = struct.pack("<I", FIELD_BYTES) + _fe(prime) + struct.pack("<I", len(values))
    data = b"".join(_fe(v) for v in values)

    with open(path, "wb") as f:
        f.write(struct.pack(FILE_HEADER_FMT, WTNS_MAGIC, WTNS_VERSION, 2))
        _write_section(f, WTNS_SECTION_HEADER, header)
        _write_section(f, WTNS_SECTION_DATA, data)


def read_wtns(path: Path) -> list[int]:
    b = Path(path).read_bytes()
    magic, ver, n_sections = struct.unpack_from(FILE_HEADER_FMT, b, 0)
    if magic != WTNS_MAGIC or ver != WTNS_VERSION:
        raise ValueError(f"FATAL: Not a wtns v{WTNS_VERSION} file: {path}")

    off = struct.calcsize(FILE_HEADER_FMT)
    n8 = n_witness = 0
    values: list[int] = []
    for _ in range(n_sections):
        kind, size = struct.unpack_from(SECTION_HEADER_FMT, b, off)
        off += struct.calcsize(SECTION_HEADER_FMT)
        if kind == WTNS_SECTION_HEADER:
            (n8,) = struct.unpack_from("<I", b, off)
            (n_witness,) = struct.unpack_from("<I", b, off + 4 + n8)
        elif kind == WTNS_SECTION_DATA:
            values = [
                int.from_bytes(b[off + i * n8:off + (i + 1) * n8], "little")
                for i in range(n_witness)
            ]
        off += size
    return values


def _visibility(cs: ConstraintSystem, wire: int) -> str:
    if wire == 0:
        return "one"
    if wire <= cs.n_public:
        return "public"
    if wire <= cs.n_public + cs.n_private:
        return "private"
    return "internal"


def write_constraint_tables(cs: ConstraintSystem, out_dir: Path) -> None:
    """circuit/signals.parquet and circuit/constraints.parquet."""
    (Path(out_dir) / "circuit").mkdir(parents=True, exist_ok=True)

    signals = pd.DataFrame({
        "wire": list(range(cs.n_wires)),
        "name": cs.wire_names,
        "visibility": [_visibility(cs, w) for w in range(cs.n_wires)],
    })
    signals_schema = pa.schema([
        ("wire", pa.int64()),
        ("name", pa.string()),
        ("visibility", pa.string()),
    ])
    pq.write_table(
        pa.Table.from_pandas(signals, schema=signals_schema, preserve_index=False),
        Path(out_dir) / "circuit/signals.parquet",
    )

    constraints = pd.DataFrame(
        [
            {
                "index": i,
                "gadget": con.gadget,
                "label": con.label,
                "a_terms": len(con.a.terms),
                "b_terms": len(con.b.terms),
                "c_terms": len(con.c.terms),
            }
            for i, con in enumerate(cs.constraints)
        ]
    )
    constraints_schema = pa.schema([
        ("index", pa.int64()),
        ("gadget", pa.string()),
        ("label", pa.string()),
        ("a_terms", pa.int32()),
        ("b_terms", pa.int32()),
        ("c_terms", pa.int32()),
    ])
    pq.write_table(
        pa.Table.from_pandas(constraints, schema=constraints_schema, preserve_index=False),
        Path(out_dir) / "circuit/constraints.parquet",
    )
