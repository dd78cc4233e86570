"""EML Receiver - Circuit compiler and witness solver."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import NoReturn

import click

from eml_core.protocol import DEFAULT_LITERALS, MAX_EML_LEN
from eml_verify.crypto import publisher_pubkey, sign_ed25519
from eml_verify.merkle import compute_integrity_root

from . import prover
from .export import write_constraint_tables, write_r1cs, write_wtns
from .receiver import build_receiver_circuit, expected_constraint_count

# Canonical test key - for gold artefacts only
# In production, load from HSM/Vault
CANONICAL_TEST_KEY = bytes.fromhex(
    "a665a45920422f9d417e4867efdc4fb8a04a1f3fff1fa07e998e86f7f7a27ae3"
)

# Fixed timestamp for deterministic gold artefacts
GOLD_TIMESTAMP = "2026-01-01T00:00:00Z"

R1CS_NAME = "circuit/receiver.r1cs"


def compile_circuit(
    out_path: Path,
    max_len: int = MAX_EML_LEN,
    pin_literals: bool = True,
    signing_key: bytes | None = None,
    timestamp: str | None = None,
) -> dict:
    """Compile the receiver circuit into a signed artefact directory."""
    print(f"Compiling receiver circuit: max_len={max_len}")

    seed = signing_key or CANONICAL_TEST_KEY
    pub = publisher_pubkey(seed)
    if timestamp is None:
        timestamp = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

    circuit = build_receiver_circuit(max_len, DEFAULT_LITERALS, pin_literals)

    out_path.mkdir(parents=True, exist_ok=True)
    (out_path / "circuit").mkdir(exist_ok=True)
    (out_path / "sig").mkdir(exist_ok=True)

    write_r1cs(circuit.cs, out_path / R1CS_NAME)
    write_constraint_tables(circuit.cs, out_path)

    files_rel = sorted(
        f.relative_to(out_path).as_posix()
        for f in (out_path / "circuit").rglob("*")
        if f.is_file()
    )
    integrity_root = compute_integrity_root(out_path, files_rel)

    manifest = {
        "spec": "1.0",
        "created": timestamp,
        "circuit": {
            **circuit.manifest_params(),
            "r1cs": R1CS_NAME,
            "gadgets": circuit.cs.stats(),
        },
        "integrity": {
            "schema": "eml-integrity-v1",
            "algorithm": "sha256",
            "files": files_rel,
            "merkle_root": integrity_root,
        },
        "publisher": {"pubkey": pub.hex()},
    }

    man_bytes = json.dumps(
        manifest, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")

    (out_path / "manifest.json").write_bytes(man_bytes)
    signature, _ = sign_ed25519(seed, man_bytes)
    (out_path / "sig/manifest.sig").write_bytes(signature)
    (out_path / "sig/publisher.pub").write_bytes(pub)

    print(f"PASS: Circuit artefact generated at {out_path}")
    print(f"  Wires: {circuit.cs.n_wires}")
    print(f"  Constraints: {circuit.cs.n_constraints}")
    print(f"  Publisher: {pub.hex()}")
    return manifest


def _load_payload(path: Path) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _fatal(e: Exception) -> NoReturn:
    # Fail closed, with a single-line reason.
    msg = str(e)
    print(msg if msg.startswith("FATAL:") else f"FATAL: {msg}")
    raise SystemExit(1)


@click.group()
def main() -> None:
    """EML receiver circuit tooling."""


@main.command("compile")
@click.argument("out", type=click.Path(path_type=Path))
@click.option("--max-len", type=int, default=MAX_EML_LEN, show_default=True)
@click.option("--unpinned", is_flag=True, help="Leave literal signals unconstrained (legacy statement)")
@click.option("--gold", is_flag=True, help="Use canonical test key and timestamp for gold artefact")
def compile_cmd(out: Path, max_len: int, unpinned: bool, gold: bool) -> None:
    """Compile the circuit into OUT (r1cs, tables, signed manifest)."""
    try:
        compile_circuit(
            out,
            max_len=max_len,
            pin_literals=not unpinned,
            timestamp=GOLD_TIMESTAMP if gold else None,
        )
    except Exception as e:
        _fatal(e)


@main.command("witness")
@click.argument("input_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(path_type=Path))
@click.option("--max-len", type=int, default=MAX_EML_LEN, show_default=True)
@click.option("--unpinned", is_flag=True)
def witness_cmd(input_json: Path, out: Path, max_len: int, unpinned: bool) -> None:
    """Solve INPUT_JSON, check every constraint, write witness.wtns and public.json."""
    try:
        circuit = build_receiver_circuit(max_len, DEFAULT_LITERALS, not unpinned)
        values = circuit.solve(_load_payload(input_json))
        failure = circuit.cs.first_failure(values)
        if failure is not None:
            index, con = failure
            raise ValueError(f"Constraint {index} ({con.gadget}: {con.label}) not satisfied")
        out.mkdir(parents=True, exist_ok=True)
        write_wtns(values, circuit.cs.prime, out / "witness.wtns")
        public = [str(x) for x in circuit.public_signals(values)]
        (out / "public.json").write_text(json.dumps(public), encoding="utf-8")
    except Exception as e:
        _fatal(e)
    print(f"PASS: witness written to {out}")


@main.command("check")
@click.argument("input_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-len", type=int, default=MAX_EML_LEN, show_default=True)
@click.option("--unpinned", is_flag=True)
def check_cmd(input_json: Path, max_len: int, unpinned: bool) -> None:
    """Report whether INPUT_JSON satisfies the receiver circuit."""
    try:
        circuit = build_receiver_circuit(max_len, DEFAULT_LITERALS, not unpinned)
        result = circuit.check(_load_payload(input_json))
    except ValueError as e:
        _fatal(e)
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":")))
    if result["status"] != "SATISFIED":
        raise SystemExit(1)


@main.command("stats")
@click.option("--max-len", type=int, default=MAX_EML_LEN, show_default=True)
@click.option("--unpinned", is_flag=True)
def stats_cmd(max_len: int, unpinned: bool) -> None:
    """Constraint count per gadget."""
    try:
        circuit = build_receiver_circuit(max_len, DEFAULT_LITERALS, not unpinned)
    except ValueError as e:
        _fatal(e)
    click.echo(json.dumps({
        "max_len": max_len,
        "n_wires": circuit.cs.n_wires,
        "n_constraints": circuit.cs.n_constraints,
        "expected": expected_constraint_count(max_len, [len(lit) for _, lit in DEFAULT_LITERALS], not unpinned),
        "gadgets": circuit.cs.stats(),
    }, sort_keys=True, indent=2))


@main.command("prove")
@click.argument("zkey", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("witness_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--out", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory for proof.json / public.json (defaults to WITNESS_DIR)")
def prove_cmd(zkey: Path, witness_dir: Path, out: Path | None) -> None:
    """Run groth16 prove on WITNESS_DIR/witness.wtns, write proof.json and public.json."""
    out = out or witness_dir
    try:
        wtns = witness_dir / "witness.wtns"
        if not wtns.exists():
            raise FileNotFoundError(f"Missing witness file {wtns}")
        _, public = prover.prove(zkey, wtns, out)
        if len(public) != 1:
            raise ValueError(f"Prover returned {len(public)} public signals, expected 1")
    except Exception as e:
        _fatal(e)
    print(f"PASS: proof written to {out / 'proof.json'}")


@main.command("verify")
@click.argument("vkey", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("public", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("proof", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def verify_cmd(vkey: Path, public: Path, proof: Path) -> None:
    """Check PROOF against VKEY and PUBLIC."""
    try:
        ok = prover.verify(vkey, public, proof)
    except Exception as e:
        _fatal(e)
    if not ok:
        print("FATAL: proof rejected by verifier")
        raise SystemExit(1)
    print("PASS: proof verified")


if __name__ == "__main__":
    main()
