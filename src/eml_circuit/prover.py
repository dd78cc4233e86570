"""Proof boundary: snarkjs groth16 prove / verify.

The proving system is external; these helpers only invoke it and
read back proof.json / public.json.
"""
from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path

SNARKJS = "snarkjs"


def _snarkjs() -> str:
    exe = shutil.which(SNARKJS)
    if exe is None:
        raise FileNotFoundError("FATAL: snarkjs executable not found on PATH")
    return exe


def prove(zkey: Path, wtns: Path, out_dir: Path) -> tuple[dict, list[str]]:
    out_dir.mkdir(parents=True, exist_ok=True)
    proof_path = out_dir / "proof.json"
    public_path = out_dir / "public.json"
    r = subprocess.run(
        [_snarkjs(), "groth16", "prove", str(zkey), str(wtns), str(proof_path), str(public_path)],
        capture_output=True,
        text=True,
        check=False,
    )
    if r.returncode != 0:
        raise RuntimeError(f"FATAL: snarkjs prove failed: {(r.stderr or r.stdout).strip()}")
    proof = json.loads(proof_path.read_text(encoding="utf-8"))
    public = json.loads(public_path.read_text(encoding="utf-8"))
    return proof, public


def verify(vkey: Path, public: Path, proof: Path) -> bool:
    r = subprocess.run(
        [_snarkjs(), "groth16", "verify", str(vkey), str(public), str(proof)],
        capture_output=True,
        text=True,
        check=False,
    )
    return r.returncode == 0 and "OK" in r.stdout
