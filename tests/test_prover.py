import json
import subprocess

import pytest

from eml_circuit import prover


class Done:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def test_prove_reads_back_outputs(tmp_path, monkeypatch):
    calls = []

    def fake_run(cmd, **kw):
        calls.append(cmd)
        proof_path, public_path = cmd[-2], cmd[-1]
        with open(proof_path, "w", encoding="utf-8") as f:
            json.dump({"protocol": "groth16"}, f)
        with open(public_path, "w", encoding="utf-8") as f:
            json.dump(["42"], f)
        return Done()

    monkeypatch.setattr(prover.shutil, "which", lambda name: "/usr/bin/snarkjs")
    monkeypatch.setattr(subprocess, "run", fake_run)
    proof, public = prover.prove(tmp_path / "k.zkey", tmp_path / "w.wtns", tmp_path / "out")
    assert proof == {"protocol": "groth16"}
    assert public == ["42"]
    assert calls[0][:3] == ["/usr/bin/snarkjs", "groth16", "prove"]


def test_prove_failure_is_fatal(tmp_path, monkeypatch):
    monkeypatch.setattr(prover.shutil, "which", lambda name: "/usr/bin/snarkjs")
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: Done(1, "", "bad zkey"))
    with pytest.raises(RuntimeError, match="bad zkey"):
        prover.prove(tmp_path / "k.zkey", tmp_path / "w.wtns", tmp_path / "out")


def test_verify(tmp_path, monkeypatch):
    monkeypatch.setattr(prover.shutil, "which", lambda name: "/usr/bin/snarkjs")
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: Done(0, "[INFO]  snarkJS: OK!"))
    assert prover.verify(tmp_path / "v.json", tmp_path / "p.json", tmp_path / "proof.json")
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: Done(1, "[ERROR] snarkJS: Invalid proof"))
    assert not prover.verify(tmp_path / "v.json", tmp_path / "p.json", tmp_path / "proof.json")


def test_missing_snarkjs(tmp_path, monkeypatch):
    monkeypatch.setattr(prover.shutil, "which", lambda name: None)
    with pytest.raises(FileNotFoundError):
        prover.verify(tmp_path / "v.json", tmp_path / "p.json", tmp_path / "proof.json")
