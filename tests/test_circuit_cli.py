import json
import subprocess

from click.testing import CliRunner

from eml_circuit import prover
from eml_circuit.cli import main


class Done:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def _fake_snarkjs(monkeypatch, public=("42",)):
    calls = []

    def fake_run(cmd, **kw):
        calls.append(cmd)
        if cmd[1:3] == ["groth16", "prove"]:
            with open(cmd[-2], "w", encoding="utf-8") as f:
                json.dump({"protocol": "groth16"}, f)
            with open(cmd[-1], "w", encoding="utf-8") as f:
                json.dump(list(public), f)
            return Done()
        return Done(0, "[INFO]  snarkJS: OK!")

    monkeypatch.setattr(prover.shutil, "which", lambda name: "/usr/bin/snarkjs")
    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


def _witness_dir(tmp_path):
    wit = tmp_path / "witness"
    wit.mkdir()
    (wit / "witness.wtns").write_bytes(b"wtns")
    zkey = tmp_path / "receiver.zkey"
    zkey.write_bytes(b"zkey")
    return zkey, wit


def test_prove_writes_proof_next_to_witness(tmp_path, monkeypatch):
    calls = _fake_snarkjs(monkeypatch)
    zkey, wit = _witness_dir(tmp_path)

    r = CliRunner().invoke(main, ["prove", str(zkey), str(wit)])
    assert r.exit_code == 0, r.output
    assert "PASS" in r.output
    assert json.loads((wit / "proof.json").read_text(encoding="utf-8")) == {"protocol": "groth16"}
    assert calls[0][3:5] == [str(zkey), str(wit / "witness.wtns")]


def test_prove_without_witness_fails_closed(tmp_path, monkeypatch):
    _fake_snarkjs(monkeypatch)
    zkey, wit = _witness_dir(tmp_path)
    (wit / "witness.wtns").unlink()

    r = CliRunner().invoke(main, ["prove", str(zkey), str(wit)])
    assert r.exit_code == 1
    assert r.output.startswith("FATAL:")
    assert not (wit / "proof.json").exists()


def test_prove_rejects_extra_public_signals(tmp_path, monkeypatch):
    _fake_snarkjs(monkeypatch, public=("1", "2"))
    zkey, wit = _witness_dir(tmp_path)

    r = CliRunner().invoke(main, ["prove", str(zkey), str(wit)])
    assert r.exit_code == 1
    assert "expected 1" in r.output


def test_prove_snarkjs_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(prover.shutil, "which", lambda name: "/usr/bin/snarkjs")
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: Done(1, "", "bad zkey"))
    zkey, wit = _witness_dir(tmp_path)

    r = CliRunner().invoke(main, ["prove", str(zkey), str(wit)])
    assert r.exit_code == 1
    assert r.output.count("FATAL:") == 1
    assert "bad zkey" in r.output


def test_verify_accepts_and_rejects(tmp_path, monkeypatch):
    files = []
    for name in ("vkey.json", "public.json", "proof.json"):
        p = tmp_path / name
        p.write_text("{}", encoding="utf-8")
        files.append(str(p))

    _fake_snarkjs(monkeypatch)
    r = CliRunner().invoke(main, ["verify", *files])
    assert r.exit_code == 0, r.output
    assert "PASS" in r.output

    monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: Done(1, "[ERROR] snarkJS: Invalid proof"))
    r = CliRunner().invoke(main, ["verify", *files])
    assert r.exit_code == 1
    assert r.output.startswith("FATAL:")


def test_verify_without_snarkjs(tmp_path, monkeypatch):
    monkeypatch.setattr(prover.shutil, "which", lambda name: None)
    files = []
    for name in ("vkey.json", "public.json", "proof.json"):
        p = tmp_path / name
        p.write_text("{}", encoding="utf-8")
        files.append(str(p))

    r = CliRunner().invoke(main, ["verify", *files])
    assert r.exit_code == 1
    assert "snarkjs executable not found" in r.output


def test_check_with_too_small_max_len_is_fatal(tmp_path):
    inp = tmp_path / "input.json"
    inp.write_text("{}", encoding="utf-8")

    r = CliRunner().invoke(main, ["check", str(inp), "--max-len", "4"])
    assert r.exit_code == 1
    assert r.exception is None or isinstance(r.exception, SystemExit)
    assert r.output.startswith("FATAL: Literal")
    assert "Traceback" not in r.output


def test_stats_with_too_small_max_len_is_fatal():
    r = CliRunner().invoke(main, ["stats", "--max-len", "4"])
    assert r.exit_code == 1
    assert r.output.startswith("FATAL: Literal")
