import json
import subprocess
import sys
from pathlib import Path

MAX = 256

def run(cmd, cwd):
    return subprocess.run(cmd, cwd=cwd, check=False, capture_output=True, text=True)

def test_build_check_and_corrupt(tmp_path):
    repo = Path(__file__).resolve().parents[1]
    msgs = tmp_path / "messages"
    inp = tmp_path / "input.json"
    wit = tmp_path / "witness"

    r = run([sys.executable, "tools/make_sample_eml.py", str(msgs)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    eml = next(msgs.glob("message-*.eml"))

    r = run([sys.executable, "-m", "eml_witness.cli", str(eml), "--out", str(inp), "--max-len", str(MAX)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    payload = json.loads(inp.read_text(encoding="utf-8"))
    assert len(payload["eml"]) == MAX

    r = run([sys.executable, "-m", "eml_circuit.cli", "check", str(inp), "--max-len", str(MAX)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert json.loads(r.stdout)["status"] == "SATISFIED"

    r = run([sys.executable, "-m", "eml_circuit.cli", "witness", str(inp), str(wit), "--max-len", str(MAX)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert json.loads((wit / "public.json").read_text(encoding="utf-8")) == [payload["eml_commitment"]]
    assert (wit / "witness.wtns").read_bytes()[:4] == b"wtns"

    # Corrupt and ensure failure
    r = run([sys.executable, "scripts/corrupt_one_byte.py", str(inp)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    r = run([sys.executable, "-m", "eml_circuit.cli", "check", str(inp), "--max-len", str(MAX)], cwd=repo)
    assert r.returncode != 0
    assert json.loads(r.stdout)["status"] == "UNSATISFIED"

def test_missing_literal_exit_code(tmp_path):
    repo = Path(__file__).resolve().parents[1]
    msgs = tmp_path / "messages"
    r = run([sys.executable, "tools/make_sample_eml.py", str(msgs), "--no-to"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    eml = next(msgs.glob("message-*.eml"))

    r = run([sys.executable, "-m", "eml_witness.cli", str(eml), "--out", str(tmp_path / "input.json")], cwd=repo)
    assert r.returncode == 2
    assert r.stdout.startswith("FATAL:")
    assert not (tmp_path / "input.json").exists()
