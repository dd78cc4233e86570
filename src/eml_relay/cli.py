"""EML Receiver - Relayer submission CLI."""
from __future__ import annotations

import json
from pathlib import Path

import click

from eml_verify.logic import verify_public_signals

from .client import RelayerClient
from .config import settings
from .leaf import public_inputs_hash, statement_leaf
from .recorder import AggregationReceipt, Recorder


def _read_json(p: Path):
    return json.loads(p.read_text(encoding="utf-8"))


@click.group()
def main() -> None:
    pass


@main.command("leaf")
@click.argument("public", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--vk-hash", required=True)
def leaf_cmd(public: Path, vk_hash: str) -> None:
    """Print the public-inputs hash and aggregation leaf for PUBLIC."""
    pub = _read_json(public)
    click.echo(json.dumps({
        "publicInputsHash": "0x" + public_inputs_hash(pub).hex(),
        "leaf": "0x" + statement_leaf(vk_hash, pub).hex(),
    }, sort_keys=True, separators=(",", ":")))


@main.command("submit")
@click.option("--proof", "proof_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=Path("proof.json"))
@click.option("--public", "public_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=Path("public.json"))
@click.option("--vkey", "vkey_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=Path("build/vkey.json"))
@click.option("--cache", "cache_path", type=click.Path(dir_okay=False, path_type=Path), default=Path("relayer/circom-vkey.json"))
def submit_cmd(proof_path: Path, public_path: Path, vkey_path: Path, cache_path: Path) -> None:
    """Register VK, submit proof, wait for aggregation, record on-chain."""
    public = _read_json(public_path)
    check = verify_public_signals(public)
    if check["status"] != "PASS":
        print(f"FATAL: {check['errors'][0]['message']}")
        raise SystemExit(1)

    try:
        client = RelayerClient(settings)
        reg = client.register_vk(_read_json(vkey_path), cache_path)
        vk_hash = client.vk_hash(reg)
        job_id = client.submit_proof(_read_json(proof_path), public, vk_hash)
        job = client.wait_for_aggregation(job_id)
    except Exception as e:
        print(f"FATAL: {e}")
        raise SystemExit(1)

    if not settings.PRIVATE_KEY:
        print("Wallet env not set; skipping on-chain record.")
        return

    receipt = AggregationReceipt.from_job(job, settings.DOMAIN_ID)
    pih = public_inputs_hash(public)
    computed = statement_leaf(vk_hash, public, settings.PROOF_TYPE)
    recorder = Recorder(settings)
    try:
        ok = recorder.verify_aggregation(receipt, receipt.effective_leaf(computed))
    except Exception as e:
        print(f"FATAL: zkVerify view call failed: {e}")
        raise SystemExit(1)
    if not ok:
        print("FATAL: zkVerify view returned false; not recording")
        raise SystemExit(1)

    print("Recording aggregation to contract...")
    try:
        recorder.record(receipt, pih, computed)
    except Exception as e:
        print(f"FATAL: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
