import json
from pathlib import Path
import click
from .logic import verify_artifact, verify_public_signals

def _emit(result: dict) -> None:
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["status"] != "PASS":
        raise SystemExit(1)

@click.group()
def main():
    pass

@main.command("artifact")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--trust-store", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
def artifact_cmd(path: Path, trust_store: Path | None):
    _emit(verify_artifact(path, trust_store=trust_store))

@main.command("public")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def public_cmd(path: Path):
    _emit(verify_public_signals(json.loads(path.read_text(encoding="utf-8"))))

if __name__ == "__main__":
    main()
