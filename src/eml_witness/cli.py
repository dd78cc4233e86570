"""EML Receiver - Witness builder CLI."""
from __future__ import annotations

import json
from pathlib import Path

import click

from eml_core.protocol import MAX_EML_LEN

from .builder import LiteralNotFoundError, build_input


@click.command()
@click.argument("eml", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=Path("input.json"), show_default=True)
@click.option("--max-len", type=int, default=MAX_EML_LEN, show_default=True)
def main(eml: Path, out: Path, max_len: int) -> None:
    """Build the circuit input for EML (a raw .eml message)."""
    try:
        payload = build_input(eml.read_bytes(), max_len=max_len)
    except LiteralNotFoundError as e:
        # Recoverable: pick another document. Reported before any proof attempt.
        print(f"FATAL: {e}")
        raise SystemExit(2)
    except Exception as e:
        print(f"FATAL: {e}")
        raise SystemExit(1)

    out.write_text(json.dumps(payload), encoding="utf-8")
    print(f"{out} written")


if __name__ == "__main__":
    main()
