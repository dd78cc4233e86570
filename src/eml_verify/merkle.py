from pathlib import Path
import hashlib

from eml_core.protocol import R1CS_MAGIC

# Full-size r1cs files run to tens of MiB; hash them in blocks.
READ_BLOCK = 1 << 20

def leaf_hash(rel_path: str, path: Path) -> bytes:
    h = hashlib.sha256()
    h.update(rel_path.encode("utf-8"))
    h.update(b"\x00")
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(READ_BLOCK), b""):
            h.update(block)
    return h.digest()

def compute_integrity_root(root_dir: Path, rel_files: list[str]) -> str:
    """sha256 over the per-file leaves, in sorted path order."""
    acc = hashlib.sha256()
    for rel in sorted(rel_files):
        acc.update(leaf_hash(rel, root_dir / rel))
    return acc.hexdigest()

def looks_like_r1cs(p: Path) -> bool:
    with open(p, "rb") as f:
        return f.read(4) == R1CS_MAGIC
