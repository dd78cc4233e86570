import json
from pathlib import Path
from eml_core.protocol import FIELD_PRIME, N_PUBLIC
from .const import ERRORS
from .crypto import verify_ed25519
from .merkle import compute_integrity_root, looks_like_r1cs

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

def _load_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))

def _canonical_json_bytes(obj) -> bytes:
    return json.dumps(obj, **CANONICAL_JSON_KW).encode("utf-8")

def _fail(errors: list, code: str, **detail) -> dict:
    errors.append({"code": code, "message": ERRORS[code], **detail})
    return {"status": "FAIL", "error_count": len(errors), "errors": errors}

def find_repo_root(start: Path) -> Path:
    cur = start.resolve()
    # Artefacts may live anywhere on disk, so do not assume a fixed parent depth.
    for p in (cur,) + tuple(cur.parents):
        if (p / "governance" / "trust_store.json").exists() or (p / "pyproject.toml").exists():
            return p
    return cur

def verify_public_signals(public) -> dict:
    errors = []
    if not isinstance(public, list) or len(public) != N_PUBLIC:
        count = len(public) if isinstance(public, list) else None
        return _fail(errors, "E_PUBLIC_COUNT", expected=N_PUBLIC, found=count)
    for v in public:
        try:
            x = int(str(v), 10)
        except ValueError:
            return _fail(errors, "E_PUBLIC_RANGE", value=str(v))
        if not 0 <= x < FIELD_PRIME:
            return _fail(errors, "E_PUBLIC_RANGE", value=str(v))
    return {"status": "PASS", "error_count": 0, "errors": []}

def verify_artifact(artifact_dir: Path, repo_root: Path | None = None, trust_store: Path | None = None) -> dict:
    errors = []
    if repo_root is None:
        repo_root = find_repo_root(artifact_dir)

    manifest_path = artifact_dir / "manifest.json"
    sig_path = artifact_dir / "sig" / "manifest.sig"
    pub_path = artifact_dir / "sig" / "publisher.pub"
    gov_trust = trust_store or repo_root / "governance" / "trust_store.json"

    for p in [manifest_path, sig_path, pub_path]:
        if not p.exists():
            return _fail(errors, "E_LAYOUT_MISSING", path=str(p))

    try:
        manifest_obj = _load_json(manifest_path)
    except (OSError, json.JSONDecodeError) as e:
        return _fail(errors, "E_MANIFEST_JSON", detail=str(e))

    pub = pub_path.read_bytes()
    sig = sig_path.read_bytes()
    if not verify_ed25519(pub, _canonical_json_bytes(manifest_obj), sig):
        return _fail(errors, "E_SIG_INVALID")

    integrity = manifest_obj.get("integrity", {})
    expected_root = integrity.get("merkle_root", "")
    rel_files = integrity.get("files", [])

    try:
        computed = compute_integrity_root(artifact_dir, rel_files)
    except OSError as e:
        return _fail(errors, "E_INTEGRITY_MISMATCH", detail=str(e))
    if expected_root != computed:
        return _fail(errors, "E_INTEGRITY_MISMATCH", expected=expected_root, computed=computed)

    for rel in rel_files:
        if rel.endswith(".r1cs"):
            p = artifact_dir / rel
            if not looks_like_r1cs(p):
                return _fail(errors, "E_R1CS_MAGIC", path=str(p))

    n_public = manifest_obj.get("circuit", {}).get("n_public")
    if n_public != N_PUBLIC:
        return _fail(errors, "E_PUBLIC_COUNT", expected=N_PUBLIC, found=n_public)

    trust = _load_json(gov_trust) if gov_trust.exists() else {"trusted_publishers": []}
    trusted = set([x.lower() for x in trust.get("trusted_publishers", [])])
    pub_hex = pub.hex().lower()
    if pub_hex not in trusted:
        return _fail(errors, "E_POLICY_TRUST", publisher_pub=pub_hex)

    return {"status": "PASS", "error_count": 0, "errors": []}
