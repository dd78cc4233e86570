import json
import sys
from pathlib import Path

def main():
    if len(sys.argv) not in (2, 3):
        print("Usage: corrupt_one_byte.py <input.json> [selector_name]")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    sel_name = sys.argv[2] if len(sys.argv) == 3 else "sel_atg"
    payload = json.loads(p.read_text(encoding="utf-8"))

    sel = [int(x) for x in payload[sel_name]]
    if 1 not in sel:
        print(f"No occurrence selected in {sel_name}.")
        raise SystemExit(2)

    # Flip one bit inside the selected literal occurrence, keep the old selector
    # and the old commitment.
    idx = sel.index(1) + 1
    payload["eml"][idx] = str(int(payload["eml"][idx]) ^ 0x01)
    p.write_text(json.dumps(payload), encoding="utf-8")
    print(f"Corrupted 1 byte at offset {idx} in {p}")

if __name__ == "__main__":
    main()
