"""Constraint census - where the receiver circuit spends its constraints."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query.py <artifact_path> [label_prefix]")
        print("Example: python query.py build/ atg")
        sys.exit(1)

    artifact = Path(sys.argv[1])
    prefix = sys.argv[2] if len(sys.argv) > 2 else ""

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW constraints AS SELECT * FROM '{artifact}/circuit/constraints.parquet'")
    con.execute(f"CREATE VIEW signals AS SELECT * FROM '{artifact}/circuit/signals.parquet'")

    sql = """
    SELECT
        gadget,
        COUNT(*) AS constraints,
        MAX(a_terms + b_terms + c_terms) AS widest
    FROM constraints
    WHERE label LIKE ? || '%'
    GROUP BY gadget
    ORDER BY constraints DESC
    """

    print(f"--- Constraint census: {artifact} ---")
    if prefix:
        print(f"--- Labels starting with {prefix!r} ---")
    print()

    df = con.execute(sql, [prefix]).fetchdf()
    if df.empty:
        print("No constraints matched.")
    else:
        for _, row in df.iterrows():
            print(f"{row['gadget']:<16} {row['constraints']:>8}  (widest row: {row['widest']} terms)")

    vis = con.execute("SELECT visibility, COUNT(*) AS n FROM signals GROUP BY visibility ORDER BY visibility").fetchdf()
    print()
    for _, row in vis.iterrows():
        print(f"{row['visibility']:<10} {row['n']:>8} wires")


if __name__ == "__main__":
    main()
