#!/usr/bin/env python3
"""Build the DuckDB database from CSV data files.

Expects ``heroes.csv`` (name, role, image_ref) and ``players.csv``
(team_name, name, role, is_substitute, substitute_order) in the data
directory. Saved matches are not touched when rebuilding an existing file.

Usage:
    python scripts/build_duckdb.py [data_path] [output_path]

Default data_path: data/csv (relative to repo root)
"""
import sys
from pathlib import Path

import duckdb

from mlbb_draft.repositories.draft_repository import DraftRepository

CSV_TABLES = {
    "heroes": ["name", "role", "image_ref"],
    "players": ["team_name", "name", "role", "is_substitute", "substitute_order"],
}


def build_duckdb(data_path: Path, output_path: Path | None = None) -> Path:
    """Load hero and roster CSV files into the database at output_path.

    Args:
        data_path: Directory containing heroes.csv / players.csv
        output_path: Where to write the .duckdb file (default: data_path/../mlbb_draft.duckdb)

    Returns:
        Path to the database file
    """
    if output_path is None:
        output_path = data_path.parent / "mlbb_draft.duckdb"

    # Creates the schema if the file is new
    DraftRepository(output_path, create=True)

    with duckdb.connect(str(output_path)) as conn:
        for table_name, columns in CSV_TABLES.items():
            csv_file = data_path / f"{table_name}.csv"
            if not csv_file.exists():
                print(f"  - {table_name}: {csv_file.name} not found, skipped")
                continue

            column_list = ", ".join(columns)
            conn.execute(f"DELETE FROM {table_name}")
            conn.execute(
                f"INSERT INTO {table_name} ({column_list}) "
                f"SELECT {column_list} FROM read_csv('{csv_file}', header=true)"
            )
            row_count = conn.execute(f"SELECT COUNT(*) FROM {table_name}").fetchone()[0]
            print(f"  ✓ {table_name}: {row_count:,} rows")

    return output_path


def main():
    script_dir = Path(__file__).parent
    repo_root = script_dir.parent.parent  # backend/scripts -> backend -> repo root
    data_path = Path(sys.argv[1]) if len(sys.argv) > 1 else repo_root / "data" / "csv"
    output_path = Path(sys.argv[2]) if len(sys.argv) > 2 else None

    if not data_path.exists():
        print(f"Error: Data path not found: {data_path}")
        sys.exit(1)

    db_path = build_duckdb(data_path, output_path)
    print(f"\nDone! Database ready at: {db_path}")


if __name__ == "__main__":
    main()
