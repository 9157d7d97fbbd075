#!/usr/bin/env python3
"""Initialize the reorder database with all migrations."""

import argparse
import sqlite3
from pathlib import Path

from datasette_reorder_notify.migrations import run_migrations

# Demo data for local development
SEED_DATA = """
INSERT OR IGNORE INTO categories (code, label) VALUES
    ('PAIN', 'Pain relief'),
    ('COLD', 'Cold & flu'),
    ('SURG', 'Surgical supplies');

INSERT OR IGNORE INTO stock_items
    (item_id, name, category_code, units_in_stock, reorder_level)
VALUES
    (1, 'Aspirin 500mg', 'PAIN', 2, 10),
    (2, 'Paracetamol 1g', 'PAIN', 4, 20),
    (3, 'Ibuprofen 400mg', 'PAIN', 30, 15),
    (4, 'Throat lozenges', 'COLD', 0, 12),
    (5, 'Sterile bandage', 'SURG', 5, 5),
    (6, 'Nitrile gloves (box)', 'SURG', 1, 8);

INSERT OR IGNORE INTO suppliers (supplier_id, name, email) VALUES
    (1, 'Acme Medical', 'orders@acme-medical.example'),
    (2, 'Northwind Pharma', 'quotes@northwind.example'),
    (3, 'Contoso Surgical', 'sales@contoso-surgical.example');

INSERT OR IGNORE INTO supplier_categories (supplier_id, category_code, position) VALUES
    (1, 'PAIN', 0),
    (1, 'COLD', 1),
    (2, 'COLD', 0),
    (3, 'SURG', 0);
"""


def init_db(db_path: Path, seed: bool = False) -> None:
    """Create the database via migrations and optionally load demo data."""
    print(f"Initializing database: {db_path}")

    print("Running migrations...")
    applied = run_migrations(db_path, verbose=True)
    if applied:
        print(f"Applied {len(applied)} migration(s).")

    conn = sqlite3.connect(db_path)
    try:
        if seed:
            conn.executescript(SEED_DATA)
            conn.commit()
            print("  Demo data loaded.")

        cursor = conn.execute(
            "SELECT version, applied_ts FROM schema_migrations ORDER BY version"
        )
        print("\nSchema versions:")
        for row in cursor:
            print(f"  v{row[0]} applied at {row[1]}")

        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        tables = [row[0] for row in cursor if not row[0].startswith("sqlite_")]
        print(f"\nTables: {', '.join(tables)}")
    finally:
        conn.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialize the reorder database")
    parser.add_argument(
        "--db",
        type=Path,
        default=Path("reorder.db"),
        help="Path to the SQLite database file (default: reorder.db)",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Load demo categories, items and suppliers",
    )
    args = parser.parse_args()

    init_db(args.db, seed=args.seed)


if __name__ == "__main__":
    main()
