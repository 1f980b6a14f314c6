"""
Import a pasted shortage list (one "<qty>x<units> NAME [$price]" per line) from a text file.

Run from the backend directory:
  PYTHONPATH=. python scripts/import_shortages.py faltantes.txt --supplier "Norton (Europa)"

Lines that don't parse are printed and skipped. Use --dry-run to only preview.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from core.parser import parse_shortage_text
from core.suppliers import supplier_display_name
from db.database import async_session_maker, create_db_and_tables
from db.shortage import Shortage


async def main(path: Path, supplier: str, dry_run: bool = False) -> None:
    supplier = supplier_display_name(supplier)
    parsed = parse_shortage_text(path.read_text(encoding="utf-8"), supplier)

    for line in parsed.unparsed_lines:
        print(f"[import_shortages] skipped: {line}")
    if not parsed.ok:
        print("[import_shortages] nothing to import, check the format.")
        return

    if dry_run:
        for it in parsed.items:
            print(f"[import_shortages] DRY RUN: {it.quantity}x{it.units_per_case} {it.name} ({supplier}) price={it.price}")
        return

    await create_db_and_tables()
    async with async_session_maker() as db:
        db.add_all(
            [
                Shortage(
                    name=it.name,
                    quantity=it.quantity,
                    units_per_case=it.units_per_case,
                    supplier=it.supplier,
                    price=it.price,
                    raw_line=it.raw_line,
                    resolved=False,
                )
                for it in parsed.items
            ]
        )
        await db.commit()
    print(f"[import_shortages] imported {len(parsed.items)} shortages for {supplier}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import a shortage list from a text file.")
    parser.add_argument("path", type=Path)
    parser.add_argument("--supplier", required=True)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()
    asyncio.run(main(args.path, args.supplier, dry_run=args.dry_run))
