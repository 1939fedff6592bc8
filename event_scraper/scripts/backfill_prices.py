#!/usr/bin/env python3
"""Backfill structured prices from free-text price_info.

Reads a JSON list of stored event records ({id, is_free, price_info, ...}),
derives price_type + price_value with the same resolver the live scraper
uses, and writes the records back. Safe to re-run.

Usage:
    python -m event_scraper.scripts.backfill_prices events.json [-o out.json]
"""

import json
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

from event_scraper.normalizers.price import resolve_price

console = Console()


def backfill_price(record: dict) -> Optional[dict]:
    """Price fields for one record, or None when it must be left untouched.

    Free records keep null price fields. Records without price text become
    'nao_informado'.
    """
    if record.get("is_free"):
        return None

    info = (record.get("price_info") or "").strip()
    if not info:
        return {"price_type": "nao_informado", "price_value": None}

    price_type, price_value = resolve_price([info])
    return {"price_type": price_type, "price_value": price_value}


def backfill_records(records: list[dict], verbose: bool = True) -> tuple[list[dict], int, int]:
    """Apply backfill_price to every record. Returns (records, updated, skipped)."""
    updated = 0
    skipped = 0
    result = []
    for record in records:
        fields = backfill_price(record)
        if fields is None:
            skipped += 1
            result.append(record)
            continue
        result.append({**record, **fields})
        updated += 1
        if verbose and record.get("price_info"):
            console.print(
                f"  [dim][{record.get('id')}][/dim] \"{record['price_info'].strip()}\" "
                f"→ {fields['price_type']} / {fields['price_value']}"
            )
    return result, updated, skipped


def backfill_file(path: Path, output: Optional[Path] = None, verbose: bool = True) -> tuple[int, int]:
    """Backfill a JSON file of records in place (or into output)."""
    with open(path) as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON list of event records")

    console.print(f"Found [bold]{len(records)}[/bold] events in {path}")
    records, updated, skipped = backfill_records(records, verbose=verbose)

    with open(output or path, "w") as f:
        json.dump(records, f, ensure_ascii=False, indent=2)

    console.print(f"[green]Done.[/green] Updated: {updated}, Skipped (free): {skipped}")
    return updated, skipped


def main(argv: Optional[list[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] in ("-h", "--help"):
        console.print(__doc__)
        return 1

    output = None
    if "-o" in args:
        i = args.index("-o")
        output = Path(args[i + 1])
        del args[i:i + 2]

    backfill_file(Path(args[0]), output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
