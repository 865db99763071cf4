#!/usr/bin/env python3
"""
Import NHS PLACE site scores onto existing maternity units.

Only units already present in maternity_units (matched on site code ==
cqc_location_id) are updated; no rows are created.

Usage:
    python scripts/import_place_data.py <path-to-csv>
"""

import asyncio
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import asyncpg
from dotenv import load_dotenv

from zeyra.services.place_import import parse_place_csv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "").replace("+asyncpg", "").replace("postgresql://", "postgres://")

REPORT_INTERVAL = 10

UPDATE_SQL = """
    UPDATE maternity_units SET
        place_cleanliness = $2,
        place_food = $3,
        place_privacy_dignity_wellbeing = $4,
        place_condition_appearance = $5,
        place_synced_at = $6
    WHERE cqc_location_id = $1
"""


def log(msg):
    """Print with flush for immediate output."""
    print(msg, flush=True)


def fmt(value: float | None) -> str:
    return "N/A" if value is None else f"{value}%"


async def import_place_data(csv_path: str) -> int:
    """Update matched units; returns the number of failed updates."""
    log(f"Reading CSV from: {csv_path}")
    content = Path(csv_path).read_text(encoding="utf-8-sig")
    log(f"  Size: {len(content) / 1024:.1f} KB")

    ratings = parse_place_csv(content)
    log(f"  Found {len(ratings):,} PLACE entries")

    log("Connecting to database...")
    conn = await asyncpg.connect(DATABASE_URL)

    try:
        site_codes = [r.site_code for r in ratings]
        rows = await conn.fetch(
            "SELECT cqc_location_id, name FROM maternity_units WHERE cqc_location_id = ANY($1::text[])",
            site_codes,
        )
        existing = {row["cqc_location_id"]: row["name"] for row in rows}
        log(f"  Found {len(existing):,} matching maternity units")

        matched = [r for r in ratings if r.site_code in existing]
        if not matched:
            log("No matching units found. Nothing to update.")
            return 0

        log(f"Updating {len(matched):,} maternity units...")
        synced_at = datetime.now(timezone.utc)
        updated = 0
        errors = 0

        for rating in matched:
            try:
                await conn.execute(
                    UPDATE_SQL,
                    rating.site_code,
                    rating.cleanliness,
                    rating.food,
                    rating.privacy_dignity_wellbeing,
                    rating.condition_appearance,
                    synced_at,
                )
            except asyncpg.PostgresError as e:
                log(f"  Error updating {rating.site_code}: {e}")
                errors += 1
                continue

            updated += 1
            if updated % REPORT_INTERVAL == 0:
                log(f"  Updated {updated}/{len(matched)}...")
    finally:
        await conn.close()

    log("\n" + "=" * 50)
    log("PLACE Data Import Summary")
    log("=" * 50)
    log(f"Total PLACE entries parsed:  {len(ratings)}")
    log(f"Matched maternity units:     {len(matched)}")
    log(f"Successfully updated:        {updated}")
    log(f"Errors:                      {errors}")
    log(f"Unmatched site codes:        {len(ratings) - len(matched)}")
    log("=" * 50)

    if updated:
        log("\nSample updated units:")
        for sample in matched[:5]:
            log(f"  - {existing[sample.site_code]}")
            log(f"    Cleanliness: {fmt(sample.cleanliness)}")
            log(f"    Food: {fmt(sample.food)}")

    return errors


if __name__ == "__main__":
    if len(sys.argv) < 2:
        log("Usage: python scripts/import_place_data.py <path-to-csv>")
        sys.exit(1)

    csv_path = sys.argv[1]
    if not Path(csv_path).exists():
        log(f"Error: CSV file not found: {csv_path}")
        sys.exit(1)

    if not DATABASE_URL:
        log("Error: Missing DATABASE_URL environment variable")
        sys.exit(1)

    failed = asyncio.run(import_place_data(csv_path))
    sys.exit(1 if failed else 0)
