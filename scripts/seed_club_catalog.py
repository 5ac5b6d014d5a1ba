#!/usr/bin/env python3
"""
Seed the club catalog with verified clubs.

Reads a CSV with columns official_name, short_name, country, city (only
official_name is required) or, without --csv, a small built-in list.
Idempotent: clubs whose name already exists (any casing) are skipped.

Usage:
    python scripts/seed_club_catalog.py
    python scripts/seed_club_catalog.py --csv seed/clubs.csv
"""

import argparse
import asyncio
import csv
import os
import sys
from pathlib import Path

# Add apps/ to path so the agentsport package imports without installing
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, os.path.join(project_root, "apps"))

from sqlalchemy import select, func  # noqa: E402
from agentsport.database.db import AsyncSessionLocal  # noqa: E402
from agentsport.database.models import ClubCatalog  # noqa: E402

DEFAULT_CLUBS = [
    {"official_name": "Club Atletico River Plate", "short_name": "River", "country": "Argentina", "city": "Buenos Aires"},
    {"official_name": "Club Atletico Boca Juniors", "short_name": "Boca", "country": "Argentina", "city": "Buenos Aires"},
    {"official_name": "Racing Club", "short_name": "Racing", "country": "Argentina", "city": "Avellaneda"},
    {"official_name": "Club Atletico Independiente", "short_name": "Independiente", "country": "Argentina", "city": "Avellaneda"},
    {"official_name": "Club Atletico San Lorenzo de Almagro", "short_name": "San Lorenzo", "country": "Argentina", "city": "Buenos Aires"},
    {"official_name": "Club Atletico Velez Sarsfield", "short_name": "Velez", "country": "Argentina", "city": "Buenos Aires"},
    {"official_name": "Club Nacional de Football", "short_name": "Nacional", "country": "Uruguay", "city": "Montevideo"},
    {"official_name": "Club Atletico Penarol", "short_name": "Penarol", "country": "Uruguay", "city": "Montevideo"},
]


def load_clubs(csv_path: Path):
    with open(csv_path, "r", encoding="utf-8") as f:
        return [
            {key: (value or "").strip() or None for key, value in row.items()}
            for row in csv.DictReader(f)
            if (row.get("official_name") or "").strip()
        ]


async def seed(clubs) -> int:
    """Insert missing clubs as verified. Returns count of new rows."""
    created = 0
    async with AsyncSessionLocal() as session:
        for club in clubs:
            result = await session.execute(
                select(ClubCatalog.id).where(
                    func.lower(ClubCatalog.official_name) == club["official_name"].lower()
                )
            )
            if result.scalar_one_or_none() is not None:
                print(f"  ⏭️  {club['official_name']} already in catalog")
                continue

            session.add(
                ClubCatalog(
                    official_name=club["official_name"],
                    short_name=club.get("short_name"),
                    country=club.get("country"),
                    city=club.get("city"),
                    is_verified=True,
                )
            )
            created += 1
            print(f"  ✅ Added {club['official_name']}")

        await session.commit()
    return created


async def main():
    parser = argparse.ArgumentParser(description="Seed the club catalog")
    parser.add_argument("--csv", type=Path, help="CSV file with an official_name column")
    args = parser.parse_args()

    if args.csv and not args.csv.exists():
        print(f"❌ CSV not found: {args.csv}")
        sys.exit(1)

    clubs = load_clubs(args.csv) if args.csv else DEFAULT_CLUBS
    print(f"\n⚽ Seeding {len(clubs)} clubs...\n")
    created = await seed(clubs)
    print(f"\nDone: {created} new club(s)\n")


if __name__ == "__main__":
    asyncio.run(main())
