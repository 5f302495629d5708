#!/usr/bin/env python3
"""
Normalize stored care tracks.

Older plant documents can carry a stale `next_date` on a rotation or
fertilizing track whose schedule was switched to "None", or lack a watering
`next_date` altogether. This script clears the former and recomputes the
latter from the watering schedule and last watered date.

Usage:
  python scripts/normalize_care_tracks.py [--dry-run]
"""

import argparse
import asyncio
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from verdant.core.clock import as_aware, get_clock, get_tzinfo
from verdant.core.config import get_settings
from verdant.core.database import get_mongo_client
from verdant.plants.schedule import Schedule

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

OPTIONAL_TRACKS = ("rotation", "fertilizing")


def plan_fixes(doc: dict, now) -> dict:
    """Return the `$set` fields needed to normalize one plant document."""
    fixes = {}

    for name in OPTIONAL_TRACKS:
        track = doc.get(name) or {}
        schedule = Schedule(track.get("schedule") or Schedule.NONE.value)
        if not schedule.is_enabled and track.get("next_date") is not None:
            fixes[f"{name}.next_date"] = None

    watering = doc.get("watering") or {}
    if watering.get("next_date") is None:
        schedule = Schedule(watering.get("schedule") or Schedule.WEEKLY.value)
        if not schedule.is_enabled:
            schedule = Schedule.WEEKLY
            fixes["watering.schedule"] = schedule.value
        last = watering.get("last_date")
        anchor = as_aware(last, get_tzinfo()) if last else now
        fixes["watering.next_date"] = schedule.next_date(anchor)
        if last is None:
            fixes["watering.last_date"] = now

    return fixes


async def normalize(dry_run: bool = False):
    settings = get_settings()
    client = get_mongo_client(settings.MONGO_URI)
    plants = client[settings.MONGO_DB_NAME]["plants"]
    now = get_clock()()

    scanned = 0
    updated = 0

    async for doc in plants.find({}):
        scanned += 1
        fixes = plan_fixes(doc, now)
        if not fixes:
            continue
        logger.info(f"Plant {doc['_id']} ({doc.get('name')}): {sorted(fixes)}")
        if dry_run:
            updated += 1
            continue
        result = await plants.update_one({"_id": doc["_id"]}, {"$set": fixes})
        if result.modified_count:
            updated += 1

    logger.info(f"Scanned: {scanned} | {'Would update' if dry_run else 'Updated'}: {updated}")
    client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="Report changes without writing")
    args = parser.parse_args()
    asyncio.run(normalize(dry_run=args.dry_run))
