"""
Ingestion script -- pulls new fast chargers from OpenChargeMap into the store.

Run after migrations:
    python ingest.py --dry-run
    python ingest.py
    python ingest.py --segment NL-BE

Set OPENCHARGEMAP_API_KEY in the environment or .env for higher rate limits.
"""

import argparse
import asyncio
import logging
import sys

from echarger.config import settings
from echarger.domain.corridor import SEGMENTS
from echarger.domain.enums import RouteSegment
from echarger.infrastructure.database import engine
from echarger.infrastructure.redis_client import close_redis
from echarger.workers.ingestor import IngestionInProgress, run_ingestion_cycle


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch corridor chargers from OpenChargeMap.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="report what would be added without writing",
    )
    parser.add_argument(
        "--segment",
        choices=[s.id.value for s in SEGMENTS],
        help="only search one corridor segment",
    )
    return parser.parse_args(argv)


async def ingest(dry_run: bool, segment: str | None) -> int:
    print("ECharger route fetcher")
    print("======================\n")
    try:
        report = await run_ingestion_cycle(
            segment=RouteSegment(segment) if segment else None,
            dry_run=dry_run,
        )
    except IngestionInProgress as exc:
        print(f"  {exc}")
        return 1

    for candidate in report.new:
        print(
            f"  + [{candidate.route_segment.value}] {candidate.name} "
            f"({candidate.power_kw} kW, on-route: {candidate.on_route.value})"
        )
    print(f"\nSearched {len(report.segments)} segments, {report.fetched} POIs")
    print(f"Summary: {len(report.new)} new chargers >= {settings.fast_charge_threshold_kw} kW")
    if report.failed_segments:
        print(f"Failed segments: {', '.join(report.failed_segments)}")

    if dry_run:
        print("\nDry run - no changes made")
    else:
        print(f"\nAdded {report.inserted} chargers")
    return 0


async def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        return await ingest(args.dry_run, args.segment)
    finally:
        await engine.dispose()
        await close_redis()


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    sys.exit(asyncio.run(main()))
