"""
Script to build the club rider table from cached results-service payloads.

Usage:
    # Whole club roster
    python scripts/run_rider_stats.py --club-id 1234

    # Selected riders only
    python scripts/run_rider_stats.py --rider-id 111 --rider-id 222

    # Pin "now" so the windows are reproducible
    python scripts/run_rider_stats.py --club-id 1234 --reference-date 2024-06-01T00:00:00+00:00

    # Skip bad events instead of whole riders
    python scripts/run_rider_stats.py --club-id 1234 --on-malformed skip_event

    # Dry run
    python scripts/run_rider_stats.py --club-id 1234 --dry-run
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from config.logging import setup_logging, get_logger
from config.settings import MalformedPolicy, RiderStatsConfig
from src.data_ingestion.payload_loader import PayloadError, PayloadLoader
from src.data_ingestion.schemas import ClubMember
from src.etl.aggregators.roster_aggregator import ClubRosterAggregator
from src.etl.exceptions import RiderAggregationAborted
from src.utils.helpers import ensure_directory

logger = get_logger("scripts.run_rider_stats")


def run_rider_stats(
    config: RiderStatsConfig,
    rider_ids: Optional[List[int]] = None,
    output: Optional[Path] = None,
    dry_run: bool = False,
) -> bool:
    """
    Build the rider table and write it as CSV.

    Args:
        config: Resolved configuration
        rider_ids: Riders to process instead of the club roster
        output: CSV path (defaults to <output_dir>/club_<id>_riders.csv)
        dry_run: If True, only report what would be processed

    Returns:
        True if successful, False otherwise
    """

    config.is_config_valid()
    now = config.reference_now()
    loader = PayloadLoader(config.payload_dir)

    logger.info("%s", "\n" + "=" * 70)
    logger.info("Rider Stats")
    logger.info("=" * 70)
    logger.info("Club: %s", config.club_id)
    logger.info("Rider(s): %s", rider_ids if rider_ids else "Club roster")
    logger.info("Reference instant: %s", now.isoformat())
    logger.info("Malformed data policy: %s", config.on_malformed)
    logger.info("Dry Run: %s", dry_run)
    logger.info("%s", "=" * 70 + "\n")

    if rider_ids:
        members = [ClubMember(zwid=rider_id) for rider_id in rider_ids]
    elif config.club_id is not None:
        try:
            members = loader.load_club_roster(config.club_id)
        except PayloadError as e:
            logger.error("Could not load club roster: %s", e)
            return False
    else:
        logger.error("Either a club id or at least one rider id is required")
        return False

    if dry_run:
        logger.info("🔍 DRY RUN MODE - would process %d riders", len(members))
        for member in members:
            logger.info("  ✓ %s (%d)", member.name or "?", member.zwid)
        return True

    aggregator = ClubRosterAggregator(
        event_loader=loader.load_rider_events,
        on_malformed=config.malformed_policy,
        base_url=config.base_url,
    )

    try:
        result = aggregator.aggregate(members, now=now)
    except RiderAggregationAborted as e:
        logger.error("❌ %s", e)
        return False

    if output is None:
        suffix = f"club_{config.club_id}" if config.club_id is not None else "selected"
        output = config.output_dir / f"{suffix}_riders.csv"

    ensure_directory(Path(output).parent)
    result.data.to_csv(output, index=False)

    logger.info(
        "✅ Wrote %d rider rows to %s (%d skipped, success rate %.1f%%)",
        len(result.data),
        output,
        result.items_skipped,
        result.success_rate * 100,
    )

    return True


def build_parser() -> argparse.ArgumentParser:
    """Command line arguments"""

    parser = argparse.ArgumentParser(
        description="Summarise club riders from cached results-service payloads"
    )
    parser.add_argument("--club-id", type=int, help="Club whose roster is processed")
    parser.add_argument(
        "--rider-id",
        type=int,
        action="append",
        dest="rider_ids",
        help="Rider to process (repeatable, overrides the roster)",
    )
    parser.add_argument("--payload-dir", help="Directory with cached JSON payloads")
    parser.add_argument("--output", type=Path, help="CSV file to write")
    parser.add_argument(
        "--on-malformed",
        choices=[policy.value for policy in MalformedPolicy],
        help="What to do with events whose ratios cannot be read",
    )
    parser.add_argument(
        "--reference-date", help="ISO-8601 instant used as now for the windows"
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Only list the riders to process"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""

    args = build_parser().parse_args(argv)

    setup_logging()

    config = RiderStatsConfig(
        payload_dir=args.payload_dir,
        club_id=args.club_id,
        on_malformed=args.on_malformed,
        reference_date=args.reference_date,
    )

    try:
        success = run_rider_stats(
            config,
            rider_ids=args.rider_ids,
            output=args.output,
            dry_run=args.dry_run,
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
