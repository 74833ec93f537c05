"""
Club Roster Aggregator

Builds the club table: for every rider on the roster, normalizes the rider's
event history, folds it into a RiderSnapshot and renders one text row.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd

from config.settings import MalformedPolicy, rider_stats_config
from src.data_ingestion.payload_loader import PayloadError
from src.data_ingestion.schemas import ClubMember
from src.etl.aggregators.base_aggregator import BaseAggregator, AggregationResult
from src.etl.aggregators.rider_aggregator import RiderSnapshot, aggregate_events
from src.etl.exceptions import RiderAggregationAborted
from src.etl.formatting import ROW_COLUMNS, rows_to_dataframe, snapshot_to_row
from src.etl.normalizer import normalize_events

EventLoader = Callable[[int], Sequence[Dict[str, Any]]]


@dataclass(frozen=True)
class RiderResult:
    """Snapshot of one roster member and how many events were dropped"""

    member: ClubMember
    snapshot: RiderSnapshot
    dropped_events: int = 0


class ClubRosterAggregator(BaseAggregator):
    """
    Aggregate every rider on a club roster into one table.

    Output schema: ROW_COLUMNS, one row per rider that was not skipped.
    """

    def __init__(
        self,
        event_loader: EventLoader,
        on_malformed: Optional[MalformedPolicy] = None,
        base_url: Optional[str] = None,
        logger_name: str = "data_processing.roster_aggregator",
    ):
        super().__init__(logger_name=logger_name)

        self.event_loader = event_loader
        self.on_malformed = MalformedPolicy(
            on_malformed or rider_stats_config.on_malformed
        )
        self.base_url = base_url or rider_stats_config.base_url
        self.rider_results: List[RiderResult] = []

    def aggregate(
        self,
        items: List[ClubMember],
        now: Optional[datetime] = None,
        sample_size: Optional[int] = None,
        **kwargs,
    ) -> AggregationResult[pd.DataFrame]:
        """
        Aggregate all riders of the roster.

        Args:
            items: Roster members
            now: Reference instant for the windows (defaults to the configured one)
            sample_size: If provided, only process the first N riders

        Returns:
            AggregationResult with the rider table and metadata

        Raises:
            RiderAggregationAborted: a rider has malformed events and the
                policy is abort
        """

        self._log_aggregation_header("Starting Club Roster Aggregation")
        self._reset_counters()
        self.rider_results = []

        now = now or rider_stats_config.reference_now()

        members = list(items)
        if sample_size:
            members = members[:sample_size]
            self.logger.info("Processing sample of %d riders", sample_size)

        total_riders = len(members)
        self.logger.info(
            "Found %d riders to process (reference instant %s, policy %s)",
            total_riders,
            now.isoformat(),
            self.on_malformed.value,
        )

        if total_riders == 0:
            self._record_warning("Roster is empty")
            return self._build_result(rows_to_dataframe([]))

        rows = []

        for idx, member in enumerate(members, start=1):
            self._log_progress(idx, total_riders)

            try:
                result = self._process_single_item(member, now=now)
            except PayloadError as e:
                self.logger.error("Failed to load rider %d: %s", member.zwid, e)
                self._record_skip(member.zwid, str(e))
                continue

            if result is None:
                continue

            self.rider_results.append(result)
            rows.append(
                snapshot_to_row(
                    member.name, member.zwid, result.snapshot, now, self.base_url
                )
            )
            self.items_processed += 1

        df = rows_to_dataframe(rows)

        self._validate_output(df, total_riders)

        self._log_aggregation_summary(
            total_items=total_riders,
            output_size=len(df),
            output_description="rider rows",
        )

        return self._build_result(df)

    # pylint: disable=arguments-renamed, arguments-differ
    def _process_single_item(
        self, member: ClubMember, now: datetime, **kwargs
    ) -> Optional[RiderResult]:
        """
        Normalize and fold one rider's events, applying the malformed policy.

        Returns:
            RiderResult, or None when the rider was skipped
        """

        raw_events = self.event_loader(member.zwid)
        outcome = normalize_events(raw_events, rider_id=member.zwid)

        if outcome.errors:
            first_error = outcome.errors[0]

            if self.on_malformed == MalformedPolicy.ABORT:
                self._record_error(str(first_error))
                raise RiderAggregationAborted(member.zwid, str(first_error)) from first_error

            if self.on_malformed == MalformedPolicy.SKIP_RIDER:
                self._record_warning(
                    f"Skipping rider {member.zwid}: "
                    f"{len(outcome.errors)} malformed events ({first_error})"
                )
                self._record_skip(member.zwid, str(first_error))
                return None

            self._record_warning(
                f"Rider {member.zwid}: dropped {len(outcome.errors)} malformed events"
            )

        snapshot = aggregate_events(outcome.events, now)

        return RiderResult(
            member=member,
            snapshot=snapshot,
            dropped_events=len(outcome.errors),
        )

    def _validate_output(self, df: pd.DataFrame, total_items: int):
        """
        Validate the rider table.

        Checks:
        - One row per processed rider, never more than the roster
        - No duplicate rider ids
        - All columns present
        """

        self.logger.info("Validating rider table...")

        self._validate_record_count(
            actual=len(df),
            expected_min=self.items_processed,
            expected_max=total_items,
            data_description="rider rows",
        )

        self._check_duplicates(df=df, subset=["zwid"], description="rider rows")

        self._check_required_columns(df, ROW_COLUMNS)

        self.logger.info("Validation complete")
