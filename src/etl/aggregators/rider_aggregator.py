"""
Rider Aggregator

Reduces one rider's normalized events into a RiderSnapshot: ride and race
counts over trailing day windows, the best threshold ratio per window, and
pointers to the most recent event and race.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from src.data_ingestion.schemas import NormalizedEvent

ONE_DAY = timedelta(days=1)

YEAR_WINDOW = 365
WINDOW_90 = 90
WINDOW_60 = 60
WINDOW_30 = 30


@dataclass(frozen=True)
class RiderSnapshot:
    """
    Performance summary for one rider at one instant.

    Window counters and maxima are inclusive of events exactly N days old.
    The latest_* fields are None when no (race) event was seen.
    """

    rides_last_year: int = 0
    races_last_year: int = 0
    races_90: int = 0
    races_30: int = 0
    max_ratio_90: float = 0.0
    max_ratio_60: float = 0.0
    max_ratio_30: float = 0.0
    latest_event_title: Optional[str] = None
    latest_event_date: Optional[datetime] = None
    latest_race_title: Optional[str] = None
    latest_race_date: Optional[datetime] = None
    latest_race_avg_ratio: Optional[float] = None
    latest_race_ratio_to_threshold: Optional[float] = None

    @classmethod
    def empty(cls) -> "RiderSnapshot":
        """Snapshot of a rider with no events"""

        return cls()

    @property
    def has_events(self) -> bool:
        return self.latest_event_date is not None


def as_utc(instant: datetime) -> datetime:
    """Naive datetimes are taken to be UTC"""

    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def days_ago(now: datetime, event_date: datetime) -> int:
    """Whole 24-hour periods between event_date and now, truncated toward zero"""

    return int((as_utc(now) - as_utc(event_date)) / ONE_DAY)


class _Accumulator:
    """Mutable state of the fold, frozen into a RiderSnapshot at the end"""

    def __init__(self):
        self.rides_last_year = 0
        self.races_last_year = 0
        self.races_90 = 0
        self.races_30 = 0
        self.max_ratio_90 = 0.0
        self.max_ratio_60 = 0.0
        self.max_ratio_30 = 0.0
        self.latest_event: Optional[NormalizedEvent] = None
        self.latest_race: Optional[NormalizedEvent] = None

    def add(self, event: NormalizedEvent, now: datetime):
        age = days_ago(now, event.event_date)
        ratio = event.ratio_to_threshold

        # Future events have a negative age and land in every window
        if age <= YEAR_WINDOW:
            self.rides_last_year += 1
            if event.is_race:
                self.races_last_year += 1

        if age <= WINDOW_90:
            self.max_ratio_90 = max(self.max_ratio_90, ratio)
            if event.is_race:
                self.races_90 += 1

        if age <= WINDOW_60:
            self.max_ratio_60 = max(self.max_ratio_60, ratio)

        if age <= WINDOW_30:
            self.max_ratio_30 = max(self.max_ratio_30, ratio)
            if event.is_race:
                self.races_30 += 1

        # Strictly later only: on equal dates the first event seen stays
        event_date = as_utc(event.event_date)
        if self.latest_event is None or event_date > as_utc(
            self.latest_event.event_date
        ):
            self.latest_event = event

        if event.is_race and (
            self.latest_race is None
            or event_date > as_utc(self.latest_race.event_date)
        ):
            self.latest_race = event

    def snapshot(self) -> RiderSnapshot:
        latest_event = self.latest_event
        latest_race = self.latest_race

        return RiderSnapshot(
            rides_last_year=self.rides_last_year,
            races_last_year=self.races_last_year,
            races_90=self.races_90,
            races_30=self.races_30,
            max_ratio_90=self.max_ratio_90,
            max_ratio_60=self.max_ratio_60,
            max_ratio_30=self.max_ratio_30,
            latest_event_title=latest_event.event_title if latest_event else None,
            latest_event_date=as_utc(latest_event.event_date) if latest_event else None,
            latest_race_title=latest_race.event_title if latest_race else None,
            latest_race_date=as_utc(latest_race.event_date) if latest_race else None,
            latest_race_avg_ratio=latest_race.avg_ratio if latest_race else None,
            latest_race_ratio_to_threshold=(
                latest_race.ratio_to_threshold if latest_race else None
            ),
        )


def aggregate_events(events: Iterable[NormalizedEvent], now: datetime) -> RiderSnapshot:
    """
    Fold a rider's normalized events into a snapshot.

    Args:
        events: Normalized events in any order (may be empty)
        now: Reference instant the windows are measured from

    Returns:
        RiderSnapshot
    """

    accumulator = _Accumulator()
    for event in events:
        accumulator.add(event, now)
    return accumulator.snapshot()
