"""
Turns rider snapshots into the flat text rows of the club table.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

import pandas as pd

from src.etl.aggregators.rider_aggregator import RiderSnapshot, as_utc

ROW_COLUMNS = [
    "name",
    "zwid",
    "latest_event_date",
    "latest_event_age",
    "latest_event",
    "rides",
    "profile_url",
    "ftp_30",
    "ftp_90",
    "races_30",
    "races_90",
    "races",
    "latest_race",
    "latest_race_date",
]

DATE_FORMAT = "%Y-%m-%d"


def months_ago(latest_event_date: Optional[datetime], now: datetime) -> str:
    """Describe how long ago the latest event was, in calendar months"""

    if latest_event_date is None:
        return "No latest event"

    now = as_utc(now)
    latest_event_date = as_utc(latest_event_date)

    if now - latest_event_date > timedelta(days=365):
        return "Over a year ago"

    month_diff = (now.month - latest_event_date.month) % 12

    if month_diff == 0:
        return "This month"
    if month_diff == 1:
        return "Last month"
    return f"{month_diff} months ago"


def profile_url(base_url: str, zwid: int) -> str:
    return f"{base_url.rstrip('/')}/profile.php?z={zwid}"


def _format_date(value: Optional[datetime]) -> str:
    return as_utc(value).strftime(DATE_FORMAT) if value is not None else ""


def snapshot_to_row(
    name: str,
    zwid: int,
    snapshot: RiderSnapshot,
    now: datetime,
    base_url: str,
) -> List[str]:
    """
    Render one rider as the 14 text columns of ROW_COLUMNS.

    Ratios get one fractional digit; unset dates and titles are empty strings.
    """

    return [
        name,
        str(zwid),
        _format_date(snapshot.latest_event_date),
        months_ago(snapshot.latest_event_date, now),
        snapshot.latest_event_title or "",
        str(snapshot.rides_last_year),
        profile_url(base_url, zwid),
        f"{snapshot.max_ratio_30:.1f}",
        f"{snapshot.max_ratio_90:.1f}",
        str(snapshot.races_30),
        str(snapshot.races_90),
        str(snapshot.races_last_year),
        snapshot.latest_race_title or "",
        _format_date(snapshot.latest_race_date),
    ]


def rows_to_dataframe(rows: Sequence[Sequence[str]]) -> pd.DataFrame:
    """Club table with one row per rider, all columns as text"""

    return pd.DataFrame(list(rows), columns=ROW_COLUMNS, dtype="object")
