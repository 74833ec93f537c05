"""
Pytest configuration and shared fixtures.

This file provides common fixtures used across all tests.
"""

# pylint: disable=redefined-outer-name, wrong-import-position

import os
import json
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv
import pytest

load_dotenv()
os.environ.setdefault("ENVIRONMENT", "testing")

from config.logging import setup_logging  # noqa: E402
from src.etl.normalizer import normalize_event  # noqa: E402

# Setup logging for tests
setup_logging()


# ============================================================================
# Session-scoped fixtures (created once per test session)
# ============================================================================


@pytest.fixture(scope="session")
def reference_now():
    """Fixed "now" for every windowed computation"""

    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def base_url():
    """Results service URL used for profile links"""

    return "https://www.zwiftpower.com"


# ============================================================================
# Sample data fixtures (function-scoped, created per test)
# ============================================================================


@pytest.fixture
def make_raw_event(reference_now):
    """Factory for raw event records placed N days before the reference instant"""

    def _make(
        days_before: float = 0,
        race: bool = True,
        wkg_ftp="3.5",
        avg_wkg="3.1",
        title: str = "Sample Event",
    ):
        event_date = reference_now - timedelta(days=days_before)
        return {
            "f_t": "TYPE_RACE " if race else "TYPE_RIDE ",
            "event_date": int(event_date.timestamp()),
            "event_title": title,
            "avg_wkg": [avg_wkg, 0],
            "wkg_ftp": [wkg_ftp, 0],
        }

    return _make


@pytest.fixture
def make_event(make_raw_event):
    """Factory for normalized events placed N days before the reference instant"""

    def _make(days_before: float = 0, race: bool = True, ratio: float = 3.5, **kwargs):
        return normalize_event(
            make_raw_event(days_before=days_before, race=race, wkg_ftp=ratio, **kwargs)
        )

    return _make


@pytest.fixture
def sample_raw_events(make_raw_event):
    """Raw history of one rider, in the shapes the service actually sends"""

    return [
        make_raw_event(40, race=True, wkg_ftp="1.10", avg_wkg="1.0", title="Spring Race"),
        make_raw_event(10, race=True, wkg_ftp=1.05, avg_wkg="0.9", title="June Race"),
        make_raw_event(400, race=False, wkg_ftp="2.0", avg_wkg="1.8", title="Old Ride"),
    ]


@pytest.fixture
def club_roster():
    """Club roster payload"""

    return [
        {"name": "Alice Rider", "zwid": 101, "flag": "gb"},
        {"name": "Bob Rider", "zwid": 202, "flag": "nl"},
    ]


@pytest.fixture
def payload_dir(tmp_path, club_roster, sample_raw_events):
    """Directory with cached payloads for club 42 and its riders"""

    def _write(name, data):
        with open(tmp_path / name, "w", encoding="utf-8") as f:
            json.dump({"data": data}, f)

    _write("42_riders.json", club_roster)
    _write("101_all.json", sample_raw_events)
    _write("202_all.json", [])

    return tmp_path
