"""
Unit tests for the club roster aggregator.

Event loaders are plain dict lookups, except for the payload file read
failures, which go through a real PayloadLoader.
"""

import json

import pytest

from config.settings import MalformedPolicy
from src.data_ingestion.payload_loader import PayloadError, PayloadLoader
from src.data_ingestion.schemas import ClubMember
from src.etl.aggregators.roster_aggregator import ClubRosterAggregator
from src.etl.exceptions import RiderAggregationAborted, MalformedRatioError
from src.etl.formatting import ROW_COLUMNS


def _loader(histories):
    """Event loader over an in-memory mapping"""

    def _load(rider_id):
        if rider_id not in histories:
            raise PayloadError(f"Payload not found: {rider_id}")
        return histories[rider_id]

    return _load


@pytest.fixture
def members():
    """Three roster members"""

    return [
        ClubMember(name="Alice", zwid=1),
        ClubMember(name="Bob", zwid=2),
        ClubMember(name="Cara", zwid=3),
    ]


@pytest.fixture
def histories(sample_raw_events, make_raw_event):
    """Histories where rider 2 has one unreadable event"""

    broken = make_raw_event(3, title="Broken")
    broken["wkg_ftp"] = ["--"]

    return {
        1: sample_raw_events,
        2: [make_raw_event(5, wkg_ftp="2.5", title="Good"), broken],
        3: [],
    }


def _aggregator(histories, policy, base_url):
    return ClubRosterAggregator(
        event_loader=_loader(histories), on_malformed=policy, base_url=base_url
    )


@pytest.mark.unit
class TestMalformedPolicies:
    """Test each recovery policy for malformed events"""

    def test_skip_rider(self, members, histories, reference_now, base_url):
        """Test the rider with a bad event is left out"""

        aggregator = _aggregator(histories, MalformedPolicy.SKIP_RIDER, base_url)
        result = aggregator.aggregate(members, now=reference_now)

        assert list(result.data["zwid"]) == ["1", "3"]
        assert result.items_processed == 2
        assert result.items_skipped == 1
        assert result.skipped_items[0]["item_id"] == 2
        assert "Broken" in result.skipped_items[0]["reason"]
        assert len(result.warnings) == 1
        assert result.success_rate == pytest.approx(2 / 3)

    def test_skip_event(self, members, histories, reference_now, base_url):
        """Test only the bad event is dropped"""

        aggregator = _aggregator(histories, MalformedPolicy.SKIP_EVENT, base_url)
        result = aggregator.aggregate(members, now=reference_now)

        assert len(result.data) == 3
        assert result.items_skipped == 0

        bob = result.data[result.data["zwid"] == "2"].iloc[0]
        assert bob["latest_event"] == "Good"
        assert bob["ftp_30"] == "2.5"
        assert bob["rides"] == "1"

        by_id = {r.member.zwid: r for r in aggregator.rider_results}
        assert by_id[2].dropped_events == 1
        assert by_id[1].dropped_events == 0

    def test_abort(self, members, histories, reference_now, base_url):
        """Test the run stops at the first bad rider"""

        aggregator = _aggregator(histories, MalformedPolicy.ABORT, base_url)

        with pytest.raises(RiderAggregationAborted) as exc_info:
            aggregator.aggregate(members, now=reference_now)

        assert exc_info.value.rider_id == 2
        assert isinstance(exc_info.value.__cause__, MalformedRatioError)
        assert len(aggregator.errors) == 1

    def test_policy_from_string(self, histories, base_url):
        """Test policy names are accepted"""

        aggregator = ClubRosterAggregator(
            event_loader=_loader(histories), on_malformed="skip_event", base_url=base_url
        )

        assert aggregator.on_malformed is MalformedPolicy.SKIP_EVENT

    def test_unknown_policy(self, histories):
        """Test unknown policy names are rejected"""

        with pytest.raises(ValueError):
            ClubRosterAggregator(event_loader=_loader(histories), on_malformed="ignore")


@pytest.mark.unit
class TestRosterAggregation:
    """Test roster-level behaviour"""

    def test_rows(self, members, histories, reference_now, base_url):
        """Test the table shape and an empty-history rider"""

        aggregator = _aggregator(histories, MalformedPolicy.SKIP_RIDER, base_url)
        result = aggregator.aggregate(members, now=reference_now)

        assert list(result.data.columns) == ROW_COLUMNS

        cara = result.data[result.data["zwid"] == "3"].iloc[0]
        assert cara["latest_event_age"] == "No latest event"
        assert cara["rides"] == "0"
        assert cara["profile_url"] == "https://www.zwiftpower.com/profile.php?z=3"

    def test_missing_payload_is_skipped(self, members, histories, reference_now, base_url):
        """Test a rider whose payload cannot be loaded is skipped, not fatal"""

        del histories[3]
        aggregator = _aggregator(histories, MalformedPolicy.SKIP_EVENT, base_url)
        result = aggregator.aggregate(members, now=reference_now)

        assert list(result.data["zwid"]) == ["1", "2"]
        assert result.skipped_items == [
            {"item_id": 3, "reason": "Payload not found: 3"}
        ]

    def test_empty_roster(self, histories, reference_now, base_url):
        """Test an empty roster"""

        aggregator = _aggregator(histories, MalformedPolicy.SKIP_RIDER, base_url)
        result = aggregator.aggregate([], now=reference_now)

        assert result.data.empty
        assert list(result.data.columns) == ROW_COLUMNS
        assert result.items_processed == 0
        assert result.success_rate == 0.0
        assert result.warnings == ["Roster is empty"]

    def test_sample_size(self, members, histories, reference_now, base_url):
        """Test only the first N riders are processed"""

        aggregator = _aggregator(histories, MalformedPolicy.SKIP_RIDER, base_url)
        result = aggregator.aggregate(members, now=reference_now, sample_size=1)

        assert list(result.data["zwid"]) == ["1"]

    def test_duplicate_riders_are_reported(self, histories, reference_now, base_url):
        """Test the duplicate check on the output table"""

        aggregator = _aggregator(histories, MalformedPolicy.SKIP_RIDER, base_url)
        result = aggregator.aggregate(
            [ClubMember(name="A", zwid=1), ClubMember(name="A again", zwid=1)],
            now=reference_now,
        )

        assert len(result.data) == 2
        assert any("duplicate" in error for error in result.errors)

    def test_counters_reset_between_runs(self, members, histories, reference_now, base_url):
        """Test a second run starts from clean counters"""

        aggregator = _aggregator(histories, MalformedPolicy.SKIP_RIDER, base_url)
        aggregator.aggregate(members, now=reference_now)
        result = aggregator.aggregate(members, now=reference_now)

        assert result.items_processed == 2
        assert result.items_skipped == 1
        assert len(aggregator.rider_results) == 2


@pytest.mark.unit
class TestUnreadablePayloadFiles:
    """Test riders whose payload files cannot be read are skipped"""

    @pytest.fixture
    def payloads(self, tmp_path, sample_raw_events):
        """Rider 1 is readable, rider 2 is not UTF-8, rider 3 is a directory"""

        (tmp_path / "1_all.json").write_text(
            json.dumps({"data": sample_raw_events}), encoding="utf-8"
        )
        (tmp_path / "2_all.json").write_bytes(b'{"data": ["\xff\xfe"]}')
        (tmp_path / "3_all.json").mkdir()
        return tmp_path

    def test_run_continues(self, members, payloads, reference_now, base_url):
        """Test the run keeps going and records both skips"""

        aggregator = ClubRosterAggregator(
            event_loader=PayloadLoader(payloads).load_rider_events,
            on_malformed=MalformedPolicy.ABORT,
            base_url=base_url,
        )
        result = aggregator.aggregate(members, now=reference_now)

        assert list(result.data["zwid"]) == ["1"]
        assert result.items_skipped == 2
        assert [item["item_id"] for item in result.skipped_items] == [2, 3]
        assert all(
            "Unreadable payload" in item["reason"] for item in result.skipped_items
        )
