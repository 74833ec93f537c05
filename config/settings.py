"""
Rider stats settings for the project
"""

import os
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from src.utils.helpers import get_project_root, resolve_path

load_dotenv()


class Environment(str, Enum):
    """Environment types"""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class MalformedPolicy(str, Enum):
    """What the roster aggregator does with an event whose ratios cannot be read"""

    SKIP_EVENT = "skip_event"
    SKIP_RIDER = "skip_rider"
    ABORT = "abort"


ENVIRONMENT = os.getenv("ENVIRONMENT", Environment.DEVELOPMENT.value)
LOG_DIR = os.getenv("LOG_DIR", "monitoring/logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class Config:
    """Base configuration class."""

    def __init__(self):
        self.environment = ENVIRONMENT
        self.project_root = get_project_root()


class RiderStatsConfig(Config):
    """Configuration for loading payloads and building rider rows"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        payload_dir: Optional[str] = None,
        output_dir: Optional[str] = None,
        club_id: Optional[int] = None,
        on_malformed: Optional[str] = None,
        reference_date: Optional[str] = None,
    ):
        """
        Initialize rider stats configuration.

        Args:
            base_url: Results service URL, used for the profile link column
            payload_dir: Directory holding cached club/rider JSON payloads
            output_dir: Directory where the rider table is written
            club_id: Club whose roster is aggregated
            on_malformed: skip_event, skip_rider or abort
            reference_date: ISO-8601 instant used as "now" for the whole run
        """

        super().__init__()

        self.base_url = (
            base_url or os.getenv("ZWIFTPOWER_BASE_URL", "https://www.zwiftpower.com")
        ).rstrip("/")
        self.payload_dir = resolve_path(
            payload_dir or os.getenv("PAYLOAD_DIR", "data/raw")
        )
        self.output_dir = resolve_path(
            output_dir or os.getenv("OUTPUT_DIR", "data/processed")
        )

        raw_club_id = club_id if club_id is not None else os.getenv("CLUB_ID")
        self.club_id = int(raw_club_id) if raw_club_id not in (None, "") else None

        self.on_malformed = on_malformed or os.getenv(
            "ON_MALFORMED", MalformedPolicy.SKIP_RIDER.value
        )
        self.reference_date = reference_date or os.getenv("REFERENCE_DATE") or None

    @property
    def malformed_policy(self) -> MalformedPolicy:
        """Policy as an enum member (raises ValueError on unknown names)"""

        return MalformedPolicy(self.on_malformed)

    def reference_now(self) -> datetime:
        """
        Instant used as "now" for a run.

        Returns the configured reference date when set (naive values are taken
        as UTC), otherwise the current wall clock.
        """

        if not self.reference_date:
            return datetime.now(timezone.utc)

        parsed = datetime.fromisoformat(self.reference_date)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def is_config_valid(self) -> bool:
        """
        Validate the configuration values.

        Returns:
            bool: True if configuration is valid

        Raises:
            ValueError: If any value is missing or invalid
        """

        invalid_fields = []

        if not self.base_url:
            invalid_fields.append("base_url")

        try:
            MalformedPolicy(self.on_malformed)
        except ValueError:
            invalid_fields.append("on_malformed")

        if self.reference_date:
            try:
                datetime.fromisoformat(self.reference_date)
            except ValueError:
                invalid_fields.append("reference_date")

        if invalid_fields:
            raise ValueError(
                f"Invalid rider stats configuration: {', '.join(invalid_fields)}"
            )

        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            dict: Configuration as dictionary
        """

        return {
            "base_url": self.base_url,
            "payload_dir": str(self.payload_dir),
            "output_dir": str(self.output_dir),
            "club_id": self.club_id,
            "on_malformed": self.on_malformed,
            "reference_date": self.reference_date,
            "environment": self.environment,
        }

    def __repr__(self) -> str:
        """String representation of configuration"""

        config_dict = self.to_dict()
        return f"RiderStatsConfig({', '.join(f'{k}={v}' for k, v in config_dict.items())})"


rider_stats_config = RiderStatsConfig()


def is_development() -> bool:
    """Check if running in development environment"""

    return ENVIRONMENT == Environment.DEVELOPMENT.value


def is_production() -> bool:
    """Check if running in production environment"""

    return ENVIRONMENT == Environment.PRODUCTION.value
