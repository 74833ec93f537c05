"""
Loader for cached results-service JSON payloads.

The service serves a club roster as ``<club_id>_riders.json`` and a rider's
history as ``<rider_id>_all.json``, both shaped ``{"data": [...]}``. Fetching
them is done elsewhere; this reads the saved files.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from config.logging import get_logger
from config.settings import rider_stats_config
from src.data_ingestion.schemas import ClubMember


class PayloadError(ValueError):
    """A payload file is missing, is not JSON, or has no data list"""


class PayloadLoader:
    """Reads club and rider payloads from a directory"""

    CLUB_FILE = "{club_id}_riders.json"
    RIDER_FILE = "{rider_id}_all.json"

    def __init__(self, payload_dir: Optional[Union[str, Path]] = None):
        self.payload_dir = Path(payload_dir or rider_stats_config.payload_dir)
        self.logger = get_logger("data_ingestion.payload_loader")

    def club_path(self, club_id: int) -> Path:
        return self.payload_dir / self.CLUB_FILE.format(club_id=club_id)

    def rider_path(self, rider_id: int) -> Path:
        return self.payload_dir / self.RIDER_FILE.format(rider_id=rider_id)

    def _read_data(self, path: Path) -> List[Any]:
        """Read a payload file and return its data list"""

        if not path.exists():
            raise PayloadError(f"Payload not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except json.JSONDecodeError as e:
            raise PayloadError(f"Invalid JSON in {path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise PayloadError(f"Unreadable payload {path}: {e}") from e

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise PayloadError(f"Payload {path} has no 'data' list")

        return payload["data"]

    def load_club_roster(self, club_id: int) -> List[ClubMember]:
        """
        Load the members of a club.

        Args:
            club_id: Club id on the results service

        Returns:
            List of ClubMember

        Raises:
            PayloadError: file missing/unreadable or an entry has no rider id
        """

        path = self.club_path(club_id)
        entries = self._read_data(path)

        try:
            members = [ClubMember.model_validate(entry) for entry in entries]
        except ValidationError as e:
            raise PayloadError(f"Invalid roster entry in {path}: {e}") from e

        self.logger.info("Loaded roster for club %d: %d riders", club_id, len(members))
        return members

    def load_rider_events(self, rider_id: int) -> List[Dict[str, Any]]:
        """
        Load the raw event records of a rider.

        Raises:
            PayloadError: file missing or unreadable
        """

        events = self._read_data(self.rider_path(rider_id))

        if not events:
            self.logger.info("No event data for rider %d", rider_id)
        else:
            self.logger.debug("Loaded %d events for rider %d", len(events), rider_id)

        return events
