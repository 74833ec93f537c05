"""
Event Normalizer

Turns raw event records from a rider's result history into NormalizedEvent
objects: tolerant timestamp parsing, race detection and ratio resolution.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from config.logging import get_logger
from src.data_ingestion.schemas import (
    NormalizedEvent,
    NumericRatio,
    RatioValue,
    RawEvent,
    TextRatio,
)
from src.etl.exceptions import MalformedRatioError

logger = get_logger("data_processing.normalizer")

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)
RACE_MARKER = "RACE"


@dataclass
class NormalizationOutcome:
    """Normalized events for one rider plus the events that could not be read"""

    events: List[NormalizedEvent] = field(default_factory=list)
    errors: List[MalformedRatioError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every event normalized"""

        return not self.errors


def parse_event_timestamp(value: Any) -> datetime:
    """
    Parse the raw event timestamp into a UTC datetime.

    Only JSON integers are Unix seconds. The service sometimes sends an empty
    string instead of a number, so anything else (text included) maps to the
    epoch.
    """

    seconds = 0

    if isinstance(value, bool):
        seconds = 0
    elif isinstance(value, int):
        seconds = value

    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.debug("Timestamp out of range: %r", value)
        return EPOCH


def resolve_ratio(
    ratio: Optional[RatioValue],
    field_name: str,
    rider_id: Optional[int] = None,
    event_title: str = "",
) -> float:
    """
    Resolve a classified ratio to a float.

    Raises:
        MalformedRatioError: the ratio is missing, not numeric text, or not finite
    """

    if isinstance(ratio, NumericRatio):
        value = ratio.value
    elif isinstance(ratio, TextRatio):
        try:
            value = float(ratio.text)
        except ValueError as e:
            raise MalformedRatioError(
                field_name, rider_id, event_title, ratio.text
            ) from e
    else:
        raise MalformedRatioError(field_name, rider_id, event_title, ratio)

    if not math.isfinite(value):
        raise MalformedRatioError(field_name, rider_id, event_title, value)

    return value


def normalize_event(
    raw: Union[RawEvent, Mapping[str, Any]], rider_id: Optional[int] = None
) -> NormalizedEvent:
    """
    Normalize one raw event.

    Args:
        raw: RawEvent or the raw JSON mapping for one event
        rider_id: Rider the event belongs to (only used in error messages)

    Returns:
        NormalizedEvent

    Raises:
        MalformedRatioError: either ratio field cannot be read as a number
    """

    if not isinstance(raw, RawEvent):
        try:
            raw = RawEvent.model_validate(raw)
        except ValidationError as e:
            # Every field is tolerant, so this is a record that is not a mapping
            raise MalformedRatioError("event", rider_id, "", raw) from e

    avg_ratio = resolve_ratio(raw.avg_ratio, "avg_wkg", rider_id, raw.title)
    ratio_to_threshold = resolve_ratio(
        raw.ratio_to_threshold, "wkg_ftp", rider_id, raw.title
    )

    return NormalizedEvent(
        event_date=parse_event_timestamp(raw.timestamp),
        is_race=RACE_MARKER in raw.type_label,
        avg_ratio=avg_ratio,
        ratio_to_threshold=ratio_to_threshold,
        event_title=raw.title,
    )


def normalize_events(
    raws: Iterable[Union[RawEvent, Mapping[str, Any]]],
    rider_id: Optional[int] = None,
) -> NormalizationOutcome:
    """
    Normalize a rider's events, collecting failures instead of stopping.

    The caller decides what to do with ``outcome.errors``.
    """

    outcome = NormalizationOutcome()

    for raw in raws:
        try:
            outcome.events.append(normalize_event(raw, rider_id))
        except MalformedRatioError as e:
            outcome.errors.append(e)

    logger.debug(
        "Rider %s: %d events normalized, %d malformed",
        rider_id,
        len(outcome.events),
        len(outcome.errors),
    )

    return outcome
