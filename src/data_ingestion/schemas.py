"""
Data validation schemas for results-service payloads using Pydantic.

Provides models for the raw event records of a rider's history, the
normalized event consumed by the aggregator, and club roster entries.
"""

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config.logging import get_logger

logger = get_logger("data_ingestion.schemas")


class NumericRatio(BaseModel):
    """Ratio that arrived as a JSON number"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["numeric"] = "numeric"
    value: float


class TextRatio(BaseModel):
    """Ratio that arrived as text and still has to be parsed"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


RatioValue = Union[NumericRatio, TextRatio]


def classify_ratio(raw: Any) -> Optional[RatioValue]:
    """
    Classify the first element of a raw ratio list.

    The service sends ratios as short lists (e.g. ``["3.2", 0]``) whose first
    element is either a number or a number encoded as text.

    Returns:
        NumericRatio, TextRatio, or None when the list is absent, empty or its
        first element is neither a number nor text.
    """

    if isinstance(raw, (NumericRatio, TextRatio)):
        return raw

    if not isinstance(raw, (list, tuple)) or len(raw) == 0:
        return None

    first = raw[0]

    # bool is an int subclass but never a ratio
    if isinstance(first, bool):
        return None
    if isinstance(first, (int, float)):
        try:
            return NumericRatio(value=float(first))
        except OverflowError:
            return None
    if isinstance(first, str):
        return TextRatio(text=first)

    return None


class RawEvent(BaseModel):
    """Schema for one event record from a rider's result history"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type_label: str = Field("", alias="f_t", description="Event type, races contain RACE")
    timestamp: Any = Field(
        None,
        alias="event_date",
        description="Unix seconds, sometimes an empty string",
    )
    title: str = Field("", alias="event_title", description="Event title")
    avg_ratio: Optional[RatioValue] = Field(
        None, alias="avg_wkg", description="Average watts per kilogram"
    )
    ratio_to_threshold: Optional[RatioValue] = Field(
        None, alias="wkg_ftp", description="Watts per kilogram at threshold"
    )

    @field_validator("type_label", "title", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        """Missing or null text fields become empty strings"""

        if v is None:
            return ""
        return str(v)

    @field_validator("avg_ratio", "ratio_to_threshold", mode="before")
    @classmethod
    def classify_ratio_field(cls, v: Any) -> Optional[RatioValue]:
        """Resolve the raw list into the numeric/text variant"""

        ratio = classify_ratio(v)
        if ratio is None and v is not None:
            logger.debug("Unclassifiable ratio value: %r", v)
        return ratio


class NormalizedEvent(BaseModel):
    """Canonical event after type-ambiguity resolution"""

    model_config = ConfigDict(frozen=True)

    event_date: datetime = Field(..., description="Event instant (UTC)")
    is_race: bool = Field(..., description="Whether the event was a race")
    avg_ratio: float = Field(..., description="Average watts per kilogram")
    ratio_to_threshold: float = Field(..., description="Watts per kilogram at threshold")
    event_title: str = Field("", description="Event title")


class ClubMember(BaseModel):
    """Schema for one entry of a club roster"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field("", description="Rider display name")
    zwid: int = Field(..., description="Rider id on the results service")

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        """Null names become empty strings"""

        return "" if v is None else str(v)
