"""
Errors raised while normalizing and aggregating rider events.
"""

from typing import Any, Optional


class MalformedRatioError(ValueError):
    """A ratio field is missing, empty, or holds something that is not a number"""

    def __init__(
        self,
        field: str,
        rider_id: Optional[int] = None,
        event_title: str = "",
        raw_value: Any = None,
    ):
        self.field = field
        self.rider_id = rider_id
        self.event_title = event_title
        self.raw_value = raw_value
        super().__init__(
            f"Malformed {field} for rider {rider_id if rider_id is not None else '?'} "
            f"in event '{event_title}': {raw_value!r}"
        )


class RiderAggregationAborted(RuntimeError):
    """Raised by the roster aggregator when the malformed-data policy is abort"""

    def __init__(self, rider_id: int, reason: str):
        self.rider_id = rider_id
        self.reason = reason
        super().__init__(f"Aggregation aborted at rider {rider_id}: {reason}")
