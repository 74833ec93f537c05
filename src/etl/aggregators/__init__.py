"""
ETL Aggregators

Aggregators that fold rider event histories into snapshots and club tables.
"""

from .base_aggregator import BaseAggregator, AggregationResult
from .rider_aggregator import RiderSnapshot, aggregate_events, days_ago

__all__ = [
    "BaseAggregator",
    "AggregationResult",
    "RiderSnapshot",
    "aggregate_events",
    "days_ago",
]
