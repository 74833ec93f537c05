"""
Base Aggregator

Abstract base class for aggregators that process a batch of items and
collect a table plus run metadata.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Generic, Optional, TypeVar
import pandas as pd

from config.logging import get_logger


T = TypeVar("T")


@dataclass
class AggregationResult(Generic[T]):
    """
    Result of aggregation with metadata.

    Generic type T is the output data type (usually pd.DataFrame)
    """

    data: T
    items_processed: int
    items_skipped: int
    skipped_items: List[dict]
    warnings: List[str]
    errors: List[str]

    @property
    def success_rate(self) -> float:
        """Calculate success rate"""

        total = self.items_processed + self.items_skipped
        return self.items_processed / total if total > 0 else 0.0

    @property
    def failure_rate(self) -> float:
        """Calculate failure rate"""

        return 1.0 - self.success_rate


class BaseAggregator(ABC):
    """
    Abstract base class for all aggregators.

    Provides:
    - Counter management
    - Progress tracking
    - Validation helpers
    - Error/warning collection

    Subclasses must implement:
    - aggregate(): Main aggregation logic
    - _process_single_item(): Process one item
    - _validate_output(): Validate aggregated output
    """

    def __init__(self, logger_name: str = "data_processing.aggregator"):
        """
        Initialize aggregator.

        Args:
            logger_name: Logger name for this aggregator
        """

        self.logger = get_logger(logger_name)

        # Counters
        self.items_processed = 0
        self.items_skipped = 0
        self.skipped_items: List[dict] = []
        self.warnings: List[str] = []
        self.errors: List[str] = []

    def _reset_counters(self):
        """Reset all counters before aggregation"""

        self.items_processed = 0
        self.items_skipped = 0
        self.skipped_items = []
        self.warnings = []
        self.errors = []

    def _build_result(self, data: T) -> AggregationResult[T]:
        """Wrap data with the current counters"""

        return AggregationResult(
            data=data,
            items_processed=self.items_processed,
            items_skipped=self.items_skipped,
            skipped_items=list(self.skipped_items),
            warnings=list(self.warnings),
            errors=list(self.errors),
        )

    def _log_progress(self, current: int, total: int, interval: int = 10):
        """
        Log progress at regular intervals.

        Args:
            current: Current item number (1-indexed)
            total: Total items to process
            interval: Log every N items
        """

        if current % interval == 0:
            self.logger.info("Progress: %d/%d items processed", current, total)

    def _log_aggregation_header(self, title: str):
        """Log formatted header for aggregation start"""

        self.logger.info("=" * 80)
        self.logger.info(title)
        self.logger.info("=" * 80)

    def _log_aggregation_summary(
        self, total_items: int, output_size: int, output_description: str = "records"
    ):
        """
        Log formatted summary of aggregation.

        Args:
            total_items: Total items attempted
            output_size: Size of output (e.g., len(df))
            output_description: Description of output units
        """

        self.logger.info("=" * 80)
        self.logger.info("Aggregation Complete")
        self.logger.info("=" * 80)
        self.logger.info("Items processed: %d/%d", self.items_processed, total_items)
        self.logger.info("Items skipped: %s", self.items_skipped)
        self.logger.info("Total %s: %s", output_description, output_size)
        self.logger.info("Warnings: %d", len(self.warnings))
        self.logger.info("Errors: %d", len(self.errors))

    def _record_skip(self, item_id: Any, reason: str):
        """
        Record a skipped item.

        Args:
            item_id: Identifier for the skipped item
            reason: Reason for skipping
        """

        self.items_skipped += 1
        self.skipped_items.append({"item_id": item_id, "reason": reason})

    def _record_warning(self, message: str):
        """Record a warning"""

        self.logger.warning(message)
        self.warnings.append(message)

    def _record_error(self, message: str):
        """Record an error"""

        self.logger.error(message)
        self.errors.append(message)

    def _validate_record_count(
        self,
        actual: int,
        expected_min: int,
        expected_max: int,
        data_description: str = "records",
    ) -> bool:
        """
        Validate that record count is within expected range.

        Returns:
            True if valid, False otherwise (logs warning)
        """

        if not expected_min <= actual <= expected_max:
            warning = (
                f"Unexpected {data_description} count: {actual} "
                f"(expected {expected_min}-{expected_max})"
            )
            self._record_warning(warning)
            return False
        return True

    def _check_duplicates(
        self, df: pd.DataFrame, subset: List[str], description: str = "records"
    ) -> bool:
        """
        Check for duplicate records.

        Returns:
            True if no duplicates, False if duplicates found
        """

        duplicates = df[df.duplicated(subset=subset, keep=False)]
        if len(duplicates) > 0:
            error = f"Found {len(duplicates)} duplicate {description}!"
            self._record_error(error)
            return False
        return True

    def _check_required_columns(
        self, df: pd.DataFrame, required_columns: List[str]
    ) -> bool:
        """
        Check that all required columns are present.

        Returns:
            True if all present, False if any missing
        """

        missing = [col for col in required_columns if col not in df.columns]
        if missing:
            error = f"Missing required columns: {missing}"
            self._record_error(error)
            return False
        return True

    @abstractmethod
    def aggregate(self, items: List[Any], **kwargs) -> AggregationResult:
        """
        Main aggregation method - must be implemented by subclasses.

        Args:
            items: Items to aggregate
            **kwargs: Additional aggregator-specific parameters

        Returns:
            AggregationResult with combined data and metadata
        """

    @abstractmethod
    def _process_single_item(self, item: Any, **kwargs) -> Optional[Any]:
        """
        Process a single item - must be implemented by subclasses.

        Returns:
            Processed output for this item, or None if it was skipped
        """

    @abstractmethod
    def _validate_output(self, df: pd.DataFrame, total_items: int):
        """
        Validate aggregated output - must be implemented by subclasses.

        Should use helper methods like:
        - _validate_record_count()
        - _check_duplicates()
        - _check_required_columns()
        """
