"""Base classes for source pipelines."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import pandas as pd


@dataclass
class ValidationResult:
    """Result of data validation.

    Attributes:
        valid: Whether the data passed all validation checks
        total_rows: Total number of rows in the table
        missing_pct: Percentage of missing values in the value columns (0-100)
        outliers_count: Number of out-of-range values detected
        issues: List of validation issues found
        stats: Dictionary of summary statistics
    """

    valid: bool
    total_rows: int
    missing_pct: float
    outliers_count: int = 0
    issues: list[str] = field(default_factory=list)
    stats: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        status = "VALID" if self.valid else "INVALID"
        return (
            f"ValidationResult({status}, "
            f"rows={self.total_rows}, "
            f"missing={self.missing_pct:.1f}%, "
            f"outliers={self.outliers_count})"
        )


class BasePipeline(ABC):
    """Abstract base class for the scrape pipelines (ONI, WSDOT, SkiMountaineer).

    A pipeline downloads a raw response, processes it into a tidy
    DataFrame, and validates the result.
    """

    # Columns of the processed table, in output order
    COLUMNS: list[str] = []

    @abstractmethod
    def download(self, **kwargs) -> Any:
        """Download raw content from the source.

        Returns:
            Raw response content (HTML text, parsed JSON, ...)
        """
        pass

    @abstractmethod
    def process(self, raw: Any) -> pd.DataFrame:
        """Process raw content into the pipeline's tidy table.

        Args:
            raw: Content returned by download()

        Returns:
            DataFrame with the columns in COLUMNS
        """
        pass

    @abstractmethod
    def validate(self, data: pd.DataFrame) -> ValidationResult:
        """Validate a processed table.

        Args:
            data: DataFrame from process()

        Returns:
            ValidationResult with quality metrics and issues
        """
        pass

    def empty_frame(self) -> pd.DataFrame:
        """Return an empty table with the pipeline's columns."""
        return pd.DataFrame(columns=self.COLUMNS)

    def run(
        self,
        raise_on_invalid: bool = True,
        **kwargs
    ) -> tuple[pd.DataFrame, ValidationResult]:
        """Run the full pipeline: download → process → validate.

        Args:
            raise_on_invalid: If True, raise ValueError when validation fails
            **kwargs: Parameters passed to download()

        Returns:
            Tuple of (processed DataFrame, validation result)

        Raises:
            ValueError: If raise_on_invalid=True and validation fails
        """
        raw = self.download(**kwargs)
        df = self.process(raw)
        validation = self.validate(df)

        if raise_on_invalid and not validation.valid:
            raise ValueError(
                f"Data validation failed: {validation.issues}. "
                f"Missing: {validation.missing_pct:.1f}%, "
                f"Outliers: {validation.outliers_count}"
            )

        return df, validation
