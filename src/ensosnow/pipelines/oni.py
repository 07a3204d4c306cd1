"""Oceanic Niño Index (ONI) pipeline.

Scrapes the ggweather ONI page, which tabulates three-month running ONI
values with one row per season (e.g. "2015-2016"), and produces the
yearly ENSO classification table.

Source: https://ggweather.com/enso/oni.htm
"""

import logging

import pandas as pd

from ensosnow.analysis.enso import (
    ENSO_COLUMNS,
    ONI_SEASONS,
    SEASON_LABEL_COLUMN,
    build_enso_table,
)
from ensosnow.config import AnalysisConfig
from ensosnow.exceptions import SourceSchemaChangedError
from ensosnow.utils import BasePipeline, ValidationResult, fetch_text
from ensosnow.utils.html import find_table, parse_html

logger = logging.getLogger(__name__)

# A header row must name this many of the twelve season columns
MIN_SEASON_COLUMNS = 6


def is_oni_header(cells: list[str]) -> bool:
    """Whether a table row is the ONI table header."""
    return (
        SEASON_LABEL_COLUMN in cells
        and sum(1 for s in ONI_SEASONS if s in cells) >= MIN_SEASON_COLUMNS
    )


class OniPipeline(BasePipeline):
    """Yearly ENSO classification from the ONI table.

    Output schema:
        - year: int - Season start year
        - mean_ONI: float - Mean of the year's available ONI values
        - ENSO: str - "El Niño", "La Niña" or "Neutral"

    Example:
        >>> pipeline = OniPipeline(AnalysisConfig())
        >>> enso, validation = pipeline.run()
    """

    COLUMNS = ENSO_COLUMNS

    # Observed ONI stays well inside this range
    MAX_ABS_ONI = 5.0

    def __init__(self, config: AnalysisConfig):
        self.config = config

    def download(self, **kwargs) -> str:
        """Download the ONI page HTML.

        Raises:
            SourceUnavailableError: On network or HTTP failure
        """
        logger.info(f"Downloading ONI table from {self.config.oni_url}")
        return fetch_text(self.config.oni_url, timeout=self.config.timeout)

    def extract_table(self, html: str) -> pd.DataFrame:
        """Extract the wide ONI table as strings.

        Returns:
            DataFrame with the header cells as columns, one row per season label

        Raises:
            SourceSchemaChangedError: If no table has an ONI header row, or a row
                has more cells than the header
        """
        header, rows = find_table(parse_html(html), is_oni_header, "ONI")

        records = []
        for row in rows:
            if len(row) > len(header):
                raise SourceSchemaChangedError(
                    f"ONI row has {len(row)} cells, header has {len(header)}: {row}"
                )
            if len(row) < len(header):
                # Season in progress; missing cells become NaN
                logger.warning(f"Padding ONI row with {len(row)} of {len(header)} cells: {row}")
                row = row + [""] * (len(header) - len(row))
            # Repeated header rows inside the table body
            if is_oni_header(row):
                continue
            records.append(dict(zip(header, row)))

        df = pd.DataFrame(records, columns=list(dict.fromkeys(header)))
        missing = [s for s in ONI_SEASONS if s not in df.columns]
        if missing:
            logger.warning(f"ONI table is missing season columns: {missing}")

        logger.info(f"Extracted {len(df)} ONI season rows")
        return df

    def process(self, raw: str) -> pd.DataFrame:
        """Process the ONI page into the yearly ENSO table.

        Raises:
            SourceSchemaChangedError: If the ONI table is not on the page
            ParseFailureError: If a season label or ONI value cannot be parsed
        """
        wide = self.extract_table(raw)
        if wide.empty:
            return self.empty_frame()
        return build_enso_table(wide)

    def validate(self, data: pd.DataFrame) -> ValidationResult:
        """Validate the yearly ENSO table."""
        if data.empty:
            return ValidationResult(
                valid=False,
                total_rows=0,
                missing_pct=100.0,
                issues=["No ONI years found"],
            )

        issues = []
        total_rows = len(data)

        duplicated = data["year"].duplicated()
        if duplicated.any():
            issues.append(f"Duplicate years: {data.loc[duplicated, 'year'].tolist()}")

        missing_pct = float(data["mean_ONI"].isna().mean() * 100)

        outliers = data["mean_ONI"].abs() > self.MAX_ABS_ONI
        outliers_count = int(outliers.sum())
        if outliers_count:
            issues.append(f"Found {outliers_count} mean ONI values beyond ±{self.MAX_ABS_ONI}")

        stats = {
            "year_range": (int(data["year"].min()), int(data["year"].max())),
            "phase_counts": data["ENSO"].value_counts().to_dict(),
        }

        return ValidationResult(
            valid=len(issues) == 0,
            total_rows=total_rows,
            missing_pct=missing_pct,
            outliers_count=outliers_count,
            issues=issues,
            stats=stats,
        )
