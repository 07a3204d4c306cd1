"""WSDOT mountain pass snowfall pipeline.

WSDOT publishes monthly snowfall summaries for each mountain pass and
winter through its MountainPass service:

    https://wsdot.com/Travel/Real-time/Service/api/MountainPass/SnowFallData?MountainPassId=10&Year=2015

The response is a JSON array of month entries, sometimes wrapped in an
HTML fragment whose first <p> holds the JSON text. Each entry carries the
month number and name, average new and total snowfall in inches, and a
list of daily values, which this pipeline discards.
"""

import json
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ensosnow.analysis.reconcile import SNOWFALL_COLUMNS
from ensosnow.config import AnalysisConfig, PassDefinition
from ensosnow.exceptions import (
    EnsoSnowError,
    ParseFailureError,
    SourceUnavailableError,
)
from ensosnow.utils import BasePipeline, ValidationResult, fetch_text
from ensosnow.utils.html import parse_html

logger = logging.getLogger(__name__)

# Source field -> output column
FIELD_MAP = {
    "monthNum": "month",
    "avgNewSnowfallInches": "avg_new_snowfall_in",
    "avgTotalSnowfallInches": "avg_tot_snowfall_in",
}
REQUIRED_FIELDS = set(FIELD_MAP) | {"month"}
# Accepted but not carried into the output
OPTIONAL_FIELDS = {"year", "displayOrder", "dailySnowFall", "mountainPassId"}
KNOWN_FIELDS = REQUIRED_FIELDS | OPTIONAL_FIELDS

SNOWFALL_VALUE_COLUMNS = ["avg_new_snowfall_in", "avg_tot_snowfall_in"]


@dataclass
class PassYearResponse:
    """Raw snowfall response for one (pass, year) request."""

    pass_def: PassDefinition
    year: int
    body: str


def _parse_int(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise ParseFailureError(f"Non-integer {field_name}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ParseFailureError(f"Non-integer {field_name}: {value!r}") from None
    if not number.is_integer():
        raise ParseFailureError(f"Non-integer {field_name}: {value!r}")
    return int(number)


def _parse_inches(value, field_name: str) -> float:
    if value is None:
        return np.nan
    if isinstance(value, bool):
        raise ParseFailureError(f"Non-numeric {field_name}: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ParseFailureError(f"Non-numeric {field_name}: {value!r}") from None


def parse_snowfall_body(body: str) -> list[dict]:
    """Decode a SnowFallData response body into its list of month entries.

    Accepts raw JSON or an HTML fragment with the JSON in its first <p>.
    A blank body means no data.

    Raises:
        ParseFailureError: If the body is not a JSON array of objects
    """
    text = body.strip()
    if not text:
        return []

    if text[0] not in "[{":
        soup = parse_html(text)
        node = soup.find("p")
        text = (node.get_text() if node is not None else soup.get_text()).strip()
        if not text:
            return []

    try:
        entries = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseFailureError(f"Snowfall response is not valid JSON: {e}") from e

    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ParseFailureError(
            f"Expected a JSON array of month entries, got {type(entries).__name__}"
        )
    return entries


def normalize_entry(entry: dict, pass_name: str, request_year: int) -> dict:
    """Map one source month entry onto the snowfall schema.

    The entry's own year is used when present, otherwise the requested year.

    Raises:
        ParseFailureError: On missing or unknown fields, a month outside
            1-12, or non-numeric snowfall values
    """
    fields = set(entry)
    missing = REQUIRED_FIELDS - fields
    if missing:
        raise ParseFailureError(f"Snowfall entry is missing fields: {sorted(missing)}")
    unknown = fields - KNOWN_FIELDS
    if unknown:
        raise ParseFailureError(f"Snowfall entry has unknown fields: {sorted(unknown)}")

    month = _parse_int(entry["monthNum"], "monthNum")
    if not 1 <= month <= 12:
        raise ParseFailureError(f"Month number out of range: {month}")

    year = request_year
    if entry.get("year") is not None:
        year = _parse_int(entry["year"], "year")

    try:
        date = pd.Timestamp(year=year, month=month, day=1).as_unit("ns")
    except (ValueError, OverflowError) as e:
        raise ParseFailureError(f"Invalid date for {year}-{month}: {e}") from e

    return {
        "pass": pass_name,
        "year": year,
        "month": month,
        "date": date,
        "avg_new_snowfall_in": _parse_inches(
            entry["avgNewSnowfallInches"], "avgNewSnowfallInches"
        ),
        "avg_tot_snowfall_in": _parse_inches(
            entry["avgTotalSnowfallInches"], "avgTotalSnowfallInches"
        ),
    }


def records_to_frame(records: list[dict]) -> pd.DataFrame:
    """Build a snowfall table with stable dtypes from normalized records."""
    if not records:
        return pd.DataFrame({
            "pass": pd.Series(dtype="object"),
            "year": pd.Series(dtype="int64"),
            "month": pd.Series(dtype="int64"),
            "date": pd.Series(dtype="datetime64[ns]"),
            "avg_new_snowfall_in": pd.Series(dtype="float64"),
            "avg_tot_snowfall_in": pd.Series(dtype="float64"),
        })

    df = pd.DataFrame(records, columns=SNOWFALL_COLUMNS)
    df["year"] = df["year"].astype("int64")
    df["month"] = df["month"].astype("int64")
    df["date"] = pd.to_datetime(df["date"]).astype("datetime64[ns]")
    for col in SNOWFALL_VALUE_COLUMNS:
        df[col] = df[col].astype("float64")
    return df


class WsdotSnowfallPipeline(BasePipeline):
    """Monthly snowfall per pass and year from the WSDOT MountainPass service.

    Each (pass, year) pair is fetched and parsed independently: a failed
    pair is logged and skipped. The run fails only when every pair fails.

    Output schema:
        - pass: str - Pass name
        - year: int - Calendar year of the month
        - month: int - Month number (1-12)
        - date: datetime64 - First day of the month
        - avg_new_snowfall_in: float - Average new snowfall (inches)
        - avg_tot_snowfall_in: float - Average total snowfall (inches)

    Example:
        >>> pipeline = WsdotSnowfallPipeline(AnalysisConfig(), cascade_passes())
        >>> snowfall, validation = pipeline.run()
    """

    COLUMNS = SNOWFALL_COLUMNS

    # Max acceptable share of missing snowfall values
    MAX_MISSING_PCT = 50.0

    def __init__(self, config: AnalysisConfig, passes: list[PassDefinition]):
        """Initialize the pipeline.

        Args:
            config: Analysis configuration (URLs, timeout)
            passes: Passes and years to fetch
        """
        self.config = config
        self.passes = passes
        self.failures: list[tuple[str, int, EnsoSnowError]] = []

    @property
    def snowfall_url(self) -> str:
        return f"{self.config.wsdot_base_url.rstrip('/')}/SnowFallData"

    def download_pair(self, pass_def: PassDefinition, year: int) -> str:
        """Download the snowfall response for one pass and year.

        Raises:
            SourceUnavailableError: On network or HTTP failure
        """
        params = {"MountainPassId": pass_def.site_id, "Year": year}
        logger.info(f"Downloading snowfall for {pass_def.name} {year}")
        return fetch_text(self.snowfall_url, timeout=self.config.timeout, params=params)

    def parse_pair(self, response: PassYearResponse) -> pd.DataFrame:
        """Parse one (pass, year) response into snowfall rows.

        Raises:
            ParseFailureError: If the response or any entry is malformed
        """
        entries = parse_snowfall_body(response.body)
        if not entries:
            logger.warning(f"No snowfall data for {response.pass_def.name} {response.year}")

        records = [
            normalize_entry(entry, response.pass_def.name, response.year)
            for entry in entries
        ]
        return records_to_frame(records)

    def _record_failure(self, pass_name: str, year: int, error: EnsoSnowError) -> None:
        logger.error(f"Skipping {pass_name} {year}: {error}")
        self.failures.append((pass_name, year, error))

    def download(self, **kwargs) -> list[PassYearResponse]:
        """Download responses for every (pass, year) pair.

        Failed requests are recorded in self.failures and skipped.

        Returns:
            Responses for the pairs that were fetched
        """
        self.failures = []
        pairs = [pair for pass_def in self.passes for pair in pass_def.pairs()]
        logger.info(f"Downloading snowfall for {len(pairs)} pass/year pairs")

        responses = []
        for pass_def, year in pairs:
            try:
                body = self.download_pair(pass_def, year)
            except SourceUnavailableError as e:
                self._record_failure(pass_def.name, year, e)
                continue
            responses.append(PassYearResponse(pass_def, year, body))

        logger.info(f"Downloaded {len(responses)} of {len(pairs)} pass/year pairs")
        return responses

    def process(self, raw: list[PassYearResponse]) -> pd.DataFrame:
        """Parse all responses into one snowfall table.

        Raises:
            EnsoSnowError: The last failure, if no pair succeeded
        """
        frames = []
        for response in raw:
            try:
                frames.append(self.parse_pair(response))
            except ParseFailureError as e:
                self._record_failure(response.pass_def.name, response.year, e)

        if not frames and self.failures:
            logger.error(f"All {len(self.failures)} pass/year pairs failed")
            raise self.failures[-1][2]

        non_empty = [f for f in frames if not f.empty]
        if not non_empty:
            return records_to_frame([])

        result = pd.concat(non_empty, ignore_index=True)

        duplicated = result.duplicated(subset=["pass", "year", "month"], keep="first")
        if duplicated.any():
            logger.warning(f"Dropping {int(duplicated.sum())} duplicate pass/year/month rows")
            result = result[~duplicated]

        result = result.sort_values(["pass", "year", "month"]).reset_index(drop=True)
        logger.info(
            f"Parsed {len(result)} monthly snowfall rows "
            f"({len(self.failures)} pass/year pairs failed)"
        )
        return result[SNOWFALL_COLUMNS]

    def fetch_snowfall(self) -> pd.DataFrame:
        """Download and parse snowfall for every configured pass and year."""
        return self.process(self.download())

    def validate(self, data: pd.DataFrame) -> ValidationResult:
        """Validate the monthly snowfall table."""
        if data.empty:
            return ValidationResult(
                valid=False,
                total_rows=0,
                missing_pct=100.0,
                issues=["No snowfall data available"],
            )

        issues = []
        total_rows = len(data)

        missing_cols = [col for col in SNOWFALL_COLUMNS if col not in data.columns]
        if missing_cols:
            issues.append(f"Missing columns: {missing_cols}")
            return ValidationResult(
                valid=False,
                total_rows=total_rows,
                missing_pct=100.0,
                issues=issues,
            )

        duplicated = data.duplicated(subset=["pass", "year", "month"])
        if duplicated.any():
            issues.append(f"Duplicate pass/year/month rows: {int(duplicated.sum())}")

        missing_cells = int(data[SNOWFALL_VALUE_COLUMNS].isna().sum().sum())
        missing_pct = missing_cells / (total_rows * len(SNOWFALL_VALUE_COLUMNS)) * 100
        if missing_pct > self.MAX_MISSING_PCT:
            issues.append(
                f"High missing data: {missing_pct:.1f}% (threshold: {self.MAX_MISSING_PCT}%)"
            )

        negative = (data[SNOWFALL_VALUE_COLUMNS] < 0).any(axis=1)
        outliers_count = int(negative.sum())
        if outliers_count:
            issues.append(f"Negative snowfall values: {outliers_count}")

        stats = {
            "passes": sorted(data["pass"].unique().tolist()),
            "year_range": (int(data["year"].min()), int(data["year"].max())),
            "failed_pairs": [(name, year) for name, year, _ in self.failures],
        }

        return ValidationResult(
            valid=len(issues) == 0,
            total_rows=total_rows,
            missing_pct=float(missing_pct),
            outliers_count=outliers_count,
            issues=issues,
            stats=stats,
        )
