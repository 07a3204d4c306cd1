"""Historical Cascade snowfall by ENSO phase (SkiMountaineer).

SkiMountaineer's "Cascade Snow and ENSO" page tabulates average annual
snowfall at Cascade sites for strong/weak El Niño, neutral, and weak/strong
La Niña winters (1950-2004). This pipeline extracts that table, keeps the
pass and Mt. Rainier sites, and pivots it to one row per site.

Source: https://www.skimountaineer.com/CascadeSki/CascadeSnowENSO.html
"""

import logging
import re
import unicodedata

import numpy as np
import pandas as pd

from ensosnow.config import AnalysisConfig
from ensosnow.exceptions import ParseFailureError, SourceSchemaChangedError
from ensosnow.utils import BasePipeline, ValidationResult, fetch_text
from ensosnow.utils.html import find_table, parse_html

logger = logging.getLogger(__name__)

PHASE_HEADER = "ensophase"
TOTAL_YEARS_HEADER = "totalyears"

# Normalized phase label -> output column, strongest El Niño first
PHASE_COLUMNS = {
    "strong el nino": "strong_el_nino",
    "weak el nino": "weak_el_nino",
    "neutral": "neutral",
    "weak la nina": "weak_la_nina",
    "strong la nina": "strong_la_nina",
}
PHASE_LABELS = {
    "strong_el_nino": "Strong El Niño",
    "weak_el_nino": "Weak El Niño",
    "neutral": "Neutral",
    "weak_la_nina": "Weak La Niña",
    "strong_la_nina": "Strong La Niña",
}
SKIPPED_PHASES = {"overall average"}

SITE_PATTERN = re.compile(r"Holden|Stevens|Snoq|Stampede|Paradise|Longmire")

PHASE_TABLE_COLUMNS = (
    ["site"] + list(PHASE_COLUMNS.values()) + ["pct_diff_el_nino", "pct_diff_la_nina"]
)


def _compact(text: str) -> str:
    return re.sub(r"\s+", "", text)


def normalize_phase(label: str) -> str:
    """Lowercase a phase label and strip accents ("Strong La Niña" -> "strong la nina")."""
    decomposed = unicodedata.normalize("NFKD", label)
    ascii_text = "".join(c for c in decomposed if not unicodedata.combining(c))
    return re.sub(r"\s+", " ", ascii_text).strip().lower()


def format_site_name(header: str) -> str:
    """Turn a site column header into a display name.

    Examples:
        >>> format_site_name("Stevens Pass")
        'Stevens Pass'
        >>> format_site_name("Paradise 5400ft")
        'Paradise (5400 ft)'
    """
    name = _compact(header)
    name = re.sub(r"([a-z.])([^a-z.\d])", r"\1 \2", name)
    name = re.sub(r"(\d+)([a-z]+)", r" (\1 \2)", name)
    return name.strip()


def parse_depth(value: str) -> float:
    """Parse a snowfall cell such as '412"'; blank cells are NaN.

    Raises:
        ParseFailureError: If the cell is not a number
    """
    text = value.replace('"', "").strip()
    if text == "":
        return np.nan
    try:
        return float(text)
    except ValueError:
        raise ParseFailureError(f"Non-numeric snowfall value: {value!r}") from None


def is_phase_header(cells: list[str]) -> bool:
    compact = {_compact(c).lower() for c in cells}
    return PHASE_HEADER in compact and TOTAL_YEARS_HEADER in compact


def add_pct_differences(table: pd.DataFrame) -> pd.DataFrame:
    """Add strong-vs-weak percentage differences for El Niño and La Niña."""
    result = table.copy()
    result["pct_diff_el_nino"] = (
        (result["strong_el_nino"] - result["weak_el_nino"]) / result["weak_el_nino"] * 100
    )
    result["pct_diff_la_nina"] = (
        (result["strong_la_nina"] - result["weak_la_nina"]) / result["weak_la_nina"] * 100
    )
    return result


class CascadeEnsoSnowPipeline(BasePipeline):
    """Average snowfall per Cascade site and ENSO phase strength.

    Output schema:
        - site: str - Site display name (e.g. "Stevens Pass")
        - strong_el_nino .. strong_la_nina: float - Average snowfall (inches)
        - pct_diff_el_nino: float - Strong vs. weak El Niño difference (%)
        - pct_diff_la_nina: float - Strong vs. weak La Niña difference (%)
    """

    COLUMNS = PHASE_TABLE_COLUMNS

    def __init__(self, config: AnalysisConfig):
        self.config = config

    def download(self, **kwargs) -> str:
        """Download the SkiMountaineer page HTML.

        Raises:
            SourceUnavailableError: On network or HTTP failure
        """
        logger.info(f"Downloading ENSO snowfall table from {self.config.skimountaineer_url}")
        return fetch_text(self.config.skimountaineer_url, timeout=self.config.timeout)

    def extract_phase_rows(self, html: str) -> tuple[list[str], list[list[str]]]:
        """Locate the phase table and return (header, phase rows).

        Raises:
            SourceSchemaChangedError: If the table or a phase is missing
        """
        header, rows = find_table(parse_html(html), is_phase_header, "ENSO phase snowfall")
        compact_header = [_compact(c).lower() for c in header]
        phase_idx = compact_header.index(PHASE_HEADER)
        years_idx = compact_header.index(TOTAL_YEARS_HEADER)

        phase_rows = []
        seen = set()
        for row in rows:
            row = row + [""] * (len(header) - len(row))
            phase = normalize_phase(row[phase_idx])
            total_years = row[years_idx].strip()

            if not phase or not total_years or phase in SKIPPED_PHASES:
                continue
            if re.search(r"Max|Min", total_years):
                continue
            if phase not in PHASE_COLUMNS:
                raise SourceSchemaChangedError(f"Unknown ENSO phase row: {row[phase_idx]!r}")
            if phase in seen:
                continue

            seen.add(phase)
            phase_rows.append(row)

        missing = [p for p in PHASE_COLUMNS if p not in seen]
        if missing:
            raise SourceSchemaChangedError(f"ENSO phase table is missing phases: {missing}")

        return header, phase_rows

    def process(self, raw: str) -> pd.DataFrame:
        """Process the page into one row per site.

        Raises:
            SourceSchemaChangedError: If the table, a phase, or all sites are missing
            ParseFailureError: If a snowfall value is not numeric
        """
        header, phase_rows = self.extract_phase_rows(raw)
        compact_header = [_compact(c).lower() for c in header]
        phase_idx = compact_header.index(PHASE_HEADER)

        site_cols = [
            (i, h) for i, h in enumerate(header)
            if SITE_PATTERN.search(_compact(h))
        ]
        if not site_cols:
            raise SourceSchemaChangedError("No Cascade site columns in ENSO phase table")

        records = []
        for i, col_header in site_cols:
            record = {"site": format_site_name(col_header)}
            for row in phase_rows:
                column = PHASE_COLUMNS[normalize_phase(row[phase_idx])]
                record[column] = parse_depth(row[i])
            records.append(record)

        table = pd.DataFrame(records, columns=["site"] + list(PHASE_COLUMNS.values()))
        for column in PHASE_COLUMNS.values():
            table[column] = table[column].astype("float64")

        logger.info(f"Extracted ENSO phase snowfall for {len(table)} sites")
        return add_pct_differences(table)[PHASE_TABLE_COLUMNS]

    def validate(self, data: pd.DataFrame) -> ValidationResult:
        """Validate the site/phase table."""
        if data.empty:
            return ValidationResult(
                valid=False,
                total_rows=0,
                missing_pct=100.0,
                issues=["No sites found"],
            )

        issues = []
        value_cols = list(PHASE_COLUMNS.values())
        missing_pct = float(data[value_cols].isna().to_numpy().mean() * 100)

        negative = (data[value_cols] < 0).any(axis=1)
        outliers_count = int(negative.sum())
        if outliers_count:
            issues.append(f"Negative snowfall values at {outliers_count} sites")

        if data["site"].duplicated().any():
            issues.append("Duplicate site names")

        return ValidationResult(
            valid=len(issues) == 0,
            total_rows=len(data),
            missing_pct=missing_pct,
            outliers_count=outliers_count,
            issues=issues,
            stats={"sites": data["site"].tolist()},
        )
