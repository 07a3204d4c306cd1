"""ENSO phase classification from Oceanic Niño Index (ONI) values.

The ONI table lists one row per season label (e.g. "2015-2016") and one
column per overlapping three-month season (JJA, JAS, ..., MJJ). Each
label's year is the first number in it. The yearly classification uses
the mean of every available value for that year:

    mean_ONI >= 0.5   -> El Niño
    mean_ONI <= -0.5  -> La Niña
    otherwise         -> Neutral
"""

import logging
import math
import re

import numpy as np
import pandas as pd

from ensosnow.exceptions import ParseFailureError

logger = logging.getLogger(__name__)

EL_NINO = "El Niño"
LA_NINA = "La Niña"
NEUTRAL = "Neutral"
ENSO_PHASES = [EL_NINO, LA_NINA, NEUTRAL]

EL_NINO_THRESHOLD = 0.5
LA_NINA_THRESHOLD = -0.5

# Three-month running seasons, in calendar order of their center month
ONI_SEASONS = [
    "DJF", "JFM", "FMA", "MAM", "AMJ", "MJJ",
    "JJA", "JAS", "ASO", "SON", "OND", "NDJ",
]

SEASON_LABEL_COLUMN = "Season"

ENSO_COLUMNS = ["year", "mean_ONI", "ENSO"]


def classify_oni(mean_oni: float) -> str | None:
    """Classify a mean ONI value into an ENSO phase.

    Args:
        mean_oni: Mean Oceanic Niño Index

    Returns:
        "El Niño", "La Niña" or "Neutral"; None for a missing value

    Examples:
        >>> classify_oni(0.5)
        'El Niño'
        >>> classify_oni(-0.49)
        'Neutral'
    """
    if mean_oni is None or math.isnan(mean_oni):
        return None
    if mean_oni >= EL_NINO_THRESHOLD:
        return EL_NINO
    if mean_oni <= LA_NINA_THRESHOLD:
        return LA_NINA
    return NEUTRAL


def parse_season_year(label: str) -> int:
    """Extract the start year from a season label ("1950-1951" -> 1950).

    Raises:
        ParseFailureError: If the label contains no number
    """
    match = re.search(r"\d+", str(label))
    if match is None:
        raise ParseFailureError(f"No year in season label: {label!r}")
    return int(match.group())


def parse_oni_value(value) -> float:
    """Parse one ONI table cell.

    Blank cells are missing (NaN).

    Raises:
        ParseFailureError: If a non-blank cell is not a number
    """
    if value is None:
        return np.nan
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    if text == "":
        return np.nan
    try:
        return float(text)
    except ValueError:
        raise ParseFailureError(f"Non-numeric ONI value: {value!r}") from None


def reshape_oni_table(wide: pd.DataFrame) -> pd.DataFrame:
    """Reshape the wide ONI table to one row per (year, season).

    Args:
        wide: DataFrame with a "Season" label column and one column per
            three-month season present on the page. Other columns are ignored.

    Returns:
        DataFrame with columns: year (int), season (str), oni (float, NaN if blank)
    """
    season_cols = [c for c in ONI_SEASONS if c in wide.columns]

    records = []
    for _, row in wide.iterrows():
        year = parse_season_year(row[SEASON_LABEL_COLUMN])
        for season in season_cols:
            records.append({
                "year": year,
                "season": season,
                "oni": parse_oni_value(row[season]),
            })

    if not records:
        return pd.DataFrame({
            "year": pd.Series(dtype="int64"),
            "season": pd.Series(dtype="object"),
            "oni": pd.Series(dtype="float64"),
        })

    long = pd.DataFrame(records)
    long["year"] = long["year"].astype("int64")
    long["oni"] = long["oni"].astype("float64")
    return long


def yearly_mean_oni(long: pd.DataFrame) -> pd.DataFrame:
    """Average ONI per year, ignoring missing values.

    Years with no ONI value at all are dropped.

    Args:
        long: DataFrame with year and oni columns

    Returns:
        DataFrame with columns: year, mean_ONI
    """
    yearly = (
        long.groupby("year", sort=True)["oni"]
        .mean()
        .rename("mean_ONI")
        .reset_index()
    )

    empty_years = yearly.loc[yearly["mean_ONI"].isna(), "year"].tolist()
    if empty_years:
        logger.warning(f"Dropping years with no ONI values: {empty_years}")
        yearly = yearly.dropna(subset=["mean_ONI"])

    yearly["year"] = yearly["year"].astype("int64")
    yearly["mean_ONI"] = yearly["mean_ONI"].astype("float64")
    return yearly.reset_index(drop=True)


def classify_years(yearly: pd.DataFrame) -> pd.DataFrame:
    """Add the ENSO phase column to a yearly mean ONI table."""
    result = yearly.copy()
    result["ENSO"] = [classify_oni(v) for v in result["mean_ONI"]]
    return result[ENSO_COLUMNS]


def build_enso_table(wide: pd.DataFrame) -> pd.DataFrame:
    """Build the yearly ENSO classification table from the wide ONI table.

    Returns:
        DataFrame with columns: year, mean_ONI, ENSO (sorted by year)
    """
    long = reshape_oni_table(wide)
    yearly = yearly_mean_oni(long)
    enso = classify_years(yearly)

    counts = enso["ENSO"].value_counts().to_dict()
    logger.info(f"Classified {len(enso)} years: {counts}")
    return enso
