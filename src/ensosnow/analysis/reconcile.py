"""Join monthly snowfall with the yearly ENSO classification."""

import calendar
import logging

import pandas as pd

from ensosnow.analysis.enso import ENSO_COLUMNS

logger = logging.getLogger(__name__)

SNOWFALL_COLUMNS = [
    "pass", "year", "month", "date", "avg_new_snowfall_in", "avg_tot_snowfall_in",
]
COMBINED_COLUMNS = SNOWFALL_COLUMNS + ["mean_ONI", "ENSO"]

# Snow season display order: October through May
WATER_YEAR_MONTHS = [10, 11, 12, 1, 2, 3, 4, 5]
WATER_YEAR_LABELS = [calendar.month_abbr[m] for m in WATER_YEAR_MONTHS]


def reconcile(snowfall: pd.DataFrame, enso: pd.DataFrame) -> pd.DataFrame:
    """Left-join snowfall records with the ENSO classification on year.

    Every snowfall row appears exactly once. mean_ONI and ENSO are missing
    for years without a classification.

    Args:
        snowfall: Monthly snowfall table (SNOWFALL_COLUMNS)
        enso: Yearly ENSO table (year, mean_ONI, ENSO), unique on year

    Returns:
        DataFrame with COMBINED_COLUMNS

    Raises:
        pandas.errors.MergeError: If the ENSO table has duplicate years
    """
    combined = snowfall[SNOWFALL_COLUMNS].merge(
        enso[ENSO_COLUMNS],
        on="year",
        how="left",
        validate="many_to_one",
    )

    unmatched = combined["ENSO"].isna()
    if unmatched.any():
        years = sorted(combined.loc[unmatched, "year"].unique().tolist())
        logger.warning(f"No ENSO classification for years: {years}")

    return combined[COMBINED_COLUMNS]


def add_water_year_month(df: pd.DataFrame) -> pd.DataFrame:
    """Add an ordered month_label column in water-year order (Oct..May).

    Months outside October-May get a missing label. Rows are not dropped.
    """
    result = df.copy()
    labels = result["month"].map(dict(zip(WATER_YEAR_MONTHS, WATER_YEAR_LABELS)))
    result["month_label"] = pd.Categorical(
        labels, categories=WATER_YEAR_LABELS, ordered=True
    )
    return result


def water_year_subset(df: pd.DataFrame) -> pd.DataFrame:
    """Rows whose month falls in the water-year display window, labeled."""
    labeled = add_water_year_month(df)
    return labeled.dropna(subset=["month_label"]).reset_index(drop=True)
