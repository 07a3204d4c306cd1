"""Aggregate statistics over the combined snowfall/ENSO table."""

import pandas as pd

from ensosnow.analysis.reconcile import water_year_subset


def summarize_by_pass_and_phase(combined: pd.DataFrame) -> pd.DataFrame:
    """Mean monthly new snowfall per (pass, ENSO phase).

    Rows without an ENSO classification are excluded.

    Returns:
        DataFrame with columns: pass, ENSO, avg_new_snowfall_in, n_months
    """
    classified = combined.dropna(subset=["ENSO"])
    summary = (
        classified.groupby(["pass", "ENSO"], sort=True)["avg_new_snowfall_in"]
        .agg(["mean", "count"])
        .reset_index()
        .rename(columns={"mean": "avg_new_snowfall_in", "count": "n_months"})
    )
    return summary


def summarize_by_month_and_phase(combined: pd.DataFrame) -> pd.DataFrame:
    """Mean new snowfall per (water-year month, ENSO phase) across passes.

    Returns:
        DataFrame with columns: month_label, ENSO, avg_new_snowfall_in
    """
    labeled = water_year_subset(combined.dropna(subset=["ENSO"]))
    return (
        labeled.groupby(["month_label", "ENSO"], observed=True)["avg_new_snowfall_in"]
        .mean()
        .reset_index()
    )
