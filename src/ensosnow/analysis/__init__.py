"""ENSO classification, joins, and summaries."""

from .enso import (
    EL_NINO,
    ENSO_PHASES,
    LA_NINA,
    NEUTRAL,
    build_enso_table,
    classify_oni,
    classify_years,
)
from .reconcile import (
    COMBINED_COLUMNS,
    SNOWFALL_COLUMNS,
    WATER_YEAR_LABELS,
    add_water_year_month,
    reconcile,
    water_year_subset,
)
from .summary import summarize_by_month_and_phase, summarize_by_pass_and_phase

__all__ = [
    "EL_NINO",
    "LA_NINA",
    "NEUTRAL",
    "ENSO_PHASES",
    "build_enso_table",
    "classify_oni",
    "classify_years",
    "COMBINED_COLUMNS",
    "SNOWFALL_COLUMNS",
    "WATER_YEAR_LABELS",
    "add_water_year_month",
    "reconcile",
    "water_year_subset",
    "summarize_by_pass_and_phase",
    "summarize_by_month_and_phase",
]
