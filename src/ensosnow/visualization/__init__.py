"""Visualization for the ENSO snowfall analysis.

Shared ENSO color definitions and the matplotlib figures written by the
analysis workflow.
"""

from .colors import (
    ENSO_COLORS,
    MISSING_COLOR,
    PCT_DIFF_COLORS,
    PHASE_STRENGTH_COLORS,
    enso_to_color,
)
from .plots import (
    plot_monthly_new_snowfall,
    plot_pass_phase_bars,
    plot_phase_pct_diff_by_site,
    plot_phase_snowfall_by_site,
)

__all__ = [
    "ENSO_COLORS",
    "MISSING_COLOR",
    "PCT_DIFF_COLORS",
    "PHASE_STRENGTH_COLORS",
    "enso_to_color",
    "plot_monthly_new_snowfall",
    "plot_pass_phase_bars",
    "plot_phase_snowfall_by_site",
    "plot_phase_pct_diff_by_site",
]
