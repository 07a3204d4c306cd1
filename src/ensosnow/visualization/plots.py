"""Matplotlib figures for the ENSO snowfall analysis.

All functions write a PNG and return its path. Figures are rendered with
the non-interactive Agg backend.
"""

import logging
import math
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from ensosnow.analysis.enso import ENSO_PHASES  # noqa: E402
from ensosnow.analysis.reconcile import WATER_YEAR_LABELS, water_year_subset  # noqa: E402
from ensosnow.pipelines.skimountaineer import PHASE_LABELS  # noqa: E402
from ensosnow.visualization.colors import (  # noqa: E402
    ENSO_COLORS,
    MISSING_COLOR,
    PCT_DIFF_COLORS,
    PHASE_STRENGTH_COLORS,
)

logger = logging.getLogger(__name__)

WSDOT_CAPTION = "Data Sources: WSDOT Snowfall report and GGWeather ENSO ONI"
SKIMOUNTAINEER_CAPTION = "Source: www.skimountaineer.com"
NEW_SNOWFALL_LABEL = "Monthly Avg. New Snowfall (inches)"

DPI = 150


def _title_years(df: pd.DataFrame) -> str:
    return f"({int(df['year'].min())}-{int(df['year'].max())})"


def _save(fig, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Saved figure to {path}")
    return path


def _grouped_barh(ax, categories: list[str], series: list[tuple[str, list[float], str]]) -> None:
    """Draw horizontal grouped bars, first series on top within each group."""
    n = len(series)
    height = 0.8 / max(n, 1)
    y = np.arange(len(categories))

    for i, (label, values, color) in enumerate(series):
        offset = (n - 1) / 2 * height - i * height
        ax.barh(y + offset, values, height=height, label=label, color=color)

    ax.set_yticks(y)
    ax.set_yticklabels(categories)


def plot_monthly_new_snowfall(combined: pd.DataFrame, path: Path) -> Path:
    """Scatter monthly new snowfall per pass in water-year order, colored by ENSO.

    Args:
        combined: Combined snowfall/ENSO table
        path: Output PNG path

    Raises:
        ValueError: If there are no October-May rows to plot
    """
    data = water_year_subset(combined)
    if data.empty:
        raise ValueError("No October-May snowfall rows to plot")

    passes = sorted(data["pass"].unique())
    ncols = min(2, len(passes))
    nrows = math.ceil(len(passes) / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(6 * ncols, 4 * nrows), squeeze=False)

    for ax, pass_name in zip(axes.flat, passes):
        pass_data = data[data["pass"] == pass_name]
        for phase in ENSO_PHASES:
            subset = pass_data[pass_data["ENSO"] == phase]
            ax.scatter(
                subset["month_label"].cat.codes,
                subset["avg_new_snowfall_in"],
                color=ENSO_COLORS[phase],
                alpha=0.5,
                label=phase,
            )
        unclassified = pass_data[pass_data["ENSO"].isna()]
        if not unclassified.empty:
            ax.scatter(
                unclassified["month_label"].cat.codes,
                unclassified["avg_new_snowfall_in"],
                color=MISSING_COLOR,
                alpha=0.5,
                label="Unclassified",
            )

        ax.set_title(pass_name)
        ax.set_xticks(range(len(WATER_YEAR_LABELS)))
        ax.set_xticklabels(WATER_YEAR_LABELS)
        ax.set_xlabel("Month")
        ax.set_ylabel(NEW_SNOWFALL_LABEL)
        ax.grid(True, alpha=0.3)

    for ax in list(axes.flat)[len(passes):]:
        ax.set_visible(False)

    handles, labels = axes.flat[0].get_legend_handles_labels()
    fig.legend(handles, labels, title="ENSO Phase", loc="center right")
    fig.suptitle(f"Monthly Avg. New Snowfall at WA Cascade Passes {_title_years(combined)}")
    fig.text(0.99, 0.01, WSDOT_CAPTION, ha="right", fontsize=8)
    fig.tight_layout(rect=(0, 0.03, 0.88, 0.95))
    return _save(fig, path)


def plot_pass_phase_bars(summary: pd.DataFrame, combined: pd.DataFrame, path: Path) -> Path:
    """Horizontal grouped bars of mean new snowfall per pass and ENSO phase.

    Args:
        summary: Output of summarize_by_pass_and_phase()
        combined: Combined table (for the title's year range)
        path: Output PNG path
    """
    if summary.empty:
        raise ValueError("No classified snowfall rows to plot")

    passes = sorted(summary["pass"].unique())
    table = summary.pivot(index="pass", columns="ENSO", values="avg_new_snowfall_in")
    table = table.reindex(index=passes)

    series = [
        (phase, table[phase].fillna(0).tolist(), ENSO_COLORS[phase])
        for phase in ENSO_PHASES
        if phase in table.columns
    ]

    fig, ax = plt.subplots(figsize=(8, 1.2 * len(passes) + 2))
    _grouped_barh(ax, passes, series)
    ax.set_xlabel(NEW_SNOWFALL_LABEL)
    ax.set_ylabel("Pass")
    ax.legend(title="ENSO")
    ax.set_title(f"Monthly Avg. New Snowfall at WA Cascade Passes {_title_years(combined)}")
    fig.text(0.99, 0.01, WSDOT_CAPTION, ha="right", fontsize=8)
    fig.tight_layout(rect=(0, 0.03, 1, 1))
    return _save(fig, path)


def plot_phase_snowfall_by_site(table: pd.DataFrame, path: Path) -> Path:
    """Grouped bars of historical snowfall per site for the five phase strengths."""
    sites = table["site"].tolist()[::-1]
    ordered = table.set_index("site").loc[sites]

    series = [
        (PHASE_LABELS[column], ordered[column].tolist(), color)
        for column, color in PHASE_STRENGTH_COLORS
    ]

    fig, ax = plt.subplots(figsize=(9, 1.0 * len(sites) + 2))
    _grouped_barh(ax, sites, series)
    ax.set_xlabel("Snowfall (inches)")
    ax.set_ylabel("Cascade Sites")
    ax.legend(title="ENSO Phase")
    ax.set_title("Snowfall in Washington Cascades during ENSO Phases (1950–2004)")
    fig.text(0.99, 0.01, SKIMOUNTAINEER_CAPTION, ha="right", fontsize=8)
    fig.tight_layout(rect=(0, 0.03, 1, 1))
    return _save(fig, path)


def plot_phase_pct_diff_by_site(table: pd.DataFrame, path: Path) -> Path:
    """Grouped bars of strong-vs-weak percentage differences per site."""
    sites = table["site"].tolist()[::-1]
    ordered = table.set_index("site").loc[sites]

    series = [
        ("El Niño", ordered["pct_diff_el_nino"].tolist(), PCT_DIFF_COLORS["pct_diff_el_nino"]),
        ("La Niña", ordered["pct_diff_la_nina"].tolist(), PCT_DIFF_COLORS["pct_diff_la_nina"]),
    ]

    fig, ax = plt.subplots(figsize=(9, 0.8 * len(sites) + 2))
    _grouped_barh(ax, sites, series)
    ax.axvline(0, color="black", linewidth=0.8)
    ax.set_xlabel("Difference (%)")
    ax.set_ylabel("Cascade Sites")
    ax.legend(title="ENSO Category")
    ax.set_title("Percentage Difference in Snowfall (Strong vs Weak ENSO Phases)")
    fig.text(0.99, 0.01, SKIMOUNTAINEER_CAPTION, ha="right", fontsize=8)
    fig.tight_layout(rect=(0, 0.03, 1, 1))
    return _save(fig, path)
