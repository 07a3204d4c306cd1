"""End-to-end ENSO snowfall analysis.

Stages run in order, each cached independently:

1. ENSO: ONI table -> yearly classification (cache key "enso_data")
2. Snowfall: WSDOT monthly snowfall per pass/year ("snowfall_data")
3. Join: left join on year -> data/cascade_snowfall.{parquet,csv}
4. Reporting: summaries and figures
5. Historical (optional): SkiMountaineer site/phase table ("cascade_snow_enso")
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import pandas as pd

from ensosnow.analysis import (
    reconcile,
    summarize_by_month_and_phase,
    summarize_by_pass_and_phase,
    water_year_subset,
)
from ensosnow.config import AnalysisConfig, PassDefinition, cascade_passes
from ensosnow.exceptions import PipelineStageError
from ensosnow.pipelines import CascadeEnsoSnowPipeline, OniPipeline, WsdotSnowfallPipeline
from ensosnow.utils import CacheStore, get_data_path
from ensosnow.visualization import (
    plot_monthly_new_snowfall,
    plot_pass_phase_bars,
    plot_phase_pct_diff_by_site,
    plot_phase_snowfall_by_site,
)

logger = logging.getLogger(__name__)

ENSO_CACHE_KEY = "enso_data"
SNOWFALL_CACHE_KEY = "snowfall_data"
HISTORICAL_CACHE_KEY = "cascade_snow_enso"
CACHE_KEYS = [ENSO_CACHE_KEY, SNOWFALL_CACHE_KEY, HISTORICAL_CACHE_KEY]

COMBINED_FILENAME = "cascade_snowfall"

MONTHLY_FIGURE = "monthly_avg_new_snowfall_wa_cascade_passes.png"
BAR_FIGURE = "monthly_avg_new_snowfall_wa_cascade_passes_bar.png"
SITE_FIGURE = "Snowfall_in_Washington_Cascades_during_ENSO_Phases_by_Site.png"
PCT_DIFF_FIGURE = "Percentage_Difference_in_Snowfall_by_Site_and_ENSO_Phase.png"


@dataclass
class AnalysisResult:
    """Tables and files produced by a run."""

    enso: pd.DataFrame
    snowfall: pd.DataFrame
    combined: pd.DataFrame
    pass_summary: pd.DataFrame
    month_summary: pd.DataFrame
    historical: pd.DataFrame | None = None
    outputs: list[Path] = field(default_factory=list)


def _run_stage(stage: str, func: Callable):
    """Run a stage, wrapping any failure with the stage name."""
    logger.info(f"Starting {stage} stage")
    try:
        return func()
    except Exception as e:
        logger.error(f"{stage} stage failed: {e}")
        raise PipelineStageError(stage, e) from e


def load_enso(config: AnalysisConfig, cache: CacheStore) -> pd.DataFrame:
    """Yearly ENSO classification, from cache when available."""
    pipeline = OniPipeline(config)
    return cache.load_or_fetch(ENSO_CACHE_KEY, lambda: pipeline.run()[0])


def load_snowfall(
    config: AnalysisConfig,
    cache: CacheStore,
    passes: list[PassDefinition],
) -> pd.DataFrame:
    """Monthly snowfall per pass and year, from cache when available."""
    pipeline = WsdotSnowfallPipeline(config, passes)
    return cache.load_or_fetch(SNOWFALL_CACHE_KEY, lambda: pipeline.run()[0])


def load_historical(config: AnalysisConfig, cache: CacheStore) -> pd.DataFrame:
    """Historical site/phase snowfall table, from cache when available."""
    pipeline = CascadeEnsoSnowPipeline(config)
    return cache.load_or_fetch(HISTORICAL_CACHE_KEY, lambda: pipeline.run()[0])


def clear_cache(config: AnalysisConfig) -> list[str]:
    """Remove every cached dataset so the next run refetches.

    Returns:
        Cache keys that were removed
    """
    cache = CacheStore(config.cache_dir)
    return [key for key in CACHE_KEYS if cache.invalidate(key)]


def run_analysis(
    config: AnalysisConfig,
    passes: list[PassDefinition] | None = None,
) -> AnalysisResult:
    """Run the full analysis.

    Args:
        config: Directories, URLs and options
        passes: Passes and years to fetch (default: Cascade passes 2005-2024)

    Returns:
        AnalysisResult with every table and the written file paths

    Raises:
        PipelineStageError: If a stage fails; caches written by earlier
            stages are kept
    """
    passes = passes if passes is not None else cascade_passes()

    data_dir = get_data_path(config.base_dir, "data")
    figures_dir = get_data_path(config.base_dir, "figures")
    cache = CacheStore(get_data_path(config.base_dir, "cache"))

    enso = _run_stage("ENSO", lambda: load_enso(config, cache))
    snowfall = _run_stage("snowfall", lambda: load_snowfall(config, cache, passes))

    combined = reconcile(snowfall, enso)
    combined_parquet = data_dir / f"{COMBINED_FILENAME}.parquet"
    combined_csv = data_dir / f"{COMBINED_FILENAME}.csv"
    combined.to_parquet(combined_parquet, index=False)
    combined.to_csv(combined_csv, index=False)
    logger.info(f"Saved combined table ({len(combined)} rows) to {combined_parquet}")

    pass_summary = summarize_by_pass_and_phase(combined)
    month_summary = summarize_by_month_and_phase(combined)

    outputs = [combined_parquet, combined_csv]
    if not water_year_subset(combined).empty:
        outputs.append(plot_monthly_new_snowfall(combined, figures_dir / MONTHLY_FIGURE))
    else:
        logger.warning("No October-May snowfall rows; skipping monthly figure")
    if not pass_summary.empty:
        outputs.append(plot_pass_phase_bars(pass_summary, combined, figures_dir / BAR_FIGURE))
    else:
        logger.warning("No classified snowfall rows; skipping pass/phase bar chart")

    historical = None
    if config.include_historical:
        historical = _run_stage("historical", lambda: load_historical(config, cache))
        outputs.append(plot_phase_snowfall_by_site(historical, figures_dir / SITE_FIGURE))
        outputs.append(plot_phase_pct_diff_by_site(historical, figures_dir / PCT_DIFF_FIGURE))

    logger.info(f"Analysis complete: wrote {len(outputs)} files")
    return AnalysisResult(
        enso=enso,
        snowfall=snowfall,
        combined=combined,
        pass_summary=pass_summary,
        month_summary=month_summary,
        historical=historical,
        outputs=outputs,
    )
