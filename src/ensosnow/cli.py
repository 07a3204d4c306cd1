"""Command-line entry point for the ENSO snowfall analysis.

Usage:
    ensosnow --base-dir ./run --start-year 2005 --end-year 2024
"""

import argparse
import logging
from pathlib import Path

from ensosnow.config import DEFAULT_END_YEAR, DEFAULT_START_YEAR, AnalysisConfig, cascade_passes
from ensosnow.workflow import clear_cache, run_analysis

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Relate ENSO phase to monthly new snowfall at WA Cascade passes"
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=None,
        help="Directory for data/ and figures/ (default: $ENSOSNOW_BASE_DIR or cwd)",
    )
    parser.add_argument(
        "--start-year",
        type=int,
        default=DEFAULT_START_YEAR,
        help="First snowfall year to fetch",
    )
    parser.add_argument(
        "--end-year",
        type=int,
        default=DEFAULT_END_YEAR,
        help="Last snowfall year to fetch",
    )
    parser.add_argument(
        "--skip-historical",
        action="store_true",
        help="Skip the SkiMountaineer site/phase analysis",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Delete cached datasets before running",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run the analysis from the command line."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    overrides = {"include_historical": not args.skip_historical}
    if args.base_dir is not None:
        overrides["base_dir"] = args.base_dir
    config = AnalysisConfig.from_env(**overrides)
    passes = cascade_passes(args.start_year, args.end_year)

    if args.refresh:
        removed = clear_cache(config)
        logger.info(f"Cleared cached datasets: {removed}")

    result = run_analysis(config, passes)

    logger.info(f"Combined table: {len(result.combined)} rows")
    for path in result.outputs:
        logger.info(f"  wrote {path}")


if __name__ == "__main__":
    main()
