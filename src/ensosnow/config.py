"""Run configuration and static pass definitions."""

import os
from dataclasses import dataclass, field
from pathlib import Path

# Source URLs
ONI_URL = "https://ggweather.com/enso/oni.htm"
WSDOT_BASE_URL = "https://wsdot.com/Travel/Real-time/Service/api/MountainPass"
SKIMOUNTAINEER_URL = "https://www.skimountaineer.com/CascadeSki/CascadeSnowENSO.html"

# HTTP request timeout in seconds
REQUEST_TIMEOUT = 30

BASE_DIR_ENV_VAR = "ENSOSNOW_BASE_DIR"

DEFAULT_START_YEAR = 2005
DEFAULT_END_YEAR = 2024


@dataclass(frozen=True)
class PassDefinition:
    """A mountain pass with a WSDOT snowfall station.

    Attributes:
        name: Short pass name (e.g., "Stevens")
        site_id: WSDOT MountainPassId for the snowfall service
        years: Years to fetch
    """

    name: str
    site_id: int
    years: tuple[int, ...] = tuple(range(DEFAULT_START_YEAR, DEFAULT_END_YEAR + 1))

    def pairs(self) -> list[tuple["PassDefinition", int]]:
        """Return (pass, year) request pairs for this pass."""
        return [(self, year) for year in self.years]


# WSDOT MountainPassId for each Cascade pass
CASCADE_PASS_IDS = {
    "Blewett": 1,
    "Stevens": 10,
    "Snoqualmie": 11,
    "White": 12,
}


def cascade_passes(
    start_year: int = DEFAULT_START_YEAR,
    end_year: int = DEFAULT_END_YEAR,
) -> list[PassDefinition]:
    """Build the default Cascade pass definitions for a year range.

    Args:
        start_year: First year (inclusive)
        end_year: Last year (inclusive)

    Returns:
        List of PassDefinition, one per Cascade pass

    Raises:
        ValueError: If start_year is after end_year
    """
    if start_year > end_year:
        raise ValueError(f"start_year {start_year} is after end_year {end_year}")

    years = tuple(range(start_year, end_year + 1))
    return [
        PassDefinition(name=name, site_id=site_id, years=years)
        for name, site_id in CASCADE_PASS_IDS.items()
    ]


@dataclass
class AnalysisConfig:
    """Configuration threaded through every pipeline.

    Attributes:
        base_dir: Root for the data/ and figures/ directories
        timeout: HTTP request timeout in seconds
        oni_url: Page holding the monthly ONI table
        wsdot_base_url: Base URL of the WSDOT mountain pass service
        skimountaineer_url: Page holding the historical ENSO snowfall table
        include_historical: Whether to run the historical site/phase analysis
    """

    base_dir: Path = field(default_factory=Path.cwd)
    timeout: int = REQUEST_TIMEOUT
    oni_url: str = ONI_URL
    wsdot_base_url: str = WSDOT_BASE_URL
    skimountaineer_url: str = SKIMOUNTAINEER_URL
    include_historical: bool = True

    def __post_init__(self):
        self.base_dir = Path(self.base_dir)

    @property
    def data_dir(self) -> Path:
        return self.base_dir / "data"

    @property
    def figures_dir(self) -> Path:
        return self.base_dir / "figures"

    @property
    def cache_dir(self) -> Path:
        return self.data_dir / "cache"

    @classmethod
    def from_env(cls, **overrides) -> "AnalysisConfig":
        """Create a config, taking base_dir from ENSOSNOW_BASE_DIR if set."""
        if "base_dir" not in overrides and os.environ.get(BASE_DIR_ENV_VAR):
            overrides["base_dir"] = Path(os.environ[BASE_DIR_ENV_VAR])
        return cls(**overrides)
