"""I/O utilities for data paths and HTTP fetches."""

import logging
from pathlib import Path

import requests

from ensosnow.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)

VALID_STAGES = {"data", "figures", "cache"}


def get_data_path(base_dir: Path, stage: str = "data") -> Path:
    """Get a standardized output directory under base_dir.

    Args:
        base_dir: Analysis base directory
        stage: One of 'data', 'figures', 'cache'

    Returns:
        Path to the directory (creates if doesn't exist)

    Example:
        >>> get_data_path(Path("/tmp/run"), "cache")
        PosixPath('/tmp/run/data/cache')
    """
    if stage not in VALID_STAGES:
        raise ValueError(f"Invalid stage: {stage}. Must be one of {VALID_STAGES}")

    base_dir = Path(base_dir)
    if stage == "figures":
        path = base_dir / "figures"
    elif stage == "cache":
        path = base_dir / "data" / "cache"
    else:
        path = base_dir / "data"

    path.mkdir(parents=True, exist_ok=True)
    return path


def fetch_text(url: str, timeout: int, params: dict | None = None) -> str:
    """GET a URL and return the response body as text.

    Args:
        url: URL to fetch
        timeout: Request timeout in seconds
        params: Optional query parameters

    Returns:
        Response body

    Raises:
        SourceUnavailableError: On connection failure or HTTP error status
    """
    logger.debug(f"GET {url} params={params}")
    try:
        response = requests.get(url, params=params, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailableError(f"Failed to fetch {url}: {e}") from e
    return response.text
