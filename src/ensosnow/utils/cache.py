"""Flat-file cache for processed tables.

Each dataset is stored as one Parquet file named after its cache key.
A dataset that is already on disk is returned as-is; otherwise the
supplied fetch function is called and its result written.
"""

import logging
import re
from pathlib import Path
from typing import Callable

import pandas as pd

logger = logging.getLogger(__name__)

_VALID_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


class CacheStore:
    """On-disk table cache keyed by dataset name.

    Example:
        >>> cache = CacheStore(Path("data/cache"))
        >>> df = cache.load_or_fetch("enso_data", lambda: pipeline.run()[0])
    """

    SUFFIX = ".parquet"

    def __init__(self, cache_dir: Path):
        """Initialize the cache.

        Args:
            cache_dir: Directory holding cached tables (created on first write)
        """
        self.cache_dir = Path(cache_dir)

    def path_for(self, cache_key: str) -> Path:
        """Return the file path for a cache key.

        Raises:
            ValueError: If the key is not a plain name
        """
        if not _VALID_KEY.match(cache_key):
            raise ValueError(
                f"Invalid cache key: {cache_key!r}. "
                "Use letters, digits, '_' and '-' only"
            )
        return self.cache_dir / f"{cache_key}{self.SUFFIX}"

    def exists(self, cache_key: str) -> bool:
        return self.path_for(cache_key).exists()

    def load(self, cache_key: str) -> pd.DataFrame:
        return pd.read_parquet(self.path_for(cache_key))

    def save(self, cache_key: str, df: pd.DataFrame) -> Path:
        """Write a table to the cache.

        The table is written to a temporary sibling first and renamed, so
        a partial write never shows up as a cache hit.
        """
        path = self.path_for(cache_key)
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = path.with_name(path.name + ".tmp")
        df.to_parquet(tmp_path, index=False)
        tmp_path.replace(path)
        return path

    def invalidate(self, cache_key: str) -> bool:
        """Delete a cached table.

        Returns:
            True if a file was removed
        """
        path = self.path_for(cache_key)
        if path.exists():
            path.unlink()
            logger.info(f"Removed cached {cache_key}: {path}")
            return True
        return False

    def load_or_fetch(
        self,
        cache_key: str,
        fetch_fn: Callable[[], pd.DataFrame],
    ) -> pd.DataFrame:
        """Return the cached table, fetching and caching it if absent.

        Args:
            cache_key: Dataset name (e.g. "enso_data")
            fetch_fn: Zero-argument callable producing the table

        Returns:
            The cached or freshly fetched table

        Raises:
            Exception: Whatever fetch_fn raises; nothing is written in that case
        """
        path = self.path_for(cache_key)

        if path.exists():
            logger.info(f"Loading {cache_key} from cache: {path}")
            return self.load(cache_key)

        logger.info(f"Fetching {cache_key} (no cache at {path})")
        df = fetch_fn()
        self.save(cache_key, df)
        logger.info(f"Cached {cache_key} ({len(df)} rows) to {path}")

        # Return what a later cache hit would return
        return self.load(cache_key)
