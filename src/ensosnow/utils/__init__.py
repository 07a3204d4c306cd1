"""Shared utilities for ensosnow pipelines."""

from .base import BasePipeline, ValidationResult
from .cache import CacheStore
from .io import fetch_text, get_data_path

__all__ = [
    "get_data_path",
    "fetch_text",
    "CacheStore",
    "BasePipeline",
    "ValidationResult",
]
