"""Data ingestion pipelines for ensosnow.

Each pipeline is responsible for:
1. Downloading raw content from its source
2. Processing it into a tidy table
3. Validating data quality

Pipelines:
- oni: Oceanic Niño Index table, classified into yearly ENSO phases
- wsdot: WSDOT monthly snowfall per mountain pass and year
- skimountaineer: Historical Cascade snowfall by ENSO phase strength
"""

from .oni import OniPipeline
from .skimountaineer import CascadeEnsoSnowPipeline
from .wsdot import PassYearResponse, WsdotSnowfallPipeline

__all__ = [
    "OniPipeline",
    "WsdotSnowfallPipeline",
    "PassYearResponse",
    "CascadeEnsoSnowPipeline",
]
