"""Error types raised by ensosnow pipelines."""


class EnsoSnowError(Exception):
    """Base class for all ensosnow errors."""


class SourceUnavailableError(EnsoSnowError):
    """A remote data source could not be reached or returned an HTTP error."""


class SourceSchemaChangedError(EnsoSnowError):
    """An expected table or field was not found in a source response."""


class ParseFailureError(EnsoSnowError, ValueError):
    """A source value could not be coerced to the expected type."""


class PipelineStageError(EnsoSnowError):
    """A workflow stage failed.

    Attributes:
        stage: Name of the failing stage (e.g. "ENSO", "snowfall")
        cause: The underlying exception
    """

    def __init__(self, stage: str, cause: Exception):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} stage failed: {cause}")
