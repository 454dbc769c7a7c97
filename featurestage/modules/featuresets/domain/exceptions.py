"""Exception hierarchy for staging runs."""

from __future__ import annotations


class FeatureStageError(RuntimeError):
    """Base class for every fatal staging failure."""


class ConfigurationError(FeatureStageError):
    """Raised when the run configuration is malformed."""


class ResolutionError(FeatureStageError):
    """Raised when a descriptor read or the batch artifact resolution fails."""


class StagingIOError(FeatureStageError):
    """Raised when an artifact cannot be materialised in the stage directory."""


class UnknownArchiveFormatError(StagingIOError):
    """Raised when no extractor exists for an archive."""

    def __init__(self, source: object) -> None:
        super().__init__(f"Unknown archiver type for {source}")
        self.source = source
