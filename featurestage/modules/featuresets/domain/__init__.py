from .artifact import ArtifactCoordinate, ArtifactRequest, DependencyDeclaration, ResolvedDependency
from .exceptions import (
    ConfigurationError,
    FeatureStageError,
    ResolutionError,
    StagingIOError,
    UnknownArchiveFormatError,
)
from .models import (
    NameMapping,
    ProjectModel,
    StagingAction,
    StagingEntry,
    StagingOptions,
    StagingReport,
)

__all__ = [
    "ArtifactCoordinate",
    "ArtifactRequest",
    "DependencyDeclaration",
    "ResolvedDependency",
    "ConfigurationError",
    "FeatureStageError",
    "ResolutionError",
    "StagingIOError",
    "UnknownArchiveFormatError",
    "NameMapping",
    "ProjectModel",
    "StagingAction",
    "StagingEntry",
    "StagingOptions",
    "StagingReport",
]
