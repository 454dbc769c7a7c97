"""Dataclasses describing a staging run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .artifact import ArtifactCoordinate, DependencyDeclaration
from .constants import (
    DEFAULT_COPY_TYPES,
    DEFAULT_EXCLUDE_SCOPE,
    DEFAULT_INCLUDE_SCOPE,
    DEFAULT_STAGE_DIRNAME,
    DEFAULT_UNPACK_TYPES,
)

if TYPE_CHECKING:  # pragma: no cover
    from featurestage.settings import Settings


class StagingAction(str, Enum):
    COPY = "copy"
    UNPACK = "unpack"
    SKIP = "skip"


@dataclass
class NameMapping:
    """Overrides the staged name of a dependency.

    An empty ``group_id`` matches any groupId.
    """

    artifact_id: str
    name: str
    group_id: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "NameMapping":
        return cls(
            artifact_id=str(payload.get("artifact_id") or payload.get("artifactId") or ""),
            name=str(payload.get("name") or ""),
            group_id=payload.get("group_id") or payload.get("groupId"),
        )


@dataclass
class StagingOptions:
    """Parsed configuration of one staging run."""

    stage_directory: Path
    copy_types: str = DEFAULT_COPY_TYPES
    copy_excludes: List[str] = field(default_factory=list)
    unpack_types: str = DEFAULT_UNPACK_TYPES
    unpack_excludes: List[str] = field(default_factory=list)
    includes: str = ""
    excludes: str = ""
    include_scope: str = DEFAULT_INCLUDE_SCOPE
    exclude_scope: str = DEFAULT_EXCLUDE_SCOPE
    include_scope_empty_means_all: bool = False
    featureset_groupid_includes: List[str] = field(default_factory=list)
    mappings: List[NameMapping] = field(default_factory=list)
    skip: bool = False
    sort_resolved: bool = True

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides: Any) -> "StagingOptions":
        stage_directory = settings.stage_directory or (
            Path(settings.build_directory) / DEFAULT_STAGE_DIRNAME
        )
        values: Dict[str, Any] = {
            "stage_directory": Path(stage_directory),
            "copy_types": settings.copy_types,
            "copy_excludes": list(settings.copy_excludes),
            "unpack_types": settings.unpack_types,
            "unpack_excludes": list(settings.unpack_excludes),
            "includes": settings.includes,
            "excludes": settings.excludes,
            "include_scope": settings.include_scope,
            "exclude_scope": settings.exclude_scope,
            "include_scope_empty_means_all": settings.include_scope_empty_means_all,
            "featureset_groupid_includes": list(settings.featureset_groupid_includes),
            "mappings": list(settings.mappings),
            "skip": settings.skip,
            "sort_resolved": settings.sort_resolved,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        values["stage_directory"] = Path(values["stage_directory"])
        return cls(**values)


@dataclass
class ProjectModel:
    """The parts of a build project the staging run reads."""

    base_dir: Path
    build_dir: Optional[Path] = None
    dependencies: List[DependencyDeclaration] = field(default_factory=list)
    artifacts: List[ArtifactCoordinate] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.base_dir = Path(self.base_dir)
        if self.build_dir is None:
            self.build_dir = self.base_dir / "target"
        self.build_dir = Path(self.build_dir)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], base_dir: Optional[Path] = None) -> "ProjectModel":
        root = Path(payload.get("base_dir") or payload.get("basedir") or base_dir or ".")
        build_dir = payload.get("build_dir") or payload.get("buildDirectory")
        if build_dir is not None and not Path(build_dir).is_absolute():
            build_dir = root / build_dir
        dependencies = [DependencyDeclaration.from_dict(item) for item in payload.get("dependencies") or []]
        artifacts = [ArtifactCoordinate.from_dict(item) for item in payload.get("artifacts") or []]
        return cls(base_dir=root, build_dir=build_dir, dependencies=dependencies, artifacts=artifacts)


@dataclass
class StagingEntry:
    coordinate: ArtifactCoordinate
    action: StagingAction
    destination: Optional[Path] = None
    message: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {
            "artifact": str(self.coordinate),
            "action": self.action.value,
            "destination": str(self.destination) if self.destination else None,
            "message": self.message,
        }


@dataclass
class StagingReport:
    stage_directory: Optional[Path] = None
    skipped: bool = False
    entries: List[StagingEntry] = field(default_factory=list)

    def add(self, entry: StagingEntry) -> None:
        self.entries.append(entry)

    def by_action(self, action: StagingAction) -> List[StagingEntry]:
        return [entry for entry in self.entries if entry.action == action]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "stageDirectory": str(self.stage_directory) if self.stage_directory else None,
            "skipped": self.skipped,
            "entries": [entry.as_dict() for entry in self.entries],
        }
