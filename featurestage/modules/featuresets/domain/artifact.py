"""Artifact coordinates and the records built around them."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import ARTIFACT_TYPES, SCOPE_COMPILE


def _first_non_empty(payload: Dict[str, Any], *keys: str, default: Optional[str] = None) -> str:
    for key in keys:
        if key in payload and payload[key] is not None:
            value = str(payload[key]).strip()
            if value:
                return value
    if default is not None:
        return default
    raise ValueError(f"Missing required field {keys[0]}")


@dataclass(frozen=True)
class ArtifactCoordinate:
    """Represents a Maven artifact coordinate."""

    group_id: str
    artifact_id: str
    version: str
    classifier: str = ""
    extension: str = "jar"

    @property
    def gav(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @property
    def sort_key(self) -> str:
        return f"{self.gav}:{self.classifier}:{self.extension}"

    @property
    def file_name(self) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact_id}-{self.version}{suffix}.{self.extension}"

    @property
    def path_segments(self) -> List[str]:
        group_path = self.group_id.replace(".", "/")
        return [group_path, self.artifact_id, self.version, self.file_name]

    def with_extension(self, extension: str, classifier: str = "") -> "ArtifactCoordinate":
        return ArtifactCoordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            classifier=classifier,
            extension=extension,
        )

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ArtifactCoordinate":
        return cls(
            group_id=_first_non_empty(payload, "group_id", "groupId"),
            artifact_id=_first_non_empty(payload, "artifact_id", "artifactId"),
            version=_first_non_empty(payload, "version"),
            classifier=_first_non_empty(payload, "classifier", default=""),
            extension=_first_non_empty(payload, "extension", "type", default="jar").lstrip("."),
        )

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.extension]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


@dataclass(frozen=True)
class DependencyDeclaration:
    """A ``<dependency>`` entry, either from the project or from a POM descriptor."""

    group_id: str
    artifact_id: str
    version: str
    type: str = "jar"
    classifier: str = ""
    scope: str = SCOPE_COMPILE
    optional: bool = False

    @property
    def coordinate(self) -> ArtifactCoordinate:
        extension, default_classifier = ARTIFACT_TYPES.get(self.type, (self.type, ""))
        return ArtifactCoordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            classifier=self.classifier or default_classifier,
            extension=extension,
        )

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DependencyDeclaration":
        optional = payload.get("optional", False)
        if isinstance(optional, str):
            optional = optional.strip().lower() == "true"
        return cls(
            group_id=_first_non_empty(payload, "group_id", "groupId"),
            artifact_id=_first_non_empty(payload, "artifact_id", "artifactId"),
            version=_first_non_empty(payload, "version"),
            type=_first_non_empty(payload, "type", default="jar"),
            classifier=_first_non_empty(payload, "classifier", default=""),
            scope=_first_non_empty(payload, "scope", default=SCOPE_COMPILE),
            optional=bool(optional),
        )


@dataclass(frozen=True)
class ArtifactRequest:
    """Single entry of a batch resolution request.

    Requests compare by coordinate only, so a coordinate requested twice with
    different scopes collapses into one request.
    """

    coordinate: ArtifactCoordinate
    scope: str = field(default=SCOPE_COMPILE, compare=False)


@dataclass
class ResolvedDependency:
    """Outcome of resolving one :class:`ArtifactRequest`."""

    coordinate: ArtifactCoordinate
    file: Optional[Path] = None
    scope: str = SCOPE_COMPILE

    @property
    def file_name(self) -> str:
        if self.file is None:
            return ""
        return self.file.name

    def __str__(self) -> str:
        return str(self.coordinate)
