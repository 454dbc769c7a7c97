"""Exclusion patterns of the form ``artifactId``, ``groupId:artifactId`` or ``groupId:artifactId:version``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

from featurestage.modules.featuresets.domain import ArtifactCoordinate, ConfigurationError


@dataclass(frozen=True)
class ExclusionPattern:
    segments: Tuple[str, ...]

    @classmethod
    def parse(cls, raw: str) -> "ExclusionPattern":
        segments = raw.strip().split(":")
        # trailing empty segments are dropped, so "a::" is the artifactId pattern "a"
        while segments and not segments[-1]:
            segments.pop()
        if not 1 <= len(segments) <= 3:
            raise ConfigurationError(f"invalid exclude entry: {raw!r}")
        return cls(tuple(segments))

    def matches(self, artifact: ArtifactCoordinate) -> bool:
        size = len(self.segments)
        if size == 1:
            return artifact.artifact_id == self.segments[0]
        if size == 2:
            return artifact.group_id == self.segments[0] and artifact.artifact_id == self.segments[1]
        if size == 3:
            return (
                artifact.group_id == self.segments[0]
                and artifact.artifact_id == self.segments[1]
                and artifact.version == self.segments[2]
            )
        raise ConfigurationError(f"invalid exclude entry: {':'.join(self.segments)!r}")

    def __str__(self) -> str:
        return ":".join(self.segments)


PatternLike = Union[str, ExclusionPattern]


def _as_pattern(pattern: PatternLike) -> ExclusionPattern:
    if isinstance(pattern, ExclusionPattern):
        return pattern
    return ExclusionPattern.parse(pattern)


def matches(pattern: PatternLike, artifact: ArtifactCoordinate) -> bool:
    return _as_pattern(pattern).matches(artifact)


def is_excluded(patterns: Iterable[PatternLike], artifact: ArtifactCoordinate) -> bool:
    """Return ``True`` as soon as one pattern matches; blank entries are ignored."""
    for pattern in patterns:
        if isinstance(pattern, str) and not pattern.strip():
            continue
        if matches(pattern, artifact):
            return True
    return False


def parse_patterns(raw_patterns: Iterable[str]) -> List[ExclusionPattern]:
    """Parse every non-blank entry, failing on the first malformed one."""
    if isinstance(raw_patterns, str):
        raise ConfigurationError(f"exclude entries must be a list, got {raw_patterns!r}")
    return [ExclusionPattern.parse(raw) for raw in raw_patterns if raw and raw.strip()]
