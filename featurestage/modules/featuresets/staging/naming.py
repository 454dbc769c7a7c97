"""Maps resolved artifacts to their staged base names."""

from __future__ import annotations

from typing import Iterable, Optional

from featurestage.modules.featuresets.domain import ArtifactCoordinate, ConfigurationError, NameMapping


def map_name(artifact: Optional[ArtifactCoordinate], mappings: Optional[Iterable[NameMapping]]) -> str:
    """Return the first configured name for ``artifact``, or its artifactId.

    Mappings are consulted in declaration order. A mapping only filters on
    groupId when it declares one.
    """
    if artifact is None:
        raise ConfigurationError("artifact must be non null")

    for mapping in mappings or ():
        if mapping.group_id and mapping.group_id != artifact.group_id:
            continue
        if mapping.artifact_id == artifact.artifact_id and mapping.name:
            return mapping.name
    return artifact.artifact_id
