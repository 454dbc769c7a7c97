"""POM descriptor reading.

Only the parts needed to enumerate a module's direct dependencies are read:
coordinates, parent, ``<properties>``, ``<dependencyManagement>`` and
``<dependencies>``. Managed entries only supply versions and scopes; they are
never dependencies themselves.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from featurestage.modules.featuresets.domain import (
    ArtifactCoordinate,
    DependencyDeclaration,
    ProjectModel,
    ResolutionError,
)
from featurestage.modules.featuresets.domain.constants import SCOPE_COMPILE

# XML namespace used by Maven POM files (POM model version 4.0.0).
NS = {"m": "http://maven.apache.org/POM/4.0.0"}

_PROPERTY_RE = re.compile(r"\$\{([^}]+)\}")

_DEP_FIELDS = ("groupId", "artifactId", "version", "type", "classifier", "scope", "optional")


def _find(el: ET.Element, tag: str) -> Optional[ET.Element]:
    result = el.find(f"m:{tag}", NS)
    if result is not None:
        return result
    return el.find(tag)


def _findall(el: ET.Element, tag: str) -> List[ET.Element]:
    return list(el.findall(f"m:{tag}", NS)) + list(el.findall(tag))


def _text(el: Optional[ET.Element], tag: str) -> Optional[str]:
    if el is None:
        return None
    child = _find(el, tag)
    if child is not None and child.text:
        return child.text.strip()
    return None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def interpolate(value: Optional[str], props: Dict[str, str]) -> Optional[str]:
    if not value:
        return value
    # properties may reference other properties
    for _ in range(10):
        replaced = _PROPERTY_RE.sub(lambda m: props.get(m.group(1), m.group(0)), value)
        if replaced == value:
            break
        value = replaced
    return value


@dataclass
class PomDocument:
    group_id: Optional[str]
    artifact_id: Optional[str]
    version: Optional[str]
    packaging: str = "jar"
    parent: Optional[ArtifactCoordinate] = None
    properties: Dict[str, str] = field(default_factory=dict)
    dependencies: List[Dict[str, str]] = field(default_factory=list)
    managed: List[Dict[str, str]] = field(default_factory=list)
    build_directory: Optional[str] = None

    def project_properties(self) -> Dict[str, str]:
        props: Dict[str, str] = {}
        for key, value in (
            ("groupId", self.group_id),
            ("artifactId", self.artifact_id),
            ("version", self.version),
        ):
            if value:
                props[f"project.{key}"] = value
                props[f"pom.{key}"] = value
        if self.parent is not None:
            props["project.parent.groupId"] = self.parent.group_id
            props["project.parent.artifactId"] = self.parent.artifact_id
            props["project.parent.version"] = self.parent.version
        return props


def _dependency_entries(container: Optional[ET.Element]) -> List[Dict[str, str]]:
    if container is None:
        return []
    entries = []
    for dep_el in _findall(container, "dependency"):
        entry = {}
        for key in _DEP_FIELDS:
            value = _text(dep_el, key)
            if value:
                entry[key] = value
        entries.append(entry)
    return entries


def parse_pom(content: bytes, source: str = "pom.xml") -> PomDocument:
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise ResolutionError(f"Failed to parse POM {source}: {exc}") from exc

    parent_el = _find(root, "parent")
    parent = None
    if parent_el is not None:
        p_group, p_artifact, p_version = (
            _text(parent_el, "groupId"),
            _text(parent_el, "artifactId"),
            _text(parent_el, "version"),
        )
        if p_group and p_artifact and p_version:
            parent = ArtifactCoordinate(p_group, p_artifact, p_version, extension="pom")

    properties: Dict[str, str] = {}
    props_el = _find(root, "properties")
    if props_el is not None:
        for child in list(props_el):
            if isinstance(child.tag, str):
                properties[_local_name(child.tag)] = (child.text or "").strip()

    dep_mgmt = _find(root, "dependencyManagement")
    return PomDocument(
        group_id=_text(root, "groupId") or (parent.group_id if parent else None),
        artifact_id=_text(root, "artifactId"),
        version=_text(root, "version") or (parent.version if parent else None),
        packaging=_text(root, "packaging") or "jar",
        parent=parent,
        properties=properties,
        dependencies=_dependency_entries(_find(root, "dependencies")),
        managed=_dependency_entries(_find(dep_mgmt, "dependencies") if dep_mgmt is not None else None),
        build_directory=_text(_find(root, "build"), "directory"),
    )


def _managed_key(entry: Dict[str, str], props: Dict[str, str]) -> Tuple[str, str, str, str]:
    return (
        interpolate(entry.get("groupId"), props) or "",
        interpolate(entry.get("artifactId"), props) or "",
        interpolate(entry.get("type"), props) or "jar",
        interpolate(entry.get("classifier"), props) or "",
    )


def effective_dependencies(
    pom: PomDocument,
    ancestors: Sequence[PomDocument] = (),
    source: str = "pom.xml",
) -> List[DependencyDeclaration]:
    """Return the direct dependencies of ``pom`` in document order.

    ``ancestors`` lists parent POMs nearest first; their properties and
    managed dependencies apply unless the child overrides them.
    """
    props: Dict[str, str] = {}
    for ancestor in reversed(ancestors):
        props.update(ancestor.properties)
    props.update(pom.properties)
    props.update(pom.project_properties())

    managed: Dict[Tuple[str, str, str, str], Dict[str, str]] = {}
    for doc in list(reversed(ancestors)) + [pom]:
        for entry in doc.managed:
            managed[_managed_key(entry, props)] = entry

    declarations: List[DependencyDeclaration] = []
    for entry in pom.dependencies:
        group_id, artifact_id, dep_type, classifier = _managed_key(entry, props)
        if not (group_id and artifact_id):
            raise ResolutionError(f"POM {source} declares a dependency without groupId/artifactId")
        managed_entry = managed.get((group_id, artifact_id, dep_type, classifier), {})
        version = interpolate(entry.get("version") or managed_entry.get("version"), props)
        if not version:
            raise ResolutionError(f"POM {source}: no version for dependency {group_id}:{artifact_id}")
        scope = interpolate(entry.get("scope") or managed_entry.get("scope"), props) or SCOPE_COMPILE
        optional = (interpolate(entry.get("optional"), props) or "").lower() == "true"
        declarations.append(
            DependencyDeclaration(
                group_id=group_id,
                artifact_id=artifact_id,
                version=version,
                type=dep_type,
                classifier=classifier,
                scope=scope,
                optional=optional,
            )
        )
    return declarations


def parse_dependencies(content: bytes, source: str = "pom.xml") -> List[DependencyDeclaration]:
    """Direct dependencies of a standalone POM (no parent lookup)."""
    return effective_dependencies(parse_pom(content, source), source=source)


def read_project_pom(pom_path: Path) -> ProjectModel:
    """Build a :class:`ProjectModel` from a local ``pom.xml``.

    Direct dependencies double as the project's resolved artifacts so that
    feature-set members declared in the POM are expanded.
    """
    pom_path = Path(pom_path)
    try:
        content = pom_path.read_bytes()
    except OSError as exc:
        raise ResolutionError(f"Cannot read {pom_path}: {exc}") from exc
    pom = parse_pom(content, str(pom_path))
    dependencies = effective_dependencies(pom, source=str(pom_path))
    base_dir = pom_path.parent
    props = {**pom.properties, **pom.project_properties(), "project.basedir": str(base_dir)}
    build_dir = interpolate(pom.build_directory, props)
    return ProjectModel(
        base_dir=base_dir,
        build_dir=base_dir / (build_dir or "target"),
        dependencies=dependencies,
        artifacts=[dep.coordinate for dep in dependencies],
    )
