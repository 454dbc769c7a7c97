"""Builds and executes the batch resolution request of a staging run."""

from __future__ import annotations

import logging
from typing import Dict, List

from featurestage.modules.featuresets.domain import (
    ArtifactRequest,
    DependencyDeclaration,
    FeatureStageError,
    ProjectModel,
    ResolutionError,
    ResolvedDependency,
    StagingOptions,
)
from featurestage.modules.featuresets.filtering import is_scope_included, string_as_list

from .nexus import ArtifactRepository

log = logging.getLogger(__name__)


class ResolutionDriver:
    """Collects feature-set members and direct dependencies, then resolves them in one batch."""

    def __init__(self, repository: ArtifactRepository) -> None:
        self.repository = repository

    def collect_feature_set_dependencies(
        self, project: ProjectModel, options: StagingOptions
    ) -> List[DependencyDeclaration]:
        """Direct dependencies of every project artifact that belongs to a feature-set group."""
        groups = set(options.featureset_groupid_includes)
        collected: Dict[DependencyDeclaration, None] = {}
        for artifact in project.artifacts:
            if artifact.group_id not in groups:
                continue
            log.debug("Reading descriptor of feature set %s", artifact)
            try:
                declarations = self.repository.read_dependency_descriptor(artifact)
            except FeatureStageError:
                raise
            except Exception as exc:  # noqa: BLE001
                raise ResolutionError(f"Failed to read artifact descriptor for {artifact}: {exc}") from exc
            for declaration in declarations:
                collected.setdefault(declaration, None)
        return list(collected)

    def build_requests(self, project: ProjectModel, options: StagingOptions) -> List[ArtifactRequest]:
        include_scopes = string_as_list(options.include_scope)
        exclude_scopes = string_as_list(options.exclude_scope)
        groups = set(options.featureset_groupid_includes)

        def scope_ok(scope: str) -> bool:
            return is_scope_included(
                scope,
                include_scopes,
                exclude_scopes,
                empty_include_means_all=options.include_scope_empty_means_all,
            )

        requests: Dict[ArtifactRequest, None] = {}
        for declaration in self.collect_feature_set_dependencies(project, options):
            if scope_ok(declaration.scope):
                requests.setdefault(ArtifactRequest(declaration.coordinate, declaration.scope), None)

        for declaration in project.dependencies:
            if declaration.group_id in groups or not scope_ok(declaration.scope):
                continue
            requests.setdefault(ArtifactRequest(declaration.coordinate, declaration.scope), None)
        return list(requests)

    def resolve_feature_set_dependencies(
        self, project: ProjectModel, options: StagingOptions
    ) -> List[ResolvedDependency]:
        requests = self.build_requests(project, options)
        log.info("Resolving %d artifacts", len(requests))
        try:
            return self.repository.resolve_artifacts(requests)
        except FeatureStageError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ResolutionError(f"Artifact resolution failed: {exc}") from exc
