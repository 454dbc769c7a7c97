"""Feature-set staging service."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from featurestage.modules.archive import ArchiveExtractor, Extractor
from featurestage.modules.featuresets.domain import (
    ConfigurationError,
    FeatureStageError,
    NameMapping,
    ProjectModel,
    ResolutionError,
    StagingAction,
    StagingOptions,
    StagingReport,
)
from featurestage.modules.featuresets.filtering import parse_patterns
from featurestage.modules.featuresets.resolution import (
    ArtifactRepository,
    NexusRepositoryClient,
    ResolutionDriver,
    read_project_pom,
)
from featurestage.modules.featuresets.staging import Stager
from featurestage.settings import Settings

log = logging.getLogger(__name__)


@dataclass
class OperationResult:
    ok: bool
    message: str
    data: Any = None
    status_code: int = 200

    def as_dict(self) -> Dict[str, Any]:
        payload = {"status": "true" if self.ok else "false", "msg": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


def ensure_stage_directory(path: Path) -> Path:
    """Create the stage directory; existing contents are left untouched."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_project(path: Path) -> ProjectModel:
    """Load a project description from a JSON file or a ``pom.xml``."""
    path = Path(path)
    if path.suffix == ".json":
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Cannot read project file {path}: {exc}") from exc
        try:
            return ProjectModel.from_dict(payload, base_dir=path.parent)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid project file {path}: {exc}") from exc
    if path.name == "pom.xml" or path.suffix == ".pom":
        return read_project_pom(path)
    raise ConfigurationError(f"Unsupported project file {path}, expected a .json file or a pom.xml")


class FeatureSetsStagingService:
    """Resolves feature-set dependencies of a project and stages them."""

    def __init__(
        self,
        settings: Settings,
        repository: Optional[ArtifactRepository] = None,
        extractor: Optional[Extractor] = None,
    ) -> None:
        self.settings = settings
        self.repository = repository or NexusRepositoryClient(settings)
        self.extractor = extractor or ArchiveExtractor()
        self.driver = ResolutionDriver(self.repository)

    def options(self, project: Optional[ProjectModel] = None, **overrides: Any) -> StagingOptions:
        if project is not None and not self.settings.stage_directory and overrides.get("stage_directory") is None:
            overrides["stage_directory"] = project.build_dir / "stage"
        options = StagingOptions.from_settings(self.settings, **overrides)
        # malformed exclusion patterns abort before anything is resolved
        parse_patterns(options.copy_excludes)
        parse_patterns(options.unpack_excludes)
        return options

    def run(self, project: ProjectModel, options: Optional[StagingOptions] = None) -> StagingReport:
        options = options or self.options(project)
        if options.skip:
            log.info("Skipping featuresets-dependencies")
            return StagingReport(stage_directory=options.stage_directory, skipped=True)

        resolved = self.driver.resolve_feature_set_dependencies(project, options)
        stage_dir = ensure_stage_directory(options.stage_directory)
        if options.sort_resolved:
            resolved = sorted(resolved, key=lambda dep: dep.coordinate.sort_key)

        stager = Stager(self.extractor, base_dir=project.base_dir)
        report = stager.stage(resolved, options, StagingReport(stage_directory=stage_dir))
        staged = len(report.by_action(StagingAction.COPY)) + len(report.by_action(StagingAction.UNPACK))
        log.info("Staged %d of %d dependencies into %s", staged, len(resolved), stage_dir)
        return report

    def stage_request(self, payload: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None) -> OperationResult:
        try:
            project = ProjectModel.from_dict(payload)
        except ValueError as exc:
            return OperationResult(False, str(exc), status_code=400)
        values = dict(overrides or {})
        if "mappings" in values and values["mappings"] is not None:
            values["mappings"] = [NameMapping.from_dict(item) for item in values["mappings"]]
        try:
            report = self.run(project, self.options(project, **values))
        except ConfigurationError as exc:
            return OperationResult(False, str(exc), status_code=400)
        except ResolutionError as exc:
            log.exception("featuresets staging failed to resolve")
            return OperationResult(False, str(exc), status_code=502)
        except FeatureStageError as exc:
            log.exception("featuresets staging failed")
            return OperationResult(False, str(exc), status_code=500)
        return OperationResult(True, "ok", report.as_dict())
