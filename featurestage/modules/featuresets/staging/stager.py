"""Materialises resolved dependencies into the stage directory."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional

from featurestage.modules.archive import Extractor
from featurestage.modules.featuresets.domain import (
    ResolvedDependency,
    StagingAction,
    StagingEntry,
    StagingIOError,
    StagingOptions,
    StagingReport,
)
from featurestage.modules.featuresets.filtering import is_actionable, string_as_list

from .naming import map_name


class Stager:
    """Copies or unpacks each resolved dependency.

    Copy takes precedence over unpack. A failed copy is logged and the run
    continues; a failed extraction aborts the run. Nothing already staged is
    rolled back and stale files from previous runs are left in place.
    """

    def __init__(self, extractor: Extractor, base_dir: Optional[Path] = None) -> None:
        self.extractor = extractor
        self.base_dir = Path(base_dir) if base_dir else None
        self.log = logging.getLogger(self.__class__.__name__)

    def plan(self, dependency: ResolvedDependency, options: StagingOptions) -> StagingAction:
        if dependency.file is None or not dependency.file_name:
            return StagingAction.SKIP
        if is_actionable(dependency, string_as_list(options.copy_types), options.copy_excludes):
            return StagingAction.COPY
        if is_actionable(dependency, string_as_list(options.unpack_types), options.unpack_excludes):
            return StagingAction.UNPACK
        return StagingAction.SKIP

    def stage(
        self,
        resolved: Iterable[ResolvedDependency],
        options: StagingOptions,
        report: Optional[StagingReport] = None,
    ) -> StagingReport:
        report = report or StagingReport(stage_directory=options.stage_directory)
        for dependency in resolved:
            report.add(self.stage_one(dependency, options))
        return report

    def stage_one(self, dependency: ResolvedDependency, options: StagingOptions) -> StagingEntry:
        if dependency.file is None:
            self.log.error("dependency %s, file is null", dependency)
            return StagingEntry(dependency.coordinate, StagingAction.SKIP, message="file is null")
        if not dependency.file_name:
            self.log.info("dependency %s: empty file name", dependency)
            return StagingEntry(dependency.coordinate, StagingAction.SKIP, message="empty file name")

        action = self.plan(dependency, options)
        if action is StagingAction.COPY:
            return self._copy(dependency, options)
        if action is StagingAction.UNPACK:
            return self._unpack(dependency, options)
        return StagingEntry(dependency.coordinate, StagingAction.SKIP)

    def _copy(self, dependency: ResolvedDependency, options: StagingOptions) -> StagingEntry:
        name = map_name(dependency.coordinate, options.mappings)
        dest_file = Path(options.stage_directory) / f"{name}.{dependency.coordinate.extension}"
        self.log.info("Copying %s to %s", dependency, self._relative(dest_file))
        try:
            dest_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(dependency.file, dest_file)
        except OSError as exc:
            self.log.error("Failed to copy %s to %s: %s", dependency.file, dest_file, exc)
            return StagingEntry(dependency.coordinate, StagingAction.SKIP, dest_file, message=str(exc))
        return StagingEntry(dependency.coordinate, StagingAction.COPY, dest_file)

    def _unpack(self, dependency: ResolvedDependency, options: StagingOptions) -> StagingEntry:
        name = map_name(dependency.coordinate, options.mappings)
        dest_dir = Path(options.stage_directory) / name
        self.log.info("Unpacking %s to %s", dependency, self._relative(dest_dir))
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StagingIOError(f"Cannot create {dest_dir}: {exc}") from exc
        self.extractor.extract(dependency.file, dest_dir, options.includes, options.excludes)
        return StagingEntry(dependency.coordinate, StagingAction.UNPACK, dest_dir)

    def _relative(self, path: Path) -> str:
        if self.base_dir is None:
            return str(path)
        try:
            return str(path.relative_to(self.base_dir))
        except ValueError:
            return str(path)
