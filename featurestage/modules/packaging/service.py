"""Packaging tasks: zip archives and single file copies."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from featurestage.modules.archive import FileSet, ZipBuilder, parse_output_timestamp
from featurestage.modules.featuresets.domain import StagingIOError
from featurestage.settings import Settings


def copy_file(source: Path, dest: Path, *, overwrite: bool = True) -> Path:
    """Copy ``source`` to ``dest``, creating parent directories."""
    log = logging.getLogger(__name__)
    source, dest = Path(source), Path(dest)
    if not source.is_file():
        raise StagingIOError(f"Failed to copy {source} to {dest}: source does not exist")
    if dest.exists() and not overwrite:
        raise StagingIOError(f"Failed to copy {source} to {dest}: destination exists")
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        log.info("Copying %s to %s", source, dest)
        shutil.copyfile(source, dest)
    except OSError as exc:
        raise StagingIOError(f"Failed to copy {source} to {dest}") from exc
    return dest


class PackagingService:
    """Builds distribution archives from staged directories."""

    def __init__(self, settings: Settings, builder: Optional[ZipBuilder] = None) -> None:
        self.settings = settings
        self.builder = builder or ZipBuilder()
        self.log = logging.getLogger(self.__class__.__name__)

    def zip(
        self,
        target: Path,
        filesets: Optional[Sequence[FileSet]] = None,
        *,
        duplicate: Optional[str] = None,
        output_timestamp: Optional[str] = None,
    ) -> Path:
        """Zip ``filesets`` into ``target``; without filesets the build directory is zipped."""
        sets: List[FileSet] = list(filesets or [])
        if not sets:
            sets.append(FileSet(directory=Path(self.settings.build_directory)))
        timestamp = parse_output_timestamp(
            output_timestamp if output_timestamp is not None else self.settings.output_timestamp
        )
        return self.builder.build(
            Path(target),
            sets,
            duplicate=duplicate or self.settings.zip_duplicate,
            timestamp=timestamp,
        )

    def copy_file(self, source: Path, dest: Path, *, overwrite: bool = True) -> Path:
        return copy_file(source, dest, overwrite=overwrite)
