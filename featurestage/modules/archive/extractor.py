"""Archive extraction with include/exclude selection."""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path
from typing import Optional, Protocol
from zipfile import BadZipFile, ZipFile

from featurestage.modules.featuresets.domain import StagingIOError, UnknownArchiveFormatError

from .patterns import PathSelector

ZIP_SUFFIXES = (".zip", ".jar", ".war", ".rar", ".ear")
TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz", ".txz")


class Extractor(Protocol):
    def extract(
        self,
        source: Path,
        dest_dir: Path,
        includes: Optional[str] = None,
        excludes: Optional[str] = None,
    ) -> None:  # pragma: no cover - interface
        ...


def describe_unpack(source: Path, dest_dir: Path, includes: Optional[str], excludes: Optional[str]) -> str:
    msg = f"Unpacking {source} to {dest_dir}"
    if includes and excludes:
        msg += f' with includes "{includes}" and excludes "{excludes}"'
    elif includes:
        msg += f' with includes "{includes}"'
    elif excludes:
        msg += f' with excludes "{excludes}"'
    return msg


class ArchiveExtractor:
    """Stateless extractor for zip-family and tar-family archives."""

    def __init__(self) -> None:
        self.log = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def archive_kind(source: Path) -> Optional[str]:
        name = source.name.lower()
        if name.endswith(TAR_SUFFIXES):
            return "tar"
        if name.endswith(ZIP_SUFFIXES):
            return "zip"
        return None

    def extract(
        self,
        source: Path,
        dest_dir: Path,
        includes: Optional[str] = None,
        excludes: Optional[str] = None,
    ) -> None:
        source = Path(source)
        dest_dir = Path(dest_dir)
        kind = self.archive_kind(source)
        if kind is None:
            raise UnknownArchiveFormatError(source)

        self.log.debug(describe_unpack(source, dest_dir, includes, excludes))
        dest_dir.mkdir(parents=True, exist_ok=True)
        selector = PathSelector(includes, excludes)
        try:
            if kind == "zip":
                count = self._extract_zip(source, dest_dir, selector)
            else:
                count = self._extract_tar(source, dest_dir, selector)
        except (BadZipFile, tarfile.TarError, OSError) as exc:
            raise StagingIOError(f"Error unpacking file: {source} to: {dest_dir}\r\n{exc}") from exc
        self.log.debug("Extracted %d entries from %s", count, source)

    def _extract_zip(self, source: Path, dest_dir: Path, selector: PathSelector) -> int:
        count = 0
        with ZipFile(source, "r") as zf:
            for info in zf.infolist():
                if info.is_dir():
                    if not selector.active:
                        self._target(dest_dir, info.filename).mkdir(parents=True, exist_ok=True)
                    continue
                if not selector.is_selected(info.filename):
                    continue
                target = self._target(dest_dir, info.filename)
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                count += 1
        return count

    def _extract_tar(self, source: Path, dest_dir: Path, selector: PathSelector) -> int:
        count = 0
        with tarfile.open(source, "r:*") as tf:
            for member in tf.getmembers():
                if member.isdir():
                    if not selector.active:
                        self._target(dest_dir, member.name).mkdir(parents=True, exist_ok=True)
                    continue
                if not member.isfile():
                    self.log.debug("Ignoring non regular entry %s in %s", member.name, source)
                    continue
                if not selector.is_selected(member.name):
                    continue
                target = self._target(dest_dir, member.name)
                target.parent.mkdir(parents=True, exist_ok=True)
                src = tf.extractfile(member)
                if src is None:
                    continue
                with src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                count += 1
        return count

    @staticmethod
    def _target(dest_dir: Path, entry_name: str) -> Path:
        root = dest_dir.resolve()
        target = (root / entry_name.lstrip("/")).resolve()
        if target != root and root not in target.parents:
            raise StagingIOError(f"Entry {entry_name} escapes destination {dest_dir}")
        return target
