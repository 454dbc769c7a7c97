"""Zip archive builder with reproducible entry timestamps."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo

from featurestage.modules.featuresets.domain import ConfigurationError, StagingIOError

from .patterns import PathSelector

DUPLICATE_MODES = ("add", "preserve", "fail")

DIR_MODE = 0o40755
FILE_MODE = 0o100644

_MIN_TIMESTAMP = datetime(1980, 1, 1, tzinfo=timezone.utc)
_MAX_TIMESTAMP = datetime(2099, 12, 31, 23, 59, 59, tzinfo=timezone.utc)


def parse_output_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a build output timestamp.

    ``None``, empty and single character values disable reproducible
    timestamps. Integers are epoch seconds, anything else ISO-8601.
    """
    if value is None or len(value.strip()) < 2:
        return None
    raw = value.strip()
    try:
        if raw.isdigit():
            parsed = datetime.fromtimestamp(int(raw), tz=timezone.utc)
        else:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid output timestamp {raw!r}: {exc}") from exc
    if not _MIN_TIMESTAMP <= parsed <= _MAX_TIMESTAMP:
        raise ConfigurationError(
            f"Output timestamp {raw!r} is outside the range 1980-01-01 to 2099-12-31"
        )
    return parsed.astimezone(timezone.utc)


@dataclass
class FileSet:
    directory: Path
    prefix: str = ""
    includes: str = ""
    excludes: str = ""
    description: str = ""

    def entries(self) -> List[Tuple[str, Path]]:
        root = Path(self.directory)
        if not root.is_dir():
            raise StagingIOError(f"Fileset directory {root} does not exist")
        selector = PathSelector(self.includes, self.excludes)
        prefix = self.prefix.strip("/")
        found: List[Tuple[str, Path]] = []
        for path in sorted(root.rglob("*")):
            if not path.is_file():
                continue
            relative = path.relative_to(root).as_posix()
            if not selector.is_selected(relative):
                continue
            name = f"{prefix}/{relative}" if prefix else relative
            found.append((name, path))
        return found


class ZipBuilder:
    """Writes filesets into a single zip archive."""

    def __init__(self) -> None:
        self.log = logging.getLogger(self.__class__.__name__)

    def build(
        self,
        target: Path,
        filesets: Iterable[FileSet],
        *,
        duplicate: str = "add",
        timestamp: Optional[datetime] = None,
    ) -> Path:
        if duplicate not in DUPLICATE_MODES:
            raise ConfigurationError(
                f"Invalid duplicate mode {duplicate!r}, expected one of {', '.join(DUPLICATE_MODES)}"
            )
        self.log.info("[zip] duplicate: %s", duplicate)

        files: List[Tuple[str, Path]] = []
        seen: Dict[str, Path] = {}
        for fileset in filesets:
            if fileset.description:
                self.log.info("[zip] %s", fileset.description)
            for name, path in fileset.entries():
                if name in seen:
                    if duplicate == "fail":
                        raise StagingIOError(f"Duplicate file {name} ({seen[name]} and {path})")
                    if duplicate == "preserve":
                        self.log.debug("[zip] %s already added, skipping %s", name, path)
                        continue
                seen.setdefault(name, path)
                files.append((name, path))

        directories = sorted({parent for name, _ in files for parent in _parent_dirs(name)})
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        date_time = _date_time(timestamp)
        try:
            with ZipFile(target, "w", compression=ZIP_DEFLATED) as zf:
                for directory in directories:
                    info = ZipInfo(directory, date_time=date_time or time.localtime()[:6])
                    info.external_attr = (DIR_MODE << 16) | 0x10
                    zf.writestr(info, b"")
                for name, path in sorted(files, key=lambda item: item[0]):
                    info = ZipInfo.from_file(path, arcname=name, strict_timestamps=False)
                    if date_time:
                        info.date_time = date_time
                    info.external_attr = FILE_MODE << 16
                    info.compress_type = ZIP_DEFLATED
                    zf.writestr(info, path.read_bytes())
        except OSError as exc:
            raise StagingIOError(f"Failed to create {target}: {exc}") from exc
        self.log.info("[zip] Building zip: %s (%d files)", target, len(files))
        return target


def _parent_dirs(name: str) -> List[str]:
    parts = name.split("/")[:-1]
    return ["/".join(parts[: index + 1]) + "/" for index in range(len(parts))]


def _date_time(timestamp: Optional[datetime]) -> Optional[Tuple[int, int, int, int, int, int]]:
    if timestamp is None:
        return None
    moment = max(timestamp, _MIN_TIMESTAMP)
    return (moment.year, moment.month, moment.day, moment.hour, moment.minute, moment.second)
