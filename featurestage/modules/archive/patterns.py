"""Ant-style include/exclude path selection."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern


def split_patterns(value: Optional[str]) -> List[str]:
    """Split a comma separated pattern list, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _segment_regex(segment: str) -> str:
    out = []
    for char in segment:
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        else:
            out.append(re.escape(char))
    return "".join(out)


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> Pattern[str]:
    """Compile one ant pattern; ``**`` spans directories and a trailing ``/`` means ``/**``."""
    normalized = pattern.strip().replace("\\", "/")
    if normalized.endswith("/"):
        normalized += "**"
    parts = normalized.lstrip("/").split("/")
    regex = ""
    for index, part in enumerate(parts):
        if part == "**":
            regex += "(?:[^/]*(?:/|$))*"
            continue
        regex += _segment_regex(part)
        if index < len(parts) - 1:
            regex += "/"
    return re.compile(regex)


def match_path(pattern: str, path: str) -> bool:
    candidate = path.replace("\\", "/").lstrip("/")
    return compile_pattern(pattern).fullmatch(candidate) is not None


class PathSelector:
    """Selects archive entries the way an include/exclude file selector does.

    With no includes every path is included; excludes always win.
    """

    def __init__(self, includes: Optional[str] = None, excludes: Optional[str] = None) -> None:
        self.includes = split_patterns(includes)
        self.excludes = split_patterns(excludes)

    @property
    def active(self) -> bool:
        return bool(self.includes or self.excludes)

    def is_selected(self, path: str) -> bool:
        if self.includes and not _any_match(self.includes, path):
            return False
        return not _any_match(self.excludes, path)


def _any_match(patterns: Iterable[str], path: str) -> bool:
    return any(match_path(pattern, path) for pattern in patterns)
