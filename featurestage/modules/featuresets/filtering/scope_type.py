"""Scope and type filters deciding whether a dependency is staged."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from featurestage.modules.featuresets.domain import ResolvedDependency

from .matcher import PatternLike, is_excluded

log = logging.getLogger(__name__)


def string_as_list(value: Optional[str], sep: str = ",") -> List[str]:
    """Split a separated configuration string; ``None`` or ``""`` gives ``[]``."""
    if not value:
        return []
    return [item.strip() for item in value.split(sep)]


def is_scope_included(
    scope: str,
    include_scopes: Sequence[str],
    exclude_scopes: Sequence[str],
    *,
    empty_include_means_all: bool = False,
) -> bool:
    """Membership test against the include and exclude scope lists.

    An empty include list matches nothing unless ``empty_include_means_all`` is set.
    """
    if scope in exclude_scopes:
        return False
    if not include_scopes and empty_include_means_all:
        return True
    return scope in include_scopes


def is_actionable(
    dependency: ResolvedDependency,
    action_types: Sequence[str],
    action_excludes: Iterable[PatternLike],
) -> bool:
    type_included = dependency.coordinate.extension in action_types
    excluded = is_excluded(action_excludes, dependency.coordinate)
    if excluded:
        log.info("Excluded: %s", dependency.coordinate)
    return type_included and not excluded
