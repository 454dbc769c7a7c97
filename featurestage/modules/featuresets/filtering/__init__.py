from .matcher import ExclusionPattern, is_excluded, matches, parse_patterns
from .scope_type import is_actionable, is_scope_included, string_as_list

__all__ = [
    "ExclusionPattern",
    "is_excluded",
    "matches",
    "parse_patterns",
    "is_actionable",
    "is_scope_included",
    "string_as_list",
]
