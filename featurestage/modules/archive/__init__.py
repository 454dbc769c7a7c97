"""Archive services: extraction and reproducible zip creation."""

from .extractor import ArchiveExtractor, Extractor
from .patterns import PathSelector, match_path, split_patterns
from .zipper import FileSet, ZipBuilder, parse_output_timestamp

__all__ = [
    "ArchiveExtractor",
    "Extractor",
    "PathSelector",
    "match_path",
    "split_patterns",
    "FileSet",
    "ZipBuilder",
    "parse_output_timestamp",
]
