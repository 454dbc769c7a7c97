"""Packaging tasks run after staging."""

from .service import PackagingService, copy_file

__all__ = ["PackagingService", "copy_file"]
