"""
Unified data model exports for depscribe.

Example:
    >>> from depscribe.models import Dependency, PackageFile, SkipReason
"""

from __future__ import annotations

from depscribe.models.dependency import Dependency, SkipReason, SourceKind
from depscribe.models.package_file import LockFile, PackageFile

__all__ = [
    "Dependency",
    "SkipReason",
    "SourceKind",
    "LockFile",
    "PackageFile",
]
