"""
Package-file and lock-file models for depscribe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from depscribe.models.dependency import Dependency


@dataclass
class PackageFile:
    """Everything extracted from one manifest file.

    Each package file exclusively owns its :class:`Dependency` records.

    Attributes:
        package_file: Path of the manifest.
        deps: Dependency records in declaration order.
        lock_files: Lock-file key to discovered sibling path (``None`` when
            the sibling does not exist).
        constraints: Tool name to version constraint, e.g.
            ``{"npm": ">= 7.0.0"}``.
        monorepo: Metadata written by the external monorepo detector.
        package_name: ``name`` declared by the manifest.
        package_version: ``version`` declared by the manifest.
        workspaces: Workspace configuration declared by the manifest.
        registry_urls: Manifest-level default registry endpoints.
        has_file_refs: True when any dependency is a local file reference.
        skip_installs: Whether downstream tooling may skip installs.
    """

    package_file: Optional[str] = None
    deps: List[Dependency] = field(default_factory=list)
    lock_files: Dict[str, Optional[str]] = field(default_factory=dict)
    constraints: Dict[str, str] = field(default_factory=dict)
    monorepo: Dict[str, Any] = field(default_factory=dict)
    package_name: Optional[str] = None
    package_version: Optional[str] = None
    workspaces: Any = None
    registry_urls: Optional[List[str]] = None
    has_file_refs: bool = False
    skip_installs: Optional[bool] = None

    @property
    def has_metadata(self) -> bool:
        """True when the manifest declares a name, version or workspaces."""
        return bool(self.package_name or self.package_version or self.workspaces)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable view of the record."""
        return {
            "package_file": self.package_file,
            "package_name": self.package_name,
            "package_version": self.package_version,
            "lock_files": {k: v for k, v in self.lock_files.items() if v},
            "constraints": dict(self.constraints),
            "has_file_refs": self.has_file_refs,
            "skip_installs": self.skip_installs,
            "deps": [dep.to_dict() for dep in self.deps],
        }


@dataclass
class LockFile:
    """Parsed contents of one lock file, shared read-only once cached.

    Attributes:
        path: Resolved path of the lock file.
        lock_version: Schema version declared by the lock file.
        locked_versions: Dependency name to installed concrete version.
        tool_version: Tool version pinned by the file (editor version).
    """

    path: str
    lock_version: Optional[int] = None
    locked_versions: Dict[str, str] = field(default_factory=dict)
    tool_version: Optional[str] = None
