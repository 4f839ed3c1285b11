"""
Dependency record model for depscribe.

A :class:`Dependency` is produced for every entry declared in a manifest,
including entries that cannot be resolved; those carry a
:class:`SkipReason` instead of being dropped.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class SourceKind(str, Enum):
    """Form of the specifier a dependency was declared with."""

    REGISTRY_VERSION = "registry-version"
    REGISTRY_ALIAS = "registry-alias"
    FILE_REFERENCE = "file-reference"
    VCS_TAG = "vcs-tag"
    VCS_COMMIT = "vcs-commit"
    UNKNOWN = "unknown"


class SkipReason(str, Enum):
    """Why a dependency must not be resolved further."""

    INVALID_NAME = "invalid-name"
    INVALID_VALUE = "invalid-value"
    EMPTY = "empty"
    ANY_VERSION = "any-version"
    FILE_REFERENCE = "file-reference"
    UNKNOWN_VERSION = "unknown-version"
    UNVERSIONED_REFERENCE = "unversioned-reference"


@dataclass
class Dependency:
    """One manifest-declared dependency.

    Attributes:
        name: Dependency name used for lookups (derived for override
            sections, see ``manager_data``).
        dep_type: Manifest section the entry was declared in.
        raw_specifier: The declared specifier, trimmed.
        normalized_value: Version or range after alias stripping; ``None``
            for file references and commit-pinned VCS references.
        source_kind: Specifier form, see :class:`SourceKind`.
        lookup_name: Name to query instead of ``name`` (alias target or
            ``owner/repo``).
        datasource: Id of the upstream source to resolve against.
        skip_reason: Set when the record must not be resolved.
        locked_version: Concrete version found in a lock file.
        registry_urls: Registry endpoints for this dependency; ``None``
            inherits the default registry.
        current_digest: Commit hash for commit-pinned VCS references.
        source_url: Web URL of the VCS repository.
        vcs_repo: ``owner/repo`` of a VCS reference.
        git_ref: True for VCS references (tags or commits).
        pin_digests: ``False`` disables digest pinning for this record.
        pretty_dep_type: Singular display form of ``dep_type``.
        display_topic: Fixed topic used when grouping special dependencies.
        major_update_allowed: ``False`` excludes major updates.
        manager_data: Extra bookkeeping, e.g. the original manifest key.
    """

    name: Optional[str] = None
    dep_type: Optional[str] = None
    raw_specifier: Optional[str] = None
    normalized_value: Optional[str] = None
    source_kind: SourceKind = SourceKind.UNKNOWN
    lookup_name: Optional[str] = None
    datasource: Optional[str] = None
    skip_reason: Optional[SkipReason] = None
    locked_version: Optional[str] = None
    registry_urls: Optional[List[str]] = None
    current_digest: Optional[str] = None
    source_url: Optional[str] = None
    vcs_repo: Optional[str] = None
    git_ref: bool = False
    pin_digests: Optional[bool] = None
    pretty_dep_type: Optional[str] = None
    display_topic: Optional[str] = None
    major_update_allowed: bool = True
    manager_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_resolvable(self) -> bool:
        """True when downstream resolution may look this record up."""
        return self.skip_reason is None

    def skip(self, reason: SkipReason) -> "Dependency":
        """Mark the record as skipped and return it."""
        self.skip_reason = reason
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable view, omitting unset fields."""
        data: Dict[str, Any] = {
            "name": self.name,
            "dep_type": self.dep_type,
            "raw_specifier": self.raw_specifier,
            "normalized_value": self.normalized_value,
            "source_kind": self.source_kind.value,
            "lookup_name": self.lookup_name,
            "datasource": self.datasource,
            "skip_reason": self.skip_reason.value if self.skip_reason else None,
            "locked_version": self.locked_version,
            "registry_urls": self.registry_urls,
            "current_digest": self.current_digest,
            "source_url": self.source_url,
            "pin_digests": self.pin_digests,
            "display_topic": self.display_topic,
        }
        result = {key: value for key, value in data.items() if value is not None}
        if self.git_ref:
            result["git_ref"] = True
        if not self.major_update_allowed:
            result["major_update_allowed"] = False
        if self.manager_data:
            result["manager_data"] = dict(self.manager_data)
        return result
