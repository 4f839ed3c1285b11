"""Ecosystem policy tables for depscribe.

The classifier, extractor and lock-file correlator are ecosystem-agnostic.
Everything that differs between ecosystems is expressed here as data and
passed in:

- which manifest sections declare dependencies (and which are override
  sections whose keys carry a scoping path),
- the package-name grammar and versioning scheme,
- which datasource each :class:`SourceKind` resolves against,
- names that need special handling (e.g. the ``node`` runtime in npm),
- which sibling lock files to look for and how to read them.

Two policies ship with depscribe: ``npm`` (``package.json``) and ``upm``
(Unity Package Manager ``Packages/manifest.json``).
"""

from __future__ import annotations

import re
from enum import Enum
from urllib.parse import quote
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Mapping, Optional, Tuple

from depscribe.exceptions import ConfigError
from depscribe.models.dependency import SourceKind
from depscribe.versioning import NpmVersioning, Versioning

__all__ = [
    "CustomJobPolicy",
    "EcosystemPolicy",
    "LockFileSpec",
    "LockFormat",
    "SchemaThreshold",
    "SpecialHandling",
    "ECOSYSTEMS",
    "NPM_POLICY",
    "UPM_POLICY",
    "CUSTOM_JOB_POLICY",
    "get_policy",
    "is_valid_npm_name",
]


# ---------------------------------------------------------------------------
# Policy building blocks
# ---------------------------------------------------------------------------


class LockFormat(str, Enum):
    """How a sibling lock file is read."""

    JSON_LOCK = "json-lock"
    EDITOR_VERSION = "editor-version"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class SchemaThreshold:
    """Constraint inferred from a lock file's schema version.

    When the lock declares ``lock_version >= min_lock_version`` and the
    manifest has no explicit constraint for ``tool``, ``constraint`` is set.
    """

    tool: str
    min_lock_version: int
    constraint: str


@dataclass(frozen=True)
class LockFileSpec:
    """A lock file looked for next to every manifest."""

    key: str
    relative_path: str
    lock_format: LockFormat
    threshold: Optional[SchemaThreshold] = None
    tool: Optional[str] = None


@dataclass(frozen=True)
class SpecialHandling:
    """Policy for a dependency name that must not be treated generically."""

    topic: str
    major_update_allowed: bool = False


@dataclass(frozen=True)
class EcosystemPolicy:
    """Everything ecosystem-specific the extraction pipeline needs."""

    name: str
    name_validator: Callable[[str], bool]
    versioning: Versioning
    dependency_sections: Mapping[str, str]
    datasources: Mapping[SourceKind, str]
    manifest_format: str = "json"
    override_sections: FrozenSet[str] = frozenset()
    special_names: Mapping[str, SpecialHandling] = field(default_factory=dict)
    lock_files: Tuple[LockFileSpec, ...] = ()
    alias_prefix: Optional[str] = "npm:"
    file_prefix: str = "file:"
    reads_engines: bool = False

    def datasource_for(self, kind: SourceKind) -> Optional[str]:
        return self.datasources.get(kind)


@dataclass(frozen=True)
class CustomJobPolicy:
    """Flat ``{id, version}`` job descriptors routed to one datasource."""

    marker: str = "custom_job"
    list_key: str = "packages"
    datasource: str = "nuget"
    dep_type: str = "nuget"


# ---------------------------------------------------------------------------
# Name grammars
# ---------------------------------------------------------------------------

# encodeURIComponent leaves these unescaped on top of quote()'s defaults
_URI_COMPONENT_SAFE = "!*'()"
_NPM_BLACKLIST = frozenset({"node_modules", "favicon.ico"})
_SCOPED_NAME = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)$")


def _is_uri_component(value: str) -> bool:
    return quote(value, safe=_URI_COMPONENT_SAFE) == value


def is_valid_npm_name(name: str) -> bool:
    """Return True if ``name`` is a valid npm package name for old packages.

    Uppercase letters and names longer than 214 characters are accepted,
    as npm does for packages published before those rules existed.

    Example::

        >>> is_valid_npm_name("@types/node")
        True
        >>> is_valid_npm_name("_private")
        False
    """
    if not isinstance(name, str) or not name:
        return False
    if name.startswith((".", "_")):
        return False
    if name.strip() != name:
        return False
    if name.lower() in _NPM_BLACKLIST:
        return False
    if _is_uri_component(name):
        return True

    match = _SCOPED_NAME.match(name)
    if match and match.group(1):
        scope, package = match.groups()
        return _is_uri_component(scope) and _is_uri_component(package)
    return False


# ---------------------------------------------------------------------------
# Shipped policies
# ---------------------------------------------------------------------------

_NPM_DATASOURCES: Dict[SourceKind, str] = {
    SourceKind.REGISTRY_VERSION: "npm",
    SourceKind.REGISTRY_ALIAS: "npm",
    SourceKind.VCS_TAG: "github-tags",
    SourceKind.VCS_COMMIT: "github-tags",
}

NPM_POLICY = EcosystemPolicy(
    name="npm",
    name_validator=is_valid_npm_name,
    versioning=NpmVersioning(),
    dependency_sections={
        "dependencies": "dependency",
        "devDependencies": "devDependency",
        "optionalDependencies": "optionalDependency",
        "peerDependencies": "peerDependency",
        "resolutions": "resolutions",
    },
    datasources=_NPM_DATASOURCES,
    override_sections=frozenset({"resolutions"}),
    special_names={"node": SpecialHandling(topic="Node.js")},
    lock_files=(
        LockFileSpec(
            key="npm_lock",
            relative_path="package-lock.json",
            lock_format=LockFormat.JSON_LOCK,
            threshold=SchemaThreshold(
                tool="npm", min_lock_version=2, constraint=">= 7.0.0"
            ),
        ),
        LockFileSpec(
            key="yarn_lock",
            relative_path="yarn.lock",
            lock_format=LockFormat.UNSUPPORTED,
        ),
        LockFileSpec(
            key="pnpm_shrinkwrap",
            relative_path="pnpm-lock.yaml",
            lock_format=LockFormat.UNSUPPORTED,
        ),
    ),
    reads_engines=True,
)

UPM_POLICY = EcosystemPolicy(
    name="upm",
    name_validator=is_valid_npm_name,
    versioning=NpmVersioning(),
    dependency_sections={"dependencies": "dependency"},
    datasources=_NPM_DATASOURCES,
    lock_files=(
        LockFileSpec(
            key="packages_lock",
            relative_path="packages-lock.json",
            lock_format=LockFormat.JSON_LOCK,
        ),
        LockFileSpec(
            key="project_version",
            relative_path="../ProjectSettings/ProjectVersion.txt",
            lock_format=LockFormat.EDITOR_VERSION,
            tool="unity",
        ),
    ),
)

CUSTOM_JOB_POLICY = CustomJobPolicy()

ECOSYSTEMS: Dict[str, EcosystemPolicy] = {
    NPM_POLICY.name: NPM_POLICY,
    UPM_POLICY.name: UPM_POLICY,
}


def get_policy(name: str) -> EcosystemPolicy:
    """Return the shipped policy called ``name``.

    Raises:
        ConfigError: No policy with that name exists.
    """
    try:
        return ECOSYSTEMS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown ecosystem '{name}' (expected one of: "
            f"{', '.join(sorted(ECOSYSTEMS))})",
            option="ecosystem",
        ) from None
