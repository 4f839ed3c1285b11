"""Dependency classifier for depscribe.

Decides, for one ``(name, specifier)`` pair taken from a manifest, what kind
of specifier it is and produces a :class:`Dependency` record. The checks run
in a fixed order and the first match wins:

1. the name must satisfy the ecosystem's package-name grammar (override
   sections first derive the real name from a scoped key such as
   ``"parent/@scope/child"``);
2. the specifier must be a string; it is trimmed;
3. an alias prefix (``npm:other@^1.0.0``) is stripped and the alias target
   recorded as ``lookup_name``;
4. a ``file:`` prefix marks a local file reference;
5. a valid version or range resolves against the registry datasource
   (``*`` and ``""`` are recognised but skipped);
6. an ``owner/repo#ref`` reference resolves against the VCS tags datasource
   as a tag (the ref is a version) or a commit (7 or 40 hex digits).

Anything else is kept with a :class:`SkipReason` so that downstream
consumers still see that the dependency exists.

The classifier holds no per-manifest state; classifying the same pair twice
yields equal records.

Typical usage::

    classifier = DependencyClassifier(NPM_POLICY)
    dep = classifier.classify("dependencies", "lodash", "^4.17.0")
    dep.source_kind      # SourceKind.REGISTRY_VERSION
    dep.datasource       # "npm"
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from depscribe.utils.logger import get_logger
from depscribe.ecosystems import EcosystemPolicy
from depscribe.constants import GITHUB_BASE_URL
from depscribe.models.dependency import Dependency, SkipReason, SourceKind

logger = get_logger("core.classifier")

__all__ = ["DependencyClassifier"]

# Trailing "name" or "@scope/name" of an override-section key
_OVERRIDE_KEY_NAME = re.compile(r"((?:@[^/]+/)?[^/@]+)\Z")

# GitHub owner and repository names
_VCS_IDENTIFIER = re.compile(r"^[a-z\d](?:[a-z\d]|-(?=[a-z\d])){0,38}\Z")

_COMMIT_HASH = re.compile(r"^(?:[0-9a-f]{7}|[0-9a-f]{40})\Z")

# Applied in order to the part before "#"
_VCS_PREFIXES = (
    re.compile(r"^github:"),
    re.compile(r"^git\+"),
    re.compile(r"^https://github\.com/"),
    re.compile(r"\.git\Z"),
)


class DependencyClassifier:
    """Classify manifest entries according to an :class:`EcosystemPolicy`.

    Args:
        policy: Ecosystem policy providing the name grammar, versioning
            scheme, datasource table and special-name table.
    """

    def __init__(self, policy: EcosystemPolicy) -> None:
        self.policy = policy
        self.versioning = policy.versioning

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def classify_section(
        self,
        dep_type: str,
        entries: Dict[str, Any],
    ) -> List[Dependency]:
        """Classify every entry of one manifest section, in order."""
        return [self.classify(dep_type, key, value) for key, value in entries.items()]

    def classify(self, dep_type: str, key: str, value: Any) -> Dependency:
        """Classify one manifest entry.

        Args:
            dep_type: Manifest section the entry was declared in.
            key: Entry key as written in the manifest.
            value: Entry value; anything other than a string is recorded
                as an invalid value.

        Returns:
            A :class:`Dependency`; never ``None``.
        """
        name = self.derive_name(dep_type, key)
        dep = Dependency(
            name=name,
            dep_type=dep_type,
            pretty_dep_type=self.policy.dependency_sections.get(dep_type),
        )
        if name != key:
            dep.manager_data["key"] = key

        self._classify_specifier(dep, value)

        special = self.policy.special_names.get(name)
        if special is not None:
            dep.display_topic = special.topic
            dep.major_update_allowed = special.major_update_allowed

        return dep

    def derive_name(self, dep_type: str, key: str) -> str:
        """Return the dependency name a manifest key refers to.

        Keys in override sections may carry the path of the parent package,
        e.g. ``"webpack/**/@babel/core"``; only the trailing (possibly
        scoped) name is used for lookups. Other keys are returned unchanged.
        """
        if not isinstance(key, str) or dep_type not in self.policy.override_sections:
            return key
        match = _OVERRIDE_KEY_NAME.search(key)
        return match.group(1) if match else key

    # ------------------------------------------------------------------
    # Classification steps
    # ------------------------------------------------------------------

    def _classify_specifier(self, dep: Dependency, value: Any) -> None:
        if isinstance(value, str):
            dep.raw_specifier = value.strip()

        if not self.policy.name_validator(dep.name):
            dep.skip(SkipReason.INVALID_NAME)
            return
        if not isinstance(value, str):
            dep.skip(SkipReason.INVALID_VALUE)
            return

        current = dep.raw_specifier
        aliased = False

        alias_prefix = self.policy.alias_prefix
        if alias_prefix and current.startswith(alias_prefix):
            target = self._split_alias(current[len(alias_prefix):])
            if target is None:
                logger.debug("Invalid package alias: %s", current)
            else:
                dep.lookup_name, current = target
                aliased = True

        if current.startswith(self.policy.file_prefix):
            dep.source_kind = SourceKind.FILE_REFERENCE
            dep.skip(SkipReason.FILE_REFERENCE)
            return

        if self.versioning.is_valid(current):
            self._set_registry_value(dep, current, aliased)
            return

        self._classify_vcs_reference(dep, current)

    @staticmethod
    def _split_alias(target: str) -> Optional[Tuple[str, str]]:
        """Split ``name@range`` or ``@scope/name@range`` into its parts."""
        segments = target.split("@")
        if len(segments) == 2:
            return segments[0], segments[1]
        if len(segments) == 3:
            return f"{segments[0]}@{segments[1]}", segments[2]
        return None

    def _set_registry_value(self, dep: Dependency, value: str, aliased: bool) -> None:
        kind = SourceKind.REGISTRY_ALIAS if aliased else SourceKind.REGISTRY_VERSION
        dep.source_kind = kind
        dep.normalized_value = value
        dep.datasource = self.policy.datasource_for(kind)

        if value == "*":
            dep.skip(SkipReason.ANY_VERSION)
        elif value == "":
            dep.skip(SkipReason.EMPTY)

    def _classify_vcs_reference(self, dep: Dependency, value: str) -> None:
        hash_split = value.split("#")
        if len(hash_split) != 2:
            dep.skip(SkipReason.UNKNOWN_VERSION)
            return

        repo_part, ref = hash_split
        owner_repo = repo_part
        for prefix in _VCS_PREFIXES:
            owner_repo = prefix.sub("", owner_repo)

        repo_split = owner_repo.split("/")
        if len(repo_split) != 2:
            dep.skip(SkipReason.UNKNOWN_VERSION)
            return

        owner, repo = repo_split
        if not (_VCS_IDENTIFIER.match(owner) and _VCS_IDENTIFIER.match(repo)):
            dep.skip(SkipReason.UNKNOWN_VERSION)
            return

        if self.versioning.is_version(ref):
            dep.source_kind = SourceKind.VCS_TAG
            dep.normalized_value = self.versioning.valid(ref)
            dep.pin_digests = False
        elif _COMMIT_HASH.match(ref):
            dep.source_kind = SourceKind.VCS_COMMIT
            dep.normalized_value = None
            dep.current_digest = ref
        else:
            dep.skip(SkipReason.UNVERSIONED_REFERENCE)
            return

        dep.datasource = self.policy.datasource_for(dep.source_kind)
        dep.lookup_name = owner_repo
        dep.vcs_repo = owner_repo
        dep.source_url = f"{GITHUB_BASE_URL}{owner_repo}"
        dep.git_ref = True
