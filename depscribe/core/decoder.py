"""Manifest decoder for depscribe.

Turns raw manifest text into one of a small set of expected document shapes:

- :class:`DependencyManifest` — a mapping with named dependency sections
  (``package.json``, Unity ``manifest.json``) plus manifest metadata.
- :class:`CustomJobManifest` — a flat job descriptor with a marker field and
  a list of ``{id, version}`` package entries.

Anything else is rejected here, once, so that the extractor never probes
fields defensively. Decoding never raises to the caller: malformed text is
logged and yields ``None``.

Typical usage::

    manifest = decode_manifest(content, "package.json", policy=NPM_POLICY)
    if manifest is None:
        ...  # skip the file
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import yaml

from depscribe.utils.logger import get_logger
from depscribe.exceptions import ManifestDecodeError
from depscribe.ecosystems import CustomJobPolicy, EcosystemPolicy
from depscribe.constants import LOG_CONTENT_MAX_LENGTH

logger = get_logger("core.decoder")

__all__ = [
    "CustomJobManifest",
    "DependencyManifest",
    "Manifest",
    "decode_custom_job",
    "decode_manifest",
    "load_document",
]


@dataclass
class DependencyManifest:
    """A manifest declaring dependencies in named sections.

    Attributes:
        sections: Section name to its ``{name: specifier}`` mapping, in the
            policy's section order. Only sections present in the document
            and shaped as mappings are included.
        name: Declared package name.
        version: Declared package version.
        workspaces: Declared workspace configuration.
        engines: Declared tool constraints (``engines`` map).
        registry: Default registry URL (Unity manifests).
        scoped_registries: ``scopedRegistries`` entries (Unity manifests).
    """

    sections: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    name: Optional[str] = None
    version: Optional[str] = None
    workspaces: Any = None
    engines: Dict[str, str] = field(default_factory=dict)
    registry: Optional[str] = None
    scoped_registries: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class CustomJobManifest:
    """A custom job descriptor: a flat list of package entries."""

    packages: List[Dict[str, Any]] = field(default_factory=list)


Manifest = Union[DependencyManifest, CustomJobManifest]


def load_document(content: str, file_path: str, *, fmt: str = "json") -> Any:
    """Decode ``content`` as JSON or YAML.

    Raises:
        ManifestDecodeError: The text is not valid in the requested format.
    """
    try:
        if fmt == "yaml":
            # YAML is a superset of JSON, so JSON manifests decode here too
            return yaml.safe_load(content)
        return json.loads(content)
    except (ValueError, RecursionError, yaml.YAMLError) as exc:
        raise ManifestDecodeError(
            f"Failed to parse {fmt.upper()} manifest: {exc}",
            file_path=file_path,
            content=content,
            original_error=exc,
        ) from exc


def _load_or_none(content: str, file_path: str, fmt: str) -> Any:
    try:
        return load_document(content, file_path, fmt=fmt)
    except ManifestDecodeError as exc:
        logger.warning(
            "Failed to parse file %s: %s (content: %r)",
            file_path,
            exc.original_error,
            content[:LOG_CONTENT_MAX_LENGTH],
        )
        return None


def decode_manifest(
    content: str,
    file_path: str,
    *,
    policy: EcosystemPolicy,
) -> Optional[DependencyManifest]:
    """Decode a dependency-section manifest.

    Args:
        content: Raw manifest text.
        file_path: Manifest path, used for diagnostics only.
        policy: Ecosystem policy naming the format and dependency sections.

    Returns:
        The decoded :class:`DependencyManifest`, or ``None`` when the text is
        malformed or the top level is not a mapping.
    """
    document = _load_or_none(content, file_path, policy.manifest_format)
    if document is None:
        return None

    if not isinstance(document, dict):
        logger.debug(
            "Manifest %s is a %s, not a mapping; skipping",
            file_path,
            type(document).__name__,
        )
        return None

    manifest = DependencyManifest(
        name=_string_or_none(document.get("name")),
        version=_string_or_none(document.get("version")),
        workspaces=document.get("workspaces"),
        registry=_string_or_none(document.get("registry")),
    )

    for section in policy.dependency_sections:
        value = document.get(section)
        if value is None:
            continue
        if not isinstance(value, dict):
            logger.debug(
                "Ignoring %s in %s: expected a mapping, got %s",
                section,
                file_path,
                type(value).__name__,
            )
            continue
        manifest.sections[section] = value

    engines = document.get("engines")
    if policy.reads_engines and isinstance(engines, dict):
        manifest.engines = {
            str(tool): constraint
            for tool, constraint in engines.items()
            if isinstance(constraint, str)
        }

    scoped = document.get("scopedRegistries")
    if isinstance(scoped, list):
        manifest.scoped_registries = [
            entry
            for entry in scoped
            if isinstance(entry, dict) and isinstance(entry.get("url"), str)
        ]

    return manifest


def decode_custom_job(
    content: str,
    file_path: str,
    *,
    policy: CustomJobPolicy,
) -> Optional[CustomJobManifest]:
    """Decode a custom job descriptor.

    The document must be a YAML (or JSON) mapping containing the policy's
    marker key. A missing or non-list package list decodes to a manifest
    with no packages.

    Returns:
        The decoded :class:`CustomJobManifest`, or ``None`` when the text is
        malformed or the marker is absent.
    """
    document = _load_or_none(content, file_path, "yaml")
    if document is None:
        return None

    if not isinstance(document, dict) or policy.marker not in document:
        logger.debug("No %s marker in %s; skipping", policy.marker, file_path)
        return None

    packages = document.get(policy.list_key)
    if not isinstance(packages, list):
        return CustomJobManifest()

    return CustomJobManifest(
        packages=[entry for entry in packages if isinstance(entry, dict)]
    )


def _string_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None
