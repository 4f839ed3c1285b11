"""Manifest extractor for depscribe.

Orchestrates the extraction pipeline for one manifest at a time:

    raw text -> decode -> classify every declared entry -> registry URLs
    -> sibling lock-file discovery -> :class:`PackageFile`

and runs the cross-file post-extraction pass over a whole batch (external
monorepo detection first, then lock-file correlation with one shared cache).

A second, flat path handles custom job descriptors: YAML documents with a
``custom_job`` marker whose ``packages`` list of ``{id, version}`` entries
maps straight onto dependency records for a single fixed datasource.

Extraction of independent files runs concurrently, bounded by
``concurrent_limit``. A file that cannot be read, decoded or extracted is
logged and dropped from the results; it never aborts the rest of the batch.

Example::

    extractor = ManifestExtractor(load_config())
    package_files = await extractor.extract_all_package_files(
        ["package.json", "packages/app/package.json"]
    )
    await extractor.post_extract(package_files)
"""

from __future__ import annotations

import os
import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from depscribe.exceptions import DepScribeError
from depscribe.utils.logger import get_logger
from depscribe.config import DepScribeConfig
from depscribe.core.classifier import DependencyClassifier
from depscribe.core.lockfiles import LockFileCache, LockFileCorrelator
from depscribe.models import Dependency, PackageFile, SkipReason, SourceKind
from depscribe.core.decoder import (
    DependencyManifest,
    decode_custom_job,
    decode_manifest,
)
from depscribe.ecosystems import (
    CUSTOM_JOB_POLICY,
    CustomJobPolicy,
    EcosystemPolicy,
    get_policy,
)
from depscribe.utils.filesystem import (
    get_sibling_file_name,
    local_file_exists,
    read_local_file,
)

logger = get_logger("core.extractor")

__all__ = ["ManifestExtractor", "MonorepoDetector", "RegistryResolver"]

#: ``(package_file, local_dir) -> registry URLs or None``
RegistryResolver = Callable[[str, str], Awaitable[Optional[List[str]]]]

#: Called with every package file of a project; may be sync or async.
MonorepoDetector = Callable[[List[PackageFile]], Any]

Reader = Callable[[str], Awaitable[Optional[str]]]

_REGISTRY_KINDS = (SourceKind.REGISTRY_VERSION, SourceKind.REGISTRY_ALIAS)


class ManifestExtractor:
    """Extract :class:`PackageFile` records from manifest files.

    Args:
        config: Loaded configuration; defaults are used when omitted.
        policy: Ecosystem policy. Looked up from ``config.ecosystem`` when
            omitted.
        registry_resolver: Collaborator returning the registry URLs that
            apply to a manifest's directory.
        reader: Coroutine function returning a file's text or ``None``.
        custom_job_policy: Marker, list key and datasource for custom job
            descriptors.
    """

    def __init__(
        self,
        config: Optional[DepScribeConfig] = None,
        policy: Optional[EcosystemPolicy] = None,
        *,
        registry_resolver: Optional[RegistryResolver] = None,
        reader: Reader = read_local_file,
        custom_job_policy: CustomJobPolicy = CUSTOM_JOB_POLICY,
    ) -> None:
        self.config = config if config is not None else DepScribeConfig()
        self.policy = policy if policy is not None else get_policy(self.config.ecosystem)
        self.registry_resolver = registry_resolver
        self.reader = reader
        self.custom_job_policy = custom_job_policy
        self.classifier = DependencyClassifier(self.policy)

    # ------------------------------------------------------------------
    # Single manifest
    # ------------------------------------------------------------------

    async def extract_package_file(
        self,
        content: str,
        file_path: str,
    ) -> Optional[PackageFile]:
        """Extract one dependency manifest.

        Args:
            content: Raw manifest text.
            file_path: Path of the manifest; sibling lock files are looked
                up relative to it.

        Returns:
            The :class:`PackageFile`, or ``None`` when the text is malformed
            or declares neither dependencies nor package metadata.
        """
        logger.debug("extract_package_file(%s)", file_path)
        manifest = decode_manifest(content, file_path, policy=self.policy)
        if manifest is None:
            return None

        deps: List[Dependency] = []
        for dep_type, entries in manifest.sections.items():
            deps.extend(self.classifier.classify_section(dep_type, entries))

        package_file = PackageFile(
            package_file=file_path,
            deps=deps,
            package_name=manifest.name,
            package_version=manifest.version,
            workspaces=manifest.workspaces,
        )
        if not deps and not package_file.has_metadata:
            logger.debug("No dependencies or package metadata in %s", file_path)
            return None

        await self._apply_registry_urls(package_file, manifest)
        package_file.lock_files = self._discover_lock_files(file_path)
        package_file.constraints = self._declared_constraints(manifest)
        package_file.has_file_refs = any(
            dep.skip_reason is SkipReason.FILE_REFERENCE for dep in deps
        )
        package_file.skip_installs = self._skip_installs(package_file.has_file_refs)
        return package_file

    async def extract_custom_job(
        self,
        content: str,
        file_path: str,
    ) -> Optional[PackageFile]:
        """Extract a custom job descriptor.

        Every ``{id, version}`` entry becomes a dependency resolved against
        the custom job datasource, all sharing the registry URLs resolved for
        the descriptor's directory.

        Returns:
            The :class:`PackageFile`, or ``None`` when the descriptor is
            malformed, lacks its marker, or lists no packages.
        """
        logger.debug("extract_custom_job(%s)", file_path)
        manifest = decode_custom_job(content, file_path, policy=self.custom_job_policy)
        if manifest is None or not manifest.packages:
            return None

        registry_urls = await self._resolve_registries(file_path)
        deps = [
            self._custom_job_dependency(entry, registry_urls)
            for entry in manifest.packages
        ]
        return PackageFile(
            package_file=file_path,
            deps=deps,
            registry_urls=registry_urls,
        )

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    async def extract_all_package_files(
        self,
        paths: Sequence[str],
        *,
        custom_job: bool = False,
    ) -> List[PackageFile]:
        """Read and extract many files concurrently.

        Args:
            paths: Manifest paths, in the order results should be returned.
            custom_job: Treat every path as a custom job descriptor.

        Returns:
            Records for the files that produced one, in input order.
        """
        semaphore = asyncio.Semaphore(self.config.concurrent_limit)

        async def extract_one(path: str) -> Optional[PackageFile]:
            async with semaphore:
                content = await self.reader(path)
                if not content:
                    logger.debug("Skipping empty or unreadable file %s", path)
                    return None
                try:
                    if custom_job:
                        return await self.extract_custom_job(content, path)
                    return await self.extract_package_file(content, path)
                except DepScribeError as exc:
                    logger.warning("Failed to extract %s: %s", path, exc)
                    return None

        results = await asyncio.gather(*(extract_one(str(path)) for path in paths))
        package_files = [result for result in results if result is not None]
        logger.info(
            "Extracted %d of %d file(s)", len(package_files), len(results)
        )
        return package_files

    async def post_extract(
        self,
        package_files: List[PackageFile],
        monorepo_detector: Optional[MonorepoDetector] = None,
    ) -> None:
        """Run the cross-file passes over a project's package files.

        The monorepo detector runs first, then every package file is
        correlated with its lock files against one shared cache.
        """
        if monorepo_detector is not None:
            result = monorepo_detector(package_files)
            if inspect.isawaitable(result):
                await result

        correlator = LockFileCorrelator(
            self.policy, reader=self.reader, cache=LockFileCache()
        )
        await correlator.correlate_all(package_files)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _resolve_registries(self, file_path: str) -> Optional[List[str]]:
        if self.registry_resolver is None:
            return None
        urls = await self.registry_resolver(file_path, os.path.dirname(file_path))
        return list(urls) if urls else None

    async def _apply_registry_urls(
        self,
        package_file: PackageFile,
        manifest: DependencyManifest,
    ) -> None:
        """Set manifest-level and per-dependency registry URLs.

        A dependency in a ``scopedRegistries`` scope (longest scope wins)
        uses that registry; others use the manifest's ``registry`` or, when
        the manifest has none, the resolver's list.
        """
        if manifest.registry:
            default: Optional[List[str]] = [manifest.registry]
        else:
            default = await self._resolve_registries(package_file.package_file)
        package_file.registry_urls = default

        scopes: List[tuple] = []
        for entry in manifest.scoped_registries:
            for scope in entry.get("scopes") or []:
                if isinstance(scope, str) and scope:
                    scopes.append((scope, entry["url"]))
        scopes.sort(key=lambda item: len(item[0]), reverse=True)

        for dep in package_file.deps:
            if dep.source_kind not in _REGISTRY_KINDS:
                continue
            name = dep.lookup_name or dep.name
            scoped_url = next(
                (url for scope, url in scopes if _in_scope(name, scope)), None
            )
            if scoped_url is not None:
                dep.registry_urls = [scoped_url]
            elif default:
                dep.registry_urls = list(default)

    def _discover_lock_files(self, file_path: str) -> Dict[str, Optional[str]]:
        lock_files: Dict[str, Optional[str]] = {}
        for spec in self.policy.lock_files:
            candidate = get_sibling_file_name(file_path, spec.relative_path)
            lock_files[spec.key] = candidate if local_file_exists(candidate) else None
        return lock_files

    def _declared_constraints(self, manifest: DependencyManifest) -> Dict[str, str]:
        # Manifest engines take precedence over configured defaults
        constraints = dict(self.config.constraints)
        constraints.update(manifest.engines)
        return constraints

    def _skip_installs(self, has_file_refs: bool) -> bool:
        if self.config.skip_installs is not None:
            return self.config.skip_installs
        return not has_file_refs

    def _custom_job_dependency(
        self,
        entry: Dict[str, Any],
        registry_urls: Optional[List[str]],
    ) -> Dependency:
        policy = self.custom_job_policy
        name = entry.get("id")
        version = entry.get("version")

        dep = Dependency(
            name=name,
            dep_type=policy.dep_type,
            datasource=policy.datasource,
            registry_urls=list(registry_urls) if registry_urls else None,
        )
        if not isinstance(name, str) or not name.strip():
            return dep.skip(SkipReason.INVALID_NAME)
        # YAML reads unquoted versions such as 12.0 or 3 as numbers
        if isinstance(version, (int, float)) and not isinstance(version, bool):
            version = str(version)
        if not isinstance(version, str):
            return dep.skip(SkipReason.INVALID_VALUE)

        dep.raw_specifier = version.strip()
        dep.normalized_value = dep.raw_specifier
        dep.source_kind = SourceKind.REGISTRY_VERSION
        if not dep.normalized_value:
            dep.skip(SkipReason.EMPTY)
        return dep


def _in_scope(name: Any, scope: str) -> bool:
    """Return True if ``name`` equals ``scope`` or is nested beneath it."""
    if not isinstance(name, str):
        return False
    return name == scope or (
        name.startswith(scope) and name[len(scope)] in "./"
    )
