"""Lock-file correlation for depscribe.

Sibling lock files are discovered while a manifest is extracted (their
paths land in :attr:`PackageFile.lock_files`). This module reads them,
parses each distinct file once, and backfills
:attr:`Dependency.locked_version` on every dependency the lock pins.

Two lock formats are understood:

- **JSON locks** (``package-lock.json``, Unity ``packages-lock.json``):
  versions come from ``dependencies.<name>.version`` and, for npm lock
  schema 2+, from ``packages["node_modules/<name>"].version``. The schema
  version (``lockfileVersion``) may imply a minimum tool version, which is
  recorded in :attr:`PackageFile.constraints` unless the manifest already
  declares one.
- **Editor version files** (Unity ``ProjectVersion.txt``): the
  ``m_EditorVersion`` value becomes the tool constraint when unset.

Lock files in other formats (``yarn.lock``, ``pnpm-lock.yaml``) are noted
and skipped. A missing lock file is not an error; a lock file that cannot be
read or parsed is logged and only that manifest's correlation is skipped.

Parsed lock files are shared through a :class:`LockFileCache`, a keyed
single-flight structure: concurrent requests for the same resolved path wait
on one per-path :class:`asyncio.Lock` and at most one of them parses.

Typical usage::

    correlator = LockFileCorrelator(NPM_POLICY)
    await correlator.correlate_all(package_files)
"""

from __future__ import annotations

import json
import asyncio
from typing import Awaitable, Callable, Dict, List, Optional

import yaml

from depscribe.exceptions import LockFileError
from depscribe.utils.logger import get_logger
from depscribe.models import LockFile, PackageFile
from depscribe.utils.filesystem import cache_key_for, read_local_file
from depscribe.ecosystems import EcosystemPolicy, LockFileSpec, LockFormat

logger = get_logger("core.lockfiles")

__all__ = [
    "LockFileCache",
    "LockFileCorrelator",
    "get_locked_versions",
    "parse_editor_version",
    "parse_json_lock",
]

Reader = Callable[[str], Awaitable[Optional[str]]]
Loader = Callable[[str], Awaitable[Optional[LockFile]]]

_NODE_MODULES_PREFIX = "node_modules/"


# ---------------------------------------------------------------------------
# Single-flight cache
# ---------------------------------------------------------------------------


class LockFileCache:
    """Per-run cache of parsed lock files keyed by resolved path.

    A failed parse is cached as ``None``; parse failures are terminal for
    the run and are not retried.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Optional[LockFile]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def get(self, path: str, loader: Loader) -> Optional[LockFile]:
        """Return the lock file at ``path``, loading it at most once.

        Args:
            path: Lock-file path; equivalent spellings share one entry.
            loader: Coroutine function that reads and parses ``path``.

        Returns:
            The cached :class:`LockFile`, or ``None`` if loading failed.
        """
        key = cache_key_for(path)

        # Fast path: no lock needed once populated
        if key in self._entries:
            return self._entries[key]

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another task may have loaded it while we waited
            if key in self._entries:
                return self._entries[key]

            logger.debug("Retrieving/parsing %s", path)
            result = await loader(path)
            self._entries[key] = result
            return result

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and cache_key_for(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def parse_json_lock(content: str, path: str) -> LockFile:
    """Parse an npm-style or Unity JSON lock file.

    Raises:
        LockFileError: The content is not a JSON object.
    """
    try:
        data = json.loads(content)
    except (ValueError, RecursionError) as exc:
        raise LockFileError(
            f"Invalid JSON: {exc}", lock_file=path, lock_format="json-lock"
        ) from exc
    if not isinstance(data, dict):
        raise LockFileError(
            "Lock file is not a JSON object", lock_file=path, lock_format="json-lock"
        )

    lock_version = data.get("lockfileVersion")
    if isinstance(lock_version, bool) or not isinstance(lock_version, int):
        lock_version = None

    locked_versions: Dict[str, str] = {}

    # Schema 2+: flat "packages" map keyed by install path
    packages = data.get("packages")
    if isinstance(packages, dict):
        for install_path, meta in packages.items():
            if not install_path.startswith(_NODE_MODULES_PREFIX):
                continue
            name = install_path[len(_NODE_MODULES_PREFIX):]
            # Nested installs belong to another package's subtree
            if f"/{_NODE_MODULES_PREFIX}" in name or not isinstance(meta, dict):
                continue
            version = meta.get("version")
            if isinstance(version, str):
                locked_versions.setdefault(name, version)

    # Schema 1 and Unity: "dependencies" map keyed by name
    dependencies = data.get("dependencies")
    if isinstance(dependencies, dict):
        for name, meta in dependencies.items():
            if isinstance(meta, dict) and isinstance(meta.get("version"), str):
                locked_versions.setdefault(name, meta["version"])

    return LockFile(
        path=path,
        lock_version=lock_version,
        locked_versions=locked_versions,
    )


def parse_editor_version(content: str, path: str) -> LockFile:
    """Parse a Unity ``ProjectVersion.txt`` file.

    Raises:
        LockFileError: The content is not YAML or lacks ``m_EditorVersion``.
    """
    # Constructor errors (impossible dates and the like) surface as ValueError
    try:
        data = yaml.safe_load(content)
    except (yaml.YAMLError, ValueError, RecursionError) as exc:
        raise LockFileError(
            f"Invalid YAML: {exc}", lock_file=path, lock_format="editor-version"
        ) from exc

    version = data.get("m_EditorVersion") if isinstance(data, dict) else None
    if version is None:
        raise LockFileError(
            "No m_EditorVersion entry", lock_file=path, lock_format="editor-version"
        )
    return LockFile(path=path, tool_version=str(version))


_PARSERS = {
    LockFormat.JSON_LOCK: parse_json_lock,
    LockFormat.EDITOR_VERSION: parse_editor_version,
}


# ---------------------------------------------------------------------------
# Correlator
# ---------------------------------------------------------------------------


class LockFileCorrelator:
    """Backfill locked versions and tool constraints from sibling lock files.

    Args:
        policy: Ecosystem policy listing the lock files and their formats.
        reader: Coroutine function returning file text or ``None``.
        cache: Shared cache; a fresh one is created when omitted.
    """

    def __init__(
        self,
        policy: EcosystemPolicy,
        *,
        reader: Reader = read_local_file,
        cache: Optional[LockFileCache] = None,
    ) -> None:
        self.policy = policy
        self.reader = reader
        self.cache = cache if cache is not None else LockFileCache()

    async def correlate_all(self, package_files: List[PackageFile]) -> None:
        """Correlate every package file concurrently against one cache."""
        logger.debug("Finding locked versions")
        results = await asyncio.gather(
            *(self.correlate(pf) for pf in package_files),
            return_exceptions=True,
        )
        for package_file, result in zip(package_files, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Lock file correlation failed for %s: %s",
                    package_file.package_file,
                    result,
                )
            elif isinstance(result, BaseException):
                raise result

    async def correlate(self, package_file: PackageFile) -> None:
        """Correlate one package file with its discovered lock files.

        Only the first JSON lock present is applied to the dependencies.
        """
        applied_lock = False

        for spec in self.policy.lock_files:
            path = package_file.lock_files.get(spec.key)
            if not path:
                continue

            if spec.lock_format is LockFormat.UNSUPPORTED:
                logger.debug(
                    "Found %s for %s; correlation for this format is not supported",
                    path,
                    package_file.package_file,
                )
                continue

            if spec.lock_format is LockFormat.JSON_LOCK and applied_lock:
                continue

            logger.debug("Found %s for %s", path, package_file.package_file)
            lock = await self.cache.get(path, self._loader_for(spec))
            if lock is None:
                continue

            if spec.lock_format is LockFormat.JSON_LOCK:
                self._apply_lock(package_file, lock, spec)
                applied_lock = True
            else:
                self._apply_tool_version(package_file, lock, spec)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _loader_for(self, spec: LockFileSpec) -> Loader:
        parser = _PARSERS[spec.lock_format]

        async def load(path: str) -> Optional[LockFile]:
            content = await self.reader(path)
            if content is None:
                logger.debug("Lock file %s has no content", path)
                return None
            try:
                return parser(content, path)
            except LockFileError as exc:
                logger.warning("Failed to parse lock file %s: %s", path, exc)
                return None

        return load

    def _apply_lock(
        self,
        package_file: PackageFile,
        lock: LockFile,
        spec: LockFileSpec,
    ) -> None:
        threshold = spec.threshold
        # Never override an explicitly declared constraint
        if threshold is not None and not package_file.constraints.get(threshold.tool):
            if (
                lock.lock_version is not None
                and lock.lock_version >= threshold.min_lock_version
            ):
                package_file.constraints[threshold.tool] = threshold.constraint

        versioning = self.policy.versioning
        for dep in package_file.deps:
            dep.locked_version = versioning.valid(lock.locked_versions.get(dep.name))

    @staticmethod
    def _apply_tool_version(
        package_file: PackageFile,
        lock: LockFile,
        spec: LockFileSpec,
    ) -> None:
        if spec.tool and lock.tool_version and not package_file.constraints.get(spec.tool):
            package_file.constraints[spec.tool] = lock.tool_version


async def get_locked_versions(
    package_files: List[PackageFile],
    policy: EcosystemPolicy,
    *,
    reader: Reader = read_local_file,
    cache: Optional[LockFileCache] = None,
) -> None:
    """Correlate a batch of package files with their lock files."""
    correlator = LockFileCorrelator(policy, reader=reader, cache=cache)
    await correlator.correlate_all(package_files)
