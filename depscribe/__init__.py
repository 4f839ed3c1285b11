"""
depscribe — dependency manifest extraction and lock reconciliation.

depscribe reads npm ``package.json`` and Unity ``Packages/manifest.json``
manifests (plus flat custom job descriptors), classifies every declared
dependency (registry range, alias, local file, GitHub tag or commit) and
backfills locked versions from sibling lock files. Records it cannot
classify are kept with a skip reason so nothing is silently dropped.

Example::

    >>> import asyncio
    >>> from depscribe import ManifestExtractor
    >>> extractor = ManifestExtractor()
    >>> files = asyncio.run(extractor.extract_all_package_files(["package.json"]))
"""

from __future__ import annotations

from depscribe.__version__ import __version__
from depscribe.config import DepScribeConfig, load_config
from depscribe.core import DependencyClassifier, ManifestExtractor
from depscribe.ecosystems import NPM_POLICY, UPM_POLICY, get_policy
from depscribe.models import Dependency, PackageFile, SkipReason, SourceKind

__author__ = "depscribe Contributors"
__license__ = "Apache-2.0"
__description__ = "Dependency manifest extraction and lock reconciliation."

__all__ = [
    "__version__",
    "DepScribeConfig",
    "load_config",
    "DependencyClassifier",
    "ManifestExtractor",
    "NPM_POLICY",
    "UPM_POLICY",
    "get_policy",
    "Dependency",
    "PackageFile",
    "SkipReason",
    "SourceKind",
]
