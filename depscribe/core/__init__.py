"""
Core functionality exports for depscribe.

Importing from here keeps user-facing imports clean and stable:

    from depscribe.core import ManifestExtractor
"""

from __future__ import annotations

from depscribe.core.classifier import DependencyClassifier
from depscribe.core.extractor import ManifestExtractor
from depscribe.core.lockfiles import LockFileCache, LockFileCorrelator
from depscribe.core.decoder import (
    CustomJobManifest,
    DependencyManifest,
    decode_custom_job,
    decode_manifest,
)

__all__ = [
    "DependencyClassifier",
    "ManifestExtractor",
    "LockFileCache",
    "LockFileCorrelator",
    "CustomJobManifest",
    "DependencyManifest",
    "decode_custom_job",
    "decode_manifest",
]
