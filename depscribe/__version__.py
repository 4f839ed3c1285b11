"""
depscribe version information.

Single source of truth for the package version, following Semantic
Versioning (``MAJOR.MINOR.PATCH[.PRERELEASE]``).
"""

from __future__ import annotations

import re
from typing import Any, Dict

__version__ = "0.1.0.dev0"


def _parse_version(version: str) -> Dict[str, Any]:
    """Break a version string into its components.

    Raises:
        ValueError: ``version`` does not follow ``MAJOR.MINOR.PATCH``.
    """
    match = re.match(r"^(\d+)\.(\d+)\.(\d+)(?:[.-]([a-zA-Z0-9]+))?$", version)
    if not match:
        raise ValueError(f"Invalid version string: {version}")

    major, minor, patch, pre = match.groups()
    return {
        "major": int(major),
        "minor": int(minor),
        "patch": int(patch),
        "prerelease": pre,
        "is_dev": pre is not None and pre.startswith("dev"),
    }


VERSION_INFO = _parse_version(__version__)

VERSION_STRING = f"depscribe {__version__}"
