"""npm-style semantic versioning grammar.

Implements the two checks the classifier needs, following the grammar that
npm's ``semver`` package accepts in strict (non-loose) mode:

- :meth:`NpmVersioning.is_version` / :meth:`NpmVersioning.valid`: a single
  concrete version such as ``1.2.3``, ``v1.2.3`` or ``1.0.0-rc.1+build.5``.
- :meth:`NpmVersioning.is_valid`: a version *range* such as ``^1.2.0``,
  ``~1.2``, ``>=1.0.0 <2.0.0``, ``1.2.x``, ``1.0.0 - 2.0.0``, ``*`` or the
  empty string, optionally combined with ``||``.

Typical usage::

    versioning = NpmVersioning()
    versioning.is_valid("^1.2.3")      # True
    versioning.is_version("^1.2.3")    # False
    versioning.valid("v1.2.3")         # "1.2.3"
"""

from __future__ import annotations

import re
from typing import Optional

__all__ = ["NpmVersioning", "Versioning"]

_NUMERIC = r"(?:0|[1-9]\d*)"
_PRERELEASE_ID = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][a-zA-Z0-9-]*)"
_PRERELEASE = rf"(?:-{_PRERELEASE_ID}(?:\.{_PRERELEASE_ID})*)"
_BUILD = r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)"

_FULL_VERSION = re.compile(
    rf"^v?({_NUMERIC}\.{_NUMERIC}\.{_NUMERIC}{_PRERELEASE}?)({_BUILD})?$"
)

_X_ID = rf"(?:{_NUMERIC}|[xX*])"
_PARTIAL = rf"v?{_X_ID}(?:\.{_X_ID}(?:\.{_X_ID}{_PRERELEASE}?{_BUILD}?)?)?"

_COMPARATOR = re.compile(rf"^(?:~>?|\^|[<>]?=?)\s*{_PARTIAL}$")
_HYPHEN_RANGE = re.compile(rf"^({_PARTIAL})\s+-\s+({_PARTIAL})$")

# "> 1.2" and ">= 1.2" are one comparator, not two tokens
_OPERATOR_GAP = re.compile(r"(~>?|\^|[<>]=?|=)\s+")


class Versioning:
    """Interface every versioning scheme used by the classifier provides."""

    name = "base"

    def is_version(self, value: str) -> bool:
        raise NotImplementedError

    def is_valid(self, value: str) -> bool:
        raise NotImplementedError

    def valid(self, value: Optional[str]) -> Optional[str]:
        raise NotImplementedError


class NpmVersioning(Versioning):
    """Strict npm semver grammar (versions and ranges)."""

    name = "npm"

    def is_version(self, value: str) -> bool:
        """Return True if ``value`` is a single concrete version."""
        return self.valid(value) is not None

    def valid(self, value: Optional[str]) -> Optional[str]:
        """Return the cleaned version (leading ``v`` and build dropped), or None.

        Example::

            >>> NpmVersioning().valid("v1.2.3+sha.abc")
            '1.2.3'
            >>> NpmVersioning().valid("1.2") is None
            True
        """
        if not isinstance(value, str):
            return None
        match = _FULL_VERSION.match(value.strip())
        if not match:
            return None
        return match.group(1)

    def is_valid(self, value: str) -> bool:
        """Return True if ``value`` is a version or a version range.

        The empty string and ``*`` are valid ranges (they match anything).
        """
        if not isinstance(value, str):
            return False
        return all(self._is_valid_range(part) for part in value.split("||"))

    @staticmethod
    def _is_valid_range(part: str) -> bool:
        part = part.strip()
        if not part:
            return True
        if _HYPHEN_RANGE.match(part):
            return True
        collapsed = _OPERATOR_GAP.sub(r"\1", part)
        return all(_COMPARATOR.match(token) for token in collapsed.split())
