"""
Centralized constants for depscribe.

This module defines immutable configuration values used across depscribe,
including extraction defaults, file limits, and logging formats. All values
are intended to be treated as read-only.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Extraction defaults
# ---------------------------------------------------------------------------

#: Ecosystem policy used when none is configured.
DEFAULT_ECOSYSTEM: Final[str] = "npm"

#: Maximum number of manifest files extracted concurrently.
DEFAULT_CONCURRENT_LIMIT: Final[int] = 10

#: Base URL used to build source URLs for VCS references.
GITHUB_BASE_URL: Final[str] = "https://github.com/"

#: Maximum length of manifest content echoed into log records.
LOG_CONTENT_MAX_LENGTH: Final[int] = 200

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading manifests and lock files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
