"""
Utility helpers for depscribe.

This package provides reusable utilities used across depscribe, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem helpers for manifests and sibling lock files

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from depscribe.utils.filesystem import (
    cache_key_for,
    get_sibling_file_name,
    local_file_exists,
    read_local_file,
    safe_read_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from depscribe.utils.logger import (
    color_enabled,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from depscribe.utils.console import (
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "level_for_verbosity",
    "is_logging_configured",
    "color_enabled",
    # Filesystem
    "safe_read_file",
    "read_local_file",
    "local_file_exists",
    "get_sibling_file_name",
    "cache_key_for",
]
