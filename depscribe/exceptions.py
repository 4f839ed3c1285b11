"""
Custom exception hierarchy for depscribe.

All exceptions inherit from :class:`DepScribeError` and carry optional
structured metadata via the ``details`` attribute. Per-file failures are
raised inside a component and converted to a log record plus an empty
result at the component boundary, so one bad manifest never aborts a batch.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class DepScribeError(Exception):
    """Base exception for all depscribe errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ManifestDecodeError(DepScribeError):
    """Raised when manifest text is not valid JSON or YAML.

    Args:
        message: Error description.
        file_path: Path of the manifest being decoded.
        content: Raw manifest text, truncated in ``details``.
        original_error: Decoder exception that triggered this error.
    """

    __slots__ = ("file_path", "content", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        content: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)
        if content is not None:
            details["content"] = _truncate(content)

        super().__init__(message, details)

        self.file_path = file_path
        self.content = content
        self.original_error = original_error


class LockFileError(DepScribeError):
    """Raised when a lock file cannot be parsed.

    Args:
        message: Error description.
        lock_file: Path of the lock file.
        lock_format: Format the lock file was expected to be in.
    """

    __slots__ = ("lock_file", "lock_format")

    def __init__(
        self,
        message: str,
        *,
        lock_file: Optional[str] = None,
        lock_format: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "lock_file", lock_file)
        _add_if(details, "format", lock_format)

        super().__init__(message, details)

        self.lock_file = lock_file
        self.lock_format = lock_format


class FileOperationError(DepScribeError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/resolve).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(DepScribeError):
    """Raised when the configuration file is missing, malformed or invalid.

    Args:
        message: Error description.
        config_path: Path of the configuration file.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "config", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
