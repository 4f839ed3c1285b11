"""Configuration file loader for depscribe.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``depscribe.toml`` — settings under ``[depscribe]`` table
- ``pyproject.toml`` — settings under ``[tool.depscribe]`` table

Discovery order:

1. Explicit path from ``--config`` or ``DEPSCRIBE_CONFIG``
2. ``depscribe.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.depscribe]`` section

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``depscribe.toml``)::

    [depscribe]
    ecosystem = "npm"
    skip_installs = false
    concurrent_limit = 8

    [depscribe.constraints]
    node = ">= 18"
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from depscribe.exceptions import ConfigError
from depscribe.ecosystems import ECOSYSTEMS
from depscribe.utils.logger import get_logger
from depscribe.constants import DEFAULT_CONCURRENT_LIMIT, DEFAULT_ECOSYSTEM

logger = get_logger("config")

_KNOWN_OPTIONS = frozenset(
    {"ecosystem", "skip_installs", "concurrent_limit", "constraints"}
)


@dataclass
class DepScribeConfig:
    """Parsed and validated depscribe configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        ecosystem: Name of the ecosystem policy to extract with
            (``npm`` or ``upm``).
        skip_installs: Explicit install-skip policy. ``None`` lets the
            extractor decide from the presence of file references.
        concurrent_limit: Maximum number of manifests extracted at once.
        constraints: Tool constraints applied to every manifest that does
            not declare its own, e.g. ``{"node": ">= 18"}``.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    ecosystem: str = DEFAULT_ECOSYSTEM
    skip_installs: Optional[bool] = None
    concurrent_limit: int = DEFAULT_CONCURRENT_LIMIT
    constraints: Dict[str, str] = field(default_factory=dict)

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "ecosystem": self.ecosystem,
            "skip_installs": self.skip_installs,
            "concurrent_limit": self.concurrent_limit,
            "constraints": dict(self.constraints),
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    depscribe_toml = cwd / "depscribe.toml"
    if depscribe_toml.is_file():
        logger.debug("Found depscribe.toml: %s", depscribe_toml)
        return depscribe_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_depscribe_section(pyproject_toml):
        logger.debug("Found [tool.depscribe] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_depscribe_section(path: Path) -> bool:
    """Check if pyproject.toml contains a ``[tool.depscribe]`` section.

    Parse errors are treated as "no section" so discovery falls back to
    defaults.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and "depscribe" in tool


def load_config(config_path: Optional[Path] = None) -> DepScribeConfig:
    """Load and validate depscribe configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`DepScribeConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return DepScribeConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("depscribe", {})
    else:
        section = raw.get("depscribe", {})

    if not section:
        logger.debug("Config file found but no depscribe section, using defaults")
        return DepScribeConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> DepScribeConfig:
    """Parse and validate a ``[depscribe]`` or ``[tool.depscribe]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types (e.g., string for boolean).
    """
    config = DepScribeConfig()

    unknown = set(section.keys()) - _KNOWN_OPTIONS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "ecosystem" in section:
        val = section["ecosystem"]
        if not isinstance(val, str):
            raise ConfigError(
                f"ecosystem must be a string, got {type(val).__name__}",
                config_path=config_path,
                option="ecosystem",
            )
        if val not in ECOSYSTEMS:
            raise ConfigError(
                f"ecosystem must be one of {', '.join(sorted(ECOSYSTEMS))}, got {val!r}",
                config_path=config_path,
                option="ecosystem",
            )
        config.ecosystem = val

    if "skip_installs" in section:
        val = section["skip_installs"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"skip_installs must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="skip_installs",
            )
        config.skip_installs = val

    if "concurrent_limit" in section:
        val = section["concurrent_limit"]
        # bool is an int subclass
        if isinstance(val, bool) or not isinstance(val, int):
            raise ConfigError(
                f"concurrent_limit must be an integer, got {type(val).__name__}",
                config_path=config_path,
                option="concurrent_limit",
            )
        if val < 1:
            raise ConfigError(
                f"concurrent_limit must be positive, got {val}",
                config_path=config_path,
                option="concurrent_limit",
            )
        config.concurrent_limit = val

    if "constraints" in section:
        val = section["constraints"]
        if not isinstance(val, dict) or not all(
            isinstance(v, str) for v in val.values()
        ):
            raise ConfigError(
                "constraints must be a table of tool names to constraint strings",
                config_path=config_path,
                option="constraints",
            )
        config.constraints = dict(val)

    return config
