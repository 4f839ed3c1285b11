from __future__ import annotations

import pytest

from depscribe.exceptions import ConfigError
from depscribe.models import SourceKind
from depscribe.ecosystems import (
    CUSTOM_JOB_POLICY,
    ECOSYSTEMS,
    NPM_POLICY,
    UPM_POLICY,
    LockFormat,
    get_policy,
    is_valid_npm_name,
)


@pytest.mark.unit
class TestIsValidNpmName:
    """Tests for is_valid_npm_name."""

    @pytest.mark.parametrize(
        "name",
        ["lodash", "@types/node", "MyPackage", "left-pad", "com.unity.ugui", "a.b_c~d"],
    )
    def test_valid_names(self, name: str) -> None:
        """Test plain, scoped and legacy uppercase names are accepted."""
        assert is_valid_npm_name(name) is True

    @pytest.mark.parametrize(
        "name",
        [
            "",
            "_private",
            ".hidden",
            " padded",
            "node_modules",
            "Favicon.ico",
            "a/b",
            "@scope/pkg/extra",
            "with space",
        ],
    )
    def test_invalid_names(self, name: str) -> None:
        """Test reserved, padded and non URL-safe names are rejected."""
        assert is_valid_npm_name(name) is False

    def test_non_string(self) -> None:
        """Test non-string names are rejected."""
        assert is_valid_npm_name(None) is False  # type: ignore[arg-type]


@pytest.mark.unit
class TestPolicies:
    """Tests for the shipped policies."""

    def test_registry_lookup(self) -> None:
        """Test policies are found by name."""
        assert get_policy("npm") is NPM_POLICY
        assert get_policy("upm") is UPM_POLICY
        assert set(ECOSYSTEMS) == {"npm", "upm"}

    def test_unknown_policy(self) -> None:
        """Test unknown names raise ConfigError naming the option."""
        with pytest.raises(ConfigError) as exc_info:
            get_policy("pip")

        assert exc_info.value.option == "ecosystem"
        assert "npm, upm" in str(exc_info.value)

    def test_datasources(self) -> None:
        """Test each source kind maps to its datasource."""
        assert NPM_POLICY.datasource_for(SourceKind.REGISTRY_ALIAS) == "npm"
        assert NPM_POLICY.datasource_for(SourceKind.VCS_COMMIT) == "github-tags"
        assert NPM_POLICY.datasource_for(SourceKind.FILE_REFERENCE) is None

    def test_npm_lock_files(self) -> None:
        """Test only package-lock.json is read; the rest are discovered."""
        formats = {spec.key: spec.lock_format for spec in NPM_POLICY.lock_files}

        assert formats["npm_lock"] is LockFormat.JSON_LOCK
        assert formats["yarn_lock"] is LockFormat.UNSUPPORTED
        assert NPM_POLICY.lock_files[0].threshold is not None
        assert NPM_POLICY.lock_files[0].threshold.constraint == ">= 7.0.0"

    def test_upm_reads_editor_version(self) -> None:
        """Test the Unity policy pins the editor through ProjectVersion.txt."""
        spec = UPM_POLICY.lock_files[-1]

        assert spec.lock_format is LockFormat.EDITOR_VERSION
        assert spec.tool == "unity"
        assert spec.relative_path.endswith("ProjectSettings/ProjectVersion.txt")
        assert UPM_POLICY.override_sections == frozenset()

    def test_custom_job_defaults(self) -> None:
        """Test custom jobs resolve against nuget."""
        assert CUSTOM_JOB_POLICY.marker == "custom_job"
        assert CUSTOM_JOB_POLICY.datasource == "nuget"
