from __future__ import annotations

import logging

import pytest

from depscribe.exceptions import ManifestDecodeError
from depscribe.ecosystems import CUSTOM_JOB_POLICY, NPM_POLICY, UPM_POLICY
from depscribe.core.decoder import (
    CustomJobManifest,
    DependencyManifest,
    decode_custom_job,
    decode_manifest,
    load_document,
)


@pytest.mark.unit
class TestLoadDocument:
    """Tests for load_document."""

    def test_json(self) -> None:
        """Test JSON text is decoded."""
        assert load_document('{"a": 1}', "x.json") == {"a": 1}

    def test_yaml(self) -> None:
        """Test YAML text is decoded."""
        assert load_document("a: 1\nb: [x]\n", "x.yml", fmt="yaml") == {
            "a": 1,
            "b": ["x"],
        }

    def test_invalid_json_raises(self) -> None:
        """Test malformed JSON raises ManifestDecodeError with context."""
        with pytest.raises(ManifestDecodeError) as exc_info:
            load_document("{not json", "package.json")

        assert exc_info.value.file_path == "package.json"
        assert exc_info.value.original_error is not None

    def test_invalid_yaml_raises(self) -> None:
        """Test malformed YAML raises ManifestDecodeError."""
        with pytest.raises(ManifestDecodeError):
            load_document("a: [unclosed", "job.yml", fmt="yaml")

    def test_excessive_nesting_raises(self) -> None:
        """Test nesting too deep for the parser raises ManifestDecodeError."""
        with pytest.raises(ManifestDecodeError) as exc_info:
            load_document("[" * 200000, "package.json")

        assert isinstance(exc_info.value.original_error, RecursionError)


@pytest.mark.unit
class TestDecodeManifest:
    """Tests for decode_manifest."""

    def test_sections_in_policy_order(self) -> None:
        """Test dependency sections are collected in policy order."""
        content = """
        {
          "name": "app",
          "version": "1.0.0",
          "devDependencies": {"jest": "^29.0.0"},
          "dependencies": {"lodash": "^4.17.0"}
        }
        """
        manifest = decode_manifest(content, "package.json", policy=NPM_POLICY)

        assert isinstance(manifest, DependencyManifest)
        assert list(manifest.sections) == ["dependencies", "devDependencies"]
        assert manifest.name == "app"
        assert manifest.version == "1.0.0"

    def test_malformed_text_returns_none_and_logs(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test decode failures are logged with the path and yield None."""
        with caplog.at_level(logging.WARNING, logger="depscribe"):
            result = decode_manifest("{oops", "broken/package.json", policy=NPM_POLICY)

        assert result is None
        assert "broken/package.json" in caplog.text
        assert "{oops" in caplog.text

    def test_deeply_nested_text_returns_none(self) -> None:
        """Test deeply nested documents are reported like any malformed text."""
        content = '{"dependencies": ' + "[" * 200000

        assert decode_manifest(content, "package.json", policy=NPM_POLICY) is None

    @pytest.mark.parametrize("content", ["[]", '"text"', "42", "null"])
    def test_non_mapping_top_level_returns_none(self, content: str) -> None:
        """Test well-formed documents of the wrong shape yield None."""
        assert decode_manifest(content, "package.json", policy=NPM_POLICY) is None

    def test_non_mapping_section_is_ignored(self) -> None:
        """Test a dependency section that is not a mapping is dropped."""
        content = '{"dependencies": ["lodash"], "devDependencies": {"jest": "1.0.0"}}'
        manifest = decode_manifest(content, "package.json", policy=NPM_POLICY)

        assert manifest is not None
        assert list(manifest.sections) == ["devDependencies"]

    def test_unknown_sections_are_ignored(self) -> None:
        """Test only the policy's sections are collected."""
        content = '{"bundledDependencies": {"a": "1.0.0"}, "scripts": {"t": "jest"}}'
        manifest = decode_manifest(content, "package.json", policy=NPM_POLICY)

        assert manifest is not None
        assert manifest.sections == {}

    def test_engines_read_for_npm(self) -> None:
        """Test string engine constraints are captured."""
        content = '{"engines": {"node": ">=18", "npm": ">=9", "bad": 1}}'
        manifest = decode_manifest(content, "package.json", policy=NPM_POLICY)

        assert manifest is not None
        assert manifest.engines == {"node": ">=18", "npm": ">=9"}

    def test_engines_ignored_for_upm(self) -> None:
        """Test policies that do not read engines leave them empty."""
        content = '{"engines": {"node": ">=18"}, "dependencies": {}}'
        manifest = decode_manifest(content, "manifest.json", policy=UPM_POLICY)

        assert manifest is not None
        assert manifest.engines == {}

    def test_registry_and_scoped_registries(self) -> None:
        """Test Unity registry settings are captured; entries need a url."""
        content = """
        {
          "registry": "https://packages.unity.com",
          "scopedRegistries": [
            {"name": "acme", "url": "https://npm.acme.dev", "scopes": ["com.acme"]},
            {"name": "broken", "scopes": ["com.broken"]},
            "junk"
          ],
          "dependencies": {"com.acme.tools": "1.0.0"}
        }
        """
        manifest = decode_manifest(content, "Packages/manifest.json", policy=UPM_POLICY)

        assert manifest is not None
        assert manifest.registry == "https://packages.unity.com"
        assert [entry["name"] for entry in manifest.scoped_registries] == ["acme"]

    def test_non_string_metadata_is_dropped(self) -> None:
        """Test name and version must be strings to be kept."""
        manifest = decode_manifest('{"name": 1, "version": []}', "p.json", policy=NPM_POLICY)

        assert manifest is not None
        assert manifest.name is None
        assert manifest.version is None


@pytest.mark.unit
class TestDecodeCustomJob:
    """Tests for decode_custom_job."""

    def test_packages_decoded(self) -> None:
        """Test the packages list is returned as dict entries."""
        content = """
custom_job: build
packages:
  - id: Newtonsoft.Json
    version: "13.0.1"
  - not-a-mapping
  - id: Serilog
    version: "3.1.0"
"""
        manifest = decode_custom_job(content, "job.yml", policy=CUSTOM_JOB_POLICY)

        assert isinstance(manifest, CustomJobManifest)
        assert [entry["id"] for entry in manifest.packages] == [
            "Newtonsoft.Json",
            "Serilog",
        ]

    def test_missing_marker_returns_none(self) -> None:
        """Test documents without the marker are not custom jobs."""
        content = "packages:\n  - id: Serilog\n    version: '3.1.0'\n"

        assert decode_custom_job(content, "job.yml", policy=CUSTOM_JOB_POLICY) is None

    def test_non_list_packages_is_empty(self) -> None:
        """Test a packages value that is not a list yields no entries."""
        content = "custom_job: true\npackages: Serilog\n"
        manifest = decode_custom_job(content, "job.yml", policy=CUSTOM_JOB_POLICY)

        assert manifest == CustomJobManifest()

    def test_malformed_yaml_returns_none(self) -> None:
        """Test malformed YAML never raises past the decoder."""
        assert decode_custom_job("custom_job: [", "job.yml", policy=CUSTOM_JOB_POLICY) is None
