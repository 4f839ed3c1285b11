from __future__ import annotations

import pytest

from depscribe.models import Dependency, LockFile, PackageFile


@pytest.mark.unit
class TestPackageFile:
    """Tests for the PackageFile record."""

    def test_defaults(self) -> None:
        """Test an empty record has no deps, locks or metadata."""
        package_file = PackageFile(package_file="package.json")

        assert package_file.deps == []
        assert package_file.lock_files == {}
        assert package_file.constraints == {}
        assert package_file.has_file_refs is False
        assert package_file.skip_installs is None
        assert package_file.has_metadata is False

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"package_name": "app"},
            {"package_version": "1.0.0"},
            {"workspaces": ["packages/*"]},
        ],
    )
    def test_has_metadata(self, kwargs: dict) -> None:
        """Test any of name, version or workspaces counts as metadata."""
        assert PackageFile(**kwargs).has_metadata is True

    def test_to_dict_drops_missing_lock_files(self) -> None:
        """Test lock-file keys without a discovered path are omitted."""
        package_file = PackageFile(
            package_file="package.json",
            package_name="app",
            deps=[Dependency(name="lodash")],
            lock_files={"npm_lock": "package-lock.json", "yarn_lock": None},
            constraints={"npm": ">= 7.0.0"},
        )

        data = package_file.to_dict()

        assert data["lock_files"] == {"npm_lock": "package-lock.json"}
        assert data["constraints"] == {"npm": ">= 7.0.0"}
        assert data["deps"] == [{"name": "lodash", "source_kind": "unknown"}]


@pytest.mark.unit
class TestLockFile:
    """Tests for the LockFile record."""

    def test_defaults(self) -> None:
        """Test only the path is required."""
        lock = LockFile(path="/repo/package-lock.json")

        assert lock.lock_version is None
        assert lock.locked_versions == {}
        assert lock.tool_version is None
