from __future__ import annotations

from unittest.mock import patch

import click
import pytest

from depscribe.cli import main
from depscribe.exceptions import DepScribeError


@pytest.mark.unit
class TestCliMain:
    """Tests for the exit codes returned by cli.main()."""

    def test_success_returns_zero(self) -> None:
        """Test a clean run returns 0."""
        with patch("depscribe.cli.cli") as mock_cli:
            assert main() == 0

        mock_cli.assert_called_once_with(standalone_mode=False)

    def test_usage_error_returns_click_exit_code(self) -> None:
        """Test Click usage errors are shown and their code returned."""
        with patch("depscribe.cli.cli", side_effect=click.UsageError("bad usage")):
            assert main() == 2

    def test_depscribe_error_returns_one(self, capsys: pytest.CaptureFixture) -> None:
        """Test application errors are printed and return 1."""
        with patch("depscribe.cli.cli", side_effect=DepScribeError("boom")):
            assert main() == 1

        assert "boom" in capsys.readouterr().out

    def test_keyboard_interrupt_returns_130(self) -> None:
        """Test Ctrl+C returns 130."""
        with patch("depscribe.cli.cli", side_effect=KeyboardInterrupt):
            assert main() == 130

    def test_unexpected_error_returns_one(self) -> None:
        """Test unexpected exceptions are reported and return 1."""
        with patch("depscribe.cli.cli", side_effect=RuntimeError("surprise")):
            assert main() == 1
