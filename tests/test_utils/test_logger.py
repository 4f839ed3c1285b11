from __future__ import annotations

import io
import logging

import pytest

import depscribe.utils.logger as logger_module
from depscribe.utils.logger import (
    ROOT_LOGGER_NAME,
    ColoredFormatter,
    color_enabled,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)


def _record(level: int = logging.WARNING, msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("depscribe.test", level, __file__, 1, msg, None, None)


class _Terminal(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.fixture
def color_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CI", raising=False)


@pytest.mark.unit
class TestColorEnabled:
    """Tests for color_enabled."""

    def test_terminal(self, color_env: None) -> None:
        """Test a terminal stream allows color."""
        assert color_enabled(_Terminal()) is True

    def test_plain_stream(self, color_env: None) -> None:
        """Test non-terminal and missing streams never get color."""
        assert color_enabled(io.StringIO()) is False
        assert color_enabled(None) is False

    def test_closed_stream(self, color_env: None) -> None:
        """Test a closed stream is treated as a non-terminal."""
        stream = io.StringIO()
        stream.close()

        assert color_enabled(stream) is False

    @pytest.mark.parametrize("variable", ["NO_COLOR", "CI"])
    def test_environment_disables(
        self, monkeypatch: pytest.MonkeyPatch, variable: str
    ) -> None:
        """Test NO_COLOR and CI turn color off even on a terminal."""
        monkeypatch.setenv(variable, "1")

        assert color_enabled(_Terminal()) is False


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_plain_when_color_disabled(self, color_env: None) -> None:
        """Test no escape codes are emitted with use_color=False."""
        formatter = ColoredFormatter(
            "%(levelname)s %(message)s", use_color=False, stream=_Terminal()
        )

        assert formatter.format(_record()) == "WARNING hello"

    def test_colors_level_on_terminal(self, color_env: None) -> None:
        """Test the level name is wrapped in its color on a terminal."""
        formatter = ColoredFormatter("%(levelname)s %(message)s", stream=_Terminal())

        output = formatter.format(_record(logging.ERROR))

        assert output == f"{ColoredFormatter.COLORS['ERROR']}ERROR{ColoredFormatter.RESET} hello"

    def test_plain_on_non_terminal(self, color_env: None) -> None:
        """Test output to a file or pipe stays plain."""
        formatter = ColoredFormatter("%(levelname)s", stream=io.StringIO())

        assert formatter.format(_record()) == "WARNING"

    def test_original_record_untouched(self, color_env: None) -> None:
        """Test coloring works on a copy of the record."""
        formatter = ColoredFormatter("%(levelname)s", stream=_Terminal())
        record = _record()

        formatter.format(record)

        assert record.levelname == "WARNING"


@pytest.mark.unit
class TestLevelForVerbosity:
    """Tests for level_for_verbosity."""

    @pytest.mark.parametrize(
        "verbose, level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_mapping(self, verbose: int, level: int) -> None:
        """Test -v counts map to WARNING, INFO and DEBUG."""
        assert level_for_verbosity(verbose) == level


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_configures_root_logger(self) -> None:
        """Test a single handler is installed at the requested level."""
        stream = io.StringIO()

        setup_logging(level=logging.DEBUG, stream=stream)
        root = logging.getLogger(ROOT_LOGGER_NAME)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.propagate is False
        assert is_logging_configured() is True

    def test_repeated_calls_replace_handler(self) -> None:
        """Test calling twice does not duplicate handlers."""
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())

        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 1

    def test_messages_reach_stream(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test child loggers write through the configured handler."""
        monkeypatch.setenv("NO_COLOR", "1")
        stream = io.StringIO()
        setup_logging(level=logging.INFO, stream=stream)

        get_logger("core.extractor").info("extracted %d", 3)

        assert "extracted 3" in stream.getvalue()
        assert "INFO" in stream.getvalue()

    def test_level_filters(self) -> None:
        """Test records below the level are dropped."""
        stream = io.StringIO()
        setup_logging(level=logging.WARNING, stream=stream)

        get_logger("test").info("quiet")

        assert stream.getvalue() == ""

    def test_not_configured_initially(self) -> None:
        """Test the flag is clear until setup_logging runs."""
        logger_module._logging_configured = False

        assert is_logging_configured() is False


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger."""

    def test_root_logger(self) -> None:
        """Test None and the package name give the root logger."""
        assert get_logger().name == ROOT_LOGGER_NAME
        assert get_logger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME

    def test_namespacing(self) -> None:
        """Test short and qualified names resolve to the same logger."""
        assert get_logger("core.extractor") is get_logger("depscribe.core.extractor")
        assert get_logger("cli").name == "depscribe.cli"

    def test_null_handler_when_unconfigured(self) -> None:
        """Test library loggers stay silent before configuration."""
        logging.getLogger(ROOT_LOGGER_NAME).handlers.clear()

        logger = get_logger("fresh.module")

        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)
