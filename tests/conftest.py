from __future__ import annotations

import logging
from typing import Generator

import pytest

import depscribe.utils.logger as logger_module


@pytest.fixture(autouse=True)
def reset_depscribe_logging() -> Generator[None, None, None]:
    """Restore the depscribe logger hierarchy after every test.

    CLI tests call ``setup_logging``, which disables propagation; later
    tests rely on ``caplog`` receiving depscribe records.

    Yields:
        None
    """
    yield

    root_logger = logging.getLogger(logger_module.ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    logger_module._logging_configured = False
