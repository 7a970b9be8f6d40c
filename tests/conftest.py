"""Shared fixtures for tarsweep tests."""

import logging

import pytest
from loguru import logger

from tarsweep.utils.config import reset_config


@pytest.fixture
def caplog(caplog):
    """Route loguru records into pytest's caplog."""
    handler_id = logger.add(
        caplog.handler,
        format="{message}",
        level=0,
        filter=lambda record: record["level"].no >= caplog.handler.level,
    )
    caplog.set_level(logging.DEBUG)
    yield caplog
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate tests from TARSWEEP_* variables in the environment."""
    for name in (
        "TARSWEEP_KEY_DIR",
        "TARSWEEP_CACHE_DIR",
        "TARSWEEP_DAILY_KEEP",
        "TARSWEEP_WEEKLY_KEEP",
        "TARSWEEP_TARSNAP_BIN",
        "TARSWEEP_TIMEOUT",
        "TARSWEEP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
