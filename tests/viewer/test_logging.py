# SPDX-License-Identifier: MIT
"""Tests for viewer logging setup."""

import json
import logging

import pytest
from loguru import logger

from pinmap.utils.logging import LIBRARY_LOGGERS, setup_logging


@pytest.fixture
def restore_logging():
    yield
    logger.remove()
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_console_only_by_default(self, restore_logging):
        assert len(setup_logging(level="INFO")) == 1

    def test_file_sink(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "viewer.log"
        setup_logging(level="INFO", log_file=log_file, serialize=False)

        logger.debug("hidden detail")
        logger.info("marker loaded")

        text = log_file.read_text()
        assert "marker loaded" in text
        assert "hidden detail" not in text

    def test_json_file_sink(self, tmp_path, restore_logging):
        log_file = tmp_path / "viewer.jsonl"
        setup_logging(level="INFO", log_file=log_file, serialize=True)

        logger.warning("geocode failed")

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert records[-1]["record"]["message"] == "geocode failed"
        assert records[-1]["record"]["level"]["name"] == "WARNING"

    @pytest.mark.parametrize("level,expected", [("INFO", logging.WARNING), ("debug", logging.DEBUG)])
    def test_library_loggers_follow_level(self, restore_logging, level, expected):
        setup_logging(level=level)
        for name in LIBRARY_LOGGERS:
            assert logging.getLogger(name).level == expected
