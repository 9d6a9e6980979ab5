"""
Tests for logging setup and rich reports.
"""

import logging

import pytest

from rich.logging import RichHandler

from sceneware.config import CONFIG_CATEGORIES, DEFAULTS
from sceneware.diagnostics import config_table, enable_diagnostics, stats_table
from sceneware.models import NarratorStats


class TestEnableDiagnostics:

    def test_rich_handler_installed_once(self):
        enable_diagnostics("DEBUG")
        logger = enable_diagnostics("WARNING")

        ours = [h for h in logger.handlers if getattr(h, "_sceneware_handler", False)]
        assert len(ours) == 1
        assert isinstance(ours[0], RichHandler)
        assert logger.level == logging.WARNING
        assert logger.propagate is False

    def test_plain_handler_and_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "sceneware.log"
        logger = enable_diagnostics("INFO", use_rich=False, log_file=log_file)

        logging.getLogger("sceneware.engine").info("narration started")
        for handler in logger.handlers:
            handler.flush()

        assert "narration started" in log_file.read_text()
        assert not any(isinstance(h, RichHandler) for h in logger.handlers)


class TestTables:

    def test_stats_table(self):
        stats = NarratorStats(cycles=4, narrations=2, total_cycle_time=0.2)
        table = stats_table(stats)
        assert table.row_count == 9
        assert stats.to_dict()["avg_cycle_ms"] == pytest.approx(50.0)

    def test_config_table_has_every_key(self):
        table = config_table(dict(DEFAULTS), CONFIG_CATEGORIES)
        assert table.row_count == len(DEFAULTS)
