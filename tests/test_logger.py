"""Tests for the logging setup"""

import logging

from spot_importer.core.logger import (
    get_logger,
    log_resolution_failure,
    setup_logging,
    shutdown_logging,
)


class TestLogging:
    """Test log files written by setup_logging()"""

    def test_log_files(self, temp_dir, restore_root_logger):
        log_dir = temp_dir / "logs"

        failures_path = setup_logging(log_dir)
        logger = get_logger("spot_importer.test")
        logger.info("plain message")
        logger.error("something broke")
        log_resolution_failure(logger, "Missing Song", "Nobody", "track:Missing Song artist:Nobody")
        shutdown_logging()

        full_log = next(log_dir.glob("log_full_*.log")).read_text(encoding="utf-8")
        errors_log = next(log_dir.glob("log_errors_*.log")).read_text(encoding="utf-8")
        failures = failures_path.read_text(encoding="utf-8")

        assert "plain message" in full_log
        assert "something broke" in errors_log
        assert "plain message" not in errors_log
        assert "Missing Song" in failures
        assert "track:Missing Song artist:Nobody" in failures
        assert "something broke" not in failures

    def test_shutdown_detaches_handlers(self, temp_dir, restore_root_logger):
        setup_logging(temp_dir)
        shutdown_logging()

        assert logging.getLogger().handlers == []
