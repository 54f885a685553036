"""
Tests for log_util module
"""

import logging

from weatherlens.utils.log_util import app_logger


class TestAppLogger:
    """Test the package logger factory."""

    def test_module_names_share_package_handler(self):
        """Test that module loggers propagate to the package logger."""
        logger = app_logger("weatherlens.core.normalizer")
        assert logger.name == "weatherlens.core.normalizer"
        assert logger.propagate
        assert logging.getLogger("weatherlens").handlers

    def test_outside_name_is_prefixed(self):
        """Test that names outside the package are nested under it."""
        assert app_logger("__main__").name == "weatherlens.__main__"

    def test_level_and_log_file(self, tmp_path, restore_package_logger):
        """Test the level override and the extra file handler."""
        log_path = tmp_path / "weatherlens.log"
        logger = app_logger("weatherlens", log_file=str(log_path), level="warning")

        logger.info("not written")
        logger.warning("Disk almost full")
        app_logger("weatherlens", log_file=str(log_path))

        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert logger.level == logging.WARNING
        text = log_path.read_text(encoding="utf-8")
        assert "Disk almost full" in text
        assert "not written" not in text
