import logging

import pytest


@pytest.fixture
def restore_package_logger():
    """Undo level and file-handler changes made to the package logger."""
    package_logger = logging.getLogger("weatherlens")
    level = package_logger.level
    handlers = list(package_logger.handlers)
    yield package_logger
    for handler in list(package_logger.handlers):
        if handler not in handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)
