import logging

import pytest

from application.utils import AppLogger, ColoredFormatter
from config import constants


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    original, level = set(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in original:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_app_logger_writes_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "engine.log"
    app_logger = AppLogger(level=logging.INFO, log_file=str(log_file), use_colors=False)
    logger = app_logger.get_logger("engine_test")
    logger.info("saved script")
    logger.debug("hidden")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_file.read_text(encoding='utf-8')
    assert "saved script" in content
    assert "hidden" not in content
    assert f"{constants.APP_NAME}@{constants.APP_VERSION}" in content


def test_app_logger_replaces_existing_handlers(restore_root_logger):
    AppLogger()
    AppLogger()
    assert len(logging.getLogger().handlers) == 1


def test_get_logger_defaults_to_caller_module(restore_root_logger):
    logger = AppLogger().get_logger()
    assert logger.name == __name__


def test_colored_formatter_wraps_level_color():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
    text = ColoredFormatter().format(record)
    assert text.startswith(ColoredFormatter.YELLOW)
    assert text.endswith(ColoredFormatter.RESET)
    assert "careful" in text
