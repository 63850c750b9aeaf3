"""Logging setup tests."""

import logging

import pytest

from core.logger import ColoredFormatter, get_logger, setup_logger


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_file_log_is_plain_utf8(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "app.log"
    setup_logger(level=logging.INFO, log_file=str(log_file), colored=True)

    get_logger("services.scheduler").info("Giveaway #3 announced (2 winner(s)): Chúc mừng")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "INFO | services.scheduler" in content
    assert "Chúc mừng" in content
    assert "\033[" not in content


def test_colored_formatter_does_not_mutate_record():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "msg", None, None)
    formatted = ColoredFormatter("%(levelname)s %(message)s").format(record)
    assert formatted.startswith("\033[33mWARNING")
    assert record.levelname == "WARNING"
