# tests/test_logging.py
import logging

from utils.logging import setup_logger


def test_setup_logger_is_idempotent():
    logger = setup_logger("test.validation.idempotent", "debug")
    again = setup_logger("test.validation.idempotent", "debug")

    assert logger is again
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_setup_logger_with_file(tmp_path):
    log_file = tmp_path / "run.log"
    logger = setup_logger("test.validation.file", "INFO", log_file=str(log_file))
    logger.info("validated 3 files")

    for handler in logger.handlers:
        handler.flush()
    assert "validated 3 files" in log_file.read_text(encoding="utf-8")
    assert " | INFO    | test.validation.file | " in log_file.read_text(encoding="utf-8")


def test_unknown_level_falls_back_to_info():
    logger = setup_logger("test.validation.level", "chatty")
    assert logger.level == logging.INFO
