# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import logging
from unittest.mock import patch

from rich.logging import RichHandler

from ankh_lib.core.logger import get_logger


def test_get_logger_returns_rich_logger(monkeypatch):
    monkeypatch.delenv("ANKH_DEBUG", raising=False)
    monkeypatch.delenv("ANKH_LOG_FILE", raising=False)

    logger = get_logger("ankh.test.basic")

    assert isinstance(logger, logging.Logger)
    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)


def test_get_logger_does_not_stack_handlers(monkeypatch):
    monkeypatch.delenv("ANKH_LOG_FILE", raising=False)

    get_logger("ankh.test.repeated")
    logger = get_logger("ankh.test.repeated")

    assert len(logger.handlers) == 1


def test_get_logger_debug_mode(monkeypatch):
    monkeypatch.setenv("ANKH_DEBUG", "1")
    monkeypatch.delenv("ANKH_LOG_FILE", raising=False)

    logger = get_logger("ankh.test.debug")

    assert logger.level == logging.DEBUG
    assert logger.handlers[0].level == logging.DEBUG


def test_get_logger_writes_transcript(tmp_path, monkeypatch):
    monkeypatch.delenv("ANKH_DEBUG", raising=False)
    log_file = tmp_path / "ankh.log"
    monkeypatch.setenv("ANKH_LOG_FILE", str(log_file))
    monkeypatch.setattr("ankh_lib.core.logger._file_handlers", {})

    logger = get_logger("ankh.test.transcript")
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    try:
        assert len(file_handlers) == 1
        logger.debug("qm create 100")
        file_handlers[0].flush()

        content = log_file.read_text()
        assert "DEBUG" in content
        assert "ankh.test.transcript: qm create 100" in content
    finally:
        for handler in file_handlers:
            handler.close()
            logger.removeHandler(handler)


def test_get_logger_closes_replaced_handlers(monkeypatch):
    monkeypatch.delenv("ANKH_LOG_FILE", raising=False)
    first = get_logger("ankh.test.close").handlers[0]

    with patch.object(first, "close") as mock_close:
        get_logger("ankh.test.close")

    mock_close.assert_called_once()


def test_get_logger_shares_file_handler(tmp_path, monkeypatch):
    monkeypatch.delenv("ANKH_DEBUG", raising=False)
    monkeypatch.setenv("ANKH_LOG_FILE", str(tmp_path / "ankh.log"))
    monkeypatch.setattr("ankh_lib.core.logger._file_handlers", {})

    first = get_logger("ankh.test.shared.a")
    second = get_logger("ankh.test.shared.b")
    # reconfiguring a logger keeps the shared handler open
    get_logger("ankh.test.shared.a")

    handlers = {
        h
        for logger in (first, second)
        for h in logger.handlers
        if isinstance(h, logging.FileHandler)
    }
    try:
        assert len(handlers) == 1
        assert not next(iter(handlers)).stream.closed
    finally:
        for handler in handlers:
            handler.close()


def test_get_logger_unwritable_log_file(tmp_path, monkeypatch):
    monkeypatch.delenv("ANKH_DEBUG", raising=False)
    log_file = tmp_path / "missing" / "ankh.log"
    monkeypatch.setenv("ANKH_LOG_FILE", str(log_file))
    monkeypatch.setattr("ankh_lib.core.logger._file_handlers", {})

    with patch.object(logging.Logger, "warning") as mock_warning:
        logger = get_logger("ankh.test.unwritable")
        get_logger("ankh.test.unwritable.other")

    assert [type(h) for h in logger.handlers] == [RichHandler]
    assert logger.level == logging.INFO
    mock_warning.assert_called_once()
    assert str(log_file) in mock_warning.call_args.args[0]
    assert not log_file.exists()
