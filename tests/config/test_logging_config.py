# tests/config/test_logging_config.py

import logging
from logging.handlers import RotatingFileHandler

import pytest

from carrier_tracking.config.logging_config import get_logger, mask_secret


@pytest.fixture
def logger_name(request):
    name = f"carrier_tracking.test.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for h in list(logger.handlers):
        h.close()
        logger.removeHandler(h)


def test_get_logger_is_idempotent(logger_name):
    a = get_logger(logger_name, level="DEBUG")
    b = get_logger(logger_name, level="DEBUG")
    assert a is b
    assert len(a.handlers) == 1
    assert a.level == logging.DEBUG
    assert a.propagate is False


def test_file_handler_added_once(logger_name, tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    get_logger(logger_name, level="INFO", console=False, log_file=log_file)
    logger = get_logger(logger_name, level="INFO", console=False, log_file=log_file)

    files = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(files) == 1

    logger.info("hello %s", "world")
    files[0].flush()
    assert "hello world" in log_file.read_text(encoding="utf-8")


def test_level_from_env(logger_name, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    assert get_logger(logger_name).level == logging.WARNING


def test_unknown_level_defaults_to_info(logger_name):
    assert get_logger(logger_name, level="chatty").level == logging.INFO


@pytest.mark.parametrize("value,expected", [
    (None, "<unset>"),
    ("", "<unset>"),
    ("abc", "***"),
    ("abcd1234", "abcd****"),
])
def test_mask_secret(value, expected):
    assert mask_secret(value) == expected
