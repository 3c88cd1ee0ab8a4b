import logging

import pytest

from reqflow.infrastructure.config import settings
from reqflow.infrastructure.monitoring.logger_setup import (
    level_from_name, setup_logging, setup_logging_from_settings,
)


@pytest.fixture
def restore_logging():
    """Puts the root logger and httpx loggers back the way pytest had them."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    saved_noisy = {name: logging.getLogger(name).level for name in ("httpx", "httpcore")}
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)
    for name, level in saved_noisy.items():
        logging.getLogger(name).setLevel(level)


def test_level_names_are_accepted(restore_logging):
    setup_logging(log_level="debug")

    assert restore_logging.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG


def test_httpx_is_quieted_above_debug(restore_logging):
    setup_logging(log_level=logging.INFO)

    assert restore_logging.level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_settings_drive_level_and_file(restore_logging, tmp_path, monkeypatch):
    log_file = tmp_path / "reqflow.log"
    monkeypatch.setenv("REQFLOW_LOGGING_LEVEL", "error")
    settings.set_config_for_testing({"logging.file": str(log_file)})

    setup_logging_from_settings()

    assert restore_logging.level == logging.ERROR
    assert any(isinstance(h, logging.FileHandler) for h in restore_logging.handlers)


def test_settings_default_level_applies_when_unset(restore_logging):
    setup_logging_from_settings(default_level="WARNING")

    assert restore_logging.level == logging.WARNING


def test_level_from_name():
    assert level_from_name("debug") == logging.DEBUG
    assert level_from_name(logging.ERROR) == logging.ERROR
    assert level_from_name("nonsense", default=logging.ERROR) == logging.ERROR
    assert level_from_name(None) == logging.INFO
