"""Tests for environment configuration and logging setup."""

from __future__ import annotations

import logging

from agenda.config import AgendaConfig
from agenda.logging_config import configure_logging


def test_config_defaults(monkeypatch):
    for name in ("AGENDA_HOST", "AGENDA_PORT", "AGENDA_LOG_LEVEL", "AGENDA_SEED_DATA"):
        monkeypatch.delenv(name, raising=False)

    cfg = AgendaConfig()

    assert cfg.host == "0.0.0.0"
    assert cfg.port == 8000
    assert cfg.log_level == "INFO"
    assert cfg.seed_data is False


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("AGENDA_PORT", "9100")
    monkeypatch.setenv("AGENDA_LOG_LEVEL", "debug")
    monkeypatch.setenv("AGENDA_SEED_DATA", "TRUE")

    cfg = AgendaConfig()

    assert cfg.port == 9100
    assert cfg.log_level == "DEBUG"
    assert cfg.seed_data is True


def test_configure_logging_installs_one_handler():
    logger = configure_logging("WARNING")
    handlers = list(logger.handlers)

    again = configure_logging(logging.DEBUG)

    assert again is logger
    assert again.handlers == handlers
    assert len(handlers) == 1
    assert again.level == logging.DEBUG
