"""Tests for structured logging setup."""

import json
import logging

import pytest
import structlog

from pactbroker.config.settings import Environment, LogLevel, Settings
from pactbroker.observability.logging import configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestConfigureLogging:
    def test_sets_package_log_level(self) -> None:
        configure_logging(_settings(LOG_LEVEL=LogLevel.DEBUG))
        assert logging.getLogger("pactbroker").level == logging.DEBUG

    def test_json_lines_outside_dev(self, capsys) -> None:
        log = configure_logging(_settings(ENVIRONMENT=Environment.PROD))
        log.info("pact published", consumer="Foo", provider="Bar")
        line = capsys.readouterr().out.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "pact published"
        assert event["consumer"] == "Foo"
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filters_events(self, capsys) -> None:
        log = configure_logging(_settings(ENVIRONMENT=Environment.PROD,
                                          LOG_LEVEL=LogLevel.WARNING))
        log.info("hidden")
        log.warning("shown")
        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out
