"""Tests for the JSON logger and configuration parsing."""

import json
import logging
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.logger import CourierLogger, _JsonFormatter


@pytest.fixture(autouse=True)
def _reset_logger():
    CourierLogger.reset()
    yield
    CourierLogger.reset()


class TestJsonFormatter:
    """Records become single-line JSON with extras merged."""

    def test_extra_fields_merged(self) -> None:
        record = logging.LogRecord("courier.dispatcher", logging.WARNING, __file__, 1, "API returned an error", (), None)
        record.api_endpoint = "sendMessage"
        record.error_code = 400
        data = json.loads(_JsonFormatter().format(record))
        assert data["level"] == "WARNING"
        assert data["logger"] == "courier.dispatcher"
        assert data["message"] == "API returned an error"
        assert data["api_endpoint"] == "sendMessage"
        assert data["error_code"] == 400

    def test_exception_included(self) -> None:
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("courier", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        data = json.loads(_JsonFormatter().format(record))
        assert "ValueError: bad" in data["exception"]


class TestCourierLogger:
    """Singleton behaviour and handler setup."""

    def test_singleton(self) -> None:
        assert CourierLogger.get_logger() is CourierLogger.get_logger(logging.DEBUG)
        assert CourierLogger.get_logger().name == "courier"

    def test_console_only_by_default(self) -> None:
        logger = CourierLogger.get_logger()
        assert len(logger.handlers) == 1

    def test_rotating_file_when_dir_given(self, tmp_path) -> None:
        logger = CourierLogger.get_logger(logging.INFO, str(tmp_path / "logs"))
        logging.getLogger("courier.client").info("hello", extra={"chat_id": 1})
        for handler in logger.handlers:
            handler.flush()
        line = (tmp_path / "logs" / "courier.log").read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["chat_id"] == 1


class TestConfig:
    """Environment parsing helpers in config.py."""

    def test_parse_helpers(self, monkeypatch) -> None:
        import config

        monkeypatch.setenv("REQUEST_TIMEOUT", "15")
        assert config._parse_float("REQUEST_TIMEOUT", 60) == 15
        monkeypatch.setenv("REQUEST_TIMEOUT", "soon")
        assert config._parse_float("REQUEST_TIMEOUT", 60) == 60
        monkeypatch.setenv("REQUEST_TIMEOUT", "-1")
        assert config._parse_float("REQUEST_TIMEOUT", 60) == 60
        assert config._parse_bool("yes") is True
        assert config._parse_bool(None) is False
        assert config._parse_level("debug") == logging.DEBUG
        assert config._parse_level("nonsense") == logging.INFO

    def test_client_from_env(self, monkeypatch) -> None:
        import config
        from unittest.mock import MagicMock

        from courier import BotClient

        monkeypatch.setattr(config, "BOT_TOKEN", "42:xyz")
        monkeypatch.setattr(config, "REQUEST_TIMEOUT", 12.0)
        client = BotClient.from_env(transport=MagicMock())
        assert client.access_token == "42:xyz"
        assert client.timeout == 12.0
