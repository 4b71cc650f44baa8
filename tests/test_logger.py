from __future__ import annotations

import json
import logging

import pytest

from otp_hook.logger import JsonFormatter, get_logger


def test_logger_does_not_propagate_to_root() -> None:
    logger = get_logger("otp_hook.tests.propagation")

    assert logger.propagate is False


def test_logger_is_configured_once() -> None:
    first = get_logger("otp_hook.tests.configured_once")
    second = get_logger("otp_hook.tests.configured_once")

    assert first is second
    assert len(second.handlers) == 1
    assert isinstance(second.handlers[0].formatter, JsonFormatter)


def test_log_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert get_logger("otp_hook.tests.debug_level").level == logging.DEBUG


def test_extra_fields_are_merged() -> None:
    record = logging.LogRecord("otp_hook", logging.INFO, __file__, 1, "OTP sent", (), None)
    record.phone = "+966512345678"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "OTP sent"
    assert payload["level"] == "INFO"
    assert payload["phone"] == "+966512345678"
