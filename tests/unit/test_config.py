"""Unit tests for environment configuration."""

from __future__ import annotations

import logging

import pytest

from netsift.config import (
    BODY_TIMEOUT_ENV_VAR,
    DEFAULT_BODY_TIMEOUT,
    HEADLESS_ENV_VAR,
    LOG_LEVEL_ENV_VAR,
    get_body_timeout,
    get_headless_mode,
    get_log_level,
)


class TestHeadlessMode:
    """Tests for get_headless_mode."""

    def test_default_is_headless(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(HEADLESS_ENV_VAR, raising=False)
        assert get_headless_mode() is True

    @pytest.mark.parametrize("value", ["false", "FALSE", "False"])
    def test_false_disables_headless(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv(HEADLESS_ENV_VAR, value)
        assert get_headless_mode() is False

    def test_other_values_keep_headless(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(HEADLESS_ENV_VAR, "0")
        assert get_headless_mode() is True


class TestLogLevel:
    """Tests for get_log_level."""

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)
        assert get_log_level() == logging.INFO

    def test_named_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "debug")
        assert get_log_level() == logging.DEBUG

    def test_unknown_level_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "chatty")
        assert get_log_level() == logging.INFO


class TestBodyTimeout:
    """Tests for get_body_timeout."""

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(BODY_TIMEOUT_ENV_VAR, raising=False)
        assert get_body_timeout() == DEFAULT_BODY_TIMEOUT

    def test_custom(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(BODY_TIMEOUT_ENV_VAR, "2.5")
        assert get_body_timeout() == 2.5

    @pytest.mark.parametrize("value", ["soon", "0", "-3"])
    def test_invalid_values_fall_back(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv(BODY_TIMEOUT_ENV_VAR, value)
        assert get_body_timeout() == DEFAULT_BODY_TIMEOUT
