"""Tests for wikiwatch.config module."""

from pathlib import Path

import pytest

from wikiwatch.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_MS,
    LOGIN_TIMEOUT_MS,
    Credentials,
    load_settings,
)
from wikiwatch.errors import ConfigurationError


def make_env(**overrides) -> dict[str, str]:
    env = {"WIKI_USER": "WatchBot", "WIKI_PASS": "hunter2"}
    env.update(overrides)
    return env


class TestCredentials:
    def test_valid(self):
        Credentials("WatchBot", "hunter2").validate()

    def test_missing_username(self):
        with pytest.raises(ConfigurationError, match="WIKI_USER"):
            Credentials("", "hunter2").validate()

    def test_missing_both(self):
        with pytest.raises(ConfigurationError, match="WIKI_USER and WIKI_PASS"):
            Credentials("", "").validate()

    def test_password_not_in_repr(self):
        assert "hunter2" not in repr(Credentials("WatchBot", "hunter2"))


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings(make_env())
        assert settings.credentials.username == "WatchBot"
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.state_path == Path(".auth/storageState.json")
        assert settings.timeout_ms == DEFAULT_TIMEOUT_MS
        assert settings.login_timeout_ms == LOGIN_TIMEOUT_MS == 15000
        assert settings.headless is True
        assert settings.logout_attempts == 1

    def test_missing_password_is_fatal(self):
        with pytest.raises(ConfigurationError, match="WIKI_PASS"):
            load_settings({"WIKI_USER": "WatchBot"})

    def test_empty_environment_is_fatal(self):
        with pytest.raises(ConfigurationError):
            load_settings({})

    def test_overrides(self):
        settings = load_settings(
            make_env(
                WIKI_BASE_URL="https://test.wikipedia.org/",
                WIKIWATCH_STATE_PATH="/tmp/state.json",
                WIKIWATCH_HEADLESS="false",
                WIKIWATCH_TIMEOUT_MS="2500",
                WIKIWATCH_LOGOUT_ATTEMPTS="3",
            )
        )
        assert settings.base_url == "https://test.wikipedia.org"
        assert settings.state_path == Path("/tmp/state.json")
        assert settings.headless is False
        assert settings.timeout_ms == 2500
        assert settings.logout_attempts == 3

    def test_malformed_integer(self):
        with pytest.raises(ConfigurationError, match="WIKIWATCH_TIMEOUT_MS"):
            load_settings(make_env(WIKIWATCH_TIMEOUT_MS="soon"))

    def test_integer_below_minimum(self):
        with pytest.raises(ConfigurationError, match="WIKIWATCH_LOGOUT_ATTEMPTS"):
            load_settings(make_env(WIKIWATCH_LOGOUT_ATTEMPTS="0"))

    def test_malformed_boolean(self):
        with pytest.raises(ConfigurationError, match="WIKIWATCH_HEADLESS"):
            load_settings(make_env(WIKIWATCH_HEADLESS="maybe"))
