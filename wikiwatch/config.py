"""Harness configuration sourced from the environment (and an optional .env)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

from wikiwatch.errors import ConfigurationError

DEFAULT_BASE_URL = "https://en.wikipedia.org"
DEFAULT_STATE_PATH = ".auth/storageState.json"
DEFAULT_SCREENSHOT_PATH = "global-setup-error.png"
DEFAULT_DB_PATH = "wikiwatch/results/runs.db"

# Playwright's own default for expect()-style waits
DEFAULT_TIMEOUT_MS = 5000
LOGIN_TIMEOUT_MS = 15000

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Credentials:
    """The single shared account the run logs in with."""

    username: str
    password: str = field(repr=False)

    def validate(self) -> None:
        missing = [
            name
            for name, value in (("WIKI_USER", self.username), ("WIKI_PASS", self.password))
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"{' and '.join(missing)} must be set before the run can log in"
            )


@dataclass(frozen=True)
class Settings:
    credentials: Credentials
    base_url: str = DEFAULT_BASE_URL
    state_path: Path = Path(DEFAULT_STATE_PATH)
    screenshot_path: Path = Path(DEFAULT_SCREENSHOT_PATH)
    db_path: Path = Path(DEFAULT_DB_PATH)
    headless: bool = True
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    login_timeout_ms: int = LOGIN_TIMEOUT_MS
    logout_attempts: int = 1


def _int_setting(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer", value=raw) from None
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}", value=value)
    return value


def _bool_setting(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean", value=raw)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``environ`` or, by default, the process environment.

    When reading the process environment a ``.env`` file in the working
    directory is loaded first; variables already set take precedence.
    Credentials are validated here so a missing account fails before any
    browser is launched.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    credentials = Credentials(
        username=environ.get("WIKI_USER", "").strip(),
        password=environ.get("WIKI_PASS", ""),
    )
    credentials.validate()

    return Settings(
        credentials=credentials,
        base_url=environ.get("WIKI_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        state_path=Path(environ.get("WIKIWATCH_STATE_PATH") or DEFAULT_STATE_PATH),
        screenshot_path=Path(
            environ.get("WIKIWATCH_SCREENSHOT_PATH") or DEFAULT_SCREENSHOT_PATH
        ),
        db_path=Path(environ.get("WIKIWATCH_DB_PATH") or DEFAULT_DB_PATH),
        headless=_bool_setting(environ, "WIKIWATCH_HEADLESS", True),
        timeout_ms=_int_setting(environ, "WIKIWATCH_TIMEOUT_MS", DEFAULT_TIMEOUT_MS, 1),
        login_timeout_ms=_int_setting(
            environ, "WIKIWATCH_LOGIN_TIMEOUT_MS", LOGIN_TIMEOUT_MS, 1
        ),
        logout_attempts=_int_setting(environ, "WIKIWATCH_LOGOUT_ATTEMPTS", 1, 1),
    )
