"""Shared fixtures for the wikiwatch test suite."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import pytest_asyncio

from wikiwatch.cleanup import CleanupCoordinator
from wikiwatch.config import Credentials
from wikiwatch.metrics import MetricsCollector
from wikiwatch.site import WikiSite
from wikiwatch.state import StateStore
from wikiwatch.tests.fakes import (
    BASE_URL,
    PASSWORD,
    USER,
    FakeBrowser,
    FakeBrowserType,
    FakePage,
    FakeWiki,
    fake_expect,
)


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def assertions(monkeypatch):
    monkeypatch.setattr("wikiwatch.waits.expect", fake_expect)


@pytest.fixture
def wiki() -> FakeWiki:
    return FakeWiki()


@pytest.fixture
def browser_type(wiki: FakeWiki) -> FakeBrowserType:
    return FakeBrowserType(wiki)


@pytest.fixture
def browser(wiki: FakeWiki) -> FakeBrowser:
    return FakeBrowser(wiki)


@pytest.fixture
def site() -> WikiSite:
    return WikiSite(BASE_URL, timeout_ms=50)


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    return StateStore(tmp_path / ".auth" / "storageState.json")


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(USER, PASSWORD)


@pytest.fixture
def collector(tmp_path: Path) -> MetricsCollector:
    return MetricsCollector(db_path=tmp_path / "test.db")


@pytest.fixture
def cleanup(site: WikiSite, store: StateStore) -> CleanupCoordinator:
    return CleanupCoordinator(site, store)


@pytest.fixture
def saved_state(store: StateStore, wiki: FakeWiki) -> StateStore:
    """A store whose artifact holds a live logged-in session for USER."""
    wiki.sessions.add(USER)
    store.path.parent.mkdir(parents=True, exist_ok=True)
    store.path.write_text(
        json.dumps({"cookies": [{"name": "session", "value": USER}], "origins": []})
    )
    return store


@pytest_asyncio.fixture
async def logged_in_page(browser: FakeBrowser, saved_state: StateStore) -> FakePage:
    context = await browser.new_context(storage_state=str(saved_state.path))
    return await context.new_page()
