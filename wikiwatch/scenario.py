"""Scenario case and suite definitions for watchlist runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

if TYPE_CHECKING:
    from playwright.async_api import Page

    from wikiwatch.site import WikiSite


@dataclass
class ScenarioContext:
    """What a case body gets to work with."""

    page: Page
    site: WikiSite
    logger: logging.Logger
    # Human-readable trail of what the case confirmed, stored with the result
    checks: list[str] = field(default_factory=list)

    def confirm(self, message: str) -> None:
        self.checks.append(message)
        self.logger.info(message)


@dataclass
class ScenarioCase:
    """One ordered unit of work against the shared watchlist."""

    id: str
    name: str
    body: Callable[[ScenarioContext], Awaitable[None]]

    # Titles the remote watchlist is bulk-set to before the body runs.
    # None leaves the watchlist as the previous step left it; () empties it.
    precondition: tuple[str, ...] | None = None

    timeout_seconds: float = 120
    tags: list[str] = field(default_factory=list)


@dataclass
class ScenarioSuite:
    """An ordered collection of cases sharing one session."""

    name: str
    description: str
    cases: list[ScenarioCase]
    tags: list[str] = field(default_factory=list)
