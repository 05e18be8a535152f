"""Bounded waits on remote UI state.

Every wait is one of Playwright's auto-retrying ``expect`` assertions with an
explicit timeout. Instead of raising, each returns a ``WaitResult`` so callers
decide whether a timeout is fatal (bootstrap), fails a case (scenarios) or is
only logged (cleanup). The ``expect_*`` helpers are the scenario flavor: they
raise ``ScenarioAssertionFailure`` on timeout.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import expect

from wikiwatch.config import DEFAULT_TIMEOUT_MS
from wikiwatch.errors import ScenarioAssertionFailure

if TYPE_CHECKING:
    from playwright.async_api import Locator


@dataclass
class WaitResult:
    """Outcome of a bounded wait."""

    ok: bool
    description: str
    elapsed_ms: int
    observed: object = None
    error: str | None = None

    def __bool__(self) -> bool:
        return self.ok


async def settle(assertion: Awaitable[None], description: str) -> WaitResult:
    """Await an ``expect(...)`` assertion and report it as a ``WaitResult``."""
    started = time.monotonic()
    try:
        await assertion
    except (AssertionError, PlaywrightError) as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        return WaitResult(False, description, elapsed_ms, error=str(e))
    return WaitResult(True, description, int((time.monotonic() - started) * 1000))


async def wait_visible(
    locator: Locator, description: str, timeout_ms: int = DEFAULT_TIMEOUT_MS
) -> WaitResult:
    return await settle(expect(locator).to_be_visible(timeout=timeout_ms), description)


async def wait_count(
    locator: Locator,
    expected: int,
    description: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> WaitResult:
    return await settle(
        expect(locator).to_have_count(expected, timeout=timeout_ms), description
    )


async def wait_text(
    locator: Locator,
    text: str,
    description: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    exact: bool = False,
) -> WaitResult:
    """Wait until the locator's text equals (``exact``) or contains ``text``.

    Whitespace is normalized on both sides, as Playwright does.
    """
    assertions = expect(locator)
    if exact:
        assertion = assertions.to_have_text(text, timeout=timeout_ms)
    else:
        assertion = assertions.to_contain_text(text, timeout=timeout_ms)
    return await settle(assertion, description)


def check(result: WaitResult) -> WaitResult:
    """Raise ``ScenarioAssertionFailure`` unless ``result`` succeeded."""
    if not result.ok:
        raise ScenarioAssertionFailure(
            f"Timed out waiting for {result.description}",
            elapsed_ms=result.elapsed_ms,
            error=result.error,
        )
    return result


async def expect_visible(
    locator: Locator, description: str, timeout_ms: int = DEFAULT_TIMEOUT_MS
) -> WaitResult:
    return check(await wait_visible(locator, description, timeout_ms))


async def expect_count(
    locator: Locator,
    expected: int,
    description: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> WaitResult:
    return check(await wait_count(locator, expected, description, timeout_ms))


async def expect_text(
    locator: Locator,
    text: str,
    description: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    exact: bool = False,
) -> WaitResult:
    return check(await wait_text(locator, text, description, timeout_ms, exact))
