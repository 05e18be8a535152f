"""Best-effort teardown of the shared watchlist and session.

Nothing in here raises: every step is turned into a ``CleanupOutcome`` and
logged, so a failed reset never changes the result of the case before it.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Awaitable, Callable

from wikiwatch.errors import CleanupFailure
from wikiwatch.metrics import CleanupOutcome

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page

    from wikiwatch.site import WikiSite
    from wikiwatch.state import StateStore

logger = logging.getLogger(__name__)


class CleanupCoordinator:
    """Resets remote state using contexts freshly bound to the saved session."""

    def __init__(self, site: WikiSite, store: StateStore, logout_attempts: int = 1):
        self.site = site
        self.store = store
        self.logout_attempts = max(1, logout_attempts)

    async def _in_fresh_context(
        self,
        browser: Browser,
        phase: str,
        case_id: str | None,
        action: Callable[[Page], Awaitable[str]],
    ) -> CleanupOutcome:
        started = time.time()

        if not self.store.is_valid():
            logger.warning(
                "[%s] Storage state file missing or empty at %s. Skipping cleanup.",
                phase,
                self.store.path,
            )
            return CleanupOutcome(
                phase=phase,
                status="skipped",
                case_id=case_id,
                detail=f"storage state missing at {self.store.path}",
                timestamp=started,
            )

        outcome = CleanupOutcome(phase=phase, status="ok", case_id=case_id, timestamp=started)
        context = None
        try:
            context = await browser.new_context(storage_state=str(self.store.path))
            page = await context.new_page()
            outcome.detail = await action(page)
            logger.info("[%s] %s", phase, outcome.detail)
        except Exception as e:
            outcome.status = "failed"
            outcome.detail = f"{type(e).__name__}: {e}"
            logger.error("[%s] Error during cleanup: %s", phase, outcome.detail)
        finally:
            if context is not None:
                try:
                    await context.close()
                except Exception as e:
                    logger.warning("[%s] Could not close cleanup context: %s", phase, e)
            outcome.duration_ms = int((time.time() - started) * 1000)
        return outcome

    async def _clear(self, page: Page) -> str:
        cleared = await self.site.clear_watchlist(page)
        if not cleared:
            raise CleanupFailure("Watchlist clear was not confirmed", error=cleared.error)
        return "Watchlist cleared."

    async def _logout(self, page: Page) -> str:
        last: CleanupFailure | None = None
        for attempt in range(1, self.logout_attempts + 1):
            try:
                logged_out = await self.site.logout(page)
            except Exception as e:
                last = CleanupFailure(f"Logout raised: {e}", attempt=attempt)
            else:
                if logged_out:
                    return "Logged out successfully."
                last = CleanupFailure(
                    "Logout was not confirmed", attempt=attempt, error=logged_out.error
                )
            if attempt < self.logout_attempts:
                logger.warning("[after_run] %s; retrying", last)
        raise last

    async def after_case(self, browser: Browser, case_id: str | None = None) -> CleanupOutcome:
        """Empty the shared watchlist after a case."""
        return await self._in_fresh_context(browser, "after_case", case_id, self._clear)

    async def after_run(self, browser: Browser) -> CleanupOutcome:
        """Log the shared account out once every case has run."""
        outcome = await self._in_fresh_context(browser, "after_run", None, self._logout)
        logger.info("[after_run] Cleanup complete.")
        return outcome
