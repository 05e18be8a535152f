"""One-time login that produces the session state every case reuses."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from wikiwatch.config import DEFAULT_SCREENSHOT_PATH, LOGIN_TIMEOUT_MS
from wikiwatch.errors import BootstrapFailure

if TYPE_CHECKING:
    from playwright.async_api import BrowserType, Page

    from wikiwatch.config import Credentials
    from wikiwatch.site import WikiSite
    from wikiwatch.state import StateStore

logger = logging.getLogger(__name__)


class SessionBootstrapper:
    """Logs the shared account in once and persists the session to disk.

    This is the gate for the whole run: any failure here raises
    ``BootstrapFailure`` (or ``ConfigurationError`` for bad credentials) and no
    scenario is attempted.
    """

    def __init__(
        self,
        site: WikiSite,
        store: StateStore,
        browser_type: BrowserType,
        launch_options: dict[str, Any] | None = None,
        confirm_timeout_ms: int = LOGIN_TIMEOUT_MS,
        screenshot_path: str | Path = DEFAULT_SCREENSHOT_PATH,
    ):
        self.site = site
        self.store = store
        self.browser_type = browser_type
        self.launch_options = launch_options or {}
        self.confirm_timeout_ms = confirm_timeout_ms
        self.screenshot_path = Path(screenshot_path)

    async def _capture(self, page: Page) -> str | None:
        try:
            await page.screenshot(path=str(self.screenshot_path))
        except Exception as e:
            logger.error("[bootstrap] Could not capture diagnostic screenshot: %s", e)
            return None
        logger.error("[bootstrap] Diagnostic screenshot saved to %s", self.screenshot_path)
        return str(self.screenshot_path)

    async def bootstrap(self, credentials: Credentials) -> Path:
        """Log in with ``credentials`` and return the saved state path."""
        logger.info("--- Starting session bootstrap ---")
        credentials.validate()

        logger.info("[bootstrap] Launching browser for setup...")
        try:
            browser = await self.browser_type.launch(**self.launch_options)
        except Exception as e:
            raise BootstrapFailure(f"Could not launch browser: {e}") from e
        page = None
        try:
            context = await browser.new_context()
            page = await context.new_page()
            logger.info("[bootstrap] Browser context and page created.")

            confirmed = await self.site.login(page, credentials, self.confirm_timeout_ms)
            if not confirmed:
                raise BootstrapFailure(
                    f"Login was not confirmed for user {credentials.username}",
                    timeout_ms=self.confirm_timeout_ms,
                    error=confirmed.error,
                )
            logger.info("[bootstrap] Login successful for user: %s", credentials.username)
            path = await self.store.save(context)
        except Exception as e:
            logger.error("[bootstrap] ERROR during session bootstrap: %s", e)
            screenshot = await self._capture(page) if page is not None else None
            if isinstance(e, BootstrapFailure):
                e.screenshot = e.screenshot or screenshot
                raise
            raise BootstrapFailure(
                f"Session bootstrap failed: {e}", screenshot=screenshot
            ) from e
        finally:
            logger.info("[bootstrap] Closing browser used for setup...")
            await browser.close()

        logger.info("--- Session bootstrap finished ---")
        return path
