"""Page-level affordances of a MediaWiki site.

Everything that knows a URL, a selector or a message string lives here, so
scenarios, bootstrap and cleanup only speak in terms of watchlist actions.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Iterable
from urllib.parse import quote

from wikiwatch.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_MS, LOGIN_TIMEOUT_MS
from wikiwatch.waits import WaitResult, wait_text, wait_visible

if TYPE_CHECKING:
    from playwright.async_api import Locator, Page

    from wikiwatch.config import Credentials

logger = logging.getLogger(__name__)

MAIN_PAGE = "Main_Page"
EDIT_WATCHLIST = "Special:EditWatchlist"
EDIT_WATCHLIST_RAW = "Special:EditWatchlist/raw"
EDIT_WATCHLIST_CLEAR = "Special:EditWatchlist/clear"

REMOVED_ONE_MESSAGE = "A single title was removed from your watchlist"
CLEARED_MESSAGE = "Your watchlist has been cleared."
UPDATED_MESSAGE = "Your watchlist has been updated."
LOGGED_OUT_HEADING = "Log out"


def article_path(title: str) -> str:
    """Path segment for ``title`` the way MediaWiki links it."""
    return quote(title.replace(" ", "_"), safe="()_:,'/")


class WikiSite:
    """Actions against one wiki, given a Playwright page to act on."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_ms = timeout_ms

    def url(self, title: str) -> str:
        return f"{self.base_url}/wiki/{article_path(title)}"

    # --- Locators ---

    def content(self, page: Page) -> Locator:
        return page.locator("#mw-content-text")

    def heading(self, page: Page) -> Locator:
        return page.locator("#firstHeading")

    def listing_entry(self, page: Page, title: str) -> Locator:
        """Checkbox for ``title`` on the watchlist edit listing."""
        return page.get_by_role("checkbox", name=f"{title} (talk | history)")

    def listing_link(self, page: Page, title: str) -> Locator:
        return page.get_by_role("link", name=title, exact=True)

    def unwatch_toggle(self, page: Page) -> Locator:
        return page.locator("#ca-unwatch")

    def user_link(self, page: Page, username: str) -> Locator:
        # Scoped to this account so a stale generic "logged in" marker never counts
        return page.locator(f'#pt-userpage-2 a:has-text("{username}")')

    # --- Navigation ---

    async def open_main_page(self, page: Page) -> None:
        await page.goto(self.url(MAIN_PAGE))

    async def open_article(self, page: Page, title: str) -> None:
        await page.goto(self.url(title))

    async def open_listing(self, page: Page) -> None:
        await page.goto(self.url(EDIT_WATCHLIST))

    # --- Session ---

    async def login(
        self,
        page: Page,
        credentials: Credentials,
        confirm_timeout_ms: int = LOGIN_TIMEOUT_MS,
    ) -> WaitResult:
        """Submit the login form and wait for the account's user link."""
        logger.info("[bootstrap] Navigating to %s", self.base_url)
        await page.goto(f"{self.base_url}/")
        await page.get_by_role("link", name="Log in").click()

        logger.info("[bootstrap] Filling login form...")
        await page.locator("#wpName1").fill(credentials.username)
        await page.locator("#wpPassword1").fill(credentials.password)
        await page.get_by_role("button", name="Log in").click()
        logger.info("[bootstrap] Login submitted.")

        logger.info("[bootstrap] Waiting for user link to confirm login...")
        return await wait_visible(
            self.user_link(page, credentials.username),
            f"user link for {credentials.username}",
            confirm_timeout_ms,
        )

    async def logout(self, page: Page) -> WaitResult:
        await self.open_main_page(page)
        await page.get_by_role("button", name="Personal tools").check()
        await page.get_by_role("link", name="Log out").click()
        return await wait_text(
            self.heading(page),
            LOGGED_OUT_HEADING,
            "logged-out heading",
            self.timeout_ms,
            exact=True,
        )

    # --- Watchlist ---

    async def watch(self, page: Page, title: str) -> WaitResult:
        """Watch ``title`` from its article page; waits for the toggle to flip."""
        await self.open_article(page, title)
        await page.locator("#ca-watch").click()
        return await wait_visible(
            self.unwatch_toggle(page), f'unwatch toggle on "{title}"', self.timeout_ms
        )

    async def set_watchlist(self, page: Page, titles: Iterable[str]) -> WaitResult:
        """Replace the whole watchlist with ``titles`` via the raw editor.

        Waits for the update confirmation. MediaWiki shows none when a
        non-empty list is submitted unchanged, so that case is detected from
        the editor's current contents and not submitted at all.
        """
        wanted = list(titles)
        await page.goto(self.url(EDIT_WATCHLIST_RAW))
        editor = page.locator("#ooui-php-2")
        current = [
            line.strip()
            for line in (await editor.input_value(timeout=self.timeout_ms)).splitlines()
            if line.strip()
        ]
        if wanted and sorted(current) == sorted(wanted):
            logger.debug("Watchlist already set to %s", wanted)
            return WaitResult(True, "watchlist update", 0, observed=current)

        await editor.fill("\n".join(wanted))
        await page.get_by_role("button", name="Update watchlist").click()
        return await wait_text(
            self.content(page), UPDATED_MESSAGE, "watchlist update confirmation", self.timeout_ms
        )

    async def remove(self, page: Page, title: str) -> WaitResult:
        """Tick ``title`` on the listing and submit the removal form."""
        await self.open_listing(page)
        entry = self.listing_entry(page, title)
        visible = await wait_visible(entry, f'listing checkbox for "{title}"', self.timeout_ms)
        if not visible:
            return visible
        await entry.check()
        await page.get_by_role("button", name="Remove titles").click()
        return await wait_text(
            self.content(page), REMOVED_ONE_MESSAGE, "removal confirmation", self.timeout_ms
        )

    async def clear_watchlist(self, page: Page) -> WaitResult:
        await page.goto(self.url(EDIT_WATCHLIST_CLEAR))
        await page.get_by_role("button", name=re.compile("Clear the watchlist")).click()
        return await wait_text(
            self.content(page), CLEARED_MESSAGE, "clear confirmation", self.timeout_ms
        )
