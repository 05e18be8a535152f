"""Watchlist add / remove / link-title scenarios."""

from __future__ import annotations

from wikiwatch.scenario import ScenarioCase, ScenarioContext
from wikiwatch.site import REMOVED_ONE_MESSAGE
from wikiwatch.waits import check, expect_count, expect_text, expect_visible

ARTICLE_1 = "Bread"
ARTICLE_2 = "Playwright (software)"


# --- Case bodies ---


async def add_two_and_verify(ctx: ScenarioContext) -> None:
    """Watch two articles, then confirm each is listed exactly once."""
    page, site = ctx.page, ctx.site

    for title in (ARTICLE_1, ARTICLE_2):
        check(await site.watch(page, title))
        ctx.confirm(f'Added "{title}" to watchlist.')

    await site.open_listing(page)
    for title in (ARTICLE_1, ARTICLE_2):
        await expect_count(
            site.listing_entry(page, title), 1, f'one listing entry for "{title}"', site.timeout_ms
        )
    ctx.confirm("Verified both articles are in the watchlist.")


async def remove_one_and_verify(ctx: ScenarioContext) -> None:
    """Remove the second article and confirm only the first remains."""
    page, site = ctx.page, ctx.site

    check(await site.remove(page, ARTICLE_2))
    await expect_text(
        site.content(page), ARTICLE_2, f'"{ARTICLE_2}" named in "{REMOVED_ONE_MESSAGE}"',
        site.timeout_ms,
    )
    ctx.confirm(f'Removed "{ARTICLE_2}" and confirmed message.')

    await site.open_listing(page)
    await expect_count(
        site.listing_entry(page, ARTICLE_2), 0, f'no listing entry for "{ARTICLE_2}"', site.timeout_ms
    )
    await expect_count(
        site.listing_entry(page, ARTICLE_1), 1, f'one listing entry for "{ARTICLE_1}"', site.timeout_ms
    )
    ctx.confirm(f'Verified "{ARTICLE_1}" is still in the watchlist.')


async def title_matches_listing_link(ctx: ScenarioContext) -> None:
    """Follow the listing link for an article and compare the page heading."""
    page, site = ctx.page, ctx.site

    await site.open_listing(page)
    link = site.listing_link(page, ARTICLE_1)
    await expect_visible(link, f'listing link for "{ARTICLE_1}"', site.timeout_ms)
    await link.click()
    await expect_text(
        site.heading(page), ARTICLE_1, f'heading "{ARTICLE_1}"', site.timeout_ms, exact=True
    )
    ctx.confirm("Verified article title matches watchlist link.")


# --- Cases ---

WATCHLIST_CASES = [
    ScenarioCase(
        id="watch-001",
        name="Add two pages to Watchlist and verify",
        body=add_two_and_verify,
        precondition=(),
        tags=["smoke", "watchlist", "add"],
    ),
    ScenarioCase(
        id="watch-002",
        name="Remove one article from Watchlist and verify",
        body=remove_one_and_verify,
        precondition=(ARTICLE_1, ARTICLE_2),
        tags=["watchlist", "remove"],
    ),
    ScenarioCase(
        id="watch-003",
        name="Verify article title matches link in watchlist",
        body=title_matches_listing_link,
        precondition=(ARTICLE_1,),
        tags=["smoke", "watchlist", "links"],
    ),
]
