"""Scenario case definitions."""

from wikiwatch.scenarios.watchlist import WATCHLIST_CASES

# Declaration order is execution order
ALL_CASES = [
    *WATCHLIST_CASES,
]
