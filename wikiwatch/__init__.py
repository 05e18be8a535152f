"""Live-site watchlist test harness for MediaWiki."""

__version__ = "0.1.0"
