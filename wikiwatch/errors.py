"""Error taxonomy for the watchlist harness.

Fatal errors (configuration, bootstrap) stop the whole run. Assertion
failures fail only their case. Cleanup failures are caught by the cleanup
coordinator and reported as outcomes, never propagated.
"""

from __future__ import annotations


class WikiwatchError(Exception):
    """Base exception for all harness errors."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self):
        if not self.context:
            return self.message
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({context_str})"


class ConfigurationError(WikiwatchError):
    """Required configuration is missing or malformed."""


class BootstrapFailure(WikiwatchError):
    """Login flow, confirmation wait, or session persistence failed."""

    def __init__(self, message: str, screenshot: str | None = None, **context):
        super().__init__(message, **context)
        self.screenshot = screenshot


class SessionStateMissing(BootstrapFailure):
    """The persisted session artifact is absent or empty."""


class ScenarioAssertionFailure(WikiwatchError):
    """An expected UI or remote state did not materialize."""


class CleanupFailure(WikiwatchError):
    """A teardown step could not confirm its effect."""
