"""Persisted browser session state (cookies + local storage)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from wikiwatch.errors import BootstrapFailure, SessionStateMissing

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext

logger = logging.getLogger(__name__)


class StateStore:
    """Owns the session-state artifact at a fixed path.

    The artifact is written once per run by the bootstrapper and only read
    afterwards. It is never deleted here; the next run overwrites it.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).resolve()

    def exists(self) -> bool:
        return self.path.is_file()

    def is_valid(self) -> bool:
        """True when the artifact exists, is non-empty and parses as a snapshot."""
        try:
            if self.path.stat().st_size == 0:
                return False
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return False
        return isinstance(data, dict) and "cookies" in data

    def require(self) -> Path:
        """Return the artifact path, or raise if it is unusable."""
        if not self.is_valid():
            raise SessionStateMissing(
                "Session state is missing or empty; re-run bootstrap",
                path=str(self.path),
            )
        return self.path

    async def save(self, context: BrowserContext) -> Path:
        """Snapshot ``context`` to disk and confirm the write landed."""
        directory = self.path.parent
        if not directory.exists():
            logger.info("[bootstrap] Creating directory: %s", directory)
            directory.mkdir(parents=True, exist_ok=True)

        logger.info("[bootstrap] Saving storage state to: %s", self.path)
        await context.storage_state(path=str(self.path))

        if not self.exists() or self.path.stat().st_size == 0:
            raise BootstrapFailure(
                "Failed to save storage state", path=str(self.path)
            )
        logger.info("[bootstrap] Verified storage state file exists.")
        return self.path
