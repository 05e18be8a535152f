"""Sequential execution engine: bootstrap gate, ordered cases, cleanup."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from wikiwatch.errors import (
    BootstrapFailure,
    ConfigurationError,
    ScenarioAssertionFailure,
)
from wikiwatch.metrics import CleanupOutcome, MetricsCollector, RunResult
from wikiwatch.scenario import ScenarioCase, ScenarioContext, ScenarioSuite
from wikiwatch.waits import check

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserType, Page

    from wikiwatch.bootstrap import SessionBootstrapper
    from wikiwatch.cleanup import CleanupCoordinator
    from wikiwatch.config import Credentials
    from wikiwatch.site import WikiSite
    from wikiwatch.state import StateStore

logger = logging.getLogger(__name__)


class RunPhase(Enum):
    NOT_STARTED = "not_started"
    BOOTSTRAP = "bootstrap"
    RUNNING = "running"
    CLEANUP = "cleanup"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class SuiteRun:
    """Full record of one pass over a suite."""

    suite_name: str
    run_group: str
    phase: RunPhase = RunPhase.NOT_STARTED
    current_case: str | None = None
    results: list[RunResult] = field(default_factory=list)
    cleanups: list[CleanupOutcome] = field(default_factory=list)
    started_at: float = 0.0
    ended_at: float | None = None
    error: str | None = None

    @property
    def passed(self) -> bool:
        return self.phase == RunPhase.DONE and all(r.passed for r in self.results)


class SuiteRunner:
    """Runs cases one at a time against the shared account.

    Order is strict: bootstrap, then for every case the case itself followed
    by its cleanup, then the end-of-run cleanup. Configuration and bootstrap
    errors abort the run; anything else is confined to the case it came from.
    """

    def __init__(
        self,
        site: WikiSite,
        store: StateStore,
        bootstrapper: SessionBootstrapper,
        cleanup: CleanupCoordinator,
        browser_type: BrowserType,
        launch_options: dict[str, Any] | None = None,
        collector: MetricsCollector | None = None,
    ):
        self.site = site
        self.store = store
        self.bootstrapper = bootstrapper
        self.cleanup = cleanup
        self.browser_type = browser_type
        self.launch_options = launch_options or {}
        self.collector = collector
        self.last_run: SuiteRun | None = None

    async def run_case(self, case: ScenarioCase, page: Page) -> RunResult:
        """Run a single case on ``page`` and classify its outcome."""
        ctx = ScenarioContext(
            page=page,
            site=self.site,
            logger=logging.getLogger(f"wikiwatch.scenarios.{case.id}"),
        )

        async def execute():
            if case.precondition is not None:
                check(await self.site.set_watchlist(page, case.precondition))
                ctx.confirm(f"Watchlist set to {list(case.precondition)}.")
            await case.body(ctx)

        started = time.time()
        error: str | None = None
        failure_category: str | None = None
        logger.info("[%s] %s", case.id, case.name)
        try:
            await asyncio.wait_for(execute(), timeout=case.timeout_seconds)
        except (ConfigurationError, BootstrapFailure):
            raise
        except ScenarioAssertionFailure as e:
            error, failure_category = str(e), "assertion"
        except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
            error = str(e) or f"Case exceeded {case.timeout_seconds}s"
            failure_category = "timeout"
        except Exception as e:
            error, failure_category = f"{type(e).__name__}: {e}", "error"

        if failure_category:
            logger.error("[%s] FAILED (%s): %s", case.id, failure_category, error)
        else:
            logger.info("[%s] PASSED", case.id)

        return RunResult(
            case_id=case.id,
            case_name=case.name,
            passed=failure_category is None,
            duration_ms=int((time.time() - started) * 1000),
            error=error,
            failure_category=failure_category,
            timestamp=started,
            checks=ctx.checks,
        )

    def _record(
        self, run: SuiteRun, result: RunResult | None, cleanup: CleanupOutcome
    ) -> None:
        """Write to the results database; a failed write never stops the run."""
        if not self.collector:
            return
        try:
            if result is not None:
                self.collector.store(result, run_group=run.run_group)
            self.collector.store_cleanup(cleanup, run_group=run.run_group)
        except (sqlite3.Error, OSError) as e:
            logger.warning(
                "Could not record %s in %s: %s",
                result.case_id if result else cleanup.phase,
                self.collector.db_path,
                e,
            )

    async def _launch(self) -> Browser:
        try:
            return await self.browser_type.launch(**self.launch_options)
        except Exception as e:
            raise BootstrapFailure(f"Could not launch browser: {e}") from e

    async def run_suite(
        self, suite: ScenarioSuite, credentials: Credentials
    ) -> SuiteRun:
        """Bootstrap, run every case of ``suite`` in order, then clean up.

        Raises ``ConfigurationError`` or ``BootstrapFailure`` when the run has
        to stop; the partial record is still available as ``last_run``.
        """
        run = SuiteRun(
            suite_name=suite.name,
            run_group=uuid4().hex[:12],
            started_at=time.time(),
        )
        self.last_run = run

        try:
            run.phase = RunPhase.BOOTSTRAP
            await self.bootstrapper.bootstrap(credentials)

            browser = await self._launch()
            try:
                context = await browser.new_context(
                    storage_state=str(self.store.require())
                )
                page = await context.new_page()

                run.phase = RunPhase.RUNNING
                for case in suite.cases:
                    run.current_case = case.id
                    self.store.require()
                    result = await self.run_case(case, page)
                    result.cleanup = await self.cleanup.after_case(browser, case.id)
                    run.results.append(result)
                    run.cleanups.append(result.cleanup)
                    self._record(run, result, result.cleanup)
                run.current_case = None

                run.phase = RunPhase.CLEANUP
                final = await self.cleanup.after_run(browser)
                run.cleanups.append(final)
                self._record(run, None, final)
            finally:
                await browser.close()
        except (ConfigurationError, BootstrapFailure) as e:
            run.phase = RunPhase.ABORTED
            run.error = str(e)
            run.ended_at = time.time()
            logger.error("Run aborted during %s: %s", run.current_case or "bootstrap", e)
            raise

        run.phase = RunPhase.DONE
        run.ended_at = time.time()
        return run
