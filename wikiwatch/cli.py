"""CLI entry point for the watchlist harness."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from playwright.async_api import async_playwright

from wikiwatch.bootstrap import SessionBootstrapper
from wikiwatch.cleanup import CleanupCoordinator
from wikiwatch.config import DEFAULT_DB_PATH, Settings, load_settings
from wikiwatch.errors import BootstrapFailure, ConfigurationError
from wikiwatch.metrics import CleanupOutcome, MetricsCollector, RunResult
from wikiwatch.report import ReportGenerator
from wikiwatch.runner import SuiteRunner
from wikiwatch.scenario import ScenarioSuite
from wikiwatch.scenarios import ALL_CASES
from wikiwatch.site import WikiSite
from wikiwatch.state import StateStore

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FATAL = 2


def _rows_to_results(rows: list[dict]) -> list[RunResult]:
    """Convert stored database rows to RunResult objects."""
    results = []
    for row in rows:
        cleanup = None
        if row["cleanup_status"]:
            cleanup = CleanupOutcome(
                phase="after_case",
                status=row["cleanup_status"],
                case_id=row["case_id"],
                detail=row["cleanup_detail"],
            )
        results.append(
            RunResult(
                case_id=row["case_id"],
                case_name=row["case_name"] or "",
                passed=bool(row["passed"]),
                duration_ms=row["duration_ms"] or 0,
                error=row["error"],
                failure_category=row["failure_category"],
                timestamp=row["timestamp"] or 0,
                checks=json.loads(row["checks"] or "[]"),
                cleanup=cleanup,
            )
        )
    return results


def _rows_to_cleanups(rows: list[dict]) -> list[CleanupOutcome]:
    return [
        CleanupOutcome(
            phase=row["phase"],
            status=row["status"],
            case_id=row["case_id"],
            detail=row["detail"],
            duration_ms=row["duration_ms"] or 0,
            timestamp=row["timestamp"] or 0.0,
        )
        for row in rows
    ]


def select_cases(args: argparse.Namespace) -> ScenarioSuite | None:
    if args.case:
        cases = [c for c in ALL_CASES if c.id == args.case]
        if not cases:
            print(f"Case '{args.case}' not found.")
            print(f"Available: {[c.id for c in ALL_CASES]}")
            return None
        return ScenarioSuite(
            name=f"single:{args.case}", description="Single case", cases=cases
        )
    if args.tag:
        cases = [c for c in ALL_CASES if args.tag in c.tags]
        if not cases:
            print(f"No cases with tag '{args.tag}'.")
            return None
        return ScenarioSuite(
            name=f"tag:{args.tag}", description=f"Cases tagged {args.tag}", cases=cases
        )
    return ScenarioSuite(
        name="watchlist",
        description="Wikipedia watchlist flow",
        cases=ALL_CASES,
    )


def build_runner(
    settings: Settings, browser_type, collector: MetricsCollector | None
) -> SuiteRunner:
    site = WikiSite(settings.base_url, timeout_ms=settings.timeout_ms)
    store = StateStore(settings.state_path)
    launch_options = {"headless": settings.headless}
    bootstrapper = SessionBootstrapper(
        site,
        store,
        browser_type,
        launch_options=launch_options,
        confirm_timeout_ms=settings.login_timeout_ms,
        screenshot_path=settings.screenshot_path,
    )
    cleanup = CleanupCoordinator(site, store, logout_attempts=settings.logout_attempts)
    return SuiteRunner(
        site,
        store,
        bootstrapper,
        cleanup,
        browser_type,
        launch_options=launch_options,
        collector=collector,
    )


def print_result(result: RunResult) -> None:
    status = "PASS" if result.passed else "FAIL"
    cleanup = result.cleanup.status if result.cleanup else "n/a"
    print(
        f"  {status} | {result.case_id}: {result.case_name} | "
        f"{result.duration_ms}ms | cleanup: {cleanup}"
    )
    if not result.passed:
        print(f"  Error: {result.error}")
    if result.cleanup and not result.cleanup.ok:
        print(f"  Cleanup: {result.cleanup.detail}")


async def cmd_run(args: argparse.Namespace) -> int:
    """Run the watchlist cases."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FATAL

    suite = select_cases(args)
    if suite is None:
        return EXIT_FATAL

    collector = None if args.no_store else MetricsCollector(settings.db_path)
    print(f"Running {len(suite.cases)} case(s) [{suite.name}]...\n")

    async with async_playwright() as p:
        runner = build_runner(settings, p.chromium, collector)
        try:
            run = await runner.run_suite(suite, settings.credentials)
        except (ConfigurationError, BootstrapFailure) as e:
            print(f"Run aborted: {e}", file=sys.stderr)
            screenshot = getattr(e, "screenshot", None)
            if screenshot:
                print(f"Diagnostic screenshot: {screenshot}", file=sys.stderr)
            partial = runner.last_run
            if partial:
                for result in partial.results:
                    print_result(result)
            return EXIT_FATAL

    for result in run.results:
        print_result(result)
    print()

    reporter = ReportGenerator(collector)
    report = reporter.generate(
        run.results, suite.name, cleanups=run.cleanups, run_group=run.run_group
    )

    if args.format == "markdown":
        print(reporter.to_markdown(report))
    elif args.format == "json":
        print(reporter.to_json(report))
    else:
        print(f"{'=' * 50}")
        print(
            f"Results: {report.passed}/{report.total} passed "
            f"({report.pass_rate:.0%}) - {report.status_line}"
        )
        print(f"Total duration: {report.total_duration_ms / 1000:.1f}s")
        for c in report.cleanups:
            if c["status"] != "ok":
                print(f"Cleanup {c['phase']} {c['case_id'] or ''}: {c['status']} - {c['detail']}")

    return EXIT_OK if run.passed else EXIT_FAILED


def cmd_report(args: argparse.Namespace) -> int:
    """Generate report from stored results."""
    collector = MetricsCollector(args.db)
    recent = collector.get_recent_runs(last_n=args.last_n)

    if not recent:
        print("No results found. Run the suite first.")
        return EXIT_OK

    reporter = ReportGenerator(collector)
    results = _rows_to_results(recent)
    # Every recorded step of the runs shown, end-of-run logout included
    groups = sorted({r["run_group"] for r in recent if r["run_group"]})
    if groups:
        cleanup_rows = collector.get_recent_cleanups(
            last_n=len(recent) + len(groups), run_groups=groups
        )
        cleanups = _rows_to_cleanups(cleanup_rows)
    else:
        cleanups = None
    report = reporter.generate(results, "stored", cleanups=cleanups)

    if args.format == "json":
        print(reporter.to_json(report))
    else:
        print(reporter.to_markdown(report))
    return EXIT_OK


def cmd_list() -> int:
    for c in ALL_CASES:
        tags = ", ".join(c.tags) if c.tags else ""
        pre = "-" if c.precondition is None else "{" + ", ".join(c.precondition) + "}"
        print(f"  {c.id:10s} {c.name:50s} pre={pre:32s} {tags}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wikipedia watchlist E2E runner")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run the watchlist cases")
    run_parser.add_argument("--case", help="Run a specific case by ID")
    run_parser.add_argument("--tag", help="Run cases with a specific tag")
    run_parser.add_argument(
        "--format",
        choices=["text", "json", "markdown"],
        default="text",
    )
    run_parser.add_argument(
        "--no-store",
        action="store_true",
        help="Do not record results in the results database",
    )

    report_parser = subparsers.add_parser(
        "report", help="Generate reports from stored results"
    )
    report_parser.add_argument(
        "--last-n", type=int, default=20, help="Number of recent runs"
    )
    report_parser.add_argument(
        "--format",
        choices=["json", "markdown"],
        default="markdown",
    )
    report_parser.add_argument(
        "--db", default=DEFAULT_DB_PATH, help="Results database path"
    )

    subparsers.add_parser("list", help="List available cases")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "run":
        return asyncio.run(cmd_run(args))
    if args.command == "report":
        return cmd_report(args)
    if args.command == "list":
        return cmd_list()
    parser.print_help()
    return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
