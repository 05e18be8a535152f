"""Report generation for suite runs."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any

from wikiwatch.metrics import CleanupOutcome, MetricsCollector, RunResult


@dataclass
class SuiteReport:
    """Summary report for a suite run, cleanup included."""

    suite_name: str
    total: int
    passed: int
    failed: int
    pass_rate: float
    total_duration_ms: int
    avg_duration_per_case: float
    by_failure_category: dict[str, int]
    failures: list[dict[str, Any]]
    regressions: list[dict[str, Any]]
    cleanups: list[dict[str, Any]]
    cleanup_clean: bool

    @property
    def status_line(self) -> str:
        if self.failed:
            return "FAILED"
        if not self.cleanup_clean:
            return "PASSED (remote state not fully reset)"
        return "PASSED"


class ReportGenerator:
    """Generates reports from case results and cleanup outcomes."""

    def __init__(self, collector: MetricsCollector | None = None):
        self.collector = collector

    def generate(
        self,
        results: list[RunResult],
        suite_name: str = "",
        cleanups: list[CleanupOutcome] | None = None,
        run_group: str | None = None,
    ) -> SuiteReport:
        """Summarize ``results``; ``run_group`` is excluded from history."""
        total = len(results)
        passed = sum(1 for r in results if r.passed)
        failed = total - passed
        total_duration = sum(r.duration_ms for r in results)

        by_failure_category: dict[str, int] = {}
        for r in results:
            if r.failure_category:
                by_failure_category[r.failure_category] = (
                    by_failure_category.get(r.failure_category, 0) + 1
                )

        failures = [
            {
                "case_id": r.case_id,
                "case_name": r.case_name,
                "category": r.failure_category,
                "error": r.error,
                "checks": r.checks,
            }
            for r in results
            if not r.passed
        ]

        # Cases that pass historically but failed now
        regressions = []
        if self.collector:
            for r in results:
                if not r.passed:
                    historical_rate = self.collector.get_pass_rate(
                        r.case_id, exclude_run_group=run_group
                    )
                    if historical_rate > 0.7:
                        regressions.append(
                            {
                                "case_id": r.case_id,
                                "historical_pass_rate": historical_rate,
                                "error": r.error,
                            }
                        )

        if cleanups is None:
            cleanups = [r.cleanup for r in results if r.cleanup]
        cleanup_rows = [asdict(c) for c in cleanups]

        return SuiteReport(
            suite_name=suite_name,
            total=total,
            passed=passed,
            failed=failed,
            pass_rate=passed / total if total > 0 else 0,
            total_duration_ms=total_duration,
            avg_duration_per_case=total_duration / total if total > 0 else 0,
            by_failure_category=by_failure_category,
            failures=failures,
            regressions=regressions,
            cleanups=cleanup_rows,
            cleanup_clean=all(c.ok for c in cleanups),
        )

    def to_markdown(self, report: SuiteReport) -> str:
        """Render report as Markdown."""
        lines = [
            f"# Watchlist Report: {report.suite_name}",
            "",
            f"**Status:** {report.status_line}",
            f"**Pass Rate:** {report.passed}/{report.total} ({report.pass_rate:.0%})",
            f"**Total Duration:** {report.total_duration_ms / 1000:.1f}s",
            f"**Avg Duration/Case:** {report.avg_duration_per_case / 1000:.1f}s",
        ]

        if report.failures:
            lines.extend(["", "## Failures", ""])
            for f in report.failures:
                lines.append(
                    f"- **{f['case_id']}** ({f['case_name']}): "
                    f"{f['category']} - {f['error']}"
                )

        if report.regressions:
            lines.extend(["", "## Regressions", ""])
            for r in report.regressions:
                lines.append(
                    f"- **{r['case_id']}**: was passing "
                    f"{r['historical_pass_rate']:.0%}, now failing: {r['error']}"
                )

        if report.cleanups:
            lines.extend(
                [
                    "",
                    "## Cleanup",
                    "",
                    "| Phase | Case | Status | Detail |",
                    "|-------|------|--------|--------|",
                ]
            )
            for c in report.cleanups:
                lines.append(
                    f"| {c['phase']} | {c['case_id'] or '-'} "
                    f"| {c['status']} | {c['detail'] or ''} |"
                )

        return "\n".join(lines)

    def to_json(self, report: SuiteReport) -> str:
        """Render report as JSON."""
        data = asdict(report)
        data["status"] = report.status_line
        return json.dumps(data, indent=2)
