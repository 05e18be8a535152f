"""Tests for wikiwatch.report module."""

import json

from wikiwatch.metrics import CleanupOutcome, MetricsCollector, RunResult
from wikiwatch.report import ReportGenerator


def make_result(**overrides) -> RunResult:
    defaults = dict(
        case_id="watch-001",
        case_name="Add two pages",
        passed=True,
        duration_ms=5000,
        error=None,
        failure_category=None,
        timestamp=1000.0,
        cleanup=CleanupOutcome(phase="after_case", status="ok", case_id="watch-001"),
    )
    defaults.update(overrides)
    return RunResult(**defaults)


class TestReportGenerator:
    def test_all_pass_report(self, collector: MetricsCollector):
        reporter = ReportGenerator(collector)
        report = reporter.generate([make_result() for _ in range(3)], "test")
        assert report.total == 3
        assert report.passed == 3
        assert report.pass_rate == 1.0
        assert report.cleanup_clean
        assert report.status_line == "PASSED"

    def test_mixed_results(self, collector: MetricsCollector):
        reporter = ReportGenerator(collector)
        results = [
            make_result(),
            make_result(
                case_id="watch-002",
                passed=False,
                error="count was 1",
                failure_category="assertion",
            ),
        ]
        report = reporter.generate(results, "test")
        assert report.failed == 1
        assert report.pass_rate == 0.5
        assert report.by_failure_category == {"assertion": 1}
        assert report.failures[0]["case_id"] == "watch-002"
        assert report.status_line == "FAILED"

    def test_passed_but_not_reset_is_distinguishable(self, collector: MetricsCollector):
        reporter = ReportGenerator(collector)
        results = [
            make_result(
                cleanup=CleanupOutcome(
                    phase="after_case", status="failed", case_id="watch-001", detail="boom"
                )
            )
        ]
        report = reporter.generate(results, "test")
        assert report.failed == 0
        assert not report.cleanup_clean
        assert report.status_line == "PASSED (remote state not fully reset)"

    def test_explicit_cleanups_include_final_logout(self):
        reporter = ReportGenerator()
        result = make_result()
        final = CleanupOutcome(phase="after_run", status="skipped", detail="no state")
        report = reporter.generate([result], "test", cleanups=[result.cleanup, final])
        assert [c["phase"] for c in report.cleanups] == ["after_case", "after_run"]
        assert not report.cleanup_clean

    def test_regression_detection(self, collector: MetricsCollector):
        for i in range(5):
            collector.store(make_result(timestamp=100.0 + i))
        reporter = ReportGenerator(collector)
        failed = make_result(passed=False, error="boom", failure_category="error")
        report = reporter.generate([failed], "test")
        assert report.regressions[0]["case_id"] == "watch-001"

    def test_current_run_not_in_historical_rate(self, collector: MetricsCollector):
        for i in range(2):
            collector.store(make_result(timestamp=100.0 + i), run_group="earlier")
        failed = make_result(
            passed=False, error="boom", failure_category="error", timestamp=200.0
        )
        # the runner records the failure before the report is generated
        collector.store(failed, run_group="current")
        reporter = ReportGenerator(collector)

        report = reporter.generate([failed], "test", run_group="current")
        assert report.regressions[0]["historical_pass_rate"] == 1.0

        counted = reporter.generate([failed], "test")
        assert counted.regressions == []

    def test_markdown_output(self, collector: MetricsCollector):
        reporter = ReportGenerator(collector)
        report = reporter.generate([make_result()], "watchlist")
        md = reporter.to_markdown(report)
        assert "# Watchlist Report: watchlist" in md
        assert "1/1" in md
        assert "100%" in md
        assert "| after_case | watch-001 | ok |" in md

    def test_json_output(self, collector: MetricsCollector):
        reporter = ReportGenerator(collector)
        report = reporter.generate([make_result()], "test")
        data = json.loads(reporter.to_json(report))
        assert data["total"] == 1
        assert data["status"] == "PASSED"
        assert data["cleanups"][0]["status"] == "ok"

    def test_empty_results(self):
        report = ReportGenerator().generate([], "empty")
        assert report.total == 0
        assert report.pass_rate == 0
        assert report.cleanup_clean
