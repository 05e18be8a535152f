"""Tests for wikiwatch.metrics module."""

import json
from pathlib import Path

import pytest

from wikiwatch.metrics import CleanupOutcome, MetricsCollector, RunResult


def make_result(**overrides) -> RunResult:
    defaults = dict(
        case_id="watch-001",
        case_name="Add two pages to Watchlist and verify",
        passed=True,
        duration_ms=5000,
        error=None,
        failure_category=None,
        timestamp=1000.0,
        checks=['Added "Bread" to watchlist.'],
    )
    defaults.update(overrides)
    return RunResult(**defaults)


class TestMetricsCollector:
    def test_init_creates_db(self, tmp_path: Path):
        db_path = tmp_path / "sub" / "test.db"
        MetricsCollector(db_path=db_path)
        assert db_path.exists()

    def test_store_and_retrieve(self, collector: MetricsCollector):
        collector.store(make_result())
        runs = collector.get_recent_runs(case_id="watch-001")
        assert len(runs) == 1
        assert runs[0]["case_id"] == "watch-001"
        assert runs[0]["passed"] == 1
        assert json.loads(runs[0]["checks"]) == ['Added "Bread" to watchlist.']
        assert runs[0]["cleanup_status"] is None

    def test_store_with_run_group(self, collector: MetricsCollector):
        collector.store(make_result(), run_group="group-1")
        assert collector.get_recent_runs()[0]["run_group"] == "group-1"

    def test_store_failed_result_with_cleanup(self, collector: MetricsCollector):
        result = make_result(
            passed=False,
            error="Timed out waiting for heading",
            failure_category="assertion",
            cleanup=CleanupOutcome(
                phase="after_case", status="failed", case_id="watch-001", detail="boom"
            ),
        )
        collector.store(result)
        row = collector.get_recent_runs()[0]
        assert row["passed"] == 0
        assert row["failure_category"] == "assertion"
        assert row["cleanup_status"] == "failed"
        assert row["cleanup_detail"] == "boom"

    def test_get_pass_rate(self, collector: MetricsCollector):
        for i in range(3):
            collector.store(make_result(timestamp=1000.0 + i))
        collector.store(
            make_result(passed=False, failure_category="timeout", timestamp=1003.0)
        )
        assert collector.get_pass_rate("watch-001") == 0.75

    def test_get_pass_rate_excludes_run_group(self, collector: MetricsCollector):
        collector.store(make_result(timestamp=1000.0), run_group="old")
        collector.store(make_result(timestamp=1001.0))
        collector.store(
            make_result(passed=False, failure_category="assertion", timestamp=1002.0),
            run_group="new",
        )
        assert collector.get_pass_rate("watch-001", exclude_run_group="new") == 1.0
        assert collector.get_pass_rate("watch-001") == 2 / 3

    def test_get_pass_rate_empty(self, collector: MetricsCollector):
        assert collector.get_pass_rate("nonexistent") == 0.0

    def test_get_recent_runs_limit(self, collector: MetricsCollector):
        for i in range(10):
            collector.store(make_result(timestamp=1000.0 + i))
        assert len(collector.get_recent_runs(last_n=3)) == 3

    def test_store_cleanup(self, collector: MetricsCollector):
        collector.store_cleanup(
            CleanupOutcome(phase="after_run", status="skipped", timestamp=2000.0),
            run_group="g",
        )
        rows = collector.get_recent_cleanups()
        assert rows[0]["phase"] == "after_run"
        assert rows[0]["status"] == "skipped"
        assert rows[0]["case_id"] is None

    def test_recent_cleanups_by_run_group(self, collector: MetricsCollector):
        for group, ts in (("a", 1.0), ("b", 2.0), ("c", 3.0)):
            collector.store_cleanup(
                CleanupOutcome(phase="after_run", status="ok", timestamp=ts),
                run_group=group,
            )
        rows = collector.get_recent_cleanups(run_groups=["a", "c"])
        assert [r["run_group"] for r in rows] == ["c", "a"]


class TestCleanupOutcome:
    @pytest.mark.parametrize("status,ok", [("ok", True), ("skipped", False), ("failed", False)])
    def test_ok(self, status, ok):
        assert CleanupOutcome(phase="after_case", status=status).ok is ok
