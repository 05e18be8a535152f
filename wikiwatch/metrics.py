"""Result records and their SQLite history."""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wikiwatch.config import DEFAULT_DB_PATH


@dataclass
class CleanupOutcome:
    """Result of one best-effort teardown step."""

    phase: str  # "after_case" | "after_run"
    status: str  # "ok" | "skipped" | "failed"
    case_id: str | None = None
    detail: str | None = None
    duration_ms: int = 0
    timestamp: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass
class RunResult:
    """Summary result of a scenario case."""

    case_id: str
    case_name: str
    passed: bool
    duration_ms: int
    error: str | None
    failure_category: str | None
    timestamp: float
    checks: list[str] = field(default_factory=list)
    cleanup: CleanupOutcome | None = None


class MetricsCollector:
    """Collects and stores case results and cleanup outcomes in SQLite."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _init_db(self):
        conn = self._connect()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS runs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    run_group TEXT,
                    case_id TEXT NOT NULL,
                    case_name TEXT,
                    passed BOOLEAN,
                    duration_ms INTEGER,
                    error TEXT,
                    failure_category TEXT,
                    checks TEXT,
                    cleanup_status TEXT,
                    cleanup_detail TEXT,
                    timestamp REAL,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cleanups (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    run_group TEXT,
                    phase TEXT NOT NULL,
                    case_id TEXT,
                    status TEXT NOT NULL,
                    detail TEXT,
                    duration_ms INTEGER,
                    timestamp REAL,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_runs_case ON runs(case_id)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_runs_timestamp ON runs(timestamp)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_runs_group ON runs(run_group)"
            )
            conn.commit()
        finally:
            conn.close()

    def store(self, result: RunResult, run_group: str | None = None):
        """Store a case result in the database."""
        cleanup = result.cleanup
        conn = self._connect()
        try:
            conn.execute(
                """INSERT INTO runs (
                    run_group, case_id, case_name, passed, duration_ms, error,
                    failure_category, checks, cleanup_status, cleanup_detail, timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    run_group,
                    result.case_id,
                    result.case_name,
                    result.passed,
                    result.duration_ms,
                    result.error,
                    result.failure_category,
                    json.dumps(result.checks),
                    cleanup.status if cleanup else None,
                    cleanup.detail if cleanup else None,
                    result.timestamp,
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def store_cleanup(self, outcome: CleanupOutcome, run_group: str | None = None):
        conn = self._connect()
        try:
            conn.execute(
                """INSERT INTO cleanups (
                    run_group, phase, case_id, status, detail, duration_ms, timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    run_group,
                    outcome.phase,
                    outcome.case_id,
                    outcome.status,
                    outcome.detail,
                    outcome.duration_ms,
                    outcome.timestamp,
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def get_pass_rate(
        self, case_id: str, last_n: int = 10, exclude_run_group: str | None = None
    ) -> float:
        """Get pass rate for a case over the last N runs.

        Rows of ``exclude_run_group`` (typically the run being reported) are
        left out.
        """
        conn = self._connect()
        try:
            cursor = conn.execute(
                """SELECT passed FROM runs
                WHERE case_id = ? AND (? IS NULL OR run_group IS NULL OR run_group != ?)
                ORDER BY timestamp DESC LIMIT ?""",
                (case_id, exclude_run_group, exclude_run_group, last_n),
            )
            rows = cursor.fetchall()
        finally:
            conn.close()
        if not rows:
            return 0.0
        return sum(1 for r in rows if r[0]) / len(rows)

    def get_recent_runs(
        self, case_id: str | None = None, last_n: int = 20
    ) -> list[dict[str, Any]]:
        """Get recent runs, optionally filtered by case."""
        conn = self._connect()
        try:
            conn.row_factory = sqlite3.Row
            if case_id:
                cursor = conn.execute(
                    "SELECT * FROM runs WHERE case_id = ? ORDER BY timestamp DESC LIMIT ?",
                    (case_id, last_n),
                )
            else:
                cursor = conn.execute(
                    "SELECT * FROM runs ORDER BY timestamp DESC LIMIT ?",
                    (last_n,),
                )
            rows = [dict(r) for r in cursor.fetchall()]
        finally:
            conn.close()
        return rows

    def get_recent_cleanups(
        self, last_n: int = 20, run_groups: list[str] | None = None
    ) -> list[dict[str, Any]]:
        """Get recent cleanup outcomes, optionally only for ``run_groups``."""
        conn = self._connect()
        try:
            conn.row_factory = sqlite3.Row
            if run_groups:
                placeholders = ", ".join("?" for _ in run_groups)
                cursor = conn.execute(
                    f"SELECT * FROM cleanups WHERE run_group IN ({placeholders}) "
                    "ORDER BY timestamp DESC LIMIT ?",
                    (*run_groups, last_n),
                )
            else:
                cursor = conn.execute(
                    "SELECT * FROM cleanups ORDER BY timestamp DESC LIMIT ?",
                    (last_n,),
                )
            rows = [dict(r) for r in cursor.fetchall()]
        finally:
            conn.close()
        return rows
