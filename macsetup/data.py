from __future__ import annotations

import json
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from .step import StepResult


class Data(ABC):
    """Run history store: one row per run, one row per step result."""

    def __init__(self, db_path: Path | str, in_memory: bool = False) -> None:
        self._db_path = ":memory:" if in_memory else str(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self.connect()

    @property
    def conn(self) -> sqlite3.Connection:
        assert self._conn is not None, "Database connection is not initialized"
        return self._conn

    def connect(self) -> None:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        self._init_tables()

    @abstractmethod
    def _init_tables(self) -> None:
        """Create the tables this store needs (idempotent)."""

    @abstractmethod
    def start_run(self, run_id: str, config: Dict[str, Any]) -> None:
        """Record a run as started with its resolved configuration."""

    @abstractmethod
    def record_step(self, run_id: str, position: int, name: str, result: "StepResult") -> None:
        """Record one step outcome at its position in the plan."""

    @abstractmethod
    def finish_run(self, run_id: str, status: str, halted_by: Optional[str]) -> None:
        """Record the final status of a run."""

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


class SqliteData(Data):
    """SQLite-backed history in ``~/.macsetup/history.db``."""

    def _init_tables(self) -> None:
        with self._lock:
            self.conn.execute("PRAGMA foreign_keys = ON")
            self.conn.execute(
                """
                CREATE TABLE IF NOT EXISTS runs (
                    run_id TEXT PRIMARY KEY,
                    start_timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                    end_timestamp DATETIME,
                    status TEXT,
                    halted_by TEXT,
                    config_json TEXT
                )
                """
            )
            self.conn.execute(
                """
                CREATE TABLE IF NOT EXISTS step_results (
                    result_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    run_id TEXT,
                    position INTEGER,
                    name TEXT,
                    status TEXT,
                    detail TEXT,
                    attempts INTEGER,
                    duration REAL,
                    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (run_id) REFERENCES runs(run_id) ON DELETE CASCADE
                )
                """
            )
            self.conn.commit()

    def _write(self, sql: str, params: Tuple[Any, ...]) -> None:
        with self._lock:
            self.conn.execute(sql, params)
            self.conn.commit()

    def _rows(self, sql: str, params: Tuple[Any, ...] = ()) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(row) for row in self.conn.execute(sql, params).fetchall()]

    def start_run(self, run_id: str, config: Dict[str, Any]) -> None:
        self._write(
            "INSERT INTO runs (run_id, status, config_json) VALUES (?, 'running', ?)",
            (run_id, json.dumps(config, separators=(",", ":"))),
        )

    def record_step(self, run_id: str, position: int, name: str, result: "StepResult") -> None:
        self._write(
            "INSERT INTO step_results (run_id, position, name, status, detail, attempts, duration) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (run_id, position, name, result.status.value, result.detail, result.attempts, result.duration),
        )

    def finish_run(self, run_id: str, status: str, halted_by: Optional[str]) -> None:
        self._write(
            "UPDATE runs SET status = ?, halted_by = ?, end_timestamp = ? WHERE run_id = ?",
            (status, halted_by, time.strftime("%Y-%m-%d %H:%M:%S", time.gmtime()), run_id),
        )

    def recent_runs(self, limit: int = 10) -> List[Dict[str, Any]]:
        return self._rows(
            "SELECT r.run_id, r.start_timestamp, r.end_timestamp, r.status, r.halted_by, "
            "SUM(CASE WHEN s.status = 'failed' THEN 1 ELSE 0 END) AS failed, COUNT(s.result_id) AS steps "
            "FROM runs r LEFT JOIN step_results s ON s.run_id = r.run_id "
            "GROUP BY r.run_id ORDER BY r.start_timestamp DESC, r.rowid DESC LIMIT ?",
            (limit,),
        )

    def step_results(self, run_id: str) -> List[Dict[str, Any]]:
        return self._rows(
            "SELECT name, status, detail, attempts, duration FROM step_results WHERE run_id = ? ORDER BY position",
            (run_id,),
        )
