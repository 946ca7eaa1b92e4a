"""SQLiteCheckStore — local file-based check records.

Used where the forge offers no check result slot, and for local dry runs.
One row per (repo, head_sha, name); starting a check again on the same
revision replaces the row, so the latest attempt is always the one read back.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import datetime, timezone

from prcheck_store.base import BaseCheckStore
from prcheck_store.models import CheckRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS checks (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    repo            TEXT NOT NULL,
    head_sha        TEXT NOT NULL,
    name            TEXT NOT NULL,
    started_at      TEXT NOT NULL,
    completed_at    TEXT,
    metadata        TEXT,
    conclusion      TEXT,
    summary         TEXT DEFAULT '',
    UNIQUE (repo, head_sha, name)
);
CREATE INDEX IF NOT EXISTS idx_checks_head ON checks (repo, head_sha);
"""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SQLiteCheckStore(BaseCheckStore):
    """Stores check records in a local SQLite database file.

    The database file path defaults to `.prcheck.db` in the current working
    directory. Configure via .prcheck.yml: `store_path: /path/to/prcheck.db`.
    """

    def __init__(self, db_path: str = ".prcheck.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def checks(self, repo: str, head_sha: str) -> dict[str, CheckRecord]:
        rows = self._conn.execute(
            "SELECT * FROM checks WHERE repo=? AND head_sha=? ORDER BY started_at",
            (repo, head_sha),
        ).fetchall()
        return {row["name"]: self._row_to_record(row) for row in rows}

    def start(self, repo: str, head_sha: str, name: str, started_at: datetime | None = None) -> CheckRecord:
        started_at = started_at or _now()
        cursor = self._conn.execute(
            """
            INSERT OR REPLACE INTO checks
              (repo, head_sha, name, started_at, completed_at, metadata, conclusion, summary)
            VALUES (?, ?, ?, ?, NULL, NULL, NULL, '')
            """,
            (repo, head_sha, name, started_at.isoformat()),
        )
        self._conn.commit()
        logger.debug("Started %s for %s@%s", name, repo, head_sha)
        return CheckRecord(name=name, head_sha=head_sha, started_at=started_at, run_id=cursor.lastrowid)

    def complete(
        self,
        repo: str,
        record: CheckRecord,
        conclusion: str,
        metadata: str,
        summary: str = "",
        completed_at: datetime | None = None,
    ) -> CheckRecord:
        completed_at = completed_at or _now()
        self._conn.execute(
            """
            UPDATE checks SET completed_at=?, metadata=?, conclusion=?, summary=?
            WHERE repo=? AND head_sha=? AND name=?
            """,
            (completed_at.isoformat(), metadata, conclusion, summary, repo, record.head_sha, record.name),
        )
        self._conn.commit()
        return replace(record, completed_at=completed_at, metadata=metadata, conclusion=conclusion, summary=summary)

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> CheckRecord:
        return CheckRecord(
            name=row["name"],
            head_sha=row["head_sha"],
            started_at=_parse(row["started_at"]),
            completed_at=_parse(row["completed_at"]),
            metadata=row["metadata"],
            conclusion=row["conclusion"],
            summary=row["summary"] or "",
            run_id=row["id"],
        )
