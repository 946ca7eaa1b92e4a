"""Stored check result model.

Decoupled from prcheck_core so a store can be used on its own; the core only
reads the fields below and never mutates a record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class CheckRecord:
    """One named check for one head revision.

    Created when the check starts. ``completed_at`` and ``metadata`` (the
    fingerprint the check was run against) are filled in when it finishes. A
    new head revision gets a new record; old ones are never deleted.
    """

    name: str
    head_sha: str
    started_at: datetime  # timezone-aware UTC
    completed_at: datetime | None = None
    metadata: str | None = None
    conclusion: str | None = None  # "success" | "failure" once completed
    summary: str = ""
    run_id: int | None = None  # backend identifier of the record, when it has one

    @property
    def is_running(self) -> bool:
        return self.completed_at is None
