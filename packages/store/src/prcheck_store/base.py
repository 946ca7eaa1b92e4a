"""Abstract check store interface.

A check store is the only state prcheck shares between cycles: one record per
(repository, head revision, check name). The forge's own check results are the
primary backend; SQLite serves forges or setups without one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from prcheck_store.models import CheckRecord


class BaseCheckStore(ABC):
    """Pluggable persistence for check records.

    Reads are optimistic: nothing is locked between ``checks()`` and
    ``start()``, so two concurrent cycles may both start the same check.
    """

    @abstractmethod
    def checks(self, repo: str, head_sha: str) -> dict[str, CheckRecord]:
        """Return the latest record per check name for one head revision.

        Returns an empty dict if no check has started yet, never raises for
        absence.
        """

    @abstractmethod
    def start(self, repo: str, head_sha: str, name: str, started_at: datetime | None = None) -> CheckRecord:
        """Record that a check has started and return the new running record."""

    @abstractmethod
    def complete(
        self,
        repo: str,
        record: CheckRecord,
        conclusion: str,
        metadata: str,
        summary: str = "",
        completed_at: datetime | None = None,
    ) -> CheckRecord:
        """Mark ``record`` completed with its fingerprint stored as ``metadata``."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional: subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
