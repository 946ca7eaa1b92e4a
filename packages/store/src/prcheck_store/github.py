"""GitHubCheckStore — check records kept as GitHub check runs.

The check run itself carries everything prcheck needs: ``started_at``,
``completed_at`` and a small opaque ``external_id`` that holds the
fingerprint the run was computed against. No other storage is required.

Creating and editing check runs needs GitHub App credentials.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from prcheck_store.base import BaseCheckStore
from prcheck_store.models import CheckRecord

logger = logging.getLogger(__name__)

_SUMMARY_LIMIT = 65_535  # GitHub rejects longer check run output


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class GitHubCheckStore(BaseCheckStore):
    """Reads and writes check runs on the head commit of a pull request."""

    def __init__(self, token: str | None = None, gh=None):
        if gh is None:
            try:
                from github import Github
            except ImportError:
                raise ImportError("PyGithub is required for GitHubCheckStore. Install prcheck.")
            gh = Github(token)
        self._gh = gh
        self._repos: dict = {}

    def _repo(self, repo: str):
        if repo not in self._repos:
            self._repos[repo] = self._gh.get_repo(repo)
        return self._repos[repo]

    def checks(self, repo: str, head_sha: str) -> dict[str, CheckRecord]:
        records: dict[str, CheckRecord] = {}
        # GitHub lists the most recent run of each name first.
        for run in self._repo(repo).get_commit(head_sha).get_check_runs():
            if run.name not in records:
                records[run.name] = self._to_record(run, head_sha)
        return records

    def start(self, repo: str, head_sha: str, name: str, started_at: datetime | None = None) -> CheckRecord:
        started_at = started_at or datetime.now(timezone.utc)
        run = self._repo(repo).create_check_run(
            name=name,
            head_sha=head_sha,
            status="in_progress",
            started_at=started_at,
        )
        logger.debug("Created check run %s (%s) for %s@%s", run.id, name, repo, head_sha)
        return CheckRecord(name=name, head_sha=head_sha, started_at=started_at, run_id=run.id)

    def complete(
        self,
        repo: str,
        record: CheckRecord,
        conclusion: str,
        metadata: str,
        summary: str = "",
        completed_at: datetime | None = None,
    ) -> CheckRecord:
        completed_at = completed_at or datetime.now(timezone.utc)
        run = self._repo(repo).get_check_run(record.run_id)
        run.edit(
            status="completed",
            conclusion=conclusion,
            completed_at=completed_at,
            external_id=metadata,
            output={"title": record.name, "summary": (summary or conclusion)[:_SUMMARY_LIMIT]},
        )
        return replace(record, completed_at=completed_at, metadata=metadata, conclusion=conclusion, summary=summary)

    @staticmethod
    def _to_record(run, head_sha: str) -> CheckRecord:
        output = run.output
        return CheckRecord(
            name=run.name,
            head_sha=head_sha,
            started_at=_aware(run.started_at),
            completed_at=_aware(run.completed_at),
            metadata=run.external_id or None,
            conclusion=run.conclusion,
            summary=(output.summary or "") if output is not None else "",
            run_id=run.id,
        )
