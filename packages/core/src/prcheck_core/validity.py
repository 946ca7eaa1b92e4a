"""Decide whether the stored check result for a head revision is still valid."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prcheck_store.models import CheckRecord

logger = logging.getLogger(__name__)

STALE_AFTER = timedelta(minutes=10)


class Verdict(str, Enum):
    SKIP = "skip"  # result current, or a run is still in progress
    STALE_RESUME = "stale-resume"  # a run started but never finished in time
    RECHECK = "recheck"  # no result, or the state changed since the last run

    @property
    def must_check(self) -> bool:
        return self is not Verdict.SKIP


def decide(
    record: CheckRecord | None,
    fingerprint: str,
    now: datetime,
    stale_after: timedelta = STALE_AFTER,
) -> Verdict:
    """Compare ``fingerprint`` and ``now`` against the last stored result.

    ``record`` must belong to the same head revision the fingerprint was
    computed for. The record is never modified.
    """
    if record is None:
        logger.debug("No previous check result, checking")
        return Verdict.RECHECK

    if record.completed_at is None:
        running = now - record.started_at
        if running > stale_after:
            logger.warning(
                "Previous %s running for %d minute(s), more than %d - checking again",
                record.name,
                running // timedelta(minutes=1),
                stale_after // timedelta(minutes=1),
            )
            return Verdict.STALE_RESUME
        logger.debug(
            "%s in progress for %d minute(s), not starting another one",
            record.name,
            running // timedelta(minutes=1),
        )
        return Verdict.SKIP

    if record.metadata is not None and record.metadata == fingerprint:
        logger.debug("No activity since last check, not checking again")
        return Verdict.SKIP

    logger.info("Pull request updated after last check, checking again")
    if record.metadata is not None:
        logger.debug("Previous fingerprint: %s - current: %s", record.metadata, fingerprint)
    return Verdict.RECHECK


def current_check_valid(
    records: dict[str, CheckRecord],
    check_name: str,
    fingerprint: str,
    now: datetime,
    stale_after: timedelta = STALE_AFTER,
) -> Verdict:
    """Look up ``check_name`` among the records of one head revision and decide."""
    return decide(records.get(check_name), fingerprint, now, stale_after)
