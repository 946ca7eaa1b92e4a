"""Work items driving one check cycle of a pull request.

A cycle never schedules anything itself. It returns a CycleResult naming what
it did and which work items should run next; the scheduler owns the queue.

    CheckWorkItem ── fingerprint + stored record ──> verdict
        integrated label          -> HALT        (no follow-up)
        verdict SKIP              -> SKIP        -> CommandWorkItem
        must check, title fixed   -> REDISPATCH  -> CheckWorkItem
        must check                -> EXECUTE     -> CommandWorkItem
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Protocol

from prcheck_core.census import Census, RoleContext
from prcheck_core.fingerprint import compute_fingerprint
from prcheck_core.reviews import filter_active_reviews
from prcheck_core.title import IssueProject, normalize_title
from prcheck_core.validity import STALE_AFTER, Verdict, current_check_valid
from prcheck_core.workspace import materialize

if TYPE_CHECKING:
    from prcheck_core.models import HostUser, Review, ReviewRequestSnapshot
    from prcheck_store.base import BaseCheckStore

logger = logging.getLogger(__name__)


class ReviewRequests(Protocol):
    """Read/write access to the pull requests of one repository."""

    repo_name: str

    def snapshot(self, number: int) -> ReviewRequestSnapshot: ...

    def set_title(self, number: int, title: str) -> None: ...

    def current_user(self) -> HostUser: ...


class CheckExecutor(Protocol):
    def execute(
        self,
        snapshot: ReviewRequestSnapshot,
        repo_path: Path,
        fingerprint: str,
        active_reviews: Iterable[Review],
        roles: RoleContext,
    ): ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CheckContext:
    """Collaborators and settings shared by every work item of one repository."""

    requests: ReviewRequests
    checks: BaseCheckStore
    census_provider: Callable[[ReviewRequestSnapshot], Census]
    executor: CheckExecutor
    issue_project: Optional[IssueProject] = None
    check_name: str = "prcheck"
    integrated_label: str = "integrated"
    stale_after: timedelta = STALE_AFTER
    census_project: Optional[str] = None
    seed_path: Optional[Path] = None
    active_review_filter: Callable[[Iterable[Review]], list] = filter_active_reviews
    command_handler: Optional[Callable[[ReviewRequestSnapshot], None]] = None
    materializer: Callable[..., Path] = materialize
    clock: Callable[[], datetime] = _utcnow

    def role_context(self, snapshot: ReviewRequestSnapshot) -> RoleContext:
        census = self.census_provider(snapshot)
        return RoleContext(
            census=census,
            project=census.project(self.census_project),
            service_user_id=self.requests.current_user().id,
        )

    @classmethod
    def from_config(cls, config: dict, **collaborators) -> CheckContext:
        seed_path = config.get("seed_path")
        return cls(
            check_name=config.get("check_name", "prcheck"),
            integrated_label=config.get("integrated_label", "integrated"),
            stale_after=timedelta(minutes=config.get("stale_after_minutes", 10)),
            census_project=config.get("census_project"),
            seed_path=Path(seed_path) if seed_path else None,
            **collaborators,
        )


class CycleAction(str, Enum):
    HALT = "halt"
    SKIP = "skip"
    REDISPATCH = "redispatch"
    EXECUTE = "execute"
    COMMANDS = "commands"


@dataclass
class CycleResult:
    action: CycleAction
    work_items: list[WorkItem] = field(default_factory=list)
    verdict: Verdict | None = None
    fingerprint: str | None = None


class WorkItem(ABC):
    def __init__(self, context: CheckContext, number: int, snapshot: ReviewRequestSnapshot | None = None):
        self.context = context
        self.number = number
        self._snapshot = snapshot

    @property
    def key(self) -> str:
        return f"{self.context.requests.repo_name}#{self.number}"

    def concurrent_with(self, other: WorkItem) -> bool:
        """Cycles for the same pull request must not overlap."""
        return self.key != other.key

    def snapshot(self) -> ReviewRequestSnapshot:
        if self._snapshot is None:
            self._snapshot = self.context.requests.snapshot(self.number)
        return self._snapshot

    def reset(self) -> None:
        """Forget the captured snapshot so the next run observes the current state."""
        self._snapshot = None

    @abstractmethod
    def run(self, scratch_path: Path) -> CycleResult:
        """Run one cycle using ``scratch_path`` for temporary files."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}@{self.key}"


class CheckWorkItem(WorkItem):
    """Decide whether the pull request needs checking, and check it if so."""

    def evaluate(self) -> tuple[ReviewRequestSnapshot, RoleContext, list, str, Verdict]:
        """Compute the fingerprint and verdict of the current state without side effects."""
        ctx = self.context
        snapshot = self.snapshot()
        roles = ctx.role_context(snapshot)
        active_reviews = ctx.active_review_filter(snapshot.reviews)
        fingerprint = compute_fingerprint(
            roles,
            snapshot.title,
            snapshot.body,
            snapshot.comments,
            active_reviews,
            snapshot.labels,
            snapshot.is_draft,
        )
        records = ctx.checks.checks(snapshot.repo, snapshot.head_sha)
        verdict = current_check_valid(records, ctx.check_name, fingerprint, ctx.clock(), ctx.stale_after)
        return snapshot, roles, active_reviews, fingerprint, verdict

    def run(self, scratch_path: Path) -> CycleResult:
        ctx = self.context
        snapshot, roles, active_reviews, fingerprint, verdict = self.evaluate()

        if ctx.integrated_label in snapshot.labels:
            logger.info("Skipping check of integrated pull request %s", self.key)
            return CycleResult(CycleAction.HALT, verdict=verdict, fingerprint=fingerprint)

        # A current check result is never run again; the cycle only hands over to commands.
        action = CycleAction.SKIP
        if verdict.must_check:
            # A corrected title changes the fingerprint; check the new state instead.
            if normalize_title(ctx.requests, snapshot, ctx.issue_project):
                successor = CheckWorkItem(ctx, self.number, ctx.requests.snapshot(self.number))
                return CycleResult(CycleAction.REDISPATCH, [successor], verdict, fingerprint)

            seed_path = ctx.seed_path or scratch_path / "seeds"
            repo_path = scratch_path / "pr" / "check" / snapshot.repo.replace("/", "-")
            local_repo = ctx.materializer(snapshot, repo_path, seed_path)
            logger.info("Running %s for %s at %s", ctx.check_name, self.key, snapshot.head_sha[:7])
            ctx.executor.execute(snapshot, local_repo, fingerprint, active_reviews, roles)
            action = CycleAction.EXECUTE

        # The check may have changed the pull request; commands see the new state.
        updated = ctx.requests.snapshot(self.number)
        return CycleResult(action, [CommandWorkItem(ctx, self.number, updated)], verdict, fingerprint)


class CommandWorkItem(WorkItem):
    """Hand the pull request over to post-check command processing."""

    def run(self, scratch_path: Path) -> CycleResult:
        handler = self.context.command_handler
        if handler is None:
            logger.debug("No command handler configured, nothing to do for %s", self.key)
        else:
            handler(self.snapshot())
        return CycleResult(CycleAction.COMMANDS)
