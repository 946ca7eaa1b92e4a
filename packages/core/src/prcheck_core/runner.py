"""Run the configured rule commands against a materialized change.

The rules themselves are opaque shell commands owned by the project. This
module only records the check's lifecycle in the check store: a running
record before the first rule, a completed record carrying the fingerprint
after the last one. A crash in between leaves the record running, which the
validity decision later treats as stale.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from prcheck_core.models import ReviewVerdict

if TYPE_CHECKING:
    from prcheck_core.census import RoleContext
    from prcheck_core.models import Review, ReviewRequestSnapshot
    from prcheck_store.base import BaseCheckStore
    from prcheck_store.models import CheckRecord

logger = logging.getLogger(__name__)

_RULE_TIMEOUT = 1800
_OUTPUT_TAIL = 2000

# Rules run code from the pull request; they never see forge credentials.
_WITHHELD_ENV = frozenset({"GITHUB_TOKEN", "GH_TOKEN", "PRCHECK_GITHUB_TOKEN"})


@dataclass
class RuleOutcome:
    command: str
    returncode: int
    output: str = ""

    @property
    def passed(self) -> bool:
        return self.returncode == 0


def _rule_env(snapshot: ReviewRequestSnapshot, active_reviews: Iterable[Review], roles: RoleContext) -> dict:
    approvers = []
    for review in active_reviews:
        if review.verdict != ReviewVerdict.APPROVED:
            continue
        contributor = roles.contributor(review.reviewer.id)
        approvers.append(contributor.username if contributor else review.reviewer.username)
    return {
        **{name: value for name, value in os.environ.items() if name not in _WITHHELD_ENV},
        "PRCHECK_REPO": snapshot.repo,
        "PRCHECK_PR": str(snapshot.number),
        "PRCHECK_HEAD_SHA": snapshot.head_sha,
        "PRCHECK_TARGET_REF": snapshot.target_ref,
        "PRCHECK_APPROVERS": ",".join(sorted(approvers)),
        "PRCHECK_CENSUS_VERSION": str(roles.version),
    }


def _run_rule(command: str, cwd: Path, env: dict) -> RuleOutcome:
    try:
        result = subprocess.run(
            command,
            shell=True,
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            timeout=_RULE_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        return RuleOutcome(command=command, returncode=-1, output=f"timed out after {_RULE_TIMEOUT}s")
    output = (result.stdout + result.stderr).strip()
    return RuleOutcome(command=command, returncode=result.returncode, output=output[-_OUTPUT_TAIL:])


def _summarize(outcomes: list[RuleOutcome]) -> str:
    if not outcomes:
        return "No rules configured."
    lines = []
    for outcome in outcomes:
        mark = "passed" if outcome.passed else f"failed ({outcome.returncode})"
        lines.append(f"- `{outcome.command}`: {mark}")
        if not outcome.passed and outcome.output:
            lines.append(f"\n```\n{outcome.output}\n```\n")
    return "\n".join(lines)


class CommandCheckRunner:
    """Check executor running one shell command per rule inside the materialized tree."""

    def __init__(self, store: BaseCheckStore, rules: list[str], check_name: str = "prcheck"):
        self.store = store
        self.rules = list(rules)
        self.check_name = check_name

    def execute(
        self,
        snapshot: ReviewRequestSnapshot,
        repo_path: Path,
        fingerprint: str,
        active_reviews: Iterable[Review],
        roles: RoleContext,
    ) -> CheckRecord:
        record = self.store.start(snapshot.repo, snapshot.head_sha, self.check_name)
        env = _rule_env(snapshot, active_reviews, roles)

        outcomes = []
        for command in self.rules:
            logger.debug("Running rule %r for %s", command, snapshot.key)
            outcomes.append(_run_rule(command, repo_path, env))

        failed = [o for o in outcomes if not o.passed]
        conclusion = "failure" if failed else "success"
        logger.info(
            "%s for %s@%s: %s (%d/%d rule(s) passed)",
            self.check_name,
            snapshot.key,
            snapshot.head_sha[:7],
            conclusion,
            len(outcomes) - len(failed),
            len(outcomes),
        )
        return self.store.complete(snapshot.repo, record, conclusion, fingerprint, _summarize(outcomes))
