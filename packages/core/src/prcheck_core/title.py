"""Rewrite bare issue-reference titles ("1234", "PROJ-1234") into "1234: <issue title>"."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from prcheck_core.models import Issue, ReviewRequestSnapshot

logger = logging.getLogger(__name__)

ISSUE_ID_PATTERN = re.compile(r"^(?:[A-Za-z][A-Za-z0-9]+-)?([0-9]+)$")


class IssueProject(Protocol):
    def issue(self, issue_id: str) -> Optional[Issue]: ...


class TitleWriter(Protocol):
    def set_title(self, number: int, title: str) -> None: ...


def canonical_title(title: str, issue_project: IssueProject | None) -> str:
    """Return the title the pull request should carry; ``title`` itself when nothing applies."""
    match = ISSUE_ID_PATTERN.fullmatch(title)
    if match is None or issue_project is None:
        return title

    issue_id = match.group(1)
    issue = issue_project.issue(issue_id)
    if issue is None:
        logger.debug("Issue %s referenced by title not found", issue_id)
        return title
    return f"{issue_id}: {issue.title}"


def normalize_title(
    requests: TitleWriter,
    snapshot: ReviewRequestSnapshot,
    issue_project: IssueProject | None,
) -> bool:
    """Update the title at the forge if it is a bare issue reference. Returns True if changed."""
    new_title = canonical_title(snapshot.title, issue_project)
    if new_title == snapshot.title:
        return False

    logger.info("Updating title of %s: %r -> %r", snapshot.key, snapshot.title, new_title)
    requests.set_title(snapshot.number, new_title)
    return True
