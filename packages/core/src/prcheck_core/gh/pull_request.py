"""PyGithub adapters for the review request, its issue tracker and the bot identity."""

from __future__ import annotations

import logging

from github import Github, GithubException

from prcheck_core.models import Comment, HostUser, Issue, Review, ReviewRequestSnapshot, ReviewVerdict

logger = logging.getLogger(__name__)

_VERDICTS = {
    "APPROVED": ReviewVerdict.APPROVED,
    "CHANGES_REQUESTED": ReviewVerdict.DISAPPROVED,
}


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def to_host_user(user) -> HostUser:
    return HostUser(id=str(user.id), username=user.login)


def to_review(review) -> Review:
    submitted = review.submitted_at.isoformat() if review.submitted_at else ""
    return Review(
        reviewer=to_host_user(review.user),
        verdict=_VERDICTS.get(review.state, ReviewVerdict.NONE),
        commit_sha=review.commit_id or "",
        submitted_at=submitted,
    )


def to_snapshot(repo_name: str, pr) -> ReviewRequestSnapshot:
    """Capture one immutable view of a PyGithub pull request."""
    comments = tuple(Comment(author_id=str(c.user.id), body=c.body or "") for c in pr.get_issue_comments())
    reviews = tuple(to_review(r) for r in pr.get_reviews())
    return ReviewRequestSnapshot(
        repo=repo_name,
        number=pr.number,
        title=pr.title or "",
        body=pr.body or "",
        head_sha=pr.head.sha,
        is_draft=bool(pr.draft),
        comments=comments,
        reviews=reviews,
        labels=frozenset(label.name for label in pr.labels),
        # Only the base repository carries pull/N/head, also for pull requests from forks.
        clone_url=pr.base.repo.clone_url,
        target_ref=pr.base.ref,
    )


class GitHubReviewRequests:
    """Read and write access to the pull requests of one repository.

    Every mutation prcheck performs on a pull request goes through here.
    """

    def __init__(self, gh: Github, repo_name: str):
        self._gh = gh
        self._repo_name = repo_name
        self._repo = gh.get_repo(repo_name)

    @property
    def repo_name(self) -> str:
        return self._repo_name

    @property
    def repo(self):
        return self._repo

    def snapshot(self, number: int) -> ReviewRequestSnapshot:
        return to_snapshot(self._repo_name, self._repo.get_pull(number))

    def set_title(self, number: int, title: str) -> None:
        self._repo.get_pull(number).edit(title=title)

    def current_user(self) -> HostUser:
        return to_host_user(self._gh.get_user())


class GitHubIssueProject:
    """Issues of a GitHub repository used to resolve issue-reference titles."""

    def __init__(self, gh: Github, repo_name: str):
        self._repo = gh.get_repo(repo_name)

    def issue(self, issue_id: str) -> Issue | None:
        try:
            issue = self._repo.get_issue(int(issue_id))
        except GithubException as e:
            if e.status == 404:
                return None
            raise
        return Issue(id=str(issue.number), title=issue.title)
