"""Immutable views of a review request as captured by one poll cycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ReviewVerdict(str, Enum):
    APPROVED = "approved"
    DISAPPROVED = "disapproved"
    NONE = "none"  # plain comment review


@dataclass(frozen=True)
class HostUser:
    id: str
    username: str


@dataclass(frozen=True)
class Comment:
    author_id: str
    body: str

    def lines(self) -> list[str]:
        return self.body.splitlines()


@dataclass(frozen=True)
class Review:
    reviewer: HostUser
    verdict: ReviewVerdict
    commit_sha: str  # hex hash of the revision the verdict applies to
    submitted_at: str = ""  # ISO-8601 UTC timestamp


@dataclass(frozen=True)
class Issue:
    id: str
    title: str


@dataclass(frozen=True)
class ReviewRequestSnapshot:
    """Everything one cycle knows about a pull request.

    Captured once at the start of a cycle and never mutated. Comments keep the
    forge's chronological order; the fingerprint depends on it.
    """

    repo: str
    number: int
    title: str
    body: str
    head_sha: str
    is_draft: bool = False
    comments: tuple[Comment, ...] = ()
    reviews: tuple[Review, ...] = ()
    labels: frozenset[str] = field(default_factory=frozenset)
    clone_url: str = ""
    target_ref: str = ""

    @property
    def key(self) -> str:
        return f"{self.repo}#{self.number}"
