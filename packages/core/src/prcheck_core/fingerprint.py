"""Fingerprint of the review-relevant state of a pull request.

A check result stays valid for as long as the fingerprint it was computed
against matches the current one. The fingerprint covers the title, the body,
who approved which revision (and in what role), the status lines prcheck
itself posted, the labels and the draft flag.
"""

from __future__ import annotations

import base64
import hashlib
import re
from typing import Iterable

from prcheck_core.census import RoleContext
from prcheck_core.errors import ConfigurationError
from prcheck_core.models import Comment, HostUser, Review, ReviewVerdict

METADATA_COMMENT_PATTERN = re.compile(
    r"<!-- (?:(add|remove) (?:contributor|reviewer))|(?:summary: ')|(?:solves: ')|(?:additional required reviewers)"
)

_DIGEST_ALGORITHM = "sha256"


def _flag(value: bool) -> str:
    return "true" if value else "false"


def encode_reviewer(reviewer: HostUser, roles: RoleContext) -> str:
    """Encode a reviewer's census identity and roles as a stable string.

    Reviewers unknown to the census encode as ``unknown-<id>`` so the
    fingerprint is still defined when role data is missing.
    """
    contributor = roles.contributor(reviewer.id)
    if contributor is None:
        return "unknown-" + reviewer.id

    username = contributor.username
    project = roles.project
    version = roles.version
    return (
        username
        + _flag(project.is_lead(username, version))
        + _flag(project.is_reviewer(username, version))
        + _flag(project.is_committer(username, version))
        + _flag(project.is_author(username, version))
    )


def _approvals(reviews: Iterable[Review], roles: RoleContext) -> str:
    encoded = [
        encode_reviewer(review.reviewer, roles) + review.commit_sha
        for review in reviews
        if review.verdict == ReviewVerdict.APPROVED
    ]
    return "".join(sorted(encoded))


def _metadata_lines(comments: Iterable[Comment], service_user_id: str) -> str:
    # Order is significant: callers pass comments in chronological order.
    return "".join(
        line
        for comment in comments
        if comment.author_id == service_user_id
        for line in comment.lines()
        if METADATA_COMMENT_PATTERN.search(line)
    )


def _new_digest():
    try:
        return hashlib.new(_DIGEST_ALGORITHM)
    except ValueError:
        raise ConfigurationError(f"Digest algorithm {_DIGEST_ALGORITHM!r} is not available")


def compute_fingerprint(
    roles: RoleContext,
    title: str,
    body: str,
    comments: Iterable[Comment],
    reviews: Iterable[Review],
    labels: Iterable[str],
    is_draft: bool,
) -> str:
    """Return the URL-safe, unpadded base64 SHA-256 fingerprint of the given state."""
    digest = _new_digest()
    digest.update(title.encode("utf-8"))
    digest.update(body.encode("utf-8"))
    digest.update(_approvals(reviews, roles).encode("utf-8"))
    digest.update(_metadata_lines(comments, roles.service_user_id).encode("utf-8"))
    digest.update("".join(sorted(labels)).encode("utf-8"))
    digest.update(b"\x00" if is_draft else b"\x01")

    return base64.urlsafe_b64encode(digest.digest()).rstrip(b"=").decode("ascii")
