"""Tests for active review filtering."""

from prcheck_core.models import HostUser, Review, ReviewVerdict
from prcheck_core.reviews import filter_active_reviews

DUKE = HostUser(id="1", username="duke")
JANE = HostUser(id="2", username="jane")


def _review(user, verdict, sha="a" * 40):
    return Review(reviewer=user, verdict=verdict, commit_sha=sha)


def test_latest_review_per_reviewer_wins():
    old = _review(DUKE, ReviewVerdict.DISAPPROVED)
    new = _review(DUKE, ReviewVerdict.APPROVED, sha="b" * 40)
    assert filter_active_reviews([old, new]) == [new]


def test_comment_reviews_ignored():
    approval = _review(DUKE, ReviewVerdict.APPROVED)
    comment = _review(DUKE, ReviewVerdict.NONE)
    assert filter_active_reviews([approval, comment]) == [approval]


def test_first_seen_order_kept():
    duke = _review(DUKE, ReviewVerdict.APPROVED)
    jane = _review(JANE, ReviewVerdict.APPROVED)
    duke_again = _review(DUKE, ReviewVerdict.DISAPPROVED)
    assert filter_active_reviews([duke, jane, duke_again]) == [duke_again, jane]


def test_empty():
    assert filter_active_reviews([]) == []
