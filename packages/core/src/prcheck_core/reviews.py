from __future__ import annotations

from typing import Iterable

from prcheck_core.models import Review, ReviewVerdict


def filter_active_reviews(reviews: Iterable[Review]) -> list[Review]:
    """Return the latest non-comment review of each reviewer.

    ``reviews`` must be in submission order. The result keeps the position at
    which each reviewer first appeared.
    """
    latest: dict[str, Review] = {}
    for review in reviews:
        if review.verdict == ReviewVerdict.NONE:
            continue
        latest[review.reviewer.id] = review
    return list(latest.values())
