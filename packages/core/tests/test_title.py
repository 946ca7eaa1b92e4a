"""Tests for issue-reference title normalization."""

from unittest.mock import MagicMock

import pytest

from prcheck_core.models import Issue, ReviewRequestSnapshot
from prcheck_core.title import ISSUE_ID_PATTERN, canonical_title, normalize_title


class StubIssueProject:
    def __init__(self, issues):
        self._issues = issues
        self.lookups = []

    def issue(self, issue_id):
        self.lookups.append(issue_id)
        title = self._issues.get(issue_id)
        return Issue(id=issue_id, title=title) if title is not None else None


def _snapshot(title):
    return ReviewRequestSnapshot(repo="owner/repo", number=7, title=title, body="", head_sha="a" * 40)


class TestIssueIdPattern:
    @pytest.mark.parametrize("title, issue_id", [("1234", "1234"), ("JDK-8", "8"), ("Skara2-42", "42")])
    def test_matches(self, title, issue_id):
        assert ISSUE_ID_PATTERN.fullmatch(title).group(1) == issue_id

    @pytest.mark.parametrize("title", ["not-an-id", "1234: Fix bug", "-12", "2JDK-12", " 1234", "1234 ", "1234\n"])
    def test_does_not_match(self, title):
        assert ISSUE_ID_PATTERN.fullmatch(title) is None


class TestCanonicalTitle:
    def test_bare_id_resolved(self):
        assert canonical_title("1234", StubIssueProject({"1234": "Fix bug"})) == "1234: Fix bug"

    def test_prefixed_id_resolved_without_prefix(self):
        assert canonical_title("JDK-8", StubIssueProject({"8": "Crash"})) == "8: Crash"

    def test_no_project(self):
        assert canonical_title("1234", None) == "1234"

    def test_no_match_skips_lookup(self):
        project = StubIssueProject({"1234": "Fix bug"})
        assert canonical_title("not-an-id", project) == "not-an-id"
        assert project.lookups == []

    def test_trailing_newline_not_resolved(self):
        project = StubIssueProject({"1234": "Fix bug"})
        assert canonical_title("1234\n", project) == "1234\n"
        assert project.lookups == []

    def test_lookup_miss(self):
        assert canonical_title("JDK-8", StubIssueProject({})) == "JDK-8"


class TestNormalizeTitle:
    def test_changed_title_written(self):
        requests = MagicMock()
        changed = normalize_title(requests, _snapshot("1234"), StubIssueProject({"1234": "Fix bug"}))
        assert changed is True
        requests.set_title.assert_called_once_with(7, "1234: Fix bug")

    def test_unchanged_title_not_written(self):
        requests = MagicMock()
        assert normalize_title(requests, _snapshot("not-an-id"), StubIssueProject({})) is False
        requests.set_title.assert_not_called()

    def test_lookup_miss_not_written(self):
        requests = MagicMock()
        assert normalize_title(requests, _snapshot("JDK-8"), StubIssueProject({})) is False
        requests.set_title.assert_not_called()

    def test_no_issue_project_not_written(self):
        requests = MagicMock()
        assert normalize_title(requests, _snapshot("1234"), None) is False
        requests.set_title.assert_not_called()
