"""Tests for materializing a pull request into the scratch area."""

import shutil
import subprocess

import pytest

from prcheck_core.errors import MaterializationError
from prcheck_core.models import ReviewRequestSnapshot
from prcheck_core.workspace import materialize

SHA = "a" * 40


def _snapshot():
    return ReviewRequestSnapshot(
        repo="owner/repo",
        number=7,
        title="t",
        body="",
        head_sha=SHA,
        clone_url="https://github.com/owner/repo.git",
    )


def _git_calls(mock_run):
    return [c.args[0][1] for c in mock_run.call_args_list]


def test_clone_fetch_checkout(mocker, tmp_path):
    mock_run = mocker.patch("prcheck_core.workspace.subprocess.run")
    path = tmp_path / "pr" / "check" / "owner-repo"

    assert materialize(_snapshot(), path) == path

    assert _git_calls(mock_run) == ["clone", "fetch", "checkout"]
    fetch = mock_run.call_args_list[1]
    assert fetch.args[0][-1] == "pull/7/head"
    checkout = mock_run.call_args_list[2]
    assert checkout.args[0][-1] == SHA
    assert checkout.kwargs["cwd"] == path


def test_existing_clone_is_reused(mocker, tmp_path):
    mock_run = mocker.patch("prcheck_core.workspace.subprocess.run")
    path = tmp_path / "repo"
    (path / ".git").mkdir(parents=True)

    materialize(_snapshot(), path)

    assert _git_calls(mock_run) == ["fetch", "checkout"]


def test_seed_mirror_used_as_reference(mocker, tmp_path):
    mock_run = mocker.patch("prcheck_core.workspace.subprocess.run")
    seeds = tmp_path / "seeds"

    materialize(_snapshot(), tmp_path / "repo", seed_path=seeds)

    assert _git_calls(mock_run) == ["clone", "clone", "fetch", "checkout"]
    mirror, clone = mock_run.call_args_list[0].args[0], mock_run.call_args_list[1].args[0]
    assert "--mirror" in mirror
    assert "--reference-if-able" in clone
    assert str(seeds / "owner-repo.git") in clone


def test_git_failure_raises_materialization_error(mocker, tmp_path):
    mocker.patch(
        "prcheck_core.workspace.subprocess.run",
        side_effect=subprocess.CalledProcessError(128, ["git", "clone"], stderr="fatal: repository not found"),
    )
    with pytest.raises(MaterializationError, match="repository not found"):
        materialize(_snapshot(), tmp_path / "repo")


def test_missing_git_raises_materialization_error(mocker, tmp_path):
    mocker.patch("prcheck_core.workspace.subprocess.run", side_effect=FileNotFoundError("git"))
    with pytest.raises(MaterializationError):
        materialize(_snapshot(), tmp_path / "repo")


def _git(*args, cwd):
    subprocess.run(
        ["git", "-c", "user.name=t", "-c", "user.email=t@example.com", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_fork_head_fetched_from_base_repository(tmp_path):
    base = tmp_path / "base"
    base.mkdir()
    _git("init", "--quiet", cwd=base)
    _git("commit", "--quiet", "--allow-empty", "-m", "base", cwd=base)
    _git("checkout", "--quiet", "-b", "fork-topic", cwd=base)
    _git("commit", "--quiet", "--allow-empty", "-m", "from fork", cwd=base)
    head = subprocess.run(
        ["git", "rev-parse", "HEAD"], cwd=base, check=True, capture_output=True, text=True
    ).stdout.strip()
    # The fork's commit is only reachable from the pull ref on the base repository.
    _git("update-ref", "refs/pull/7/head", head, cwd=base)
    _git("checkout", "--quiet", "-", cwd=base)
    _git("branch", "--quiet", "-D", "fork-topic", cwd=base)

    snapshot = ReviewRequestSnapshot(
        repo="owner/repo", number=7, title="t", body="", head_sha=head, clone_url=str(base)
    )
    path = materialize(snapshot, tmp_path / "pr")

    checked_out = subprocess.run(
        ["git", "rev-parse", "HEAD"], cwd=path, check=True, capture_output=True, text=True
    ).stdout.strip()
    assert checked_out == head
