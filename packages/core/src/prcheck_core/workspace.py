"""Materialize the code under review into a cycle's scratch area.

Everything here shells out to git. Any failure aborts the cycle with a
MaterializationError; the scheduler decides whether to try again.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from prcheck_core.errors import MaterializationError
from prcheck_core.models import ReviewRequestSnapshot

logger = logging.getLogger(__name__)

_GIT_TIMEOUT = 600


def _git(args: list[str], cwd: Path | None = None) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=_GIT_TIMEOUT,
        check=True,
    )
    return result.stdout


def _seed(snapshot: ReviewRequestSnapshot, seed_path: Path) -> Path:
    """Return a bare mirror of the repository under ``seed_path``, creating or updating it."""
    seed = seed_path / (snapshot.repo.replace("/", "-") + ".git")
    if seed.exists():
        _git(["fetch", "--quiet", "--prune", "origin"], cwd=seed)
    else:
        seed_path.mkdir(parents=True, exist_ok=True)
        _git(["clone", "--quiet", "--mirror", snapshot.clone_url, str(seed)])
    return seed


def materialize(snapshot: ReviewRequestSnapshot, path: Path, seed_path: Path | None = None) -> Path:
    """Check out ``snapshot.head_sha`` at ``path`` and return it.

    With a ``seed_path`` the clone borrows objects from a local mirror, so only
    the first materialization of a repository pays for a full download.
    """
    try:
        if not (path / ".git").exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            args = ["clone", "--quiet", "--no-checkout"]
            if seed_path is not None:
                args += ["--reference-if-able", str(_seed(snapshot, seed_path))]
            _git(args + [snapshot.clone_url, str(path)])
        _git(["fetch", "--quiet", "origin", f"pull/{snapshot.number}/head"], cwd=path)
        _git(["checkout", "--quiet", "--force", snapshot.head_sha], cwd=path)
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise MaterializationError(f"Could not materialize {snapshot.key} at {snapshot.head_sha}: {stderr}") from e
    except (OSError, subprocess.TimeoutExpired) as e:
        raise MaterializationError(f"Could not materialize {snapshot.key} at {snapshot.head_sha}: {e}") from e

    logger.debug("Materialized %s at %s into %s", snapshot.key, snapshot.head_sha[:7], path)
    return path
