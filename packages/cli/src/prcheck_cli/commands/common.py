"""Wiring shared by the commands that talk to a pull request."""

from __future__ import annotations

import click


def require_token(config: dict) -> str:
    token = config.get("github_token")
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    return token


def build_context(config: dict, repo: str, store):
    """Assemble a CheckContext for ``repo`` from the loaded configuration."""
    from github import Github

    from prcheck_core.census import load_census
    from prcheck_core.gh.pull_request import GitHubIssueProject, GitHubReviewRequests
    from prcheck_core.runner import CommandCheckRunner
    from prcheck_core.workflow import CheckContext

    gh = Github(require_token(config))
    census_path = config["census_path"]
    issue_repo = config.get("issue_repo")

    return CheckContext.from_config(
        config,
        requests=GitHubReviewRequests(gh, repo),
        checks=store,
        census_provider=lambda snapshot: load_census(census_path),
        executor=CommandCheckRunner(store, config.get("rules") or [], config.get("check_name", "prcheck")),
        issue_project=GitHubIssueProject(gh, issue_repo) if issue_repo else None,
    )
