"""fingerprint command — show the current fingerprint and verdict without side effects."""

from __future__ import annotations

import click
from rich.console import Console

from prcheck_cli.commands.common import build_context
from prcheck_core.errors import ConfigurationError
from prcheck_core.workflow import CheckWorkItem

console = Console()


@click.command("fingerprint")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.pass_context
def fingerprint_cmd(ctx, repo: str, pr_number: int):
    """Print the fingerprint of a pull request and whether it would be checked."""
    context = build_context(ctx.obj["config"], repo, ctx.obj["store"])
    try:
        snapshot, _, active_reviews, fingerprint, verdict = CheckWorkItem(context, pr_number).evaluate()
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    console.print(f"[bold]{snapshot.key}[/bold] at [cyan]{snapshot.head_sha[:7]}[/cyan]")
    console.print(f"  Fingerprint:    {fingerprint}")
    console.print(f"  Active reviews: {len(active_reviews)}")
    style = "yellow" if verdict.must_check else "green"
    console.print(f"  Verdict:        [{style}]{verdict.value}[/{style}]")
