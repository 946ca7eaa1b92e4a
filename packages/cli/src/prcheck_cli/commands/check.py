"""check command — run check cycles for one pull request."""

from __future__ import annotations

import click
from rich.console import Console

from prcheck_cli.commands.common import build_context
from prcheck_core.errors import ConfigurationError
from prcheck_core.scheduler import WorkQueue
from prcheck_core.workflow import CheckWorkItem, CycleAction

console = Console()

_ACTION_MESSAGES = {
    CycleAction.HALT: "[dim]Pull request is integrated, nothing to check.[/dim]",
    CycleAction.SKIP: "[green]Check result is current, not checking again.[/green]",
    CycleAction.REDISPATCH: "[yellow]Title updated from the issue tracker, checking the new state.[/yellow]",
    CycleAction.EXECUTE: "[cyan]Check executed.[/cyan]",
}


@click.command("check")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.pass_context
def check_cmd(ctx, repo: str, pr_number: int):
    """Check a pull request if its state changed since the last check.

    Runs the configured rules only when the fingerprint of the pull request
    differs from the one stored with the last check of its head revision, or
    when the last check never finished.
    """
    config = ctx.obj["config"]
    context = build_context(config, repo, ctx.obj["store"])

    queue = WorkQueue(max_retries=config.get("max_retries", 2), max_cycles=config.get("max_cycles", 10))
    queue.submit(CheckWorkItem(context, pr_number))
    try:
        results = queue.drain()
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    for result in results:
        message = _ACTION_MESSAGES.get(result.action)
        if message:
            console.print(message)

    if queue.failed:
        for item, error in queue.failed:
            console.print(f"[red]{item!r} failed: {error}[/red]")
        ctx.exit(1)
