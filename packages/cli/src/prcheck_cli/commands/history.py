"""history command — list stored check records for a head revision."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()

_CONCLUSION_STYLE = {
    "success": "green",
    "failure": "red",
}


def _format_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "—"


@click.command("history")
@click.option("--repo", required=True, help="GitHub repository (owner/name).")
@click.option("--sha", "head_sha", required=True, help="Head revision of the pull request.")
@click.pass_context
def history_cmd(ctx, repo: str, head_sha: str):
    """Show the stored check records of one head revision."""
    store = ctx.obj["store"]
    records = store.checks(repo, head_sha)
    if not records:
        console.print("[yellow]No check records found.[/yellow]")
        return

    table = Table(title=f"Checks — {repo}@{head_sha[:7]}", show_header=True, header_style="bold cyan")
    table.add_column("Check", style="bold")
    table.add_column("Started At")
    table.add_column("Completed At")
    table.add_column("Conclusion")
    table.add_column("Fingerprint")

    for record in sorted(records.values(), key=lambda r: r.started_at):
        if record.completed_at is None:
            conclusion = "[yellow]running[/yellow]"
        else:
            style = _CONCLUSION_STYLE.get(record.conclusion or "", "white")
            conclusion = f"[{style}]{record.conclusion}[/{style}]"
        table.add_row(
            record.name,
            _format_time(record.started_at),
            _format_time(record.completed_at),
            conclusion,
            record.metadata or "",
        )

    console.print(table)
