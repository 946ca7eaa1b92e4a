"""CLI entry point for prcheck.

Commands:
  check        — run check cycles for a pull request until nothing is left to do
  fingerprint  — show the current fingerprint and validity verdict, read-only
  history      — list the stored check records of a head revision
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prcheck_cli.commands.check import check_cmd
from prcheck_cli.commands.fingerprint import fingerprint_cmd
from prcheck_cli.commands.history import history_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured check store from .prcheck.yml settings.

    Store selection:
      store: github → GitHubCheckStore (check runs on the head commit; default)
      store: sqlite → SQLiteCheckStore (uses store_path or .prcheck.db)
    """
    from prcheck_core.errors import ConfigurationError

    store_type = config.get("store", "github")

    if store_type == "github":
        from prcheck_store.github import GitHubCheckStore

        return GitHubCheckStore(token=config.get("github_token"))

    if store_type == "sqlite":
        from prcheck_store.sqlite import SQLiteCheckStore

        db_path = config.get("store_path", ".prcheck.db")
        return SQLiteCheckStore(db_path=db_path)

    raise ConfigurationError(f"Unknown store type: {store_type!r}. Choose 'github' or 'sqlite'.")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    # PyGithub logs every request at DEBUG.
    logging.getLogger("github").setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("prcheck"),
    prog_name="prcheck",
)
@click.option(
    "--config",
    "config_path",
    default=".prcheck.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRCHECK_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every decision, not just re-checks and title updates.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Re-run expensive pull request checks only when something relevant changed."""
    from prcheck_core.config import load_config
    from prcheck_core.errors import ConfigurationError
    from prcheck_cli.auth import resolve_github_token

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)

    token = resolve_github_token()
    if token:
        config["github_token"] = token

    try:
        store = _build_store(config)
    except ConfigurationError as e:
        raise click.UsageError(str(e))
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(check_cmd)
main.add_command(fingerprint_cmd)
main.add_command(history_cmd)
