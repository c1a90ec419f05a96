from __future__ import annotations

import os
import sys

import click
from rich.table import Table

from .adapters_impl import SpotifyAdapter
from .auth import AuthorizationCoordinator
from .cache import RemoteStateCache
from .config import EPOCH, PLAYLIST_PREFIX, missing_env_vars
from .console import console, logger, set_verbose
from .errors import AuthorizationError, SpotitableError
from .manager import PlaylistManager
from .records import AirtableClient
from .services.spotify import SpotifyService
from .state import SyncReport, SyncStage
from .sync import SyncDriver, build_buckets


def print_report(report: SyncReport) -> None:
    table = Table(title="Sync summary", show_lines=False)
    table.add_column("Playlist")
    table.add_column("Status")
    table.add_column("Added", justify="right")
    table.add_column("Removed", justify="right")
    table.add_column("Missing", justify="right")
    for result in report.results:
        if result.stage is SyncStage.SKIPPED:
            continue
        status = "[red]failed[/red]" if result.stage is SyncStage.FAILED else "[green]ok[/green]"
        table.add_row(
            result.bucket,
            status,
            str(len(result.delta.to_add)),
            str(len(result.delta.to_remove)),
            str(len(result.missing)),
        )
    table.add_section()
    table.add_row(
        "[bold]Total[/bold]",
        f"[red]{len(report.failed)} failed[/red]" if report.failed else "",
        str(report.added),
        str(report.removed),
        str(report.missing),
    )
    console.print(table)


@click.command()
@click.option("--base", "base_id", required=True, help="Airtable base ID.")
@click.option("--table", required=True, help="Airtable table.")
@click.option("--prefix", default=PLAYLIST_PREFIX, show_default=True, help="Managed playlist prefix.")
@click.option("--epoch", type=int, default=EPOCH, show_default=True, help="First year to sync.")
@click.option(
    "--continue-on-error",
    is_flag=True,
    help="Log a failed playlist and move on to the next one instead of aborting.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def cli(base_id: str, table: str, prefix: str, epoch: int, continue_on_error: bool, verbose: bool) -> None:
    """Sync Airtable track lists into Spotify playlists."""
    set_verbose(verbose)

    missing = missing_env_vars()
    if missing:
        for name in missing:
            click.echo(click.style(f"required environment variable {name} not set", fg="red"), err=True)
        sys.exit(1)

    coordinator = AuthorizationCoordinator(
        os.environ["SPOTIFY_CLIENT_ID"],
        os.environ["SPOTIFY_CLIENT_SECRET"],
    )
    try:
        auth = coordinator.authenticate()
    except AuthorizationError as exc:
        click.echo(click.style(f"error: {exc}", fg="red"), err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo(click.style("\nOperation cancelled by user", fg="yellow"))
        sys.exit(130)
    click.echo(f"login spotify:user:{auth.user_id}")

    adapter = SpotifyAdapter(SpotifyService(auth.client))
    cache = RemoteStateCache(adapter, auth.user_id, prefix=prefix)
    manager = PlaylistManager(adapter, cache)
    driver = SyncDriver(
        AirtableClient(os.environ["AIRTABLE_API_KEY"], base_id),
        manager,
        table,
        buckets=build_buckets(epoch=epoch, prefix=prefix),
        continue_on_error=continue_on_error,
    )

    try:
        report = driver.run()
    except SpotitableError as exc:
        logger.error(f"[red]Sync aborted:[/red] {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo(click.style("\nOperation cancelled by user", fg="yellow"))
        sys.exit(130)

    print_report(report)
    if report.failed:
        sys.exit(1)


def main() -> None:
    cli()


__all__ = ["cli", "main", "print_report"]
