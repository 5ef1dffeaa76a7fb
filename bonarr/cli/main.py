# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import typer
from rich.console import Console
from rich.table import Table
from ..clients.errors import UpstreamError
from ..clients.tmdb import TMDBClient
from ..clients.transmission import TransmissionClient
from ..core.config import Config, ConfigError
from ..core.models import Confidence, LinkStatus, MatchRecord
from ..services.link_service import LinkService
from ..services.match_service import MatchService

app = typer.Typer(help="Bonarr - Match torrent files to episodes and link them into your library.")
console = Console()

CONFIDENCE_STYLE = {
    Confidence.HIGH: "green",
    Confidence.MEDIUM: "yellow",
    Confidence.LOW: "yellow",
    Confidence.NONE: "red",
}


def _load_config(config_path: str) -> Config:
    try:
        config = Config.load(config_path)
    except ConfigError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1)
    logging.basicConfig(level=logging.DEBUG if config.verbose else logging.WARNING)
    return config


def _match_service(config: Config) -> MatchService:
    return MatchService(
        TMDBClient(config.tmdb_api_key, read_access_token=config.tmdb_read_access_token),
        TransmissionClient(config.transmission_url, config.transmission_username, config.transmission_password),
    )


def _match_table(records) -> Table:
    table = Table(title="Episode Matches")
    table.add_column("Episode", style="cyan")
    table.add_column("Title", style="magenta")
    table.add_column("File")
    table.add_column("Confidence")

    for record in records:
        style = CONFIDENCE_STYLE[record.confidence]
        table.add_row(
            f"E{record.episode.episode_number:02d}",
            record.episode.name,
            record.file.name if record.file else "-",
            f"[{style}]{record.confidence.value}[/{style}]",
        )
    return table


@app.command("match")
def show_matches(show_id: int, season: int, torrent_id: int, config_path: str = "config.yaml"):
    """
    Auto-match the files of a torrent against a season and print the result.
    """
    config = _load_config(config_path)
    try:
        session = _match_service(config).start_session(show_id, season, torrent_id)
    except UpstreamError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(_match_table(session.store.records))
    console.print(
        f"\nMatched [bold]{session.store.matched_count}[/bold] of {session.store.total_count} episodes."
    )


@app.command("apply")
def apply_matches(
    show_id: int,
    season: int,
    torrent_id: int,
    config_path: str = "config.yaml",
    dry_run: bool = False,
    min_confidence: str = typer.Option("low", help="Ignore matches below this confidence (low, medium, high)."),
):
    """
    Auto-match a torrent and hard-link the matched files into the library.
    """
    config = _load_config(config_path)
    try:
        threshold = Confidence(min_confidence.lower())
    except ValueError:
        console.print(f"[red]Unknown confidence:[/red] {min_confidence}")
        raise typer.Exit(1)

    link_service = LinkService(config)
    try:
        session = _match_service(config).start_session(show_id, season, torrent_id)
    except UpstreamError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    records = [
        r if r.confidence >= threshold else MatchRecord(episode=r.episode)
        for r in session.store.records
    ]
    console.print(_match_table(records))

    if dry_run:
        for record in records:
            if record.file is None:
                continue
            target = link_service.resolver.resolve(
                session.show.name, session.show.id, season, record.episode.episode_number, record.file.extension
            )
            console.print(f"{record.file.name} -> [cyan]{target.target_file}[/cyan]")
        console.print("[yellow]Dry run completed. No links created.[/yellow]")
        return

    result = link_service.apply_matches(records, session.show.name, session.show.id, season, session.torrent.download_dir)

    table = Table(title="Link Results")
    table.add_column("Episode", style="cyan")
    table.add_column("Status")
    table.add_column("Target / Error")
    for detail in result.details:
        ok = detail.status == LinkStatus.SUCCESS
        table.add_row(
            f"E{detail.episode:02d}",
            "[green]linked[/green]" if ok else "[red]failed[/red]",
            detail.target_file if ok else (detail.error or ""),
        )
    for episode_number in result.skipped:
        table.add_row(f"E{episode_number:02d}", "[dim]skipped[/dim]", "no file matched")
    console.print(table)

    # Batch-level failure (e.g. season dir could not be created)
    if not result.details:
        for error in result.errors:
            console.print(f"[red]{error}[/red]")

    if result.success:
        console.print(f"[green]Successfully created {result.processed_count} links.[/green]")
    else:
        console.print(f"[red]Linking finished with errors ({result.processed_count} links created).[/red]")
        raise typer.Exit(1)


@app.command("check")
def check_library(show_id: int, season: int, config_path: str = "config.yaml"):
    """
    Show which episodes of a season are already in the library.
    """
    config = _load_config(config_path)
    link_service = LinkService(config)
    tmdb = TMDBClient(config.tmdb_api_key, read_access_token=config.tmdb_read_access_token)
    try:
        show = tmdb.get_show_details(show_id)
        season_details = tmdb.get_season_details(show_id, season)
    except UpstreamError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    results = link_service.check_existing_files(
        show.name, show.id, season, [ep.episode_number for ep in season_details.episodes]
    )

    table = Table(title=f"{show.name} - Season {season:02d}")
    table.add_column("Episode", style="cyan")
    table.add_column("In Library")
    table.add_column("File", style="yellow")
    for entry in results:
        table.add_row(
            f"E{entry.episode:02d}",
            "[green]yes[/green]" if entry.exists else "[red]no[/red]",
            entry.file_name,
        )
    console.print(table)
    present = sum(1 for r in results if r.exists)
    console.print(f"\n[bold]{present}[/bold] of {len(results)} episodes present.")


if __name__ == "__main__":
    app()
