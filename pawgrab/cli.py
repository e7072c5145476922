"""CLI entry-points – ``bluepaw`` (tag search downloader) and ``yiffgrab`` (comic grabber)."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .comic import ComicGrabber
from .config import BluepawConfig, FetchRequest, YiffgrabConfig
from .errors import PawgrabError
from .fetcher import PostFetcher
from .models import ArchiveFormat

console = Console()
err_console = Console(stderr=True)

EXIT_FATAL = 1
EXIT_PARTIAL = 3


def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
        force=True,
    )
    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _print_stats(title: str, stats: dict) -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")
    for key, val in stats.items():
        table.add_row(key.capitalize(), str(val))
    console.print(table)


def _fail(exc: PawgrabError, debug: bool) -> None:
    """Report a fatal error and exit.  Must be called from inside an ``except`` block."""
    err_console.print(f"[red]Error:[/red] {exc}")
    if debug:
        err_console.print_exception()
    sys.exit(EXIT_FATAL)


# ─── Commands ────────────────────────────────────────────────────


@click.command()
@click.option("-t", "--tag", required=True, help="Tag(s) to search for, space-separated or quoted")
@click.option("-b", "--block", default="", help="Tag(s) to block (comma-separated)")
@click.option(
    "-o", "--output", envvar="BLUEPAW_OUTPUT", default=".", show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Parent output directory",
)
@click.option("-l", "--limit", default=100, show_default=True, type=int, help="Maximum number of posts to download")
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging")
def bluepaw(tag: str, block: str, output: Path, limit: int, debug: bool) -> None:
    """Download every e621 post matching a tag search.

    Example: bluepaw --tag "wolf solo" --block gore,comic --limit 200
    """
    _setup_logging(debug)
    try:
        cfg = BluepawConfig(
            request=FetchRequest.from_cli(tag, block, limit),
            output_root=output.resolve(),
            debug=debug,
        )
        with PostFetcher(cfg, console=console) as fetcher:
            report = fetcher.run()
            _print_stats("Download Summary", fetcher.stats)
    except PawgrabError as exc:
        _fail(exc, debug)

    if not report.ok:
        err_console.print(f"[yellow]![/yellow] {len(report.failed)} post(s) failed to download")
        sys.exit(EXIT_PARTIAL)


@click.command()
@click.argument("name")
@click.option(
    "-f", "--format", "fmt", default="pdf", show_default=True,
    type=click.Choice([ArchiveFormat.PDF.value, ArchiveFormat.CBZ.value], case_sensitive=False),
    help="Output format",
)
@click.option("-z", "--zipped", is_flag=True, help="Zip the downloaded images")
@click.option(
    "-o", "--output", envvar="YIFFGRAB_OUTPUT", default=".", show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write the page folder and archives into",
)
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging")
def yiffgrab(name: str, fmt: str, zipped: bool, output: Path, debug: bool) -> None:
    """Download a comic from yiffer.xyz by NAME (as it appears in the URL).

    Example: yiffgrab "Some Comic" --format cbz --zipped
    """
    _setup_logging(debug)
    try:
        cfg = YiffgrabConfig(
            name=name,
            format=ArchiveFormat.parse(fmt),
            zipped=zipped,
            output_root=output,
            debug=debug,
        )
        with ComicGrabber(cfg, console=console) as grabber:
            grabber.run()
            _print_stats("Comic Summary", grabber.stats)
    except PawgrabError as exc:
        _fail(exc, debug)

    console.print("[green]✓[/green] Done!")
    if grabber.stats["failed"]:
        err_console.print(f"[yellow]![/yellow] {grabber.stats['failed']} page(s) failed to download")
        sys.exit(EXIT_PARTIAL)


def bluepaw_main() -> None:
    bluepaw()


def yiffgrab_main() -> None:
    yiffgrab()


if __name__ == "__main__":
    bluepaw_main()
