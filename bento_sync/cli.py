"""Thin CLI wrapper for bento_sync.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from bento_sync import __version__
from bento_sync.catalog import CatalogEntry, ListingError, MalformedConstraint
from bento_sync.config import get_settings
from bento_sync.registry import RegistryError
from bento_sync.service import SyncReport, run_sync
from bento_sync.sync import ReplaceError
from bento_sync.types import SyncStatus

app = typer.Typer(
    name="bento-sync",
    help="Bento Sync - mirror the latest Bento Vagrant boxes to local disk",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"bento-sync version {__version__}")
        raise typer.Exit()


def format_entry(entry: CatalogEntry) -> str:
    """Render one selected box as a progress line."""
    return "%-8s %-5s %2sbit -> %s" % (
        entry.os,
        entry.version,
        entry.bitness,
        entry.remote_path,
    )


def report_to_json(report: SyncReport) -> str:
    """Render a sync report as JSON."""
    output = {
        "selected": [
            {
                "os": r.entry.os,
                "version": str(r.entry.version),
                "bitness": r.entry.bitness,
                "remote_path": r.entry.remote_path,
                "fingerprint": r.entry.fingerprint,
                "status": r.status.value,
                "message": r.message,
                "code": r.code,
            }
            for r in report.results
        ],
        "counts": report.counts(),
    }
    return json.dumps(output, indent=2)


@app.command()
def main(
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run", "-n", help="List the selected boxes without downloading"
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Select the newest box per registry entry and download what changed."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    def print_entry(entry: CatalogEntry) -> None:
        console.print(format_entry(entry), soft_wrap=True, highlight=False)

    try:
        report = run_sync(
            settings,
            dry_run=dry_run,
            on_entry=None if json_output else print_entry,
        )
    except RegistryError as e:
        console.print(f"[red]Invalid registry: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None
    except MalformedConstraint as e:
        console.print(f"[red]Invalid version requirement: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None
    except ListingError as e:
        console.print(f"[red]Failed to list {settings.bucket_url}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None
    except ReplaceError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        console.print(report_to_json(report), soft_wrap=True, markup=False)
        return

    if not report.selected:
        console.print("[yellow]No boxes matched the registry[/yellow]")
        return

    for result in report.failed:
        console.print(f"[red]{escape(result.message)}[/red]", soft_wrap=True)

    if not dry_run:
        counts = report.counts()
        console.print(
            f"[bold]{counts[SyncStatus.DOWNLOADED.value]} downloaded, "
            f"{counts[SyncStatus.FRESH.value]} up to date, "
            f"{counts[SyncStatus.FAILED.value]} failed[/bold]"
        )


__all__ = ["app", "format_entry", "main", "report_to_json"]
