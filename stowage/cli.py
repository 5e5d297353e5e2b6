"""
Stowage CLI - inspect and move files between local storage roots.

Commands:
    stowage tree ./data                     # Render a directory tree
    stowage tree ./data --html              # Render as nested HTML lists
    stowage copy ./data ./backup -p "*.csv" # Deep copy matching files
    stowage move ./inbox ./done a.txt b.txt # Move files between roots

Configuration is read from STOWAGE_* environment variables (and .env), or
from a YAML file given with --config.
"""

import asyncio
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from stowage.backends.local import LocalFileStorageProvider
from stowage.core.config import StowageConfig, configure
from stowage.core.logger import configure_default_logging
from stowage.core.models import TransferSummary
from stowage.core.result import Result
from stowage.transfer.service import TransferConfig, TransferService
from stowage.tree.renderers import HtmlTreeRenderer, TextTreeRenderer
from stowage.tree.walker import render_directory

console = Console()


def _load_config(config_path: str | None) -> StowageConfig:
    if config_path:
        return StowageConfig.from_file(config_path)
    return StowageConfig.from_env()


def _display_result(result: Result, title: str) -> None:
    """Print messages, errors and (when present) the transfer summary."""
    style = "green" if result.is_success else "red"
    mark = "✓" if result.is_success else "✗"
    console.print(f"[{style}]{mark} {title}[/{style}]")

    for message in result.messages:
        console.print(f"  {message}")
    for error in result.errors:
        console.print(f"  [red]{type(error).__name__}[/red]: {error}")

    if isinstance(result.value, TransferSummary):
        summary = result.value
        table = Table(title="Transfer Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Processed", str(summary.processed))
        table.add_row("Total", str(summary.total))
        table.add_row("Failed", str(summary.failed))
        table.add_row("Skipped", str(summary.skipped))
        table.add_row("Bytes", str(summary.bytes_processed))
        console.print(table)
        for path in summary.failed_paths:
            console.print(f"  [yellow]failed:[/yellow] {path}")


def _split(path: str) -> tuple[Path, str]:
    """Split a local directory into (provider root, provider-relative name)."""
    resolved = Path(path).resolve()
    return resolved.parent, resolved.name


@click.group()
@click.version_option(version="0.1.0", prog_name="stowage")
@click.option("--config", "config_path", type=click.Path(exists=True), help="YAML config file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool):
    """Stowage - file storage providers, transfers and tree rendering"""
    config = _load_config(config_path)
    configure(config)
    configure_default_logging(level="DEBUG" if verbose else config.log_level)
    ctx.obj = config


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--dirs-only", is_flag=True, help="Skip files and totals")
@click.option("--html", "as_html", is_flag=True, help="Render nested HTML lists")
@click.pass_obj
def tree(config: StowageConfig, path: str, dirs_only: bool, as_html: bool):
    """Render the directory tree under PATH."""
    provider = LocalFileStorageProvider(path, ensure_root=False, chunk_size=config.chunk_size)
    renderer = HtmlTreeRenderer() if as_html else TextTreeRenderer()

    result = asyncio.run(render_directory(provider, renderer=renderer, skip_files=dirs_only))
    if result.is_failure:
        _display_result(result, "Render failed")
        sys.exit(1)

    # markup=False keeps brackets in file names literal
    console.print(result.value, end="", markup=False, highlight=False)


@cli.command()
@click.argument("source", type=click.Path(exists=True))
@click.argument("destination", type=click.Path())
@click.option("-p", "--pattern", default=None, help="Glob applied to file names (e.g. *.csv)")
@click.option("--skip-files", is_flag=True, help="Copy the directory structure only")
@click.pass_obj
def copy(
    config: StowageConfig, source: str, destination: str, pattern: str | None, skip_files: bool
):
    """Deep copy SOURCE (file or directory) to DESTINATION."""
    if Path(destination).resolve().is_relative_to(Path(source).resolve()):
        console.print("[red]✗ Copy failed[/red]")
        console.print("  Destination is inside source")
        console.print(f"  {source} -> {destination}", markup=False, highlight=False)
        sys.exit(1)

    source_root, source_name = _split(source)
    destination_root, destination_name = _split(destination)

    service = TransferService(
        LocalFileStorageProvider(source_root, location_name="source", ensure_root=False),
        LocalFileStorageProvider(destination_root, location_name="destination"),
        TransferConfig(chunk_size=config.chunk_size),
    )
    result = asyncio.run(
        service.deep_copy(
            source_name, destination_name, skip_files=skip_files, search_pattern=pattern
        )
    )

    _display_result(result, "Copy complete" if result.is_success else "Copy failed")
    if result.is_failure:
        sys.exit(1)


@cli.command()
@click.argument("source_root", type=click.Path(exists=True, file_okay=False))
@click.argument("destination_root", type=click.Path(file_okay=False))
@click.argument("files", nargs=-1, required=True)
@click.pass_obj
def move(config: StowageConfig, source_root: str, destination_root: str, files: tuple[str, ...]):
    """Move FILES (relative to SOURCE_ROOT) into DESTINATION_ROOT."""
    service = TransferService(
        LocalFileStorageProvider(source_root, location_name="source", ensure_root=False),
        LocalFileStorageProvider(destination_root, location_name="destination"),
        TransferConfig(chunk_size=config.chunk_size),
    )
    result = asyncio.run(service.move_files([(name, name) for name in files]))

    _display_result(result, "Move complete" if result.is_success else "Move failed")
    if result.is_failure:
        sys.exit(1)


def main():
    """Main entry point for the stowage CLI."""
    cli()


if __name__ == "__main__":
    main()
