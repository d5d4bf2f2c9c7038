"""Command line interface for the discography publisher."""

import functools
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .core.pipeline import ALL_CODECS, ArtifactPipeline
from .domain.catalog import load_catalog
from .domain.lyrics import TextCodec
from .domain.value_objects import AudioCodec
from .exceptions import ConfigurationError, DiscographyError
from .models.config import WorkspaceConfig, create_default_config, load_config
from .utils.formatting import format_file_size
from .utils.logging import setup_logging

console = Console()

_config_option = click.option(
    '--config',
    'config_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Workspace configuration file (defaults to the current directory layout)'
)
_verbose_option = click.option('--verbose', is_flag=True, help='Verbose output')


def _reports_errors(command):
    """Print any pipeline error and exit with status 1."""

    @functools.wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except DiscographyError as e:
            console.print(f"\n[red]Error: {escape(str(e))}[/red]")
            sys.exit(1)

    return wrapper


def _workspace(config_path: Optional[Path], verbose: bool,
               log_file: Optional[Path] = None) -> WorkspaceConfig:
    setup_logging(level="DEBUG" if verbose else "INFO", log_file=log_file,
                  verbose=verbose, console=console)
    if config_path:
        return load_config(config_path)
    return WorkspaceConfig.from_root(Path.cwd())


@click.group()
@click.version_option(version=__version__)
def cli():
    """Publish a discography: validate the catalog and build audio downloads."""
    pass


@cli.command()
@_config_option
@_verbose_option
@_reports_errors
def validate(config_path: Optional[Path], verbose: bool):
    """Load the catalog, check every invariant and every audio source."""
    cfg = _workspace(config_path, verbose)
    catalog = load_catalog(cfg.document_path, cfg, check_sources=True)

    table = Table(title="Catalog")
    table.add_column("Records", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Albums", str(len(catalog.albums)))
    table.add_row("Songs", str(catalog.song_count))
    table.add_row("Remixes", str(len(catalog.remixes)))
    table.add_row("Assists", str(len(catalog.assists)))
    console.print(table)
    console.print("\n[green]✓ Catalog is valid[/green]")


@cli.command()
@_config_option
@click.option(
    '--codec',
    'codec_names',
    type=click.Choice([codec.value for codec in AudioCodec]),
    multiple=True,
    help='Codec to build (repeatable; default: all)'
)
@click.option('--workers', type=click.IntRange(min=1), help='Number of encoding workers')
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    help='Also write the build log to this file'
)
@_verbose_option
@_reports_errors
def build(config_path: Optional[Path], codec_names: Tuple[str, ...],
          workers: Optional[int], log_file: Optional[Path], verbose: bool):
    """Transcode, tag and zip every released song and album."""
    cfg = _workspace(config_path, verbose, log_file)
    catalog = load_catalog(cfg.document_path, cfg, check_sources=True)
    codecs = tuple(AudioCodec(name) for name in codec_names) or ALL_CODECS

    report = ArtifactPipeline(cfg).run(catalog, codecs, workers)

    table = Table(title="Build")
    table.add_column("Artifact", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Encoded", str(report.encoded_count))
    table.add_row("Up to date", str(report.cached_count))
    table.add_row("Unreleased (skipped)", str(report.skipped_unreleased))
    table.add_row("Albums zipped", str(len(report.packaged)))
    console.print(table)

    if report.packaged:
        total = sum(path.stat().st_size for path in report.packaged)
        console.print(f"[green]Wrote {format_file_size(total)} of album downloads[/green]")


@cli.command()
@click.argument('slug')
@_config_option
@click.option(
    '--format',
    'format_name',
    type=click.Choice([codec.value for codec in TextCodec]),
    default=TextCodec.TXT.value,
    show_default=True,
    help='Lyric rendering format'
)
@_reports_errors
def lyrics(slug: str, config_path: Optional[Path], format_name: str):
    """Print the lyrics of the song SLUG in the chosen format."""
    cfg = _workspace(config_path, False)
    catalog = load_catalog(cfg.document_path, cfg)

    song = catalog.find_song(slug)
    if song is None or song.lyrics is None:
        raise DiscographyError(f'No song with lyrics has the slug "{slug}"')

    text = song.lyrics.render(
        TextCodec(format_name),
        merge_gap=cfg.lyrics.subtitle_merge_gap,
        wrap_width=cfg.lyrics.subtitle_wrap_width,
    )
    click.echo(text)


@cli.command(name='init-config')
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
@_reports_errors
def init_config(path: Path):
    """Write a default workspace configuration to PATH."""
    if path.exists():
        raise ConfigurationError(f"Refusing to overwrite existing file: {path}")
    create_default_config(path)
    console.print(f"[green]✓ Wrote default configuration to {escape(str(path))}[/green]")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
