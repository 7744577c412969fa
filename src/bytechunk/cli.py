"""CLI interface for bytechunk.

Typer-based command-line interface with Rich output formatting.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from bytechunk import __version__
from bytechunk.chunk import Rechunker
from bytechunk.config import CONFIG_FILE, BytechunkConfig, default_config, load_config, save_config
from bytechunk.exceptions import BytechunkError
from bytechunk.manifest import (
    Manifest,
    PartEntry,
    compute_hash,
    load_manifest,
    part_name,
    save_manifest,
)
from bytechunk.sources import iter_file

__all__ = ["app"]

app = typer.Typer(
    name="bytechunk",
    help="Split binary files into fixed-size parts with minimal copying.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()
logger = logging.getLogger(__name__)

SizeOption = Annotated[
    int | None,
    typer.Option("--size", "-s", help="Chunk size in bytes (default from config)"),
]
ReadSizeOption = Annotated[
    int | None,
    typer.Option("--read-size", "-r", help="Read block size in bytes (default from config)"),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help=f"Config file (default: ./{CONFIG_FILE} if present)"),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """bytechunk command-line entry point."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


def _fail(message: str, error: Exception) -> typer.Exit:
    console.print(f"[red]{message}:[/red] {error}")
    return typer.Exit(code=1)


def _resolve_config(path: Path | None) -> BytechunkConfig:
    """Load an explicit config, else ./bytechunk.toml, else defaults."""
    if path is not None:
        return load_config(path)
    local = Path.cwd() / CONFIG_FILE
    if local.exists():
        return load_config(local)
    return default_config()


def _default_target(source: str) -> Path:
    """Place the joined file in cwd under the bare file name from the manifest."""
    name = Path(source).name
    if name in ("", ".", ".."):
        raise BytechunkError(f"Manifest source has no usable file name: {source!r}")
    return Path.cwd() / name


def _stats_table(rechunker: Rechunker) -> Table:
    stats = rechunker.stats
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("metric", style="dim")
    table.add_column("value", style="bold")
    if stats is None:
        return table
    table.add_row("Chunk size", str(rechunker.chunk_size))
    table.add_row("Input blocks", str(stats.units))
    table.add_row("Bytes", str(stats.bytes_in))
    table.add_row("Chunks", str(stats.chunks))
    table.add_row("Zero-copy chunks", str(stats.zero_copy_chunks))
    table.add_row("Copied chunks", str(stats.copied_chunks))
    table.add_row("Bytes copied", str(stats.bytes_copied))
    return table


@app.command()
def version() -> None:
    """Show bytechunk version."""
    console.print(f"bytechunk {__version__}")


@app.command()
def split(
    file: Annotated[Path, typer.Argument(help="File to split")],
    size: SizeOption = None,
    read_size: ReadSizeOption = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Output directory (default from config)"),
    ] = None,
    config_path: ConfigOption = None,
) -> None:
    """Split a file into fixed-size part files plus a manifest."""
    try:
        config = _resolve_config(config_path)
        chunk_size = size if size is not None else config.chunk.size
        block_size = read_size if read_size is not None else config.chunk.read_size
        out_dir = out if out is not None else Path(config.output.directory)

        rechunker = Rechunker(chunk_size)
        source_hash = compute_hash(file)
        manifest = Manifest(
            source=file.name,
            source_size=file.stat().st_size,
            source_hash=source_hash,
            chunk_size=chunk_size,
        )

        out_dir.mkdir(parents=True, exist_ok=True)
        for index, chunk in enumerate(rechunker.run(iter_file(file, block_size))):
            name = part_name(config.output.prefix, index, config.output.digits)
            (out_dir / name).write_bytes(chunk)
            manifest.add_part(PartEntry(name=name, size=len(chunk)))

        save_manifest(manifest, out_dir / config.output.manifest)
    except (BytechunkError, OSError) as e:
        logger.error("Failed to split %s: %s", file, e)
        raise _fail(f"Failed to split {file}", e) from e

    console.print(
        f"[green]Split {file.name}[/green] into {len(manifest.parts)} part(s) in {out_dir}"
    )
    console.print(_stats_table(rechunker))


@app.command()
def join(
    manifest_path: Annotated[Path, typer.Argument(help="Manifest written by 'split'")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file (default: original name in cwd)"),
    ] = None,
) -> None:
    """Concatenate the parts listed in a manifest and verify the result."""
    try:
        manifest = load_manifest(manifest_path)
        target = output if output is not None else _default_target(manifest.source)
        base = manifest_path.parent

        with target.open("wb") as sink:
            for part in manifest.parts:
                data = (base / part.name).read_bytes()
                if len(data) != part.size:
                    raise BytechunkError(
                        f"Part {part.name} has {len(data)} bytes, manifest says {part.size}"
                    )
                sink.write(data)

        actual_hash = compute_hash(target)
    except (BytechunkError, OSError) as e:
        logger.error("Failed to join %s: %s", manifest_path, e)
        raise _fail(f"Failed to join {manifest_path}", e) from e

    if actual_hash != manifest.source_hash:
        console.print(
            f"[red]Hash mismatch for {target}:[/red] "
            f"expected {manifest.source_hash}, got {actual_hash}"
        )
        raise typer.Exit(code=1)

    console.print(
        f"[green]Joined {len(manifest.parts)} part(s)[/green] into {target} "
        f"({manifest.total_size} bytes, hash verified)"
    )


@app.command()
def plan(
    file: Annotated[Path, typer.Argument(help="File to analyze")],
    size: SizeOption = None,
    read_size: ReadSizeOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Dry run: report how a file would be chunked without writing anything."""
    try:
        config = _resolve_config(config_path)
        rechunker = Rechunker(size if size is not None else config.chunk.size)
        block_size = read_size if read_size is not None else config.chunk.read_size
        for _chunk in rechunker.run(iter_file(file, block_size)):
            pass
    except BytechunkError as e:
        raise _fail(f"Failed to plan {file}", e) from e

    console.print(f"[bold]{file.name}[/bold]")
    console.print(_stats_table(rechunker))


@app.command(name="init-config")
def init_config(
    path: Annotated[
        Path,
        typer.Argument(help="Where to write the config file"),
    ] = Path(CONFIG_FILE),
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file"),
    ] = False,
) -> None:
    """Write a config file with default values."""
    if path.exists() and not force:
        console.print(
            f"[yellow]Config file already exists:[/yellow] {path} (use --force to overwrite)"
        )
        raise typer.Exit(code=1)
    try:
        save_config(default_config(), path)
    except BytechunkError as e:
        raise _fail("Failed to write config", e) from e
    console.print(f"[green]Wrote default config[/green] to {path}")
