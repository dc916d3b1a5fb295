"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from truchet_mosaic.config import MosaicConfig
from truchet_mosaic.errors import MosaicError
from truchet_mosaic.image_io import make_comparison_grid, output_format
from truchet_mosaic.mosaic import render_mosaic

app = typer.Typer(
    name="truchet-mosaic",
    help="Turn images into Truchet-tile mosaics.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _render_with_progress(
    input_path: Path,
    output_path: Path,
    tile_side: int,
    workers: int,
) -> tuple[np.ndarray, float]:
    """Render one mosaic behind a Rich progress bar.

    Returns:
        The mosaic pixels and the elapsed seconds.
    """
    t0 = time.perf_counter()
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        transient=True,
    ) as bar:
        task = bar.add_task(f'Processing "{input_path.name}"', total=None)

        def _on_tile(done: int, total: int) -> None:
            bar.update(task, completed=done, total=total)

        mosaic = render_mosaic(
            input_path, output_path, tile_side,
            progress=_on_tile, workers=workers,
        )
    return mosaic, time.perf_counter() - t0


def _fail(exc: MosaicError) -> None:
    console.print(f"[red]✗ {exc.stage} failed:[/red] {exc}")
    raise typer.Exit(1)


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


# -- single-image command ----------------------------------------------

@app.command()
def single(
    source: Path = typer.Argument(..., help="Path to the source image"),
    output: Path = typer.Option(Path("output/mosaic.png"), "--output", "-o"),
    tile_side: int = typer.Option(
        _DEFAULTS.tile_side, "--tile", "-t", help="Tile side in pixels",
    ),
    workers: int = typer.Option(
        _DEFAULTS.workers, "--workers", "-w", help="Threads rendering tile rows",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Render a single image. The OUTPUT extension picks the format."""
    _setup_logging(verbose)

    try:
        output_format(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        _, elapsed = _render_with_progress(source, output, tile_side, workers)
    except MosaicError as exc:
        _fail(exc)

    console.print(f'[green]✓[/green] Mosaic "{output}" created in {elapsed:.2f}s')


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _DEFAULTS.input_dir, "--input", "-i", help="Folder with source images",
    ),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    tile_sides: list[int] = typer.Option(
        [_DEFAULTS.tile_side], "--tile", "-t",
        help="Tile side in pixels (repeat for several mosaics per image)",
    ),
    fmt: str = typer.Option(
        _DEFAULTS.output_format, "--format", "-f", help="gif, jpg, jpeg or png",
    ),
    workers: int = typer.Option(
        _DEFAULTS.workers, "--workers", "-w", help="Threads rendering tile rows",
    ),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Save an Original | Mosaic comparison image",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Process all images in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)
    logger = logging.getLogger("truchet_mosaic")

    try:
        configs = [
            MosaicConfig(
                tile_side=side,
                workers=workers,
                output_format=fmt,
                save_comparison=comparison,
                input_dir=input_dir,
                output_dir=output_dir,
            )
            for side in tile_sides
        ]
    except MosaicError as exc:
        _fail(exc)

    input_dir.mkdir(exist_ok=True)
    output_dir.mkdir(exist_ok=True)

    images = _collect_images(input_dir, configs[0].SUPPORTED_EXTENSIONS)
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .gif / .jpg / .png files there and re-run.\n")
        raise typer.Exit(0)

    console.print(Panel.fit(
        f"[bold]TRUCHET MOSAIC GENERATOR[/bold]\n"
        f"Tiles: {', '.join(f'{s} px' for s in tile_sides)}  |  "
        f"Format: {fmt}\n"
        f"Workers: {workers}  |  Images: {len(images)}",
        border_style="cyan",
    ))

    failures = 0
    for idx, img_path in enumerate(images, 1):
        console.rule(f"[bold cyan][{idx}/{len(images)}] {img_path.name}[/bold cyan]")
        for cfg in configs:
            out_path = (
                output_dir
                / f"{img_path.stem}_truchet{cfg.tile_side}.{cfg.output_format}"
            )
            comp_path = (
                output_dir
                / f"{img_path.stem}_comparison{cfg.tile_side}.{cfg.output_format}"
            )
            try:
                mosaic, elapsed = _render_with_progress(
                    img_path, out_path, cfg.tile_side, cfg.workers,
                )
                if cfg.save_comparison:
                    make_comparison_grid(img_path, mosaic, comp_path, cfg.tile_side)
            except MosaicError as exc:
                failures += 1
                logger.error("%s: %s failed - %s", img_path.name, exc.stage, exc)
                continue

            console.print(
                f"  [green]✓[/green] {out_path.name}  "
                f"[dim]tile={cfg.tile_side}px  time={elapsed:.1f}s[/dim]"
            )

    if failures:
        console.print(Panel.fit(
            f"[bold red]{failures} mosaic(s) failed[/bold red] - see log above",
            border_style="red",
        ))
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]",
        border_style="green",
    ))


if __name__ == "__main__":
    app()
