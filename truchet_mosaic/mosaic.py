"""Mosaic driver: resize to a tile-aligned canvas, then render every tile."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import numpy as np

from truchet_mosaic.errors import InvalidArgumentError
from truchet_mosaic.image_io import load_image, output_format, resize_pixels, save_image
from truchet_mosaic.tiles import TileGeometry, iter_tiles, render_tile

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class _TileCounter:
    """Thread-safe done/total counter feeding a progress callback."""

    def __init__(self, total: int, callback: ProgressCallback | None) -> None:
        self.total = total
        self.done = 0
        self._callback = callback
        self._lock = threading.Lock()

    def tick(self) -> None:
        with self._lock:
            self.done += 1
            if self._callback is not None:
                self._callback(self.done, self.total)


def _check_positive(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        msg = f"{name} must be a positive integer, got {value!r}"
        raise InvalidArgumentError(msg)


def compute_canvas_size(width: int, height: int, tile_side: int) -> tuple[int, int]:
    """Smallest (w, h) holding whole tiles that covers a *width* x *height* image."""
    _check_positive("tile_side", tile_side)
    num_cols = math.ceil(width / tile_side)
    num_rows = math.ceil(height / tile_side)
    return num_cols * tile_side, num_rows * tile_side


def build_mosaic(
    source: np.ndarray,
    tile_side: int,
    progress: ProgressCallback | None = None,
    workers: int = 1,
) -> np.ndarray:
    """Render a Truchet mosaic of *source*.

    Args:
        source:    (H, W, 4) uint16 RGBA pixel buffer; left untouched.
        tile_side: Side length in pixels of each square tile.
        progress:  Called as ``progress(done, total)`` once per tile.
        workers:   Threads rendering tile rows concurrently.  Tiles never
                   overlap, so the result does not depend on this value.

    Returns:
        (H', W', 4) uint16 - the mosaic, with H' and W' rounded up to
        multiples of *tile_side*.
    """
    _check_positive("tile_side", tile_side)
    _check_positive("workers", workers)

    h, w = source.shape[:2]
    canvas_w, canvas_h = compute_canvas_size(w, h, tile_side)
    canvas = resize_pixels(source, canvas_w, canvas_h)

    tiles = list(iter_tiles(canvas_w, canvas_h, tile_side))
    counter = _TileCounter(len(tiles), progress)
    logger.info(
        "Canvas %dx%d -> %dx%d  |  %d tiles of %d px",
        w, h, canvas_w, canvas_h, counter.total, tile_side,
    )

    t0 = time.perf_counter()
    if workers == 1:
        for geometry in tiles:
            render_tile(canvas, geometry)
            counter.tick()
    else:
        per_row = canvas_w // tile_side
        rows = [tiles[i:i + per_row] for i in range(0, len(tiles), per_row)]

        def _render_row(row: list[TileGeometry]) -> None:
            for geometry in row:
                render_tile(canvas, geometry)
                counter.tick()

        with ThreadPoolExecutor(max_workers=workers) as executor:
            # list() re-raises the first worker exception
            list(executor.map(_render_row, rows))

    logger.info("Rendered %d tiles  (%.2f s)", counter.total, time.perf_counter() - t0)
    return canvas


def render_mosaic(
    input_path: str | Path,
    output_path: str | Path,
    tile_side: int,
    progress: ProgressCallback | None = None,
    workers: int = 1,
) -> np.ndarray:
    """Read *input_path*, render its mosaic, and write it to *output_path*.

    The output extension selects the encoder (.gif, .jpg/.jpeg, .png).
    Arguments and output format are checked before any work is done.

    Returns:
        The rendered pixel buffer.
    """
    _check_positive("tile_side", tile_side)
    _check_positive("workers", workers)
    output_format(output_path)

    t0 = time.perf_counter()
    source = load_image(input_path)
    mosaic = build_mosaic(source, tile_side, progress=progress, workers=workers)
    save_image(mosaic, output_path)
    logger.info(
        'Mosaic "%s" created in %.2f s', output_path, time.perf_counter() - t0,
    )
    return mosaic
