"""Per-tile Truchet decisions: orientation, diagonal mask, colour averages.

A tile is split along one of its diagonals.  The *foreground* side is filled
with the mean colour of the pixels it covers; the *background* side gets the
mean colour of the whole tile.  Pixel buffers are ``(H, W, 4)`` uint16 RGBA
arrays and every function here only touches the rectangle of its tile.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

# Orientations, in the order the corners are evaluated.
BOTTOM_LEFT = 0
TOP_LEFT = 1
TOP_RIGHT = 2
BOTTOM_RIGHT = 3

ORIENTATIONS = (BOTTOM_LEFT, TOP_LEFT, TOP_RIGHT, BOTTOM_RIGHT)


@dataclass(frozen=True)
class TileGeometry:
    """Inclusive pixel bounds of one square tile."""

    col_left: int
    col_right: int
    row_top: int
    row_bottom: int

    @property
    def side(self) -> int:
        return self.col_right - self.col_left + 1

    @property
    def center(self) -> tuple[int, int]:
        """(x, y) of the integer midpoint."""
        return (
            (self.col_left + self.col_right) // 2,
            (self.row_top + self.row_bottom) // 2,
        )

    @property
    def slices(self) -> tuple[slice, slice]:
        """(rows, cols) slices selecting the tile in a pixel buffer."""
        return (
            slice(self.row_top, self.row_bottom + 1),
            slice(self.col_left, self.col_right + 1),
        )


def iter_tiles(width: int, height: int, tile_side: int) -> Iterator[TileGeometry]:
    """Yield tile geometries row-major: top to bottom, left to right.

    *width* and *height* are expected to be multiples of *tile_side*.
    """
    for row_top in range(0, height, tile_side):
        for col_left in range(0, width, tile_side):
            yield TileGeometry(
                col_left=col_left,
                col_right=col_left + tile_side - 1,
                row_top=row_top,
                row_bottom=row_top + tile_side - 1,
            )


def color_distance(reference: np.ndarray, candidate: np.ndarray) -> int:
    """Squared Euclidean distance between two RGBA samples."""
    diff = candidate.astype(np.int64) - reference.astype(np.int64)
    return int(np.sum(diff * diff))


def select_orientation(buffer: np.ndarray, geometry: TileGeometry) -> int:
    """Pick the orientation whose corner differs most from the tile centre.

    Corners are compared bottom-left, top-left, top-right, bottom-right; a
    later corner only wins when it is strictly further away, so ties go to
    the earliest one.
    """
    cx, cy = geometry.center
    reference = buffer[cy, cx]
    corners = (
        (geometry.col_left, geometry.row_bottom),
        (geometry.col_left, geometry.row_top),
        (geometry.col_right, geometry.row_top),
        (geometry.col_right, geometry.row_bottom),
    )

    best = BOTTOM_LEFT
    best_dist = -1
    for orientation, (x, y) in zip(ORIENTATIONS, corners, strict=True):
        dist = color_distance(reference, buffer[y, x])
        if dist > best_dist:
            best, best_dist = orientation, dist
    return best


def boundary_x(geometry: TileGeometry, orientation: int) -> np.ndarray:
    """X position of the diagonal on each row of the tile (float64).

    The boundary runs from ``x1`` on the top row to ``x2`` on the bottom row;
    even orientations go left to right, odd ones right to left.
    """
    if orientation % 2 == 0:
        x1, x2 = float(geometry.col_left), float(geometry.col_right)
    else:
        x1, x2 = float(geometry.col_right), float(geometry.col_left)

    y1 = float(geometry.row_top)
    y_delta = float(geometry.row_bottom) - y1
    ys = np.arange(geometry.row_top, geometry.row_bottom + 1, dtype=np.float64)
    if y_delta == 0:
        lam = np.zeros_like(ys)
    else:
        lam = (ys - y1) / y_delta
    return x1 + lam * (x2 - x1)


def is_background(orientation: int, x, boundary):
    """True where column *x* lies on the background side of *boundary*.

    Works on scalars or on broadcastable numpy arrays.
    """
    if orientation % 2 == 0:
        return x > boundary
    return x < boundary


def tile_mask(geometry: TileGeometry, orientation: int) -> np.ndarray:
    """(side, side) bool array, True for foreground pixels."""
    xs = np.arange(geometry.col_left, geometry.col_right + 1, dtype=np.float64)
    boundary = boundary_x(geometry, orientation)
    return ~is_background(orientation, xs[np.newaxis, :], boundary[:, np.newaxis])


def average_colors(
    buffer: np.ndarray,
    geometry: TileGeometry,
    orientation: int,
    mask: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Mean RGBA of the foreground region and of the whole tile.

    Channel sums are divided with truncation, matching integer arithmetic.

    Returns:
        ``(foreground, background)`` as uint16 arrays of length 4.
    """
    if mask is None:
        mask = tile_mask(geometry, orientation)
    tile = buffer[geometry.slices].astype(np.int64)

    background = tile.reshape(-1, 4).sum(axis=0) // mask.size
    foreground = tile[mask].sum(axis=0) // int(np.count_nonzero(mask))
    return foreground.astype(np.uint16), background.astype(np.uint16)


def render_tile(buffer: np.ndarray, geometry: TileGeometry) -> None:
    """Overwrite one tile of *buffer* with its two-colour Truchet rendition.

    Must be called once per tile on the untouched source pixels; the
    averages are read from the same rectangle that gets overwritten.
    """
    orientation = select_orientation(buffer, geometry)
    mask = tile_mask(geometry, orientation)
    foreground, background = average_colors(buffer, geometry, orientation, mask)
    buffer[geometry.slices] = np.where(mask[..., np.newaxis], foreground, background)
