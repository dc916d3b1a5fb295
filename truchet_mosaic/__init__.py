"""
Truchet Mosaic Generator
========================

Turn any image into a mosaic of square Truchet tiles. Each tile is split
along a diagonal chosen to keep the most local contrast, and its two halves
are filled with averaged colours from the source.
"""

__version__ = "1.0.0"

from truchet_mosaic.config import MosaicConfig
from truchet_mosaic.errors import (
    EncodeError,
    InvalidArgumentError,
    MosaicError,
    ResizeError,
    SourceReadError,
    UnsupportedFormatError,
)
from truchet_mosaic.image_io import (
    encode_image,
    load_image,
    make_comparison_grid,
    resize_pixels,
    save_image,
)
from truchet_mosaic.mosaic import build_mosaic, compute_canvas_size, render_mosaic
from truchet_mosaic.tiles import (
    TileGeometry,
    average_colors,
    render_tile,
    select_orientation,
    tile_mask,
)

__all__ = [
    "EncodeError",
    "InvalidArgumentError",
    "MosaicConfig",
    "MosaicError",
    "ResizeError",
    "SourceReadError",
    "TileGeometry",
    "UnsupportedFormatError",
    "average_colors",
    "build_mosaic",
    "compute_canvas_size",
    "encode_image",
    "load_image",
    "make_comparison_grid",
    "render_mosaic",
    "render_tile",
    "resize_pixels",
    "save_image",
    "select_orientation",
    "tile_mask",
]
