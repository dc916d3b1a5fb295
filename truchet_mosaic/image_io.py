"""Image loading, resampling, encoding, and comparison-grid generation.

Pixel buffers are ``(H, W, 4)`` uint16 RGBA arrays.  Pillow decodes and
encodes 8-bit data, so samples are widened with ``* 257`` on load and
narrowed with ``>> 8`` on save.  Pillow cannot write 16-bit RGBA PNGs, so every
output format, PNG included, is 8 bits per channel; only the tile maths runs
at 16 bits.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

import numpy as np
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from truchet_mosaic.errors import (
    EncodeError,
    ResizeError,
    SourceReadError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

# suffix -> (Pillow format, save options)
ENCODERS: dict[str, tuple[str, dict]] = {
    ".gif": ("GIF", {}),
    ".jpg": ("JPEG", {"quality": 100}),
    ".jpeg": ("JPEG", {"quality": 100}),
    ".png": ("PNG", {"compress_level": 9}),
}


def load_image(path: str | Path | BinaryIO) -> np.ndarray:
    """Decode an image file into a 16-bit RGBA pixel buffer.

    *path* may also be an open binary file object (e.g. an upload).

    Raises:
        SourceReadError: the file is missing or Pillow cannot decode it.
    """
    if not hasattr(path, "read"):
        path = Path(path)
    try:
        with Image.open(path) as img:
            logger.debug("Loaded %s: %s %s %s", path, img.format, img.mode, img.size)
            rgba = np.asarray(img.convert("RGBA"), dtype=np.uint16)
    except FileNotFoundError as exc:
        msg = f"Image file not found: {path}"
        raise SourceReadError(msg) from exc
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        msg = f"Cannot decode {path}: {exc}"
        raise SourceReadError(msg) from exc
    return rgba * 257


def resize_pixels(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Lanczos-resample a pixel buffer to ``(height, width)``.

    Each channel is filtered in Pillow's 32-bit float mode so the 16-bit
    precision is kept.  A buffer that already has the requested size is
    returned as an exact copy.
    """
    h, w = pixels.shape[:2]
    if (w, h) == (width, height):
        return pixels.copy()

    try:
        channels = [
            np.asarray(
                Image.fromarray(pixels[..., c].astype(np.float32)).resize(
                    (width, height), Image.LANCZOS,
                ),
            )
            for c in range(pixels.shape[2])
        ]
    except (ValueError, MemoryError) as exc:
        msg = f"Cannot resize {w}x{h} to {width}x{height}: {exc}"
        raise ResizeError(msg) from exc

    stacked = np.stack(channels, axis=-1)
    return np.clip(np.rint(stacked), 0, 65535).astype(np.uint16)


def output_format(path: str | Path) -> tuple[str, dict]:
    """Map an output path's extension to a Pillow format and save options."""
    suffix = Path(path).suffix.lower()
    try:
        return ENCODERS[suffix]
    except KeyError:
        supported = ", ".join(sorted(ENCODERS))
        msg = f"Unsupported image format '{suffix}'. Supported formats: {supported}"
        raise UnsupportedFormatError(msg) from None


def to_pil(pixels: np.ndarray) -> Image.Image:
    """8-bit RGBA Pillow image from a 16-bit pixel buffer."""
    return Image.fromarray((pixels >> 8).astype(np.uint8))


def encode_image(pixels: np.ndarray, fp: BinaryIO, suffix: str) -> None:
    """Encode *pixels* into the binary file object *fp*.

    *suffix* selects the encoder exactly as a file extension would.
    """
    fmt, options = output_format(f"mosaic{suffix}")
    img = to_pil(pixels)
    if fmt in ("JPEG", "GIF"):
        # neither encoder keeps a partial alpha channel
        img = img.convert("RGB")
    try:
        img.save(fp, format=fmt, **options)
    except (OSError, ValueError) as exc:
        msg = f"{fmt} encoder failed: {exc}"
        raise EncodeError(msg) from exc


def save_image(pixels: np.ndarray, path: str | Path) -> None:
    """Write *pixels* to *path*, atomically.

    The encoder is resolved before anything touches the filesystem.  Data
    goes to a temporary file next to *path*, is fsynced, then moved over the
    destination, so a failed write never leaves a truncated image behind.
    """
    path = Path(path)
    output_format(path)

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent,
        )
    except OSError as exc:
        msg = f"Cannot create {path}: {exc}"
        raise EncodeError(msg) from exc

    tmp_path = Path(tmp_name)
    replaced = False
    try:
        with os.fdopen(fd, "wb") as fh:
            encode_image(pixels, fh, path.suffix)
            fh.flush()
            os.fsync(fh.fileno())
        # mkstemp creates the file owner-only
        tmp_path.chmod(0o644)
        os.replace(tmp_path, path)
        replaced = True
    except OSError as exc:
        msg = f"Cannot write {path}: {exc}"
        raise EncodeError(msg) from exc
    finally:
        if not replaced:
            tmp_path.unlink(missing_ok=True)

    logger.debug("Wrote %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])


def make_comparison_grid(
    original_path: str | Path,
    mosaic: np.ndarray,
    output_path: str | Path,
    tile_side: int,
) -> None:
    """Create a 2-panel comparison: Original | Mosaic.

    The original is stretched to the mosaic canvas so both panels line up.
    The grid is written through :func:`save_image`, so read and write
    failures surface as :class:`SourceReadError` and :class:`EncodeError`.
    """
    output_format(output_path)
    panel_h, panel_w = mosaic.shape[:2]
    label_height = 36

    original = (
        to_pil(load_image(original_path))
        .convert("RGB")
        .resize((panel_w, panel_h), Image.LANCZOS)
    )
    mosaic_img = to_pil(mosaic).convert("RGB")

    panels = [original, mosaic_img]
    labels = ["Original", f"Truchet {tile_side} px"]

    gap = 8
    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels, strict=False)):
        x = i * (panel_w + gap)
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel_w - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    save_image(np.asarray(canvas.convert("RGBA"), dtype=np.uint16) * 257, output_path)
