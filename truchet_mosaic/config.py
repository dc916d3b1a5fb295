"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from truchet_mosaic.errors import InvalidArgumentError


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for a mosaic run.

    Attributes:
        tile_side:       Side length in pixels of each square tile.
        workers:         Threads rendering tile rows (1 = sequential).
        output_format:   Encoder used in batch mode: gif, jpg, jpeg or png.
        save_comparison: Generate a side-by-side Original | Mosaic image.
        input_dir:       Folder to scan for source images.
        output_dir:      Folder for results.
    """

    tile_side: int = 32
    workers: int = 1

    # Output
    output_format: str = "png"
    save_comparison: bool = True

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".gif", ".jpg", ".jpeg", ".png"}
    )
    OUTPUT_FORMATS: frozenset[str] = frozenset({"gif", "jpg", "jpeg", "png"})

    def __post_init__(self) -> None:
        if self.tile_side < 1:
            msg = f"tile_side must be a positive integer, got {self.tile_side}"
            raise InvalidArgumentError(msg)
        if self.workers < 1:
            msg = f"workers must be at least 1, got {self.workers}"
            raise InvalidArgumentError(msg)
        if self.output_format.lower() not in self.OUTPUT_FORMATS:
            msg = f"Unknown output format '{self.output_format}'"
            raise InvalidArgumentError(msg)
