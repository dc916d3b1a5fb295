"""Exception hierarchy for a mosaic run.

Every error carries the *stage* of the run that failed so callers (the CLI,
the web front-end) can tell the user where things went wrong.
"""

from __future__ import annotations


class MosaicError(Exception):
    """Base class for all mosaic failures."""

    stage = "render"

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class InvalidArgumentError(MosaicError, ValueError):
    """A parameter (tile side, worker count, format name) is out of range."""

    stage = "validate"


class SourceReadError(MosaicError):
    """The input image is missing or cannot be decoded."""

    stage = "read"


class ResizeError(MosaicError):
    """The resampler could not produce the tile-aligned canvas."""

    stage = "resize"


class UnsupportedFormatError(MosaicError, ValueError):
    """The output extension does not map to a known encoder."""

    stage = "encode"


class EncodeError(MosaicError):
    """The encoder or the filesystem failed while writing the mosaic."""

    stage = "encode"
