#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Drop images into ``images/`` and run:

    python main.py batch --tile 64 --tile 32 --tile 16

Or render a single file:

    python -m truchet_mosaic.cli single my_photo.jpg -o output/my_photo.gif -t 32
"""

from truchet_mosaic.cli import app

if __name__ == "__main__":
    app()
