"""CLI entrypoint for the sprite-sheet engine."""

import sys

from pixelforge.cli import main


if __name__ == "__main__":
    sys.exit(main())
