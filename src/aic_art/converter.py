#!/usr/bin/env python3
"""
Image -> colored-cell converters.

Both converters return the HTML cell encoding understood by
``aic_art.decoder.decode``. ``Jp2aConverter`` shells out to jp2a;
``PillowConverter`` produces the same encoding in-process.
"""

import logging
import os
import shutil
import subprocess
from typing import Tuple

import numpy as np
from PIL import Image

from .decoder import encode
from .errors import ConversionError
from .model import Cell, ColorMode

LOG = logging.getLogger(__name__)

# jp2a's default character ramp, dark -> light
JP2A_CHARS = "   ...',;:clodxkO0KXNWM"

# terminal cells are roughly twice as tall as they are wide
CELL_ASPECT = 0.5


class Jp2aConverter:
    """Run ``jp2a --term-fit --color --html [--fill]`` on an image file."""

    def __init__(self, executable: str = "jp2a"):
        self.executable = executable

    def command(self, image_path: str, mode: ColorMode):
        cmd = [self.executable, "--term-fit", "--color", "--html"]
        if mode.fill:
            cmd.append("--fill")
        cmd.append(str(image_path))
        return cmd

    def convert(self, image_path: str, columns: int, rows: int, mode: ColorMode) -> str:
        # jp2a sizes --term-fit output from COLUMNS/LINES; hand it the rows left
        # for the art through the child's environment only.
        env = dict(os.environ, COLUMNS=str(columns), LINES=str(rows))
        cmd = self.command(image_path, mode)
        LOG.debug("Running %s (COLUMNS=%d LINES=%d)", " ".join(cmd), columns, rows)
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=env,
                check=False,
            )
        except FileNotFoundError as e:
            raise ConversionError(
                f"{self.executable} not found; install it from https://csl.name/jp2a/"
            ) from e
        except OSError as e:
            raise ConversionError(f"could not run {self.executable}: {e}") from e

        if proc.returncode != 0:
            detail = proc.stderr.strip() or f"exit status {proc.returncode}"
            raise ConversionError(f"{self.executable} failed: {detail}")
        if not proc.stdout.strip():
            raise ConversionError(f"{self.executable} produced no output")
        return proc.stdout


class PillowConverter:
    """Average each cell's color with Pillow and pick a glyph by luminance."""

    def __init__(self, chars: str = JP2A_CHARS):
        if not chars:
            raise ValueError("character ramp must not be empty")
        self.chars = chars

    @staticmethod
    def fit(image_size: Tuple[int, int], columns: int, rows: int) -> Tuple[int, int]:
        """Largest (cols, rows) grid keeping the image aspect inside the box."""
        W, H = image_size
        cols = columns
        out_rows = max(1, round((H / W) * cols * CELL_ASPECT))
        if out_rows > rows:
            out_rows = rows
            cols = max(1, min(columns, round((W / H) * rows / CELL_ASPECT)))
        return cols, out_rows

    def glyph_for(self, luminance: float) -> str:
        idx = int(round((luminance / 255.0) * (len(self.chars) - 1)))
        return self.chars[max(0, min(idx, len(self.chars) - 1))]

    def grid_from_image(self, img: Image.Image, columns: int, rows: int, mode: ColorMode):
        img = img.convert("RGB")
        cols, out_rows = self.fit(img.size, columns, rows)
        LOG.debug("Pillow fit: %dx%d image -> %dx%d cells", img.width, img.height, cols, out_rows)

        small = img.resize((cols, out_rows), resample=Image.Resampling.BOX)
        rgb = np.asarray(small, dtype=np.float32)  # rows x cols x 3
        lum = rgb[..., 0] * 0.2989 + rgb[..., 1] * 0.5870 + rgb[..., 2] * 0.1140
        bright = np.clip(rgb * 1.5 + 32.0, 0, 255)

        grid = []
        for y in range(out_rows):
            row = []
            for x in range(cols):
                color = tuple(int(c) for c in rgb[y, x])
                if mode.fill:
                    fg = tuple(int(c) for c in bright[y, x])
                    row.append(Cell(foreground=fg, background=color, glyph=self.glyph_for(lum[y, x])))
                else:
                    row.append(Cell(foreground=color, glyph=self.glyph_for(lum[y, x])))
            grid.append(tuple(row))
        return tuple(grid)

    def convert(self, image_path: str, columns: int, rows: int, mode: ColorMode) -> str:
        try:
            with Image.open(image_path) as img:
                grid = self.grid_from_image(img, columns, rows, mode)
        except (OSError, Image.DecompressionBombError) as e:
            raise ConversionError(f"could not read image {image_path}: {e}") from e
        return encode(grid, mode, wrap=True)


CONVERTERS = {
    "jp2a": Jp2aConverter,
    "pillow": PillowConverter,
}


def get_converter(name: str = "auto"):
    """Converter by name; ``auto`` prefers jp2a when it is on PATH."""
    if name == "auto":
        name = "jp2a" if shutil.which("jp2a") else "pillow"
        LOG.debug("Auto-selected converter: %s", name)
    try:
        return CONVERTERS[name]()
    except KeyError:
        raise ValueError(f"Unknown converter: {name}") from None
