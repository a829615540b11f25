#!/usr/bin/env python3
"""Turn a decoded Grid into a 24-bit ANSI escape stream."""

from typing import Iterator, TextIO

from .model import ColorMode, Grid, RGB, Row

ESC = "\x1b"
RESET = f"{ESC}[0m"


def fg_escape(rgb: RGB) -> str:
    r, g, b = rgb
    return f"{ESC}[38;2;{r};{g};{b}m"


def bg_escape(rgb: RGB) -> str:
    r, g, b = rgb
    return f"{ESC}[48;2;{r};{g};{b}m"


def composite_row(row: Row, mode: ColorMode) -> str:
    """One row of colored glyphs, closed by a reset and a newline."""
    out = []
    for cell in row:
        if mode.fill and cell.background is not None:
            out.append(bg_escape(cell.background))
        out.append(fg_escape(cell.foreground))
        out.append(cell.glyph)
    # reset every row so colors cannot bleed into the next row or the caption
    out.append(RESET)
    out.append("\n")
    return "".join(out)


def iter_rows(grid: Grid, mode: ColorMode) -> Iterator[str]:
    for row in grid:
        yield composite_row(row, mode)


def composite(grid: Grid, mode: ColorMode) -> str:
    return "".join(iter_rows(grid, mode))


def write(grid: Grid, mode: ColorMode, out: TextIO) -> None:
    for line in iter_rows(grid, mode):
        out.write(line)
