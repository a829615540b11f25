#!/usr/bin/env python3
"""
Decode the converter's colored-HTML encoding into a Grid (and encode one back).

The encoding is what ``jp2a --html --color [--fill]`` writes:

    <span style='color:#rrggbb;'>c</span>...<br/>
    <span style='color:#rrggbb; background-color:#rrggbb;'>c</span>...<br/>

One span per cell, rows terminated by ``<br/>``, and the literal space
written as ``&nbsp;`` so it survives HTML whitespace collapsing.
"""

import html
import logging
import re
from typing import List, Optional

from .errors import DecodeError
from .model import Cell, ColorMode, Grid, RGB, Row

LOG = logging.getLogger(__name__)

SPACE_PLACEHOLDER = "&nbsp;"
ROW_BREAK = "<br/>"

_ROW_BREAK_RE = re.compile(r"<br\s*/?>")
_SPAN_RE = re.compile(
    r"<span\s+style=(?P<q>['\"])(?P<style>.*?)(?P=q)\s*>(?P<body>.*?)</span>",
    re.DOTALL,
)
_DECL_RE = re.compile(r"^\s*(?P<prop>[a-z-]+)\s*:\s*#(?P<value>\S*)\s*$")
_HEX2_RE = re.compile(r"[0-9A-Fa-f]{2}")
_GAP_RE = re.compile(r"\s*")

_PREAMBLE = (
    "<?xml version='1.0' encoding='UTF-8'?>\n"
    "<!DOCTYPE html PUBLIC '-//W3C//DTD XHTML 1.0 Strict//EN' "
    "'http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd'>\n"
    "<html xmlns='http://www.w3.org/1999/xhtml' lang='en' xml:lang='en'>\n"
    "<head>\n"
    "<title>aic-art converted image</title>\n"
    "<style type='text/css'>\n"
    ".ascii {\n"
    "   font-family: Courier;\n"
    "   font-size: 4pt;\n"
    "   line-height: 1em;\n"
    "}\n"
    "</style>\n"
    "</head>\n"
    "<body>\n"
    "<div class='ascii'>\n"
    "<pre>\n"
)
_POSTAMBLE = "</pre>\n</div>\n</body>\n</html>\n"


# -----------------------------
# Decoding
# -----------------------------

def strip_wrapper(raw: str) -> str:
    """Drop the document preamble/postamble around the rows.

    The payload runs from the first span to the last closing span; anything
    outside is wrapper. A bare fragment passes through unchanged.
    """
    start = raw.find("<span")
    if start < 0:
        return ""
    end = raw.rfind("</span>") + len("</span>")
    return raw[start:end]


def _parse_color(value: str, row: int) -> RGB:
    if len(value) != 6:
        raise DecodeError(f"color #{value} must have three 2-digit hex channels", row)
    channels = []
    for i in range(0, 6, 2):
        pair = value[i:i + 2]
        if not _HEX2_RE.fullmatch(pair):
            raise DecodeError(f"channel {pair!r} is not 2-digit hex", row)
        channels.append(int(pair, 16))
    return tuple(channels)


def _parse_style(style: str, row: int):
    fg: Optional[RGB] = None
    bg: Optional[RGB] = None
    for decl in style.split(";"):
        if not decl.strip():
            continue
        m = _DECL_RE.match(decl)
        if not m:
            raise DecodeError(f"unreadable style declaration {decl.strip()!r}", row)
        prop = m.group("prop")
        if prop == "color":
            fg = _parse_color(m.group("value"), row)
        elif prop == "background-color":
            bg = _parse_color(m.group("value"), row)
        else:
            raise DecodeError(f"unexpected style property {prop!r}", row)
    if fg is None:
        raise DecodeError("span has no foreground color", row)
    return fg, bg


def _parse_glyph(body: str, row: int) -> str:
    if body == SPACE_PLACEHOLDER:
        return " "
    text = html.unescape(body).replace("\xa0", " ")
    if len(text) != 1:
        raise DecodeError(
            f"span must wrap exactly one character, got {len(text)} ({body!r})", row
        )
    return text


def decode_row(segment: str, row: int, mode: ColorMode) -> Row:
    """Tokenize one row of spans into cells, left to right."""
    cells: List[Cell] = []
    pos = 0
    n = len(segment)
    while True:
        pos = _GAP_RE.match(segment, pos).end()
        if pos >= n:
            break
        m = _SPAN_RE.match(segment, pos)
        if not m:
            raise DecodeError(f"unexpected text {segment[pos:pos + 24]!r}", row)

        fg, bg = _parse_style(m.group("style"), row)
        if mode.fill and bg is None:
            raise DecodeError("span has no background color in fill mode", row)
        if not mode.fill and bg is not None:
            raise DecodeError("span has a background color in foreground-only mode", row)

        cells.append(Cell(foreground=fg, background=bg, glyph=_parse_glyph(m.group("body"), row)))
        pos = m.end()

    if not cells:
        raise DecodeError("row has no cells", row)
    return tuple(cells)


def decode(raw: str, mode: ColorMode) -> Grid:
    """Parse the converter output into a Grid; never returns a partial grid."""
    payload = strip_wrapper(raw)
    if not payload:
        LOG.debug("Decoded empty payload")
        return ()

    rows = []
    width = None
    for index, segment in enumerate(_ROW_BREAK_RE.split(payload)):
        row = decode_row(segment, index, mode)
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise DecodeError(f"row has {len(row)} cells, expected {width}", index)
        rows.append(row)

    LOG.debug("Decoded grid: %d rows x %d cols (%s)", len(rows), width, mode.value)
    return tuple(rows)


# -----------------------------
# Encoding
# -----------------------------

def _hex(rgb: RGB) -> str:
    r, g, b = rgb
    return f"{r:02x}{g:02x}{b:02x}"


def encode_cell(cell: Cell, mode: ColorMode) -> str:
    style = f"color:#{_hex(cell.foreground)};"
    if mode.fill:
        if cell.background is None:
            raise ValueError("fill mode needs a background color on every cell")
        style += f" background-color:#{_hex(cell.background)};"
    glyph = SPACE_PLACEHOLDER if cell.glyph == " " else html.escape(cell.glyph, quote=False)
    return f"<span style='{style}'>{glyph}</span>"


def encode(grid: Grid, mode: ColorMode, wrap: bool = False) -> str:
    """Write ``grid`` in the converter's encoding, optionally as a full document."""
    body = "".join(
        "".join(encode_cell(cell, mode) for cell in row) + ROW_BREAK for row in grid
    )
    if wrap:
        return _PREAMBLE + body + "\n" + _POSTAMBLE
    return body
