#!/usr/bin/env python3
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .errors import InvalidTerminalState

RGB = Tuple[int, int, int]


# -----------------------------
# Terminal / color mode
# -----------------------------

@dataclass(frozen=True)
class TerminalDimensions:
    columns: int
    rows: int

    def __post_init__(self):
        if self.columns < 1 or self.rows < 1:
            raise InvalidTerminalState(
                f"unusable terminal size {self.columns}x{self.rows}"
            )


class ColorMode(Enum):
    FOREGROUND_ONLY = "foreground"
    FOREGROUND_AND_BACKGROUND = "fill"

    @classmethod
    def from_fill(cls, fill: bool) -> "ColorMode":
        return cls.FOREGROUND_AND_BACKGROUND if fill else cls.FOREGROUND_ONLY

    @property
    def fill(self) -> bool:
        return self is ColorMode.FOREGROUND_AND_BACKGROUND


# -----------------------------
# Grid
# -----------------------------

@dataclass(frozen=True)
class Cell:
    foreground: RGB
    background: Optional[RGB] = None
    glyph: str = " "


Row = Tuple[Cell, ...]
Grid = Tuple[Row, ...]


# -----------------------------
# Caption
# -----------------------------

@dataclass(frozen=True)
class CaptionBlock:
    """The tombstone printed under the art: title + date, artist, URL."""

    title_date: str
    artist: str
    url: str

    def lines(self) -> Tuple[str, ...]:
        # artist_display often carries its own newline (name, then nationality)
        out = []
        for field in (self.title_date, self.artist, self.url):
            out.extend(field.split("\n"))
        return tuple(out)

    def text(self) -> str:
        return "\n".join(self.lines())
