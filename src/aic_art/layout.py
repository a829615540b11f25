#!/usr/bin/env python3
"""Reserve terminal rows for the caption so art + caption fit without scrolling."""

import logging
import shutil
from typing import Iterable, Union

from wcwidth import wcwidth

from .errors import InvalidTerminalState
from .model import CaptionBlock, TerminalDimensions

LOG = logging.getLogger(__name__)


def read_terminal_size(fallback=(80, 24)) -> TerminalDimensions:
    """Query the controlling terminal. Called once per run, never cached."""
    size = shutil.get_terminal_size(fallback)
    LOG.debug("Terminal size: %dx%d", size.columns, size.lines)
    return TerminalDimensions(columns=size.columns, rows=size.lines)


def line_rows(line: str, columns: int) -> int:
    """Rows one printed line takes once the terminal wraps it.

    Widths come from wcwidth, so CJK and other wide characters count two
    columns and wrap as a unit. An empty line still advances one row.
    """
    rows, col = 1, 0
    for ch in line:
        w = max(wcwidth(ch), 0)
        if col and col + w > columns:
            rows += 1
            col = 0
        col += w
    return rows


def estimate(caption: Union[CaptionBlock, Iterable[str]], columns: int) -> int:
    """Number of terminal rows ``caption`` occupies at ``columns`` width."""
    if columns < 1:
        raise InvalidTerminalState(f"terminal reports {columns} columns")

    lines = caption.lines() if isinstance(caption, CaptionBlock) else caption
    return sum(line_rows(line, columns) for line in lines)


def requested_rows(terminal: TerminalDimensions, reserved: int) -> int:
    """Rows left for the art once the caption is accounted for (at least 1)."""
    return max(1, terminal.rows - reserved)
