#!/usr/bin/env python3
"""
Render one artwork: estimate layout -> convert -> decode -> composite -> caption.

A Pipeline runs once. Any error moves it to FAILED, prints the caption anyway
(so the user still learns what was selected), runs cleanup, and re-raises.
"""

import logging
import sys
import time
from enum import Enum
from typing import Callable, List, Optional, Sequence, TextIO

from . import compositor
from .decoder import decode
from .errors import ConversionError
from .layout import estimate, requested_rows
from .model import CaptionBlock, ColorMode, Grid, TerminalDimensions

LOG = logging.getLogger(__name__)


class State(Enum):
    IDLE = "idle"
    LAYOUT_ESTIMATED = "layout-estimated"
    ART_CONVERTED = "art-converted"
    GRID_DECODED = "grid-decoded"
    RENDERED = "rendered"
    DONE = "done"
    FAILED = "failed"


class Pipeline:
    def __init__(
        self,
        converter,
        mode: ColorMode,
        terminal: TerminalDimensions,
        out: Optional[TextIO] = None,
        cleanup: Sequence[Callable[[], None]] = (),
    ):
        self.converter = converter
        self.mode = mode
        self.terminal = terminal
        self.out = out if out is not None else sys.stdout
        self.cleanup = list(cleanup)

        self.state = State.IDLE
        self.history: List[State] = [State.IDLE]
        self.reserved_rows: Optional[int] = None
        self.grid: Grid = ()

    def _advance(self, state: State) -> None:
        LOG.debug("Pipeline: %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _run_cleanup(self) -> None:
        for fn in self.cleanup:
            try:
                fn()
            except OSError as e:
                LOG.warning("Cleanup failed: %s", e)

    def _write_caption(self, caption: CaptionBlock) -> None:
        self.out.write(caption.text() + "\n")
        self.out.flush()

    def run(self, image_path, caption: CaptionBlock) -> Grid:
        if self.state is not State.IDLE:
            raise RuntimeError(f"pipeline already ran (state={self.state.value})")

        t0 = time.perf_counter()
        try:
            self.reserved_rows = estimate(caption, self.terminal.columns)
            self._advance(State.LAYOUT_ESTIMATED)

            rows = requested_rows(self.terminal, self.reserved_rows)
            LOG.debug(
                "Reserved %d row(s) for caption; asking converter for %dx%d",
                self.reserved_rows, self.terminal.columns, rows,
            )
            raw = self.converter.convert(image_path, self.terminal.columns, rows, self.mode)
            if not raw or not raw.strip():
                raise ConversionError("converter produced no output")
            self._advance(State.ART_CONVERTED)

            grid = decode(raw, self.mode)
            if not grid:
                raise ConversionError("converter output contains no cells")
            self.grid = grid
            self._advance(State.GRID_DECODED)

            compositor.write(grid, self.mode, self.out)
            self._write_caption(caption)
            self._advance(State.RENDERED)
        except Exception:
            self._advance(State.FAILED)
            try:
                self._write_caption(caption)
            except OSError as e:
                LOG.warning("Could not write caption: %s", e)
            raise
        finally:
            self._run_cleanup()

        self._advance(State.DONE)
        LOG.debug("Rendered in %.3fs", time.perf_counter() - t0)
        return self.grid
