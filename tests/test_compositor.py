"""Tests for compositor module."""

import io

import pytest
from aic_art.compositor import RESET, bg_escape, composite, fg_escape, iter_rows, write
from aic_art.model import Cell, ColorMode

ESC = "\x1b"
FG = ColorMode.FOREGROUND_ONLY
FILL = ColorMode.FOREGROUND_AND_BACKGROUND

# --- Fixtures ---


@pytest.fixture
def two_cell_grid():
    return (
        (
            Cell(foreground=(255, 0, 0), background=(0, 0, 255), glyph="A"),
            Cell(foreground=(0, 255, 0), background=None, glyph=" "),
        ),
    )


@pytest.fixture
def fill_grid():
    return tuple(
        tuple(Cell((x, y, 0), (0, x, y), "#") for x in range(4)) for y in range(3)
    )


# --- Tests ---


class TestEscapes:
    def test_foreground(self):
        """Test the truecolor foreground escape."""
        assert fg_escape((1, 2, 3)) == f"{ESC}[38;2;1;2;3m"

    def test_background(self):
        """Test the truecolor background escape."""
        assert bg_escape((255, 128, 0)) == f"{ESC}[48;2;255;128;0m"


class TestComposite:
    def test_two_cell_scenario(self, two_cell_grid):
        """Test that fill mode writes background, foreground and glyph per cell."""
        out = composite(two_cell_grid, FILL)
        assert out == (
            f"{ESC}[48;2;0;0;255m"
            f"{ESC}[38;2;255;0;0m"
            "A"
            f"{ESC}[38;2;0;255;0m"
            " "
            f"{ESC}[0m\n"
        )

    def test_two_cell_scenario_foreground_only(self, two_cell_grid):
        """Test that foreground-only mode writes foreground and glyph per cell."""
        out = composite(two_cell_grid, FG)
        assert out == f"{ESC}[38;2;255;0;0mA{ESC}[38;2;0;255;0m {ESC}[0m\n"

    def test_background_once_per_cell_in_fill_mode(self, fill_grid):
        """Test that fill mode emits exactly one background escape per cell."""
        out = composite(fill_grid, FILL)
        assert out.count(f"{ESC}[48;2;") == 12
        assert out.count(f"{ESC}[38;2;") == 12

    def test_no_background_in_foreground_mode(self, fill_grid):
        """Test that foreground-only mode never emits a background escape."""
        out = composite(fill_grid, FG)
        assert f"{ESC}[48;2;" not in out
        assert out.count(f"{ESC}[38;2;") == 12

    @pytest.mark.parametrize("mode", [FG, FILL])
    def test_every_row_ends_with_one_reset(self, fill_grid, mode):
        """Test that each row ends with a single reset and newline."""
        rows = list(iter_rows(fill_grid, mode))
        assert len(rows) == 3
        for row in rows:
            assert row.endswith(RESET + "\n")
            assert row.count(RESET) == 1
            assert row.count("\n") == 1

    def test_empty_grid(self):
        """Test that an empty grid composites to an empty string."""
        assert composite((), FILL) == ""

    def test_write_streams_same_text(self, fill_grid):
        """Test that write() streams the same text composite() returns."""
        buf = io.StringIO()
        write(fill_grid, FILL, buf)
        assert buf.getvalue() == composite(fill_grid, FILL)
