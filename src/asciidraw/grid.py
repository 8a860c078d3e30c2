"""Character grid geometry: cell size, origin, dimensions and screen-to-cell mapping."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from asciidraw.geom import AdBox


###############################################################################
# AdGrid
###############################################################################
@dataclass(frozen=True)
class AdGrid:
    """
    Uniform character grid in screen space.

    Attributes:
        cell_width (float): Width of one cell in screen pixels.
        cell_height (float): Height of one cell in screen pixels.
        origin_x (float): Screen x of the top-left corner of cell (0, 0).
        origin_y (float): Screen y of the top-left corner of cell (0, 0).
        cols (int): Number of columns.
        rows (int): Number of rows.
    """

    cell_width: float
    cell_height: float
    origin_x: float = 0.0
    origin_y: float = 0.0
    cols: int = 0
    rows: int = 0

    def __post_init__(self):
        if not (self.cell_width > 0 and self.cell_height > 0):
            raise ValueError(f"Cell size must be positive, got ({self.cell_width}, {self.cell_height})")
        if not (math.isfinite(self.cell_width) and math.isfinite(self.cell_height)):
            raise ValueError(f"Cell size must be finite, got ({self.cell_width}, {self.cell_height})")
        if not (math.isfinite(self.origin_x) and math.isfinite(self.origin_y)):
            raise ValueError(f"Grid origin must be finite, got ({self.origin_x}, {self.origin_y})")
        if self.cols < 0 or self.rows < 0:
            raise ValueError(f"Grid dimensions must not be negative, got ({self.cols}, {self.rows})")

    @property
    def dimensions(self) -> Tuple[int, int]:
        """Tuple[int, int]: (cols, rows)"""
        return self.cols, self.rows

    @property
    def cell_size(self) -> Tuple[float, float]:
        """Tuple[float, float]: (cell_width, cell_height)"""
        return self.cell_width, self.cell_height

    def screen_to_cell_fractional(self, x: float, y: float) -> Tuple[float, float]:
        """Return the fractional cell coordinates of the screen point (x, y)."""
        return (x - self.origin_x) / self.cell_width, (y - self.origin_y) / self.cell_height

    def screen_to_cell(self, x: float, y: float) -> Tuple[int, int]:
        """Return the (col, row) of the cell containing the screen point (x, y).

        Points on a shared edge belong to the cell right of / below that edge.
        The result may lie outside the grid, use contains() to check.
        """
        fx, fy = self.screen_to_cell_fractional(x, y)
        return math.floor(fx), math.floor(fy)

    def cell_origin(self, col: int, row: int) -> Tuple[float, float]:
        """Return the screen position of the top-left corner of cell (col, row)."""
        return self.origin_x + col * self.cell_width, self.origin_y + row * self.cell_height

    def contains(self, col: int, row: int) -> bool:
        """True if (col, row) addresses a cell of this grid."""
        return 0 <= col < self.cols and 0 <= row < self.rows

    def bounds(self) -> AdBox:
        """Return the screen rectangle covered by all cells."""
        return AdBox(
            xmin=self.origin_x,
            ymin=self.origin_y,
            xmax=self.origin_x + self.cols * self.cell_width,
            ymax=self.origin_y + self.rows * self.cell_height,
        )


###############################################################################
# GridMapper
###############################################################################
class GridMapper:
    """Static helpers deriving a frame's grid from the viewport and character metrics."""

    @staticmethod
    def from_viewport(viewport: AdBox, zoom: float, font_width: float, font_height: float) -> AdGrid:
        """
        Derive the grid for the given viewport.

        The viewport is the visible world rectangle, its top-left corner is
        screen (0, 0). Cells are font_width x font_height world units, i.e.
        font_width*zoom x font_height*zoom screen pixels. The grid starts one
        cell before the viewport and stays aligned to world multiples of the
        cell size, so panning by fractions of a cell does not shift the
        character raster. Two extra rows and columns make up for the cell
        before the viewport and for the remainder, so the grid covers the whole
        screen viewport at any pan offset.

        Args:
            viewport (AdBox): visible world rectangle
            zoom (float): world-to-screen scale factor
            font_width (float): character advance width in world-independent pixels
            font_height (float): character line height in world-independent pixels

        Returns:
            AdGrid: the grid in screen space
        """
        if not (zoom > 0 and math.isfinite(zoom)):
            raise ValueError(f"zoom must be positive and finite, got {zoom}")
        if not (font_width > 0 and font_height > 0):
            raise ValueError(f"Font cell size must be positive, got ({font_width}, {font_height})")

        cols = math.ceil(viewport.width / font_width) + 2
        rows = math.ceil(viewport.height / font_height) + 2

        # one cell backward plus the remainder of the viewport position
        origin_x = -((viewport.xmin % font_width) + font_width) * zoom
        origin_y = -((viewport.ymin % font_height) + font_height) * zoom

        return AdGrid(
            cell_width=font_width * zoom,
            cell_height=font_height * zoom,
            origin_x=origin_x,
            origin_y=origin_y,
            cols=cols,
            rows=rows,
        )

    @staticmethod
    def world_cell_offset(viewport: AdBox, font_width: float, font_height: float) -> Tuple[int, int]:
        """
        Return the world cell index of grid cell (0, 0).

        Adding this offset to a grid (col, row) gives a cell index that does
        not change while the camera pans.
        """
        return (
            math.floor(viewport.xmin / font_width) - 1,
            math.floor(viewport.ymin / font_height) - 1,
        )
