"""Segment-to-cell traversal: walks a screen-space segment across the character grid."""

from __future__ import annotations

import math
from typing import Iterator, NamedTuple, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from asciidraw.common import WalkerNonTerminationError
from asciidraw.geom import AdBox, GeomMath
from asciidraw.grid import AdGrid


class AdTouch(NamedTuple):
    """The path reaches screen point (x, y) while inside cell (col, row)."""

    col: int
    row: int
    x: float
    y: float


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


###############################################################################
# SegmentWalker
###############################################################################
class SegmentWalker:
    """
    Enumerates the cells a segment A -> B passes through, in order.

    For every cell left on the way a touch at the exact boundary crossing
    point is recorded, the last touch is B itself inside cell(B). A is not
    emitted, the caller already knows it.

    When the segment leaves a cell towards a diagonal neighbour, the corner
    shared by the candidate edges decides the order: its orientation relative
    to the directed line A -> B tells whether the line passes the vertical
    edge first, the horizontal edge first, or runs exactly through the corner
    (then both indices advance at once and the corner is the crossing point).

    The walker exclusively owns a preallocated scratch buffer; the touches of
    one walk stay valid until the next call to walk().
    """

    DEFAULT_MAX_STEPS: int = 1000

    def __init__(self, grid: AdGrid, max_steps: int = DEFAULT_MAX_STEPS):
        if max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {max_steps}")
        self._grid = grid
        self._max_steps = max_steps
        # rows of (col, row, x, y); one row per step plus the final touch at B
        self._buffer: NDArray[np.float64] = np.empty((max_steps + 1, 4), dtype=np.float64)

    @property
    def grid(self) -> AdGrid:
        """AdGrid: the grid this walker steps through."""
        return self._grid

    @property
    def max_steps(self) -> int:
        """int: iteration cap per segment."""
        return self._max_steps

    def walk(self, ax: float, ay: float, bx: float, by: float) -> int:
        """
        Walk the segment A -> B and store its touches in the scratch buffer.

        Args:
            ax, ay: start point A in screen space
            bx, by: end point B in screen space

        Returns:
            int: number of touches written, 0 for a zero-length segment

        Raises:
            WalkerNonTerminationError: if more than max_steps cell steps are needed
        """
        if ax == bx and ay == by:
            return 0

        grid = self._grid
        buffer = self._buffer
        dx = bx - ax
        dy = by - ay
        col, row = grid.screen_to_cell(ax, ay)
        target_col, target_row = grid.screen_to_cell(bx, by)

        count = 0
        while col != target_col or row != target_row:
            if count >= self._max_steps:
                raise WalkerNonTerminationError(
                    f"Segment ({ax}, {ay}) -> ({bx}, {by}) needs more than {self._max_steps} steps"
                )

            step_col = _sign(target_col - col)
            step_row = _sign(target_row - row)
            edge_x = grid.origin_x + (col + (1 if step_col > 0 else 0)) * grid.cell_width
            edge_y = grid.origin_y + (row + (1 if step_row > 0 else 0)) * grid.cell_height

            if step_col and step_row:
                turn = GeomMath.ccw((ax, ay), (bx, by), (edge_x, edge_y)) * step_col * step_row
                if turn > 0:
                    step_row = 0
                elif turn < 0:
                    step_col = 0

            if step_col and step_row:
                cross_x, cross_y = edge_x, edge_y
            elif step_col:
                cross_x = edge_x
                cross_y = ay + (edge_x - ax) * dy / dx if dx else ay
            else:
                cross_y = edge_y
                cross_x = ax + (edge_y - ay) * dx / dy if dy else ax

            buffer[count, 0] = col
            buffer[count, 1] = row
            buffer[count, 2] = cross_x
            buffer[count, 3] = cross_y
            count += 1

            col += step_col
            row += step_row

        buffer[count, 0] = col
        buffer[count, 1] = row
        buffer[count, 2] = bx
        buffer[count, 3] = by
        return count + 1

    def touches(self, count: int) -> Iterator[AdTouch]:
        """Yield the first _count_ touches of the last walk."""
        for col, row, x, y in self._buffer[:count].tolist():
            yield AdTouch(int(col), int(row), x, y)

    def walk_touches(self, ax: float, ay: float, bx: float, by: float) -> Tuple[AdTouch, ...]:
        """Walk A -> B and return a copy of its touches."""
        return tuple(self.touches(self.walk(ax, ay, bx, by)))


###############################################################################
# Clipping
###############################################################################
def clip_segment(
    box: AdBox, ax: float, ay: float, bx: float, by: float
) -> Optional[Tuple[float, float, float, float]]:
    """
    Clip the segment A -> B to _box_ (Liang-Barsky).

    End points inside the box are returned unchanged (bit-identical).

    Returns:
        Optional[Tuple[float, float, float, float]]: the clipped segment
        (ax, ay, bx, by) or None if it misses the box or is not finite
    """
    if not (math.isfinite(ax) and math.isfinite(ay) and math.isfinite(bx) and math.isfinite(by)):
        return None

    dx = bx - ax
    dy = by - ay
    if not (math.isfinite(dx) and math.isfinite(dy)):
        return None

    t_enter = 0.0
    t_leave = 1.0
    for p, q in (
        (-dx, ax - box.xmin),
        (dx, box.xmax - ax),
        (-dy, ay - box.ymin),
        (dy, box.ymax - ay),
    ):
        if p == 0:
            if q < 0:
                return None
            continue
        ratio = q / p
        if p < 0:
            if ratio > t_leave:
                return None
            t_enter = max(t_enter, ratio)
        else:
            if ratio < t_enter:
                return None
            t_leave = min(t_leave, ratio)

    if t_enter > 0.0:
        cax, cay = _clamp_to_box(box, ax + t_enter * dx, ay + t_enter * dy)
    else:
        cax, cay = ax, ay
    if t_leave < 1.0:
        cbx, cby = _clamp_to_box(box, ax + t_leave * dx, ay + t_leave * dy)
    else:
        cbx, cby = bx, by
    return cax, cay, cbx, cby


def _clamp_to_box(box: AdBox, x: float, y: float) -> Tuple[float, float]:
    # cancellation with huge coordinates may land a clipped point off the box
    return min(max(x, box.xmin), box.xmax), min(max(y, box.ymin), box.ymax)
