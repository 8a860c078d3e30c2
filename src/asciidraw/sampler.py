"""Sub-cell sampling: quantizes touches to a 2x lattice and composites placement bits per cell."""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional, Tuple

from asciidraw.accumulator import AdAccumulator
from asciidraw.common import AdCellBits, AdSubPosition
from asciidraw.grid import AdGrid

_P = AdSubPosition
_B = AdCellBits


def _pair(first: AdSubPosition, second: AdSubPosition) -> FrozenSet[AdSubPosition]:
    return frozenset((first, second))


# Every unordered pair of distinct lattice points of a cell and the region of the cell it covers.
PLACEMENT_BITS: Mapping[FrozenSet[AdSubPosition], AdCellBits] = MappingProxyType(
    {
        # center to edge midpoints
        _pair(_P.C, _P.TM): _B.ARM_N,
        _pair(_P.C, _P.BM): _B.ARM_S,
        _pair(_P.C, _P.ML): _B.ARM_W,
        _pair(_P.C, _P.MR): _B.ARM_E,
        # center to corners
        _pair(_P.C, _P.TL): _B.ARM_NW,
        _pair(_P.C, _P.TR): _B.ARM_NE,
        _pair(_P.C, _P.BL): _B.ARM_SW,
        _pair(_P.C, _P.BR): _B.ARM_SE,
        # straight through the center
        _pair(_P.ML, _P.MR): _B.ARM_W | _B.ARM_E,
        _pair(_P.TM, _P.BM): _B.ARM_N | _B.ARM_S,
        _pair(_P.TL, _P.BR): _B.ARM_NW | _B.ARM_SE,
        _pair(_P.TR, _P.BL): _B.ARM_NE | _B.ARM_SW,
        # adjacent edge midpoints
        _pair(_P.ML, _P.TM): _B.ARC_NW,
        _pair(_P.TM, _P.MR): _B.ARC_NE,
        _pair(_P.ML, _P.BM): _B.ARC_SW,
        _pair(_P.MR, _P.BM): _B.ARC_SE,
        # along the edges
        _pair(_P.TL, _P.TR): _B.EDGE_N,
        _pair(_P.TL, _P.TM): _B.EDGE_N,
        _pair(_P.TM, _P.TR): _B.EDGE_N,
        _pair(_P.BL, _P.BR): _B.EDGE_S,
        _pair(_P.BL, _P.BM): _B.EDGE_S,
        _pair(_P.BM, _P.BR): _B.EDGE_S,
        _pair(_P.TL, _P.BL): _B.EDGE_W,
        _pair(_P.TL, _P.ML): _B.EDGE_W,
        _pair(_P.ML, _P.BL): _B.EDGE_W,
        _pair(_P.TR, _P.BR): _B.EDGE_E,
        _pair(_P.TR, _P.MR): _B.EDGE_E,
        _pair(_P.MR, _P.BR): _B.EDGE_E,
        # corner to a non-adjacent edge midpoint
        _pair(_P.TL, _P.BM): _B.STEEP_BACK,
        _pair(_P.TM, _P.BR): _B.STEEP_BACK,
        _pair(_P.TR, _P.BM): _B.STEEP_FWD,
        _pair(_P.TM, _P.BL): _B.STEEP_FWD,
        _pair(_P.TL, _P.MR): _B.SHALLOW_BACK,
        _pair(_P.ML, _P.BR): _B.SHALLOW_BACK,
        _pair(_P.BL, _P.MR): _B.SHALLOW_FWD,
        _pair(_P.ML, _P.TR): _B.SHALLOW_FWD,
    }
)


def placement_bits(entry: AdSubPosition, exit_: AdSubPosition) -> AdCellBits:
    """Return the bits of the placement entry -> exit, NONE for identical positions."""
    if entry == exit_:
        return AdCellBits.NONE
    return PLACEMENT_BITS[_pair(entry, exit_)]


###############################################################################
# SubCellSampler
###############################################################################
class SubCellSampler:
    """
    Turns the touches of one shape into per-cell placement bits.

    Consecutive touches inside the same cell form a run of lattice
    positions. The first position of a run is the point where the path
    entered the cell (the previous touch, re-quantized in the new cell's
    frame), the following ones are vertices inside the cell and finally the
    exit crossing. Each pair of consecutive positions is a placement.

    Corner smoothing collapses a run into its single entry -> exit placement
    when all intermediate positions lie within _corner_smoothing_ cell units
    of that chord, so a polyline turning inside a cell is drawn as one
    rounded corner instead of two colliding arms.

    One sampler handles one shape: begin(), touch() for every walker touch,
    restart()/interrupt() where the path is broken, finish() at the end.
    """

    def __init__(
        self,
        grid: AdGrid,
        accumulator: AdAccumulator,
        corner_smoothing: float = 0.4,
        closed: bool = False,
    ):
        self._grid = grid
        self._accumulator = accumulator
        self._corner_smoothing = corner_smoothing

        self._cell: Optional[Tuple[int, int]] = None
        self._run: List[AdSubPosition] = []
        self._last_x = 0.0
        self._last_y = 0.0

        # first run of a closed path, joined with the last one in finish()
        self._first_cell: Optional[Tuple[int, int]] = None
        self._first_run: Optional[List[AdSubPosition]] = None
        self._first_pending = closed
        self._broken = False

    @property
    def active(self) -> bool:
        """bool: True while a run is open."""
        return self._cell is not None

    def quantize(self, col: int, row: int, x: float, y: float) -> AdSubPosition:
        """Return the lattice point of cell (col, row) nearest to the screen point (x, y)."""
        grid = self._grid
        cell_x, cell_y = grid.cell_origin(col, row)
        lx = math.floor((x - cell_x) / (grid.cell_width / 2) + 0.5)
        ly = math.floor((y - cell_y) / (grid.cell_height / 2) + 0.5)
        return AdSubPosition.from_local(min(2, max(0, lx)), min(2, max(0, ly)))

    def begin(self, x: float, y: float) -> None:
        """Open a run at the start point (x, y) of the path."""
        col, row = self._grid.screen_to_cell(x, y)
        self._cell = (col, row)
        self._run = [self.quantize(col, row, x, y)]
        self._last_x = x
        self._last_y = y

    def touch(self, col: int, row: int, x: float, y: float) -> None:
        """Record that the path reaches (x, y) inside cell (col, row)."""
        if self._cell is None:
            self.begin(x, y)
            return

        if (col, row) != self._cell:
            self._flush()
            self._cell = (col, row)
            self._run = [self.quantize(col, row, self._last_x, self._last_y)]

        position = self.quantize(col, row, x, y)
        if position != self._run[-1]:
            self._run.append(position)
        self._last_x = x
        self._last_y = y

    def interrupt(self) -> None:
        """Close the current run, the path continues elsewhere."""
        if self._cell is not None:
            self._flush()
        self._cell = None
        self._run = []
        self._broken = True

    def restart(self, x: float, y: float) -> None:
        """Close the current run and open a new one at (x, y)."""
        self.interrupt()
        self.begin(x, y)

    def finish(self) -> None:
        """Flush everything that is still pending."""
        if self._cell is not None:
            last_cell = self._cell
            last_run = self._run
            first_run = self._first_run
            if (
                first_run is not None
                and not self._broken
                and last_cell == self._first_cell
                and last_run[-1] == first_run[0]
            ):
                self._composite(last_cell, last_run + first_run[1:])
                self._first_run = None
            else:
                self._composite(last_cell, last_run)
        if self._first_run is not None:
            self._composite(self._first_cell, self._first_run)
        self._cell = None
        self._run = []
        self._first_run = None
        self._first_pending = False

    def _flush(self) -> None:
        if self._first_pending:
            self._first_pending = False
            self._first_cell = self._cell
            self._first_run = self._run
            return
        self._composite(self._cell, self._run)

    def _composite(self, cell: Tuple[int, int], run: List[AdSubPosition]) -> None:
        if len(run) < 2:
            return
        if len(run) > 2 and self._is_smoothable(run):
            run = [run[0], run[-1]]

        bits = 0
        for entry, exit_ in zip(run, run[1:]):
            bits |= placement_bits(entry, exit_)
        if bits:
            self._accumulator.add(cell[0], cell[1], bits)

    def _is_smoothable(self, run: List[AdSubPosition]) -> bool:
        """True if every intermediate position lies close enough to the entry -> exit chord."""
        if self._corner_smoothing <= 0:
            return False
        first, last = run[0], run[-1]
        if first == last:
            return False
        chord_x = last.lx - first.lx
        chord_y = last.ly - first.ly
        chord_length = math.hypot(chord_x, chord_y)
        for position in run[1:-1]:
            # lattice units are half cells
            distance = abs(chord_x * (position.ly - first.ly) - chord_y * (position.lx - first.lx)) / chord_length
            if distance / 2 > self._corner_smoothing:
                return False
        return True
