"""Per-frame cell bitmask store using a dense NumPy array."""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping, Optional, Tuple

import numpy as np
from numpy.typing import NDArray


class AdAccumulator:
    """Dense store of one bitmask per grid cell, valid for a single frame.

    Entries are indexed ``col + row * cols``. Writes OR-combine with the
    existing bits, so the result does not depend on the order shapes are
    added. Writes outside the grid are dropped silently since shapes
    extending past the viewport are normal.
    """

    _cols: int
    _rows: int
    _cells: NDArray[np.uint32]

    def __init__(self, cols: int, rows: int):
        """Initialize an empty accumulator.

        Args:
            cols: number of grid columns
            rows: number of grid rows
        """
        if cols < 0 or rows < 0:
            raise ValueError(f"Accumulator dimensions must not be negative, got ({cols}, {rows})")
        self._cols = int(cols)
        self._rows = int(rows)
        self._cells = np.zeros(self._cols * self._rows, dtype=np.uint32)

    @property
    def cols(self) -> int:
        """int: Number of columns."""
        return self._cols

    @property
    def rows(self) -> int:
        """int: Number of rows."""
        return self._rows

    @property
    def cells(self) -> NDArray[np.uint32]:
        """Read-only view of the bitmasks as array of shape (rows, cols)."""
        view = self._cells.reshape(self._rows, self._cols)
        view.flags.writeable = False
        return view

    @property
    def is_empty(self) -> bool:
        """bool: True if no cell holds any bit."""
        return not self._cells.any()

    def add(self, col: int, row: int, bits: int) -> bool:
        """OR _bits_ into cell (col, row).

        Returns:
            bool: False if the cell lies outside the grid and nothing was written
        """
        if not (0 <= col < self._cols and 0 <= row < self._rows):
            return False
        self._cells[col + row * self._cols] |= np.uint32(bits)
        return True

    def get(self, col: int, row: int) -> int:
        """Return the bits of cell (col, row), 0 outside the grid."""
        if not (0 <= col < self._cols and 0 <= row < self._rows):
            return 0
        return int(self._cells[col + row * self._cols])

    def populated(self) -> Iterator[Tuple[int, int, int]]:
        """Yield (col, row, bits) for every non-empty cell in index order."""
        for index in np.flatnonzero(self._cells).tolist():
            row, col = divmod(index, self._cols)
            yield col, row, int(self._cells[index])

    def bitmask_dict(self) -> Dict[Tuple[int, int], int]:
        """Return {(col, row): bits} of all non-empty cells."""
        return {(col, row): bits for col, row, bits in self.populated()}

    def resolve(self, resolve_func: Callable[[int], Optional[str]]) -> Mapping[Tuple[int, int], str]:
        """Flush pass: resolve every populated cell once.

        Args:
            resolve_func: maps a bitmask to a glyph or None

        Returns:
            Mapping[Tuple[int, int], str]: read-only {(col, row): glyph}, cells without glyph left out
        """
        glyphs: Dict[Tuple[int, int], str] = {}
        for col, row, bits in self.populated():
            glyph = resolve_func(bits)
            if glyph is not None:
                glyphs[(col, row)] = glyph
        return MappingProxyType(glyphs)

    def clear(self) -> None:
        """Reset every cell to 0."""
        self._cells.fill(0)

    def __str__(self):
        """Returns a string representation of the AdAccumulator instance."""
        return f"AdAccumulator(cols={self._cols}, rows={self._rows}, populated={np.count_nonzero(self._cells)})"
