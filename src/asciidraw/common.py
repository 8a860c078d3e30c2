"""Central module containing constants, flags and definitions for character-grid rasterization."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Literal

###############################################################################
# Types
###############################################################################


AdShapeType = Literal[  # Type-Definition for shape records handed over by the host editor
    # freehand stroke, one or more segments of points
    "draw",
    # open polyline defined by ordered handle points
    "line",
    # straight arrow from start to end with an arrowhead
    "arrow",
    # geometric primitive (rectangle, ellipse, ...) inside its w/h bounds
    "geo",
    # closed polygon outline
    "polygon",
]


###############################################################################
# Enums and Consts
###############################################################################


class AdSubPosition(IntEnum):
    """The 9 lattice points of a cell's local 3x3 frame.

    The value is ``lx + 3 * ly`` with ``lx`` growing to the right and ``ly``
    growing downwards (screen space), both in ``0..2``.
    """

    TL = 0
    TM = 1
    TR = 2
    ML = 3
    C = 4
    MR = 5
    BL = 6
    BM = 7
    BR = 8

    @property
    def lx(self) -> int:
        """int: Local lattice column (0=left, 1=middle, 2=right)."""
        return self.value % 3

    @property
    def ly(self) -> int:
        """int: Local lattice row (0=top, 1=middle, 2=bottom)."""
        return self.value // 3

    @classmethod
    def from_local(cls, lx: int, ly: int) -> AdSubPosition:
        """Return the sub-position for the local lattice coordinates (lx, ly)."""
        return cls(lx + 3 * ly)


class AdCellBits(IntFlag):
    """Touch flags accumulated per cell.

    Directions are compass directions in screen space (north = up).
    BACK diagonals run top-left to bottom-right, FWD diagonals bottom-left to top-right.
    """

    NONE = 0
    # center to edge midpoint
    ARM_N = 1 << 0
    ARM_S = 1 << 1
    ARM_W = 1 << 2
    ARM_E = 1 << 3
    # center to corner
    ARM_NW = 1 << 4
    ARM_NE = 1 << 5
    ARM_SW = 1 << 6
    ARM_SE = 1 << 7
    # rounded corner between two adjacent edge midpoints
    ARC_NW = 1 << 8
    ARC_NE = 1 << 9
    ARC_SW = 1 << 10
    ARC_SE = 1 << 11
    # run along a cell edge
    EDGE_N = 1 << 12
    EDGE_S = 1 << 13
    EDGE_W = 1 << 14
    EDGE_E = 1 << 15
    # corner to a non-adjacent edge midpoint
    STEEP_BACK = 1 << 16
    STEEP_FWD = 1 << 17
    SHALLOW_BACK = 1 << 18
    SHALLOW_FWD = 1 << 19


ALL_BITS: int = (1 << 20) - 1

HORIZONTAL_MASK: int = AdCellBits.ARM_W | AdCellBits.ARM_E | AdCellBits.EDGE_N | AdCellBits.EDGE_S
VERTICAL_MASK: int = AdCellBits.ARM_N | AdCellBits.ARM_S | AdCellBits.EDGE_W | AdCellBits.EDGE_E
BACK_DIAGONAL_MASK: int = (
    AdCellBits.ARM_NW | AdCellBits.ARM_SE | AdCellBits.STEEP_BACK | AdCellBits.SHALLOW_BACK
)
FORWARD_DIAGONAL_MASK: int = (
    AdCellBits.ARM_NE | AdCellBits.ARM_SW | AdCellBits.STEEP_FWD | AdCellBits.SHALLOW_FWD
)
ARC_MASK: int = AdCellBits.ARC_NW | AdCellBits.ARC_NE | AdCellBits.ARC_SW | AdCellBits.ARC_SE


###############################################################################
# Errors
###############################################################################


class RasterError(Exception):
    """Base class for anomalies raised inside the rasterizer."""


class WalkerNonTerminationError(RasterError):
    """Raised when a segment walk exceeds its iteration cap."""


###############################################################################
# RasterConfig
###############################################################################


@dataclass(frozen=True)
class RasterConfig:
    """Tunable parameters of the rasterizer and its per-frame caller.

    Attributes:
        max_walk_steps: Cap of cell steps per segment, raised where the grid needs longer walks.
        corner_smoothing: Max distance (in cell units) of intermediate lattice points
            from the entry/exit chord for a run to collapse into one placement. 0 disables.
        clip_padding_cells: Cells added around the grid bounds before clipping segments.
        metrics_refresh_interval: Seconds until cached cell metrics are considered stale.
        font_size: Font size in pixels used to measure the cell metrics.
        probe_char: Character whose advance width defines the cell width.
    """

    max_walk_steps: int = 1000
    corner_smoothing: float = 0.4
    clip_padding_cells: int = 1
    metrics_refresh_interval: float = 4.0
    font_size: float = 16.0
    probe_char: str = "M"

    def __post_init__(self):
        if self.max_walk_steps < 1:
            raise ValueError(f"max_walk_steps must be at least 1, got {self.max_walk_steps}")
        if self.corner_smoothing < 0:
            raise ValueError(f"corner_smoothing must not be negative, got {self.corner_smoothing}")
        if self.clip_padding_cells < 0:
            raise ValueError(f"clip_padding_cells must not be negative, got {self.clip_padding_cells}")
        if self.metrics_refresh_interval <= 0:
            raise ValueError(f"metrics_refresh_interval must be positive, got {self.metrics_refresh_interval}")
        if self.font_size <= 0:
            raise ValueError(f"font_size must be positive, got {self.font_size}")
        if len(self.probe_char) != 1:
            raise ValueError(f"probe_char must be a single character, got '{self.probe_char}'")

    def to_dict(self) -> dict:
        """Convert config to a dictionary for serialization."""
        return {
            "max_walk_steps": self.max_walk_steps,
            "corner_smoothing": self.corner_smoothing,
            "clip_padding_cells": self.clip_padding_cells,
            "metrics_refresh_interval": self.metrics_refresh_interval,
            "font_size": self.font_size,
            "probe_char": self.probe_char,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RasterConfig:
        """Create RasterConfig from a dictionary, missing keys take the defaults."""
        return cls(
            max_walk_steps=data.get("max_walk_steps", 1000),
            corner_smoothing=data.get("corner_smoothing", 0.4),
            clip_padding_cells=data.get("clip_padding_cells", 1),
            metrics_refresh_interval=data.get("metrics_refresh_interval", 4.0),
            font_size=data.get("font_size", 16.0),
            probe_char=data.get("probe_char", "M"),
        )


# Config presets
DEFAULT_RASTER_CONFIG = RasterConfig()

UNSMOOTHED_RASTER_CONFIG = RasterConfig(corner_smoothing=0.0)
