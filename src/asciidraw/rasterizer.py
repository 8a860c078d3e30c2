"""Vector-to-character-grid rasterization of transformed polylines."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from asciidraw.accumulator import AdAccumulator
from asciidraw.common import DEFAULT_RASTER_CONFIG, RasterConfig, WalkerNonTerminationError
from asciidraw.geom import AdBox, AdTransform
from asciidraw.grid import AdGrid
from asciidraw.sampler import SubCellSampler
from asciidraw.walker import SegmentWalker, clip_segment

logger = logging.getLogger(__name__)


###############################################################################
# AdGeometry
###############################################################################
@dataclass
class AdGeometry:
    """
    Ordered vertices of a polyline in shape-local space.

    Attributes:
        _vertices: Array of 2D points (shape: n_points, 2), a private copy of the input
        closed: If True the last vertex connects back to the first one
    """

    _vertices: NDArray[np.float64]
    closed: bool = False

    def __init__(
        self,
        vertices: Optional[Union[Sequence[Tuple[float, float]], NDArray[np.float64]]] = None,
        closed: bool = False,
    ):
        """
        Initialize an AdGeometry from 2D points.

        Args:
            vertices: a sequence of (x, y), may be empty
            closed: True for a polygon outline
        """
        if vertices is None:
            arr = np.empty((0, 2), dtype=np.float64)
        else:
            arr = np.array(vertices, dtype=np.float64)
            if arr.size == 0:
                arr = np.empty((0, 2), dtype=np.float64)

        if arr.ndim != 2 or arr.shape[1] != 2:
            raise ValueError(f"vertices must have shape (n, 2), got {arr.shape}")

        arr.flags.writeable = False
        self._vertices = arr
        self.closed = bool(closed)

    @property
    def vertices(self) -> NDArray[np.float64]:
        """Read-only array of the vertices (shape: n_points, 2)."""
        return self._vertices

    def __len__(self) -> int:
        return self._vertices.shape[0]


###############################################################################
# Rasterizer
###############################################################################
class Rasterizer:
    """
    Rasterizes shape geometries into a frame's accumulator.

    For each segment of the screen-space polyline the walker enumerates the
    crossed cells, the sampler quantizes the touches to the sub-cell lattice
    and ORs the resulting placement bits into the accumulator. Anomalies
    never escape: degenerate input is skipped, cells outside the grid are
    dropped, a walk exceeding its iteration cap aborts only its segment.
    """

    def __init__(self, config: RasterConfig = DEFAULT_RASTER_CONFIG):
        self._config = config

    @property
    def config(self) -> RasterConfig:
        """RasterConfig: the configuration in use."""
        return self._config

    def screen_points(
        self, geometry: AdGeometry, shape_to_world: AdTransform, world_to_screen: AdTransform
    ) -> NDArray[np.float64]:
        """Return the geometry's vertices in screen space, closed polygons repeat their first vertex."""
        points = shape_to_world.compose(world_to_screen).apply_points(geometry.vertices)
        if geometry.closed and points.shape[0] > 2 and not np.array_equal(points[0], points[-1]):
            points = np.vstack((points, points[:1]))
        return points

    def walk_cap(self, grid: AdGrid) -> int:
        """
        Return the iteration cap per segment on _grid_.

        A segment clipped to the padded grid crosses at most cols + rows cells
        plus the padding on every side, the configured cap never cuts such a walk short.
        """
        padding = self._config.clip_padding_cells
        return max(self._config.max_walk_steps, grid.cols + grid.rows + 4 * padding + 2)

    def rasterize(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        geometry: AdGeometry,
        shape_to_world: AdTransform,
        world_to_screen: AdTransform,
        grid: AdGrid,
        accumulator: AdAccumulator,
        clip_bounds: Optional[AdBox] = None,
    ) -> None:
        """
        Rasterize one shape geometry into _accumulator_.

        Args:
            geometry: vertices in shape-local space
            shape_to_world: transform from shape-local to world space
            world_to_screen: camera transform from world to screen space
            grid: the frame's character grid
            accumulator: the frame's accumulator, updated in place
            clip_bounds: optional screen rectangle, nothing outside it is drawn
        """
        if len(geometry) < 2:
            return

        padding = self._config.clip_padding_cells
        clip_box = grid.bounds().grown(padding * grid.cell_width, padding * grid.cell_height)
        if clip_bounds is not None:
            narrowed = clip_box.intersection(clip_bounds)
            if narrowed is None:
                return
            clip_box = narrowed

        points = self.screen_points(geometry, shape_to_world, world_to_screen)
        if (points[1:] == points[:-1]).all():
            return

        walker = SegmentWalker(grid, self.walk_cap(grid))
        sampler = SubCellSampler(grid, accumulator, self._config.corner_smoothing, geometry.closed)

        coords = points.tolist()
        for index in range(len(coords) - 1):
            ax, ay = coords[index]
            bx, by = coords[index + 1]

            clipped = clip_segment(clip_box, ax, ay, bx, by)
            if clipped is None:
                sampler.interrupt()
                continue
            cax, cay, cbx, cby = clipped
            if index == 0 and cax == ax and cay == ay:
                sampler.begin(cax, cay)
            elif not sampler.active or cax != ax or cay != ay:
                sampler.restart(cax, cay)

            try:
                count = walker.walk(cax, cay, cbx, cby)
            except WalkerNonTerminationError as e:
                logger.warning("Segment %d aborted: %s", index, e)
                sampler.interrupt()
                continue

            for touch in walker.touches(count):
                sampler.touch(*touch)

            if cbx != bx or cby != by:
                sampler.interrupt()

        sampler.finish()


_DEFAULT_RASTERIZER = Rasterizer()


def rasterize(
    # pylint: disable=too-many-arguments,too-many-positional-arguments
    geometry: AdGeometry,
    shape_to_world: AdTransform,
    world_to_screen: AdTransform,
    grid: AdGrid,
    accumulator: AdAccumulator,
    clip_bounds: Optional[AdBox] = None,
) -> None:
    """Rasterize _geometry_ into _accumulator_ using the default configuration."""
    _DEFAULT_RASTERIZER.rasterize(geometry, shape_to_world, world_to_screen, grid, accumulator, clip_bounds)
