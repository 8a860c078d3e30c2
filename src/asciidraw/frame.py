"""One render frame: grid, accumulator, shape pass and flush pass."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Tuple

from asciidraw.accumulator import AdAccumulator
from asciidraw.common import DEFAULT_RASTER_CONFIG, RasterConfig
from asciidraw.geom import AdBox, AdTransform
from asciidraw.glyphs import GlyphResolver
from asciidraw.grid import AdGrid, GridMapper
from asciidraw.metrics import AdCellMetrics
from asciidraw.rasterizer import Rasterizer
from asciidraw.shapes import AdShape, ShapeGeometryProvider

logger = logging.getLogger(__name__)


class AdFrame:
    """
    A single render tick of the character canvas.

    The grid and the accumulator live exactly as long as the frame. Shapes
    are added one after the other, then flush() resolves every populated
    cell once. Dropping the frame needs no cleanup.
    """

    def __init__(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        viewport: AdBox,
        zoom: float,
        metrics: AdCellMetrics,
        config: RasterConfig = DEFAULT_RASTER_CONFIG,
        provider: Optional[ShapeGeometryProvider] = None,
    ):
        """
        Create the frame for the given camera state.

        Args:
            viewport (AdBox): visible world rectangle, its top-left corner is screen (0, 0)
            zoom (float): world-to-screen scale factor
            metrics (AdCellMetrics): character cell size
            config (RasterConfig, optional): rasterizer configuration
            provider (ShapeGeometryProvider, optional): converts shapes into geometries
        """
        self._viewport = viewport
        self._camera = AdTransform.from_camera(-viewport.xmin, -viewport.ymin, zoom)
        self._grid = GridMapper.from_viewport(viewport, zoom, metrics.font_width, metrics.font_height)
        self._accumulator = AdAccumulator(self._grid.cols, self._grid.rows)
        self._rasterizer = Rasterizer(config)
        self._provider = provider if provider is not None else ShapeGeometryProvider()
        self._shape_count = 0

    @property
    def grid(self) -> AdGrid:
        """AdGrid: the frame's character grid."""
        return self._grid

    @property
    def camera(self) -> AdTransform:
        """AdTransform: the world-to-screen transform."""
        return self._camera

    @property
    def accumulator(self) -> AdAccumulator:
        """AdAccumulator: the frame's cell bitmasks."""
        return self._accumulator

    @property
    def shape_count(self) -> int:
        """int: number of shapes rasterized so far."""
        return self._shape_count

    def add_shape(self, shape: AdShape) -> bool:
        """
        Rasterize all geometries of _shape_, clipped to its mask if it has one.

        Returns:
            bool: False if the shape type does not take part in rasterization
        """
        if not shape.participates:
            return False
        clip_bounds = shape.mask.transformed_bounds(self._camera) if shape.mask is not None else None
        for geometry in self._provider.geometries(shape):
            self._rasterizer.rasterize(
                geometry, shape.transform, self._camera, self._grid, self._accumulator, clip_bounds
            )
        self._shape_count += 1
        return True

    def add_shapes(self, shapes: Iterable[AdShape]) -> int:
        """Rasterize _shapes_ in order, returns the number of shapes that took part."""
        return sum(1 for shape in shapes if self.add_shape(shape))

    def flush(self) -> Mapping[Tuple[int, int], str]:
        """Resolve every populated cell, returns the read-only {(col, row): glyph} map."""
        glyphs = self._accumulator.resolve(GlyphResolver.resolve)
        logger.debug("Frame flushed: %d shapes, %d glyphs", self._shape_count, len(glyphs))
        return glyphs

    def to_text(self, glyphs: Optional[Mapping[Tuple[int, int], str]] = None) -> str:
        """
        Render the glyph map as text, one line per grid row.

        Blank cells become spaces, trailing spaces and trailing empty lines are stripped.
        """
        if glyphs is None:
            glyphs = self.flush()
        lines = []
        for row in range(self._grid.rows):
            line = "".join(glyphs.get((col, row), " ") for col in range(self._grid.cols))
            lines.append(line.rstrip())
        return "\n".join(lines).rstrip("\n")


def main():
    """Print a small scene rendered as text."""
    frame = AdFrame(AdBox(0, 0, 400, 200), 1.0, AdCellMetrics(10.0, 20.0))
    frame.add_shapes(
        [
            AdShape("box", "geo", AdTransform.translation(20, 20), {"geo": "rectangle", "w": 160, "h": 100}),
            AdShape("ellipse", "geo", AdTransform.translation(220, 20), {"geo": "ellipse", "w": 140, "h": 120}),
            AdShape("arrow", "arrow", props={"start": (100, 170), "end": (300, 150)}),
            AdShape("photo", "image", props={"w": 50, "h": 50}),
        ]
    )
    print(frame.to_text())


if __name__ == "__main__":
    main()
