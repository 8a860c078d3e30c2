"""SVG page painting a flushed glyph map as monospace text."""

from __future__ import annotations

import copy
import gzip
import io
from dataclasses import dataclass
from typing import Mapping, Tuple

import svgwrite
import svgwrite.container

from asciidraw.grid import AdGrid


@dataclass
class AdTextPage:
    """A page (canvas) described by SVG showing the glyphs of one frame.

    The page covers the screen rectangle of the grid, so grid cells keep
    their screen coordinates. Contains groups/layers:
        - glyphs  -- one <text> element per populated cell
        - debug   -- cell outlines of populated cells, only saved on request
    """

    drawing: svgwrite.Drawing
    glyph_layer: svgwrite.container.Group
    debug_layer: svgwrite.container.Group

    def __init__(
        self,
        grid: AdGrid,
        font_family: str = "monospace",
        fill: str = "black",
    ):
        """
        Initialize the page for the given grid.

        Args:
            grid (AdGrid): the grid the glyphs were resolved on
            font_family (str, optional): CSS font family. Defaults to "monospace".
            fill (str, optional): glyph color. Defaults to "black".
        """
        self._grid = grid
        bounds = grid.bounds()

        # profile="full" to support numbers with more than 4 decimal digits
        self.drawing = svgwrite.Drawing(
            size=(f"{bounds.width}px", f"{bounds.height}px"),
            viewBox=f"{bounds.xmin} {bounds.ymin} {bounds.width} {bounds.height}",
            profile="full",
        )
        self.glyph_layer = self.drawing.g(
            id="glyphs",
            font_family=font_family,
            font_size=grid.cell_height,
            fill=fill,
        )
        self.debug_layer = self.drawing.g(id="debug", fill="none", stroke="red", stroke_width=0.5)

    def add_glyphs(self, glyphs: Mapping[Tuple[int, int], str]) -> int:
        """Add one text element per glyph, placed on its cell. Returns the number of elements."""
        grid = self._grid
        for (col, row), glyph in sorted(glyphs.items(), key=lambda item: (item[0][1], item[0][0])):
            x, y = grid.cell_origin(col, row)
            self.glyph_layer.add(
                self.drawing.text(
                    glyph,
                    insert=(x + grid.cell_width / 2, y + grid.cell_height / 2),
                    text_anchor="middle",
                    dominant_baseline="central",
                )
            )
            self.debug_layer.add(self.drawing.rect(insert=(x, y), size=(grid.cell_width, grid.cell_height)))
        return len(glyphs)

    def tostring(self, include_debug_layer: bool = False) -> str:
        """Return the SVG document as string."""
        return self._assemble(include_debug_layer).tostring()

    def save_as(
        self,
        filename: str,
        include_debug_layer: bool = False,
        pretty: bool = False,
        indent: int = 2,
        compressed: bool = False,
    ):
        """Save as SVG file

        Args:
            filename (str): path and filename
            include_debug_layer (bool, optional): True if file should contain debug_layer. Defaults to False.
            pretty (bool, optional): True for easy readable output. Defaults to False.
            indent (int, optional): Indention if pretty is enabled. Defaults to 2 spaces.
            compressed (bool, optional): Save as compressed svgz-file. Defaults to False.
        """
        drawing_for_save = self._assemble(include_debug_layer)

        # setup IO:
        svg_buffer = io.StringIO()
        drawing_for_save.write(svg_buffer, pretty=pretty, indent=indent)
        output_data = svg_buffer.getvalue().encode("utf-8")
        if compressed:
            output_data = gzip.compress(output_data)

        # save file:
        with open(filename, "wb") as svg_file:
            svg_file.write(output_data)

    def _assemble(self, include_debug_layer: bool) -> svgwrite.Drawing:
        """Return a copy of the drawing holding the layers, the page itself stays reusable."""
        drawing = copy.deepcopy(self.drawing)
        if include_debug_layer:
            drawing.add(copy.deepcopy(self.debug_layer))
        drawing.add(copy.deepcopy(self.glyph_layer))
        return drawing
