"""Character cell metrics: measurement from fonts and the per-viewport refresh policy."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from fontTools.ttLib import TTFont


###############################################################################
# AdCellMetrics
###############################################################################
@dataclass(frozen=True)
class AdCellMetrics:
    """
    Size of one character cell in world-independent pixels.

    Attributes:
        font_width: advance width of one monospace character
        font_height: line height (ascender - descender + line_gap)
    """

    font_width: float
    font_height: float

    def __post_init__(self):
        if not (self.font_width > 0 and self.font_height > 0):
            raise ValueError(f"Cell metrics must be positive, got ({self.font_width}, {self.font_height})")

    def to_dict(self) -> dict:
        """Convert the metrics to a dictionary."""
        return {"font_width": self.font_width, "font_height": self.font_height}

    @classmethod
    def from_dict(cls, data: dict) -> AdCellMetrics:
        """Create AdCellMetrics from a dictionary."""
        return cls(font_width=data["font_width"], font_height=data["font_height"])


###############################################################################
# FontMetricsHelper
###############################################################################
class FontMetricsHelper:
    """
    Class to provide static methods measuring character cells with fontTools.
    """

    @staticmethod
    def cell_metrics(ttfont: TTFont, font_size: float, probe_char: str = "M") -> AdCellMetrics:
        """
        Measure the character cell of a (monospace) font at the given size.

        The cell width is the advance width of _probe_char_, the cell height
        the font's line height from the hhea table, both scaled from font
        units to pixels by font_size / unitsPerEm.

        Args:
            ttfont (TTFont): the font to measure
            font_size (float): font size in pixels
            probe_char (str, optional): character defining the advance width. Defaults to "M".

        Returns:
            AdCellMetrics: the measured cell size
        """
        cmap = ttfont.getBestCmap()
        if cmap is None or ord(probe_char) not in cmap:
            raise ValueError(f"Font has no glyph for probe character '{probe_char}'")

        glyph_name = cmap[ord(probe_char)]
        advance_width, _ = ttfont["hmtx"][glyph_name]  # type: ignore
        hhea = ttfont["hhea"]
        line_height = float(hhea.ascender) - float(hhea.descender) + float(hhea.lineGap)  # type: ignore
        scale = font_size / float(ttfont["head"].unitsPerEm)  # type: ignore

        return AdCellMetrics(font_width=advance_width * scale, font_height=line_height * scale)

    @staticmethod
    def cell_metrics_from_file(
        filename: Union[str, Path], font_size: float, probe_char: str = "M"
    ) -> AdCellMetrics:
        """Load the font at _filename_ and measure its character cell."""
        with TTFont(filename) as ttfont:
            return FontMetricsHelper.cell_metrics(ttfont, font_size, probe_char)


###############################################################################
# CellMetricsCache
###############################################################################
class CellMetricsCache:
    """
    Caches cell metrics between frames.

    Measuring needs a font or layout query, so the result is kept until the
    viewport size changes or _refresh_interval_ seconds have passed.
    """

    def __init__(
        self,
        measure: Callable[[], AdCellMetrics],
        refresh_interval: float = 4.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if refresh_interval <= 0:
            raise ValueError(f"refresh_interval must be positive, got {refresh_interval}")
        self._measure = measure
        self._refresh_interval = refresh_interval
        self._clock = clock
        self._metrics: Optional[AdCellMetrics] = None
        self._viewport_size: Optional[Tuple[float, float]] = None
        self._measured_at = 0.0
        self._measure_count = 0

    @property
    def measure_count(self) -> int:
        """int: how often the metrics have been measured."""
        return self._measure_count

    def get(self, viewport_size: Tuple[float, float]) -> AdCellMetrics:
        """Return the metrics for a viewport of the given size, re-measuring if stale."""
        now = self._clock()
        if (
            self._metrics is None
            or viewport_size != self._viewport_size
            or now - self._measured_at >= self._refresh_interval
        ):
            self._metrics = self._measure()
            self._viewport_size = viewport_size
            self._measured_at = now
            self._measure_count += 1
        return self._metrics

    def invalidate(self) -> None:
        """Force a re-measurement on the next get()."""
        self._metrics = None
