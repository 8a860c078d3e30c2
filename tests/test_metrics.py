"""Test module for asciidraw.metrics

The tests are run using pytest.
These tests measure a small monospace font built with fontTools'
FontBuilder and check the refresh policy of CellMetricsCache.
"""

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from asciidraw.metrics import AdCellMetrics, CellMetricsCache, FontMetricsHelper


def _box_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((550, 700))
    pen.lineTo((550, 0))
    pen.closePath()
    return pen.glyph()


@pytest.fixture
def font_builder():
    """A monospace test font: 1000 units per em, 600 advance, line height 1000 + 100 gap."""
    glyph_order = [".notdef", "M", "space"]
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap({ord("M"): "M", ord(" "): "space"})
    fb.setupGlyf({".notdef": _box_glyph(), "M": _box_glyph(), "space": TTGlyphPen(None).glyph()})
    fb.setupHorizontalMetrics({name: (600, 0) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200, lineGap=100)
    fb.setupNameTable({"familyName": "CellTest", "styleName": "Regular"})
    fb.setupOS2(sTypoAscender=800, usWinAscent=800, usWinDescent=200)
    fb.setupPost()
    return fb


###############################################################################
# AdCellMetrics Tests
###############################################################################


class TestAdCellMetrics:
    """Test class for AdCellMetrics."""

    def test_dict_roundtrip(self):
        """Test to_dict/from_dict."""
        metrics = AdCellMetrics(9.6, 19.2)

        assert metrics.to_dict() == {"font_width": 9.6, "font_height": 19.2}
        assert AdCellMetrics.from_dict(metrics.to_dict()) == metrics

    @pytest.mark.parametrize("width, height", [(0.0, 10.0), (10.0, -1.0), (float("nan"), 10.0)])
    def test_invalid(self, width, height):
        """Test that non-positive metrics are rejected."""
        with pytest.raises(ValueError, match="Cell metrics must be positive"):
            AdCellMetrics(width, height)


###############################################################################
# FontMetricsHelper Tests
###############################################################################


class TestFontMetricsHelper:
    """Test class for FontMetricsHelper."""

    def test_cell_metrics(self, font_builder):
        """Test advance width and line height scaled to the font size."""
        metrics = FontMetricsHelper.cell_metrics(font_builder.font, 20.0)

        assert metrics.font_width == pytest.approx(12.0)
        assert metrics.font_height == pytest.approx(22.0)

    def test_other_probe_char(self, font_builder):
        """Test measuring with the space character."""
        metrics = FontMetricsHelper.cell_metrics(font_builder.font, 10.0, probe_char=" ")

        assert metrics.font_width == pytest.approx(6.0)

    def test_missing_probe_char(self, font_builder):
        """Test that a character without glyph is reported."""
        with pytest.raises(ValueError, match="Font has no glyph for probe character 'W'"):
            FontMetricsHelper.cell_metrics(font_builder.font, 20.0, probe_char="W")

    def test_from_file(self, font_builder, tmp_path):
        """Test loading the font from a file."""
        filename = tmp_path / "cell_test.ttf"
        font_builder.save(str(filename))

        metrics = FontMetricsHelper.cell_metrics_from_file(filename, 16.0)

        assert metrics.font_width == pytest.approx(9.6)
        assert metrics.font_height == pytest.approx(17.6)


###############################################################################
# CellMetricsCache Tests
###############################################################################


class FakeClock:
    """Manually advanced clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestCellMetricsCache:
    """Test class for CellMetricsCache."""

    @pytest.fixture
    def clock(self):
        """A clock starting at 0."""
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        """A cache measuring ever growing metrics, refreshed every 4 seconds."""
        results = iter(AdCellMetrics(10.0 + i, 20.0) for i in range(100))
        return CellMetricsCache(lambda: next(results), refresh_interval=4.0, clock=clock)

    def test_first_get_measures(self, cache):
        """Test the initial measurement."""
        assert cache.get((800, 600)) == AdCellMetrics(10.0, 20.0)
        assert cache.measure_count == 1

    def test_cached_within_interval(self, cache, clock):
        """Test that the same viewport size reuses the metrics."""
        cache.get((800, 600))
        clock.now = 3.9

        assert cache.get((800, 600)).font_width == 10.0
        assert cache.measure_count == 1

    def test_refresh_after_interval(self, cache, clock):
        """Test that stale metrics are measured again."""
        cache.get((800, 600))
        clock.now = 4.0

        assert cache.get((800, 600)).font_width == 11.0
        assert cache.measure_count == 2

    def test_refresh_on_resize(self, cache, clock):
        """Test that a new viewport size triggers a measurement."""
        cache.get((800, 600))
        clock.now = 1.0

        assert cache.get((1024, 600)).font_width == 11.0
        assert cache.measure_count == 2

    def test_invalidate(self, cache):
        """Test forcing a measurement."""
        cache.get((800, 600))
        cache.invalidate()

        assert cache.get((800, 600)).font_width == 11.0

    def test_invalid_interval(self):
        """Test that the interval must be positive."""
        with pytest.raises(ValueError, match="refresh_interval must be positive"):
            CellMetricsCache(lambda: AdCellMetrics(1.0, 1.0), refresh_interval=0.0)
