"""Test module for asciidraw.shapes

The tests are run using pytest.
These tests cover which shape records take part in rasterization and
the polylines ShapeGeometryProvider derives from them.
"""

import math

import pytest

from asciidraw.geom import AdTransform
from asciidraw.shapes import EXCLUDED_SHAPE_TYPES, RASTERIZED_SHAPE_TYPES, AdShape, ShapeGeometryProvider


@pytest.fixture
def provider():
    """The default geometry provider."""
    return ShapeGeometryProvider()


###############################################################################
# AdShape Tests
###############################################################################


class TestAdShape:
    """Test class for AdShape."""

    def test_defaults(self):
        """Test the default transform and props."""
        shape = AdShape("s1", "line")

        assert shape.transform == AdTransform.identity()
        assert shape.props == {}
        assert shape.mask is None

    @pytest.mark.parametrize("shape_type", sorted(RASTERIZED_SHAPE_TYPES))
    def test_participates(self, shape_type):
        """Test that line art shapes are rasterized."""
        assert AdShape("s", shape_type).participates

    @pytest.mark.parametrize("shape_type", sorted(EXCLUDED_SHAPE_TYPES))
    def test_excluded(self, shape_type, provider):
        """Test that container and media shapes never produce geometry."""
        shape = AdShape("s", shape_type, props={"w": 100, "h": 100, "points": [(0, 0), (10, 10)]})

        assert not shape.participates
        assert provider.geometries(shape) == []

    def test_unknown_type(self, provider):
        """Test that an unknown shape type is skipped."""
        assert provider.geometries(AdShape("s", "sticker")) == []


###############################################################################
# ShapeGeometryProvider Tests
###############################################################################


class TestShapeGeometryProvider:
    """Test class for ShapeGeometryProvider."""

    def test_line(self, provider):
        """Test an open polyline from handle points given as dicts."""
        shape = AdShape("l", "line", props={"points": [{"x": 0, "y": 0}, {"x": 10, "y": 5}, {"x": 20, "y": 0}]})

        (geometry,) = provider.geometries(shape)

        assert not geometry.closed
        assert geometry.vertices.tolist() == [[0.0, 0.0], [10.0, 5.0], [20.0, 0.0]]

    def test_polygon(self, provider):
        """Test that polygons are closed."""
        shape = AdShape("p", "polygon", props={"points": [(0, 0), (10, 0), (5, 8)]})

        (geometry,) = provider.geometries(shape)

        assert geometry.closed
        assert len(geometry) == 3

    def test_draw_segments(self, provider):
        """Test freehand and straight segments of a draw shape."""
        shape = AdShape(
            "d",
            "draw",
            props={
                "segments": [
                    {"type": "free", "points": [(0, 0), (1, 2), (3, 3)]},
                    {"type": "straight", "points": [(3, 3), (10, 3), (99, 99)]},
                    {"type": "free", "points": []},
                ],
                "is_closed": False,
            },
        )

        geometries = provider.geometries(shape)

        assert [len(geometry) for geometry in geometries] == [3, 2]
        assert geometries[1].vertices.tolist() == [[3.0, 3.0], [10.0, 3.0]]
        assert not any(geometry.closed for geometry in geometries)

    def test_draw_closed(self, provider):
        """Test the closed flag of a draw shape."""
        shape = AdShape("d", "draw", props={"segments": [{"points": [(0, 0), (5, 0), (0, 5)]}], "is_closed": True})

        (geometry,) = provider.geometries(shape)

        assert geometry.closed

    def test_arrow(self, provider):
        """Test the shaft and the arrowhead of an arrow."""
        shape = AdShape("a", "arrow", props={"start": (0, 0), "end": (100, 0)})

        shaft, head = provider.geometries(shape)

        assert shaft.vertices.tolist() == [[0.0, 0.0], [100.0, 0.0]]
        left, tip, right = head.vertices.tolist()
        assert tip == [100.0, 0.0]
        wing_x = 100.0 - 12.0 * math.cos(math.pi / 6)
        assert left == pytest.approx([wing_x, 6.0])
        assert right == pytest.approx([wing_x, -6.0])

    def test_arrow_without_length(self, provider):
        """Test that a zero-length arrow has no arrowhead."""
        geometries = provider.geometries(AdShape("a", "arrow", props={"start": (5, 5), "end": (5, 5)}))

        assert len(geometries) == 1

    def test_arrowhead_wings_have_the_given_size(self):
        """Test the distance of both wings from the tip."""
        left, tip, right = ShapeGeometryProvider.arrowhead((10.0, 20.0), (40.0, 60.0), 15.0)

        assert tip == (40.0, 60.0)
        assert math.dist(left, tip) == pytest.approx(15.0)
        assert math.dist(right, tip) == pytest.approx(15.0)

    def test_geo_rectangle(self, provider):
        """Test the outline of a rectangle."""
        shape = AdShape("r", "geo", props={"geo": "rectangle", "w": 80, "h": 40})

        (geometry,) = provider.geometries(shape)

        assert geometry.closed
        assert len(geometry) == 4
        assert {tuple(point) for point in geometry.vertices.tolist()} == {
            (0.0, 0.0),
            (80.0, 0.0),
            (80.0, 40.0),
            (0.0, 40.0),
        }

    def test_geo_other_kinds_use_bounds(self, provider):
        """Test that unsupported geo kinds are drawn by their bounding box."""
        shape = AdShape("r", "geo", props={"geo": "star", "w": 30, "h": 30})

        (geometry,) = provider.geometries(shape)

        assert len(geometry) == 4

    def test_geo_ellipse(self, provider):
        """Test that the ellipse outline lies on the ellipse inscribed in w x h."""
        width, height = 120.0, 60.0
        shape = AdShape("e", "geo", props={"geo": "ellipse", "w": width, "h": height})

        (geometry,) = provider.geometries(shape)

        assert geometry.closed
        assert len(geometry) >= 4 * ShapeGeometryProvider.ELLIPSE_QUAD_SEGMENTS
        for x, y in geometry.vertices.tolist():
            value = ((x - width / 2) / (width / 2)) ** 2 + ((y - height / 2) / (height / 2)) ** 2
            assert value == pytest.approx(1.0)

    def test_geo_without_size(self, provider):
        """Test that an empty geo shape has no geometry."""
        assert provider.geometries(AdShape("g", "geo", props={"geo": "rectangle", "w": 0, "h": 0})) == []
