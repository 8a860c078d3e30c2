"""Geometry providers turning editor shape records into rasterizable polylines."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

import shapely.affinity
import shapely.geometry

from asciidraw.geom import AdBox, AdTransform
from asciidraw.rasterizer import AdGeometry

# Shape types drawn as line art
RASTERIZED_SHAPE_TYPES: FrozenSet[str] = frozenset({"draw", "line", "arrow", "geo", "polygon"})

# Container and media shapes never contribute to the character grid
EXCLUDED_SHAPE_TYPES: FrozenSet[str] = frozenset(
    {"frame", "group", "image", "embed", "note", "video", "bookmark", "text"}
)


###############################################################################
# AdShape
###############################################################################
@dataclass
class AdShape:
    """
    A shape record as handed over by the host editor.

    Attributes:
        shape_id: Identifier of the shape, used for diagnostics only.
        shape_type: Kind of shape, e.g. "draw", "arrow", "geo", "frame".
        transform: Shape-local to world transform.
        props: Type specific properties (points, segments, size, ...).
        mask: Optional world rectangle the shape is clipped to, e.g. the bounds
            of the frame that contains it.
    """

    shape_id: str
    shape_type: str
    transform: AdTransform = field(default_factory=AdTransform.identity)
    props: Dict[str, Any] = field(default_factory=dict)
    mask: Optional[AdBox] = None

    @property
    def participates(self) -> bool:
        """bool: True if the shape is rasterized at all."""
        return self.shape_type in RASTERIZED_SHAPE_TYPES


###############################################################################
# ShapeGeometryProvider
###############################################################################
class ShapeGeometryProvider:
    """
    Converts shape records into lists of AdGeometry in shape-local space.

    Point props are sequences of {"x": .., "y": ..} dicts or (x, y) pairs.
    Curves (ellipses) are tessellated here, the rasterizer only sees vertices.
    """

    ARROWHEAD_SIZE: float = 12.0
    ARROWHEAD_ANGLE: float = math.pi / 6
    ELLIPSE_QUAD_SEGMENTS: int = 8

    def geometries(self, shape: AdShape) -> List[AdGeometry]:
        """Return the polylines of _shape_, an empty list for shapes that are not rasterized."""
        if not shape.participates:
            return []
        handler = getattr(self, f"_{shape.shape_type}_geometries")
        return handler(shape.props)

    @staticmethod
    def _point(value: Any) -> Tuple[float, float]:
        if isinstance(value, dict):
            return float(value["x"]), float(value["y"])
        return float(value[0]), float(value[1])

    @classmethod
    def _points(cls, values: Sequence[Any]) -> List[Tuple[float, float]]:
        return [cls._point(value) for value in values]

    def _draw_geometries(self, props: Dict[str, Any]) -> List[AdGeometry]:
        closed = bool(props.get("is_closed", False))
        geometries = []
        for segment in props.get("segments", []):
            points = self._points(segment.get("points", []))
            if segment.get("type") == "straight":
                points = points[:2]
            if points:
                geometries.append(AdGeometry(points, closed=closed))
        return geometries

    def _line_geometries(self, props: Dict[str, Any]) -> List[AdGeometry]:
        points = self._points(props.get("points", []))
        return [AdGeometry(points)] if points else []

    def _polygon_geometries(self, props: Dict[str, Any]) -> List[AdGeometry]:
        points = self._points(props.get("points", []))
        return [AdGeometry(points, closed=True)] if points else []

    def _arrow_geometries(self, props: Dict[str, Any]) -> List[AdGeometry]:
        start = self._point(props.get("start", (0.0, 0.0)))
        end = self._point(props.get("end", (0.0, 0.0)))
        geometries = [AdGeometry([start, end])]
        if start != end:
            geometries.append(AdGeometry(self.arrowhead(start, end, self.ARROWHEAD_SIZE)))
        return geometries

    @classmethod
    def arrowhead(
        cls, start: Tuple[float, float], end: Tuple[float, float], size: float
    ) -> List[Tuple[float, float]]:
        """Return the open polyline wing -> tip -> wing of an arrowhead at _end_."""
        angle = math.atan2(end[1] - start[1], end[0] - start[0])
        left = (
            end[0] - size * math.cos(angle - cls.ARROWHEAD_ANGLE),
            end[1] - size * math.sin(angle - cls.ARROWHEAD_ANGLE),
        )
        right = (
            end[0] - size * math.cos(angle + cls.ARROWHEAD_ANGLE),
            end[1] - size * math.sin(angle + cls.ARROWHEAD_ANGLE),
        )
        return [left, end, right]

    def _geo_geometries(self, props: Dict[str, Any]) -> List[AdGeometry]:
        width = float(props.get("w", 0.0))
        height = float(props.get("h", 0.0))
        if width <= 0 and height <= 0:
            return []

        if props.get("geo") == "ellipse":
            circle = shapely.geometry.Point(0.0, 0.0).buffer(1.0, self.ELLIPSE_QUAD_SEGMENTS)
            outline = shapely.affinity.affine_transform(
                circle, [width / 2, 0.0, 0.0, height / 2, width / 2, height / 2]
            ).exterior
        else:
            # rectangles and every other geo kind are drawn by their bounds
            outline = shapely.geometry.box(0.0, 0.0, width, height).exterior

        # rings repeat their first coordinate, the closed flag takes care of that
        coords = list(outline.coords)[:-1]
        return [AdGeometry(coords, closed=True)]
