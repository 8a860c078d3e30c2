"""Handling geometries: affine transforms, orientation predicates and boxes"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to geometry handling."""

    @staticmethod
    def transform_point(
        affine_trafo: Sequence[Union[int, float]], point: Sequence[Union[int, float]]
    ) -> Tuple[float, float]:
        """
        Perform an affine transformation on the given 2D point.

        The given _affine_trafo_ is a list of 6 floats, performing an affine transformation.
        The transformation is defined as:
            | x' | = | a00 a01 b0 |   | x |
            | y' | = | a10 a11 b1 | * | y |
            | 1  | = |  0   0  1  |   | 1 |
        with
            affine_trafo = [a00, a01, a10, a11, b0, b1]
        See also shapely - Affine Transformations

        Args:
            affine_trafo (Tuple/List[float]): Affine transformation - [a00, a01, a10, a11, b0, b1]
            point (Tuple/List[float]): 2D point - (x, y)

        Returns:
            Tuple[float, float]: the transformed point
        """
        x_new = float(affine_trafo[0] * point[0] + affine_trafo[1] * point[1] + affine_trafo[4])
        y_new = float(affine_trafo[2] * point[0] + affine_trafo[3] * point[1] + affine_trafo[5])
        return (x_new, y_new)

    @staticmethod
    def ccw(
        a: Sequence[float],
        b: Sequence[float],
        c: Sequence[float],
    ) -> float:
        """
        Orientation predicate: z-component of the cross product (b - a) x (c - a).

        Positive if a -> b -> c turns counter-clockwise in a y-up frame
        (clockwise on screen, where y grows downwards), negative for the
        opposite turn and 0.0 if the three points are collinear.

        Args:
            a: first point (x, y)
            b: second point (x, y)
            c: point to classify (x, y)

        Returns:
            float: signed doubled area of the triangle (a, b, c)
        """
        return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


###############################################################################
# AdTransform
###############################################################################
@dataclass(frozen=True)
class AdTransform:
    """
    2D affine transformation in canvas order (a, b, c, d, e, f).

    Maps (x, y) to (a*x + c*y + e, b*x + d*y + f), i.e. the matrix
        | a  c  e |
        | b  d  f |
        | 0  0  1 |
    Instances are immutable; composition returns a new transform.
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    def __post_init__(self):
        for name in ("a", "b", "c", "d", "e", "f"):
            value = getattr(self, name)
            if not isinstance(value, (int, float, np.floating, np.integer)):
                raise TypeError(f"Transform coefficient '{name}' must be a number, got {type(value).__name__}")
            if not math.isfinite(value):
                raise ValueError(f"Transform coefficient '{name}' must be finite, got {value}")

    @classmethod
    def identity(cls) -> AdTransform:
        """Return the identity transform."""
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> AdTransform:
        """Return a transform translating by (tx, ty)."""
        return cls(e=tx, f=ty)

    @classmethod
    def scaling(cls, sx: float, sy: Optional[float] = None) -> AdTransform:
        """Return a transform scaling by sx (and sy, defaults to sx)."""
        if sy is None:
            sy = sx
        return cls(a=sx, d=sy)

    @classmethod
    def rotation(cls, angle_rad: float) -> AdTransform:
        """Return a rotation about the origin by angle_rad (counter-clockwise in a y-up frame)."""
        cos_a = math.cos(angle_rad)
        sin_a = math.sin(angle_rad)
        return cls(a=cos_a, b=sin_a, c=-sin_a, d=cos_a)

    @classmethod
    def from_camera(cls, x: float, y: float, z: float) -> AdTransform:
        """
        Return the world-to-screen transform of a pan/zoom camera.

        A camera at (x, y) with zoom z maps a world point p to (p + (x, y)) * z.
        """
        return cls(a=z, d=z, e=x * z, f=y * z)

    def compose(self, then: AdTransform) -> AdTransform:
        """
        Return the transform applying self first and then _then_.

        apply(p, a.compose(b)) == b.apply(a.apply(p))
        """
        return AdTransform(
            a=then.a * self.a + then.c * self.b,
            b=then.b * self.a + then.d * self.b,
            c=then.a * self.c + then.c * self.d,
            d=then.b * self.c + then.d * self.d,
            e=then.a * self.e + then.c * self.f + then.e,
            f=then.b * self.e + then.d * self.f + then.f,
        )

    def then(self, other: AdTransform) -> AdTransform:
        """Alias for compose: self applied first, other second."""
        return self.compose(other)

    def __matmul__(self, other: AdTransform) -> AdTransform:
        """Matrix product self @ other, i.e. other is applied first."""
        return other.compose(self)

    def apply(self, point: Sequence[Union[int, float]]) -> Tuple[float, float]:
        """Transform a single point (x, y)."""
        return GeomMath.transform_point(self.to_affine_list(), point)

    def apply_points(self, points: Union[Sequence[Sequence[float]], NDArray[np.float64]]) -> NDArray[np.float64]:
        """
        Transform an array of points.

        Args:
            points: sequence or array of shape (n, 2)

        Returns:
            NDArray[np.float64]: new array of shape (n, 2), the input stays untouched
        """
        pts = np.asarray(points, dtype=np.float64)
        if pts.size == 0:
            return np.empty((0, 2), dtype=np.float64)
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise ValueError(f"points must have shape (n, 2), got {pts.shape}")
        result = np.empty_like(pts)
        result[:, 0] = self.a * pts[:, 0] + self.c * pts[:, 1] + self.e
        result[:, 1] = self.b * pts[:, 0] + self.d * pts[:, 1] + self.f
        return result

    def to_affine_list(self) -> List[float]:
        """Return [a00, a01, a10, a11, b0, b1] as used by GeomMath and shapely.affinity.affine_transform."""
        return [self.a, self.c, self.b, self.d, self.e, self.f]

    def to_tuple(self) -> Tuple[float, float, float, float, float, float]:
        """Return the coefficients (a, b, c, d, e, f)."""
        return (self.a, self.b, self.c, self.d, self.e, self.f)


def compose(first: AdTransform, then: AdTransform) -> AdTransform:
    """Return the transform applying _first_ and then _then_."""
    return first.compose(then)


###############################################################################
# AdBox
###############################################################################
@dataclass
class AdBox:
    """
    Represents a rectangular box with coordinates and dimensions.

    Attributes:
        xmin (float): The minimum x-coordinate.
        ymin (float): The minimum y-coordinate.
        xmax (float): The maximum x-coordinate.
        ymax (float): The maximum y-coordinate.
    """

    _xmin: float
    _ymin: float
    _xmax: float
    _ymax: float

    def __init__(self, xmin: float, ymin: float, xmax: float, ymax: float):
        """Initialize AdBox with coordinates.

        Args:
            xmin: The minimum x-coordinate
            ymin: The minimum y-coordinate
            xmax: The maximum x-coordinate
            ymax: The maximum y-coordinate
        """
        self._xmin = xmin
        self._ymin = ymin
        self._xmax = xmax
        self._ymax = ymax

        # Normalize coordinates to ensure xmin <= xmax and ymin <= ymax
        if self._xmin > self._xmax:
            self._xmin, self._xmax = self._xmax, self._xmin
        if self._ymin > self._ymax:
            self._ymin, self._ymax = self._ymax, self._ymin

    @property
    def xmin(self) -> float:
        """float: The minimum x-coordinate."""
        return self._xmin

    @property
    def ymin(self) -> float:
        """float: The minimum y-coordinate."""
        return self._ymin

    @property
    def xmax(self) -> float:
        """float: The maximum x-coordinate."""
        return self._xmax

    @property
    def ymax(self) -> float:
        """float: The maximum y-coordinate."""
        return self._ymax

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """The extent of the box as Tuple (xmin, ymin, xmax, ymax)."""
        return self._xmin, self._ymin, self._xmax, self._ymax

    @property
    def width(self) -> float:
        """float: The width of the box (difference between xmax and xmin)."""
        return self._xmax - self._xmin

    @property
    def height(self) -> float:
        """float: The height of the box (difference between ymax and ymin)."""
        return self._ymax - self._ymin

    def grown(self, margin_x: float, margin_y: float) -> AdBox:
        """Return a copy grown by the given margins on every side."""
        return AdBox(
            xmin=self._xmin - margin_x,
            ymin=self._ymin - margin_y,
            xmax=self._xmax + margin_x,
            ymax=self._ymax + margin_y,
        )

    def intersection(self, other: AdBox) -> Optional[AdBox]:
        """Return the overlap of both boxes, None if they do not overlap."""
        xmin = max(self._xmin, other.xmin)
        ymin = max(self._ymin, other.ymin)
        xmax = min(self._xmax, other.xmax)
        ymax = min(self._ymax, other.ymax)
        if xmin > xmax or ymin > ymax:
            return None
        return AdBox(xmin=xmin, ymin=ymin, xmax=xmax, ymax=ymax)

    def transformed_bounds(self, transform: AdTransform) -> AdBox:
        """
        Map all four corners with _transform_ and return their bounding box.

        Args:
            transform (AdTransform): Affine transformation

        Returns:
            AdBox: axis-aligned box containing the transformed box
        """
        corners = transform.apply_points(
            np.array(
                [
                    (self._xmin, self._ymin),
                    (self._xmax, self._ymin),
                    (self._xmax, self._ymax),
                    (self._xmin, self._ymax),
                ],
                dtype=np.float64,
            )
        )
        (xmin, ymin), (xmax, ymax) = corners.min(axis=0), corners.max(axis=0)
        return AdBox(xmin=float(xmin), ymin=float(ymin), xmax=float(xmax), ymax=float(ymax))
