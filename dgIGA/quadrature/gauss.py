"""
Gauss-Legendre quadrature for numerical integration.

Gauss quadrature provides optimal polynomial integration:
n points integrate exactly polynomials up to degree 2n-1.

The canonical rule lives on [-1, 1]. It is mapped affinely onto each
element side or edge:

    x = lerp((t + 1) / 2, [a, b])
    w = w_t * (b - a) / 2

Point sets:
- IntervalQuadraturePoints: 1D rule on a sub-interval
- TensorQuadraturePoints:   product of two 1D rules, indexed by (qx, qy)
- EdgeQuadraturePoints:     1D rule along an edge, lifted to 2D by
                            inserting the edge's fixed coordinate

Usage:
    quad = Quadrature(mesh, point_count=p + 1)
    points = quad.element_points((ix, iy))
    for q in points.indices():
        (x, y), w = points.data(q)
"""

import itertools
from functools import lru_cache
from typing import List, NamedTuple, Tuple

import numpy as np

from ..discretization.mesh import EdgeIndex, Interval, Orientation, RegularMesh, lerp


@lru_cache(maxsize=32)
def gauss_legendre_nodes(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Canonical Gauss-Legendre nodes and weights on [-1, 1].

    Parameters:
        n: Number of quadrature points

    Returns:
        (nodes, weights), read-only arrays of length n; weights sum to 2
    """
    if n < 1:
        raise ValueError("Need at least 1 quadrature point")
    nodes, weights = np.polynomial.legendre.leggauss(n)
    nodes.flags.writeable = False
    weights.flags.writeable = False
    return nodes, weights


def gauss_legendre_1d(n: int, interval: Interval) -> Tuple[np.ndarray, np.ndarray]:
    """n-point rule mapped onto interval, as (points, weights)."""
    points = IntervalQuadraturePoints.on(interval, n)
    return points.points.copy(), points.weights()


class PointData(NamedTuple):
    x: object
    weight: float


class IntervalQuadraturePoints:
    """Quadrature points on a sub-interval, weights scaled by length/2."""

    def __init__(self, points: np.ndarray, weights: np.ndarray, scale: float):
        self._points = np.asarray(points, dtype=np.float64)
        self._weights = weights
        self._scale = scale

    @classmethod
    def on(cls, target: Interval, n: int) -> 'IntervalQuadraturePoints':
        nodes, weights = gauss_legendre_nodes(n)
        points = np.array([lerp((t + 1) / 2, target) for t in nodes])
        return cls(points, weights, target.length / 2)

    @property
    def points(self) -> np.ndarray:
        return self._points

    def indices(self) -> range:
        return range(len(self._points))

    def coords(self, q: int) -> float:
        if not 0 <= q < len(self._points):
            raise IndexError("Quadrature point index out of bounds")
        return float(self._points[q])

    def weight(self, q: int) -> float:
        if not 0 <= q < len(self._points):
            raise IndexError("Quadrature point index out of bounds")
        return float(self._weights[q] * self._scale)

    def weights(self) -> np.ndarray:
        return self._weights * self._scale

    def data(self, q: int) -> PointData:
        return PointData(self.coords(q), self.weight(q))


class TensorQuadraturePoints:
    """Product rule on an element; point index is (qx, qy)."""

    def __init__(self, ptx: IntervalQuadraturePoints, pty: IntervalQuadraturePoints):
        self._ptx = ptx
        self._pty = pty

    @property
    def xs(self) -> np.ndarray:
        return self._ptx.points

    @property
    def ys(self) -> np.ndarray:
        return self._pty.points

    def indices(self) -> List[Tuple[int, int]]:
        return list(itertools.product(self._ptx.indices(), self._pty.indices()))

    def coords(self, q: Tuple[int, int]) -> Tuple[float, float]:
        qx, qy = q
        return (self._ptx.coords(qx), self._pty.coords(qy))

    def weight(self, q: Tuple[int, int]) -> float:
        qx, qy = q
        return self._ptx.weight(qx) * self._pty.weight(qy)

    def data(self, q: Tuple[int, int]) -> PointData:
        return PointData(self.coords(q), self.weight(q))

    def coords_array(self) -> np.ndarray:
        """Coordinates of shape (n_points, 2) in indices() order."""
        X, Y = np.meshgrid(self.xs, self.ys, indexing="ij")
        return np.column_stack([X.ravel(), Y.ravel()])

    def weights(self) -> np.ndarray:
        """Weights of shape (n_points,) in indices() order."""
        return np.outer(self._ptx.weights(), self._pty.weights()).ravel()


class EdgeQuadraturePoints:
    """1D rule along an edge, with the edge's fixed coordinate inserted."""

    def __init__(self, points: IntervalQuadraturePoints, position: float,
                 direction: Orientation):
        self._points = points
        self.position = position
        self.direction = direction

    @property
    def points(self) -> np.ndarray:
        return self._points.points

    def indices(self) -> range:
        return self._points.indices()

    def coords(self, q: int) -> Tuple[float, float]:
        s = self._points.coords(q)
        if self.direction is Orientation.HORIZONTAL:
            return (s, self.position)
        return (self.position, s)

    def weight(self, q: int) -> float:
        return self._points.weight(q)

    def data(self, q: int) -> PointData:
        return PointData(self.coords(q), self.weight(q))

    def coords_array(self) -> np.ndarray:
        fixed = np.full(len(self.points), self.position)
        if self.direction is Orientation.HORIZONTAL:
            return np.column_stack([self.points, fixed])
        return np.column_stack([fixed, self.points])

    def weights(self) -> np.ndarray:
        return self._points.weights()


class Quadrature:
    """
    Gauss quadrature over the elements and edges of a RegularMesh.

    Attributes:
        mesh: The mesh
        point_count: Number of Gauss points per direction
    """

    def __init__(self, mesh: RegularMesh, point_count: int):
        if point_count < 1:
            raise ValueError("Need at least 1 quadrature point")
        self.mesh = mesh
        self.point_count = point_count

    def element_points(self, e: Tuple[int, int]) -> TensorQuadraturePoints:
        element = self.mesh.element(e)
        ptx = IntervalQuadraturePoints.on(element.span_x, self.point_count)
        pty = IntervalQuadraturePoints.on(element.span_y, self.point_count)
        return TensorQuadraturePoints(ptx, pty)

    def facet_points(self, f: EdgeIndex) -> EdgeQuadraturePoints:
        edge = self.mesh.facet(f)
        points = IntervalQuadraturePoints.on(edge.span, self.point_count)
        return EdgeQuadraturePoints(points, edge.position, edge.direction)
