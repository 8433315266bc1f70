"""
Structured meshes for tensor-product spaces.

IntervalMesh partitions a 1D interval into ordered sub-intervals; its
facets are the partition points. RegularMesh is the tensor product of
two interval meshes: elements are index pairs (ix, iy) and facets are
edges (ix, iy, orientation).

Edge conventions:
- HORIZONTAL edge (ix, iy): constant y = ys[iy], spans x-element ix
- VERTICAL edge (ix, iy):   constant x = xs[ix], spans y-element iy

Facet normals:
    The 1D facet normal is -1 at the first point and +1 at every other
    point. This is the outward normal only at the two domain endpoints;
    for interior points the value is a convention and should not be
    relied upon. Normals are only consumed on boundary facets.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Interval:
    """Closed interval [left, right] with left < right."""
    left: float
    right: float

    def __post_init__(self):
        if not self.left < self.right:
            raise ValueError(f"Degenerate interval [{self.left}, {self.right}]")

    @property
    def length(self) -> float:
        return self.right - self.left

    def __str__(self) -> str:
        return f"[{self.left}, {self.right}]"


def lerp(t: float, interval: Interval) -> float:
    """Point at relative position t of the interval (t=0 -> left, t=1 -> right)."""
    return (1 - t) * interval.left + t * interval.right


def evenly_spaced(a: float, b: float, n_elements: int) -> np.ndarray:
    """Partition of [a, b] into n_elements equal sub-intervals."""
    if n_elements <= 0:
        raise ValueError(f"Invalid number of partition elements: {n_elements}")
    return np.linspace(a, b, n_elements + 1)


class PointData(NamedTuple):
    position: float
    normal: float


class IntervalMesh:
    """
    Mesh of an interval given by an ordered partition.

    Elements are indexed 0..n-1 (element e is [points[e], points[e+1]]),
    facets 0..n (facet i is points[i]).
    """

    def __init__(self, points: Sequence[float]):
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 1 or len(points) < 2:
            raise ValueError("Partition needs at least two points.")
        if not np.all(np.diff(points) > 0):
            raise ValueError("Partition points must be strictly increasing.")
        self._points = points

    @property
    def points(self) -> np.ndarray:
        return self._points.copy()

    def element_count(self) -> int:
        return len(self._points) - 1

    def elements(self) -> range:
        return range(self.element_count())

    def subinterval(self, e: int) -> Interval:
        if not 0 <= e < self.element_count():
            raise IndexError(f"Subinterval index {e} out of range")
        return Interval(float(self._points[e]), float(self._points[e + 1]))

    def facets(self) -> range:
        return range(len(self._points))

    def boundary_facets(self) -> Tuple[int, int]:
        return (0, len(self._points) - 1)

    def facet(self, i: int) -> PointData:
        if not 0 <= i < len(self._points):
            raise IndexError(f"Point index {i} out of range")
        normal = 1.0 if i > 0 else -1.0
        return PointData(float(self._points[i]), normal)


class Orientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class EdgeIndex(NamedTuple):
    ix: int
    iy: int
    direction: Orientation

    def __str__(self) -> str:
        sign = "-" if self.direction is Orientation.HORIZONTAL else "|"
        return f"({self.ix}, {self.iy})[{sign}]"


@dataclass(frozen=True)
class ElementData:
    span_x: Interval
    span_y: Interval


@dataclass(frozen=True)
class EdgeData:
    """
    Geometry of an edge.

    Attributes:
        span: Extent of the edge along its free axis
        position: Fixed coordinate (y for horizontal, x for vertical edges)
        direction: Edge orientation
        normal: (nx, ny) with a single nonzero component
    """
    span: Interval
    position: float
    direction: Orientation
    normal: Tuple[float, float]


class RegularMesh:
    """Tensor product of two interval meshes along x and y."""

    def __init__(self, xs: Sequence[float], ys: Sequence[float]):
        self.mesh_x = IntervalMesh(xs)
        self.mesh_y = IntervalMesh(ys)

    def element_count(self) -> int:
        return self.mesh_x.element_count() * self.mesh_y.element_count()

    def elements(self) -> List[Tuple[int, int]]:
        return list(itertools.product(self.mesh_x.elements(), self.mesh_y.elements()))

    def element(self, e: Tuple[int, int]) -> ElementData:
        ix, iy = e
        return ElementData(self.mesh_x.subinterval(ix), self.mesh_y.subinterval(iy))

    def facets(self) -> List[EdgeIndex]:
        """All edges; every interior and boundary edge appears exactly once."""
        indices = [EdgeIndex(ix, iy, Orientation.HORIZONTAL)
                   for ix in self.mesh_x.elements()
                   for iy in self.mesh_y.facets()]
        indices += [EdgeIndex(ix, iy, Orientation.VERTICAL)
                    for ix in self.mesh_x.facets()
                    for iy in self.mesh_y.elements()]
        return indices

    def boundary_facets(self) -> List[EdgeIndex]:
        indices = [EdgeIndex(ix, iy, Orientation.HORIZONTAL)
                   for iy in self.mesh_y.boundary_facets()
                   for ix in self.mesh_x.elements()]
        indices += [EdgeIndex(ix, iy, Orientation.VERTICAL)
                    for ix in self.mesh_x.boundary_facets()
                    for iy in self.mesh_y.elements()]
        return indices

    def facet(self, f: EdgeIndex) -> EdgeData:
        ix, iy, direction = f
        if direction is Orientation.HORIZONTAL:
            y, ny = self.mesh_y.facet(iy)
            span = self.mesh_x.subinterval(ix)
            return EdgeData(span, y, direction, (0.0, ny))
        elif direction is Orientation.VERTICAL:
            x, nx = self.mesh_x.facet(ix)
            span = self.mesh_y.subinterval(iy)
            return EdgeData(span, x, direction, (nx, 0.0))
        raise ValueError(f"Invalid edge orientation: {direction!r}")

    def min_element_size(self) -> float:
        """Smallest element side length over both axes."""
        return float(min(np.diff(self.mesh_x.points).min(),
                         np.diff(self.mesh_y.points).min()))
