"""
B-spline function spaces over structured meshes.

BSplineSpace (1D) maps elements and facets of a knot vector to DOF
ranges:
- element e supports the p+1 consecutive DOFs starting at first_dofs[e]
- facet f (a breakpoint) sees the DOFs of the elements on both sides,
  numbered from the first DOF of the left element (or of the right one
  at the first breakpoint)

TensorProductSpace (2D) composes one 1D space per axis. A DOF is an
index pair (ix, iy); every local, facet-local and global number is the
MultiIndexLayout linearization of the corresponding pair.

Evaluators:
    eval = space.dof_evaluator(e, points, ders=1)
    for q in points.indices():
        u = eval(dof, q)       # FunctionValue(val, dx, dy)

    val, dx, dy = eval.tabulate()   # arrays (n_points, n_local_dofs)

On a facet the axis orthogonal to the edge is evaluated one-sidedly at
the breakpoint (BasisValuesOnVertex); the edge axis uses the quadrature
rule.
"""

from __future__ import annotations

import itertools
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .knot_vector import KnotVector, first_nonzero_dofs
from .layout import MultiIndexLayout
from .mesh import EdgeIndex, Orientation, RegularMesh
from ..geometry.bspline import (BasisValues, BasisValuesOnVertex, FunctionValue,
                                eval_basis_with_derivatives)

DofIndex = Tuple[int, int]


class BSplineSpace:
    """
    DOF bookkeeping for a univariate B-spline basis.

    Attributes:
        basis: Underlying knot vector
    """

    def __init__(self, basis: KnotVector):
        self.basis = basis
        self._first_dofs = first_nonzero_dofs(basis)
        self._spans = basis.spans

    @property
    def degree(self) -> int:
        return self.basis.degree

    def element_count(self) -> int:
        return len(self._spans)

    def dofs_per_element(self) -> int:
        return self.degree + 1

    def dof_count(self) -> int:
        return self.basis.n_basis

    def element_dof_count(self, e: int) -> int:
        self._check_element(e)
        return self.dofs_per_element()

    def facet_dof_count(self, f: int) -> int:
        return len(self.dofs_on_facet(f))

    def dofs(self, e: Optional[int] = None) -> range:
        """All DOFs, or the DOFs supported on element e."""
        if e is None:
            return range(self.dof_count())
        first = self.first_dof(e)
        return range(first, first + self.dofs_per_element())

    def local_index(self, dof: int, e: int) -> int:
        return dof - self.first_dof(e)

    def first_dof(self, e: int) -> int:
        self._check_element(e)
        return self._first_dofs[e]

    def last_dof(self, e: int) -> int:
        return self.first_dof(e) + self.dofs_per_element() - 1

    def span(self, e: int) -> int:
        self._check_element(e)
        return self._spans[e]

    def dofs_on_facet(self, f: int) -> range:
        """DOFs active on either side of breakpoint f."""
        self._check_facet(f)
        last_element = self.element_count() - 1
        elem_left = max(f - 1, 0)
        elem_right = min(f, last_element)
        first = self._first_dofs[elem_left]
        one_past_last = self._first_dofs[elem_right] + self.dofs_per_element()
        return range(first, one_past_last)

    def facet_local_index(self, dof: int, f: int) -> int:
        self._check_facet(f)
        return dof - self._first_dofs[max(f - 1, 0)]

    def _check_element(self, e: int):
        if not 0 <= e < len(self._spans):
            raise IndexError(f"Element index {e} out of range")

    def _check_facet(self, f: int):
        if not 0 <= f <= len(self._spans):
            raise IndexError(f"Facet index {f} out of range")


def element_left(f: int, basis: KnotVector) -> Optional[int]:
    return f - 1 if f > 0 else None


def element_right(f: int, basis: KnotVector) -> Optional[int]:
    return f if f < basis.n_elements else None


def evaluate_basis(points: Sequence[float], space: BSplineSpace, ders: int) -> BasisValues:
    """Basis values and derivatives at each point, using the span containing it."""
    values = BasisValues(len(points), space.dofs_per_element(), ders)
    basis = space.basis
    for q, x in enumerate(points):
        span = basis.find_span(x)
        eval_basis_with_derivatives(span, x, basis, values.point_buffer(q), ders)
    return values


def evaluate_basis_at_point(x: float, space: BSplineSpace, ders: int, span: int) -> BasisValues:
    """Single-point table evaluated with an explicitly chosen span."""
    values = BasisValues(1, space.dofs_per_element(), ders)
    eval_basis_with_derivatives(span, x, space.basis, values.point_buffer(0), ders)
    return values


def evaluate_basis_on_facet(f: int, space: BSplineSpace, ders: int) -> BasisValuesOnVertex:
    """One-sided basis values at breakpoint f from its adjacent elements."""
    basis = space.basis
    if not 0 <= f <= basis.n_elements:
        raise IndexError(f"Facet index {f} out of range")
    x = float(basis.breakpoints[f])

    elem_left = element_left(f, basis)
    elem_right = element_right(f, basis)

    vals_left = vals_right = None
    left_last = right_first = None

    if elem_left is not None:
        vals_left = evaluate_basis_at_point(x, space, ders, space.span(elem_left))
        left_last = space.facet_local_index(space.last_dof(elem_left), f)
    if elem_right is not None:
        vals_right = evaluate_basis_at_point(x, space, ders, space.span(elem_right))
        right_first = space.facet_local_index(space.first_dof(elem_right), f)

    return BasisValuesOnVertex(vals_left, vals_right, left_last, right_first)


class TensorProductSpace:
    """
    Tensor-product B-spline space on a RegularMesh.

    Parameters:
        mesh: Mesh whose axes match the knot vectors' breakpoints
        basis_x, basis_y: Knot vectors along x and y
    """

    def __init__(self, mesh: RegularMesh, basis_x: KnotVector, basis_y: KnotVector):
        if basis_x.n_elements != mesh.mesh_x.element_count() or \
                basis_y.n_elements != mesh.mesh_y.element_count():
            raise ValueError("Knot vectors do not match the mesh element counts")
        if not np.allclose(basis_x.breakpoints, mesh.mesh_x.points) or \
                not np.allclose(basis_y.breakpoints, mesh.mesh_y.points):
            raise ValueError("Knot vector breakpoints do not match the mesh points")
        self.mesh = mesh
        self.space_x = BSplineSpace(basis_x)
        self.space_y = BSplineSpace(basis_y)
        self._global_layout = MultiIndexLayout(
            (self.space_x.dof_count(), self.space_y.dof_count()))
        self._element_layout = MultiIndexLayout(
            (self.space_x.dofs_per_element(), self.space_y.dofs_per_element()))

    def dof_count(self) -> int:
        return self._global_layout.size

    def element_dof_count(self, e: Tuple[int, int]) -> int:
        ex, ey = e
        return self.space_x.element_dof_count(ex) * self.space_y.element_dof_count(ey)

    def facet_dof_count(self, f: EdgeIndex) -> int:
        return self.facet_layout(f).size

    def dofs(self, e: Optional[Tuple[int, int]] = None) -> List[DofIndex]:
        if e is None:
            return list(itertools.product(self.space_x.dofs(), self.space_y.dofs()))
        ex, ey = e
        return list(itertools.product(self.space_x.dofs(ex), self.space_y.dofs(ey)))

    def dofs_on_facet(self, f: EdgeIndex) -> List[DofIndex]:
        fx, fy, direction = f
        if direction is Orientation.HORIZONTAL:
            return list(itertools.product(self.space_x.dofs(fx), self.space_y.dofs_on_facet(fy)))
        elif direction is Orientation.VERTICAL:
            return list(itertools.product(self.space_x.dofs_on_facet(fx), self.space_y.dofs(fy)))
        raise ValueError(f"Invalid edge orientation: {direction!r}")

    def global_layout(self) -> MultiIndexLayout:
        return self._global_layout

    def element_layout(self, e: Tuple[int, int]) -> MultiIndexLayout:
        return self._element_layout

    def facet_layout(self, f: EdgeIndex) -> MultiIndexLayout:
        fx, fy, direction = f
        if direction is Orientation.HORIZONTAL:
            return MultiIndexLayout(
                (self.space_x.dofs_per_element(), self.space_y.facet_dof_count(fy)))
        elif direction is Orientation.VERTICAL:
            return MultiIndexLayout(
                (self.space_x.facet_dof_count(fx), self.space_y.dofs_per_element()))
        raise ValueError(f"Invalid edge orientation: {direction!r}")

    def local_index(self, dof: DofIndex, e: Tuple[int, int]) -> int:
        return self._element_layout.linear_index(*self.index_on_element(dof, e))

    def facet_local_index(self, dof: DofIndex, f: EdgeIndex) -> int:
        return self.facet_layout(f).linear_index(*self.index_on_facet(dof, f))

    def global_index(self, dof: DofIndex) -> int:
        return self._global_layout.linear_index(*dof)

    def index_on_element(self, dof: DofIndex, e: Tuple[int, int]) -> DofIndex:
        ex, ey = e
        dx, dy = dof
        return (self.space_x.local_index(dx, ex), self.space_y.local_index(dy, ey))

    def index_on_facet(self, dof: DofIndex, f: EdgeIndex) -> DofIndex:
        fx, fy, direction = f
        dx, dy = dof
        if direction is Orientation.HORIZONTAL:
            return (self.space_x.local_index(dx, fx), self.space_y.facet_local_index(dy, fy))
        elif direction is Orientation.VERTICAL:
            return (self.space_x.facet_local_index(dx, fx), self.space_y.local_index(dy, fy))
        raise ValueError(f"Invalid edge orientation: {direction!r}")

    def dof_evaluator(self, e: Tuple[int, int], points, ders: int = 1) -> ElementEvaluator:
        """
        Evaluator for all DOFs of element e at a TensorQuadraturePoints set.

        1D tables are computed once per axis here; each call of the
        evaluator is a lookup and a product.
        """
        vals_x = evaluate_basis(points.xs, self.space_x, ders)
        vals_y = evaluate_basis(points.ys, self.space_y, ders)
        return ElementEvaluator(self, e, ders, vals_x, vals_y)

    def facet_dof_evaluator(self, f: EdgeIndex, points, ders: int = 1) -> EdgeEvaluator:
        """Evaluator for all DOFs of edge f at an EdgeQuadraturePoints set."""
        fx, fy, direction = f
        if direction is Orientation.HORIZONTAL:
            vals_interval = evaluate_basis(points.points, self.space_x, ders)
            vals_point = evaluate_basis_on_facet(fy, self.space_y, ders)
        elif direction is Orientation.VERTICAL:
            vals_interval = evaluate_basis(points.points, self.space_y, ders)
            vals_point = evaluate_basis_on_facet(fx, self.space_x, ders)
        else:
            raise ValueError(f"Invalid edge orientation: {direction!r}")
        return EdgeEvaluator(self, f, ders, vals_interval, vals_point)


class ElementEvaluator:
    """Tensor-product basis values on one element."""

    def __init__(self, space: TensorProductSpace, element: Tuple[int, int], derivatives: int,
                 vals_x: BasisValues, vals_y: BasisValues):
        self.space = space
        self.element = element
        self.derivatives = derivatives
        self._vals_x = vals_x
        self._vals_y = vals_y

    def __call__(self, dof: DofIndex, q: Tuple[int, int]) -> FunctionValue:
        qx, qy = q
        ix, iy = self.space.index_on_element(dof, self.element)

        Bx = self._vals_x(qx, ix, 0)
        By = self._vals_y(qy, iy, 0)
        if self.derivatives < 1:
            return FunctionValue(Bx * By, 0.0, 0.0)
        dBx = self._vals_x(qx, ix, 1)
        dBy = self._vals_y(qy, iy, 1)
        return FunctionValue(Bx * By, dBx * By, Bx * dBy)

    def tabulate(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        All values at once.

        Returns:
            (val, dx, dy), each of shape (n_points, n_local_dofs); points
            in TensorQuadraturePoints.indices() order, DOFs by local index
        """
        vx = self._vals_x.values
        vy = self._vals_y.values
        n_points = vx.shape[0] * vy.shape[0]
        n_dofs = vx.shape[2] * vy.shape[2]

        def product(ax, ay):
            return np.einsum("ai,bj->abij", ax, ay).reshape(n_points, n_dofs)

        val = product(vx[:, 0], vy[:, 0])
        if self.derivatives < 1:
            zeros = np.zeros_like(val)
            return val, zeros, zeros.copy()
        dx = product(vx[:, 1], vy[:, 0])
        dy = product(vx[:, 0], vy[:, 1])
        return val, dx, dy


class EdgeEvaluator:
    """Tensor-product basis values on one edge, one-sided across it."""

    def __init__(self, space: TensorProductSpace, facet: EdgeIndex, derivatives: int,
                 vals_interval: BasisValues, vals_point: BasisValuesOnVertex):
        self.space = space
        self.facet = facet
        self.derivatives = derivatives
        self._vals_interval = vals_interval
        self._vals_point = vals_point

    @property
    def vertex_values(self) -> BasisValuesOnVertex:
        return self._vals_point

    def __call__(self, dof: DofIndex, q: int) -> FunctionValue:
        ix, iy = self.space.index_on_facet(dof, self.facet)
        interval, point = self._vals_interval, self._vals_point
        d = self.derivatives >= 1

        if self.facet.direction is Orientation.HORIZONTAL:
            Bx = interval(q, ix, 0)
            dBx = interval(q, ix, 1) if d else 0.0
            By = point(iy, 0)
            dBy = point(iy, 1) if d else 0.0
        else:
            Bx = point(ix, 0)
            dBx = point(ix, 1) if d else 0.0
            By = interval(q, iy, 0)
            dBy = interval(q, iy, 1) if d else 0.0

        return FunctionValue(Bx * By, dBx * By, Bx * dBy)

    def tabulate(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """(val, dx, dy) of shape (n_points, n_facet_dofs), DOFs by facet-local index."""
        layout = self.space.facet_layout(self.facet)
        horizontal = self.facet.direction is Orientation.HORIZONTAL
        n_vertex = layout.extents[1] if horizontal else layout.extents[0]

        tab = self._vals_interval.values
        n_points = tab.shape[0]
        n_ders = 2 if self.derivatives >= 1 else 1
        vertex = np.array([[self._vals_point(i, k) for i in range(n_vertex)]
                           for k in range(n_ders)])

        def product(interval, point):
            if horizontal:
                return np.einsum("qi,j->qij", interval, point).reshape(n_points, layout.size)
            return np.einsum("i,qj->qij", point, interval).reshape(n_points, layout.size)

        val = product(tab[:, 0], vertex[0])
        if self.derivatives < 1:
            zeros = np.zeros_like(val)
            return val, zeros, zeros.copy()
        d_interval = product(tab[:, 1], vertex[0])
        d_point = product(tab[:, 0], vertex[1])
        if horizontal:
            return val, d_interval, d_point
        return val, d_point, d_interval
