"""
Scalar B-spline functions on a tensor-product space.

A BSplineFunction owns one coefficient per global DOF. The coefficient
array doubles as the right-hand side buffer of the linear system: the
assembly adds load contributions into it and the direct solver
overwrites it with the solution, so after solving the function *is* the
discrete solution u_h.

Evaluation allocates its scratch arrays per call and keeps no mutable
state, so a function may be evaluated concurrently from several threads.
"""

from typing import Tuple

import numpy as np

from .space import TensorProductSpace
from ..geometry.bspline import eval_basis_ders_1d


class BSplineFunction:
    """
    u(x, y) = sum_{i,j} c_{ij} N_i(x) N_j(y)

    Attributes:
        space: The tensor-product space
    """

    def __init__(self, space: TensorProductSpace):
        self.space = space
        self._coefficients = np.zeros(space.dof_count())

    @property
    def data(self) -> np.ndarray:
        """Coefficients indexed by global DOF (a view, writable in place)."""
        return self._coefficients

    def _local(self, x: float, y: float, n_ders: int):
        bx = self.space.space_x.basis
        by = self.space.space_y.basis
        span_x = bx.find_span(x)
        span_y = by.find_span(y)
        Nx = eval_basis_ders_1d(bx, x, n_ders, span_x)
        Ny = eval_basis_ders_1d(by, y, n_ders, span_y)

        grid = self._coefficients.reshape(self.space.global_layout().extents)
        first_x = span_x - bx.degree
        first_y = span_y - by.degree
        coeffs = grid[first_x:first_x + bx.degree + 1, first_y:first_y + by.degree + 1]
        return Nx, Ny, coeffs

    def __call__(self, point: Tuple[float, float]) -> float:
        x, y = point
        Nx, Ny, coeffs = self._local(x, y, 0)
        return float(Nx[0] @ coeffs @ Ny[0])

    def gradient(self, point: Tuple[float, float]) -> Tuple[float, float]:
        x, y = point
        Nx, Ny, coeffs = self._local(x, y, 1)
        return (float(Nx[1] @ coeffs @ Ny[0]), float(Nx[0] @ coeffs @ Ny[1]))
