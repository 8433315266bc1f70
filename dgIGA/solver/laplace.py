"""
Laplace/Poisson problem with weakly imposed Dirichlet data.

Solves
    -∇²u = f    in Ω
        u = g    on ∂Ω

with the symmetric interior-penalty (Nitsche) formulation:

    a(u, v) = ∫_Ω ∇u·∇v
            + ∫_∂Ω ( -(∇v·n) u - (∇u·n) v + η u v )

    l(v)    = ∫_Ω f v
            + ∫_∂Ω ( -(∇v·n) g + η g v )

The penalty η = penalty_factor / h, h the smallest element size. The
formulation is consistent, so any exact solution contained in the space
is reproduced regardless of η.

Usage:
    mesh = RegularMesh(xs, ys)
    space = TensorProductSpace(mesh, kx, ky)
    solver = DGLaplaceSolver(space, Quadrature(mesh, p + 1),
                             source=f, dirichlet=g)
    u_h = solver.run()
    err = solver.l2_error(u_exact)
"""

import logging
import time
from typing import Callable, Optional

import numpy as np

from .base import Solver, Tabulation, sample_callable
from ..discretization.mesh import EdgeIndex
from ..discretization.space import TensorProductSpace
from ..postprocess.sampling import compute_h1_seminorm_error, compute_l2_error
from ..quadrature.gauss import Quadrature

logger = logging.getLogger(__name__)

ScalarField = Callable[[float, float], float]


class DGLaplaceSolver(Solver):
    """
    Nitsche/interior-penalty solver for the Poisson equation.

    Parameters:
        space: Tensor-product B-spline space
        quadrature: Quadrature over the space's mesh
        source: Source term f(x, y), defaults to 0
        dirichlet: Boundary data g(x, y), defaults to 0
        penalty_factor: η * h
    """

    def __init__(self, space: TensorProductSpace, quadrature: Quadrature,
                 source: Optional[ScalarField] = None,
                 dirichlet: Optional[ScalarField] = None,
                 penalty_factor: float = 1e6):
        super().__init__(space, quadrature)
        self.source = source if source is not None else lambda x, y: 0.0
        self.dirichlet = dirichlet if dirichlet is not None else lambda x, y: 0.0
        self.penalty = penalty_factor / self.mesh.min_element_size()
        logger.debug("Boundary penalty: %g", self.penalty)

    def element_matrix(self, points, values: Tabulation) -> np.ndarray:
        val, dx, dy = values
        M = np.zeros((val.shape[1], val.shape[1]))
        for q, w in enumerate(points.weights()):
            M += (np.outer(dx[q], dx[q]) + np.outer(dy[q], dy[q])) * w
        return M

    def element_load(self, points, values: Tabulation) -> np.ndarray:
        val = values[0]
        f = sample_callable(self.source, points.coords_array())
        return val.T @ (f * points.weights())

    def boundary_matrix(self, facet: EdgeIndex, points, values: Tabulation) -> np.ndarray:
        nx, ny = self.mesh.facet(facet).normal
        val, dx, dy = values
        dn = dx * nx + dy * ny
        eta = self.penalty

        M = np.zeros((val.shape[1], val.shape[1]))
        for q, w in enumerate(points.weights()):
            # rows: test v_j, columns: trial u_i
            M += (- np.outer(dn[q], val[q])
                  - np.outer(val[q], dn[q])
                  + eta * np.outer(val[q], val[q])) * w
        return M

    def boundary_load(self, facet: EdgeIndex, points, values: Tabulation) -> np.ndarray:
        nx, ny = self.mesh.facet(facet).normal
        val, dx, dy = values
        dn = dx * nx + dy * ny
        g = sample_callable(self.dirichlet, points.coords_array())
        gw = g * points.weights()
        return -dn.T @ gw + self.penalty * (val.T @ gw)

    def l2_error(self, exact: ScalarField) -> float:
        t0 = time.perf_counter()
        error = compute_l2_error(self.solution, self.quadrature, exact)
        self.timings["error"] = time.perf_counter() - t0
        return error

    def h1_seminorm_error(self, exact_gradient) -> float:
        return compute_h1_seminorm_error(self.solution, self.quadrature, exact_gradient)


def manufactured_solution(x: float, y: float) -> float:
    """u = 1 + sin(πx) sin(πy)"""
    return 1 + np.sin(np.pi * x) * np.sin(np.pi * y)


def manufactured_gradient(x: float, y: float):
    return (np.pi * np.cos(np.pi * x) * np.sin(np.pi * y),
            np.pi * np.sin(np.pi * x) * np.cos(np.pi * y))


def manufactured_source(x: float, y: float) -> float:
    """f = -∇²u = 2π² sin(πx) sin(πy)"""
    return 2 * np.pi ** 2 * np.sin(np.pi * x) * np.sin(np.pi * y)
