"""
dgIGA - Discontinuous Galerkin Isogeometric Analysis

B-spline spaces of arbitrary degree and continuity (including fully
discontinuous C^-1 bases) on tensor-product meshes, with element and
facet evaluators, Gauss quadrature and sparse assembly of DG forms.

Key modules:
- discretization: Knot vectors, meshes, index layouts, spaces, functions
- geometry: B-spline basis functions and one-sided vertex values
- quadrature: Gauss-Legendre integration on elements and edges
- solver: Sparse problem, assembly loop, DG Laplace (Nitsche) solver
- postprocess: Error norms, sampling, text export, plotting
- io: TOML configuration, logging setup

Quick start:
    from dgIGA.discretization.knot_vector import make_bspline_knot_vector
    from dgIGA.discretization.mesh import RegularMesh, evenly_spaced
    from dgIGA.discretization.space import TensorProductSpace
    from dgIGA.quadrature.gauss import Quadrature
    from dgIGA.solver.laplace import DGLaplaceSolver

    points = evenly_spaced(0, 1, 8)
    basis = make_bspline_knot_vector(points, degree=2, continuity=1)
    mesh = RegularMesh(points, points)
    space = TensorProductSpace(mesh, basis, basis)

    solver = DGLaplaceSolver(space, Quadrature(mesh, 3),
                             source=lambda x, y: 1.0)
    u = solver.run()
"""

__version__ = "0.1.0"

# Core imports for convenience
from .discretization.knot_vector import KnotVector, make_bspline_knot_vector
from .discretization.mesh import RegularMesh, evenly_spaced
from .discretization.space import BSplineSpace, TensorProductSpace
from .discretization.function import BSplineFunction
from .quadrature.gauss import Quadrature
from .solver.base import SpaceDimensionError, check_space_dimensions
from .solver.laplace import DGLaplaceSolver
