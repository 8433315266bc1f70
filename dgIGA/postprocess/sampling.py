"""
Solution sampling and error norms.

Key functions:
- compute_l2_error: ||u_h - u||_L2 by Gauss quadrature over all elements
- compute_h1_seminorm_error: ||∇(u_h - u)||_L2 likewise
- sample_solution_2d: evaluate a solution on a uniform grid
- export_solution_text: write "x y value" lines on a uniform grid

The errors evaluate the solution function point by point at every
element quadrature point.
"""

from pathlib import Path
from typing import Callable, Tuple, Union

import numpy as np

from ..discretization.function import BSplineFunction
from ..discretization.mesh import evenly_spaced
from ..quadrature.gauss import Quadrature


def compute_l2_error(u_h: BSplineFunction, quadrature: Quadrature,
                     u_exact: Callable[[float, float], float]) -> float:
    """
    sqrt( sum over elements and points of (u_h(x) - u(x))^2 * w )
    """
    err = 0.0
    for e in quadrature.mesh.elements():
        points = quadrature.element_points(e)
        for q in points.indices():
            (x, y), w = points.data(q)
            d = u_h((x, y)) - u_exact(x, y)
            err += d * d * w
    return float(np.sqrt(err))


def compute_h1_seminorm_error(u_h: BSplineFunction, quadrature: Quadrature,
                              grad_exact: Callable[[float, float], Tuple[float, float]]) -> float:
    err = 0.0
    for e in quadrature.mesh.elements():
        points = quadrature.element_points(e)
        for q in points.indices():
            (x, y), w = points.data(q)
            dx, dy = u_h.gradient((x, y))
            ex, ey = grad_exact(x, y)
            err += ((dx - ex) ** 2 + (dy - ey) ** 2) * w
    return float(np.sqrt(err))


def sample_solution_2d(u_h: BSplineFunction, n_x: int = 50,
                       n_y: int = 50) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Sample a solution on a uniform grid covering the space's domain.

    Returns:
        (X, Y, U), each of shape (n_x, n_y)
    """
    ax, bx = u_h.space.space_x.basis.domain
    ay, by = u_h.space.space_y.basis.domain
    xs = np.linspace(ax, bx, n_x)
    ys = np.linspace(ay, by, n_y)
    X, Y = np.meshgrid(xs, ys, indexing="ij")

    U = np.zeros((n_x, n_y))
    for i, x in enumerate(xs):
        for j, y in enumerate(ys):
            U[i, j] = u_h((x, y))
    return X, Y, U


def export_solution_text(path: Union[str, Path], u_h: BSplineFunction, n: int = 100) -> Path:
    """
    Write "x y value" lines on an evenly spaced (n+1) x (n+1) grid.

    x is the outer loop. Returns the written path.
    """
    path = Path(path)
    ax, bx = u_h.space.space_x.basis.domain
    ay, by = u_h.space.space_y.basis.domain
    with path.open("w") as out:
        for x in evenly_spaced(ax, bx, n):
            for y in evenly_spaced(ay, by, n):
                out.write(f"{x} {y} {u_h((x, y))}\n")
    return path
