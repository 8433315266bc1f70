"""
B-spline basis function evaluation.

B-splines are piecewise polynomial functions defined by:
1. A knot vector (non-decreasing sequence of parametric values)
2. A polynomial degree p

The i-th B-spline basis function of degree p is defined recursively:

    N_{i,0}(xi) = 1 if xi_i <= xi < xi_{i+1}, else 0

    N_{i,p}(xi) = (xi - xi_i)/(xi_{i+p} - xi_i) * N_{i,p-1}(xi)
                + (xi_{i+p+1} - xi)/(xi_{i+p+1} - xi_{i+1}) * N_{i+1,p-1}(xi)

Properties:
- Partition of unity: sum of all basis functions = 1
- Non-negativity: N_{i,p}(xi) >= 0
- Local support: N_{i,p} is non-zero only on [xi_i, xi_{i+p+1})
- Smoothness: C^{p-k} at a knot of multiplicity k

Evaluation always goes through a knot span: on span s the p+1
functions N_{s-p}, ..., N_s are non-zero, and they are stored in that
order (local index 0..p). Evaluating at a breakpoint with the span of
the element on its left (right) gives the one-sided limit from the left
(right), which is what DG jump/average operators need.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from ..discretization.knot_vector import KnotVector


@dataclass(frozen=True)
class FunctionValue:
    """Value and gradient of a scalar function of (x, y) at one point."""
    val: float
    dx: float
    dy: float


def eval_basis_with_derivatives(span: int, xi: float, kv: KnotVector,
                                out: np.ndarray, n_ders: int) -> np.ndarray:
    """
    Fill out[k, j] with the k-th derivative of N_{span-p+j} at xi.

    Uses the algorithm from Piegl & Tiller "The NURBS Book" (Algorithm A2.3).
    Derivative orders above p are identically zero.

    Parameters:
        span: Knot span index (knots[span] < knots[span+1])
        xi: Parameter value
        kv: Knot vector
        out: Output buffer of shape (>= n_ders+1, p+1), overwritten
        n_ders: Highest derivative order to compute

    Returns:
        out
    """
    p = kv.degree
    knots = kv.knots
    out[:n_ders + 1] = 0.0

    # ndu: basis functions (upper triangle incl. diagonal) and knot differences
    ndu = np.zeros((p + 1, p + 1))
    ndu[0, 0] = 1.0
    left = np.zeros(p + 1)
    right = np.zeros(p + 1)

    for j in range(1, p + 1):
        left[j] = xi - knots[span + 1 - j]
        right[j] = knots[span + j] - xi
        saved = 0.0
        for r in range(j):
            ndu[j, r] = right[r + 1] + left[j - r]
            temp = ndu[r, j - 1] / ndu[j, r]
            ndu[r, j] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        ndu[j, j] = saved

    out[0, :] = ndu[:, p]

    top = min(n_ders, p)
    a = np.zeros((2, p + 1))
    for r in range(p + 1):
        s1, s2 = 0, 1
        a[0, 0] = 1.0
        for k in range(1, top + 1):
            d = 0.0
            rk = r - k
            pk = p - k
            if r >= k:
                a[s2, 0] = a[s1, 0] / ndu[pk + 1, rk]
                d = a[s2, 0] * ndu[rk, pk]
            j1 = 1 if rk >= -1 else -rk
            j2 = k - 1 if r - 1 <= pk else p - r
            for j in range(j1, j2 + 1):
                a[s2, j] = (a[s1, j] - a[s1, j - 1]) / ndu[pk + 1, rk + j]
                d += a[s2, j] * ndu[rk + j, pk]
            if r <= pk:
                a[s2, k] = -a[s1, k - 1] / ndu[pk + 1, r]
                d += a[s2, k] * ndu[r, pk]
            out[k, r] = d
            s1, s2 = s2, s1

    factor = p
    for k in range(1, top + 1):
        out[k, :] *= factor
        factor *= p - k

    return out


def eval_basis_ders_1d(kv: KnotVector, xi: float, n_ders: int,
                       span: Optional[int] = None) -> np.ndarray:
    """
    Evaluate B-spline basis functions and derivatives at a parameter value.

    Returns:
        Array of shape (n_ders+1, p+1) where result[k, j] is the k-th derivative
        of the j-th non-zero basis function (N_{span-p+j, p})
    """
    if span is None:
        span = kv.find_span(xi)
    out = np.empty((n_ders + 1, kv.degree + 1))
    return eval_basis_with_derivatives(span, xi, kv, out, n_ders)


def eval_basis_1d(kv: KnotVector, xi: float, span: Optional[int] = None) -> np.ndarray:
    """Values of the p+1 non-zero basis functions at xi."""
    return eval_basis_ders_1d(kv, xi, 0, span)[0]


class BasisValues:
    """
    Table of 1D basis values at a set of points.

    values[q, k, i] is the k-th derivative of local basis function i at
    point q, for k = 0..ders.
    """

    __slots__ = ("values",)

    def __init__(self, n_points: int, n_dofs: int, ders: int):
        self.values = np.zeros((n_points, ders + 1, n_dofs))

    @property
    def n_points(self) -> int:
        return self.values.shape[0]

    @property
    def ders(self) -> int:
        return self.values.shape[1] - 1

    def __call__(self, q: int, i: int, der: int) -> float:
        return self.values[q, der, i]

    def point_buffer(self, q: int) -> np.ndarray:
        """Writable (ders+1, n_dofs) view of the data for point q."""
        return self.values[q]


class BasisValuesOnVertex:
    """
    One-sided basis values at a breakpoint.

    Local DOF numbering is the facet numbering: DOFs 0..left_last belong
    to the element on the left, DOFs right_first.. to the element on the
    right. Either side is absent at a domain boundary, not both.
    """

    def __init__(self, left: Optional[BasisValues], right: Optional[BasisValues],
                 left_last: Optional[int], right_first: Optional[int]):
        if left is None and right is None:
            raise ValueError("Neither left nor right adjacent element data specified")
        self._left = left
        self._right = right
        self.left_last = left_last
        self.right_first = right_first

    @property
    def has_left(self) -> bool:
        return self._left is not None

    @property
    def has_right(self) -> bool:
        return self._right is not None

    def __call__(self, i: int, der: int) -> float:
        if self._left is not None and i <= self.left_last:
            return self.left(i, der)
        return self.right(i, der)

    def left(self, i: int, der: int) -> float:
        if self._left is not None and i <= self.left_last:
            return self._left(0, i, der)
        return 0.0

    def right(self, i: int, der: int) -> float:
        if self._right is not None and i >= self.right_first:
            return self._right(0, i - self.right_first, der)
        return 0.0

    def jump(self, i: int, der: int, normal: float) -> float:
        return normal * (self.left(i, der) - self.right(i, der))

    def average(self, i: int, der: int) -> float:
        total = self.left(i, der) + self.right(i, der)
        if self._left is not None and self._right is not None:
            return total / 2
        # the missing side contributes zero
        return total
