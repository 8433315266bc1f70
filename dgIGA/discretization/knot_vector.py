"""
Knot vector utilities for DG/IGA spaces.

A knot vector is a non-decreasing sequence of real numbers that defines
the parametric domain and basis function support for B-splines.

Mathematical background:
- Open knot vectors have p+1 repeated knots at each end (interpolatory at boundaries)
- The number of basis functions n = len(knots) - p - 1
- Knot spans (elements) are intervals [xi_i, xi_{i+1}] where xi_i < xi_{i+1}
- An interior knot of multiplicity m gives continuity C^{p-m} there;
  multiplicity p+1 makes the basis fully discontinuous (C^-1)

Constructors:
    make_open_knot_vector(n_basis, p)          # uniform, single interior knots
    make_knot_vector(a, b, p, n_elem, r)       # interior knots repeated r+1 times
    make_bspline_knot_vector(points, p, c)     # from a partition and a continuity
    make_graded_knot_vector(a, b, p, n_elem, r) # piecewise-linear graded breakpoints
"""

import numpy as np
from typing import List, Sequence, Tuple
from dataclasses import dataclass


@dataclass
class KnotVector:
    """
    Represents a univariate knot vector.

    Attributes:
        knots: The knot values (non-decreasing sequence)
        degree: Polynomial degree p

    Properties computed:
        n_basis: Number of basis functions
        n_elements: Number of non-zero measure knot spans
        spans: Knot span index of each element
        breakpoints: Unique knot values (mesh vertices)
    """
    knots: np.ndarray
    degree: int

    def __post_init__(self):
        self.knots = np.asarray(self.knots, dtype=np.float64)
        self._validate()
        self._breakpoints = np.unique(self.knots)
        self._spans = spans_for_elements(self)

    def _validate(self):
        if self.degree < 0:
            raise ValueError(f"Degree must be non-negative, got {self.degree}.")
        if len(self.knots) < 2 * (self.degree + 1):
            raise ValueError(
                f"Knot vector too short for degree {self.degree}. "
                f"Need at least {2 * (self.degree + 1)} knots, got {len(self.knots)}."
            )
        if not np.all(np.diff(self.knots) >= 0):
            raise ValueError("Knot vector must be non-decreasing.")
        p = self.degree
        if np.any(self.knots[:p + 1] != self.knots[0]) or \
                np.any(self.knots[-(p + 1):] != self.knots[-1]):
            raise ValueError(
                f"Knot vector must be open: end knots need multiplicity {p + 1}."
            )
        if self.knots[0] == self.knots[-1]:
            raise ValueError("Knot vector spans an empty domain.")
        counts = np.unique(self.knots, return_counts=True)[1]
        if np.any(counts[1:-1] > p + 1):
            raise ValueError(f"Interior knot multiplicity exceeds {p + 1}.")

    @property
    def n_basis(self) -> int:
        """Number of basis functions."""
        return len(self.knots) - self.degree - 1

    @property
    def n_elements(self) -> int:
        """Number of non-zero measure knot spans (elements)."""
        return len(self._breakpoints) - 1

    @property
    def breakpoints(self) -> np.ndarray:
        """Unique knot values, i.e. the vertices of the underlying partition."""
        return self._breakpoints.copy()

    @property
    def spans(self) -> List[int]:
        """Knot span index of each element, in increasing order."""
        return list(self._spans)

    @property
    def domain(self) -> Tuple[float, float]:
        """Parametric domain (first knot, last knot)."""
        return (float(self._breakpoints[0]), float(self._breakpoints[-1]))

    @property
    def elements(self) -> List[Tuple[float, float]]:
        """List of element intervals as (xi_start, xi_end) tuples."""
        b = self._breakpoints
        return [(float(b[i]), float(b[i + 1])) for i in range(len(b) - 1)]

    def find_span(self, xi: float) -> int:
        """
        Find the knot span index containing parameter value xi.

        For xi in [xi_i, xi_{i+1}) with xi_i < xi_{i+1}, returns i.
        The last span is closed: xi equal to the right end of the domain
        belongs to it. Points outside the domain are clamped.
        """
        n = self.n_basis
        p = self.degree
        knots = self.knots

        if xi >= knots[n]:
            return n - 1
        if xi <= knots[p]:
            return p

        low = p
        high = n
        mid = (low + high) // 2
        while xi < knots[mid] or xi >= knots[mid + 1]:
            if xi < knots[mid]:
                high = mid
            else:
                low = mid
            mid = (low + high) // 2
        return mid

    def find_element(self, xi: float) -> int:
        """Index of the element containing xi (half-open, last element closed)."""
        a, b = self.domain
        if xi < a or xi > b:
            raise ValueError(f"Parameter {xi} outside domain {self.domain}")
        return self._spans.index(self.find_span(xi))


def spans_for_elements(kv: KnotVector) -> List[int]:
    """
    Knot span index of every element.

    A span is every index i with knots[i] != knots[i+1], in increasing
    order. There is exactly one per element.
    """
    knots = kv.knots
    spans = [i for i in range(len(knots) - 1) if knots[i] != knots[i + 1]]
    assert len(spans) == len(np.unique(knots)) - 1, "Span count differs from element count"
    return spans


def first_nonzero_dofs(kv: KnotVector) -> List[int]:
    """Global index of the first basis function supported on each element."""
    return [span - kv.degree for span in kv.spans]


def compute_multiplicity(kv: KnotVector, xi: float, tol: float = 1e-14) -> int:
    """Number of times xi appears in the knot vector."""
    return int(np.sum(np.abs(kv.knots - xi) < tol))


def continuity_at(kv: KnotVector, xi: float) -> int:
    """Continuity order of the basis at breakpoint xi (-1 means discontinuous)."""
    return kv.degree - compute_multiplicity(kv, xi)


def make_open_knot_vector(n_basis: int, degree: int,
                          domain: Tuple[float, float] = (0.0, 1.0)) -> KnotVector:
    """
    Create an open (clamped) uniform knot vector with a given number of functions.

    Parameters:
        n_basis: Number of basis functions desired
        degree: Polynomial degree p
        domain: Parametric domain (start, end)
    """
    p = degree
    n_internal = n_basis + p + 1 - 2 * (p + 1)
    if n_internal < 0:
        raise ValueError(
            f"Cannot create knot vector: n_basis={n_basis} too small for degree={degree}"
        )
    a, b = domain
    internal = np.linspace(a, b, n_internal + 2)[1:-1]
    knots = np.concatenate([[a] * (p + 1), internal, [b] * (p + 1)])
    return KnotVector(knots, degree)


def _knots_from_points(points: Sequence[float], degree: int, repeated: int) -> np.ndarray:
    points = np.asarray(points, dtype=np.float64)
    if len(points) < 2:
        raise ValueError("Need at least two breakpoints to build a knot vector.")
    if not np.all(np.diff(points) > 0):
        raise ValueError("Breakpoints must be strictly increasing.")
    if repeated < 1 or repeated > degree + 1:
        raise ValueError(
            f"Interior knot multiplicity must be in [1, {degree + 1}], got {repeated}."
        )
    return np.concatenate([
        np.full(degree + 1, points[0]),
        np.repeat(points[1:-1], repeated),
        np.full(degree + 1, points[-1]),
    ])


def make_knot_vector(a: float, b: float, degree: int, n_elements: int,
                     repeated_nodes: int = 0) -> KnotVector:
    """
    Open uniform knot vector on [a, b] with interior knots repeated.

    End knots have multiplicity degree+1 and interior knots
    repeated_nodes+1, so the continuity at interior breakpoints is
    degree - repeated_nodes - 1.
    """
    if n_elements < 1:
        raise ValueError(f"Need at least one element, got {n_elements}.")
    points = np.linspace(a, b, n_elements + 1)
    return KnotVector(_knots_from_points(points, degree, repeated_nodes + 1), degree)


def make_bspline_knot_vector(points: Sequence[float], degree: int,
                             continuity: int) -> KnotVector:
    """
    Open knot vector over a partition with prescribed interior continuity.

    Each interior breakpoint is repeated degree - continuity times
    (continuity = -1 gives a fully discontinuous basis).
    """
    if not -1 <= continuity <= degree - 1:
        raise ValueError(
            f"Continuity must be in [-1, {degree - 1}] for degree {degree}, got {continuity}."
        )
    return KnotVector(_knots_from_points(points, degree, degree - continuity), degree)


def make_graded_knot_vector(a: float, b: float, degree: int, n_elements: int,
                            repeated_nodes: int = 0,
                            x0: float = 0.5, y0: float = 0.9) -> KnotVector:
    """
    Open knot vector whose breakpoints are graded by a piecewise-linear map.

    Uniform parameters t in [0, x0] are mapped onto [0, y0] and t in
    [x0, 1] onto [y0, 1], then onto [a, b]. With the defaults the first
    half of the elements covers 90% of [a, b], concentrating resolution
    near b.
    """
    if n_elements < 1:
        raise ValueError(f"Need at least one element, got {n_elements}.")
    if not (0.0 < x0 < 1.0 and 0.0 < y0 < 1.0):
        raise ValueError("Grading parameters x0, y0 must lie in (0, 1).")
    t = np.linspace(0.0, 1.0, n_elements + 1)
    s = np.where(t < x0, t / x0 * y0, (t - x0) / (1 - x0) * (1 - y0) + y0)
    points = (1 - s) * a + s * b
    return KnotVector(_knots_from_points(points, degree, repeated_nodes + 1), degree)
