"""
Base solver class for DG/IGA problems on tensor-product spaces.

This module defines the element-by-element assembly loop shared by all
problems; subclasses only provide local forms.

The assembly loop is:
    for e in mesh.elements():
        # 1. Quadrature points on the element
        # 2. Evaluator of all local basis functions (values + gradients)
        # 3. Local matrix M[j_loc, i_loc] = a(u_i, v_j) (test index first)
        # 4. Scatter: problem.add(J + 1, I + 1, M[j_loc, i_loc])
    for f in mesh.boundary_facets():
        # same on the edge, scattering only non-zero entries

Global indices are 1-based in the triplets and the test DOF is the row.

The right-hand side is accumulated directly into the coefficient buffer
of the solution function, which the direct solver then overwrites with
the solution.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple

import numpy as np

from ..discretization.function import BSplineFunction
from ..discretization.mesh import EdgeIndex
from ..discretization.space import TensorProductSpace
from ..quadrature.gauss import Quadrature
from .sparse import DirectSolver, SparseProblem

logger = logging.getLogger(__name__)

Tabulation = Tuple[np.ndarray, np.ndarray, np.ndarray]


class SpaceDimensionError(ValueError):
    """Trial space larger than test space in a Petrov-Galerkin setting."""


def check_space_dimensions(trial: TensorProductSpace, test: TensorProductSpace):
    """Raise SpaceDimensionError if dim(trial) > dim(test)."""
    trial_dim = trial.dof_count()
    test_dim = test.dof_count()
    if trial_dim > test_dim:
        raise SpaceDimensionError(
            f"Dimension of the trial space greater than that of test space "
            f"({trial_dim} > {test_dim})"
        )


class Solver(ABC):
    """
    Abstract Galerkin solver.

    Subclasses implement the local forms:
    - element_matrix / element_load: volume terms
    - boundary_matrix / boundary_load: boundary facet terms (optional)

    Attributes:
        space: Trial/test space
        quadrature: Quadrature rule over the mesh
        solution: BSplineFunction holding the RHS, then the solution
        problem: SparseProblem receiving the triplets
        timings: Seconds spent per assembly phase
    """

    def __init__(self, space: TensorProductSpace, quadrature: Quadrature):
        self.space = space
        self.mesh = space.mesh
        self.quadrature = quadrature
        self.solution = BSplineFunction(space)
        self.problem = SparseProblem(self.solution.data, space.dof_count())
        self.timings = {}

    @abstractmethod
    def element_matrix(self, points, values: Tabulation) -> np.ndarray:
        """Local matrix M[j_loc, i_loc] = a_e(u_i, v_j)."""

    @abstractmethod
    def element_load(self, points, values: Tabulation) -> np.ndarray:
        """Local load vector F[j_loc] = l_e(v_j)."""

    def boundary_matrix(self, facet: EdgeIndex, points,
                        values: Tabulation) -> Optional[np.ndarray]:
        return None

    def boundary_load(self, facet: EdgeIndex, points,
                      values: Tabulation) -> Optional[np.ndarray]:
        return None

    def _element_dofs(self, e) -> np.ndarray:
        """Global indices of the DOFs of element e, ordered by local index."""
        dofs = self.space.dofs(e)
        indices = np.empty(len(dofs), dtype=np.int64)
        for dof in dofs:
            indices[self.space.local_index(dof, e)] = self.space.global_index(dof)
        return indices

    def _facet_dofs(self, f: EdgeIndex) -> np.ndarray:
        dofs = self.space.dofs_on_facet(f)
        indices = np.empty(len(dofs), dtype=np.int64)
        for dof in dofs:
            indices[self.space.facet_local_index(dof, f)] = self.space.global_index(dof)
        return indices

    def _scatter(self, M: np.ndarray, dofs: np.ndarray, skip_zeros: bool = False):
        n = len(dofs)
        rows = np.repeat(dofs, n) + 1   # test DOF J
        cols = np.tile(dofs, n) + 1     # trial DOF I
        values = M.ravel()
        if skip_zeros:
            mask = values != 0.0
            rows, cols, values = rows[mask], cols[mask], values[mask]
        self.problem.add_entries(rows, cols, values)

    def assemble_matrix(self):
        t0 = time.perf_counter()
        for e in self.mesh.elements():
            points = self.quadrature.element_points(e)
            evaluator = self.space.dof_evaluator(e, points, 1)
            M = self.element_matrix(points, evaluator.tabulate())
            self._scatter(M, self._element_dofs(e))
        t1 = time.perf_counter()

        for f in self.mesh.boundary_facets():
            points = self.quadrature.facet_points(f)
            evaluator = self.space.facet_dof_evaluator(f, points, 1)
            M = self.boundary_matrix(f, points, evaluator.tabulate())
            if M is not None:
                self._scatter(M, self._facet_dofs(f), skip_zeros=True)
        t2 = time.perf_counter()

        self.timings["matrix"] = t1 - t0
        self.timings["boundary"] = t2 - t1
        logger.info("Non-zeros: %d", self.problem.nonzero_entries())

    def assemble_rhs(self):
        rhs = self.solution.data
        t0 = time.perf_counter()
        for e in self.mesh.elements():
            points = self.quadrature.element_points(e)
            evaluator = self.space.dof_evaluator(e, points, 1)
            rhs[self._element_dofs(e)] += self.element_load(points, evaluator.tabulate())
        t1 = time.perf_counter()

        for f in self.mesh.boundary_facets():
            points = self.quadrature.facet_points(f)
            evaluator = self.space.facet_dof_evaluator(f, points, 1)
            F = self.boundary_load(f, points, evaluator.tabulate())
            if F is not None:
                rhs[self._facet_dofs(f)] += F
        t2 = time.perf_counter()

        self.timings["rhs"] = t1 - t0
        self.timings["rhs_boundary"] = t2 - t1

    def solve(self) -> BSplineFunction:
        t0 = time.perf_counter()
        DirectSolver().solve(self.problem)
        self.timings["solver"] = time.perf_counter() - t0
        return self.solution

    def run(self) -> BSplineFunction:
        """Assemble matrix and RHS, then solve."""
        logger.info("DoFs: %d", self.space.dof_count())
        self.assemble_matrix()
        logger.info("Computing RHS")
        self.assemble_rhs()
        logger.info("Solving")
        solution = self.solve()
        for phase, seconds in self.timings.items():
            logger.debug("%s: %.1f ms", phase, seconds * 1e3)
        return solution


def sample_callable(f: Callable[[float, float], float], coords: np.ndarray) -> np.ndarray:
    """Evaluate f(x, y) at each row of coords."""
    return np.array([f(x, y) for x, y in coords])
