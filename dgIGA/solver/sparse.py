"""
Sparse linear system in triplet form and a direct solver.

SparseProblem collects (row, col, value) entries with 1-based indices;
duplicate (row, col) pairs are summed when the matrix is built. The
right-hand side is a dense buffer owned by the caller: DirectSolver
writes the solution back into it.

    rhs = np.zeros(n)
    problem = SparseProblem(rhs, n)
    problem.add(1, 1, 2.0)
    ...
    DirectSolver().solve(problem)   # rhs now holds the solution
"""

import logging
import time

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import spsolve

logger = logging.getLogger(__name__)


class SparseProblem:
    """
    Square sparse system A x = b assembled from triplets.

    Attributes:
        rhs: Right-hand side buffer (shape (size,)), overwritten by the solution
        size: Number of unknowns
    """

    def __init__(self, rhs: np.ndarray, size: int):
        if rhs.shape != (size,):
            raise ValueError(f"RHS buffer has shape {rhs.shape}, expected ({size},)")
        self.rhs = rhs
        self.size = size
        self._rows = []
        self._cols = []
        self._values = []
        self._count = 0

    def add(self, row: int, col: int, value: float):
        """Add value at (row, col), both 1-based."""
        if not (1 <= row <= self.size and 1 <= col <= self.size):
            raise IndexError(f"Entry ({row}, {col}) outside a {self.size}x{self.size} system")
        self._rows.append(np.array([row]))
        self._cols.append(np.array([col]))
        self._values.append(np.array([value], dtype=np.float64))
        self._count += 1

    def add_entries(self, rows: np.ndarray, cols: np.ndarray, values: np.ndarray):
        """Add a batch of 1-based triplets."""
        rows = np.asarray(rows, dtype=np.int64).ravel()
        cols = np.asarray(cols, dtype=np.int64).ravel()
        values = np.asarray(values, dtype=np.float64).ravel()
        if not (rows.shape == cols.shape == values.shape):
            raise ValueError("Triplet arrays must have equal length")
        if rows.size == 0:
            return
        if rows.min() < 1 or cols.min() < 1 or rows.max() > self.size or cols.max() > self.size:
            raise IndexError(f"Entries outside a {self.size}x{self.size} system")
        self._rows.append(rows)
        self._cols.append(cols)
        self._values.append(values)
        self._count += rows.size

    def nonzero_entries(self) -> int:
        """Number of triplets added so far (duplicates counted separately)."""
        return self._count

    def to_csr(self) -> sparse.csr_matrix:
        """Assembled matrix with duplicate entries summed."""
        if self._count == 0:
            return sparse.csr_matrix((self.size, self.size))
        rows = np.concatenate(self._rows) - 1
        cols = np.concatenate(self._cols) - 1
        values = np.concatenate(self._values)
        return sparse.coo_matrix((values, (rows, cols)),
                                 shape=(self.size, self.size)).tocsr()


class DirectSolver:
    """Sparse direct solve with scipy (SuperLU)."""

    def solve(self, problem: SparseProblem) -> np.ndarray:
        """
        Solve the problem and store the solution in problem.rhs.

        Returns:
            problem.rhs
        """
        t0 = time.perf_counter()
        A = problem.to_csr().tocsc()
        x = spsolve(A, problem.rhs)
        if not np.all(np.isfinite(x)):
            raise RuntimeError("Sparse direct solve failed: singular or ill-posed system")
        problem.rhs[:] = x
        logger.debug("Direct solve of %d unknowns took %.3f s",
                     problem.size, time.perf_counter() - t0)
        return problem.rhs
