"""
Pytest configuration and shared fixtures for dgIGA tests.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dgIGA.discretization.knot_vector import make_bspline_knot_vector
from dgIGA.discretization.mesh import RegularMesh, evenly_spaced
from dgIGA.discretization.space import TensorProductSpace


@pytest.fixture
def tolerance():
    """Default tolerance for floating point comparisons."""
    return 1e-12


@pytest.fixture
def loose_tolerance():
    """Looser tolerance for numerical integration tests."""
    return 1e-8


def make_space(n_elements, degree, continuity, ny=None):
    """Tensor-product space on the unit square with uniform partitions."""
    ny = n_elements if ny is None else ny
    xs = evenly_spaced(0.0, 1.0, n_elements)
    ys = evenly_spaced(0.0, 1.0, ny)
    mesh = RegularMesh(xs, ys)
    return TensorProductSpace(mesh,
                              make_bspline_knot_vector(xs, degree, continuity),
                              make_bspline_knot_vector(ys, degree, continuity))


@pytest.fixture
def smooth_space():
    """3x3 elements, quadratic C^1."""
    return make_space(3, 2, 1)


@pytest.fixture
def broken_space():
    """3x3 elements, quadratic C^-1 (discontinuous)."""
    return make_space(3, 2, -1)


@pytest.fixture
def space_factory():
    """make_space(n_elements, degree, continuity, ny=None)."""
    return make_space
