"""
Tests for error norms, grid sampling, text export and plotting.
"""

import pytest
import numpy as np
from numpy.testing import assert_almost_equal, assert_array_almost_equal

from dgIGA.discretization.function import BSplineFunction
from dgIGA.postprocess.sampling import (
    compute_l2_error, compute_h1_seminorm_error, sample_solution_2d, export_solution_text
)
from dgIGA.quadrature.gauss import Quadrature


@pytest.fixture
def constant(smooth_space):
    u = BSplineFunction(smooth_space)
    u.data[:] = 1.0
    return u


class TestErrorNorms:
    """Tests for L2 and H1 seminorm errors."""

    def test_l2_error_of_constant(self, constant):
        quad = Quadrature(constant.space.mesh, 3)
        assert_almost_equal(compute_l2_error(constant, quad, lambda x, y: 1.0), 0.0)
        assert_almost_equal(compute_l2_error(constant, quad, lambda x, y: 0.0), 1.0)

    def test_l2_error_polynomial(self, constant):
        """||1 - x||_L2 on the unit square is 1/sqrt(3)."""
        quad = Quadrature(constant.space.mesh, 2)
        assert_almost_equal(compute_l2_error(constant, quad, lambda x, y: x),
                            1 / np.sqrt(3))

    def test_h1_seminorm_error(self, constant):
        quad = Quadrature(constant.space.mesh, 2)
        assert_almost_equal(
            compute_h1_seminorm_error(constant, quad, lambda x, y: (0.0, 0.0)), 0.0)
        assert_almost_equal(
            compute_h1_seminorm_error(constant, quad, lambda x, y: (1.0, 2.0)), np.sqrt(5))


class TestSampling:
    """Tests for uniform grid sampling and export."""

    def test_sample_solution_2d(self, constant):
        X, Y, U = sample_solution_2d(constant, 5, 7)
        assert X.shape == Y.shape == U.shape == (5, 7)
        assert_array_almost_equal(U, 1.0)
        assert X[0, 0] == 0.0 and X[-1, 0] == 1.0
        assert Y[0, -1] == 1.0

    def test_export_solution_text(self, constant, tmp_path):
        path = export_solution_text(tmp_path / "u.data", constant, 4)

        lines = path.read_text().splitlines()
        assert len(lines) == 25
        data = np.array([[float(v) for v in line.split()] for line in lines])
        assert_array_almost_equal(data[:5, 0], 0.0)
        assert_array_almost_equal(data[:5, 1], [0.0, 0.25, 0.5, 0.75, 1.0])
        assert_array_almost_equal(data[:, 2], 1.0)

    def test_export_accepts_str_path(self, constant, tmp_path):
        path = export_solution_text(str(tmp_path / "u.data"), constant, 1)
        assert path.exists()
        assert len(path.read_text().splitlines()) == 4


class TestPlot:
    """Tests for contour plotting."""

    def test_plot_solution_2d(self, constant, tmp_path):
        matplotlib = pytest.importorskip("matplotlib")
        matplotlib.use("Agg")
        from dgIGA.postprocess.plot import plot_solution_2d

        figure = tmp_path / "u.png"
        fig = plot_solution_2d(constant, n_samples=10, filename=figure)
        assert figure.exists()
        assert len(fig.axes) == 2
