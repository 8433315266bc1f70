"""
Tests for the dgiga command line.
"""

import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

from dgIGA.cli import main, run_laplace, run_spaces
from dgIGA.io.config import LaplaceConfig, SpacesConfig
from dgIGA.solver.base import SpaceDimensionError


class TestLaplaceCommand:

    def test_run_laplace(self, tmp_path):
        output = tmp_path / "u.data"
        results = run_laplace(LaplaceConfig(elements=4, degree=2, continuity=1,
                                            output=str(output), samples=3))
        assert results["dofs"] == 36
        assert results["l2_error"] < 5e-2
        assert results["nonzeros"] > 0
        assert len(output.read_text().splitlines()) == 16

    def test_main(self, tmp_path, caplog):
        output = tmp_path / "u.data"
        with caplog.at_level(logging.INFO):
            code = main(["laplace", "--elements", "2", "--degree", "2",
                         "--output", str(output), "--samples", "4"])
        assert code == 0
        assert len(output.read_text().splitlines()) == 25
        assert "L2 error" in caplog.text

    def test_config_file_with_override(self, tmp_path):
        output = tmp_path / "u.data"
        config = tmp_path / "run.toml"
        config.write_text(f'[laplace]\nelements = 2\nsamples = 1\noutput = "{output.as_posix()}"\n')

        assert main(["laplace", "--config", str(config), "--samples", "2"]) == 0
        assert len(output.read_text().splitlines()) == 9

    def test_invalid_config(self, tmp_path, caplog):
        config = tmp_path / "run.toml"
        config.write_text("[laplace]\ndegree = 1\ncontinuity = 1\n")
        assert main(["laplace", "--config", str(config)]) == 1
        assert main(["laplace", "--config", str(tmp_path / "missing.toml")]) == 1

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            main([])


class TestSpacesCommand:

    def test_compatible_spaces(self):
        assert main(["spaces", "--elements", "4"]) == 0

    def test_incompatible_spaces(self, caplog):
        with caplog.at_level(logging.ERROR):
            code = main(["spaces", "--elements", "4",
                         "--trial-continuity", "-1", "--test-continuity", "1"])
        assert code == 1
        assert "Dimension of the trial space greater than that of test space" in caplog.text

    def test_graded_in_x_only(self):
        trial, test = run_spaces(SpacesConfig(elements=4))
        uniform = np.linspace(0.0, 1.0, 5)
        assert_allclose(trial.mesh.mesh_y.points, uniform)
        assert not np.allclose(trial.mesh.mesh_x.points, uniform)
        assert_allclose(test.space_x.basis.breakpoints, trial.mesh.mesh_x.points)

    def test_run_spaces_raises(self):
        with pytest.raises(SpaceDimensionError):
            run_spaces(SpacesConfig(elements=3, trial_degree=3, trial_continuity=0,
                                    test_degree=2, test_continuity=1))
