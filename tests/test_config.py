"""
Tests for TOML run configuration.
"""

import pytest

from dgIGA.io.config import (
    LaplaceConfig, SpacesConfig, read_toml, load_laplace_config, load_spaces_config
)


def write(tmp_path, text):
    path = tmp_path / "run.toml"
    path.write_text(text)
    return path


class TestReadToml:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_toml(tmp_path / "missing.toml")

    def test_read(self, tmp_path):
        path = write(tmp_path, "[laplace]\nelements = 4\n")
        assert read_toml(path) == {"laplace": {"elements": 4}}


class TestLaplaceConfig:

    def test_defaults(self):
        config = LaplaceConfig()
        assert config.elements == 16
        assert config.penalty_factor == 1e6
        assert config.quadrature_order == config.degree + 1

    def test_load(self, tmp_path):
        path = write(tmp_path, """
[laplace]
elements = 8
degree = 3
continuity = -1
quadrature_points = 5
penalty_factor = 100.0
output = "out.data"
samples = 20
""")
        config = load_laplace_config(path)
        assert config == LaplaceConfig(8, 3, -1, 5, 100.0, "out.data", 20)
        assert config.quadrature_order == 5

    def test_missing_table_gives_defaults(self, tmp_path):
        path = write(tmp_path, "[spaces]\nelements = 2\n")
        assert load_laplace_config(path) == LaplaceConfig()

    def test_unknown_key(self, tmp_path):
        path = write(tmp_path, "[laplace]\nelemnts = 8\n")
        with pytest.raises(KeyError):
            load_laplace_config(path)

    @pytest.mark.parametrize("kwargs, error", [
        ({"elements": 0}, ValueError),
        ({"elements": 2.5}, TypeError),
        ({"degree": -1}, ValueError),
        ({"degree": 2, "continuity": 2}, ValueError),
        ({"continuity": -2}, ValueError),
        ({"quadrature_points": 0}, ValueError),
        ({"penalty_factor": 0.0}, ValueError),
        ({"penalty_factor": "big"}, TypeError),
        ({"output": 3}, TypeError),
        ({"samples": True}, TypeError),
    ])
    def test_validation(self, kwargs, error):
        with pytest.raises(error):
            LaplaceConfig(**kwargs)

    def test_not_a_table(self, tmp_path):
        path = write(tmp_path, "laplace = 3\n")
        with pytest.raises(TypeError):
            load_laplace_config(path)


class TestSpacesConfig:

    def test_load(self, tmp_path):
        path = write(tmp_path, """
[spaces]
elements = 4
trial_degree = 3
trial_continuity = 2
test_degree = 2
test_continuity = -1
""")
        assert load_spaces_config(path) == SpacesConfig(4, 3, 2, 2, -1)

    def test_validation(self):
        with pytest.raises(ValueError):
            SpacesConfig(trial_degree=1, trial_continuity=1)
        with pytest.raises(ValueError):
            SpacesConfig(elements=-3)
