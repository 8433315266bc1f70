"""
Run configuration from TOML files.

Example:
    [laplace]
    elements = 16
    degree = 2
    continuity = 1
    quadrature_points = 3
    penalty_factor = 1e6
    output = "result.data"
    samples = 100

    [spaces]
    elements = 8
    trial_degree = 2
    trial_continuity = 1
    test_degree = 2
    test_continuity = 0

Missing keys take the dataclass defaults; unknown keys are rejected.
"""

import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional


def read_toml(path: Path) -> Dict[str, Any]:
    """Read TOML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"TOML config file not found at '{path}'")
    with path.open("rb") as p:
        return tomllib.load(p)


@dataclass(frozen=True)
class LaplaceConfig:
    """Parameters of the DG Laplace run."""

    elements: int = 16
    degree: int = 2
    continuity: int = 1
    quadrature_points: Optional[int] = None
    """Gauss points per direction, degree + 1 when unset."""
    penalty_factor: float = 1e6
    output: str = "result.data"
    samples: int = 100

    def __post_init__(self):
        _check_positive("elements", self.elements)
        _check_nonnegative("degree", self.degree)
        _check_continuity("continuity", self.continuity, self.degree)
        if self.quadrature_points is not None:
            _check_positive("quadrature_points", self.quadrature_points)
        if not isinstance(self.penalty_factor, (int, float)) or isinstance(self.penalty_factor, bool):
            raise TypeError("penalty_factor must be a number")
        if self.penalty_factor <= 0:
            raise ValueError(f"penalty_factor must be positive, got {self.penalty_factor}")
        if not isinstance(self.output, str):
            raise TypeError("output must be a string")
        _check_positive("samples", self.samples)

    @property
    def quadrature_order(self) -> int:
        return self.quadrature_points if self.quadrature_points is not None else self.degree + 1


@dataclass(frozen=True)
class SpacesConfig:
    """Trial/test space pair for a Petrov-Galerkin dimension check."""

    elements: int = 8
    trial_degree: int = 2
    trial_continuity: int = 1
    test_degree: int = 2
    test_continuity: int = 0

    def __post_init__(self):
        _check_positive("elements", self.elements)
        _check_nonnegative("trial_degree", self.trial_degree)
        _check_nonnegative("test_degree", self.test_degree)
        _check_continuity("trial_continuity", self.trial_continuity, self.trial_degree)
        _check_continuity("test_continuity", self.test_continuity, self.test_degree)


def _check_int(name: str, value):
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")


def _check_positive(name: str, value):
    _check_int(name, value)
    if value < 1:
        raise ValueError(f"{name} must be positive, got {value}")


def _check_nonnegative(name: str, value):
    _check_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def _check_continuity(name: str, value, degree: int):
    _check_int(name, value)
    if not -1 <= value <= degree - 1:
        raise ValueError(f"{name} must lie in [-1, {degree - 1}], got {value}")


def _from_table(cls, table: Dict[str, Any]):
    if not isinstance(table, dict):
        raise TypeError(f"[{cls.__name__}] configuration must be a table")
    known = {f.name for f in fields(cls)}
    unknown = set(table) - known
    if unknown:
        raise KeyError(f"Unknown keys in configuration: {', '.join(sorted(unknown))}")
    return cls(**table)


def load_laplace_config(path: Path) -> LaplaceConfig:
    """Load the ``[laplace]`` table, defaults when it is absent."""
    return _from_table(LaplaceConfig, read_toml(path).get("laplace", {}))


def load_spaces_config(path: Path) -> SpacesConfig:
    """Load the ``[spaces]`` table, defaults when it is absent."""
    return _from_table(SpacesConfig, read_toml(path).get("spaces", {}))
