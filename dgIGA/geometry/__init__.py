"""
Geometry module: B-spline basis functions.
"""

from .bspline import (
    BasisValues,
    BasisValuesOnVertex,
    FunctionValue,
    eval_basis_1d,
    eval_basis_ders_1d,
    eval_basis_with_derivatives,
)
