"""
Discretization module.

Provides:
- KnotVector: Open knot vector with spans and element lookup
- IntervalMesh / RegularMesh: 1D and tensor-product 2D meshes
- MultiIndexLayout: Row-major linearization of index tuples
"""

from .knot_vector import (
    KnotVector,
    make_bspline_knot_vector,
    make_graded_knot_vector,
    make_knot_vector,
    make_open_knot_vector,
)
from .layout import MultiIndexLayout
from .mesh import EdgeIndex, Interval, IntervalMesh, Orientation, RegularMesh

# Spaces depend on geometry.bspline; import them directly:
# from dgIGA.discretization.space import TensorProductSpace
