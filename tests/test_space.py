"""
Unit tests for 1D and tensor-product B-spline spaces and their evaluators.
"""

import itertools

import pytest
import numpy as np
from numpy.testing import assert_almost_equal, assert_array_almost_equal

from dgIGA.discretization.knot_vector import make_bspline_knot_vector
from dgIGA.discretization.mesh import EdgeIndex, Orientation, RegularMesh
from dgIGA.discretization.space import (
    BSplineSpace, TensorProductSpace, evaluate_basis, evaluate_basis_on_facet,
    element_left, element_right
)
from dgIGA.quadrature.gauss import Quadrature


def space_1d(n_elements, degree, continuity):
    return BSplineSpace(make_bspline_knot_vector(np.linspace(0, 1, n_elements + 1),
                                                 degree, continuity))


class TestBSplineSpace:
    """Tests for univariate DOF bookkeeping."""

    def test_counts(self):
        space = space_1d(3, 2, 1)
        assert space.degree == 2
        assert space.element_count() == 3
        assert space.dofs_per_element() == 3
        assert space.dof_count() == 5
        assert space.element_dof_count(1) == 3

    def test_element_dofs(self):
        space = space_1d(3, 2, 1)
        assert list(space.dofs()) == [0, 1, 2, 3, 4]
        assert list(space.dofs(0)) == [0, 1, 2]
        assert list(space.dofs(2)) == [2, 3, 4]
        assert space.first_dof(1) == 1
        assert space.last_dof(1) == 3
        assert space.local_index(3, 1) == 2
        assert space.span(0) == 2

    def test_element_dofs_discontinuous(self):
        space = space_1d(3, 2, -1)
        assert space.dof_count() == 9
        assert list(space.dofs(1)) == [3, 4, 5]

    def test_facet_dofs(self):
        space = space_1d(3, 2, 1)
        assert list(space.dofs_on_facet(0)) == [0, 1, 2]
        assert list(space.dofs_on_facet(1)) == [0, 1, 2, 3]
        assert list(space.dofs_on_facet(2)) == [1, 2, 3, 4]
        assert list(space.dofs_on_facet(3)) == [2, 3, 4]
        assert space.facet_dof_count(1) == 4
        assert space.facet_local_index(2, 2) == 1
        assert space.facet_local_index(0, 0) == 0

    def test_facet_dofs_discontinuous(self):
        space = space_1d(3, 2, -1)
        assert list(space.dofs_on_facet(1)) == [0, 1, 2, 3, 4, 5]
        assert space.facet_dof_count(0) == 3

    @pytest.mark.parametrize("continuity", [-1, 0, 1])
    def test_facet_dofs_cover_adjacent_elements(self, continuity):
        space = space_1d(4, 2, continuity)
        n = space.element_count()
        for f in range(n + 1):
            facet_dofs = set(space.dofs_on_facet(f))
            for e in (f - 1, f):
                if 0 <= e < n:
                    assert set(space.dofs(e)) <= facet_dofs

    def test_out_of_range(self):
        space = space_1d(3, 2, 1)
        with pytest.raises(IndexError):
            space.dofs(3)
        with pytest.raises(IndexError):
            space.span(-1)
        with pytest.raises(IndexError):
            space.dofs_on_facet(4)
        with pytest.raises(IndexError):
            evaluate_basis_on_facet(5, space, 1)

    def test_adjacent_elements(self):
        kv = make_bspline_knot_vector([0.0, 0.5, 1.0], 1, 0)
        assert element_left(0, kv) is None
        assert element_right(0, kv) == 0
        assert element_left(2, kv) == 1
        assert element_right(2, kv) is None

    def test_evaluate_basis(self):
        space = space_1d(2, 2, 1)
        values = evaluate_basis([0.25, 0.75], space, 1)
        assert values.values.shape == (2, 2, 3)
        assert_almost_equal(values.values[:, 0].sum(axis=1), [1.0, 1.0])
        assert_almost_equal(values.values[:, 1].sum(axis=1), [0.0, 0.0])


class TestFacetValues:
    """One-sided values at breakpoints."""

    @pytest.mark.parametrize("continuity", [0, 1, 2])
    def test_continuous_basis_has_no_jumps(self, continuity):
        space = space_1d(3, 3, continuity)
        for f in range(1, 3):
            vertex = evaluate_basis_on_facet(f, space, 1)
            for i in range(space.facet_dof_count(f)):
                assert abs(vertex.jump(i, 0, 1.0)) < 1e-12
                if continuity >= 1:
                    assert abs(vertex.jump(i, 1, 1.0)) < 1e-10

    def test_discontinuous_basis_jumps(self):
        space = space_1d(3, 2, -1)
        vertex = evaluate_basis_on_facet(1, space, 1)

        assert vertex.left_last == 2
        assert vertex.right_first == 3
        jumps = [vertex.jump(i, 0, 1.0) for i in range(6)]
        assert_almost_equal(jumps, [0, 0, 1, -1, 0, 0])
        assert vertex.average(2, 0) == 0.5

    def test_boundary_facets_one_sided(self):
        space = space_1d(3, 2, 1)

        first = evaluate_basis_on_facet(0, space, 0)
        assert not first.has_left and first.has_right
        assert_almost_equal([first(i, 0) for i in range(3)], [1, 0, 0])

        last = evaluate_basis_on_facet(3, space, 0)
        assert last.has_left and not last.has_right
        assert_almost_equal([last(i, 0) for i in range(3)], [0, 0, 1])


class TestTensorProductSpace:
    """Tests for 2D DOF numbering."""

    def test_counts(self, smooth_space):
        assert smooth_space.dof_count() == 25
        assert len(smooth_space.dofs()) == 25
        assert smooth_space.element_dof_count((1, 2)) == 9
        assert smooth_space.facet_dof_count(EdgeIndex(1, 1, Orientation.HORIZONTAL)) == 12
        assert smooth_space.facet_dof_count(EdgeIndex(1, 0, Orientation.HORIZONTAL)) == 9
        assert smooth_space.facet_dof_count(EdgeIndex(2, 1, Orientation.VERTICAL)) == 12

    def test_global_index(self, smooth_space):
        assert smooth_space.global_index((0, 0)) == 0
        assert smooth_space.global_index((0, 4)) == 4
        assert smooth_space.global_index((1, 0)) == 5
        assert smooth_space.global_index((4, 4)) == 24

    def test_element_dofs(self, smooth_space):
        dofs = smooth_space.dofs((1, 2))
        assert dofs[0] == (1, 2)
        assert dofs[-1] == (3, 4)
        indices = [smooth_space.local_index(dof, (1, 2)) for dof in dofs]
        assert indices == list(range(9))

    def test_facet_dofs(self, smooth_space):
        f = EdgeIndex(1, 2, Orientation.HORIZONTAL)
        dofs = smooth_space.dofs_on_facet(f)
        assert dofs == list(itertools.product([1, 2, 3], [1, 2, 3, 4]))
        indices = [smooth_space.facet_local_index(dof, f) for dof in dofs]
        assert indices == list(range(12))

    @pytest.mark.parametrize("fixture", ["smooth_space", "broken_space"])
    def test_facet_dofs_cover_adjacent_elements(self, fixture, request):
        space = request.getfixturevalue(fixture)
        mesh = space.mesh
        nx, ny = mesh.mesh_x.element_count(), mesh.mesh_y.element_count()
        for f in mesh.facets():
            facet_dofs = set(space.dofs_on_facet(f))
            if f.direction is Orientation.HORIZONTAL:
                neighbours = [(f.ix, iy) for iy in (f.iy - 1, f.iy) if 0 <= iy < ny]
            else:
                neighbours = [(ix, f.iy) for ix in (f.ix - 1, f.ix) if 0 <= ix < nx]
            for e in neighbours:
                assert set(space.dofs(e)) <= facet_dofs

    def test_mismatched_mesh(self):
        kv = make_bspline_knot_vector([0.0, 0.5, 1.0], 2, 1)
        mesh = RegularMesh([0.0, 1.0], [0.0, 0.5, 1.0])
        with pytest.raises(ValueError):
            TensorProductSpace(mesh, kv, kv)

    def test_mismatched_breakpoints(self):
        kv = make_bspline_knot_vector([0.0, 0.25, 1.0], 2, -1)
        mesh = RegularMesh([0.0, 0.5, 1.0], [0.0, 0.25, 1.0])
        with pytest.raises(ValueError):
            TensorProductSpace(mesh, kv, kv)
        with pytest.raises(ValueError):
            TensorProductSpace(RegularMesh([0.0, 0.25, 1.0], [0.0, 0.5, 1.0]), kv, kv)

    def test_invalid_orientation(self, smooth_space):
        with pytest.raises(ValueError):
            smooth_space.dofs_on_facet(EdgeIndex(0, 0, None))


class TestEvaluators:
    """Element and edge evaluators."""

    def test_element_tabulate_matches_call(self, smooth_space):
        quad = Quadrature(smooth_space.mesh, 3)
        e = (1, 2)
        points = quad.element_points(e)
        evaluator = smooth_space.dof_evaluator(e, points, 1)
        val, dx, dy = evaluator.tabulate()

        assert val.shape == (9, 9)
        for k, q in enumerate(points.indices()):
            for dof in smooth_space.dofs(e):
                i = smooth_space.local_index(dof, e)
                u = evaluator(dof, q)
                assert_almost_equal(val[k, i], u.val)
                assert_almost_equal(dx[k, i], u.dx)
                assert_almost_equal(dy[k, i], u.dy)

    def test_element_partition_of_unity(self, broken_space):
        quad = Quadrature(broken_space.mesh, 4)
        for e in broken_space.mesh.elements():
            val, dx, dy = broken_space.dof_evaluator(e, quad.element_points(e)).tabulate()
            assert np.all(np.abs(val.sum(axis=1) - 1.0) < 1e-10)
            assert_array_almost_equal(dx.sum(axis=1), 0.0)
            assert_array_almost_equal(dy.sum(axis=1), 0.0)

    def test_values_only(self, smooth_space):
        quad = Quadrature(smooth_space.mesh, 2)
        evaluator = smooth_space.dof_evaluator((0, 0), quad.element_points((0, 0)), 0)
        val, dx, dy = evaluator.tabulate()
        assert_almost_equal(dx, 0.0)
        assert evaluator((0, 0), (0, 0)).dx == 0.0

    @pytest.mark.parametrize("fixture", ["smooth_space", "broken_space"])
    def test_edge_tabulate_matches_call(self, fixture, request):
        space = request.getfixturevalue(fixture)
        quad = Quadrature(space.mesh, 3)
        for f in [EdgeIndex(1, 0, Orientation.HORIZONTAL),
                  EdgeIndex(1, 2, Orientation.HORIZONTAL),
                  EdgeIndex(3, 1, Orientation.VERTICAL),
                  EdgeIndex(1, 1, Orientation.VERTICAL)]:
            points = quad.facet_points(f)
            evaluator = space.facet_dof_evaluator(f, points, 1)
            val, dx, dy = evaluator.tabulate()
            assert val.shape == (3, space.facet_dof_count(f))
            for q in points.indices():
                for dof in space.dofs_on_facet(f):
                    i = space.facet_local_index(dof, f)
                    u = evaluator(dof, q)
                    assert_almost_equal(val[q, i], u.val)
                    assert_almost_equal(dx[q, i], u.dx)
                    assert_almost_equal(dy[q, i], u.dy)

    def test_boundary_edge_partition_of_unity(self, smooth_space):
        quad = Quadrature(smooth_space.mesh, 3)
        for f in smooth_space.mesh.boundary_facets():
            val, _, _ = smooth_space.facet_dof_evaluator(f, quad.facet_points(f)).tabulate()
            assert np.all(np.abs(val.sum(axis=1) - 1.0) < 1e-10)

    def test_edge_jumps(self, smooth_space, broken_space):
        f = EdgeIndex(1, 1, Orientation.VERTICAL)

        quad = Quadrature(smooth_space.mesh, 2)
        vertex = smooth_space.facet_dof_evaluator(f, quad.facet_points(f)).vertex_values
        n = smooth_space.space_x.facet_dof_count(1)
        assert max(abs(vertex.jump(i, 0, 1.0)) for i in range(n)) < 1e-12

        quad = Quadrature(broken_space.mesh, 2)
        vertex = broken_space.facet_dof_evaluator(f, quad.facet_points(f)).vertex_values
        n = broken_space.space_x.facet_dof_count(1)
        assert max(abs(vertex.jump(i, 0, 1.0)) for i in range(n)) > 0.5
