#!/usr/bin/env python3
"""
Example: 2D Laplace equation on the unit square with weak Dirichlet data.

This example walks through the DG/IGA pipeline:
1. Build a B-spline knot vector of given degree and continuity
2. Build the tensor-product mesh and space
3. Assemble element and boundary (Nitsche) terms and solve
4. Compute errors and write the sampled solution

Problem:
    -∇²u = f    in Ω = [0,1]²
        u = g    on ∂Ω

Manufactured solution for verification:
    u_exact = 1 + sin(πx) * sin(πy)
    f = 2π² * sin(πx) * sin(πy)
    g = u_exact

Usage:
    ./examples/src/dg_laplace_2d.py -p 2 -k 1 -n 8
    ./examples/src/dg_laplace_2d.py --convergence
"""

import numpy as np
import sys
from pathlib import Path

# Add project root to path (two levels up from examples/src/)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from dgIGA.discretization.knot_vector import make_bspline_knot_vector
from dgIGA.discretization.mesh import RegularMesh, evenly_spaced
from dgIGA.discretization.space import TensorProductSpace
from dgIGA.quadrature.gauss import Quadrature
from dgIGA.solver.laplace import (DGLaplaceSolver, manufactured_gradient,
                                  manufactured_solution, manufactured_source)
from dgIGA.postprocess.sampling import export_solution_text


def run(degree: int = 2,
        continuity: int = 1,
        n_elements: int = 8,
        export: bool = True,
        verbose: bool = True):
    """
    Run the 2D DG Laplace example.

    Parameters:
        degree: Polynomial degree (same in x and y)
        continuity: Continuity at interior breakpoints
        n_elements: Number of elements per direction
        export: Whether to write the sampled solution
        verbose: Print progress information

    Returns:
        Dictionary with results (solution, errors, DOF count)
    """
    if verbose:
        print("=" * 60)
        print("DG/IGA 2D Laplace Example")
        print("=" * 60)
        print(f"Degree: {degree}, continuity: C^{continuity}")
        print(f"Elements: {n_elements} x {n_elements}")
        print()

    # ==========================================================================
    # 1. Space
    # ==========================================================================
    points = evenly_spaced(0.0, 1.0, n_elements)
    basis = make_bspline_knot_vector(points, degree, continuity)
    mesh = RegularMesh(points, points)
    space = TensorProductSpace(mesh, basis, basis)

    if verbose:
        print(f"  Knots: {basis.knots}")
        print(f"  DOFs: {space.dof_count()}")
        print()

    # ==========================================================================
    # 2. Assemble and solve
    # ==========================================================================
    quadrature = Quadrature(mesh, degree + 1)
    solver = DGLaplaceSolver(space, quadrature,
                             source=manufactured_source,
                             dirichlet=manufactured_solution)
    u_h = solver.run()

    if verbose:
        print(f"  Non-zeros: {solver.problem.nonzero_entries()}")
        print(f"  Coefficient range: [{u_h.data.min():.6f}, {u_h.data.max():.6f}]")
        print()

    # ==========================================================================
    # 3. Errors
    # ==========================================================================
    l2_error = solver.l2_error(manufactured_solution)
    h1_error = solver.h1_seminorm_error(manufactured_gradient)

    if verbose:
        print(f"  L2 error: {l2_error:.6e}")
        print(f"  H1 seminorm error: {h1_error:.6e}")
        for phase, seconds in solver.timings.items():
            print(f"  {phase}: {seconds * 1e3:.1f} ms")
        print()

    # ==========================================================================
    # 4. Export
    # ==========================================================================
    if export:
        output_file = Path(__file__).parent / "dg_laplace_2d.data"
        export_solution_text(output_file, u_h, 100)
        if verbose:
            print(f"Solution written to {output_file}")

    return {
        'solution': u_h,
        'l2_error': l2_error,
        'h1_error': h1_error,
        'n_dof': space.dof_count(),
    }


def convergence_study(degrees: list = None, n_elements_list: list = None):
    """
    Run convergence study over mesh refinements (maximal continuity).

    Parameters:
        degrees: List of polynomial degrees to test
        n_elements_list: List of element counts per direction
    """
    if degrees is None:
        degrees = [2, 3]
    if n_elements_list is None:
        n_elements_list = [2, 4, 8, 16]

    print("=" * 70)
    print("Convergence Study: 2D DG Laplace on Unit Square")
    print("=" * 70)

    results = {}

    for p in degrees:
        print(f"\nDegree p = {p}")
        print("-" * 50)
        print(f"{'Elements':>10} {'DOFs':>10} {'L2 Error':>15} {'Rate':>10}")
        print("-" * 50)

        errors = []
        h_vals = []

        for n_elem in n_elements_list:
            result = run(degree=p, continuity=p - 1, n_elements=n_elem,
                         export=False, verbose=False)
            errors.append(result['l2_error'])
            h_vals.append(1.0 / n_elem)

            if len(errors) > 1:
                rate = np.log(errors[-2] / errors[-1]) / np.log(h_vals[-2] / h_vals[-1])
                print(f"{n_elem:>10} {result['n_dof']:>10} {errors[-1]:>15.6e} {rate:>10.2f}")
            else:
                print(f"{n_elem:>10} {result['n_dof']:>10} {errors[-1]:>15.6e} {'--':>10}")

        results[p] = {'h': h_vals, 'errors': errors}

    print()
    print("Expected convergence rate: p + 1 for smooth solutions")

    return results


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="2D DG Laplace IGA Example")
    parser.add_argument("--degree", "-p", type=int, default=2,
                        help="Polynomial degree (default: 2)")
    parser.add_argument("--continuity", "-k", type=int, default=1,
                        help="Interior continuity (default: 1)")
    parser.add_argument("--elements", "-n", type=int, default=8,
                        help="Number of elements per direction (default: 8)")
    parser.add_argument("--convergence", "-c", action="store_true",
                        help="Run convergence study")
    parser.add_argument("--no-export", action="store_true",
                        help="Skip writing the sampled solution")

    args = parser.parse_args()

    if args.convergence:
        convergence_study()
    else:
        run(degree=args.degree, continuity=args.continuity,
            n_elements=args.elements, export=not args.no_export)
