"""dgIGA command line.

Subcommands:
- laplace: Solve -∇²u = f on the unit square with the DG/Nitsche method
           for the manufactured solution u = 1 + sin(πx) sin(πy), report
           errors and write the solution sampled on a grid.
- spaces:  Build trial and test spaces, graded in x and uniform in y,
           and check that the trial space is not larger than the test space.

Example usage:
    python -m dgIGA laplace --elements 16 --degree 2 --continuity 1
    python -m dgIGA -v laplace --config run.toml --output u.data --plot
    dgiga spaces --trial-degree 2 --trial-continuity 1 --test-continuity 0
"""

import argparse
import dataclasses
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from .discretization.knot_vector import (make_bspline_knot_vector, make_graded_knot_vector,
                                         make_knot_vector)
from .discretization.mesh import RegularMesh, evenly_spaced
from .discretization.space import TensorProductSpace
from .io.config import LaplaceConfig, SpacesConfig, load_laplace_config, load_spaces_config
from .io.loggingutils import setup_logging
from .postprocess.sampling import export_solution_text
from .quadrature.gauss import Quadrature
from .solver.base import SpaceDimensionError, check_space_dimensions
from .solver.laplace import (DGLaplaceSolver, manufactured_gradient,
                             manufactured_solution, manufactured_source)

logger: logging.Logger = logging.getLogger(__name__)


def _override(config, args: argparse.Namespace, names: Sequence[str]):
    """Replace config fields by the command line values that were given."""
    changes = {name: getattr(args, name) for name in names
               if getattr(args, name, None) is not None}
    return dataclasses.replace(config, **changes)


def run_laplace(config: LaplaceConfig, plot: bool = False) -> Dict[str, float]:
    """Run the DG Laplace example and return the errors."""
    p = config.degree
    points = evenly_spaced(0.0, 1.0, config.elements)
    basis = make_bspline_knot_vector(points, p, config.continuity)
    mesh = RegularMesh(points, points)
    space = TensorProductSpace(mesh, basis, basis)
    quadrature = Quadrature(mesh, config.quadrature_order)

    logger.info("Elements: %d x %d, degree %d, continuity %d",
                config.elements, config.elements, p, config.continuity)
    solver = DGLaplaceSolver(space, quadrature,
                             source=manufactured_source,
                             dirichlet=manufactured_solution,
                             penalty_factor=config.penalty_factor)
    u_h = solver.run()

    l2 = solver.l2_error(manufactured_solution)
    h1 = solver.h1_seminorm_error(manufactured_gradient)
    logger.info("L2 error: %.6e", l2)
    logger.info("H1 seminorm error: %.6e", h1)
    for phase, seconds in solver.timings.items():
        logger.info("%s: %.1f ms", phase, seconds * 1e3)

    path = export_solution_text(config.output, u_h, config.samples)
    logger.info("Solution written to '%s'", path)

    if plot:
        from .postprocess.plot import plot_solution_2d

        figure = Path(config.output).with_suffix(".png")
        plot_solution_2d(u_h, filename=figure)
        logger.info("Plot saved to '%s'", figure)

    return {"dofs": space.dof_count(), "l2_error": l2, "h1_error": h1,
            "nonzeros": solver.problem.nonzero_entries()}


def run_spaces(config: SpacesConfig) -> Tuple[TensorProductSpace, TensorProductSpace]:
    """Build trial/test spaces, graded in x and uniform in y, and check their dimensions."""
    n = config.elements
    trial_repeated = config.trial_degree - 1 - config.trial_continuity
    test_repeated = config.test_degree - 1 - config.test_continuity
    trial_x = make_graded_knot_vector(0.0, 1.0, config.trial_degree, n, trial_repeated)
    trial_y = make_knot_vector(0.0, 1.0, config.trial_degree, n, trial_repeated)
    test_x = make_graded_knot_vector(0.0, 1.0, config.test_degree, n, test_repeated)
    test_y = make_knot_vector(0.0, 1.0, config.test_degree, n, test_repeated)

    mesh = RegularMesh(trial_x.breakpoints, trial_y.breakpoints)
    trial = TensorProductSpace(mesh, trial_x, trial_y)
    test = TensorProductSpace(mesh, test_x, test_y)

    logger.info("Trial DoFs: %d", trial.dof_count())
    logger.info("Test DoFs: %d", test.dof_count())
    check_space_dimensions(trial, test)
    logger.info("Dimensions OK")
    return trial, test


def main(argv: Optional[Sequence[str]] = None) -> int:
    """dgIGA CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="dgiga",
        description="DG isogeometric solvers on tensor-product B-spline spaces",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # laplace
    laplace = subparsers.add_parser("laplace", help="Solve the DG Laplace example")
    laplace.add_argument("--config", type=Path, help="TOML file with a [laplace] table")
    laplace.add_argument("--elements", type=int, help="Elements per direction")
    laplace.add_argument("--degree", type=int, help="B-spline degree")
    laplace.add_argument("--continuity", type=int,
                         help="Continuity at interior breakpoints (-1 for discontinuous)")
    laplace.add_argument("--quad", dest="quadrature_points", type=int,
                         help="Gauss points per direction (default: degree + 1)")
    laplace.add_argument("--penalty", dest="penalty_factor", type=float,
                         help="Boundary penalty factor, divided by the element size")
    laplace.add_argument("--output", type=str, help="Output file of 'x y value' lines")
    laplace.add_argument("--samples", type=int, help="Output grid subdivisions")
    laplace.add_argument("--plot", action="store_true", help="Save a contour plot")

    # spaces
    spaces = subparsers.add_parser("spaces", help="Check trial/test space dimensions")
    spaces.add_argument("--config", type=Path, help="TOML file with a [spaces] table")
    spaces.add_argument("--elements", type=int, help="Elements per direction")
    spaces.add_argument("--trial-degree", dest="trial_degree", type=int)
    spaces.add_argument("--trial-continuity", dest="trial_continuity", type=int)
    spaces.add_argument("--test-degree", dest="test_degree", type=int)
    spaces.add_argument("--test-continuity", dest="test_continuity", type=int)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "laplace":
            config = load_laplace_config(args.config) if args.config else LaplaceConfig()
            config = _override(config, args, [f.name for f in dataclasses.fields(LaplaceConfig)])
            run_laplace(config, plot=args.plot)
        elif args.command == "spaces":
            config = load_spaces_config(args.config) if args.config else SpacesConfig()
            config = _override(config, args, [f.name for f in dataclasses.fields(SpacesConfig)])
            run_spaces(config)
        else:
            parser.error(f"Unknown command '{args.command}'")
    except SpaceDimensionError as e:
        logger.error("%s", e)
        return 1
    except (FileNotFoundError, KeyError, TypeError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    return 0
