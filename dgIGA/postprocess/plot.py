"""
Plotting of 2D solutions.

Requires matplotlib (the ``plot`` extra); it is imported on first use so
the rest of the package does not depend on it.
"""

from pathlib import Path
from typing import Optional, Union

from ..discretization.function import BSplineFunction
from .sampling import sample_solution_2d


def plot_solution_2d(u_h: BSplineFunction, n_samples: int = 50,
                     filename: Optional[Union[str, Path]] = None,
                     title: str = "u_h", show: bool = False):
    """
    Filled contour plot of a solution.

    Parameters:
        u_h: Function to plot
        n_samples: Grid points per direction
        filename: Save the figure there if given
        title: Axes title
        show: Whether to call plt.show()

    Returns:
        matplotlib Figure object
    """
    import matplotlib.pyplot as plt

    X, Y, U = sample_solution_2d(u_h, n_samples, n_samples)

    fig, ax = plt.subplots(figsize=(6, 5))
    im = ax.contourf(X, Y, U, levels=30, cmap="viridis")
    plt.colorbar(im, ax=ax, shrink=0.8)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title(title)
    ax.set_aspect("equal")
    plt.tight_layout()

    if filename is not None:
        fig.savefig(filename, dpi=150)
    if show:
        plt.show()
    return fig
