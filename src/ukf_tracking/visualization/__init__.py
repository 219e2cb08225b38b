"""
Visualization components for ukf tracking.

This module provides matplotlib plots of a filter run.
"""

from .plotter import RunPlotter, plot_run

__all__ = [
    "RunPlotter",
    "plot_run"
]
