"""
Plots of a filter run.

Classes:
    RunPlotter: Estimated vs. true path, per-axis error and NIS traces

Author: Scientific Computing Team
License: MIT
"""

import logging
from typing import Optional

import matplotlib.gridspec as gridspec
import matplotlib.pyplot as plt
import numpy as np

from ..evaluation import RunResult, nis_bound
from ..sensors.measurement import SensorType

logger = logging.getLogger(__name__)

SENSOR_COLORS = {
    SensorType.LIDAR: 'tab:green',
    SensorType.RADAR: 'tab:orange',
}


class RunPlotter:
    """
    Figure layout for one run.

    Parameters:
        confidence_level (float): Confidence of the NIS reference line. Default: 0.95
        figsize (tuple): Figure size in inches. Default: (14, 9)
    """

    def __init__(self, confidence_level: float = 0.95, figsize: tuple = (14, 9)):
        if not (0 < confidence_level < 1):
            raise ValueError("Confidence level must be between 0 and 1")
        self.confidence_level = confidence_level
        self.figsize = figsize

    def plot(self, result: RunResult):
        """
        Draw the run.

        Returns:
            The matplotlib Figure
        """
        figure = plt.figure(figsize=self.figsize)
        gs = gridspec.GridSpec(2, 2, figure=figure, hspace=0.3, wspace=0.25)

        self._plot_path(figure.add_subplot(gs[:, 0]), result)
        self._plot_error(figure.add_subplot(gs[0, 1]), result)
        self._plot_nis(figure.add_subplot(gs[1, 1]), result)
        return figure

    def _plot_path(self, ax, result: RunResult) -> None:
        ax.plot(result.estimates[:, 0], result.estimates[:, 1], 'b-', linewidth=1.5, label='UKF estimate')
        if result.ground_truth is not None:
            ax.plot(result.ground_truth[:, 0], result.ground_truth[:, 1], 'k--', linewidth=1.0,
                    label='Ground truth')
        ax.set_xlabel('px [m]')
        ax.set_ylabel('py [m]')
        ax.set_title('Trajectory')
        ax.set_aspect('equal', adjustable='datalim')
        ax.grid(True, alpha=0.3)
        ax.legend()

    def _plot_error(self, ax, result: RunResult) -> None:
        ax.set_title('Estimation error')
        if result.ground_truth is None:
            ax.text(0.5, 0.5, 'No ground truth', ha='center', va='center', transform=ax.transAxes)
            return

        t = (result.timestamps - result.timestamps[0]) / 1e6
        error = result.estimates - result.ground_truth
        for column, label in enumerate(['px', 'py', 'vx', 'vy']):
            ax.plot(t, error[:, column], linewidth=1.0, label=label)
        ax.set_xlabel('t [s]')
        ax.grid(True, alpha=0.3)
        ax.legend(ncol=4, fontsize='small')

    def _plot_nis(self, ax, result: RunResult) -> None:
        ax.set_title('NIS')
        for sensor, values in result.nis.items():
            if len(values) == 0:
                continue
            color = SENSOR_COLORS[sensor]
            ax.plot(values, color=color, linewidth=0.8, label=sensor.name)
            ax.axhline(nis_bound(sensor.measurement_size, self.confidence_level), color=color,
                       linestyle='--', linewidth=1.0,
                       label=f'{sensor.name} χ² {self.confidence_level:.0%}')
        ax.set_xlabel('update')
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize='small')


def plot_run(result: RunResult, path: Optional[str] = None, confidence_level: float = 0.95):
    """
    Plot a run and optionally save it.

    Args:
        result: Output of ``evaluation.run_filter``
        path: File to save the figure to; the figure is only returned if None
        confidence_level: Confidence of the NIS reference line

    Returns:
        The matplotlib Figure
    """
    figure = RunPlotter(confidence_level).plot(result)
    if path is not None:
        figure.savefig(path, dpi=120)
        plt.close(figure)
        logger.info(f"Saved run plot to {path}")
    return figure
