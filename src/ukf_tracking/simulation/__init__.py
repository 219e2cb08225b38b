"""
Simulation components for ukf tracking.

This module generates ground-truth CTRV trajectories and interleaved
lidar/radar recordings along them, for exercising the filter without a
recorded data file.

Components:
    - TrajectoryGenerator: CTRV ground truth with a sinusoidal turn rate
    - generate_scenario: Alternating lidar/radar measurements with ground truth
"""

from .trajectory import TrajectoryGenerator, TrajectoryParameters, ground_truth_vector
from .scenario import generate_scenario

__all__ = [
    "TrajectoryGenerator",
    "TrajectoryParameters",
    "ground_truth_vector",
    "generate_scenario"
]
